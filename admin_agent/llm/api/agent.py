"""Agent endpoint: Gemini tool selection + Auth0 Management tools."""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from ...core.exceptions import InvalidRequest
from ...core.logging_config import get_logger
from ...tools import ToolRegistry
from ..dependencies import get_orchestrator, get_tool_registry
from ..schemas.agent import AgentRequest, AgentResponse, ErrorResponse, ToolDeclarationSchema
from ..services.orchestrator import Orchestrator

router = APIRouter(prefix="/api", tags=["agent"])
logger = get_logger(__name__)

PROMPT_REQUIRED = "Prompt is required."
INTERNAL_ERROR = "Apologies, I encountered an internal error. Please check the server logs."


@router.post(
    "",
    response_model=AgentResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def run_agent(
    request: AgentRequest,
    orchestrator: Orchestrator = Depends(get_orchestrator),
):
    outcome = await orchestrator.handle(request.prompt)

    if outcome.succeeded:
        logger.info(
            "agent_request_completed",
            tool=outcome.tool.value if outcome.tool else None,
            trace=[state.value for state in outcome.trace],
        )
        return AgentResponse(response=outcome.text or "")

    if isinstance(outcome.error, InvalidRequest):
        return JSONResponse(status_code=400, content={"error": PROMPT_REQUIRED})
    return JSONResponse(status_code=500, content={"error": INTERNAL_ERROR})


@router.get("/tools", response_model=list[ToolDeclarationSchema])
async def list_tools(registry: ToolRegistry = Depends(get_tool_registry)):
    return [
        ToolDeclarationSchema(**declaration.to_function_declaration())
        for declaration in registry.declarations()
    ]
