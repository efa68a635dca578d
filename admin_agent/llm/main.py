"""FastAPI application entry point."""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from ..core.config import env_file_candidates, get_settings, resolved_env_file
from ..core.logging_config import configure_logging, get_logger
from .api.agent import INTERNAL_ERROR, PROMPT_REQUIRED
from .api.agent import router as agent_router
from .api.health import router as health_router
from .dependencies import get_tool_registry

configure_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """FastAPI lifespan handler."""

    settings = get_settings()
    logger.info(
        "agent_startup",
        env=settings.app_env,
        log_level=settings.log_level,
        agent_host=settings.agent_host,
        agent_port=settings.agent_port,
        gemini_base=str(settings.gemini_api_base),
        gemini_model=settings.gemini_model,
        **settings.credential_presence(),
    )
    logger.info(
        "environment_loaded",
        log_file=settings.log_file or "stdout-only",
        env_file=resolved_env_file() or "not-found",
        env_candidates=list(env_file_candidates()),
    )
    tools = [declaration.name for declaration in get_tool_registry().declarations()]
    logger.info("tool_registry_ready", tools=tools)
    yield
    logger.info("agent_shutdown")


app = FastAPI(
    title="Admin Agent",
    version="0.1.0",
    description="Gemini tool-calling agent over the Auth0 Management API.",
    lifespan=lifespan,
)


@app.middleware("http")
async def log_incoming_requests(request: Request, call_next):
    logger.info(
        "http_request_received",
        method=request.method,
        path=request.url.path,
        client=str(request.client[0]) if request.client else "unknown",
    )
    response = await call_next(request)
    logger.info(
        "http_request_completed",
        method=request.method,
        path=request.url.path,
        status_code=response.status_code,
    )
    return response


@app.exception_handler(StarletteHTTPException)
async def http_error_envelope(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def invalid_body(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.info("agent_request_rejected", path=request.url.path, errors=exc.errors())
    return JSONResponse(status_code=400, content={"error": PROMPT_REQUIRED})


@app.exception_handler(Exception)
async def unhandled_error(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("unhandled_error", path=request.url.path)
    return JSONResponse(status_code=500, content={"error": INTERNAL_ERROR})


app.include_router(health_router)
app.include_router(agent_router)


@app.get("/")
async def index() -> dict[str, str]:
    return {"service": "admin-agent", "status": "ok"}
