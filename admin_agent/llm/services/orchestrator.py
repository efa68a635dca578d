"""Two-phase tool-calling orchestration for a single agent request."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from ...core.exceptions import AgentError, InvalidRequest
from ...core.logging_config import get_logger
from ...core.types import PlainText, ToolInvocationRequest
from ...tools import ToolName, ToolRegistry
from .gemini_client import GeminiClient

logger = get_logger(__name__)


class AgentState(str, Enum):
    RECEIVED = "received"
    AWAITING_ACTION = "awaiting_action"
    RESPONDING = "responding"
    AWAITING_TOOL = "awaiting_tool"
    AWAITING_SYNTHESIS = "awaiting_synthesis"
    RESPONDED = "responded"
    FAILED = "failed"


_TRANSITIONS: dict[AgentState, frozenset[AgentState]] = {
    AgentState.RECEIVED: frozenset({AgentState.AWAITING_ACTION, AgentState.FAILED}),
    AgentState.AWAITING_ACTION: frozenset(
        {AgentState.RESPONDING, AgentState.AWAITING_TOOL, AgentState.FAILED}
    ),
    AgentState.RESPONDING: frozenset({AgentState.RESPONDED}),
    AgentState.AWAITING_TOOL: frozenset({AgentState.AWAITING_SYNTHESIS, AgentState.FAILED}),
    AgentState.AWAITING_SYNTHESIS: frozenset({AgentState.RESPONDED, AgentState.FAILED}),
    AgentState.RESPONDED: frozenset(),
    AgentState.FAILED: frozenset(),
}


@dataclass
class AgentOutcome:
    """Terminal result of one request: either ``text`` or ``error`` is set."""

    state: AgentState
    text: str | None = None
    error: AgentError | None = None
    tool: ToolName | None = None
    trace: list[AgentState] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return self.state is AgentState.RESPONDED


class _Run:
    """Mutable bookkeeping for one request; enforces legal transitions."""

    def __init__(self) -> None:
        self.state = AgentState.RECEIVED
        self.trace = [AgentState.RECEIVED]
        self.tool: ToolName | None = None

    def advance(self, target: AgentState) -> None:
        if target not in _TRANSITIONS[self.state]:
            raise RuntimeError(f"Illegal agent transition {self.state.value} -> {target.value}")
        logger.debug("agent_state_transition", source=self.state.value, target=target.value)
        self.state = target
        self.trace.append(target)

    def respond(self, text: str) -> AgentOutcome:
        self.advance(AgentState.RESPONDED)
        return AgentOutcome(state=self.state, text=text, tool=self.tool, trace=self.trace)

    def fail(self, error: AgentError) -> AgentOutcome:
        failed_in = self.state
        self.advance(AgentState.FAILED)
        log = logger.warning if isinstance(error, InvalidRequest) else logger.error
        log(
            "agent_request_failed",
            failed_in=failed_in.value,
            tool=self.tool.value if self.tool else None,
            **error.to_dict(),
        )
        return AgentOutcome(state=self.state, error=error, tool=self.tool, trace=self.trace)


class Orchestrator:
    """Drive phase one, at most one tool call, and phase two."""

    def __init__(self, gateway: GeminiClient, registry: ToolRegistry) -> None:
        self._gateway = gateway
        self._registry = registry

    async def handle(self, prompt: Any) -> AgentOutcome:
        run = _Run()

        if not isinstance(prompt, str) or not prompt:
            return run.fail(InvalidRequest("Prompt is required."))

        run.advance(AgentState.AWAITING_ACTION)
        try:
            action = await self._gateway.select_action(prompt, self._registry.declarations())
        except AgentError as exc:
            return run.fail(exc)

        if isinstance(action, PlainText):
            run.advance(AgentState.RESPONDING)
            return run.respond(action.text)

        return await self._run_tool(run, prompt, action)

    async def _run_tool(
        self, run: _Run, prompt: str, request: ToolInvocationRequest
    ) -> AgentOutcome:
        run.advance(AgentState.AWAITING_TOOL)
        try:
            run.tool = self._registry.resolve(request.name)
            result = await self._registry.invoke(run.tool)
        except AgentError as exc:
            return run.fail(exc)

        run.advance(AgentState.AWAITING_SYNTHESIS)
        try:
            text = await self._gateway.synthesize(prompt, run.tool.value, result)
        except AgentError as exc:
            logger.warning("agent_synthesis_failed_after_tool_success", tool=run.tool.value)
            return run.fail(exc)

        return run.respond(text)
