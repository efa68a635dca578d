import httpx
import pytest

from admin_agent.core.auth0_client import ManagementClient
from admin_agent.core.credentials import TokenCache
from admin_agent.core.exceptions import (
    CredentialUnavailable,
    GatewayError,
    InvalidRequest,
    ToolNotFound,
    UpstreamError,
)
from admin_agent.core.types import PlainText, ToolInvocationRequest
from admin_agent.llm.services.orchestrator import AgentState, Orchestrator
from admin_agent.tools import ToolName, ToolRegistry
from conftest import RecordingLogger, RecordingTransport

USERS = [{"user_id": f"auth0|{index}"} for index in range(7)]


class FakeGateway:
    def __init__(self, action=None, *, select_error=None, synthesize_error=None) -> None:
        self.action = action
        self.select_error = select_error
        self.synthesize_error = synthesize_error
        self.select_calls: list[tuple[str, list[str]]] = []
        self.synthesize_calls: list[tuple[str, str, object]] = []

    async def select_action(self, prompt, declarations):
        self.select_calls.append((prompt, [d.name for d in declarations]))
        if self.select_error:
            raise self.select_error
        return self.action

    async def synthesize(self, prompt, tool_name, tool_result):
        self.synthesize_calls.append((prompt, tool_name, tool_result))
        if self.synthesize_error:
            raise self.synthesize_error
        return f"There are {len(tool_result)} users."


class FakeManagementClient:
    def __init__(self, error=None) -> None:
        self.error = error
        self.calls: list[str] = []

    async def _serve(self, name, result):
        self.calls.append(name)
        if self.error:
            raise self.error
        return result

    async def list_users(self):
        return await self._serve("list_users", USERS)

    async def get_tenant_settings(self):
        return await self._serve("get_tenant_settings", {"friendly_name": "Acme"})

    async def list_signing_keys(self):
        return await self._serve("list_signing_keys", [{"kid": "k1"}])


def _orchestrator(gateway, client=None):
    client = client or FakeManagementClient()
    return Orchestrator(gateway, ToolRegistry(client)), client


@pytest.mark.asyncio
async def test_plain_text_is_returned_verbatim_without_tools():
    gateway = FakeGateway(PlainText("Hi, how can I help?"))
    orchestrator, client = _orchestrator(gateway)

    outcome = await orchestrator.handle("hello")

    assert outcome.succeeded
    assert outcome.text == "Hi, how can I help?"
    assert outcome.tool is None
    assert client.calls == []
    assert gateway.synthesize_calls == []
    assert outcome.trace == [
        AgentState.RECEIVED,
        AgentState.AWAITING_ACTION,
        AgentState.RESPONDING,
        AgentState.RESPONDED,
    ]


@pytest.mark.asyncio
async def test_phase_one_receives_all_declarations():
    gateway = FakeGateway(PlainText("ok"))
    orchestrator, _ = _orchestrator(gateway)

    await orchestrator.handle("hello")

    assert gateway.select_calls == [
        ("hello", ["list_users", "get_tenant_settings", "list_signing_keys"])
    ]


@pytest.mark.asyncio
async def test_requested_tool_runs_once_and_feeds_synthesis():
    gateway = FakeGateway(ToolInvocationRequest("list_users"))
    orchestrator, client = _orchestrator(gateway)

    outcome = await orchestrator.handle("how many users are there")

    assert outcome.succeeded
    assert outcome.text == "There are 7 users."
    assert outcome.tool is ToolName.LIST_USERS
    assert client.calls == ["list_users"]
    assert gateway.synthesize_calls == [("how many users are there", "list_users", USERS)]
    assert outcome.trace[-3:] == [
        AgentState.AWAITING_TOOL,
        AgentState.AWAITING_SYNTHESIS,
        AgentState.RESPONDED,
    ]


@pytest.mark.asyncio
async def test_synthesis_gets_the_selected_tools_result():
    gateway = FakeGateway(ToolInvocationRequest("list_signing_keys"))
    orchestrator, client = _orchestrator(gateway)

    await orchestrator.handle("which certificates expire soon")

    assert client.calls == ["list_signing_keys"]
    assert gateway.synthesize_calls[0][1:] == ("list_signing_keys", [{"kid": "k1"}])


@pytest.mark.asyncio
@pytest.mark.parametrize("prompt", [None, "", 42])
async def test_invalid_prompt_fails_before_any_call(prompt):
    gateway = FakeGateway(PlainText("unused"))
    orchestrator, client = _orchestrator(gateway)

    outcome = await orchestrator.handle(prompt)

    assert outcome.state is AgentState.FAILED
    assert isinstance(outcome.error, InvalidRequest)
    assert gateway.select_calls == []
    assert client.calls == []


@pytest.mark.asyncio
async def test_unknown_tool_fails_without_backing_or_synthesis_calls():
    gateway = FakeGateway(ToolInvocationRequest("delete_all_users"))
    orchestrator, client = _orchestrator(gateway)

    outcome = await orchestrator.handle("wipe the tenant")

    assert outcome.state is AgentState.FAILED
    assert isinstance(outcome.error, ToolNotFound)
    assert client.calls == []
    assert gateway.synthesize_calls == []


@pytest.mark.asyncio
async def test_phase_one_failure_is_a_gateway_error():
    gateway = FakeGateway(select_error=GatewayError("down", status=503))
    orchestrator, client = _orchestrator(gateway)

    outcome = await orchestrator.handle("hello")

    assert isinstance(outcome.error, GatewayError)
    assert outcome.trace == [AgentState.RECEIVED, AgentState.AWAITING_ACTION, AgentState.FAILED]
    assert client.calls == []


@pytest.mark.asyncio
async def test_tool_failure_kind_is_propagated():
    gateway = FakeGateway(ToolInvocationRequest("get_tenant_settings"))
    error = UpstreamError("forbidden", status=403, body={"message": "scope"})
    orchestrator, _ = _orchestrator(gateway, FakeManagementClient(error=error))

    outcome = await orchestrator.handle("show tenant settings")

    assert outcome.error is error
    assert outcome.tool is ToolName.GET_TENANT_SETTINGS
    assert gateway.synthesize_calls == []


@pytest.mark.asyncio
async def test_synthesis_failure_after_tool_success():
    gateway = FakeGateway(
        ToolInvocationRequest("list_users"), synthesize_error=GatewayError("bad", status=500)
    )
    orchestrator, client = _orchestrator(gateway)

    outcome = await orchestrator.handle("how many users are there")

    assert isinstance(outcome.error, GatewayError)
    assert client.calls == ["list_users"]
    assert outcome.trace[-2:] == [AgentState.AWAITING_SYNTHESIS, AgentState.FAILED]


@pytest.mark.asyncio
async def test_repeated_requests_follow_the_same_collaborator_sequence():
    gateway = FakeGateway(ToolInvocationRequest("list_users"))
    orchestrator, client = _orchestrator(gateway)

    first = await orchestrator.handle("how many users are there")
    second = await orchestrator.handle("how many users are there")

    assert first.text == second.text
    assert first.trace == second.trace
    assert client.calls == ["list_users", "list_users"]
    assert len(gateway.select_calls) == len(gateway.synthesize_calls) == 2


@pytest.mark.asyncio
async def test_rejected_token_surfaces_as_credential_unavailable(settings, clock):
    token_endpoint = RecordingTransport(
        lambda request: httpx.Response(401, json={"error": "access_denied"})
    )
    api = RecordingTransport(lambda request: httpx.Response(200, json=[]))
    cache = TokenCache(settings, clock=clock, transport=token_endpoint)
    client = ManagementClient(settings, cache, transport=api)
    gateway = FakeGateway(ToolInvocationRequest("list_users"))
    orchestrator = Orchestrator(gateway, ToolRegistry(client))

    outcome = await orchestrator.handle("how many users are there")

    assert isinstance(outcome.error, CredentialUnavailable)
    assert len(token_endpoint.requests) == 1
    assert api.requests == []
    assert gateway.synthesize_calls == []


@pytest.mark.asyncio
async def test_whitespace_prompt_is_passed_to_phase_one():
    gateway = FakeGateway(PlainText("Could you say more?"))
    orchestrator, _ = _orchestrator(gateway)

    outcome = await orchestrator.handle("   ")

    assert outcome.succeeded
    assert gateway.select_calls[0][0] == "   "


@pytest.mark.asyncio
async def test_caller_errors_log_below_error_level(monkeypatch):
    recorder = RecordingLogger()
    monkeypatch.setattr("admin_agent.llm.services.orchestrator.logger", recorder)
    orchestrator, _ = _orchestrator(FakeGateway(PlainText("unused")))

    await orchestrator.handle("")

    assert recorder.levels_of("agent_request_failed") == ["warning"]


@pytest.mark.asyncio
async def test_upstream_errors_log_at_error_level(monkeypatch):
    recorder = RecordingLogger()
    monkeypatch.setattr("admin_agent.llm.services.orchestrator.logger", recorder)
    orchestrator, _ = _orchestrator(FakeGateway(select_error=GatewayError("down", status=503)))

    await orchestrator.handle("hello")

    assert recorder.levels_of("agent_request_failed") == ["error"]


def _kinds(cls):
    kinds = set()
    for subclass in cls.__subclasses__():
        kinds.add(subclass.kind)
        kinds |= _kinds(subclass)
    return kinds


def test_failure_kinds_are_the_closed_taxonomy():
    from admin_agent.core.exceptions import AgentError

    assert _kinds(AgentError) == {
        "InvalidRequest",
        "CredentialUnavailable",
        "ToolNotFound",
        "ExternalServiceError",
        "UpstreamError",
        "GatewayError",
    }
