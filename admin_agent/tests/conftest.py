import os

# Keep test runs from writing the default log file.
os.environ.setdefault("LOG_FILE", "")

import httpx
import pytest

from admin_agent.core.config import AgentSettings


class FakeClock:
    def __init__(self, now: float = 1_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


class RecordingTransport(httpx.MockTransport):
    """MockTransport that keeps every request it served."""

    def __init__(self, handler) -> None:
        self.requests: list[httpx.Request] = []

        def record(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            return handler(request)

        super().__init__(record)


@pytest.fixture
def settings() -> AgentSettings:
    return AgentSettings(
        _env_file=None,
        log_file="",
        auth0_domain="tenant.example.com",
        auth0_client_id="client-id",
        auth0_client_secret="client-secret",
        gemini_api_key="gemini-key",
        gemini_model="gemini-test",
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


class RecordingLogger:
    """Stand-in for a module's structlog logger."""

    def __init__(self) -> None:
        self.events: list[tuple[str, str, dict]] = []

    def _record(self, level: str):
        def log(event: str, **kwargs) -> None:
            self.events.append((level, event, kwargs))

        return log

    def __getattr__(self, level: str):
        return self._record(level)

    def levels_of(self, event: str) -> list[str]:
        return [level for level, name, _ in self.events if name == event]
