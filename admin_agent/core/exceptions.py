"""Custom exception hierarchy for the Admin Agent service."""

from __future__ import annotations

from typing import Any


class AgentError(Exception):
    """Base exception for Agent-level issues."""

    kind = "AgentError"

    def __init__(self, message: str = "") -> None:
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind, "message": self.message}


class InvalidRequest(AgentError):
    """Raised when the caller's input is unusable; no upstream call is made."""

    kind = "InvalidRequest"


class CredentialUnavailable(AgentError):
    """Raised when no Management API token could be obtained."""

    kind = "CredentialUnavailable"


class ToolNotFound(AgentError):
    """Raised when the LLM names a tool that is not registered."""

    kind = "ToolNotFound"

    def __init__(self, name: str) -> None:
        super().__init__(f"Function {name} not found.")
        self.name = name


class ExternalServiceError(AgentError):
    """Raised when an external dependency responds with an error."""

    kind = "ExternalServiceError"

    def __init__(self, message: str, *, status: int | None = None, body: Any = None) -> None:
        super().__init__(message)
        self.status = status
        self.body = body

    def to_dict(self) -> dict[str, Any]:
        payload = super().to_dict()
        payload.update(status=self.status, body=self.body)
        return payload


class UpstreamError(ExternalServiceError):
    """Raised when a Management API read endpoint fails."""

    kind = "UpstreamError"


class GatewayError(ExternalServiceError):
    """Raised when the LLM service fails or returns a malformed response."""

    kind = "GatewayError"
