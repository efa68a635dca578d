"""Shared type definitions."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, TypeAlias

EMPTY_PARAMETERS: dict[str, Any] = {"type": "object", "properties": {}}


@dataclass(frozen=True, slots=True)
class Credential:
    """Bearer token for the Management API and the epoch second it stops being handed out."""

    token: str
    expires_at: float

    def is_valid(self, now: float) -> bool:
        return bool(self.token) and self.expires_at > now


@dataclass(frozen=True, slots=True)
class ToolDeclaration:
    """Function declaration the LLM uses to decide whether a tool applies."""

    name: str
    description: str
    parameters: dict[str, Any] = field(default_factory=lambda: dict(EMPTY_PARAMETERS))

    def to_function_declaration(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "parameters": self.parameters,
        }


@dataclass(frozen=True, slots=True)
class PlainText:
    """Phase-one answer that needs no tool."""

    text: str


@dataclass(frozen=True, slots=True)
class ToolInvocationRequest:
    """Phase-one request to run the named tool."""

    name: str


SelectedAction: TypeAlias = PlainText | ToolInvocationRequest
