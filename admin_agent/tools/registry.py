"""Closed registry mapping tool identifiers to declarations and handlers."""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any

from ..core.auth0_client import ManagementClient
from ..core.exceptions import ToolNotFound
from ..core.logging_config import get_logger
from ..core.types import ToolDeclaration

logger = get_logger(__name__)

ToolHandler = Callable[[ManagementClient], Awaitable[Any]]


class ToolName(str, Enum):
    LIST_USERS = "list_users"
    GET_TENANT_SETTINGS = "get_tenant_settings"
    LIST_SIGNING_KEYS = "list_signing_keys"


@dataclass(frozen=True, slots=True)
class ToolSpec:
    declaration: ToolDeclaration
    handler: ToolHandler


_SPECS: dict[ToolName, ToolSpec] = {}


def tool(name: ToolName, *, description: str) -> Callable[[ToolHandler], ToolHandler]:
    """Register a zero-argument read-only tool under ``name``."""

    def decorator(handler: ToolHandler) -> ToolHandler:
        if name in _SPECS:
            raise ValueError(f"Tool {name.value} registered twice")
        _SPECS[name] = ToolSpec(
            declaration=ToolDeclaration(name=name.value, description=description),
            handler=handler,
        )
        return handler

    return decorator


def registered_specs() -> Mapping[ToolName, ToolSpec]:
    return dict(_SPECS)


class ToolRegistry:
    """Resolves LLM-declared function names and runs the matching tool."""

    def __init__(
        self,
        client: ManagementClient,
        specs: Mapping[ToolName, ToolSpec] | None = None,
    ) -> None:
        self._client = client
        self._specs = dict(registered_specs() if specs is None else specs)
        missing = [name.value for name in ToolName if name not in self._specs]
        if specs is None and missing:
            raise RuntimeError(f"Tools without implementation: {', '.join(missing)}")

    def declarations(self) -> list[ToolDeclaration]:
        return [self._specs[name].declaration for name in ToolName if name in self._specs]

    def resolve(self, name: str) -> ToolName:
        """Map a function name to a registered tool; exact and case-sensitive."""

        try:
            tool_name = ToolName(name)
        except ValueError:
            raise ToolNotFound(name) from None
        if tool_name not in self._specs:
            raise ToolNotFound(name)
        return tool_name

    async def invoke(self, name: ToolName) -> Any:
        logger.info("tool_invocation_started", tool=name.value)
        result = await self._specs[name].handler(self._client)
        logger.info("tool_invocation_completed", tool=name.value, result_size=_size(result))
        logger.debug("tool_invocation_result", tool=name.value, result=result)
        return result


def _size(result: Any) -> int | None:
    """Item count for list or dict results; other results are not counted."""

    if isinstance(result, (list, dict)):
        return len(result)
    return None
