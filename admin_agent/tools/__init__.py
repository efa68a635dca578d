"""Tool registrations grouped by backing API."""

# Import tool modules so decorators run at import time.
from . import management  # noqa: F401
from .registry import ToolName, ToolRegistry, ToolSpec, registered_specs, tool

__all__ = ["ToolName", "ToolRegistry", "ToolSpec", "registered_specs", "tool"]
