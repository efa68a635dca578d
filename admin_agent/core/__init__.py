"""Core infrastructure utilities."""

from .auth0_client import ManagementClient
from .config import AgentSettings, get_settings
from .credentials import TokenCache
from .logging_config import configure_logging, get_logger

__all__ = [
    "AgentSettings",
    "ManagementClient",
    "TokenCache",
    "configure_logging",
    "get_logger",
    "get_settings",
]
