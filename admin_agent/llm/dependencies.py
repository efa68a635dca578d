"""Composition root: one shared instance of each collaborator per process."""

from functools import lru_cache

from ..core.auth0_client import ManagementClient
from ..core.config import get_settings
from ..core.credentials import TokenCache
from ..tools import ToolRegistry
from .services.gemini_client import GeminiClient
from .services.orchestrator import Orchestrator


@lru_cache
def get_token_cache() -> TokenCache:
    return TokenCache(get_settings())


@lru_cache
def get_tool_registry() -> ToolRegistry:
    settings = get_settings()
    return ToolRegistry(ManagementClient(settings, get_token_cache()))


@lru_cache
def get_gemini_client() -> GeminiClient:
    return GeminiClient(get_settings())


@lru_cache
def get_orchestrator() -> Orchestrator:
    return Orchestrator(get_gemini_client(), get_tool_registry())
