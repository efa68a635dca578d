"""Service layer exports."""

from .gemini_client import GeminiClient
from .orchestrator import AgentOutcome, AgentState, Orchestrator

__all__ = ["AgentOutcome", "AgentState", "GeminiClient", "Orchestrator"]
