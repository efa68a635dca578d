"""Pydantic schemas for the agent endpoint."""

from pydantic import BaseModel, Field


class AgentRequest(BaseModel):
    prompt: str | None = Field(None, description="Natural-language request")


class AgentResponse(BaseModel):
    response: str


class ErrorResponse(BaseModel):
    error: str


class ToolDeclarationSchema(BaseModel):
    name: str
    description: str
    parameters: dict
