"""Read-only Auth0 Management tools exposed to the LLM."""

from typing import Any

from ..core.auth0_client import ManagementClient
from .registry import ToolName, tool


@tool(
    ToolName.LIST_USERS,
    description=(
        "Retrieves a list of all users in the Auth0 tenant. "
        "Use for requests like 'how many users' or 'list all users'."
    ),
)
async def list_users(client: ManagementClient) -> Any:
    return await client.list_users()


@tool(
    ToolName.GET_TENANT_SETTINGS,
    description="Retrieves the high-level configuration and settings for the Auth0 tenant.",
)
async def get_tenant_settings(client: ManagementClient) -> Any:
    return await client.get_tenant_settings()


@tool(
    ToolName.LIST_SIGNING_KEYS,
    description=(
        "Retrieves all application signing keys, which includes SAML certificates. "
        "Use for requests about expiring or current certificates."
    ),
)
async def list_signing_keys(client: ManagementClient) -> Any:
    return await client.list_signing_keys()
