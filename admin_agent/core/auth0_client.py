"""Async Auth0 Management API client (read-only)."""

from typing import Any

import httpx

from .config import AgentSettings
from .credentials import TokenCache
from .exceptions import CredentialUnavailable, UpstreamError
from .http_client import async_http_client, response_body
from .logging_config import get_logger

logger = get_logger(__name__)


class ManagementClient:
    """Minimal async client for the Auth0 Management API v2."""

    def __init__(
        self,
        settings: AgentSettings,
        token_cache: TokenCache,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._settings = settings
        self._token_cache = token_cache
        self._transport = transport

    @property
    def base_url(self) -> str:
        return f"https://{self._settings.auth0_domain}/api/v2"

    async def _get(self, path: str) -> Any:
        credential = await self._token_cache.get_token()
        if credential is None:
            raise CredentialUnavailable("Could not retrieve Auth0 token.")

        try:
            async with async_http_client(
                base_url=self.base_url,
                timeout=self._settings.http_timeout_seconds,
                transport=self._transport,
            ) as client:
                response = await client.get(
                    path, headers={"Authorization": f"Bearer {credential.token}"}
                )
        except httpx.HTTPError as exc:
            raise UpstreamError(f"Auth0 request to {path} failed: {exc}") from exc

        body = response_body(response)
        if response.is_error:
            raise UpstreamError(
                f"Auth0 API call failed with status: {response.status_code}",
                status=response.status_code,
                body=body,
            )

        logger.debug("auth0_api_response", path=path, status_code=response.status_code, body=body)
        return body

    async def list_users(self) -> Any:
        """Retrieve all users in the tenant."""

        return await self._get("/users")

    async def get_tenant_settings(self) -> Any:
        """Retrieve the tenant-level configuration."""

        return await self._get("/tenants/settings")

    async def list_signing_keys(self) -> Any:
        """Retrieve application signing keys (SAML certificates included)."""

        return await self._get("/keys/signing")
