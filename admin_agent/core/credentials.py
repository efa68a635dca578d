"""Client-credentials token cache for the Auth0 Management API."""

from __future__ import annotations

import asyncio
import time
from collections.abc import Callable

import httpx

from .config import AgentSettings
from .http_client import async_http_client
from .logging_config import get_logger
from .types import Credential

logger = get_logger(__name__)


class TokenCache:
    """Hands out a valid Management API token, refreshing it when needed.

    A failed refresh returns ``None`` rather than raising; callers decide how
    to surface it. Requests racing on an expired token share one call to the token
    endpoint and all receive its outcome, failure included.
    """

    def __init__(
        self,
        settings: AgentSettings,
        *,
        clock: Callable[[], float] = time.time,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._settings = settings
        self._clock = clock
        self._transport = transport
        self._credential: Credential | None = None
        self._lock = asyncio.Lock()
        self._generation = 0
        self._last_refresh: Credential | None = None

    @property
    def token_url(self) -> str:
        return f"https://{self._settings.auth0_domain}/oauth/token"

    @property
    def audience(self) -> str:
        return f"https://{self._settings.auth0_domain}/api/v2/"

    def cached(self) -> Credential | None:
        """Return the cached credential if it is still usable."""

        credential = self._credential
        if credential is not None and credential.is_valid(self._clock()):
            return credential
        return None

    def invalidate(self) -> None:
        self._credential = None

    async def get_token(self) -> Credential | None:
        credential = self.cached()
        if credential is not None:
            logger.debug("auth0_token_cache_hit", expires_at=credential.expires_at)
            return credential

        generation = self._generation
        async with self._lock:
            if generation != self._generation:
                # A refresh finished while we waited; share its outcome, even a failed one.
                return self._last_refresh
            logger.info("auth0_token_refresh", reason="expired" if self._credential else "absent")
            credential = await self._fetch()
            self._generation += 1
            self._last_refresh = credential
            if credential is not None:
                self._credential = credential
            return credential

    async def _fetch(self) -> Credential | None:
        settings = self._settings
        secret = settings.auth0_client_secret
        payload = {
            "client_id": settings.auth0_client_id,
            "client_secret": secret.get_secret_value() if secret else None,
            "audience": self.audience,
            "grant_type": "client_credentials",
        }
        requested_at = self._clock()

        try:
            async with async_http_client(
                timeout=settings.http_timeout_seconds, transport=self._transport
            ) as client:
                response = await client.post(self.token_url, json=payload)
        except httpx.HTTPError as exc:
            logger.error("auth0_token_transport_error", url=self.token_url, error=str(exc))
            return None

        logger.info("auth0_token_response", status_code=response.status_code)
        if response.is_error:
            logger.error(
                "auth0_token_rejected",
                status_code=response.status_code,
                body=response.text[:500],
            )
            return None

        try:
            data = response.json()
            access_token = str(data["access_token"])
            expires_in = float(data["expires_in"])
        except (ValueError, KeyError, TypeError) as exc:
            logger.error("auth0_token_malformed", error=str(exc), body=response.text[:500])
            return None

        if not access_token:
            logger.error("auth0_token_malformed", error="empty access_token")
            return None

        expires_at = requested_at + expires_in - self._settings.token_expiry_margin_seconds
        if expires_at <= requested_at:
            # Usable for this call only; the next get_token() refreshes again.
            logger.warning("auth0_token_lifetime_below_margin", expires_in=expires_in)
        logger.info("auth0_token_refreshed", expires_in=expires_in, expires_at=expires_at)
        return Credential(token=access_token, expires_at=expires_at)
