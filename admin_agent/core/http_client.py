"""Reusable HTTP client utilities."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import httpx


@asynccontextmanager
async def async_http_client(
    base_url: str | None = None,
    timeout: float = 10.0,
    transport: httpx.AsyncBaseTransport | None = None,
) -> AsyncIterator[httpx.AsyncClient]:
    """Yield a configured AsyncClient and close it afterwards."""

    async with httpx.AsyncClient(
        base_url=base_url or "", timeout=timeout, transport=transport
    ) as client:
        yield client


def response_body(response: httpx.Response) -> object:
    """Decode a response body as JSON, falling back to raw text."""

    try:
        return response.json()
    except ValueError:
        return response.text
