"""Gemini `generateContent` client covering tool selection and answer synthesis."""

from __future__ import annotations

import json
from collections.abc import Sequence
from typing import Any

import httpx

from ...core.config import AgentSettings
from ...core.exceptions import GatewayError
from ...core.http_client import async_http_client, response_body
from ...core.logging_config import get_logger
from ...core.types import PlainText, SelectedAction, ToolDeclaration, ToolInvocationRequest

logger = get_logger(__name__)

FALLBACK_REPLY = "I am sorry, I could not fulfill your request."

_SYNTHESIS_INSTRUCTION = (
    'Given the following user query: "{prompt}" and the API response: "{result}", '
    "please provide a concise and professional summary. Format the information with "
    "clear, bold headings and use bullet points for lists to make it easy to read."
)


def normalize_part(part: dict[str, Any]) -> dict[str, Any]:
    """Fold the spellings Gemini uses for part fields onto snake_case.

    The service has been seen emitting both ``functionCall`` and
    ``function_call``; keys are compared with case and underscores ignored so
    any further variant of the same name lands on the same key.
    """

    canonical = {"functioncall": "function_call", "text": "text"}
    normalized: dict[str, Any] = {}
    for key, value in part.items():
        folded = key.replace("_", "").lower()
        normalized[canonical.get(folded, key)] = value
    return normalized


def function_call_name(part: dict[str, Any]) -> str | None:
    call = normalize_part(part).get("function_call")
    if isinstance(call, dict):
        name = call.get("name")
        if isinstance(name, str) and name:
            return name
    return None


def first_candidate_content(payload: Any) -> dict[str, Any]:
    """Return ``candidates[0].content`` or raise GatewayError."""

    try:
        content = payload["candidates"][0]["content"]
    except (KeyError, IndexError, TypeError):
        raise GatewayError("Gemini response has no candidate content", body=payload) from None
    if not isinstance(content, dict):
        raise GatewayError("Gemini response has no candidate content", body=payload)
    return content


def _parts(content: dict[str, Any]) -> list[dict[str, Any]]:
    return [part for part in content.get("parts") or [] if isinstance(part, dict)]


class GeminiClient:
    """Thin async wrapper around the Gemini REST API."""

    def __init__(
        self,
        settings: AgentSettings,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._settings = settings
        self._transport = transport
        logger.info(
            "gemini_client_init",
            base_url=str(settings.gemini_api_base).rstrip("/"),
            model=settings.gemini_model,
            api_key_configured=settings.gemini_api_key is not None,
        )

    @property
    def endpoint(self) -> str:
        base = str(self._settings.gemini_api_base).rstrip("/")
        return f"{base}/models/{self._settings.gemini_model}:generateContent"

    async def generate_content(self, payload: dict[str, Any], *, phase: str) -> dict[str, Any]:
        """POST a generateContent payload and return the first candidate's content."""

        api_key = self._settings.gemini_api_key
        params = {"key": api_key.get_secret_value()} if api_key else {}
        logger.info("gemini_request", phase=phase, content_count=len(payload.get("contents", [])))

        try:
            async with async_http_client(
                timeout=self._settings.http_timeout_seconds, transport=self._transport
            ) as client:
                response = await client.post(self.endpoint, params=params, json=payload)
        except httpx.HTTPError as exc:
            # The exception text can carry the request URL, key included.
            logger.error("gemini_transport_error", phase=phase, error_type=type(exc).__name__)
            raise GatewayError(f"Gemini API call failed: {type(exc).__name__}") from exc

        if response.is_error:
            raise GatewayError(
                f"Gemini API call failed with status: {response.status_code}",
                status=response.status_code,
                body=response_body(response),
            )

        try:
            data = response.json()
        except ValueError:
            raise GatewayError(
                "Gemini returned a non-JSON body",
                status=response.status_code,
                body=response.text,
            ) from None

        logger.debug("gemini_response", phase=phase, body=data)
        return first_candidate_content(data)

    async def select_action(
        self, prompt: str, declarations: Sequence[ToolDeclaration]
    ) -> SelectedAction:
        """Phase one: let the model answer directly or pick a tool."""

        payload = {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "tools": [
                {
                    "function_declarations": [
                        declaration.to_function_declaration() for declaration in declarations
                    ]
                }
            ],
        }
        content = await self.generate_content(payload, phase="select_action")
        parts = _parts(content)

        for part in parts:
            name = function_call_name(part)
            if name:
                logger.info("gemini_function_call", tool=name)
                return ToolInvocationRequest(name=name)

        text = normalize_part(parts[0]).get("text") if parts else None
        if not isinstance(text, str) or not text:
            logger.warning("gemini_empty_reply", phase="select_action")
            return PlainText(text=FALLBACK_REPLY)
        return PlainText(text=text)

    async def synthesize(self, prompt: str, tool_name: str, tool_result: Any) -> str:
        """Phase two: compose the final answer grounded in a tool result."""

        serialized = json.dumps({"data": tool_result}, ensure_ascii=False, default=str)
        payload = {
            "contents": [
                {
                    "role": "user",
                    "parts": [
                        {"text": _SYNTHESIS_INSTRUCTION.format(prompt=prompt, result=serialized)}
                    ],
                },
                {
                    "role": "tool",
                    "parts": [
                        {
                            "function_response": {
                                "name": tool_name,
                                "response": {"data": tool_result},
                            }
                        }
                    ],
                },
            ]
        }
        content = await self.generate_content(payload, phase="synthesize")

        for part in _parts(content):
            text = normalize_part(part).get("text")
            if isinstance(text, str) and text:
                return text
        raise GatewayError("Gemini synthesis returned no text", body=content)
