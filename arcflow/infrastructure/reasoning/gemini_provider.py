"""Gemini reasoning provider over the generateContent REST API. Every failure surfaces as ProviderError."""

import logging
from typing import Any, Sequence

import httpx

from arcflow.application.exceptions import ProviderError
from arcflow.application.reasoning import PlainText, ProviderReply, StructuredCall
from arcflow.domain.schemas.chat import ConversationTurn

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"
API_KEY_HEADER = "x-goog-api-key"


def _turn_to_content(turn: ConversationTurn) -> dict[str, Any]:
    return {"role": turn.role, "parts": [{"text": turn.text}]}


def _parse_reply(candidate: str, body: Any) -> tuple[ProviderReply, dict[str, Any]]:
    """Return the reply variant and the raw model content to append to the conversation."""
    if not isinstance(body, dict):
        raise ProviderError("Malformed provider response", candidate=candidate)
    try:
        return _read_reply(candidate, body)
    except (AttributeError, TypeError, KeyError, IndexError) as e:
        raise ProviderError(f"Malformed provider response: {e}", candidate=candidate) from e


def _read_reply(candidate: str, body: dict[str, Any]) -> tuple[ProviderReply, dict[str, Any]]:
    candidates = body.get("candidates") or []
    if not candidates:
        block_reason = (body.get("promptFeedback") or {}).get("blockReason")
        if block_reason:
            # A refusal is a valid answer, not a provider failure.
            text = f"Request declined by the reasoning provider ({block_reason})."
            return PlainText(text), {"role": "model", "parts": [{"text": text}]}
        raise ProviderError("Provider returned no candidates", candidate=candidate)

    content = candidates[0].get("content") or {}
    parts = content.get("parts") or []
    for part in parts:
        call = part.get("functionCall")
        if call:
            name = call.get("name")
            if not name:
                raise ProviderError("Function call without a name", candidate=candidate)
            args = call.get("args") or {}
            if not isinstance(args, dict):
                raise ProviderError("Function call arguments are not an object", candidate=candidate)
            return StructuredCall(name=name, args=dict(args)), content
    text = "".join(part.get("text", "") for part in parts)
    return PlainText(text), content


class GeminiSession:
    """Stateful view over a stateless API: the full conversation is resent on every call."""

    def __init__(
        self,
        provider: "GeminiProvider",
        candidate: str,
        *,
        system_context: str,
        tool_schema: dict[str, Any],
        history: Sequence[ConversationTurn],
    ) -> None:
        self._provider = provider
        self._candidate = candidate
        self._system_context = system_context
        self._tool_schema = tool_schema
        self._contents: list[dict[str, Any]] = [_turn_to_content(t) for t in history]

    async def send_message(self, text: str) -> ProviderReply:
        self._contents.append({"role": "user", "parts": [{"text": text}]})
        return await self._generate()

    async def send_tool_result(self, name: str, result: str) -> ProviderReply:
        self._contents.append(
            {
                "role": "user",
                "parts": [{"functionResponse": {"name": name, "response": {"result": result}}}],
            }
        )
        return await self._generate()

    async def _generate(self) -> ProviderReply:
        payload = {
            "systemInstruction": {"parts": [{"text": self._system_context}]},
            "contents": self._contents,
            "tools": [{"functionDeclarations": [self._tool_schema]}],
        }
        body = await self._provider.generate_content(self._candidate, payload)
        reply, content = _parse_reply(self._candidate, body)
        self._contents.append(content)
        return reply


class GeminiProvider:
    """Opens GeminiSession objects against named models. Owns one shared httpx.AsyncClient."""

    def __init__(
        self,
        api_key: str,
        *,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 30.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._client = client or httpx.AsyncClient(timeout=timeout)

    def start_session(
        self,
        candidate: str,
        *,
        system_context: str,
        tool_schema: dict[str, Any],
        history: Sequence[ConversationTurn],
    ) -> GeminiSession:
        return GeminiSession(
            self,
            candidate,
            system_context=system_context,
            tool_schema=tool_schema,
            history=history,
        )

    async def generate_content(self, candidate: str, payload: dict[str, Any]) -> Any:
        url = f"{self._base_url}/models/{candidate}:generateContent"
        try:
            resp = await self._client.post(url, json=payload, headers={API_KEY_HEADER: self._api_key})
        except httpx.HTTPError as e:
            raise ProviderError(f"Transport error: {e}", candidate=candidate) from e
        if resp.status_code >= 400:
            logger.debug(
                "provider_http_error",
                extra={"candidate": candidate, "status_code": resp.status_code, "body": resp.text[:500]},
            )
            raise ProviderError(
                f"{candidate} returned HTTP {resp.status_code}",
                candidate=candidate,
                status_code=resp.status_code,
            )
        try:
            return resp.json()
        except ValueError as e:
            raise ProviderError("Provider response is not JSON", candidate=candidate) from e

    async def aclose(self) -> None:
        await self._client.aclose()
