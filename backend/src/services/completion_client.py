"""HTTP client for OpenAI-compatible chat completion endpoints.

Two uses:

- agent chat (OpenAI, LangChain) with a single JSON response, and
- the AI gateway, whose SSE body is relayed to the browser unchanged.
"""

from __future__ import annotations

import logging
from typing import Any, AsyncIterator, Dict, List, Optional

import httpx
from fastapi import status

from .config import AppConfig, get_config
from .errors import ConfigurationError, UpstreamError

logger = logging.getLogger(__name__)

OPENAI_CHAT_URL = "https://api.openai.com/v1/chat/completions"
LANGCHAIN_CHAT_URL = "https://api.smith.langchain.com/v1/chat/completions"
AGENT_MODEL = "gpt-4o-mini"

RATE_LIMITED_MESSAGE = "Rate limits exceeded. Please try again later."
CREDITS_REQUIRED_MESSAGE = "AI credits required. Please add funds."
GATEWAY_ERROR_MESSAGE = "AI gateway error"


def build_messages(system_prompt: str, user_prompt: str) -> List[Dict[str, str]]:
    return [
        {"role": "system", "content": system_prompt},
        {"role": "user", "content": user_prompt},
    ]


def first_message_content(data: Dict[str, Any]) -> str:
    """Text of ``choices[0].message.content`` from a completion payload."""
    try:
        return data["choices"][0]["message"]["content"] or ""
    except (KeyError, IndexError, TypeError):
        return ""


def completion_payload(response: httpx.Response) -> Dict[str, Any]:
    """Decoded JSON body of a successful completion, or ``UpstreamError``."""
    try:
        data = response.json()
    except ValueError as exc:
        logger.error(f"Completion response from {response.url} is not JSON")
        raise UpstreamError(
            "Invalid completion response: body is not JSON",
            detail={"status": response.status_code},
        ) from exc
    if not isinstance(data, dict):
        raise UpstreamError(
            "Invalid completion response: expected a JSON object",
            detail={"status": response.status_code},
        )
    return data


def error_message(response: httpx.Response) -> str:
    """Best-effort ``error.message`` from an OpenAI-style error body."""
    try:
        body = response.json()
    except ValueError:
        return "Unknown error"
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
        if isinstance(error, str) and error:
            return error
    return "Unknown error"


class CompletionClient:
    """Thin wrapper over ``httpx.AsyncClient`` for chat completions."""

    def __init__(
        self,
        config: AppConfig | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float = 60.0,
    ) -> None:
        self.config = config or get_config()
        self._transport = transport
        self._timeout = timeout

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self._timeout, transport=self._transport)

    async def chat(
        self,
        url: str,
        api_key: str,
        system_prompt: str,
        user_prompt: str,
        *,
        max_tokens: int,
        temperature: float = 0.7,
        model: str = AGENT_MODEL,
    ) -> httpx.Response:
        """POST a non-streaming completion; status checks are left to the caller."""
        try:
            async with self._client() as client:
                return await client.post(
                    url,
                    headers={
                        "Authorization": f"Bearer {api_key}",
                        "Content-Type": "application/json",
                    },
                    json={
                        "model": model,
                        "messages": build_messages(system_prompt, user_prompt),
                        "max_tokens": max_tokens,
                        "temperature": temperature,
                    },
                )
        except httpx.HTTPError as exc:
            logger.error(f"Completion request to {url} failed: {exc}")
            raise UpstreamError(
                f"Completion request failed: {exc}", detail={"url": url}
            ) from exc

    async def stream_gateway(
        self, system_prompt: str, user_prompt: str, *, model: Optional[str] = None
    ) -> AsyncIterator[bytes]:
        """Open a streamed gateway completion and return an iterator over its body.

        Status errors are raised before the first byte is yielded so the route
        can still answer with a JSON error instead of a broken stream.
        """
        api_key = self.config.ai_gateway_api_key
        if not api_key:
            raise ConfigurationError("AI gateway API key not configured")

        url = f"{self.config.ai_gateway_url.rstrip('/')}/chat/completions"
        client = self._client()
        request = client.build_request(
            "POST",
            url,
            headers={
                "Authorization": f"Bearer {api_key}",
                "Content-Type": "application/json",
            },
            json={
                "model": model or self.config.ai_gateway_model,
                "messages": build_messages(system_prompt, user_prompt),
                "stream": True,
            },
        )
        try:
            response = await client.send(request, stream=True)
        except httpx.HTTPError as exc:
            await client.aclose()
            logger.error(f"AI gateway request failed: {exc}")
            raise UpstreamError(GATEWAY_ERROR_MESSAGE, detail={"reason": str(exc)}) from exc

        if not response.is_success:
            await response.aread()
            await response.aclose()
            await client.aclose()
            logger.error(
                f"AI gateway error: {response.status_code} - {response.text[:500]}"
            )
            if response.status_code == status.HTTP_429_TOO_MANY_REQUESTS:
                raise UpstreamError(
                    RATE_LIMITED_MESSAGE,
                    error="rate_limited",
                    status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                )
            if response.status_code == status.HTTP_402_PAYMENT_REQUIRED:
                raise UpstreamError(
                    CREDITS_REQUIRED_MESSAGE,
                    error="payment_required",
                    status_code=status.HTTP_402_PAYMENT_REQUIRED,
                )
            raise UpstreamError(
                GATEWAY_ERROR_MESSAGE, detail={"status": response.status_code}
            )

        async def relay() -> AsyncIterator[bytes]:
            try:
                async for chunk in response.aiter_raw():
                    yield chunk
            finally:
                await response.aclose()
                await client.aclose()

        return relay()


_completion_client: CompletionClient | None = None


def get_completion_client() -> CompletionClient:
    """Get or create the completion client singleton."""
    global _completion_client
    if _completion_client is None:
        _completion_client = CompletionClient()
    return _completion_client


__all__ = [
    "CompletionClient",
    "get_completion_client",
    "build_messages",
    "first_message_content",
    "completion_payload",
    "error_message",
    "OPENAI_CHAT_URL",
    "LANGCHAIN_CHAT_URL",
    "AGENT_MODEL",
    "RATE_LIMITED_MESSAGE",
    "CREDITS_REQUIRED_MESSAGE",
    "GATEWAY_ERROR_MESSAGE",
]
