"""Outbound HTTP calls described by workflow steps."""

from __future__ import annotations

import logging
from typing import Any, Dict

import httpx

logger = logging.getLogger(__name__)


def response_payload(response: httpx.Response) -> Any:
    """JSON body when there is one, else the raw text."""
    try:
        return response.json()
    except ValueError:
        return response.text


async def call_step_endpoint(
    step: Dict[str, Any],
    *,
    transport: httpx.AsyncBaseTransport | None = None,
    timeout: float = 30.0,
) -> httpx.Response:
    """Send ``step["method"]`` to ``step["url"]`` with optional headers and JSON body.

    Transport errors propagate as ``httpx.HTTPError``.
    """
    method = str(step["method"]).upper()
    logger.info(f"Calling external API: {method} {step['url']}")
    async with httpx.AsyncClient(timeout=timeout, transport=transport) as client:
        return await client.request(
            method,
            step["url"],
            headers=step.get("headers") or {},
            json=step["body"] if step.get("body") is not None else None,
        )


__all__ = ["call_step_endpoint", "response_payload"]
