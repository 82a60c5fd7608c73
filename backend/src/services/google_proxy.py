"""Google API proxy used by the built-in Google MCP server.

Only web search calls Google for real (when a Programmable Search Engine id
is configured); the other services answer with demo payloads shaped like the
corresponding Google API responses.
"""

from __future__ import annotations

import json
import logging
import time
from datetime import datetime, timedelta, timezone
from typing import Any, Dict

import httpx

from ..models.mcp import GoogleProxyRequest, GoogleProxyResponse
from .config import AppConfig, get_config
from .errors import ConfigurationError, InvalidRequestError
from .interaction_service import InteractionService

logger = logging.getLogger(__name__)

CUSTOM_SEARCH_URL = "https://www.googleapis.com/customsearch/v1"


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _millis() -> int:
    return int(time.time() * 1000)


def demo_search_results(query: str) -> Dict[str, Any]:
    return {
        "items": [
            {
                "title": f"Search results for: {query}",
                "link": "https://example.com",
                "snippet": (
                    "This is a demo search result. In production, this would "
                    "return real Google search results."
                ),
                "displayLink": "example.com",
            },
            {
                "title": f"Related to: {query}",
                "link": "https://demo.com",
                "snippet": "Another demo result showing Google Search API integration working correctly.",
                "displayLink": "demo.com",
            },
        ],
        "searchInformation": {"totalResults": "2", "searchTime": 0.45},
    }


class GoogleProxyService:
    """Dispatch ``{service, method, parameters}`` to a Google API handler."""

    def __init__(
        self,
        config: AppConfig | None = None,
        *,
        interactions: InteractionService | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float = 15.0,
    ):
        self.config = config or get_config()
        self.interactions = interactions or InteractionService()
        self._transport = transport
        self._timeout = timeout

    async def call(self, user_id: str, request: GoogleProxyRequest) -> GoogleProxyResponse:
        api_key = self.config.google_api_key
        if not api_key:
            raise ConfigurationError("Google API key not configured")

        handlers = {
            "search": self._search,
            "calendar": self._calendar,
            "gmail": self._gmail,
            "docs": self._docs,
            "maps": self._maps,
            "youtube": self._youtube,
        }
        handler = handlers.get(request.service)
        if handler is None:
            raise InvalidRequestError(
                f"Unsupported service: {request.service}",
                detail={"supported": sorted(handlers)},
            )

        logger.info(
            f"Google {request.service} API: {request.method}",
            extra={"user_id": user_id},
        )
        data = await handler(api_key, request.method, request.parameters)

        self.interactions.log(
            user_id,
            f"Google {request.service} API: {request.method}",
            _json_text(data),
            metadata={
                "service": f"google-{request.service}",
                "method": request.method,
                "parameters": request.parameters,
                "execution_type": "google_mcp_proxy",
            },
        )
        return GoogleProxyResponse(
            success=True, data=data, timestamp=datetime.now(timezone.utc)
        )

    async def _search(
        self, api_key: str, method: str, params: Dict[str, Any]
    ) -> Dict[str, Any]:
        query = str(params.get("query") or params.get("q") or "")
        engine_id = self.config.google_search_engine_id
        if not engine_id:
            return demo_search_results(query)

        query_params = {
            "key": api_key,
            "cx": engine_id,
            "q": query,
            "num": str(params.get("num", 10)),
        }
        if params.get("type") == "image":
            query_params["searchType"] = "image"

        try:
            async with httpx.AsyncClient(
                timeout=self._timeout, transport=self._transport
            ) as client:
                response = await client.get(CUSTOM_SEARCH_URL, params=query_params)
        except httpx.HTTPError as exc:
            logger.warning(f"Google search request failed, using demo results: {exc}")
            return demo_search_results(query)

        if not response.is_success:
            logger.warning(
                f"Google search returned {response.status_code}, using demo results"
            )
            return demo_search_results(query)
        return response.json()

    async def _calendar(
        self, api_key: str, method: str, params: Dict[str, Any]
    ) -> Dict[str, Any]:
        if method == "list_events":
            start = datetime.now(timezone.utc)
            return {
                "items": [
                    {
                        "id": "event1",
                        "summary": "Demo Meeting",
                        "start": {"dateTime": start.isoformat()},
                        "end": {"dateTime": (start + timedelta(hours=1)).isoformat()},
                    }
                ]
            }
        if method == "create_event":
            return {
                "id": f"new_event_{_millis()}",
                "summary": params.get("summary") or "New Event",
                "start": {"dateTime": params.get("startTime") or _now_iso()},
                "status": "confirmed",
            }
        raise InvalidRequestError(f"Unsupported calendar method: {method}")

    async def _gmail(
        self, api_key: str, method: str, params: Dict[str, Any]
    ) -> Dict[str, Any]:
        if method == "read_emails":
            return {
                "messages": [
                    {
                        "id": "msg1",
                        "snippet": "This is a demo email message...",
                        "payload": {
                            "headers": [
                                {"name": "Subject", "value": "Demo Email"},
                                {"name": "From", "value": "demo@example.com"},
                            ]
                        },
                    }
                ]
            }
        if method == "send_email":
            return {
                "id": f"sent_{_millis()}",
                "labelIds": ["SENT"],
                "snippet": f"Email sent to {params.get('to')}",
            }
        raise InvalidRequestError(f"Unsupported Gmail method: {method}")

    async def _docs(
        self, api_key: str, method: str, params: Dict[str, Any]
    ) -> Dict[str, Any]:
        if method == "create_doc":
            text = params.get("content") or "Document created via MCP integration"
            return {
                "documentId": f"doc_{_millis()}",
                "title": params.get("title") or "New Document",
                "body": {
                    "content": [
                        {"paragraph": {"elements": [{"textRun": {"content": text}}]}}
                    ]
                },
            }
        if method == "read_doc":
            return {
                "title": "Demo Document",
                "body": {"content": "This is demo content from Google Docs API integration"},
            }
        raise InvalidRequestError(f"Unsupported Docs method: {method}")

    async def _maps(
        self, api_key: str, method: str, params: Dict[str, Any]
    ) -> Dict[str, Any]:
        address = params.get("address")
        if not address:
            return {"results": [], "status": "ZERO_RESULTS"}
        return {
            "results": [
                {
                    "formatted_address": address,
                    "geometry": {
                        "location": {"lat": 37.7749, "lng": -122.4194},
                        "location_type": "APPROXIMATE",
                    },
                    "place_id": "demo_place_id",
                }
            ],
            "status": "OK",
        }

    async def _youtube(
        self, api_key: str, method: str, params: Dict[str, Any]
    ) -> Dict[str, Any]:
        q = params.get("q") or params.get("query") or ""
        published = _now_iso()
        return {
            "items": [
                {
                    "id": {"videoId": "demo_video_1"},
                    "snippet": {
                        "title": f"Video about {q}",
                        "description": f"This is a demo video result for search: {q}",
                        "channelTitle": "Demo Channel",
                        "publishedAt": published,
                    },
                },
                {
                    "id": {"videoId": "demo_video_2"},
                    "snippet": {
                        "title": f"{q} Tutorial",
                        "description": f"Learn about {q} in this tutorial video",
                        "channelTitle": "Education Channel",
                        "publishedAt": published,
                    },
                },
            ],
            "pageInfo": {
                "totalResults": 2,
                "resultsPerPage": params.get("maxResults", 5),
            },
        }


def _json_text(data: Dict[str, Any]) -> str:
    return json.dumps(data, default=str)


_google_proxy_service: GoogleProxyService | None = None


def get_google_proxy_service() -> GoogleProxyService:
    """Get or create the Google proxy service singleton."""
    global _google_proxy_service
    if _google_proxy_service is None:
        _google_proxy_service = GoogleProxyService()
    return _google_proxy_service


__all__ = [
    "GoogleProxyService",
    "get_google_proxy_service",
    "demo_search_results",
    "CUSTOM_SEARCH_URL",
]
