"""MCP server registry and tool execution.

The application is an MCP *client*: it probes registered endpoints for their
capabilities and forwards tool calls as JSON-RPC 2.0 ``tools/call`` requests.
Two built-in servers are answered in-process: the Google API proxy and a
Brave search demo.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Tuple

import httpx

from ..models.mcp import (
    GoogleProxyRequest,
    MCPConnectResponse,
    MCPDisconnectResponse,
    MCPServer,
    MCPServerCreate,
    MCPServerStatus,
    MCPServerUpdate,
    MCPToolRequest,
    MCPToolResponse,
)
from .database import DatabaseService, new_id, utc_now
from .errors import InvalidRequestError, ServiceError, UpstreamError
from .google_proxy import GoogleProxyService
from .interaction_service import InteractionService
from .repository import UserScopedTable

logger = logging.getLogger(__name__)

CONNECT_TIMEOUT_SECONDS = 5.0
TOOL_CALL_TIMEOUT_SECONDS = 10.0
GOOGLE_PROXY_ENDPOINT = "google-mcp-proxy"
BRAVE_DEMO_ENDPOINT = "brave-search-api"


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def sample_capabilities(endpoint: str) -> Tuple[List[Dict[str, Any]], List[Dict[str, Any]]]:
    """Placeholder capabilities for endpoints that answer without JSON."""
    resources = [
        {
            "uri": f"{endpoint}/resource1",
            "name": "Sample Resource",
            "description": "A sample MCP resource",
            "mimeType": "application/json",
        }
    ]
    tools = [
        {
            "name": "sample_tool",
            "description": "A sample MCP tool",
            "inputSchema": {"type": "object", "properties": {"input": {"type": "string"}}},
        }
    ]
    return resources, tools


def _as_list(value: Any) -> List[Any]:
    return value if isinstance(value, list) else []


def is_google_proxy(server: Dict[str, Any]) -> bool:
    return "google" in server["name"].lower() and server["endpoint"] == GOOGLE_PROXY_ENDPOINT


def is_brave_demo(server: Dict[str, Any]) -> bool:
    return "brave" in server["name"].lower() and server["endpoint"] in (
        BRAVE_DEMO_ENDPOINT,
        "",
        None,
    )


def is_live_server(server: Dict[str, Any]) -> bool:
    return (
        bool(server["endpoint"])
        and server["endpoint"] != "demo"
        and server["status"] == MCPServerStatus.CONNECTED.value
    )


class MCPService:
    """CRUD for ``mcp_servers`` plus connect, disconnect and tool execution."""

    def __init__(
        self,
        db_service: DatabaseService | None = None,
        *,
        google_proxy: GoogleProxyService | None = None,
        interactions: InteractionService | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._db = db_service or DatabaseService()
        self.interactions = interactions or InteractionService(self._db)
        self.google_proxy = google_proxy or GoogleProxyService(
            interactions=self.interactions
        )
        self._transport = transport
        self.table = UserScopedTable(
            self._db,
            "mcp_servers",
            label="MCP server",
            not_found_message="MCP server not found or access denied",
        )

    def _client(self, timeout: float) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=timeout, transport=self._transport)

    def list_servers(self, user_id: str) -> List[MCPServer]:
        return [MCPServer(**row) for row in self.table.list(user_id)]

    def get_server(self, user_id: str, server_id: str) -> MCPServer:
        return MCPServer(**self.table.get(user_id, server_id))

    def create_server(self, user_id: str, data: MCPServerCreate) -> MCPServer:
        values = data.model_dump()
        values.update(
            status=MCPServerStatus.DISCONNECTED.value, resources=[], tools=[]
        )
        return MCPServer(**self.table.insert(user_id, values))

    def update_server(
        self, user_id: str, server_id: str, data: MCPServerUpdate
    ) -> MCPServer:
        changes = data.model_dump(exclude_unset=True)
        return MCPServer(**self.table.update(user_id, server_id, changes))

    def delete_server(self, user_id: str, server_id: str) -> None:
        self.table.delete(user_id, server_id)

    async def _probe(self, endpoint: str) -> Tuple[List[Any], List[Any]]:
        if not endpoint:
            raise InvalidRequestError("Server has no endpoint configured")
        async with self._client(CONNECT_TIMEOUT_SECONDS) as client:
            response = await client.get(
                endpoint, headers={"Content-Type": "application/json"}
            )
        if not response.is_success:
            raise UpstreamError(f"Server responded with status: {response.status_code}")
        try:
            info = response.json()
        except ValueError:
            return sample_capabilities(endpoint)
        if not isinstance(info, dict):
            return [], []
        return _as_list(info.get("resources")), _as_list(info.get("tools"))

    async def connect(self, user_id: str, server_id: str) -> MCPConnectResponse:
        """Probe the endpoint and store its advertised resources and tools."""
        server = self.table.get(user_id, server_id)
        logger.info(f"Connecting to MCP server: {server['name']} at {server['endpoint']}")
        try:
            resources, tools = await self._probe(server["endpoint"])
        except (ServiceError, httpx.HTTPError, httpx.InvalidURL) as exc:
            reason = exc.message if isinstance(exc, ServiceError) else str(exc)
            logger.error(f"Failed to connect to MCP server {server['name']}: {reason}")
            self.table.update(
                user_id,
                server_id,
                {"status": MCPServerStatus.FAILED.value, "resources": [], "tools": []},
            )
            raise UpstreamError(
                f"Connection failed: {reason}", detail={"server_id": server_id}
            ) from exc

        self.table.update(
            user_id,
            server_id,
            {
                "status": MCPServerStatus.CONNECTED.value,
                "resources": resources,
                "tools": tools,
                "last_connected_at": utc_now(),
            },
        )
        logger.info(f"Successfully connected to MCP server: {server['name']}")
        return MCPConnectResponse(
            success=True,
            server_name=server["name"],
            status=MCPServerStatus.CONNECTED,
            resources=resources,
            tools=tools,
            connected_at=datetime.now(timezone.utc),
        )

    def disconnect(self, user_id: str, server_id: str) -> MCPDisconnectResponse:
        server = self.table.get(user_id, server_id)
        self.table.update(
            user_id,
            server_id,
            {"status": MCPServerStatus.DISCONNECTED.value, "resources": [], "tools": []},
        )
        logger.info(f"Disconnected MCP server: {server['name']}")
        return MCPDisconnectResponse(
            success=True,
            server_name=server["name"],
            status=MCPServerStatus.DISCONNECTED,
            disconnected_at=datetime.now(timezone.utc),
        )

    async def _google_result(
        self, user_id: str, server: Dict[str, Any], tool_name: str, parameters: Dict[str, Any]
    ) -> Dict[str, Any]:
        request = GoogleProxyRequest(
            service=parameters.get("service") or "search",
            method=parameters.get("method") or "search",
            endpoint=parameters.get("endpoint") or "",
            parameters=parameters,
        )
        try:
            proxied = await self.google_proxy.call(user_id, request)
        except ServiceError as exc:
            raise UpstreamError(
                f"Google proxy error: {exc.message}", status_code=exc.status_code
            ) from exc
        return {
            "success": True,
            "data": proxied.data,
            "execution_time": _now_iso(),
            "server_name": server["name"],
            "tool_name": tool_name,
            "demo_execution": True,
        }

    def _brave_result(
        self, server: Dict[str, Any], tool_name: str, parameters: Dict[str, Any]
    ) -> Dict[str, Any]:
        query = parameters.get("query") or parameters.get("q") or "demo search"
        return {
            "success": True,
            "data": {
                "web": {
                    "results": [
                        {
                            "title": f"Search results for: {query}",
                            "url": "https://example.com",
                            "description": "This is a demo search result from Brave Search API integration.",
                            "age": "2024-01-01T00:00:00Z",
                        },
                        {
                            "title": f"Related to: {query}",
                            "url": "https://demo.com",
                            "description": "Another demo result showing Brave Search API working correctly.",
                            "age": "2024-01-01T00:00:00Z",
                        },
                    ]
                },
                "query": query,
                "result_count": 2,
            },
            "execution_time": _now_iso(),
            "server_name": server["name"],
            "tool_name": tool_name,
            "demo_execution": True,
        }

    async def _live_result(
        self, server: Dict[str, Any], tool_name: str, parameters: Dict[str, Any]
    ) -> Dict[str, Any]:
        available = [
            tool.get("name") for tool in (server["tools"] or []) if isinstance(tool, dict)
        ]
        if tool_name not in available:
            raise InvalidRequestError(
                f"Tool '{tool_name}' not available on server '{server['name']}'. "
                f"Available tools: {', '.join(str(name) for name in available)}",
                detail={"available_tools": available},
            )

        rpc_request = {
            "jsonrpc": "2.0",
            "id": new_id(),
            "method": "tools/call",
            "params": {"name": tool_name, "arguments": parameters},
        }
        failure = f"Cannot execute tool on MCP server '{server['name']}'"
        try:
            async with self._client(TOOL_CALL_TIMEOUT_SECONDS) as client:
                response = await client.post(
                    server["endpoint"],
                    json=rpc_request,
                    headers={"Accept": "application/json"},
                )
        except httpx.HTTPError as exc:
            raise UpstreamError(f"{failure}: {exc}") from exc

        if not response.is_success:
            raise UpstreamError(
                f"{failure}: MCP server responded with status "
                f"{response.status_code}: {response.reason_phrase}"
            )
        try:
            rpc_response = response.json()
        except ValueError as exc:
            raise UpstreamError(f"{failure}: invalid JSON-RPC response") from exc
        if not isinstance(rpc_response, dict):
            raise UpstreamError(f"{failure}: invalid JSON-RPC response")
        if rpc_response.get("error"):
            error = rpc_response["error"]
            message = error.get("message") if isinstance(error, dict) else None
            raise UpstreamError(f"{failure}: MCP server error: {message or 'Unknown error'}")

        return {
            "success": True,
            "data": rpc_response.get("result"),
            "server_response": rpc_response,
            "execution_time": _now_iso(),
            "server_endpoint": server["endpoint"],
            "tool_name": tool_name,
            "real_execution": True,
        }

    def _demo_result(
        self, server: Dict[str, Any], tool_name: str, parameters: Dict[str, Any]
    ) -> Dict[str, Any]:
        return {
            "success": True,
            "data": {
                "message": f"Demo execution of {tool_name} on {server['name']}",
                "parameters": parameters,
                "demo_result": (
                    f"This is a simulated result from {tool_name}. In a real "
                    "implementation, this would return actual data from the MCP server."
                ),
                "execution_time": _now_iso(),
            },
            "demo_execution": True,
            "server_name": server["name"],
            "tool_name": tool_name,
        }

    async def execute_tool(
        self, user_id: str, server_id: str, request: MCPToolRequest
    ) -> MCPToolResponse:
        server = self.table.get(user_id, server_id)
        tool_name, parameters = request.tool_name, request.parameters
        logger.info(
            f"Executing MCP tool: {tool_name} on server: {server['name']} "
            f"(status: {server['status']})"
        )

        if is_google_proxy(server):
            result = await self._google_result(user_id, server, tool_name, parameters)
        elif is_brave_demo(server):
            result = self._brave_result(server, tool_name, parameters)
        elif is_live_server(server):
            result = await self._live_result(server, tool_name, parameters)
        else:
            result = self._demo_result(server, tool_name, parameters)

        self.interactions.log(
            user_id,
            f"MCP Tool: {tool_name} on {server['name']}",
            _result_text(result),
            metadata={
                "mcp_server_id": server_id,
                "mcp_server_name": server["name"],
                "tool_name": tool_name,
                "parameters": parameters,
                "execution_type": "mcp_tool",
            },
        )
        return MCPToolResponse(
            success=True,
            server_name=server["name"],
            tool_name=tool_name,
            parameters=parameters,
            result=result,
            executed_at=datetime.now(timezone.utc),
        )


def _result_text(result: Dict[str, Any]) -> str:
    return json.dumps(result, default=str)


_mcp_service: MCPService | None = None


def get_mcp_service() -> MCPService:
    """Get or create the MCP service singleton."""
    global _mcp_service
    if _mcp_service is None:
        _mcp_service = MCPService()
    return _mcp_service


__all__ = [
    "MCPService",
    "get_mcp_service",
    "sample_capabilities",
    "is_google_proxy",
    "is_brave_demo",
    "is_live_server",
]
