"""MCP server registry, connection and tool execution routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Response, status

from ...models.mcp import (
    GoogleProxyRequest,
    GoogleProxyResponse,
    MCPConnectResponse,
    MCPDisconnectResponse,
    MCPServer,
    MCPServerCreate,
    MCPServerUpdate,
    MCPToolRequest,
    MCPToolResponse,
)
from ...services.google_proxy import GoogleProxyService, get_google_proxy_service
from ...services.mcp_service import MCPService, get_mcp_service
from ..middleware import AuthContext, get_auth_context

router = APIRouter()


@router.get("/api/mcp/servers", response_model=list[MCPServer])
async def list_servers(
    auth: AuthContext = Depends(get_auth_context),
    mcp: MCPService = Depends(get_mcp_service),
):
    return mcp.list_servers(auth.user_id)


@router.post("/api/mcp/servers", response_model=MCPServer, status_code=201)
async def create_server(
    data: MCPServerCreate,
    auth: AuthContext = Depends(get_auth_context),
    mcp: MCPService = Depends(get_mcp_service),
):
    return mcp.create_server(auth.user_id, data)


@router.get("/api/mcp/servers/{server_id}", response_model=MCPServer)
async def get_server(
    server_id: str,
    auth: AuthContext = Depends(get_auth_context),
    mcp: MCPService = Depends(get_mcp_service),
):
    return mcp.get_server(auth.user_id, server_id)


@router.patch("/api/mcp/servers/{server_id}", response_model=MCPServer)
async def update_server(
    server_id: str,
    data: MCPServerUpdate,
    auth: AuthContext = Depends(get_auth_context),
    mcp: MCPService = Depends(get_mcp_service),
):
    return mcp.update_server(auth.user_id, server_id, data)


@router.delete("/api/mcp/servers/{server_id}", status_code=204)
async def delete_server(
    server_id: str,
    auth: AuthContext = Depends(get_auth_context),
    mcp: MCPService = Depends(get_mcp_service),
):
    mcp.delete_server(auth.user_id, server_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/api/mcp/servers/{server_id}/connect", response_model=MCPConnectResponse)
async def connect_server(
    server_id: str,
    auth: AuthContext = Depends(get_auth_context),
    mcp: MCPService = Depends(get_mcp_service),
):
    """Probe the server endpoint and store its resources and tools."""
    return await mcp.connect(auth.user_id, server_id)


@router.post(
    "/api/mcp/servers/{server_id}/disconnect", response_model=MCPDisconnectResponse
)
async def disconnect_server(
    server_id: str,
    auth: AuthContext = Depends(get_auth_context),
    mcp: MCPService = Depends(get_mcp_service),
):
    return mcp.disconnect(auth.user_id, server_id)


@router.post("/api/mcp/servers/{server_id}/tools/execute", response_model=MCPToolResponse)
async def execute_tool(
    server_id: str,
    request: MCPToolRequest,
    auth: AuthContext = Depends(get_auth_context),
    mcp: MCPService = Depends(get_mcp_service),
):
    return await mcp.execute_tool(auth.user_id, server_id, request)


@router.post("/api/google/proxy", response_model=GoogleProxyResponse)
async def google_proxy(
    request: GoogleProxyRequest,
    auth: AuthContext = Depends(get_auth_context),
    google: GoogleProxyService = Depends(get_google_proxy_service),
):
    """Call a Google API through the built-in proxy."""
    return await google.call(auth.user_id, request)


__all__ = ["router"]
