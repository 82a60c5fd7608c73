"""MCP server and Google proxy models."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class MCPServerStatus(str, Enum):
    CONNECTED = "connected"
    DISCONNECTED = "disconnected"
    FAILED = "failed"


class MCPServer(BaseModel):
    """Registered MCP server and its last known capabilities."""

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "id": "5d0f3f0e-6a55-4b8e-8f3e-b7a5a3c5b0a1",
                "user_id": "alice",
                "name": "Team tools",
                "endpoint": "https://mcp.example.com/rpc",
                "status": "connected",
                "resources": [],
                "tools": [{"name": "lookup", "description": "Lookup a record"}],
                "last_connected_at": "2025-01-15T10:30:00Z",
                "created_at": "2025-01-15T10:00:00Z",
                "updated_at": "2025-01-15T10:30:00Z",
            }
        }
    )

    id: str
    user_id: str
    name: str
    endpoint: str = ""
    status: MCPServerStatus = MCPServerStatus.DISCONNECTED
    resources: List[Dict[str, Any]] = Field(default_factory=list)
    tools: List[Dict[str, Any]] = Field(default_factory=list)
    last_connected_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime


class MCPServerCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    endpoint: str = Field("", max_length=2048)


class MCPServerUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    endpoint: Optional[str] = Field(None, max_length=2048)


class MCPConnectResponse(BaseModel):
    success: bool = True
    server_name: str
    status: MCPServerStatus
    resources: List[Dict[str, Any]] = Field(default_factory=list)
    tools: List[Dict[str, Any]] = Field(default_factory=list)
    connected_at: datetime


class MCPDisconnectResponse(BaseModel):
    success: bool = True
    server_name: str
    status: MCPServerStatus = MCPServerStatus.DISCONNECTED
    disconnected_at: datetime


class MCPToolRequest(BaseModel):
    tool_name: str = Field(..., min_length=1, max_length=200)
    parameters: Dict[str, Any] = Field(default_factory=dict)


class MCPToolResponse(BaseModel):
    success: bool = True
    server_name: str
    tool_name: str
    parameters: Dict[str, Any] = Field(default_factory=dict)
    result: Dict[str, Any]
    executed_at: datetime


class GoogleProxyRequest(BaseModel):
    """Call one of the Google services exposed through the MCP proxy."""

    service: str = Field("search", min_length=1)
    method: str = Field("search", min_length=1)
    endpoint: str = ""
    parameters: Dict[str, Any] = Field(default_factory=dict)


class GoogleProxyResponse(BaseModel):
    success: bool = True
    data: Dict[str, Any]
    timestamp: datetime


__all__ = [
    "MCPServerStatus",
    "MCPServer",
    "MCPServerCreate",
    "MCPServerUpdate",
    "MCPConnectResponse",
    "MCPDisconnectResponse",
    "MCPToolRequest",
    "MCPToolResponse",
    "GoogleProxyRequest",
    "GoogleProxyResponse",
]
