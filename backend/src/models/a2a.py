"""Agent-to-agent (A2A) messaging models."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

MAX_MESSAGE_CHARS = 100_000


class MessageType(str, Enum):
    DIRECT = "direct"
    WORKFLOW = "workflow"
    RESPONSE = "response"


class A2AMessage(BaseModel):
    id: str
    user_id: str
    sender_agent_id: str
    receiver_agent_id: str
    content: str
    message_type: Optional[MessageType] = None
    status: Optional[str] = None
    workflow_id: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class A2AMessageCreate(BaseModel):
    sender_agent_id: str = Field(..., min_length=1)
    receiver_agent_id: str = Field(..., min_length=1)
    content: str = Field(..., min_length=1, max_length=MAX_MESSAGE_CHARS)
    message_type: Optional[MessageType] = MessageType.DIRECT


class A2AMessageResponse(BaseModel):
    success: bool = True
    response: str
    message_id: str
    response_message_id: Optional[str] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)


class A2AWorkflow(BaseModel):
    id: str
    user_id: str
    name: str
    description: Optional[str] = None
    agent_ids: List[str] = Field(default_factory=list)
    steps: List[Dict[str, Any]] = Field(default_factory=list)
    is_active: bool = True
    created_at: datetime
    updated_at: datetime


class A2AWorkflowCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=2000)
    agent_ids: List[str] = Field(default_factory=list)
    steps: List[Dict[str, Any]] = Field(default_factory=list)
    is_active: bool = True


class A2AWorkflowUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=2000)
    agent_ids: Optional[List[str]] = None
    steps: Optional[List[Dict[str, Any]]] = None
    is_active: Optional[bool] = None


class A2AWorkflowRunResponse(BaseModel):
    success: bool = True
    workflow_name: str
    steps_executed: int
    results: List[Dict[str, Any]] = Field(default_factory=list)


__all__ = [
    "MAX_MESSAGE_CHARS",
    "MessageType",
    "A2AMessage",
    "A2AMessageCreate",
    "A2AMessageResponse",
    "A2AWorkflow",
    "A2AWorkflowCreate",
    "A2AWorkflowUpdate",
    "A2AWorkflowRunResponse",
]
