"""Agent models."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class Agent(BaseModel):
    id: str
    name: str
    type: str = Field(..., description="Framework: langchain, llamaindex, openai, ...")
    role: str
    description: str
    system_prompt: str
    active: bool = True
    created_at: datetime
    updated_at: datetime


class UserAgent(BaseModel):
    """Activation of an agent for one user, with its build configuration."""

    id: str
    user_id: str
    agent_id: str
    config: Optional[Dict[str, Any]] = None
    activated_at: datetime


class AgentCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1, max_length=2000)
    framework: str = Field("openai", min_length=1, max_length=50)
    role: str = "assistant"
    capabilities: List[str] = Field(default_factory=list)
    rag_enabled: bool = False
    tools: List[str] = Field(default_factory=list)
    system_prompt: str = ""
    model: str = "gpt-4o-mini"
    temperature: float = Field(0.7, ge=0.0, le=2.0)


class CreatedAgent(BaseModel):
    id: str
    name: str
    description: str
    type: str
    active: bool
    user_agent: UserAgent


class AgentCreateResponse(BaseModel):
    success: bool = True
    agent: CreatedAgent
    message: str


class AgentChatRequest(BaseModel):
    message: str = Field(..., min_length=1, max_length=100_000)
    document_id: Optional[str] = None


class AgentChatResponse(BaseModel):
    response: str
    metadata: Dict[str, Any] = Field(default_factory=dict)


__all__ = [
    "Agent",
    "UserAgent",
    "AgentCreate",
    "CreatedAgent",
    "AgentCreateResponse",
    "AgentChatRequest",
    "AgentChatResponse",
]
