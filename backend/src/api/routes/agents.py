"""Agent creation and chat routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Response, status

from ...models.agent import (
    Agent,
    AgentChatRequest,
    AgentChatResponse,
    AgentCreate,
    AgentCreateResponse,
)
from ...services.agent_service import AgentService, get_agent_service
from ..middleware import AuthContext, get_auth_context

router = APIRouter()


@router.post("/api/agents", response_model=AgentCreateResponse, status_code=201)
async def create_agent(
    data: AgentCreate,
    auth: AuthContext = Depends(get_auth_context),
    agents: AgentService = Depends(get_agent_service),
):
    """Create an agent and activate it for the caller."""
    return agents.create_agent(auth.user_id, data)


@router.get("/api/agents", response_model=list[Agent])
async def list_agents(
    auth: AuthContext = Depends(get_auth_context),
    agents: AgentService = Depends(get_agent_service),
):
    return agents.list_agents(auth.user_id)


@router.get("/api/agents/{agent_id}", response_model=Agent)
async def get_agent(
    agent_id: str,
    auth: AuthContext = Depends(get_auth_context),
    agents: AgentService = Depends(get_agent_service),
):
    return agents.get_agent(agent_id)


@router.delete("/api/agents/{agent_id}", status_code=204)
async def deactivate_agent(
    agent_id: str,
    auth: AuthContext = Depends(get_auth_context),
    agents: AgentService = Depends(get_agent_service),
):
    agents.deactivate_agent(auth.user_id, agent_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/api/agents/{agent_id}/chat", response_model=AgentChatResponse)
async def chat_with_agent(
    agent_id: str,
    request: AgentChatRequest,
    auth: AuthContext = Depends(get_auth_context),
    agents: AgentService = Depends(get_agent_service),
):
    return await agents.chat(auth.user_id, agent_id, request.message, request.document_id)


__all__ = ["router"]
