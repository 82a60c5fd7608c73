"""Interaction log route."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from ...models.interaction import AgentInteraction
from ...services.interaction_service import InteractionService, get_interaction_service
from ..middleware import AuthContext, get_auth_context

router = APIRouter()


@router.get("/api/interactions", response_model=list[AgentInteraction])
async def list_interactions(
    limit: int = Query(50, ge=1, le=500),
    auth: AuthContext = Depends(get_auth_context),
    interactions: InteractionService = Depends(get_interaction_service),
):
    """Most recent agent, workflow and tool executions for the caller."""
    return interactions.list_recent(auth.user_id, limit=limit)


__all__ = ["router"]
