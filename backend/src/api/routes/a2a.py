"""Agent-to-agent messaging and workflow routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Response, status

from ...models.a2a import (
    A2AMessage,
    A2AMessageCreate,
    A2AMessageResponse,
    A2AWorkflow,
    A2AWorkflowCreate,
    A2AWorkflowRunResponse,
    A2AWorkflowUpdate,
)
from ...services.a2a_service import A2AService, get_a2a_service
from ..middleware import AuthContext, get_auth_context

router = APIRouter()


@router.post("/api/a2a/messages", response_model=A2AMessageResponse)
async def send_message(
    data: A2AMessageCreate,
    auth: AuthContext = Depends(get_auth_context),
    a2a: A2AService = Depends(get_a2a_service),
):
    """Deliver a message and return the receiving agent's reply."""
    return await a2a.send_message(auth.user_id, data)


@router.get("/api/a2a/messages", response_model=list[A2AMessage])
async def list_messages(
    limit: int = Query(100, ge=1, le=500),
    auth: AuthContext = Depends(get_auth_context),
    a2a: A2AService = Depends(get_a2a_service),
):
    return a2a.list_messages(auth.user_id, limit=limit)


@router.get("/api/a2a/workflows", response_model=list[A2AWorkflow])
async def list_workflows(
    auth: AuthContext = Depends(get_auth_context),
    a2a: A2AService = Depends(get_a2a_service),
):
    return a2a.list_workflows(auth.user_id)


@router.post("/api/a2a/workflows", response_model=A2AWorkflow, status_code=201)
async def create_workflow(
    data: A2AWorkflowCreate,
    auth: AuthContext = Depends(get_auth_context),
    a2a: A2AService = Depends(get_a2a_service),
):
    return a2a.create_workflow(auth.user_id, data)


@router.get("/api/a2a/workflows/{workflow_id}", response_model=A2AWorkflow)
async def get_workflow(
    workflow_id: str,
    auth: AuthContext = Depends(get_auth_context),
    a2a: A2AService = Depends(get_a2a_service),
):
    return a2a.get_workflow(auth.user_id, workflow_id)


@router.patch("/api/a2a/workflows/{workflow_id}", response_model=A2AWorkflow)
async def update_workflow(
    workflow_id: str,
    data: A2AWorkflowUpdate,
    auth: AuthContext = Depends(get_auth_context),
    a2a: A2AService = Depends(get_a2a_service),
):
    return a2a.update_workflow(auth.user_id, workflow_id, data)


@router.delete("/api/a2a/workflows/{workflow_id}", status_code=204)
async def delete_workflow(
    workflow_id: str,
    auth: AuthContext = Depends(get_auth_context),
    a2a: A2AService = Depends(get_a2a_service),
):
    a2a.delete_workflow(auth.user_id, workflow_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/api/a2a/workflows/{workflow_id}/execute", response_model=A2AWorkflowRunResponse
)
async def execute_workflow(
    workflow_id: str,
    auth: AuthContext = Depends(get_auth_context),
    a2a: A2AService = Depends(get_a2a_service),
):
    return await a2a.execute_workflow(auth.user_id, workflow_id)


__all__ = ["router"]
