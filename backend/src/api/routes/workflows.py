"""Workflow CRUD and execution."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Response, status

from ...models.workflow import (
    Workflow,
    WorkflowCreate,
    WorkflowExecutionResponse,
    WorkflowUpdate,
)
from ...services.workflow_service import WorkflowService, get_workflow_service
from ..middleware import AuthContext, get_auth_context

router = APIRouter()


@router.get("/api/workflows", response_model=list[Workflow])
async def list_workflows(
    auth: AuthContext = Depends(get_auth_context),
    workflows: WorkflowService = Depends(get_workflow_service),
):
    return workflows.list_workflows(auth.user_id)


@router.post("/api/workflows", response_model=Workflow, status_code=201)
async def create_workflow(
    data: WorkflowCreate,
    auth: AuthContext = Depends(get_auth_context),
    workflows: WorkflowService = Depends(get_workflow_service),
):
    return workflows.create_workflow(auth.user_id, data)


@router.get("/api/workflows/{workflow_id}", response_model=Workflow)
async def get_workflow(
    workflow_id: str,
    auth: AuthContext = Depends(get_auth_context),
    workflows: WorkflowService = Depends(get_workflow_service),
):
    return workflows.get_workflow(auth.user_id, workflow_id)


@router.patch("/api/workflows/{workflow_id}", response_model=Workflow)
async def update_workflow(
    workflow_id: str,
    data: WorkflowUpdate,
    auth: AuthContext = Depends(get_auth_context),
    workflows: WorkflowService = Depends(get_workflow_service),
):
    return workflows.update_workflow(auth.user_id, workflow_id, data)


@router.delete("/api/workflows/{workflow_id}", status_code=204)
async def delete_workflow(
    workflow_id: str,
    auth: AuthContext = Depends(get_auth_context),
    workflows: WorkflowService = Depends(get_workflow_service),
):
    workflows.delete_workflow(auth.user_id, workflow_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/api/workflows/{workflow_id}/toggle", response_model=Workflow)
async def toggle_workflow(
    workflow_id: str,
    auth: AuthContext = Depends(get_auth_context),
    workflows: WorkflowService = Depends(get_workflow_service),
):
    return workflows.toggle_workflow(auth.user_id, workflow_id)


@router.post("/api/workflows/{workflow_id}/execute", response_model=WorkflowExecutionResponse)
async def execute_workflow(
    workflow_id: str,
    auth: AuthContext = Depends(get_auth_context),
    workflows: WorkflowService = Depends(get_workflow_service),
):
    """Run the workflow's configured steps in order."""
    return await workflows.execute_workflow(auth.user_id, workflow_id)


__all__ = ["router"]
