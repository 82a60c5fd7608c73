"""External integration CRUD."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Response, status

from ...models.integration import Integration, IntegrationCreate, IntegrationUpdate
from ...services.integration_service import IntegrationService, get_integration_service
from ..middleware import AuthContext, get_auth_context

router = APIRouter()


@router.get("/api/integrations", response_model=list[Integration])
async def list_integrations(
    auth: AuthContext = Depends(get_auth_context),
    integrations: IntegrationService = Depends(get_integration_service),
):
    return integrations.list_integrations(auth.user_id)


@router.post("/api/integrations", response_model=Integration, status_code=201)
async def create_integration(
    data: IntegrationCreate,
    auth: AuthContext = Depends(get_auth_context),
    integrations: IntegrationService = Depends(get_integration_service),
):
    return integrations.create_integration(auth.user_id, data)


@router.get("/api/integrations/{integration_id}", response_model=Integration)
async def get_integration(
    integration_id: str,
    auth: AuthContext = Depends(get_auth_context),
    integrations: IntegrationService = Depends(get_integration_service),
):
    return integrations.get_integration(auth.user_id, integration_id)


@router.patch("/api/integrations/{integration_id}", response_model=Integration)
async def update_integration(
    integration_id: str,
    data: IntegrationUpdate,
    auth: AuthContext = Depends(get_auth_context),
    integrations: IntegrationService = Depends(get_integration_service),
):
    return integrations.update_integration(auth.user_id, integration_id, data)


@router.delete("/api/integrations/{integration_id}", status_code=204)
async def delete_integration(
    integration_id: str,
    auth: AuthContext = Depends(get_auth_context),
    integrations: IntegrationService = Depends(get_integration_service),
):
    integrations.delete_integration(auth.user_id, integration_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/api/integrations/{integration_id}/toggle", response_model=Integration)
async def toggle_integration(
    integration_id: str,
    auth: AuthContext = Depends(get_auth_context),
    integrations: IntegrationService = Depends(get_integration_service),
):
    return integrations.toggle_integration(auth.user_id, integration_id)


__all__ = ["router"]
