"""Role selection during onboarding."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from ...models.profile import RoleAssignmentResponse, RoleRequest, RoleStatus
from ...services.role_service import RoleService, get_role_service
from ..middleware import AuthContext, get_auth_context

router = APIRouter()


@router.post("/api/roles/initial", response_model=RoleAssignmentResponse)
async def select_initial_role(
    request: RoleRequest,
    auth: AuthContext = Depends(get_auth_context),
    roles: RoleService = Depends(get_role_service),
):
    """Pick a role while onboarding; rejected once onboarding is complete."""
    return roles.select_initial_role(auth.user_id, request.role)


@router.post("/api/roles/assign", response_model=RoleAssignmentResponse)
async def assign_role(
    request: RoleRequest,
    auth: AuthContext = Depends(get_auth_context),
    roles: RoleService = Depends(get_role_service),
):
    return roles.assign_role(auth.user_id, request.role)


@router.put("/api/roles", response_model=RoleAssignmentResponse)
async def set_role(
    request: RoleRequest,
    auth: AuthContext = Depends(get_auth_context),
    roles: RoleService = Depends(get_role_service),
):
    """Replace the caller's role regardless of onboarding state."""
    return roles.set_role(auth.user_id, request.role)


@router.get("/api/roles/me", response_model=RoleStatus)
async def get_my_role(
    auth: AuthContext = Depends(get_auth_context),
    roles: RoleService = Depends(get_role_service),
):
    return roles.get_role(auth.user_id)


__all__ = ["router"]
