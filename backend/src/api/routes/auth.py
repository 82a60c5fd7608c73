"""Token issuance and the caller's own profile."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends

from ...models.auth import TokenResponse
from ...models.profile import Profile, ProfileUpdate
from ...services.profile_service import ProfileService, get_profile_service
from ..middleware import AuthContext, get_auth_context, get_auth_service

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/api/tokens", response_model=TokenResponse)
async def create_api_token(auth: AuthContext = Depends(get_auth_context)):
    """Issue a new JWT for the authenticated user."""
    token, expires_at = get_auth_service().issue_token_response(auth.user_id)
    logger.info("Issued API token", extra={"user_id": auth.user_id})
    return TokenResponse(token=token, token_type="bearer", expires_at=expires_at)


@router.get("/api/me", response_model=Profile)
async def get_current_profile(
    auth: AuthContext = Depends(get_auth_context),
    profiles: ProfileService = Depends(get_profile_service),
):
    """Return the caller's profile, creating it on first access."""
    return profiles.get_profile(auth.user_id)


@router.patch("/api/me", response_model=Profile)
async def update_current_profile(
    update: ProfileUpdate,
    auth: AuthContext = Depends(get_auth_context),
    profiles: ProfileService = Depends(get_profile_service),
):
    return profiles.update_profile(auth.user_id, update)


__all__ = ["router"]
