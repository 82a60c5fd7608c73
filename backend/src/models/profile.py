"""Profile and role models."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class UserRole(str, Enum):
    """Roles a user can pick during onboarding."""

    TRADER = "trader"
    STUDENT = "student"
    FOUNDER = "founder"


class Profile(BaseModel):
    """Per-user profile row."""

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "id": "0f8fad5b-d9cb-469f-a165-70867728950e",
                "user_id": "alice",
                "email": "alice@example.com",
                "full_name": "Alice Smith",
                "avatar_url": None,
                "role": "founder",
                "onboarding_completed": True,
                "created_at": "2025-01-15T10:30:00Z",
                "updated_at": "2025-01-15T10:31:00Z",
            }
        }
    )

    id: str
    user_id: str
    email: Optional[str] = None
    full_name: Optional[str] = None
    avatar_url: Optional[str] = None
    role: Optional[UserRole] = None
    onboarding_completed: bool = False
    created_at: datetime
    updated_at: datetime


class ProfileUpdate(BaseModel):
    """Editable profile fields."""

    email: Optional[str] = Field(None, max_length=320)
    full_name: Optional[str] = Field(None, max_length=200)
    avatar_url: Optional[str] = Field(None, max_length=2048)


class RoleRequest(BaseModel):
    """Role selection payload.

    ``role`` is a plain string so an unknown value reaches the service and is
    rejected with the onboarding error message rather than a schema error.
    """

    role: str = Field(..., description="One of trader, student, founder")


class RoleAssignmentResponse(BaseModel):
    success: bool = True
    role: UserRole
    message: str


class RoleStatus(BaseModel):
    """Current role and onboarding state for a user."""

    user_id: str
    role: Optional[UserRole] = None
    onboarding_completed: bool = False


__all__ = [
    "UserRole",
    "Profile",
    "ProfileUpdate",
    "RoleRequest",
    "RoleAssignmentResponse",
    "RoleStatus",
]
