"""Role assignment and the onboarding guard.

A user holds at most one role. During onboarding the user may pick a role
once; after ``onboarding_completed`` is set only ``set_role`` (the
administrative path) can change it.
"""

from __future__ import annotations

import logging

from ..models.profile import RoleAssignmentResponse, RoleStatus, UserRole
from .database import DatabaseService, new_id, utc_now
from .errors import InvalidRequestError
from .profile_service import ensure_profile_row

logger = logging.getLogger(__name__)

INVALID_ROLE_MESSAGE = "Invalid role. Must be student, trader, or founder"
ROLE_LOCKED_MESSAGE = "Role already assigned. Contact support to change your role."


def parse_role(value: str) -> UserRole:
    """Map a raw role string onto ``UserRole`` or raise a 400."""
    try:
        return UserRole(value)
    except ValueError as exc:
        raise InvalidRequestError(
            INVALID_ROLE_MESSAGE, error="invalid_role", detail={"role": value}
        ) from exc


class RoleService:
    """Single policy behind the initial-role, assign-role and set-role paths."""

    def __init__(self, db_service: DatabaseService | None = None):
        self._db = db_service or DatabaseService()

    def select_initial_role(self, user_id: str, role: str) -> RoleAssignmentResponse:
        """Pick a role during onboarding; rejected once onboarding is complete."""
        return self._assign(user_id, parse_role(role), guarded=True)

    def assign_role(self, user_id: str, role: str) -> RoleAssignmentResponse:
        return self._assign(user_id, parse_role(role), guarded=True)

    def set_role(self, user_id: str, role: str) -> RoleAssignmentResponse:
        """Replace the user's role without the onboarding guard."""
        return self._assign(user_id, parse_role(role), guarded=False)

    def get_role(self, user_id: str) -> RoleStatus:
        conn = self._db.connect()
        try:
            with conn:
                profile = ensure_profile_row(conn, user_id)
            row = conn.execute(
                "SELECT role FROM user_roles WHERE user_id = ?", (user_id,)
            ).fetchone()
        finally:
            conn.close()
        return RoleStatus(
            user_id=user_id,
            role=row["role"] if row else None,
            onboarding_completed=profile["onboarding_completed"],
        )

    def _assign(
        self, user_id: str, role: UserRole, *, guarded: bool
    ) -> RoleAssignmentResponse:
        conn = self._db.connect()
        try:
            with conn:
                profile = ensure_profile_row(conn, user_id)
                if guarded and profile["onboarding_completed"]:
                    logger.warning(
                        "Rejected role change after onboarding",
                        extra={"user_id": user_id, "role": role.value},
                    )
                    raise InvalidRequestError(ROLE_LOCKED_MESSAGE, error="role_locked")

                now = utc_now()
                conn.execute("DELETE FROM user_roles WHERE user_id = ?", (user_id,))
                conn.execute(
                    """
                    INSERT INTO user_roles (id, user_id, role, assigned_by, created_at)
                    VALUES (?, ?, ?, ?, ?)
                    """,
                    (new_id(), user_id, role.value, user_id, now),
                )
                conn.execute(
                    """
                    UPDATE profiles
                    SET onboarding_completed = 1, role = ?, updated_at = ?
                    WHERE user_id = ?
                    """,
                    (role.value, now, user_id),
                )
        finally:
            conn.close()

        logger.info(
            "Assigned role",
            extra={"user_id": user_id, "role": role.value, "guarded": guarded},
        )
        return RoleAssignmentResponse(
            success=True,
            role=role,
            message=f"Role {role.value} assigned successfully",
        )


_role_service: RoleService | None = None


def get_role_service() -> RoleService:
    """Get or create the role service singleton."""
    global _role_service
    if _role_service is None:
        _role_service = RoleService()
    return _role_service


__all__ = [
    "RoleService",
    "get_role_service",
    "parse_role",
    "INVALID_ROLE_MESSAGE",
    "ROLE_LOCKED_MESSAGE",
]
