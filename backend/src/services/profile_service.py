"""Profile storage; a profile row is created on first access."""

from __future__ import annotations

import logging
import sqlite3
from typing import Any, Dict

from ..models.profile import Profile, ProfileUpdate
from .database import DatabaseService, new_id, row_to_dict, utc_now

logger = logging.getLogger(__name__)


def ensure_profile_row(conn: sqlite3.Connection, user_id: str) -> Dict[str, Any]:
    """Return the user's profile row, inserting a blank one if missing.

    Runs on the caller's connection so it can join an open transaction.
    """
    row = conn.execute(
        "SELECT * FROM profiles WHERE user_id = ?", (user_id,)
    ).fetchone()
    if row is not None:
        return row_to_dict(row)

    now = utc_now()
    conn.execute(
        """
        INSERT INTO profiles (id, user_id, onboarding_completed, created_at, updated_at)
        VALUES (?, ?, 0, ?, ?)
        """,
        (new_id(), user_id, now, now),
    )
    logger.info("Created profile", extra={"user_id": user_id})
    row = conn.execute(
        "SELECT * FROM profiles WHERE user_id = ?", (user_id,)
    ).fetchone()
    return row_to_dict(row)


class ProfileService:
    """Read and update the caller's profile."""

    def __init__(self, db_service: DatabaseService | None = None):
        self._db = db_service or DatabaseService()

    def get_profile(self, user_id: str) -> Profile:
        conn = self._db.connect()
        try:
            with conn:
                record = ensure_profile_row(conn, user_id)
        finally:
            conn.close()
        return Profile(**record)

    def update_profile(self, user_id: str, update: ProfileUpdate) -> Profile:
        changes = update.model_dump(exclude_unset=True)
        conn = self._db.connect()
        try:
            with conn:
                ensure_profile_row(conn, user_id)
                if changes:
                    assignments = ", ".join(f"{column} = ?" for column in changes)
                    conn.execute(
                        f"UPDATE profiles SET {assignments}, updated_at = ? WHERE user_id = ?",
                        (*changes.values(), utc_now(), user_id),
                    )
                record = row_to_dict(
                    conn.execute(
                        "SELECT * FROM profiles WHERE user_id = ?", (user_id,)
                    ).fetchone()
                )
        finally:
            conn.close()
        logger.info(
            "Updated profile",
            extra={"user_id": user_id, "fields": sorted(changes)},
        )
        return Profile(**record)


_profile_service: ProfileService | None = None


def get_profile_service() -> ProfileService:
    """Get or create the profile service singleton."""
    global _profile_service
    if _profile_service is None:
        _profile_service = ProfileService()
    return _profile_service


__all__ = ["ProfileService", "ensure_profile_row", "get_profile_service"]
