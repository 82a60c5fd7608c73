"""Interaction log shared by agents, workflows and tool executions."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from .database import DatabaseService, dump_json, new_id, row_to_dict, utc_now

logger = logging.getLogger(__name__)


class InteractionService:
    """Append-only ``agent_interactions`` log."""

    def __init__(self, db_service: DatabaseService | None = None):
        self._db = db_service or DatabaseService()

    def log(
        self,
        user_id: str,
        input_text: str,
        output_text: str,
        *,
        agent_id: Optional[str] = None,
        document_id: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        record = {
            "id": new_id(),
            "user_id": user_id,
            "agent_id": agent_id,
            "document_id": document_id,
            "input": input_text,
            "output": output_text,
            "metadata": metadata,
            "created_at": utc_now(),
        }
        conn = self._db.connect()
        try:
            with conn:
                conn.execute(
                    """
                    INSERT INTO agent_interactions
                    (id, user_id, agent_id, document_id, input, output, metadata, created_at)
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        record["id"],
                        user_id,
                        agent_id,
                        document_id,
                        input_text,
                        output_text,
                        dump_json(metadata),
                        record["created_at"],
                    ),
                )
        finally:
            conn.close()
        logger.debug(
            "Logged interaction",
            extra={"user_id": user_id, "interaction_id": record["id"]},
        )
        return record

    def list_recent(self, user_id: str, limit: int = 50) -> List[Dict[str, Any]]:
        conn = self._db.connect()
        try:
            rows = conn.execute(
                """
                SELECT * FROM agent_interactions
                WHERE user_id = ?
                ORDER BY created_at DESC
                LIMIT ?
                """,
                (user_id, limit),
            ).fetchall()
        finally:
            conn.close()
        return [row_to_dict(row) for row in rows]


_interaction_service: InteractionService | None = None


def get_interaction_service() -> InteractionService:
    """Get or create the interaction service singleton."""
    global _interaction_service
    if _interaction_service is None:
        _interaction_service = InteractionService()
    return _interaction_service


__all__ = ["InteractionService", "get_interaction_service"]
