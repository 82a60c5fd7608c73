"""Per-user table access shared by the CRUD services."""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional

from .database import (
    BOOL_COLUMNS,
    JSON_COLUMNS,
    DatabaseService,
    dump_json,
    new_id,
    row_to_dict,
    utc_now,
)
from .errors import NotFoundError

logger = logging.getLogger(__name__)


def _encode(column: str, value: Any) -> Any:
    if column in JSON_COLUMNS:
        return dump_json(value)
    if column in BOOL_COLUMNS and value is not None:
        return int(bool(value))
    return value


class UserScopedTable:
    """CRUD over one table whose rows carry a ``user_id`` owner column.

    Every read and write is filtered by ``user_id``; a row owned by another
    user behaves exactly like a missing one.
    """

    def __init__(
        self,
        db_service: DatabaseService,
        table: str,
        *,
        label: str,
        order_by: str = "created_at DESC",
        created_column: Optional[str] = "created_at",
        updated_column: Optional[str] = "updated_at",
        not_found_message: Optional[str] = None,
    ) -> None:
        self._db = db_service
        self.table = table
        self.label = label
        self.order_by = order_by
        self.created_column = created_column
        self.updated_column = updated_column
        self.not_found_message = not_found_message or f"{label} not found"

    def list(self, user_id: str, limit: Optional[int] = None) -> List[Dict[str, Any]]:
        sql = f"SELECT * FROM {self.table} WHERE user_id = ? ORDER BY {self.order_by}"
        params: tuple[Any, ...] = (user_id,)
        if limit is not None:
            sql += " LIMIT ?"
            params += (limit,)
        conn = self._db.connect()
        try:
            rows = conn.execute(sql, params).fetchall()
        finally:
            conn.close()
        return [row_to_dict(row) for row in rows]

    def find(self, user_id: str, row_id: str) -> Optional[Dict[str, Any]]:
        conn = self._db.connect()
        try:
            row = conn.execute(
                f"SELECT * FROM {self.table} WHERE id = ? AND user_id = ?",
                (row_id, user_id),
            ).fetchone()
        finally:
            conn.close()
        return row_to_dict(row)

    def get(self, user_id: str, row_id: str) -> Dict[str, Any]:
        record = self.find(user_id, row_id)
        if record is None:
            raise NotFoundError(
                self.not_found_message, detail={"id": row_id, "resource": self.table}
            )
        return record

    def insert(self, user_id: str, values: Mapping[str, Any]) -> Dict[str, Any]:
        now = utc_now()
        record: Dict[str, Any] = {"id": new_id(), "user_id": user_id, **values}
        if self.created_column:
            record.setdefault(self.created_column, now)
        if self.updated_column:
            record.setdefault(self.updated_column, now)

        columns = list(record)
        placeholders = ", ".join("?" for _ in columns)
        conn = self._db.connect()
        try:
            with conn:
                conn.execute(
                    f"INSERT INTO {self.table} ({', '.join(columns)}) VALUES ({placeholders})",
                    tuple(_encode(column, record[column]) for column in columns),
                )
        finally:
            conn.close()
        logger.info(
            f"Created {self.label.lower()}",
            extra={"user_id": user_id, "id": record["id"], "table": self.table},
        )
        return self.get(user_id, record["id"])

    def update(
        self, user_id: str, row_id: str, values: Mapping[str, Any]
    ) -> Dict[str, Any]:
        changes = dict(values)
        if self.updated_column:
            changes[self.updated_column] = utc_now()
        if not changes:
            return self.get(user_id, row_id)

        assignments = ", ".join(f"{column} = ?" for column in changes)
        conn = self._db.connect()
        try:
            with conn:
                cursor = conn.execute(
                    f"UPDATE {self.table} SET {assignments} WHERE id = ? AND user_id = ?",
                    (
                        *(_encode(column, value) for column, value in changes.items()),
                        row_id,
                        user_id,
                    ),
                )
        finally:
            conn.close()
        if cursor.rowcount == 0:
            raise NotFoundError(
                self.not_found_message, detail={"id": row_id, "resource": self.table}
            )
        return self.get(user_id, row_id)

    def delete(self, user_id: str, row_id: str) -> None:
        conn = self._db.connect()
        try:
            with conn:
                cursor = conn.execute(
                    f"DELETE FROM {self.table} WHERE id = ? AND user_id = ?",
                    (row_id, user_id),
                )
        finally:
            conn.close()
        if cursor.rowcount == 0:
            raise NotFoundError(
                self.not_found_message, detail={"id": row_id, "resource": self.table}
            )
        logger.info(
            f"Deleted {self.label.lower()}",
            extra={"user_id": user_id, "id": row_id, "table": self.table},
        )

    def find_many(self, user_id: str, ids: Iterable[str]) -> List[Dict[str, Any]]:
        """Rows among ``ids`` owned by the user, in table order."""
        wanted = list(dict.fromkeys(ids))
        if not wanted:
            return []
        placeholders = ", ".join("?" for _ in wanted)
        conn = self._db.connect()
        try:
            rows = conn.execute(
                f"""
                SELECT * FROM {self.table}
                WHERE user_id = ? AND id IN ({placeholders})
                ORDER BY {self.order_by}
                """,
                (user_id, *wanted),
            ).fetchall()
        finally:
            conn.close()
        return [row_to_dict(row) for row in rows]


__all__ = ["UserScopedTable"]
