"""SQLite database helpers for the application schema."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
import sqlite3
from typing import Any, Iterable, Optional
import uuid

from .config import get_config

DDL_STATEMENTS: tuple[str, ...] = (
    """
    CREATE TABLE IF NOT EXISTS profiles (
        id TEXT PRIMARY KEY,
        user_id TEXT NOT NULL UNIQUE,
        email TEXT,
        full_name TEXT,
        avatar_url TEXT,
        role TEXT,
        onboarding_completed INTEGER NOT NULL DEFAULT 0,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS user_roles (
        id TEXT PRIMARY KEY,
        user_id TEXT NOT NULL UNIQUE,
        role TEXT NOT NULL CHECK (role IN ('trader', 'student', 'founder')),
        assigned_by TEXT,
        created_at TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS documents (
        id TEXT PRIMARY KEY,
        user_id TEXT NOT NULL,
        filename TEXT NOT NULL,
        file_url TEXT,
        file_type TEXT,
        file_size INTEGER,
        content TEXT,
        processed_at TEXT,
        uploaded_at TEXT NOT NULL
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_documents_user ON documents(user_id, uploaded_at)",
    """
    CREATE TABLE IF NOT EXISTS workflows (
        id TEXT PRIMARY KEY,
        user_id TEXT NOT NULL,
        name TEXT NOT NULL,
        description TEXT,
        trigger_type TEXT NOT NULL DEFAULT 'manual',
        trigger_config TEXT,
        config TEXT NOT NULL DEFAULT '{}',
        active INTEGER NOT NULL DEFAULT 1,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_workflows_user ON workflows(user_id)",
    """
    CREATE TABLE IF NOT EXISTS external_integrations (
        id TEXT PRIMARY KEY,
        user_id TEXT NOT NULL,
        service_name TEXT NOT NULL,
        config TEXT NOT NULL DEFAULT '{}',
        active INTEGER NOT NULL DEFAULT 1,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_integrations_user ON external_integrations(user_id)",
    """
    CREATE TABLE IF NOT EXISTS mcp_servers (
        id TEXT PRIMARY KEY,
        user_id TEXT NOT NULL,
        name TEXT NOT NULL,
        endpoint TEXT NOT NULL DEFAULT '',
        status TEXT NOT NULL DEFAULT 'disconnected',
        resources TEXT NOT NULL DEFAULT '[]',
        tools TEXT NOT NULL DEFAULT '[]',
        last_connected_at TEXT,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_mcp_servers_user ON mcp_servers(user_id)",
    """
    CREATE TABLE IF NOT EXISTS vector_indexes (
        id TEXT PRIMARY KEY,
        user_id TEXT NOT NULL,
        name TEXT NOT NULL,
        description TEXT,
        embedding_model TEXT NOT NULL DEFAULT 'text-embedding-3-small',
        config TEXT NOT NULL DEFAULT '{}',
        status TEXT NOT NULL DEFAULT 'building'
            CHECK (status IN ('building', 'ready', 'error')),
        documents_count INTEGER NOT NULL DEFAULT 0,
        vectors_count INTEGER NOT NULL DEFAULT 0,
        last_updated_at TEXT NOT NULL,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_vector_indexes_user ON vector_indexes(user_id)",
    """
    CREATE TABLE IF NOT EXISTS rag_queries (
        id TEXT PRIMARY KEY,
        user_id TEXT NOT NULL,
        vector_index_id TEXT NOT NULL,
        query TEXT NOT NULL,
        results TEXT NOT NULL DEFAULT '[]',
        response_time_ms INTEGER,
        created_at TEXT NOT NULL
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_rag_queries_user ON rag_queries(user_id, created_at DESC)",
    """
    CREATE TABLE IF NOT EXISTS agents (
        id TEXT PRIMARY KEY,
        name TEXT NOT NULL,
        type TEXT NOT NULL,
        role TEXT NOT NULL,
        description TEXT NOT NULL,
        system_prompt TEXT NOT NULL,
        active INTEGER NOT NULL DEFAULT 1,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS user_agents (
        id TEXT PRIMARY KEY,
        user_id TEXT NOT NULL,
        agent_id TEXT NOT NULL,
        config TEXT,
        activated_at TEXT NOT NULL,
        UNIQUE (user_id, agent_id)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS agent_interactions (
        id TEXT PRIMARY KEY,
        user_id TEXT NOT NULL,
        agent_id TEXT,
        document_id TEXT,
        input TEXT NOT NULL,
        output TEXT NOT NULL,
        metadata TEXT,
        created_at TEXT NOT NULL
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_interactions_user ON agent_interactions(user_id, created_at DESC)",
    """
    CREATE TABLE IF NOT EXISTS a2a_messages (
        id TEXT PRIMARY KEY,
        user_id TEXT NOT NULL,
        sender_agent_id TEXT NOT NULL,
        receiver_agent_id TEXT NOT NULL,
        content TEXT NOT NULL,
        message_type TEXT,
        status TEXT,
        workflow_id TEXT,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_a2a_messages_user ON a2a_messages(user_id, created_at DESC)",
    """
    CREATE TABLE IF NOT EXISTS a2a_workflows (
        id TEXT PRIMARY KEY,
        user_id TEXT NOT NULL,
        name TEXT NOT NULL,
        description TEXT,
        agent_ids TEXT NOT NULL DEFAULT '[]',
        steps TEXT NOT NULL DEFAULT '[]',
        is_active INTEGER NOT NULL DEFAULT 1,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL
    )
    """,
)

# Columns stored as JSON text, decoded by ``row_to_dict``.
JSON_COLUMNS = frozenset(
    {
        "trigger_config",
        "config",
        "resources",
        "tools",
        "results",
        "metadata",
        "agent_ids",
        "steps",
    }
)
BOOL_COLUMNS = frozenset({"active", "is_active", "onboarding_completed"})


def utc_now() -> str:
    """Current UTC time as an ISO-8601 string."""
    return datetime.now(timezone.utc).isoformat()


def new_id() -> str:
    return str(uuid.uuid4())


def dump_json(value: Any) -> Optional[str]:
    if value is None:
        return None
    return json.dumps(value)


def row_to_dict(row: sqlite3.Row | None) -> Optional[dict[str, Any]]:
    """Convert a row into a plain dict, decoding JSON and boolean columns."""
    if row is None:
        return None
    record = dict(row)
    for key, value in record.items():
        if key in JSON_COLUMNS and isinstance(value, str):
            try:
                record[key] = json.loads(value)
            except json.JSONDecodeError:
                pass
        elif key in BOOL_COLUMNS and value is not None:
            record[key] = bool(value)
    return record


class DatabaseService:
    """Manage SQLite connections and schema initialization."""

    def __init__(self, db_path: str | Path | None = None):
        self.db_path = Path(db_path) if db_path else get_config().database_path

    def _ensure_directory(self) -> None:
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

    def connect(self) -> sqlite3.Connection:
        """Return a sqlite3 connection with the proper data directory created."""
        self._ensure_directory()
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def initialize(self, statements: Iterable[str] | None = None) -> Path:
        """Create all schema artifacts."""
        conn = self.connect()
        try:
            with conn:  # Transactional apply of DDL
                for statement in statements or DDL_STATEMENTS:
                    conn.execute(statement)
        finally:
            conn.close()
        return self.db_path


def init_database(db_path: str | Path | None = None) -> Path:
    """Convenience wrapper used at application startup."""
    return DatabaseService(db_path).initialize()


__all__ = [
    "DatabaseService",
    "init_database",
    "row_to_dict",
    "dump_json",
    "new_id",
    "utc_now",
    "JSON_COLUMNS",
    "BOOL_COLUMNS",
]
