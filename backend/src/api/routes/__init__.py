"""HTTP API route handlers."""

from . import (
    a2a,
    agents,
    ai,
    auth,
    documents,
    integrations,
    interactions,
    mcp,
    rag,
    roles,
    system,
    workflows,
)

__all__ = [
    "a2a",
    "agents",
    "ai",
    "auth",
    "documents",
    "integrations",
    "interactions",
    "mcp",
    "rag",
    "roles",
    "system",
    "workflows",
]
