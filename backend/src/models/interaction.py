"""Interaction log models."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel


class AgentInteraction(BaseModel):
    """One logged agent, workflow or tool execution."""

    id: str
    user_id: str
    agent_id: Optional[str] = None
    document_id: Optional[str] = None
    input: str
    output: str
    metadata: Optional[Dict[str, Any]] = None
    created_at: datetime


__all__ = ["AgentInteraction"]
