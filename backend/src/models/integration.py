"""External integration models."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


class Integration(BaseModel):
    id: str
    user_id: str
    service_name: str
    config: Dict[str, Any] = Field(default_factory=dict)
    active: bool = True
    created_at: datetime
    updated_at: datetime


class IntegrationCreate(BaseModel):
    service_name: str = Field(..., min_length=1, max_length=100)
    config: Dict[str, Any] = Field(default_factory=dict)
    active: bool = True


class IntegrationUpdate(BaseModel):
    service_name: Optional[str] = Field(None, min_length=1, max_length=100)
    config: Optional[Dict[str, Any]] = None
    active: Optional[bool] = None


__all__ = ["Integration", "IntegrationCreate", "IntegrationUpdate"]
