"""Workflow models."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class Workflow(BaseModel):
    """Automation workflow; ``config.steps`` drives execution."""

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "id": "2c1e4a7f-5f43-4c2e-9d5a-8b7f1c0d2e3a",
                "user_id": "alice",
                "name": "Daily digest",
                "description": "Summarise news every morning",
                "trigger_type": "schedule",
                "trigger_config": {"cron": "0 8 * * *"},
                "config": {
                    "steps": [
                        {"type": "notification", "message": "Digest ready"},
                    ]
                },
                "active": True,
                "created_at": "2025-01-15T10:30:00Z",
                "updated_at": "2025-01-15T10:30:00Z",
            }
        }
    )

    id: str
    user_id: str
    name: str
    description: Optional[str] = None
    trigger_type: str
    trigger_config: Optional[Dict[str, Any]] = None
    config: Dict[str, Any] = Field(default_factory=dict)
    active: bool = True
    created_at: datetime
    updated_at: datetime


class WorkflowCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=2000)
    trigger_type: str = Field("manual", min_length=1, max_length=50)
    trigger_config: Optional[Dict[str, Any]] = None
    config: Dict[str, Any] = Field(default_factory=dict)
    active: bool = True


class WorkflowUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=2000)
    trigger_type: Optional[str] = Field(None, min_length=1, max_length=50)
    trigger_config: Optional[Dict[str, Any]] = None
    config: Optional[Dict[str, Any]] = None
    active: Optional[bool] = None


class WorkflowStepResult(BaseModel):
    step: int
    type: Optional[str] = None
    status: str
    detail: Optional[Any] = None


class WorkflowExecutionResponse(BaseModel):
    success: bool = True
    message: str = "Workflow executed successfully"
    steps: List[WorkflowStepResult] = Field(default_factory=list)


__all__ = [
    "Workflow",
    "WorkflowCreate",
    "WorkflowUpdate",
    "WorkflowStepResult",
    "WorkflowExecutionResponse",
]
