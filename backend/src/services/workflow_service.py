"""Workflow storage and execution."""

from __future__ import annotations

import logging
from typing import Any, Dict, List

import httpx

from ..models.workflow import (
    Workflow,
    WorkflowCreate,
    WorkflowExecutionResponse,
    WorkflowStepResult,
    WorkflowUpdate,
)
from .agent_service import AgentService
from .database import DatabaseService
from .errors import InvalidRequestError, ServiceError, UpstreamError
from .external_calls import call_step_endpoint, response_payload
from .interaction_service import InteractionService
from .repository import UserScopedTable

logger = logging.getLogger(__name__)


class WorkflowService:
    """CRUD for ``workflows`` and the step runner behind ``execute``."""

    def __init__(
        self,
        db_service: DatabaseService | None = None,
        *,
        agent_service: AgentService | None = None,
        interactions: InteractionService | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._db = db_service or DatabaseService()
        self.agents = agent_service or AgentService(self._db)
        self.interactions = interactions or self.agents.interactions
        self._transport = transport
        self.table = UserScopedTable(
            self._db,
            "workflows",
            label="Workflow",
            not_found_message="Workflow not found or access denied",
        )

    def list_workflows(self, user_id: str) -> List[Workflow]:
        return [Workflow(**row) for row in self.table.list(user_id)]

    def get_workflow(self, user_id: str, workflow_id: str) -> Workflow:
        return Workflow(**self.table.get(user_id, workflow_id))

    def create_workflow(self, user_id: str, data: WorkflowCreate) -> Workflow:
        return Workflow(**self.table.insert(user_id, data.model_dump()))

    def update_workflow(
        self, user_id: str, workflow_id: str, data: WorkflowUpdate
    ) -> Workflow:
        changes = data.model_dump(exclude_unset=True)
        return Workflow(**self.table.update(user_id, workflow_id, changes))

    def delete_workflow(self, user_id: str, workflow_id: str) -> None:
        self.table.delete(user_id, workflow_id)

    def toggle_workflow(self, user_id: str, workflow_id: str) -> Workflow:
        current = self.table.get(user_id, workflow_id)
        return Workflow(
            **self.table.update(user_id, workflow_id, {"active": not current["active"]})
        )

    async def _run_step(
        self, user_id: str, number: int, step: Dict[str, Any]
    ) -> WorkflowStepResult:
        step_type = step.get("type")
        logger.info(f"Executing step: {step_type}")

        if step_type == "agent_interaction":
            if not (step.get("agentId") and step.get("message")):
                return WorkflowStepResult(step=number, type=step_type, status="skipped")
            try:
                reply = await self.agents.chat(user_id, step["agentId"], step["message"])
            except ServiceError as exc:
                logger.error(f"Agent interaction failed: {exc.message}")
                raise UpstreamError(
                    f"Agent interaction failed: {exc.message}",
                    detail={"step": number},
                ) from exc
            return WorkflowStepResult(
                step=number, type=step_type, status="completed", detail=reply.response
            )

        if step_type == "data_processing":
            logger.info(f"Processing data step: {step.get('config')}")
            return WorkflowStepResult(step=number, type=step_type, status="logged")

        if step_type == "notification":
            if step.get("message"):
                logger.info(f"Sending notification: {step['message']}")
            return WorkflowStepResult(
                step=number, type=step_type, status="logged", detail=step.get("message")
            )

        if step_type == "external_api":
            if not (step.get("url") and step.get("method")):
                return WorkflowStepResult(step=number, type=step_type, status="skipped")
            try:
                response = await call_step_endpoint(step, transport=self._transport)
            except httpx.HTTPError as exc:
                logger.error(f"External API call failed: {exc}")
                raise UpstreamError(
                    f"External API call failed: {exc}", detail={"step": number}
                ) from exc
            return WorkflowStepResult(
                step=number,
                type=step_type,
                status="completed",
                detail={"status": response.status_code, "response": response_payload(response)},
            )

        logger.info(f"Unknown step type: {step_type}")
        return WorkflowStepResult(step=number, type=step_type, status="skipped")

    async def execute_workflow(
        self, user_id: str, workflow_id: str
    ) -> WorkflowExecutionResponse:
        """Run ``config.steps`` in order; an agent or API failure aborts the run."""
        workflow = self.table.get(user_id, workflow_id)
        if not workflow["active"]:
            raise InvalidRequestError("Workflow is not active")

        logger.info(f"Executing workflow: {workflow['name']} for user: {user_id}")
        config = workflow["config"] if isinstance(workflow["config"], dict) else {}
        steps = config.get("steps") if isinstance(config.get("steps"), list) else []

        results = [
            await self._run_step(user_id, number, step)
            for number, step in enumerate(steps, start=1)
        ]

        self.interactions.log(
            user_id,
            f"Workflow executed: {workflow['name']}",
            f'Workflow "{workflow["name"]}" completed successfully',
            agent_id=config.get("defaultAgentId"),
            metadata={
                "workflow_id": workflow_id,
                "execution_type": "workflow",
                "trigger_type": workflow["trigger_type"],
            },
        )
        return WorkflowExecutionResponse(steps=results)


_workflow_service: WorkflowService | None = None


def get_workflow_service() -> WorkflowService:
    """Get or create the workflow service singleton."""
    global _workflow_service
    if _workflow_service is None:
        _workflow_service = WorkflowService()
    return _workflow_service


__all__ = ["WorkflowService", "get_workflow_service"]
