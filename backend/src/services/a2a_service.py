"""Agent-to-agent messaging and multi-agent workflows."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, List, Optional

import httpx

from ..models.a2a import (
    A2AMessage,
    A2AMessageCreate,
    A2AMessageResponse,
    A2AWorkflow,
    A2AWorkflowCreate,
    A2AWorkflowRunResponse,
    A2AWorkflowUpdate,
    MessageType,
)
from .agent_service import NO_PROVIDER_MESSAGE, AgentService
from .completion_client import (
    AGENT_MODEL,
    LANGCHAIN_CHAT_URL,
    OPENAI_CHAT_URL,
    completion_payload,
    error_message,
    first_message_content,
)
from .database import DatabaseService
from .errors import ConfigurationError, InvalidRequestError, UpstreamError
from .external_calls import call_step_endpoint, response_payload
from .repository import UserScopedTable

logger = logging.getLogger(__name__)

A2A_MAX_TOKENS = 1000
A2A_TEMPERATURE = 0.7


def _delay_seconds(step: Dict[str, Any]) -> float:
    """Pause after a ``send_message`` step; ``delay_ms`` must be a number."""
    raw = step.get("delay_ms")
    if not raw:
        return 0.0
    try:
        return float(raw) / 1000
    except (TypeError, ValueError) as exc:
        raise InvalidRequestError(f"Invalid delay_ms: {raw!r}") from exc


class A2AService:
    """Send messages between agents and run scripted agent conversations."""

    def __init__(
        self,
        db_service: DatabaseService | None = None,
        *,
        agent_service: AgentService | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._db = db_service or DatabaseService()
        self.agents = agent_service or AgentService(self._db)
        self._transport = transport
        self.messages = UserScopedTable(self._db, "a2a_messages", label="A2A message")
        self.workflows = UserScopedTable(
            self._db,
            "a2a_workflows",
            label="A2A workflow",
            not_found_message="Workflow not found or access denied",
        )

    # Messages

    def list_messages(self, user_id: str, limit: int = 100) -> List[A2AMessage]:
        return [A2AMessage(**row) for row in self.messages.list(user_id, limit=limit)]

    async def send_message(
        self, user_id: str, data: A2AMessageCreate
    ) -> A2AMessageResponse:
        """Store a message and have the receiving agent answer it."""
        sender = self.agents.require_agent(data.sender_agent_id, "Sender agent")
        receiver = self.agents.require_agent(data.receiver_agent_id, "Receiver agent")
        message = self.messages.insert(
            user_id,
            {
                "sender_agent_id": sender["id"],
                "receiver_agent_id": receiver["id"],
                "content": data.content,
                "message_type": (data.message_type or MessageType.DIRECT).value,
                "status": "sent",
            },
        )
        return await self.process_message(user_id, message["id"], sender, receiver, data.content)

    async def _receiver_reply(
        self, sender: Dict[str, Any], receiver: Dict[str, Any], content: str
    ) -> tuple[Optional[str], Dict[str, Any]]:
        config = self.agents.config
        system_prompt = self.agents.prompts.load(
            "a2a/receiver.md",
            {
                "receiver_name": receiver["name"],
                "receiver_prompt": receiver["system_prompt"],
                "sender_name": sender["name"],
            },
        ).strip()

        if receiver["type"] == "langchain":
            if not config.langchain_api_key:
                return None, {}
            response = await self.agents.completions.chat(
                LANGCHAIN_CHAT_URL,
                config.langchain_api_key,
                system_prompt,
                content,
                max_tokens=A2A_MAX_TOKENS,
                temperature=A2A_TEMPERATURE,
            )
            if not response.is_success:
                return None, {}
            data = completion_payload(response)
            return first_message_content(data), {
                "model": f"langchain-{AGENT_MODEL}",
                "tokens_used": (data.get("usage") or {}).get("total_tokens", 0),
                "api_used": "langchain",
            }

        if receiver["type"] == "llamaindex":
            return (
                f"LlamaIndex A2A Response from {receiver['name']}: "
                f'Processing message "{content}" from {sender["name"]}',
                {"model": "llamaindex-local", "api_used": "llamaindex"},
            )

        if not config.openai_api_key:
            return None, {}
        response = await self.agents.completions.chat(
            OPENAI_CHAT_URL,
            config.openai_api_key,
            system_prompt,
            content,
            max_tokens=A2A_MAX_TOKENS,
            temperature=A2A_TEMPERATURE,
        )
        if not response.is_success:
            raise UpstreamError(
                f"OpenAI API error: {error_message(response)}",
                detail={"status": response.status_code},
            )
        data = completion_payload(response)
        return first_message_content(data), {
            "model": AGENT_MODEL,
            "tokens_used": (data.get("usage") or {}).get("total_tokens", 0),
            "api_used": "openai",
        }

    async def process_message(
        self,
        user_id: str,
        message_id: str,
        sender: Dict[str, Any],
        receiver: Dict[str, Any],
        content: str,
    ) -> A2AMessageResponse:
        logger.info(
            f"Processing A2A message from {sender['name']} to {receiver['name']}",
            extra={"user_id": user_id, "message_id": message_id},
        )
        self.messages.update(user_id, message_id, {"status": "processing"})
        try:
            reply, metadata = await self._receiver_reply(sender, receiver, content)
            if not reply:
                raise ConfigurationError(NO_PROVIDER_MESSAGE, error="no_provider")
        except Exception:
            self.messages.update(user_id, message_id, {"status": "failed"})
            raise

        self.messages.update(user_id, message_id, {"status": "completed"})
        response_message = self.messages.insert(
            user_id,
            {
                "sender_agent_id": receiver["id"],
                "receiver_agent_id": sender["id"],
                "content": reply,
                "message_type": MessageType.RESPONSE.value,
                "status": "sent",
            },
        )
        self.agents.interactions.log(
            user_id,
            f"A2A message from {sender['name']}: {content}",
            reply,
            agent_id=receiver["id"],
            metadata={
                **metadata,
                "a2a_communication": True,
                "sender_agent_id": sender["id"],
                "receiver_agent_id": receiver["id"],
                "original_message_id": message_id,
                "response_message_id": response_message["id"],
            },
        )
        logger.info(f"A2A communication completed: {sender['name']} -> {receiver['name']}")
        return A2AMessageResponse(
            success=True,
            response=reply,
            message_id=message_id,
            response_message_id=response_message["id"],
            metadata=metadata,
        )

    # Workflows

    def list_workflows(self, user_id: str) -> List[A2AWorkflow]:
        return [A2AWorkflow(**row) for row in self.workflows.list(user_id)]

    def get_workflow(self, user_id: str, workflow_id: str) -> A2AWorkflow:
        return A2AWorkflow(**self.workflows.get(user_id, workflow_id))

    def create_workflow(self, user_id: str, data: A2AWorkflowCreate) -> A2AWorkflow:
        return A2AWorkflow(**self.workflows.insert(user_id, data.model_dump()))

    def update_workflow(
        self, user_id: str, workflow_id: str, data: A2AWorkflowUpdate
    ) -> A2AWorkflow:
        changes = data.model_dump(exclude_unset=True)
        return A2AWorkflow(**self.workflows.update(user_id, workflow_id, changes))

    def delete_workflow(self, user_id: str, workflow_id: str) -> None:
        self.workflows.delete(user_id, workflow_id)

    async def _run_step(
        self, user_id: str, workflow_id: str, number: int, step: Dict[str, Any]
    ) -> Optional[Dict[str, Any]]:
        action = step.get("action")

        if action == "send_message":
            sender = self.agents.require_agent(step.get("sender_agent_id", ""), "Sender agent")
            receiver = self.agents.require_agent(
                step.get("receiver_agent_id", ""), "Receiver agent"
            )
            delay = _delay_seconds(step)
            content = step.get("content") or ""
            message = self.messages.insert(
                user_id,
                {
                    "sender_agent_id": sender["id"],
                    "receiver_agent_id": receiver["id"],
                    "content": content,
                    "message_type": MessageType.WORKFLOW.value,
                    "workflow_id": workflow_id,
                    "status": "sent",
                },
            )
            outcome = await self.process_message(
                user_id, message["id"], sender, receiver, content
            )
            if delay:
                await asyncio.sleep(delay)
            return {
                "step": number,
                "action": action,
                "success": True,
                "message_id": message["id"],
                "response": outcome.response,
                "metadata": outcome.metadata,
            }

        if action == "process_data":
            logger.info(f"Processing data: {step.get('data_source')}")
            return {
                "step": number,
                "action": action,
                "success": True,
                "data_source": step.get("data_source"),
                "processed": True,
            }

        if action == "external_api":
            if not (step.get("url") and step.get("method")):
                return None
            response = await call_step_endpoint(step, transport=self._transport)
            return {
                "step": number,
                "action": action,
                "success": response.is_success,
                "url": step["url"],
                "response": response_payload(response),
                "status": response.status_code,
            }

        logger.info(f"Unknown action: {action}")
        return {
            "step": number,
            "action": action,
            "success": False,
            "error": "Unknown action type",
        }

    async def execute_workflow(
        self, user_id: str, workflow_id: str
    ) -> A2AWorkflowRunResponse:
        """Run every step in order; a failing step is recorded, not fatal."""
        workflow = self.workflows.get(user_id, workflow_id)
        if not workflow["is_active"]:
            raise InvalidRequestError("Workflow is not active")

        logger.info(f"Executing A2A workflow: {workflow['name']}")
        results: List[Dict[str, Any]] = []
        steps = workflow["steps"] if isinstance(workflow["steps"], list) else []
        for number, step in enumerate(steps, start=1):
            try:
                result = await self._run_step(user_id, workflow_id, number, step)
            except Exception as exc:
                logger.error(f"Error in step {number}: {exc}")
                result = {
                    "step": number,
                    "action": step.get("action"),
                    "success": False,
                    "error": str(exc),
                }
            if result is not None:
                results.append(result)

        agent_ids = workflow["agent_ids"] or []
        self.agents.interactions.log(
            user_id,
            f"A2A Workflow execution: {workflow['name']}",
            f"Executed {len(results)} steps",
            agent_id=agent_ids[0] if agent_ids else None,
            metadata={
                "workflow_id": workflow_id,
                "workflow_name": workflow["name"],
                "steps_executed": len(results),
                "results": results,
            },
        )
        logger.info(
            f"A2A workflow {workflow['name']} completed with {len(results)} steps"
        )
        return A2AWorkflowRunResponse(
            success=True,
            workflow_name=workflow["name"],
            steps_executed=len(results),
            results=results,
        )


_a2a_service: A2AService | None = None


def get_a2a_service() -> A2AService:
    """Get or create the A2A service singleton."""
    global _a2a_service
    if _a2a_service is None:
        _a2a_service = A2AService()
    return _a2a_service


__all__ = ["A2AService", "get_a2a_service", "A2A_MAX_TOKENS"]
