"""Agent creation, activation and chat."""

from __future__ import annotations

import logging
import sqlite3
from typing import Any, Dict, List, Optional, Tuple

from ..models.agent import (
    Agent,
    AgentChatResponse,
    AgentCreate,
    AgentCreateResponse,
    CreatedAgent,
    UserAgent,
)
from .completion_client import (
    AGENT_MODEL,
    LANGCHAIN_CHAT_URL,
    OPENAI_CHAT_URL,
    CompletionClient,
    completion_payload,
    error_message,
    first_message_content,
)
from .config import AppConfig, get_config
from .database import DatabaseService, dump_json, new_id, row_to_dict, utc_now
from .errors import ConfigurationError, NotFoundError, ServiceError, UpstreamError
from .interaction_service import InteractionService
from .prompt_loader import PromptLoader

logger = logging.getLogger(__name__)

CHAT_MAX_TOKENS = 1500
CHAT_TEMPERATURE = 0.7
NO_PROVIDER_MESSAGE = "No API keys configured for agent processing"


class AgentService:
    """Agents are global rows; a user sees the ones activated in ``user_agents``."""

    def __init__(
        self,
        db_service: DatabaseService | None = None,
        *,
        config: AppConfig | None = None,
        completion_client: CompletionClient | None = None,
        interactions: InteractionService | None = None,
        prompt_loader: PromptLoader | None = None,
    ):
        self._db = db_service or DatabaseService()
        self.config = config or get_config()
        self.completions = completion_client or CompletionClient(self.config)
        self.interactions = interactions or InteractionService(self._db)
        self.prompts = prompt_loader or PromptLoader()

    def build_system_prompt(self, data: AgentCreate) -> str:
        if data.system_prompt:
            return data.system_prompt
        return self.prompts.load("agents/system.md", data.model_dump()).strip()

    def create_agent(self, user_id: str, data: AgentCreate) -> AgentCreateResponse:
        """Insert the agent and activate it for the caller.

        If activation fails the agent row is removed again.
        """
        system_prompt = self.build_system_prompt(data)
        now = utc_now()
        agent_id = new_id()
        logger.info(f"Creating agent: {data.name} for user: {user_id}")

        conn = self._db.connect()
        try:
            with conn:
                conn.execute(
                    """
                    INSERT INTO agents
                    (id, name, type, role, description, system_prompt, active, created_at, updated_at)
                    VALUES (?, ?, ?, ?, ?, ?, 1, ?, ?)
                    """,
                    (
                        agent_id,
                        data.name,
                        data.framework,
                        data.role,
                        data.description,
                        system_prompt,
                        now,
                        now,
                    ),
                )
            user_agent_config = {
                "framework": data.framework,
                "role": data.role,
                "capabilities": data.capabilities,
                "rag_enabled": data.rag_enabled,
                "tools": data.tools,
                "model": data.model,
                "temperature": data.temperature,
                "system_prompt": system_prompt,
            }
            try:
                with conn:
                    conn.execute(
                        """
                        INSERT INTO user_agents (id, user_id, agent_id, config, activated_at)
                        VALUES (?, ?, ?, ?, ?)
                        """,
                        (new_id(), user_id, agent_id, dump_json(user_agent_config), now),
                    )
            except sqlite3.Error as exc:
                logger.error(f"Error activating agent for user: {exc}")
                with conn:
                    conn.execute("DELETE FROM agents WHERE id = ?", (agent_id,))
                raise ServiceError(
                    f"Failed to activate agent: {exc}", error="activation_failed"
                ) from exc

            agent = row_to_dict(
                conn.execute("SELECT * FROM agents WHERE id = ?", (agent_id,)).fetchone()
            )
            user_agent = row_to_dict(
                conn.execute(
                    "SELECT * FROM user_agents WHERE user_id = ? AND agent_id = ?",
                    (user_id, agent_id),
                ).fetchone()
            )
        finally:
            conn.close()

        logger.info(f"Agent {data.name} created successfully with ID: {agent_id}")
        return AgentCreateResponse(
            success=True,
            agent=CreatedAgent(
                id=agent["id"],
                name=agent["name"],
                description=agent["description"],
                type=agent["type"],
                active=agent["active"],
                user_agent=UserAgent(**user_agent),
            ),
            message=f'Agent "{data.name}" created and activated successfully',
        )

    def list_agents(self, user_id: str) -> List[Agent]:
        conn = self._db.connect()
        try:
            rows = conn.execute(
                """
                SELECT a.* FROM agents a
                JOIN user_agents ua ON ua.agent_id = a.id
                WHERE ua.user_id = ? AND a.active = 1
                ORDER BY ua.activated_at DESC
                """,
                (user_id,),
            ).fetchall()
        finally:
            conn.close()
        return [Agent(**row_to_dict(row)) for row in rows]

    def find_agent(self, agent_id: str) -> Optional[Dict[str, Any]]:
        conn = self._db.connect()
        try:
            row = conn.execute("SELECT * FROM agents WHERE id = ?", (agent_id,)).fetchone()
        finally:
            conn.close()
        return row_to_dict(row)

    def require_agent(self, agent_id: str, label: str = "Agent") -> Dict[str, Any]:
        agent = self.find_agent(agent_id)
        if agent is None:
            raise NotFoundError(f"{label} not found", detail={"agent_id": agent_id})
        return agent

    def get_agent(self, agent_id: str) -> Agent:
        return Agent(**self.require_agent(agent_id))

    def deactivate_agent(self, user_id: str, agent_id: str) -> None:
        """Remove the caller's activation of an agent."""
        conn = self._db.connect()
        try:
            with conn:
                cursor = conn.execute(
                    "DELETE FROM user_agents WHERE user_id = ? AND agent_id = ?",
                    (user_id, agent_id),
                )
        finally:
            conn.close()
        if cursor.rowcount == 0:
            raise NotFoundError("Agent not found", detail={"agent_id": agent_id})
        logger.info("Deactivated agent", extra={"user_id": user_id, "agent_id": agent_id})

    def _document_context(self, user_id: str, document_id: Optional[str]) -> str:
        if not document_id:
            return ""
        conn = self._db.connect()
        try:
            row = conn.execute(
                "SELECT filename, content FROM documents WHERE id = ? AND user_id = ?",
                (document_id, user_id),
            ).fetchone()
        finally:
            conn.close()
        if row is None or not row["content"]:
            return ""
        return f'\n\nDocument "{row["filename"]}":\n{row["content"]}'

    async def complete(
        self,
        agent: Dict[str, Any],
        system_prompt: str,
        user_prompt: str,
        *,
        max_tokens: int,
        document_context: str = "",
    ) -> Tuple[Optional[str], Dict[str, Any]]:
        """Answer with the agent's framework, falling back to OpenAI.

        Returns ``(None, {})`` when no provider is configured.
        """
        agent_type = agent["type"]

        if agent_type == "langchain" and self.config.langchain_api_key:
            logger.info(f"Using LangChain API for agent: {agent['name']}")
            response = await self.completions.chat(
                LANGCHAIN_CHAT_URL,
                self.config.langchain_api_key,
                system_prompt,
                user_prompt,
                max_tokens=max_tokens,
                temperature=CHAT_TEMPERATURE,
            )
            if response.is_success:
                data = completion_payload(response)
                return first_message_content(data), {
                    "model": f"langchain-{AGENT_MODEL}",
                    "tokens_used": (data.get("usage") or {}).get("total_tokens", 0),
                    "agent_type": "langchain",
                    "api_used": "langchain",
                }
            logger.warning(
                f"LangChain API returned {response.status_code}, falling back"
            )

        if agent_type == "llamaindex" and self.config.llamaindex_api_key:
            logger.info(f"Using LlamaIndex for agent: {agent['name']}")
            context_note = (
                "Document context included." if document_context else "No document context."
            )
            return (
                f'LlamaIndex RAG Response: Processing query "{user_prompt}" with '
                f"document context. {context_note}",
                {"model": "llamaindex-local", "agent_type": "llamaindex", "api_used": "llamaindex"},
            )

        if self.config.openai_api_key:
            logger.info(f"Using OpenAI API for agent: {agent['name']}")
            response = await self.completions.chat(
                OPENAI_CHAT_URL,
                self.config.openai_api_key,
                system_prompt,
                user_prompt,
                max_tokens=max_tokens,
                temperature=CHAT_TEMPERATURE,
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
                "agent_type": agent_type,
                "api_used": "openai",
            }

        return None, {}

    async def chat(
        self, user_id: str, agent_id: str, message: str, document_id: Optional[str] = None
    ) -> AgentChatResponse:
        agent = self.require_agent(agent_id)
        document_context = self._document_context(user_id, document_id)
        user_prompt = message + document_context

        answer, metadata = await self.complete(
            agent,
            agent["system_prompt"],
            user_prompt,
            max_tokens=CHAT_MAX_TOKENS,
            document_context=document_context,
        )
        if not answer:
            raise ConfigurationError(NO_PROVIDER_MESSAGE, error="no_provider")

        self.interactions.log(
            user_id,
            message,
            answer,
            agent_id=agent_id,
            document_id=document_id if document_context else None,
            metadata={**metadata, "execution_type": "agent_chat"},
        )
        return AgentChatResponse(response=answer, metadata=metadata)


_agent_service: AgentService | None = None


def get_agent_service() -> AgentService:
    """Get or create the agent service singleton."""
    global _agent_service
    if _agent_service is None:
        _agent_service = AgentService()
    return _agent_service


__all__ = [
    "AgentService",
    "get_agent_service",
    "CHAT_MAX_TOKENS",
    "NO_PROVIDER_MESSAGE",
]
