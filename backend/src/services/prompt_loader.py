"""Jinja2-based prompt template loader for agents and the AI generators.

Templates live in backend/prompts/ and are rendered with context variables.
There is no caching, so prompts can be edited without restarting the server.

The system prompts also have inline fallbacks so agents keep working when the
prompts directory is not deployed.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Optional

import jinja2

logger = logging.getLogger(__name__)

# backend/src/services/prompt_loader.py -> backend/prompts/
DEFAULT_PROMPTS_DIR = Path(__file__).resolve().parent.parent.parent / "prompts"

INLINE_PROMPTS: Dict[str, str] = {
    "agents/system.md": """You are {{ name }}, a {{ role }} AI agent specialized in {{ description }}.
Your capabilities include: {{ capabilities | join(", ") }}.
{% if rag_enabled %}You have access to RAG (Retrieval-Augmented Generation) for enhanced knowledge retrieval.
{% endif %}{% if tools %}You have access to these tools: {{ tools | join(", ") }}.
{% endif %}Framework: {{ framework }}
Model: {{ model }}
Temperature: {{ temperature }}
Be helpful, accurate, and professional in all interactions.
""",
    "a2a/receiver.md": """You are {{ receiver_name }}. {{ receiver_prompt }}

You are receiving a message from another agent ({{ sender_name }}) in an A2A communication. Respond appropriately to the message.
""",
    "marketing/system.md": (
        "You are a marketing copywriter AI. Create compelling, conversion-focused "
        "content that resonates with the target audience.\n"
    ),
    "study/system.md": (
        "You are an educational AI that creates effective study materials. "
        "Be clear, accurate, and pedagogically sound.\n"
    ),
    "market/system.md": (
        "You are a market analyst AI for active traders. Be concise, data-driven, "
        "and explicit about uncertainty. Do not give personalised financial advice.\n"
    ),
}


class PromptLoaderError(Exception):
    """Raised when a prompt cannot be loaded."""

    pass


class PromptLoader:
    """Load and render Jinja2 prompt templates.

    Example:
        >>> loader = PromptLoader()
        >>> loader.load("study/quiz.md", {"topic": "Photosynthesis"})
    """

    def __init__(self, prompts_dir: Optional[Path] = None) -> None:
        """Initialize the prompt loader.

        Args:
            prompts_dir: Directory containing prompt templates.
                        Defaults to backend/prompts/ relative to this file.
        """
        self.prompts_dir = prompts_dir or DEFAULT_PROMPTS_DIR

        if self.prompts_dir.is_dir():
            self.env = jinja2.Environment(
                loader=jinja2.FileSystemLoader(str(self.prompts_dir)),
                autoescape=False,  # Prompts are markdown, not HTML
                auto_reload=True,
                keep_trailing_newline=True,
            )
            logger.debug(
                "PromptLoader initialized with filesystem templates",
                extra={"prompts_dir": str(self.prompts_dir)},
            )
        else:
            self.env = None
            logger.warning(
                "Prompts directory not found, using inline fallbacks",
                extra={"prompts_dir": str(self.prompts_dir)},
            )

    def load(self, path: str, context: Optional[Dict[str, Any]] = None) -> str:
        """Load and render a prompt template.

        Args:
            path: Relative path to the template file (e.g., "agents/system.md").
            context: Dictionary of variables to render into the template.

        Returns:
            The rendered prompt string.

        Raises:
            PromptLoaderError: If the template cannot be loaded or rendered.
        """
        context = context or {}

        if self.env is not None:
            try:
                template = self.env.get_template(path)
                return template.render(**context)
            except jinja2.TemplateNotFound:
                logger.debug(
                    "Template not found in filesystem, trying inline fallback",
                    extra={"path": path},
                )
            except jinja2.TemplateError as e:
                logger.error(
                    "Failed to render template",
                    extra={"path": path, "error": str(e)},
                )
                raise PromptLoaderError(f"Failed to render template {path}: {e}") from e

        return self._get_inline_prompt(path, context)

    def _get_inline_prompt(self, path: str, context: Dict[str, Any]) -> str:
        template_str = INLINE_PROMPTS.get(path)
        if template_str is None:
            logger.warning(
                "No inline fallback for prompt path",
                extra={"path": path, "available": list(INLINE_PROMPTS)},
            )
            raise PromptLoaderError(
                f"Prompt not found: {path}. "
                f"Available inline prompts: {list(INLINE_PROMPTS)}"
            )

        try:
            return jinja2.Template(template_str).render(**context)
        except jinja2.TemplateError as e:
            logger.error(
                "Failed to render inline template",
                extra={"path": path, "error": str(e)},
            )
            raise PromptLoaderError(
                f"Failed to render inline template {path}: {e}"
            ) from e

    def list_available(self) -> Dict[str, list[str]]:
        """List prompt templates under 'filesystem' and 'inline' keys."""
        result: Dict[str, list[str]] = {
            "filesystem": [],
            "inline": sorted(INLINE_PROMPTS),
        }

        if self.prompts_dir.is_dir():
            for md_file in self.prompts_dir.rglob("*.md"):
                relative_path = md_file.relative_to(self.prompts_dir).as_posix()
                result["filesystem"].append(relative_path)

        return result


__all__ = ["PromptLoader", "PromptLoaderError", "DEFAULT_PROMPTS_DIR", "INLINE_PROMPTS"]
