"""Unit tests for the PromptLoader service."""

from pathlib import Path

import pytest

from backend.src.services.prompt_loader import (
    PromptLoader,
    PromptLoaderError,
    DEFAULT_PROMPTS_DIR,
)


@pytest.fixture
def prompts_dir(tmp_path: Path) -> Path:
    """Create a temporary prompts directory with test templates."""
    prompts = tmp_path / "prompts"
    prompts.mkdir()

    agents_dir = prompts / "agents"
    agents_dir.mkdir()
    (agents_dir / "system.md").write_text(
        "# Agent {{ name }}\n\nRole: {{ role }}"
    )

    study_dir = prompts / "study"
    study_dir.mkdir()
    (study_dir / "quiz.md").write_text(
        "Quiz on {{ topic or 'general knowledge' }}"
    )

    return prompts


@pytest.fixture
def loader(prompts_dir: Path) -> PromptLoader:
    return PromptLoader(prompts_dir=prompts_dir)


class TestPromptLoaderInit:
    def test_init_with_existing_directory(self, prompts_dir: Path) -> None:
        loader = PromptLoader(prompts_dir=prompts_dir)

        assert loader.prompts_dir == prompts_dir
        assert loader.env is not None

    def test_init_with_nonexistent_directory(self, tmp_path: Path) -> None:
        """Loader falls back to inline prompts when directory doesn't exist."""
        nonexistent = tmp_path / "nonexistent"
        loader = PromptLoader(prompts_dir=nonexistent)

        assert loader.prompts_dir == nonexistent
        assert loader.env is None

    def test_default_prompts_dir_is_backend_prompts(self) -> None:
        assert DEFAULT_PROMPTS_DIR.name == "prompts"
        assert DEFAULT_PROMPTS_DIR.parent.name == "backend"


class TestPromptLoaderLoad:
    def test_load_template_from_filesystem(self, loader: PromptLoader) -> None:
        result = loader.load("agents/system.md", {"name": "Scout", "role": "researcher"})

        assert "# Agent Scout" in result
        assert "Role: researcher" in result

    def test_load_template_with_default_values(self, loader: PromptLoader) -> None:
        result = loader.load("study/quiz.md", {"topic": None})

        assert result == "Quiz on general knowledge"

    def test_load_nonexistent_template_uses_fallback(self, loader: PromptLoader) -> None:
        """A path missing on disk but present inline renders the inline copy."""
        result = loader.load(
            "a2a/receiver.md",
            {"receiver_name": "Beta", "receiver_prompt": "Be brief.", "sender_name": "Alpha"},
        )

        assert result.startswith("You are Beta. Be brief.")
        assert "(Alpha)" in result

    def test_broken_template_raises(self, prompts_dir: Path) -> None:
        (prompts_dir / "study" / "broken.md").write_text("{% if %}")
        loader = PromptLoader(prompts_dir=prompts_dir)

        with pytest.raises(PromptLoaderError, match="Failed to render template"):
            loader.load("study/broken.md", {})


class TestPromptLoaderInlineFallback:
    def test_inline_agent_system_prompt(self, tmp_path: Path) -> None:
        loader = PromptLoader(prompts_dir=tmp_path / "nonexistent")

        result = loader.load(
            "agents/system.md",
            {
                "name": "Scout",
                "role": "researcher",
                "description": "market research",
                "capabilities": ["search", "summarize"],
                "rag_enabled": True,
                "tools": [],
                "framework": "openai",
                "model": "gpt-4o-mini",
                "temperature": 0.7,
            },
        )

        assert result.startswith(
            "You are Scout, a researcher AI agent specialized in market research."
        )
        assert "Your capabilities include: search, summarize." in result
        assert "RAG (Retrieval-Augmented Generation)" in result
        assert "You have access to these tools" not in result

    def test_inline_fallback_raises_for_unknown_path(self, tmp_path: Path) -> None:
        loader = PromptLoader(prompts_dir=tmp_path / "nonexistent")

        with pytest.raises(PromptLoaderError) as exc_info:
            loader.load("unknown/prompt.md", {})

        assert "Prompt not found" in str(exc_info.value)
        assert "unknown/prompt.md" in str(exc_info.value)


class TestPromptLoaderListAvailable:
    def test_list_available_includes_filesystem_templates(
        self, loader: PromptLoader
    ) -> None:
        available = loader.list_available()

        assert "agents/system.md" in available["filesystem"]
        assert "study/quiz.md" in available["filesystem"]

    def test_list_available_includes_inline_templates(
        self, loader: PromptLoader
    ) -> None:
        available = loader.list_available()

        assert "agents/system.md" in available["inline"]
        assert "a2a/receiver.md" in available["inline"]
        assert "marketing/system.md" in available["inline"]
        assert "study/system.md" in available["inline"]
        assert "market/system.md" in available["inline"]

    def test_list_available_with_nonexistent_dir(self, tmp_path: Path) -> None:
        loader = PromptLoader(prompts_dir=tmp_path / "nonexistent")
        available = loader.list_available()

        assert available["filesystem"] == []
        assert len(available["inline"]) > 0

    def test_shipped_templates_cover_generators(self) -> None:
        available = PromptLoader().list_available()["filesystem"]

        for path in ("marketing/blog.md", "marketing/social.md", "marketing/email.md"):
            assert path in available
        assert "market/analysis.md" in available
        for path in ("study/flashcards.md", "study/quiz.md", "study/summary.md"):
            assert path in available


class TestPromptLoaderHotReload:
    def test_template_changes_are_reflected_with_new_loader(
        self, prompts_dir: Path
    ) -> None:
        loader1 = PromptLoader(prompts_dir=prompts_dir)
        assert "Role: v1" in loader1.load("agents/system.md", {"role": "v1"})

        (prompts_dir / "agents" / "system.md").write_text("# Updated {{ role }}")

        loader2 = PromptLoader(prompts_dir=prompts_dir)
        assert loader2.load("agents/system.md", {"role": "v2"}) == "# Updated v2"
