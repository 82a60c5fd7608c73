"""Application configuration helpers."""

from __future__ import annotations

from functools import lru_cache
import os
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

PROJECT_ROOT = Path(__file__).resolve().parents[3]
DEFAULT_DATABASE_PATH = PROJECT_ROOT / "data" / "app.db"
DEFAULT_AI_GATEWAY_URL = "https://ai.gateway.lovable.dev/v1"
DEFAULT_AI_GATEWAY_MODEL = "google/gemini-2.5-flash"


class AppConfig(BaseModel):
    """Runtime configuration loaded from environment variables."""

    model_config = ConfigDict(frozen=True)

    jwt_secret_key: Optional[str] = Field(
        default=None,
        description="HMAC secret for JWT signing (required for JWT/HTTP auth)",
    )
    enable_local_mode: bool = Field(
        default=True,
        description="Allow local-dev token bypass when running locally",
    )
    local_dev_token: Optional[str] = Field(
        default="local-dev-token",
        description="Static token accepted in local mode for development",
    )
    database_path: Path = Field(..., description="SQLite database file")
    cors_origins: tuple[str, ...] = Field(
        default=("*",), description="Origins allowed by the CORS middleware"
    )
    ai_gateway_url: str = Field(
        default=DEFAULT_AI_GATEWAY_URL,
        description="Base URL of the OpenAI-compatible completion gateway",
    )
    ai_gateway_api_key: Optional[str] = Field(
        None, description="Bearer key for the completion gateway"
    )
    ai_gateway_model: str = Field(
        default=DEFAULT_AI_GATEWAY_MODEL,
        description="Model used for content and study-material generation",
    )
    openai_api_key: Optional[str] = Field(None, description="OpenAI API key (agent chat)")
    langchain_api_key: Optional[str] = Field(
        None, description="LangChain API key (langchain agents)"
    )
    llamaindex_api_key: Optional[str] = Field(
        None, description="LlamaIndex API key (llamaindex agents)"
    )
    google_api_key: Optional[str] = Field(None, description="Google API key (MCP proxy)")
    google_search_engine_id: Optional[str] = Field(
        None, description="Programmable Search Engine id for Google web search"
    )
    rag_rebuild_delay_seconds: float = Field(
        default=5.0,
        ge=0,
        description="Simulated processing time for a vector index rebuild",
    )

    @field_validator("database_path", mode="before")
    @classmethod
    def _normalize_database_path(cls, value: str | Path | None) -> Path:
        if value is None or value == "":
            raise ValueError("DATABASE_PATH is required")
        if isinstance(value, Path):
            path = value
        else:
            path = Path(value)
        return path.expanduser().resolve()

    @field_validator("jwt_secret_key", mode="before")
    @classmethod
    def _ensure_secret(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        cleaned = value.strip()
        if not cleaned:
            raise ValueError(
                "JWT_SECRET_KEY cannot be empty; unset the variable to disable JWT auth in local mode"
            )
        if len(cleaned) < 16:
            raise ValueError("JWT_SECRET_KEY must be at least 16 characters")
        return cleaned

    @field_validator("cors_origins", mode="before")
    @classmethod
    def _split_origins(cls, value: str | tuple[str, ...] | list[str]) -> tuple[str, ...]:
        if isinstance(value, str):
            origins = tuple(part.strip() for part in value.split(",") if part.strip())
            return origins or ("*",)
        return tuple(value)


def _read_env(key: str, default: Optional[str] = None) -> Optional[str]:
    value = os.getenv(key, default)
    if value is not None and value.strip() == "" and default is None:
        return None
    return value


@lru_cache(maxsize=1)
def get_config() -> AppConfig:
    """Load and cache application configuration."""
    enable_local_mode = _read_env("ENABLE_LOCAL_MODE", "true").lower() not in {
        "0",
        "false",
        "no",
    }

    config = AppConfig(
        jwt_secret_key=os.getenv("JWT_SECRET_KEY"),
        enable_local_mode=enable_local_mode,
        local_dev_token=_read_env("LOCAL_DEV_TOKEN", "local-dev-token"),
        database_path=_read_env("DATABASE_PATH", str(DEFAULT_DATABASE_PATH)),
        cors_origins=_read_env("CORS_ORIGINS", "*"),
        ai_gateway_url=_read_env("AI_GATEWAY_URL", DEFAULT_AI_GATEWAY_URL),
        ai_gateway_api_key=_read_env("AI_GATEWAY_API_KEY"),
        ai_gateway_model=_read_env("AI_GATEWAY_MODEL", DEFAULT_AI_GATEWAY_MODEL),
        openai_api_key=_read_env("OPENAI_API_KEY"),
        langchain_api_key=_read_env("LANGCHAIN_API_KEY"),
        llamaindex_api_key=_read_env("LLAMAINDEX_API_KEY"),
        google_api_key=_read_env("GOOGLE_API_KEY"),
        google_search_engine_id=_read_env("GOOGLE_SEARCH_ENGINE_ID"),
        rag_rebuild_delay_seconds=float(_read_env("RAG_REBUILD_DELAY_SECONDS", "5")),
    )
    # Ensure the data directory exists for downstream services.
    config.database_path.parent.mkdir(parents=True, exist_ok=True)
    return config


def reload_config() -> AppConfig:
    """Clear cached config (useful for tests) and reload."""
    get_config.cache_clear()
    return get_config()


__all__ = [
    "AppConfig",
    "get_config",
    "reload_config",
    "PROJECT_ROOT",
    "DEFAULT_DATABASE_PATH",
]
