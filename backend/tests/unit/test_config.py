from pathlib import Path

import pytest

from backend.src.services import config as config_module


@pytest.fixture(autouse=True)
def restore_config_cache():
    """
    Ensure configuration cache is cleared between tests.
    """
    config_module.reload_config()
    yield
    config_module.reload_config()


def test_get_config_allows_missing_jwt_secret(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.delenv("JWT_SECRET_KEY", raising=False)
    monkeypatch.setenv("DATABASE_PATH", str(tmp_path / "app.db"))

    cfg = config_module.reload_config()

    assert cfg.jwt_secret_key is None
    assert cfg.database_path == (tmp_path / "app.db").resolve()


def test_get_config_rejects_short_jwt_secret(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.setenv("DATABASE_PATH", str(tmp_path / "app.db"))
    monkeypatch.setenv("JWT_SECRET_KEY", "short")

    with pytest.raises(ValueError):
        config_module.reload_config()


def test_get_config_reads_provider_keys(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.setenv("DATABASE_PATH", str(tmp_path / "app.db"))
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
    monkeypatch.setenv("AI_GATEWAY_API_KEY", "gw-test")
    monkeypatch.setenv("LANGCHAIN_API_KEY", "")
    monkeypatch.setenv("RAG_REBUILD_DELAY_SECONDS", "0")

    cfg = config_module.reload_config()

    assert cfg.openai_api_key == "sk-test"
    assert cfg.ai_gateway_api_key == "gw-test"
    assert cfg.langchain_api_key is None
    assert cfg.rag_rebuild_delay_seconds == 0


def test_cors_origins_split_on_commas(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.setenv("DATABASE_PATH", str(tmp_path / "app.db"))
    monkeypatch.setenv("CORS_ORIGINS", "https://a.example, https://b.example,")

    cfg = config_module.reload_config()

    assert cfg.cors_origins == ("https://a.example", "https://b.example")


def test_config_is_frozen(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.setenv("DATABASE_PATH", str(tmp_path / "app.db"))
    cfg = config_module.reload_config()

    with pytest.raises(Exception):
        cfg.openai_api_key = "changed"
