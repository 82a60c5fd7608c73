"""Shared fixtures: a throwaway SQLite database and an authenticated client."""

import json
from pathlib import Path

import httpx
import pytest
from fastapi.testclient import TestClient

from backend.src.api.main import app
from backend.src.api.middleware import AuthContext, get_auth_context
from backend.src.models.auth import JWTPayload
from backend.src.services.config import AppConfig
from backend.src.services.database import DatabaseService


@pytest.fixture
def db(tmp_path: Path) -> DatabaseService:
    service = DatabaseService(tmp_path / "test.db")
    service.initialize()
    return service


def _auth_for(user_id: str) -> AuthContext:
    return AuthContext(
        user_id=user_id,
        token="test-token",
        payload=JWTPayload(sub=user_id, iat=0, exp=4102444800),
    )


@pytest.fixture
def client():
    """TestClient authenticated as ``alice``; overrides are reset afterwards."""
    app.dependency_overrides[get_auth_context] = lambda: _auth_for("alice")
    yield TestClient(app)
    app.dependency_overrides = {}


@pytest.fixture
def as_user():
    """Switch the authenticated caller mid-test."""

    def switch(user_id: str) -> None:
        app.dependency_overrides[get_auth_context] = lambda: _auth_for(user_id)

    return switch


@pytest.fixture
def override():
    """Register a dependency override, e.g. ``override(get_x, service)``."""

    def register(dependency, value) -> None:
        app.dependency_overrides[dependency] = lambda: value

    return register


@pytest.fixture
def make_config(tmp_path: Path):
    """Build an ``AppConfig`` without touching the environment."""

    def build(**overrides) -> AppConfig:
        values = {
            "database_path": tmp_path / "test.db",
            "rag_rebuild_delay_seconds": 0,
            "jwt_secret_key": "unit-test-secret-value",
        }
        values.update(overrides)
        return AppConfig(**values)

    return build


class Recorder:
    """MockTransport handler that records requests and replays queued responses."""

    def __init__(self):
        self.responses: list[httpx.Response] = []
        self.requests: list[httpx.Request] = []

    def queue(self, *responses: httpx.Response) -> "Recorder":
        self.responses.extend(responses)
        return self

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.responses.pop(0)

    def body(self, index: int = 0) -> dict:
        return json.loads(self.requests[index].content)


@pytest.fixture
def recorder() -> Recorder:
    return Recorder()


@pytest.fixture
def completion():
    """Factory for an OpenAI-style chat completion response."""

    def build(text: str, tokens: int = 42) -> httpx.Response:
        return httpx.Response(
            200,
            json={
                "choices": [{"message": {"content": text}}],
                "usage": {"total_tokens": tokens},
            },
        )

    return build
