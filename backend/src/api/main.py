"""FastAPI application main entry point."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

load_dotenv()  # Before get_config() reads the environment

from .middleware import register_error_handlers
from .routes import (
    a2a,
    agents,
    ai,
    auth,
    documents,
    integrations,
    interactions,
    mcp,
    rag,
    roles,
    system,
    workflows,
)
from ..services.config import get_config
from ..services.database import init_database

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan handler to run startup tasks."""
    logger.info("Running startup: initializing database...")
    db_path = init_database()
    logger.info(f"Startup complete: database ready at {db_path}")
    yield


app = FastAPI(
    title="Agent Workspace API",
    description="Documents, RAG, agents, workflows and MCP tools per user",
    version="0.1.0",
    lifespan=lifespan,
)

config = get_config()

app.add_middleware(
    CORSMiddleware,
    allow_origins=list(config.cors_origins),
    allow_credentials="*" not in config.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_error_handlers(app)

app.include_router(auth.router, tags=["auth"])
app.include_router(roles.router, tags=["roles"])
app.include_router(documents.router, tags=["documents"])
app.include_router(workflows.router, tags=["workflows"])
app.include_router(integrations.router, tags=["integrations"])
app.include_router(mcp.router, tags=["mcp"])
app.include_router(rag.router, tags=["rag"])
app.include_router(agents.router, tags=["agents"])
app.include_router(a2a.router, tags=["a2a"])
app.include_router(ai.router, tags=["ai"])
app.include_router(interactions.router, tags=["interactions"])
app.include_router(system.router, tags=["system"])


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy"}


@app.get("/")
async def root():
    return {"status": "ok", "service": "Agent Workspace API"}


__all__ = ["app"]
