"""Service layer for business logic and external integrations."""

from .a2a_service import A2AService, get_a2a_service
from .agent_service import AgentService, get_agent_service
from .auth import AuthError, AuthService
from .completion_client import CompletionClient, get_completion_client
from .config import AppConfig, get_config, reload_config
from .database import DatabaseService, init_database
from .document_service import DocumentService, get_document_service
from .errors import (
    ConfigurationError,
    InvalidRequestError,
    NotFoundError,
    ServiceError,
    UpstreamError,
)
from .generation_service import GenerationService, get_generation_service
from .google_proxy import GoogleProxyService, get_google_proxy_service
from .integration_service import IntegrationService, get_integration_service
from .interaction_service import InteractionService, get_interaction_service
from .mcp_service import MCPService, get_mcp_service
from .profile_service import ProfileService, get_profile_service
from .prompt_loader import PromptLoader, PromptLoaderError
from .rag_service import RAGService, get_rag_service
from .role_service import RoleService, get_role_service
from .workflow_service import WorkflowService, get_workflow_service

__all__ = [
    "AppConfig",
    "get_config",
    "reload_config",
    "DatabaseService",
    "init_database",
    "AuthService",
    "AuthError",
    "ServiceError",
    "NotFoundError",
    "InvalidRequestError",
    "UpstreamError",
    "ConfigurationError",
    "PromptLoader",
    "PromptLoaderError",
    "CompletionClient",
    "get_completion_client",
    "InteractionService",
    "get_interaction_service",
    "ProfileService",
    "get_profile_service",
    "RoleService",
    "get_role_service",
    "DocumentService",
    "get_document_service",
    "RAGService",
    "get_rag_service",
    "AgentService",
    "get_agent_service",
    "A2AService",
    "get_a2a_service",
    "WorkflowService",
    "get_workflow_service",
    "IntegrationService",
    "get_integration_service",
    "GoogleProxyService",
    "get_google_proxy_service",
    "MCPService",
    "get_mcp_service",
    "GenerationService",
    "get_generation_service",
]
