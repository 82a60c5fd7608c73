"""Pydantic models for data validation and serialization."""

from .a2a import A2AMessage, A2AMessageCreate, A2AWorkflow, A2AWorkflowCreate
from .agent import Agent, AgentChatRequest, AgentCreate, UserAgent
from .auth import JWTPayload, TokenResponse
from .document import Document, DocumentCreate, DocumentUpdate
from .integration import Integration, IntegrationCreate, IntegrationUpdate
from .interaction import AgentInteraction
from .mcp import MCPServer, MCPServerCreate, MCPToolRequest
from .profile import Profile, ProfileUpdate, RoleStatus, UserRole
from .rag import RAGQueryRequest, RAGResult, VectorIndex, VectorIndexCreate
from .workflow import Workflow, WorkflowCreate, WorkflowUpdate

__all__ = [
    "A2AMessage",
    "A2AMessageCreate",
    "A2AWorkflow",
    "A2AWorkflowCreate",
    "Agent",
    "AgentChatRequest",
    "AgentCreate",
    "UserAgent",
    "AgentInteraction",
    "Document",
    "DocumentCreate",
    "DocumentUpdate",
    "Integration",
    "IntegrationCreate",
    "IntegrationUpdate",
    "MCPServer",
    "MCPServerCreate",
    "MCPToolRequest",
    "Profile",
    "ProfileUpdate",
    "UserRole",
    "RoleStatus",
    "RAGQueryRequest",
    "RAGResult",
    "VectorIndex",
    "VectorIndexCreate",
    "Workflow",
    "WorkflowCreate",
    "WorkflowUpdate",
    "TokenResponse",
    "JWTPayload",
]
