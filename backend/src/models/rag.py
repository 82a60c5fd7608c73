"""Vector index and RAG query models."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_EMBEDDING_MODEL = "text-embedding-3-small"


class IndexStatus(str, Enum):
    BUILDING = "building"
    READY = "ready"
    ERROR = "error"


class VectorIndex(BaseModel):
    """A per-user document index; only ``ready`` indexes answer queries."""

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "id": "7e57d004-2b97-0e7a-b45f-5387367791cd",
                "user_id": "alice",
                "name": "research",
                "description": "Market research notes",
                "embedding_model": "text-embedding-3-small",
                "config": {},
                "status": "ready",
                "documents_count": 4,
                "vectors_count": 37,
                "last_updated_at": "2025-01-15T14:30:00Z",
                "created_at": "2025-01-15T14:00:00Z",
                "updated_at": "2025-01-15T14:30:00Z",
            }
        }
    )

    id: str
    user_id: str
    name: str
    description: Optional[str] = None
    embedding_model: str = DEFAULT_EMBEDDING_MODEL
    config: Dict[str, Any] = Field(default_factory=dict)
    status: IndexStatus
    documents_count: int = Field(0, ge=0)
    vectors_count: int = Field(0, ge=0)
    last_updated_at: datetime
    created_at: datetime
    updated_at: datetime


class VectorIndexCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=2000)
    embedding_model: str = Field(DEFAULT_EMBEDDING_MODEL, min_length=1)
    config: Dict[str, Any] = Field(default_factory=dict)


class VectorIndexUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=2000)
    embedding_model: Optional[str] = Field(None, min_length=1)
    config: Optional[Dict[str, Any]] = None


class IndexDocumentsRequest(BaseModel):
    document_ids: List[str] = Field(..., min_length=1)


class ProcessedDocument(BaseModel):
    id: str
    filename: str
    chunks: int
    vectors: int


class IndexDocumentsResponse(BaseModel):
    success: bool = True
    index_name: str
    processed_documents: List[ProcessedDocument]
    total_documents: int
    total_vectors: int
    completed_at: datetime


class RebuildIndexResponse(BaseModel):
    success: bool = True
    index_name: str
    status: IndexStatus = IndexStatus.BUILDING
    started_at: datetime


class RAGQueryRequest(BaseModel):
    query: str = Field(..., min_length=1, max_length=2000)
    vector_index_id: str = Field(..., min_length=1)


class RAGResult(BaseModel):
    content: str
    source: str
    score: float = Field(..., ge=0.0, le=1.0)


class RAGQueryResponse(BaseModel):
    results: List[RAGResult]
    query: str
    index_name: str
    processed_at: datetime
    query_id: Optional[str] = None
    response_time_ms: Optional[int] = None


class RAGQueryRecord(BaseModel):
    """Stored query history entry."""

    id: str
    user_id: str
    vector_index_id: str
    query: str
    results: List[RAGResult] = Field(default_factory=list)
    response_time_ms: Optional[int] = None
    created_at: datetime


__all__ = [
    "DEFAULT_EMBEDDING_MODEL",
    "IndexStatus",
    "VectorIndex",
    "VectorIndexCreate",
    "VectorIndexUpdate",
    "IndexDocumentsRequest",
    "ProcessedDocument",
    "IndexDocumentsResponse",
    "RebuildIndexResponse",
    "RAGQueryRequest",
    "RAGResult",
    "RAGQueryResponse",
    "RAGQueryRecord",
]
