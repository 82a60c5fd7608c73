"""Vector index management and RAG queries."""

from __future__ import annotations

import logging

from fastapi import APIRouter, BackgroundTasks, Depends, Query, Response, status

from ...models.rag import (
    IndexDocumentsRequest,
    IndexDocumentsResponse,
    RAGQueryRecord,
    RAGQueryRequest,
    RAGQueryResponse,
    RebuildIndexResponse,
    VectorIndex,
    VectorIndexCreate,
    VectorIndexUpdate,
)
from ...services.rag_service import RAGService, get_rag_service
from ..middleware import AuthContext, get_auth_context

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/api/rag/indexes", response_model=list[VectorIndex])
async def list_indexes(
    auth: AuthContext = Depends(get_auth_context),
    rag: RAGService = Depends(get_rag_service),
):
    return rag.list_indexes(auth.user_id)


@router.post("/api/rag/indexes", response_model=VectorIndex, status_code=201)
async def create_index(
    data: VectorIndexCreate,
    auth: AuthContext = Depends(get_auth_context),
    rag: RAGService = Depends(get_rag_service),
):
    return rag.create_index(auth.user_id, data)


@router.get("/api/rag/indexes/{index_id}", response_model=VectorIndex)
async def get_index(
    index_id: str,
    auth: AuthContext = Depends(get_auth_context),
    rag: RAGService = Depends(get_rag_service),
):
    return rag.get_index(auth.user_id, index_id)


@router.patch("/api/rag/indexes/{index_id}", response_model=VectorIndex)
async def update_index(
    index_id: str,
    data: VectorIndexUpdate,
    auth: AuthContext = Depends(get_auth_context),
    rag: RAGService = Depends(get_rag_service),
):
    return rag.update_index(auth.user_id, index_id, data)


@router.delete("/api/rag/indexes/{index_id}", status_code=204)
async def delete_index(
    index_id: str,
    auth: AuthContext = Depends(get_auth_context),
    rag: RAGService = Depends(get_rag_service),
):
    rag.delete_index(auth.user_id, index_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/api/rag/indexes/{index_id}/documents", response_model=IndexDocumentsResponse
)
async def index_documents(
    index_id: str,
    request: IndexDocumentsRequest,
    auth: AuthContext = Depends(get_auth_context),
    rag: RAGService = Depends(get_rag_service),
):
    """Add documents to an index and mark it ready."""
    return rag.index_documents(auth.user_id, index_id, request.document_ids)


@router.post(
    "/api/rag/indexes/{index_id}/rebuild",
    response_model=RebuildIndexResponse,
    status_code=202,
)
async def rebuild_index(
    index_id: str,
    background_tasks: BackgroundTasks,
    auth: AuthContext = Depends(get_auth_context),
    rag: RAGService = Depends(get_rag_service),
):
    """Start a rebuild; the index stays ``building`` until the task finishes."""
    response = rag.start_rebuild(auth.user_id, index_id)
    background_tasks.add_task(rag.finish_rebuild, auth.user_id, index_id)
    return response


@router.post("/api/rag/query", response_model=RAGQueryResponse)
async def query_index(
    request: RAGQueryRequest,
    auth: AuthContext = Depends(get_auth_context),
    rag: RAGService = Depends(get_rag_service),
):
    return rag.query(auth.user_id, request.vector_index_id, request.query)


@router.get("/api/rag/queries", response_model=list[RAGQueryRecord])
async def recent_queries(
    limit: int = Query(10, ge=1, le=100),
    auth: AuthContext = Depends(get_auth_context),
    rag: RAGService = Depends(get_rag_service),
):
    return rag.recent_queries(auth.user_id, limit=limit)


__all__ = ["router"]
