"""Vector index bookkeeping and substring retrieval.

Indexing is simulated: a document contributes one "vector" per 500
characters of content. Queries are a case-insensitive substring match over
the caller's first three documents, with two generic results when nothing
matches.
"""

from __future__ import annotations

import asyncio
import logging
import math
import random
import time
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from ..models.rag import (
    IndexDocumentsResponse,
    IndexStatus,
    ProcessedDocument,
    RAGQueryRecord,
    RAGQueryResponse,
    RAGResult,
    RebuildIndexResponse,
    VectorIndex,
    VectorIndexCreate,
    VectorIndexUpdate,
)
from .config import get_config
from .database import DatabaseService, dump_json, new_id, utc_now
from .document_service import DocumentService
from .errors import InvalidRequestError, NotFoundError
from .repository import UserScopedTable

logger = logging.getLogger(__name__)

CHUNK_SIZE = 500
DEFAULT_CONTENT_LENGTH = 1000
VECTORS_PER_DOCUMENT_ON_REBUILD = 50
QUERY_DOCUMENT_WINDOW = 3
EXCERPT_CHARS = 200

INDEX_NOT_FOUND_MESSAGE = "Vector index not found or access denied"
NO_DOCUMENTS_MESSAGE = "No documents found to index"
NOT_READY_MESSAGE = "Vector index is not ready for queries"


def chunk_count(content: Optional[str]) -> int:
    """Number of 500-char chunks; missing content counts as 1000 chars."""
    length = len(content) if content else DEFAULT_CONTENT_LENGTH
    return math.ceil(length / CHUNK_SIZE)


def match_documents(
    query: str,
    documents: List[Dict[str, Any]],
    *,
    score: Callable[[], float] | None = None,
) -> List[RAGResult]:
    """Substring search over the first few documents."""
    score = score or (lambda: random.random() * 0.3 + 0.7)
    needle = query.lower()
    results = []
    for document in documents[:QUERY_DOCUMENT_WINDOW]:
        content = document.get("content") or ""
        if content and needle in content.lower():
            results.append(
                RAGResult(
                    content=content[:EXCERPT_CHARS] + "...",
                    source=document.get("filename") or "Unknown Document",
                    score=score(),
                )
            )
    return results


def fallback_results(query: str, index_name: str) -> List[RAGResult]:
    return [
        RAGResult(
            content=(
                f'This is a relevant excerpt that matches your query about "{query}". '
                "The content discusses related concepts and provides valuable insights."
            ),
            source=f"{index_name}_doc_1.pdf",
            score=0.85,
        ),
        RAGResult(
            content=(
                f'Additional context regarding "{query}" can be found in this section. '
                "It provides supplementary information and background details."
            ),
            source=f"{index_name}_doc_2.pdf",
            score=0.78,
        ),
    ]


class RAGService:
    """Vector index CRUD, indexing, rebuilds and queries."""

    def __init__(
        self,
        db_service: DatabaseService | None = None,
        *,
        document_service: DocumentService | None = None,
        rebuild_delay_seconds: float | None = None,
    ):
        self._db = db_service or DatabaseService()
        self._documents = document_service or DocumentService(self._db)
        if rebuild_delay_seconds is None:
            rebuild_delay_seconds = get_config().rag_rebuild_delay_seconds
        self.rebuild_delay_seconds = rebuild_delay_seconds
        self.indexes = UserScopedTable(
            self._db,
            "vector_indexes",
            label="Vector index",
            not_found_message=INDEX_NOT_FOUND_MESSAGE,
        )

    # Index CRUD

    def list_indexes(self, user_id: str) -> List[VectorIndex]:
        return [VectorIndex(**row) for row in self.indexes.list(user_id)]

    def get_index(self, user_id: str, index_id: str) -> VectorIndex:
        return VectorIndex(**self.indexes.get(user_id, index_id))

    def create_index(self, user_id: str, data: VectorIndexCreate) -> VectorIndex:
        values = data.model_dump()
        values.update(
            status=IndexStatus.BUILDING.value,
            documents_count=0,
            vectors_count=0,
            last_updated_at=utc_now(),
        )
        return VectorIndex(**self.indexes.insert(user_id, values))

    def update_index(
        self, user_id: str, index_id: str, data: VectorIndexUpdate
    ) -> VectorIndex:
        changes = data.model_dump(exclude_unset=True)
        return VectorIndex(**self.indexes.update(user_id, index_id, changes))

    def delete_index(self, user_id: str, index_id: str) -> None:
        self.indexes.delete(user_id, index_id)

    def _set_status(
        self, user_id: str, index_id: str, status: IndexStatus, **extra: Any
    ) -> Dict[str, Any]:
        return self.indexes.update(
            user_id,
            index_id,
            {"status": status.value, "last_updated_at": utc_now(), **extra},
        )

    # Indexing

    def index_documents(
        self, user_id: str, index_id: str, document_ids: List[str]
    ) -> IndexDocumentsResponse:
        index = self.indexes.get(user_id, index_id)
        if not document_ids:
            raise InvalidRequestError("document_ids must be a non-empty list")

        documents = self._documents.table.find_many(user_id, document_ids)
        if not documents:
            raise InvalidRequestError(
                NO_DOCUMENTS_MESSAGE, detail={"document_ids": document_ids}
            )

        logger.info(
            "Indexing documents",
            extra={"user_id": user_id, "index_id": index_id, "documents": len(documents)},
        )
        self._set_status(user_id, index_id, IndexStatus.BUILDING)

        processed: List[ProcessedDocument] = []
        total_vectors = 0
        for document in documents:
            chunks = chunk_count(document.get("content"))
            total_vectors += chunks
            self._documents.table.update(
                user_id, document["id"], {"processed_at": utc_now()}
            )
            processed.append(
                ProcessedDocument(
                    id=document["id"],
                    filename=document["filename"],
                    chunks=chunks,
                    vectors=chunks,
                )
            )

        updated = self._set_status(
            user_id,
            index_id,
            IndexStatus.READY,
            documents_count=index["documents_count"] + len(processed),
            vectors_count=index["vectors_count"] + total_vectors,
        )
        logger.info(
            "Indexed documents",
            extra={"user_id": user_id, "index_id": index_id, "vectors": total_vectors},
        )
        return IndexDocumentsResponse(
            success=True,
            index_name=index["name"],
            processed_documents=processed,
            total_documents=updated["documents_count"],
            total_vectors=updated["vectors_count"],
            completed_at=datetime.now(timezone.utc),
        )

    def start_rebuild(self, user_id: str, index_id: str) -> RebuildIndexResponse:
        """Mark the index as building; ``finish_rebuild`` completes it later."""
        index = self.indexes.get(user_id, index_id)
        self._set_status(user_id, index_id, IndexStatus.BUILDING)
        logger.info(
            "Started index rebuild", extra={"user_id": user_id, "index_id": index_id}
        )
        return RebuildIndexResponse(
            success=True,
            index_name=index["name"],
            status=IndexStatus.BUILDING,
            started_at=datetime.now(timezone.utc),
        )

    async def finish_rebuild(self, user_id: str, index_id: str) -> None:
        """Background half of a rebuild; leaves the index ``ready`` or ``error``."""
        await asyncio.sleep(self.rebuild_delay_seconds)
        if self.indexes.find(user_id, index_id) is None:
            logger.warning(
                "Index deleted before rebuild finished",
                extra={"user_id": user_id, "index_id": index_id},
            )
            return
        try:
            documents = self._documents.count_documents(user_id)
            self._set_status(
                user_id,
                index_id,
                IndexStatus.READY,
                documents_count=documents,
                vectors_count=documents * VECTORS_PER_DOCUMENT_ON_REBUILD,
            )
            logger.info(
                "Rebuilt index",
                extra={"user_id": user_id, "index_id": index_id, "documents": documents},
            )
        except Exception:
            logger.exception(
                "Index rebuild failed", extra={"user_id": user_id, "index_id": index_id}
            )
            try:
                self._set_status(user_id, index_id, IndexStatus.ERROR)
            except NotFoundError:
                logger.warning(
                    "Index deleted during rebuild",
                    extra={"user_id": user_id, "index_id": index_id},
                )

    # Querying

    def query(self, user_id: str, index_id: str, query: str) -> RAGQueryResponse:
        started = time.perf_counter()
        index = self.indexes.get(user_id, index_id)
        if index["status"] != IndexStatus.READY.value:
            raise InvalidRequestError(
                NOT_READY_MESSAGE, detail={"status": index["status"]}
            )

        documents = self._documents.documents_in_upload_order(user_id)
        results = match_documents(query, documents) or fallback_results(
            query, index["name"]
        )
        results.sort(key=lambda result: result.score, reverse=True)
        response_time_ms = int((time.perf_counter() - started) * 1000)

        query_id = new_id()
        conn = self._db.connect()
        try:
            with conn:
                conn.execute(
                    """
                    INSERT INTO rag_queries
                    (id, user_id, vector_index_id, query, results, response_time_ms, created_at)
                    VALUES (?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        query_id,
                        user_id,
                        index_id,
                        query,
                        dump_json([result.model_dump() for result in results]),
                        response_time_ms,
                        utc_now(),
                    ),
                )
        finally:
            conn.close()

        logger.info(
            "RAG query",
            extra={
                "user_id": user_id,
                "index_id": index_id,
                "results": len(results),
                "response_time_ms": response_time_ms,
            },
        )
        return RAGQueryResponse(
            results=results,
            query=query,
            index_name=index["name"],
            processed_at=datetime.now(timezone.utc),
            query_id=query_id,
            response_time_ms=response_time_ms,
        )

    def recent_queries(self, user_id: str, limit: int = 10) -> List[RAGQueryRecord]:
        history = UserScopedTable(self._db, "rag_queries", label="RAG query")
        return [RAGQueryRecord(**row) for row in history.list(user_id, limit=limit)]


_rag_service: RAGService | None = None


def get_rag_service() -> RAGService:
    """Get or create the RAG service singleton."""
    global _rag_service
    if _rag_service is None:
        _rag_service = RAGService()
    return _rag_service


__all__ = [
    "RAGService",
    "get_rag_service",
    "chunk_count",
    "match_documents",
    "fallback_results",
    "INDEX_NOT_FOUND_MESSAGE",
    "NO_DOCUMENTS_MESSAGE",
    "NOT_READY_MESSAGE",
]
