"""Document CRUD, processing and URL ingestion."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Response, status

from ...models.document import (
    Document,
    DocumentCreate,
    DocumentUpdate,
    IngestUrlRequest,
    IngestUrlResponse,
    ProcessDocumentResponse,
)
from ...services.document_service import DocumentService, get_document_service
from ..middleware import AuthContext, get_auth_context

router = APIRouter()


@router.get("/api/documents", response_model=list[Document])
async def list_documents(
    auth: AuthContext = Depends(get_auth_context),
    documents: DocumentService = Depends(get_document_service),
):
    return documents.list_documents(auth.user_id)


@router.post("/api/documents", response_model=Document, status_code=201)
async def create_document(
    data: DocumentCreate,
    auth: AuthContext = Depends(get_auth_context),
    documents: DocumentService = Depends(get_document_service),
):
    return documents.create_document(auth.user_id, data)


@router.post("/api/documents/ingest-url", response_model=IngestUrlResponse, status_code=201)
async def ingest_url(
    request: IngestUrlRequest,
    auth: AuthContext = Depends(get_auth_context),
    documents: DocumentService = Depends(get_document_service),
):
    """Scrape a web page into a ready-to-index document."""
    return await documents.ingest_url(auth.user_id, request.url, request.title)


@router.get("/api/documents/{document_id}", response_model=Document)
async def get_document(
    document_id: str,
    auth: AuthContext = Depends(get_auth_context),
    documents: DocumentService = Depends(get_document_service),
):
    return documents.get_document(auth.user_id, document_id)


@router.patch("/api/documents/{document_id}", response_model=Document)
async def update_document(
    document_id: str,
    data: DocumentUpdate,
    auth: AuthContext = Depends(get_auth_context),
    documents: DocumentService = Depends(get_document_service),
):
    return documents.update_document(auth.user_id, document_id, data)


@router.delete("/api/documents/{document_id}", status_code=204)
async def delete_document(
    document_id: str,
    auth: AuthContext = Depends(get_auth_context),
    documents: DocumentService = Depends(get_document_service),
):
    documents.delete_document(auth.user_id, document_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/api/documents/{document_id}/process", response_model=ProcessDocumentResponse)
async def process_document(
    document_id: str,
    auth: AuthContext = Depends(get_auth_context),
    documents: DocumentService = Depends(get_document_service),
):
    """Download the document's file and extract its text."""
    return await documents.process_document(auth.user_id, document_id)


__all__ = ["router"]
