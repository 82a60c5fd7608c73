"""Document storage, file processing and web page ingestion."""

from __future__ import annotations

import logging
import re
from typing import Any, Dict, List, Optional
from urllib.parse import urlsplit

import httpx

from ..models.document import (
    Document,
    DocumentCreate,
    DocumentUpdate,
    IngestUrlResponse,
    ProcessDocumentResponse,
)
from .database import DatabaseService, utc_now
from .errors import InvalidRequestError, UpstreamError
from .repository import UserScopedTable

logger = logging.getLogger(__name__)

PDF_PLACEHOLDER = (
    "PDF content extraction would require additional libraries. "
    "Please upload text files for now."
)
UNSUPPORTED_PLACEHOLDER = (
    "Document uploaded successfully. "
    "Content extraction for this file type will be available soon."
)
PROCESSING_ERROR_CONTENT = "Error processing document. Please try uploading again."

INGEST_USER_AGENT = "Mozilla/5.0 (compatible; AgentWorkspace RAG Ingest)"
MAX_INGEST_CHARS = 50_000
MAX_FILENAME_STEM = 120

_SCRIPT_RE = re.compile(r"<script[\s\S]*?</script>", re.IGNORECASE)
_STYLE_RE = re.compile(r"<style[\s\S]*?</style>", re.IGNORECASE)
_BLOCK_RE = re.compile(r"<(br|p|div|li|tr|h[1-6])[^>]*>", re.IGNORECASE)
_TAG_RE = re.compile(r"<[^>]+>")
_WHITESPACE_RE = re.compile(r"\s+")
_TITLE_RE = re.compile(r"<title[^>]*>([\s\S]*?)</title>", re.IGNORECASE)
_UNSAFE_PATH_RE = re.compile(r"[^a-zA-Z0-9\-_./]")

# Applied in order, so "&amp;lt;" decodes all the way to "<".
_ENTITIES = (
    ("&nbsp;", " "),
    ("&amp;", "&"),
    ("&lt;", "<"),
    ("&gt;", ">"),
    ("&quot;", '"'),
    ("&#39;", "'"),
)


def html_to_text(html: str) -> str:
    """Reduce an HTML page to whitespace-collapsed plain text."""
    html = _SCRIPT_RE.sub("", html)
    html = _STYLE_RE.sub("", html)
    html = _BLOCK_RE.sub("\n", html)
    text = _TAG_RE.sub(" ", html)
    for entity, replacement in _ENTITIES:
        text = text.replace(entity, replacement)
    return _WHITESPACE_RE.sub(" ", text).strip()


def extract_title(html: str) -> str:
    match = _TITLE_RE.search(html)
    return match.group(1).strip() if match else ""


def ingest_filename(url: str, title: str) -> str:
    """``<title or web_page> - <host/path>`` capped at 120 chars, plus ``.html``."""
    parts = urlsplit(url)
    safe_path = _UNSAFE_PATH_RE.sub("-", f"{parts.hostname or ''}{parts.path or '/'}")
    return f"{title or 'web_page'} - {safe_path}"[:MAX_FILENAME_STEM] + ".html"


def extract_text(file_type: Optional[str], payload: bytes) -> str:
    if file_type == "text/plain":
        return payload.decode("utf-8", errors="replace")
    if file_type == "application/pdf":
        return PDF_PLACEHOLDER
    return UNSUPPORTED_PLACEHOLDER


class DocumentService:
    """CRUD for documents plus the two ways content gets filled in."""

    def __init__(
        self,
        db_service: DatabaseService | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float = 30.0,
    ):
        self._db = db_service or DatabaseService()
        self._transport = transport
        self._timeout = timeout
        self.table = UserScopedTable(
            self._db,
            "documents",
            label="Document",
            order_by="uploaded_at DESC",
            created_column="uploaded_at",
            updated_column=None,
        )

    def _client(self, **kwargs: Any) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self._timeout, transport=self._transport, **kwargs
        )

    def list_documents(self, user_id: str) -> List[Document]:
        return [Document(**row) for row in self.table.list(user_id)]

    def get_document(self, user_id: str, document_id: str) -> Document:
        return Document(**self.table.get(user_id, document_id))

    def create_document(self, user_id: str, data: DocumentCreate) -> Document:
        return Document(**self.table.insert(user_id, data.model_dump()))

    def update_document(
        self, user_id: str, document_id: str, data: DocumentUpdate
    ) -> Document:
        changes = data.model_dump(exclude_unset=True)
        return Document(**self.table.update(user_id, document_id, changes))

    def delete_document(self, user_id: str, document_id: str) -> None:
        self.table.delete(user_id, document_id)

    def documents_in_upload_order(self, user_id: str) -> List[Dict[str, Any]]:
        conn = self._db.connect()
        try:
            rows = conn.execute(
                "SELECT * FROM documents WHERE user_id = ? ORDER BY uploaded_at ASC, rowid ASC",
                (user_id,),
            ).fetchall()
        finally:
            conn.close()
        return [dict(row) for row in rows]

    def count_documents(self, user_id: str) -> int:
        conn = self._db.connect()
        try:
            row = conn.execute(
                "SELECT COUNT(*) AS total FROM documents WHERE user_id = ?", (user_id,)
            ).fetchone()
        finally:
            conn.close()
        return int(row["total"])

    async def process_document(
        self, user_id: str, document_id: str
    ) -> ProcessDocumentResponse:
        """Download ``file_url`` and store whatever text can be extracted.

        A failed download still completes: the document gets an error message
        as its content so the UI can prompt for a re-upload.
        """
        document = self.table.get(user_id, document_id)
        file_url = document.get("file_url")
        if not file_url:
            raise InvalidRequestError(
                "Document has no file_url to process",
                detail={"document_id": document_id},
            )

        try:
            async with self._client(follow_redirects=True) as client:
                response = await client.get(file_url)
                response.raise_for_status()
            content = extract_text(document.get("file_type"), response.content)
            logger.info(
                "Processed document",
                extra={
                    "user_id": user_id,
                    "document_id": document_id,
                    "file_type": document.get("file_type"),
                },
            )
        except httpx.HTTPError as exc:
            logger.error(
                "Error processing document",
                extra={"user_id": user_id, "document_id": document_id, "error": str(exc)},
            )
            content = PROCESSING_ERROR_CONTENT

        self.table.update(
            user_id, document_id, {"content": content, "processed_at": utc_now()}
        )
        return ProcessDocumentResponse()

    async def ingest_url(
        self, user_id: str, url: str, title: Optional[str] = None
    ) -> IngestUrlResponse:
        """Scrape a web page and store it as an already-processed document."""
        logger.info("Scraping URL", extra={"user_id": user_id, "url": url})
        try:
            async with self._client(follow_redirects=True) as client:
                response = await client.get(
                    url, headers={"User-Agent": INGEST_USER_AGENT}
                )
        except httpx.HTTPError as exc:
            raise UpstreamError(
                f"Failed to fetch URL: {exc}", detail={"url": url}
            ) from exc

        if not response.is_success:
            raise UpstreamError(
                f"Failed to fetch URL: {response.status_code} {response.reason_phrase}",
                detail={"url": url, "status": response.status_code},
            )

        html = response.text
        page_title = (title or extract_title(html) or "").strip()
        text = html_to_text(html)[:MAX_INGEST_CHARS]

        record = self.table.insert(
            user_id,
            {
                "filename": ingest_filename(url, page_title),
                "file_url": url,
                "file_type": "text/html",
                "file_size": None,
                "content": f"Source URL: {url}\n\n{text}",
                "processed_at": utc_now(),
            },
        )
        logger.info(
            "Saved scraped document",
            extra={"user_id": user_id, "document_id": record["id"]},
        )
        return IngestUrlResponse(success=True, document=Document(**record))


_document_service: DocumentService | None = None


def get_document_service() -> DocumentService:
    """Get or create the document service singleton."""
    global _document_service
    if _document_service is None:
        _document_service = DocumentService()
    return _document_service


__all__ = [
    "DocumentService",
    "get_document_service",
    "html_to_text",
    "extract_title",
    "ingest_filename",
    "extract_text",
    "PDF_PLACEHOLDER",
    "UNSUPPORTED_PLACEHOLDER",
    "PROCESSING_ERROR_CONTENT",
]
