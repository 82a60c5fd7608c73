"""Document models."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, HttpUrl, TypeAdapter, field_validator

MAX_CONTENT_CHARS = 1_048_576

_HTTP_URL = TypeAdapter(HttpUrl)


class Document(BaseModel):
    """Uploaded or ingested document."""

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "id": "9b2b4d6e-1b1f-4e37-9c6a-2d1f7f2d4d10",
                "user_id": "alice",
                "filename": "market-notes.txt",
                "file_url": "https://files.example.com/market-notes.txt",
                "file_type": "text/plain",
                "file_size": 2048,
                "content": "Quarterly outlook...",
                "processed_at": "2025-01-15T14:30:00Z",
                "uploaded_at": "2025-01-15T14:29:00Z",
            }
        }
    )

    id: str
    user_id: str
    filename: str
    file_url: Optional[str] = None
    file_type: Optional[str] = None
    file_size: Optional[int] = Field(None, ge=0)
    content: Optional[str] = None
    processed_at: Optional[datetime] = None
    uploaded_at: datetime


class DocumentCreate(BaseModel):
    filename: str = Field(..., min_length=1, max_length=255)
    file_url: Optional[str] = Field(None, max_length=2048)
    file_type: Optional[str] = Field(None, max_length=255)
    file_size: Optional[int] = Field(None, ge=0)
    content: Optional[str] = Field(None, max_length=MAX_CONTENT_CHARS)


class DocumentUpdate(BaseModel):
    filename: Optional[str] = Field(None, min_length=1, max_length=255)
    file_url: Optional[str] = Field(None, max_length=2048)
    file_type: Optional[str] = Field(None, max_length=255)
    content: Optional[str] = Field(None, max_length=MAX_CONTENT_CHARS)


class ProcessDocumentResponse(BaseModel):
    success: bool = True
    message: str = "Document processing completed"


class IngestUrlRequest(BaseModel):
    """Scrape a web page into a document."""

    url: str = Field(..., max_length=2048)
    title: Optional[str] = Field(None, max_length=200)

    @field_validator("url")
    @classmethod
    def check_url(cls, value: str) -> str:
        # Validated as an http(s) URL but stored exactly as submitted
        try:
            _HTTP_URL.validate_python(value)
        except ValueError as exc:
            raise ValueError("url must be an absolute http(s) URL") from exc
        return value


class IngestUrlResponse(BaseModel):
    success: bool = True
    document: Document


__all__ = [
    "Document",
    "DocumentCreate",
    "DocumentUpdate",
    "ProcessDocumentResponse",
    "IngestUrlRequest",
    "IngestUrlResponse",
]
