"""Request models for the streaming AI generators."""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class MarketingContentType(str, Enum):
    BLOG = "blog"
    SOCIAL = "social"
    EMAIL = "email"


class StudyContentType(str, Enum):
    FLASHCARDS = "flashcards"
    QUIZ = "quiz"
    SUMMARY = "summary"


class BusinessInfo(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    industry: str = Field(..., min_length=1, max_length=200)
    topic: Optional[str] = Field(None, max_length=500)
    goal: Optional[str] = Field(None, max_length=500)


class ContentMarketingRequest(BaseModel):
    content_type: MarketingContentType
    business_info: BusinessInfo
    target_audience: str = Field(..., min_length=1, max_length=500)


class StudyMaterialRequest(BaseModel):
    topic: str = Field(..., min_length=1, max_length=500)
    content_type: StudyContentType
    document_content: str = Field("", max_length=200_000)


class MarketData(BaseModel):
    """Quote snapshot supplied by the client for one symbol."""

    name: Optional[str] = Field(None, max_length=200)
    price: Optional[float] = Field(None, ge=0)
    volume: Optional[str] = Field(None, max_length=50)
    market_cap: Optional[str] = Field(None, max_length=50)
    news: Optional[str] = Field(None, max_length=2000)
    sentiment: Optional[float] = Field(None, ge=-1, le=1)


class MarketAnalysisRequest(BaseModel):
    symbol: str = Field(..., min_length=1, max_length=12)
    market_data: MarketData = Field(default_factory=MarketData)


__all__ = [
    "MarketingContentType",
    "StudyContentType",
    "BusinessInfo",
    "ContentMarketingRequest",
    "StudyMaterialRequest",
    "MarketData",
    "MarketAnalysisRequest",
]
