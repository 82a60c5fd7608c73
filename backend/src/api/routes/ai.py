"""Streaming AI generators relayed from the completion gateway."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse

from ...models.ai import (
    ContentMarketingRequest,
    MarketAnalysisRequest,
    StudyMaterialRequest,
)
from ...services.generation_service import GenerationService, get_generation_service
from ..middleware import AuthContext, get_auth_context

router = APIRouter()

SSE_HEADERS = {"Cache-Control": "no-cache", "X-Accel-Buffering": "no"}


@router.post("/api/ai/content-marketing")
async def content_marketing(
    request: ContentMarketingRequest,
    auth: AuthContext = Depends(get_auth_context),
    generator: GenerationService = Depends(get_generation_service),
):
    """Stream a blog post, social posts or a marketing email."""
    stream = await generator.content_marketing(auth.user_id, request)
    return StreamingResponse(stream, media_type="text/event-stream", headers=SSE_HEADERS)


@router.post("/api/ai/study-material")
async def study_material(
    request: StudyMaterialRequest,
    auth: AuthContext = Depends(get_auth_context),
    generator: GenerationService = Depends(get_generation_service),
):
    """Stream flashcards, a quiz or a summary for a topic."""
    stream = await generator.study_material(auth.user_id, request)
    return StreamingResponse(stream, media_type="text/event-stream", headers=SSE_HEADERS)


@router.post("/api/ai/market-analysis")
async def market_analysis(
    request: MarketAnalysisRequest,
    auth: AuthContext = Depends(get_auth_context),
    generator: GenerationService = Depends(get_generation_service),
):
    """Stream an analysis of one ticker from the quote snapshot in the body."""
    stream = await generator.market_analysis(auth.user_id, request)
    return StreamingResponse(stream, media_type="text/event-stream", headers=SSE_HEADERS)


__all__ = ["router"]
