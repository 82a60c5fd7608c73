"""Streaming marketing-copy, study-material and market-analysis generators."""

from __future__ import annotations

import logging
from typing import AsyncIterator

from ..models.ai import (
    ContentMarketingRequest,
    MarketAnalysisRequest,
    StudyMaterialRequest,
)
from .completion_client import CompletionClient
from .prompt_loader import PromptLoader

logger = logging.getLogger(__name__)


class GenerationService:
    """Render a prompt pair and stream the gateway completion back."""

    def __init__(
        self,
        completion_client: CompletionClient | None = None,
        prompt_loader: PromptLoader | None = None,
    ):
        self.completions = completion_client or CompletionClient()
        self.prompts = prompt_loader or PromptLoader()

    async def content_marketing(
        self, user_id: str, request: ContentMarketingRequest
    ) -> AsyncIterator[bytes]:
        content_type = request.content_type.value
        user_prompt = self.prompts.load(
            f"marketing/{content_type}.md",
            {
                "business": request.business_info.model_dump(),
                "target_audience": request.target_audience,
            },
        )
        logger.info(
            "Generating marketing content",
            extra={"user_id": user_id, "content_type": content_type},
        )
        return await self.completions.stream_gateway(
            self.prompts.load("marketing/system.md").strip(), user_prompt
        )

    async def study_material(
        self, user_id: str, request: StudyMaterialRequest
    ) -> AsyncIterator[bytes]:
        content_type = request.content_type.value
        user_prompt = self.prompts.load(
            f"study/{content_type}.md",
            {"topic": request.topic, "document_content": request.document_content},
        )
        logger.info(
            "Generating study material",
            extra={"user_id": user_id, "content_type": content_type},
        )
        return await self.completions.stream_gateway(
            self.prompts.load("study/system.md").strip(), user_prompt
        )

    async def market_analysis(
        self, user_id: str, request: MarketAnalysisRequest
    ) -> AsyncIterator[bytes]:
        symbol = request.symbol.upper()
        user_prompt = self.prompts.load(
            "market/analysis.md",
            {"symbol": symbol, "market_data": request.market_data.model_dump()},
        )
        logger.info(
            "Generating market analysis", extra={"user_id": user_id, "symbol": symbol}
        )
        return await self.completions.stream_gateway(
            self.prompts.load("market/system.md").strip(), user_prompt
        )


_generation_service: GenerationService | None = None


def get_generation_service() -> GenerationService:
    """Get or create the generation service singleton."""
    global _generation_service
    if _generation_service is None:
        _generation_service = GenerationService()
    return _generation_service


__all__ = ["GenerationService", "get_generation_service"]
