import httpx
import pytest

from backend.src.models.ai import MarketAnalysisRequest, StudyMaterialRequest
from backend.src.services.completion_client import (
    CREDITS_REQUIRED_MESSAGE,
    RATE_LIMITED_MESSAGE,
    CompletionClient,
    error_message,
    first_message_content,
)
from backend.src.services.errors import ConfigurationError, UpstreamError
from backend.src.services.generation_service import GenerationService, get_generation_service

SSE_BODY = (
    b'data: {"choices":[{"delta":{"content":"Hel"}}]}\n\n'
    b'data: {"choices":[{"delta":{"content":"lo"}}]}\n\n'
    b"data: [DONE]\n\n"
)


def generator(make_config, recorder, **config) -> GenerationService:
    cfg = make_config(**config)
    return GenerationService(CompletionClient(cfg, transport=httpx.MockTransport(recorder)))


async def drain(stream) -> bytes:
    return b"".join([chunk async for chunk in stream])


def test_first_message_content_tolerates_bad_payloads():
    assert first_message_content({"choices": [{"message": {"content": "hi"}}]}) == "hi"
    assert first_message_content({"choices": []}) == ""
    assert first_message_content({}) == ""


def test_error_message_variants():
    assert error_message(httpx.Response(400, json={"error": {"message": "bad"}})) == "bad"
    assert error_message(httpx.Response(400, json={"error": "plain"})) == "plain"
    assert error_message(httpx.Response(500, text="<html>")) == "Unknown error"


class TestGatewayStream:
    @pytest.mark.asyncio
    async def test_stream_is_relayed_unchanged(self, make_config, recorder):
        recorder.queue(httpx.Response(200, content=SSE_BODY))
        service = generator(make_config, recorder, ai_gateway_api_key="gw-key")

        stream = await service.study_material(
            "alice", StudyMaterialRequest(topic="Photosynthesis", content_type="quiz")
        )

        assert await drain(stream) == SSE_BODY
        request = recorder.requests[0]
        assert str(request.url) == "https://ai.gateway.lovable.dev/v1/chat/completions"
        assert request.headers["Authorization"] == "Bearer gw-key"
        body = recorder.body()
        assert body["stream"] is True
        assert body["model"] == "google/gemini-2.5-flash"
        assert body["messages"][0]["content"].startswith("You are an educational AI")
        assert "quiz on: Photosynthesis" in body["messages"][1]["content"]
        assert "Source material: None provided" in body["messages"][1]["content"]

    @pytest.mark.asyncio
    async def test_market_analysis_renders_quote_snapshot(self, make_config, recorder):
        recorder.queue(httpx.Response(200, content=SSE_BODY))
        service = generator(make_config, recorder, ai_gateway_api_key="gw-key")

        stream = await service.market_analysis(
            "alice",
            MarketAnalysisRequest(
                symbol="aapl",
                market_data={"name": "Apple Inc.", "price": 178.45, "sentiment": 0.75},
            ),
        )

        assert await drain(stream) == SSE_BODY
        system, user = [m["content"] for m in recorder.body()["messages"]]
        assert system.startswith("You are a market analyst AI")
        assert user.startswith("Analyze AAPL (Apple Inc.) for a trader.")
        assert "- Price: 178.45" in user
        assert "- Volume: n/a" in user
        assert "- Recent news: None provided" in user
        assert "- News sentiment (-1 to 1): 0.75" in user

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "upstream, expected_status, expected_message",
        [
            (429, 429, RATE_LIMITED_MESSAGE),
            (402, 402, CREDITS_REQUIRED_MESSAGE),
            (503, 502, "AI gateway error"),
        ],
    )
    async def test_upstream_errors_are_mapped(
        self, make_config, recorder, upstream, expected_status, expected_message
    ):
        recorder.queue(httpx.Response(upstream, text="nope"))
        service = generator(make_config, recorder, ai_gateway_api_key="gw-key")

        with pytest.raises(UpstreamError) as excinfo:
            await service.study_material(
                "alice", StudyMaterialRequest(topic="Cells", content_type="summary")
            )

        assert excinfo.value.status_code == expected_status
        assert excinfo.value.message == expected_message

    @pytest.mark.asyncio
    async def test_missing_gateway_key(self, make_config, recorder):
        service = generator(make_config, recorder)

        with pytest.raises(ConfigurationError) as excinfo:
            await service.study_material(
                "alice", StudyMaterialRequest(topic="Cells", content_type="flashcards")
            )

        assert excinfo.value.message == "AI gateway API key not configured"
        assert recorder.requests == []


class TestAIRoutes:
    MARKETING = {
        "content_type": "blog",
        "business_info": {"name": "Acme", "industry": "Robotics"},
        "target_audience": "CTOs",
    }

    def test_content_marketing_streams_sse(self, client, override, make_config, recorder):
        recorder.queue(httpx.Response(200, content=SSE_BODY))
        override(
            get_generation_service,
            generator(make_config, recorder, ai_gateway_api_key="gw-key"),
        )

        response = client.post("/api/ai/content-marketing", json=self.MARKETING)

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/event-stream")
        assert response.content == SSE_BODY
        prompt = recorder.body()["messages"][1]["content"]
        assert "Business: Acme" in prompt
        assert "Topic: General industry insights" in prompt

    def test_rate_limit_is_json_error(self, client, override, make_config, recorder):
        recorder.queue(httpx.Response(429))
        override(
            get_generation_service,
            generator(make_config, recorder, ai_gateway_api_key="gw-key"),
        )

        response = client.post("/api/ai/content-marketing", json=self.MARKETING)

        assert response.status_code == 429
        assert response.json() == {
            "error": "rate_limited",
            "message": RATE_LIMITED_MESSAGE,
            "detail": None,
        }

    def test_market_analysis_route_streams_sse(self, client, override, make_config, recorder):
        recorder.queue(httpx.Response(200, content=SSE_BODY))
        override(
            get_generation_service,
            generator(make_config, recorder, ai_gateway_api_key="gw-key"),
        )

        response = client.post("/api/ai/market-analysis", json={"symbol": "TSLA"})

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/event-stream")
        assert response.content == SSE_BODY
        assert "Analyze TSLA for a trader." in recorder.body()["messages"][1]["content"]

    def test_market_sentiment_out_of_range_is_rejected(
        self, client, override, make_config, recorder
    ):
        override(get_generation_service, generator(make_config, recorder))

        response = client.post(
            "/api/ai/market-analysis",
            json={"symbol": "TSLA", "market_data": {"sentiment": 3}},
        )

        assert response.status_code == 400
        assert recorder.requests == []

    def test_unknown_content_type_is_rejected(self, client, override, make_config, recorder):
        override(get_generation_service, generator(make_config, recorder))

        response = client.post(
            "/api/ai/study-material", json={"topic": "Cells", "content_type": "essay"}
        )

        assert response.status_code == 400
        assert recorder.requests == []
