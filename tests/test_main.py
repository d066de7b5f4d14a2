"""Tests for application startup wiring."""

from fastapi.testclient import TestClient

from ragchat.core.config import Settings
from ragchat.core.pipeline import ChatPipeline
from ragchat.main import app, build_pipeline


def test_health_check():
    response = TestClient(app).get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_lifespan_builds_pipeline():
    with TestClient(app) as client:
        pipeline = client.app.state.pipeline

        assert isinstance(pipeline, ChatPipeline)
        assert pipeline.match_count == 3
        assert pipeline.debug_match_count == 2


def test_build_pipeline_uses_settings():
    settings = Settings(
        EMBEDDING_API_URL="https://embed.example/embed",
        CHAT_MODEL="claude-test",
        CHAT_MAX_TOKENS=256,
        CHAT_TEMPERATURE=0.2,
        MATCH_THRESHOLD=0.65,
        MATCH_COUNT=5,
        DEBUG_MATCH_COUNT=1,
        EMBEDDING_TIMEOUT_SECONDS=3,
    )

    pipeline = build_pipeline(settings, http_client=object(), anthropic_client=object())

    assert pipeline.embedder.url == "https://embed.example/embed"
    assert pipeline.embedder.timeout == 3
    assert pipeline.generator.model == "claude-test"
    assert pipeline.generator.max_tokens == 256
    assert pipeline.generator.temperature == 0.2
    assert pipeline.match_threshold == 0.65
    assert pipeline.match_count == 5
    assert pipeline.debug_match_count == 1
