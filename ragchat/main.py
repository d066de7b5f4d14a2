"""FastAPI application entry point."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from functools import partial

import httpx
from anthropic import AsyncAnthropic
from fastapi import FastAPI
from fastapi.responses import JSONResponse

from ragchat.api import router as api_router
from ragchat.core.answer import AnswerGenerator
from ragchat.core.config import Settings, get_settings
from ragchat.core.embeddings import EmbeddingClient
from ragchat.core.logging import get_logger
from ragchat.core.pipeline import ChatPipeline
from ragchat.db.documents import DocumentRetriever
from ragchat.db.supabase_client import create_supabase

logger = get_logger(__name__)


def build_pipeline(
    settings: Settings,
    http_client: httpx.AsyncClient,
    anthropic_client: AsyncAnthropic,
) -> ChatPipeline:
    """Wire the pipeline stages from settings and the shared clients."""
    return ChatPipeline(
        embedder=EmbeddingClient(
            http_client,
            url=settings.EMBEDDING_API_URL,
            timeout=settings.EMBEDDING_TIMEOUT_SECONDS,
        ),
        retriever=DocumentRetriever(
            partial(create_supabase, settings),
            timeout=settings.RETRIEVAL_TIMEOUT_SECONDS,
        ),
        generator=AnswerGenerator(
            anthropic_client,
            model=settings.CHAT_MODEL,
            max_tokens=settings.CHAT_MAX_TOKENS,
            temperature=settings.CHAT_TEMPERATURE,
        ),
        match_threshold=settings.MATCH_THRESHOLD,
        match_count=settings.MATCH_COUNT,
        debug_match_count=settings.DEBUG_MATCH_COUNT,
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Create the outbound clients on startup and close them on shutdown."""
    settings = get_settings()

    for name in ("EMBEDDING_API_URL", "SUPABASE_URL", "SUPABASE_ANON_KEY", "ANTHROPIC_API_KEY"):
        if not getattr(settings, name):
            logger.warning(f"{name} is not set; requests needing it will fail")

    http_client = httpx.AsyncClient(timeout=settings.EMBEDDING_TIMEOUT_SECONDS)
    anthropic_client = AsyncAnthropic(
        api_key=settings.ANTHROPIC_API_KEY,
        timeout=settings.LLM_TIMEOUT_SECONDS,
        max_retries=0,
    )
    app.state.pipeline = build_pipeline(settings, http_client, anthropic_client)
    logger.info("Application initialized")

    try:
        yield
    finally:
        logger.info("Application shutting down...")
        await anthropic_client.close()
        await http_client.aclose()


app = FastAPI(
    title="RAG Chat",
    description="Retrieval-augmented chat over Supabase vector search and Anthropic",
    version="0.1.0",
    lifespan=lifespan,
)


@app.get("/health")
async def health_check() -> JSONResponse:
    """Health check endpoint."""
    return JSONResponse(content={"status": "ok"}, status_code=200)


app.include_router(api_router, prefix="/api")


def run() -> None:
    """Serve the app with uvicorn (``ragchat-server``)."""
    import uvicorn

    uvicorn.run("ragchat.main:app", host="0.0.0.0", port=8000)


if __name__ == "__main__":
    run()
