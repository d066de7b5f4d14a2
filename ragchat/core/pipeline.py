"""Request orchestration: query -> embedding -> retrieval -> context -> answer.

Stages run strictly in order within one request. The first failing stage
ends the run; nothing partial is returned.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import Enum

from ragchat.core.answer import AnswerGenerator
from ragchat.core.context_format import build_context
from ragchat.core.embeddings import EmbeddingClient
from ragchat.core.errors import RagChatError, as_rag_error
from ragchat.core.logging import bind_request_id, get_logger, log_with_context, reset_request_id
from ragchat.core.schemas_chat import (
    ChatMessage,
    ChatResponse,
    DebugResponse,
    DocumentPreview,
    EmbeddingStats,
    RetrievedDocument,
)
from ragchat.db.documents import DocumentRetriever

logger = get_logger(__name__)

PREVIEW_CHARS = 100


class PipelineStage(str, Enum):
    RECEIVING_REQUEST = "receiving_request"
    FETCHING_EMBEDDING = "fetching_embedding"
    RETRIEVING_DOCUMENTS = "retrieving_documents"
    ASSEMBLING_CONTEXT = "assembling_context"
    GENERATING_ANSWER = "generating_answer"
    RESPONDING_SUCCESS = "responding_success"
    RESPONDING_ERROR = "responding_error"


TERMINAL_STAGES = frozenset({PipelineStage.RESPONDING_SUCCESS, PipelineStage.RESPONDING_ERROR})

# Allowed forward transitions; RESPONDING_ERROR is reachable from any non-terminal stage
_NEXT_STAGE: dict[PipelineStage, frozenset[PipelineStage]] = {
    PipelineStage.RECEIVING_REQUEST: frozenset({PipelineStage.FETCHING_EMBEDDING}),
    PipelineStage.FETCHING_EMBEDDING: frozenset({PipelineStage.RETRIEVING_DOCUMENTS}),
    PipelineStage.RETRIEVING_DOCUMENTS: frozenset(
        {PipelineStage.ASSEMBLING_CONTEXT, PipelineStage.RESPONDING_SUCCESS}
    ),
    PipelineStage.ASSEMBLING_CONTEXT: frozenset({PipelineStage.GENERATING_ANSWER}),
    PipelineStage.GENERATING_ANSWER: frozenset({PipelineStage.RESPONDING_SUCCESS}),
}


@dataclass
class PipelineRun:
    """Stage tracker for one request."""

    request_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    stage: PipelineStage = PipelineStage.RECEIVING_REQUEST
    history: list[PipelineStage] = field(
        default_factory=lambda: [PipelineStage.RECEIVING_REQUEST]
    )

    def advance(self, stage: PipelineStage) -> None:
        if self.stage in TERMINAL_STAGES:
            raise RuntimeError(f"Run already finished in {self.stage.value}")
        if stage is not PipelineStage.RESPONDING_ERROR and stage not in _NEXT_STAGE[self.stage]:
            raise RuntimeError(f"Illegal transition {self.stage.value} -> {stage.value}")

        self.stage = stage
        self.history.append(stage)
        log_with_context(
            logger, logging.DEBUG, f"Stage -> {stage.value}",
            request_id=self.request_id, stage=stage.value,
        )

    def fail(self, exc: BaseException) -> RagChatError:
        """Move to RESPONDING_ERROR and return ``exc`` as a taxonomy error tagged with the stage."""
        error = as_rag_error(exc)
        if error.stage is None:
            error.stage = self.stage.value
        self.advance(PipelineStage.RESPONDING_ERROR)
        return error


def preview(content: str) -> str:
    return content[:PREVIEW_CHARS] + "..."


class ChatPipeline:
    """Sequences the external calls behind /api/chat and /api/chat-debug."""

    def __init__(
        self,
        embedder: EmbeddingClient,
        retriever: DocumentRetriever,
        generator: AnswerGenerator,
        match_threshold: float = 0.5,
        match_count: int = 3,
        debug_match_count: int = 2,
    ):
        self.embedder = embedder
        self.retriever = retriever
        self.generator = generator
        self.match_threshold = match_threshold
        self.match_count = match_count
        self.debug_match_count = debug_match_count

    async def _retrieve(self, run: PipelineRun, query: str, match_count: int):
        run.advance(PipelineStage.FETCHING_EMBEDDING)
        embedding = await self.embedder.embed(query)

        run.advance(PipelineStage.RETRIEVING_DOCUMENTS)
        documents = await self.retriever.match_documents(
            embedding.values,
            match_threshold=self.match_threshold,
            match_count=match_count,
        )
        log_with_context(
            logger, logging.INFO, f"Found documents: {len(documents)}",
            request_id=run.request_id, embedding_length=len(embedding.values),
        )
        return embedding, documents

    async def run_chat(
        self,
        history: Sequence[ChatMessage],
        query: str,
        run: PipelineRun | None = None,
    ) -> ChatResponse:
        """
        Answer ``query`` from retrieved documents.

        Args:
            history: Conversation turns before the current question
            query: The current user question
            run: Optional stage tracker (created when omitted)

        Returns:
            ChatResponse with the generated answer

        Raises:
            RagChatError: Tagged with the stage that failed
        """
        run = run or PipelineRun()
        token = bind_request_id(run.request_id)
        log_with_context(logger, logging.INFO, f"Processing query: {query}", request_id=run.request_id)

        try:
            _, documents = await self._retrieve(run, query, self.match_count)

            run.advance(PipelineStage.ASSEMBLING_CONTEXT)
            context = build_context(documents)

            run.advance(PipelineStage.GENERATING_ANSWER)
            answer = await self.generator.generate(history, query, context)
        except Exception as e:
            error = run.fail(e)
            if error is e:
                raise
            raise error from e
        finally:
            reset_request_id(token)

        run.advance(PipelineStage.RESPONDING_SUCCESS)
        return ChatResponse(content=answer)

    async def run_debug(self, query: str, run: PipelineRun | None = None) -> DebugResponse:
        """
        Check the embedding service and vector search without calling the LLM.

        Args:
            query: Text to embed and search for
            run: Optional stage tracker (created when omitted)

        Returns:
            DebugResponse with embedding stats and document previews

        Raises:
            RagChatError: Tagged with the stage that failed
        """
        run = run or PipelineRun()
        token = bind_request_id(run.request_id)
        log_with_context(
            logger, logging.INFO, f"Testing embedding API with query: {query}",
            request_id=run.request_id,
        )

        try:
            embedding, documents = await self._retrieve(run, query, self.debug_match_count)
        except Exception as e:
            error = run.fail(e)
            if error is e:
                raise
            raise error from e
        finally:
            reset_request_id(token)

        run.advance(PipelineStage.RESPONDING_SUCCESS)
        return DebugResponse(
            embedding=EmbeddingStats(
                length=len(embedding.values),
                first_10_values=embedding.values[:10],
                processing_time_ms=embedding.processing_time_ms,
            ),
            documents=[_document_preview(doc) for doc in documents],
        )


def _document_preview(document: RetrievedDocument) -> DocumentPreview:
    return DocumentPreview(
        similarity=document.similarity,
        source=document.source,
        content_preview=preview(document.content),
    )
