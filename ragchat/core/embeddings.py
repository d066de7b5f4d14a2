"""Query embeddings from the external embedding endpoint."""

import logging

import httpx
from pydantic import BaseModel, ConfigDict
from pydantic import ValidationError as PydanticValidationError

from ragchat.core.errors import MalformedResponseError, UpstreamError
from ragchat.core.logging import get_logger, log_with_context
from ragchat.core.schemas_chat import EmbeddingResult

logger = get_logger(__name__)


class _EmbeddingPayload(BaseModel):
    """Expected body of a successful embedding response."""

    model_config = ConfigDict(strict=True, extra="ignore")

    embedding: list[float]
    processing_time_ms: float | None = None


class EmbeddingClient:
    """Turns a text query into a vector with one POST to the embedding service.

    There are no retries; a failed call fails the request.
    """

    def __init__(self, http_client: httpx.AsyncClient, url: str, timeout: float = 30.0):
        self.http_client = http_client
        self.url = url
        self.timeout = timeout

    async def embed(self, text: str) -> EmbeddingResult:
        """
        Get the embedding for a single text.

        Args:
            text: Non-empty text to embed

        Returns:
            EmbeddingResult with the vector and processing time

        Raises:
            UpstreamError: If the endpoint is unreachable, times out or returns non-2xx
            MalformedResponseError: If the body is not the expected JSON shape
        """
        if not self.url:
            raise UpstreamError("Failed to get embedding: EMBEDDING_API_URL is not configured")

        try:
            response = await self.http_client.post(
                self.url,
                json={"text": text},
                timeout=self.timeout,
            )
        except httpx.TimeoutException as e:
            raise UpstreamError(
                f"Failed to get embedding: timed out after {self.timeout}s"
            ) from e
        except httpx.HTTPError as e:
            raise UpstreamError(f"Failed to get embedding: {e}") from e

        if not response.is_success:
            body = response.text
            raise UpstreamError(
                f"Failed to get embedding: {response.status_code} - {body}",
                status_code=response.status_code,
                body=body,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise MalformedResponseError("Embedding response is not valid JSON") from e

        try:
            payload = _EmbeddingPayload.model_validate(data)
        except PydanticValidationError as e:
            raise MalformedResponseError(
                f"Embedding response has unexpected shape: {e.errors()[0]['msg']}"
            ) from e

        log_with_context(
            logger, logging.INFO, f"Embedding generated, length: {len(payload.embedding)}",
            processing_time_ms=payload.processing_time_ms,
        )

        return EmbeddingResult(
            values=payload.embedding,
            processing_time_ms=payload.processing_time_ms,
        )
