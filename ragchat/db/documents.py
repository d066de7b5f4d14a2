"""Vector similarity search over stored documents via the match_documents RPC."""

import asyncio
import logging
from collections.abc import Callable
from typing import Any

from pydantic import ValidationError as PydanticValidationError
from supabase import Client, PostgrestAPIError

from ragchat.core.errors import MalformedResponseError, UpstreamError
from ragchat.core.logging import get_logger, log_with_context
from ragchat.core.schemas_chat import RetrievedDocument

logger = get_logger(__name__)

MATCH_DOCUMENTS_RPC = "match_documents"


def _backend_message(exc: Exception) -> str:
    """Best human-readable message for a failed RPC call."""
    if isinstance(exc, PostgrestAPIError) and exc.message:
        return exc.message
    return str(exc) or type(exc).__name__


def _parse_rows(data: Any) -> list[RetrievedDocument]:
    if data is None:
        return []
    if not isinstance(data, list):
        raise MalformedResponseError(
            f"match_documents returned {type(data).__name__}, expected a list of rows"
        )

    documents = []
    for i, row in enumerate(data):
        try:
            documents.append(RetrievedDocument.model_validate(row))
        except PydanticValidationError as e:
            raise MalformedResponseError(
                f"match_documents row {i} has unexpected shape: {e.errors()[0]['msg']}"
            ) from e
    return documents


class DocumentRetriever:
    """Finds the stored documents most similar to a query embedding.

    The Supabase client is built on first use by ``client_factory`` so a
    missing configuration surfaces as a failed retrieval, not a failed startup.
    The client is synchronous; each call runs in a worker thread.
    """

    def __init__(self, client_factory: Callable[[], Client], timeout: float = 30.0):
        self._client_factory = client_factory
        self._client: Client | None = None
        self.timeout = timeout

    def _get_client(self) -> Client:
        if self._client is None:
            self._client = self._client_factory()
        return self._client

    def _call_rpc(self, params: dict[str, Any]) -> Any:
        client = self._get_client()
        return client.rpc(MATCH_DOCUMENTS_RPC, params).execute()

    async def match_documents(
        self,
        query_embedding: list[float],
        match_threshold: float = 0.5,
        match_count: int = 3,
    ) -> list[RetrievedDocument]:
        """
        Search for documents similar to the query embedding.

        Args:
            query_embedding: Query embedding vector
            match_threshold: Minimum similarity score for a match
            match_count: Maximum number of documents to return

        Returns:
            Matching documents in backend order (similarity descending).
            An empty list means nothing was similar enough.

        Raises:
            UpstreamError: If the RPC call fails or times out
            MalformedResponseError: If returned rows are not documents
        """
        params = {
            "query_embedding": query_embedding,
            "match_threshold": match_threshold,
            "match_count": match_count,
        }

        try:
            response = await asyncio.wait_for(
                asyncio.to_thread(self._call_rpc, params),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError as e:
            raise UpstreamError(
                f"Failed to retrieve relevant documents: timed out after {self.timeout}s"
            ) from e
        except Exception as e:
            logger.error(f"Error querying Supabase: {_backend_message(e)}")
            raise UpstreamError(
                f"Failed to retrieve relevant documents: {_backend_message(e)}"
            ) from e

        documents = _parse_rows(response.data)

        if documents:
            log_with_context(
                logger, logging.INFO,
                f"Found {len(documents)} documents, first similarity: {documents[0].similarity}",
                match_count=match_count,
            )
        else:
            logger.info("No relevant documents found")

        return documents
