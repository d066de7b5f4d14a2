"""Tests for match_documents retrieval with a mocked Supabase client."""

import time
from unittest.mock import MagicMock

import pytest
from supabase import PostgrestAPIError

from ragchat.core.errors import MalformedResponseError, UpstreamError
from ragchat.db.documents import DocumentRetriever

ROWS = [
    {"id": 7, "similarity": 0.91, "source": "glossary.pdf", "content": "ASO means administrative services only."},
    {"id": 3, "similarity": 0.77, "source": "cerp.pdf", "content": "ADA CERP recognizes CE providers."},
]


def _mock_supabase(data=None, error: Exception | None = None) -> MagicMock:
    """Supabase mock whose rpc(...).execute() returns ``data`` or raises ``error``."""
    sb = MagicMock()
    rpc_call = MagicMock()
    if error is not None:
        rpc_call.execute.side_effect = error
    else:
        rpc_call.execute.return_value = MagicMock(data=data)
    sb.rpc.return_value = rpc_call
    return sb


class TestMatchDocuments:
    @pytest.mark.asyncio
    async def test_calls_rpc_with_parameters(self):
        sb = _mock_supabase(data=ROWS)
        retriever = DocumentRetriever(lambda: sb)

        await retriever.match_documents([0.1, 0.2], match_threshold=0.5, match_count=3)

        sb.rpc.assert_called_once_with(
            "match_documents",
            {"query_embedding": [0.1, 0.2], "match_threshold": 0.5, "match_count": 3},
        )

    @pytest.mark.asyncio
    async def test_returns_documents_in_backend_order(self):
        retriever = DocumentRetriever(lambda: _mock_supabase(data=ROWS))

        documents = await retriever.match_documents([0.1])

        assert [d.similarity for d in documents] == [0.91, 0.77]
        assert [d.source for d in documents] == ["glossary.pdf", "cerp.pdf"]
        assert documents[1].content == "ADA CERP recognizes CE providers."

    @pytest.mark.asyncio
    @pytest.mark.parametrize("data", [[], None])
    async def test_no_matches_is_empty_list(self, data):
        retriever = DocumentRetriever(lambda: _mock_supabase(data=data))

        assert await retriever.match_documents([0.1]) == []

    @pytest.mark.asyncio
    async def test_backend_error_raises_upstream_with_message(self):
        error = PostgrestAPIError(
            {"message": "function match_documents does not exist", "code": "42883"}
        )
        retriever = DocumentRetriever(lambda: _mock_supabase(error=error))

        with pytest.raises(UpstreamError) as exc_info:
            await retriever.match_documents([0.1])

        assert "function match_documents does not exist" in str(exc_info.value)
        assert str(exc_info.value).startswith("Failed to retrieve relevant documents: ")

    @pytest.mark.asyncio
    async def test_network_error_raises_upstream(self):
        retriever = DocumentRetriever(lambda: _mock_supabase(error=ConnectionError("network down")))

        with pytest.raises(UpstreamError, match="network down"):
            await retriever.match_documents([0.1])

    @pytest.mark.asyncio
    async def test_client_construction_failure_raises_upstream(self):
        def factory():
            raise RuntimeError("Failed to initialize Supabase client: supabase_url is required")

        retriever = DocumentRetriever(factory)

        with pytest.raises(UpstreamError, match="supabase_url is required"):
            await retriever.match_documents([0.1])

    @pytest.mark.asyncio
    async def test_client_is_built_once(self):
        sb = _mock_supabase(data=ROWS)
        factory = MagicMock(return_value=sb)
        retriever = DocumentRetriever(factory)

        await retriever.match_documents([0.1])
        await retriever.match_documents([0.2])

        factory.assert_called_once_with()
        assert sb.rpc.call_count == 2

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "data",
        [
            {"similarity": 0.9, "source": "a", "content": "b"},
            [{"similarity": 0.9, "source": "a"}],
            [{"similarity": "high", "source": "a", "content": "b"}],
            [{"similarity": 0.9, "source": None, "content": "b"}],
            ["just a string"],
        ],
    )
    async def test_malformed_rows_raise_malformed(self, data):
        retriever = DocumentRetriever(lambda: _mock_supabase(data=data))

        with pytest.raises(MalformedResponseError):
            await retriever.match_documents([0.1])

    @pytest.mark.asyncio
    async def test_slow_backend_times_out(self):
        sb = MagicMock()
        sb.rpc.return_value.execute.side_effect = lambda: time.sleep(0.5)
        retriever = DocumentRetriever(lambda: sb, timeout=0.05)

        with pytest.raises(UpstreamError, match="timed out"):
            await retriever.match_documents([0.1])
