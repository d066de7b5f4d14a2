"""Format retrieved documents into the context block sent to the LLM."""

from collections.abc import Sequence

from ragchat.core.schemas_chat import RetrievedDocument


def format_document(document: RetrievedDocument) -> str:
    return f"Source: {document.source}\n{document.content}"


def build_context(documents: Sequence[RetrievedDocument]) -> str:
    """Join documents, in the given order, separated by a blank line.

    An empty sequence yields an empty string; generation still runs and the
    model is instructed to say it lacks information.
    """
    return "\n\n".join(format_document(doc) for doc in documents)
