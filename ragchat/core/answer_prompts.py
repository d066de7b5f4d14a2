"""Prompts for grounded answer generation."""

SYSTEM_PROMPT = (
    "You are a helpful assistant that answers questions based on the provided context. "
    "If the answer cannot be found in the context, say so clearly. "
    "Always cite your sources."
)

USER_TURN_TEMPLATE = """I need information about: {query}

Context information:
{context}

Please answer based on this context information. If you can't find the answer in the context, just say you don't have enough information."""


def build_user_turn(query: str, context: str) -> str:
    """Final user turn combining the literal question with the retrieved context."""
    return USER_TURN_TEMPLATE.format(query=query, context=context)
