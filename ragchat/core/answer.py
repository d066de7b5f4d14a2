"""Answer generation with the Anthropic Messages API."""

from collections.abc import Sequence
from typing import Any

import anthropic
from anthropic import AsyncAnthropic

from ragchat.core.answer_prompts import SYSTEM_PROMPT, build_user_turn
from ragchat.core.errors import MalformedResponseError, UpstreamError
from ragchat.core.logging import get_logger
from ragchat.core.schemas_chat import ChatMessage

logger = get_logger(__name__)


def build_messages(history: Sequence[ChatMessage], query: str, context: str) -> list[dict[str, str]]:
    """Prior turns verbatim, then the question with its context as the last user turn."""
    messages = [{"role": msg.role, "content": msg.content} for msg in history]
    messages.append({"role": "user", "content": build_user_turn(query, context)})
    return messages


def _first_text(response: Any) -> str:
    for block in response.content or []:
        if getattr(block, "type", None) == "text":
            return block.text
    raise MalformedResponseError("Anthropic response contained no text content")


class AnswerGenerator:
    """Generates an answer grounded in the assembled context."""

    def __init__(
        self,
        client: AsyncAnthropic,
        model: str,
        max_tokens: int = 1000,
        temperature: float = 0.7,
    ):
        self.client = client
        self.model = model
        self.max_tokens = max_tokens
        self.temperature = temperature

    async def generate(
        self,
        history: Sequence[ChatMessage],
        query: str,
        context: str,
    ) -> str:
        """
        Ask the model to answer ``query`` from ``context``.

        Args:
            history: Conversation turns before the current question
            query: The current user question
            context: Assembled context block (may be empty)

        Returns:
            Text of the first text block in the response

        Raises:
            UpstreamError: If the API call fails
            MalformedResponseError: If the response has no text block
        """
        logger.info("Calling Anthropic API...", extra={"extra_data": {"model": self.model}})

        try:
            response = await self.client.messages.create(
                model=self.model,
                max_tokens=self.max_tokens,
                temperature=self.temperature,
                system=SYSTEM_PROMPT,
                messages=build_messages(history, query, context),
                stream=False,
            )
        except anthropic.APIStatusError as e:
            raise UpstreamError(
                f"Failed to generate answer: {e.status_code} - {e.message}",
                status_code=e.status_code,
                body=e.message,
            ) from e
        except anthropic.APIError as e:
            # Connection failures and timeouts carry no status code
            raise UpstreamError(f"Failed to generate answer: {e.message}") from e

        logger.info("Anthropic API response received")
        return _first_text(response)
