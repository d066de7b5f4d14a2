"""HTTP side of the chat client: submit turns and apply the results."""

from typing import Any

import httpx

from ragchat.client.transcript import ChatTranscript
from ragchat.core.logging import get_logger
from ragchat.core.schemas_chat import ChatMessage, ChatResponse

logger = get_logger(__name__)

CHAT_PATH = "/api/chat"
DEBUG_PATH = "/api/chat-debug"


class ChatRequestError(Exception):
    """The chat endpoint answered with a non-200 status."""


class ChatSession:
    """Sends transcript turns to the chat API.

    Usage:
        async with httpx.AsyncClient(base_url="http://localhost:8000") as http:
            session = ChatSession(http)
            answer = await session.send("What is ADPAC?")
    """

    def __init__(self, http_client: httpx.AsyncClient, transcript: ChatTranscript | None = None):
        self.http_client = http_client
        self.transcript = transcript or ChatTranscript()

    async def _request_answer(self, messages: list[ChatMessage]) -> str:
        response = await self.http_client.post(
            CHAT_PATH,
            json={"messages": [msg.model_dump() for msg in messages]},
        )
        logger.debug(f"API response status: {response.status_code}")

        if response.status_code != 200:
            try:
                body = response.json()
            except ValueError:
                body = None
            detail = body.get("error") if isinstance(body, dict) else None
            raise ChatRequestError(f"API error: {detail or response.status_code}")

        return ChatResponse.model_validate(response.json()).content

    async def send(self, text: str) -> ChatMessage | None:
        """
        Submit one user turn and wait for the answer.

        Returns:
            The settled assistant message, or None when the transcript was
            reset while the request was outstanding

        Raises:
            ValueError: If ``text`` is blank
            ChatBusyError: If another turn is still in flight
        """
        _, placeholder = self.transcript.begin_turn(text)
        messages = self.transcript.request_messages(placeholder.id)

        try:
            content = await self._request_answer(messages)
        except (httpx.HTTPError, ValueError, ChatRequestError) as e:
            logger.warning(f"Chat request failed: {e}")
            applied = self.transcript.fail(placeholder.id)
        else:
            applied = self.transcript.resolve(placeholder.id, content)

        if not applied:
            return None
        return self.transcript.messages[-1]

    async def debug(self, query: str) -> dict[str, Any]:
        """
        Call the diagnostic endpoint and return its JSON body, whatever the status.

        An unreachable server or a body that is not a JSON object is reported
        as ``{"success": False, "error": ...}`` instead of raising.
        """
        try:
            response = await self.http_client.post(DEBUG_PATH, json={"query": query})
            body = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning(f"Debug request failed: {e}")
            return {"success": False, "error": str(e) or type(e).__name__}

        if not isinstance(body, dict):
            return {"success": False, "error": f"Unexpected response ({response.status_code})"}
        return body
