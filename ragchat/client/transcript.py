"""In-memory conversation transcript for a chat client session.

The transcript is append-only: a submitted turn adds a user message and an
empty assistant placeholder, and the placeholder is filled in (or replaced by
an apology) when the request settles. Only one request may be outstanding.
"""

from __future__ import annotations

import itertools
import time

from ragchat.core.schemas_chat import ChatMessage

APOLOGY_MESSAGE = "Sorry, there was an error processing your request. Please try again."


class ChatBusyError(RuntimeError):
    """A turn was submitted while another request is still outstanding."""


class ChatTranscript:
    """Ordered messages of one chat session plus the in-flight gate."""

    def __init__(self) -> None:
        self.messages: list[ChatMessage] = []
        self._pending_id: str | None = None
        self._ids = itertools.count()

    @property
    def is_loading(self) -> bool:
        return self._pending_id is not None

    def _new_id(self) -> str:
        return f"{time.time_ns()}-{next(self._ids)}"

    def _index_of(self, message_id: str) -> int | None:
        for i, msg in enumerate(self.messages):
            if msg.id == message_id:
                return i
        return None

    def begin_turn(self, text: str) -> tuple[ChatMessage, ChatMessage]:
        """
        Append the user's message and an empty assistant placeholder.

        Returns:
            (user_message, placeholder)

        Raises:
            ValueError: If ``text`` is blank
            ChatBusyError: If a request is already in flight
        """
        if not text.strip():
            raise ValueError("Message must not be empty")
        if self.is_loading:
            raise ChatBusyError("Wait for the current answer before sending another message")

        user_message = ChatMessage(id=self._new_id(), role="user", content=text)
        placeholder = ChatMessage(id=self._new_id(), role="assistant", content="")
        self.messages.append(user_message)
        self.messages.append(placeholder)
        self._pending_id = placeholder.id
        return user_message, placeholder

    def request_messages(self, placeholder_id: str) -> list[ChatMessage]:
        """Messages to send for a turn: everything before its placeholder."""
        index = self._index_of(placeholder_id)
        if index is None:
            return []
        return [msg.model_copy() for msg in self.messages[:index]]

    def resolve(self, placeholder_id: str, content: str) -> bool:
        """Fill the placeholder with the answer. Returns False if it no longer exists."""
        self._release(placeholder_id)
        index = self._index_of(placeholder_id)
        if index is None:
            return False
        self.messages[index].content = content
        return True

    def fail(self, placeholder_id: str) -> bool:
        """Replace the placeholder with the apology. Returns False if it no longer exists."""
        self._release(placeholder_id)
        index = self._index_of(placeholder_id)
        if index is None:
            return False
        self.messages[index] = ChatMessage(
            id=self._new_id(), role="assistant", content=APOLOGY_MESSAGE
        )
        return True

    def reset(self) -> None:
        """Start a new session. A request still in flight settles into nothing."""
        self.messages = []
        self._pending_id = None

    def _release(self, placeholder_id: str) -> None:
        if self._pending_id == placeholder_id:
            self._pending_id = None
