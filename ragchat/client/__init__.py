"""Chat client: transcript state and HTTP session for the chat API."""

from ragchat.client.session import ChatRequestError, ChatSession
from ragchat.client.transcript import APOLOGY_MESSAGE, ChatBusyError, ChatTranscript

__all__ = [
    "APOLOGY_MESSAGE",
    "ChatBusyError",
    "ChatRequestError",
    "ChatSession",
    "ChatTranscript",
]
