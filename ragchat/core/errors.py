"""Error taxonomy for the chat pipeline.

Every failure that reaches a route is one of the ``RagChatError`` kinds below.
``as_rag_error`` is the single place where arbitrary exceptions are mapped into
the taxonomy, so callers never inspect attributes of an unknown exception.
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorKind(str, Enum):
    """Tag identifying which failure variant an error is."""

    UPSTREAM = "upstream"
    MALFORMED_RESPONSE = "malformed_response"
    VALIDATION = "validation"
    CANCELLED = "cancelled"
    INTERNAL = "internal"


class RagChatError(Exception):
    """Base class for all pipeline failures."""

    kind: ErrorKind = ErrorKind.INTERNAL

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message
        # Set by the pipeline when the error crosses a stage boundary
        self.stage: str | None = None

    def __str__(self) -> str:
        return self.message


class UpstreamError(RagChatError):
    """An external HTTP/RPC call failed or returned a non-success status."""

    kind = ErrorKind.UPSTREAM

    def __init__(self, message: str, status_code: int | None = None, body: str | None = None):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class MalformedResponseError(RagChatError):
    """An external response is missing an expected field or has the wrong shape."""

    kind = ErrorKind.MALFORMED_RESPONSE


class ValidationError(RagChatError):
    """The inbound request body is malformed."""

    kind = ErrorKind.VALIDATION

    def __init__(self, message: str, details: list[dict[str, Any]] | None = None):
        super().__init__(message)
        self.details = details or []


class RequestCancelledError(RagChatError):
    """The client went away before the pipeline finished."""

    kind = ErrorKind.CANCELLED


class InternalError(RagChatError):
    """Any fault that is not one of the other kinds."""

    kind = ErrorKind.INTERNAL


def as_rag_error(exc: BaseException) -> RagChatError:
    """
    Convert any caught exception into a taxonomy error.

    Args:
        exc: The caught exception

    Returns:
        ``exc`` itself when it already is a ``RagChatError``, otherwise an
        ``InternalError`` chained to it
    """
    if isinstance(exc, RagChatError):
        return exc

    message = str(exc) or type(exc).__name__
    error = InternalError(message)
    error.__cause__ = exc
    return error
