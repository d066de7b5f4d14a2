"""Shared request dependencies and helpers for the API routes."""

import asyncio
import json
from collections.abc import Coroutine
from typing import Any, TypeVar

from fastapi import Request
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from ragchat.core.errors import RequestCancelledError, ValidationError
from ragchat.core.pipeline import ChatPipeline

T = TypeVar("T", bound=BaseModel)
R = TypeVar("R")


def get_pipeline(request: Request) -> ChatPipeline:
    """Pipeline built during application startup."""
    return request.app.state.pipeline


def _describe(errors: list[dict[str, Any]]) -> str:
    parts = []
    for err in errors:
        loc = ".".join(str(p) for p in err.get("loc", ()))
        parts.append(f"{loc}: {err['msg']}" if loc else err["msg"])
    return "; ".join(parts)


async def read_json_body(request: Request, model: type[T], max_bytes: int) -> T:
    """
    Read and validate the request body before any external call is made.

    Args:
        request: Incoming request
        model: Pydantic model the body must satisfy
        max_bytes: Largest accepted body

    Returns:
        Validated model instance

    Raises:
        ValidationError: If the body is too large, not JSON, or does not match ``model``
    """
    declared = request.headers.get("content-length")
    if declared is not None and declared.isdigit() and int(declared) > max_bytes:
        raise ValidationError(f"Request body exceeds {max_bytes} bytes")

    raw = await request.body()
    if len(raw) > max_bytes:
        raise ValidationError(f"Request body exceeds {max_bytes} bytes")

    try:
        data = json.loads(raw)
    except ValueError as e:
        raise ValidationError("Request body is not valid JSON") from e

    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")

    try:
        return model.model_validate(data)
    except PydanticValidationError as e:
        details = e.errors(include_url=False, include_context=False, include_input=False)
        raise ValidationError(f"Invalid request body: {_describe(details)}", details=details) from e


async def run_until_disconnected(
    request: Request,
    coro: Coroutine[Any, Any, R],
    poll_seconds: float,
) -> R:
    """
    Await ``coro`` while watching for the client to disconnect.

    The work is cancelled as soon as a disconnect is seen, so an abandoned
    request does not keep calling external services.

    Raises:
        RequestCancelledError: If the client disconnected first
    """
    task = asyncio.ensure_future(coro)
    try:
        while True:
            done, _ = await asyncio.wait({task}, timeout=poll_seconds)
            if done:
                return task.result()
            if await request.is_disconnected():
                task.cancel()
                raise RequestCancelledError("Client disconnected before the response was ready")
    finally:
        if not task.done():
            task.cancel()
