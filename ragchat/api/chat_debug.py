"""Diagnostic endpoint: exercise the embedding service and vector search only."""

import traceback

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from ragchat.api.deps import get_pipeline, read_json_body, run_until_disconnected
from ragchat.core.config import Settings, get_settings
from ragchat.core.errors import ValidationError, as_rag_error
from ragchat.core.logging import get_logger
from ragchat.core.pipeline import ChatPipeline, PipelineRun
from ragchat.core.schemas_chat import DebugRequest

logger = get_logger(__name__)

router = APIRouter()


@router.post("/chat-debug")
async def chat_debug(
    request: Request,
    pipeline: ChatPipeline = Depends(get_pipeline),
    settings: Settings = Depends(get_settings),
) -> JSONResponse:
    """
    Embed ``query`` and run the similarity search, skipping the LLM.

    Returns:
        200 with embedding stats and document previews,
        400 ``{"success": false, "error": str}`` for a malformed body,
        500 ``{"success": false, "error": str, "stack": str}`` on failure
    """
    run = PipelineRun()

    try:
        body = await read_json_body(request, DebugRequest, settings.MAX_BODY_BYTES)
        result = await run_until_disconnected(
            request,
            pipeline.run_debug(body.query, run=run),
            settings.DISCONNECT_POLL_SECONDS,
        )
    except Exception as e:
        error = as_rag_error(e)
        if isinstance(error, ValidationError):
            logger.warning(f"Rejected debug request: {error}", extra={"request_id": run.request_id})
            return JSONResponse(
                content={"success": False, "error": error.message}, status_code=400
            )

        logger.error(f"Debug API Error: {error}", exc_info=True, extra={"request_id": run.request_id})
        return JSONResponse(
            content={
                "success": False,
                "error": error.message,
                "stack": "".join(traceback.format_exception(e)),
            },
            status_code=500,
        )

    return JSONResponse(content=result.model_dump(by_alias=True), status_code=200)
