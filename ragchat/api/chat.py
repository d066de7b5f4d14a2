"""Chat endpoint: retrieval-augmented answer for the latest user message."""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from ragchat.api.deps import get_pipeline, read_json_body, run_until_disconnected
from ragchat.core.config import Settings, get_settings
from ragchat.core.errors import ValidationError, as_rag_error
from ragchat.core.logging import get_logger
from ragchat.core.pipeline import ChatPipeline, PipelineRun
from ragchat.core.schemas_chat import ChatRequest

logger = get_logger(__name__)

router = APIRouter()


@router.post("/chat")
async def chat(
    request: Request,
    pipeline: ChatPipeline = Depends(get_pipeline),
    settings: Settings = Depends(get_settings),
) -> JSONResponse:
    """
    Answer the last user message from retrieved documents.

    Body: ``{"messages": [{"role": "user" | "assistant", "content": str}, ...]}``.
    The last message is the question; the ones before it are sent to the
    model as conversation history.

    Returns:
        200 ``{"role": "assistant", "content": str}``,
        400 ``{"error": str}`` for a malformed body,
        500 ``{"error": str}`` for any pipeline failure
    """
    run = PipelineRun()

    try:
        body = await read_json_body(request, ChatRequest, settings.MAX_BODY_BYTES)
        answer = await run_until_disconnected(
            request,
            pipeline.run_chat(body.history, body.query, run=run),
            settings.DISCONNECT_POLL_SECONDS,
        )
    except Exception as e:
        error = as_rag_error(e)
        if isinstance(error, ValidationError):
            logger.warning(f"Rejected chat request: {error}", extra={"request_id": run.request_id})
            return JSONResponse(content={"error": error.message}, status_code=400)

        logger.error(
            f"Error in chat endpoint ({error.kind.value} at {error.stage}): {error}",
            exc_info=True,
            extra={"request_id": run.request_id},
        )
        return JSONResponse(content={"error": error.message}, status_code=500)

    return JSONResponse(content=answer.model_dump(), status_code=200)
