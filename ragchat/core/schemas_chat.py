"""Pydantic schemas for the chat and diagnostic endpoints."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class ChatMessage(BaseModel):
    """A single transcript message."""

    model_config = ConfigDict(extra="ignore")

    id: str | None = Field(default=None, description="Client-side message id")
    role: Literal["user", "assistant"] = Field(..., description="Message author")
    content: str = Field(..., description="Message text")


class ChatRequest(BaseModel):
    """Request schema for POST /api/chat."""

    model_config = ConfigDict(extra="ignore")

    messages: list[ChatMessage] = Field(..., min_length=1, description="Full conversation")

    @model_validator(mode="after")
    def _last_message_is_user_question(self) -> "ChatRequest":
        last = self.messages[-1]
        if last.role != "user":
            raise ValueError("last message must have role 'user'")
        if not last.content.strip():
            raise ValueError("last message content must not be empty")
        return self

    @property
    def query(self) -> str:
        return self.messages[-1].content

    @property
    def history(self) -> list[ChatMessage]:
        return self.messages[:-1]


class ChatResponse(BaseModel):
    """Generated answer returned by POST /api/chat."""

    role: Literal["assistant"] = "assistant"
    content: str


class DebugRequest(BaseModel):
    """Request schema for POST /api/chat-debug."""

    model_config = ConfigDict(extra="ignore")

    query: str = Field(..., description="Text to embed and search for")

    @field_validator("query")
    @classmethod
    def _query_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("query must not be empty")
        return value


class RetrievedDocument(BaseModel):
    """A row returned by the match_documents RPC."""

    model_config = ConfigDict(strict=True, extra="ignore")

    similarity: float
    source: str
    content: str


class EmbeddingResult(BaseModel):
    """Embedding vector plus the service-reported processing time."""

    values: list[float]
    processing_time_ms: float | None = None


class EmbeddingStats(BaseModel):
    """Embedding summary in the diagnostic response."""

    model_config = ConfigDict(populate_by_name=True)

    length: int
    first_10_values: list[float] = Field(..., alias="first10Values")
    processing_time_ms: float | None = Field(default=None, alias="processingTimeMs")


class DocumentPreview(BaseModel):
    """Retrieved document summary in the diagnostic response."""

    model_config = ConfigDict(populate_by_name=True)

    similarity: float
    source: str
    content_preview: str = Field(..., alias="contentPreview")


class DebugResponse(BaseModel):
    """Response schema for POST /api/chat-debug."""

    success: Literal[True] = True
    embedding: EmbeddingStats
    documents: list[DocumentPreview]
