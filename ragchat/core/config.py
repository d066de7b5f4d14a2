"""Configuration management for the RAG chat service."""

from functools import lru_cache

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load environment variables from .env file (only if accessible)
try:
    load_dotenv()
except (PermissionError, OSError):
    # In sandboxed environments, .env might not be accessible
    pass


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Service credentials default to empty strings: a missing value makes the
    first call to that service fail instead of blocking startup.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )

    # External services
    EMBEDDING_API_URL: str = Field(default="", description="Embedding endpoint URL")
    SUPABASE_URL: str = Field(default="", description="Supabase project URL")
    SUPABASE_ANON_KEY: str = Field(default="", description="Supabase anon key")
    ANTHROPIC_API_KEY: str = Field(default="", description="Anthropic API key")

    # Environment
    RAGCHAT_ENV: str = Field(default="dev", description="Environment: dev, staging, prod")

    # Answer generation
    CHAT_MODEL: str = Field(
        default="claude-3-opus-20240229", description="Anthropic model for answers"
    )
    CHAT_MAX_TOKENS: int = Field(default=1000, description="Max output tokens per answer")
    CHAT_TEMPERATURE: float = Field(default=0.7, description="Sampling temperature")

    # Retrieval
    MATCH_THRESHOLD: float = Field(default=0.5, description="Minimum similarity for a match")
    MATCH_COUNT: int = Field(default=3, description="Documents retrieved for /api/chat", ge=1)
    DEBUG_MATCH_COUNT: int = Field(
        default=2, description="Documents retrieved for /api/chat-debug", ge=1
    )

    # Outbound call bounds (seconds)
    EMBEDDING_TIMEOUT_SECONDS: float = Field(default=30.0, gt=0)
    RETRIEVAL_TIMEOUT_SECONDS: float = Field(default=30.0, gt=0)
    LLM_TIMEOUT_SECONDS: float = Field(default=120.0, gt=0)

    # Inbound requests
    DISCONNECT_POLL_SECONDS: float = Field(
        default=0.5, description="How often a running request checks for client disconnect", gt=0
    )
    MAX_BODY_BYTES: int = Field(default=1_000_000, description="Max request body size in bytes")


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Returns:
        Settings instance
    """
    return Settings()
