"""Structured logging configuration for the RAG chat service."""

import logging
import sys
from contextvars import ContextVar, Token
from typing import Any

# Request currently being served by this task; set by the pipeline for one run
_current_request_id: ContextVar[str | None] = ContextVar("request_id", default=None)


def bind_request_id(request_id: str) -> Token:
    """Tag every log line emitted in the current context with ``request_id``."""
    return _current_request_id.set(request_id)


def reset_request_id(token: Token) -> None:
    _current_request_id.reset(token)


class RequestContextFilter(logging.Filter):
    """Copies the bound request id onto records that do not carry one."""

    def filter(self, record: logging.LogRecord) -> bool:
        if getattr(record, "request_id", None) is None:
            request_id = _current_request_id.get()
            if request_id is not None:
                record.request_id = request_id
        return True


class StructuredFormatter(logging.Formatter):
    """key=value structured log formatter."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as structured output."""
        log_data = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "module": record.module,
            "function": record.funcName,
            "message": record.getMessage(),
        }

        if getattr(record, "request_id", None) is not None:
            log_data["request_id"] = record.request_id

        if hasattr(record, "extra_data"):
            log_data.update(record.extra_data)

        line = " ".join(f"{k}={v}" for k, v in log_data.items())

        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line


def get_logger(name: str) -> logging.Logger:
    """
    Get a configured logger instance.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)

    # Only configure if not already configured
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(StructuredFormatter())
        logger.addHandler(handler)
        logger.addFilter(RequestContextFilter())

        try:
            from ragchat.core.config import get_settings

            settings = get_settings()
            logger.setLevel(logging.DEBUG if settings.RAGCHAT_ENV == "dev" else logging.INFO)
        except Exception:
            # Default to INFO if settings not available
            logger.setLevel(logging.INFO)

    return logger


def log_with_context(logger: logging.Logger, level: int, msg: str, **kwargs: Any) -> None:
    """
    Log with additional context fields, attributed to the calling function.

    Args:
        logger: Logger instance
        level: Log level (logging.INFO, etc.)
        msg: Log message
        **kwargs: Additional context fields (e.g., request_id, stage)
    """
    extra: dict[str, Any] = {}
    if "request_id" in kwargs:
        extra["request_id"] = kwargs.pop("request_id")
    extra["extra_data"] = kwargs

    logger.log(level, msg, extra=extra, stacklevel=2)
