#!/usr/bin/env python3
"""
Structured Logging Module using structlog

This module provides structured logging with:
- Thread ID correlation for request tracing
- Stage numbering for execution flow
- JSON formatting for log aggregation
- API key redaction

Author: System Architect
Date: 2026-03-02
"""

import logging
import re
import sys
from contextvars import ContextVar
from datetime import datetime, timezone

import structlog
from structlog.types import EventDict, WrappedLogger

from spanlens.core.config.settings import get_settings

# Context variable for thread ID (request correlation)
thread_id_ctx: ContextVar[str | None] = ContextVar("thread_id", default=None)

_API_KEY_PATTERNS = (
    re.compile(r"\bsk-[a-zA-Z0-9_-]+\b"),
    re.compile(r"\bxai-[a-zA-Z0-9_-]+\b"),
)


def add_thread_id(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """
    Add thread ID to log event from context variable.

    STAGE-L.1: Thread ID injection
    """
    thread_id = thread_id_ctx.get()
    if thread_id and "thread_id" not in event_dict:
        event_dict["thread_id"] = thread_id
    return event_dict


def add_timestamp(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """
    Add ISO timestamp to log event.

    STAGE-L.2: Timestamp injection
    """
    event_dict["timestamp"] = datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")
    return event_dict


def redact_secrets(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """
    Redact provider API keys from log messages.

    STAGE-L.3: Secret redaction
    """
    message = event_dict.get("event", "")

    if isinstance(message, str):
        for pattern in _API_KEY_PATTERNS:
            message = pattern.sub("[REDACTED]", message)
        event_dict["event"] = message

    return event_dict


def add_log_level_name(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """
    Upper-case the log level.

    STAGE-L.4: Log level injection
    """
    if "level" in event_dict:
        event_dict["level"] = event_dict["level"].upper()
    return event_dict


def setup_logging(log_level: str | None = None, log_format: str | None = None) -> None:
    """
    Setup structured logging with structlog.

    STAGE-L: Logging initialization

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: Log format ('json' or 'console')
    """
    settings = get_settings()

    log_level = log_level or settings.logging.LOG_LEVEL
    log_format = log_format or settings.logging.LOG_FORMAT

    logging.basicConfig(
        format="%(message)s", stream=sys.stdout, level=getattr(logging, log_level.upper())
    )

    if log_format == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=True)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            add_thread_id,
            add_timestamp,
            structlog.stdlib.add_log_level,
            add_log_level_name,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            redact_secrets,
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """
    Get a structured logger instance.

    Usage:
        logger = get_logger(__name__)
        logger.info("message", key="value", stage="1.0")
    """
    return structlog.get_logger(name)


def set_thread_id(thread_id: str) -> None:
    """Set thread ID in context for the current request."""
    thread_id_ctx.set(thread_id)


def get_thread_id() -> str | None:
    """Get current thread ID from context."""
    return thread_id_ctx.get()


def clear_thread_id() -> None:
    """Clear thread ID from context."""
    thread_id_ctx.set(None)


def log_stage(
    logger: structlog.stdlib.BoundLogger, stage: str, message: str, level: str = "info", **kwargs
) -> None:
    """
    Log a message with stage information.

    Usage:
        log_stage(logger, Stage.CASCADE, "Cascade advanced", source="encyclopedia")
    """
    log_func = getattr(logger, level.lower())
    stage_value = stage.value if hasattr(stage, "value") else stage
    log_func(message, stage=stage_value, **kwargs)
