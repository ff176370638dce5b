"""Structured logging setup using structlog."""

from __future__ import annotations

import logging
import sys

import structlog

from truenas_ntfy.core.config import LoggingConfig

# Event keys whose values must never reach the log output.
_SECRET_KEYS = frozenset({"api_key", "apikey", "token", "authorization"})


def redact_secrets(
    logger: object, method_name: str, event_dict: structlog.types.EventDict
) -> structlog.types.EventDict:
    """Mask credential-bearing keys in an event dict."""
    for key in event_dict:
        if key.lower() in _SECRET_KEYS:
            event_dict[key] = "***"
    return event_dict


def setup_logging(
    config: LoggingConfig | None = None,
    level: str | None = None,
    fmt: str | None = None,
) -> None:
    """Configure structlog with JSON or console renderer.

    Args:
        config: Logging section of the settings. Defaults are used if None.
        level: Log level override (e.g. "DEBUG").
        fmt: Renderer format override ("json" or "console").
    """
    cfg = config or LoggingConfig()
    log_level = getattr(logging, (level or cfg.level).upper(), logging.INFO)
    log_format = fmt or cfg.format

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        redact_secrets,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if log_format == "json":
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(log_level)

    # httpx logs every request at INFO; keep it out of the run log.
    logging.getLogger("httpx").setLevel(max(log_level, logging.WARNING))
