"""Structured logging setup."""

import logging
import sys

import structlog


def setup_logging(level: str = "INFO", log_format: str = "json") -> structlog.stdlib.BoundLogger:
    """Configure structlog on top of the standard logging module.

    Args:
        level: Log level name
        log_format: "json" for one JSON object per line, "plain" for
            human-readable console output

    Returns:
        Logger bound to the ``actiontree`` namespace
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=log_level,
        force=True,
    )

    if log_format == "json":
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=False)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    return structlog.get_logger("actiontree")
