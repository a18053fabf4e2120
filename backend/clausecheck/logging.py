from __future__ import annotations

import logging
from typing import Any

import structlog


def configure_logging(env: str = "dev", level: str = "INFO") -> None:
    """Configure structured logging via structlog.

    Args:
        env: Environment name; in dev use the console renderer, JSON otherwise.
        level: Root log level name for both structlog and stdlib loggers.
    """

    timestamper = structlog.processors.TimeStamper(fmt="iso")

    processors: list[Any] = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        timestamper,
        structlog.processors.format_exc_info,
    ]

    if env == "dev":
        processors.append(structlog.dev.ConsoleRenderer())
    else:
        processors.append(structlog.processors.JSONRenderer())

    structlog.configure(
        processors=processors,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    # Bridge stdlib logging to structlog
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format="%(message)s")
