"""Structured logging setup (structlog over the standard library logger)."""

import logging
import sys
from typing import List, Optional

import structlog
from structlog.types import Processor

from launchpad_core.common.config import EngineSettings, LogFormat, get_settings


def setup_logging(settings: Optional[EngineSettings] = None) -> None:
    settings = settings or get_settings()

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, settings.log_level),
    )

    shared_processors: List[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if settings.log_format == LogFormat.JSON:
        processors: List[Processor] = [
            *shared_processors,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors = [
            *shared_processors,
            structlog.dev.ConsoleRenderer(colors=False),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: Optional[str] = None) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


def log_degraded_read(
    logger: structlog.stdlib.BoundLogger,
    *,
    mint: str,
    source: str,
    reason: str,
    **kwargs,
) -> None:
    """An external read fell back past its preferred source."""
    logger.warning(
        "degraded_read",
        mint=mint,
        source=source,
        reason=reason,
        **kwargs,
    )
