"""structlog configuration for the governance processes.

Production renders one JSON object per line; any other environment gets
the colored console renderer. Every entry carries an ISO timestamp, the
level and, inside a correlation scope, the correlation id:

    {
        "timestamp": "2026-01-01T00:00:00.000000Z",
        "level": "info",
        "event": "phase_transition_executed",
        "correlation_id": "uuid",
        "service": "PhaseStateMachineService",
        "component": "governance",
        "proposal_id": "prop-1",
        ...
    }

The minimum level comes from LOG_LEVEL (default INFO) unless passed in.
"""

import logging
import os
from typing import cast

import structlog
from structlog.typing import Processor

from src.infrastructure.observability.correlation import correlation_id_processor

LOG_LEVEL_ENV = "LOG_LEVEL"
DEFAULT_LOG_LEVEL = "INFO"
PRODUCTION = "production"


def resolve_log_level(level_name: str | None = None) -> int:
    """Map a level name to its logging constant, falling back to INFO."""
    name = (level_name or os.getenv(LOG_LEVEL_ENV, DEFAULT_LOG_LEVEL)).upper()
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else logging.INFO


def configure_structlog(
    environment: str = PRODUCTION, log_level: str | None = None
) -> None:
    """Configure structlog once at process startup.

    Args:
        environment: "production" for JSON lines, anything else for the
            console renderer.
        log_level: Level name overriding LOG_LEVEL.
    """
    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        cast(Processor, correlation_id_processor),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if environment == PRODUCTION:
        # Tracebacks as structured data so sweep failures stay one JSON line
        processors += [
            structlog.processors.dict_tracebacks,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(
            resolve_log_level(log_level)
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )
