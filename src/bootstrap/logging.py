"""Bootstrap wiring for logging configuration."""

from __future__ import annotations

import os

from src.infrastructure.observability import configure_structlog as _configure_structlog

ENVIRONMENT_ENV = "ENVIRONMENT"


def configure_structlog(environment: str | None = None) -> str:
    """Configure structlog for the given environment.

    Args:
        environment: "production" or "development". Defaults to the
            ENVIRONMENT variable, then "production".

    Returns:
        The environment that was applied.
    """
    resolved = environment or os.environ.get(ENVIRONMENT_ENV, "production")
    _configure_structlog(environment=resolved)
    return resolved


__all__ = ["configure_structlog"]
