"""
Infrastructure layer - External adapters for the governance core.

This layer contains:
- PostgreSQL persistence adapters (SQLAlchemy async)
- In-memory stubs for tests and local runs
- Observability (structlog) and monitoring (Prometheus)

IMPORT RULES:
- CAN import from: domain, application
- Implements ports defined in application layer
"""

__all__: list[str] = []
