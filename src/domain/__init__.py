"""
Domain layer - Pure governance logic.

This layer contains:
- Domain models (proposals, votes, sessions, transition rules)
- Domain services (consensus arithmetic, audit chain construction)
- Hash utilities for the audit chain
- Domain errors

CRITICAL: This layer must NOT import from application, infrastructure, or api.
Only stdlib and typing imports are allowed.
"""

from src.domain.exceptions import GovernanceError

__all__: list[str] = ["GovernanceError"]
