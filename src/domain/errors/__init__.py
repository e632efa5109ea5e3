"""Domain errors for the governance core.

Provides specific exception classes for different failure scenarios.
All exceptions inherit from GovernanceError.
"""

from src.domain.errors.audit_chain import AuditChainIntegrityError
from src.domain.errors.configuration import InvalidConfigurationError
from src.domain.errors.phase_transition import (
    ConcurrentTransitionError,
    NoTransitionRuleError,
    ProposalNotFoundError,
    ProposalNotInPhaseError,
    TransitionConditionsNotMetError,
    ValidationFailureError,
)
from src.domain.errors.store import TransientStoreError

__all__: list[str] = [
    "AuditChainIntegrityError",
    "ConcurrentTransitionError",
    "InvalidConfigurationError",
    "NoTransitionRuleError",
    "ProposalNotFoundError",
    "ProposalNotInPhaseError",
    "TransientStoreError",
    "TransitionConditionsNotMetError",
    "ValidationFailureError",
]
