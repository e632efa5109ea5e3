"""Phase transition validation errors.

These are ValidationFailure errors: surfaced to the caller and never
retried automatically.
"""

from __future__ import annotations

from typing import Any

from src.domain.exceptions import GovernanceError
from src.domain.models.governance_phase import GovernancePhase


class ValidationFailureError(GovernanceError):
    """Base class for requests the governance rules refuse."""

    error_code = "VALIDATION_FAILURE"


class ProposalNotFoundError(ValidationFailureError):
    """Raised when a proposal id does not resolve to a proposal."""

    error_code = "PROPOSAL_NOT_FOUND"

    def __init__(self, proposal_id: str) -> None:
        self.proposal_id = proposal_id
        super().__init__(f"Proposal {proposal_id} not found")

    def details(self) -> dict[str, Any]:
        return {"proposal_id": self.proposal_id}


class NoTransitionRuleError(ValidationFailureError):
    """Raised when no rule governs the requested phase edge."""

    error_code = "NO_TRANSITION_RULE"

    def __init__(
        self,
        proposal_id: str,
        from_phase: GovernancePhase,
        to_phase: GovernancePhase,
    ) -> None:
        self.proposal_id = proposal_id
        self.from_phase = from_phase
        self.to_phase = to_phase
        super().__init__(
            f"No transition rule found from {from_phase.value} to {to_phase.value}"
        )

    def details(self) -> dict[str, Any]:
        return {
            "proposal_id": self.proposal_id,
            "from_phase": self.from_phase.value,
            "to_phase": self.to_phase.value,
        }


class TransitionConditionsNotMetError(ValidationFailureError):
    """Raised when one or more required conditions are unmet.

    Attributes:
        unmet_conditions: Descriptions of the conditions that failed.
    """

    error_code = "TRANSITION_CONDITIONS_NOT_MET"

    def __init__(
        self,
        proposal_id: str,
        from_phase: GovernancePhase,
        to_phase: GovernancePhase,
        unmet_conditions: list[str] | tuple[str, ...],
    ) -> None:
        self.proposal_id = proposal_id
        self.from_phase = from_phase
        self.to_phase = to_phase
        self.unmet_conditions = tuple(unmet_conditions)
        super().__init__(
            f"Transition conditions not met: {', '.join(self.unmet_conditions)}"
        )

    def details(self) -> dict[str, Any]:
        return {
            "proposal_id": self.proposal_id,
            "from_phase": self.from_phase.value,
            "to_phase": self.to_phase.value,
            "unmet_conditions": list(self.unmet_conditions),
        }


class ConcurrentTransitionError(TransitionConditionsNotMetError):
    """Raised when the proposal changed between validation and write."""

    error_code = "CONCURRENT_TRANSITION"

    def __init__(
        self,
        proposal_id: str,
        from_phase: GovernancePhase,
        to_phase: GovernancePhase,
    ) -> None:
        super().__init__(
            proposal_id,
            from_phase,
            to_phase,
            [f"Proposal is no longer in phase {from_phase.value}"],
        )


class ProposalNotInPhaseError(ValidationFailureError):
    """Raised when an operation requires a specific current phase."""

    error_code = "PROPOSAL_NOT_IN_PHASE"

    def __init__(
        self,
        proposal_id: str,
        required_phase: GovernancePhase,
        current_phase: GovernancePhase,
    ) -> None:
        self.proposal_id = proposal_id
        self.required_phase = required_phase
        self.current_phase = current_phase
        super().__init__(
            f"Proposal {proposal_id} must be in phase {required_phase.value}, "
            f"currently {current_phase.value}"
        )

    def details(self) -> dict[str, Any]:
        return {
            "proposal_id": self.proposal_id,
            "required_phase": self.required_phase.value,
            "current_phase": self.current_phase.value,
        }
