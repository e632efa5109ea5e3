"""Phase transition rule and event models.

A PhaseTransitionRule is static configuration: the source and target phase,
the conditions that must all hold, and whether the automatic sweep may fire
it once the proposal has spent timeout_duration in the source phase.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Any

from src.domain.models.governance_phase import GovernancePhase, ProposalStatus
from src.domain.models.metadata import MetadataMap
from src.domain.models.proposal import Discussion, Proposal
from src.domain.models.vote import Vote


class ConditionKind(Enum):
    """Category of a transition condition."""

    MANUAL = "manual"
    TIME = "time"
    PARTICIPATION = "participation"
    CONSENSUS = "consensus"
    AGENT_ACTION = "agent_action"


@dataclass(frozen=True)
class ProposalContext:
    """Snapshot of everything a transition condition may inspect.

    Attributes:
        proposal: The proposal as read from the repository.
        participants: Union of proposer, discussion participants and voters.
        votes: Votes referencing the proposal.
        discussions: Discussions attached to the proposal.
        time_in_phase: Elapsed time since the phase was entered.
    """

    proposal: Proposal
    participants: tuple[str, ...]
    votes: tuple[Vote, ...]
    discussions: tuple[Discussion, ...]
    time_in_phase: timedelta

    @property
    def proposal_id(self) -> str:
        return self.proposal.proposal_id

    @property
    def current_phase(self) -> GovernancePhase:
        return self.proposal.current_phase

    @property
    def current_status(self) -> ProposalStatus:
        return self.proposal.current_status

    @property
    def phase_started_at(self) -> datetime:
        return self.proposal.phase_started_at

    @property
    def deadline(self) -> datetime | None:
        return self.proposal.deadline

    @property
    def metadata(self) -> MetadataMap:
        return self.proposal.metadata


ConditionPredicate = Callable[[ProposalContext], bool]


@dataclass(frozen=True)
class TransitionCondition:
    """A single named requirement of a transition rule."""

    kind: ConditionKind
    description: str
    predicate: ConditionPredicate = field(compare=False)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {"type": self.kind.value, "description": self.description}


@dataclass(frozen=True)
class PhaseTransitionRule:
    """Rule allowing a proposal to move from one phase to another."""

    from_phase: GovernancePhase
    to_phase: GovernancePhase
    required_conditions: tuple[TransitionCondition, ...]
    automatic_transition: bool = False
    timeout_duration: timedelta | None = None
    allowed_roles: tuple[str, ...] = ()

    def matches(self, from_phase: GovernancePhase, to_phase: GovernancePhase) -> bool:
        """Check whether this rule governs the given edge."""
        return self.from_phase == from_phase and self.to_phase == to_phase

    def is_due(self, context: ProposalContext) -> bool:
        """Check whether the automatic sweep should consider this rule.

        Args:
            context: Current proposal context.

        Returns:
            True if the rule is automatic, has a timeout, starts from the
            proposal's phase, and the timeout has elapsed.
        """
        return (
            self.automatic_transition
            and self.timeout_duration is not None
            and self.from_phase == context.current_phase
            and context.time_in_phase >= self.timeout_duration
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "from": self.from_phase.value,
            "to": self.to_phase.value,
            "required_conditions": [c.to_dict() for c in self.required_conditions],
            "automatic_transition": self.automatic_transition,
            "timeout_seconds": (
                self.timeout_duration.total_seconds()
                if self.timeout_duration is not None
                else None
            ),
            "allowed_roles": list(self.allowed_roles),
        }


@dataclass(frozen=True)
class TransitionCheck:
    """Outcome of evaluating a transition without executing it."""

    can_transition: bool
    reasons: tuple[str, ...] = ()

    @classmethod
    def allowed(cls) -> TransitionCheck:
        return cls(can_transition=True)

    @classmethod
    def blocked(cls, reasons: list[str] | tuple[str, ...]) -> TransitionCheck:
        return cls(can_transition=False, reasons=tuple(reasons))

    def to_dict(self) -> dict[str, Any]:
        return {"can_transition": self.can_transition, "reasons": list(self.reasons)}


@dataclass(frozen=True)
class TransitionEvent:
    """Record of an executed phase transition.

    Immutable to ensure transition integrity.
    """

    proposal_id: str
    from_phase: GovernancePhase
    to_phase: GovernancePhase
    from_status: ProposalStatus
    to_status: ProposalStatus
    triggered_by: str
    triggered_at: datetime
    reason: str

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "proposal_id": self.proposal_id,
            "from_phase": self.from_phase.value,
            "to_phase": self.to_phase.value,
            "from_status": self.from_status.value,
            "to_status": self.to_status.value,
            "triggered_by": self.triggered_by,
            "triggered_at": self.triggered_at.isoformat(),
            "reason": self.reason,
        }


@dataclass(frozen=True)
class TransitionOption:
    """A candidate target phase with its eligibility."""

    to_phase: GovernancePhase
    can_transition: bool
    reasons: tuple[str, ...]

    def to_dict(self) -> dict[str, Any]:
        return {
            "to_phase": self.to_phase.value,
            "can_transition": self.can_transition,
            "reasons": list(self.reasons),
        }


@dataclass(frozen=True)
class PhaseStatusReport:
    """Detailed phase and transition status for a proposal."""

    proposal_id: str
    current_phase: GovernancePhase
    current_status: ProposalStatus
    time_in_phase: timedelta
    phase_started_at: datetime
    deadline: datetime | None
    possible_transitions: tuple[TransitionOption, ...]
    configuration: dict[str, Any] | None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "proposal_id": self.proposal_id,
            "current_phase": self.current_phase.value,
            "current_status": self.current_status.value,
            "time_in_phase_seconds": self.time_in_phase.total_seconds(),
            "phase_started_at": self.phase_started_at.isoformat(),
            "deadline": self.deadline.isoformat() if self.deadline else None,
            "possible_transitions": [o.to_dict() for o in self.possible_transitions],
            "configuration": self.configuration,
        }
