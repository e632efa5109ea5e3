"""Proposal and discussion domain models.

A Proposal is created in phase PROPOSAL with status DRAFT and is only ever
mutated by the phase state machine. Its status must always be consistent
with its phase (see governance_phase.ALLOWED_STATUSES).
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta
from typing import Any

from src.domain.models.governance_phase import (
    GovernancePhase,
    ProposalStatus,
    is_settled,
    is_status_consistent,
)
from src.domain.models.metadata import RESOLUTION_OUTCOME_KEY, MetadataMap


@dataclass(frozen=True)
class Proposal:
    """A governance proposal.

    Attributes:
        proposal_id: Opaque proposal identifier.
        author_id: Agent that authored the proposal.
        current_phase: Phase the proposal is in.
        current_status: Status consistent with current_phase.
        phase_started_at: When the current phase was entered.
        deadline: Deadline of the current phase, if the phase has a duration.
        title: Human-readable title.
        metadata: Typed metadata map.
    """

    proposal_id: str
    author_id: str
    current_phase: GovernancePhase
    current_status: ProposalStatus
    phase_started_at: datetime
    deadline: datetime | None = None
    title: str = ""
    metadata: MetadataMap = field(default_factory=MetadataMap)

    def __post_init__(self) -> None:
        """Enforce phase/status consistency."""
        if not is_status_consistent(self.current_phase, self.current_status):
            raise ValueError(
                f"Status {self.current_status.value} is not valid in phase "
                f"{self.current_phase.value} for proposal {self.proposal_id}"
            )

    @classmethod
    def create(
        cls,
        proposal_id: str,
        author_id: str,
        timestamp: datetime,
        title: str = "",
        metadata: MetadataMap | None = None,
    ) -> Proposal:
        """Create a new proposal in PROPOSAL/DRAFT.

        Args:
            proposal_id: Identifier for the proposal.
            author_id: Authoring agent.
            timestamp: Current time from TimeAuthorityProtocol.
            title: Optional title.
            metadata: Optional metadata.

        Returns:
            New Proposal entering the PROPOSAL phase.
        """
        return cls(
            proposal_id=proposal_id,
            author_id=author_id,
            current_phase=GovernancePhase.PROPOSAL,
            current_status=ProposalStatus.DRAFT,
            phase_started_at=timestamp,
            title=title,
            metadata=metadata or MetadataMap(),
        )

    @property
    def is_settled(self) -> bool:
        """True when the automatic sweep no longer considers this proposal."""
        return is_settled(self.current_status)

    def time_in_phase(self, current_time: datetime) -> timedelta:
        """Calculate time spent in the current phase.

        Args:
            current_time: Current time from time_authority.now()

        Returns:
            Time spent in the current phase.
        """
        return current_time - self.phase_started_at

    def with_transition(
        self,
        to_phase: GovernancePhase,
        to_status: ProposalStatus,
        timestamp: datetime,
        deadline: datetime | None,
    ) -> Proposal:
        """Return a copy that has entered a new phase."""
        return replace(
            self,
            current_phase=to_phase,
            current_status=to_status,
            phase_started_at=timestamp,
            deadline=deadline,
        )

    def with_status(self, status: ProposalStatus) -> Proposal:
        """Return a copy with a new status in the same phase."""
        return replace(self, current_status=status)

    def with_resolution(self, status: ProposalStatus, outcome: str) -> Proposal:
        """Return a copy carrying a resolution status and its recorded outcome."""
        return replace(
            self,
            current_status=status,
            metadata=self.metadata.with_entries(**{RESOLUTION_OUTCOME_KEY: outcome}),
        )


    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "proposal_id": self.proposal_id,
            "author_id": self.author_id,
            "current_phase": self.current_phase.value,
            "current_status": self.current_status.value,
            "phase_started_at": self.phase_started_at.isoformat(),
            "deadline": self.deadline.isoformat() if self.deadline else None,
            "title": self.title,
            "metadata": self.metadata.to_dict(),
        }


@dataclass(frozen=True)
class Discussion:
    """A discussion thread attached to a proposal."""

    discussion_id: str
    proposal_id: str
    participants: tuple[str, ...] = ()
    created_at: datetime | None = None
