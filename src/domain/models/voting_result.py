"""Voting result models derived from a set of votes.

These are computed on demand and never persisted. Consensus is measured by
weight; quorum is an absolute head count of distinct voters against a
minimum-participant requirement.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from src.domain.models.audit_chain import AuditChainEntry
    from src.domain.models.vote import GovernanceSession


class VotingOutcome(Enum):
    """Final verdict of a vote set."""

    APPROVED = "approved"
    REJECTED = "rejected"
    PENDING = "pending"


@dataclass(frozen=True)
class DecisionTally:
    """Count and weight sum for one decision bucket."""

    count: int = 0
    weight: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return {"count": self.count, "weight": self.weight}


@dataclass(frozen=True)
class VotingResult:
    """Outcome of applying quorum and consensus rules to votes.

    Attributes:
        proposal_ref: Proposal the votes refer to (None when unscoped).
        total_votes: Number of votes counted.
        total_weight: Sum of all weights, abstentions included.
        approve/reject/abstain: Per-decision tallies.
        consensus_percentage: approve weight as a percentage of total weight.
        consensus_threshold: Required approve percentage (0-100).
        quorum_threshold: Minimum distinct voters required.
        eligible_voters: Eligible population, when known.
        participation_rate: Distinct voters over eligible population.
        quorum_met: Whether enough distinct agents voted.
        consensus_met: Whether the consensus percentage reached the threshold.
        result: approved, rejected, or pending.
    """

    proposal_ref: str | None
    total_votes: int
    total_weight: float
    approve: DecisionTally
    reject: DecisionTally
    abstain: DecisionTally
    consensus_percentage: float
    consensus_threshold: float
    quorum_threshold: int
    eligible_voters: int | None
    participation_rate: float
    quorum_met: bool
    consensus_met: bool
    result: VotingOutcome

    @property
    def approve_weight(self) -> float:
        return self.approve.weight

    @property
    def reject_weight(self) -> float:
        return self.reject.weight

    @property
    def abstain_weight(self) -> float:
        return self.abstain.weight

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "proposal_ref": self.proposal_ref,
            "total_votes": self.total_votes,
            "total_weight": self.total_weight,
            "votes": {
                "approve": self.approve.to_dict(),
                "reject": self.reject.to_dict(),
                "abstain": self.abstain.to_dict(),
            },
            "consensus": {
                "percentage": self.consensus_percentage,
                "threshold": self.consensus_threshold,
                "met": self.consensus_met,
            },
            "quorum": {
                "threshold": self.quorum_threshold,
                "eligible_voters": self.eligible_voters,
                "participation_rate": self.participation_rate,
                "met": self.quorum_met,
            },
            "result": self.result.value,
        }


@dataclass(frozen=True)
class SessionResults:
    """Aggregated results and audit chain for a governance session."""

    session: GovernanceSession
    total_votes: int
    total_agents: int
    participation_rate: float
    results_by_proposal: tuple[VotingResult, ...]
    audit_chain: tuple[AuditChainEntry, ...]

    @property
    def session_id(self) -> str:
        return self.session.session_id

    @property
    def head_hash(self) -> str | None:
        """Hash of the last chain entry, the value to record for verification."""
        return self.audit_chain[-1].hash if self.audit_chain else None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "session_id": self.session_id,
            "session": self.session.to_payload(),
            "total_votes": self.total_votes,
            "total_agents": self.total_agents,
            "participation_rate": self.participation_rate,
            "results_by_proposal": [r.to_dict() for r in self.results_by_proposal],
            "audit_chain": [e.to_dict() for e in self.audit_chain],
            "head_hash": self.head_hash,
        }
