"""Vote and governance session domain models.

A vote is identified by the composite key (scope, agent_id, proposal_ref)
where scope is a session id or a proposal id. At most one effective vote
exists per key: later submissions replace decision, weight and comment but
keep the original vote id, cast time and insertion sequence.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Any

from src.domain.models.metadata import ELIGIBLE_VOTERS_KEY, MetadataMap


class VoteDecision(Enum):
    """Decision carried by a vote."""

    APPROVE = "approve"
    REJECT = "reject"
    ABSTAIN = "abstain"


VoteKey = tuple[str, str, str]


@dataclass(frozen=True)
class Vote:
    """A weighted vote cast by an agent.

    Weights are not validated here; the agent subsystem is responsible for
    supplying non-negative weights.

    Attributes:
        vote_id: Identifier of the vote record.
        scope: Session id or proposal id the vote is grouped under.
        agent_id: Voting agent.
        proposal_ref: Proposal the vote is about.
        decision: approve, reject or abstain.
        weight: Agent-specific voting power.
        cast_at: When the vote was first cast.
        comment: Free-text justification.
        sequence: Insertion order assigned by the store (tie-breaker).
    """

    vote_id: str
    scope: str
    agent_id: str
    proposal_ref: str
    decision: VoteDecision
    weight: float
    cast_at: datetime
    comment: str = ""
    sequence: int = 0

    def __post_init__(self) -> None:
        """Store the weight as a float so int and float inputs hash alike."""
        object.__setattr__(self, "weight", float(self.weight))

    @property
    def key(self) -> VoteKey:
        """Composite identity used for upserts."""
        return (self.scope, self.agent_id, self.proposal_ref)

    def superseded_by(self, newer: Vote) -> Vote:
        """Apply a later submission for the same key to this vote."""
        return replace(
            self,
            decision=newer.decision,
            weight=newer.weight,
            comment=newer.comment,
        )

    def to_payload(self) -> dict[str, Any]:
        """Canonical payload hashed into the audit chain."""
        return {
            "vote_id": self.vote_id,
            "scope": self.scope,
            "agent_id": self.agent_id,
            "proposal_ref": self.proposal_ref,
            "decision": self.decision.value,
            "weight": self.weight,
            "comment": self.comment,
            "cast_at": self.cast_at.isoformat(),
        }


@dataclass(frozen=True)
class GovernanceSession:
    """A dated governance cycle grouping votes across proposals."""

    session_id: str
    title: str = ""
    date: str | None = None
    summary: str = ""
    metadata: MetadataMap = field(default_factory=MetadataMap)
    created_at: datetime | None = None

    @property
    def eligible_voters(self) -> int | None:
        """Eligible voter population recorded in the session metadata."""
        return self.metadata.get_int(ELIGIBLE_VOTERS_KEY)

    def to_payload(self) -> dict[str, Any]:
        """Canonical payload hashed into the audit chain."""
        return {
            "session_id": self.session_id,
            "title": self.title,
            "date": self.date,
            "summary": self.summary,
            "metadata": self.metadata.to_dict(),
        }
