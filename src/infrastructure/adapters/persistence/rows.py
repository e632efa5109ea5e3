"""Row to domain model mapping for the PostgreSQL adapters."""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any

from src.domain.models.governance_phase import GovernancePhase, ProposalStatus
from src.domain.models.metadata import MetadataMap
from src.domain.models.proposal import Discussion, Proposal
from src.domain.models.vote import GovernanceSession, Vote, VoteDecision


def load_json(value: Any) -> dict[str, Any]:
    """Decode a JSONB column, which may arrive as text or already decoded."""
    if value is None:
        return {}
    if isinstance(value, (str, bytes)):
        return json.loads(value)
    return dict(value)


def dump_metadata(metadata: MetadataMap) -> str:
    return json.dumps(metadata.to_dict(), sort_keys=True)


def row_to_proposal(row: Mapping[str, Any]) -> Proposal:
    return Proposal(
        proposal_id=row["id"],
        author_id=row["author_id"],
        current_phase=GovernancePhase(row["current_phase"]),
        current_status=ProposalStatus(row["current_status"]),
        phase_started_at=row["phase_started_at"],
        deadline=row["deadline"],
        title=row["title"] or "",
        metadata=MetadataMap.from_dict(load_json(row["metadata"])),
    )


def proposal_params(proposal: Proposal) -> dict[str, Any]:
    return {
        "id": proposal.proposal_id,
        "author_id": proposal.author_id,
        "title": proposal.title,
        "current_phase": proposal.current_phase.value,
        "current_status": proposal.current_status.value,
        "phase_started_at": proposal.phase_started_at,
        "deadline": proposal.deadline,
        "metadata": dump_metadata(proposal.metadata),
    }


def row_to_discussion(row: Mapping[str, Any]) -> Discussion:
    return Discussion(
        discussion_id=row["id"],
        proposal_id=row["proposal_id"],
        participants=tuple(row["participants"] or ()),
        created_at=row["created_at"],
    )


def row_to_vote(row: Mapping[str, Any]) -> Vote:
    return Vote(
        vote_id=row["vote_id"],
        scope=row["scope"],
        agent_id=row["agent_id"],
        proposal_ref=row["proposal_ref"],
        decision=VoteDecision(row["decision"]),
        weight=float(row["weight"]),
        cast_at=row["cast_at"],
        comment=row["comment"] or "",
        sequence=int(row["sequence"]),
    )


def row_to_session(row: Mapping[str, Any]) -> GovernanceSession:
    return GovernanceSession(
        session_id=row["id"],
        title=row["title"] or "",
        date=row["date"],
        summary=row["summary"] or "",
        metadata=MetadataMap.from_dict(load_json(row["metadata"])),
        created_at=row["created_at"],
    )
