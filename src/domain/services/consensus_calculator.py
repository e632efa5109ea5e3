"""Consensus calculation domain service.

Turns a set of votes into a verdict. Pure functions only: no side effects,
no dependencies beyond the domain models.

Algorithm:
1. Partition votes by decision into approve/reject/abstain buckets
2. total_weight = sum of all bucket weights (abstentions included)
3. consensus_percentage = approve_weight * 100 / total_weight (0 when total is 0)
4. quorum_met = distinct voters >= min_participants (capped at the eligible
   population when it is known), and at least one vote exists
5. consensus_met = consensus_percentage >= consensus_threshold * 100
6. result = approved / rejected when quorum is met and some weight was cast,
   pending otherwise

Weights are not validated or clamped; the caller is responsible for
supplying non-negative weights.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from src.domain.models.vote import Vote, VoteDecision
from src.domain.models.voting_result import DecisionTally, VotingOutcome, VotingResult

DEFAULT_CONSENSUS_THRESHOLD: float = 0.7


def tally_votes(votes: Iterable[Vote]) -> dict[VoteDecision, DecisionTally]:
    """Partition votes into per-decision counts and weight sums.

    Args:
        votes: Votes to tally.

    Returns:
        Mapping with an entry for every VoteDecision.
    """
    counts = {decision: 0 for decision in VoteDecision}
    weights = {decision: 0.0 for decision in VoteDecision}
    for vote in votes:
        counts[vote.decision] += 1
        weights[vote.decision] += vote.weight
    return {
        decision: DecisionTally(count=counts[decision], weight=weights[decision])
        for decision in VoteDecision
    }


def group_votes_by_proposal(votes: Iterable[Vote]) -> dict[str, list[Vote]]:
    """Group votes by proposal reference, preserving first-seen order."""
    grouped: dict[str, list[Vote]] = {}
    for vote in votes:
        grouped.setdefault(vote.proposal_ref, []).append(vote)
    return grouped


def calculate_voting_result(
    votes: Sequence[Vote],
    *,
    min_participants: int,
    consensus_threshold: float = DEFAULT_CONSENSUS_THRESHOLD,
    eligible_voters: int | None = None,
    proposal_ref: str | None = None,
) -> VotingResult:
    """Apply quorum and consensus rules to a vote set.

    Args:
        votes: Votes scoped to one proposal reference.
        min_participants: Absolute number of distinct voters required.
        consensus_threshold: Approve weight fraction required (0-1).
        eligible_voters: Size of the eligible voter population, if known.
        proposal_ref: Proposal the votes refer to, for labelling the result.

    Returns:
        VotingResult with tallies, percentages and the verdict.

    Raises:
        ValueError: If min_participants < 1, eligible_voters < 0, or the
            threshold is outside [0, 1].
    """
    if min_participants < 1:
        raise ValueError(f"min_participants must be >= 1, got {min_participants}")
    if eligible_voters is not None and eligible_voters < 0:
        raise ValueError(f"eligible_voters must be >= 0, got {eligible_voters}")
    if not 0.0 <= consensus_threshold <= 1.0:
        raise ValueError(
            f"consensus_threshold must be between 0.0 and 1.0, got {consensus_threshold}"
        )

    tallies = tally_votes(votes)
    approve = tallies[VoteDecision.APPROVE]
    reject = tallies[VoteDecision.REJECT]
    abstain = tallies[VoteDecision.ABSTAIN]

    # Summing the buckets keeps approve + reject + abstain == total exact
    total_weight = approve.weight + reject.weight + abstain.weight
    consensus_percentage = (
        approve.weight * 100 / total_weight if total_weight > 0 else 0.0
    )

    voter_count = len({vote.agent_id for vote in votes})
    required = min_participants
    if eligible_voters is not None:
        required = min(required, eligible_voters)
    quorum_met = voter_count > 0 and voter_count >= required

    threshold_percent = round(consensus_threshold * 100, 9)
    consensus_met = consensus_percentage >= threshold_percent

    if not quorum_met or total_weight == 0:
        result = VotingOutcome.PENDING
    elif consensus_met:
        result = VotingOutcome.APPROVED
    else:
        result = VotingOutcome.REJECTED

    if eligible_voters:
        participation_rate = voter_count / eligible_voters
    else:
        participation_rate = 1.0 if voter_count else 0.0

    return VotingResult(
        proposal_ref=proposal_ref,
        total_votes=len(votes),
        total_weight=total_weight,
        approve=approve,
        reject=reject,
        abstain=abstain,
        consensus_percentage=consensus_percentage,
        consensus_threshold=threshold_percent,
        quorum_threshold=required,
        eligible_voters=eligible_voters,
        participation_rate=participation_rate,
        quorum_met=quorum_met,
        consensus_met=consensus_met,
        result=result,
    )
