"""Unit tests for the consensus calculator domain service.

Tests cover weighted consensus, absolute quorum, the pending verdict,
and argument validation.
"""

from __future__ import annotations

import pytest
from hypothesis import given
from hypothesis import strategies as st

from src.domain.models.vote import VoteDecision
from src.domain.models.voting_result import VotingOutcome
from src.domain.services.consensus_calculator import (
    calculate_voting_result,
    group_votes_by_proposal,
    tally_votes,
)
from tests.helpers.builders import make_vote


def _votes(decisions: list[tuple[str, float]]) -> list:
    return [
        make_vote(f"agent-{index}", decision, weight)
        for index, (decision, weight) in enumerate(decisions)
    ]


class TestTallyVotes:
    """Tests for tally_votes()."""

    def test_every_decision_has_a_bucket(self) -> None:
        tallies = tally_votes([])
        assert set(tallies) == set(VoteDecision)
        assert all(t.count == 0 and t.weight == 0.0 for t in tallies.values())

    def test_counts_and_weights_per_decision(self) -> None:
        votes = _votes([("approve", 2.0), ("approve", 1.5), ("reject", 1.0)])
        tallies = tally_votes(votes)
        assert tallies[VoteDecision.APPROVE].count == 2
        assert tallies[VoteDecision.APPROVE].weight == pytest.approx(3.5)
        assert tallies[VoteDecision.REJECT].count == 1
        assert tallies[VoteDecision.ABSTAIN].count == 0


class TestGroupVotesByProposal:
    def test_groups_preserving_first_seen_order(self) -> None:
        votes = [
            make_vote("a", proposal_ref="p2"),
            make_vote("a", proposal_ref="p1"),
            make_vote("b", proposal_ref="p2"),
        ]
        grouped = group_votes_by_proposal(votes)
        assert list(grouped) == ["p2", "p1"]
        assert [v.agent_id for v in grouped["p2"]] == ["a", "b"]


class TestCalculateVotingResult:
    """Tests for calculate_voting_result()."""

    def test_weighted_approval_scenario(self) -> None:
        """6 approve at weight 1.5 and 3 reject at weight 1.0, eligible 72."""
        votes = _votes([("approve", 1.5)] * 6 + [("reject", 1.0)] * 3)

        result = calculate_voting_result(
            votes, min_participants=5, consensus_threshold=0.7, eligible_voters=72
        )

        assert result.total_votes == 9
        assert result.total_weight == pytest.approx(12.0)
        assert result.approve_weight == pytest.approx(9.0)
        assert result.consensus_percentage == pytest.approx(75.0)
        assert result.quorum_met is True
        assert result.consensus_met is True
        assert result.result == VotingOutcome.APPROVED

    def test_abstentions_count_toward_total_weight(self) -> None:
        """6 approve, 3 reject, 1 abstain at weight 1.0 each: 60% is rejected."""
        votes = _votes(
            [("approve", 1.0)] * 6 + [("reject", 1.0)] * 3 + [("abstain", 1.0)]
        )

        result = calculate_voting_result(votes, min_participants=5)

        assert result.total_weight == pytest.approx(10.0)
        assert result.abstain_weight == pytest.approx(1.0)
        assert result.consensus_percentage == pytest.approx(60.0)
        assert result.consensus_met is False
        assert result.result == VotingOutcome.REJECTED

    def test_high_weight_approval_reaches_ninety_percent(self) -> None:
        """Approve weight 9 of a total weight 10 is 90%."""
        votes = _votes(
            [("approve", 1.5)] * 6 + [("reject", 0.0)] * 3 + [("abstain", 1.0)]
        )

        result = calculate_voting_result(votes, min_participants=5)

        assert result.total_weight == pytest.approx(10.0)
        assert result.approve_weight == pytest.approx(9.0)
        assert result.consensus_percentage == pytest.approx(90.0)
        assert result.result == VotingOutcome.APPROVED

    def test_threshold_boundary_is_inclusive(self) -> None:
        """Exactly 70% approve weight meets a 0.7 threshold."""
        votes = _votes([("approve", 1.0)] * 7 + [("reject", 1.0)] * 3)

        result = calculate_voting_result(votes, min_participants=5)

        assert result.consensus_percentage == pytest.approx(70.0)
        assert result.consensus_threshold == pytest.approx(70.0)
        assert result.consensus_met is True
        assert result.result == VotingOutcome.APPROVED

    def test_quorum_not_met_is_pending(self) -> None:
        """Unanimous approval below quorum is still pending."""
        votes = _votes([("approve", 1.0)] * 3)

        result = calculate_voting_result(votes, min_participants=5)

        assert result.quorum_met is False
        assert result.consensus_met is True
        assert result.result == VotingOutcome.PENDING

    def test_no_votes_is_pending(self) -> None:
        result = calculate_voting_result([], min_participants=1)

        assert result.total_weight == 0
        assert result.consensus_percentage == 0.0
        assert result.quorum_met is False
        assert result.participation_rate == 0.0
        assert result.result == VotingOutcome.PENDING

    def test_zero_total_weight_is_pending(self) -> None:
        """Quorum met but no weight cast leaves the verdict pending."""
        votes = _votes([("approve", 0.0)] * 5)

        result = calculate_voting_result(votes, min_participants=5)

        assert result.quorum_met is True
        assert result.consensus_percentage == 0.0
        assert result.result == VotingOutcome.PENDING

    def test_quorum_capped_by_eligible_population(self) -> None:
        """With 3 eligible voters, 3 distinct votes satisfy a quorum of 5."""
        votes = _votes([("approve", 1.0)] * 3)

        result = calculate_voting_result(votes, min_participants=5, eligible_voters=3)

        assert result.quorum_threshold == 3
        assert result.quorum_met is True
        assert result.participation_rate == pytest.approx(1.0)
        assert result.result == VotingOutcome.APPROVED

    def test_quorum_counts_distinct_agents(self) -> None:
        """Two votes by one agent on different scopes count once."""
        votes = [
            make_vote("agent-1", scope="s1"),
            make_vote("agent-1", scope="s2"),
        ]

        result = calculate_voting_result(votes, min_participants=2)

        assert result.total_votes == 2
        assert result.quorum_met is False

    def test_participation_rate_against_eligible(self) -> None:
        votes = _votes([("approve", 1.0)] * 9)

        result = calculate_voting_result(votes, min_participants=5, eligible_voters=72)

        assert result.participation_rate == pytest.approx(9 / 72)

    def test_proposal_ref_is_carried(self) -> None:
        result = calculate_voting_result(
            _votes([("approve", 1.0)]), min_participants=1, proposal_ref="prop-9"
        )
        assert result.proposal_ref == "prop-9"
        assert result.to_dict()["proposal_ref"] == "prop-9"

    @pytest.mark.parametrize(
        ("kwargs", "message"),
        [
            ({"min_participants": 0}, "min_participants"),
            ({"min_participants": 1, "eligible_voters": -1}, "eligible_voters"),
            ({"min_participants": 1, "consensus_threshold": 1.5}, "consensus_threshold"),
            ({"min_participants": 1, "consensus_threshold": -0.1}, "consensus_threshold"),
        ],
    )
    def test_invalid_arguments_raise(self, kwargs: dict, message: str) -> None:
        with pytest.raises(ValueError, match=message):
            calculate_voting_result([], **kwargs)


_decision = st.sampled_from(["approve", "reject", "abstain"])
_weight = st.floats(min_value=0.0, max_value=100.0, allow_nan=False)


class TestConsensusProperties:
    """Property tests over arbitrary non-negative vote sets."""

    @given(st.lists(st.tuples(_decision, _weight), max_size=30))
    def test_buckets_sum_to_total(self, decisions: list[tuple[str, float]]) -> None:
        result = calculate_voting_result(_votes(decisions), min_participants=1)

        assert (
            result.approve_weight + result.reject_weight + result.abstain_weight
            == result.total_weight
        )
        assert result.total_votes == len(decisions)

    @given(st.lists(st.tuples(_decision, _weight), max_size=30))
    def test_percentage_is_bounded(self, decisions: list[tuple[str, float]]) -> None:
        result = calculate_voting_result(_votes(decisions), min_participants=1)

        assert 0.0 <= result.consensus_percentage <= 100.0 + 1e-9

    @given(st.lists(_decision, max_size=30))
    def test_zero_weight_is_always_pending(self, decisions: list[str]) -> None:
        votes = _votes([(decision, 0.0) for decision in decisions])

        result = calculate_voting_result(votes, min_participants=1)

        assert result.consensus_percentage == 0.0
        assert result.result == VotingOutcome.PENDING

    @given(st.lists(st.tuples(_decision, _weight), min_size=1, max_size=30))
    def test_verdict_follows_quorum_and_consensus(
        self, decisions: list[tuple[str, float]]
    ) -> None:
        result = calculate_voting_result(_votes(decisions), min_participants=3)

        if not result.quorum_met or result.total_weight == 0:
            assert result.result == VotingOutcome.PENDING
        elif result.consensus_met:
            assert result.result == VotingOutcome.APPROVED
        else:
            assert result.result == VotingOutcome.REJECTED
