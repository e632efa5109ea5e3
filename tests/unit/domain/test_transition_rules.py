"""Unit tests for the default transition rule table and condition evaluation."""

from __future__ import annotations

from datetime import timedelta

import pytest

from src.domain.models.governance_phase import GovernancePhase, ProposalStatus
from src.domain.models.phase_transition import (
    ConditionKind,
    PhaseTransitionRule,
    ProposalContext,
    TransitionCondition,
)
from src.domain.services.transition_rules import (
    build_default_transition_rules,
    evaluate_conditions,
    find_rule,
)
from tests.helpers.builders import make_proposal, make_vote


def _context(
    phase: GovernancePhase,
    *,
    status: ProposalStatus | None = None,
    participants: int = 0,
    votes: int = 0,
    hours: float = 0,
    metadata: dict | None = None,
) -> ProposalContext:
    return ProposalContext(
        proposal=make_proposal(phase=phase, status=status, metadata=metadata),
        participants=tuple(f"agent-{i}" for i in range(participants)),
        votes=tuple(make_vote(f"agent-{i}") for i in range(votes)),
        discussions=(),
        time_in_phase=timedelta(hours=hours),
    )


@pytest.fixture
def rules():
    return build_default_transition_rules()


class TestDefaultRuleTable:
    """Shape of the default rule table."""

    def test_edges_in_table_order(self, rules) -> None:
        assert [(r.from_phase.value, r.to_phase.value) for r in rules] == [
            ("proposal", "discussion"),
            ("discussion", "revision"),
            ("revision", "voting"),
            ("voting", "resolution"),
            ("resolution", "execution"),
        ]

    def test_execution_has_no_outgoing_rule(self, rules) -> None:
        assert not [r for r in rules if r.from_phase == GovernancePhase.EXECUTION]

    def test_automatic_rules_and_timeouts(self, rules) -> None:
        automatic = {
            r.from_phase: r.timeout_duration for r in rules if r.automatic_transition
        }
        assert automatic == {
            GovernancePhase.DISCUSSION: timedelta(hours=48),
            GovernancePhase.VOTING: timedelta(hours=72),
            GovernancePhase.RESOLUTION: timedelta(hours=12),
        }

    def test_condition_descriptions(self, rules) -> None:
        descriptions = [c.description for r in rules for c in r.required_conditions]
        assert descriptions == [
            "Proposal submitted and validated",
            "Sufficient discussion participation (at least 3 participants)",
            "Minimum discussion time met",
            "Revisions completed and approved",
            "Voting quorum reached (at least 5 distinct voters)",
            "Voting period completed",
            "Proposal approved by voting",
        ]

    def test_custom_parameters_flow_into_descriptions(self) -> None:
        rules = build_default_transition_rules(
            discussion_min_participants=4, voting_min_participants=9
        )
        descriptions = [c.description for r in rules for c in r.required_conditions]
        assert "Sufficient discussion participation (at least 4 participants)" in (
            descriptions
        )
        assert "Voting quorum reached (at least 9 distinct voters)" in descriptions

    def test_find_rule(self, rules) -> None:
        rule = find_rule(rules, GovernancePhase.VOTING, GovernancePhase.RESOLUTION)
        assert rule is not None
        assert rule.automatic_transition is True
        assert find_rule(rules, GovernancePhase.PROPOSAL, GovernancePhase.VOTING) is None

    def test_to_dict(self, rules) -> None:
        data = rules[1].to_dict()
        assert data["from"] == "discussion"
        assert data["timeout_seconds"] == 48 * 3600
        assert data["required_conditions"][0]["type"] == "participation"


class TestDiscussionConditions:
    """DISCUSSION -> REVISION requires participants and elapsed time."""

    def test_two_participants_after_ten_hours_fails_both(self, rules) -> None:
        rule = find_rule(rules, GovernancePhase.DISCUSSION, GovernancePhase.REVISION)

        unmet = evaluate_conditions(
            rule, _context(GovernancePhase.DISCUSSION, participants=2, hours=10)
        )

        assert unmet == [
            "Sufficient discussion participation (at least 3 participants)",
            "Minimum discussion time met",
        ]

    def test_three_participants_after_thirteen_hours_passes(self, rules) -> None:
        rule = find_rule(rules, GovernancePhase.DISCUSSION, GovernancePhase.REVISION)

        unmet = evaluate_conditions(
            rule, _context(GovernancePhase.DISCUSSION, participants=3, hours=13)
        )

        assert unmet == []


class TestVotingConditions:
    def test_three_votes_after_period_fails_quorum_only(self, rules) -> None:
        rule = find_rule(rules, GovernancePhase.VOTING, GovernancePhase.RESOLUTION)

        unmet = evaluate_conditions(
            rule, _context(GovernancePhase.VOTING, votes=3, hours=73)
        )

        assert unmet == ["Voting quorum reached (at least 5 distinct voters)"]

    def test_quorum_before_period_fails_time_only(self, rules) -> None:
        rule = find_rule(rules, GovernancePhase.VOTING, GovernancePhase.RESOLUTION)

        unmet = evaluate_conditions(
            rule, _context(GovernancePhase.VOTING, votes=5, hours=24)
        )

        assert unmet == ["Voting period completed"]

    def test_quorum_counts_distinct_voters(self, rules) -> None:
        rule = find_rule(rules, GovernancePhase.VOTING, GovernancePhase.RESOLUTION)
        votes = tuple(
            make_vote(f"agent-{i}", scope=scope)
            for scope in ("session-1", "session-2")
            for i in range(3)
        )
        context = ProposalContext(
            proposal=make_proposal(phase=GovernancePhase.VOTING),
            participants=(),
            votes=votes,
            discussions=(),
            time_in_phase=timedelta(hours=73),
        )

        unmet = evaluate_conditions(rule, context)

        assert unmet == ["Voting quorum reached (at least 5 distinct voters)"]


class TestResolutionConditions:
    def test_approved_outcome_may_execute(self, rules) -> None:
        rule = find_rule(rules, GovernancePhase.RESOLUTION, GovernancePhase.EXECUTION)

        unmet = evaluate_conditions(
            rule,
            _context(
                GovernancePhase.RESOLUTION,
                metadata={"resolution_outcome": "approved"},
            ),
        )

        assert unmet == []

    def test_placeholder_status_without_outcome_may_not_execute(self, rules) -> None:
        rule = find_rule(rules, GovernancePhase.RESOLUTION, GovernancePhase.EXECUTION)
        context = _context(GovernancePhase.RESOLUTION)

        assert context.current_status == ProposalStatus.APPROVED
        assert evaluate_conditions(rule, context) == ["Proposal approved by voting"]

    def test_pending_outcome_may_not_execute(self, rules) -> None:
        rule = find_rule(rules, GovernancePhase.RESOLUTION, GovernancePhase.EXECUTION)

        unmet = evaluate_conditions(
            rule,
            _context(
                GovernancePhase.RESOLUTION,
                metadata={"resolution_outcome": "pending"},
            ),
        )

        assert unmet == ["Proposal approved by voting"]

    def test_rejected_may_not_execute(self, rules) -> None:
        rule = find_rule(rules, GovernancePhase.RESOLUTION, GovernancePhase.EXECUTION)

        unmet = evaluate_conditions(
            rule,
            _context(
                GovernancePhase.RESOLUTION,
                status=ProposalStatus.REJECTED,
                metadata={"resolution_outcome": "rejected"},
            ),
        )

        assert unmet == ["Proposal approved by voting"]



class TestEvaluateConditions:
    """Failure semantics of condition evaluation."""

    def test_raising_predicate_counts_as_unmet(self) -> None:
        def broken(context: ProposalContext) -> bool:
            raise RuntimeError("boom")

        rule = PhaseTransitionRule(
            from_phase=GovernancePhase.DISCUSSION,
            to_phase=GovernancePhase.REVISION,
            required_conditions=(
                TransitionCondition(ConditionKind.AGENT_ACTION, "Broken", broken),
                TransitionCondition(ConditionKind.MANUAL, "Always", lambda c: True),
            ),
        )
        errors: list[tuple[str, Exception]] = []

        unmet = evaluate_conditions(
            rule,
            _context(GovernancePhase.DISCUSSION),
            on_error=lambda condition, exc: errors.append((condition.description, exc)),
        )

        assert unmet == ["Broken"]
        assert errors[0][0] == "Broken"
        assert isinstance(errors[0][1], RuntimeError)

    def test_raising_predicate_without_callback(self) -> None:
        def broken(context: ProposalContext) -> bool:
            raise ValueError("bad metadata")

        rule = PhaseTransitionRule(
            from_phase=GovernancePhase.DISCUSSION,
            to_phase=GovernancePhase.REVISION,
            required_conditions=(
                TransitionCondition(ConditionKind.AGENT_ACTION, "Broken", broken),
            ),
        )

        assert evaluate_conditions(rule, _context(GovernancePhase.DISCUSSION)) == [
            "Broken"
        ]



class TestRuleIsDue:
    def test_due_after_timeout(self, rules) -> None:
        rule = find_rule(rules, GovernancePhase.DISCUSSION, GovernancePhase.REVISION)

        assert not rule.is_due(_context(GovernancePhase.DISCUSSION, hours=47))
        assert rule.is_due(_context(GovernancePhase.DISCUSSION, hours=48))

    def test_manual_rule_never_due(self, rules) -> None:
        rule = find_rule(rules, GovernancePhase.PROPOSAL, GovernancePhase.DISCUSSION)

        assert not rule.is_due(_context(GovernancePhase.PROPOSAL, hours=1000))

    def test_rule_for_other_phase_not_due(self, rules) -> None:
        rule = find_rule(rules, GovernancePhase.VOTING, GovernancePhase.RESOLUTION)

        assert not rule.is_due(_context(GovernancePhase.DISCUSSION, hours=1000))
