"""Default phase transition rule table.

Rules are evaluated in table order. EXECUTION has no outgoing rule.

    PROPOSAL   -> DISCUSSION  manual     status is DRAFT
    DISCUSSION -> REVISION    automatic  enough participants and minimum
                                         discussion time (timeout 48h)
    REVISION   -> VOTING      manual     status is REVISION
    VOTING     -> RESOLUTION  automatic  quorum of distinct voters and voting
                                         period elapsed (timeout 72h)
    RESOLUTION -> EXECUTION   automatic  status is APPROVED and the recorded
                                         resolution outcome is approved
                                         (timeout 12h)
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import timedelta

from src.domain.models.governance_phase import GovernancePhase, ProposalStatus
from src.domain.models.metadata import RESOLUTION_OUTCOME_KEY
from src.domain.models.phase_transition import (
    ConditionKind,
    PhaseTransitionRule,
    ProposalContext,
    TransitionCondition,
)
from src.domain.models.voting_result import VotingOutcome

DEFAULT_DISCUSSION_MIN_PARTICIPANTS = 3
DEFAULT_VOTING_MIN_PARTICIPANTS = 5
DEFAULT_MIN_DISCUSSION_TIME = timedelta(hours=12)
DEFAULT_DISCUSSION_TIMEOUT = timedelta(hours=48)
DEFAULT_VOTING_PERIOD = timedelta(hours=72)
DEFAULT_RESOLUTION_TIMEOUT = timedelta(hours=12)


def _status_is(status: ProposalStatus) -> Callable[[ProposalContext], bool]:
    def predicate(context: ProposalContext) -> bool:
        return context.current_status == status

    return predicate


def _resolved_as_approved(context: ProposalContext) -> bool:
    # RESOLUTION enters with a placeholder APPROVED status
    outcome = context.metadata.get(RESOLUTION_OUTCOME_KEY)
    return (
        context.current_status == ProposalStatus.APPROVED
        and outcome == VotingOutcome.APPROVED.value
    )


def build_default_transition_rules(
    *,
    discussion_min_participants: int = DEFAULT_DISCUSSION_MIN_PARTICIPANTS,
    min_discussion_time: timedelta = DEFAULT_MIN_DISCUSSION_TIME,
    discussion_timeout: timedelta = DEFAULT_DISCUSSION_TIMEOUT,
    voting_min_participants: int = DEFAULT_VOTING_MIN_PARTICIPANTS,
    voting_period: timedelta = DEFAULT_VOTING_PERIOD,
    resolution_timeout: timedelta = DEFAULT_RESOLUTION_TIMEOUT,
) -> tuple[PhaseTransitionRule, ...]:
    """Build the default rule table.

    Args:
        discussion_min_participants: Participants needed to leave DISCUSSION.
        min_discussion_time: Floor on time in DISCUSSION, independent of
            the nominal phase duration.
        discussion_timeout: Time in DISCUSSION before the sweep checks it.
        voting_min_participants: Distinct voters needed to leave VOTING.
        voting_period: Full voting window that must elapse.
        resolution_timeout: Time in RESOLUTION before the sweep checks it.

    Returns:
        Rules in evaluation order.
    """

    def enough_discussion_participants(context: ProposalContext) -> bool:
        return len(context.participants) >= discussion_min_participants

    def minimum_discussion_time_met(context: ProposalContext) -> bool:
        return context.time_in_phase >= min_discussion_time

    def voting_quorum_reached(context: ProposalContext) -> bool:
        voters = {vote.agent_id for vote in context.votes}
        return len(voters) >= voting_min_participants

    def voting_period_completed(context: ProposalContext) -> bool:
        return context.time_in_phase >= voting_period

    return (
        PhaseTransitionRule(
            from_phase=GovernancePhase.PROPOSAL,
            to_phase=GovernancePhase.DISCUSSION,
            required_conditions=(
                TransitionCondition(
                    kind=ConditionKind.MANUAL,
                    description="Proposal submitted and validated",
                    predicate=_status_is(ProposalStatus.DRAFT),
                ),
            ),
            automatic_transition=False,
            allowed_roles=("proposer", "mediator"),
        ),
        PhaseTransitionRule(
            from_phase=GovernancePhase.DISCUSSION,
            to_phase=GovernancePhase.REVISION,
            required_conditions=(
                TransitionCondition(
                    kind=ConditionKind.PARTICIPATION,
                    description=(
                        "Sufficient discussion participation "
                        f"(at least {discussion_min_participants} participants)"
                    ),
                    predicate=enough_discussion_participants,
                ),
                TransitionCondition(
                    kind=ConditionKind.TIME,
                    description="Minimum discussion time met",
                    predicate=minimum_discussion_time_met,
                ),
            ),
            automatic_transition=True,
            timeout_duration=discussion_timeout,
        ),
        PhaseTransitionRule(
            from_phase=GovernancePhase.REVISION,
            to_phase=GovernancePhase.VOTING,
            required_conditions=(
                TransitionCondition(
                    kind=ConditionKind.MANUAL,
                    description="Revisions completed and approved",
                    predicate=_status_is(ProposalStatus.REVISION),
                ),
            ),
            automatic_transition=False,
            allowed_roles=("proposer", "mediator"),
        ),
        PhaseTransitionRule(
            from_phase=GovernancePhase.VOTING,
            to_phase=GovernancePhase.RESOLUTION,
            required_conditions=(
                TransitionCondition(
                    kind=ConditionKind.PARTICIPATION,
                    description=(
                        "Voting quorum reached "
                        f"(at least {voting_min_participants} distinct voters)"
                    ),
                    predicate=voting_quorum_reached,
                ),
                TransitionCondition(
                    kind=ConditionKind.TIME,
                    description="Voting period completed",
                    predicate=voting_period_completed,
                ),
            ),
            automatic_transition=True,
            timeout_duration=voting_period,
        ),
        PhaseTransitionRule(
            from_phase=GovernancePhase.RESOLUTION,
            to_phase=GovernancePhase.EXECUTION,
            required_conditions=(
                TransitionCondition(
                    kind=ConditionKind.CONSENSUS,
                    description="Proposal approved by voting",
                    predicate=_resolved_as_approved,
                ),
            ),
            automatic_transition=True,
            timeout_duration=resolution_timeout,
        ),
    )


def find_rule(
    rules: tuple[PhaseTransitionRule, ...],
    from_phase: GovernancePhase,
    to_phase: GovernancePhase,
) -> PhaseTransitionRule | None:
    """Find the first rule governing an edge, in table order."""
    for rule in rules:
        if rule.matches(from_phase, to_phase):
            return rule
    return None


def evaluate_conditions(
    rule: PhaseTransitionRule,
    context: ProposalContext,
    on_error: Callable[[TransitionCondition, Exception], None] | None = None,
) -> list[str]:
    """Evaluate every condition of a rule and list the unmet ones.

    A predicate that raises counts as unmet. Sibling conditions are still
    evaluated.

    Args:
        rule: Rule whose conditions are checked.
        context: Proposal context to check against.
        on_error: Optional callback(condition, exc) invoked for predicate
            failures, used by callers to log them.

    Returns:
        Descriptions of unmet conditions in rule order.
    """
    unmet: list[str] = []
    for condition in rule.required_conditions:
        try:
            satisfied = bool(condition.predicate(context))
        except Exception as exc:
            if on_error is not None:
                on_error(condition, exc)
            satisfied = False
        if not satisfied:
            unmet.append(condition.description)
    return unmet
