"""Phase state machine service.

Owns the transition rule table and executes phase transitions for
proposals. Every execution re-evaluates the rule's conditions against a
freshly assembled context while holding the proposal's lock, then commits
through the repository's compare-and-swap, so a stale check or a racing
writer can never produce a double transition.

Failure semantics:
- A missing rule raises NoTransitionRuleError (never a silent no-op).
- Unmet conditions raise TransitionConditionsNotMetError listing every
  unmet condition description.
- A predicate that raises is logged and counted as unmet.
- During the automatic sweep one proposal's failure is logged and the
  sweep moves on to the next proposal.
- Event sink failures are logged and never roll back a transition.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime
from typing import Any

from src.application.ports.event_sink import EventSinkProtocol
from src.application.ports.proposal_context import ProposalContextProvider
from src.application.ports.proposal_repository import ProposalRepositoryProtocol
from src.application.ports.session_store import SessionStoreProtocol
from src.application.ports.time_authority import TimeAuthorityProtocol
from src.application.ports.vote_store import VoteStoreProtocol
from src.application.services.base import LoggingMixin
from src.application.services.proposal_locks import ProposalLockRegistry
from src.config.governance_config import (
    DEFAULT_GOVERNANCE_CONFIG,
    GovernanceConfig,
    PhaseConfiguration,
)
from src.domain.errors.phase_transition import (
    ConcurrentTransitionError,
    NoTransitionRuleError,
    ProposalNotFoundError,
    ProposalNotInPhaseError,
    TransitionConditionsNotMetError,
)
from src.domain.models.governance_phase import (
    PHASE_ORDER,
    GovernancePhase,
    ProposalStatus,
    status_for_phase,
)
from src.domain.models.metadata import (
    ELIGIBLE_VOTERS_KEY,
    RESOLUTION_OUTCOME_KEY,
)
from src.domain.models.phase_transition import (
    PhaseStatusReport,
    PhaseTransitionRule,
    ProposalContext,
    TransitionCheck,
    TransitionCondition,
    TransitionEvent,
    TransitionOption,
)
from src.domain.models.voting_result import VotingOutcome, VotingResult
from src.domain.services.consensus_calculator import calculate_voting_result
from src.domain.services.transition_rules import (
    DEFAULT_DISCUSSION_MIN_PARTICIPANTS,
    DEFAULT_DISCUSSION_TIMEOUT,
    DEFAULT_RESOLUTION_TIMEOUT,
    DEFAULT_VOTING_MIN_PARTICIPANTS,
    DEFAULT_VOTING_PERIOD,
    build_default_transition_rules,
    evaluate_conditions,
    find_rule,
)
from src.infrastructure.monitoring.governance_metrics import (
    TRIGGER_AUTOMATIC,
    TRIGGER_MANUAL,
    GovernanceMetricsCollector,
    get_governance_metrics_collector,
)

SYSTEM_ACTOR = "system"
TIMEOUT_REASON = "Automatic transition due to timeout"


def rules_from_config(config: GovernanceConfig) -> tuple[PhaseTransitionRule, ...]:
    """Build the default rule table parameterized by a configuration."""
    return build_default_transition_rules(
        discussion_min_participants=config.min_participants_for(
            GovernancePhase.DISCUSSION, DEFAULT_DISCUSSION_MIN_PARTICIPANTS
        ),
        min_discussion_time=config.minimum_discussion_time,
        discussion_timeout=config.phase_duration(
            GovernancePhase.DISCUSSION, DEFAULT_DISCUSSION_TIMEOUT
        ),
        voting_min_participants=config.min_participants_for(
            GovernancePhase.VOTING, DEFAULT_VOTING_MIN_PARTICIPANTS
        ),
        voting_period=config.phase_duration(
            GovernancePhase.VOTING, DEFAULT_VOTING_PERIOD
        ),
        resolution_timeout=config.phase_duration(
            GovernancePhase.RESOLUTION, DEFAULT_RESOLUTION_TIMEOUT
        ),
    )


class PhaseStateMachineService(LoggingMixin):
    """Executes condition-gated phase transitions for proposals.

    Attributes:
        _proposals: Proposal repository (compare-and-swap writes).
        _contexts: Provider of proposal context snapshots.
        _votes: Vote store, read when determining resolutions.
        _sessions: Session store, read for eligible voter counts.
        _event_sink: Receiver of TransitionEvents.
        _time: Time authority for timestamps and deadlines.
        _config: Immutable governance configuration.
        _rules: Rule table in evaluation order.
    """

    def __init__(
        self,
        proposals: ProposalRepositoryProtocol,
        context_provider: ProposalContextProvider,
        votes: VoteStoreProtocol,
        sessions: SessionStoreProtocol,
        event_sink: EventSinkProtocol,
        time_authority: TimeAuthorityProtocol,
        config: GovernanceConfig = DEFAULT_GOVERNANCE_CONFIG,
        locks: ProposalLockRegistry | None = None,
        metrics: GovernanceMetricsCollector | None = None,
        rules: Sequence[PhaseTransitionRule] | None = None,
    ) -> None:
        """Initialize the state machine.

        Args:
            proposals: Proposal repository.
            context_provider: ProposalContextProvider implementation.
            votes: Vote store.
            sessions: Session store.
            event_sink: Event sink for transition notifications.
            time_authority: Time authority (never datetime.now()).
            config: Governance configuration.
            locks: Lock registry shared with the minutes service.
            metrics: Metrics collector, defaults to the process singleton.
            rules: Rule table override. When omitted the default table is
                built from config and rebuilt on reconfiguration.
        """
        self._proposals = proposals
        self._contexts = context_provider
        self._votes = votes
        self._sessions = sessions
        self._event_sink = event_sink
        self._time = time_authority
        self._config = config
        self._locks = locks or ProposalLockRegistry()
        self._metrics = metrics or get_governance_metrics_collector()
        self._custom_rules = rules is not None
        self._rules: tuple[PhaseTransitionRule, ...] = (
            tuple(rules) if rules is not None else rules_from_config(config)
        )
        self._init_logger()

    @property
    def config(self) -> GovernanceConfig:
        return self._config

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    async def can_transition(
        self, proposal_id: str, to_phase: GovernancePhase
    ) -> TransitionCheck:
        """Check whether a proposal may move to a phase right now.

        Never raises for validation problems; the reasons list explains
        why a transition is blocked.

        Args:
            proposal_id: Proposal to check.
            to_phase: Target phase.

        Returns:
            TransitionCheck with can_transition and unmet reasons.
        """
        context = await self._contexts.get(proposal_id)
        if context is None:
            return TransitionCheck.blocked([f"Proposal {proposal_id} not found"])
        return self._check(context, to_phase)

    async def get_phase_status(self, proposal_id: str) -> PhaseStatusReport:
        """Report the proposal's phase and every other phase's eligibility.

        Raises:
            ProposalNotFoundError: If the proposal does not exist.
        """
        context = await self._contexts.get(proposal_id)
        if context is None:
            raise ProposalNotFoundError(proposal_id)

        options = []
        for phase in PHASE_ORDER:
            if phase == context.current_phase:
                continue
            check = self._check(context, phase)
            options.append(
                TransitionOption(
                    to_phase=phase,
                    can_transition=check.can_transition,
                    reasons=check.reasons,
                )
            )

        phase_config = self._config.get_phase_configuration(context.current_phase)
        return PhaseStatusReport(
            proposal_id=proposal_id,
            current_phase=context.current_phase,
            current_status=context.current_status,
            time_in_phase=context.time_in_phase,
            phase_started_at=context.phase_started_at,
            deadline=context.deadline,
            possible_transitions=tuple(options),
            configuration=phase_config.to_dict() if phase_config else None,
        )

    def get_phase_configuration(
        self, phase: GovernancePhase
    ) -> PhaseConfiguration | None:
        return self._config.get_phase_configuration(phase)

    def get_configurations(self) -> list[PhaseConfiguration]:
        """List phase configurations in canonical phase order."""
        return [
            self._config.phase_configurations[phase]
            for phase in PHASE_ORDER
            if phase in self._config.phase_configurations
        ]

    def get_transition_rules(self) -> tuple[PhaseTransitionRule, ...]:
        return self._rules

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    async def transition_phase(
        self,
        proposal_id: str,
        to_phase: GovernancePhase,
        triggered_by: str,
        reason: str | None = None,
    ) -> TransitionEvent:
        """Move a proposal to a new phase.

        Conditions are re-evaluated at execution time; an earlier
        can_transition result is never trusted.

        Args:
            proposal_id: Proposal to transition.
            to_phase: Target phase.
            triggered_by: Actor requesting the transition.
            reason: Optional reason, defaults to
                "Automatic transition from X to Y".

        Returns:
            The emitted TransitionEvent.

        Raises:
            ProposalNotFoundError: If the proposal does not exist.
            NoTransitionRuleError: If no rule governs the edge.
            TransitionConditionsNotMetError: If any condition is unmet or a
                concurrent writer changed the proposal first.
            TransientStoreError: If a store operation fails.
        """
        return await self._execute_transition(
            proposal_id,
            to_phase,
            triggered_by=triggered_by,
            reason=reason,
            trigger=TRIGGER_MANUAL,
        )

    async def process_automatic_transitions(self) -> list[TransitionEvent]:
        """Sweep active proposals and apply due automatic transitions.

        At most one transition per proposal per sweep; the first rule in
        table order whose timeout has elapsed and whose conditions hold
        wins. Calling this twice in a row never double-transitions a
        proposal, because the second call sees the fresh phase.

        Returns:
            Events for the transitions applied by this sweep.
        """
        log = self._log_operation("process_automatic_transitions")
        if not self._config.enable_automatic_transitions:
            log.debug("automatic_transitions_disabled")
            return []

        proposals = await self._proposals.list_active()
        log.info("automatic_sweep_started", candidates=len(proposals))

        events: list[TransitionEvent] = []
        for proposal in proposals:
            try:
                event = await self._advance_if_due(proposal.proposal_id)
            except TransitionConditionsNotMetError as exc:
                # Lost a race with another writer; the next sweep re-reads.
                log.info(
                    "automatic_transition_skipped",
                    proposal_id=proposal.proposal_id,
                    reasons=list(exc.unmet_conditions),
                )
            except Exception:
                self._metrics.record_sweep_failure()
                log.exception(
                    "automatic_transition_failed",
                    proposal_id=proposal.proposal_id,
                )
            else:
                if event is not None:
                    events.append(event)

        self._metrics.set_last_sweep_transitions(len(events))
        log.info(
            "automatic_sweep_completed",
            candidates=len(proposals),
            transitions=len(events),
        )
        return events

    async def resolve_proposal(
        self, proposal_id: str, session_id: str | None = None
    ) -> VotingResult:
        """Determine the final status of a proposal in RESOLUTION.

        Computes the voting result over the proposal's votes and records
        APPROVED or REJECTED together with the outcome under the
        resolution_outcome metadata key. A pending result records the
        outcome but leaves the status unchanged, which keeps EXECUTION
        blocked until a later resolution approves the proposal.

        Args:
            proposal_id: Proposal to resolve.
            session_id: Restrict to votes cast in this session and use its
                eligible voter count; otherwise all votes on the proposal.

        Returns:
            The VotingResult the decision was based on.

        Raises:
            ProposalNotFoundError: If the proposal does not exist.
            ProposalNotInPhaseError: If the proposal is not in RESOLUTION.
            ConcurrentTransitionError: If the proposal changed concurrently.
        """
        log = self._log_operation(
            "resolve_proposal", proposal_id=proposal_id, session_id=session_id
        )
        async with self._locks.hold(proposal_id):
            proposal = await self._proposals.get(proposal_id)
            if proposal is None:
                raise ProposalNotFoundError(proposal_id)
            if proposal.current_phase != GovernancePhase.RESOLUTION:
                raise ProposalNotInPhaseError(
                    proposal_id, GovernancePhase.RESOLUTION, proposal.current_phase
                )

            if session_id is not None:
                session = await self._sessions.get(session_id)
                votes = [
                    vote
                    for vote in await self._votes.list_by_scope(session_id)
                    if vote.proposal_ref == proposal_id
                ]
                eligible = session.eligible_voters if session else None
            else:
                votes = await self._votes.list_by_proposal(proposal_id)
                eligible = proposal.metadata.get_int(ELIGIBLE_VOTERS_KEY)

            result = calculate_voting_result(
                votes,
                min_participants=self._config.min_participants_for(
                    GovernancePhase.VOTING, DEFAULT_VOTING_MIN_PARTICIPANTS
                ),
                consensus_threshold=self._config.default_consensus_threshold,
                eligible_voters=eligible,
                proposal_ref=proposal_id,
            )

            outcome = result.result.value
            if result.result == VotingOutcome.APPROVED:
                status = ProposalStatus.APPROVED
            elif result.result == VotingOutcome.REJECTED:
                status = ProposalStatus.REJECTED
            else:
                status = proposal.current_status

            recorded = proposal.metadata.get(RESOLUTION_OUTCOME_KEY)
            if status != proposal.current_status or recorded != outcome:
                applied = await self._proposals.compare_and_swap(
                    proposal.with_resolution(status, outcome),
                    expected_phase=proposal.current_phase,
                    expected_status=proposal.current_status,
                )
                if not applied:
                    raise ConcurrentTransitionError(
                        proposal_id,
                        GovernancePhase.RESOLUTION,
                        GovernancePhase.EXECUTION,
                    )

        if result.result == VotingOutcome.PENDING:
            log.info(
                "resolution_pending",
                total_votes=result.total_votes,
                quorum_threshold=result.quorum_threshold,
            )
            return result

        log.info(
            "proposal_resolved",
            result=result.result.value,
            consensus_percentage=result.consensus_percentage,
            status=status.value,
        )
        return result

    def update_phase_configuration(
        self, phase: GovernancePhase, **changes: Any
    ) -> PhaseConfiguration | None:
        """Replace fields of one phase configuration.

        Swaps the service's configuration reference for a new immutable
        config and rebuilds the default rule table from it.

        Args:
            phase: Phase whose configuration changes.
            **changes: PhaseConfiguration fields to replace.

        Returns:
            The updated PhaseConfiguration, or None if the phase has none.

        Raises:
            InvalidConfigurationError: If the changes are invalid.
        """
        log = self._log_operation("update_phase_configuration", phase=phase.value)
        if self._config.get_phase_configuration(phase) is None:
            log.warning("phase_configuration_not_found")
            return None

        self._config = self._config.with_phase_configuration(phase, **changes)
        if not self._custom_rules:
            self._rules = rules_from_config(self._config)
        log.info("phase_configuration_updated", changes=sorted(changes))
        return self._config.get_phase_configuration(phase)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _check(
        self, context: ProposalContext, to_phase: GovernancePhase
    ) -> TransitionCheck:
        rule = find_rule(self._rules, context.current_phase, to_phase)
        if rule is None:
            return TransitionCheck.blocked(
                [
                    f"No transition rule found from {context.current_phase.value} "
                    f"to {to_phase.value}"
                ]
            )
        unmet = self._unmet_conditions(rule, context)
        if unmet:
            return TransitionCheck.blocked(unmet)
        return TransitionCheck.allowed()

    def _unmet_conditions(
        self, rule: PhaseTransitionRule, context: ProposalContext
    ) -> list[str]:
        def on_error(condition: TransitionCondition, exc: Exception) -> None:
            self._log.error(
                "transition_condition_error",
                proposal_id=context.proposal_id,
                condition=condition.description,
                condition_type=condition.kind.value,
                error=str(exc),
                exc_info=exc,
            )

        return evaluate_conditions(rule, context, on_error=on_error)

    def _deadline_for(self, phase: GovernancePhase, entered_at: datetime) -> datetime | None:
        return phase_deadline(self._config, phase, entered_at)

    async def _advance_if_due(self, proposal_id: str) -> TransitionEvent | None:
        context = await self._contexts.get(proposal_id)
        if context is None:
            return None
        for rule in self._rules:
            if not rule.is_due(context):
                continue
            if self._unmet_conditions(rule, context):
                continue
            return await self._execute_transition(
                proposal_id,
                rule.to_phase,
                triggered_by=SYSTEM_ACTOR,
                reason=TIMEOUT_REASON,
                trigger=TRIGGER_AUTOMATIC,
                expected_phase=context.current_phase,
            )
        return None

    async def _execute_transition(
        self,
        proposal_id: str,
        to_phase: GovernancePhase,
        *,
        triggered_by: str,
        reason: str | None,
        trigger: str,
        expected_phase: GovernancePhase | None = None,
    ) -> TransitionEvent:
        log = self._log_operation(
            "transition_phase",
            proposal_id=proposal_id,
            to_phase=to_phase.value,
            triggered_by=triggered_by,
        )

        async with self._locks.hold(proposal_id):
            context = await self._contexts.get(proposal_id)
            if context is None:
                raise ProposalNotFoundError(proposal_id)

            from_phase = context.current_phase
            if expected_phase is not None and from_phase != expected_phase:
                raise ConcurrentTransitionError(proposal_id, expected_phase, to_phase)

            rule = find_rule(self._rules, from_phase, to_phase)
            if rule is None:
                log.info("transition_rule_missing", from_phase=from_phase.value)
                raise NoTransitionRuleError(proposal_id, from_phase, to_phase)

            unmet = self._unmet_conditions(rule, context)
            if unmet:
                log.info("transition_conditions_unmet", unmet_conditions=unmet)
                raise TransitionConditionsNotMetError(
                    proposal_id, from_phase, to_phase, unmet
                )

            now = self._time.now()
            proposal = context.proposal
            updated = proposal.with_transition(
                to_phase,
                status_for_phase(to_phase),
                now,
                self._deadline_for(to_phase, now),
            )
            applied = await self._proposals.compare_and_swap(
                updated,
                expected_phase=proposal.current_phase,
                expected_status=proposal.current_status,
            )
            if not applied:
                log.warning("transition_lost_race", from_phase=from_phase.value)
                raise ConcurrentTransitionError(proposal_id, from_phase, to_phase)

        event = TransitionEvent(
            proposal_id=proposal_id,
            from_phase=from_phase,
            to_phase=to_phase,
            from_status=proposal.current_status,
            to_status=updated.current_status,
            triggered_by=triggered_by,
            triggered_at=now,
            reason=reason
            or f"Automatic transition from {from_phase.value} to {to_phase.value}",
        )

        self._metrics.record_transition(from_phase.value, to_phase.value, trigger)
        log.info(
            "phase_transition_executed",
            from_phase=from_phase.value,
            deadline=updated.deadline.isoformat() if updated.deadline else None,
        )
        if self._config.audit_enabled:
            log.info("phase_transition_audit", **_audit_fields(event))
        if self._config.notification_enabled:
            await self._emit(event)
        return event

    async def _emit(self, event: TransitionEvent) -> None:
        try:
            await self._event_sink.emit(event)
        except Exception:
            self._log.warning(
                "transition_event_emit_failed",
                proposal_id=event.proposal_id,
                to_phase=event.to_phase.value,
                exc_info=True,
            )


def _audit_fields(event: TransitionEvent) -> dict[str, Any]:
    fields = event.to_dict()
    # Already bound on the operation logger
    for key in ("proposal_id", "to_phase", "triggered_by"):
        fields.pop(key)
    return fields


def phase_deadline(
    config: GovernanceConfig, phase: GovernancePhase, entered_at: datetime
) -> datetime | None:
    """Deadline a proposal entering a phase at entered_at would receive."""
    phase_config = config.get_phase_configuration(phase)
    if phase_config is None or not phase_config.has_deadline:
        return None
    return entered_at + phase_config.default_duration


__all__ = [
    "SYSTEM_ACTOR",
    "TIMEOUT_REASON",
    "PhaseStateMachineService",
    "phase_deadline",
    "rules_from_config",
]
