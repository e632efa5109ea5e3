"""Governance minutes service.

Records votes and sessions and answers result and audit queries:

- cast_vote: upsert keyed by (scope, agent, proposal), serialized with
  phase transitions on the same proposal
- get_voting_result: quorum/consensus verdict for one proposal in a scope
- get_audit_chain: hash-linked replay of a session and its votes
- get_session_results: per-proposal results, participation and chain
- verify_session_chain: compare a fresh rebuild with a recorded head hash

Results and chains are derived on every read and never stored.
"""

from __future__ import annotations

import hmac
from typing import Any
from uuid import uuid4

from src.application.ports.session_store import SessionStoreProtocol
from src.application.ports.time_authority import TimeAuthorityProtocol
from src.application.ports.vote_store import VoteStoreProtocol
from src.application.services.base import LoggingMixin
from src.application.services.proposal_locks import ProposalLockRegistry
from src.config.governance_config import DEFAULT_GOVERNANCE_CONFIG, GovernanceConfig
from src.domain.errors.audit_chain import AuditChainIntegrityError
from src.domain.models.audit_chain import AuditChainEntry, ChainVerification
from src.domain.models.governance_phase import GovernancePhase
from src.domain.models.metadata import MetadataMap
from src.domain.models.vote import GovernanceSession, Vote, VoteDecision
from src.domain.models.voting_result import SessionResults, VotingResult
from src.domain.services.audit_chain_builder import build_audit_chain, verify_audit_chain
from src.domain.services.consensus_calculator import (
    calculate_voting_result,
    group_votes_by_proposal,
)
from src.domain.services.transition_rules import DEFAULT_VOTING_MIN_PARTICIPANTS
from src.infrastructure.monitoring.governance_metrics import (
    GovernanceMetricsCollector,
    get_governance_metrics_collector,
)


class GovernanceMinutesService(LoggingMixin):
    """Vote/session recording and derived result queries."""

    def __init__(
        self,
        votes: VoteStoreProtocol,
        sessions: SessionStoreProtocol,
        time_authority: TimeAuthorityProtocol,
        config: GovernanceConfig = DEFAULT_GOVERNANCE_CONFIG,
        locks: ProposalLockRegistry | None = None,
        metrics: GovernanceMetricsCollector | None = None,
    ) -> None:
        """Initialize the minutes service.

        Args:
            votes: Vote store.
            sessions: Session store.
            time_authority: Time authority for cast and creation times.
            config: Governance configuration (quorum and threshold source).
            locks: Lock registry shared with the state machine.
            metrics: Metrics collector, defaults to the process singleton.
        """
        self._votes = votes
        self._sessions = sessions
        self._time = time_authority
        self._config = config
        self._locks = locks or ProposalLockRegistry()
        self._metrics = metrics or get_governance_metrics_collector()
        self._init_logger()

    # ------------------------------------------------------------------
    # Recording
    # ------------------------------------------------------------------

    async def cast_vote(
        self,
        scope: str,
        agent_id: str,
        proposal_ref: str,
        decision: VoteDecision | str,
        weight: float,
        comment: str = "",
    ) -> Vote:
        """Record an agent's vote, replacing its earlier vote for the key.

        Args:
            scope: Session id or proposal id the vote is grouped under.
            agent_id: Voting agent.
            proposal_ref: Proposal voted on.
            decision: approve, reject or abstain.
            weight: Agent voting power (not validated).
            comment: Optional justification.

        Returns:
            The effective stored vote.

        Raises:
            ValueError: If decision is not a known vote decision.
            TransientStoreError: If the store write fails.
        """
        decision = VoteDecision(decision)
        log = self._log_operation(
            "cast_vote",
            scope=scope,
            agent_id=agent_id,
            proposal_ref=proposal_ref,
        )
        submitted = Vote(
            vote_id=str(uuid4()),
            scope=scope,
            agent_id=agent_id,
            proposal_ref=proposal_ref,
            decision=decision,
            weight=weight,
            cast_at=self._time.now(),
            comment=comment,
        )
        async with self._locks.hold(proposal_ref):
            stored = await self._votes.upsert(submitted)

        self._metrics.record_vote(decision.value)
        log.info(
            "vote_recorded",
            vote_id=stored.vote_id,
            decision=decision.value,
            weight=weight,
            replaced=stored.vote_id != submitted.vote_id,
        )
        return stored

    async def upsert_session(
        self,
        session_id: str,
        title: str = "",
        date: str | None = None,
        summary: str = "",
        metadata: MetadataMap | dict[str, Any] | None = None,
    ) -> GovernanceSession:
        """Create or update a governance session record."""
        if metadata is None:
            metadata = MetadataMap()
        elif not isinstance(metadata, MetadataMap):
            metadata = MetadataMap.from_dict(metadata)
        session = GovernanceSession(
            session_id=session_id,
            title=title,
            date=date,
            summary=summary,
            metadata=metadata,
            created_at=self._time.now(),
        )
        stored = await self._sessions.upsert(session)
        self._log_operation("upsert_session", session_id=session_id).info(
            "session_recorded"
        )
        return stored

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    async def get_session(self, session_id: str) -> GovernanceSession | None:
        return await self._sessions.get(session_id)

    async def list_sessions(self) -> list[GovernanceSession]:
        return await self._sessions.list_sessions()

    async def list_session_votes(self, session_id: str) -> list[Vote]:
        return await self._votes.list_by_scope(session_id)

    async def get_voting_result(
        self,
        scope: str,
        proposal_ref: str,
        eligible_voters: int | None = None,
    ) -> VotingResult:
        """Compute the voting result for one proposal within a scope.

        Args:
            scope: Session id or proposal id.
            proposal_ref: Proposal whose votes are counted.
            eligible_voters: Eligible population. Defaults to the session's
                recorded eligible_voters when scope is a session.

        Returns:
            VotingResult for the proposal.
        """
        votes = [
            vote
            for vote in await self._votes.list_by_scope(scope)
            if vote.proposal_ref == proposal_ref
        ]
        if eligible_voters is None:
            session = await self._sessions.get(scope)
            if session is not None:
                eligible_voters = session.eligible_voters
        return self._result_for(votes, proposal_ref, eligible_voters)

    async def get_audit_chain(self, session_id: str) -> tuple[AuditChainEntry, ...]:
        """Rebuild the hash-linked audit chain of a session."""
        session = await self._sessions.get(session_id)
        votes = await self._votes.list_by_scope(session_id)
        return build_audit_chain(session, votes)

    async def get_session_results(
        self,
        session_id: str,
        eligible_voters: int | None = None,
    ) -> SessionResults | None:
        """Aggregate results, participation and audit chain of a session.

        Args:
            session_id: Session to report on.
            eligible_voters: Eligible population, overriding the session's
                recorded eligible_voters.

        Returns:
            SessionResults, or None if the session does not exist.
        """
        session = await self._sessions.get(session_id)
        if session is None:
            return None

        votes = await self._votes.list_by_scope(session_id)
        if eligible_voters is None:
            eligible_voters = session.eligible_voters

        total_agents = len({vote.agent_id for vote in votes})
        if eligible_voters:
            participation_rate = total_agents / eligible_voters
        else:
            participation_rate = 1.0 if votes else 0.0

        results = tuple(
            self._result_for(proposal_votes, proposal_ref, eligible_voters)
            for proposal_ref, proposal_votes in group_votes_by_proposal(votes).items()
        )
        return SessionResults(
            session=session,
            total_votes=len(votes),
            total_agents=total_agents,
            participation_rate=participation_rate,
            results_by_proposal=results,
            audit_chain=build_audit_chain(session, votes),
        )

    async def verify_session_chain(
        self,
        session_id: str,
        expected_head_hash: str,
        *,
        raise_on_mismatch: bool = False,
    ) -> ChainVerification:
        """Rebuild a session's chain and compare it with a recorded head.

        Args:
            session_id: Session to verify.
            expected_head_hash: Head hash recorded earlier.
            raise_on_mismatch: Raise instead of returning an invalid result.

        Returns:
            ChainVerification; is_valid is False on any mismatch.

        Raises:
            AuditChainIntegrityError: On mismatch when raise_on_mismatch.
        """
        log = self._log_operation("verify_session_chain", session_id=session_id)
        chain = await self.get_audit_chain(session_id)
        verification = verify_audit_chain(chain)
        actual = chain[-1].hash if chain else None

        if verification.is_valid and actual is not None and hmac.compare_digest(
            actual, expected_head_hash
        ):
            log.info("audit_chain_verified", entries=len(chain))
            return verification

        mismatch = ChainVerification(
            is_valid=False,
            entries_checked=verification.entries_checked,
            head_hash=actual,
            broken_at_index=verification.broken_at_index,
            reason=verification.reason or "Head hash does not match recorded value",
        )
        log.warning(
            "audit_chain_mismatch",
            expected_hash=expected_head_hash,
            actual_hash=actual,
            reason=mismatch.reason,
        )
        if raise_on_mismatch:
            raise AuditChainIntegrityError(session_id, expected_head_hash, actual)
        return mismatch

    def _result_for(
        self,
        votes: list[Vote],
        proposal_ref: str,
        eligible_voters: int | None,
    ) -> VotingResult:
        return calculate_voting_result(
            votes,
            min_participants=self._config.min_participants_for(
                GovernancePhase.VOTING, DEFAULT_VOTING_MIN_PARTICIPANTS
            ),
            consensus_threshold=self._config.default_consensus_threshold,
            eligible_voters=eligible_voters,
            proposal_ref=proposal_ref,
        )
