"""Bootstrap wiring for the governance core.

Two compositions are provided:
- build_in_memory_core: stubs only, for tests and local experiments
- build_postgres_core: PostgreSQL stores over the shared session factory

Both share one ProposalLockRegistry between the state machine and the
minutes service so votes and transitions on a proposal are serialized.
"""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.application.ports.event_sink import EventSinkProtocol
from src.application.ports.proposal_repository import ProposalRepositoryProtocol
from src.application.ports.session_store import SessionStoreProtocol
from src.application.ports.time_authority import TimeAuthorityProtocol
from src.application.ports.vote_store import VoteStoreProtocol
from src.application.services.automatic_transition_scheduler import (
    AutomaticTransitionScheduler,
)
from src.application.services.governance_minutes_service import (
    GovernanceMinutesService,
)
from src.application.services.phase_state_machine_service import (
    PhaseStateMachineService,
)
from src.application.services.proposal_context_assembler import (
    ProposalContextAssembler,
)
from src.application.services.proposal_locks import ProposalLockRegistry
from src.application.services.system_time_authority import SystemTimeAuthority
from src.bootstrap.database import get_session_factory
from src.config.governance_config import GovernanceConfig
from src.infrastructure.adapters.events import LoggingEventSink
from src.infrastructure.adapters.persistence import (
    PostgresProposalRepository,
    PostgresSessionStore,
    PostgresVoteStore,
)
from src.infrastructure.monitoring.governance_metrics import (
    GovernanceMetricsCollector,
    get_governance_metrics_collector,
)
from src.infrastructure.stubs import (
    EventSinkStub,
    ProposalRepositoryStub,
    SessionStoreStub,
    VoteStoreStub,
)


@dataclass(frozen=True)
class GovernanceCore:
    """Wired governance services and the stores behind them."""

    state_machine: PhaseStateMachineService
    minutes: GovernanceMinutesService
    scheduler: AutomaticTransitionScheduler
    proposals: ProposalRepositoryProtocol
    votes: VoteStoreProtocol
    sessions: SessionStoreProtocol
    event_sink: EventSinkProtocol
    time_authority: TimeAuthorityProtocol
    config: GovernanceConfig


def build_core(
    *,
    proposals: ProposalRepositoryProtocol,
    votes: VoteStoreProtocol,
    sessions: SessionStoreProtocol,
    event_sink: EventSinkProtocol,
    time_authority: TimeAuthorityProtocol | None = None,
    config: GovernanceConfig | None = None,
    metrics: GovernanceMetricsCollector | None = None,
) -> GovernanceCore:
    """Wire the services over the given stores."""
    time_authority = time_authority or SystemTimeAuthority()
    config = config or GovernanceConfig.from_environment()
    metrics = metrics or get_governance_metrics_collector()
    locks = ProposalLockRegistry()

    state_machine = PhaseStateMachineService(
        proposals=proposals,
        context_provider=ProposalContextAssembler(proposals, votes, time_authority),
        votes=votes,
        sessions=sessions,
        event_sink=event_sink,
        time_authority=time_authority,
        config=config,
        locks=locks,
        metrics=metrics,
    )
    minutes = GovernanceMinutesService(
        votes=votes,
        sessions=sessions,
        time_authority=time_authority,
        config=config,
        locks=locks,
        metrics=metrics,
    )
    return GovernanceCore(
        state_machine=state_machine,
        minutes=minutes,
        scheduler=AutomaticTransitionScheduler(state_machine, time_authority),
        proposals=proposals,
        votes=votes,
        sessions=sessions,
        event_sink=event_sink,
        time_authority=time_authority,
        config=config,
    )


def build_in_memory_core(
    time_authority: TimeAuthorityProtocol | None = None,
    config: GovernanceConfig | None = None,
    metrics: GovernanceMetricsCollector | None = None,
) -> GovernanceCore:
    """Wire the core over in-memory stubs."""
    return build_core(
        proposals=ProposalRepositoryStub(),
        votes=VoteStoreStub(),
        sessions=SessionStoreStub(),
        event_sink=EventSinkStub(),
        time_authority=time_authority,
        config=config,
        metrics=metrics,
    )


def build_postgres_core(
    session_factory: async_sessionmaker[AsyncSession] | None = None,
    event_sink: EventSinkProtocol | None = None,
    time_authority: TimeAuthorityProtocol | None = None,
    config: GovernanceConfig | None = None,
) -> GovernanceCore:
    """Wire the core over PostgreSQL stores.

    Raises:
        ValueError: If no session factory is given and DATABASE_URL is unset.
    """
    session_factory = session_factory or get_session_factory()
    return build_core(
        proposals=PostgresProposalRepository(session_factory),
        votes=PostgresVoteStore(session_factory),
        sessions=PostgresSessionStore(session_factory),
        event_sink=event_sink or LoggingEventSink(),
        time_authority=time_authority,
        config=config,
    )
