"""Infrastructure stubs for development and testing.

This module provides in-memory implementations of the governance ports.

Available stubs:
- ProposalRepositoryStub: Proposals and discussions with compare-and-swap
- VoteStoreStub: Votes keyed by (scope, agent, proposal), with tamper helpers
- SessionStoreStub: Governance sessions
- EventSinkStub: Records transition events, optionally failing

WARNING: These stubs are NOT for production use.
Production implementations are in src/infrastructure/adapters/persistence/.
"""

from src.infrastructure.stubs.event_sink_stub import EventSinkStub
from src.infrastructure.stubs.proposal_repository_stub import ProposalRepositoryStub
from src.infrastructure.stubs.session_store_stub import SessionStoreStub
from src.infrastructure.stubs.vote_store_stub import VoteStoreStub

__all__: list[str] = [
    "EventSinkStub",
    "ProposalRepositoryStub",
    "SessionStoreStub",
    "VoteStoreStub",
]
