"""Application ports - abstract interfaces for the governance core.

Ports are implemented by in-memory stubs (src/infrastructure/stubs) and
PostgreSQL adapters (src/infrastructure/adapters/persistence).
"""

from src.application.ports.event_sink import EventSinkProtocol
from src.application.ports.proposal_context import ProposalContextProvider
from src.application.ports.proposal_repository import ProposalRepositoryProtocol
from src.application.ports.session_store import SessionStoreProtocol
from src.application.ports.time_authority import TimeAuthorityProtocol
from src.application.ports.vote_store import VoteStoreProtocol

__all__: list[str] = [
    "EventSinkProtocol",
    "ProposalContextProvider",
    "ProposalRepositoryProtocol",
    "SessionStoreProtocol",
    "TimeAuthorityProtocol",
    "VoteStoreProtocol",
]
