"""
Application layer - Use cases and orchestration for the governance core.

This layer contains:
- Application services (phase state machine, minutes, scheduler)
- Port definitions (abstract interfaces for infrastructure)

IMPORT RULES:
- CAN import from: domain, config
- CAN import from infrastructure: observability, monitoring (cross-cutting)
"""

from src.application.ports import (
    EventSinkProtocol,
    ProposalContextProvider,
    ProposalRepositoryProtocol,
    SessionStoreProtocol,
    TimeAuthorityProtocol,
    VoteStoreProtocol,
)

__all__: list[str] = [
    "EventSinkProtocol",
    "ProposalContextProvider",
    "ProposalRepositoryProtocol",
    "SessionStoreProtocol",
    "TimeAuthorityProtocol",
    "VoteStoreProtocol",
]
