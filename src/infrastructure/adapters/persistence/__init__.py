"""PostgreSQL persistence adapters (SQLAlchemy async + asyncpg)."""

from src.infrastructure.adapters.persistence.postgres_proposal_repository import (
    PostgresProposalRepository,
)
from src.infrastructure.adapters.persistence.postgres_session_store import (
    PostgresSessionStore,
)
from src.infrastructure.adapters.persistence.postgres_vote_store import (
    PostgresVoteStore,
)
from src.infrastructure.adapters.persistence.schema import (
    SCHEMA_STATEMENTS,
    create_schema,
)

__all__: list[str] = [
    "SCHEMA_STATEMENTS",
    "PostgresProposalRepository",
    "PostgresSessionStore",
    "PostgresVoteStore",
    "create_schema",
]
