"""PostgreSQL vote store.

Votes are upserted with ON CONFLICT on (scope, agent_id, proposal_ref):
decision, weight and comment are replaced while vote_id, cast_at and the
BIGSERIAL sequence of the first submission are kept.
"""

from __future__ import annotations

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from structlog import get_logger

from src.application.ports.vote_store import VoteStoreProtocol
from src.domain.errors.store import TransientStoreError
from src.domain.models.vote import Vote
from src.infrastructure.adapters.persistence.rows import row_to_vote

logger = get_logger()

_VOTE_COLUMNS = (
    "vote_id, scope, agent_id, proposal_ref, decision, weight, comment, "
    "cast_at, sequence"
)


class PostgresVoteStore(VoteStoreProtocol):
    """Vote storage over SQLAlchemy async sessions."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def upsert(self, vote: Vote) -> Vote:
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    result = await session.execute(
                        text(f"""
                            INSERT INTO governance_votes (
                                vote_id, scope, agent_id, proposal_ref,
                                decision, weight, comment, cast_at
                            )
                            VALUES (
                                :vote_id, :scope, :agent_id, :proposal_ref,
                                :decision, :weight, :comment, :cast_at
                            )
                            ON CONFLICT (scope, agent_id, proposal_ref) DO UPDATE SET
                                decision = EXCLUDED.decision,
                                weight = EXCLUDED.weight,
                                comment = EXCLUDED.comment
                            RETURNING {_VOTE_COLUMNS}
                        """),
                        {
                            "vote_id": vote.vote_id,
                            "scope": vote.scope,
                            "agent_id": vote.agent_id,
                            "proposal_ref": vote.proposal_ref,
                            "decision": vote.decision.value,
                            "weight": vote.weight,
                            "comment": vote.comment,
                            "cast_at": vote.cast_at,
                        },
                    )
                    row = result.mappings().one()
        except SQLAlchemyError as exc:
            logger.error(
                "vote_write_failed",
                scope=vote.scope,
                agent_id=vote.agent_id,
                proposal_ref=vote.proposal_ref,
                error=str(exc),
            )
            raise TransientStoreError("votes.upsert", str(exc)) from exc
        return row_to_vote(row)

    async def list_by_scope(self, scope: str) -> list[Vote]:
        return await self._list("scope", scope, "votes.list_by_scope")

    async def list_by_proposal(self, proposal_ref: str) -> list[Vote]:
        return await self._list("proposal_ref", proposal_ref, "votes.list_by_proposal")

    async def _list(self, column: str, value: str, operation: str) -> list[Vote]:
        try:
            async with self._session_factory() as session:
                result = await session.execute(
                    text(f"""
                        SELECT {_VOTE_COLUMNS}
                        FROM governance_votes
                        WHERE {column} = :value
                        ORDER BY cast_at, sequence
                    """),
                    {"value": value},
                )
                rows = result.mappings().all()
        except SQLAlchemyError as exc:
            logger.error("vote_read_failed", column=column, value=value, error=str(exc))
            raise TransientStoreError(operation, str(exc)) from exc
        return [row_to_vote(row) for row in rows]
