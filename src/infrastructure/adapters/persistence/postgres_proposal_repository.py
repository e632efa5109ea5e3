"""PostgreSQL proposal repository.

compare_and_swap locks the proposal row with SELECT ... FOR UPDATE inside a
transaction, checks the expected phase and status, then updates. A second
writer blocks on the row lock and then sees the new phase, so concurrent
transitions on the same proposal cannot both succeed.
"""

from __future__ import annotations

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from structlog import get_logger

from src.application.ports.proposal_repository import ProposalRepositoryProtocol
from src.domain.errors.store import TransientStoreError
from src.domain.models.governance_phase import (
    SETTLED_STATUSES,
    GovernancePhase,
    ProposalStatus,
)
from src.domain.models.proposal import Discussion, Proposal
from src.infrastructure.adapters.persistence.rows import (
    proposal_params,
    row_to_discussion,
    row_to_proposal,
)

logger = get_logger()

_PROPOSAL_COLUMNS = (
    "id, author_id, title, current_phase, current_status, "
    "phase_started_at, deadline, metadata"
)


class PostgresProposalRepository(ProposalRepositoryProtocol):
    """Proposal storage over SQLAlchemy async sessions.

    Attributes:
        _session_factory: SQLAlchemy async session factory for DB access.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def get(self, proposal_id: str) -> Proposal | None:
        try:
            async with self._session_factory() as session:
                result = await session.execute(
                    text(f"""
                        SELECT {_PROPOSAL_COLUMNS}
                        FROM governance_proposals
                        WHERE id = :id
                    """),
                    {"id": proposal_id},
                )
                row = result.mappings().first()
        except SQLAlchemyError as exc:
            logger.error("proposal_read_failed", proposal_id=proposal_id, error=str(exc))
            raise TransientStoreError("proposals.get", str(exc)) from exc
        return row_to_proposal(row) if row is not None else None

    async def save(self, proposal: Proposal) -> None:
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    await session.execute(
                        text("""
                            INSERT INTO governance_proposals (
                                id, author_id, title, current_phase, current_status,
                                phase_started_at, deadline, metadata
                            )
                            VALUES (
                                :id, :author_id, :title, :current_phase, :current_status,
                                :phase_started_at, :deadline, CAST(:metadata AS JSONB)
                            )
                            ON CONFLICT (id) DO UPDATE SET
                                author_id = EXCLUDED.author_id,
                                title = EXCLUDED.title,
                                current_phase = EXCLUDED.current_phase,
                                current_status = EXCLUDED.current_status,
                                phase_started_at = EXCLUDED.phase_started_at,
                                deadline = EXCLUDED.deadline,
                                metadata = EXCLUDED.metadata
                        """),
                        proposal_params(proposal),
                    )
        except SQLAlchemyError as exc:
            logger.error(
                "proposal_write_failed",
                proposal_id=proposal.proposal_id,
                error=str(exc),
            )
            raise TransientStoreError("proposals.save", str(exc)) from exc

    async def list_active(self) -> list[Proposal]:
        settled = sorted(status.value for status in SETTLED_STATUSES)
        try:
            async with self._session_factory() as session:
                result = await session.execute(
                    text(f"""
                        SELECT {_PROPOSAL_COLUMNS}
                        FROM governance_proposals
                        WHERE current_status <> ALL(:settled)
                        ORDER BY id
                    """),
                    {"settled": settled},
                )
                rows = result.mappings().all()
        except SQLAlchemyError as exc:
            logger.error("proposal_list_failed", error=str(exc))
            raise TransientStoreError("proposals.list_active", str(exc)) from exc
        return [row_to_proposal(row) for row in rows]

    async def compare_and_swap(
        self,
        updated: Proposal,
        *,
        expected_phase: GovernancePhase,
        expected_status: ProposalStatus,
    ) -> bool:
        log = logger.bind(proposal_id=updated.proposal_id)
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    result = await session.execute(
                        text("""
                            SELECT current_phase, current_status
                            FROM governance_proposals
                            WHERE id = :id
                            FOR UPDATE
                        """),
                        {"id": updated.proposal_id},
                    )
                    row = result.mappings().first()
                    if (
                        row is None
                        or row["current_phase"] != expected_phase.value
                        or row["current_status"] != expected_status.value
                    ):
                        log.info(
                            "proposal_swap_rejected",
                            expected_phase=expected_phase.value,
                            found_phase=row["current_phase"] if row else None,
                        )
                        return False

                    await session.execute(
                        text("""
                            UPDATE governance_proposals
                            SET current_phase = :current_phase,
                                current_status = :current_status,
                                phase_started_at = :phase_started_at,
                                deadline = :deadline,
                                title = :title,
                                metadata = CAST(:metadata AS JSONB)
                            WHERE id = :id
                        """),
                        proposal_params(updated),
                    )
        except SQLAlchemyError as exc:
            log.error("proposal_swap_failed", error=str(exc))
            raise TransientStoreError("proposals.compare_and_swap", str(exc)) from exc
        return True

    async def list_discussions(self, proposal_id: str) -> list[Discussion]:
        try:
            async with self._session_factory() as session:
                result = await session.execute(
                    text("""
                        SELECT id, proposal_id, participants, created_at
                        FROM governance_discussions
                        WHERE proposal_id = :proposal_id
                        ORDER BY created_at NULLS FIRST, id
                    """),
                    {"proposal_id": proposal_id},
                )
                rows = result.mappings().all()
        except SQLAlchemyError as exc:
            logger.error(
                "discussion_list_failed", proposal_id=proposal_id, error=str(exc)
            )
            raise TransientStoreError("proposals.list_discussions", str(exc)) from exc
        return [row_to_discussion(row) for row in rows]
