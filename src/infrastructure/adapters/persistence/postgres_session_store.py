"""PostgreSQL governance session store."""

from __future__ import annotations

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from structlog import get_logger

from src.application.ports.session_store import SessionStoreProtocol
from src.domain.errors.store import TransientStoreError
from src.domain.models.vote import GovernanceSession
from src.infrastructure.adapters.persistence.rows import dump_metadata, row_to_session

logger = get_logger()

_SESSION_COLUMNS = "id, title, date, summary, metadata, created_at"


class PostgresSessionStore(SessionStoreProtocol):
    """Session storage over SQLAlchemy async sessions."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def upsert(self, session: GovernanceSession) -> GovernanceSession:
        try:
            async with self._session_factory() as db:
                async with db.begin():
                    result = await db.execute(
                        text(f"""
                            INSERT INTO governance_sessions (
                                id, title, date, summary, metadata, created_at
                            )
                            VALUES (
                                :id, :title, :date, :summary,
                                CAST(:metadata AS JSONB), :created_at
                            )
                            ON CONFLICT (id) DO UPDATE SET
                                title = EXCLUDED.title,
                                date = EXCLUDED.date,
                                summary = EXCLUDED.summary,
                                metadata = EXCLUDED.metadata
                            RETURNING {_SESSION_COLUMNS}
                        """),
                        {
                            "id": session.session_id,
                            "title": session.title,
                            "date": session.date,
                            "summary": session.summary,
                            "metadata": dump_metadata(session.metadata),
                            "created_at": session.created_at,
                        },
                    )
                    row = result.mappings().one()
        except SQLAlchemyError as exc:
            logger.error(
                "session_write_failed", session_id=session.session_id, error=str(exc)
            )
            raise TransientStoreError("sessions.upsert", str(exc)) from exc
        return row_to_session(row)

    async def get(self, session_id: str) -> GovernanceSession | None:
        try:
            async with self._session_factory() as db:
                result = await db.execute(
                    text(f"""
                        SELECT {_SESSION_COLUMNS}
                        FROM governance_sessions
                        WHERE id = :id
                    """),
                    {"id": session_id},
                )
                row = result.mappings().first()
        except SQLAlchemyError as exc:
            logger.error("session_read_failed", session_id=session_id, error=str(exc))
            raise TransientStoreError("sessions.get", str(exc)) from exc
        return row_to_session(row) if row is not None else None

    async def list_sessions(self) -> list[GovernanceSession]:
        try:
            async with self._session_factory() as db:
                result = await db.execute(
                    text(f"""
                        SELECT {_SESSION_COLUMNS}
                        FROM governance_sessions
                        ORDER BY id
                    """),
                )
                rows = result.mappings().all()
        except SQLAlchemyError as exc:
            logger.error("session_list_failed", error=str(exc))
            raise TransientStoreError("sessions.list_sessions", str(exc)) from exc
        return [row_to_session(row) for row in rows]
