"""PostgreSQL schema for the governance core.

Statements are idempotent so create_schema can run at every worker start.
The votes table enforces one effective vote per (scope, agent, proposal);
its BIGSERIAL sequence column is the stable insertion order used to break
cast-time ties in the audit chain.
"""

from __future__ import annotations

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

SCHEMA_STATEMENTS: tuple[str, ...] = (
    """
    CREATE TABLE IF NOT EXISTS governance_proposals (
        id TEXT PRIMARY KEY,
        author_id TEXT NOT NULL,
        title TEXT NOT NULL DEFAULT '',
        current_phase TEXT NOT NULL,
        current_status TEXT NOT NULL,
        phase_started_at TIMESTAMPTZ NOT NULL,
        deadline TIMESTAMPTZ,
        metadata JSONB NOT NULL DEFAULT '{}'::jsonb
    )
    """,
    """
    CREATE INDEX IF NOT EXISTS idx_governance_proposals_status
        ON governance_proposals (current_status)
    """,
    """
    CREATE TABLE IF NOT EXISTS governance_discussions (
        id TEXT PRIMARY KEY,
        proposal_id TEXT NOT NULL REFERENCES governance_proposals (id),
        participants TEXT[] NOT NULL DEFAULT '{}',
        created_at TIMESTAMPTZ
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS governance_sessions (
        id TEXT PRIMARY KEY,
        title TEXT NOT NULL DEFAULT '',
        date TEXT,
        summary TEXT NOT NULL DEFAULT '',
        metadata JSONB NOT NULL DEFAULT '{}'::jsonb,
        created_at TIMESTAMPTZ
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS governance_votes (
        vote_id TEXT PRIMARY KEY,
        scope TEXT NOT NULL,
        agent_id TEXT NOT NULL,
        proposal_ref TEXT NOT NULL,
        decision TEXT NOT NULL CHECK (decision IN ('approve', 'reject', 'abstain')),
        weight DOUBLE PRECISION NOT NULL,
        comment TEXT NOT NULL DEFAULT '',
        cast_at TIMESTAMPTZ NOT NULL,
        sequence BIGSERIAL NOT NULL,
        UNIQUE (scope, agent_id, proposal_ref)
    )
    """,
    """
    CREATE INDEX IF NOT EXISTS idx_governance_votes_proposal
        ON governance_votes (proposal_ref, cast_at, sequence)
    """,
)


async def create_schema(session_factory: async_sessionmaker[AsyncSession]) -> None:
    """Create governance tables and indexes if they do not exist."""
    async with session_factory() as session:
        async with session.begin():
            for statement in SCHEMA_STATEMENTS:
                await session.execute(text(statement))
