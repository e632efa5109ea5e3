"""Governance session store stub."""

from __future__ import annotations

from dataclasses import replace

from src.application.ports.session_store import SessionStoreProtocol
from src.domain.models.vote import GovernanceSession


class SessionStoreStub(SessionStoreProtocol):
    """In-memory session storage."""

    def __init__(self) -> None:
        """Initialize the stub with empty storage."""
        self._sessions: dict[str, GovernanceSession] = {}

    def clear(self) -> None:
        """Clear all stored data."""
        self._sessions.clear()

    async def upsert(self, session: GovernanceSession) -> GovernanceSession:
        existing = self._sessions.get(session.session_id)
        if existing is not None and existing.created_at is not None:
            session = replace(session, created_at=existing.created_at)
        self._sessions[session.session_id] = session
        return session

    async def get(self, session_id: str) -> GovernanceSession | None:
        return self._sessions.get(session_id)

    async def list_sessions(self) -> list[GovernanceSession]:
        return [self._sessions[key] for key in sorted(self._sessions)]
