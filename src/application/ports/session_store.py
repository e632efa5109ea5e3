"""Governance session store port."""

from __future__ import annotations

from abc import ABC, abstractmethod

from src.domain.models.vote import GovernanceSession


class SessionStoreProtocol(ABC):
    """Abstract interface for governance session storage."""

    @abstractmethod
    async def upsert(self, session: GovernanceSession) -> GovernanceSession:
        """Create or update a session record.

        Updating keeps the original created_at.

        Returns:
            The stored session.
        """
        ...

    @abstractmethod
    async def get(self, session_id: str) -> GovernanceSession | None:
        """Fetch a session by id, or None if it does not exist."""
        ...

    @abstractmethod
    async def list_sessions(self) -> list[GovernanceSession]:
        """List all sessions ordered by id ascending."""
        ...
