"""Vote store port.

Votes are keyed by (scope, agent_id, proposal_ref). Upserting an existing
key replaces decision, weight and comment; the original vote id, cast time
and insertion sequence are kept so the audit chain order is stable.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from src.domain.models.vote import Vote


class VoteStoreProtocol(ABC):
    """Abstract interface for vote storage."""

    @abstractmethod
    async def upsert(self, vote: Vote) -> Vote:
        """Record a vote, replacing any earlier vote with the same key.

        Args:
            vote: Submitted vote. Its sequence is ignored; the store assigns
                one on first insert.

        Returns:
            The effective stored vote.

        Raises:
            TransientStoreError: If the write fails.
        """
        ...

    @abstractmethod
    async def list_by_scope(self, scope: str) -> list[Vote]:
        """List effective votes grouped under a session or proposal id.

        Returns:
            Votes ordered by cast time, ties broken by insertion sequence.
        """
        ...

    @abstractmethod
    async def list_by_proposal(self, proposal_ref: str) -> list[Vote]:
        """List effective votes about a proposal, across all scopes.

        Returns:
            Votes ordered by cast time, ties broken by insertion sequence.
        """
        ...
