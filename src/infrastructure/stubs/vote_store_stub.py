"""Vote store stub.

In-memory implementation of VoteStoreProtocol. Upserts keep the original
vote id, cast time and insertion sequence of the key, matching the
PostgreSQL ON CONFLICT behavior.
"""

from __future__ import annotations

from dataclasses import replace

from src.application.ports.vote_store import VoteStoreProtocol
from src.domain.models.vote import Vote, VoteKey
from src.domain.services.audit_chain_builder import order_votes_for_chain


class VoteStoreStub(VoteStoreProtocol):
    """In-memory vote storage keyed by (scope, agent, proposal)."""

    def __init__(self) -> None:
        """Initialize the stub with empty storage."""
        self._votes: dict[VoteKey, Vote] = {}
        self._next_sequence = 1

    def clear(self) -> None:
        """Clear all stored data."""
        self._votes.clear()
        self._next_sequence = 1

    def tamper(self, vote_id: str, **changes: object) -> None:
        """Mutate a stored vote in place, bypassing upsert rules.

        Used to simulate history tampering in audit chain tests.
        """
        for key, vote in self._votes.items():
            if vote.vote_id == vote_id:
                self._votes[key] = replace(vote, **changes)
                return
        raise KeyError(vote_id)

    def remove(self, vote_id: str) -> None:
        """Physically delete a vote (simulated tampering)."""
        for key, vote in list(self._votes.items()):
            if vote.vote_id == vote_id:
                del self._votes[key]
                return
        raise KeyError(vote_id)

    async def upsert(self, vote: Vote) -> Vote:
        existing = self._votes.get(vote.key)
        if existing is not None:
            stored = existing.superseded_by(vote)
        else:
            stored = replace(vote, sequence=self._next_sequence)
            self._next_sequence += 1
        self._votes[vote.key] = stored
        return stored

    async def list_by_scope(self, scope: str) -> list[Vote]:
        return order_votes_for_chain(
            [vote for vote in self._votes.values() if vote.scope == scope]
        )

    async def list_by_proposal(self, proposal_ref: str) -> list[Vote]:
        return order_votes_for_chain(
            [vote for vote in self._votes.values() if vote.proposal_ref == proposal_ref]
        )
