"""Audit chain construction and verification domain service.

The audit chain is a deterministic rebuild, not an append-only store. Given
a session record and its votes, the builder folds them into a hash-linked
sequence:

    previous = GENESIS_HASH
    session entry: hash = H(canonical(session))          links to GENESIS_HASH
    vote entries:  hash = H(canonical(vote) ++ previous)  in cast order

Votes are ordered by cast time with ties broken by insertion sequence. Two
builds over the same data produce identical chains, so comparing a recorded
head hash with a fresh build detects any insertion, deletion, reordering, or
mutation of vote history.
"""

from __future__ import annotations

import hmac
from collections.abc import Sequence

from src.domain.events.hash_utils import GENESIS_HASH, compute_chain_hash
from src.domain.models.audit_chain import (
    AuditChainEntry,
    AuditEntryType,
    ChainVerification,
)
from src.domain.models.vote import GovernanceSession, Vote

SESSION_ENTRY_PREFIX = "session-"


def order_votes_for_chain(votes: Sequence[Vote]) -> list[Vote]:
    """Order votes chronologically, ties broken by insertion sequence."""
    return sorted(votes, key=lambda vote: (vote.cast_at, vote.sequence))


def session_entry_id(session_id: str) -> str:
    return f"{SESSION_ENTRY_PREFIX}{session_id}"


def build_audit_chain(
    session: GovernanceSession | None,
    votes: Sequence[Vote],
) -> tuple[AuditChainEntry, ...]:
    """Fold a session and its votes into a hash-linked chain.

    Args:
        session: Session record, or None if the session is not recorded.
        votes: Votes cast in the session, in any order.

    Returns:
        Chain entries, session entry first (when present).
    """
    entries: list[AuditChainEntry] = []
    previous_hash = GENESIS_HASH

    if session is not None:
        payload = session.to_payload()
        entry_hash = compute_chain_hash(payload)
        entries.append(
            AuditChainEntry(
                entry_id=session_entry_id(session.session_id),
                entry_type=AuditEntryType.SESSION,
                timestamp=session.created_at,
                hash=entry_hash,
                previous_hash=previous_hash,
                payload=payload,
            )
        )
        previous_hash = entry_hash

    for vote in order_votes_for_chain(votes):
        payload = vote.to_payload()
        entry_hash = compute_chain_hash(payload, previous_hash)
        entries.append(
            AuditChainEntry(
                entry_id=vote.vote_id,
                entry_type=AuditEntryType.VOTE,
                timestamp=vote.cast_at,
                hash=entry_hash,
                previous_hash=previous_hash,
                payload=payload,
            )
        )
        previous_hash = entry_hash

    return tuple(entries)


def verify_audit_chain(entries: Sequence[AuditChainEntry]) -> ChainVerification:
    """Re-hash and re-link a chain, reporting the first broken entry.

    Args:
        entries: Chain entries as previously produced by build_audit_chain.

    Returns:
        ChainVerification describing the outcome.
    """
    previous_hash = GENESIS_HASH
    for index, entry in enumerate(entries):
        if entry.previous_hash != previous_hash:
            return ChainVerification(
                is_valid=False,
                entries_checked=index,
                head_hash=None,
                broken_at_index=index,
                reason=f"Entry {entry.entry_id} does not link to its predecessor",
            )
        if entry.entry_type == AuditEntryType.SESSION:
            if index != 0:
                return ChainVerification(
                    is_valid=False,
                    entries_checked=index,
                    head_hash=None,
                    broken_at_index=index,
                    reason=f"Session entry {entry.entry_id} is not first",
                )
            expected = compute_chain_hash(dict(entry.payload))
        else:
            expected = compute_chain_hash(dict(entry.payload), previous_hash)
        if not hmac.compare_digest(expected, entry.hash):
            return ChainVerification(
                is_valid=False,
                entries_checked=index,
                head_hash=None,
                broken_at_index=index,
                reason=f"Entry {entry.entry_id} hash does not match its payload",
            )
        previous_hash = entry.hash

    return ChainVerification(
        is_valid=True,
        entries_checked=len(entries),
        head_hash=entries[-1].hash if entries else None,
    )


def chain_head_hash(entries: Sequence[AuditChainEntry]) -> str | None:
    """Return the hash of the last entry, or None for an empty chain."""
    return entries[-1].hash if entries else None
