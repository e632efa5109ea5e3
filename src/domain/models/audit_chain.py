"""Audit chain entry models.

The chain is derived on read from the session record and its votes; it is
never stored. Recomputing it from the same data must always produce the
same hash sequence.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from types import MappingProxyType
from typing import Any


class AuditEntryType(Enum):
    """Kind of event recorded in the chain."""

    SESSION = "session"
    VOTE = "vote"


@dataclass(frozen=True)
class AuditChainEntry:
    """A single hash-linked entry of a session's audit chain.

    Attributes:
        entry_id: "session-<id>" for the session entry, the vote id otherwise.
        entry_type: session or vote.
        timestamp: Session creation time or vote cast time.
        hash: SHA-256 of this entry (see hash_utils.compute_chain_hash).
        previous_hash: Hash of the preceding entry, GENESIS_HASH for the first.
        payload: Canonical payload that was hashed.
    """

    entry_id: str
    entry_type: AuditEntryType
    timestamp: datetime | None
    hash: str
    previous_hash: str
    payload: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "payload", MappingProxyType(dict(self.payload)))

    @property
    def agent_id(self) -> str | None:
        return self.payload.get("agent_id")

    @property
    def decision(self) -> str | None:
        return self.payload.get("decision")

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "id": self.entry_id,
            "type": self.entry_type.value,
            "timestamp": self.timestamp.isoformat() if self.timestamp else None,
            "hash": self.hash,
            "previous_hash": self.previous_hash,
            "payload": dict(self.payload),
        }


@dataclass(frozen=True)
class ChainVerification:
    """Result of re-deriving and checking an audit chain."""

    is_valid: bool
    entries_checked: int
    head_hash: str | None
    broken_at_index: int | None = None
    reason: str | None = None
