"""Audit chain integrity errors."""

from __future__ import annotations

from typing import Any

from src.domain.exceptions import GovernanceError


class AuditChainIntegrityError(GovernanceError):
    """Raised when a re-derived chain does not match a recorded head hash.

    This indicates insertion, deletion, reordering, or mutation of the vote
    history since the head hash was recorded.
    """

    error_code = "AUDIT_CHAIN_MISMATCH"

    def __init__(
        self,
        session_id: str,
        expected_hash: str,
        actual_hash: str | None,
    ) -> None:
        self.session_id = session_id
        self.expected_hash = expected_hash
        self.actual_hash = actual_hash
        super().__init__(
            f"Audit chain for session {session_id} does not match recorded head: "
            f"expected {expected_hash}, got {actual_hash}"
        )

    def details(self) -> dict[str, Any]:
        return {
            "session_id": self.session_id,
            "expected_hash": self.expected_hash,
            "actual_hash": self.actual_hash,
        }
