"""Persistence failure errors.

A TransientStoreError wraps a read or write failure from the persistence
layer. The core logs it and surfaces it as a generic failure; retry policy
belongs to the caller.
"""

from __future__ import annotations

from typing import Any

from src.domain.exceptions import GovernanceError


class TransientStoreError(GovernanceError):
    """Raised when a store operation fails.

    Attributes:
        operation: Store operation that failed (e.g. "votes.upsert").
    """

    error_code = "STORE_FAILURE"

    def __init__(self, operation: str, message: str = "") -> None:
        self.operation = operation
        super().__init__(message or f"Store operation {operation} failed")

    def details(self) -> dict[str, Any]:
        return {"operation": self.operation}
