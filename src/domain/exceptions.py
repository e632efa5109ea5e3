"""Base exception classes for the governance domain layer."""

from __future__ import annotations

from typing import Any


class GovernanceError(Exception):
    """Base exception for all domain errors.

    All domain-specific exceptions MUST inherit from this class.
    This enables consistent error handling across the application.

    Attributes:
        error_code: Stable machine-readable code for transport layers.
    """

    error_code: str = "GOVERNANCE_ERROR"

    def __init__(self, message: str = "") -> None:
        """Initialize the exception with an optional message.

        Args:
            message: Human-readable error description.
        """
        super().__init__(message)
        self.message = message

    def details(self) -> dict[str, Any]:
        """Return structured details for the error response."""
        return {}

    def to_dict(self) -> dict[str, Any]:
        """Generate an error response payload for transport layers."""
        return {
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details(),
        }
