"""Event sink port for transition notifications.

Emission is fire-and-forget from the core's point of view: a failure here
is logged by the caller and never rolls back the transition.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from src.domain.models.phase_transition import TransitionEvent


class EventSinkProtocol(ABC):
    """Delivers transition events to external subscribers."""

    @abstractmethod
    async def emit(self, event: TransitionEvent) -> None:
        """Publish a transition event."""
        ...
