"""Event sink stub.

Records emitted transition events and can be configured to fail, to check
that delivery failures never roll back a transition.
"""

from __future__ import annotations

from src.application.ports.event_sink import EventSinkProtocol
from src.domain.models.phase_transition import TransitionEvent


class EventSinkStub(EventSinkProtocol):
    """Collects emitted events in memory.

    Attributes:
        events: Events emitted so far, in order.
    """

    def __init__(self, should_fail: bool = False) -> None:
        self.events: list[TransitionEvent] = []
        self._should_fail = should_fail

    def clear(self) -> None:
        self.events.clear()
        self._should_fail = False

    def set_should_fail(self, should_fail: bool) -> None:
        """Make emit() raise ConnectionError."""
        self._should_fail = should_fail

    async def emit(self, event: TransitionEvent) -> None:
        if self._should_fail:
            raise ConnectionError("event sink unavailable")
        self.events.append(event)
