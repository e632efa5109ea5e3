"""Event sink that publishes transition events as structured log lines.

Delivery to subscribers (queues, webhooks) happens downstream of the log
pipeline; the core only needs a sink that never blocks a transition.
"""

from __future__ import annotations

from structlog import get_logger

from src.application.ports.event_sink import EventSinkProtocol
from src.domain.models.phase_transition import TransitionEvent

logger = get_logger()


class LoggingEventSink(EventSinkProtocol):
    """Emits each TransitionEvent as a `governance_transition_event` line."""

    def __init__(self, channel: str = "governance.transitions") -> None:
        self._log = logger.bind(component="event_sink", channel=channel)

    async def emit(self, event: TransitionEvent) -> None:
        self._log.info("governance_transition_event", **event.to_dict())
