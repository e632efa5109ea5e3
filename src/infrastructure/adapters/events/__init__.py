"""Transition event sinks."""

from src.infrastructure.adapters.events.logging_event_sink import LoggingEventSink

__all__: list[str] = ["LoggingEventSink"]
