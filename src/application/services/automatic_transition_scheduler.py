"""Automatic transition scheduler.

Thin orchestration over PhaseStateMachineService.process_automatic_transitions.
It owns no timer and no state; an external process (see
src/workers/transition_sweep_worker.py) decides when to call run_sweep.
Running two sweeps back to back is safe because every transition is
re-validated against persisted state.
"""

from __future__ import annotations

from src.application.ports.time_authority import TimeAuthorityProtocol
from src.application.services.base import LoggingMixin
from src.application.services.phase_state_machine_service import (
    PhaseStateMachineService,
)
from src.domain.models.phase_transition import TransitionEvent


class AutomaticTransitionScheduler(LoggingMixin):
    """Exposes a single sweep operation to external schedulers."""

    def __init__(
        self,
        state_machine: PhaseStateMachineService,
        time_authority: TimeAuthorityProtocol,
    ) -> None:
        self._state_machine = state_machine
        self._time = time_authority
        self._init_logger()

    async def run_sweep(self) -> list[TransitionEvent]:
        """Apply every automatic transition that is currently due.

        Returns:
            Events for the transitions applied.
        """
        log = self._log_operation("run_sweep")
        started = self._time.monotonic()
        events = await self._state_machine.process_automatic_transitions()
        log.info(
            "sweep_finished",
            transitions=len(events),
            duration_seconds=round(self._time.monotonic() - started, 6),
        )
        return events
