"""Controllable clock for governance lifecycle tests.

Discussion minimums, voting deadlines and vote ordering all depend on
time, so tests drive the clock explicitly:

    >>> clock = FakeTimeAuthority()
    >>> clock.advance(hours=13)
    >>> clock.now().hour
    13
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from src.application.ports.time_authority import TimeAuthorityProtocol

DEFAULT_TEST_TIME = datetime(2026, 1, 1, 0, 0, 0, tzinfo=timezone.utc)


class FakeTimeAuthority(TimeAuthorityProtocol):
    """Clock that only moves when told to.

    advance() moves both the wall clock and the monotonic reading;
    set_time() jumps the wall clock alone.
    """

    def __init__(
        self,
        frozen_at: datetime | None = None,
        *,
        start_monotonic: float = 0.0,
    ) -> None:
        """Freeze the clock.

        Args:
            frozen_at: Starting wall-clock time, default 2026-01-01 UTC.
                Naive datetimes are treated as UTC.
            start_monotonic: Starting monotonic reading.
        """
        self._current_time = _as_utc(frozen_at or DEFAULT_TEST_TIME)
        self._monotonic = start_monotonic

    def now(self) -> datetime:
        return self._current_time

    def monotonic(self) -> float:
        return self._monotonic

    def advance(
        self,
        seconds: float | None = None,
        delta: timedelta | None = None,
        *,
        hours: float | None = None,
    ) -> None:
        """Move time forward.

        A delta wins over hours, and hours over seconds.

        Raises:
            ValueError: If no amount is given or the amount is negative.
        """
        if delta is not None:
            step = delta
        elif hours is not None:
            step = timedelta(hours=hours)
        elif seconds is not None:
            step = timedelta(seconds=seconds)
        else:
            raise ValueError("Must provide 'seconds', 'hours' or 'delta'")

        if step < timedelta(0):
            raise ValueError(f"Cannot move the clock backwards by {step}")

        self._current_time += step
        self._monotonic += step.total_seconds()

    def set_time(self, dt: datetime) -> None:
        """Jump to an explicit time without touching the monotonic clock."""
        self._current_time = _as_utc(dt)

    @property
    def current_time(self) -> datetime:
        return self._current_time

    def __repr__(self) -> str:
        return f"FakeTimeAuthority(now={self._current_time.isoformat()})"


def _as_utc(dt: datetime) -> datetime:
    return dt if dt.tzinfo is not None else dt.replace(tzinfo=timezone.utc)
