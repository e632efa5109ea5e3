"""Clock port for the governance core.

Phase deadlines, time-in-phase, vote cast times and session creation
times all come from an injected TimeAuthorityProtocol. Services never call
datetime.now() themselves, so a test can walk a proposal through every
phase by advancing a fake clock.
"""

from abc import ABC, abstractmethod
from datetime import datetime


class TimeAuthorityProtocol(ABC):
    """Source of wall-clock and monotonic time.

    Production code uses SystemTimeAuthority; tests use FakeTimeAuthority
    from tests/helpers/fake_time_authority.py.
    """

    @abstractmethod
    def now(self) -> datetime:
        """Return the current time as a timezone-aware UTC datetime."""
        ...

    @abstractmethod
    def monotonic(self) -> float:
        """Return a monotonic reading in seconds.

        Only differences are meaningful; used to time sweeps.
        """
        ...
