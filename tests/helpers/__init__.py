"""Test helpers for governance core tests.

Helpers:
    FakeTimeAuthority: Controllable time authority for deterministic tests
    builders: make_proposal / make_vote / make_session / make_discussion

Usage:
    from tests.helpers import FakeTimeAuthority
"""

from tests.helpers.fake_time_authority import FakeTimeAuthority

__all__ = ["FakeTimeAuthority"]
