"""Per-proposal mutual exclusion within one process.

Vote submission and phase transition on the same proposal are serialized
through the same lock; different proposals proceed in parallel. Across
processes the repository's compare_and_swap provides the same guarantee,
so a lost race surfaces as ConcurrentTransitionError instead of a double
transition.
"""

from __future__ import annotations

import asyncio
import weakref
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager


class ProposalLockRegistry:
    """Hands out one asyncio.Lock per proposal id.

    Locks are held in a WeakValueDictionary and disappear once no
    coroutine holds or waits on them.
    """

    def __init__(self) -> None:
        self._locks: weakref.WeakValueDictionary[str, asyncio.Lock] = (
            weakref.WeakValueDictionary()
        )

    def lock_for(self, proposal_id: str) -> asyncio.Lock:
        lock = self._locks.get(proposal_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[proposal_id] = lock
        return lock

    @asynccontextmanager
    async def hold(self, proposal_id: str) -> AsyncIterator[None]:
        """Hold the lock for a proposal for the duration of the block."""
        lock = self.lock_for(proposal_id)
        async with lock:
            yield

    def is_locked(self, proposal_id: str) -> bool:
        lock = self._locks.get(proposal_id)
        return lock is not None and lock.locked()
