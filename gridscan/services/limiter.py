"""Counting admission gate bounding simultaneous in-flight probes."""

import asyncio
from collections import deque


class ConcurrencyLimiter:
    """FIFO-fair counting semaphore for asyncio tasks.

    A released permit is handed directly to the oldest waiter, so a task
    arriving later can never overtake one that is already queued.
    """

    def __init__(self, limit: int = 64):
        self.limit = max(1, limit)
        self._available = self.limit
        self._waiters: deque[asyncio.Future[None]] = deque()
        self._peak = 0

    @property
    def available(self) -> int:
        """Permits that can be granted without waiting."""
        return self._available

    @property
    def in_use(self) -> int:
        """Permits currently held."""
        return self.limit - self._available

    @property
    def waiting(self) -> int:
        """Tasks queued for a permit."""
        return sum(1 for w in self._waiters if not w.done())

    @property
    def peak(self) -> int:
        """Highest number of permits held at once."""
        return self._peak

    def _record_grant(self) -> None:
        held = self.limit - self._available
        if held > self._peak:
            self._peak = held

    async def acquire(self) -> None:
        """Take a permit, suspending until one is free."""
        if self._available > 0 and not self.waiting:
            self._available -= 1
            self._record_grant()
            return

        waiter = asyncio.get_running_loop().create_future()
        self._waiters.append(waiter)
        try:
            await waiter
        except asyncio.CancelledError:
            if waiter.done() and not waiter.cancelled():
                # Permit was handed over just before cancellation
                self.release()
            raise
        finally:
            try:
                self._waiters.remove(waiter)
            except ValueError:
                pass

    def release(self) -> None:
        """Return a permit, waking the oldest waiter if there is one."""
        while self._waiters:
            waiter = self._waiters.popleft()
            if not waiter.done():
                # Permit moves straight to the waiter; count is unchanged
                waiter.set_result(None)
                return

        if self._available >= self.limit:
            raise ValueError("ConcurrencyLimiter released too many times")
        self._available += 1

    async def __aenter__(self) -> "ConcurrencyLimiter":
        await self.acquire()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self.release()
