"""Tests for the concurrency limiter."""

import asyncio

import pytest

from gridscan.services.limiter import ConcurrencyLimiter


class TestConcurrencyLimiter:
    """Tests for ConcurrencyLimiter."""

    def test_limit_floor(self):
        """Test that a non-positive limit is raised to one."""
        assert ConcurrencyLimiter(0).limit == 1
        assert ConcurrencyLimiter(-5).limit == 1

    @pytest.mark.asyncio
    async def test_acquire_without_waiting(self):
        """Test that permits are granted immediately while available."""
        limiter = ConcurrencyLimiter(2)

        await limiter.acquire()
        await limiter.acquire()

        assert limiter.available == 0
        assert limiter.in_use == 2
        assert limiter.waiting == 0

    @pytest.mark.asyncio
    async def test_waiter_resumes_on_release(self):
        """Test that a blocked acquire completes once a permit is released."""
        limiter = ConcurrencyLimiter(1)
        await limiter.acquire()

        task = asyncio.create_task(limiter.acquire())
        await asyncio.sleep(0)
        assert not task.done()
        assert limiter.waiting == 1

        limiter.release()
        await task

        assert limiter.in_use == 1
        assert limiter.waiting == 0

    @pytest.mark.asyncio
    async def test_fifo_order(self):
        """Test that waiters are served in arrival order."""
        limiter = ConcurrencyLimiter(1)
        await limiter.acquire()
        order = []

        async def worker(n):
            await limiter.acquire()
            order.append(n)
            limiter.release()

        tasks = [asyncio.create_task(worker(n)) for n in range(5)]
        await asyncio.sleep(0)
        limiter.release()
        await asyncio.gather(*tasks)

        assert order == [0, 1, 2, 3, 4]
        assert limiter.available == 1

    @pytest.mark.asyncio
    async def test_never_exceeds_limit(self):
        """Test that concurrent holders never exceed the limit."""
        limiter = ConcurrencyLimiter(4)
        active = 0
        max_active = 0

        async def worker():
            nonlocal active, max_active
            async with limiter:
                active += 1
                max_active = max(max_active, active)
                await asyncio.sleep(0.001)
                active -= 1

        await asyncio.gather(*(worker() for _ in range(50)))

        assert max_active == 4
        assert limiter.peak == 4
        assert limiter.available == 4

    @pytest.mark.asyncio
    async def test_cancelled_waiter_does_not_leak(self):
        """Test that cancelling a queued acquire leaves the count intact."""
        limiter = ConcurrencyLimiter(1)
        await limiter.acquire()

        task = asyncio.create_task(limiter.acquire())
        await asyncio.sleep(0)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        limiter.release()
        assert limiter.available == 1
        assert limiter.waiting == 0

    @pytest.mark.asyncio
    async def test_cancelled_after_handoff_returns_permit(self):
        """Test that a permit handed to a task cancelled before resuming is returned."""
        limiter = ConcurrencyLimiter(1)
        await limiter.acquire()

        task = asyncio.create_task(limiter.acquire())
        await asyncio.sleep(0)
        limiter.release()
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        assert limiter.available == 1

    def test_release_beyond_limit(self):
        """Test that releasing an unheld permit is rejected."""
        limiter = ConcurrencyLimiter(2)
        with pytest.raises(ValueError):
            limiter.release()
