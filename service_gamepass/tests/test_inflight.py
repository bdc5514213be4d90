"""
Unit tests for the in-flight coordinator.
"""

import asyncio

import pytest

import sys
import os
sys.path.append(os.path.join(os.path.dirname(__file__), '..', '..'))

from service_gamepass.app.coordination.inflight import InFlightCoordinator
from shared.metrics import MetricsCollector


class GatedWork:
    """Work that blocks until released and counts its invocations."""

    def __init__(self, result=None, error=None):
        self.calls = []
        self.release = asyncio.Event()
        self.result = result
        self.error = error

    async def __call__(self, key):
        self.calls.append(key)
        await self.release.wait()
        if self.error is not None:
            raise self.error
        return self.result


class TestInFlightCoordinator:
    """Test cases for InFlightCoordinator."""

    @pytest.mark.asyncio
    async def test_concurrent_callers_share_one_invocation(self):
        """Test work runs once and every caller gets the same result."""
        metrics = MetricsCollector("gamepass")
        coordinator = InFlightCoordinator(metrics=metrics)
        work = GatedWork(result=["a", "b"])

        first = asyncio.ensure_future(coordinator.run_exclusive("123", work))
        second = asyncio.ensure_future(coordinator.run_exclusive("123", work))
        await asyncio.sleep(0)
        assert coordinator.in_flight("123")

        work.release.set()
        results = await asyncio.gather(first, second)

        assert work.calls == ["123"]
        assert results[0] is results[1]
        assert metrics.sample("inflight_joins_total") == 1.0

    @pytest.mark.asyncio
    async def test_registration_cleared_after_success(self):
        """Test the next call starts fresh work."""
        coordinator = InFlightCoordinator()
        work = GatedWork(result=[])
        work.release.set()

        await coordinator.run_exclusive("123", work)
        await coordinator.run_exclusive("123", work)

        assert work.calls == ["123", "123"]
        assert len(coordinator) == 0

    @pytest.mark.asyncio
    async def test_failure_propagates_to_all_and_clears(self):
        """Test every waiter sees the same exception and the key is released."""
        coordinator = InFlightCoordinator()
        error = RuntimeError("upstream down")
        work = GatedWork(error=error)

        first = asyncio.ensure_future(coordinator.run_exclusive("123", work))
        second = asyncio.ensure_future(coordinator.run_exclusive("123", work))
        await asyncio.sleep(0)
        work.release.set()
        outcomes = await asyncio.gather(first, second, return_exceptions=True)

        assert outcomes[0] is error
        assert outcomes[1] is error
        assert not coordinator.in_flight("123")

        retry = GatedWork(result=["ok"])
        retry.release.set()
        assert await coordinator.run_exclusive("123", retry) == ["ok"]

    @pytest.mark.asyncio
    async def test_different_keys_run_independently(self):
        """Test keys do not block each other."""
        coordinator = InFlightCoordinator()
        slow = GatedWork(result="slow")
        fast = GatedWork(result="fast")
        fast.release.set()

        slow_task = asyncio.ensure_future(coordinator.run_exclusive("a", slow))
        assert await coordinator.run_exclusive("b", fast) == "fast"
        assert coordinator.in_flight("a")

        slow.release.set()
        assert await slow_task == "slow"

    @pytest.mark.asyncio
    async def test_cancelled_waiter_does_not_cancel_work(self):
        """Test a disconnecting caller leaves the traversal running."""
        coordinator = InFlightCoordinator()
        work = GatedWork(result="done")

        first = asyncio.ensure_future(coordinator.run_exclusive("123", work))
        second = asyncio.ensure_future(coordinator.run_exclusive("123", work))
        await asyncio.sleep(0)

        first.cancel()
        with pytest.raises(asyncio.CancelledError):
            await first

        work.release.set()
        assert await second == "done"
        assert work.calls == ["123"]
