"""
In-flight traversal coordination.
"""

import asyncio
from functools import partial
from typing import Awaitable, Callable, Dict, Generic, Optional, TypeVar

from shared.logging import get_logger
from shared.metrics import MetricsCollector

T = TypeVar("T")


class InFlightCoordinator(Generic[T]):
    """Runs at most one piece of work per key at a time.

    Callers arriving while work for their key is pending await the same task
    and receive the same result or the same exception. The registration is
    removed as soon as the work finishes, before any waiter resumes, so the
    next call for the key always starts fresh.

    Waiters are shielded from the task: a cancelled caller stops waiting but
    the work runs to completion for everyone else.
    """

    def __init__(self, metrics: Optional[MetricsCollector] = None):
        self._tasks: Dict[str, "asyncio.Task[T]"] = {}
        self.metrics = metrics
        self.logger = get_logger("gamepass.inflight")

    async def run_exclusive(self, key: str, work: Callable[[str], Awaitable[T]]) -> T:
        task = self._tasks.get(key)
        if task is None:
            task = asyncio.ensure_future(self._run(key, work))
            task.add_done_callback(partial(self._on_done, key))
            self._tasks[key] = task
        else:
            self.logger.debug("Joining in-flight traversal", key=key)
            if self.metrics is not None:
                self.metrics.increment_counter("inflight_joins_total")

        return await asyncio.shield(task)

    async def _run(self, key: str, work: Callable[[str], Awaitable[T]]) -> T:
        try:
            return await work(key)
        finally:
            self._tasks.pop(key, None)

    def _on_done(self, key: str, task: "asyncio.Task[T]") -> None:
        # Covers tasks cancelled before they started running
        if self._tasks.get(key) is task:
            del self._tasks[key]
        # Retrieved here so it is not reported when every waiter was cancelled
        if not task.cancelled():
            task.exception()

    def in_flight(self, key: str) -> bool:
        return key in self._tasks

    def __len__(self) -> int:
        return len(self._tasks)
