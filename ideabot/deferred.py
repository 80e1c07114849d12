"""Fire-and-forget delayed tasks."""

import asyncio
import logging
from typing import Awaitable, Callable

logger = logging.getLogger(__name__)


class DeferredTasks:
    """Schedules coroutines to run after a delay without awaiting them.

    Delivery is at-most-once and best-effort: once scheduled a task cannot be
    cancelled individually, and anything still pending at shutdown is dropped.
    """

    def __init__(self) -> None:
        self._tasks: set[asyncio.Task] = set()

    def schedule(
        self,
        delay: float,
        factory: Callable[[], Awaitable[None]],
        name: str = "deferred",
    ) -> asyncio.Task:
        """Run ``factory()`` after ``delay`` seconds on the running loop."""

        async def runner() -> None:
            await asyncio.sleep(delay)
            await factory()

        task = asyncio.get_running_loop().create_task(runner(), name=name)
        self._tasks.add(task)
        task.add_done_callback(self._on_done)
        return task

    def _on_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Deferred task %s failed: %s", task.get_name(), exc, exc_info=exc)

    @property
    def pending(self) -> int:
        return len(self._tasks)

    async def drain(self) -> None:
        """Wait until every task, including ones scheduled meanwhile, is done."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def shutdown(self) -> None:
        """Cancel pending tasks."""
        if self._tasks:
            logger.info("Dropping %d pending deferred task(s)", len(self._tasks))
        for task in list(self._tasks):
            task.cancel()
        await asyncio.gather(*list(self._tasks), return_exceptions=True)
        self._tasks.clear()
