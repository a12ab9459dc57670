"""Jittered scheduling of remote fetches."""
import asyncio
import logging
import random
from typing import Any, Awaitable, Callable, Optional

logger = logging.getLogger(__name__)


class FetchScheduler:
    """Run each fetch after an independent random delay.

    Spreads remote calls out when many listings show up at once (for
    example on the initial page load). No concurrency cap is applied.
    """

    def __init__(self, max_jitter: float = 2.0, rng: Optional[random.Random] = None):
        """
        Initialize the scheduler.

        Args:
            max_jitter: Upper bound (exclusive) of the delay in seconds
            rng: Random source, injectable for tests
        """
        self.max_jitter = max_jitter
        self.rng = rng or random.Random()
        self._tasks: set[asyncio.Task] = set()

    def next_delay(self) -> float:
        if self.max_jitter <= 0:
            return 0.0
        return self.rng.uniform(0, self.max_jitter)

    def schedule(self, job_id: str, work: Callable[[], Awaitable[Any]]) -> asyncio.Task:
        """Schedule ``work()`` to run after a jittered delay.

        Must be called from a running event loop.
        """
        delay = self.next_delay()
        task = asyncio.get_running_loop().create_task(
            self._run(job_id, delay, work), name=f"fetch-{job_id}"
        )
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    def track(self, task: asyncio.Task) -> asyncio.Task:
        """Track a task that is not delayed but should be drained with the rest."""
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _run(self, job_id: str, delay: float, work: Callable[[], Awaitable[Any]]) -> Any:
        if delay:
            logger.debug("Fetching job %s in %.2fs", job_id, delay)
            await asyncio.sleep(delay)
        return await work()

    @property
    def outstanding(self) -> int:
        return len(self._tasks)

    async def drain(self) -> None:
        """Wait until every scheduled task, including ones added meanwhile, has finished."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def cancel_all(self) -> None:
        for task in list(self._tasks):
            task.cancel()
