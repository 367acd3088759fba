from __future__ import annotations

import asyncio
import time
from typing import Awaitable, Callable, Optional, Sequence, TypeVar

T = TypeVar("T")
R = TypeVar("R")

Sleeper = Callable[[float], Awaitable[None]]
StopCheck = Callable[[], bool]


class ThrottledQueue:
    """Runs tasks with a fixed delay between successive starts.

    With ``concurrency=1`` (the default) tasks run strictly one after another
    and each task after the first waits ``delay_s`` after the previous one
    finished. With a higher degree, up to ``concurrency`` tasks are in flight
    and task starts are spaced at least ``delay_s`` apart.

    ``stop`` is checked before each task starts; once it returns true the
    remaining items are skipped and only results of tasks that ran are
    returned, in item order.
    """

    def __init__(
        self,
        delay_s: float,
        *,
        concurrency: int = 1,
        sleep: Sleeper = asyncio.sleep,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.delay_s = max(float(delay_s), 0.0)
        self.concurrency = max(int(concurrency), 1)
        self._sleep = sleep
        self._clock = clock

    async def map(
        self,
        items: Sequence[T],
        worker: Callable[[T], Awaitable[R]],
        *,
        stop: Optional[StopCheck] = None,
    ) -> list[R]:
        if self.concurrency == 1:
            return await self._map_sequential(items, worker, stop)
        return await self._map_spaced(items, worker, stop)

    async def _map_sequential(
        self, items: Sequence[T], worker: Callable[[T], Awaitable[R]], stop: Optional[StopCheck]
    ) -> list[R]:
        results: list[R] = []
        for index, item in enumerate(items):
            if stop is not None and stop():
                break
            if index > 0 and self.delay_s > 0:
                await self._sleep(self.delay_s)
            results.append(await worker(item))
        return results

    async def _map_spaced(
        self, items: Sequence[T], worker: Callable[[T], Awaitable[R]], stop: Optional[StopCheck]
    ) -> list[R]:
        semaphore = asyncio.Semaphore(self.concurrency)
        start_lock = asyncio.Lock()
        last_start: float | None = None
        skipped = object()

        async def run_one(item: T):
            nonlocal last_start
            async with semaphore:
                async with start_lock:
                    if stop is not None and stop():
                        return skipped
                    if last_start is not None and self.delay_s > 0:
                        remaining = last_start + self.delay_s - self._clock()
                        if remaining > 0:
                            await self._sleep(remaining)
                    last_start = self._clock()
                return await worker(item)

        outcomes = await asyncio.gather(*(run_one(item) for item in items))
        return [outcome for outcome in outcomes if outcome is not skipped]
