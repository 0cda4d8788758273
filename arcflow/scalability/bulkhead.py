"""Bulkhead: bounded, ordered submission queue. Caps concurrent tasks and rejects overflow."""

import asyncio
from typing import Any, Awaitable, Callable, TypeVar

T = TypeVar("T")


class BulkheadFullError(RuntimeError):
    """Raised when the waiting queue is full."""


class BulkheadExecutor:
    """
    Runs submitted tasks FIFO through a single worker, at most max_concurrent at a time.
    With max_concurrent=1 submissions are strictly serialized, which is what a single
    signing identity needs to avoid nonce conflicts. Overflow raises BulkheadFullError.
    """

    def __init__(
        self,
        max_concurrent: int = 1,
        max_queued: int = 100,
    ) -> None:
        self._semaphore = asyncio.Semaphore(max_concurrent)
        self._max_concurrent = max_concurrent
        self._max_queued = max_queued
        self._queue: asyncio.Queue[tuple[asyncio.Future[Any], Callable[..., Awaitable[Any]], tuple[Any, ...], dict[str, Any]]] = asyncio.Queue(maxsize=max_queued)
        self._worker: asyncio.Task[None] | None = None

    def _ensure_worker(self) -> None:
        if self._worker is None or self._worker.done():
            self._worker = asyncio.create_task(self._run_worker())

    async def _run_worker(self) -> None:
        while True:
            future, task, args, kwargs = await self._queue.get()
            try:
                async with self._semaphore:
                    result = await task(*args, **kwargs)
                    if not future.done():
                        future.set_result(result)
            except Exception as e:
                if not future.done():
                    future.set_exception(e)
            finally:
                self._queue.task_done()

    async def submit(
        self,
        task: Callable[..., Awaitable[T]],
        *args: Any,
        **kwargs: Any,
    ) -> T:
        """
        Enqueue task and wait for its result. If the caller stops waiting, the task
        still runs to completion in order.
        """
        self._ensure_worker()
        loop = asyncio.get_running_loop()
        future = loop.create_future()
        try:
            self._queue.put_nowait((future, task, args, kwargs))
        except asyncio.QueueFull:
            raise BulkheadFullError("Bulkhead: queue full") from None
        return await asyncio.shield(future)
