"""Single-worker sequential execution queue.

Work submitted here runs one item at a time, in submission order, on a
single background worker task. A submission made while another is running
waits behind it instead of being rejected.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from .exceptions import RuntimeUnavailableError

logger = logging.getLogger(__name__)

T = TypeVar("T")

_WorkItem = tuple[Callable[[], Awaitable[Any]], "asyncio.Future[Any]"]

DEFAULT_CLOSE_TIMEOUT = 30.0


class SequentialExecutionQueue:
    """Bounded asyncio queue drained by exactly one worker."""

    def __init__(self, name: str = "sequential", maxsize: int = 16):
        """Initialize the queue.

        Args:
            name: Name used in log messages.
            maxsize: Maximum number of waiting items. Submitters wait for room
                once the queue is full. 0 means unbounded.
        """
        if maxsize < 0:
            raise ValueError("maxsize must be non-negative")
        self.name = name
        self.maxsize = maxsize
        self._queue: asyncio.Queue[_WorkItem] | None = None
        self._worker: asyncio.Task[None] | None = None
        self._closed = False
        self._in_flight = False

    @property
    def pending(self) -> int:
        """Number of items waiting to run (excluding the one in flight)."""
        return self._queue.qsize() if self._queue is not None else 0

    @property
    def running(self) -> bool:
        return self._worker is not None and not self._worker.done()

    @property
    def busy(self) -> bool:
        """Whether an item is currently executing."""
        return self._in_flight

    def _ensure_worker(self) -> asyncio.Queue[_WorkItem]:
        if self._queue is None:
            self._queue = asyncio.Queue(maxsize=self.maxsize)
        if self._worker is None or self._worker.done():
            self._worker = asyncio.create_task(self._run(self._queue))
            logger.debug(f"Started worker for queue {self.name}")
        return self._queue

    async def submit(self, fn: Callable[[], Awaitable[T]]) -> T:
        """Run a coroutine function on the worker and return its result.

        Args:
            fn: Zero-argument coroutine function to execute.

        Returns:
            Whatever the coroutine returns.

        Raises:
            RuntimeUnavailableError: If the queue has been closed.
            Exception: Whatever the coroutine raises.
        """
        if self._closed:
            raise RuntimeUnavailableError(f"Queue {self.name} is closed")

        queue = self._ensure_worker()
        future: asyncio.Future[T] = asyncio.get_running_loop().create_future()
        await queue.put((fn, future))
        # the worker has not picked this item up yet, so it is in qsize()
        if self._in_flight or queue.qsize() > 1:
            logger.debug(
                f"Queued work behind running item on {self.name}",
                extra={"pending": queue.qsize()},
            )
        return await future

    def _fail(self, future: "asyncio.Future[Any]") -> None:
        if not future.done():
            future.set_exception(
                RuntimeUnavailableError(f"Queue {self.name} was closed")
            )

    async def _run(self, queue: asyncio.Queue[_WorkItem]) -> None:
        while True:
            fn, future = await queue.get()
            try:
                if future.cancelled():
                    continue
                if self._closed:
                    self._fail(future)
                    continue
                self._in_flight = True
                try:
                    result = await fn()
                except asyncio.CancelledError:
                    future.cancel()
                    raise
                except Exception as e:
                    if not future.cancelled():
                        future.set_exception(e)
                else:
                    if not future.cancelled():
                        future.set_result(result)
            finally:
                self._in_flight = False
                queue.task_done()

    def _drain(self) -> None:
        if self._queue is None:
            return
        while not self._queue.empty():
            _, future = self._queue.get_nowait()
            self._fail(future)
            self._queue.task_done()

    async def join(self) -> None:
        """Wait until every submitted item has run."""
        if self._queue is not None:
            await self._queue.join()

    async def close(self, timeout: float | None = DEFAULT_CLOSE_TIMEOUT) -> None:
        """Stop accepting work and shut the worker down.

        Items that have not started fail with RuntimeUnavailableError. The
        item in flight is allowed to finish; it is cancelled only if it is
        still running after timeout seconds.

        Args:
            timeout: Seconds to wait for the item in flight. None waits
                indefinitely.
        """
        self._closed = True
        self._drain()

        if self._queue is not None and self.running:
            try:
                await asyncio.wait_for(self._queue.join(), timeout)
            except asyncio.TimeoutError:
                logger.warning(
                    f"Queue {self.name} item still running after {timeout}s, cancelling it"
                )

        if self._worker is not None:
            self._worker.cancel()
            try:
                await self._worker
            except asyncio.CancelledError:
                pass
            self._worker = None

        self._drain()
        logger.debug(f"Queue {self.name} closed")
