"""Unit tests for SequentialExecutionQueue."""

import asyncio
import logging

import pytest

from hookkeeper.core.exceptions import RuntimeUnavailableError
from hookkeeper.core.queue import SequentialExecutionQueue


@pytest.mark.asyncio
async def test_submit_returns_result() -> None:
    queue = SequentialExecutionQueue()

    async def work() -> int:
        return 42

    assert await queue.submit(work) == 42
    await queue.close()


@pytest.mark.asyncio
async def test_submit_propagates_exception() -> None:
    queue = SequentialExecutionQueue()

    async def work() -> None:
        raise ValueError("boom")

    with pytest.raises(ValueError, match="boom"):
        await queue.submit(work)

    # the worker survives a failing item
    async def ok() -> str:
        return "still running"

    assert await queue.submit(ok) == "still running"
    await queue.close()


@pytest.mark.asyncio
async def test_concurrent_submissions_run_one_at_a_time() -> None:
    """Items submitted together never overlap and keep submission order."""
    queue = SequentialExecutionQueue()
    events: list[str] = []

    def make_work(name: str):
        async def work() -> str:
            events.append(f"start-{name}")
            await asyncio.sleep(0.02)
            events.append(f"end-{name}")
            return name

        return work

    results = await asyncio.gather(
        queue.submit(make_work("a")),
        queue.submit(make_work("b")),
        queue.submit(make_work("c")),
    )

    assert results == ["a", "b", "c"]
    assert events == [
        "start-a", "end-a",
        "start-b", "end-b",
        "start-c", "end-c",
    ]
    await queue.close()


@pytest.mark.asyncio
async def test_second_submission_waits_instead_of_failing() -> None:
    """A submission made while one is running is queued behind it."""
    queue = SequentialExecutionQueue(maxsize=1)
    release = asyncio.Event()

    async def slow() -> str:
        await release.wait()
        return "slow"

    async def fast() -> str:
        return "fast"

    first = asyncio.create_task(queue.submit(slow))
    await asyncio.sleep(0.01)
    second = asyncio.create_task(queue.submit(fast))
    await asyncio.sleep(0.01)

    assert not second.done()
    assert queue.running

    release.set()
    assert await first == "slow"
    assert await second == "fast"
    await queue.close()


@pytest.mark.asyncio
async def test_closed_queue_rejects_submissions() -> None:
    queue = SequentialExecutionQueue()
    await queue.close()

    async def work() -> None:
        return None

    with pytest.raises(RuntimeUnavailableError):
        await queue.submit(work)


@pytest.mark.asyncio
async def test_join_waits_for_pending_items() -> None:
    queue = SequentialExecutionQueue()
    done: list[int] = []

    async def work() -> None:
        await asyncio.sleep(0.01)
        done.append(1)

    task = asyncio.create_task(queue.submit(work))
    await asyncio.sleep(0)
    await queue.join()

    assert done == [1]
    await task
    await queue.close()


def test_negative_maxsize_rejected() -> None:
    with pytest.raises(ValueError):
        SequentialExecutionQueue(maxsize=-1)


@pytest.mark.asyncio
async def test_close_lets_running_item_finish() -> None:
    """Shutdown waits for the item in flight and fails the ones behind it."""
    queue = SequentialExecutionQueue()
    release = asyncio.Event()
    events: list[str] = []

    async def running() -> str:
        events.append("start")
        await release.wait()
        events.append("end")
        return "finished"

    async def waiting() -> str:
        events.append("waiting ran")
        return "waiting"

    first = asyncio.create_task(queue.submit(running))
    await asyncio.sleep(0.01)
    second = asyncio.create_task(queue.submit(waiting))
    await asyncio.sleep(0.01)
    assert queue.busy

    closing = asyncio.create_task(queue.close())
    await asyncio.sleep(0.01)
    assert not closing.done()

    release.set()
    await closing

    assert await first == "finished"
    with pytest.raises(RuntimeUnavailableError):
        await second
    assert events == ["start", "end"]
    assert not queue.running


@pytest.mark.asyncio
async def test_close_cancels_item_still_running_after_timeout() -> None:
    queue = SequentialExecutionQueue()

    async def stuck() -> None:
        await asyncio.Event().wait()

    task = asyncio.create_task(queue.submit(stuck))
    await asyncio.sleep(0.01)

    await queue.close(timeout=0.01)

    with pytest.raises(asyncio.CancelledError):
        await task
    assert not queue.running


@pytest.mark.asyncio
async def test_queued_debug_line_only_when_item_in_flight(
    caplog: pytest.LogCaptureFixture,
) -> None:
    queue = SequentialExecutionQueue(name="logging")
    release = asyncio.Event()

    async def slow() -> None:
        await release.wait()

    async def fast() -> None:
        return None

    with caplog.at_level(logging.DEBUG, logger="hookkeeper.core.queue"):
        await queue.submit(fast)
        assert "Queued work behind running item" not in caplog.text

        first = asyncio.create_task(queue.submit(slow))
        await asyncio.sleep(0.01)
        assert "Queued work behind running item" not in caplog.text

        second = asyncio.create_task(queue.submit(fast))
        await asyncio.sleep(0.01)
        assert "Queued work behind running item on logging" in caplog.text

        release.set()
        await first
        await second
    await queue.close()
