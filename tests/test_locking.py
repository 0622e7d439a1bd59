"""Tests for the asyncio read/write lock."""

import asyncio

import pytest

from entity_graph.locking import ReadWriteLock


@pytest.mark.asyncio
async def test_readers_share_the_lock() -> None:
    """Test several readers hold the lock at once."""
    lock = ReadWriteLock()
    inside = 0
    peak = 0

    async def reader() -> None:
        nonlocal inside, peak
        async with lock.read():
            inside += 1
            peak = max(peak, inside)
            await asyncio.sleep(0.01)
            inside -= 1

    await asyncio.gather(*(reader() for _ in range(5)))
    assert peak == 5


@pytest.mark.asyncio
async def test_writer_excludes_readers_and_writers() -> None:
    """Test nobody else is inside while a writer holds the lock."""
    lock = ReadWriteLock()
    events: list[str] = []

    async def writer(name: str) -> None:
        async with lock.write():
            events.append(f"{name}:enter")
            await asyncio.sleep(0.01)
            events.append(f"{name}:exit")

    async def reader() -> None:
        async with lock.read():
            events.append("reader")

    await asyncio.gather(writer("a"), reader(), writer("b"))

    # Each writer's enter is immediately followed by its own exit.
    for name in ("a", "b"):
        enter = events.index(f"{name}:enter")
        assert events[enter + 1] == f"{name}:exit"


@pytest.mark.asyncio
async def test_waiting_writer_blocks_new_readers() -> None:
    """Test readers arriving after a queued writer wait for it."""
    lock = ReadWriteLock()
    order: list[str] = []
    release = asyncio.Event()

    async def first_reader() -> None:
        async with lock.read():
            order.append("first_reader")
            await release.wait()

    async def writer() -> None:
        async with lock.write():
            order.append("writer")

    async def late_reader() -> None:
        async with lock.read():
            order.append("late_reader")

    tasks = [asyncio.create_task(first_reader())]
    await asyncio.sleep(0)
    tasks.append(asyncio.create_task(writer()))
    await asyncio.sleep(0)
    tasks.append(asyncio.create_task(late_reader()))
    await asyncio.sleep(0.01)
    release.set()
    await asyncio.gather(*tasks)

    assert order == ["first_reader", "writer", "late_reader"]


@pytest.mark.asyncio
async def test_cancelled_writer_releases_readers() -> None:
    """Test cancelling a queued writer lets blocked readers proceed."""
    lock = ReadWriteLock()
    release = asyncio.Event()

    async def holder() -> None:
        async with lock.read():
            await release.wait()

    async def writer() -> None:
        async with lock.write():
            pass

    async def reader() -> str:
        async with lock.read():
            return "read"

    holding = asyncio.create_task(holder())
    await asyncio.sleep(0)
    waiting_writer = asyncio.create_task(writer())
    await asyncio.sleep(0)
    blocked_reader = asyncio.create_task(reader())
    await asyncio.sleep(0)

    waiting_writer.cancel()
    with pytest.raises(asyncio.CancelledError):
        await waiting_writer

    assert await asyncio.wait_for(blocked_reader, timeout=1) == "read"
    release.set()
    await holding
