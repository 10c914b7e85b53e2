"""
Tests for SSE manager service.
"""

import asyncio
import time

import pytest
from unittest.mock import AsyncMock

from control_api.services.sse_manager import MAX_CONNECTIONS_PER_CHANNEL, SSEManager


@pytest.mark.asyncio
async def test_add_and_remove_connection():
    """Test adding and removing an SSE connection."""
    manager = SSEManager()
    queue = asyncio.Queue()

    await manager.add_connection("operator", queue)
    assert await manager.connection_count("operator") == 1

    await manager.remove_connection("operator", queue)
    assert await manager.connection_count("operator") == 0


@pytest.mark.asyncio
async def test_max_connections_per_channel():
    """Test maximum connections limit."""
    manager = SSEManager()
    for _ in range(MAX_CONNECTIONS_PER_CHANNEL):
        await manager.add_connection("operator", asyncio.Queue())

    with pytest.raises(ValueError, match=f"Maximum {MAX_CONNECTIONS_PER_CHANNEL}"):
        await manager.add_connection("operator", asyncio.Queue())


@pytest.mark.asyncio
async def test_broadcast_event():
    """Every listener receives the formatted SSE message."""
    manager = SSEManager()
    first, second = asyncio.Queue(), asyncio.Queue()
    await manager.add_connection("operator", first)
    await manager.add_connection("operator", second)

    await manager.broadcast_event("operator", "log", {"message": "hello"})

    expected = 'event: log\ndata: {"message": "hello"}\n\n'
    assert first.get_nowait() == expected
    assert second.get_nowait() == expected


@pytest.mark.asyncio
async def test_broadcast_drops_when_queue_full():
    manager = SSEManager()
    queue = asyncio.Queue(maxsize=1)
    await manager.add_connection("operator", queue)

    await manager.broadcast_event("operator", "log", {"n": 1})
    await manager.broadcast_event("operator", "log", {"n": 2})

    assert queue.qsize() == 1


@pytest.mark.asyncio
async def test_broadcast_without_listeners():
    """Test broadcasting to a channel nobody listens on."""
    manager = SSEManager()
    await manager.broadcast_event("operator", "log", {"message": "nobody"})


@pytest.mark.asyncio
async def test_cleanup_stale_connections():
    manager = SSEManager()
    stale, fresh = asyncio.Queue(), asyncio.Queue()
    await manager.add_connection("operator", stale)
    await manager.add_connection("operator", fresh)
    manager._last_seen[stale] = time.time() - 120

    removed = await manager.cleanup_stale_connections(timeout_seconds=60)

    assert removed == 1
    assert await manager.connection_count("operator") == 1


@pytest.mark.asyncio
async def test_cleanup_loop_runs_until_cancelled():
    """The periodic sweep drops stale listeners and exits quietly on cancel."""
    manager = SSEManager()
    stale, fresh = asyncio.Queue(), asyncio.Queue()
    await manager.add_connection("operator", stale)
    await manager.add_connection("operator", fresh)
    manager._last_seen[stale] = time.time() - 120
    sleep = AsyncMock(side_effect=[None, asyncio.CancelledError()])

    await manager.cleanup_loop(interval_seconds=30, timeout_seconds=60, sleep=sleep)

    assert sleep.await_count == 2
    sleep.assert_awaited_with(30)
    assert await manager.connection_count("operator") == 1


@pytest.mark.asyncio
async def test_touch_keeps_listener_alive():
    manager = SSEManager()
    queue = asyncio.Queue()
    await manager.add_connection("operator", queue)
    manager._last_seen[queue] = time.time() - 120

    manager.touch(queue)

    assert await manager.cleanup_stale_connections(timeout_seconds=60) == 0
