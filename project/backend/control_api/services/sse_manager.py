"""
SSE manager service.

Fans operator log events out to every connected SSE client.
"""

import asyncio
import json
import time
from typing import Any, Awaitable, Callable, Dict, List

from shared.logging import get_logger

logger = get_logger(__name__)

MAX_CONNECTIONS_PER_CHANNEL = 10
OPERATOR_CHANNEL = "operator"
CLEANUP_INTERVAL_SECONDS = 30


class SSEManager:
    """Per-channel registry of listener queues."""

    def __init__(self, max_connections: int = MAX_CONNECTIONS_PER_CHANNEL):
        self.max_connections = max_connections
        self._connections: Dict[str, List[asyncio.Queue]] = {}
        self._last_seen: Dict[asyncio.Queue, float] = {}
        self._lock = asyncio.Lock()

    async def add_connection(self, channel: str, queue: asyncio.Queue) -> None:
        """
        Register a listener.

        Raises:
            ValueError: If the channel is full
        """
        async with self._lock:
            listeners = self._connections.setdefault(channel, [])
            if len(listeners) >= self.max_connections:
                raise ValueError(f"Maximum {self.max_connections} connections per channel exceeded")
            listeners.append(queue)
            self._last_seen[queue] = time.time()
            logger.debug("SSE connection added", extra={"channel": channel, "total": len(listeners)})

    async def remove_connection(self, channel: str, queue: asyncio.Queue) -> None:
        async with self._lock:
            listeners = self._connections.get(channel, [])
            if queue in listeners:
                listeners.remove(queue)
                logger.debug("SSE connection removed", extra={"channel": channel})
            if not listeners:
                self._connections.pop(channel, None)
            self._last_seen.pop(queue, None)

    async def connection_count(self, channel: str) -> int:
        async with self._lock:
            return len(self._connections.get(channel, []))

    async def broadcast_event(self, channel: str, event_type: str, data: dict) -> None:
        """
        Send one SSE message to every listener on a channel.

        Events for a channel without listeners are dropped.
        """
        async with self._lock:
            listeners = list(self._connections.get(channel, []))
        if not listeners:
            return

        message = f"event: {event_type}\ndata: {json.dumps(data)}\n\n"
        for queue in listeners:
            try:
                queue.put_nowait(message)
            except asyncio.QueueFull:
                logger.warning("SSE listener queue full, dropping event", extra={"channel": channel})

    def touch(self, queue: asyncio.Queue) -> None:
        """Record a heartbeat for a listener."""
        if queue in self._last_seen:
            self._last_seen[queue] = time.time()

    async def cleanup_stale_connections(self, timeout_seconds: int = 60) -> int:
        """
        Drop listeners without a heartbeat for more than ``timeout_seconds``.

        Returns:
            Number of listeners removed
        """
        now = time.time()
        removed = 0
        async with self._lock:
            for channel, listeners in list(self._connections.items()):
                for queue in list(listeners):
                    if now - self._last_seen.get(queue, now) > timeout_seconds:
                        listeners.remove(queue)
                        self._last_seen.pop(queue, None)
                        removed += 1
                if not listeners:
                    del self._connections[channel]
        if removed:
            logger.info(f"Removed {removed} stale SSE connections")
        return removed

    async def cleanup_loop(
        self,
        interval_seconds: float = CLEANUP_INTERVAL_SECONDS,
        timeout_seconds: int = 60,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep
    ) -> None:
        """Periodically drop stale listeners until cancelled."""
        try:
            while True:
                await sleep(interval_seconds)
                await self.cleanup_stale_connections(timeout_seconds)
        except asyncio.CancelledError:
            pass


sse_manager = SSEManager()
