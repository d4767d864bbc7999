"""SSE Manager, in-process broadcaster for live occupancy updates."""

import asyncio
import json
import logging
from collections.abc import AsyncGenerator
from typing import Any

logger = logging.getLogger(__name__)

KEEPALIVE_MESSAGE = ": keepalive\n\n"


class SSEManager:
    """Manages SSE client connections and broadcasts events.

    Each connected client gets its own bounded asyncio.Queue. Broadcasting
    pushes the event to all queues; a client that falls too far behind is
    disconnected. Idle streams receive a comment line every
    ``keepalive_seconds`` so clients notice dead connections and reconnect.
    """

    def __init__(self, keepalive_seconds: float = 15.0, max_queue_size: int = 100) -> None:
        self._queues: list[asyncio.Queue[str | None]] = []
        self._keepalive_seconds = keepalive_seconds
        self._max_queue_size = max_queue_size

    async def subscribe(self) -> AsyncGenerator[str, None]:
        """Subscribe to SSE events. Yields formatted SSE strings.

        The generator unsubscribes when the client disconnects.
        """
        queue: asyncio.Queue[str | None] = asyncio.Queue(maxsize=self._max_queue_size)
        self._queues.append(queue)
        try:
            while True:
                try:
                    event = await asyncio.wait_for(queue.get(), timeout=self._keepalive_seconds)
                except asyncio.TimeoutError:
                    yield KEEPALIVE_MESSAGE
                    continue
                if event is None:
                    break
                yield event
        finally:
            if queue in self._queues:
                self._queues.remove(queue)

    async def broadcast(self, event_type: str, data: dict[str, Any]) -> None:
        """Broadcast an SSE event to all connected clients."""
        sse_message = f"event: {event_type}\ndata: {json.dumps(data, default=str)}\n\n"
        dead_queues: list[asyncio.Queue[str | None]] = []

        for queue in self._queues:
            try:
                queue.put_nowait(sse_message)
            except asyncio.QueueFull:
                dead_queues.append(queue)
                logger.warning("SSE client queue full, disconnecting")

        for q in dead_queues:
            self._queues.remove(q)
            # Make room for the sentinel so the subscriber loop can exit
            while not q.empty():
                q.get_nowait()
            q.put_nowait(None)

    async def shutdown(self) -> None:
        """Disconnect all connected clients."""
        for queue in self._queues:
            while queue.full():
                queue.get_nowait()
            queue.put_nowait(None)
        self._queues.clear()

    @property
    def client_count(self) -> int:
        return len(self._queues)
