# orders/services/stream_service.py
import asyncio
import threading
from typing import AsyncIterator, Optional

from orders.broadcaster import Broadcaster, Subscriber
from orders.enums import StreamState
from orders.models import HEARTBEAT_FRAME
from utils.logger import logger


class StreamSession:
    """
    One dashboard connection: CONNECTING → STREAMING → CLOSED.

    open() registers with the broadcaster and starts the keepalive task,
    close() cancels it and unregisters, exactly once no matter how many
    close signals arrive (client disconnect, generator cancel, shutdown).
    """

    def __init__(self, broadcaster: Broadcaster, heartbeat_s: float = 30.0,
                 queue_max: Optional[int] = None):
        self.broadcaster = broadcaster
        self.heartbeat_s = heartbeat_s
        self.queue_max = queue_max
        self.state = StreamState.CONNECTING
        self.subscriber: Optional[Subscriber] = None
        self._hb_task: Optional[asyncio.Task] = None
        self._lock = threading.Lock()

    def open(self) -> Subscriber:
        with self._lock:
            if self.state is not StreamState.CONNECTING:
                raise RuntimeError(f"stream session already {self.state.value}")
            self.subscriber = self.broadcaster.register(self.queue_max)
            self._hb_task = asyncio.create_task(self._keepalive(self.subscriber))
            self.state = StreamState.STREAMING
        logger.info(f"Admin connected ({self.broadcaster.count} watching)")
        return self.subscriber

    async def _keepalive(self, sub: Subscriber) -> None:
        while not sub.closed:
            await asyncio.sleep(self.heartbeat_s)
            if not sub.send(HEARTBEAT_FRAME) and not sub.closed:
                logger.debug(f"Heartbeat skipped for {sub.sub_id}: queue full")

    def close(self) -> bool:
        """Stop keepalive and unregister. Returns False if already closed."""
        with self._lock:
            if self.state is StreamState.CLOSED:
                return False
            prev = self.state
            self.state = StreamState.CLOSED
            task, self._hb_task = self._hb_task, None
            if task is not None:
                task.cancel()
            if self.subscriber is not None:
                self.broadcaster.unregister(self.subscriber.sub_id)
        if prev is StreamState.STREAMING:
            logger.info(f"Admin disconnected ({self.broadcaster.count} watching)")
        return True

    async def frames(self) -> AsyncIterator[str]:
        """Yield SSE frames until the subscriber is closed; always closes on exit."""
        if self.state is StreamState.CONNECTING:
            self.open()
        try:
            while self.state is StreamState.STREAMING:
                frame = await self.subscriber.recv()
                if frame is None:
                    break
                yield frame
        finally:
            self.close()
