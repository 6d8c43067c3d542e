# orders/broadcaster.py
import asyncio
import itertools
import threading
import time
from typing import Dict, List, Optional

from orders.models import Event, encode_frame
from utils.logger import logger

_ids = itertools.count(1)


class Subscriber:
    """
    One live stream connection: a bounded frame queue plus a closed flag.
    send() never blocks; a full queue counts as a failed delivery.
    """

    def __init__(self, sub_id: str, queue_max: int = 256) -> None:
        self.sub_id = sub_id
        self._q: asyncio.Queue = asyncio.Queue(maxsize=queue_max + 1)  # +1 keeps room for the close sentinel
        self._queue_max = queue_max
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def send(self, frame: str) -> bool:
        if self._closed or self._q.qsize() >= self._queue_max:
            return False
        try:
            self._q.put_nowait(frame)
        except asyncio.QueueFull:
            return False
        return True

    async def recv(self) -> Optional[str]:
        """Next frame, or None once the subscriber is closed."""
        if self._closed:
            return None
        frame = await self._q.get()
        if frame is None or self._closed:
            return None
        return frame

    def drain(self) -> List[str]:
        out = []
        while True:
            try:
                frame = self._q.get_nowait()
            except asyncio.QueueEmpty:
                return out
            if frame is not None:
                out.append(frame)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self.drain()
        self._q.put_nowait(None)


class Broadcaster:
    """
    Registry of stream subscribers.
    push() encodes once and delivers under the registry lock, so once
    unregister() returns no later push can reach that subscriber.
    """

    def __init__(self, queue_max: int = 256) -> None:
        self._subs: Dict[str, Subscriber] = {}
        self._lock = threading.Lock()
        self._queue_max = queue_max

    @property
    def count(self) -> int:
        with self._lock:
            return len(self._subs)

    def register(self, queue_max: Optional[int] = None) -> Subscriber:
        sub = Subscriber(f"{int(time.time() * 1000)}-{next(_ids)}", queue_max or self._queue_max)
        with self._lock:
            self._subs[sub.sub_id] = sub
        return sub

    def unregister(self, sub_id: str) -> bool:
        """Remove and close a subscriber; False if it was already gone."""
        with self._lock:
            sub = self._subs.pop(sub_id, None)
            if sub is None:
                return False
            sub.close()
        return True

    def push(self, event: Event) -> int:
        """Deliver one event to every subscriber (fire-and-forget). Returns delivered count."""
        frame = encode_frame(event)
        delivered = 0
        dead: List[str] = []
        with self._lock:
            for sub_id, sub in self._subs.items():
                if sub.send(frame):
                    delivered += 1
                else:
                    dead.append(sub_id)
            for sub_id in dead:
                self._subs.pop(sub_id).close()
        for sub_id in dead:
            logger.warning(f"Subscriber {sub_id} dropped: send failed (slow or closed)")
        return delivered

    def close_all(self) -> int:
        with self._lock:
            subs = list(self._subs.values())
            self._subs.clear()
            for sub in subs:
                sub.close()
        if subs:
            logger.info(f"Closed {len(subs)} stream subscriber(s)")
        return len(subs)
