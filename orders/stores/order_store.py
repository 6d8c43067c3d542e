# orders/stores/order_store.py
import threading
from typing import Optional, List, Any

from orders.enums import OrderStatus
from orders.errors import ValidationError, InvalidStatus, NotFound
from orders.models import Order
from utils.logger import logger
from utils.time import Clock, utc_iso


class OrderStore:
    """
    In-memory order list, newest first.

    Every public method takes the same lock and hands out deep copies, so a
    concurrent reader never sees a half-applied status change.
    Duplicate order_id values are kept as independent records; lookups hit
    the most recently received one.
    """

    def __init__(self, clock: Optional[Clock] = None) -> None:
        self._orders: List[Order] = []
        self._lock = threading.Lock()
        self._clock = clock or utc_iso

    def __len__(self) -> int:
        with self._lock:
            return len(self._orders)

    @property
    def count(self) -> int:
        return len(self)

    def insert(self, order: Order) -> Order:
        """Prepend an order as the most recent one."""
        if not order.order_id:
            raise ValidationError("order_id is required")
        if not order.customer:
            raise ValidationError("customer is required")

        stored = order.snapshot()
        with self._lock:
            dup = any(o.order_id == stored.order_id for o in self._orders)
            self._orders.insert(0, stored)
        if dup:
            logger.warning(f"Duplicate order_id {stored.order_id} stored as a new record")
        return stored.snapshot()

    def _find(self, order_id: str) -> Optional[Order]:
        # caller holds the lock
        for o in self._orders:
            if o.order_id == order_id:
                return o
        return None

    def find_by_id(self, order_id: str) -> Order:
        with self._lock:
            o = self._find(order_id)
            if o is None:
                raise NotFound(order_id)
            return o.snapshot()

    def update_status(self, order_id: str, status: Any, *,
                      confirm_minutes: Optional[Any] = None,
                      confirmed_at: Optional[str] = None) -> Order:
        """Set status (and optional confirmation fields), stamp updated_at."""
        try:
            new_status = OrderStatus(status)
        except ValueError:
            raise InvalidStatus(status, OrderStatus.values()) from None

        with self._lock:
            o = self._find(order_id)
            if o is None:
                raise NotFound(order_id)
            o.status = new_status
            o.updated_at = self._clock()
            if confirm_minutes is not None:
                o.confirm_minutes = confirm_minutes
            if confirmed_at is not None:
                o.confirmed_at = confirmed_at
            return o.snapshot()

    def list_all(self) -> List[Order]:
        with self._lock:
            return [o.snapshot() for o in self._orders]
