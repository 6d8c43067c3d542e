# orders/services/status_service.py
from typing import Any, Optional

from orders.broadcaster import Broadcaster
from orders.models import Order, StatusUpdated
from orders.stores.order_store import OrderStore
from utils.logger import logger


class StatusService:
    """Admin status changes: mutate the stored order, then broadcast the delta."""

    def __init__(self, store: OrderStore, broadcaster: Broadcaster):
        self.store = store
        self.broadcaster = broadcaster

    def update(self, order_id: str, status: Any, *,
               confirm_minutes: Optional[Any] = None,
               confirmed_at: Optional[str] = None) -> Order:
        # InvalidStatus is raised before the lookup, NotFound after it
        order = self.store.update_status(
            order_id, status,
            confirm_minutes=confirm_minutes,
            confirmed_at=confirmed_at,
        )
        self.broadcaster.push(StatusUpdated.from_order(order))
        logger.info(f"Order {order_id} -> {order.status.value}")
        return order
