# orders/services/ingestion_service.py
from collections.abc import Mapping
from typing import Any, Dict, Optional

from orders.broadcaster import Broadcaster
from orders.errors import InvalidPayload
from orders.models import Order, OrderCreated
from orders.stores.order_store import OrderStore
from utils.logger import logger
from utils.time import Clock, utc_iso


class IngestionService:
    """
    Webhook side: validate → stamp → store → broadcast → ack.
    The broadcast only enqueues frames, so the ack never waits on a dashboard.
    """

    def __init__(self, store: OrderStore, broadcaster: Broadcaster, clock: Optional[Clock] = None):
        self.store = store
        self.broadcaster = broadcaster
        self.clock = clock or utc_iso

    @staticmethod
    def validate(payload: Any) -> None:
        if not isinstance(payload, Mapping):
            raise InvalidPayload(reason="body is not a JSON object")
        order_id = payload.get("order_id")
        if not isinstance(order_id, str) or not order_id.strip():
            raise InvalidPayload(missing="order_id")
        customer = payload.get("customer")
        if not isinstance(customer, Mapping) or not customer:
            raise InvalidPayload(missing="customer")

    def ingest(self, payload: Any) -> Dict[str, Any]:
        self.validate(payload)

        order = self.store.insert(Order.from_payload(payload, received_at=self.clock()))
        logger.info(f"New order received: {order.order_id} from {order.customer_name}")

        self.broadcaster.push(OrderCreated(order))
        return {"received": True, "order_id": order.order_id}
