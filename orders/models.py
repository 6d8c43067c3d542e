# orders/models.py
import copy
import json
from dataclasses import dataclass, field
from typing import Optional, Dict, Any, Mapping, Union

from orders.enums import OrderStatus, EventType

# Fields the receiver manages itself; everything else in a payload is kept in Order.extra.
_KNOWN = ("order_id", "customer", "status", "received_at",
          "updated_at", "confirm_minutes", "confirmed_at")

HEARTBEAT_FRAME = ": heartbeat\n\n"


@dataclass
class Order:
    order_id: str
    customer: Dict[str, Any]
    received_at: str
    status: OrderStatus = OrderStatus.PENDING
    updated_at: Optional[str] = None
    confirm_minutes: Optional[Any] = None
    confirmed_at: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any], received_at: str) -> "Order":
        """Build a fresh pending order; incoming status/received_at are overwritten."""
        return cls(
            order_id=payload.get("order_id"),
            customer=copy.deepcopy(payload.get("customer")),
            received_at=received_at,
            status=OrderStatus.PENDING,
            updated_at=payload.get("updated_at"),
            confirm_minutes=payload.get("confirm_minutes"),
            confirmed_at=payload.get("confirmed_at"),
            extra={k: copy.deepcopy(v) for k, v in payload.items() if k not in _KNOWN},
        )

    @property
    def customer_name(self) -> str:
        if isinstance(self.customer, Mapping):
            return str(self.customer.get("name", "unknown"))
        return "unknown"

    def snapshot(self) -> "Order":
        return copy.deepcopy(self)

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {"order_id": self.order_id, "customer": copy.deepcopy(self.customer)}
        d.update(copy.deepcopy(self.extra))
        d["received_at"] = self.received_at
        d["status"] = self.status.value
        for k in ("updated_at", "confirm_minutes", "confirmed_at"):
            v = getattr(self, k)
            if v is not None:
                d[k] = v
        return d


@dataclass(frozen=True)
class OrderCreated:
    order: Order

    def to_dict(self) -> Dict[str, Any]:
        return {"__type": EventType.ORDER_CREATED.value, **self.order.to_dict()}


@dataclass(frozen=True)
class StatusUpdated:
    order_id: str
    status: OrderStatus
    updated_at: str
    confirm_minutes: Optional[Any] = None
    confirmed_at: Optional[str] = None

    @classmethod
    def from_order(cls, order: Order) -> "StatusUpdated":
        return cls(
            order_id=order.order_id,
            status=order.status,
            updated_at=order.updated_at,
            confirm_minutes=order.confirm_minutes,
            confirmed_at=order.confirmed_at,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "__type": EventType.STATUS_UPDATE.value,
            "order_id": self.order_id,
            "status": self.status.value,
            "confirm_minutes": self.confirm_minutes,
            "confirmed_at": self.confirmed_at,
            "updated_at": self.updated_at,
        }


Event = Union[OrderCreated, StatusUpdated]


def encode_frame(event: Event) -> str:
    """Serialize an event as one SSE data frame."""
    data = json.dumps(event.to_dict(), separators=(",", ":"), ensure_ascii=False, default=str)
    return f"data: {data}\n\n"
