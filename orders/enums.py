# orders/enums.py
from enum import Enum


class OrderStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    REJECTED = "rejected"

    @classmethod
    def values(cls) -> list[str]:
        return [s.value for s in cls]


class EventType(str, Enum):
    ORDER_CREATED = "order_created"
    STATUS_UPDATE = "status_update"


class StreamState(Enum):
    CONNECTING = "connecting"
    STREAMING = "streaming"
    CLOSED = "closed"
