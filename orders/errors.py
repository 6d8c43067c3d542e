# orders/errors.py
class OrderError(Exception):
    """Base receiver error, rendered to clients as {"error": msg}."""
    status_code: int = 500

    def __init__(self, msg: str = ""):
        super().__init__(msg)
        self.msg = msg

    def __str__(self):
        return self.msg or self.__class__.__name__


class ValidationError(OrderError):
    """Order record is missing a required field."""
    status_code = 400


class InvalidPayload(ValidationError):
    """Webhook body is not an order (missing order_id or customer)."""

    def __init__(self, msg: str = "Invalid order payload", **ctx):
        super().__init__(msg)
        self.ctx = ctx

    def __str__(self):
        base = super().__str__()
        if self.ctx:
            details = ", ".join(f"{k}={v}" for k, v in self.ctx.items())
            return f"{base} [{details}]"
        return base


class InvalidStatus(ValidationError):
    """Requested status is not one of the known order statuses."""

    def __init__(self, status, allowed):
        super().__init__(f"status must be one of: {', '.join(allowed)}")
        self.status = status
        self.allowed = list(allowed)


class NotFound(OrderError):
    """No order with the given id."""
    status_code = 404

    def __init__(self, order_id: str):
        super().__init__("Order not found")
        self.order_id = order_id
