"""Outcomes of the order core.

User-correctable errors subclass ``ValueError``: they are normal results of
selling (an item ran out, a cart was stale) and carry enough detail to render
a specific message. ``TransactionFailure`` wraps anything the database raised.
"""


class OrderError(Exception):
    pass


class ItemUnavailable(OrderError, ValueError):
    def __init__(self, item_name: str, reason: str = "is out of stock"):
        self.item_name = item_name
        self.reason = reason
        super().__init__(f"{item_name} {reason}")


class InsufficientStock(OrderError, ValueError):
    def __init__(self, item_name: str, available: int, requested: int):
        self.item_name = item_name
        self.available = available
        self.requested = requested
        super().__init__(
            f"Insufficient stock for {item_name}. Available: {available}, Requested: {requested}"
        )


class InvalidQuantity(OrderError, ValueError):
    pass


class InvalidDeliveryCost(OrderError, ValueError):
    pass


class OrderNotFound(OrderError, ValueError):
    def __init__(self, order_id: int):
        self.order_id = order_id
        super().__init__(f"Order {order_id} not found")


class AlreadyCancelled(OrderError, ValueError):
    def __init__(self, order_id: int):
        self.order_id = order_id
        super().__init__(f"Order {order_id} is already cancelled")


class InvalidStatusTransition(OrderError, ValueError):
    pass


class TransactionFailure(OrderError):
    """Lock timeout, lost connection, constraint violation. Safe to re-submit."""

    def __init__(self, message: str = "Could not complete the transaction. Please try again."):
        super().__init__(message)
