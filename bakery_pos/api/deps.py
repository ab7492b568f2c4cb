from fastapi import Header, HTTPException

from bakery_pos.clock import Clock, SystemClock
from bakery_pos.exceptions import (
    AlreadyCancelled,
    InsufficientStock,
    InvalidStatusTransition,
    OrderError,
    OrderNotFound,
    TransactionFailure,
)

_clock = SystemClock()


def get_clock() -> Clock:
    return _clock


def get_actor_id(x_actor_id: str | None = Header(default=None)) -> str:
    """Opaque id of the signed-in staff member, set by the auth layer in front of us."""
    if not x_actor_id:
        raise HTTPException(401, "Not authenticated")
    return x_actor_id


def http_error(exc: OrderError) -> HTTPException:
    if isinstance(exc, OrderNotFound):
        return HTTPException(404, str(exc))
    if isinstance(exc, InsufficientStock):
        return HTTPException(
            409,
            {
                "message": str(exc),
                "item_name": exc.item_name,
                "available": exc.available,
                "requested": exc.requested,
            },
        )
    if isinstance(exc, AlreadyCancelled):
        return HTTPException(409, {"message": str(exc), "order_id": exc.order_id})
    if isinstance(exc, InvalidStatusTransition):
        return HTTPException(409, str(exc))
    if isinstance(exc, TransactionFailure):
        return HTTPException(503, "Could not save. Please try again.")
    return HTTPException(400, str(exc))
