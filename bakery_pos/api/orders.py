from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.orm import Session

from bakery_pos.api.deps import get_actor_id, get_clock, http_error
from bakery_pos.clock import Clock
from bakery_pos.database import get_db
from bakery_pos.exceptions import OrderError
from bakery_pos.schemas.order import OrderCancel, OrderCreate, OrderOut
from bakery_pos.services import order_service

router = APIRouter(prefix="/orders", tags=["Orders"])


@router.post("", response_model=OrderOut, status_code=201)
def create_order(
    data: OrderCreate,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    actor_id: str = Depends(get_actor_id),
):
    try:
        return order_service.commit_order(db, data.customer_name, data.lines, data.delivery_cost, actor_id, clock)
    except OrderError as e:
        raise http_error(e)


@router.get("", response_model=list[OrderOut])
def list_orders(db: Session = Depends(get_db), clock: Clock = Depends(get_clock)):
    return order_service.list_orders(db, clock.today())


@router.get("/{order_id}", response_model=OrderOut)
def get_order(order_id: int, db: Session = Depends(get_db)):
    order = order_service.get_order(db, order_id)
    if not order:
        raise HTTPException(404, "Order not found")
    return order


@router.post("/{order_id}/cancel", response_model=OrderOut)
def cancel_order(
    order_id: int,
    data: OrderCancel,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    actor_id: str = Depends(get_actor_id),
):
    try:
        return order_service.cancel_order(db, order_id, data.reason, actor_id, clock)
    except OrderError as e:
        raise http_error(e)


@router.post("/{order_id}/complete", response_model=OrderOut)
def complete_order(order_id: int, db: Session = Depends(get_db), actor_id: str = Depends(get_actor_id)):
    try:
        return order_service.complete_order(db, order_id)
    except OrderError as e:
        raise http_error(e)


@router.delete("/{order_id}", status_code=204)
def delete_order(order_id: int, db: Session = Depends(get_db), actor_id: str = Depends(get_actor_id)):
    try:
        order_service.delete_order(db, order_id)
    except OrderError as e:
        raise http_error(e)
    return Response(status_code=204)
