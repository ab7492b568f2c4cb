from datetime import date

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from bakery_pos.api.deps import get_actor_id, get_clock, http_error
from bakery_pos.clock import Clock
from bakery_pos.database import get_db
from bakery_pos.exceptions import OrderError
from bakery_pos.schemas.inventory import AuditLogOut, InventoryRowOut, StockAdjust, StockSetRequest
from bakery_pos.services import audit_trail, inventory_service

router = APIRouter(prefix="/inventory", tags=["Inventory"])


def _rows(quantities: dict[int, int]) -> list[InventoryRowOut]:
    return [InventoryRowOut(dessert_id=dessert_id, quantity=qty) for dessert_id, qty in quantities.items()]


@router.get("", response_model=list[InventoryRowOut])
def get_today_inventory(db: Session = Depends(get_db), clock: Clock = Depends(get_clock)):
    return _rows(inventory_service.get_today_inventory(db, clock))


@router.put("", response_model=list[InventoryRowOut])
def set_today_inventory(
    data: StockSetRequest,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    actor_id: str = Depends(get_actor_id),
):
    try:
        inventory_service.set_today_stock(db, data.updates, actor_id, clock)
    except OrderError as e:
        raise http_error(e)
    return _rows(inventory_service.get_today_inventory(db, clock))


@router.post("/{dessert_id}/adjust", response_model=InventoryRowOut)
def adjust_inventory(
    dessert_id: int,
    data: StockAdjust,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    actor_id: str = Depends(get_actor_id),
):
    try:
        change = inventory_service.adjust_stock(db, dessert_id, data.quantity, actor_id, clock, data.note)
    except OrderError as e:
        raise http_error(e)
    return InventoryRowOut(dessert_id=dessert_id, quantity=change.new_quantity)


@router.get("/audit-log", response_model=list[AuditLogOut])
def get_audit_log(
    day: date | None = None,
    dessert_id: int | None = None,
    order_id: int | None = None,
    limit: int = Query(100, ge=1, le=500),
    db: Session = Depends(get_db),
):
    return audit_trail.list_entries(db, day=day, dessert_id=dessert_id, order_id=order_id, limit=limit)
