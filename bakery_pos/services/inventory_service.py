import logging
import math
import time

from sqlalchemy.orm import Session

from bakery_pos.clock import Clock
from bakery_pos.exceptions import InsufficientStock, InvalidQuantity, ItemUnavailable
from bakery_pos.models.dessert import Dessert, DessertKind
from bakery_pos.models.inventory_audit_log import AuditAction
from bakery_pos.schemas.inventory import StockUpdate
from bakery_pos.services import audit_trail, catalog_service, stock_ledger
from bakery_pos.services.audit_trail import StockChange
from bakery_pos.services.transaction import unit_of_work

logger = logging.getLogger(__name__)


def _normalize_quantity(value: float) -> int:
    if not math.isfinite(value):
        return 0
    return max(0, math.floor(value))


def _require_stock_tracked(db: Session, dessert_ids: list[int]) -> dict[int, Dessert]:
    """Only base desserts with limited stock have ledger rows."""
    desserts = catalog_service.get_desserts(db, dessert_ids)
    for dessert_id in dessert_ids:
        dessert = desserts.get(dessert_id)
        if dessert is None or dessert.is_deleted:
            raise ItemUnavailable(f"Dessert {dessert_id}", "does not exist")
        if dessert.kind == DessertKind.MODIFIER:
            raise InvalidQuantity(f"{dessert.name} is a modifier and has no daily stock")
        if dessert.has_unlimited_stock:
            raise InvalidQuantity(f"{dessert.name} has unlimited stock")
    return desserts


def get_today_inventory(db: Session, clock: Clock) -> dict[int, int]:
    return stock_ledger.get_quantities(db, clock.today())


def set_today_stock(db: Session, updates: list[StockUpdate], actor_id: str, clock: Clock) -> list[StockChange]:
    """Manager bulk set of today's counts. Unchanged rows are written but not audited."""
    start = time.perf_counter()
    if not updates:
        return []
    now = clock.now()
    day = now.date()
    quantities = {u.dessert_id: _normalize_quantity(u.quantity) for u in updates}

    with unit_of_work(db, "set_today_stock"):
        _require_stock_tracked(db, list(quantities))
        current = stock_ledger.lock_and_read(db, day, quantities)
        stock_ledger.write_locked(db, day, quantities, now=now)
        changes = [
            StockChange(dessert_id, current[dessert_id], quantity)
            for dessert_id, quantity in quantities.items()
            if current[dessert_id] != quantity
        ]
        for change in changes:
            audit_trail.record(
                db,
                day,
                change.dessert_id,
                AuditAction.SET_STOCK,
                change.previous_quantity,
                change.new_quantity,
                actor_id,
                note=f"Stock set from {change.previous_quantity} to {change.new_quantity}",
                created_at=now,
            )

    logger.info(
        "set_today_stock: %d rows, %d changed by %s in %.2fms",
        len(quantities), len(changes), actor_id, (time.perf_counter() - start) * 1000,
    )
    return changes


def adjust_stock(db: Session, dessert_id: int, delta: int, actor_id: str, clock: Clock, note: str = "") -> StockChange:
    """Relative correction (breakage, late delivery). The count never goes below zero."""
    if delta == 0:
        raise InvalidQuantity("Adjustment must be non-zero")
    now = clock.now()
    day = now.date()

    with unit_of_work(db, "adjust_stock"):
        dessert = _require_stock_tracked(db, [dessert_id])[dessert_id]
        current = stock_ledger.lock_and_read(db, day, [dessert_id])[dessert_id]
        new_quantity = current + delta
        if new_quantity < 0:
            raise InsufficientStock(dessert.name, current, -delta)
        change = stock_ledger.set_quantity(
            db,
            day,
            dessert_id,
            new_quantity,
            actor_id,
            note=note or f"Adjusted by {delta:+d}",
            action=AuditAction.MANUAL_ADJUSTMENT,
            now=now,
        )
    return change
