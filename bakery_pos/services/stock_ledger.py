"""Per-day, per-dessert stock counter.

Everything here runs inside the caller's transaction and never commits.
Mutations must be preceded by ``lock_and_read`` over every row they touch,
taken in a single statement so two terminals cannot lock the same desserts
in opposite order.
"""
from datetime import date, datetime

from sqlalchemy import case, func
from sqlalchemy.orm import Session

from bakery_pos.exceptions import InvalidQuantity, TransactionFailure
from bakery_pos.models.inventory import DailyDessertInventory
from bakery_pos.models.inventory_audit_log import AuditAction
from bakery_pos.services import audit_trail
from bakery_pos.services.audit_trail import StockChange


def get_quantity(db: Session, day: date, dessert_id: int) -> int:
    quantity = (
        db.query(DailyDessertInventory.quantity)
        .filter(DailyDessertInventory.day == day, DailyDessertInventory.dessert_id == dessert_id)
        .scalar()
    )
    return quantity or 0


def get_quantities(db: Session, day: date) -> dict[int, int]:
    rows = (
        db.query(DailyDessertInventory.dessert_id, DailyDessertInventory.quantity)
        .filter(DailyDessertInventory.day == day)
        .order_by(DailyDessertInventory.dessert_id)
        .all()
    )
    return {row.dessert_id: row.quantity for row in rows}


def lock_and_read(db: Session, day: date, dessert_ids) -> dict[int, int]:
    """Read quantities with a write lock held until the transaction ends.

    Desserts without a row for the day read as 0.
    """
    ids = sorted(set(dessert_ids))
    if not ids:
        return {}
    rows = (
        db.query(DailyDessertInventory.dessert_id, DailyDessertInventory.quantity)
        .filter(DailyDessertInventory.day == day, DailyDessertInventory.dessert_id.in_(ids))
        .order_by(DailyDessertInventory.dessert_id)
        .with_for_update()
        .all()
    )
    stock = dict.fromkeys(ids, 0)
    stock.update({row.dessert_id: row.quantity for row in rows})
    return stock


def conditional_decrement(
    db: Session, day: date, demand: dict[int, int], now: datetime | None = None
) -> dict[int, int]:
    """Subtract ``demand`` from the locked rows in one batched UPDATE.

    Sufficiency must already have been checked against ``lock_and_read`` in
    the same transaction. Returns the new quantities.
    """
    if not demand:
        return {}
    ids = sorted(demand)
    new_quantity = case(
        {dessert_id: DailyDessertInventory.quantity - demand[dessert_id] for dessert_id in ids},
        value=DailyDessertInventory.dessert_id,
        else_=DailyDessertInventory.quantity,
    )
    updated = (
        db.query(DailyDessertInventory)
        .filter(DailyDessertInventory.day == day, DailyDessertInventory.dessert_id.in_(ids))
        .update(
            {DailyDessertInventory.quantity: new_quantity, DailyDessertInventory.updated_at: _stamp(now)},
            synchronize_session=False,
        )
    )
    if updated != len(ids):
        raise TransactionFailure(f"Inventory rows missing for {day}: expected {len(ids)}, updated {updated}")

    rows = (
        db.query(DailyDessertInventory.dessert_id, DailyDessertInventory.quantity)
        .filter(DailyDessertInventory.day == day, DailyDessertInventory.dessert_id.in_(ids))
        .all()
    )
    return {row.dessert_id: row.quantity for row in rows}


def _stamp(now: datetime | None):
    return now if now is not None else func.now()


def _write_quantities(db: Session, day: date, quantities: dict[int, int], now: datetime | None = None) -> None:
    rows = {
        row.dessert_id: row
        for row in db.query(DailyDessertInventory)
        .filter(DailyDessertInventory.day == day, DailyDessertInventory.dessert_id.in_(list(quantities)))
        .populate_existing()
        .all()
    }
    for dessert_id, quantity in quantities.items():
        row = rows.get(dessert_id)
        if row is None:
            db.add(DailyDessertInventory(day=day, dessert_id=dessert_id, quantity=quantity, updated_at=_stamp(now)))
        else:
            row.quantity = quantity
            row.updated_at = _stamp(now)
    db.flush()


def write_locked(db: Session, day: date, quantities: dict[int, int], now: datetime | None = None) -> None:
    """Overwrite rows already locked by ``lock_and_read``, creating missing ones."""
    for dessert_id, quantity in quantities.items():
        if quantity < 0:
            raise InvalidQuantity(f"Stock for dessert {dessert_id} cannot be negative ({quantity})")
    if quantities:
        _write_quantities(db, day, quantities, now)


def set_quantity(
    db: Session,
    day: date,
    dessert_id: int,
    new_quantity: int,
    actor_id: str | None,
    note: str | None = None,
    action: AuditAction = AuditAction.SET_STOCK,
    now: datetime | None = None,
) -> StockChange:
    """Manual correction: overwrite the count and always audit it."""
    previous = lock_and_read(db, day, [dessert_id])[dessert_id]
    write_locked(db, day, {dessert_id: new_quantity}, now=now)
    change = StockChange(dessert_id, previous, new_quantity)
    audit_trail.record(
        db,
        day,
        dessert_id,
        action,
        previous,
        new_quantity,
        actor_id,
        note=note or f"Stock set from {previous} to {new_quantity}",
        created_at=now,
    )
    return change


def restore(
    db: Session,
    day: date,
    dessert_id: int,
    quantity: int,
    actor_id: str | None,
    order_id: int | None = None,
    note: str | None = None,
    now: datetime | None = None,
) -> StockChange:
    """Add ``quantity`` back (cancellation path) and audit it."""
    if quantity <= 0:
        raise InvalidQuantity(f"Restore quantity must be positive, got {quantity}")
    previous = lock_and_read(db, day, [dessert_id])[dessert_id]
    new_quantity = previous + quantity
    _write_quantities(db, day, {dessert_id: new_quantity}, now)
    audit_trail.record(
        db,
        day,
        dessert_id,
        AuditAction.ORDER_CANCELLED,
        previous,
        new_quantity,
        actor_id,
        order_id=order_id,
        note=note,
        created_at=now,
    )
    return StockChange(dessert_id, previous, new_quantity)
