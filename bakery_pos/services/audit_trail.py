"""Append-only inventory audit log.

Every ledger mutation writes here inside the same transaction as the mutation
itself, so an audit row exists exactly when the stock change it describes was
committed. Nothing in this module updates or deletes a row.
"""
from dataclasses import dataclass
from datetime import date, datetime

from sqlalchemy.orm import Session

from bakery_pos.models.inventory_audit_log import AuditAction, InventoryAuditLog


@dataclass
class StockChange:
    dessert_id: int
    previous_quantity: int
    new_quantity: int


def record(
    db: Session,
    day: date,
    dessert_id: int,
    action: AuditAction,
    previous_quantity: int,
    new_quantity: int,
    actor_id: str | None,
    order_id: int | None = None,
    note: str | None = None,
    created_at: datetime | None = None,
) -> InventoryAuditLog:
    entry = InventoryAuditLog(
        day=day,
        dessert_id=dessert_id,
        action=action,
        previous_quantity=previous_quantity,
        new_quantity=new_quantity,
        order_id=order_id,
        user_id=actor_id,
        note=note[:500] if note else note,
    )
    if created_at is not None:
        entry.created_at = created_at
    db.add(entry)
    return entry


def record_many(
    db: Session,
    day: date,
    changes: list[StockChange],
    action: AuditAction,
    actor_id: str | None,
    order_id: int | None = None,
    note: str | None = None,
    created_at: datetime | None = None,
) -> list[InventoryAuditLog]:
    entries = [
        record(
            db,
            day,
            change.dessert_id,
            action,
            change.previous_quantity,
            change.new_quantity,
            actor_id,
            order_id=order_id,
            note=note,
            created_at=created_at,
        )
        for change in changes
    ]
    db.flush()
    return entries


def list_entries(
    db: Session,
    day: date | None = None,
    dessert_id: int | None = None,
    order_id: int | None = None,
    limit: int = 100,
) -> list[InventoryAuditLog]:
    q = db.query(InventoryAuditLog)
    if day is not None:
        q = q.filter(InventoryAuditLog.day == day)
    if dessert_id is not None:
        q = q.filter(InventoryAuditLog.dessert_id == dessert_id)
    if order_id is not None:
        q = q.filter(InventoryAuditLog.order_id == order_id)
    return q.order_by(InventoryAuditLog.id.desc()).limit(limit).all()
