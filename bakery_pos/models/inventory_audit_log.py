from datetime import date, datetime
from enum import Enum as PyEnum

from sqlalchemy import Date, DateTime, Enum, ForeignKey, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column

from bakery_pos.database import Base


class AuditAction(str, PyEnum):
    SET_STOCK = "set_stock"
    ORDER_DEDUCTED = "order_deducted"
    ORDER_CANCELLED = "order_cancelled"
    MANUAL_ADJUSTMENT = "manual_adjustment"


class InventoryAuditLog(Base):
    """Append-only record of every stock change. Never updated or deleted."""

    __tablename__ = "inventory_audit_log"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    day: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    dessert_id: Mapped[int] = mapped_column(Integer, ForeignKey("desserts.id"), nullable=False, index=True)
    action: Mapped[str] = mapped_column(
        Enum(AuditAction, values_callable=lambda x: [e.value for e in x]),
        nullable=False,
    )
    previous_quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    new_quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    order_id: Mapped[int | None] = mapped_column(Integer, ForeignKey("orders.id"), nullable=True, index=True)
    user_id: Mapped[str | None] = mapped_column(String, nullable=True)  # opaque actor id
    note: Mapped[str | None] = mapped_column(String(500), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())
