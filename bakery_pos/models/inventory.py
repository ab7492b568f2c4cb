from datetime import date, datetime

from sqlalchemy import CheckConstraint, Date, DateTime, ForeignKey, Integer, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column

from bakery_pos.database import Base


class DailyDessertInventory(Base):
    """What is left of a base dessert on a given day. Rows accumulate per day."""

    __tablename__ = "daily_dessert_inventory"
    __table_args__ = (
        UniqueConstraint("day", "dessert_id", name="daily_dessert_inventory_day_dessert_unique"),
        CheckConstraint("quantity >= 0", name="daily_dessert_inventory_quantity_non_negative"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    day: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    dessert_id: Mapped[int] = mapped_column(Integer, ForeignKey("desserts.id"), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    updated_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())
