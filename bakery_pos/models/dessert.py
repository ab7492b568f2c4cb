from enum import Enum as PyEnum

from sqlalchemy import Boolean, Enum, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from bakery_pos.database import Base


class DessertKind(str, PyEnum):
    BASE = "base"
    MODIFIER = "modifier"


class Dessert(Base):
    """Catalog item. Base desserts carry daily stock; modifiers are add-ons."""

    __tablename__ = "desserts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    price: Mapped[int] = mapped_column(Integer, nullable=False)
    description: Mapped[str | None] = mapped_column(String(255), nullable=True)
    kind: Mapped[str] = mapped_column(
        Enum(DessertKind, values_callable=lambda x: [e.value for e in x]),
        default=DessertKind.BASE,
    )
    is_deleted: Mapped[bool] = mapped_column(Boolean, default=False, index=True)
    enabled: Mapped[bool] = mapped_column(Boolean, default=True)
    is_out_of_stock: Mapped[bool] = mapped_column(Boolean, default=False)
    has_unlimited_stock: Mapped[bool] = mapped_column(Boolean, default=False)
    sequence: Mapped[int] = mapped_column(Integer, default=0)

    @property
    def is_available(self) -> bool:
        return self.enabled and not self.is_deleted


class DessertCombo(Base):
    __tablename__ = "dessert_combos"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    base_dessert_id: Mapped[int] = mapped_column(Integer, ForeignKey("desserts.id"), nullable=False)
    override_price: Mapped[int | None] = mapped_column(Integer, nullable=True)
    enabled: Mapped[bool] = mapped_column(Boolean, default=True)
    is_deleted: Mapped[bool] = mapped_column(Boolean, default=False)
    sequence: Mapped[int] = mapped_column(Integer, default=0)

    base_dessert: Mapped["Dessert"] = relationship("Dessert")
    items: Mapped[list["ComboItem"]] = relationship(
        "ComboItem", back_populates="combo", cascade="all, delete-orphan"
    )


class ComboItem(Base):
    """A modifier attached to a combo, e.g. 2x extra scoop."""

    __tablename__ = "combo_items"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    combo_id: Mapped[int] = mapped_column(Integer, ForeignKey("dessert_combos.id"), nullable=False)
    dessert_id: Mapped[int] = mapped_column(Integer, ForeignKey("desserts.id"), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, default=1)

    combo: Mapped["DessertCombo"] = relationship("DessertCombo", back_populates="items")
    dessert: Mapped["Dessert"] = relationship("Dessert")
