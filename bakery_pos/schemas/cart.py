from typing import Optional

from pydantic import BaseModel, Field

from bakery_pos.config import settings


class CartLineModifier(BaseModel):
    dessert_id: int = Field(gt=0)
    name: str = Field(min_length=1, max_length=255)
    price: int = Field(ge=0)  # snapshot, currency units
    quantity: int = Field(default=1, ge=1, le=settings.MAX_LINE_QUANTITY)


class CartLine(BaseModel):
    """A row the customer is buying. Prices are frozen when the line is built."""

    cart_line_id: str = Field(min_length=1, max_length=100)
    base_dessert_id: int = Field(gt=0)
    base_dessert_name: str = Field(min_length=1, max_length=255)
    base_dessert_price: int = Field(ge=0)
    has_unlimited_stock: bool = False
    modifiers: list[CartLineModifier] = Field(default_factory=list, max_length=20)
    unit_price: int = Field(ge=0)
    quantity: int = Field(ge=1, le=settings.MAX_LINE_QUANTITY)
    combo_id: Optional[int] = Field(default=None, gt=0)
    combo_name: Optional[str] = Field(default=None, max_length=255)


class ModifierSelection(BaseModel):
    dessert_id: int
    quantity: int = 1


class DessertSelection(BaseModel):
    dessert_id: int
    quantity: int = 1


class ComboSelection(BaseModel):
    combo_id: int
    quantity: int = 1


class VariantSelection(BaseModel):
    base_dessert_id: int
    modifiers: list[ModifierSelection] = Field(default_factory=list, max_length=20)
    quantity: int = 1
