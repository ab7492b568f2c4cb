from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from bakery_pos.config import settings
from bakery_pos.models.order import OrderStatus
from bakery_pos.schemas.cart import CartLine


class OrderCreate(BaseModel):
    customer_name: str = Field(default="", max_length=255)
    lines: list[CartLine] = Field(min_length=1, max_length=settings.MAX_CART_LINES)
    delivery_cost: str = "0.00"

    @field_validator("customer_name", mode="before")
    @classmethod
    def customer_name_default(cls, v):
        return (v or "").strip()


class OrderCancel(BaseModel):
    reason: Optional[str] = Field(default=None, max_length=500)

    @field_validator("reason", mode="before")
    @classmethod
    def blank_reason_is_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v.strip() if isinstance(v, str) else v


class OrderItemModifierOut(BaseModel):
    id: int
    dessert_id: int
    name: str
    unit_price: Decimal
    quantity: int

    model_config = {"from_attributes": True}


class OrderItemOut(BaseModel):
    id: int
    dessert_id: int
    dessert_name: str
    quantity: int
    unit_price: Decimal
    has_unlimited_stock: bool
    combo_id: Optional[int] = None
    combo_name: Optional[str] = None
    modifiers: list[OrderItemModifierOut] = []

    model_config = {"from_attributes": True}


class OrderOut(BaseModel):
    id: int
    customer_name: str
    created_at: datetime
    status: OrderStatus
    delivery_cost: Decimal
    total: Decimal
    cancelled_at: Optional[datetime] = None
    cancel_reason: Optional[str] = None
    items: list[OrderItemOut]

    model_config = {"from_attributes": True}
