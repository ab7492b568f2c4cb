from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, Field

from bakery_pos.models.inventory_audit_log import AuditAction


class StockUpdate(BaseModel):
    dessert_id: int
    quantity: float  # floored and clamped at zero before it reaches the ledger


class StockSetRequest(BaseModel):
    updates: list[StockUpdate] = Field(max_length=500)


class StockAdjust(BaseModel):
    quantity: int  # positive = add, negative = remove
    note: str = Field(default="", max_length=500)


class InventoryRowOut(BaseModel):
    dessert_id: int
    quantity: int


class AuditLogOut(BaseModel):
    id: int
    day: date
    dessert_id: int
    action: AuditAction
    previous_quantity: int
    new_quantity: int
    order_id: Optional[int] = None
    user_id: Optional[str] = None
    note: Optional[str] = None
    created_at: datetime

    model_config = {"from_attributes": True}
