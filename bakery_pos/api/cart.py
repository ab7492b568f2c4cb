from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from bakery_pos.api.deps import get_clock, http_error
from bakery_pos.clock import Clock
from bakery_pos.database import get_db
from bakery_pos.exceptions import OrderError
from bakery_pos.schemas.cart import CartLine, ComboSelection, DessertSelection, VariantSelection
from bakery_pos.services import catalog_service, order_resolution

router = APIRouter(prefix="/cart", tags=["Cart"])


@router.post("/lines/dessert", response_model=CartLine)
def resolve_dessert(data: DessertSelection, db: Session = Depends(get_db), clock: Clock = Depends(get_clock)):
    dessert = catalog_service.get_dessert(db, data.dessert_id)
    if not dessert:
        raise HTTPException(404, "Dessert not found")
    quantity = order_resolution.clamp_quantity(data.quantity)
    try:
        return order_resolution.resolve_base_selection(db, dessert, quantity, clock.today())
    except OrderError as e:
        raise http_error(e)


@router.post("/lines/combo", response_model=CartLine)
def resolve_combo(data: ComboSelection, db: Session = Depends(get_db), clock: Clock = Depends(get_clock)):
    combo = catalog_service.get_combo(db, data.combo_id)
    if not combo:
        raise HTTPException(404, "Combo not found")
    quantity = order_resolution.clamp_quantity(data.quantity)
    try:
        return order_resolution.resolve_combo_selection(db, combo, quantity, clock.today())
    except OrderError as e:
        raise http_error(e)


@router.post("/lines/variant", response_model=CartLine)
def resolve_variant(data: VariantSelection, db: Session = Depends(get_db), clock: Clock = Depends(get_clock)):
    dessert = catalog_service.get_dessert(db, data.base_dessert_id)
    if not dessert:
        raise HTTPException(404, "Dessert not found")
    quantity = order_resolution.clamp_quantity(data.quantity)
    try:
        return order_resolution.resolve_variant_selection(db, dessert, data.modifiers, quantity, clock.today())
    except OrderError as e:
        raise http_error(e)
