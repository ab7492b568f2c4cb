"""Turns POS selections into cart lines and a cart into stock demand.

Only the base dessert of a line is ever checked against the ledger; combo
modifiers are priced but never stock-tracked. Prices are frozen into the
``CartLine`` here and are not looked up again at commit time.
"""
import uuid
from datetime import date

from sqlalchemy.orm import Session

from bakery_pos.config import settings
from bakery_pos.exceptions import InvalidQuantity, ItemUnavailable
from bakery_pos.models.dessert import Dessert, DessertCombo
from bakery_pos.schemas.cart import CartLine, CartLineModifier, ModifierSelection
from bakery_pos.services import catalog_service, stock_ledger


def _generate_cart_line_id() -> str:
    return f"cl_{uuid.uuid4().hex[:12]}"


def clamp_quantity(value: int) -> int:
    """Clamp a requested quantity to [1, MAX_LINE_QUANTITY]. Callers do this
    before resolving; the resolver itself does not reclamp."""
    return max(1, min(settings.MAX_LINE_QUANTITY, int(value)))


def compute_unit_price(base_price: int, modifiers: list[CartLineModifier], override_price: int | None) -> int:
    if override_price is not None:
        return override_price
    return base_price + sum(m.price * m.quantity for m in modifiers)


def _check_base_available(db: Session, dessert: Dessert, day: date) -> None:
    if not dessert.is_available:
        raise ItemUnavailable(dessert.name, "is not available")
    if dessert.is_out_of_stock:
        raise ItemUnavailable(dessert.name)
    if not dessert.has_unlimited_stock and stock_ledger.get_quantity(db, day, dessert.id) <= 0:
        raise ItemUnavailable(dessert.name)


def _build_line(
    dessert: Dessert,
    modifiers: list[CartLineModifier],
    quantity: int,
    override_price: int | None = None,
    combo: DessertCombo | None = None,
) -> CartLine:
    return CartLine(
        cart_line_id=_generate_cart_line_id(),
        base_dessert_id=dessert.id,
        base_dessert_name=dessert.name,
        base_dessert_price=dessert.price,
        has_unlimited_stock=dessert.has_unlimited_stock,
        modifiers=modifiers,
        unit_price=compute_unit_price(dessert.price, modifiers, override_price),
        quantity=quantity,
        combo_id=combo.id if combo else None,
        combo_name=combo.name if combo else None,
    )


def resolve_base_selection(db: Session, dessert: Dessert, quantity: int, day: date) -> CartLine:
    _check_base_available(db, dessert, day)
    return _build_line(dessert, [], quantity)


def resolve_combo_selection(db: Session, combo: DessertCombo, quantity: int, day: date) -> CartLine:
    if combo.is_deleted or not combo.enabled:
        raise ItemUnavailable(combo.name, "is not available")
    _check_base_available(db, combo.base_dessert, day)

    modifiers = [
        CartLineModifier(
            dessert_id=item.dessert.id,
            name=item.dessert.name,
            price=item.dessert.price,
            quantity=item.quantity,
        )
        for item in combo.items
    ]
    return _build_line(combo.base_dessert, modifiers, quantity, combo.override_price, combo)


def resolve_variant_selection(
    db: Session,
    dessert: Dessert,
    selections: list[ModifierSelection],
    quantity: int,
    day: date,
) -> CartLine:
    """Base dessert plus hand-picked add-ons, priced without any override."""
    _check_base_available(db, dessert, day)

    found = catalog_service.get_desserts(db, [s.dessert_id for s in selections])
    modifiers = []
    for selection in selections:
        modifier = found.get(selection.dessert_id)
        if modifier is None or not modifier.is_available:
            name = modifier.name if modifier else f"Modifier {selection.dessert_id}"
            raise ItemUnavailable(name, "is not available")
        if not 1 <= selection.quantity <= settings.MAX_LINE_QUANTITY:
            raise InvalidQuantity(
                f"Modifier {modifier.name} quantity must be between 1 and {settings.MAX_LINE_QUANTITY}"
            )
        modifiers.append(
            CartLineModifier(
                dessert_id=modifier.id,
                name=modifier.name,
                price=modifier.price,
                quantity=selection.quantity,
            )
        )
    return _build_line(dessert, modifiers, quantity)


def compute_demand(lines: list[CartLine]) -> dict[int, int]:
    """Total quantity needed per stock-tracked base dessert across the cart.

    A bare line and a combo line on the same base add up into one demand.
    """
    demand: dict[int, int] = {}
    for line in lines:
        if line.quantity <= 0:
            raise InvalidQuantity(f"Quantity for {line.base_dessert_name} must be positive, got {line.quantity}")
        if line.has_unlimited_stock:
            continue
        demand[line.base_dessert_id] = demand.get(line.base_dessert_id, 0) + line.quantity
    return demand


def demand_names(lines: list[CartLine]) -> dict[int, str]:
    return {line.base_dessert_id: line.base_dessert_name for line in lines}
