import logging
import re
import time
from datetime import date, datetime, time as dt_time
from decimal import Decimal

from sqlalchemy.orm import Session, selectinload

from bakery_pos.clock import Clock, SystemClock
from bakery_pos.config import settings
from bakery_pos.exceptions import (
    AlreadyCancelled,
    InsufficientStock,
    InvalidDeliveryCost,
    InvalidQuantity,
    InvalidStatusTransition,
    OrderNotFound,
)
from bakery_pos.models.inventory_audit_log import AuditAction
from bakery_pos.models.order import Order, OrderItem, OrderItemModifier, OrderStatus
from bakery_pos.schemas.cart import CartLine
from bakery_pos.services import audit_trail, order_resolution, stock_ledger
from bakery_pos.services.audit_trail import StockChange
from bakery_pos.services.sanitize import sanitize_customer_name
from bakery_pos.services.transaction import unit_of_work

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")
DELIVERY_COST_RE = re.compile(r"^\d+(\.\d{1,2})?$")


def parse_delivery_cost(value: str | None) -> Decimal:
    text = (value or "0").strip()
    if not DELIVERY_COST_RE.match(text):
        raise InvalidDeliveryCost(f"Invalid delivery cost format: {value!r}")
    cost = Decimal(text)
    if cost > settings.MAX_DELIVERY_COST:
        raise InvalidDeliveryCost(f"Delivery cost must be between 0 and {settings.MAX_DELIVERY_COST}")
    return cost.quantize(CENT)


def compute_total(lines: list[CartLine], delivery_cost: Decimal) -> Decimal:
    items_total = sum((Decimal(line.unit_price) * line.quantity for line in lines), Decimal("0"))
    return (items_total + delivery_cost).quantize(CENT)


def _deduct_stock(
    db: Session, now: datetime, lines: list[CartLine], demand: dict[int, int]
) -> list[StockChange]:
    day = now.date()
    # One locking statement over every demanded dessert; blocks while another
    # terminal holds any of these rows.
    stock = stock_ledger.lock_and_read(db, day, demand)
    names = order_resolution.demand_names(lines)
    for dessert_id, requested in demand.items():
        if stock[dessert_id] < requested:
            raise InsufficientStock(names[dessert_id], stock[dessert_id], requested)

    new_quantities = stock_ledger.conditional_decrement(db, day, demand, now=now)
    return [
        StockChange(dessert_id, new_quantities[dessert_id] + requested, new_quantities[dessert_id])
        for dessert_id, requested in demand.items()
    ]


def _build_order_item(line: CartLine) -> OrderItem:
    item = OrderItem(
        dessert_id=line.base_dessert_id,
        dessert_name=line.base_dessert_name,
        quantity=line.quantity,
        unit_price=Decimal(line.unit_price),
        has_unlimited_stock=line.has_unlimited_stock,
        combo_id=line.combo_id,
        combo_name=line.combo_name,
    )
    item.modifiers = [
        OrderItemModifier(
            dessert_id=mod.dessert_id,
            name=mod.name,
            unit_price=Decimal(mod.price),
            quantity=mod.quantity,
        )
        for mod in line.modifiers
    ]
    return item


def commit_order(
    db: Session,
    customer_name: str,
    lines: list[CartLine],
    delivery_cost: str,
    actor_id: str,
    clock: Clock,
) -> Order:
    """Place an order: check and deduct today's stock, persist the order and
    its audit trail, all in one transaction. Either everything is written or
    nothing is."""
    start = time.perf_counter()
    now = clock.now()
    day = now.date()

    with unit_of_work(db, "commit_order"):
        if not lines:
            raise InvalidQuantity("Cart is empty")
        cost = parse_delivery_cost(delivery_cost)
        demand = order_resolution.compute_demand(lines)
        changes = _deduct_stock(db, now, lines, demand) if demand else []

        order = Order(
            customer_name=sanitize_customer_name(customer_name),
            created_at=now,
            status=OrderStatus.COMPLETED,
            delivery_cost=cost,
            total=compute_total(lines, cost),
        )
        order.items = [_build_order_item(line) for line in lines]
        db.add(order)
        db.flush()

        audit_trail.record_many(
            db, day, changes, AuditAction.ORDER_DEDUCTED, actor_id, order_id=order.id, created_at=now
        )

    db.refresh(order)
    logger.info(
        "commit_order: order %s (%d lines, total %s) by %s in %.2fms",
        order.id, len(lines), order.total, actor_id, (time.perf_counter() - start) * 1000,
    )
    return order


def cancel_order(
    db: Session,
    order_id: int,
    reason: str | None,
    actor_id: str,
    clock: Clock | None = None,
) -> Order:
    """Cancel an order and put its stock back on the ledger of the day the
    order was placed. Cancelling twice raises ``AlreadyCancelled`` and changes
    nothing."""
    start = time.perf_counter()
    clock = clock or SystemClock()
    now = clock.now()
    note = reason or settings.DEFAULT_CANCEL_REASON

    with unit_of_work(db, "cancel_order"):
        order = (
            db.query(Order)
            .filter(Order.id == order_id, Order.is_deleted == False)  # noqa: E712
            .with_for_update()
            .populate_existing()
            .first()
        )
        if not order:
            raise OrderNotFound(order_id)
        if order.status == OrderStatus.CANCELLED:
            raise AlreadyCancelled(order_id)

        restore_quantities: dict[int, int] = {}
        for item in order.items:
            if item.has_unlimited_stock:
                continue
            restore_quantities[item.dessert_id] = restore_quantities.get(item.dessert_id, 0) + item.quantity

        day = order.created_at.date()
        if restore_quantities:
            stock_ledger.lock_and_read(db, day, restore_quantities)
            for dessert_id, quantity in restore_quantities.items():
                stock_ledger.restore(
                    db, day, dessert_id, quantity, actor_id, order_id=order.id, note=note, now=now
                )

        order.status = OrderStatus.CANCELLED
        order.cancelled_at = now
        order.cancel_reason = reason

    db.refresh(order)
    logger.info(
        "cancel_order: order %s cancelled by %s, %d desserts restored in %.2fms",
        order_id, actor_id, len(restore_quantities), (time.perf_counter() - start) * 1000,
    )
    return order


def complete_order(db: Session, order_id: int) -> Order:
    """Legacy ``pending -> completed`` transition."""
    with unit_of_work(db, "complete_order"):
        order = get_order(db, order_id)
        if not order:
            raise OrderNotFound(order_id)
        if order.status != OrderStatus.PENDING:
            raise InvalidStatusTransition(f"Cannot complete order in '{order.status}' status")
        order.status = OrderStatus.COMPLETED
    db.refresh(order)
    return order


def delete_order(db: Session, order_id: int) -> None:
    """Hide an order from listings. Stock is not touched."""
    with unit_of_work(db, "delete_order"):
        order = get_order(db, order_id)
        if not order:
            raise OrderNotFound(order_id)
        order.is_deleted = True


def get_order(db: Session, order_id: int) -> Order | None:
    return (
        db.query(Order)
        .options(selectinload(Order.items).selectinload(OrderItem.modifiers))
        .filter(Order.id == order_id, Order.is_deleted == False)  # noqa: E712
        .first()
    )


def list_orders(db: Session, day: date) -> list[Order]:
    """Orders placed since the start of ``day``, newest first."""
    return (
        db.query(Order)
        .options(selectinload(Order.items).selectinload(OrderItem.modifiers))
        .filter(Order.is_deleted == False, Order.created_at >= datetime.combine(day, dt_time.min))  # noqa: E712
        .order_by(Order.created_at.desc(), Order.id.desc())
        .all()
    )
