from datetime import timedelta

import pytest

from bakery_pos.exceptions import InvalidQuantity, TransactionFailure
from bakery_pos.models.inventory_audit_log import AuditAction, InventoryAuditLog
from bakery_pos.services import audit_trail, stock_ledger
from tests.factories import TODAY, put_stock


def test_get_quantity_defaults_to_zero(db, catalog):
    assert stock_ledger.get_quantity(db, TODAY, catalog.brownie.id) == 0


def test_quantities_are_scoped_to_the_day(db, catalog):
    put_stock(db, catalog.brownie.id, 4, day=TODAY - timedelta(days=1))
    put_stock(db, catalog.brownie.id, 9)

    assert stock_ledger.get_quantity(db, TODAY, catalog.brownie.id) == 9
    assert stock_ledger.get_quantities(db, TODAY - timedelta(days=1)) == {catalog.brownie.id: 4}


def test_lock_and_read_fills_missing_rows_with_zero(db, catalog):
    put_stock(db, catalog.brownie.id, 3)

    stock = stock_ledger.lock_and_read(db, TODAY, [catalog.cheesecake.id, catalog.brownie.id])

    assert stock == {catalog.brownie.id: 3, catalog.cheesecake.id: 0}
    db.rollback()


def test_conditional_decrement_updates_all_rows_in_one_go(db, catalog):
    put_stock(db, catalog.brownie.id, 5)
    put_stock(db, catalog.cheesecake.id, 2)

    stock_ledger.lock_and_read(db, TODAY, [catalog.brownie.id, catalog.cheesecake.id])
    new = stock_ledger.conditional_decrement(db, TODAY, {catalog.brownie.id: 3, catalog.cheesecake.id: 2})
    db.commit()

    assert new == {catalog.brownie.id: 2, catalog.cheesecake.id: 0}
    assert stock_ledger.get_quantity(db, TODAY, catalog.brownie.id) == 2
    assert stock_ledger.get_quantity(db, TODAY, catalog.cheesecake.id) == 0


def test_conditional_decrement_requires_existing_rows(db, catalog):
    put_stock(db, catalog.brownie.id, 5)

    with pytest.raises(TransactionFailure):
        stock_ledger.conditional_decrement(db, TODAY, {catalog.brownie.id: 1, catalog.cheesecake.id: 1})
    db.rollback()

    assert stock_ledger.get_quantity(db, TODAY, catalog.brownie.id) == 5


def test_set_quantity_creates_row_and_audits(db, catalog):
    change = stock_ledger.set_quantity(db, TODAY, catalog.brownie.id, 12, "manager-1")
    db.commit()

    assert (change.previous_quantity, change.new_quantity) == (0, 12)
    assert stock_ledger.get_quantity(db, TODAY, catalog.brownie.id) == 12
    [entry] = audit_trail.list_entries(db, day=TODAY)
    assert entry.action == AuditAction.SET_STOCK
    assert (entry.previous_quantity, entry.new_quantity) == (0, 12)
    assert entry.user_id == "manager-1"
    assert entry.note == "Stock set from 0 to 12"


def test_set_quantity_audits_even_when_unchanged(db, catalog):
    put_stock(db, catalog.brownie.id, 6)

    stock_ledger.set_quantity(db, TODAY, catalog.brownie.id, 6, "manager-1")
    db.commit()

    assert db.query(InventoryAuditLog).count() == 1


def test_set_quantity_rejects_negative(db, catalog):
    with pytest.raises(InvalidQuantity):
        stock_ledger.set_quantity(db, TODAY, catalog.brownie.id, -1, "manager-1")
    db.rollback()


def test_restore_adds_back_and_audits(db, catalog):
    put_stock(db, catalog.brownie.id, 1)

    change = stock_ledger.restore(db, TODAY, catalog.brownie.id, 2, "user1", note="customer left")
    db.commit()

    assert (change.previous_quantity, change.new_quantity) == (1, 3)
    assert stock_ledger.get_quantity(db, TODAY, catalog.brownie.id) == 3
    [entry] = audit_trail.list_entries(db, dessert_id=catalog.brownie.id)
    assert entry.action == AuditAction.ORDER_CANCELLED
    assert entry.note == "customer left"


def test_restore_creates_missing_row(db, catalog):
    stock_ledger.restore(db, TODAY, catalog.cheesecake.id, 4, "user1")
    db.commit()

    assert stock_ledger.get_quantity(db, TODAY, catalog.cheesecake.id) == 4
