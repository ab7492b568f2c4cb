import pytest
from fastapi.testclient import TestClient

from bakery_pos.api.deps import get_clock
from bakery_pos.database import get_db
from bakery_pos.main import app
from tests.factories import put_stock

ACTOR = {"X-Actor-Id": "user1"}


@pytest.fixture
def client(session_factory, clock):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_clock] = lambda: clock
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def ids(db, catalog):
    put_stock(db, catalog.brownie.id, 5)
    result = {"brownie": catalog.brownie.id, "sundae": catalog.sundae.id, "water": catalog.water.id}
    db.commit()
    return result


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_sell_and_cancel_over_http(client, ids):
    r = client.post("/api/v1/cart/lines/dessert", json={"dessert_id": ids["brownie"], "quantity": 2})
    assert r.status_code == 200, r.text
    cart_line = r.json()
    assert cart_line["unit_price"] == 70

    r = client.post(
        "/api/v1/orders",
        json={"customer_name": "Alice", "lines": [cart_line], "delivery_cost": "0.00"},
        headers=ACTOR,
    )
    assert r.status_code == 201, r.text
    order = r.json()
    assert order["status"] == "completed"
    assert float(order["total"]) == 140.0

    inventory = client.get("/api/v1/inventory").json()
    assert inventory == [{"dessert_id": ids["brownie"], "quantity": 3}]

    r = client.post(f"/api/v1/orders/{order['id']}/cancel", json={"reason": "test"}, headers=ACTOR)
    assert r.status_code == 200, r.text
    assert r.json()["status"] == "cancelled"

    r = client.post(f"/api/v1/orders/{order['id']}/cancel", json={}, headers=ACTOR)
    assert r.status_code == 409

    log = client.get("/api/v1/inventory/audit-log", params={"order_id": order["id"]}).json()
    assert [e["action"] for e in log] == ["order_cancelled", "order_deducted"]


def test_combo_line_is_clamped(client, ids):
    r = client.post("/api/v1/cart/lines/combo", json={"combo_id": ids["sundae"], "quantity": 1000})

    assert r.status_code == 200, r.text
    assert r.json()["quantity"] == 199
    assert r.json()["unit_price"] == 145


def test_insufficient_stock_detail(client, ids):
    cart_line = client.post("/api/v1/cart/lines/dessert", json={"dessert_id": ids["brownie"], "quantity": 6}).json()

    r = client.post("/api/v1/orders", json={"lines": [cart_line]}, headers=ACTOR)

    assert r.status_code == 409
    assert r.json()["detail"]["available"] == 5
    assert r.json()["detail"]["requested"] == 6


def test_orders_require_an_actor(client, ids):
    cart_line = client.post("/api/v1/cart/lines/dessert", json={"dessert_id": ids["water"]}).json()

    r = client.post("/api/v1/orders", json={"lines": [cart_line]})

    assert r.status_code == 401


def test_unknown_order_is_404(client, ids):
    assert client.post("/api/v1/orders/404/cancel", json={}, headers=ACTOR).status_code == 404
    assert client.get("/api/v1/orders/404").status_code == 404


def test_set_inventory_over_http(client, ids):
    r = client.put(
        "/api/v1/inventory",
        json={"updates": [{"dessert_id": ids["brownie"], "quantity": 9}]},
        headers=ACTOR,
    )

    assert r.status_code == 200, r.text
    assert r.json() == [{"dessert_id": ids["brownie"], "quantity": 9}]
    [entry] = client.get("/api/v1/inventory/audit-log").json()
    assert (entry["previous_quantity"], entry["new_quantity"], entry["user_id"]) == (5, 9, "user1")


def test_list_and_delete_orders(client, ids):
    cart_line = client.post("/api/v1/cart/lines/dessert", json={"dessert_id": ids["water"]}).json()
    order = client.post("/api/v1/orders", json={"lines": [cart_line]}, headers=ACTOR).json()

    assert [o["id"] for o in client.get("/api/v1/orders").json()] == [order["id"]]
    assert client.delete(f"/api/v1/orders/{order['id']}", headers=ACTOR).status_code == 204
    assert client.get("/api/v1/orders").json() == []


@pytest.mark.parametrize(
    "changes",
    [
        {"quantity": 500},
        {"quantity": 0},
        {"modifiers": [{"dessert_id": 4, "name": "Ice Cream Scoop", "price": -30, "quantity": 1}]},
        {"modifiers": [{"dessert_id": 4, "name": "Ice Cream Scoop", "price": 30, "quantity": -4}]},
        {"base_dessert_id": 0},
    ],
)
def test_out_of_range_cart_lines_are_rejected(client, ids, changes):
    cart_line = client.post("/api/v1/cart/lines/dessert", json={"dessert_id": ids["water"]}).json()
    cart_line.update(changes)

    r = client.post("/api/v1/orders", json={"lines": [cart_line]}, headers=ACTOR)

    assert r.status_code == 422
    assert client.get("/api/v1/orders").json() == []


def test_audit_log_limit_is_bounded(client, ids):
    assert client.get("/api/v1/inventory/audit-log", params={"limit": -1}).status_code == 422
    assert client.get("/api/v1/inventory/audit-log", params={"limit": 501}).status_code == 422


def test_unlimited_dessert_stock_cannot_be_adjusted(client, ids):
    r = client.post(f"/api/v1/inventory/{ids['water']}/adjust", json={"quantity": 3}, headers=ACTOR)

    assert r.status_code == 400
    assert client.get("/api/v1/inventory").json() == [{"dessert_id": ids["brownie"], "quantity": 5}]
