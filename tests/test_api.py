import pytest
import redis
from fastapi.testclient import TestClient

from storefront.api.deps import get_cart_repo
from storefront.data.database import get_db
from storefront.data.models import ProductModel
from storefront.main import create_app

ALICE = {"X-Session-Id": "sess-alice", "X-User-Id": "1"}
BOB = {"X-Session-Id": "sess-bob", "X-User-Id": "2"}
CHECKOUT = {"shipping_address": "1 Main St", "payment_method": "card"}


@pytest.fixture()
def client(db, session_factory, cart_repo, user_id, make_product):
    make_product(101, price="10.00", stock=5, name="Whole Milk (1L)")
    make_product(205, price="15.50", stock=3, name="Cheddar (200g)")
    # sesja fixture'a nie moze trzymac transakcji w trakcie requestow
    db.close()

    def override_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app = create_app()
    app.dependency_overrides[get_db] = override_db
    app.dependency_overrides[get_cart_repo] = lambda: cart_repo
    return TestClient(app)


def stock(session_factory, product_id):
    with session_factory() as s:
        return s.get(ProductModel, product_id).stock_quantity


def test_health(client):
    res = client.get("/health")
    assert res.status_code == 200
    assert res.json()["status"] == "ok"


def test_cart_flow(client):
    assert client.get("/cart", headers=ALICE).json()["is_empty"] is True

    client.post("/cart/items", json={"product_id": 101, "quantity": 3}, headers=ALICE)
    res = client.post("/cart/items", json={"product_id": 205}, headers=ALICE)
    assert res.status_code == 200
    body = res.json()
    assert body["total_items"] == 4
    assert body["total_price"] == "45.50"

    res = client.patch("/cart/items/101", json={"quantity": 1}, headers=ALICE)
    assert res.json()["total_items"] == 2

    res = client.delete("/cart/items/205", headers=ALICE)
    assert [i["product_id"] for i in res.json()["items"]] == [101]

    assert client.delete("/cart", headers=ALICE).json()["is_empty"] is True


def test_cart_rejects_bad_input(client):
    res = client.post("/cart/items", json={"product_id": 101, "quantity": 0}, headers=ALICE)
    assert res.status_code == 422

    res = client.patch("/cart/items/101", json={"quantity": 2}, headers=ALICE)
    assert res.status_code == 404
    assert res.json()["detail"]["code"] == "item_not_found"

    assert client.get("/cart").status_code == 422


def test_sessions_do_not_share_carts(client):
    client.post("/cart/items", json={"product_id": 101, "quantity": 2}, headers=ALICE)
    assert client.get("/cart", headers=BOB).json()["is_empty"] is True


def test_checkout_creates_order_and_clears_cart(client, session_factory):
    client.post("/cart/items", json={"product_id": 101, "quantity": 3}, headers=ALICE)
    client.post("/cart/items", json={"product_id": 205, "quantity": 1}, headers=ALICE)

    res = client.post("/orders/checkout", json=CHECKOUT, headers=ALICE)

    assert res.status_code == 201
    placed = res.json()
    assert placed["total"] == "45.50"
    assert client.get("/cart", headers=ALICE).json()["is_empty"] is True
    assert stock(session_factory, 101) == 2

    order = client.get(f"/orders/{placed['order_id']}", headers=ALICE).json()
    assert order["status"] == "pending"
    assert [(i["product_id"], i["quantity"]) for i in order["items"]] == [(101, 3), (205, 1)]

    listed = client.get("/orders", headers=ALICE).json()
    assert [o["id"] for o in listed] == [placed["order_id"]]


def test_checkout_insufficient_stock(client, session_factory):
    client.post("/cart/items", json={"product_id": 205, "quantity": 4}, headers=ALICE)

    res = client.post("/orders/checkout", json=CHECKOUT, headers=ALICE)

    assert res.status_code == 409
    detail = res.json()["detail"]
    assert detail["code"] == "insufficient_stock"
    assert detail["available"] == 3
    assert detail["message"] == 'Not enough stock for "Cheddar (200g)". Available: 3'
    assert client.get("/cart", headers=ALICE).json()["total_items"] == 4
    assert stock(session_factory, 205) == 3


def test_checkout_empty_cart(client):
    res = client.post("/orders/checkout", json=CHECKOUT, headers=ALICE)
    assert res.status_code == 409
    assert res.json()["detail"]["code"] == "empty_order"


def test_checkout_unknown_user(client):
    headers = {"X-Session-Id": "sess-ghost", "X-User-Id": "999"}
    client.post("/cart/items", json={"product_id": 101, "quantity": 1}, headers=headers)

    res = client.post("/orders/checkout", json=CHECKOUT, headers=headers)

    assert res.status_code == 404
    assert res.json()["detail"]["message"] == "User not found."


def test_order_access_and_cancel(client):
    client.post("/cart/items", json={"product_id": 101, "quantity": 1}, headers=ALICE)
    order_id = client.post("/orders/checkout", json=CHECKOUT, headers=ALICE).json()["order_id"]

    assert client.get(f"/orders/{order_id}", headers=BOB).status_code == 403
    assert client.get("/orders/9999", headers=ALICE).status_code == 404

    res = client.post(f"/orders/{order_id}/cancel", headers=ALICE)
    assert res.status_code == 200
    assert res.json()["status"] == "cancelled"

    res = client.post(f"/orders/{order_id}/cancel", headers=ALICE)
    assert res.status_code == 200


def test_admin_status_changes_and_history(client):
    client.post("/cart/items", json={"product_id": 101, "quantity": 1}, headers=ALICE)
    order_id = client.post("/orders/checkout", json=CHECKOUT, headers=ALICE).json()["order_id"]
    admin = {"X-User-Id": "2"}

    res = client.post(f"/admin/orders/{order_id}/status", json={"status": "processing"}, headers=admin)
    assert res.status_code == 200
    assert res.json()["status"] == "processing"

    res = client.post(f"/admin/orders/{order_id}/status", json={"status": "bogus"}, headers=admin)
    assert res.status_code == 400

    client.post(f"/admin/orders/{order_id}/status", json={"status": "completed"}, headers=admin)
    res = client.post(f"/admin/orders/{order_id}/status", json={"status": "processing"}, headers=admin)
    assert res.status_code == 409
    assert res.json()["detail"]["code"] == "invalid_transition"

    history = client.get(f"/admin/orders/{order_id}/history").json()
    assert [h["status"] for h in history] == ["processing", "completed"]
    assert all(h["user_id"] == 2 for h in history)


def test_inventory_endpoints(client):
    res = client.post("/admin/inventory/205/restock", json={"quantity": 7})
    assert res.status_code == 200
    assert res.json()[0]["after_quantity"] == 10

    res = client.post("/admin/inventory/205/adjust", json={"delta": -20})
    assert res.status_code == 400

    assert client.post("/admin/inventory/404/restock", json={"quantity": 1}).status_code == 404

    ledger = client.get("/admin/inventory/205/ledger").json()
    assert [e["event_type"] for e in ledger] == ["restock"]

    report = client.get("/admin/inventory/205/reconcile").json()
    assert report["consistent"] is True
    assert report["stock_quantity"] == 10

    low = client.get("/admin/inventory/low-stock", params={"threshold": 5}).json()
    assert [p["product_id"] for p in low] == [101]


def test_low_stock_without_threshold_uses_product_thresholds(client, make_product):
    make_product(300, stock=8, threshold=10, name="Rye Bread")

    low = client.get("/admin/inventory/low-stock").json()

    assert [(p["product_id"], p["low_stock_threshold"]) for p in low] == [(300, 10)]


def test_checkout_succeeds_when_cart_cannot_be_cleared(client, cart_repo, monkeypatch):
    client.post("/cart/items", json={"product_id": 101, "quantity": 1}, headers=ALICE)

    def broken_delete(session_id):
        raise redis.ConnectionError("connection reset")

    monkeypatch.setattr(cart_repo, "delete", broken_delete)

    res = client.post("/orders/checkout", json=CHECKOUT, headers=ALICE)

    assert res.status_code == 201
    assert [o["id"] for o in client.get("/orders", headers=ALICE).json()] == [res.json()["order_id"]]
