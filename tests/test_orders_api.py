import re
from urllib.parse import quote

from sqlmodel import select

from wrapntrack.models.cart import CartItem
from wrapntrack.models.inventory import InventoryItem
from wrapntrack.services.order_service import generate_order_id

ORDER_ID = re.compile(r"^#CO\d{8}-\d{6}-[0-9A-Z]{6}$")


def gift_box_payload(**overrides):
    payload = {
        "name": "Bea Santos",
        "email_address": "bea@gmail.com",
        "telephone": "09171234567",
        "shipping_address": "12 Mabini St, Quezon City",
        "expected_delivery": "2026-12-20",
        "package_name": "Modern Romantic",
        "remarks": "Ribbon in red",
        "budget": 1500,
        "order_quantity": 2,
        "products": [
            {"sku": "PKG-010", "quantity": 2},
            {"sku": "BEV-010", "quantity": 2},
        ],
    }
    payload.update(overrides)
    return payload


def test_generate_order_id_format():
    assert ORDER_ID.match(generate_order_id())


def test_create_order_requires_auth(client, seed):
    res = client.post("/api/orders", json=gift_box_payload())
    assert res.status_code == 401


def test_create_gift_box_order(client, session, seed, customer_headers):
    res = client.post("/api/orders", json=gift_box_payload(), headers=customer_headers)
    assert res.status_code == 201
    body = res.json()
    assert ORDER_ID.match(body["order_id"])
    assert body["status"] == "Order Placed"
    assert body["package_name"] == "Modern Romantic"
    assert body["total_cost"] == 330.0
    assert {(p["sku"], p["quantity"]) for p in body["products"]} == {("PKG-010", 2), ("BEV-010", 2)}

    # curated orders leave stock alone
    assert session.get(InventoryItem, "PKG-010").quantity == 50


def test_gift_box_budget_and_quantity_are_stored(client, seed, customer_headers):
    order_id = client.post("/api/orders", json=gift_box_payload(), headers=customer_headers).json()["order_id"]

    stored = client.get(f"/api/orders/me/{quote(order_id, safe='')}", headers=customer_headers).json()
    assert stored["budget"] == 1500.0
    assert stored["order_quantity"] == 2

    [listed] = client.get("/api/orders/me", headers=customer_headers).json()
    assert listed["budget"] == 1500.0


def test_checkout_order_has_no_budget(client, seed, customer_headers):
    client.post("/api/cart/add", json={"sku": "BC123", "quantity": 1}, headers=customer_headers)
    client.post(
        "/api/cart/checkout",
        json={"shipping_address": "12 Mabini St", "payment_method": "COD"},
        headers=customer_headers,
    )
    [order] = client.get("/api/orders/me", headers=customer_headers).json()
    assert order["budget"] is None
    assert order["order_quantity"] == 1


def test_create_order_rejects_unknown_sku(client, seed, customer_headers):
    payload = gift_box_payload(products=[{"sku": "GHOST-1", "quantity": 1}])
    res = client.post("/api/orders", json=payload, headers=customer_headers)
    assert res.status_code == 400
    assert res.json()["detail"] == "Product with SKU 'GHOST-1' not found in inventory."


def test_create_order_requires_products(client, seed, customer_headers):
    res = client.post("/api/orders", json=gift_box_payload(products=[]), headers=customer_headers)
    assert res.status_code == 400


def test_create_order_rejects_negative_budget(client, seed, customer_headers):
    res = client.post("/api/orders", json=gift_box_payload(budget=-1), headers=customer_headers)
    assert res.status_code == 422


def test_my_orders(client, seed, customer_headers, employee_headers):
    order_id = client.post("/api/orders", json=gift_box_payload(), headers=customer_headers).json()["order_id"]

    mine = client.get("/api/orders/me", headers=customer_headers).json()
    assert [o["order_id"] for o in mine] == [order_id]

    res = client.get(f"/api/orders/me/{quote(order_id, safe='')}", headers=customer_headers)
    assert res.status_code == 200
    assert len(res.json()["products"]) == 2

    assert client.get("/api/orders/me", headers=employee_headers).status_code == 403


def test_checkout_converts_cart(client, session, seed, customer_headers):
    client.post("/api/cart/add", json={"sku": "BC123", "quantity": 2}, headers=customer_headers)
    client.post("/api/cart/add", json={"sku": "FOOD-010", "quantity": 1}, headers=customer_headers)

    res = client.post(
        "/api/cart/checkout",
        json={"shipping_address": "12 Mabini St", "payment_method": "GCash"},
        headers=customer_headers,
    )
    assert res.status_code == 200
    body = res.json()
    assert body["success"] is True
    assert body["message"] == "Order placed successfully"
    assert ORDER_ID.match(body["orderId"])
    assert body["totalCost"] == 385.5

    assert client.get("/api/cart/count", headers=customer_headers).json()["itemCount"] == 0
    session.expire_all()
    assert session.get(InventoryItem, "BC123").quantity == 8
    assert session.get(InventoryItem, "FOOD-010").quantity == 29


def test_checkout_requires_shipping_and_payment(client, seed, customer_headers):
    client.post("/api/cart/add", json={"sku": "BC123", "quantity": 1}, headers=customer_headers)
    res = client.post("/api/cart/checkout", json={"shipping_address": "  "}, headers=customer_headers)
    assert res.status_code == 400
    assert res.json()["detail"] == "Shipping address and payment method are required"


def test_checkout_empty_cart(client, seed, customer_headers):
    res = client.post(
        "/api/cart/checkout",
        json={"shipping_address": "12 Mabini St", "payment_method": "COD"},
        headers=customer_headers,
    )
    assert res.status_code == 400
    assert res.json()["detail"] == "Cart is empty"


def test_checkout_fails_when_stock_ran_out(client, session, seed, customer_headers):
    client.post("/api/cart/add", json={"sku": "KIT-010", "quantity": 3}, headers=customer_headers)
    item = session.get(InventoryItem, "KIT-010")
    item.quantity = 1
    session.add(item)
    session.commit()

    res = client.post(
        "/api/cart/checkout",
        json={"shipping_address": "12 Mabini St", "payment_method": "COD"},
        headers=customer_headers,
    )
    assert res.status_code == 400
    detail = res.json()["detail"]
    assert detail["message"] == "Cart validation failed"
    assert detail["items"][0]["sku"] == "KIT-010"

    # nothing was consumed
    session.expire_all()
    assert len(session.exec(select(CartItem)).all()) == 1


def test_employee_status_flow(client, seed, customer_headers, employee_headers):
    order_id = client.post("/api/orders", json=gift_box_payload(), headers=customer_headers).json()["order_id"]
    path = f"/api/orders/{quote(order_id, safe='')}/status"

    assert client.patch(path, json={"status": "Order Paid"}, headers=customer_headers).status_code == 403

    res = client.patch(path, json={"status": "Order Paid"}, headers=employee_headers)
    assert res.status_code == 200
    assert res.json()["status"] == "Order Paid"

    res = client.patch(path, json={"status": "Completed"}, headers=employee_headers)
    assert res.status_code == 400

    res = client.patch(path, json={"status": "Cancelled"}, headers=employee_headers)
    assert res.json()["status"] == "Cancelled"


def test_cannot_cancel_after_shipping(client, seed, customer_headers, employee_headers):
    order_id = client.post("/api/orders", json=gift_box_payload(), headers=customer_headers).json()["order_id"]
    path = f"/api/orders/{quote(order_id, safe='')}/status"
    for step in ("Order Paid", "To Be Packed", "Order Shipped Out"):
        assert client.patch(path, json={"status": step}, headers=employee_headers).status_code == 200

    res = client.patch(path, json={"status": "Cancelled"}, headers=employee_headers)
    assert res.status_code == 400


def test_employee_order_views(client, seed, customer_headers, employee_headers):
    order_id = client.post("/api/orders", json=gift_box_payload(), headers=customer_headers).json()["order_id"]
    encoded = quote(order_id, safe="")

    assert len(client.get("/api/orders", headers=employee_headers).json()) == 1
    lines = client.get(f"/api/orders/{encoded}/products", headers=employee_headers).json()
    assert sorted(l["line_total"] for l in lines) == [90.0, 240.0]
    assert client.get(f"/api/orders/{encoded}", headers=employee_headers).json()["order_id"] == order_id
    assert client.get("/api/orders/%23CO-missing", headers=employee_headers).status_code == 404
