from decimal import Decimal

from ddm_jewellers.core.extensions import db
from ddm_jewellers.models.cartModels import Cart
from ddm_jewellers.models.catalogModels import Product
from ddm_jewellers.models.corporateModels import CorporateRegistration
from ddm_jewellers.models.exchangeModels import ExchangeRequest
from ddm_jewellers.services.checkout import checkout_totals

GOLD_CHAIN_PRICE = 69010.0  # 10g x 6200 + 5000 making, plus 3% GST


def test_shipping_free_above_threshold(app):
    totals = checkout_totals(30000)
    assert totals["shipping"] == Decimal("0.00")
    assert totals["total"] == Decimal("30000.00")


def test_shipping_charged_at_or_below_threshold(app):
    assert checkout_totals(25000)["shipping"] == Decimal("500.00")
    assert checkout_totals(1500)["total"] == Decimal("2000.00")


def test_empty_subtotal_has_no_shipping(app):
    totals = checkout_totals(0)
    assert totals["shipping"] == Decimal("0.00")
    assert totals["total"] == Decimal("0.00")


def test_total_never_negative(app):
    totals = checkout_totals(1000, exchange_discount=5000)
    assert totals["total"] == Decimal("0.00")


def test_checkout_from_cart(client, catalog, customer, customer_headers, shipping_address):
    gold = catalog["gold"]
    client.post("/api/cart", json={"product_id": gold.id, "quantity": 2}, headers=customer_headers)

    resp = client.post("/api/orders", json={"shipping_address": shipping_address, "payment_method": "upi"},
                       headers=customer_headers)
    assert resp.status_code == 201
    order = resp.get_json()["order"]
    assert order["subtotal"] == GOLD_CHAIN_PRICE * 2
    assert order["shipping_amount"] == 0.0
    assert order["total_amount"] == GOLD_CHAIN_PRICE * 2

    item = order["items"][0]
    assert item["product_name"] == "Gold Chain"
    assert item["rate_per_gram"] == 6200.0
    assert item["metal_cost"] == 62000.0
    assert item["gst_amount"] == 2010.0
    assert item["price"] == GOLD_CHAIN_PRICE

    assert db.session.get(Product, gold.id).stock == 3
    cart = Cart.query.filter_by(user_id=customer.id).first()
    assert cart.cart_items == []


def test_checkout_with_explicit_items_and_shipping_fee(client, catalog, customer_headers, shipping_address):
    resp = client.post("/api/orders", json={
        "shipping_address": shipping_address,
        "order_items": [{"product_id": catalog["imitation"].id, "quantity": 1}],
    }, headers=customer_headers)
    assert resp.status_code == 201
    order = resp.get_json()["order"]
    assert order["subtotal"] == 1500.0
    assert order["shipping_amount"] == 500.0
    assert order["total_amount"] == 2000.0


def test_checkout_requires_full_address(client, catalog, customer_headers, shipping_address):
    shipping_address["postal_code"] = ""
    resp = client.post("/api/orders", json={
        "shipping_address": shipping_address,
        "order_items": [{"product_id": catalog["imitation"].id, "quantity": 1}],
    }, headers=customer_headers)
    assert resp.status_code == 400
    assert "postal_code" in resp.get_json()["message"]


def test_checkout_with_empty_cart(client, catalog, customer_headers, shipping_address):
    resp = client.post("/api/orders", json={"shipping_address": shipping_address}, headers=customer_headers)
    assert resp.status_code == 400


def test_checkout_rejects_more_than_stock(client, catalog, customer_headers, shipping_address):
    gold = catalog["gold"]
    resp = client.post("/api/orders", json={
        "shipping_address": shipping_address,
        "order_items": [{"product_id": gold.id, "quantity": 6}],
    }, headers=customer_headers)
    assert resp.status_code == 400
    assert db.session.get(Product, gold.id).stock == 5


def test_exchange_credit_applied_once(client, catalog, customer, admin, customer_headers, shipping_address):
    exchange = ExchangeRequest(user_id=customer.id, jewelry_photo_url="j.jpg", bill_photo_url="b.jpg",
                               status="approved", admin_assigned_value=100000, reviewed_by=admin.id)
    db.session.add(exchange)
    db.session.commit()

    payload = {
        "shipping_address": shipping_address,
        "order_items": [{"product_id": catalog["gold"].id, "quantity": 1}],
        "exchange_request_id": exchange.id,
    }
    resp = client.post("/api/orders", json=payload, headers=customer_headers)
    assert resp.status_code == 201
    order = resp.get_json()["order"]
    assert order["exchange_discount"] == 100000.0
    assert order["total_amount"] == 0.0
    assert db.session.get(ExchangeRequest, exchange.id).redeemed_order_id == order["id"]

    again = client.post("/api/orders", json=payload, headers=customer_headers)
    assert again.status_code == 409


def test_pending_exchange_cannot_be_redeemed(client, catalog, customer, customer_headers, shipping_address):
    exchange = ExchangeRequest(user_id=customer.id, jewelry_photo_url="j.jpg", bill_photo_url="b.jpg")
    db.session.add(exchange)
    db.session.commit()

    resp = client.post("/api/orders", json={
        "shipping_address": shipping_address,
        "order_items": [{"product_id": catalog["imitation"].id, "quantity": 1}],
        "exchange_request_id": exchange.id,
    }, headers=customer_headers)
    assert resp.status_code == 409
    assert db.session.get(Product, catalog["imitation"].id).stock == 10


def test_corporate_code_discount(client, catalog, customer_headers, shipping_address):
    db.session.add(CorporateRegistration(company_name="Acme", contact_person_name="A", contact_person_email="a@acme.com",
                                         status="approved", corporate_code="CORP0000000001"))
    db.session.commit()

    resp = client.post("/api/orders", json={
        "shipping_address": shipping_address,
        "order_items": [{"product_id": catalog["gold"].id, "quantity": 1}],
        "corporate_code": "CORP0000000001",
    }, headers=customer_headers)
    assert resp.status_code == 201
    order = resp.get_json()["order"]
    assert order["corporate_discount"] == 6901.0
    assert order["total_amount"] == GOLD_CHAIN_PRICE - 6901.0


def test_unknown_corporate_code(client, catalog, customer_headers, shipping_address):
    resp = client.post("/api/orders", json={
        "shipping_address": shipping_address,
        "order_items": [{"product_id": catalog["imitation"].id, "quantity": 1}],
        "corporate_code": "CORP9999999999",
    }, headers=customer_headers)
    assert resp.status_code == 404


def test_corporate_code_is_case_insensitive(client, catalog, customer_headers, shipping_address):
    db.session.add(CorporateRegistration(company_name="Acme", contact_person_name="A", contact_person_email="a@acme.com",
                                         status="approved", corporate_code="CORP0000000002"))
    db.session.commit()

    assert client.post("/api/corporate/verify-code", json={"corporate_code": " corp0000000002 "}).status_code == 200
    resp = client.post("/api/orders", json={
        "shipping_address": shipping_address,
        "order_items": [{"product_id": catalog["imitation"].id, "quantity": 1}],
        "corporate_code": " corp0000000002 ",
    }, headers=customer_headers)
    assert resp.status_code == 201
    order = resp.get_json()["order"]
    assert order["corporate_code"] == "CORP0000000002"
    assert order["corporate_discount"] == 150.0


def test_malformed_order_items(client, catalog, customer_headers, shipping_address):
    for order_items in ([catalog["imitation"].id], {"product_id": catalog["imitation"].id}, "all"):
        resp = client.post("/api/orders", json={"shipping_address": shipping_address, "order_items": order_items},
                           headers=customer_headers)
        assert resp.status_code == 400
    assert db.session.get(Product, catalog["imitation"].id).stock == 10


def test_cancelling_restores_stock_once(client, catalog, customer_headers, admin_headers, shipping_address):
    gold = catalog["gold"]
    resp = client.post("/api/orders", json={
        "shipping_address": shipping_address,
        "order_items": [{"product_id": gold.id, "quantity": 2}],
    }, headers=customer_headers)
    order_id = resp.get_json()["order"]["id"]
    assert db.session.get(Product, gold.id).stock == 3

    for _ in range(2):
        resp = client.put(f"/api/admin/orders/{order_id}/status", json={"status": "cancelled"}, headers=admin_headers)
        assert resp.status_code == 200
    assert db.session.get(Product, gold.id).stock == 5

    reopen = client.put(f"/api/orders/{order_id}/status", json={"status": "confirmed"}, headers=admin_headers)
    assert reopen.status_code == 409


def test_order_visibility(client, catalog, customer_headers, other_customer, admin_headers, shipping_address):
    resp = client.post("/api/orders", json={
        "shipping_address": shipping_address,
        "order_items": [{"product_id": catalog["imitation"].id, "quantity": 1}],
    }, headers=customer_headers)
    order_id = resp.get_json()["order"]["id"]

    from conftest import auth_headers
    assert client.get(f"/api/orders/{order_id}", headers=auth_headers(other_customer)).status_code == 403
    assert client.get(f"/api/orders/{order_id}", headers=admin_headers).status_code == 200
    assert len(client.get("/api/orders", headers=auth_headers(other_customer)).get_json()) == 0


def test_invalid_status_rejected(client, admin_headers):
    resp = client.put("/api/admin/orders/1/status", json={"status": "lost"}, headers=admin_headers)
    assert resp.status_code == 400


def test_customer_cannot_change_status(client, customer_headers):
    resp = client.put("/api/admin/orders/1/status", json={"status": "shipped"}, headers=customer_headers)
    assert resp.status_code == 403
