import pytest

from ddm_jewellers.core.errors import ValidationFailed
from ddm_jewellers.services.stock import stock_after_movement


@pytest.mark.parametrize("movement_type,quantity,expected", [
    ("in", 5, 15),
    ("returned", 2, 12),
    ("out", 4, 6),
    ("damaged", 10, 0),
    ("adjustment", 3, 3),
    ("adjustment", 0, 0),
])
def test_stock_after_movement(movement_type, quantity, expected):
    assert stock_after_movement(10, movement_type, quantity) == expected


def test_movement_cannot_go_negative():
    with pytest.raises(ValidationFailed):
        stock_after_movement(3, "out", 4)


def test_movement_needs_positive_quantity():
    with pytest.raises(ValidationFailed):
        stock_after_movement(3, "in", 0)
    with pytest.raises(ValidationFailed):
        stock_after_movement(3, "teleport", 1)


def _create_item(client, headers, **overrides):
    payload = {"name": "22k gold wire", "category": "gold", "current_stock": 10, "min_stock": 5, "unit": "grams"}
    payload.update(overrides)
    return client.post("/api/admin/stock-items", json=payload, headers=headers)


def test_stock_item_crud_and_validation(client, admin_headers):
    resp = _create_item(client, admin_headers)
    assert resp.status_code == 201
    item = resp.get_json()
    assert item["low_stock"] is False

    assert _create_item(client, admin_headers, category="food").status_code == 400
    assert _create_item(client, admin_headers, unit="litres").status_code == 400
    assert _create_item(client, admin_headers, min_stock=-1).status_code == 400

    resp = client.put(f"/api/admin/stock-items/{item['id']}", json={"min_stock": 10}, headers=admin_headers)
    assert resp.get_json()["low_stock"] is True

    assert client.delete(f"/api/admin/stock-items/{item['id']}", headers=admin_headers).status_code == 200
    assert client.get(f"/api/admin/stock-items/{item['id']}", headers=admin_headers).status_code == 404


def test_stock_item_filters(client, admin_headers):
    _create_item(client, admin_headers)
    _create_item(client, admin_headers, name="Velvet boxes", category="packaging", current_stock=2, unit="boxes")

    low = client.get("/api/admin/stock-items?lowStock=true", headers=admin_headers).get_json()
    assert [i["name"] for i in low] == ["Velvet boxes"]
    gold = client.get("/api/admin/stock-items?category=gold", headers=admin_headers).get_json()
    assert [i["name"] for i in gold] == ["22k gold wire"]
    found = client.get("/api/admin/stock-items?search=velvet", headers=admin_headers).get_json()
    assert len(found) == 1


def test_record_movements(client, admin, admin_headers):
    item_id = _create_item(client, admin_headers).get_json()["id"]

    resp = client.post("/api/admin/stock-movements", json={
        "stock_item_id": item_id, "movement_type": "out", "quantity": 4, "reason": "Sold to karigar",
    }, headers=admin_headers)
    assert resp.status_code == 201
    movement = resp.get_json()["movement"]
    assert (movement["stock_before"], movement["stock_after"]) == (10, 6)
    assert movement["created_by"] == admin.id

    too_many = client.post("/api/admin/stock-movements", json={
        "stock_item_id": item_id, "movement_type": "damaged", "quantity": 7, "reason": "Broken",
    }, headers=admin_headers)
    assert too_many.status_code == 400

    no_reason = client.post("/api/admin/stock-movements", json={
        "stock_item_id": item_id, "movement_type": "in", "quantity": 1,
    }, headers=admin_headers)
    assert no_reason.status_code == 400

    client.post("/api/admin/stock-movements", json={
        "stock_item_id": item_id, "movement_type": "adjustment", "quantity": 20, "reason": "Audit",
    }, headers=admin_headers)
    item = client.get(f"/api/admin/stock-items/{item_id}", headers=admin_headers).get_json()
    assert item["current_stock"] == 20

    history = client.get(f"/api/admin/stock-movements?stockItemId={item_id}", headers=admin_headers).get_json()
    assert [m["movement_type"] for m in history] == ["adjustment", "out"]


def test_stock_is_admin_only(client, customer_headers):
    assert client.get("/api/admin/stock-items", headers=customer_headers).status_code == 403
