from conftest import auth_headers


def test_cart_requires_login(client):
    resp = client.get("/api/cart")
    assert resp.status_code == 401
    assert resp.get_json()["message"] == "Authorization token is missing"


def test_empty_cart(client, customer_headers):
    resp = client.get("/api/cart", headers=customer_headers)
    assert resp.status_code == 200
    data = resp.get_json()
    assert data["cart_items"] == []
    assert data["summary"]["total"] == 0.0


def test_adding_same_product_merges_quantity(client, catalog, customer_headers):
    product_id = catalog["imitation"].id
    client.post("/api/cart", json={"product_id": product_id}, headers=customer_headers)
    resp = client.post("/api/cart", json={"product_id": product_id, "quantity": 2}, headers=customer_headers)
    assert resp.status_code == 201
    assert resp.get_json()["quantity"] == 3

    data = client.get("/api/cart", headers=customer_headers).get_json()
    assert len(data["cart_items"]) == 1
    assert data["cart_items"][0]["line_total"] == 4500.0
    assert data["summary"] == {"item_count": 3, "subtotal": 4500.0, "shipping": 500.0, "total": 5000.0}


def test_quantity_must_be_positive(client, catalog, customer_headers):
    product_id = catalog["imitation"].id
    assert client.post("/api/cart", json={"product_id": product_id, "quantity": 0},
                       headers=customer_headers).status_code == 400
    assert client.post("/api/cart", json={"product_id": product_id, "quantity": "two"},
                       headers=customer_headers).status_code == 400

    item_id = client.post("/api/cart", json={"product_id": product_id},
                          headers=customer_headers).get_json()["id"]
    assert client.put(f"/api/cart/{item_id}", json={"quantity": 0}, headers=customer_headers).status_code == 400
    resp = client.put(f"/api/cart/{item_id}", json={"quantity": 4}, headers=customer_headers)
    assert resp.status_code == 200
    assert resp.get_json()["quantity"] == 4


def test_unknown_or_inactive_product(client, catalog, customer_headers, admin_headers):
    assert client.post("/api/cart", json={"product_id": 999}, headers=customer_headers).status_code == 404

    client.delete(f"/api/admin/products/{catalog['imitation'].id}", headers=admin_headers)
    resp = client.post("/api/cart", json={"product_id": catalog["imitation"].id}, headers=customer_headers)
    assert resp.status_code == 404


def test_cannot_touch_another_users_item(client, catalog, customer_headers, other_customer):
    item_id = client.post("/api/cart", json={"product_id": catalog["gold"].id},
                          headers=customer_headers).get_json()["id"]
    other = auth_headers(other_customer)
    assert client.put(f"/api/cart/{item_id}", json={"quantity": 2}, headers=other).status_code == 404
    assert client.delete(f"/api/cart/{item_id}", headers=other).status_code == 404


def test_remove_and_clear(client, catalog, customer_headers):
    first = client.post("/api/cart", json={"product_id": catalog["gold"].id}, headers=customer_headers).get_json()
    client.post("/api/cart", json={"product_id": catalog["imitation"].id}, headers=customer_headers)

    assert client.delete(f"/api/cart/{first['id']}", headers=customer_headers).status_code == 200
    assert len(client.get("/api/cart", headers=customer_headers).get_json()["cart_items"]) == 1

    assert client.delete("/api/cart", headers=customer_headers).status_code == 200
    assert client.get("/api/cart", headers=customer_headers).get_json()["cart_items"] == []
