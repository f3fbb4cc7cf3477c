from conftest import make_user
from ddm_jewellers.core.extensions import db
from ddm_jewellers.models.orderModels import Order
from ddm_jewellers.models.stockModels import StockItem
from ddm_jewellers.models.userModel import User


def test_stats(client, catalog, customer, wholesaler, admin_headers):
    make_user("pending@example.com", role="wholesaler", is_approved=False)
    db.session.add_all([
        Order(user_id=customer.id, status="delivered", payment_status="paid", total_amount=69010),
        Order(user_id=customer.id, status="cancelled", payment_status="paid", total_amount=5000),
        Order(user_id=customer.id, status="pending", payment_status="pending", total_amount=1500),
        StockItem(name="Boxes", category="packaging", current_stock=1, min_stock=5, unit="boxes"),
    ])
    db.session.commit()

    stats = client.get("/api/admin/stats", headers=admin_headers).get_json()
    assert stats["users"] == {"customers": 1, "wholesalers": 2, "admins": 1, "total_accounts": 4}
    assert stats["products"] == {"total": 2, "active": 2}
    assert stats["orders"] == 3
    assert stats["revenue"] == 69010.0
    assert stats["pending_wholesalers"] == 1
    assert stats["low_stock_items"] == 1
    assert stats["pending_exchange_requests"] == 0


def test_stats_requires_admin(client, customer_headers):
    assert client.get("/api/admin/stats").status_code == 401
    assert client.get("/api/admin/stats", headers=customer_headers).status_code == 403


def test_list_users(client, customer, wholesaler, admin_headers):
    wholesalers = client.get("/api/admin/users?role=wholesaler", headers=admin_headers).get_json()
    assert [u["email"] for u in wholesalers] == ["wholesaler@example.com"]
    found = client.get("/api/admin/users?search=customer@", headers=admin_headers).get_json()
    assert [u["id"] for u in found] == [customer.id]


def test_deactivate_user(client, admin, customer, admin_headers, customer_headers):
    assert client.get("/api/cart", headers=customer_headers).status_code == 200
    resp = client.patch(f"/api/admin/users/{customer.id}/status", json={"is_active": False}, headers=admin_headers)
    assert resp.status_code == 200
    assert db.session.get(User, customer.id).is_active is False

    signin = client.post("/api/auth/signin", json={"email": "customer@example.com", "password": "password123"})
    assert signin.status_code == 403
    resp = client.get("/api/cart", headers=customer_headers)
    assert resp.status_code == 401
    assert resp.get_json() == {"message": "Account is not active"}

    assert client.patch(f"/api/admin/users/{customer.id}/status", json={"is_active": "no"},
                        headers=admin_headers).status_code == 400
    assert client.patch(f"/api/admin/users/{admin.id}/status", json={"is_active": False},
                        headers=admin_headers).status_code == 400
    assert client.patch("/api/admin/users/999/status", json={"is_active": True},
                        headers=admin_headers).status_code == 404


def test_approve_user(client, admin, admin_headers):
    pending = make_user("pending@example.com", role="wholesaler", is_approved=False)
    resp = client.post(f"/api/admin/users/{pending.id}/approve", headers=admin_headers)
    assert resp.get_json()["user"]["is_approved"] is True
    assert db.session.get(User, pending.id).approved_by == admin.id


def test_unknown_routes_answer_json(client):
    resp = client.get("/api/no-such-endpoint")
    assert resp.status_code == 404
    assert resp.get_json()["message"].startswith("The requested URL was not found")
    assert client.delete("/ping").status_code == 405
