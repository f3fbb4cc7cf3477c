import io

from conftest import make_user, auth_headers
from ddm_jewellers.core.extensions import db, mail
from ddm_jewellers.models.userModel import User


def _submit(client, headers, title="Polki Bridal Set", **extra):
    return client.post("/api/wholesaler/products", json={"title": title, "category": "Bridal Sets",
                                                         "estimated_price": 250000, **extra}, headers=headers)


def test_unapproved_wholesaler_is_blocked(client):
    pending = make_user("new-wholesaler@example.com", role="wholesaler", is_approved=False, business_name="New Co")
    resp = _submit(client, auth_headers(pending))
    assert resp.status_code == 403
    assert resp.get_json()["message"] == "Wholesaler account is awaiting approval"


def test_customer_cannot_use_wholesaler_routes(client, customer_headers):
    assert client.get("/api/wholesaler/products", headers=customer_headers).status_code == 403


def test_design_submission_and_listing(client, wholesaler_headers):
    resp = _submit(client, wholesaler_headers)
    assert resp.status_code == 201
    design = resp.get_json()
    assert design["status"] == "pending"
    assert design["business_name"] == "Shree Gems"

    assert _submit(client, wholesaler_headers, title="").status_code == 400
    assert _submit(client, wholesaler_headers, estimated_price=-1).status_code == 400
    assert _submit(client, wholesaler_headers, estimated_price="lots").status_code == 400
    assert _submit(client, wholesaler_headers, estimated_price=True).status_code == 400

    mine = client.get("/api/wholesaler/products", headers=wholesaler_headers).get_json()
    assert [d["title"] for d in mine] == ["Polki Bridal Set"]
    # pending designs are not public
    assert client.get("/api/designs").get_json() == []


def test_admin_design_review(client, wholesaler_headers, admin_headers, customer_headers):
    design_id = _submit(client, wholesaler_headers).get_json()["id"]
    rejected_id = _submit(client, wholesaler_headers, title="Plain band").get_json()["id"]

    pending = client.get("/api/admin/designs?status=pending", headers=admin_headers).get_json()
    assert len(pending) == 2

    resp = client.post(f"/api/admin/designs/{design_id}/approve", headers=admin_headers)
    assert resp.get_json()["design"]["status"] == "approved"
    client.post(f"/api/admin/designs/{rejected_id}/reject", headers=admin_headers)

    assert client.post(f"/api/admin/designs/{design_id}/reject", headers=admin_headers).status_code == 409
    assert client.post("/api/admin/designs/999/approve", headers=admin_headers).status_code == 404

    public = client.get("/api/designs").get_json()
    assert [d["title"] for d in public] == ["Polki Bridal Set"]

    client.post("/api/wishlist", json={"wholesaler_design_id": design_id}, headers=customer_headers)
    stats = client.get("/api/wholesaler/stats", headers=wholesaler_headers).get_json()
    assert stats == {"total_designs": 2, "approved": 1, "pending": 0, "rejected": 1, "wishlisted": 1}


def test_deleting_design_clears_wishlists(client, wholesaler_headers, admin_headers, customer_headers):
    design_id = _submit(client, wholesaler_headers).get_json()["id"]
    client.post(f"/api/admin/designs/{design_id}/approve", headers=admin_headers)
    client.post("/api/wishlist", json={"wholesaler_design_id": design_id}, headers=customer_headers)

    assert client.delete(f"/api/wholesaler/products/{design_id}", headers=wholesaler_headers).status_code == 200
    assert client.get("/api/wishlist", headers=customer_headers).get_json() == []


def test_wholesaler_cannot_delete_others_design(client, wholesaler_headers):
    design_id = _submit(client, wholesaler_headers).get_json()["id"]
    rival = make_user("rival@example.com", role="wholesaler", business_name="Rival")
    assert client.delete(f"/api/wholesaler/products/{design_id}", headers=auth_headers(rival)).status_code == 404


def test_admin_approves_wholesaler(client, admin, admin_headers):
    pending = make_user("pending@example.com", role="wholesaler", is_approved=False, business_name="Pending Co")
    listed = client.get("/api/admin/wholesalers/pending", headers=admin_headers).get_json()
    assert [w["business_name"] for w in listed] == ["Pending Co"]

    with mail.record_messages() as outbox:
        resp = client.post(f"/api/admin/wholesalers/{pending.id}/approve", headers=admin_headers)
    assert resp.status_code == 200
    assert outbox[0].recipients == ["pending@example.com"]

    user = db.session.get(User, pending.id)
    assert user.is_approved is True
    assert user.approved_by == admin.id
    assert client.get("/api/admin/wholesalers/pending", headers=admin_headers).get_json() == []


def test_admin_rejects_wholesaler(client, admin_headers, customer):
    pending = make_user("pending@example.com", role="wholesaler", is_approved=False, business_name="Pending Co")
    assert client.post(f"/api/admin/wholesalers/{pending.id}/reject", headers=admin_headers).status_code == 200
    assert db.session.get(User, pending.id).is_active is False
    assert client.post(f"/api/admin/wholesalers/{customer.id}/approve", headers=admin_headers).status_code == 404


def test_upload_without_storage_configured(client, wholesaler_headers):
    data = {"image": (io.BytesIO(b"fake-png"), "design.png")}
    resp = client.post("/api/wholesaler/products/upload", data=data, headers=wholesaler_headers,
                       content_type="multipart/form-data")
    assert resp.status_code == 503

    data = {"image": (io.BytesIO(b"MZ"), "design.exe")}
    resp = client.post("/api/wholesaler/products/upload", data=data, headers=wholesaler_headers,
                       content_type="multipart/form-data")
    assert resp.status_code == 400
