from conftest import auth_headers
from ddm_jewellers.core.extensions import db
from ddm_jewellers.models.wholesalerModels import WholesalerDesign


def _design(wholesaler, status):
    design = WholesalerDesign(wholesaler_id=wholesaler.id, title="Jadau Choker", status=status)
    db.session.add(design)
    db.session.commit()
    return design


def test_add_product_once(client, catalog, customer_headers):
    product_id = catalog["gold"].id
    resp = client.post("/api/wishlist", json={"product_id": product_id}, headers=customer_headers)
    assert resp.status_code == 201
    assert resp.get_json()["item"]["product"]["final_price"] == 69010.0

    again = client.post("/api/wishlist", json={"product_id": product_id}, headers=customer_headers)
    assert again.status_code == 200
    assert again.get_json()["message"] == "Already in wishlist"
    assert len(client.get("/api/wishlist", headers=customer_headers).get_json()) == 1


def test_exactly_one_target(client, catalog, wholesaler, customer_headers):
    design = _design(wholesaler, "approved")
    assert client.post("/api/wishlist", json={}, headers=customer_headers).status_code == 400
    both = {"product_id": catalog["gold"].id, "wholesaler_design_id": design.id}
    assert client.post("/api/wishlist", json=both, headers=customer_headers).status_code == 400


def test_only_approved_designs(client, wholesaler, customer_headers):
    pending = _design(wholesaler, "pending")
    approved = _design(wholesaler, "approved")
    assert client.post("/api/wishlist", json={"wholesaler_design_id": pending.id},
                       headers=customer_headers).status_code == 404

    resp = client.post("/api/wishlist", json={"wholesaler_design_id": approved.id}, headers=customer_headers)
    assert resp.status_code == 201
    assert resp.get_json()["item"]["design"]["business_name"] == "Shree Gems"


def test_missing_product(client, customer_headers):
    assert client.post("/api/wishlist", json={"product_id": 404}, headers=customer_headers).status_code == 404


def test_remove_only_own_entries(client, catalog, customer_headers, other_customer):
    entry_id = client.post("/api/wishlist", json={"product_id": catalog["gold"].id},
                           headers=customer_headers).get_json()["item"]["id"]
    assert client.delete(f"/api/wishlist/{entry_id}", headers=auth_headers(other_customer)).status_code == 404
    assert client.delete(f"/api/wishlist/{entry_id}", headers=customer_headers).status_code == 200
    assert client.get("/api/wishlist", headers=customer_headers).get_json() == []
