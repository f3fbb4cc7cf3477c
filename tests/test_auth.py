import re
from datetime import datetime, timedelta

from conftest import make_user
from ddm_jewellers.core.extensions import db, mail
from ddm_jewellers.models.userModel import User, PasswordResetToken, UserActivityLog

SIGNUP = {
    "first_name": "Priya",
    "last_name": "Sharma",
    "email": "Priya@Example.com",
    "password": "secret123",
    "confirm_password": "secret123",
}


def test_customer_signup_sends_verification(client):
    with mail.record_messages() as outbox:
        resp = client.post("/api/auth/signup/customer", json=SIGNUP)
    assert resp.status_code == 201
    user = resp.get_json()["user"]
    assert user["email"] == "priya@example.com"
    assert user["role"] == "customer"
    assert user["is_approved"] is True
    assert user["is_email_verified"] is False
    assert len(outbox) == 1
    assert outbox[0].recipients == ["priya@example.com"]

    token = db.session.get(User, user["id"]).email_verification_token
    assert client.get(f"/api/auth/verify-email/{token}").status_code == 200
    assert db.session.get(User, user["id"]).is_email_verified is True
    assert client.get(f"/api/auth/verify-email/{token}").status_code == 400


def test_verification_email_escapes_name(client):
    with mail.record_messages() as outbox:
        client.post("/api/auth/signup/customer", json=dict(SIGNUP, first_name="<b>Priya</b>"))
    assert "Hi &lt;b&gt;Priya&lt;/b&gt;," in outbox[0].html
    assert "<b>Priya</b>" not in outbox[0].html


def test_signup_validation(client):
    assert client.post("/api/auth/signup/customer", json={**SIGNUP, "confirm_password": "other123"}).status_code == 400
    assert client.post("/api/auth/signup/customer", json={**SIGNUP, "password": "abc", "confirm_password": "abc"}).status_code == 400
    assert client.post("/api/auth/signup/customer", json={**SIGNUP, "email": "not-an-email"}).status_code == 400
    assert client.post("/api/auth/signup/customer", json={"email": "a@b.com"}).status_code == 400


def test_duplicate_email_conflicts(client):
    client.post("/api/auth/signup/customer", json=SIGNUP)
    resp = client.post("/api/auth/signup/customer", json={**SIGNUP, "email": "priya@example.com"})
    assert resp.status_code == 409


def test_wholesaler_signup_awaits_approval(client):
    assert client.post("/api/auth/signup/wholesaler", json=SIGNUP).status_code == 400
    resp = client.post("/api/auth/signup/wholesaler", json={**SIGNUP, "business_name": "Shree Gems"})
    assert resp.status_code == 201
    user = resp.get_json()["user"]
    assert user["role"] == "wholesaler"
    assert user["is_approved"] is False
    assert user["business_name"] == "Shree Gems"


def test_signin_and_profile(client, customer):
    resp = client.post("/api/auth/signin", json={"email": "CUSTOMER@example.com", "password": "password123"})
    assert resp.status_code == 200
    data = resp.get_json()
    assert data["user"]["id"] == customer.id

    profile = client.get("/api/auth/user", headers={"Authorization": f"Bearer {data['access_token']}"})
    assert profile.get_json()["email"] == "customer@example.com"
    assert db.session.get(User, customer.id).last_login_at is not None

    actions = [log.action for log in UserActivityLog.query.filter_by(user_id=customer.id)]
    assert actions == ["login"]


def test_signin_failures(client, customer):
    resp = client.post("/api/auth/signin", json={"email": "customer@example.com", "password": "wrong-pass"})
    assert resp.status_code == 401
    assert UserActivityLog.query.filter_by(user_id=customer.id, action="failed_login").count() == 1

    assert client.post("/api/auth/signin", json={"email": "nobody@example.com", "password": "x"}).status_code == 401
    assert client.post("/api/auth/signin", json={}).status_code == 400

    make_user("sleepy@example.com", is_active=False)
    resp = client.post("/api/auth/signin", json={"email": "sleepy@example.com", "password": "password123"})
    assert resp.status_code == 403


def test_invalid_token_is_rejected(client):
    resp = client.get("/api/auth/user", headers={"Authorization": "Bearer not-a-token"})
    assert resp.status_code == 401


def test_password_reset_flow(client, customer):
    with mail.record_messages() as outbox:
        resp = client.post("/api/auth/forgot-password", json={"email": "customer@example.com"})
    assert resp.status_code == 200
    otp = re.search(r"<b>(\d{6})</b>", outbox[0].html).group(1)

    wrong = client.post("/api/auth/reset-password",
                        json={"email": "customer@example.com", "otp": "000000", "new_password": "fresh-pass"})
    assert wrong.status_code == 400

    resp = client.post("/api/auth/reset-password",
                       json={"email": "customer@example.com", "otp": otp, "new_password": "fresh-pass"})
    assert resp.status_code == 200
    assert PasswordResetToken.query.count() == 0

    assert client.post("/api/auth/signin",
                       json={"email": "customer@example.com", "password": "fresh-pass"}).status_code == 200


def test_forgot_password_does_not_reveal_accounts(client):
    with mail.record_messages() as outbox:
        resp = client.post("/api/auth/forgot-password", json={"email": "ghost@example.com"})
    assert resp.status_code == 200
    assert outbox == []


def test_expired_otp_is_rejected(client, customer):
    db.session.add(PasswordResetToken(email="customer@example.com", otp_code="123456",
                                      expires_at=datetime.utcnow() - timedelta(minutes=1)))
    db.session.commit()
    resp = client.post("/api/auth/reset-password",
                       json={"email": "customer@example.com", "otp": "123456", "new_password": "fresh-pass"})
    assert resp.status_code == 400
