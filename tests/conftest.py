import pytest
from flask_jwt_extended import create_access_token

from ddm_jewellers.core.config import TestConfig
from ddm_jewellers.core.extensions import db, bcrypt
from ddm_jewellers.main import create_app
from ddm_jewellers.models.userModel import User
from ddm_jewellers.models.catalogModels import Category, Product
from ddm_jewellers.models.marketModels import MarketRate


@pytest.fixture
def app():
    app = create_app(TestConfig)
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


def make_user(email, role="customer", password="password123", **extra):
    user = User(
        email=email,
        password=bcrypt.generate_password_hash(password).decode("utf-8"),
        first_name=extra.pop("first_name", "Test"),
        last_name=extra.pop("last_name", role.title()),
        role=role,
        is_active=extra.pop("is_active", True),
        is_approved=extra.pop("is_approved", True),
        **extra,
    )
    db.session.add(user)
    db.session.commit()
    return user


def auth_headers(user):
    token = create_access_token(identity=str(user.id), additional_claims={"role": user.role})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def customer(app):
    return make_user("customer@example.com")


@pytest.fixture
def other_customer(app):
    return make_user("other@example.com")


@pytest.fixture
def admin(app):
    return make_user("admin@example.com", role="admin")


@pytest.fixture
def wholesaler(app):
    return make_user("wholesaler@example.com", role="wholesaler", business_name="Shree Gems")


@pytest.fixture
def customer_headers(customer):
    return auth_headers(customer)


@pytest.fixture
def admin_headers(admin):
    return auth_headers(admin)


@pytest.fixture
def wholesaler_headers(wholesaler):
    return auth_headers(wholesaler)


@pytest.fixture
def rates(app):
    row = MarketRate(gold_24k=6800, gold_22k=6200, gold_18k=5100, silver=82.50, currency="INR", source="test")
    db.session.add(row)
    db.session.commit()
    return row


@pytest.fixture
def catalog(app, rates):
    """Necklaces (real + imitation) with one 22k gold product and one imitation piece."""
    necklaces = Category(name="Necklaces", slug="necklaces", product_type="both", sort_order=1)
    rings = Category(name="Rings", slug="rings", product_type="real", sort_order=2)
    fashion = Category(name="Fashion", slug="fashion", product_type="imitation", sort_order=3)
    db.session.add_all([necklaces, rings, fashion])
    db.session.flush()

    gold = Product(
        name="Gold Chain", description="Classic 22k chain", category_id=necklaces.id, product_type="real",
        material="22k gold", purity="22k", weight=10, making_charges=5000, price=70000, stock=5,
        is_featured=True, is_active=True,
    )
    imitation = Product(
        name="Kundan Set", description="Bridal look-alike", category_id=fashion.id, product_type="imitation",
        material="brass", price=1500, stock=10, is_active=True,
    )
    db.session.add_all([gold, imitation])
    db.session.commit()
    return {"necklaces": necklaces, "rings": rings, "fashion": fashion, "gold": gold, "imitation": imitation}


SHIPPING_ADDRESS = {
    "name": "Priya Sharma",
    "address": "12 MG Road",
    "city": "Jaipur",
    "state": "Rajasthan",
    "postal_code": "302001",
    "phone": "9876543210",
}


@pytest.fixture
def shipping_address():
    return dict(SHIPPING_ADDRESS)
