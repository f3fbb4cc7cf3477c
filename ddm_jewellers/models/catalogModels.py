from ddm_jewellers.core.extensions import db
from ddm_jewellers.core.imports import datetime


class Category(db.Model):
    __tablename__ = "categories"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False)
    slug = db.Column(db.String(100), unique=True, nullable=False, index=True)
    description = db.Column(db.Text)
    image_url = db.Column(db.String(500))
    parent_id = db.Column(db.Integer, db.ForeignKey("categories.id"), nullable=True)
    product_type = db.Column(db.String(20), default="both")  # real, imitation, both
    sort_order = db.Column(db.Integer, default=0)
    is_active = db.Column(db.Boolean, default=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    parent = db.relationship("Category", remote_side=[id], backref="children")


class Product(db.Model):
    __tablename__ = "products"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text)
    category_id = db.Column(db.Integer, db.ForeignKey("categories.id"), nullable=True)
    image_url = db.Column(db.String(500))
    image_urls = db.Column(db.JSON, default=list)  # frames for the 360 viewer
    price = db.Column(db.Numeric(10, 2))
    product_type = db.Column(db.String(20), nullable=False, default="real")  # real, imitation
    material = db.Column(db.String(100))  # e.g. "22k gold", "silver"
    weight = db.Column(db.Numeric(8, 3))
    making_charges = db.Column(db.Numeric(10, 2), default=0)
    gemstones_cost = db.Column(db.Numeric(10, 2), default=0)
    diamonds_cost = db.Column(db.Numeric(10, 2), default=0)
    silver_billing_mode = db.Column(db.String(20), default="live_rate")  # live_rate, fixed_rate
    fixed_rate_per_gram = db.Column(db.Numeric(10, 2))
    purity = db.Column(db.String(20))
    size = db.Column(db.String(50))
    stock = db.Column(db.Integer, default=0)
    is_featured = db.Column(db.Boolean, default=False)
    is_active = db.Column(db.Boolean, default=True)
    tags = db.Column(db.JSON, default=list)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    category = db.relationship("Category", backref="products")
