from ddm_jewellers.core.extensions import db
from ddm_jewellers.core.imports import datetime

ORDER_STATUSES = ["pending", "confirmed", "processing", "shipped", "delivered", "cancelled"]
PAYMENT_STATUSES = ["pending", "paid", "failed", "refunded"]


class Order(db.Model):
    __tablename__ = "orders"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    status = db.Column(db.String(20), default="pending")
    payment_status = db.Column(db.String(20), default="pending")
    payment_method = db.Column(db.String(50))

    subtotal = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    shipping_amount = db.Column(db.Numeric(10, 2), nullable=False, default=0)
    exchange_discount = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    corporate_discount = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    total_amount = db.Column(db.Numeric(12, 2), nullable=False)

    shipping_address = db.Column(db.JSON)
    billing_address = db.Column(db.JSON)
    corporate_code = db.Column(db.String(20))
    notes = db.Column(db.Text)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    order_items = db.relationship("OrderItem", backref="order", cascade="all, delete-orphan")
    user = db.relationship("User", backref="orders")


class OrderItem(db.Model):
    __tablename__ = "order_items"

    id = db.Column(db.Integer, primary_key=True)
    order_id = db.Column(db.Integer, db.ForeignKey("orders.id", ondelete="CASCADE"), nullable=False)
    product_id = db.Column(db.Integer, db.ForeignKey("products.id"), nullable=True)
    product_name = db.Column(db.String(200), nullable=False)  # snapshot of product name
    quantity = db.Column(db.Integer, nullable=False)
    price = db.Column(db.Numeric(12, 2), nullable=False)  # unit price incl. GST

    weight_in_grams = db.Column(db.Numeric(8, 3))
    rate_per_gram = db.Column(db.Numeric(10, 2))
    metal_cost = db.Column(db.Numeric(12, 2))
    making_charges = db.Column(db.Numeric(10, 2))
    gemstones_cost = db.Column(db.Numeric(10, 2))
    diamonds_cost = db.Column(db.Numeric(10, 2))
    gst_amount = db.Column(db.Numeric(10, 2))
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    product = db.relationship("Product")
