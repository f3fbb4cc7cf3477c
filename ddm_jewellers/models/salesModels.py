from ddm_jewellers.core.extensions import db
from ddm_jewellers.core.imports import datetime

SALE_CATEGORIES = ["gold", "silver", "imitation", "others"]
PAYMENT_MODES = ["cash", "card", "upi", "bank_transfer"]


class OfflineSale(db.Model):
    """An in-store sale entered by staff for the day-book."""
    __tablename__ = "offline_sales"

    id = db.Column(db.Integer, primary_key=True)
    customer_name = db.Column(db.String(200), nullable=False)
    mobile_number = db.Column(db.String(20))
    product_name = db.Column(db.String(200), nullable=False)
    product_category = db.Column(db.String(20), nullable=False)
    weight_grams = db.Column(db.Numeric(8, 3))
    rate_per_gram = db.Column(db.Numeric(10, 2))
    making_charges = db.Column(db.Numeric(10, 2), default=0)
    gemstones_cost = db.Column(db.Numeric(10, 2), default=0)
    diamonds_cost = db.Column(db.Numeric(10, 2), default=0)
    gst_percentage = db.Column(db.Numeric(5, 2), default=3)
    gst_amount = db.Column(db.Numeric(10, 2), default=0)
    total_amount = db.Column(db.Numeric(12, 2), nullable=False)
    payment_mode = db.Column(db.String(20), nullable=False)
    bill_number = db.Column(db.String(50), unique=True, nullable=False)
    sale_date = db.Column(db.DateTime, nullable=False, index=True)
    notes = db.Column(db.Text)
    created_by = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
