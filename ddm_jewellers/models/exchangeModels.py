from ddm_jewellers.core.extensions import db
from ddm_jewellers.core.imports import datetime

EXCHANGE_STATUSES = ["pending", "approved", "rejected"]


class ExchangeRequest(db.Model):
    __tablename__ = "exchange_requests"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    order_id = db.Column(db.Integer, db.ForeignKey("orders.id"), nullable=True)  # original purchase, if bought here
    jewelry_photo_url = db.Column(db.String(500), nullable=False)
    bill_photo_url = db.Column(db.String(500), nullable=False)
    description = db.Column(db.Text)
    estimated_value = db.Column(db.Numeric(12, 2))

    status = db.Column(db.String(20), default="pending", nullable=False)
    admin_assigned_value = db.Column(db.Numeric(12, 2))
    admin_notes = db.Column(db.Text)
    rejection_reason = db.Column(db.Text)
    reviewed_by = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)
    reviewed_at = db.Column(db.DateTime)

    # set once the approved value has been spent at checkout
    redeemed_order_id = db.Column(db.Integer, db.ForeignKey("orders.id"), nullable=True, unique=True)
    redeemed_at = db.Column(db.DateTime)

    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    user = db.relationship("User", foreign_keys=[user_id], backref="exchange_requests")
    reviewer = db.relationship("User", foreign_keys=[reviewed_by])
    order = db.relationship("Order", foreign_keys=[order_id])
    redeemed_order = db.relationship("Order", foreign_keys=[redeemed_order_id])
