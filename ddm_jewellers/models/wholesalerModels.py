from ddm_jewellers.core.extensions import db
from ddm_jewellers.core.imports import datetime


class WholesalerDesign(db.Model):
    __tablename__ = "wholesaler_designs"

    id = db.Column(db.Integer, primary_key=True)
    wholesaler_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    title = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text)
    image_url = db.Column(db.String(500))
    category = db.Column(db.String(100))
    estimated_price = db.Column(db.Numeric(10, 2))
    status = db.Column(db.String(20), default="pending")  # pending, approved, rejected
    approved_by = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)
    approved_at = db.Column(db.DateTime)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    wholesaler = db.relationship("User", foreign_keys=[wholesaler_id], backref="designs")
    approver = db.relationship("User", foreign_keys=[approved_by])
