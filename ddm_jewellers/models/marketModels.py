from ddm_jewellers.core.extensions import db
from ddm_jewellers.core.imports import datetime


class MarketRate(db.Model):
    """One snapshot of metal rates, INR per gram."""
    __tablename__ = "market_rates"

    id = db.Column(db.Integer, primary_key=True)
    gold_24k = db.Column(db.Numeric(10, 2), nullable=False)
    gold_22k = db.Column(db.Numeric(10, 2), nullable=False)
    gold_18k = db.Column(db.Numeric(10, 2), nullable=False)
    silver = db.Column(db.Numeric(10, 2), nullable=False)
    currency = db.Column(db.String(10), default="INR")
    source = db.Column(db.String(100))
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, index=True)
