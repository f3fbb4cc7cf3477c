from ddm_jewellers.core.extensions import db
from ddm_jewellers.core.imports import datetime

METAL_TYPES = ["gold", "silver"]
METAL_PURITIES = ["24k", "22k", "18k", "silver"]
PAYMENT_FREQUENCIES = ["daily", "weekly", "monthly"]
ACCOUNT_STATUSES = ["active", "paused", "completed", "cancelled"]


class GullakAccount(db.Model):
    __tablename__ = "gullak_accounts"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    name = db.Column(db.String(255), nullable=False)
    metal_type = db.Column(db.String(10), nullable=False)
    metal_purity = db.Column(db.String(10), nullable=False)
    payment_amount = db.Column(db.Numeric(10, 2), nullable=False)
    payment_frequency = db.Column(db.String(10), nullable=False)
    payment_day_of_week = db.Column(db.Integer)  # 0-6, Sunday = 0
    payment_day_of_month = db.Column(db.Integer)  # 1-28
    target_metal_weight = db.Column(db.Numeric(10, 3), nullable=False)
    target_amount = db.Column(db.Numeric(12, 2), nullable=False)
    current_balance = db.Column(db.Numeric(12, 2), default=0, nullable=False)
    status = db.Column(db.String(20), default="active", nullable=False)
    auto_pay_enabled = db.Column(db.Boolean, default=True)
    total_payments = db.Column(db.Integer, default=0)
    last_payment_date = db.Column(db.DateTime)
    next_payment_date = db.Column(db.DateTime, index=True)
    completed_at = db.Column(db.DateTime)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    user = db.relationship("User", backref="gullak_accounts")
    transactions = db.relationship(
        "GullakTransaction", backref="account", cascade="all, delete-orphan",
        order_by="GullakTransaction.transaction_date.desc()",
    )


class GullakTransaction(db.Model):
    __tablename__ = "gullak_transactions"

    id = db.Column(db.Integer, primary_key=True)
    account_id = db.Column(db.Integer, db.ForeignKey("gullak_accounts.id"), nullable=False, index=True)
    amount = db.Column(db.Numeric(10, 2), nullable=False)
    type = db.Column(db.String(20), nullable=False)  # deposit, withdrawal, autopay, manual
    metal_rate = db.Column(db.Numeric(10, 2))
    metal_grams = db.Column(db.Numeric(12, 6))
    description = db.Column(db.Text)
    payment_method = db.Column(db.String(50))
    transaction_id = db.Column(db.String(255))
    status = db.Column(db.String(20), default="completed")
    transaction_date = db.Column(db.DateTime, default=datetime.utcnow)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
