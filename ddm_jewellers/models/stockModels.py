from ddm_jewellers.core.extensions import db
from ddm_jewellers.core.imports import datetime

STOCK_CATEGORIES = ["gold", "silver", "imitation", "gemstones", "diamonds", "raw_materials", "accessories", "packaging"]
STOCK_UNITS = ["pcs", "grams", "kg", "sets", "pairs", "meters", "boxes"]
MOVEMENT_TYPES = ["in", "out", "adjustment", "damaged", "returned"]


class StockItem(db.Model):
    __tablename__ = "stock_items"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(200), nullable=False)
    category = db.Column(db.String(50), nullable=False)
    current_stock = db.Column(db.Integer, default=0, nullable=False)
    min_stock = db.Column(db.Integer, default=0, nullable=False)
    max_stock = db.Column(db.Integer, default=0, nullable=False)
    unit = db.Column(db.String(20), default="pcs", nullable=False)
    cost_price = db.Column(db.Numeric(12, 2))
    selling_price = db.Column(db.Numeric(12, 2))
    description = db.Column(db.Text)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    movements = db.relationship("StockMovement", backref="stock_item", cascade="all, delete-orphan")

    @property
    def is_low_stock(self):
        return self.current_stock <= self.min_stock


class StockMovement(db.Model):
    __tablename__ = "stock_movements"

    id = db.Column(db.Integer, primary_key=True)
    stock_item_id = db.Column(db.Integer, db.ForeignKey("stock_items.id", ondelete="CASCADE"), nullable=False)
    movement_type = db.Column(db.String(20), nullable=False)
    quantity = db.Column(db.Integer, nullable=False)
    stock_before = db.Column(db.Integer, nullable=False)
    stock_after = db.Column(db.Integer, nullable=False)
    reason = db.Column(db.String(255), nullable=False)
    reference = db.Column(db.String(100))
    created_by = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, index=True)

    user = db.relationship("User")
