from ddm_jewellers.core.extensions import db
from ddm_jewellers.core.imports import datetime

class Wishlist(db.Model):
    __tablename__ = "wishlist"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id', ondelete="CASCADE"), nullable=False)
    product_id = db.Column(db.Integer, db.ForeignKey('products.id', ondelete="CASCADE"), nullable=True)
    wholesaler_design_id = db.Column(db.Integer, db.ForeignKey('wholesaler_designs.id', ondelete="CASCADE"), nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    # relationships
    user = db.relationship('User', backref='wishlist')
    product = db.relationship('Product', backref='wishlisted_by')
    design = db.relationship('WholesalerDesign', backref='wishlisted_by')
