from ddm_jewellers.core.extensions import db
from ddm_jewellers.core.imports import datetime


class CareTutorial(db.Model):
    __tablename__ = "care_tutorials"

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text)
    video_url = db.Column(db.String(500))
    thumbnail_url = db.Column(db.String(500))
    category = db.Column(db.String(50))  # cleaning, storage, maintenance
    jewelry_type = db.Column(db.String(50))
    difficulty = db.Column(db.String(20), default="beginner")
    duration = db.Column(db.String(20))
    materials = db.Column(db.JSON, default=list)
    tools = db.Column(db.JSON, default=list)
    steps = db.Column(db.JSON, default=list)
    tips = db.Column(db.JSON, default=list)
    warnings = db.Column(db.JSON, default=list)
    views = db.Column(db.Integer, default=0)
    likes = db.Column(db.Integer, default=0)
    is_featured = db.Column(db.Boolean, default=False)
    is_active = db.Column(db.Boolean, default=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class StoreLocation(db.Model):
    __tablename__ = "store_locations"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(200), nullable=False)
    address = db.Column(db.Text, nullable=False)
    city = db.Column(db.String(100), nullable=False)
    state = db.Column(db.String(100))
    postal_code = db.Column(db.String(20))
    phone = db.Column(db.String(20))
    opening_hours = db.Column(db.String(200))
    latitude = db.Column(db.Float)
    longitude = db.Column(db.Float)
    is_active = db.Column(db.Boolean, default=True)
