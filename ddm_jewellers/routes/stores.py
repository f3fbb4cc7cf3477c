from ddm_jewellers.core.imports import Blueprint, jsonify
from ddm_jewellers.core.extensions import db
from ddm_jewellers.models.contentModels import StoreLocation

stores_bp = Blueprint('stores', __name__)


def seed_store_locations():
    if StoreLocation.query.first():
        print("ℹ️ Store locations already exist.")
        return
    db.session.add(StoreLocation(
        name="DDM Jewellers Flagship",
        address="12 Johari Bazaar",
        city="Jaipur",
        state="Rajasthan",
        postal_code="302003",
        phone="+91 141 000 0000",
        opening_hours="Mon-Sat 10:30-20:30",
        latitude=26.9196,
        longitude=75.8267,
    ))
    db.session.commit()
    print("✅ Store locations seeded successfully")


@stores_bp.route('/api/store-locations', methods=['GET'])
def get_store_locations():
    """
    Active store locations
    ---
    tags:
      - Stores
    responses:
      200:
        description: List of stores
    """
    stores = StoreLocation.query.filter_by(is_active=True).order_by(StoreLocation.city, StoreLocation.name).all()
    return jsonify([
        {
            "id": s.id,
            "name": s.name,
            "address": s.address,
            "city": s.city,
            "state": s.state,
            "postal_code": s.postal_code,
            "phone": s.phone,
            "opening_hours": s.opening_hours,
            "latitude": s.latitude,
            "longitude": s.longitude,
        }
        for s in stores
    ]), 200
