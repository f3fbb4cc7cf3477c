from ddm_jewellers.core.imports import Blueprint, jsonify, jwt_required, request
from ddm_jewellers.core.extensions import db
from ddm_jewellers.core.security import current_user_id
from ddm_jewellers.models.catalogModels import Product
from ddm_jewellers.models.wholesalerModels import WholesalerDesign
from ddm_jewellers.models.wishlistModels import Wishlist
from ddm_jewellers.routes.catalog import serialize_product
from ddm_jewellers.routes.wholesaler import serialize_design
from ddm_jewellers.services.market_rates import get_current_rates

wishlist_bp = Blueprint('wishlist', __name__)


def serialize_entry(entry, rates=None):
    return {
        "id": entry.id,
        "product_id": entry.product_id,
        "wholesaler_design_id": entry.wholesaler_design_id,
        "product": serialize_product(entry.product, rates) if entry.product else None,
        "design": serialize_design(entry.design) if entry.design else None,
        "created_at": entry.created_at.isoformat() if entry.created_at else None,
    }


@wishlist_bp.route('/api/wishlist', methods=['GET'])
@jwt_required()
def get_wishlist():
    """
    Get the current user's wishlist
    ---
    tags:
      - Wishlist
    security:
      - Bearer: []
    responses:
      200:
        description: Saved products and designs
    """
    entries = Wishlist.query.filter_by(user_id=current_user_id()).order_by(Wishlist.created_at.desc()).all()
    rates = get_current_rates()
    return jsonify([serialize_entry(e, rates) for e in entries]), 200


@wishlist_bp.route('/api/wishlist', methods=['POST'])
@jwt_required()
def add_to_wishlist():
    """
    Save a product or wholesaler design
    ---
    tags:
      - Wishlist
    security:
      - Bearer: []
    parameters:
      - name: body
        in: body
        required: true
        schema:
          type: object
          properties:
            product_id: { type: integer }
            wholesaler_design_id: { type: integer }
    responses:
      201:
        description: Added
      200:
        description: Already in wishlist
      400:
        description: Neither or both ids given
      404:
        description: Item not found
    """
    data = request.get_json() or {}
    product_id = data.get('product_id')
    design_id = data.get('wholesaler_design_id')

    if (product_id is None) == (design_id is None):
        return jsonify({"message": "Provide either product_id or wholesaler_design_id"}), 400

    if product_id is not None and not Product.query.filter_by(id=product_id, is_active=True).first():
        return jsonify({"message": "Product not found"}), 404
    if design_id is not None and not WholesalerDesign.query.filter_by(id=design_id, status="approved").first():
        return jsonify({"message": "Design not found"}), 404

    user_id = current_user_id()
    existing = Wishlist.query.filter_by(user_id=user_id, product_id=product_id, wholesaler_design_id=design_id).first()
    if existing:
        return jsonify({"message": "Already in wishlist", "item": serialize_entry(existing, get_current_rates())}), 200

    entry = Wishlist(user_id=user_id, product_id=product_id, wholesaler_design_id=design_id)
    db.session.add(entry)
    db.session.commit()
    return jsonify({"message": "Added to wishlist", "item": serialize_entry(entry, get_current_rates())}), 201


@wishlist_bp.route('/api/wishlist/<int:entry_id>', methods=['DELETE'])
@jwt_required()
def remove_from_wishlist(entry_id):
    entry = Wishlist.query.filter_by(id=entry_id, user_id=current_user_id()).first()
    if not entry:
        return jsonify({"message": "Wishlist item not found"}), 404

    db.session.delete(entry)
    db.session.commit()
    return jsonify({"message": "Removed from wishlist"}), 200
