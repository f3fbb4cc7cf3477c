from functools import wraps

from ddm_jewellers.core.imports import Blueprint, jsonify, request, datetime, func, SQLAlchemyError
from ddm_jewellers.core.extensions import db
from ddm_jewellers.core.security import current_user_id, role_required, admin_required
from ddm_jewellers.core.errors import InvalidTransition
from ddm_jewellers.models.userModel import User
from ddm_jewellers.models.wholesalerModels import WholesalerDesign
from ddm_jewellers.models.wishlistModels import Wishlist
from ddm_jewellers.services.emails import send_wholesaler_decision_email
from ddm_jewellers.services.pricing import is_non_negative_number, money
from ddm_jewellers.services.uploads import upload_file

wholesaler_bp = Blueprint('wholesaler', __name__)

DESIGN_STATUSES = ["pending", "approved", "rejected"]


def approved_wholesaler_required(fn):
    @wraps(fn)
    @role_required("wholesaler")
    def wrapper(*args, **kwargs):
        user = db.session.get(User, current_user_id())
        if not user or not user.is_approved:
            return jsonify({"message": "Wholesaler account is awaiting approval"}), 403
        return fn(*args, **kwargs)
    return wrapper


def serialize_design(design):
    return {
        "id": design.id,
        "wholesaler_id": design.wholesaler_id,
        "business_name": design.wholesaler.business_name if design.wholesaler else None,
        "title": design.title,
        "description": design.description,
        "image_url": design.image_url,
        "category": design.category,
        "estimated_price": float(design.estimated_price) if design.estimated_price is not None else None,
        "status": design.status,
        "approved_at": design.approved_at.isoformat() if design.approved_at else None,
        "created_at": design.created_at.isoformat() if design.created_at else None,
    }


@wholesaler_bp.route('/api/wholesaler/products', methods=['GET'])
@approved_wholesaler_required
def get_my_designs():
    designs = WholesalerDesign.query.filter_by(wholesaler_id=current_user_id()) \
        .order_by(WholesalerDesign.created_at.desc()).all()
    return jsonify([serialize_design(d) for d in designs]), 200


@wholesaler_bp.route('/api/wholesaler/products', methods=['POST'])
@approved_wholesaler_required
def create_design():
    """
    Wholesaler: submit a design for admin review
    ---
    tags:
      - Wholesaler
    security:
      - Bearer: []
    parameters:
      - name: body
        in: body
        required: true
        schema:
          type: object
          required: [title]
          properties:
            title: { type: string, example: "Polki Bridal Set" }
            description: { type: string }
            image_url: { type: string }
            category: { type: string, example: "Bridal Sets" }
            estimated_price: { type: number, example: 250000 }
    responses:
      201:
        description: Design submitted (pending review)
      403:
        description: Wholesaler not approved
    """
    data = request.get_json() or {}
    if not data.get('title'):
        return jsonify({"message": "Title is required"}), 400
    estimated_price = data.get('estimated_price')
    if estimated_price is not None:
        if not is_non_negative_number(estimated_price):
            return jsonify({"message": "Estimated price must be a non-negative number"}), 400
        estimated_price = money(estimated_price)

    design = WholesalerDesign(
        wholesaler_id=current_user_id(),
        title=data['title'],
        description=data.get('description'),
        image_url=data.get('image_url'),
        category=data.get('category'),
        estimated_price=estimated_price,
        status="pending",
    )
    try:
        db.session.add(design)
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        return jsonify({"message": "Error saving design"}), 500
    return jsonify(serialize_design(design)), 201


@wholesaler_bp.route('/api/wholesaler/products/upload', methods=['POST'])
@approved_wholesaler_required
def upload_design_image():
    url = upload_file(request.files.get('image'), folder="ddm/wholesaler-designs")
    return jsonify({"message": "Image uploaded", "image_url": url}), 201


@wholesaler_bp.route('/api/wholesaler/products/<int:design_id>', methods=['DELETE'])
@approved_wholesaler_required
def delete_design(design_id):
    design = WholesalerDesign.query.filter_by(id=design_id, wholesaler_id=current_user_id()).first()
    if not design:
        return jsonify({"message": "Design not found"}), 404

    Wishlist.query.filter_by(wholesaler_design_id=design.id).delete()
    db.session.delete(design)
    db.session.commit()
    return jsonify({"message": "Design deleted"}), 200


@wholesaler_bp.route('/api/wholesaler/stats', methods=['GET'])
@approved_wholesaler_required
def get_wholesaler_stats():
    counts = dict(
        db.session.query(WholesalerDesign.status, func.count(WholesalerDesign.id))
        .filter(WholesalerDesign.wholesaler_id == current_user_id())
        .group_by(WholesalerDesign.status)
        .all()
    )
    wishlisted = Wishlist.query.join(WholesalerDesign).filter(
        WholesalerDesign.wholesaler_id == current_user_id()
    ).count()
    return jsonify({
        "total_designs": sum(counts.values()),
        "approved": counts.get("approved", 0),
        "pending": counts.get("pending", 0),
        "rejected": counts.get("rejected", 0),
        "wishlisted": wishlisted,
    }), 200


@wholesaler_bp.route('/api/designs', methods=['GET'])
def get_public_designs():
    query = WholesalerDesign.query.filter_by(status="approved")
    category = request.args.get('category')
    if category:
        query = query.filter_by(category=category)
    designs = query.order_by(WholesalerDesign.approved_at.desc()).all()
    return jsonify([serialize_design(d) for d in designs]), 200


@wholesaler_bp.route('/api/admin/wholesalers/pending', methods=['GET'])
@admin_required
def get_pending_wholesalers():
    users = User.query.filter_by(role="wholesaler", is_approved=False, is_active=True) \
        .order_by(User.created_at).all()
    return jsonify([
        {
            "id": u.id,
            "email": u.email,
            "name": u.full_name,
            "phone": u.phone,
            "business_name": u.business_name,
            "business_address": u.business_address,
            "gst_number": u.gst_number,
            "created_at": u.created_at.isoformat() if u.created_at else None,
        }
        for u in users
    ]), 200


def _wholesaler_or_404(user_id):
    user = db.session.get(User, user_id)
    if not user or user.role != "wholesaler":
        return None
    return user


@wholesaler_bp.route('/api/admin/wholesalers/<int:user_id>/approve', methods=['POST'])
@admin_required
def approve_wholesaler(user_id):
    """
    Admin: approve a wholesaler account
    ---
    tags:
      - Admin Wholesalers
    security:
      - Bearer: []
    parameters:
      - name: user_id
        in: path
        type: integer
        required: true
    responses:
      200:
        description: Wholesaler approved
      404:
        description: Wholesaler not found
    """
    user = _wholesaler_or_404(user_id)
    if not user:
        return jsonify({"message": "Wholesaler not found"}), 404

    user.is_approved = True
    user.approved_by = current_user_id()
    user.approved_at = datetime.utcnow()
    db.session.commit()
    send_wholesaler_decision_email(user, approved=True)
    return jsonify({"message": "Wholesaler approved"}), 200


@wholesaler_bp.route('/api/admin/wholesalers/<int:user_id>/reject', methods=['POST'])
@admin_required
def reject_wholesaler(user_id):
    user = _wholesaler_or_404(user_id)
    if not user:
        return jsonify({"message": "Wholesaler not found"}), 404

    user.is_approved = False
    user.is_active = False
    db.session.commit()
    send_wholesaler_decision_email(user, approved=False)
    return jsonify({"message": "Wholesaler rejected"}), 200


@wholesaler_bp.route('/api/admin/designs', methods=['GET'])
@admin_required
def admin_get_designs():
    query = WholesalerDesign.query
    status = request.args.get('status')
    if status:
        query = query.filter_by(status=status)
    designs = query.order_by(WholesalerDesign.created_at.desc()).all()
    return jsonify([serialize_design(d) for d in designs]), 200


def _review_design(design_id, status):
    design = db.session.get(WholesalerDesign, design_id)
    if not design:
        return jsonify({"message": "Design not found"}), 404
    if design.status != "pending":
        raise InvalidTransition(f"Design is already {design.status}")

    design.status = status
    design.approved_by = current_user_id()
    design.approved_at = datetime.utcnow()
    db.session.commit()
    return jsonify({"message": f"Design {status}", "design": serialize_design(design)}), 200


@wholesaler_bp.route('/api/admin/designs/<int:design_id>/approve', methods=['POST'])
@admin_required
def approve_design(design_id):
    return _review_design(design_id, "approved")


@wholesaler_bp.route('/api/admin/designs/<int:design_id>/reject', methods=['POST'])
@admin_required
def reject_design(design_id):
    return _review_design(design_id, "rejected")
