from ddm_jewellers.core.imports import Blueprint, jsonify, request, datetime, func
from ddm_jewellers.core.extensions import db
from ddm_jewellers.core.security import admin_required, current_user_id
from ddm_jewellers.models.userModel import User
from ddm_jewellers.models.catalogModels import Product
from ddm_jewellers.models.orderModels import Order
from ddm_jewellers.models.exchangeModels import ExchangeRequest
from ddm_jewellers.models.stockModels import StockItem
from ddm_jewellers.routes.auth import serialize_user

admin_bp = Blueprint('admin', __name__)


# =========================
# /api/admin/stats (GET)
# =========================
@admin_bp.route('/api/admin/stats', methods=['GET'])
@admin_required
def get_admin_stats():
    """
    Admin: Get store statistics
    ---
    tags:
      - Admin
    summary: Get store statistics (Admin only)
    description: Returns user, catalog, order and back-office counters.
    security:
      - Bearer: []
    parameters:
      - name: Authorization
        in: header
        description: 'JWT token in format: Bearer <your_token>'
        required: true
        type: string
        default: "Bearer "
    responses:
      200:
        description: Store stats
        schema:
          type: object
          properties:
            users:
              type: object
              properties:
                customers: { type: integer, example: 120 }
                wholesalers: { type: integer, example: 8 }
                admins: { type: integer, example: 2 }
                total_accounts: { type: integer, example: 130 }
            products:
              type: object
              properties:
                total: { type: integer, example: 500 }
                active: { type: integer, example: 420 }
            orders: { type: integer, example: 75 }
            revenue: { type: number, example: 1250000 }
            pending_exchange_requests: { type: integer, example: 3 }
            pending_wholesalers: { type: integer, example: 1 }
            low_stock_items: { type: integer, example: 4 }
      403:
        description: Forbidden
    """
    by_role = dict(db.session.query(User.role, func.count(User.id)).group_by(User.role).all())

    revenue = db.session.query(func.coalesce(func.sum(Order.total_amount), 0)).filter(
        (Order.payment_status == "paid") | (Order.status == "delivered"),
        Order.status != "cancelled",
    ).scalar()

    stats = {
        "users": {
            "customers": by_role.get("customer", 0),
            "wholesalers": by_role.get("wholesaler", 0),
            "admins": by_role.get("admin", 0),
            "total_accounts": sum(by_role.values()),
        },
        "products": {
            "total": Product.query.count(),
            "active": Product.query.filter_by(is_active=True).count(),
        },
        "orders": Order.query.count(),
        "revenue": float(revenue or 0),
        "pending_exchange_requests": ExchangeRequest.query.filter_by(status="pending").count(),
        "pending_wholesalers": User.query.filter_by(role="wholesaler", is_approved=False, is_active=True).count(),
        "low_stock_items": StockItem.query.filter(StockItem.current_stock <= StockItem.min_stock).count(),
    }
    return jsonify(stats), 200


@admin_bp.route('/api/admin/users', methods=['GET'])
@admin_required
def get_users():
    query = User.query
    role = request.args.get('role')
    if role:
        query = query.filter_by(role=role)
    search = request.args.get('search')
    if search:
        like = f"%{search}%"
        query = query.filter(User.email.ilike(like) | User.first_name.ilike(like) | User.last_name.ilike(like))
    users = query.order_by(User.created_at.desc()).all()
    return jsonify([serialize_user(u) for u in users]), 200


@admin_bp.route('/api/admin/users/<int:user_id>/status', methods=['PATCH'])
@admin_required
def set_user_status(user_id):
    """
    Admin: activate or deactivate a user
    ---
    tags:
      - Admin
    security:
      - Bearer: []
    parameters:
      - name: user_id
        in: path
        type: integer
        required: true
      - name: body
        in: body
        required: true
        schema:
          type: object
          required: [is_active]
          properties:
            is_active: { type: boolean, example: false }
    responses:
      200:
        description: Status updated
      400:
        description: is_active missing or an admin tried to deactivate themselves
      404:
        description: User not found
    """
    data = request.get_json() or {}
    if not isinstance(data.get('is_active'), bool):
        return jsonify({"message": "is_active must be true or false"}), 400

    user = db.session.get(User, user_id)
    if not user:
        return jsonify({"message": "User not found"}), 404
    if user.id == current_user_id() and not data['is_active']:
        return jsonify({"message": "You cannot deactivate your own account"}), 400

    user.is_active = data['is_active']
    db.session.commit()
    return jsonify({"message": "User status updated", "user": serialize_user(user)}), 200


@admin_bp.route('/api/admin/users/<int:user_id>/approve', methods=['POST'])
@admin_required
def approve_user(user_id):
    user = db.session.get(User, user_id)
    if not user:
        return jsonify({"message": "User not found"}), 404

    user.is_approved = True
    user.approved_by = current_user_id()
    user.approved_at = datetime.utcnow()
    db.session.commit()
    return jsonify({"message": "User approved", "user": serialize_user(user)}), 200
