from ddm_jewellers.core.imports import Blueprint, jsonify, jwt_required, request
from ddm_jewellers.core.extensions import db
from ddm_jewellers.core.security import current_user_id, is_admin, admin_required
from ddm_jewellers.models.orderModels import Order, ORDER_STATUSES, PAYMENT_STATUSES
from ddm_jewellers.services.checkout import place_order, update_order_status

orders_bp = Blueprint('orders', __name__)


def _money(value):
    return float(value) if value is not None else None


def serialize_order(order):
    return {
        "id": order.id,
        "user_id": order.user_id,
        "customer_name": order.user.full_name if order.user else None,
        "status": order.status,
        "payment_status": order.payment_status,
        "payment_method": order.payment_method,
        "subtotal": _money(order.subtotal),
        "shipping_amount": _money(order.shipping_amount),
        "exchange_discount": _money(order.exchange_discount),
        "corporate_discount": _money(order.corporate_discount),
        "total_amount": _money(order.total_amount),
        "shipping_address": order.shipping_address,
        "corporate_code": order.corporate_code,
        "notes": order.notes,
        "created_at": order.created_at.isoformat() if order.created_at else None,
        "items": [
            {
                "id": item.id,
                "product_id": item.product_id,
                "product_name": item.product_name,
                "quantity": item.quantity,
                "price": _money(item.price),
                "weight_in_grams": _money(item.weight_in_grams),
                "rate_per_gram": _money(item.rate_per_gram),
                "metal_cost": _money(item.metal_cost),
                "making_charges": _money(item.making_charges),
                "gemstones_cost": _money(item.gemstones_cost),
                "diamonds_cost": _money(item.diamonds_cost),
                "gst_amount": _money(item.gst_amount),
            }
            for item in order.order_items
        ],
    }


@orders_bp.route('/api/orders', methods=['POST'])
@jwt_required()
def create_order():
    """
    Checkout: place an order from the cart or an explicit item list
    ---
    tags:
      - Orders
    security:
      - Bearer: []
    parameters:
      - name: body
        in: body
        required: true
        schema:
          type: object
          required: [shipping_address]
          properties:
            shipping_address:
              type: object
              properties:
                name: { type: string }
                address: { type: string }
                city: { type: string }
                state: { type: string }
                postal_code: { type: string }
                phone: { type: string }
            order_items:
              type: array
              items:
                type: object
                properties:
                  product_id: { type: integer }
                  quantity: { type: integer }
            exchange_request_id: { type: integer }
            corporate_code: { type: string, example: "CORP1234567890" }
            payment_method: { type: string, example: "upi" }
    responses:
      201:
        description: Order placed
      400:
        description: Invalid address, empty cart or insufficient stock
      404:
        description: Unknown exchange request or corporate code
      409:
        description: Exchange request not approved or already redeemed
    """
    data = request.get_json() or {}
    order = place_order(
        current_user_id(),
        data.get('shipping_address'),
        order_items=data.get('order_items'),
        exchange_request_id=data.get('exchange_request_id'),
        corporate_code=data.get('corporate_code'),
        payment_method=data.get('payment_method'),
        notes=data.get('notes'),
    )
    return jsonify({"message": "Order placed successfully", "order": serialize_order(order)}), 201


@orders_bp.route('/api/orders', methods=['GET'])
@jwt_required()
def get_orders():
    query = Order.query
    if not is_admin():
        query = query.filter_by(user_id=current_user_id())
    status = request.args.get('status')
    if status:
        query = query.filter_by(status=status)
    orders = query.order_by(Order.created_at.desc()).all()
    return jsonify([serialize_order(o) for o in orders]), 200


@orders_bp.route('/api/orders/<int:order_id>', methods=['GET'])
@jwt_required()
def get_order(order_id):
    order = db.session.get(Order, order_id)
    if not order:
        return jsonify({"message": "Order not found"}), 404
    if order.user_id != current_user_id() and not is_admin():
        return jsonify({"message": "Unauthorized"}), 403
    return jsonify(serialize_order(order)), 200


@orders_bp.route('/api/admin/orders', methods=['GET'])
@admin_required
def admin_get_orders():
    query = Order.query
    status = request.args.get('status')
    if status:
        query = query.filter_by(status=status)
    orders = query.order_by(Order.created_at.desc()).all()
    return jsonify([serialize_order(o) for o in orders]), 200


@orders_bp.route('/api/orders/<int:order_id>/status', methods=['PUT'])
@orders_bp.route('/api/admin/orders/<int:order_id>/status', methods=['PUT'])
@admin_required
def set_order_status(order_id):
    """
    Admin: update an order's status
    ---
    tags:
      - Orders
    security:
      - Bearer: []
    parameters:
      - name: order_id
        in: path
        type: integer
        required: true
      - name: body
        in: body
        required: true
        schema:
          type: object
          required: [status]
          properties:
            status:
              type: string
              enum: [pending, confirmed, processing, shipped, delivered, cancelled]
            payment_status:
              type: string
              enum: [pending, paid, failed, refunded]
    responses:
      200:
        description: Status updated
      400:
        description: Invalid status
      404:
        description: Order not found
    """
    data = request.get_json() or {}
    status = data.get('status')
    payment_status = data.get('payment_status')
    if status not in ORDER_STATUSES:
        return jsonify({"message": f"Status must be one of {', '.join(ORDER_STATUSES)}"}), 400
    if payment_status is not None and payment_status not in PAYMENT_STATUSES:
        return jsonify({"message": f"Payment status must be one of {', '.join(PAYMENT_STATUSES)}"}), 400

    order = db.session.get(Order, order_id)
    if not order:
        return jsonify({"message": "Order not found"}), 404

    update_order_status(order, status, payment_status)
    return jsonify({"message": "Order status updated", "order": serialize_order(order)}), 200
