from ddm_jewellers.core.imports import Blueprint, jsonify, jwt_required, request, SQLAlchemyError
from ddm_jewellers.core.extensions import db
from ddm_jewellers.core.security import current_user_id
from ddm_jewellers.models.catalogModels import Product
from ddm_jewellers.models.cartModels import Cart, CartItem
from ddm_jewellers.routes.catalog import serialize_product
from ddm_jewellers.services.checkout import checkout_totals
from ddm_jewellers.services.market_rates import get_current_rates
from ddm_jewellers.services.pricing import price_product

cart_bp = Blueprint("cart", __name__)


def _parse_quantity(value, default=1):
    if value is None:
        return default
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    return value


def _get_or_create_cart(user_id):
    cart = Cart.query.filter_by(user_id=user_id).first()
    if not cart:
        cart = Cart(user_id=user_id)
        db.session.add(cart)
        db.session.flush()
    return cart


def _own_item(item_id):
    return CartItem.query.join(Cart).filter(CartItem.id == item_id, Cart.user_id == current_user_id()).first()


@cart_bp.route('/api/cart', methods=['GET'])
@jwt_required()
def get_cart():
    """
    Get the current user's shopping cart
    ---
    tags:
      - Cart
    security:
      - Bearer: []
    parameters:
      - name: Authorization
        in: header
        description: "JWT token as: Bearer <your_token>"
        required: true
        type: string
    responses:
      200:
        description: Cart retrieved successfully
        schema:
          type: object
          properties:
            cart_items:
              type: array
              items:
                type: object
                properties:
                  id: { type: integer, example: 1 }
                  quantity: { type: integer, example: 2 }
                  line_total: { type: number, example: 2998 }
                  product: { type: object }
            summary:
              type: object
              properties:
                subtotal: { type: number, example: 2998 }
                shipping: { type: number, example: 500 }
                total: { type: number, example: 3498 }
    """
    cart = Cart.query.filter_by(user_id=current_user_id()).first()
    rates = get_current_rates()

    cart_items = []
    subtotal = 0
    for item in (cart.cart_items if cart else []):
        product = item.product
        if not product:
            continue
        line = price_product(product, rates, quantity=item.quantity)
        subtotal += line.final_price
        cart_items.append({
            "id": item.id,
            "quantity": item.quantity,
            "line_total": float(line.final_price),
            "product": serialize_product(product, rates),
        })

    totals = checkout_totals(subtotal)
    return jsonify({
        "cart_items": cart_items,
        "summary": {
            "item_count": sum(i["quantity"] for i in cart_items),
            "subtotal": float(totals["subtotal"]),
            "shipping": float(totals["shipping"]),
            "total": float(totals["total"]),
        },
    }), 200


@cart_bp.route('/api/cart', methods=['POST'])
@jwt_required()
def add_to_cart():
    """
    Add a product to the cart
    ---
    tags:
      - Cart
    security:
      - Bearer: []
    parameters:
      - name: body
        in: body
        required: true
        schema:
          type: object
          required: [product_id]
          properties:
            product_id: { type: integer, example: 1 }
            quantity: { type: integer, example: 1 }
    responses:
      201:
        description: Product added (quantity merged if already in cart)
      400:
        description: Invalid quantity
      404:
        description: Product not found
    """
    data = request.get_json() or {}
    quantity = _parse_quantity(data.get('quantity'))
    if quantity is None or quantity < 1:
        return jsonify({"message": "Quantity must be at least 1"}), 400

    product = Product.query.filter_by(id=data.get('product_id'), is_active=True).first()
    if not product:
        return jsonify({"message": "Product not found"}), 404

    try:
        cart = _get_or_create_cart(current_user_id())
        item = CartItem.query.filter_by(cart_id=cart.id, product_id=product.id).first()
        if item:
            item.quantity += quantity
        else:
            item = CartItem(cart_id=cart.id, product_id=product.id, quantity=quantity)
            db.session.add(item)
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        return jsonify({"message": "Error adding to cart"}), 500

    return jsonify({"message": "Product added to cart", "id": item.id, "quantity": item.quantity}), 201


@cart_bp.route('/api/cart/<int:item_id>', methods=['PUT'])
@jwt_required()
def update_cart_item(item_id):
    data = request.get_json() or {}
    quantity = _parse_quantity(data.get('quantity'), default=None)
    if quantity is None or quantity < 1:
        return jsonify({"message": "Quantity must be at least 1"}), 400

    item = _own_item(item_id)
    if not item:
        return jsonify({"message": "Cart item not found"}), 404

    item.quantity = quantity
    db.session.commit()
    return jsonify({"message": "Cart updated", "id": item.id, "quantity": item.quantity}), 200


@cart_bp.route('/api/cart/<int:item_id>', methods=['DELETE'])
@jwt_required()
def remove_cart_item(item_id):
    item = _own_item(item_id)
    if not item:
        return jsonify({"message": "Cart item not found"}), 404

    db.session.delete(item)
    db.session.commit()
    return jsonify({"message": "Item removed from cart"}), 200


@cart_bp.route('/api/cart', methods=['DELETE'])
@jwt_required()
def clear_cart():
    cart = Cart.query.filter_by(user_id=current_user_id()).first()
    if cart:
        CartItem.query.filter_by(cart_id=cart.id).delete()
        db.session.commit()
    return jsonify({"message": "Cart cleared"}), 200
