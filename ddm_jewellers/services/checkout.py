"""Checkout totals and order creation."""
import logging

from ddm_jewellers.core.extensions import db
from ddm_jewellers.core.imports import current_app, datetime, Decimal
from ddm_jewellers.core.errors import ValidationFailed, NotFound, InvalidTransition
from ddm_jewellers.models.catalogModels import Product
from ddm_jewellers.models.cartModels import Cart, CartItem
from ddm_jewellers.models.orderModels import Order, OrderItem
from ddm_jewellers.models.exchangeModels import ExchangeRequest
from ddm_jewellers.models.corporateModels import CorporateRegistration
from ddm_jewellers.services.pricing import money, to_decimal, price_product
from ddm_jewellers.services.market_rates import get_current_rates

logger = logging.getLogger(__name__)

REQUIRED_ADDRESS_FIELDS = ["name", "address", "city", "state", "postal_code", "phone"]


def shipping_for(subtotal):
    subtotal = to_decimal(subtotal)
    if subtotal <= 0:
        return Decimal("0.00")
    threshold = to_decimal(current_app.config.get("FREE_SHIPPING_THRESHOLD", 25000))
    if subtotal > threshold:
        return Decimal("0.00")
    return money(current_app.config.get("SHIPPING_FEE", 500))


def checkout_totals(subtotal, exchange_discount=0, corporate_discount=0):
    """total = subtotal + shipping - discounts, never below zero."""
    subtotal = money(subtotal)
    shipping = shipping_for(subtotal)
    exchange_discount = money(exchange_discount)
    corporate_discount = money(corporate_discount)
    total = subtotal + shipping - exchange_discount - corporate_discount
    return {
        "subtotal": subtotal,
        "shipping": shipping,
        "exchange_discount": exchange_discount,
        "corporate_discount": corporate_discount,
        "total": max(total, Decimal("0.00")),
    }


def validate_shipping_address(address):
    if not isinstance(address, dict):
        raise ValidationFailed("Shipping address is required")
    missing = [field for field in REQUIRED_ADDRESS_FIELDS if not str(address.get(field) or "").strip()]
    if missing:
        raise ValidationFailed(f"Please fill in all shipping address fields: {', '.join(missing)}")
    return address


def redeemable_exchange(user_id, exchange_request_id):
    exchange = ExchangeRequest.query.filter_by(id=exchange_request_id, user_id=user_id).first()
    if not exchange:
        raise NotFound("Exchange request not found")
    if exchange.status != "approved":
        raise InvalidTransition("Only approved exchange requests can be applied")
    if exchange.redeemed_order_id is not None:
        raise InvalidTransition("Exchange credit has already been used")
    return exchange


def corporate_for_code(code):
    code = code.strip().upper() if isinstance(code, str) else ""
    corporate = CorporateRegistration.query.filter_by(corporate_code=code, status="approved").first()
    if not corporate:
        raise NotFound("Invalid corporate code")
    return corporate


def _requested_items(user_id, order_items):
    if order_items:
        if not isinstance(order_items, list):
            raise ValidationFailed("Order items must be a list")
        items = []
        for item in order_items:
            if not isinstance(item, dict):
                raise ValidationFailed("Each order item must be an object")
            try:
                quantity = int(item.get("quantity", 1))
            except (TypeError, ValueError):
                raise ValidationFailed("Quantity must be a whole number")
            if quantity < 1:
                raise ValidationFailed("Quantity must be at least 1")
            items.append((item.get("product_id"), quantity))
        return items

    cart = Cart.query.filter_by(user_id=user_id).first()
    if not cart or not cart.cart_items:
        raise ValidationFailed("Order items are required")
    return [(ci.product_id, ci.quantity) for ci in cart.cart_items]


def place_order(user_id, shipping_address, order_items=None, exchange_request_id=None,
                corporate_code=None, payment_method=None, notes=None):
    """Price the items, apply credits, decrement stock and clear the cart in one transaction."""
    validate_shipping_address(shipping_address)
    items = _requested_items(user_id, order_items)
    rates = get_current_rates()

    order = Order(
        user_id=user_id,
        status="pending",
        payment_status="pending",
        payment_method=payment_method,
        shipping_address=shipping_address,
        notes=notes,
        total_amount=0,
    )
    db.session.add(order)

    subtotal = Decimal("0.00")
    for product_id, quantity in items:
        product = Product.query.filter_by(id=product_id, is_active=True).first()
        if not product:
            db.session.rollback()
            raise ValidationFailed(f"Product {product_id} not found")
        if quantity > (product.stock or 0):
            db.session.rollback()
            raise ValidationFailed(f"Only {product.stock or 0} of '{product.name}' available")

        unit = price_product(product, rates)
        line_total = money(unit.final_price * quantity)
        subtotal += line_total
        product.stock = (product.stock or 0) - quantity

        order.order_items.append(OrderItem(
            product_id=product.id,
            product_name=product.name,
            quantity=quantity,
            price=unit.final_price,
            weight_in_grams=unit.weight_in_grams,
            rate_per_gram=unit.rate_per_gram,
            metal_cost=unit.metal_cost,
            making_charges=unit.making_charges,
            gemstones_cost=unit.gemstones_cost,
            diamonds_cost=unit.diamonds_cost,
            gst_amount=unit.gst_amount,
        ))

    exchange = None
    exchange_discount = Decimal("0")
    if exchange_request_id:
        try:
            exchange = redeemable_exchange(user_id, exchange_request_id)
        except Exception:
            db.session.rollback()
            raise
        exchange_discount = to_decimal(exchange.admin_assigned_value)

    corporate_discount = Decimal("0")
    if corporate_code:
        try:
            corporate = corporate_for_code(corporate_code)
        except NotFound:
            db.session.rollback()
            raise
        percent = to_decimal(current_app.config.get("CORPORATE_DISCOUNT_PERCENT", 10))
        corporate_discount = money(subtotal * percent / 100)
        order.corporate_code = corporate.corporate_code

    totals = checkout_totals(subtotal, exchange_discount, corporate_discount)
    order.subtotal = totals["subtotal"]
    order.shipping_amount = totals["shipping"]
    order.exchange_discount = totals["exchange_discount"]
    order.corporate_discount = totals["corporate_discount"]
    order.total_amount = totals["total"]
    db.session.flush()

    if exchange is not None:
        exchange.redeemed_order_id = order.id
        exchange.redeemed_at = datetime.utcnow()

    cart = Cart.query.filter_by(user_id=user_id).first()
    if cart:
        CartItem.query.filter_by(cart_id=cart.id).delete()

    db.session.commit()
    logger.info(f"Order {order.id} placed by user {user_id}: total {order.total_amount}")
    return order


def update_order_status(order, status, payment_status=None):
    """Apply an admin status change; cancelling returns the items to stock once."""
    if order.status == "cancelled" and status != "cancelled":
        raise InvalidTransition("Cancelled orders cannot be reopened")

    if status == "cancelled" and order.status != "cancelled":
        for item in order.order_items:
            if item.product is not None:
                item.product.stock = (item.product.stock or 0) + item.quantity

    order.status = status
    if payment_status:
        order.payment_status = payment_status
    db.session.commit()
    return order
