"""Old-jewelry exchange requests: submission and one-way admin review."""
from ddm_jewellers.core.extensions import db
from ddm_jewellers.core.imports import datetime
from ddm_jewellers.core.errors import ValidationFailed, NotFound, InvalidTransition
from ddm_jewellers.models.exchangeModels import ExchangeRequest
from ddm_jewellers.models.orderModels import Order
from ddm_jewellers.services.pricing import money


def submit_request(user_id, data):
    jewelry_photo_url = (data.get("jewelry_photo_url") or "").strip()
    bill_photo_url = (data.get("bill_photo_url") or "").strip()
    if not jewelry_photo_url or not bill_photo_url:
        raise ValidationFailed("Both jewelry photo and bill photo are required")

    order_id = data.get("order_id")
    if order_id is not None:
        if not Order.query.filter_by(id=order_id, user_id=user_id).first():
            raise NotFound("Order not found")

    estimated_value = data.get("estimated_value")
    if estimated_value is not None:
        try:
            estimated_value = money(estimated_value)
        except ValueError as e:
            raise ValidationFailed(str(e))
        if estimated_value <= 0:
            raise ValidationFailed("Estimated value must be positive")

    exchange = ExchangeRequest(
        user_id=user_id,
        order_id=order_id,
        jewelry_photo_url=jewelry_photo_url,
        bill_photo_url=bill_photo_url,
        description=data.get("description"),
        estimated_value=estimated_value,
        status="pending",
    )
    db.session.add(exchange)
    db.session.commit()
    return exchange


def _ensure_pending(exchange):
    if exchange.status != "pending":
        raise InvalidTransition(f"Exchange request is already {exchange.status}")


def approve_request(exchange, reviewer_id, admin_assigned_value, admin_notes=None):
    _ensure_pending(exchange)
    try:
        value = money(admin_assigned_value)
    except ValueError as e:
        raise ValidationFailed(str(e))
    if value <= 0:
        raise ValidationFailed("Valid assigned value is required")

    exchange.status = "approved"
    exchange.admin_assigned_value = value
    exchange.admin_notes = admin_notes
    exchange.reviewed_by = reviewer_id
    exchange.reviewed_at = datetime.utcnow()
    db.session.commit()
    return exchange


def reject_request(exchange, reviewer_id, rejection_reason, admin_notes=None):
    _ensure_pending(exchange)
    if rejection_reason is not None and not isinstance(rejection_reason, str):
        raise ValidationFailed("Rejection reason must be text")
    if not (rejection_reason or "").strip():
        raise ValidationFailed("Rejection reason is required")

    exchange.status = "rejected"
    exchange.rejection_reason = rejection_reason.strip()
    exchange.admin_notes = admin_notes
    exchange.reviewed_by = reviewer_id
    exchange.reviewed_at = datetime.utcnow()
    db.session.commit()
    return exchange


def serialize_request(exchange):
    user = exchange.user
    return {
        "id": exchange.id,
        "user_id": exchange.user_id,
        "customer_name": user.full_name if user else None,
        "customer_email": user.email if user else None,
        "order_id": exchange.order_id,
        "jewelry_photo_url": exchange.jewelry_photo_url,
        "bill_photo_url": exchange.bill_photo_url,
        "description": exchange.description,
        "estimated_value": float(exchange.estimated_value) if exchange.estimated_value is not None else None,
        "status": exchange.status,
        "admin_assigned_value": float(exchange.admin_assigned_value) if exchange.admin_assigned_value is not None else None,
        "admin_notes": exchange.admin_notes,
        "rejection_reason": exchange.rejection_reason,
        "reviewed_by": exchange.reviewed_by,
        "reviewed_at": exchange.reviewed_at.isoformat() if exchange.reviewed_at else None,
        "redeemed_order_id": exchange.redeemed_order_id,
        "created_at": exchange.created_at.isoformat() if exchange.created_at else None,
    }
