from ddm_jewellers.core.extensions import db
from ddm_jewellers.core.errors import ValidationFailed
from ddm_jewellers.models.stockModels import StockMovement, MOVEMENT_TYPES


def stock_after_movement(current, movement_type, quantity):
    """Resulting stock level; raises ValidationFailed if it would go negative."""
    if movement_type not in MOVEMENT_TYPES:
        raise ValidationFailed(f"movement_type must be one of {', '.join(MOVEMENT_TYPES)}")
    if movement_type == "adjustment":
        if quantity < 0:
            raise ValidationFailed("Quantity cannot be negative")
        return quantity
    if quantity <= 0:
        raise ValidationFailed("Quantity must be positive")

    if movement_type in ("in", "returned"):
        result = current + quantity
    else:
        result = current - quantity
    if result < 0:
        raise ValidationFailed(f"Insufficient stock: {current} available")
    return result


def record_movement(item, movement_type, quantity, reason, reference=None, created_by=None):
    if not (reason or "").strip():
        raise ValidationFailed("Reason is required")
    try:
        quantity = int(quantity)
    except (TypeError, ValueError):
        raise ValidationFailed("Quantity must be a whole number")

    before = item.current_stock or 0
    after = stock_after_movement(before, movement_type, quantity)

    movement = StockMovement(
        stock_item_id=item.id,
        movement_type=movement_type,
        quantity=quantity,
        stock_before=before,
        stock_after=after,
        reason=reason.strip(),
        reference=reference,
        created_by=created_by,
    )
    item.current_stock = after
    db.session.add(movement)
    db.session.commit()
    return movement
