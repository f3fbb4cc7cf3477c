"""Gullak: recurring small payments that accumulate into gold or silver."""
import calendar
import logging
import math

from ddm_jewellers.core.extensions import db
from ddm_jewellers.core.imports import datetime, timedelta, Decimal, SQLAlchemyError
from ddm_jewellers.core.errors import ServiceError, InvalidTransition, ValidationFailed
from ddm_jewellers.models.gullakModels import GullakAccount, GullakTransaction
from ddm_jewellers.services.pricing import money, to_decimal
from ddm_jewellers.services.market_rates import ensure_current_rates

logger = logging.getLogger(__name__)

GRAMS_PLACES = Decimal("0.000001")
MONDAY = 1  # Sunday = 0


def _sunday_based_weekday(moment):
    return (moment.weekday() + 1) % 7


def calculate_next_payment_date(frequency, base=None, day_of_week=None, day_of_month=None):
    base = base or datetime.utcnow()

    if frequency == "weekly":
        target = MONDAY if day_of_week is None else int(day_of_week) % 7
        days_ahead = (target - _sunday_based_weekday(base)) % 7 or 7
        return base + timedelta(days=days_ahead)

    if frequency == "monthly":
        target = 1 if not day_of_month else int(day_of_month)
        year, month = (base.year + 1, 1) if base.month == 12 else (base.year, base.month + 1)
        day = min(target, calendar.monthrange(year, month)[1])
        return base.replace(year=year, month=month, day=day)

    # daily, and anything unrecognised
    return base + timedelta(days=1)


def rate_for(metal_purity, rates=None):
    rates = rates or ensure_current_rates()
    column = {"24k": "gold_24k", "22k": "gold_22k", "18k": "gold_18k", "silver": "silver"}.get(metal_purity, "gold_22k")
    return to_decimal(getattr(rates, column))


def progress_percentage(account):
    target = to_decimal(account.target_amount)
    if target <= 0:
        return 0.0
    percent = to_decimal(account.current_balance) / target * 100
    return float(min(percent, Decimal("100")).quantize(Decimal("0.01")))


def payments_remaining(account):
    remaining = to_decimal(account.target_amount) - to_decimal(account.current_balance)
    amount = to_decimal(account.payment_amount)
    if remaining <= 0 or amount <= 0:
        return 0
    return math.ceil(remaining / amount)


def current_metal_weight(account):
    grams = sum(
        (to_decimal(t.metal_grams) for t in account.transactions if t.status == "completed"),
        Decimal("0"),
    )
    return float(grams.quantize(GRAMS_PLACES))


def open_account(user_id, data):
    """Validate the payload and create an active account with its first due date."""
    name = (data.get("name") or "").strip()
    metal_type = data.get("metal_type")
    metal_purity = data.get("metal_purity")
    frequency = data.get("payment_frequency")

    if not name:
        raise ValidationFailed("Account name is required")
    if metal_type not in ("gold", "silver"):
        raise ValidationFailed("metal_type must be gold or silver")
    if metal_purity not in ("24k", "22k", "18k", "silver"):
        raise ValidationFailed("Invalid metal_purity")
    if (metal_type == "silver") != (metal_purity == "silver"):
        raise ValidationFailed("metal_purity does not match metal_type")
    if frequency not in ("daily", "weekly", "monthly"):
        raise ValidationFailed("payment_frequency must be daily, weekly or monthly")

    try:
        payment_amount = money(data.get("payment_amount"))
        target_weight = to_decimal(data.get("target_metal_weight"))
    except ValueError as e:
        raise ValidationFailed(str(e))
    if payment_amount <= 0:
        raise ValidationFailed("payment_amount must be positive")
    if target_weight <= 0:
        raise ValidationFailed("target_metal_weight must be positive")

    day_of_week = data.get("payment_day_of_week")
    day_of_month = data.get("payment_day_of_month")
    try:
        if day_of_week is not None:
            day_of_week = int(day_of_week)
        if day_of_month is not None:
            day_of_month = int(day_of_month)
    except (TypeError, ValueError):
        raise ValidationFailed("Payment day must be a whole number")
    if day_of_week is not None and not 0 <= day_of_week <= 6:
        raise ValidationFailed("payment_day_of_week must be between 0 and 6")
    if day_of_month is not None and not 1 <= day_of_month <= 28:
        raise ValidationFailed("payment_day_of_month must be between 1 and 28")

    if data.get("target_amount") is not None:
        try:
            target_amount = money(data["target_amount"])
        except ValueError as e:
            raise ValidationFailed(str(e))
        if target_amount <= 0:
            raise ValidationFailed("target_amount must be positive")
    else:
        target_amount = money(target_weight * rate_for(metal_purity))

    account = GullakAccount(
        user_id=user_id,
        name=name,
        metal_type=metal_type,
        metal_purity=metal_purity,
        payment_amount=payment_amount,
        payment_frequency=frequency,
        payment_day_of_week=day_of_week,
        payment_day_of_month=day_of_month,
        target_metal_weight=target_weight,
        target_amount=target_amount,
        current_balance=0,
        status="active",
        auto_pay_enabled=bool(data.get("auto_pay_enabled", True)),
        next_payment_date=calculate_next_payment_date(frequency, None, day_of_week, day_of_month),
    )
    db.session.add(account)
    db.session.commit()
    return account


def deposit(account, amount, kind="manual", payment_method=None, transaction_id=None, description=None, now=None):
    """Credit the account, converting the amount to metal at the current rate."""
    if account.status != "active":
        raise InvalidTransition(f"Cannot deposit into a {account.status} account")
    try:
        amount = money(amount)
    except ValueError as e:
        raise ValidationFailed(str(e))
    if amount <= 0:
        raise ValidationFailed("Amount must be positive")

    now = now or datetime.utcnow()
    rate = rate_for(account.metal_purity)
    grams = (amount / rate).quantize(GRAMS_PLACES) if rate > 0 else Decimal("0")

    txn = GullakTransaction(
        account_id=account.id,
        amount=amount,
        type=kind,
        metal_rate=rate,
        metal_grams=grams,
        description=description or f"{kind.title()} payment",
        payment_method=payment_method,
        transaction_id=transaction_id,
        status="completed",
        transaction_date=now,
    )
    db.session.add(txn)

    account.current_balance = to_decimal(account.current_balance) + amount
    account.total_payments = (account.total_payments or 0) + 1
    account.last_payment_date = now
    account.next_payment_date = calculate_next_payment_date(
        account.payment_frequency, now, account.payment_day_of_week, account.payment_day_of_month
    )
    if account.current_balance >= to_decimal(account.target_amount):
        account.status = "completed"
        account.completed_at = now
        logger.info(f"Gullak account {account.id} reached its target")

    db.session.commit()
    return txn


def update_account(account, data):
    """Pause, resume or cancel an account, or toggle autopay."""
    status = data.get("status")
    if status is not None:
        if status not in ("active", "paused", "cancelled"):
            raise ValidationFailed("status must be active, paused or cancelled")
        if account.status in ("completed", "cancelled") and status != account.status:
            raise InvalidTransition(f"Account is already {account.status}")
        if status == "active" and account.status == "paused":
            account.next_payment_date = calculate_next_payment_date(
                account.payment_frequency, None, account.payment_day_of_week, account.payment_day_of_month
            )
        account.status = status

    if "auto_pay_enabled" in data:
        account.auto_pay_enabled = bool(data["auto_pay_enabled"])
    if data.get("name"):
        account.name = data["name"].strip()

    db.session.commit()
    return account


def process_autopayments(now=None):
    now = now or datetime.utcnow()
    due = GullakAccount.query.filter(
        GullakAccount.status == "active",
        GullakAccount.auto_pay_enabled.is_(True),
        GullakAccount.next_payment_date <= now,
    ).all()

    processed, failed = 0, 0
    for account in due:
        try:
            deposit(account, account.payment_amount, kind="autopay", payment_method="autopay",
                    description="Scheduled autopay", now=now)
            processed += 1
        except (ServiceError, SQLAlchemyError) as e:
            db.session.rollback()
            failed += 1
            logger.error(f"Autopay failed for gullak account {account.id}: {e}")

    logger.info(f"Gullak autopay: {processed} processed, {failed} failed")
    return {"processed": processed, "failed": failed}


def serialize_account(account):
    return {
        "id": account.id,
        "user_id": account.user_id,
        "name": account.name,
        "metal_type": account.metal_type,
        "metal_purity": account.metal_purity,
        "payment_amount": float(account.payment_amount),
        "payment_frequency": account.payment_frequency,
        "payment_day_of_week": account.payment_day_of_week,
        "payment_day_of_month": account.payment_day_of_month,
        "target_metal_weight": float(account.target_metal_weight),
        "target_amount": float(account.target_amount),
        "current_balance": float(account.current_balance or 0),
        "status": account.status,
        "auto_pay_enabled": account.auto_pay_enabled,
        "total_payments": account.total_payments or 0,
        "last_payment_date": account.last_payment_date.isoformat() if account.last_payment_date else None,
        "next_payment_date": account.next_payment_date.isoformat() if account.next_payment_date else None,
        "completed_at": account.completed_at.isoformat() if account.completed_at else None,
        "created_at": account.created_at.isoformat() if account.created_at else None,
        "progress_percentage": progress_percentage(account),
        "payments_remaining": payments_remaining(account),
        "current_metal_weight": current_metal_weight(account),
    }


def serialize_transaction(txn):
    return {
        "id": txn.id,
        "account_id": txn.account_id,
        "amount": float(txn.amount),
        "type": txn.type,
        "metal_rate": float(txn.metal_rate) if txn.metal_rate is not None else None,
        "metal_grams": float(txn.metal_grams) if txn.metal_grams is not None else None,
        "description": txn.description,
        "payment_method": txn.payment_method,
        "transaction_id": txn.transaction_id,
        "status": txn.status,
        "transaction_date": txn.transaction_date.isoformat() if txn.transaction_date else None,
    }
