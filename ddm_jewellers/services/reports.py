"""
Day-book and sales reporting.

Online revenue comes from orders that are neither cancelled nor
payment-failed; offline revenue from staff-entered in-store sales.
"""
import csv
import io
from collections import defaultdict

from ddm_jewellers.core.imports import datetime, timedelta, Decimal
from ddm_jewellers.core.errors import ValidationFailed
from ddm_jewellers.models.orderModels import Order
from ddm_jewellers.models.salesModels import OfflineSale
from ddm_jewellers.services.pricing import money, to_decimal

DEFAULT_RANGE_DAYS = 30
EXPORT_COLUMNS = ["date", "channel", "reference", "customer", "category", "payment_mode", "amount"]


def parse_day(value, field="date"):
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except (TypeError, ValueError):
        raise ValidationFailed(f"Invalid {field}, expected YYYY-MM-DD")


def date_range(date_from=None, date_to=None):
    end = parse_day(date_to, "dateTo") if date_to else datetime.utcnow().date()
    start = parse_day(date_from, "dateFrom") if date_from else end - timedelta(days=DEFAULT_RANGE_DAYS - 1)
    if start > end:
        raise ValidationFailed("dateFrom must not be after dateTo")
    return start, end


def _bounds(start, end):
    return datetime.combine(start, datetime.min.time()), datetime.combine(end + timedelta(days=1), datetime.min.time())


def online_orders(start, end):
    lower, upper = _bounds(start, end)
    return Order.query.filter(
        Order.created_at >= lower,
        Order.created_at < upper,
        Order.status != "cancelled",
        Order.payment_status != "failed",
    ).order_by(Order.created_at).all()


def offline_sales(start, end, category=None, payment_mode=None, search=None):
    lower, upper = _bounds(start, end)
    query = OfflineSale.query.filter(OfflineSale.sale_date >= lower, OfflineSale.sale_date < upper)
    if category:
        query = query.filter(OfflineSale.product_category == category)
    if payment_mode:
        query = query.filter(OfflineSale.payment_mode == payment_mode)
    if search:
        like = f"%{search}%"
        query = query.filter(
            OfflineSale.customer_name.ilike(like)
            | OfflineSale.product_name.ilike(like)
            | OfflineSale.bill_number.ilike(like)
            | OfflineSale.mobile_number.ilike(like)
        )
    return query.order_by(OfflineSale.sale_date.desc()).all()


def compute_offline_totals(data):
    """Fill gst_amount and total_amount for an in-store sale when not given."""
    weight = to_decimal(data.get("weight_grams"))
    rate = to_decimal(data.get("rate_per_gram"))
    charges = sum(
        (to_decimal(data.get(key)) for key in ("making_charges", "gemstones_cost", "diamonds_cost")),
        Decimal("0"),
    )
    gst_percentage = to_decimal(data.get("gst_percentage"), default="3")
    subtotal = money(weight * rate + charges)
    gst_amount = money(data["gst_amount"]) if data.get("gst_amount") is not None else money(subtotal * gst_percentage / 100)
    total = money(data["total_amount"]) if data.get("total_amount") is not None else money(subtotal + gst_amount)
    return gst_percentage, gst_amount, total


def _empty_entry(day):
    return {
        "date": day.isoformat(),
        "online_orders": 0,
        "online_revenue": Decimal("0.00"),
        "offline_sales": 0,
        "offline_revenue": Decimal("0.00"),
        "total_revenue": Decimal("0.00"),
        "payment_mode_breakdown": defaultdict(lambda: Decimal("0.00")),
    }


def _finish(entry):
    entry["total_revenue"] = entry["online_revenue"] + entry["offline_revenue"]
    for key in ("online_revenue", "offline_revenue", "total_revenue"):
        entry[key] = float(entry[key])
    entry["payment_mode_breakdown"] = {mode: float(v) for mode, v in entry["payment_mode_breakdown"].items()}
    return entry


def day_book(start, end):
    entries = {}
    for order in online_orders(start, end):
        entry = entries.setdefault(order.created_at.date(), _empty_entry(order.created_at.date()))
        entry["online_orders"] += 1
        entry["online_revenue"] += to_decimal(order.total_amount)
        entry["payment_mode_breakdown"][order.payment_method or "online"] += to_decimal(order.total_amount)

    for sale in offline_sales(start, end):
        entry = entries.setdefault(sale.sale_date.date(), _empty_entry(sale.sale_date.date()))
        entry["offline_sales"] += 1
        entry["offline_revenue"] += to_decimal(sale.total_amount)
        entry["payment_mode_breakdown"][sale.payment_mode] += to_decimal(sale.total_amount)

    return [_finish(entries[day]) for day in sorted(entries, reverse=True)]


def day_book_entry(day):
    entries = day_book(day, day)
    return entries[0] if entries else _finish(_empty_entry(day))


def _order_category(order):
    names = {item.product.category.name for item in order.order_items
             if item.product is not None and item.product.category is not None}
    return ", ".join(sorted(names)) or "online"


def transactions(start, end, sales_type="both"):
    """Every sale in range as a flat row, oldest first."""
    if sales_type not in ("online", "offline", "both"):
        raise ValidationFailed("salesType must be online, offline or both")

    rows = []
    if sales_type in ("online", "both"):
        for order in online_orders(start, end):
            user = order.user
            rows.append({
                "date": order.created_at,
                "channel": "online",
                "reference": f"ORD-{order.id}",
                "customer": user.full_name if user else "",
                "category": _order_category(order),
                "payment_mode": order.payment_method or "online",
                "amount": to_decimal(order.total_amount),
                "items": [(item.product.category.name if item.product is not None and item.product.category is not None
                           else "uncategorized", to_decimal(item.price) * item.quantity) for item in order.order_items],
            })
    if sales_type in ("offline", "both"):
        for sale in offline_sales(start, end):
            rows.append({
                "date": sale.sale_date,
                "channel": "offline",
                "reference": sale.bill_number,
                "customer": sale.customer_name,
                "category": sale.product_category,
                "payment_mode": sale.payment_mode,
                "amount": to_decimal(sale.total_amount),
                "items": [(sale.product_category, to_decimal(sale.total_amount))],
            })
    rows.sort(key=lambda row: row["date"])
    return rows


def sales_report(start, end, sales_type="both"):
    rows = transactions(start, end, sales_type)

    online = sum((r["amount"] for r in rows if r["channel"] == "online"), Decimal("0"))
    offline = sum((r["amount"] for r in rows if r["channel"] == "offline"), Decimal("0"))
    total = online + offline

    payment_modes = defaultdict(lambda: Decimal("0"))
    categories = defaultdict(lambda: {"revenue": Decimal("0"), "count": 0})
    for row in rows:
        payment_modes[row["payment_mode"]] += row["amount"]
        for category, amount in row["items"]:
            categories[category]["revenue"] += amount
            categories[category]["count"] += 1

    return {
        "date_from": start.isoformat(),
        "date_to": end.isoformat(),
        "sales_type": sales_type,
        "summary": {
            "total_revenue": float(money(total)),
            "total_orders": len(rows),
            "online_revenue": float(money(online)),
            "offline_revenue": float(money(offline)),
            "average_order_value": float(money(total / len(rows))) if rows else 0.0,
        },
        "payment_mode_breakdown": {mode: float(money(v)) for mode, v in payment_modes.items()},
        "category_breakdown": {
            name: {"revenue": float(money(v["revenue"])), "count": v["count"]} for name, v in categories.items()
        },
    }


def export_rows(start, end, sales_type="both"):
    return [
        {
            "date": row["date"].strftime("%Y-%m-%d %H:%M"),
            "channel": row["channel"],
            "reference": row["reference"],
            "customer": row["customer"],
            "category": row["category"],
            "payment_mode": row["payment_mode"],
            "amount": f"{money(row['amount']):.2f}",
        }
        for row in transactions(start, end, sales_type)
    ]


def export_csv(start, end, sales_type="both"):
    buffer = io.StringIO()
    writer = csv.DictWriter(buffer, fieldnames=EXPORT_COLUMNS)
    writer.writeheader()
    writer.writerows(export_rows(start, end, sales_type))
    return buffer.getvalue()


