"""
Jewelry price calculation.

Real jewelry is priced from the live metal rate:

    metal cost = weight (g) x rate per gram
    subtotal   = metal cost + making charges + gemstones + diamonds
    GST        = subtotal x GST rate (3%)
    final      = subtotal + GST

Imitation jewelry is sold at its fixed catalog price.
"""
from dataclasses import dataclass, asdict
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

from ddm_jewellers.core.imports import current_app

TWO_PLACES = Decimal("0.01")
DEFAULT_GST_RATE = Decimal("0.03")


def to_decimal(value, default="0"):
    if value is None or value == "":
        return Decimal(default)
    if isinstance(value, Decimal):
        return value
    try:
        result = Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise ValueError(f"Invalid number: {value!r}")
    if not result.is_finite():
        raise ValueError(f"Invalid number: {value!r}")
    return result


def money(value):
    try:
        return to_decimal(value).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        raise ValueError(f"Invalid amount: {value!r}")


def is_non_negative_number(value):
    if isinstance(value, bool):
        return False
    try:
        return to_decimal(value) >= 0
    except ValueError:
        return False


def gst_rate():
    try:
        return to_decimal(current_app.config.get("GST_RATE", DEFAULT_GST_RATE))
    except RuntimeError:
        # outside an application context
        return DEFAULT_GST_RATE


def extract_purity(material):
    material = (material or "").lower()
    for purity in ("24k", "22k", "18k"):
        if purity in material or purity.replace("k", " k") in material:
            return purity
    return "22k"


@dataclass
class PricingBreakdown:
    weight_in_grams: Decimal
    rate_per_gram: Decimal
    metal_cost: Decimal
    making_charges: Decimal
    gemstones_cost: Decimal
    diamonds_cost: Decimal
    subtotal: Decimal
    gst_amount: Decimal
    final_price: Decimal

    def scaled(self, quantity):
        q = Decimal(quantity)
        return PricingBreakdown(
            weight_in_grams=self.weight_in_grams,
            rate_per_gram=self.rate_per_gram,
            metal_cost=money(self.metal_cost * q),
            making_charges=money(self.making_charges * q),
            gemstones_cost=money(self.gemstones_cost * q),
            diamonds_cost=money(self.diamonds_cost * q),
            subtotal=money(self.subtotal * q),
            gst_amount=money(self.gst_amount * q),
            final_price=money(self.final_price * q),
        )

    def as_dict(self):
        return {key: float(value) for key, value in asdict(self).items()}


def fixed_price_breakdown(weight, price):
    zero = Decimal("0.00")
    return PricingBreakdown(
        weight_in_grams=to_decimal(weight),
        rate_per_gram=zero,
        metal_cost=zero,
        making_charges=zero,
        gemstones_cost=zero,
        diamonds_cost=zero,
        subtotal=money(price),
        gst_amount=zero,
        final_price=money(price),
    )


def rate_per_gram(material, rates, purity=None, silver_billing_mode="live_rate", fixed_rate_per_gram=None):
    """Pick the INR/gram rate for a material from a market-rate snapshot."""
    material = (material or "").lower()

    if "silver" in material:
        fixed = to_decimal(fixed_rate_per_gram)
        if silver_billing_mode == "fixed_rate" and fixed > 0:
            return fixed
        return to_decimal(getattr(rates, "silver", None)) if rates is not None else Decimal("0")

    if "gold" in material:
        if rates is None:
            return Decimal("0")
        purity = (purity or extract_purity(material)).lower()
        column = {"24k": "gold_24k", "22k": "gold_22k", "18k": "gold_18k"}.get(purity, "gold_22k")
        return to_decimal(getattr(rates, column, None))

    return Decimal("0")


def calculate_price(data, rates=None, quantity=1):
    """
    Price a piece of jewelry.

    ``data`` is a mapping with product_type, material, weight, making_charges,
    gemstones_cost, diamonds_cost, silver_billing_mode, fixed_rate_per_gram,
    purity and price. ``rates`` is a MarketRate (or anything with the same
    attributes). Real jewelry without a usable rate falls back to ``price``.
    """
    weight = to_decimal(data.get("weight"))
    fallback_price = to_decimal(data.get("price"))

    if data.get("product_type") == "imitation":
        return fixed_price_breakdown(weight, fallback_price).scaled(quantity)

    rate = rate_per_gram(
        data.get("material"),
        rates,
        purity=data.get("purity"),
        silver_billing_mode=data.get("silver_billing_mode") or "live_rate",
        fixed_rate_per_gram=data.get("fixed_rate_per_gram"),
    )
    if rate <= 0 or weight <= 0:
        return fixed_price_breakdown(weight, fallback_price).scaled(quantity)

    making = to_decimal(data.get("making_charges"))
    gemstones = to_decimal(data.get("gemstones_cost"))
    diamonds = to_decimal(data.get("diamonds_cost"))

    metal_cost = money(weight * rate)
    subtotal = money(metal_cost + making + gemstones + diamonds)
    gst_amount = money(subtotal * gst_rate())

    breakdown = PricingBreakdown(
        weight_in_grams=weight,
        rate_per_gram=money(rate),
        metal_cost=metal_cost,
        making_charges=money(making),
        gemstones_cost=money(gemstones),
        diamonds_cost=money(diamonds),
        subtotal=subtotal,
        gst_amount=gst_amount,
        final_price=money(subtotal + gst_amount),
    )
    return breakdown.scaled(quantity) if quantity != 1 else breakdown


def product_pricing_data(product):
    return {
        "product_type": product.product_type,
        "material": product.material,
        "purity": product.purity,
        "weight": product.weight,
        "making_charges": product.making_charges,
        "gemstones_cost": product.gemstones_cost,
        "diamonds_cost": product.diamonds_cost,
        "silver_billing_mode": product.silver_billing_mode,
        "fixed_rate_per_gram": product.fixed_rate_per_gram,
        "price": product.price,
    }


def price_product(product, rates=None, quantity=1):
    return calculate_price(product_pricing_data(product), rates=rates, quantity=quantity)


def format_breakdown(breakdown):
    return {
        "weight": f"{breakdown.weight_in_grams}g",
        "rate_per_gram": f"₹{breakdown.rate_per_gram:.2f}/g",
        "metal_cost": f"₹{breakdown.metal_cost:.2f}",
        "making_charges": f"₹{breakdown.making_charges:.2f}",
        "gemstones_cost": f"₹{breakdown.gemstones_cost:.2f}",
        "diamonds_cost": f"₹{breakdown.diamonds_cost:.2f}",
        "subtotal": f"₹{breakdown.subtotal:.2f}",
        "gst_amount": f"₹{breakdown.gst_amount:.2f} ({gst_rate() * 100:.0f}%)",
        "final_price": f"₹{breakdown.final_price:.2f}",
    }
