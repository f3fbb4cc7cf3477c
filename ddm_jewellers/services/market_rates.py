import logging

from ddm_jewellers.core.extensions import db
from ddm_jewellers.core.imports import requests, current_app, Decimal
from ddm_jewellers.core.errors import NotFound, ValidationFailed
from ddm_jewellers.models.marketModels import MarketRate
from ddm_jewellers.services.pricing import money, to_decimal

logger = logging.getLogger(__name__)

GRAMS_PER_TROY_OUNCE = Decimal("31.1035")
PURITY_FACTORS = {"24k": Decimal("1"), "22k": Decimal("0.916"), "18k": Decimal("0.75")}

SAMPLE_RATES = {
    "gold_24k": Decimal("6800.00"),
    "gold_22k": Decimal("6200.00"),
    "gold_18k": Decimal("5100.00"),
    "silver": Decimal("82.50"),
    "source": "Sample Data (Demo)",
}


def per_gram_rates(gold_usd_per_oz, silver_usd_per_oz, source):
    """Convert USD/troy-ounce spot prices into INR/gram rates per purity."""
    usd_to_inr = to_decimal(current_app.config.get("USD_TO_INR", 83))
    gold = to_decimal(gold_usd_per_oz) * usd_to_inr / GRAMS_PER_TROY_OUNCE
    silver = to_decimal(silver_usd_per_oz) * usd_to_inr / GRAMS_PER_TROY_OUNCE
    return {
        "gold_24k": money(gold * PURITY_FACTORS["24k"]),
        "gold_22k": money(gold * PURITY_FACTORS["22k"]),
        "gold_18k": money(gold * PURITY_FACTORS["18k"]),
        "silver": money(silver),
        "source": source,
    }


def _get_json(url, params=None):
    timeout = current_app.config.get("HTTP_TIMEOUT", 10)
    response = requests.get(url, params=params, timeout=timeout)
    response.raise_for_status()
    return response.json()


def fetch_from_metals_api():
    api_key = current_app.config.get("METALS_API_KEY")
    if not api_key:
        return None
    data = _get_json("https://api.metals.live/v1/spot", params={"api_key": api_key, "currency": "USD", "unit": "oz"})
    return per_gram_rates(data["gold"], data["silver"], "Metals-API")


def fetch_from_alpha_vantage():
    api_key = current_app.config.get("ALPHA_VANTAGE_API_KEY")
    if not api_key:
        return None

    def spot(symbol):
        data = _get_json("https://www.alphavantage.co/query", params={
            "function": "CURRENCY_EXCHANGE_RATE",
            "from_currency": symbol,
            "to_currency": "USD",
            "apikey": api_key,
        })
        return data["Realtime Currency Exchange Rate"]["5. Exchange Rate"]

    return per_gram_rates(spot("XAU"), spot("XAG"), "Alpha Vantage")


def fetch_from_finnhub():
    api_key = current_app.config.get("FINNHUB_API_KEY")
    if not api_key:
        return None
    gold = _get_json("https://finnhub.io/api/v1/quote", params={"symbol": "OANDA:XAU_USD", "token": api_key})
    silver = _get_json("https://finnhub.io/api/v1/quote", params={"symbol": "OANDA:XAG_USD", "token": api_key})
    return per_gram_rates(gold["c"], silver["c"], "Finnhub")


def fetch_from_free_api():
    if not current_app.config.get("MARKET_RATES_USE_FREE_API", True):
        return None
    data = _get_json("https://api.metals.live/v1/spot/gold,silver")
    return per_gram_rates(data.get("gold") or 2000, data.get("silver") or 25, "Free Metals API")


PROVIDERS = [fetch_from_metals_api, fetch_from_alpha_vantage, fetch_from_finnhub, fetch_from_free_api]


def fetch_live_rates():
    """Try each provider in turn; fall back to sample rates when all fail."""
    for provider in PROVIDERS:
        try:
            rates = provider()
        except (requests.RequestException, KeyError, TypeError, ValueError) as e:
            logger.warning(f"{provider.__name__} failed: {e}")
            continue
        if rates:
            return rates
    logger.info("All market-rate providers unavailable, using sample rates")
    return dict(SAMPLE_RATES)


def get_current_rates():
    return MarketRate.query.order_by(MarketRate.updated_at.desc(), MarketRate.id.desc()).first()


def refresh_rates():
    rates = fetch_live_rates()
    row = MarketRate(
        gold_24k=rates["gold_24k"],
        gold_22k=rates["gold_22k"],
        gold_18k=rates["gold_18k"],
        silver=rates["silver"],
        currency="INR",
        source=rates["source"],
    )
    db.session.add(row)
    db.session.commit()
    logger.info(f"Market rates updated from {row.source}: gold 24k {row.gold_24k}/g, silver {row.silver}/g")
    return row


def ensure_current_rates():
    return get_current_rates() or refresh_rates()


def calculate_jewelry_price(weight_in_grams, purity, markup="1.3"):
    """Indicative retail price: weight x purity rate x markup."""
    rates = get_current_rates()
    if rates is None:
        raise NotFound("Market rates not available")
    column = {"24k": "gold_24k", "22k": "gold_22k", "18k": "gold_18k", "silver": "silver"}.get(purity)
    if column is None:
        raise ValidationFailed("Invalid purity specified")
    weight = to_decimal(weight_in_grams)
    if weight <= 0:
        raise ValidationFailed("Weight must be positive")
    return money(to_decimal(getattr(rates, column)) * weight * to_decimal(markup))


def serialize_rates(rates):
    return {
        "id": rates.id,
        "gold_24k": float(rates.gold_24k),
        "gold_22k": float(rates.gold_22k),
        "gold_18k": float(rates.gold_18k),
        "silver": float(rates.silver),
        "currency": rates.currency,
        "source": rates.source,
        "updated_at": rates.updated_at.isoformat() if rates.updated_at else None,
    }
