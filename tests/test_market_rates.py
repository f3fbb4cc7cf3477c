from decimal import Decimal

import pytest
import requests

from ddm_jewellers.core.errors import NotFound, ValidationFailed
from ddm_jewellers.models.marketModels import MarketRate
from ddm_jewellers.services import market_rates
from ddm_jewellers.services.market_rates import per_gram_rates, calculate_jewelry_price


class FakeResponse:
    def __init__(self, payload, status=200):
        self.payload = payload
        self.status = status

    def raise_for_status(self):
        if self.status >= 400:
            raise requests.HTTPError(f"{self.status} error")

    def json(self):
        return self.payload


def test_per_gram_conversion(app):
    rates = per_gram_rates(2000, 25, "test")
    assert rates["gold_24k"] == Decimal("5337.02")
    assert rates["gold_22k"] == Decimal("4888.71")
    assert rates["gold_18k"] == Decimal("4002.76")
    assert rates["silver"] == Decimal("66.71")


def test_sample_rates_when_no_provider_configured(app):
    rates = market_rates.fetch_live_rates()
    assert rates == market_rates.SAMPLE_RATES
    assert rates is not market_rates.SAMPLE_RATES


def test_provider_chain_skips_failures(app, monkeypatch):
    calls = []

    def broken():
        calls.append("broken")
        raise requests.ConnectionError("down")

    def unconfigured():
        calls.append("unconfigured")
        return None

    def working():
        calls.append("working")
        return per_gram_rates(2000, 25, "Working")

    monkeypatch.setattr(market_rates, "PROVIDERS", [broken, unconfigured, working])
    assert market_rates.fetch_live_rates()["source"] == "Working"
    assert calls == ["broken", "unconfigured", "working"]


def test_metals_api_provider(app, monkeypatch):
    app.config["METALS_API_KEY"] = "key"
    seen = {}

    def fake_get(url, params=None, timeout=None):
        seen["params"] = params
        return FakeResponse({"gold": 2000, "silver": 25})

    monkeypatch.setattr(market_rates.requests, "get", fake_get)
    rates = market_rates.fetch_from_metals_api()
    assert rates["source"] == "Metals-API"
    assert rates["gold_24k"] == Decimal("5337.02")
    assert seen["params"]["api_key"] == "key"


def test_malformed_provider_payload_falls_back(app, monkeypatch):
    app.config["METALS_API_KEY"] = "key"
    monkeypatch.setattr(market_rates.requests, "get", lambda *a, **kw: FakeResponse({"unexpected": True}))
    assert market_rates.fetch_live_rates()["source"] == "Sample Data (Demo)"

    monkeypatch.setattr(market_rates.requests, "get", lambda *a, **kw: FakeResponse({}, status=500))
    assert market_rates.fetch_live_rates()["source"] == "Sample Data (Demo)"


def test_get_seeds_rates_on_first_request(client):
    assert MarketRate.query.count() == 0
    data = client.get("/api/market-rates").get_json()
    assert data["gold_22k"] == 6200.0
    assert data["source"] == "Sample Data (Demo)"
    client.get("/api/market-rates")
    assert MarketRate.query.count() == 1


def test_refresh_is_admin_only(client, rates, admin_headers, customer_headers):
    assert client.post("/api/market-rates/refresh", headers=customer_headers).status_code == 403
    resp = client.post("/api/market-rates/refresh", headers=admin_headers)
    assert resp.status_code == 200
    assert MarketRate.query.count() == 2
    assert client.get("/api/market-rates").get_json()["id"] == resp.get_json()["rates"]["id"]


def test_calculate_price_endpoint(client, rates):
    resp = client.post("/api/market-rates/calculate-price", json={"weight": 10, "purity": "22k"})
    assert resp.status_code == 200
    assert resp.get_json()["price"] == 80600.0

    resp = client.post("/api/market-rates/calculate-price", json={"weight": 10, "purity": "silver", "markup": 1})
    assert resp.get_json()["price"] == 825.0

    assert client.post("/api/market-rates/calculate-price", json={"weight": 10, "purity": "14k"}).status_code == 400
    assert client.post("/api/market-rates/calculate-price", json={"weight": 0, "purity": "22k"}).status_code == 400
    assert client.post("/api/market-rates/calculate-price", json={"purity": "22k"}).status_code == 400


def test_calculate_price_without_rates(app):
    with pytest.raises(NotFound):
        calculate_jewelry_price(10, "22k")


def test_calculate_price_rejects_bad_purity(app, rates):
    with pytest.raises(ValidationFailed):
        calculate_jewelry_price(10, "platinum")
