"""HTTP routes for reply classification, cards and analytics."""

from __future__ import annotations

from datetime import date

from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from app.api.dependencies.store import get_app_settings, get_trade_store
from app.api.routes import api_router
from app.config import AppSettings
from app.services.trade_store import TradeStoreError

ANCHOR = date(2025, 11, 19)


class _FailingStore:
    async def fetch_trades(self, query):
        raise TradeStoreError("store offline")


def _app(store, **settings) -> FastAPI:
    app = FastAPI()
    app.include_router(api_router)
    app.dependency_overrides[get_trade_store] = lambda: store
    app.dependency_overrides[get_app_settings] = lambda: AppSettings(
        database_url="sqlite+aiosqlite://", anchor_date=ANCHOR, **settings
    )
    return app


def _client(app: FastAPI) -> AsyncClient:
    return AsyncClient(transport=ASGITransport(app=app), base_url="http://test")


async def test_intent_endpoint(sample_store):
    async with _client(_app(sample_store)) as client:
        pending = await client.post("/assistant/intent", json={"reply": "I'll check your profitable trades"})
        matched = await client.post(
            "/assistant/intent", json={"reply": "You have 2 profitable trades totaling $340"}
        )

    assert pending.status_code == 200
    assert pending.json() is None
    assert matched.json()["intent"] == "profitable-trades"
    assert matched.json()["entities"]["direction"] == "Either"


async def test_card_endpoint_builds_price_extremes(sample_store):
    reply = "Your highest sale price for AAPL this year was $200 and the lowest was $150."
    async with _client(_app(sample_store)) as client:
        response = await client.post("/assistant/card", json={"reply": reply})

    assert response.status_code == 200
    payload = response.json()
    assert payload["intent"] == "price-extremes"
    assert payload["entities"]["symbol"] == "AAPL"
    card = payload["card"]
    assert card["intent"] == "price-extremes"
    assert card["highest"] == 200.0
    assert card["highest_date"] == "2025-07-01"
    assert card["lowest"] == 150.0


async def test_card_endpoint_plain_text(sample_store):
    async with _client(_app(sample_store)) as client:
        response = await client.post("/assistant/card", json={"reply": "Happy to help with anything else."})

    assert response.status_code == 200
    assert response.json() == {"intent": None, "entities": None, "card": None}


async def test_card_endpoint_store_failure_is_bad_gateway():
    async with _client(_app(_FailingStore())) as client:
        response = await client.post(
            "/assistant/card", json={"reply": "You have 2 profitable trades totaling $340"}
        )

    assert response.status_code == 502


async def test_time_window_resolution(sample_store):
    async with _client(_app(sample_store)) as client:
        resolved = await client.get(
            "/time-windows/resolve", params={"phrase": "last 3 trading days", "anchor_date": "2025-11-19"}
        )
        unresolved = await client.get("/time-windows/resolve", params={"phrase": "whenever"})

    window = resolved.json()["window"]
    assert window["start_date"] == "2025-11-17"
    assert window["trading_day_count"] == 3
    assert unresolved.status_code == 200
    assert unresolved.json()["window"] is None
    assert unresolved.json()["anchor_date"] == "2025-11-19"


async def test_analytics_price_stats_normalizes_company_name(sample_store):
    async with _client(_app(sample_store)) as client:
        response = await client.post("/analytics/price-stats", json={"symbol": "apple", "period": "this year"})

    assert response.status_code == 200
    payload = response.json()
    assert payload["symbol"] == "AAPL"
    assert payload["average"] == 180.0
    assert payload["total_notional"] == 7050.0


async def test_analytics_average_price_by_direction(sample_store):
    async with _client(_app(sample_store)) as client:
        response = await client.post("/analytics/average-price", json={"symbol": "AAPL", "direction": "Sell"})

    assert response.json()["average"] == 185.0


async def test_analytics_profitable_and_window_trades(sample_store):
    async with _client(_app(sample_store)) as client:
        profitable = await client.post("/analytics/profitable-trades", json={})
        window = await client.post("/analytics/time-window-trades", json={"period": "this week"})
        missing = await client.post("/analytics/time-window-trades", json={})

    assert profitable.json()["total_profit"] == 300.0
    assert window.json()["summary"]["total_trades"] == 2
    assert window.json()["portfolio_wide"] is True
    assert missing.status_code == 422


async def test_analytics_options_filter(sample_store):
    async with _client(_app(sample_store)) as client:
        response = await client.post("/analytics/options", json={"symbol": "TSLA", "option_right": "Put"})

    payload = response.json()
    assert payload["aggregate"]["trade_count"] == 1
    assert payload["trades"][0]["strike"] == 200.0


async def test_analytics_rejects_unknown_period_when_configured(sample_store):
    app = _app(sample_store, unresolved_period_policy="reject")
    async with _client(app) as client:
        response = await client.post("/analytics/price-stats", json={"symbol": "AAPL", "period": "since forever"})

    assert response.status_code == 422


async def test_analytics_store_failure_is_bad_gateway():
    async with _client(_app(_FailingStore())) as client:
        response = await client.post("/analytics/price-stats", json={"symbol": "AAPL"})

    assert response.status_code == 502


async def test_health():
    from app.main import app

    async with _client(app) as client:
        response = await client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "ok"
