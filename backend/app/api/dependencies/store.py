"""FastAPI dependencies wiring the trade store and card orchestrator."""

from __future__ import annotations

from fastapi import Depends

from app.config import AppSettings, get_settings
from app.db.session import get_session_factory
from app.services.orchestrator import CardOrchestrator
from app.services.trade_store import SqlTradeStore, TradeStore


def get_app_settings() -> AppSettings:
    return get_settings()


def get_trade_store() -> TradeStore:
    return SqlTradeStore(get_session_factory())


def get_orchestrator(
    store: TradeStore = Depends(get_trade_store),
    settings: AppSettings = Depends(get_app_settings),
) -> CardOrchestrator:
    return CardOrchestrator(store, settings)


__all__ = ["get_app_settings", "get_orchestrator", "get_trade_store"]
