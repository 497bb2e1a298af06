"""Direct card endpoints taking explicit filters instead of a reply."""

from __future__ import annotations

import logging
from datetime import date

from fastapi import APIRouter, Depends, HTTPException, status

from app.api.dependencies.store import get_orchestrator
from app.schemas.assistant import (
    OptionQueryRequest,
    PriceStatsRequest,
    ProfitableTradesRequest,
    TimeWindowTradesRequest,
)
from app.schemas.cards import (
    AdvancedOptionQueryCard,
    AveragePriceCard,
    CardPayload,
    PriceExtremesCard,
    ProfitableTradesCard,
    TimeWindowTradesCard,
)
from app.services.orchestrator import CardOrchestrator
from app.services.trade_store import TradeStoreError
from trade_insights.intents import DirectionFilter, Entities, IntentTag, Matched
from trade_insights.models import OptionRight
from trade_insights.price_stats import TieBreak
from trade_insights.symbols import normalize_symbol

router = APIRouter()
logger = logging.getLogger(__name__)


async def _render(
    orchestrator: CardOrchestrator,
    intent: IntentTag,
    entities: Entities,
    anchor: date | None,
    tie_break: TieBreak = TieBreak.FIRST_IN_INPUT,
) -> CardPayload:
    try:
        card = await orchestrator.build_card(Matched(intent, entities), anchor=anchor, tie_break=tie_break)
    except TradeStoreError as exc:
        logger.warning("Analytics card %s failed: %s", intent.value, exc)
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)) from exc
    if card is None:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"Unable to build a {intent.value} card for the given filters",
        )
    return card


def _symbol(value: str | None) -> str | None:
    return normalize_symbol(value) if value else None


@router.post("/price-stats", response_model=PriceExtremesCard)
async def price_stats(
    payload: PriceStatsRequest,
    orchestrator: CardOrchestrator = Depends(get_orchestrator),
) -> CardPayload:
    entities = Entities(
        symbol=_symbol(payload.symbol),
        direction=DirectionFilter(payload.direction),
        time_phrase=payload.period,
    )
    return await _render(orchestrator, IntentTag.PRICE_EXTREMES, entities, payload.anchor_date, payload.tie_break)


@router.post("/average-price", response_model=AveragePriceCard)
async def average_price(
    payload: PriceStatsRequest,
    orchestrator: CardOrchestrator = Depends(get_orchestrator),
) -> CardPayload:
    entities = Entities(
        symbol=_symbol(payload.symbol),
        direction=DirectionFilter(payload.direction),
        time_phrase=payload.period,
    )
    return await _render(orchestrator, IntentTag.AVERAGE_PRICE, entities, payload.anchor_date, payload.tie_break)


@router.post("/profitable-trades", response_model=ProfitableTradesCard)
async def profitable_trades(
    payload: ProfitableTradesRequest,
    orchestrator: CardOrchestrator = Depends(get_orchestrator),
) -> CardPayload:
    entities = Entities(symbol=_symbol(payload.symbol), time_phrase=payload.period)
    return await _render(orchestrator, IntentTag.PROFITABLE_TRADES, entities, payload.anchor_date)


@router.post("/time-window-trades", response_model=TimeWindowTradesCard)
async def time_window_trades(
    payload: TimeWindowTradesRequest,
    orchestrator: CardOrchestrator = Depends(get_orchestrator),
) -> CardPayload:
    symbol = _symbol(payload.symbol)
    entities = Entities(symbol=symbol, time_phrase=payload.period, portfolio_wide=symbol is None)
    return await _render(orchestrator, IntentTag.TIME_WINDOW_TRADES, entities, payload.anchor_date)


@router.post("/options", response_model=AdvancedOptionQueryCard)
async def option_trades(
    payload: OptionQueryRequest,
    orchestrator: CardOrchestrator = Depends(get_orchestrator),
) -> CardPayload:
    entities = Entities(
        symbol=_symbol(payload.symbol),
        direction=DirectionFilter(payload.direction),
        option_right=OptionRight(payload.option_right) if payload.option_right else None,
        time_phrase=payload.period,
    )
    return await _render(orchestrator, IntentTag.ADVANCED_OPTION_QUERY, entities, payload.anchor_date)


__all__ = ["router"]
