"""Time phrase resolution endpoint."""

from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, Query

from app.api.dependencies.store import get_orchestrator
from app.schemas.assistant import TimeWindowResponse
from app.services.orchestrator import CardOrchestrator
from trade_insights.time_windows import resolve_time_window

router = APIRouter()


@router.get("/resolve", response_model=TimeWindowResponse)
async def resolve_window(
    phrase: str = Query(..., min_length=1, examples=["last 3 trading days"]),
    anchor_date: date | None = Query(default=None),
    orchestrator: CardOrchestrator = Depends(get_orchestrator),
) -> TimeWindowResponse:
    anchor = anchor_date or orchestrator.today()
    window = resolve_time_window(phrase, anchor)
    return TimeWindowResponse(
        phrase=phrase,
        anchor_date=anchor,
        window=orchestrator.window_schema(window) if window else None,
    )


__all__ = ["router"]
