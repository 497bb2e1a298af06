"""Assistant reply classification and card endpoints."""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status

from app.api.dependencies.store import get_orchestrator
from app.schemas.assistant import CardResponse, EntitiesSchema, IntentResolutionSchema, ReplyRequest
from app.services.orchestrator import CardOrchestrator
from app.services.trade_store import TradeStoreError
from trade_insights.intents import resolve_intent

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/intent", response_model=Optional[IntentResolutionSchema])
async def classify_reply(
    payload: ReplyRequest,
    orchestrator: CardOrchestrator = Depends(get_orchestrator),
) -> IntentResolutionSchema | None:
    """Return the card intent for a reply, or ``null`` for plain text."""

    anchor = payload.anchor_date or orchestrator.today()
    match = resolve_intent(payload.reply, payload.prior_symbol, anchor=anchor)
    if match is None:
        return None
    return IntentResolutionSchema.from_match(match)


@router.post("/card", response_model=CardResponse)
async def build_reply_card(
    payload: ReplyRequest,
    orchestrator: CardOrchestrator = Depends(get_orchestrator),
) -> CardResponse:
    """Resolve the reply and fill the matching card from the trade store."""

    anchor = payload.anchor_date or orchestrator.today()
    match = resolve_intent(payload.reply, payload.prior_symbol, anchor=anchor)
    if match is None:
        return CardResponse()
    try:
        card = await orchestrator.build_card(match, anchor=anchor)
    except TradeStoreError as exc:
        logger.warning("Card build failed for intent %s", match.intent.value)
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)) from exc
    return CardResponse(
        intent=match.intent.value,
        entities=EntitiesSchema.from_entities(match.entities),
        card=card,
    )


__all__ = ["router"]
