"""Request and response schemas for the assistant and analytics endpoints."""

from __future__ import annotations

from datetime import date
from typing import Literal, Optional

from pydantic import BaseModel, Field

from app.schemas.cards import CardPayload, WindowSchema
from trade_insights.intents import Entities, Matched
from trade_insights.price_stats import TieBreak


class ReplyRequest(BaseModel):
    reply: str = Field(..., min_length=1, description="Assistant reply text to classify")
    prior_symbol: Optional[str] = Field(default=None, description="Symbol carried over from the conversation")
    anchor_date: Optional[date] = Field(default=None, description="Overrides 'today' for relative phrases")

    class Config:
        json_schema_extra = {
            "example": {
                "reply": "You have 2 profitable AAPL trades totaling $340.",
                "prior_symbol": None,
                "anchor_date": "2025-11-20",
            }
        }


class EntitiesSchema(BaseModel):
    symbol: str | None = None
    direction: Literal["Buy", "Sell", "Either"] = "Either"
    time_phrase: str | None = None
    option_right: Literal["Call", "Put"] | None = None
    expiration_phrase: str | None = None
    portfolio_wide: bool = False
    strike_order: Literal["highest", "lowest"] | None = None
    account_query: str | None = None
    fee_type: str | None = None
    stock_count: int | None = None
    option_count: int | None = None

    @classmethod
    def from_entities(cls, entities: Entities) -> "EntitiesSchema":
        return cls(
            symbol=entities.symbol,
            direction=entities.direction.value,
            time_phrase=entities.time_phrase,
            option_right=entities.option_right.value if entities.option_right else None,
            expiration_phrase=entities.expiration_phrase,
            portfolio_wide=entities.portfolio_wide,
            strike_order=entities.strike_order.value if entities.strike_order else None,
            account_query=entities.account_query.value if entities.account_query else None,
            fee_type=entities.fee_type.value if entities.fee_type else None,
            stock_count=entities.stock_count,
            option_count=entities.option_count,
        )


class IntentResolutionSchema(BaseModel):
    intent: str
    entities: EntitiesSchema

    @classmethod
    def from_match(cls, match: Matched) -> "IntentResolutionSchema":
        return cls(intent=match.intent.value, entities=EntitiesSchema.from_entities(match.entities))


class CardResponse(BaseModel):
    intent: str | None = None
    entities: EntitiesSchema | None = None
    card: CardPayload | None = None


class TimeWindowResponse(BaseModel):
    phrase: str
    anchor_date: date
    window: WindowSchema | None = None


class PriceStatsRequest(BaseModel):
    symbol: str = Field(..., examples=["AAPL"])
    direction: Literal["Buy", "Sell", "Either"] = "Either"
    period: Optional[str] = Field(default=None, examples=["last month"])
    tie_break: TieBreak = TieBreak.FIRST_IN_INPUT
    anchor_date: Optional[date] = None


class ProfitableTradesRequest(BaseModel):
    symbol: Optional[str] = Field(default=None, examples=["TSLA"])
    period: Optional[str] = None
    anchor_date: Optional[date] = None


class TimeWindowTradesRequest(BaseModel):
    period: str = Field(..., examples=["last 3 trading days"])
    symbol: Optional[str] = None
    anchor_date: Optional[date] = None


class OptionQueryRequest(BaseModel):
    symbol: Optional[str] = None
    direction: Literal["Buy", "Sell", "Either"] = "Either"
    option_right: Literal["Call", "Put"] | None = None
    period: Optional[str] = None
    anchor_date: Optional[date] = None


__all__ = [
    "CardResponse",
    "EntitiesSchema",
    "IntentResolutionSchema",
    "OptionQueryRequest",
    "PriceStatsRequest",
    "ProfitableTradesRequest",
    "ReplyRequest",
    "TimeWindowResponse",
    "TimeWindowTradesRequest",
]
