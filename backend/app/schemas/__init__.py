"""Pydantic schema exports."""

from .assistant import (
    CardResponse,
    EntitiesSchema,
    IntentResolutionSchema,
    OptionQueryRequest,
    PriceStatsRequest,
    ProfitableTradesRequest,
    ReplyRequest,
    TimeWindowResponse,
    TimeWindowTradesRequest,
)
from .cards import CardPayload, RoundTripSchema, TradeRowSchema, WindowSchema

__all__ = [
    "CardPayload",
    "CardResponse",
    "EntitiesSchema",
    "IntentResolutionSchema",
    "OptionQueryRequest",
    "PriceStatsRequest",
    "ProfitableTradesRequest",
    "ReplyRequest",
    "RoundTripSchema",
    "TimeWindowResponse",
    "TimeWindowTradesRequest",
    "TradeRowSchema",
    "WindowSchema",
]
