"""Pydantic payloads for the analytical cards, keyed by ``intent``."""

from __future__ import annotations

from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Annotated, List, Literal, Union

from pydantic import BaseModel, Field

_CENT = Decimal("0.01")


def money(value: Decimal | None) -> float | None:
    """Round a currency amount to cents at the HTTP boundary."""

    if value is None:
        return None
    return float(value.quantize(_CENT, rounding=ROUND_HALF_UP))


def as_float(value: Decimal | None) -> float | None:
    if value is None:
        return None
    return float(value)


class WindowSchema(BaseModel):
    description: str
    start_date: date
    end_date: date
    display_range: str
    trading_day_count: int


class TradeRowSchema(BaseModel):
    trade_id: str
    trade_date: date
    symbol: str
    underlying_symbol: str | None = None
    security_class: str
    direction: str
    quantity: float | None = None
    price: float | None = None
    strike: float | None = None
    expiration: date | None = None
    option_right: str | None = None
    net_amount: float | None = None
    commission: float | None = None


class RoundTripSchema(BaseModel):
    security_class: str
    buy_date: date
    sell_date: date
    quantity: float
    buy_price: float
    sell_price: float
    profit_loss: float


class OptionAggregateSchema(BaseModel):
    trade_count: int
    total_premium: float
    total_notional: float
    average_premium: float | None = None
    total_contracts: float
    total_shares: float
    shares_covered: float
    buy_count: int
    sell_count: int
    equity_count: int
    option_count: int
    call_count: int
    put_count: int


class _PriceStatFields(BaseModel):
    symbol: str | None = None
    period: str
    direction: str | None = None
    highest: float | None = None
    highest_date: date | None = None
    highest_quantity: float | None = None
    lowest: float | None = None
    lowest_date: date | None = None
    lowest_quantity: float | None = None
    average: float | None = None
    trade_count: int | None = None
    total_quantity: float | None = None
    total_notional: float | None = None


class PriceExtremesCard(_PriceStatFields):
    intent: Literal["price-extremes"] = "price-extremes"

    class Config:
        json_schema_extra = {
            "example": {
                "intent": "price-extremes",
                "symbol": "AAPL",
                "period": "this year",
                "direction": "Sell",
                "highest": 231.4,
                "highest_date": "2025-07-15",
                "highest_quantity": 50,
                "lowest": 171.05,
                "lowest_date": "2025-04-08",
                "lowest_quantity": 25,
                "average": 203.12,
                "trade_count": 6,
                "total_quantity": 210,
                "total_notional": 42655.2,
            }
        }


class AveragePriceCard(_PriceStatFields):
    intent: Literal["average-price"] = "average-price"


class ProfitableTradesCard(BaseModel):
    intent: Literal["profitable-trades"] = "profitable-trades"
    symbol: str | None = None
    period: str | None = None
    total_profitable_trades: int
    total_profit: float
    trades: List[RoundTripSchema]


class TradeWindowSummary(BaseModel):
    total_trades: int
    equity_count: int
    option_count: int
    total_notional: float
    average_price: float | None = None


class TimeWindowTradesCard(BaseModel):
    intent: Literal["time-window-trades"] = "time-window-trades"
    symbol: str | None = None
    portfolio_wide: bool
    window: WindowSchema
    summary: TradeWindowSummary
    trades: List[TradeRowSchema]


class TradeSummaryCard(BaseModel):
    intent: Literal["trade-summary"] = "trade-summary"
    symbol: str | None = None
    stock_count: int
    option_count: int
    total_trades: int


class DetailedTradesCard(BaseModel):
    intent: Literal["detailed-trades"] = "detailed-trades"
    symbol: str
    period: str | None = None
    total_trades: int
    shares_purchased: float
    total_cost: float
    shares_sold: float
    total_proceeds: float
    trades: List[TradeRowSchema]


class AllTradesCard(BaseModel):
    intent: Literal["all-trades"] = "all-trades"
    symbol: str | None = None
    period: str | None = None
    stock_count: int
    option_count: int
    trades: List[TradeRowSchema]


class _OptionTradesFields(BaseModel):
    symbol: str | None = None
    period: str | None = None
    direction: str | None = None
    option_right: str | None = None
    aggregate: OptionAggregateSchema
    trades: List[TradeRowSchema]


class BulkOptionsCard(_OptionTradesFields):
    intent: Literal["bulk-options"] = "bulk-options"


class AdvancedOptionQueryCard(_OptionTradesFields):
    intent: Literal["advanced-option-query"] = "advanced-option-query"


class LastOptionTradeCard(BaseModel):
    intent: Literal["last-option-trade"] = "last-option-trade"
    symbol: str | None = None
    direction: str | None = None
    option_right: str | None = None
    trade: TradeRowSchema | None = None


class StrikeExtremeCard(BaseModel):
    intent: Literal["highest-or-lowest-strike"] = "highest-or-lowest-strike"
    symbol: str | None = None
    order: Literal["highest", "lowest"]
    direction: str | None = None
    option_right: str | None = None
    options_considered: int
    trade: TradeRowSchema | None = None


class TotalPremiumCard(BaseModel):
    intent: Literal["total-premium"] = "total-premium"
    symbol: str | None = None
    period: str | None = None
    direction: str | None = None
    option_right: str | None = None
    trade_count: int
    total_contracts: float
    total_premium: float
    average_premium: float | None = None


class ExpiringOptionsCard(BaseModel):
    intent: Literal["expiring-options"] = "expiring-options"
    symbol: str | None = None
    window: WindowSchema
    total_contracts: float
    call_count: int
    put_count: int
    trades: List[TradeRowSchema]


class BalanceSchema(BaseModel):
    balance_date: date
    cash_balance: float | None = None
    account_equity: float | None = None
    day_trading_bp: float | None = None
    stock_lmv: float | None = None
    stock_smv: float | None = None
    options_lmv: float | None = None
    options_smv: float | None = None
    credit_balance: float | None = None
    debit_balance: float | None = None
    house_requirement: float | None = None
    house_excess_deficit: float | None = None
    fed_requirement: float | None = None
    fed_excess_deficit: float | None = None


class BalanceTrendSchema(BaseModel):
    balance_field: Literal["debit_balance", "credit_balance"]
    period: str
    samples: int
    average: float
    highest: float
    highest_date: date
    lowest: float
    lowest_date: date


class AccountBalanceCard(BaseModel):
    intent: Literal["account-balance"] = "account-balance"
    query_type: str
    snapshot: BalanceSchema | None = None
    trend: BalanceTrendSchema | None = None


class FeeLineSchema(BaseModel):
    fee_date: date
    amount: float
    symbol: str | None = None


class FeesCard(BaseModel):
    intent: Literal["fees"] = "fees"
    fee_type: str
    period: str
    symbol: str | None = None
    total_amount: float
    transaction_count: int
    breakdown: List[FeeLineSchema]


CardPayload = Annotated[
    Union[
        AccountBalanceCard,
        FeesCard,
        ExpiringOptionsCard,
        AllTradesCard,
        BulkOptionsCard,
        LastOptionTradeCard,
        StrikeExtremeCard,
        TotalPremiumCard,
        AdvancedOptionQueryCard,
        TimeWindowTradesCard,
        AveragePriceCard,
        PriceExtremesCard,
        ProfitableTradesCard,
        DetailedTradesCard,
        TradeSummaryCard,
    ],
    Field(discriminator="intent"),
]


__all__ = [
    "AccountBalanceCard",
    "AdvancedOptionQueryCard",
    "AllTradesCard",
    "AveragePriceCard",
    "BalanceSchema",
    "BalanceTrendSchema",
    "BulkOptionsCard",
    "CardPayload",
    "DetailedTradesCard",
    "ExpiringOptionsCard",
    "FeeLineSchema",
    "FeesCard",
    "LastOptionTradeCard",
    "OptionAggregateSchema",
    "PriceExtremesCard",
    "ProfitableTradesCard",
    "RoundTripSchema",
    "StrikeExtremeCard",
    "TimeWindowTradesCard",
    "TotalPremiumCard",
    "TradeRowSchema",
    "TradeSummaryCard",
    "TradeWindowSummary",
    "WindowSchema",
    "money",
    "as_float",
]
