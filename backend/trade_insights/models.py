"""Domain models used by the trade analytics engine."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Mapping, Optional

OPTION_CONTRACT_MULTIPLIER = Decimal("100")
ZERO = Decimal("0")


class SecurityClass(str, Enum):
    EQUITY = "Equity"
    OPTION = "Option"

    @classmethod
    def parse(cls, value: Any) -> "SecurityClass":
        """Accept enum values, store codes (``S``/``O``) and common aliases."""

        if isinstance(value, cls):
            return value
        token = str(value or "").strip().lower()
        if token in {"o", "option", "options", "opt"}:
            return cls.OPTION
        if token in {"s", "stock", "equity", "e", "stk"}:
            return cls.EQUITY
        raise ValueError(f"Unknown security class: {value!r}")


class Direction(str, Enum):
    BUY = "Buy"
    SELL = "Sell"

    @classmethod
    def parse(cls, value: Any) -> "Direction":
        if isinstance(value, cls):
            return value
        token = str(value or "").strip().lower()
        if token in {"b", "buy", "bought", "long"}:
            return cls.BUY
        if token in {"s", "sell", "sold", "short"}:
            return cls.SELL
        raise ValueError(f"Unknown trade direction: {value!r}")


class OptionRight(str, Enum):
    CALL = "Call"
    PUT = "Put"

    @classmethod
    def parse(cls, value: Any) -> Optional["OptionRight"]:
        if isinstance(value, cls):
            return value
        token = str(value or "").strip().lower()
        if token in {"c", "call", "calls"}:
            return cls.CALL
        if token in {"p", "put", "puts"}:
            return cls.PUT
        return None


def to_decimal(value: Any) -> Decimal | None:
    """Parse a numeric store value, returning ``None`` when it is unusable."""

    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        number = value
    else:
        text = str(value).strip().replace(",", "")
        if not text:
            return None
        try:
            number = Decimal(text)
        except InvalidOperation:
            return None
    if not number.is_finite():
        return None
    return number


def to_date(value: Any) -> date | None:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value).strip()[:10])
    except ValueError:
        return None


def _pick(row: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        if key in row and row[key] is not None:
            return row[key]
    return None


@dataclass(frozen=True)
class TradeRecord:
    """A settled trade row as read from the trade-record store."""

    trade_id: str
    trade_date: date
    symbol: str
    security_class: SecurityClass
    direction: Direction
    quantity: Decimal | None
    unit_price: Decimal | None
    underlying_symbol: Optional[str] = None
    strike: Decimal | None = None
    expiration: Optional[date] = None
    option_right: Optional[OptionRight] = None
    gross_amount: Decimal | None = None
    net_amount: Decimal | None = None
    commission: Decimal | None = None

    @property
    def is_option(self) -> bool:
        return self.security_class is SecurityClass.OPTION

    @property
    def contract_multiplier(self) -> Decimal:
        return OPTION_CONTRACT_MULTIPLIER if self.is_option else Decimal("1")

    @property
    def notional(self) -> Decimal:
        """Absolute net amount; the sign only encodes direction."""

        return abs(self.net_amount) if self.net_amount is not None else ZERO

    @property
    def root_symbol(self) -> str:
        return self.underlying_symbol or self.symbol

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "TradeRecord":
        """Build a record from a raw store row.

        Both the broker export column names (``StockTradePrice``,
        ``OptionTradePremium``, ``Call/Put``...) and snake_case keys are
        accepted. Malformed numeric fields become ``None`` instead of raising so
        that one bad row never aborts an aggregation.
        """

        trade_date = to_date(_pick(row, "trade_date", "Date", "date"))
        if trade_date is None:
            raise ValueError(f"Trade row without a usable date: {row!r}")
        security_class = SecurityClass.parse(
            _pick(row, "security_class", "SecurityType", "security_type")
        )
        is_option = security_class is SecurityClass.OPTION
        if is_option:
            quantity = _pick(row, "quantity", "OptionContracts", "contracts")
            unit_price = _pick(row, "unit_price", "OptionTradePremium", "premium")
        else:
            quantity = _pick(row, "quantity", "StockShareQty", "shares")
            unit_price = _pick(row, "unit_price", "StockTradePrice", "price")
        symbol = str(_pick(row, "symbol", "Symbol") or "").strip().upper()
        underlying = _pick(row, "underlying_symbol", "UnderlyingSymbol")
        return cls(
            trade_id=str(_pick(row, "trade_id", "TradeID", "id")),
            trade_date=trade_date,
            symbol=symbol,
            underlying_symbol=str(underlying).strip().upper() if underlying else symbol,
            security_class=security_class,
            direction=Direction.parse(_pick(row, "direction", "TradeType", "trade_type")),
            quantity=to_decimal(quantity),
            unit_price=to_decimal(unit_price),
            strike=to_decimal(_pick(row, "strike", "Strike")) if is_option else None,
            expiration=to_date(_pick(row, "expiration", "Expiration")) if is_option else None,
            option_right=OptionRight.parse(_pick(row, "option_right", "Call/Put", "call_put"))
            if is_option
            else None,
            gross_amount=to_decimal(_pick(row, "gross_amount", "GrossAmount")),
            net_amount=to_decimal(_pick(row, "net_amount", "NetAmount")),
            commission=to_decimal(_pick(row, "commission", "Commission")),
        )


@dataclass(frozen=True)
class TimeWindow:
    """Inclusive calendar window resolved from a relative time phrase."""

    start_date: date
    end_date: date
    description: str
    trading_day_count: int
    weekday: Optional[str] = None

    def contains(self, day: date) -> bool:
        return self.start_date <= day <= self.end_date


@dataclass(frozen=True)
class RoundTrip:
    """A matched buy and sell of the same security class."""

    buy: TradeRecord
    sell: TradeRecord
    quantity: Decimal
    buy_price: Decimal
    sell_price: Decimal

    @property
    def realized_pnl(self) -> Decimal:
        return (self.sell_price - self.buy_price) * self.quantity

    @property
    def security_class(self) -> SecurityClass:
        return self.buy.security_class

    @property
    def buy_date(self) -> date:
        return self.buy.trade_date

    @property
    def sell_date(self) -> date:
        return self.sell.trade_date


@dataclass(frozen=True)
class PriceStat:
    """Extremum and aggregate statistics for a filtered trade set."""

    highest: Decimal | None
    highest_date: Optional[date]
    highest_quantity: Decimal | None
    lowest: Decimal | None
    lowest_date: Optional[date]
    lowest_quantity: Decimal | None
    average: Decimal | None
    trade_count: int | None
    total_quantity: Decimal | None
    total_notional: Decimal | None

    @property
    def is_empty(self) -> bool:
        return self.average is None


@dataclass(frozen=True)
class OptionAggregate:
    """Counts and premium totals over a mixed or option-only trade set."""

    trade_count: int
    total_premium: Decimal
    total_notional: Decimal
    average_premium: Decimal | None
    total_contracts: Decimal
    total_shares: Decimal
    shares_covered: Decimal
    buy_count: int
    sell_count: int
    equity_count: int
    option_count: int
    call_count: int
    put_count: int


__all__ = [
    "OPTION_CONTRACT_MULTIPLIER",
    "SecurityClass",
    "Direction",
    "OptionRight",
    "TradeRecord",
    "TimeWindow",
    "RoundTrip",
    "PriceStat",
    "OptionAggregate",
    "to_decimal",
    "to_date",
]
