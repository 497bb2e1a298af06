"""Price extremum and aggregate statistics over filtered trade sets."""
from __future__ import annotations

from decimal import Decimal
from enum import Enum
from typing import Iterable, List, Optional, Sequence, Tuple

from .models import (
    OPTION_CONTRACT_MULTIPLIER,
    ZERO,
    Direction,
    OptionAggregate,
    OptionRight,
    PriceStat,
    TradeRecord,
)


class TieBreak(str, Enum):
    """How to pick the representative record when several share the extreme."""

    FIRST_IN_INPUT = "first_in_input"
    MOST_RECENT = "most_recent"
    EARLIEST = "earliest"


_Priced = Tuple[TradeRecord, Decimal]


def _valid_price(record: TradeRecord) -> Decimal | None:
    price = record.unit_price
    if price is None or price <= 0:
        return None
    return price


def _replaces_on_tie(candidate: TradeRecord, current: TradeRecord, tie_break: TieBreak) -> bool:
    if tie_break is TieBreak.MOST_RECENT:
        return candidate.trade_date > current.trade_date
    if tie_break is TieBreak.EARLIEST:
        return candidate.trade_date < current.trade_date
    return False


def _extreme(priced: Sequence[_Priced], *, highest: bool, tie_break: TieBreak) -> Optional[_Priced]:
    best: Optional[_Priced] = None
    for item in priced:
        if best is None:
            best = item
            continue
        price, best_price = item[1], best[1]
        if (price > best_price) if highest else (price < best_price):
            best = item
        elif price == best_price and _replaces_on_tie(item[0], best[0], tie_break):
            best = item
    return best


def aggregate(
    trades: Iterable[TradeRecord],
    *,
    tie_break: TieBreak = TieBreak.FIRST_IN_INPUT,
) -> PriceStat:
    """Compute highest/lowest/average unit price plus totals.

    Records with a missing or non-positive price are skipped for the extremes
    and the average but still contribute to the counts and totals. When no
    record carries a usable price every numeric field is ``None``, never zero.
    With the default tie-break the first record in input order represents a
    tied extreme, so date-descending input surfaces the most recent occurrence.
    """

    records = list(trades)
    priced: List[_Priced] = []
    for record in records:
        price = _valid_price(record)
        if price is not None:
            priced.append((record, price))

    if not priced:
        return PriceStat(
            highest=None,
            highest_date=None,
            highest_quantity=None,
            lowest=None,
            lowest_date=None,
            lowest_quantity=None,
            average=None,
            trade_count=None,
            total_quantity=None,
            total_notional=None,
        )

    high_record, high_price = _extreme(priced, highest=True, tie_break=tie_break)  # type: ignore[misc]
    low_record, low_price = _extreme(priced, highest=False, tie_break=tie_break)  # type: ignore[misc]
    average = sum((price for _, price in priced), ZERO) / len(priced)

    return PriceStat(
        highest=high_price,
        highest_date=high_record.trade_date,
        highest_quantity=high_record.quantity or ZERO,
        lowest=low_price,
        lowest_date=low_record.trade_date,
        lowest_quantity=low_record.quantity or ZERO,
        average=average,
        trade_count=len(records),
        total_quantity=sum((r.quantity or ZERO for r in records), ZERO),
        total_notional=sum((r.notional for r in records), ZERO),
    )


def average_price(trades: Iterable[TradeRecord]) -> Decimal | None:
    return aggregate(trades).average


def dominant_direction(trades: Iterable[TradeRecord]) -> Direction | None:
    """Return the shared direction when every record is a buy or every one a sell."""

    directions = {record.direction for record in trades}
    if len(directions) == 1:
        return directions.pop()
    return None


def strike_extreme(trades: Iterable[TradeRecord], *, highest: bool = True) -> TradeRecord | None:
    """Option record with the highest (or lowest) strike; first wins on ties."""

    best: TradeRecord | None = None
    for record in trades:
        if not record.is_option or record.strike is None:
            continue
        if best is None:
            best = record
        elif (record.strike > best.strike) if highest else (record.strike < best.strike):  # type: ignore[operator]
            best = record
    return best


def summarize_options(trades: Iterable[TradeRecord]) -> OptionAggregate:
    """Counts and premium totals; option premium is per share, 100 shares a contract."""

    records = list(trades)
    total_contracts = ZERO
    total_shares = ZERO
    total_premium = ZERO
    for record in records:
        quantity = record.quantity or ZERO
        if record.is_option:
            total_contracts += quantity
            total_premium += (record.unit_price or ZERO) * quantity * OPTION_CONTRACT_MULTIPLIER
        else:
            total_shares += quantity
            total_premium += abs(record.gross_amount or ZERO)

    average_premium = None
    if total_contracts > 0:
        average_premium = total_premium / total_contracts / OPTION_CONTRACT_MULTIPLIER

    return OptionAggregate(
        trade_count=len(records),
        total_premium=total_premium,
        total_notional=sum((r.notional for r in records), ZERO),
        average_premium=average_premium,
        total_contracts=total_contracts,
        total_shares=total_shares,
        shares_covered=total_contracts * OPTION_CONTRACT_MULTIPLIER,
        buy_count=sum(1 for r in records if r.direction is Direction.BUY),
        sell_count=sum(1 for r in records if r.direction is Direction.SELL),
        equity_count=sum(1 for r in records if not r.is_option),
        option_count=sum(1 for r in records if r.is_option),
        call_count=sum(1 for r in records if r.option_right is OptionRight.CALL),
        put_count=sum(1 for r in records if r.option_right is OptionRight.PUT),
    )


__all__ = [
    "TieBreak",
    "aggregate",
    "average_price",
    "dominant_direction",
    "strike_extreme",
    "summarize_options",
]
