"""FIFO matching of buy and sell lots into closed round-trips."""
from __future__ import annotations

from collections import deque
from decimal import Decimal
from typing import Deque, Dict, Iterable, List, Sequence

from .models import ZERO, Direction, RoundTrip, SecurityClass, TradeRecord

_CLASS_ORDER = (SecurityClass.EQUITY, SecurityClass.OPTION)


def sort_for_matching(trades: Iterable[TradeRecord]) -> List[TradeRecord]:
    """Ascending by ``(trade_date, trade_id)`` so same-day lots match reproducibly."""

    return sorted(trades, key=lambda trade: (trade.trade_date, trade.trade_id))


def split_by_direction(trades: Iterable[TradeRecord]) -> tuple[List[TradeRecord], List[TradeRecord]]:
    buys: List[TradeRecord] = []
    sells: List[TradeRecord] = []
    for trade in trades:
        (buys if trade.direction is Direction.BUY else sells).append(trade)
    return buys, sells


def _group_by_class(trades: Iterable[TradeRecord]) -> Dict[SecurityClass, List[TradeRecord]]:
    grouped: Dict[SecurityClass, List[TradeRecord]] = {}
    for trade in trades:
        grouped.setdefault(trade.security_class, []).append(trade)
    return grouped


def _match_class(buys: Sequence[TradeRecord], sells: Sequence[TradeRecord]) -> List[RoundTrip]:
    open_lots: Deque[TradeRecord] = deque(buys)
    round_trips: List[RoundTrip] = []
    for sell in sells:
        # Buys are date-ascending, so only the head of the queue can be eligible.
        if not open_lots or open_lots[0].trade_date > sell.trade_date:
            continue
        buy = open_lots.popleft()
        round_trips.append(
            RoundTrip(
                buy=buy,
                sell=sell,
                quantity=buy.quantity or ZERO,
                buy_price=buy.unit_price or ZERO,
                sell_price=sell.unit_price or ZERO,
            )
        )
    return round_trips


def match_round_trips(
    buys: Sequence[TradeRecord], sells: Sequence[TradeRecord]
) -> List[RoundTrip]:
    """Pair sells with the oldest eligible buy of the same security class.

    Both inputs must already be sorted ascending by ``(trade_date, trade_id)``.
    Equity and option lots never match each other. A sell with no unmatched
    buy dated on or before it is left unmatched, and each buy closes at most
    one sell. Lots are not split: the round-trip reports the buy's quantity.
    Equity round-trips come first, then options, each in sell order.
    """

    buys_by_class = _group_by_class(buys)
    sells_by_class = _group_by_class(sells)
    round_trips: List[RoundTrip] = []
    for security_class in _CLASS_ORDER:
        round_trips.extend(
            _match_class(
                buys_by_class.get(security_class, []),
                sells_by_class.get(security_class, []),
            )
        )
    return round_trips


def profitable_round_trips(round_trips: Iterable[RoundTrip]) -> List[RoundTrip]:
    """Round-trips with a positive realized P&L, largest first."""

    winners = [trip for trip in round_trips if trip.realized_pnl > 0]
    return sorted(winners, key=lambda trip: trip.realized_pnl, reverse=True)


def total_realized(round_trips: Iterable[RoundTrip]) -> Decimal:
    return sum((trip.realized_pnl for trip in round_trips), ZERO)


__all__ = [
    "match_round_trips",
    "profitable_round_trips",
    "sort_for_matching",
    "split_by_direction",
    "total_realized",
]
