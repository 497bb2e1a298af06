"""FIFO round-trip matching."""

from __future__ import annotations

import random
from datetime import date, timedelta
from decimal import Decimal

from trade_insights.lots import (
    match_round_trips,
    profitable_round_trips,
    sort_for_matching,
    split_by_direction,
    total_realized,
)


def test_single_buy_and_sell(make_trade):
    buys = [make_trade(date(2025, 1, 1), "Buy", "10", "100")]
    sells = [make_trade(date(2025, 1, 5), "Sell", "10", "120")]
    trips = match_round_trips(buys, sells)
    assert len(trips) == 1
    assert trips[0].realized_pnl == Decimal("200")


def test_sell_matches_earliest_eligible_buy(make_trade):
    buys = [
        make_trade(date(2025, 1, 1), "Buy", "5", "50"),
        make_trade(date(2025, 1, 10), "Buy", "5", "40"),
    ]
    sells = [make_trade(date(2025, 1, 3), "Sell", "5", "60")]
    trips = match_round_trips(buys, sells)
    assert len(trips) == 1
    assert trips[0].buy is buys[0]
    assert trips[0].realized_pnl == Decimal("50")


def test_sell_before_any_buy_stays_unmatched(make_trade):
    buys = [make_trade(date(2025, 1, 10), "Buy", "5", "40")]
    sells = [
        make_trade(date(2025, 1, 3), "Sell", "5", "60"),
        make_trade(date(2025, 1, 12), "Sell", "5", "45"),
    ]
    trips = match_round_trips(buys, sells)
    assert [trip.sell for trip in trips] == [sells[1]]
    assert trips[0].realized_pnl == Decimal("25")


def test_equity_and_option_lots_never_match(make_trade):
    buys = [make_trade(date(2025, 1, 1), "Buy", "1", "2.00", symbol="TSLA", option=True)]
    sells = [make_trade(date(2025, 1, 2), "Sell", "100", "250", symbol="TSLA")]
    assert match_round_trips(buys, sells) == []


def test_equity_round_trips_come_before_options(make_trade):
    buys = [
        make_trade(date(2025, 1, 1), "Buy", "1", "2.00", symbol="TSLA", option=True),
        make_trade(date(2025, 1, 2), "Buy", "10", "100"),
    ]
    sells = [
        make_trade(date(2025, 1, 3), "Sell", "1", "3.00", symbol="TSLA", option=True),
        make_trade(date(2025, 1, 4), "Sell", "10", "90"),
    ]
    trips = match_round_trips(buys, sells)
    assert [trip.security_class.value for trip in trips] == ["Equity", "Option"]


def test_partial_sell_reports_buy_quantity(make_trade):
    buys = [make_trade(date(2025, 1, 1), "Buy", "100", "10")]
    sells = [make_trade(date(2025, 1, 2), "Sell", "50", "12")]
    trip = match_round_trips(buys, sells)[0]
    assert trip.quantity == Decimal("100")
    assert trip.realized_pnl == Decimal("200")


def test_same_day_lots_match_by_trade_id(make_trade):
    day = date(2025, 1, 2)
    trades = [
        make_trade(day, "Buy", "1", "12", trade_id="B2"),
        make_trade(day, "Sell", "1", "15", trade_id="S1"),
        make_trade(day, "Buy", "1", "10", trade_id="B1"),
    ]
    buys, sells = split_by_direction(sort_for_matching(trades))
    assert [b.trade_id for b in buys] == ["B1", "B2"]
    assert match_round_trips(buys, sells)[0].buy.trade_id == "B1"


def test_profitable_view_filters_and_sorts(make_trade):
    buys = [
        make_trade(date(2025, 1, 1), "Buy", "10", "100"),
        make_trade(date(2025, 1, 2), "Buy", "10", "100"),
        make_trade(date(2025, 1, 3), "Buy", "10", "100"),
    ]
    sells = [
        make_trade(date(2025, 1, 4), "Sell", "10", "101"),
        make_trade(date(2025, 1, 5), "Sell", "10", "100"),
        make_trade(date(2025, 1, 6), "Sell", "10", "105"),
    ]
    trips = match_round_trips(buys, sells)
    winners = profitable_round_trips(trips)
    assert [trip.realized_pnl for trip in winners] == [Decimal("50"), Decimal("10")]
    assert total_realized(winners) == Decimal("60")


def test_matching_does_not_mutate_inputs(make_trade):
    buys = [make_trade(date(2025, 1, 1), "Buy"), make_trade(date(2025, 1, 2), "Buy")]
    sells = [make_trade(date(2025, 1, 3), "Sell")]
    snapshot = (list(buys), list(sells))
    match_round_trips(buys, sells)
    assert (buys, sells) == snapshot


def test_matcher_invariants_on_generated_ledgers(make_trade):
    rng = random.Random(20251119)
    start = date(2025, 1, 1)
    for _ in range(50):
        trades = [
            make_trade(
                start + timedelta(days=rng.randint(0, 30)),
                rng.choice(["Buy", "Sell"]),
                str(rng.randint(1, 20)),
                str(rng.randint(1, 50)),
                option=rng.random() < 0.4,
            )
            for _ in range(rng.randint(0, 25))
        ]
        buys, sells = split_by_direction(sort_for_matching(trades))
        trips = match_round_trips(buys, sells)

        seen = set()
        for trip in trips:
            assert trip.buy.trade_date <= trip.sell.trade_date
            assert trip.buy.security_class is trip.sell.security_class
            assert trip.buy.trade_id not in seen and trip.sell.trade_id not in seen
            seen.update({trip.buy.trade_id, trip.sell.trade_id})

        for security_class in {t.security_class for t in trades}:
            class_trips = [t for t in trips if t.security_class is security_class]
            class_buys = [b for b in buys if b.security_class is security_class]
            class_sells = [s for s in sells if s.security_class is security_class]
            assert len(class_trips) <= min(len(class_buys), len(class_sells))
