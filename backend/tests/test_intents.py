"""Assistant reply classification into card intents."""

from __future__ import annotations

from datetime import date

import pytest

from trade_insights.intents import (
    DETECTORS,
    NO_MATCH,
    AccountQuery,
    Detector,
    DirectionFilter,
    Entities,
    FeeType,
    IntentTag,
    Matched,
    ReplyContext,
    StrikeOrder,
    extract_direction,
    extract_option_right,
    extract_trade_counts,
    matching_detectors,
    resolve_intent,
    run_cascade,
)
from trade_insights.models import OptionRight

ANCHOR = date(2025, 11, 19)


def _resolve(text: str, prior_symbol: str | None = None) -> Matched | None:
    return resolve_intent(text, prior_symbol, anchor=ANCHOR)


def test_detectors_run_most_specific_first():
    assert [detector.intent for detector in DETECTORS] == [
        IntentTag.ACCOUNT_BALANCE,
        IntentTag.FEES,
        IntentTag.EXPIRING_OPTIONS,
        IntentTag.ALL_TRADES,
        IntentTag.BULK_OPTIONS,
        IntentTag.LAST_OPTION_TRADE,
        IntentTag.HIGHEST_OR_LOWEST_STRIKE,
        IntentTag.TOTAL_PREMIUM,
        IntentTag.ADVANCED_OPTION_QUERY,
        IntentTag.TIME_WINDOW_TRADES,
        IntentTag.AVERAGE_PRICE,
        IntentTag.PRICE_EXTREMES,
        IntentTag.PROFITABLE_TRADES,
        IntentTag.DETAILED_TRADES,
        IntentTag.TRADE_SUMMARY,
    ]


# Still-checking guard


def test_announcement_without_data_is_not_a_card():
    assert _resolve("I'll check your profitable trades") is None


def test_profitable_trade_count_resolves():
    result = _resolve("You have 2 profitable trades totaling $340")
    assert result.intent is IntentTag.PROFITABLE_TRADES
    assert result.entities.symbol is None


def test_guard_applies_to_every_detector():
    text = "Let me check your trades from last week."
    context = ReplyContext.from_reply(text, anchor=ANCHOR)
    assert context.is_pending
    assert matching_detectors(text, anchor=ANCHOR) == []
    assert _resolve(text) is None


def test_announcement_with_results_still_matches():
    result = _resolve("Let me check... you have 2 profitable trades totaling $340.")
    assert result.intent is IntentTag.PROFITABLE_TRADES


@pytest.mark.parametrize(
    "text",
    [
        "Let me check your trades over the last 5 days.",
        "I'll pull your AAPL trades from Nov 3.",
        "Let me look at your trades for the past three trading days.",
        "I'll check your trades in 2024.",
    ],
)
def test_period_numbers_are_not_result_data(text):
    assert ReplyContext.from_reply(text, anchor=ANCHOR).is_pending
    assert _resolve(text) is None


def test_counts_beside_a_period_are_result_data():
    result = _resolve("Let me check... you made 4 trades in the last 5 days.")
    assert result.intent is IntentTag.TIME_WINDOW_TRADES


@pytest.mark.parametrize("text", ["", "   ", "Hello! How can I help you today?"])
def test_plain_replies_have_no_card(text):
    assert _resolve(text) is None


# Account and fees


@pytest.mark.parametrize(
    "text, query",
    [
        ("Your cash balance is $12,345.67 as of today.", AccountQuery.CASH_BALANCE),
        ("Your buying power is $50,000.", AccountQuery.BUYING_POWER),
        ("Your debit balances averaged $1,200 this month.", AccountQuery.DEBIT_BALANCES),
    ],
)
def test_account_balance_queries(text, query):
    result = _resolve(text)
    assert result.intent is IntentTag.ACCOUNT_BALANCE
    assert result.entities.account_query is query


def test_balance_words_without_amount_do_not_match():
    assert _resolve("Your cash balance is healthy.") is None


@pytest.mark.parametrize(
    "text, fee_type, period",
    [
        ("You paid $45.20 in commissions last month.", FeeType.COMMISSION, "last month"),
        ("You were charged $12.50 in margin interest this month.", FeeType.DEBIT_INTEREST, "this month"),
    ],
)
def test_fee_queries(text, fee_type, period):
    result = _resolve(text)
    assert result.intent is IntentTag.FEES
    assert result.entities.fee_type is fee_type
    assert result.entities.time_phrase == period


# Options


def test_expiring_options_win_over_bulk_options():
    text = "You have 3 option contracts expiring this week: 2 calls and 1 put."
    result = _resolve(text)
    assert result.intent is IntentTag.EXPIRING_OPTIONS
    assert result.entities.expiration_phrase == "this week"
    assert result.entities.portfolio_wide
    assert result.entities.option_right is None
    assert matching_detectors(text, anchor=ANCHOR)[:2] == ["expiring_options", "bulk_options"]


def test_listed_expiration_date_does_not_claim_expiring_options():
    text = "Your most recent option trade: you sold 1 TSLA 250 call expiring 2025-11-21 for $150."
    result = _resolve(text)
    assert result.intent is IntentTag.LAST_OPTION_TRADE
    assert "expiring_options" not in matching_detectors(text, anchor=ANCHOR)


def test_all_trades_with_both_counts():
    result = _resolve("Here are all of your AAPL trades: 5 stock trades and 2 option trades.")
    assert result.intent is IntentTag.ALL_TRADES
    assert result.entities.symbol == "AAPL"
    assert (result.entities.stock_count, result.entities.option_count) == (5, 2)


def test_bulk_option_trades_for_a_symbol():
    result = _resolve("You made 4 option trades on TSLA this month.")
    assert result.intent is IntentTag.BULK_OPTIONS
    assert result.entities.symbol == "TSLA"
    assert result.entities.time_phrase == "this month"
    assert not result.entities.portfolio_wide


def test_bulk_option_positions_portfolio_wide():
    result = _resolve("You have 5 open option positions across the portfolio.")
    assert result.intent is IntentTag.BULK_OPTIONS
    assert result.entities.portfolio_wide


def test_last_option_trade():
    result = _resolve("Your latest option trade: you sold 1 NVDA put at $3.10.")
    assert result.intent is IntentTag.LAST_OPTION_TRADE
    assert result.entities.symbol == "NVDA"
    assert result.entities.direction is DirectionFilter.SELL
    assert result.entities.option_right is OptionRight.PUT


def test_single_option_trade_beats_profit_wording():
    text = "Your most recent option trade was your most profitable trade, closing for $200."
    assert _resolve(text).intent is IntentTag.LAST_OPTION_TRADE
    assert "profitable_trades" in matching_detectors(text, anchor=ANCHOR)


def test_counting_language_hands_off_to_profitable_trades():
    text = "Across 4 trades, your most recent option trade was also your most profitable trade, netting $200."
    assert _resolve(text).intent is IntentTag.PROFITABLE_TRADES
    assert "last_option_trade" not in matching_detectors(text, anchor=ANCHOR)


@pytest.mark.parametrize(
    "text, order, symbol",
    [
        ("The highest strike on your AAPL calls was $210.", StrikeOrder.HIGHEST, "AAPL"),
        ("Your lowest strike put was the 95 strike on SPY.", StrikeOrder.LOWEST, "SPY"),
    ],
)
def test_strike_extremes(text, order, symbol):
    result = _resolve(text)
    assert result.intent is IntentTag.HIGHEST_OR_LOWEST_STRIKE
    assert result.entities.strike_order is order
    assert result.entities.symbol == symbol


def test_total_premium():
    result = _resolve("You collected $1,250 in premium from selling covered calls this year.")
    assert result.intent is IntentTag.TOTAL_PREMIUM
    assert result.entities.direction is DirectionFilter.SELL
    assert result.entities.option_right is OptionRight.CALL
    assert result.entities.time_phrase == "this year"


def test_advanced_option_filters():
    result = _resolve("You sold TSLA puts last week for $4.20 each.")
    assert result.intent is IntentTag.ADVANCED_OPTION_QUERY
    assert result.entities == Entities(
        symbol="TSLA",
        direction=DirectionFilter.SELL,
        time_phrase="last week",
        option_right=OptionRight.PUT,
    )


# Trade listings


def test_time_window_trades_portfolio_wide():
    result = _resolve("You made 5 trades in the last 3 trading days.")
    assert result.intent is IntentTag.TIME_WINDOW_TRADES
    assert result.entities.time_phrase == "the last 3 trading days"
    assert result.entities.portfolio_wide
    assert result.entities.symbol is None


def test_weekday_with_several_symbols_is_portfolio_wide():
    result = _resolve("On Monday you traded AAPL and MSFT.")
    assert result.intent is IntentTag.TIME_WINDOW_TRADES
    assert result.entities.portfolio_wide
    assert result.entities.symbol is None


def test_weekday_with_one_named_symbol_stays_scoped():
    result = _resolve("You traded AAPL twice on Monday.")
    assert result.intent is IntentTag.TIME_WINDOW_TRADES
    assert result.entities.symbol == "AAPL"
    assert not result.entities.portfolio_wide


def test_average_price_uses_prior_symbol():
    result = _resolve("Your average price this month was $12.50.", prior_symbol="tesla")
    assert result.intent is IntentTag.AVERAGE_PRICE
    assert result.entities.symbol == "TSLA"


def test_average_price_with_symbol_in_text():
    result = _resolve("Your average purchase price for NVDA this year was $118.40.")
    assert result.intent is IntentTag.AVERAGE_PRICE
    assert result.entities.symbol == "NVDA"


def test_average_with_highest_and_lowest_is_full_statistics():
    result = _resolve("Your average price was $50, with the highest at $60 and the lowest at $40.")
    assert result.intent is IntentTag.PRICE_EXTREMES


def test_price_extremes():
    text = (
        "For AAPL this year, your highest sale price was $231.40, your lowest was $171.05, "
        "and the average was $203.12."
    )
    result = _resolve(text)
    assert result.intent is IntentTag.PRICE_EXTREMES
    assert result.entities.symbol == "AAPL"
    assert result.entities.time_phrase == "this year"


def test_passing_mention_of_profit_is_a_listing():
    result = _resolve("Here are your AAPL trades. One of them was a profit.")
    assert result.intent is IntentTag.DETAILED_TRADES
    assert result.entities.symbol == "AAPL"


def test_detailed_trades():
    result = _resolve("You bought 100 shares of MSFT at $410.25 and sold 50 shares at $425.00.")
    assert result.intent is IntentTag.DETAILED_TRADES
    assert result.entities.symbol == "MSFT"
    assert result.entities.direction is DirectionFilter.EITHER


def test_trade_summary_counts():
    result = _resolve("For AMD you have 3 stock trades and 4 option trades.")
    assert result.intent is IntentTag.TRADE_SUMMARY
    assert result.entities.symbol == "AMD"
    assert (result.entities.stock_count, result.entities.option_count) == (3, 4)


# Entity extraction


def test_direction_from_verbs():
    assert extract_direction("you bought and sold") is DirectionFilter.EITHER
    assert extract_direction("you went long") is DirectionFilter.BUY
    assert extract_direction("you shorted it") is DirectionFilter.SELL
    assert extract_direction("nothing here") is DirectionFilter.EITHER


def test_option_right_is_ambiguous_when_both_appear():
    assert extract_option_right("2 calls") is OptionRight.CALL
    assert extract_option_right("a put") is OptionRight.PUT
    assert extract_option_right("calls and puts") is None


def test_trade_counts_in_either_order():
    assert extract_trade_counts("2 option trades and 5 stock trades") == (5, 2)
    assert extract_trade_counts("no stock trades and 3 options") == (0, 3)
    assert extract_trade_counts("7 trades") is None


# Cascade mechanics


def test_cascade_stops_at_first_match():
    def explode(context):
        raise AssertionError("later detectors must not run")

    detectors = (
        Detector("first", IntentTag.FEES, lambda context: Entities()),
        Detector("second", IntentTag.TRADE_SUMMARY, explode),
    )
    context = ReplyContext.from_reply("You paid $1 in fees", anchor=ANCHOR)
    assert run_cascade(context, detectors) == Matched(IntentTag.FEES, Entities())


def test_cascade_without_match_returns_sentinel():
    context = ReplyContext.from_reply("Nice weather", anchor=ANCHOR)
    result = run_cascade(context)
    assert result is NO_MATCH
    assert not result
