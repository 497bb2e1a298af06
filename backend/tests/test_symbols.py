"""Company-name and ticker normalization."""

from __future__ import annotations

import pytest

from trade_insights.symbols import find_all_symbols, find_company_symbol, is_plausible_ticker, normalize_symbol


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("apple", "AAPL"),
        ("Bank of America", "BAC"),
        ("  Tesla ", "TSLA"),
        ("$nvda", "NVDA"),
        ("tsla?", "TSLA"),
        ("zs", "ZS"),
    ],
)
def test_normalize_symbol(raw, expected):
    assert normalize_symbol(raw) == expected


def test_plausible_ticker_rejects_prose():
    assert is_plausible_ticker("ZS")
    assert not is_plausible_ticker("THE")
    assert not is_plausible_ticker("TOOLONG")
    assert not is_plausible_ticker("A1")


def test_find_company_symbol_prefers_listed_tickers():
    assert find_company_symbol("SPY closed higher than Apple") == "SPY"
    assert find_company_symbol("I like Tesla") == "TSLA"
    assert find_company_symbol("nothing to see") is None


def test_find_all_symbols_keeps_first_mention_order():
    assert find_all_symbols("AAPL and Microsoft, then AAPL again") == ["AAPL", "MSFT"]
