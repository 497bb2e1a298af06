"""Company-name to ticker normalization."""
from __future__ import annotations

import re

COMPANY_TICKERS = {
    "apple": "AAPL",
    "google": "GOOGL",
    "alphabet": "GOOGL",
    "amazon": "AMZN",
    "microsoft": "MSFT",
    "tesla": "TSLA",
    "nvidia": "NVDA",
    "meta": "META",
    "facebook": "META",
    "netflix": "NFLX",
    "amd": "AMD",
    "intel": "INTC",
    "bank of america": "BAC",
    "citigroup": "C",
    "gamestop": "GME",
    "lucid": "LCID",
    "qualcomm": "QCOM",
}

KNOWN_TICKERS = frozenset(
    set(COMPANY_TICKERS.values())
    | {"GOOG", "SPY", "QQQ", "SOXL", "IWM", "DIA", "PLTR", "COIN", "UBER", "DIS"}
)

STOP_WORDS = frozenset(
    {
        "A", "AN", "THE", "FOR", "AND", "OR", "YOU", "YOUR", "ARE", "HAS", "HAVE", "HAD",
        "I", "ME", "MY", "ON", "IN", "OF", "TO", "AT", "BY", "IS", "IT", "ALL", "ANY",
        "THIS", "THAT", "LAST", "PAST", "WITH", "FROM", "WERE", "WAS", "TOTAL",
        "STOCK", "STOCKS", "SHARE", "SHARES", "TRADE", "TRADES", "CALL", "CALLS", "PUT",
        "PUTS", "OPTION", "BUY", "SELL", "SOLD", "LONG", "SHORT", "THESE", "THOSE",
        "OTHER", "MORE", "MOST", "BEST", "SOME", "EACH", "THEM", "THEY", "THERE", "HERE",
        "WHICH", "WHAT", "ABOUT", "OVER", "INTO", "DAYS", "DAY", "WEEK", "MONTH", "YEAR",
        "TODAY", "USD", "CASH", "FEES", "FEE", "SO", "FAR", "NO", "NOT", "ONE", "TWO",
    }
)

_TICKER_SHAPE = re.compile(r"^[A-Za-z]{1,5}$")
_COMPANY_PATTERN = re.compile(
    r"\b(" + "|".join(re.escape(name) for name in sorted(COMPANY_TICKERS, key=len, reverse=True)) + r")\b",
    re.IGNORECASE,
)
_TICKER_PATTERN = re.compile(
    r"\b(" + "|".join(sorted((t for t in KNOWN_TICKERS if len(t) > 1), key=len, reverse=True)) + r")\b"
)


def normalize_symbol(text: str) -> str:
    """Return the ticker for a company name, else the upper-cased input."""

    cleaned = re.sub(r"\s+", " ", text).strip().strip("$.,?!'\"")
    return COMPANY_TICKERS.get(cleaned.lower(), cleaned.upper())


def is_plausible_ticker(token: str) -> bool:
    if not _TICKER_SHAPE.match(token):
        return False
    return token.upper() not in STOP_WORDS


def find_company_symbol(text: str) -> str | None:
    """Scan free text for a listed ticker or a known company name."""

    ticker = _TICKER_PATTERN.search(text)
    if ticker:
        return ticker.group(1)
    company = _COMPANY_PATTERN.search(text)
    if company:
        return COMPANY_TICKERS[company.group(1).lower()]
    return None


def find_all_symbols(text: str) -> list[str]:
    """Distinct tickers and company names mentioned in ``text``, in order."""

    found: list[str] = []
    hits = [(m.start(), m.group(1)) for m in _TICKER_PATTERN.finditer(text)]
    hits += [(m.start(), COMPANY_TICKERS[m.group(1).lower()]) for m in _COMPANY_PATTERN.finditer(text)]
    for _, symbol in sorted(hits):
        if symbol not in found:
            found.append(symbol)
    return found


__all__ = [
    "COMPANY_TICKERS",
    "KNOWN_TICKERS",
    "find_all_symbols",
    "find_company_symbol",
    "is_plausible_ticker",
    "normalize_symbol",
]
