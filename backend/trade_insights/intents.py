"""Map a free-form assistant reply onto one of the analytical card intents.

Detectors are plain rule functions wrapped in :class:`Detector` and held in
the ordered :data:`DETECTORS` tuple. :func:`resolve_intent` walks the tuple
from the most specific rule to the most generic and stops at the first
match. A reply that only announces a lookup ("let me check...") never
matches; the pending check lives on :class:`ReplyContext` and is applied once
by :class:`Detector` before any rule runs.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass, replace
from datetime import date
from enum import Enum
from typing import Callable, List, Optional, Sequence, Tuple

from .models import OptionRight
from .symbols import COMPANY_TICKERS, KNOWN_TICKERS, find_all_symbols, is_plausible_ticker, normalize_symbol
from .time_windows import (
    NUMBER_WORDS,
    extract_expiration_phrase,
    extract_time_phrase,
    resolve_time_window,
    strip_time_phrases,
)

logger = logging.getLogger(__name__)


class IntentTag(str, Enum):
    ACCOUNT_BALANCE = "account-balance"
    FEES = "fees"
    EXPIRING_OPTIONS = "expiring-options"
    ALL_TRADES = "all-trades"
    BULK_OPTIONS = "bulk-options"
    LAST_OPTION_TRADE = "last-option-trade"
    HIGHEST_OR_LOWEST_STRIKE = "highest-or-lowest-strike"
    TOTAL_PREMIUM = "total-premium"
    ADVANCED_OPTION_QUERY = "advanced-option-query"
    TIME_WINDOW_TRADES = "time-window-trades"
    AVERAGE_PRICE = "average-price"
    PRICE_EXTREMES = "price-extremes"
    PROFITABLE_TRADES = "profitable-trades"
    DETAILED_TRADES = "detailed-trades"
    TRADE_SUMMARY = "trade-summary"


class DirectionFilter(str, Enum):
    BUY = "Buy"
    SELL = "Sell"
    EITHER = "Either"


class StrikeOrder(str, Enum):
    HIGHEST = "highest"
    LOWEST = "lowest"


class AccountQuery(str, Enum):
    CASH_BALANCE = "cash_balance"
    BUYING_POWER = "buying_power"
    NLV = "nlv"
    OVERNIGHT_MARGIN = "overnight_margin"
    MARKET_VALUE = "market_value"
    DEBIT_BALANCES = "debit_balances"
    CREDIT_BALANCES = "credit_balances"
    ACCOUNT_SUMMARY = "account_summary"


class FeeType(str, Enum):
    COMMISSION = "commission"
    CREDIT_INTEREST = "credit_interest"
    DEBIT_INTEREST = "debit_interest"
    LOCATE_FEE = "locate_fee"


@dataclass(frozen=True)
class Entities:
    """Query parameters extracted alongside an intent."""

    symbol: Optional[str] = None
    direction: DirectionFilter = DirectionFilter.EITHER
    time_phrase: Optional[str] = None
    option_right: Optional[OptionRight] = None
    expiration_phrase: Optional[str] = None
    portfolio_wide: bool = False
    strike_order: Optional[StrikeOrder] = None
    account_query: Optional[AccountQuery] = None
    fee_type: Optional[FeeType] = None
    stock_count: Optional[int] = None
    option_count: Optional[int] = None


@dataclass(frozen=True)
class Matched:
    intent: IntentTag
    entities: Entities


class NoMatch:
    """Sentinel result for a detector that defers to the next one."""

    _instance: Optional["NoMatch"] = None

    def __new__(cls) -> "NoMatch":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "NO_MATCH"

    def __bool__(self) -> bool:
        return False


NO_MATCH = NoMatch()

IntentResolution = Matched

# --- shared sub-patterns -----------------------------------------------------

_NUMBER_WORD = "|".join(NUMBER_WORDS)
_PLURAL_WORD = "|".join(word for word, value in NUMBER_WORDS.items() if value > 1)
_PLURAL_COUNT = rf"(?:[2-9]|[1-9]\d+|{_PLURAL_WORD}|several|multiple)"

_PENDING = re.compile(
    r"\b(?:let\s+me\s+(?:check|look|pull|see|find|get|fetch|grab|review)"
    r"|i(?:'ll|\s+will)\s+(?:check|look|pull|fetch|find|get|grab|review)"
    r"|i'm\s+(?:checking|looking|pulling|fetching)"
    r"|(?:one|just\s+a)\s+moment|give\s+me\s+a\s+(?:moment|second|sec)"
    r"|hold\s+on|bear\s+with\s+me)\b"
)
_CURRENCY = re.compile(r"\$\s?\d[\d,]*(?:\.\d+)?|\b\d[\d,]*(?:\.\d+)?\s?(?:usd|dollars)\b")
_DIGIT = re.compile(r"\d")
_COUNT_PHRASE = re.compile(
    rf"\b(?:no|zero|{_NUMBER_WORD})\s+(?:[a-z]+\s+){{0,2}}"
    r"(?:trades?|options?|contracts?|shares?|positions?|transactions?|calls|puts)\b"
)

_BUY_WORDS = re.compile(r"\b(?:bought|purchased|buy|buys|buying|long)\b")
_SELL_WORDS = re.compile(r"\b(?:sold|sell|sells|selling|short|shorted|wrote|written)\b")
_CALL_WORDS = re.compile(r"\bcalls?\b")
_PUT_WORDS = re.compile(r"\bputs?\b")

_SYMBOL_CANDIDATES: Sequence[re.Pattern[str]] = (
    re.compile(r"\b([A-Za-z]{1,5})\s+position\s+summary", re.IGNORECASE),
    re.compile(r"\b([A-Za-z]{1,5})\s+trades?\s+for\b", re.IGNORECASE),
    re.compile(r"\btrades?\s+(?:for|involving|in|on)\s+([A-Za-z]{1,10})\b", re.IGNORECASE),
    re.compile(r"\b([A-Za-z]{1,5})\s+(?:stock\s+|option\s+)?(?:trades?|shares|position)\b", re.IGNORECASE),
    re.compile(r"\b(?:shares|positions?)\s+(?:of|in)\s+([A-Za-z]{1,10})\b", re.IGNORECASE),
    re.compile(r"\bfor\s+([A-Za-z]{1,10})\b", re.IGNORECASE),
)

_TRADE_COUNTS: Sequence[Tuple[re.Pattern[str], bool]] = (
    (
        re.compile(
            r"\b(\d+|no)\s+(?:[a-z]{1,5}\s+)?(?:stock|equity)\s+(?:trades?\s*,?\s*)?(?:and\s+)?(\d+|no)\s+options?\b"
        ),
        False,
    ),
    (
        re.compile(
            r"\b(\d+|no)\s+(?:[a-z]{1,5}\s+)?options?\s+(?:trades?\s*,?\s*)?(?:and\s+)?(\d+|no)\s+(?:stock|equity)\b"
        ),
        True,
    ),
)

_BALANCE = re.compile(
    r"\b(?:cash\s+balance|available\s+cash|buying\s+power|day\s+trading\s+power"
    r"|net\s+liquidation|liquidation\s+value|nlv|margin\s+requirement|overnight\s+margin"
    r"|maintenance\s+margin|margin(?!\s+interest)|market\s+value|position\s+value"
    r"|debit\s+balances?|credit\s+balances?|account\s+(?:balance|summary|value|equity)|total\s+equity)\b"
)
_ACCOUNT_QUERIES: Sequence[Tuple[re.Pattern[str], AccountQuery]] = (
    (re.compile(r"\bdebit\s+balances?\b"), AccountQuery.DEBIT_BALANCES),
    (re.compile(r"\bcredit\s+balances?\b"), AccountQuery.CREDIT_BALANCES),
    (re.compile(r"\b(?:buying|day\s+trading)\s+power\b"), AccountQuery.BUYING_POWER),
    (re.compile(r"\b(?:nlv|net\s+liquidation|liquidation\s+value)\b"), AccountQuery.NLV),
    (re.compile(r"\bmargin\b"), AccountQuery.OVERNIGHT_MARGIN),
    (re.compile(r"\b(?:market|position)\s+value\b"), AccountQuery.MARKET_VALUE),
    (re.compile(r"\bcash\b"), AccountQuery.CASH_BALANCE),
)

_FEES = re.compile(
    r"\b(?:commissions?|(?:trading|locate|borrow|regulatory|exchange|total)\s+fees?"
    r"|fees?\s+(?:paid|charged|totaling|totalled|of)|in\s+fees|stock\s+borrow"
    r"|(?:credit|debit|margin|short)\s+interest|interest\s+(?:earned|charged|paid|income))\b"
)
_FEE_TYPES: Sequence[Tuple[re.Pattern[str], FeeType]] = (
    (re.compile(r"\b(?:locate|borrow)\b"), FeeType.LOCATE_FEE),
    (re.compile(r"\b(?:credit\s+interest|interest\s+(?:earned|income))\b"), FeeType.CREDIT_INTEREST),
    (
        re.compile(r"\b(?:(?:debit|margin|short)\s+interest|interest\s+(?:charged|paid))\b"),
        FeeType.DEBIT_INTEREST,
    ),
    (re.compile(r"\b(?:commissions?|trading\s+fees?)\b"), FeeType.COMMISSION),
)

_EXPIRING = re.compile(r"\bexpir(?:e|es|ed|ing|ation|ations|y)\b")
_ALL_TRADES = re.compile(
    r"\b(?:all\s+(?:of\s+)?(?:your|my|the)?\s*(?:\d+\s+)?(?:[a-z]+\s+)?trades"
    r"|every\s+trade|(?:complete|full)\s+(?:list|history))\b"
)
_BULK = re.compile(
    r"\b(?:all\s+(?:of\s+)?(?:your|my|the)?\s*(?:[a-z]+\s+){0,2}(?:options?|calls|puts|contracts)"
    rf"|{_PLURAL_COUNT}\s+(?:[a-z]+\s+){{0,3}}"
    r"(?:option\s+trades|options?\s+(?:positions|contracts)|options|calls|puts|contracts))\b"
)
_MULTI_TRADE = re.compile(rf"\b(?:{_PLURAL_COUNT}|all)\s+(?:[a-z]+\s+){{0,3}}trades\b")
_LAST_OPTION = re.compile(r"\b(?:last|most\s+recent|latest)\s+(?:[a-z]+\s+){0,2}(?:option|call|put)s?\b")
_STRIKE = re.compile(
    r"\b(highest|lowest|largest|smallest|biggest)\s+(?:[a-z]+\s+){0,2}strike\b"
    r"|\bstrike\s+(?:price\s+)?(?:was\s+)?(?:the\s+)?(highest|lowest)\b"
)
_PREMIUM = re.compile(
    r"\b(?:total\s+(?:[a-z]+\s+){0,2}premiums?"
    r"|premiums?\s+(?:collected|received|paid|earned|totaling|totalled|of)"
    r"|(?:collected|received|paid|earned)\s+(?:\S+\s+){0,4}?(?:in\s+)?premiums?)\b"
)
_OPTION_NOUN = re.compile(
    r"\b(?:options?\s+(?:trades?|positions?|contracts?)|options|(?:call|put)\s+options?|calls|puts"
    r"|(?:short|long|covered|naked|cash[- ]secured)\s+(?:calls?|puts?))\b"
)
_TRADE_NOUN = re.compile(r"\b(?:trades?|traded|trading\s+activity|transactions?)\b")
_AVERAGE = re.compile(
    r"\b(?:average\s+(?:[a-z]+\s+){0,3}(?:price|cost|premium)|averaged\s+(?:in|into|at)|cost\s+basis)\b"
)
_HIGHEST = re.compile(r"\b(?:highest|maximum|best\s+(?:[a-z]+\s+)?price)\b")
_LOWEST = re.compile(r"\b(?:lowest|minimum|worst\s+(?:[a-z]+\s+)?price)\b")
_PRICE_CONTEXT = re.compile(r"\b(?:price|prices|paid|sold|bought|sale|purchase|cost)\b")
_PROFITABLE = re.compile(
    rf"\b(?:(?:\d+|no|{_NUMBER_WORD})\s+(?:[a-z]+\s+){{0,2}}(?:profitable|winning)\s+"
    r"(?:trades?|round[- ]trips?|positions?)"
    r"|most\s+profitable"
    r"|realized\s+(?:a\s+)?(?:total\s+)?(?:profits?|gains?)"
    r"|(?:profitable|winning)\s+trades?\s+(?:total(?:ing|led)?|worth|netted|netting)"
    r"|total\s+(?:realized\s+)?profit\s+of)\b"
)
_DETAILED = re.compile(
    r"\b(?:here\s+(?:are|is)\s+(?:your|the|all)|you\s+(?:bought|sold|purchased)"
    r"|(?:bought|sold|purchased)\s+[\d,.]+\s+shares|trade\s+history"
    r"|trades?\s+(?:for|involving|in|on)\s|(?:position|trade)\s+summary)"
)


# --- reply context -----------------------------------------------------------


def _resolve_candidate(token: str) -> str | None:
    if token.lower() in COMPANY_TICKERS:
        return COMPANY_TICKERS[token.lower()]
    symbol = normalize_symbol(token)
    if symbol in KNOWN_TICKERS:
        return symbol
    # Unknown tickers must be written upper-case to be told apart from prose.
    if token.isupper() and len(token) > 1 and is_plausible_ticker(token):
        return symbol
    return None


def extract_symbol(text: str) -> str | None:
    """Ticker named in ``text``, from context words first, then known names."""

    for pattern in _SYMBOL_CANDIDATES:
        for match in pattern.finditer(text):
            symbol = _resolve_candidate(match.group(1))
            if symbol:
                return symbol
    mentioned = find_all_symbols(text)
    return mentioned[0] if mentioned else None


def extract_direction(lowered: str) -> DirectionFilter:
    bought = bool(_BUY_WORDS.search(lowered))
    sold = bool(_SELL_WORDS.search(lowered))
    if bought and not sold:
        return DirectionFilter.BUY
    if sold and not bought:
        return DirectionFilter.SELL
    return DirectionFilter.EITHER


def extract_option_right(lowered: str) -> OptionRight | None:
    calls = bool(_CALL_WORDS.search(lowered))
    puts = bool(_PUT_WORDS.search(lowered))
    if calls and not puts:
        return OptionRight.CALL
    if puts and not calls:
        return OptionRight.PUT
    return None


def extract_trade_counts(lowered: str) -> Tuple[int, int] | None:
    """``(stock_count, option_count)`` from a mixed trade-count sentence."""

    for pattern, option_first in _TRADE_COUNTS:
        match = pattern.search(lowered)
        if not match:
            continue
        first, second = (0 if value == "no" else int(value) for value in match.groups())
        return (second, first) if option_first else (first, second)
    return None


@dataclass(frozen=True)
class ReplyContext:
    """A reply plus the entities every detector shares, extracted once."""

    text: str
    lowered: str
    anchor: date
    prior_symbol: Optional[str] = None
    text_symbol: Optional[str] = None
    mentioned_symbols: Tuple[str, ...] = ()
    direction: DirectionFilter = DirectionFilter.EITHER
    option_right: Optional[OptionRight] = None
    time_phrase: Optional[str] = None
    trade_counts: Optional[Tuple[int, int]] = None
    has_currency: bool = False
    has_result_data: bool = False

    @classmethod
    def from_reply(cls, text: str, prior_symbol: str | None = None, *, anchor: date | None = None) -> "ReplyContext":
        anchor = anchor or date.today()
        cleaned = text.replace("’", "'")
        lowered = re.sub(r"\s+", " ", cleaned.lower()).strip()
        text_symbol = extract_symbol(cleaned)
        mentioned = find_all_symbols(cleaned)
        if text_symbol and text_symbol not in mentioned:
            mentioned.insert(0, text_symbol)
        has_currency = bool(_CURRENCY.search(lowered))
        # Digits inside the reply's own period ("last 5 days", "Nov 3") are not results.
        scrubbed = strip_time_phrases(lowered)
        return cls(
            text=cleaned,
            lowered=lowered,
            anchor=anchor,
            prior_symbol=normalize_symbol(prior_symbol) if prior_symbol else None,
            text_symbol=text_symbol,
            mentioned_symbols=tuple(mentioned),
            direction=extract_direction(lowered),
            option_right=extract_option_right(lowered),
            time_phrase=extract_time_phrase(lowered, anchor),
            trade_counts=extract_trade_counts(lowered),
            has_currency=has_currency,
            has_result_data=has_currency
            or bool(_DIGIT.search(scrubbed))
            or bool(_COUNT_PHRASE.search(scrubbed)),
        )

    @property
    def symbol(self) -> str | None:
        return self.text_symbol or self.prior_symbol

    @property
    def is_pending(self) -> bool:
        """True for "let me check" style replies that carry no results yet."""

        return bool(_PENDING.search(self.lowered)) and not self.has_result_data

    def entities(self, **overrides) -> Entities:
        base = Entities(
            symbol=self.symbol,
            direction=self.direction,
            time_phrase=self.time_phrase,
            option_right=self.option_right,
        )
        return replace(base, **overrides) if overrides else base


# --- detectors ---------------------------------------------------------------

Rule = Callable[[ReplyContext], Optional[Entities]]


@dataclass(frozen=True)
class Detector:
    """A named rule that either claims a reply for ``intent`` or defers."""

    name: str
    intent: IntentTag
    rule: Rule

    def __call__(self, context: ReplyContext) -> Matched | NoMatch:
        if context.is_pending:
            return NO_MATCH
        entities = self.rule(context)
        if entities is None:
            return NO_MATCH
        return Matched(intent=self.intent, entities=entities)


def _account_balance(ctx: ReplyContext) -> Entities | None:
    if not ctx.has_currency or not _BALANCE.search(ctx.lowered):
        return None
    query = AccountQuery.ACCOUNT_SUMMARY
    for pattern, candidate in _ACCOUNT_QUERIES:
        if pattern.search(ctx.lowered):
            query = candidate
            break
    return Entities(account_query=query, time_phrase=ctx.time_phrase)


def _fees(ctx: ReplyContext) -> Entities | None:
    if not ctx.has_currency or not _FEES.search(ctx.lowered):
        return None
    fee_type = None
    for pattern, candidate in _FEE_TYPES:
        if pattern.search(ctx.lowered):
            fee_type = candidate
            break
    return Entities(fee_type=fee_type, symbol=ctx.text_symbol, time_phrase=ctx.time_phrase)


def _expiring_options(ctx: ReplyContext) -> Entities | None:
    if not _EXPIRING.search(ctx.lowered):
        return None
    phrase = extract_expiration_phrase(ctx.lowered)
    if not phrase:
        return None
    return Entities(
        symbol=ctx.text_symbol,
        expiration_phrase=phrase,
        option_right=ctx.option_right,
        portfolio_wide=ctx.text_symbol is None,
    )


def _all_trades(ctx: ReplyContext) -> Entities | None:
    if ctx.trade_counts is None or not _ALL_TRADES.search(ctx.lowered):
        return None
    stock_count, option_count = ctx.trade_counts
    return ctx.entities(stock_count=stock_count, option_count=option_count)


def _bulk_options(ctx: ReplyContext) -> Entities | None:
    # Mixed stock-and-option counts belong to the summary cards.
    if ctx.trade_counts is not None or not _BULK.search(ctx.lowered):
        return None
    return ctx.entities(portfolio_wide=ctx.symbol is None)


def _last_option_trade(ctx: ReplyContext) -> Entities | None:
    if not _LAST_OPTION.search(ctx.lowered):
        return None
    if _BULK.search(ctx.lowered) or _MULTI_TRADE.search(ctx.lowered):
        return None
    return ctx.entities()


def _strike_extreme(ctx: ReplyContext) -> Entities | None:
    match = _STRIKE.search(ctx.lowered)
    if not match:
        return None
    word = match.group(1) or match.group(2)
    order = StrikeOrder.LOWEST if word in {"lowest", "smallest"} else StrikeOrder.HIGHEST
    return ctx.entities(strike_order=order)


def _total_premium(ctx: ReplyContext) -> Entities | None:
    if not _PREMIUM.search(ctx.lowered):
        return None
    return ctx.entities()


def _advanced_option_query(ctx: ReplyContext) -> Entities | None:
    if ctx.trade_counts is not None or not _OPTION_NOUN.search(ctx.lowered):
        return None
    has_filter = (
        ctx.direction is not DirectionFilter.EITHER
        or ctx.option_right is not None
        or ctx.text_symbol is not None
        or ctx.time_phrase is not None
    )
    if not has_filter:
        return None
    return ctx.entities()


def _time_window_trades(ctx: ReplyContext) -> Entities | None:
    if ctx.time_phrase is None or ctx.trade_counts is not None:
        return None
    if not _TRADE_NOUN.search(ctx.lowered):
        return None
    window = resolve_time_window(ctx.time_phrase, ctx.anchor)
    if window is None:
        return None
    portfolio_wide = (
        ctx.symbol is None
        or len(ctx.mentioned_symbols) > 1
        or (window.weekday is not None and ctx.text_symbol is None)
    )
    return ctx.entities(
        symbol=None if portfolio_wide else ctx.symbol,
        portfolio_wide=portfolio_wide,
    )


def _average_price(ctx: ReplyContext) -> Entities | None:
    if not _AVERAGE.search(ctx.lowered):
        return None
    if _HIGHEST.search(ctx.lowered) and _LOWEST.search(ctx.lowered):
        return None
    return ctx.entities()


def _price_extremes(ctx: ReplyContext) -> Entities | None:
    if not (_HIGHEST.search(ctx.lowered) or _LOWEST.search(ctx.lowered)):
        return None
    if not _PRICE_CONTEXT.search(ctx.lowered):
        return None
    return ctx.entities()


def _profitable_trades(ctx: ReplyContext) -> Entities | None:
    if not _PROFITABLE.search(ctx.lowered):
        return None
    return ctx.entities()


def _detailed_trades(ctx: ReplyContext) -> Entities | None:
    if ctx.symbol is None or ctx.trade_counts is not None:
        return None
    if not _DETAILED.search(ctx.lowered):
        return None
    return ctx.entities()


def _trade_summary(ctx: ReplyContext) -> Entities | None:
    if ctx.trade_counts is None:
        return None
    stock_count, option_count = ctx.trade_counts
    return Entities(symbol=ctx.symbol, stock_count=stock_count, option_count=option_count)


# Most specific first; reordering changes which card a reply gets.
DETECTORS: Tuple[Detector, ...] = (
    Detector("account_balance", IntentTag.ACCOUNT_BALANCE, _account_balance),
    Detector("fees", IntentTag.FEES, _fees),
    Detector("expiring_options", IntentTag.EXPIRING_OPTIONS, _expiring_options),
    Detector("all_trades", IntentTag.ALL_TRADES, _all_trades),
    Detector("bulk_options", IntentTag.BULK_OPTIONS, _bulk_options),
    Detector("last_option_trade", IntentTag.LAST_OPTION_TRADE, _last_option_trade),
    Detector("strike_extreme", IntentTag.HIGHEST_OR_LOWEST_STRIKE, _strike_extreme),
    Detector("total_premium", IntentTag.TOTAL_PREMIUM, _total_premium),
    Detector("advanced_option_query", IntentTag.ADVANCED_OPTION_QUERY, _advanced_option_query),
    Detector("time_window_trades", IntentTag.TIME_WINDOW_TRADES, _time_window_trades),
    Detector("average_price", IntentTag.AVERAGE_PRICE, _average_price),
    Detector("price_extremes", IntentTag.PRICE_EXTREMES, _price_extremes),
    Detector("profitable_trades", IntentTag.PROFITABLE_TRADES, _profitable_trades),
    Detector("detailed_trades", IntentTag.DETAILED_TRADES, _detailed_trades),
    Detector("trade_summary", IntentTag.TRADE_SUMMARY, _trade_summary),
)


def run_cascade(context: ReplyContext, detectors: Sequence[Detector] = DETECTORS) -> Matched | NoMatch:
    for detector in detectors:
        result = detector(context)
        if isinstance(result, Matched):
            logger.debug("Reply matched detector %s -> %s", detector.name, result.intent.value)
            return result
    return NO_MATCH


def resolve_intent(
    reply_text: str,
    prior_symbol: str | None = None,
    *,
    anchor: date | None = None,
) -> IntentResolution | None:
    """Resolve ``reply_text`` to an intent, or ``None`` for a plain-text reply."""

    if not reply_text or not reply_text.strip():
        return None
    context = ReplyContext.from_reply(reply_text, prior_symbol, anchor=anchor)
    result = run_cascade(context)
    if isinstance(result, Matched):
        return result
    return None


def matching_detectors(reply_text: str, prior_symbol: str | None = None, *, anchor: date | None = None) -> List[str]:
    """Names of every detector that would claim the reply, in precedence order."""

    context = ReplyContext.from_reply(reply_text, prior_symbol, anchor=anchor)
    return [detector.name for detector in DETECTORS if isinstance(detector(context), Matched)]


__all__ = [
    "AccountQuery",
    "DETECTORS",
    "Detector",
    "DirectionFilter",
    "Entities",
    "FeeType",
    "IntentResolution",
    "IntentTag",
    "Matched",
    "NO_MATCH",
    "NoMatch",
    "ReplyContext",
    "StrikeOrder",
    "extract_direction",
    "extract_option_right",
    "extract_symbol",
    "extract_trade_counts",
    "matching_detectors",
    "resolve_intent",
    "run_cascade",
]
