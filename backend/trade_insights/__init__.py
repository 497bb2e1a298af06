"""Core package for the trade analytics and reply intent engine."""

from .intents import Entities, IntentTag, Matched, resolve_intent
from .lots import match_round_trips, profitable_round_trips, sort_for_matching
from .models import PriceStat, RoundTrip, TimeWindow, TradeRecord
from .price_stats import TieBreak, aggregate
from .symbols import normalize_symbol
from .time_windows import resolve_time_window

__all__ = [
    "Entities",
    "IntentTag",
    "Matched",
    "PriceStat",
    "RoundTrip",
    "TieBreak",
    "TimeWindow",
    "TradeRecord",
    "aggregate",
    "match_round_trips",
    "normalize_symbol",
    "profitable_round_trips",
    "resolve_intent",
    "resolve_time_window",
    "sort_for_matching",
]
