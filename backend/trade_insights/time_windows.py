"""Relative time phrase resolution.

Phrases such as ``"last 3 trading days"``, ``"yesterday"`` or ``"on Monday"``
are turned into inclusive :class:`~trade_insights.models.TimeWindow` values
against an explicit anchor date. Rule families are tried in a fixed order and
the first pattern that matches decides the outcome, so overlapping phrases
always resolve the same way.
"""
from __future__ import annotations

import calendar
import re
from datetime import date, timedelta
from typing import Callable, Optional, Sequence, Tuple

from .models import TimeWindow

NUMBER_WORDS = {
    "one": 1,
    "two": 2,
    "three": 3,
    "four": 4,
    "five": 5,
    "six": 6,
    "seven": 7,
    "eight": 8,
    "nine": 9,
    "ten": 10,
    "eleven": 11,
    "twelve": 12,
    "thirteen": 13,
    "fourteen": 14,
    "fifteen": 15,
    "sixteen": 16,
    "seventeen": 17,
    "eighteen": 18,
    "nineteen": 19,
    "twenty": 20,
}

MONTHS = {
    "january": 1, "jan": 1,
    "february": 2, "feb": 2,
    "march": 3, "mar": 3,
    "april": 4, "apr": 4,
    "may": 5,
    "june": 6, "jun": 6,
    "july": 7, "jul": 7,
    "august": 8, "aug": 8,
    "september": 9, "sept": 9, "sep": 9,
    "october": 10, "oct": 10,
    "november": 11, "nov": 11,
    "december": 12, "dec": 12,
}

WEEKDAYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")

_NUMBER = r"\d+|" + "|".join(NUMBER_WORDS)
_MONTH = "|".join(sorted(MONTHS, key=len, reverse=True))
_WEEKDAY = "|".join(WEEKDAYS)

_LEADING_PREPOSITION = re.compile(r"^(?:for|over|in|during|from|within)\s+(?:the\s+)?")

_Builder = Callable[[re.Match[str], date], Optional[TimeWindow]]


def is_trading_day(day: date) -> bool:
    return day.weekday() < 5


def count_trading_days(start: date, end: date) -> int:
    """Count Monday–Friday days in ``[start, end]``; holidays are not excluded."""

    if end < start:
        return 0
    total_days = (end - start).days + 1
    full_weeks, remainder = divmod(total_days, 7)
    count = full_weeks * 5
    first_weekday = start.weekday()
    for offset in range(remainder):
        if (first_weekday + offset) % 7 < 5:
            count += 1
    return count


def _window(start: date, end: date, description: str, weekday: str | None = None) -> TimeWindow:
    return TimeWindow(
        start_date=start,
        end_date=end,
        description=description,
        trading_day_count=count_trading_days(start, end),
        weekday=weekday,
    )


def _parse_number(token: str) -> int | None:
    token = token.strip().lower()
    if token in NUMBER_WORDS:
        return NUMBER_WORDS[token]
    if token.isdigit():
        try:
            return int(token)
        except ValueError:
            return None
    return None


def _days_back(anchor: date, days: int) -> date | None:
    try:
        return anchor - timedelta(days=days)
    except OverflowError:
        return None


def _trading_days_back(anchor: date, count: int) -> date | None:
    """Start of the ``count`` trading days ending on ``anchor``; ``None`` past ``date.min``."""

    try:
        end = anchor
        while not is_trading_day(end):
            end -= timedelta(days=1)
        weeks, extra = divmod(count - 1, 5)
        start = end - timedelta(days=7 * weeks)
        for _ in range(extra):
            start -= timedelta(days=1)
            while not is_trading_day(start):
                start -= timedelta(days=1)
    except OverflowError:
        return None
    return start


def _month_end(day: date) -> date:
    return day.replace(day=calendar.monthrange(day.year, day.month)[1])


def _previous_month_start(anchor: date) -> date:
    return (anchor.replace(day=1) - timedelta(days=1)).replace(day=1)


def _ordinal(day: int) -> str:
    if 11 <= day % 100 <= 13:
        return "th"
    return {1: "st", 2: "nd", 3: "rd"}.get(day % 10, "th")


def _last_n_days(match: re.Match[str], anchor: date) -> TimeWindow | None:
    count = _parse_number(match.group("count"))
    if not count:
        return None
    if match.group("trading"):
        start = _trading_days_back(anchor, count)
        description = f"last {count} trading days"
    else:
        start = _days_back(anchor, count - 1)
        description = f"last {count} days"
    if start is None:
        return None
    return _window(start, anchor, description)


def _bare_trading_days(match: re.Match[str], anchor: date) -> TimeWindow | None:
    count = _parse_number(match.group("count"))
    if not count:
        return None
    start = _trading_days_back(anchor, count)
    if start is None:
        return None
    return _window(start, anchor, f"last {count} trading days")


def _today(match: re.Match[str], anchor: date) -> TimeWindow:
    return _window(anchor, anchor, "today")


def _yesterday(match: re.Match[str], anchor: date) -> TimeWindow:
    day = anchor - timedelta(days=1)
    return _window(day, day, "yesterday")


def _this_week(match: re.Match[str], anchor: date) -> TimeWindow:
    return _window(anchor - timedelta(days=anchor.weekday()), anchor, "this week")


def _last_week(match: re.Match[str], anchor: date) -> TimeWindow:
    this_monday = anchor - timedelta(days=anchor.weekday())
    return _window(this_monday - timedelta(days=7), this_monday - timedelta(days=1), "last week")


def _this_month(match: re.Match[str], anchor: date) -> TimeWindow:
    return _window(anchor.replace(day=1), anchor, "this month")


def _last_month(match: re.Match[str], anchor: date) -> TimeWindow:
    start = _previous_month_start(anchor)
    return _window(start, _month_end(start), "last month")


def _this_year(match: re.Match[str], anchor: date) -> TimeWindow:
    return year_to_date(anchor)


def _last_year(match: re.Match[str], anchor: date) -> TimeWindow:
    year = anchor.year - 1
    return _window(date(year, 1, 1), date(year, 12, 31), "last year")


def _calendar_date(match: re.Match[str], anchor: date) -> TimeWindow | None:
    month = MONTHS[match.group("month")]
    day_number = int(match.group("day"))
    try:
        target = date(anchor.year, month, day_number)
        if target > anchor:
            target = date(anchor.year - 1, month, day_number)
    except ValueError:
        return None
    description = f"{calendar.month_name[month]} {day_number}{_ordinal(day_number)}"
    return _window(target, target, description)


def _weekday(match: re.Match[str], anchor: date) -> TimeWindow:
    name = match.group("weekday")
    days_back = (anchor.weekday() - WEEKDAYS.index(name)) % 7
    target = anchor - timedelta(days=days_back)
    return _window(target, target, name.capitalize(), weekday=name)


# Order is significant: the first pattern that matches decides the outcome.
_RULES: Tuple[Tuple[re.Pattern[str], _Builder], ...] = (
    (
        re.compile(
            rf"^(?:the\s+)?(?:last|past)\s+(?P<count>{_NUMBER})\s+(?P<trading>trading\s+)?days?$"
        ),
        _last_n_days,
    ),
    (re.compile(r"^today$"), _today),
    (re.compile(r"^yesterday$"), _yesterday),
    (re.compile(r"^this\s+week$"), _this_week),
    (re.compile(r"^(?:last|past)\s+week$"), _last_week),
    (re.compile(r"^this\s+month$"), _this_month),
    (re.compile(r"^(?:last|past)\s+month$"), _last_month),
    (re.compile(r"^(?:this\s+year|ytd|year\s+to\s+date)$"), _this_year),
    (re.compile(r"^last\s+year$"), _last_year),
    (
        re.compile(rf"^(?:on\s+)?(?P<month>{_MONTH})\.?\s+(?P<day>\d{{1,2}})(?:st|nd|rd|th)?$"),
        _calendar_date,
    ),
    (re.compile(rf"^(?:last\s+|on\s+)?(?P<weekday>{_WEEKDAY})(?:'s)?$"), _weekday),
    (re.compile(rf"^(?P<count>{_NUMBER})\s+trading\s+days?$"), _bare_trading_days),
)


def normalize_phrase(phrase: str) -> str:
    text = re.sub(r"\s+", " ", phrase.lower()).strip()
    text = text.rstrip("?.!,;:").strip()
    return _LEADING_PREPOSITION.sub("", text)


def resolve_time_window(phrase: str | None, anchor: date) -> TimeWindow | None:
    """Resolve ``phrase`` against ``anchor``; ``None`` when nothing matches."""

    if not phrase:
        return None
    text = normalize_phrase(phrase)
    for pattern, builder in _RULES:
        match = pattern.match(text)
        if match:
            return builder(match, anchor)
    return None


def year_to_date(anchor: date) -> TimeWindow:
    return _window(date(anchor.year, 1, 1), anchor, "this year")


# Shared sub-patterns for locating a time phrase inside longer text.
_EXTRACT_PATTERNS: Sequence[re.Pattern[str]] = (
    re.compile(rf"\b(?:the\s+)?(?:last|past)\s+(?:{_NUMBER})\s+(?:trading\s+)?days?\b"),
    re.compile(r"\b(?:today|yesterday)\b"),
    re.compile(r"\b(?:this|last|past)\s+(?:week|month)\b"),
    re.compile(r"\b(?:this\s+year|ytd|year\s+to\s+date|last\s+year)\b"),
    re.compile(rf"\b(?:{_MONTH})\.?\s+\d{{1,2}}(?:st|nd|rd|th)?\b"),
    re.compile(rf"\b(?:on\s+|last\s+)?(?:{_WEEKDAY})(?:'s)?\b"),
    re.compile(rf"\b(?:{_NUMBER})\s+trading\s+days?\b"),
)


def extract_time_phrase(text: str, anchor: date | None = None) -> str | None:
    """Find the first resolvable time phrase inside ``text``."""

    anchor = anchor or date.today()
    lowered = text.lower()
    for pattern in _EXTRACT_PATTERNS:
        for match in pattern.finditer(lowered):
            candidate = match.group(0).strip()
            if resolve_time_window(candidate, anchor) is not None:
                return candidate
    return None


_DATE_TOKENS = re.compile(
    r"\b\d{4}-\d{2}-\d{2}\b|\b\d{1,2}/\d{1,2}(?:/\d{2,4})?\b"
    rf"|\b(?:{_MONTH})\.?\s+\d{{1,2}}(?:st|nd|rd|th)?(?:,?\s+\d{{4}})?\b"
    r"|\b(?:in|of|during|for|since|from|through)\s+(?:19|20)\d{2}\b"
)


def strip_time_phrases(text: str) -> str:
    """Lower-case ``text`` with relative time phrases and calendar dates blanked out."""

    scrubbed = _DATE_TOKENS.sub(" ", text.lower())
    for pattern in _EXTRACT_PATTERNS:
        scrubbed = pattern.sub(" ", scrubbed)
    return scrubbed


_EXPIRATION_PHRASE = re.compile(
    r"\bexpir(?:e|es|ed|ing|ation|ations|y)\s+(?:(?:on|by|in|within|before|during)\s+)?"
    r"(?:the\s+)?(?:end\s+of\s+)?(?P<after>today|tomorrow|(?:this|next)\s+(?:week|month))\b"
    r"|\b(?P<before>today|tomorrow|(?:this|next)\s+(?:week|month))(?:'s)?\s+expir"
)


def resolve_expiration_window(phrase: str | None, anchor: date) -> TimeWindow | None:
    """Resolve a forward-looking expiration phrase such as ``"this week"``."""

    if not phrase:
        return None
    text = normalize_phrase(phrase)
    if text == "today":
        return _window(anchor, anchor, "today")
    if text == "tomorrow":
        day = anchor + timedelta(days=1)
        return _window(day, day, "tomorrow")
    if re.fullmatch(r"this\s+week", text):
        return _window(anchor, anchor + timedelta(days=6 - anchor.weekday()), "this week")
    if re.fullmatch(r"next\s+week", text):
        start = anchor + timedelta(days=7 - anchor.weekday())
        return _window(start, start + timedelta(days=6), "next week")
    if re.fullmatch(r"this\s+month", text):
        return _window(anchor, _month_end(anchor), "this month")
    if re.fullmatch(r"next\s+month", text):
        start = _month_end(anchor) + timedelta(days=1)
        return _window(start, _month_end(start), "next month")
    try:
        day = date.fromisoformat(text)
    except ValueError:
        return None
    return _window(day, day, day.isoformat())


def extract_expiration_phrase(text: str) -> str | None:
    """Relative window attached to an expiry word, e.g. ``"expiring this week"``.

    Explicit expiration dates in the text are not treated as a window.
    """

    match = _EXPIRATION_PHRASE.search(text.lower())
    if not match:
        return None
    return re.sub(r"\s+", " ", match.group("after") or match.group("before"))


__all__ = [
    "count_trading_days",
    "extract_expiration_phrase",
    "extract_time_phrase",
    "is_trading_day",
    "normalize_phrase",
    "resolve_expiration_window",
    "resolve_time_window",
    "strip_time_phrases",
    "year_to_date",
]
