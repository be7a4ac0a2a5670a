"""
Parsing (free-text schedule fields -> structured values).

A leader record stores its meeting schedule exactly as an operator typed it:
- day:       "Wednesday", "Wed", "weds"
- time:      "7:00 PM", "7pm", "19:00"
- frequency: "Weekly", "Bi-weekly", "1st & 3rd", "Quarterly", or nothing

Important rules (DO NOT CHANGE):
- Day and time fail CLOSED: unknown text -> None (no meetings are generated)
- Frequency fails OPEN: unknown or missing text -> Weekly(1)
- None of the parsers ever raise on bad input
"""

from __future__ import annotations

import re

from datetime import datetime

from typing import Any, Dict, Iterable, List, Optional

from dateutil import parser as dateutil_parser

from circlecal.model import MonthlyInterval, ParsedFrequency, TimeOfDay, WeekOfMonth, Weekly


# ---------------------------------------------------------------------------
# Weekday parsing
# ---------------------------------------------------------------------------

# ISO numbering, same as date.isoweekday(): Monday=1 .. Sunday=7
WEEKDAY_NAME_TO_NUMBER: Dict[str, int] = {
    "mon": 1,
    "monday": 1,
    "tue": 2,
    "tues": 2,
    "tuesday": 2,
    "wed": 3,
    "weds": 3,
    "wednesday": 3,
    "thu": 4,
    "thur": 4,
    "thurs": 4,
    "thursday": 4,
    "fri": 5,
    "friday": 5,
    "sat": 6,
    "saturday": 6,
    "sun": 7,
    "sunday": 7,
}


def parse_weekday(raw: Optional[str]) -> Optional[int]:
    """
    Map a day name or abbreviation to 1 (Monday) .. 7 (Sunday).

    Returns None if the text is not a known day name.
    """
    if not raw:
        return None
    return WEEKDAY_NAME_TO_NUMBER.get(raw.strip().lower())


# ---------------------------------------------------------------------------
# Time parsing
# ---------------------------------------------------------------------------

# Tried in this order, first match wins.
# "%H:%M" covers both "7:00" and "19:00".
TIME_FORMATS = (
    "%H:%M",
    "%I:%M %p",
    "%I %p",
    "%I:%M%p",
    "%I%p",
)

# Two defaults with different hours: if the results disagree,
# the text carried no hour of its own ("7", "Wednesday", "2025-01-08")
_FALLBACK_DEFAULTS = (datetime(2000, 1, 1, 0, 0), datetime(2000, 1, 1, 1, 1))


def parse_time(raw: Optional[str]) -> Optional[TimeOfDay]:
    """
    Parse a time of day such as "7:00 PM", "7pm" or "19:00".

    Returns None if nothing understands the text.
    """
    if not raw:
        return None

    # Collapse whitespace so "7:00   PM" behaves like "7:00 PM"
    text = " ".join(raw.split())
    if not text:
        return None

    for fmt in TIME_FORMATS:
        try:
            parsed = datetime.strptime(text, fmt)
        except ValueError:
            continue
        return TimeOfDay(hour=parsed.hour, minute=parsed.minute)

    # Last resort: let dateutil have a go ("19:45:30", "7:00:00 PM", ...)
    try:
        first, second = (dateutil_parser.parse(text, default=d) for d in _FALLBACK_DEFAULTS)
    except (ValueError, OverflowError):
        return None
    if first.hour != second.hour:
        return None
    # a missing minute means on the hour
    return TimeOfDay(hour=first.hour, minute=first.minute)


# ---------------------------------------------------------------------------
# Frequency parsing (CORE LOGIC)
# ---------------------------------------------------------------------------

ORDINAL_WEEK_PATTERNS = {
    1: re.compile(r"\b(1st|first)\b"),
    2: re.compile(r"\b(2nd|second)\b"),
    3: re.compile(r"\b(3rd|third)\b"),
    4: re.compile(r"\b(4th|fourth)\b"),
    5: re.compile(r"\b(5th|fifth)\b"),
}

# "weekly" also matches "bi-weekly"
WEEKLY_GUARD_WORDS = ("weekly", "biweekly", "every other")

BIWEEKLY_WORDS = (
    "every other",
    "bi-week",
    "bi-weekly",
    "biweekly",
    "bi weekly",
    "2 week",
    "2-week",
)


def ordinal_weeks(text: str) -> List[int]:
    """
    Return the ordinal weeks (1..5) mentioned in an already lowercased text.
    """
    return [week for week, pattern in ORDINAL_WEEK_PATTERNS.items() if pattern.search(text)]


def parse_frequency(raw: Optional[str]) -> ParsedFrequency:
    """
    Classify a free-text frequency into exactly one ParsedFrequency.

    Priority:
    1. two or more ordinal weeks (and no weekly wording) -> WeekOfMonth
    2. "quarter"                                         -> MonthlyInterval(3)
    3. "month"                                           -> MonthlyInterval(1)
    4. biweekly wording                                  -> Weekly(2)
    5. anything else, including nothing                  -> Weekly(1)
    """
    text = (raw or "").strip().lower()
    if not text:
        return Weekly(1)

    weeks = ordinal_weeks(text)

    # "1st & 3rd" is a week-of-month schedule,
    # "weekly, starting the 1st and 3rd" is not
    mentions_weekly = any(word in text for word in WEEKLY_GUARD_WORDS)
    if len(weeks) >= 2 and not mentions_weekly:
        return WeekOfMonth(frozenset(weeks))

    if "quarter" in text:
        return MonthlyInterval(3)
    if "month" in text:
        return MonthlyInterval(1)

    if any(word in text for word in BIWEEKLY_WORDS):
        return Weekly(2)
    return Weekly(1)


# ---------------------------------------------------------------------------
# Frequency labels (reference data)
# ---------------------------------------------------------------------------

# Display strings offered to operators when no stored value matches
DEFAULT_FREQUENCY_VALUES: List[str] = [
    "Weekly",
    "Bi-weekly",
    "1st, 3rd",
    "1st, 3rd, 5th",
    "2nd, 4th",
    "Monthly",
    "Quarterly",
]

_ORDINAL_LABEL = re.compile(r"^\d{1,2}(st|nd|rd|th)$", re.IGNORECASE)


def _as_text(value: Any) -> str:
    return "" if value is None else str(value).strip()


def normalize_frequency_key(value: str) -> str:
    """
    Comparison key for frequency values, so "1st & 3rd" == "1st, 3rd".
    """
    key = value.lower()
    key = re.sub(r"\band\b", ",", key)
    key = key.replace("&", ",")
    key = re.sub(r"\s+", "", key)
    key = re.sub(r",+", ",", key)
    return key.strip(",")


def ensure_default_frequencies(values: Iterable[Any]) -> List[str]:
    """
    Merge stored frequency values with DEFAULT_FREQUENCY_VALUES.

    Stored values may be anything a data file holds; they are compared
    as text and blanks are dropped.

    A stored value wins over a default with the same key, so legacy
    spellings like "1st & 3rd" are kept. Result is sorted.
    """
    merged: List[str] = []
    seen: set[str] = set()

    for value in values:
        text = _as_text(value)
        if not text:
            continue
        key = normalize_frequency_key(text)
        if key in seen:
            continue
        seen.add(key)
        merged.append(text)

    for value in DEFAULT_FREQUENCY_VALUES:
        key = normalize_frequency_key(value)
        if key not in seen:
            seen.add(key)
            merged.append(value)

    return sorted(merged)


def format_frequency_label(value: Any) -> str:
    """
    Display label for a stored frequency.

    Ordinal lists stored comma-separated get an ampersand before the last item:
    "1st, 3rd, 5th" -> "1st, 3rd & 5th". Everything else is only trimmed.
    """
    raw = _as_text(value)
    if not raw:
        return raw

    if "," in raw and "&" not in raw:
        parts = [p.strip() for p in raw.split(",") if p.strip()]
        if len(parts) >= 2 and all(_ORDINAL_LABEL.match(p) for p in parts):
            return f"{', '.join(parts[:-1])} & {parts[-1]}"

    return raw
