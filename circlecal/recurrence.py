"""
Occurrence generation (schedule + visible range -> concrete meetings).

Given one LeaderSchedule and a half-open range [range_start, range_end),
build every meeting of that circle inside the range.

Rules:
- pure function of (schedule, range): no state, no I/O, same input -> same output
- occurrences of one leader come back in start order
- occurrence ids are "<leader_id>-<YYYY-MM-DD>", so overlapping ranges agree
- bad day/time -> no occurrences, bad anchor -> unanchored, never an exception
"""

from __future__ import annotations

import logging

from datetime import date, datetime, time, timedelta

from typing import Iterable, Iterator, List, Optional, Tuple

from circlecal.model import (
    LeaderSchedule,
    MonthlyInterval,
    Occurrence,
    ParsedFrequency,
    TimeOfDay,
    WeekOfMonth,
    Weekly,
)
from circlecal.parse import parse_frequency, parse_time, parse_weekday


logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _coerce_anchor(value: object) -> Optional[date]:
    """
    Return the anchor as a date, or None if it is missing or malformed.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str) and value.strip():
        try:
            return date.fromisoformat(value.strip())
        except ValueError:
            logger.debug("Ignoring malformed anchor date %r", value)
            return None
    return None


def _at(day: date, tod: TimeOfDay, like: datetime) -> datetime:
    # Keep the tzinfo of the range so naive stays naive and aware stays aware
    return datetime.combine(day, time(tod.hour, tod.minute), tzinfo=like.tzinfo)


def _week_start(day: date) -> date:
    # Weeks start on Monday (ISO)
    return day - timedelta(days=day.isoweekday() - 1)


def _months_overlapping(range_start: datetime, range_end: datetime) -> Iterator[Tuple[int, int]]:
    """
    Yield (year, month) for every calendar month that overlaps the range.
    """
    last = range_end - timedelta(microseconds=1)
    year, month = range_start.year, range_start.month
    while (year, month) <= (last.year, last.month):
        yield year, month
        month += 1
        if month > 12:
            year, month = year + 1, 1


def _weekdays_in_month(year: int, month: int, weekday: int) -> List[date]:
    """
    All dates of the given ISO weekday in one month, in order.
    """
    first = date(year, month, 1)
    day = first + timedelta(days=(weekday - first.isoweekday()) % 7)
    out: List[date] = []
    while day.month == month:
        out.append(day)
        day += timedelta(days=7)
    return out


# ---------------------------------------------------------------------------
# Per-pattern generators
# ---------------------------------------------------------------------------


def _weekly_starts(
    weekday: int,
    tod: TimeOfDay,
    interval_weeks: int,
    anchor: Optional[date],
    range_start: datetime,
    range_end: datetime,
) -> Iterator[datetime]:
    day_start = range_start.date()
    first_day = day_start + timedelta(days=(weekday - day_start.isoweekday()) % 7)
    cursor = _at(first_day, tod, range_start)

    # The first candidate can land before the range start (range starts mid-day)
    if cursor < range_start:
        cursor += timedelta(weeks=1)

    # Biweekly: on-weeks are the ones with the same parity as the anchor's week
    if interval_weeks == 2 and anchor is not None:
        weeks_apart = (_week_start(cursor.date()) - _week_start(anchor)).days // 7
        if weeks_apart % 2 != 0:
            cursor += timedelta(weeks=1)

    step = timedelta(weeks=interval_weeks)
    while cursor < range_end:
        yield cursor
        cursor += step


def _week_of_month_starts(
    weekday: int,
    tod: TimeOfDay,
    weeks: Iterable[int],
    range_start: datetime,
    range_end: datetime,
) -> Iterator[datetime]:
    wanted = sorted(set(weeks))
    for year, month in _months_overlapping(range_start, range_end):
        days = _weekdays_in_month(year, month, weekday)
        for n in wanted:
            # "5th" in a month with only four matching weekdays is skipped
            if 1 <= n <= len(days):
                yield _at(days[n - 1], tod, range_start)


def _monthly_interval_starts(
    weekday: int,
    tod: TimeOfDay,
    interval_months: int,
    range_start: datetime,
    range_end: datetime,
) -> Iterator[datetime]:
    # One meeting per eligible month: the first matching weekday.
    interval = max(1, interval_months)
    for index, (year, month) in enumerate(_months_overlapping(range_start, range_end)):
        if index % interval != 0:
            continue
        days = _weekdays_in_month(year, month, weekday)
        if days:
            yield _at(days[0], tod, range_start)


def _starts_for(
    frequency: ParsedFrequency,
    weekday: int,
    tod: TimeOfDay,
    anchor: Optional[date],
    range_start: datetime,
    range_end: datetime,
) -> Iterator[datetime]:
    if isinstance(frequency, WeekOfMonth):
        return _week_of_month_starts(weekday, tod, frequency.weeks, range_start, range_end)
    if isinstance(frequency, MonthlyInterval):
        return _monthly_interval_starts(weekday, tod, frequency.interval_months, range_start, range_end)
    interval = frequency.interval_weeks if isinstance(frequency, Weekly) else 1
    return _weekly_starts(weekday, tod, interval, anchor, range_start, range_end)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def occurrence_id(leader_id: object, day: date) -> str:
    """
    Stable id of a meeting: same leader and date always give the same id.
    """
    return f"{leader_id}-{day.isoformat()}"


def generate_occurrences(
    schedule: LeaderSchedule,
    range_start: datetime,
    range_end: datetime,
) -> List[Occurrence]:
    """
    Build all occurrences of one schedule inside [range_start, range_end).
    """
    if range_end <= range_start:
        return []

    weekday = parse_weekday(schedule.weekday_raw)
    tod = parse_time(schedule.time_raw)
    if weekday is None or tod is None:
        logger.debug(
            "Leader %s has no usable day/time (day=%r, time=%r); skipping",
            schedule.leader_id,
            schedule.weekday_raw,
            schedule.time_raw,
        )
        return []

    frequency = parse_frequency(schedule.frequency_raw)
    anchor = _coerce_anchor(schedule.anchor_date)
    duration = timedelta(minutes=schedule.duration_minutes)

    out: List[Occurrence] = []
    for start in _starts_for(frequency, weekday, tod, anchor, range_start, range_end):
        # Month/week arithmetic can step outside the range; filter again
        if not (range_start <= start < range_end):
            continue
        out.append(
            Occurrence(
                id=occurrence_id(schedule.leader_id, start.date()),
                leader_id=schedule.leader_id,
                title=schedule.title,
                start=start,
                end=start + duration,
            )
        )

    return out


def generate_for_schedules(
    schedules: Iterable[LeaderSchedule],
    range_start: datetime,
    range_end: datetime,
) -> List[Occurrence]:
    """
    Generate for many leaders and merge into one list sorted by start time.
    """
    out: List[Occurrence] = []
    for schedule in schedules:
        out.extend(generate_occurrences(schedule, range_start, range_end))
    out.sort(key=lambda occ: (occ.start, str(occ.leader_id)))
    return out


def meets_on_date(schedule: LeaderSchedule, day: date) -> bool:
    """
    True if the circle has a meeting on the given calendar date.

    Multi-month intervals (quarterly) have no fixed eligible months without
    a longer range, so they never count as meeting on a single day.
    """
    frequency = parse_frequency(schedule.frequency_raw)
    if isinstance(frequency, MonthlyInterval) and frequency.interval_months > 1:
        return False

    day_start = datetime.combine(day, time())
    return bool(generate_occurrences(schedule, day_start, day_start + timedelta(days=1)))
