"""
Central data model definitions used across the project.

This module defines the canonical structure of schedules and occurrences so that:
- parsers, the recurrence engine, storage and the CLI share the same field names
- the generator only ever reasons about a ParsedFrequency, never about raw text
- generated occurrences are immutable values that can be recomputed at any time
"""

from __future__ import annotations
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Dict, FrozenSet, Optional, Union


DEFAULT_DURATION_MINUTES = 60


@dataclass(frozen=True)
class TimeOfDay:
    hour: int
    minute: int


# ---------------------------------------------------------------------------
# Parsed frequency variants (exactly one per schedule)
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Weekly:
    """
    Every week (interval_weeks=1) or every other week (interval_weeks=2).
    """

    interval_weeks: int = 1


@dataclass(frozen=True)
class WeekOfMonth:
    """
    Nth weekday of the month, e.g. "1st & 3rd" -> weeks={1, 3}.
    """

    weeks: FrozenSet[int]


@dataclass(frozen=True)
class MonthlyInterval:
    """
    One meeting every interval_months months (1 = monthly, 3 = quarterly).
    """

    interval_months: int = 1


ParsedFrequency = Union[Weekly, WeekOfMonth, MonthlyInterval]


@dataclass(frozen=True)
class LeaderSchedule:
    """
    Schedule view of one leader record.

    All *_raw fields are free text exactly as an operator typed them.
    anchor_date may also be an ISO string; a malformed one is ignored.
    """

    leader_id: str
    weekday_raw: Optional[str]
    time_raw: Optional[str]
    frequency_raw: Optional[str] = None
    anchor_date: Optional[Union[date, str]] = None
    duration_minutes: int = DEFAULT_DURATION_MINUTES
    title: str = ""


@dataclass(frozen=True)
class Occurrence:
    """
    Represents one concrete meeting of a circle (single date & time slot).

    Occurrences are never stored: they are rebuilt whenever the visible
    range or the set of leaders changes.
    """

    id: str
    leader_id: str
    title: str
    start: datetime
    end: datetime

    @property
    def day(self) -> date:
        return self.start.date()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "leader_id": self.leader_id,
            "title": self.title,
            "start": self.start.isoformat(),
            "end": self.end.isoformat(),
        }
