"""
Persistent storage for circle leader records.

This module manages the file:

    data/leaders.json

with the schema {"leaders": [ {...}, ... ]}. Each record is a plain dict,
for example:

    {
        "id": 42,
        "name": "Jane Doe",
        "circle_type": "Women's",
        "day": "Wednesday",
        "time": "7:00 PM",
        "frequency": "1st & 3rd",
        "meeting_start_date": "2025-01-08",
        "event_summary_state": "received"
    }

The recurrence engine never touches this file. It receives schedules built
by schedule_from_record(), and attendance changes come back through
set_attendance_state().
"""

from __future__ import annotations

import json
import logging
import os
from datetime import date
from pathlib import Path
from typing import Any, Iterable, Optional

from circlecal.attendance import legacy_flags_for, validate_state
from circlecal.model import DEFAULT_DURATION_MINUTES, LeaderSchedule


logger = logging.getLogger(__name__)

LEADERS_PATH_ENV = "CIRCLECAL_LEADERS"


def _default_leaders_path() -> Path:
    """
    Return the path of leaders.json.

    CIRCLECAL_LEADERS overrides the default location inside the package.
    Using a function instead of a constant makes testing easier,
    because tests can override the path.
    """
    override = os.environ.get(LEADERS_PATH_ENV, "").strip()
    if override:
        return Path(override)
    base_dir = Path(__file__).resolve().parent
    return base_dir / "data" / "leaders.json"


def _resolve(path: str | Path | None) -> Path:
    return Path(path) if path is not None else _default_leaders_path()


def load_leaders(path: str | Path | None = None) -> list[dict[str, Any]]:
    """
    Load leader records from leaders.json.

    Returns an empty list if the file does not exist or is invalid.
    """
    leaders_path = _resolve(path)

    # First run: no leaders yet
    if not leaders_path.exists():
        return []

    try:
        data = json.loads(leaders_path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError, UnicodeDecodeError) as exc:
        logger.warning("Could not read %s: %s", leaders_path, exc)
        return []

    # accept both {"leaders": [...]} and a bare list
    records = data.get("leaders", []) if isinstance(data, dict) else data
    if not isinstance(records, list):
        return []
    return [r for r in records if isinstance(r, dict)]


def save_leaders(leaders: Iterable[dict[str, Any]], path: str | Path | None = None) -> None:
    """
    Save leader records to leaders.json, creating parent directories if needed.
    """
    leaders_path = _resolve(path)
    leaders_path.parent.mkdir(parents=True, exist_ok=True)

    payload = {"leaders": list(leaders)}
    leaders_path.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")


def _str_or_none(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _parse_anchor(value: Any, leader_id: str) -> Optional[date]:
    text = _str_or_none(value)
    if text is None:
        return None
    try:
        return date.fromisoformat(text)
    except ValueError:
        logger.debug("Leader %s: ignoring malformed meeting_start_date %r", leader_id, text)
        return None


def leader_title(record: dict[str, Any]) -> str:
    """
    "Name (Circle type)" or just "Name".
    """
    name = _str_or_none(record.get("name")) or f"Leader {record.get('id', '?')}"
    circle_type = _str_or_none(record.get("circle_type"))
    return f"{name} ({circle_type})" if circle_type else name


def schedule_from_record(
    record: dict[str, Any], default_duration: int = DEFAULT_DURATION_MINUTES
) -> LeaderSchedule:
    """
    Build the LeaderSchedule view of one leader record.
    """
    leader_id = str(record.get("id", "")).strip()

    duration = record.get("duration_minutes")
    if not isinstance(duration, int) or isinstance(duration, bool) or duration <= 0:
        duration = default_duration

    return LeaderSchedule(
        leader_id=leader_id,
        weekday_raw=_str_or_none(record.get("day")),
        time_raw=_str_or_none(record.get("time")),
        frequency_raw=_str_or_none(record.get("frequency")),
        anchor_date=_parse_anchor(record.get("meeting_start_date"), leader_id),
        duration_minutes=duration,
        title=leader_title(record),
    )


def find_leader(leaders: Iterable[dict[str, Any]], leader_id: Any) -> Optional[dict[str, Any]]:
    """
    Return the record whose id matches leader_id (compared as text), or None.
    """
    wanted = str(leader_id).strip()
    for record in leaders:
        if str(record.get("id", "")).strip() == wanted:
            return record
    return None


def set_attendance_state(leader_id: Any, state: str, path: str | Path | None = None) -> bool:
    """
    Store a new attendance state for one leader.

    Writes event_summary_state and keeps the legacy booleans in sync.
    Returns False if no leader with that id exists.
    Raises AttendanceStateError for an unknown state.
    """
    new_state = validate_state(state)

    leaders = load_leaders(path)
    record = find_leader(leaders, leader_id)
    if record is None:
        return False

    record["event_summary_state"] = new_state
    record.update(legacy_flags_for(new_state))
    save_leaders(leaders, path)
    return True
