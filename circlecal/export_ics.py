"""
iCalendar (.ics) export.

We convert generated circle meetings into a calendar file that can be imported into:
- Google Calendar
- Outlook
- Apple Calendar

Times are written as floating local times (no TZID), matching the single
organizational local time the occurrences are generated in.
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, Mapping, Optional
from datetime import datetime, timezone

from circlecal.attendance import status_category
from circlecal.model import Occurrence


def _ics_escape(text: str) -> str:
    """
    Escape text for ICS fields (very small subset, sufficient for our use).
    """
    return (
        text.replace("\\", "\\\\").replace("\r\n", "\\n").replace("\n", "\\n").replace(";", "\\;").replace(",", "\\,")
    )


def _dt_local(dt: datetime) -> str:
    """
    Format a datetime as ICS local datetime string 'YYYYMMDDTHHMMSS'.
    """
    return dt.strftime("%Y%m%dT%H%M%S")


def export_occurrences_to_ics(
    occurrences: Iterable[Occurrence],
    out_path: str | Path,
    states: Optional[Mapping[str, str]] = None,
) -> int:
    """
    Export occurrences to an .ics file. Returns number of exported events.

    states optionally maps leader_id -> attendance state; when given, the
    state's label is written as the event description.
    """
    out = Path(out_path)
    out.parent.mkdir(parents=True, exist_ok=True)

    lines: list[str] = []
    lines.append("BEGIN:VCALENDAR")
    lines.append("VERSION:2.0")
    lines.append("PRODID:-//circlecal//EN")
    lines.append("CALSCALE:GREGORIAN")

    dtstamp = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%SZ")

    count = 0
    for occ in occurrences:
        summary = occ.title.strip() or "Circle meeting"

        lines.append("BEGIN:VEVENT")
        lines.append(f"UID:{_ics_escape(occ.id)}@circlecal")
        lines.append(f"DTSTAMP:{dtstamp}")
        lines.append(f"DTSTART:{_dt_local(occ.start)}")
        lines.append(f"DTEND:{_dt_local(occ.end)}")
        lines.append(f"SUMMARY:{_ics_escape(summary)}")
        if states is not None and occ.leader_id in states:
            label = status_category(states[occ.leader_id]).label
            lines.append(f"DESCRIPTION:{_ics_escape('Event summary: ' + label)}")
        lines.append("END:VEVENT")
        count += 1

    lines.append("END:VCALENDAR")

    # ICS standard uses CRLF
    out.write_text("\r\n".join(lines) + "\r\n", encoding="utf-8")
    return count
