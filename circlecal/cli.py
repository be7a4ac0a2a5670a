"""
CLI (Command Line Interface).

Quick terminal commands on top of the recurrence engine, e.g.:

    circlecal calendar 2025-01-01 2025-02-01
    circlecal today
    circlecal export meetings.ics 2025-01-01 2025-04-01
    circlecal status 42 received
    circlecal frequencies

Leader records are read from leaders.json (see circlecal/storage.py);
--leaders points at another file.
"""

from __future__ import annotations

import argparse
import logging
from datetime import date, datetime
from pathlib import Path
from typing import Any, Optional

from rich import box
from rich.console import Console
from rich.table import Table

from circlecal.attendance import (
    ATTENDANCE_STATES,
    AttendanceStateError,
    resolve_attendance_state,
    status_category,
)
from circlecal.export_ics import export_occurrences_to_ics
from circlecal.model import DEFAULT_DURATION_MINUTES, Occurrence
from circlecal.parse import ensure_default_frequencies, format_frequency_label
from circlecal.recurrence import generate_for_schedules, meets_on_date
from circlecal.storage import load_leaders, schedule_from_record, set_attendance_state


console = Console()


def _parse_instant(text: str) -> Optional[datetime]:
    """
    Accept "YYYY-MM-DD" (midnight) or an ISO datetime. None if invalid.
    """
    raw = (text or "").strip()
    if not raw:
        return None
    try:
        return datetime.fromisoformat(raw)
    except ValueError:
        return None


def _parse_range(args: argparse.Namespace) -> Optional[tuple[datetime, datetime]]:
    start = _parse_instant(args.start)
    end = _parse_instant(args.end)
    if start is None or end is None:
        print("Please provide START and END as YYYY-MM-DD or ISO datetimes.")
        return None
    if end <= start:
        print("END must be after START.")
        return None
    return start, end


def _leaders_by_id(leaders: list[dict[str, Any]]) -> dict[str, dict[str, Any]]:
    return {str(r.get("id", "")).strip(): r for r in leaders if str(r.get("id", "")).strip()}


def _occurrences(
    leaders: list[dict[str, Any]], start: datetime, end: datetime, duration: int
) -> list[Occurrence]:
    schedules = [schedule_from_record(r, default_duration=duration) for r in leaders]
    return generate_for_schedules(schedules, start, end)


def _cmd_calendar(args: argparse.Namespace) -> int:
    """
    Print all meetings in [START, END), coloured by event summary state.
    """
    rng = _parse_range(args)
    if rng is None:
        return 1

    leaders = load_leaders(args.leaders)
    by_id = _leaders_by_id(leaders)
    occs = _occurrences(leaders, rng[0], rng[1], args.duration)

    if not occs:
        print("No meetings in this range.")
        return 0

    table = Table(box=box.SIMPLE, show_header=True, header_style="bold")
    table.add_column("Date")
    table.add_column("Time")
    table.add_column("Circle")
    table.add_column("Event summary")

    for occ in occs:
        state = resolve_attendance_state(by_id.get(occ.leader_id, {}))
        cat = status_category(state)
        table.add_row(
            occ.start.strftime("%a %Y-%m-%d"),
            f"{occ.start:%H:%M}-{occ.end:%H:%M}",
            occ.title,
            f"[{cat.color}]{cat.label}[/{cat.color}]",
        )

    console.print(table)
    print(f"{len(occs)} meetings")
    return 0


def _cmd_today(args: argparse.Namespace) -> int:
    """
    List circles meeting on one day (default: today).
    """
    if args.date:
        instant = _parse_instant(args.date)
        if instant is None:
            print("Please provide DATE as YYYY-MM-DD.")
            return 1
        day = instant.date()
    else:
        day = date.today()

    leaders = load_leaders(args.leaders)
    found = 0
    for record in leaders:
        schedule = schedule_from_record(record, default_duration=args.duration)
        if not meets_on_date(schedule, day):
            continue
        cat = status_category(resolve_attendance_state(record))
        freq = format_frequency_label(record.get("frequency") or "Weekly")
        print(f"{schedule.time_raw} | {schedule.title} | {freq} | {cat.label}")
        found += 1

    if not found:
        print(f"No circles meet on {day.isoformat()}.")
    return 0


def _cmd_export(args: argparse.Namespace) -> int:
    """
    Export meetings in [START, END) into an iCalendar (.ics) file.
    """
    out_path = (args.out or "").strip()
    if not out_path:
        print("Please provide output .ics path.")
        return 1

    rng = _parse_range(args)
    if rng is None:
        return 1

    leaders = load_leaders(args.leaders)
    occs = _occurrences(leaders, rng[0], rng[1], args.duration)
    if not occs:
        print("No meetings to export.")
        return 0

    states = {lid: resolve_attendance_state(r) for lid, r in _leaders_by_id(leaders).items()}
    n = export_occurrences_to_ics(occs, out_path, states=states)
    print(f"Exported {n} meetings to: {out_path}")
    return 0


def _cmd_status(args: argparse.Namespace) -> int:
    """
    Set the event summary state of one leader.
    """
    try:
        ok = set_attendance_state(args.leader_id, args.state, args.leaders)
    except AttendanceStateError as exc:
        print(str(exc))
        return 1

    if not ok:
        print(f"Leader not found: {args.leader_id}")
        return 1

    cat = status_category(args.state.strip().lower())
    print(f"Leader {args.leader_id}: {cat.label}")
    return 0


def _cmd_frequencies(args: argparse.Namespace) -> int:
    leaders = load_leaders(args.leaders)
    for value in ensure_default_frequencies(r.get("frequency") for r in leaders):
        print(format_frequency_label(value))
    return 0


def build_parser() -> argparse.ArgumentParser:
    """
    Build the argparse CLI parser with sub-commands.
    """
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--leaders", type=Path, default=None, help="Path to leaders.json")
    common.add_argument(
        "--duration",
        type=int,
        default=DEFAULT_DURATION_MINUTES,
        help="Meeting length in minutes when a leader has none",
    )

    parser = argparse.ArgumentParser(prog="circlecal", description="Circle meetings calendar")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    p_cal = sub.add_parser("calendar", parents=[common], help="Show meetings in a date range")
    p_cal.add_argument("start", type=str, help="Range start (inclusive), e.g. 2025-01-01")
    p_cal.add_argument("end", type=str, help="Range end (exclusive), e.g. 2025-02-01")

    p_today = sub.add_parser("today", parents=[common], help="Show circles meeting on a day")
    p_today.add_argument("date", type=str, nargs="?", default=None, help="Day (default: today)")

    p_export = sub.add_parser("export", parents=[common], help="Export meetings to .ics")
    p_export.add_argument("out", type=str, help="Output file path (e.g. out.ics)")
    p_export.add_argument("start", type=str, help="Range start (inclusive)")
    p_export.add_argument("end", type=str, help="Range end (exclusive)")

    p_status = sub.add_parser("status", parents=[common], help="Set a leader's event summary state")
    p_status.add_argument("leader_id", type=str, help="Leader id")
    p_status.add_argument("state", type=str, help=" | ".join(ATTENDANCE_STATES))

    sub.add_parser("frequencies", parents=[common], help="List known frequency values")

    return parser


def main(argv: list[str] | None = None) -> None:
    """
    CLI entry point. Parses args, dispatches to command handlers,
    and exits via SystemExit with a return code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.command == "calendar":
        raise SystemExit(_cmd_calendar(args))
    if args.command == "today":
        raise SystemExit(_cmd_today(args))
    if args.command == "export":
        raise SystemExit(_cmd_export(args))
    if args.command == "status":
        raise SystemExit(_cmd_status(args))
    if args.command == "frequencies":
        raise SystemExit(_cmd_frequencies(args))

    raise SystemExit(2)
