"""
Attendance (event summary) state of a leader.

Leader records carry the state in one of two shapes:
- new:    event_summary_state = "received" | "did_not_meet" | "skipped" | "not_received"
- legacy: event_summary_received / event_summary_skipped booleans

The legacy "skipped" flag meant "the circle did not meet", so it maps to
did_not_meet. The new "skipped" state has no legacy equivalent.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Mapping


RECEIVED = "received"
DID_NOT_MEET = "did_not_meet"
SKIPPED = "skipped"
NOT_RECEIVED = "not_received"

ATTENDANCE_STATES = (RECEIVED, DID_NOT_MEET, SKIPPED, NOT_RECEIVED)


class AttendanceStateError(ValueError):
    """Raised when asked to store a state that is not one of ATTENDANCE_STATES."""


@dataclass(frozen=True)
class StatusCategory:
    state: str
    color: str
    label: str
    button_label: str


STATUS_CATEGORIES: Dict[str, StatusCategory] = {
    RECEIVED: StatusCategory(RECEIVED, "green", "Received", "Yes"),
    DID_NOT_MEET: StatusCategory(DID_NOT_MEET, "blue", "Did Not Meet", "Didn't Meet"),
    SKIPPED: StatusCategory(SKIPPED, "yellow", "Skipped", "Skip"),
    NOT_RECEIVED: StatusCategory(NOT_RECEIVED, "red", "Not Received", "No"),
}


def resolve_attendance_state(record: Mapping[str, Any]) -> str:
    """
    Canonical state for a leader record.

    An explicit event_summary_state always wins; otherwise the legacy
    booleans are consulted; otherwise not_received.
    """
    state = record.get("event_summary_state")
    if state:
        return state

    if record.get("event_summary_received") is True:
        return RECEIVED
    if record.get("event_summary_skipped") is True:
        return DID_NOT_MEET
    return NOT_RECEIVED


def status_category(state: str) -> StatusCategory:
    """
    Colour/label category of a state, shared by every view.
    """
    # Unknown states look like not_received everywhere
    return STATUS_CATEGORIES.get(state, STATUS_CATEGORIES[NOT_RECEIVED])


def validate_state(state: str) -> str:
    """
    Normalize a state for storing; raises AttendanceStateError if unknown.
    """
    value = (state or "").strip().lower()
    if value not in ATTENDANCE_STATES:
        raise AttendanceStateError(
            f"Invalid attendance state {state!r} (expected one of: {', '.join(ATTENDANCE_STATES)})"
        )
    return value


def legacy_flags_for(state: str) -> Dict[str, bool]:
    """
    Legacy booleans that keep old readers in sync with a new state.

    The legacy shape cannot tell did_not_meet from skipped; both set the
    skipped flag.
    """
    return {
        "event_summary_received": state == RECEIVED,
        "event_summary_skipped": state in (DID_NOT_MEET, SKIPPED),
    }
