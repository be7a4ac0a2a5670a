"""
Unit tests for the JSON leader store.

Storage contract:
- Missing/invalid file -> empty list
- JSON schema: {"leaders": [ ... ]} (a bare list is accepted too)
- set_attendance_state writes the new state and the legacy flags
"""

import json
import os
import tempfile
import unittest
from datetime import date
from pathlib import Path
from unittest import mock

from circlecal.attendance import AttendanceStateError
from circlecal.storage import (
    load_leaders,
    save_leaders,
    schedule_from_record,
    set_attendance_state,
)


LEADER = {
    "id": 42,
    "name": "Jane Doe",
    "circle_type": "Women's",
    "day": "Wednesday",
    "time": "7:00 PM",
    "frequency": "1st & 3rd",
    "meeting_start_date": "2025-01-08",
    "event_summary_received": True,
}


class TestLoadSave(unittest.TestCase):
    def test_load_missing_file_returns_empty(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            self.assertEqual(load_leaders(Path(d) / "missing.json"), [])

    def test_load_corrupt_file_returns_empty(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            p = Path(d) / "leaders.json"
            p.write_text("{not json", encoding="utf-8")
            self.assertEqual(load_leaders(p), [])

    def test_save_and_load_roundtrip(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            p = Path(d) / "sub" / "leaders.json"
            save_leaders([LEADER], p)
            self.assertEqual(load_leaders(p), [LEADER])
            data = json.loads(p.read_text(encoding="utf-8"))
            self.assertIn("leaders", data)

    def test_bare_list_and_junk_entries(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            p = Path(d) / "leaders.json"
            p.write_text(json.dumps([LEADER, "junk", 3]), encoding="utf-8")
            self.assertEqual(load_leaders(p), [LEADER])

    def test_env_override(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            p = Path(d) / "env.json"
            save_leaders([LEADER], p)
            with mock.patch.dict(os.environ, {"CIRCLECAL_LEADERS": str(p)}):
                self.assertEqual(load_leaders(), [LEADER])


class TestScheduleFromRecord(unittest.TestCase):
    def test_fields(self) -> None:
        s = schedule_from_record(LEADER)
        self.assertEqual(s.leader_id, "42")
        self.assertEqual(s.weekday_raw, "Wednesday")
        self.assertEqual(s.time_raw, "7:00 PM")
        self.assertEqual(s.frequency_raw, "1st & 3rd")
        self.assertEqual(s.anchor_date, date(2025, 1, 8))
        self.assertEqual(s.duration_minutes, 60)
        self.assertEqual(s.title, "Jane Doe (Women's)")

    def test_malformed_anchor_and_blank_fields(self) -> None:
        s = schedule_from_record(
            {"id": 7, "name": "Sam", "day": " ", "meeting_start_date": "01/08/2025", "duration_minutes": 90}
        )
        self.assertIsNone(s.anchor_date)
        self.assertIsNone(s.weekday_raw)
        self.assertIsNone(s.frequency_raw)
        self.assertEqual(s.duration_minutes, 90)
        self.assertEqual(s.title, "Sam")

    def test_default_duration_used_for_bad_values(self) -> None:
        s = schedule_from_record({"id": 1, "duration_minutes": "long"}, default_duration=45)
        self.assertEqual(s.duration_minutes, 45)


class TestSetAttendanceState(unittest.TestCase):
    def test_writes_state_and_legacy_flags(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            p = Path(d) / "leaders.json"
            save_leaders([LEADER, {"id": 43, "name": "Other"}], p)

            self.assertTrue(set_attendance_state(42, "skipped", p))

            stored = load_leaders(p)[0]
            self.assertEqual(stored["event_summary_state"], "skipped")
            self.assertFalse(stored["event_summary_received"])
            self.assertTrue(stored["event_summary_skipped"])
            self.assertNotIn("event_summary_state", load_leaders(p)[1])

    def test_unknown_leader(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            p = Path(d) / "leaders.json"
            save_leaders([LEADER], p)
            self.assertFalse(set_attendance_state("999", "received", p))

    def test_invalid_state_raises(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            p = Path(d) / "leaders.json"
            save_leaders([LEADER], p)
            with self.assertRaises(AttendanceStateError):
                set_attendance_state(42, "maybe", p)


if __name__ == "__main__":
    unittest.main()
