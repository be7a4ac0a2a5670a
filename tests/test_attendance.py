"""
Unit tests for the attendance (event summary) state mapper.

Resolution order:
- explicit event_summary_state wins
- legacy received=True -> received, legacy skipped=True -> did_not_meet
- otherwise not_received
"""

import unittest

from circlecal.attendance import (
    AttendanceStateError,
    legacy_flags_for,
    resolve_attendance_state,
    status_category,
    validate_state,
)


class TestResolveAttendanceState(unittest.TestCase):
    def test_legacy_received(self) -> None:
        self.assertEqual(resolve_attendance_state({"event_summary_received": True}), "received")

    def test_legacy_skipped_means_did_not_meet(self) -> None:
        self.assertEqual(resolve_attendance_state({"event_summary_skipped": True}), "did_not_meet")

    def test_enumerated_state_wins(self) -> None:
        record = {"event_summary_state": "skipped", "event_summary_received": None}
        self.assertEqual(resolve_attendance_state(record), "skipped")

        record = {"event_summary_state": "not_received", "event_summary_received": True}
        self.assertEqual(resolve_attendance_state(record), "not_received")

    def test_default_not_received(self) -> None:
        self.assertEqual(resolve_attendance_state({}), "not_received")
        self.assertEqual(resolve_attendance_state({"event_summary_received": False}), "not_received")
        # only a real boolean True counts
        self.assertEqual(resolve_attendance_state({"event_summary_received": "yes"}), "not_received")


class TestStatusCategory(unittest.TestCase):
    def test_colors_and_labels(self) -> None:
        expected = {
            "received": ("green", "Received"),
            "did_not_meet": ("blue", "Did Not Meet"),
            "skipped": ("yellow", "Skipped"),
            "not_received": ("red", "Not Received"),
        }
        for state, (color, label) in expected.items():
            with self.subTest(state=state):
                cat = status_category(state)
                self.assertEqual((cat.color, cat.label), (color, label))

    def test_unknown_state_falls_back_to_not_received(self) -> None:
        self.assertEqual(status_category("pending").label, "Not Received")


class TestLegacySync(unittest.TestCase):
    def test_flags(self) -> None:
        self.assertEqual(
            legacy_flags_for("received"), {"event_summary_received": True, "event_summary_skipped": False}
        )
        self.assertEqual(
            legacy_flags_for("skipped"), {"event_summary_received": False, "event_summary_skipped": True}
        )
        self.assertEqual(
            legacy_flags_for("not_received"), {"event_summary_received": False, "event_summary_skipped": False}
        )

    def test_validate_state(self) -> None:
        self.assertEqual(validate_state(" Received "), "received")
        with self.assertRaises(AttendanceStateError):
            validate_state("maybe")


if __name__ == "__main__":
    unittest.main()
