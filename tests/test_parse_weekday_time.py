"""
Unit tests for the weekday and time parsers.

Both parsers fail closed: unknown text -> None, never an exception.
"""

import unittest

from circlecal.model import TimeOfDay
from circlecal.parse import parse_time, parse_weekday


class TestParseWeekday(unittest.TestCase):
    def test_full_names(self) -> None:
        self.assertEqual(parse_weekday("Monday"), 1)
        self.assertEqual(parse_weekday("Wednesday"), 3)
        self.assertEqual(parse_weekday("Sunday"), 7)

    def test_abbreviations_and_case(self) -> None:
        self.assertEqual(parse_weekday("wed"), 3)
        self.assertEqual(parse_weekday("WEDS"), 3)
        self.assertEqual(parse_weekday("tues"), 2)
        self.assertEqual(parse_weekday(" Thurs "), 4)
        self.assertEqual(parse_weekday("thur"), 4)
        self.assertEqual(parse_weekday("sat"), 6)

    def test_unknown_returns_none(self) -> None:
        self.assertIsNone(parse_weekday("Funday"))
        self.assertIsNone(parse_weekday(""))
        self.assertIsNone(parse_weekday(None))


class TestParseTime(unittest.TestCase):
    def test_24_hour(self) -> None:
        self.assertEqual(parse_time("19:00"), TimeOfDay(19, 0))
        self.assertEqual(parse_time("7:05"), TimeOfDay(7, 5))
        self.assertEqual(parse_time("07:05"), TimeOfDay(7, 5))

    def test_12_hour_variants(self) -> None:
        self.assertEqual(parse_time("7:00 PM"), TimeOfDay(19, 0))
        self.assertEqual(parse_time("7 pm"), TimeOfDay(19, 0))
        self.assertEqual(parse_time("7:30pm"), TimeOfDay(19, 30))
        self.assertEqual(parse_time("7PM"), TimeOfDay(19, 0))
        self.assertEqual(parse_time("12 AM"), TimeOfDay(0, 0))
        self.assertEqual(parse_time("12:15 PM"), TimeOfDay(12, 15))

    def test_extra_whitespace_is_collapsed(self) -> None:
        self.assertEqual(parse_time("  7:00    PM "), TimeOfDay(19, 0))

    def test_generic_fallback(self) -> None:
        # not one of the fixed formats, handled by the last-resort parse
        self.assertEqual(parse_time("19:45:30"), TimeOfDay(19, 45))
        self.assertEqual(parse_time("7:00:00 PM"), TimeOfDay(19, 0))

    def test_unparsable_returns_none(self) -> None:
        self.assertIsNone(parse_time("whenever"))
        # dates and bare numbers carry no time of day
        self.assertIsNone(parse_time("7"))
        self.assertIsNone(parse_time("Wednesday"))
        self.assertIsNone(parse_time("Jan"))
        self.assertIsNone(parse_time("2025-01-08"))
        self.assertIsNone(parse_time(""))
        self.assertIsNone(parse_time("   "))
        self.assertIsNone(parse_time(None))


if __name__ == "__main__":
    unittest.main()
