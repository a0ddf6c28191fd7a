from __future__ import annotations

import datetime as dt
import unittest

from chronogrid.util.timeparse import (
    decimal_to_time,
    enumerate_dates,
    format_12h,
    format_hour_label,
    normalize_date_to_midnight,
    parse_workhours,
    round_half_up,
    to_decimal_hours,
)


class TestDecimalHoursContract(unittest.TestCase):
    def test_padded_times_survive_decimal_conversion(self) -> None:
        for h in range(24):
            for m in range(60):
                t = f"{h:02d}:{m:02d}"
                self.assertEqual(decimal_to_time(to_decimal_hours(t)), t)

    def test_to_decimal_hours_treats_bad_parts_as_zero(self) -> None:
        self.assertEqual(to_decimal_hours("09:30"), 9.5)
        self.assertEqual(to_decimal_hours("9:xx"), 9.0)
        self.assertEqual(to_decimal_hours("abc"), 0.0)
        self.assertEqual(to_decimal_hours(""), 0.0)
        self.assertEqual(to_decimal_hours(None), 0.0)

    def test_minute_carry_and_midnight_wrap(self) -> None:
        self.assertEqual(decimal_to_time(9.999), "10:00")
        self.assertEqual(decimal_to_time(24.0), "00:00")
        self.assertEqual(decimal_to_time(23.9999), "00:00")
        self.assertEqual(decimal_to_time(9.25), "09:15")

    def test_round_half_up(self) -> None:
        self.assertEqual(round_half_up(36.5), 37)
        self.assertEqual(round_half_up(36.49), 36)
        self.assertEqual(round_half_up(2.5), 3)


class TestDateHelpersContract(unittest.TestCase):
    def test_normalize_strips_time_of_day(self) -> None:
        self.assertEqual(normalize_date_to_midnight(dt.datetime(2024, 6, 10, 15, 30)), dt.date(2024, 6, 10))
        self.assertEqual(normalize_date_to_midnight("2024-06-10T23:59:00"), dt.date(2024, 6, 10))
        self.assertEqual(normalize_date_to_midnight(dt.date(2024, 6, 10)), dt.date(2024, 6, 10))
        with self.assertRaises(ValueError):
            normalize_date_to_midnight("10/06/2024")

    def test_enumerate_dates_inclusive_and_ordered(self) -> None:
        got = enumerate_dates("2024-06-10", dt.date(2024, 6, 12))
        self.assertEqual(got, [dt.date(2024, 6, 10), dt.date(2024, 6, 11), dt.date(2024, 6, 12)])
        self.assertEqual(enumerate_dates("2024-06-12", "2024-06-10"), [])
        self.assertEqual(enumerate_dates("2024-02-28", "2024-03-01")[1], dt.date(2024, 2, 29))


class TestDisplayContract(unittest.TestCase):
    def test_twelve_hour_display(self) -> None:
        self.assertEqual(format_12h(0, 0), "12:00 AM")
        self.assertEqual(format_12h(24, 0), "12:00 AM")
        self.assertEqual(format_12h(12, 30), "12:30 PM")
        self.assertEqual(format_12h(9, 15), "09:15 AM")
        self.assertEqual(format_12h(13, 0), "01:00 PM")
        self.assertEqual(format_hour_label(7), "07:00 AM")


class TestWorkhoursContract(unittest.TestCase):
    def test_parse_workhours(self) -> None:
        self.assertEqual(parse_workhours("07:00-22:00"), (7, 22))
        self.assertEqual(parse_workhours("00:00-24:00"), (0, 24))

    def test_parse_workhours_rejects_bad_windows(self) -> None:
        for bad in ("07:30-22:00", "22:00-07:00", "7-22", "07:00"):
            with self.assertRaises(ValueError, msg=bad):
                parse_workhours(bad)


if __name__ == "__main__":
    unittest.main(verbosity=2)
