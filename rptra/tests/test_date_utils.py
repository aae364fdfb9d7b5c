import unittest
from datetime import datetime, timedelta, timezone

from rptra import date_utils
from rptra.date_utils import JAKARTA_TZ


def jakarta(*args):
    return datetime(*args, tzinfo=JAKARTA_TZ)


class WeekRangeTests(unittest.TestCase):
    def test_every_weekday_maps_to_monday_through_sunday(self):
        monday = jakarta(2024, 3, 4, 10, 30)
        for offset in range(7):
            now = monday + timedelta(days=offset)
            week = date_utils.current_week_range(now)
            self.assertEqual(week.start, jakarta(2024, 3, 4))
            self.assertEqual(week.end, jakarta(2024, 3, 10, 23, 59, 59, 999000))

    def test_sunday_belongs_to_the_week_that_started_six_days_earlier(self):
        week = date_utils.current_week_range(jakarta(2024, 3, 10, 8, 0))
        self.assertEqual(week.start.weekday(), 0)
        self.assertEqual(week.start.date().isoformat(), "2024-03-04")

    def test_utc_input_is_bucketed_by_jakarta_day(self):
        # Sunday 18:00 UTC is already Monday 01:00 in Jakarta.
        now = datetime(2024, 3, 10, 18, 0, tzinfo=timezone.utc)
        week = date_utils.current_week_range(now)
        self.assertEqual(week.start.date().isoformat(), "2024-03-11")

    def test_previous_week_is_seven_days_back(self):
        now = jakarta(2024, 3, 6)
        current = date_utils.current_week_range(now)
        previous = date_utils.previous_week_range(now)
        self.assertEqual(current.start - previous.start, timedelta(days=7))
        self.assertEqual(current.end - previous.end, timedelta(days=7))


class MonthAndYearRangeTests(unittest.TestCase):
    def test_current_month_handles_leap_february(self):
        month = date_utils.current_month_range(jakarta(2024, 2, 14))
        self.assertEqual(month.start, jakarta(2024, 2, 1))
        self.assertEqual(month.end, jakarta(2024, 2, 29, 23, 59, 59, 999000))

    def test_previous_month_in_january_rolls_back_a_year(self):
        previous = date_utils.previous_month_range(jakarta(2024, 1, 20))
        self.assertEqual(previous.start, jakarta(2023, 12, 1))
        self.assertEqual(previous.end, jakarta(2023, 12, 31, 23, 59, 59, 999000))

    def test_year_ranges(self):
        now = jakarta(2024, 7, 1)
        self.assertEqual(date_utils.current_year_range(now).start, jakarta(2024, 1, 1))
        previous = date_utils.previous_year_range(now)
        self.assertEqual(previous.start, jakarta(2023, 1, 1))
        self.assertEqual(previous.end, jakarta(2023, 12, 31, 23, 59, 59, 999000))

    def test_period_ranges_rejects_unknown_period(self):
        with self.assertRaises(ValueError):
            date_utils.period_ranges("decade")


class InRangeTests(unittest.TestCase):
    def test_bounds_are_inclusive(self):
        month = date_utils.current_month_range(jakarta(2024, 3, 15))
        self.assertTrue(date_utils.is_in_range(month.start, month.start, month.end))
        self.assertTrue(date_utils.is_in_range(month.end, month.start, month.end))
        self.assertFalse(
            date_utils.is_in_range(
                month.end + timedelta(milliseconds=1), month.start, month.end
            )
        )

    def test_naive_values_are_read_as_utc(self):
        month = date_utils.current_month_range(jakarta(2024, 3, 15))
        # 2024-02-29 17:00 UTC is 2024-03-01 00:00 in Jakarta.
        self.assertTrue(month.contains(datetime(2024, 2, 29, 17, 0)))
        self.assertFalse(month.contains(datetime(2024, 2, 29, 16, 59)))


class FormatTests(unittest.TestCase):
    def test_format_date_only(self):
        self.assertEqual(date_utils.format_date_only("2024-03-05"), "5 Mar 2024")
        self.assertEqual(date_utils.format_date_only("2024-08-17T10:00:00Z"), "17 Agu 2024")

    def test_format_date_only_invalid(self):
        self.assertEqual(date_utils.format_date_only("not-a-date"), "Invalid date")
        self.assertEqual(date_utils.format_date_only(None), "Invalid date")
        self.assertEqual(date_utils.format_date_only(""), "Invalid date")
        self.assertEqual(
            date_utils.format_date_only("9999-12-31T23:00:00"), "Invalid date"
        )

    def test_period_label(self):
        month = date_utils.current_month_range(jakarta(2024, 5, 2))
        self.assertEqual(date_utils.period_label("month", month), "Mei 2024")
        year = date_utils.current_year_range(jakarta(2024, 5, 2))
        self.assertEqual(date_utils.period_label("year", year), "2024")


if __name__ == "__main__":
    unittest.main()
