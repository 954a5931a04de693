"""Unit tests for streak calculation and week boundaries.

2026-10-11 and 2026-10-18 are Sundays.
"""

from datetime import date, datetime

from liftquest.core.models import WorkoutRecord
from liftquest.core.streaks import (
    calculate_streak,
    get_this_week_workouts,
    start_of_week,
    unique_workout_days,
    workouts_on,
)

TODAY = date(2026, 10, 18)


def _w(performed_at: str) -> WorkoutRecord:
    return WorkoutRecord(performed_at=performed_at, name="Workout")


class TestCalculateStreak:
    def test_empty(self):
        info = calculate_streak([], today=TODAY)
        assert (info.current_streak, info.max_streak) == (0, 0)

    def test_three_days_ending_today(self):
        history = [_w("2026-10-16T18:00"), _w("2026-10-17T18:00"), _w("2026-10-18T07:00")]
        info = calculate_streak(history, today=TODAY)
        assert (info.current_streak, info.max_streak) == (3, 3)

    def test_same_days_five_days_ago(self):
        history = [_w("2026-10-11"), _w("2026-10-12"), _w("2026-10-13")]
        info = calculate_streak(history, today=TODAY)
        assert (info.current_streak, info.max_streak) == (0, 3)

    def test_ending_yesterday_still_counts(self):
        history = [_w("2026-10-16"), _w("2026-10-17")]
        info = calculate_streak(history, today=TODAY)
        assert (info.current_streak, info.max_streak) == (2, 2)

    def test_same_day_counts_once(self):
        history = [_w("2026-10-17T08:00"), _w("2026-10-17T19:00")]
        info = calculate_streak(history, today=TODAY)
        assert (info.current_streak, info.max_streak) == (1, 1)

    def test_single_old_workout(self):
        info = calculate_streak([_w("2026-09-01")], today=TODAY)
        assert (info.current_streak, info.max_streak) == (0, 1)

    def test_longest_run_in_the_past(self):
        history = [
            _w("2026-10-01"), _w("2026-10-02"), _w("2026-10-03"), _w("2026-10-04"),
            _w("2026-10-17"), _w("2026-10-18"),
        ]
        info = calculate_streak(history, today=TODAY)
        assert (info.current_streak, info.max_streak) == (2, 4)

    def test_order_does_not_matter(self):
        history = [_w("2026-10-18"), _w("2026-10-16"), _w("2026-10-17")]
        assert calculate_streak(history, today=TODAY).current_streak == 3

    def test_accepts_plain_dates(self):
        info = calculate_streak([date(2026, 10, 17), datetime(2026, 10, 18, 9, 0)], today=TODAY)
        assert info.current_streak == 2


class TestDays:
    def test_unique_days_most_recent_first(self):
        history = [_w("2026-10-16T08:00"), _w("2026-10-18"), _w("2026-10-16T20:00")]
        assert unique_workout_days(history) == [date(2026, 10, 18), date(2026, 10, 16)]

    def test_workouts_on(self):
        history = [_w("2026-10-16T08:00"), _w("2026-10-18"), _w("2026-10-16T20:00")]
        assert len(workouts_on(history, date(2026, 10, 16))) == 2


class TestWeek:
    def test_start_of_week_is_sunday(self):
        assert start_of_week(datetime(2026, 10, 14, 15, 0)) == datetime(2026, 10, 11)
        assert start_of_week(datetime(2026, 10, 17, 23, 59)) == datetime(2026, 10, 11)
        assert start_of_week(datetime(2026, 10, 18, 10, 0)) == datetime(2026, 10, 18)

    def test_this_week_workouts(self):
        history = [_w("2026-10-10T20:00"), _w("2026-10-11T07:00"), _w("2026-10-13")]
        assert get_this_week_workouts(history, now=datetime(2026, 10, 14, 12, 0)) == 2
