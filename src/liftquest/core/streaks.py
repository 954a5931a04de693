"""
Workout streak calculation.

A streak is a run of consecutive calendar days with at least one workout.
Several workouts on the same day count once.

- current streak: counted back from the most recent workout day, but only
  while that day is today or yesterday; otherwise 0.
- max streak: longest run anywhere in the history (never less than the
  current streak, and 1 as soon as there is any workout).

Weeks start on Sunday 00:00 local time for get_this_week_workouts().
"""

from datetime import date, datetime, timedelta
from typing import Iterable, Sequence, Union

from .models import StreakInfo, WorkoutRecord

WorkoutLike = Union[WorkoutRecord, date, datetime]


def _day_of(item: WorkoutLike) -> date:
    if isinstance(item, WorkoutRecord):
        return item.day
    if isinstance(item, datetime):
        return item.date()
    return item


def _timestamp_of(item: WorkoutLike) -> datetime:
    if isinstance(item, WorkoutRecord):
        return item.timestamp
    if isinstance(item, datetime):
        return item
    return datetime.combine(item, datetime.min.time())


def unique_workout_days(history: Iterable[WorkoutLike]) -> list[date]:
    """Distinct workout days, most recent first."""
    return sorted({_day_of(w) for w in history}, reverse=True)


def workouts_on(history: Iterable[WorkoutLike], day: date) -> list[WorkoutLike]:
    return [w for w in history if _day_of(w) == day]


def calculate_streak(history: Sequence[WorkoutLike], today: date | None = None) -> StreakInfo:
    """
    Derive current and longest streaks from a workout history.

    Args:
        history: Workout records (or bare dates / datetimes), any order
        today: Reference day (default: today's local date)

    Returns:
        StreakInfo(current_streak, max_streak)
    """
    days = unique_workout_days(history)
    if not days:
        return StreakInfo(current_streak=0, max_streak=0)

    if today is None:
        today = date.today()

    current_streak = 0
    if (today - days[0]).days <= 1:
        current_streak = 1
        previous = days[0]
        for day in days[1:]:
            if (previous - day).days != 1:
                break
            current_streak += 1
            previous = day

    max_streak = 1
    run = 1
    for prev, day in zip(days, days[1:]):
        if (prev - day).days == 1:
            run += 1
            max_streak = max(max_streak, run)
        else:
            run = 1

    return StreakInfo(
        current_streak=current_streak,
        max_streak=max(max_streak, current_streak),
    )


def start_of_week(now: datetime) -> datetime:
    """Most recent Sunday 00:00 at or before *now*."""
    days_since_sunday = (now.weekday() + 1) % 7
    sunday = now.date() - timedelta(days=days_since_sunday)
    return datetime.combine(sunday, datetime.min.time())


def get_this_week_workouts(history: Iterable[WorkoutLike], now: datetime | None = None) -> int:
    """Number of workouts on or after the most recent Sunday 00:00."""
    if now is None:
        now = datetime.now()
    week_start = start_of_week(now)
    return sum(1 for w in history if _timestamp_of(w) >= week_start)
