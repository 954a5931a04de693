"""
Unit tests for stats and challenge-counter aggregation.

Fixture history (2026-10-11 is a Sunday, NOW is Wednesday evening):

  10-04 05:30  Morning Lift  Back Squats 5x5@100
  10-06 18:00  Push Day      Bench Press 3x8@60, Push-ups 3x15
  10-08 22:30  Late Pull     Pull-ups 4x6
  10-12 07:00  Legs          Back Squats 5x5@110
  10-13 18:00  Push Day      Bench Press 3x8@62.5
  10-14 19:00  Cardio        Treadmill Run 1x20
"""

from datetime import date, datetime

import pytest

from liftquest.core.exercises import cardio_exercise_names
from liftquest.core.models import CustomExercise, ExerciseEntry, PersonalRecord, WeightEntry, WorkoutRecord
from liftquest.core.stats import (
    build_challenge_counters,
    build_user_stats,
    count_perfect_weeks,
    detect_new_prs,
    merge_prs,
)

NOW = datetime(2026, 10, 14, 20, 0)


def _w(performed_at, name, *entries):
    return WorkoutRecord(
        performed_at=performed_at,
        name=name,
        exercises=[ExerciseEntry(n, s, r, kg) for n, s, r, kg in entries],
    )


@pytest.fixture
def history():
    return [
        _w("2026-10-04T05:30", "Morning Lift", ("Back Squats", 5, 5, 100)),
        _w("2026-10-06T18:00", "Push Day", ("Bench Press", 3, 8, 60), ("Push-ups", 3, 15, 0)),
        _w("2026-10-08T22:30", "Late Pull", ("Pull-ups", 4, 6, 0)),
        _w("2026-10-12T07:00", "Legs", ("Back Squats", 5, 5, 110)),
        _w("2026-10-13T18:00", "Push Day", ("Bench Press", 3, 8, 62.5)),
        _w("2026-10-14T19:00", "Cardio", ("Treadmill Run", 1, 20, 0)),
    ]


@pytest.fixture
def prs():
    return [
        PersonalRecord("Back Squats", 110, "2026-10-12"),
        PersonalRecord("Bench Press", 62.5, "2026-10-13"),
    ]


class TestBuildUserStats:
    def test_empty_history(self):
        stats = build_user_stats([], now=NOW)
        assert stats.total_workouts == 0
        assert stats.first_workout_date is None
        assert stats.weight_logged is False

    def test_fixture(self, history, prs):
        stats = build_user_stats(history, prs, now=NOW)
        assert stats.total_workouts == 6
        assert stats.this_week_workouts == 3
        assert stats.total_prs == 2
        assert (stats.current_streak, stats.max_streak) == (3, 3)
        assert stats.first_workout_date == date(2026, 10, 4)
        assert stats.unique_exercises == 10  # 5 workout names + 5 exercise names
        assert stats.total_weight == pytest.approx(8190.0)
        assert stats.early_morning_workouts == 1
        assert stats.late_night_workouts == 1
        assert stats.reference_date == date(2026, 10, 14)

    def test_weight_logged(self, history):
        stats = build_user_stats(history, weight_log=[WeightEntry("2026-10-14", 80.0)], now=NOW)
        assert stats.weight_logged is True

    def test_date_only_records_are_not_time_of_day(self):
        stats = build_user_stats([_w("2026-10-14", "Workout")], now=NOW)
        assert stats.early_morning_workouts == 0

    def test_perfect_weeks(self, history):
        assert build_user_stats(history, now=NOW).perfect_weeks == 1
        assert build_user_stats(history, now=NOW, scheduled_days_per_week=4).perfect_weeks == 0

    def test_running_week_is_not_perfect_yet(self, history):
        # 10-12, 10-13, 10-14 fall in the running week
        assert count_perfect_weeks(history[3:], 3, NOW) == 0
        assert count_perfect_weeks(history[3:], 3, datetime(2026, 10, 18, 9, 0)) == 1


class TestBuildChallengeCounters:
    def test_fixture(self, history, prs):
        counters = build_challenge_counters(history, prs, now=NOW, cardio_exercises=["treadmill run"])
        assert counters.workouts_today == 1
        assert counters.sets_today == 1
        assert counters.exercises_today == 1
        assert counters.pr_today is False
        assert counters.cardio_minutes_today == 20
        assert counters.workouts_this_week == 3
        assert counters.sets_this_week == 9
        assert counters.exercises_this_week == 3
        assert counters.streak_days == 3
        assert counters.prs_this_week == 2

    def test_cardio_needs_known_names(self, history):
        assert build_challenge_counters(history, now=NOW).cardio_minutes_today == 0

    def test_reclassified_cardio_logs_no_minutes(self, history):
        cardio = cardio_exercise_names([CustomExercise(name="treadmill run", primary_muscle="legs")])
        counters = build_challenge_counters(history, now=NOW, cardio_exercises=cardio)
        assert counters.cardio_minutes_today == 0

    def test_pr_today(self, history, prs):
        today_pr = [*prs, PersonalRecord("Deadlift", 140, "2026-10-14")]
        counters = build_challenge_counters(history, today_pr, now=NOW)
        assert counters.pr_today is True
        assert counters.prs_this_week == 3

    def test_empty(self):
        counters = build_challenge_counters([], now=NOW)
        assert counters.workouts_today == 0
        assert counters.streak_days == 0


class TestPersonalRecords:
    def test_heavier_weight_is_a_pr(self, prs):
        workout = _w("2026-10-15T18:00", "Legs", ("Back Squats", 5, 3, 115))
        [pr] = detect_new_prs(workout, prs)
        assert (pr.exercise_name, pr.weight_kg, pr.date) == ("Back Squats", 115, "2026-10-15")

    def test_lighter_or_equal_is_not(self, prs):
        workout = _w("2026-10-15T18:00", "Push", ("Bench Press", 3, 8, 60), ("back squats", 5, 5, 110))
        assert detect_new_prs(workout, prs) == []

    def test_bodyweight_never_sets_a_record(self):
        workout = _w("2026-10-15T18:00", "Push", ("Push-ups", 3, 15, 0))
        assert detect_new_prs(workout, []) == []

    def test_first_weighted_entry_is_a_record(self, prs):
        workout = _w("2026-10-15T18:00", "Pull", ("Deadlift", 3, 5, 140))
        assert [p.exercise_name for p in detect_new_prs(workout, prs)] == ["Deadlift"]

    def test_repeated_exercise_counts_once(self):
        workout = _w(
            "2026-10-15T18:00", "Heavy",
            ("Deadlift", 1, 5, 120), ("Deadlift", 1, 3, 140), ("Deadlift", 1, 1, 130),
        )
        [pr] = detect_new_prs(workout, [])
        assert pr.weight_kg == 140

    def test_merge_keeps_one_record_per_exercise(self, prs):
        merged = merge_prs(prs, [PersonalRecord("back squats", 115, "2026-10-15")])
        assert len(merged) == 2
        squat = next(p for p in merged if p.exercise_name.lower() == "back squats")
        assert squat.weight_kg == 115
