"""Unit tests for the achievement catalog and unlock evaluation."""

from datetime import date, datetime

import pytest

from liftquest.core.achievements import (
    ACHIEVEMENTS,
    SECRET_PLACEHOLDER_TITLE,
    achievements_by_category,
    check_achievements,
    completion_percentage,
    display_description,
    display_title,
    get_achievement,
    is_unlocked,
    restore_unlocked,
)
from liftquest.core.models import InvalidStatSnapshot, UserStats

NOW = datetime(2026, 10, 14, 12, 0)


def _ids(achievements) -> list[str]:
    return [a.id for a in achievements]


class TestCatalog:
    def test_catalog_size_and_unique_ids(self):
        assert len(ACHIEVEMENTS) == 23
        assert len({a.id for a in ACHIEVEMENTS}) == 23

    def test_catalog_entries_are_locked(self):
        assert all(a.unlocked_at is None for a in ACHIEVEMENTS)

    def test_secret_entries(self):
        secrets = {a.id for a in ACHIEVEMENTS if a.secret}
        assert secrets == {"secret-early-bird", "secret-night-owl", "secret-perfect-week"}

    def test_by_category(self):
        assert _ids(achievements_by_category("weekly")) == ["consistent-week", "power-week"]

    def test_unknown_id_raises(self):
        with pytest.raises(ValueError):
            get_achievement("nope")


class TestCheckAchievements:
    def test_empty_stats_unlock_nothing(self):
        assert check_achievements(UserStats(), now=NOW) == []

    def test_first_workout(self):
        unlocked = check_achievements(UserStats(total_workouts=1), now=NOW)
        assert _ids(unlocked) == ["first-workout"]
        assert unlocked[0].unlocked_at == NOW
        assert unlocked[0].is_unlocked

    def test_catalog_order(self):
        stats = UserStats(total_workouts=10, current_streak=3, max_streak=3, this_week_workouts=3)
        assert _ids(check_achievements(stats, now=NOW)) == [
            "first-workout",
            "5-workouts",
            "10-workouts",
            "3-day-streak",
            "consistent-week",
        ]

    def test_idempotent(self):
        stats = UserStats(total_workouts=5, total_prs=1, weight_logged=True)
        first = check_achievements(stats, now=NOW)
        assert first
        assert check_achievements(stats, first, now=NOW) == []
        assert check_achievements(stats, {a.id: NOW for a in first}, now=NOW) == []
        assert check_achievements(stats, [a.id for a in first], now=NOW) == []

    def test_already_owned_are_skipped(self):
        stats = UserStats(total_workouts=5)
        assert _ids(check_achievements(stats, ["first-workout"], now=NOW)) == ["5-workouts"]

    def test_secret_unlocks_like_any_other(self):
        stats = UserStats(total_workouts=2, early_morning_workouts=1, late_night_workouts=1)
        assert _ids(check_achievements(stats, now=NOW)) == [
            "first-workout",
            "secret-early-bird",
            "secret-night-owl",
        ]

    def test_one_month_counts_from_evaluation_day(self):
        stats = UserStats(total_workouts=1, first_workout_date=date(2026, 9, 14))
        assert "one-month" in _ids(check_achievements(stats, now=datetime(2026, 10, 14, 9, 0)))
        assert "one-month" not in _ids(check_achievements(stats, now=datetime(2026, 10, 13, 9, 0)))

    def test_one_month_ignores_wall_clock(self):
        recent = UserStats(total_workouts=1, first_workout_date=date(2020, 1, 1))
        future = UserStats(total_workouts=1, first_workout_date=date(2030, 1, 1))
        assert "one-month" not in _ids(check_achievements(recent, now=datetime(2020, 1, 10)))
        assert "one-month" in _ids(check_achievements(future, now=datetime(2030, 3, 1)))

    def test_explicit_reference_date_wins(self):
        stats = UserStats(
            total_workouts=1,
            first_workout_date=date(2026, 9, 1),
            reference_date=date(2026, 9, 10),
        )
        assert "one-month" not in _ids(check_achievements(stats, now=NOW))

    def test_variety(self):
        stats = UserStats(total_workouts=1, unique_exercises=25)
        ids = _ids(check_achievements(stats, now=NOW))
        assert "10-exercises" in ids
        assert "25-exercises" in ids


class TestUserStatsValidation:
    def test_negative_counter(self):
        with pytest.raises(InvalidStatSnapshot):
            UserStats(total_workouts=-1)

    def test_streak_longer_than_history(self):
        with pytest.raises(InvalidStatSnapshot):
            UserStats(total_workouts=2, current_streak=3, max_streak=3)

    def test_is_a_value_error(self):
        with pytest.raises(ValueError):
            UserStats(perfect_weeks=-2)


class TestUnlockedHelpers:
    def test_restore_drops_unknown_ids(self):
        restored = restore_unlocked({"first-workout": NOW, "retired-badge": NOW})
        assert _ids(restored) == ["first-workout"]
        assert restored[0].unlocked_at == NOW

    def test_is_unlocked(self):
        assert is_unlocked("first-workout", {"first-workout": NOW})
        assert not is_unlocked("first-pr", ["first-workout"])

    def test_completion_percentage(self):
        assert completion_percentage([]) == 0
        assert completion_percentage(["first-workout"]) == 4  # 1 / 23
        assert completion_percentage([a.id for a in ACHIEVEMENTS]) == 100

    def test_secret_display(self):
        owl = get_achievement("secret-night-owl")
        assert display_title(owl, unlocked=False) == SECRET_PLACEHOLDER_TITLE
        assert display_title(owl, unlocked=True) == owl.title
        assert display_description(owl, unlocked=False) != owl.description

    def test_public_display_unchanged(self):
        first = get_achievement("first-workout")
        assert display_title(first, unlocked=False) == first.title
