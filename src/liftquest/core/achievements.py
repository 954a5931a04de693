"""
Achievement catalog and unlock evaluation.

The catalog is a fixed, ordered tuple.  check_achievements() walks it in
declaration order, skips ids the caller already owns, and returns stamped
copies of every entry whose condition now holds.  Nothing is mutated: the
caller owns (and persists) the unlocked set.

Secret achievements unlock exactly like the others; the flag only tells
the view layer to hide title and description until unlocked.
"""

from dataclasses import replace
from datetime import datetime
from typing import Callable, Collection, Iterable, Mapping

from .config import ONE_MONTH_DAYS
from .models import Achievement, AchievementCategory, UserStats


def _days_since_first_workout(stats: UserStats) -> int | None:
    if stats.first_workout_date is None or stats.reference_date is None:
        return None
    return (stats.reference_date - stats.first_workout_date).days


def _achievement(
    id: str,
    title: str,
    description: str,
    icon: str,
    category: AchievementCategory,
    condition: Callable[[UserStats], bool],
    secret: bool = False,
) -> Achievement:
    return Achievement(
        id=id,
        title=title,
        description=description,
        icon=icon,
        category=category,
        condition=condition,
        secret=secret,
    )


ACHIEVEMENTS: tuple[Achievement, ...] = (
    # Beginner
    _achievement("first-workout", "First Steps 🎯", "Complete your first workout", "🎯",
                 "beginner", lambda s: s.total_workouts >= 1),
    _achievement("first-pr", "Personal Best 🏆", "Set your first personal record", "🏆",
                 "beginner", lambda s: s.total_prs >= 1),
    _achievement("progress-tracker", "Progress Tracker ⚖️", "Log your weight for the first time", "⚖️",
                 "beginner", lambda s: s.weight_logged),

    # Workout milestones
    _achievement("5-workouts", "Getting Started 💪", "Complete 5 workouts", "💪",
                 "workout", lambda s: s.total_workouts >= 5),
    _achievement("10-workouts", "Committed 🔥", "Complete 10 workouts", "🔥",
                 "workout", lambda s: s.total_workouts >= 10),
    _achievement("25-workouts", "Dedicated ⭐", "Complete 25 workouts", "⭐",
                 "workout", lambda s: s.total_workouts >= 25),
    _achievement("50-workouts", "Fitness Enthusiast 🌟", "Complete 50 workouts", "🌟",
                 "workout", lambda s: s.total_workouts >= 50),
    _achievement("100-workouts", "Century Club 💯", "Complete 100 workouts", "💯",
                 "workout", lambda s: s.total_workouts >= 100),

    # Personal records
    _achievement("5-prs", "Record Breaker 📈", "Set 5 personal records", "📈",
                 "pr", lambda s: s.total_prs >= 5),
    _achievement("10-prs", "PR Machine 🎖️", "Set 10 personal records", "🎖️",
                 "pr", lambda s: s.total_prs >= 10),
    _achievement("25-prs", "Strength Master 👑", "Set 25 personal records", "👑",
                 "pr", lambda s: s.total_prs >= 25),

    # Streaks
    _achievement("3-day-streak", "On a Roll 🔥", "Complete workouts for 3 consecutive days", "🔥",
                 "streak", lambda s: s.current_streak >= 3),
    _achievement("7-day-streak", "Week Warrior ⚡", "Complete workouts for 7 consecutive days", "⚡",
                 "streak", lambda s: s.current_streak >= 7),
    _achievement("14-day-streak", "Unstoppable 💥", "Complete workouts for 14 consecutive days", "💥",
                 "streak", lambda s: s.current_streak >= 14),
    _achievement("30-day-streak", "Monthly Mastery 🏅", "Complete workouts for 30 consecutive days", "🏅",
                 "streak", lambda s: s.current_streak >= 30),

    # Weekly
    _achievement("consistent-week", "Consistent Week 📅", "Complete 3 workouts in one week", "📅",
                 "weekly", lambda s: s.this_week_workouts >= 3),
    _achievement("power-week", "Power Week ⚡", "Complete 5 workouts in one week", "⚡",
                 "weekly", lambda s: s.this_week_workouts >= 5),

    # Special
    _achievement("one-month", "One Month Strong 🎊", "30 days since your first workout", "🎊",
                 "special", lambda s: (_days_since_first_workout(s) or 0) >= ONE_MONTH_DAYS),
    _achievement("10-exercises", "Exercise Explorer 🗺️", "Try 10 different exercises", "🗺️",
                 "special", lambda s: s.unique_exercises >= 10),
    _achievement("25-exercises", "Movement Master 🌍", "Try 25 different exercises", "🌍",
                 "special", lambda s: s.unique_exercises >= 25),

    # Secret: hidden until unlocked
    _achievement("secret-early-bird", "Early Bird 🌅", "Complete a workout before 6 AM", "🌅",
                 "special", lambda s: s.early_morning_workouts >= 1, secret=True),
    _achievement("secret-night-owl", "Night Owl 🦉", "Complete a workout after 10 PM", "🦉",
                 "special", lambda s: s.late_night_workouts >= 1, secret=True),
    _achievement("secret-perfect-week", "Perfect Week ⭐", "Complete all scheduled workouts in a week", "⭐",
                 "special", lambda s: s.perfect_weeks >= 1, secret=True),
)

_BY_ID: dict[str, Achievement] = {a.id: a for a in ACHIEVEMENTS}

SECRET_PLACEHOLDER_TITLE = "??? Secret Achievement"
SECRET_PLACEHOLDER_DESCRIPTION = "Keep training to reveal this one."


def _unlocked_ids(unlocked: Iterable[Achievement | str] | Mapping[str, object]) -> set[str]:
    """Normalise an unlocked collection (achievements, ids, or id→timestamp map) to ids."""
    if isinstance(unlocked, Mapping):
        return set(unlocked)
    return {u if isinstance(u, str) else u.id for u in unlocked}


def check_achievements(
    stats: UserStats,
    already_unlocked: Iterable[Achievement | str] | Mapping[str, object] = (),
    now: datetime | None = None,
) -> list[Achievement]:
    """
    Return catalog entries newly satisfied by *stats*.

    Args:
        stats: Current user statistics
        already_unlocked: Achievements (or ids) the user already owns
        now: Unlock timestamp and, unless *stats* carries a
            reference_date, the day date-based conditions are judged on
            (default: current time)

    Returns:
        Copies of the newly unlocked entries, in catalog order, with
        ``unlocked_at`` set.  Empty when nothing new unlocks.
    """
    if now is None:
        now = datetime.now()

    if stats.reference_date is None:
        stats = replace(stats, reference_date=now.date())

    owned = _unlocked_ids(already_unlocked)
    newly_unlocked: list[Achievement] = []

    for achievement in ACHIEVEMENTS:
        if achievement.id in owned:
            continue
        if achievement.condition(stats):
            newly_unlocked.append(replace(achievement, unlocked_at=now))

    return newly_unlocked


def get_achievement(achievement_id: str) -> Achievement:
    """
    Look up a catalog entry.

    Raises:
        ValueError: If the id is not in the catalog
    """
    if achievement_id not in _BY_ID:
        raise ValueError(f"Unknown achievement '{achievement_id}'")
    return _BY_ID[achievement_id]


def restore_unlocked(unlocked: Mapping[str, datetime]) -> list[Achievement]:
    """
    Rebuild unlocked achievements from a persisted id → timestamp map.

    Ids no longer present in the catalog are dropped.  The result follows
    catalog order.
    """
    return [
        replace(a, unlocked_at=unlocked[a.id])
        for a in ACHIEVEMENTS
        if a.id in unlocked
    ]


def is_unlocked(achievement_id: str, unlocked: Collection[Achievement | str] | Mapping[str, object]) -> bool:
    return achievement_id in _unlocked_ids(unlocked)


def achievements_by_category(
    category: str,
    unlocked: Iterable[Achievement] | None = None,
) -> list[Achievement]:
    """Catalog entries (or, when given, unlocked ones) in *category*."""
    source = ACHIEVEMENTS if unlocked is None else unlocked
    return [a for a in source if a.category == category]


def completion_percentage(unlocked: Collection[Achievement | str] | Mapping[str, object]) -> int:
    """Rounded percentage of the catalog the user has unlocked."""
    owned = _unlocked_ids(unlocked) & set(_BY_ID)
    return round(len(owned) / len(ACHIEVEMENTS) * 100)


def display_title(achievement: Achievement, unlocked: bool) -> str:
    """Title as shown to the user; locked secret entries stay hidden."""
    if achievement.secret and not unlocked:
        return SECRET_PLACEHOLDER_TITLE
    return achievement.title


def display_description(achievement: Achievement, unlocked: bool) -> str:
    if achievement.secret and not unlocked:
        return SECRET_PLACEHOLDER_DESCRIPTION
    return achievement.description
