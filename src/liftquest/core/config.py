"""
Configuration constants for the progression model.

All adjustable parameters are centralized here for easy tuning.
Catalog-style data (level titles, level rewards, challenge templates,
preset exercises) lives in the bundled YAML files under ``liftquest/data``
and can be overridden per user; see core/config_loader.py.
"""

from typing import Final

# =============================================================================
# LEVEL CURVE
# =============================================================================

XP_CURVE_BASE: Final[int] = 100  # XP needed to clear level 1
XP_CURVE_EXPONENT: Final[float] = 1.5  # xp(level) = floor(base * level^exp)

# =============================================================================
# XP REWARDS
# =============================================================================

XP_WORKOUT_COMPLETE: Final[int] = 100
XP_WORKOUT_STREAK: Final[int] = 50
XP_FIRST_WORKOUT_OF_DAY: Final[int] = 25
XP_PER_SET: Final[int] = 5
XP_PER_REP: Final[int] = 1
XP_PERSONAL_RECORD: Final[int] = 150

XP_DAILY_CHALLENGE_COMPLETE: Final[int] = 50
XP_WEEKLY_CHALLENGE_COMPLETE: Final[int] = 200
XP_ALL_DAILIES_COMPLETE: Final[int] = 100  # bonus on top of the per-challenge XP

XP_EXERCISE_ADDED: Final[int] = 10

ACHIEVEMENT_XP: Final[dict[str, int]] = {
    "common": 50,
    "rare": 150,
    "epic": 300,
    "legendary": 1000,
}

# Streak length (days, including today) from which the streak bonus applies
STREAK_BONUS_MIN_DAYS: Final[int] = 2

# =============================================================================
# XP MULTIPLIER WINDOWS (local wall-clock time)
# =============================================================================

WEEKEND_MULTIPLIER: Final[float] = 1.5
EARLY_BIRD_MULTIPLIER: Final[float] = 1.2
EARLY_BIRD_HOURS: Final[tuple[int, int]] = (5, 8)  # [start, end)
NIGHT_OWL_MULTIPLIER: Final[float] = 1.2
NIGHT_OWL_HOURS: Final[tuple[int, int]] = (21, 23)  # [start, end)

# =============================================================================
# TIME-OF-DAY ACHIEVEMENT COUNTERS
# =============================================================================

EARLY_MORNING_BEFORE_HOUR: Final[int] = 6  # workout started before 06:00
LATE_NIGHT_FROM_HOUR: Final[int] = 22  # workout started at/after 22:00

# =============================================================================
# ACHIEVEMENT RARITY & TIERS
# =============================================================================

RARITY_POINTS: Final[dict[str, int]] = {
    "common": 5,
    "rare": 15,
    "epic": 30,
    "legendary": 100,
}

RARITY_ORDER: Final[dict[str, int]] = {
    "legendary": 0,
    "epic": 1,
    "rare": 2,
    "common": 3,
}

TIER_THRESHOLDS: Final[dict[str, int]] = {
    "bronze": 0,
    "silver": 100,
    "gold": 500,
    "platinum": 1500,
}

# =============================================================================
# CHALLENGES
# =============================================================================

DAILY_CHALLENGE_COUNT: Final[int] = 3
WEEKLY_CHALLENGE_COUNT: Final[int] = 2

# =============================================================================
# STATS AGGREGATION
# =============================================================================

DEFAULT_SCHEDULED_DAYS_PER_WEEK: Final[int] = 3  # workout days that make a "perfect week"
ONE_MONTH_DAYS: Final[int] = 30
