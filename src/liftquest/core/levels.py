"""
XP and leveling math.

Leveling Curve
--------------
Clearing level L costs ``floor(100 * L^1.5)`` XP:

    Level 1:     100 XP
    Level 10:  3,162 XP
    Level 50: 35,355 XP
    Level 100: 100,000 XP

Total XP is converted back to a level by subtracting successive level
costs until the remainder no longer covers the next one.

Workout XP
----------
    Workout complete       100
    First workout today    +25
    Streak bonus           +50
    Per set                  5
    Per rep                  1
    Personal record       +150

The time-of-day multiplier (get_xp_multiplier) is never applied
automatically; callers decide when to use apply_multiplier().

Titles and rewards are read from progression.yaml at import time.
"""

import math
import warnings
from datetime import datetime

from .config import (
    ACHIEVEMENT_XP,
    EARLY_BIRD_HOURS,
    EARLY_BIRD_MULTIPLIER,
    NIGHT_OWL_HOURS,
    NIGHT_OWL_MULTIPLIER,
    WEEKEND_MULTIPLIER,
    XP_CURVE_BASE,
    XP_CURVE_EXPONENT,
    XP_FIRST_WORKOUT_OF_DAY,
    XP_PER_REP,
    XP_PER_SET,
    XP_PERSONAL_RECORD,
    XP_WORKOUT_COMPLETE,
    XP_WORKOUT_STREAK,
)
from .config_loader import load_progression_config
from .models import LevelReward, LevelUpResult, UserLevel, WorkoutXP, XPBreakdownItem

_DEFAULT_TITLES: dict[int, str] = {1: "🥚 Newbie"}


def _build_titles(raw: dict) -> list[tuple[int, str]]:
    """Return (threshold, title) pairs sorted by threshold, highest first."""
    titles = dict(_DEFAULT_TITLES)
    for lvl, title in (raw or {}).items():
        try:
            titles[int(lvl)] = str(title)
        except (TypeError, ValueError):
            warnings.warn(f"liftquest: skipping level title for {lvl!r}", stacklevel=2)
    return sorted(titles.items(), key=lambda item: item[0], reverse=True)


def _build_rewards(raw: list) -> list[LevelReward]:
    rewards: list[LevelReward] = []
    for entry in raw or []:
        try:
            rewards.append(
                LevelReward(
                    level=int(entry["level"]),
                    unlocks=tuple(str(u) for u in entry.get("unlocks", [])),
                    points=int(entry.get("points", 0)),
                    title=entry.get("title"),
                )
            )
        except (KeyError, TypeError, ValueError) as exc:
            warnings.warn(f"liftquest: skipping level reward {entry!r} ({exc})", stacklevel=2)
    rewards.sort(key=lambda r: r.level)
    return rewards


_config = load_progression_config()

# Ordered descending so the first match wins.
LEVEL_TITLES: list[tuple[int, str]] = _build_titles(_config.get("level_titles", {}))

# Ordered ascending by level threshold.
LEVEL_REWARDS: list[LevelReward] = _build_rewards(_config.get("level_rewards", []))


# ── level math ───────────────────────────────────────────────────────────


def calculate_xp_for_level(level: int) -> int:
    """XP needed to clear *level* and reach ``level + 1``."""
    return math.floor(XP_CURVE_BASE * math.pow(level, XP_CURVE_EXPONENT))


def calculate_level_from_xp(total_xp: int) -> UserLevel:
    """
    Convert lifetime XP into a level view-model.

    ``calculate_level_from_xp(0)`` is level 1 with zero progress.
    """
    level = 1
    xp_used = 0

    while xp_used + calculate_xp_for_level(level) <= total_xp:
        xp_used += calculate_xp_for_level(level)
        level += 1

    current_xp = total_xp - xp_used
    xp_for_next_level = calculate_xp_for_level(level)

    return UserLevel(
        level=level,
        current_xp=current_xp,
        xp_for_next_level=xp_for_next_level,
        total_xp=total_xp,
        progress=current_xp / xp_for_next_level * 100,
    )


def add_xp(current_total_xp: int, xp_to_add: int) -> LevelUpResult:
    """Add XP and report whether (and by how many levels) the player leveled up."""
    old_level = calculate_level_from_xp(current_total_xp)
    new_level = calculate_level_from_xp(current_total_xp + xp_to_add)
    gained = new_level.level - old_level.level

    return LevelUpResult(
        new_level=new_level,
        leveled_up=gained > 0,
        levels_gained=max(gained, 0),
    )


# ── titles & rewards ─────────────────────────────────────────────────────


def get_level_title(level: int) -> str:
    """Return the title for *level*."""
    for threshold, title in LEVEL_TITLES:
        if level >= threshold:
            return title
    return LEVEL_TITLES[-1][1]


def get_level_reward(level: int) -> LevelReward | None:
    """Reward granted exactly at *level*, if any."""
    for reward in LEVEL_REWARDS:
        if reward.level == level:
            return reward
    return None


def get_current_reward(level: int) -> LevelReward | None:
    """Most recent reward threshold at or below *level*."""
    current = None
    for reward in LEVEL_REWARDS:
        if reward.level <= level:
            current = reward
    return current


def get_next_reward(current_level: int) -> LevelReward | None:
    """First reward strictly above *current_level*."""
    for reward in LEVEL_REWARDS:
        if reward.level > current_level:
            return reward
    return None


def rewards_between(old_level: int, new_level: int) -> list[LevelReward]:
    """Rewards crossed when moving from *old_level* to *new_level* (exclusive, inclusive)."""
    return [r for r in LEVEL_REWARDS if old_level < r.level <= new_level]


# ── XP awards ────────────────────────────────────────────────────────────


def calculate_workout_xp(
    *,
    sets: int,
    reps: int,
    is_first_today: bool = False,
    had_pr: bool = False,
    streak_bonus: bool = False,
) -> WorkoutXP:
    """
    Itemised XP for a completed workout.

    Each bonus appears at most once in the breakdown; volume XP is always
    listed (possibly as 0 for an empty workout).
    """
    breakdown: list[XPBreakdownItem] = [
        XPBreakdownItem("Workout Complete", XP_WORKOUT_COMPLETE),
    ]

    if is_first_today:
        breakdown.append(XPBreakdownItem("First Workout Today", XP_FIRST_WORKOUT_OF_DAY))

    if streak_bonus:
        breakdown.append(XPBreakdownItem("Streak Bonus", XP_WORKOUT_STREAK))

    breakdown.append(XPBreakdownItem(f"{sets} Sets", sets * XP_PER_SET))
    breakdown.append(XPBreakdownItem(f"{reps} Reps", reps * XP_PER_REP))

    if had_pr:
        breakdown.append(XPBreakdownItem("Personal Record!", XP_PERSONAL_RECORD))

    return WorkoutXP(
        total=sum(item.amount for item in breakdown),
        breakdown=tuple(breakdown),
    )


def get_achievement_xp(rarity: str) -> int:
    """XP granted for unlocking an achievement of the given rarity."""
    if rarity not in ACHIEVEMENT_XP:
        raise ValueError(f"Unknown rarity '{rarity}'. Valid: {', '.join(ACHIEVEMENT_XP)}")
    return ACHIEVEMENT_XP[rarity]


def get_xp_multiplier(now: datetime | None = None) -> float:
    """
    Time-based XP multiplier.

    Weekend (Sat/Sun) 1.5×; early bird (05–08) and night owl (21–23) 1.2×;
    otherwise 1.0×.
    """
    if now is None:
        now = datetime.now()

    # Saturday = 5, Sunday = 6
    if now.weekday() >= 5:
        return WEEKEND_MULTIPLIER

    if EARLY_BIRD_HOURS[0] <= now.hour < EARLY_BIRD_HOURS[1]:
        return EARLY_BIRD_MULTIPLIER

    if NIGHT_OWL_HOURS[0] <= now.hour < NIGHT_OWL_HOURS[1]:
        return NIGHT_OWL_MULTIPLIER

    return 1.0


def apply_multiplier(xp: int, multiplier: float) -> int:
    """Scale an XP amount, rounding down."""
    return math.floor(xp * multiplier)
