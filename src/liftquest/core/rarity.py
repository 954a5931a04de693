"""
Achievement rarity and tier scoring.

Every catalog achievement has a rarity (common / rare / epic / legendary)
worth a fixed number of points, plus an approximate unlock rate (the share
of users expected to own it).  Unlocked points roll up into a tier:

    bronze      0 pts
    silver    100 pts
    gold      500 pts
    platinum 1500 pts

Ids missing from the rarity table are treated as common with a 100 %
unlock rate.
"""

from dataclasses import dataclass
from typing import Iterable, Literal

from .achievements import ACHIEVEMENTS
from .config import RARITY_ORDER, RARITY_POINTS, TIER_THRESHOLDS
from .models import Achievement

Rarity = Literal["common", "rare", "epic", "legendary"]
Tier = Literal["bronze", "silver", "gold", "platinum"]

RARITIES: tuple[str, ...] = ("common", "rare", "epic", "legendary")
TIERS: tuple[str, ...] = ("bronze", "silver", "gold", "platinum")

TIER_BADGES: dict[str, tuple[str, str]] = {
    "bronze": ("Bronze", "🥉"),
    "silver": ("Silver", "🥈"),
    "gold": ("Gold", "🥇"),
    "platinum": ("Platinum", "💎"),
}

# achievement id → (rarity, unlock rate %)
ACHIEVEMENT_RARITY: dict[str, tuple[Rarity, int]] = {
    "first-workout": ("common", 100),
    "first-pr": ("common", 95),
    "progress-tracker": ("common", 90),
    "5-workouts": ("common", 85),
    "3-day-streak": ("common", 80),
    "10-workouts": ("rare", 70),
    "consistent-week": ("rare", 65),
    "7-day-streak": ("rare", 60),
    "5-prs": ("rare", 55),
    "25-workouts": ("rare", 50),
    "10-prs": ("rare", 40),
    "secret-night-owl": ("rare", 18),
    "secret-early-bird": ("rare", 15),
    "power-week": ("epic", 35),
    "14-day-streak": ("epic", 30),
    "10-exercises": ("epic", 28),
    "50-workouts": ("epic", 25),
    "one-month": ("epic", 22),
    "25-prs": ("epic", 20),
    "25-exercises": ("legendary", 12),
    "100-workouts": ("legendary", 10),
    "30-day-streak": ("legendary", 8),
    "secret-perfect-week": ("legendary", 5),
}


@dataclass(frozen=True)
class RarityInfo:
    rarity: Rarity
    points: int
    unlock_rate: int


@dataclass(frozen=True)
class TierProgress:
    """Current tier and progress (0-100) towards the next one."""

    current_tier: Tier
    next_tier: Tier | None
    current_points: int
    points_for_next_tier: int
    progress: int


@dataclass(frozen=True)
class RarityCompletion:
    unlocked: int
    total: int
    percentage: int


def get_achievement_rarity(achievement_id: str) -> RarityInfo:
    """Rarity, points and unlock rate for an achievement id."""
    rarity, unlock_rate = ACHIEVEMENT_RARITY.get(achievement_id, ("common", 100))
    return RarityInfo(rarity=rarity, points=RARITY_POINTS[rarity], unlock_rate=unlock_rate)


def calculate_total_points(achievements: Iterable[Achievement]) -> int:
    return sum(get_achievement_rarity(a.id).points for a in achievements)


def calculate_tier_progress(total_points: int) -> TierProgress:
    """
    Resolve the tier for *total_points*.

    Platinum has no next tier and always reports 100 % progress.
    """
    current_tier: Tier = "bronze"
    for tier in TIERS:
        if total_points >= TIER_THRESHOLDS[tier]:
            current_tier = tier  # type: ignore[assignment]

    idx = TIERS.index(current_tier)
    if idx == len(TIERS) - 1:
        return TierProgress(
            current_tier=current_tier,
            next_tier=None,
            current_points=total_points,
            points_for_next_tier=TIER_THRESHOLDS[current_tier],
            progress=100,
        )

    next_tier: Tier = TIERS[idx + 1]  # type: ignore[assignment]
    floor = TIER_THRESHOLDS[current_tier]
    ceiling = TIER_THRESHOLDS[next_tier]
    return TierProgress(
        current_tier=current_tier,
        next_tier=next_tier,
        current_points=total_points,
        points_for_next_tier=ceiling,
        progress=round((total_points - floor) / (ceiling - floor) * 100),
    )


def get_points_until_next_tier(current_points: int) -> tuple[int, Tier | None]:
    """Return ``(points_needed, next_tier)``; ``(0, None)`` at platinum."""
    tp = calculate_tier_progress(current_points)
    if tp.next_tier is None:
        return 0, None
    return tp.points_for_next_tier - current_points, tp.next_tier


def get_rarity_distribution(achievements: Iterable[Achievement]) -> dict[str, int]:
    distribution = {r: 0 for r in RARITIES}
    for a in achievements:
        distribution[get_achievement_rarity(a.id).rarity] += 1
    return distribution


def get_rarest_achievement(achievements: Iterable[Achievement]) -> Achievement | None:
    """Achievement with the lowest unlock rate; the first one wins ties."""
    rarest: Achievement | None = None
    lowest = 101
    for a in achievements:
        rate = get_achievement_rarity(a.id).unlock_rate
        if rate < lowest:
            lowest = rate
            rarest = a
    return rarest


def sort_by_rarity(achievements: Iterable[Achievement]) -> list[Achievement]:
    """Legendary first; within a rarity, most recently unlocked first."""

    def _key(a: Achievement) -> tuple[int, float]:
        unlocked_ts = a.unlocked_at.timestamp() if a.unlocked_at is not None else 0.0
        return RARITY_ORDER[get_achievement_rarity(a.id).rarity], -unlocked_ts

    return sorted(achievements, key=_key)


def get_achievements_by_rarity(achievements: Iterable[Achievement], rarity: str) -> list[Achievement]:
    return [a for a in achievements if get_achievement_rarity(a.id).rarity == rarity]


def calculate_rarity_completion(achievements: Iterable[Achievement]) -> dict[str, RarityCompletion]:
    """Unlocked / total / percentage per rarity, over the whole catalog."""
    totals = {r: 0 for r in RARITIES}
    for a in ACHIEVEMENTS:
        totals[get_achievement_rarity(a.id).rarity] += 1

    distribution = get_rarity_distribution(achievements)

    return {
        r: RarityCompletion(
            unlocked=distribution[r],
            total=totals[r],
            percentage=round(distribution[r] / totals[r] * 100) if totals[r] else 0,
        )
        for r in RARITIES
    }


def get_next_legendary(achievements: Iterable[Achievement]) -> Achievement | None:
    """First legendary catalog entry (catalog order) not yet unlocked."""
    owned = {a.id for a in achievements}
    for a in ACHIEVEMENTS:
        if a.id not in owned and get_achievement_rarity(a.id).rarity == "legendary":
            return a
    return None
