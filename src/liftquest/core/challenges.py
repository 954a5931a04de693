"""
Daily and weekly challenges.

Lifecycle
---------
Challenges are generated from templates at the start of a period
(3 daily, ending at the next midnight; 2 weekly, ending at the next Monday
00:00), then re-evaluated against live activity counters every time those
counters change:

    active ──progress reaches 100──▶ completed   (completed_at stamped once)
    active ──now passes end_date───▶ expired

Both outcomes are terminal.  A completed challenge keeps its completion
timestamp and 100 % progress on every later update; an expired one is
returned unchanged.

Each template id is bound to one counter field (CHALLENGE_COUNTERS).
Challenges with an unbound id keep their previous ``current`` value.

Randomness and the clock are injectable (``rng``, ``now``) so generation
and expiry are reproducible in tests.
"""

import random
import warnings
from dataclasses import replace
from datetime import datetime, timedelta
from typing import Iterable, Sequence

from .config import (
    DAILY_CHALLENGE_COUNT,
    WEEKLY_CHALLENGE_COUNT,
    XP_ALL_DAILIES_COMPLETE,
    XP_DAILY_CHALLENGE_COMPLETE,
    XP_WEEKLY_CHALLENGE_COMPLETE,
)
from .config_loader import load_progression_config
from .models import Challenge, ChallengeCounters, ChallengeTemplate, ChallengeType

# challenge id → ChallengeCounters field
CHALLENGE_COUNTERS: dict[str, str] = {
    "daily-workout": "workouts_today",
    "daily-sets-15": "sets_today",
    "daily-exercises-5": "exercises_today",
    "daily-pr": "pr_today",
    "daily-cardio": "cardio_minutes_today",
    "weekly-workouts-3": "workouts_this_week",
    "weekly-workouts-5": "workouts_this_week",
    "weekly-sets-50": "sets_this_week",
    "weekly-streak": "streak_days",
    "weekly-variety": "exercises_this_week",
    "weekly-prs-3": "prs_this_week",
}


def template_from_dict(d: dict, default_xp: int = 0) -> ChallengeTemplate:
    """Convert a raw dict (from YAML) to a ChallengeTemplate.

    Raises KeyError for missing fields and ValueError for invalid values.
    """
    return ChallengeTemplate(
        id=str(d["id"]),
        category=d["category"],
        title=str(d["title"]),
        description=str(d.get("description", "")),
        icon=str(d.get("icon", "")),
        target=int(d["target"]),
        points=int(d.get("points", 0)),
        xp=int(d.get("xp", default_xp)),
    )


def _build_templates(raw: list, default_xp: int) -> list[ChallengeTemplate]:
    templates: list[ChallengeTemplate] = []
    for entry in raw or []:
        try:
            templates.append(template_from_dict(entry, default_xp))
        except (KeyError, TypeError, ValueError) as exc:
            warnings.warn(f"liftquest: skipping challenge template {entry!r} ({exc})", stacklevel=2)
    return templates


_challenge_config = load_progression_config().get("challenges", {})

DAILY_CHALLENGE_TEMPLATES: list[ChallengeTemplate] = _build_templates(
    _challenge_config.get("daily", []), XP_DAILY_CHALLENGE_COMPLETE
)
WEEKLY_CHALLENGE_TEMPLATES: list[ChallengeTemplate] = _build_templates(
    _challenge_config.get("weekly", []), XP_WEEKLY_CHALLENGE_COMPLETE
)


# ── period boundaries ────────────────────────────────────────────────────


def next_midnight(now: datetime) -> datetime:
    return datetime.combine(now.date() + timedelta(days=1), datetime.min.time())


def next_monday(now: datetime) -> datetime:
    """Next Monday 00:00; a full week ahead when *now* is already a Monday."""
    days_until_monday = (7 - now.weekday()) % 7 or 7
    return datetime.combine(now.date() + timedelta(days=days_until_monday), datetime.min.time())


# ── generation ───────────────────────────────────────────────────────────


def _instantiate(
    templates: Sequence[ChallengeTemplate],
    count: int,
    challenge_type: ChallengeType,
    start: datetime,
    end: datetime,
    rng: random.Random | None,
) -> list[Challenge]:
    if rng is None:
        rng = random.Random()
    selected = rng.sample(list(templates), k=min(count, len(templates)))
    return [
        Challenge(
            id=t.id,
            type=challenge_type,
            category=t.category,
            title=t.title,
            description=t.description,
            icon=t.icon,
            target=t.target,
            points=t.points,
            xp=t.xp,
            start_date=start,
            end_date=end,
        )
        for t in selected
    ]


def generate_daily_challenges(
    rng: random.Random | None = None,
    now: datetime | None = None,
    templates: Sequence[ChallengeTemplate] | None = None,
) -> list[Challenge]:
    """Pick 3 distinct daily challenges that expire at the next midnight."""
    if now is None:
        now = datetime.now()
    return _instantiate(
        DAILY_CHALLENGE_TEMPLATES if templates is None else templates,
        DAILY_CHALLENGE_COUNT,
        "daily",
        now,
        next_midnight(now),
        rng,
    )


def generate_weekly_challenges(
    rng: random.Random | None = None,
    now: datetime | None = None,
    templates: Sequence[ChallengeTemplate] | None = None,
) -> list[Challenge]:
    """Pick 2 distinct weekly challenges that expire next Monday 00:00."""
    if now is None:
        now = datetime.now()
    return _instantiate(
        WEEKLY_CHALLENGE_TEMPLATES if templates is None else templates,
        WEEKLY_CHALLENGE_COUNT,
        "weekly",
        now,
        next_monday(now),
        rng,
    )


# ── progress ─────────────────────────────────────────────────────────────


def _counter_value(challenge_id: str, counters: ChallengeCounters) -> int | None:
    field_name = CHALLENGE_COUNTERS.get(challenge_id)
    if field_name is None:
        return None
    return int(getattr(counters, field_name))


def _progress(current: int, target: int) -> float:
    return min(current / target * 100, 100.0)


def update_challenge_progress(
    challenges: Iterable[Challenge],
    counters: ChallengeCounters,
    now: datetime | None = None,
) -> list[Challenge]:
    """
    Re-evaluate challenges against live counters.

    Args:
        challenges: Current challenge instances (not mutated)
        counters: Latest activity counters
        now: Evaluation time (default: current time)

    Returns:
        New list of challenges with refreshed current / progress / status
    """
    if now is None:
        now = datetime.now()

    updated: list[Challenge] = []
    for challenge in challenges:
        if challenge.status == "expired":
            updated.append(challenge)
            continue

        value = _counter_value(challenge.id, counters)
        current = challenge.current if value is None else value

        if challenge.status == "completed":
            # Terminal: keep the high-water mark and the first completion time.
            updated.append(replace(
                challenge,
                current=max(current, challenge.current),
                progress=100.0,
            ))
            continue

        progress = _progress(current, challenge.target)
        if progress >= 100:
            status = "completed"
        elif now > challenge.end_date:
            status = "expired"
        else:
            status = "active"

        completed_at = challenge.completed_at
        if status == "completed" and completed_at is None:
            completed_at = now

        updated.append(replace(
            challenge,
            current=current,
            progress=progress,
            status=status,
            completed_at=completed_at,
        ))

    return updated


def should_refresh_challenges(challenges: Iterable[Challenge], now: datetime | None = None) -> bool:
    """True when any challenge window has closed."""
    if now is None:
        now = datetime.now()
    return any(now > c.end_date for c in challenges)


def refresh_challenges(
    challenges: Sequence[Challenge],
    rng: random.Random | None = None,
    now: datetime | None = None,
) -> list[Challenge]:
    """
    Replace every batch whose window has closed (or is missing).

    Daily and weekly batches are handled independently: a closed daily
    batch is regenerated while a running weekly batch is kept, and vice
    versa.
    """
    if now is None:
        now = datetime.now()

    result: list[Challenge] = []
    for challenge_type, generate in (
        ("daily", generate_daily_challenges),
        ("weekly", generate_weekly_challenges),
    ):
        batch = [c for c in challenges if c.type == challenge_type]
        if not batch or should_refresh_challenges(batch, now):
            batch = generate(rng=rng, now=now)
        result.extend(batch)
    return result


def redraw_challenges(
    challenges: Sequence[Challenge],
    counters: ChallengeCounters,
    rng: random.Random | None = None,
    now: datetime | None = None,
) -> list[Challenge]:
    """
    Swap the unfinished challenges of the running batches for new ones.

    Completed challenges stay on the board, so their XP (and the
    all-dailies bonus) is never paid twice.  Replacements are drawn only
    from templates that are not already on the board and whose counter
    has not yet reached the target, so a redraw never completes anything
    on its own.  When too few templates qualify, unfinished challenges
    stay on the board to fill the gap.  Closed batches are regenerated
    first, as in refresh_challenges().
    """
    if now is None:
        now = datetime.now()

    current = refresh_challenges(challenges, rng=rng, now=now)

    result: list[Challenge] = []
    for challenge_type, templates, count, end in (
        ("daily", DAILY_CHALLENGE_TEMPLATES, DAILY_CHALLENGE_COUNT, next_midnight(now)),
        ("weekly", WEEKLY_CHALLENGE_TEMPLATES, WEEKLY_CHALLENGE_COUNT, next_monday(now)),
    ):
        kept = [c for c in current if c.type == challenge_type and c.status == "completed"]
        taken = {c.id for c in current if c.type == challenge_type}
        candidates = [
            t for t in templates
            if t.id not in taken and (_counter_value(t.id, counters) or 0) < t.target
        ]
        unfinished = [c for c in current if c.type == challenge_type and c.status != "completed"]
        drawn = _instantiate(candidates, count - len(kept), challenge_type, now, end, rng)
        shortfall = max(count - len(kept) - len(drawn), 0)
        result.extend([*kept, *drawn, *unfinished[:shortfall]])
    return result


# ── aggregations ─────────────────────────────────────────────────────────


def get_completed_count(challenges: Iterable[Challenge]) -> dict[str, int]:
    counts = {"daily": 0, "weekly": 0}
    for c in challenges:
        if c.status == "completed":
            counts[c.type] += 1
    return counts


def calculate_challenge_points(challenges: Iterable[Challenge]) -> int:
    return sum(c.points for c in challenges if c.status == "completed")


def newly_completed(before: Iterable[Challenge], after: Iterable[Challenge]) -> list[Challenge]:
    """Challenges that are completed in *after* but were not in *before*."""
    done_before = {(c.type, c.id) for c in before if c.status == "completed"}
    return [c for c in after if c.status == "completed" and (c.type, c.id) not in done_before]


def calculate_completion_xp(before: Sequence[Challenge], after: Sequence[Challenge]) -> int:
    """
    XP earned by an update: each newly completed challenge's XP, plus the
    all-dailies bonus the first time every daily challenge is completed.
    """
    xp = sum(c.xp for c in newly_completed(before, after))

    dailies_after = [c for c in after if c.type == "daily"]
    dailies_before = [c for c in before if c.type == "daily"]
    all_done_after = bool(dailies_after) and all(c.status == "completed" for c in dailies_after)
    all_done_before = bool(dailies_before) and all(c.status == "completed" for c in dailies_before)
    if all_done_after and not all_done_before:
        xp += XP_ALL_DAILIES_COMPLETE

    return xp


def get_time_remaining(end_date: datetime, now: datetime | None = None) -> str:
    """Human-readable time left: ``"Expired"``, ``"5h 12m"`` or ``"2d 3h"``."""
    if now is None:
        now = datetime.now()
    remaining = end_date - now
    if remaining.total_seconds() <= 0:
        return "Expired"

    total_minutes = int(remaining.total_seconds() // 60)
    hours, minutes = divmod(total_minutes, 60)
    if hours < 24:
        return f"{hours}h {minutes}m"
    days, hours = divmod(hours, 24)
    return f"{days}d {hours}h"
