"""
Progress evaluation: run every engine after a user event.

A user event (logging a workout, logging bodyweight, adding an exercise,
opening the challenge board) changes the raw history.  evaluate_progress()
re-derives statistics and counters from that history, unlocks new
achievements, advances challenges, and folds all XP earned into the
persisted ProgressState.  record_workout() adds the workout XP award and
PR detection on top.

Nothing here touches storage; the CLI loads inputs and saves the result.
"""

import random
from dataclasses import dataclass, field
from datetime import datetime
from typing import Sequence

from .achievements import check_achievements
from .challenges import calculate_completion_xp, newly_completed, refresh_challenges, update_challenge_progress
from .config import STREAK_BONUS_MIN_DAYS
from .levels import add_xp, calculate_level_from_xp, calculate_workout_xp, get_achievement_xp, rewards_between
from .models import (
    Achievement,
    Challenge,
    LevelReward,
    LevelUpResult,
    PersonalRecord,
    ProgressState,
    WeightEntry,
    WorkoutRecord,
    WorkoutXP,
)
from .rarity import get_achievement_rarity
from .stats import build_challenge_counters, build_user_stats, detect_new_prs, merge_prs
from .streaks import calculate_streak


@dataclass
class ProgressUpdate:
    """Result of one evaluation pass."""

    state: ProgressState
    level_up: LevelUpResult
    new_achievements: list[Achievement] = field(default_factory=list)
    completed_challenges: list[Challenge] = field(default_factory=list)
    achievement_xp: int = 0
    challenge_xp: int = 0
    bonus_xp: int = 0
    rewards: list[LevelReward] = field(default_factory=list)

    @property
    def xp_gained(self) -> int:
        return self.bonus_xp + self.achievement_xp + self.challenge_xp


@dataclass
class WorkoutOutcome:
    """Everything that happened because a workout was logged."""

    workout_xp: WorkoutXP
    new_prs: list[PersonalRecord]
    personal_records: list[PersonalRecord]
    update: ProgressUpdate


def evaluate_progress(
    state: ProgressState,
    workouts: Sequence[WorkoutRecord],
    personal_records: Sequence[PersonalRecord] = (),
    weight_log: Sequence[WeightEntry] = (),
    bonus_xp: int = 0,
    now: datetime | None = None,
    rng: random.Random | None = None,
    cardio_exercises: Sequence[str] | set[str] = (),
) -> ProgressUpdate:
    """
    Re-evaluate achievements and challenges and award XP.

    Args:
        state: Persisted progress before the event
        workouts: Full workout history after the event
        personal_records: Personal records after the event
        weight_log: Bodyweight log after the event
        bonus_xp: XP already earned by the event itself (e.g. workout XP)
        now: Evaluation time (default: current time)
        rng: Random source for challenge generation
        cardio_exercises: Exercise names counted as cardio minutes

    Returns:
        ProgressUpdate with the new state (input state is not mutated)
    """
    if now is None:
        now = datetime.now()

    stats = build_user_stats(workouts, personal_records, weight_log, now=now)
    new_achievements = check_achievements(stats, state.unlocked, now=now)
    achievement_xp = sum(
        get_achievement_xp(get_achievement_rarity(a.id).rarity) for a in new_achievements
    )

    challenges = refresh_challenges(state.challenges, rng=rng, now=now)
    counters = build_challenge_counters(
        workouts, personal_records, now=now, cardio_exercises=cardio_exercises
    )
    updated_challenges = update_challenge_progress(challenges, counters, now=now)
    challenge_xp = calculate_completion_xp(challenges, updated_challenges)

    old_level = calculate_level_from_xp(state.total_xp).level
    level_up = add_xp(state.total_xp, bonus_xp + achievement_xp + challenge_xp)

    unlocked = dict(state.unlocked)
    for a in new_achievements:
        unlocked[a.id] = a.unlocked_at or now

    return ProgressUpdate(
        state=ProgressState(
            total_xp=level_up.new_level.total_xp,
            unlocked=unlocked,
            challenges=updated_challenges,
        ),
        level_up=level_up,
        new_achievements=new_achievements,
        completed_challenges=newly_completed(challenges, updated_challenges),
        achievement_xp=achievement_xp,
        challenge_xp=challenge_xp,
        bonus_xp=bonus_xp,
        rewards=rewards_between(old_level, level_up.new_level.level),
    )


def record_workout(
    state: ProgressState,
    history: Sequence[WorkoutRecord],
    workout: WorkoutRecord,
    personal_records: Sequence[PersonalRecord] = (),
    weight_log: Sequence[WeightEntry] = (),
    now: datetime | None = None,
    rng: random.Random | None = None,
    cardio_exercises: Sequence[str] | set[str] = (),
) -> WorkoutOutcome:
    """
    Score a newly logged workout and run a full evaluation pass.

    Args:
        state: Persisted progress before the workout
        history: Workouts logged before this one
        workout: The new workout
        personal_records: Stored personal records before the workout

    Returns:
        WorkoutOutcome with the XP breakdown, new PRs and progress update
    """
    if now is None:
        now = datetime.now()

    new_prs = detect_new_prs(workout, personal_records)
    records_after = merge_prs(personal_records, new_prs)

    is_first_today = not any(w.day == workout.day for w in history)
    history_after = [*history, workout]
    streak = calculate_streak(history_after, today=now.date())

    workout_xp = calculate_workout_xp(
        sets=workout.total_sets,
        reps=workout.total_reps,
        is_first_today=is_first_today,
        had_pr=bool(new_prs),
        streak_bonus=streak.current_streak >= STREAK_BONUS_MIN_DAYS,
    )

    update = evaluate_progress(
        state,
        history_after,
        records_after,
        weight_log,
        bonus_xp=workout_xp.total,
        now=now,
        rng=rng,
        cardio_exercises=cardio_exercises,
    )

    return WorkoutOutcome(
        workout_xp=workout_xp,
        new_prs=new_prs,
        personal_records=records_after,
        update=update,
    )
