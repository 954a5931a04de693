"""
Aggregate raw history into the snapshots the engines evaluate.

build_user_stats() feeds the achievement catalog; build_challenge_counters()
feeds challenge progress.  Both read only what they are given and the
injected clock.
"""

from datetime import date, datetime, timedelta
from typing import Collection, Iterable, Sequence

from .config import DEFAULT_SCHEDULED_DAYS_PER_WEEK, EARLY_MORNING_BEFORE_HOUR, LATE_NIGHT_FROM_HOUR
from .models import ChallengeCounters, ExerciseEntry, PersonalRecord, UserStats, WeightEntry, WorkoutRecord
from .streaks import calculate_streak, get_this_week_workouts, start_of_week


def _unique_exercise_names(
    workouts: Iterable[WorkoutRecord],
    personal_records: Iterable[PersonalRecord] = (),
) -> set[str]:
    names: set[str] = set()
    for w in workouts:
        names.add(w.name.lower())
        names.update(e.name.lower() for e in w.exercises)
    names.update(pr.exercise_name.lower() for pr in personal_records)
    return names


def count_perfect_weeks(
    workouts: Sequence[WorkoutRecord],
    scheduled_days_per_week: int,
    now: datetime,
) -> int:
    """
    Number of finished weeks (Sunday start) with at least
    *scheduled_days_per_week* distinct workout days.

    The running week is not counted.
    """
    if scheduled_days_per_week <= 0:
        return 0
    current_week = start_of_week(now).date()
    days_per_week: dict[date, set[date]] = {}
    for w in workouts:
        week = start_of_week(w.timestamp).date()
        if week < current_week:
            days_per_week.setdefault(week, set()).add(w.day)
    return sum(1 for days in days_per_week.values() if len(days) >= scheduled_days_per_week)


def build_user_stats(
    workouts: Sequence[WorkoutRecord],
    personal_records: Sequence[PersonalRecord] = (),
    weight_log: Sequence[WeightEntry] = (),
    now: datetime | None = None,
    scheduled_days_per_week: int | None = None,
) -> UserStats:
    """
    Build the statistics snapshot for achievement evaluation.

    Args:
        workouts: Full workout history, any order
        personal_records: Current best per exercise
        weight_log: Bodyweight entries
        now: Reference time (default: current time)
        scheduled_days_per_week: Target training days for a perfect week

    Returns:
        UserStats snapshot
    """
    if now is None:
        now = datetime.now()
    if scheduled_days_per_week is None:
        scheduled_days_per_week = DEFAULT_SCHEDULED_DAYS_PER_WEEK

    streak = calculate_streak(workouts, today=now.date())

    early = 0
    late = 0
    for w in workouts:
        if not w.has_time:
            continue
        hour = w.timestamp.hour
        if hour < EARLY_MORNING_BEFORE_HOUR:
            early += 1
        elif hour >= LATE_NIGHT_FROM_HOUR:
            late += 1

    return UserStats(
        total_workouts=len(workouts),
        this_week_workouts=get_this_week_workouts(workouts, now=now),
        total_prs=len(personal_records),
        current_streak=streak.current_streak,
        max_streak=streak.max_streak,
        weight_logged=len(weight_log) > 0,
        first_workout_date=min((w.day for w in workouts), default=None),
        unique_exercises=len(_unique_exercise_names(workouts, personal_records)),
        total_weight=sum(w.total_weight_kg for w in workouts),
        early_morning_workouts=early,
        late_night_workouts=late,
        perfect_weeks=count_perfect_weeks(workouts, scheduled_days_per_week, now),
        reference_date=now.date(),
    )


def build_challenge_counters(
    workouts: Sequence[WorkoutRecord],
    personal_records: Sequence[PersonalRecord] = (),
    now: datetime | None = None,
    cardio_exercises: Collection[str] = (),
) -> ChallengeCounters:
    """
    Build live challenge counters for today and the running week.

    Cardio minutes are the ``sets × reps`` of entries whose name is in
    *cardio_exercises* (case-insensitive), so ``Treadmill Run:1x20`` logs
    20 minutes.
    """
    if now is None:
        now = datetime.now()
    today = now.date()
    week_start = start_of_week(now)
    cardio = {name.lower() for name in cardio_exercises}

    todays = [w for w in workouts if w.day == today]
    this_week = [w for w in workouts if week_start <= w.timestamp]

    cardio_minutes = sum(
        e.total_reps
        for w in todays
        for e in w.exercises
        if e.name.lower() in cardio
    )

    pr_days = [parse_pr_day(pr) for pr in personal_records]

    return ChallengeCounters(
        workouts_today=len(todays),
        sets_today=sum(w.total_sets for w in todays),
        exercises_today=len({e.name.lower() for w in todays for e in w.exercises}),
        pr_today=any(d == today for d in pr_days),
        cardio_minutes_today=cardio_minutes,
        workouts_this_week=len(this_week),
        sets_this_week=sum(w.total_sets for w in this_week),
        exercises_this_week=len({e.name.lower() for w in this_week for e in w.exercises}),
        streak_days=calculate_streak(workouts, today=today).current_streak,
        prs_this_week=sum(1 for d in pr_days if week_start.date() <= d <= today),
    )


def parse_pr_day(pr: PersonalRecord) -> date:
    return datetime.fromisoformat(pr.date).date()


def detect_new_prs(
    workout: WorkoutRecord,
    personal_records: Iterable[PersonalRecord],
) -> list[PersonalRecord]:
    """
    Personal records set by *workout*.

    An entry sets a record when its weight beats the stored best for that
    exercise, or when the exercise has no stored best and the weight is
    positive.  Bodyweight entries (0 kg) never set records.  When one
    workout repeats an exercise, only its heaviest entry counts.
    """
    best = {pr.exercise_name.lower(): pr.weight_kg for pr in personal_records}
    heaviest: dict[str, ExerciseEntry] = {}
    for entry in workout.exercises:
        key = entry.name.lower()
        if key not in heaviest or entry.weight_kg > heaviest[key].weight_kg:
            heaviest[key] = entry

    new_prs: list[PersonalRecord] = []
    for key, entry in heaviest.items():
        if entry.weight_kg <= 0:
            continue
        if entry.weight_kg > best.get(key, 0.0):
            new_prs.append(PersonalRecord(
                exercise_name=entry.name,
                weight_kg=entry.weight_kg,
                date=workout.day.isoformat(),
            ))
    return new_prs


def merge_prs(
    personal_records: Iterable[PersonalRecord],
    new_prs: Iterable[PersonalRecord],
) -> list[PersonalRecord]:
    """Replace stored records with newer bests; one record per exercise."""
    merged = {pr.exercise_name.lower(): pr for pr in personal_records}
    for pr in new_prs:
        merged[pr.exercise_name.lower()] = pr
    return list(merged.values())
