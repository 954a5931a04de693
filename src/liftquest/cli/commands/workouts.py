"""Workout commands: log-workout, show-history, delete-record."""

import json
from datetime import datetime
from typing import Annotated, Optional

import typer

from ...core.exercises import resolve_exercise
from ...core.models import CustomExercise, ExerciseEntry, WorkoutRecord
from ...core.progress import record_workout
from ...io.serializers import ValidationError, parse_exercises_string, validate_timestamp, workout_to_dict
from .. import views
from ..app import DataDirOption, JsonOption, app, load_snapshot, require_store


def _resolve_entries(entries: list[ExerciseEntry], custom: list[CustomExercise]) -> list[ExerciseEntry]:
    """Canonicalise names against the catalog and tag each entry preset/custom."""
    resolved: list[ExerciseEntry] = []
    for entry in entries:
        exercise = resolve_exercise(entry.name, custom)
        if exercise is None:
            raise ValidationError(
                f"Unknown exercise '{entry.name}'. "
                f"Add it first with: liftquest exercises --add \"{entry.name}\""
            )
        resolved.append(ExerciseEntry(
            name=exercise.name,
            sets=entry.sets,
            reps=entry.reps,
            weight_kg=entry.weight_kg,
            kind=exercise.kind,
        ))
    return resolved


@app.command("log-workout")
def log_workout(
    exercises: Annotated[
        str,
        typer.Option(
            "--exercises", "-e",
            help="Exercises as Name:SETSxREPS[@KG], comma-separated "
                 "(e.g. 'Bench Press:3x8@60, Back Squats:5x5@100')",
        ),
    ],
    name: Annotated[
        str,
        typer.Option("--name", "-n", help="Workout name"),
    ] = "Workout",
    duration: Annotated[
        int,
        typer.Option("--duration", "-m", help="Duration in minutes"),
    ] = 0,
    at: Annotated[
        Optional[str],
        typer.Option("--at", help="When it happened: YYYY-MM-DD or YYYY-MM-DDTHH:MM (default: now)"),
    ] = None,
    notes: Annotated[
        Optional[str],
        typer.Option("--notes", help="Free-text notes"),
    ] = None,
    data_dir: DataDirOption = None,
    json_out: JsonOption = False,
) -> None:
    """
    Log a completed workout and collect XP.

    Awards workout XP, detects personal records, unlocks achievements and
    advances the current challenges.
    """
    store = require_store(data_dir)
    snapshot = load_snapshot(store)

    now = datetime.now()
    performed_at = at if at is not None else now.strftime("%Y-%m-%dT%H:%M")

    try:
        validate_timestamp(performed_at)
        entries = _resolve_entries(parse_exercises_string(exercises), snapshot.custom_exercises)
        workout = WorkoutRecord(
            performed_at=performed_at,
            name=name,
            duration_minutes=duration,
            exercises=entries,
            notes=notes,
        )
    except (ValidationError, ValueError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    outcome = record_workout(
        snapshot.state,
        snapshot.workouts,
        workout,
        snapshot.personal_records,
        snapshot.weight_log,
        now=now,
        cardio_exercises=snapshot.cardio_exercises,
    )

    index = store.append_workout(workout)
    store.save_personal_records(outcome.personal_records)
    store.save_state(outcome.update.state)

    update = outcome.update
    if json_out:
        print(json.dumps({
            "id": index + 1,
            "workout": workout_to_dict(workout),
            "xp": {
                "workout": outcome.workout_xp.total,
                "breakdown": [
                    {"source": item.source, "amount": item.amount}
                    for item in outcome.workout_xp.breakdown
                ],
                "achievements": update.achievement_xp,
                "challenges": update.challenge_xp,
                "total": update.xp_gained,
            },
            "new_prs": [
                {"exercise": pr.exercise_name, "weight_kg": pr.weight_kg}
                for pr in outcome.new_prs
            ],
            "new_achievements": [a.id for a in update.new_achievements],
            "completed_challenges": [c.id for c in update.completed_challenges],
            "level": update.level_up.new_level.level,
            "leveled_up": update.level_up.leveled_up,
            "total_xp": update.state.total_xp,
        }, indent=2))
        return

    views.print_success(
        f"Logged workout #{index + 1}: {workout.name} "
        f"({workout.total_sets} sets, {workout.total_reps} reps)"
    )
    views.print_workout_xp(outcome.workout_xp)
    for pr in outcome.new_prs:
        views.console.print(f"[bold yellow]🏆 New PR:[/bold yellow] {pr.exercise_name} {pr.weight_kg:g} kg")
    views.print_progress_update(update)


@app.command("show-history")
def show_history(
    data_dir: DataDirOption = None,
    limit: Annotated[
        Optional[int],
        typer.Option("--limit", "-l", help="Limit number of workouts to show"),
    ] = None,
    json_out: JsonOption = False,
) -> None:
    """
    Display workout history as a table.
    """
    store = require_store(data_dir)

    try:
        workouts = store.load_workouts()
    except (FileNotFoundError, ValidationError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    start_id = 1
    if limit is not None and limit < len(workouts):
        start_id = len(workouts) - limit + 1
        workouts = workouts[-limit:] if limit > 0 else []

    if json_out:
        output = []
        for i, w in enumerate(workouts, start_id):
            d = workout_to_dict(w)
            d["id"] = i
            d["total_sets"] = w.total_sets
            d["total_reps"] = w.total_reps
            d["total_weight_kg"] = w.total_weight_kg
            output.append(d)
        print(json.dumps(output, indent=2))
        return

    views.print_history(workouts, start_id)


@app.command("delete-record")
def delete_record(
    record_id: Annotated[
        int,
        typer.Argument(help="Workout ID to delete (see # column in show-history)"),
    ],
    data_dir: DataDirOption = None,
    force: Annotated[
        bool,
        typer.Option("--force", "-f", help="Skip confirmation prompt"),
    ] = False,
) -> None:
    """
    Remove a workout by its ID.

    XP already earned is kept.  Use 'show-history' to see workout IDs in
    the # column.
    """
    store = require_store(data_dir)

    try:
        workouts = store.load_workouts()
    except (FileNotFoundError, ValidationError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    if not workouts:
        views.print_error("No workouts in history.")
        raise typer.Exit(1)

    if record_id < 1 or record_id > len(workouts):
        views.print_error(f"Record ID must be between 1 and {len(workouts)}")
        raise typer.Exit(1)

    target = workouts[record_id - 1]
    views.console.print(f"Workout to delete: [bold]{target.performed_at}[/bold] ({target.name})")

    if not force and not views.confirm_action("Delete this workout?"):
        views.print_info("Cancelled.")
        raise typer.Exit(0)

    try:
        store.delete_workout_at(record_id - 1)
    except (IndexError, ValidationError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    views.print_success(f"Deleted workout #{record_id}: {target.performed_at} ({target.name})")
