"""Profile commands: init and log-weight."""

import json
from datetime import datetime
from typing import Annotated, Optional

import typer

from ...core.models import WeightEntry
from ...core.progress import evaluate_progress
from ...io.serializers import ValidationError, validate_date
from ...io.store import FileProgressStore
from .. import views
from ..app import DataDirOption, JsonOption, app, get_store, load_snapshot, require_store


@app.command()
def init(
    data_dir: DataDirOption = None,
) -> None:
    """
    Create the data directory with an empty workout log.

    Existing data is left untouched.
    """
    store = get_store(data_dir)

    if store.exists():
        views.print_info("liftquest data already initialised; nothing to do.")
        return

    try:
        store.init()
    except OSError as e:
        views.print_error(f"Could not create data directory: {e}")
        raise typer.Exit(1)

    location = store.data_dir if isinstance(store, FileProgressStore) else "memory"
    views.print_success(f"Initialised liftquest data in {location}")
    views.print_info("Log your first workout with: liftquest log-workout --exercises 'Back Squats:3x5@60'")


@app.command("log-weight")
def log_weight(
    weight_kg: Annotated[
        float,
        typer.Argument(help="Bodyweight in kg"),
    ],
    body_fat: Annotated[
        Optional[float],
        typer.Option("--body-fat", "-b", help="Body fat percentage"),
    ] = None,
    date: Annotated[
        Optional[str],
        typer.Option("--date", "-d", help="Date (YYYY-MM-DD, default: today)"),
    ] = None,
    data_dir: DataDirOption = None,
    json_out: JsonOption = False,
) -> None:
    """
    Log bodyweight (and optionally body fat) for a day.

    A second entry for the same date replaces the first.
    """
    store = require_store(data_dir)
    snapshot = load_snapshot(store)

    now = datetime.now()
    try:
        entry_date = validate_date(date) if date is not None else now.strftime("%Y-%m-%d")
        entry = WeightEntry(date=entry_date, weight_kg=weight_kg, body_fat=body_fat)
    except (ValidationError, ValueError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    store.append_weight(entry)
    weight_log = [e for e in snapshot.weight_log if e.date != entry.date] + [entry]

    update = evaluate_progress(
        snapshot.state,
        snapshot.workouts,
        snapshot.personal_records,
        weight_log,
        now=now,
        cardio_exercises=snapshot.cardio_exercises,
    )
    store.save_state(update.state)

    if json_out:
        print(json.dumps({
            "date": entry.date,
            "weight_kg": entry.weight_kg,
            "body_fat": entry.body_fat,
            "new_achievements": [a.id for a in update.new_achievements],
            "total_xp": update.state.total_xp,
        }, indent=2))
        return

    fat = f", {entry.body_fat:g}% body fat" if entry.body_fat is not None else ""
    views.print_success(f"Logged {entry.weight_kg:g} kg{fat} for {entry.date}")
    views.print_progress_update(update)
