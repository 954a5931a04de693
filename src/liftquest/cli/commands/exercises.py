"""Exercise catalog command: list presets and custom exercises, add custom ones."""

import json
from datetime import datetime
from typing import Annotated, Optional

import typer

from ...core.config import XP_EXERCISE_ADDED
from ...core.exercises import list_presets
from ...core.models import CustomExercise
from ...core.progress import evaluate_progress
from ...io.serializers import custom_exercise_to_dict
from .. import views
from ..app import DataDirOption, JsonOption, app, load_snapshot, require_store


@app.command()
def exercises(
    add: Annotated[
        Optional[str],
        typer.Option("--add", help="Create a custom exercise with this name"),
    ] = None,
    muscle: Annotated[
        Optional[str],
        typer.Option("--muscle", help="Primary muscle (filter when listing, value when adding)"),
    ] = None,
    equipment: Annotated[
        str,
        typer.Option("--equipment", help="Equipment for --add"),
    ] = "other",
    data_dir: DataDirOption = None,
    json_out: JsonOption = False,
) -> None:
    """
    List exercises, or add a custom one with --add.

    Custom exercises shadow presets with the same name.
    """
    store = require_store(data_dir)
    snapshot = load_snapshot(store)

    if add is not None:
        name = add.strip()
        if not name:
            views.print_error("Exercise name must be non-empty")
            raise typer.Exit(1)

        now = datetime.now()
        exercise = CustomExercise(
            name=name,
            primary_muscle=(muscle or "other").lower(),
            equipment=equipment.lower(),
            created_at=now.strftime("%Y-%m-%d"),
        )
        try:
            store.add_custom_exercise(exercise)
        except ValueError as e:
            views.print_error(str(e))
            raise typer.Exit(1)

        update = evaluate_progress(
            snapshot.state,
            snapshot.workouts,
            snapshot.personal_records,
            snapshot.weight_log,
            bonus_xp=XP_EXERCISE_ADDED,
            now=now,
            cardio_exercises=snapshot.cardio_exercises,
        )
        store.save_state(update.state)

        if json_out:
            print(json.dumps({
                "added": custom_exercise_to_dict(exercise),
                "xp": update.xp_gained,
                "total_xp": update.state.total_xp,
            }, indent=2, ensure_ascii=False))
            return

        views.print_success(f"Added custom exercise '{exercise.name}' (+{XP_EXERCISE_ADDED} XP)")
        views.print_progress_update(update)
        return

    presets = list_presets(muscle)
    custom = [
        c for c in snapshot.custom_exercises
        if muscle is None or c.primary_muscle == muscle.lower()
    ]

    if json_out:
        print(json.dumps({
            "custom": [custom_exercise_to_dict(c) for c in custom],
            "presets": [
                {
                    "name": p.name,
                    "primary_muscle": p.primary_muscle,
                    "equipment": p.equipment,
                    "difficulty": p.difficulty,
                }
                for p in presets
            ],
        }, indent=2, ensure_ascii=False))
        return

    views.print_exercises(presets, custom)
