"""Shared Typer app object, shared option types, and store utilities."""

from dataclasses import dataclass
from pathlib import Path
from typing import Annotated, Optional

import typer

from ..core.exercises import cardio_exercise_names
from ..core.models import CustomExercise, PersonalRecord, ProgressState, WeightEntry, WorkoutRecord
from ..io.serializers import ValidationError
from ..io.store import ProgressRepository, open_store
from . import views

# Shared --data-dir option type used across all commands
DataDirOption = Annotated[
    Optional[Path],
    typer.Option("--data-dir", "-p", help="Data directory (default: ~/.liftquest)"),
]

# Shared --json option type used by every reporting command
JsonOption = Annotated[
    bool,
    typer.Option("--json", "-j", help="Output as JSON for machine processing"),
]

app = typer.Typer(
    name="liftquest",
    help="Gamified workout log: XP, levels, achievements, streaks and challenges.",
    no_args_is_help=False,
    invoke_without_command=True,
)


@dataclass
class StoreSnapshot:
    """Everything loaded from a store for one command run."""

    workouts: list[WorkoutRecord]
    personal_records: list[PersonalRecord]
    weight_log: list[WeightEntry]
    state: ProgressState
    custom_exercises: list[CustomExercise]

    @property
    def cardio_exercises(self) -> set[str]:
        return cardio_exercise_names(self.custom_exercises)


def get_store(data_dir: Path | None) -> ProgressRepository:
    """Get the progress store at *data_dir* or the default location."""
    return open_store(data_dir)


def require_store(data_dir: Path | None) -> ProgressRepository:
    """Return an initialised store or exit with an error."""
    store = get_store(data_dir)
    if not store.exists():
        views.print_error("No liftquest data found.")
        views.print_info("Run 'liftquest init' first.")
        raise typer.Exit(1)
    return store


def load_snapshot(store: ProgressRepository) -> StoreSnapshot:
    """Load the whole store or exit with an error."""
    try:
        return StoreSnapshot(
            workouts=store.load_workouts(),
            personal_records=store.load_personal_records(),
            weight_log=store.load_weight_log(),
            state=store.load_state(),
            custom_exercises=store.load_custom_exercises(),
        )
    except (FileNotFoundError, ValidationError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)
