"""
CLI entry point using Typer.

Provides commands for the workout log and its progression layer:
- init: Create the data directory
- log-workout: Log a workout and collect XP
- show-history / delete-record: Browse and edit the workout log
- log-weight: Log bodyweight
- level / achievements / streak: Progress views
- challenges: Daily and weekly challenge board
- exercises: Exercise catalog and custom exercises
"""

import typer

from ..core.levels import calculate_level_from_xp, get_level_title
from ..core.streaks import calculate_streak
from ..io.serializers import ValidationError
from . import views
from .app import app, get_store

# Importing the command modules registers them on the shared app.
from .commands import challenges, exercises, profile, progress, workouts  # noqa: F401


@app.callback(invoke_without_command=True)
def main_callback(ctx: typer.Context) -> None:
    """
    Gamified workout log. Run without a command for a quick summary.
    """
    if ctx.invoked_subcommand is not None:
        return

    views.console.print()
    views.console.print("[bold cyan]liftquest[/bold cyan]: gamified workout log")
    views.console.print()

    store = get_store(None)
    if not store.exists():
        views.print_info("No data yet. Run 'liftquest init' to get started.")
        return

    try:
        state = store.load_state()
        workouts = store.load_workouts()
    except (FileNotFoundError, ValidationError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    user_level = calculate_level_from_xp(state.total_xp)
    info = calculate_streak(workouts)
    views.console.print(
        f"Level {user_level.level} {get_level_title(user_level.level)}  "
        f"({user_level.current_xp}/{user_level.xp_for_next_level} XP)"
    )
    views.console.print(f"Workouts: {len(workouts)}  Streak: {info.current_streak} day(s)")
    views.console.print("\nRun 'liftquest --help' for all commands.")


if __name__ == "__main__":
    app()
