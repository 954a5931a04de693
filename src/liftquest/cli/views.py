"""
CLI view formatters using Rich for pretty console output.

Handles table formatting and display of workouts and progression data.
"""

from datetime import datetime
from typing import Iterable, Mapping

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ..core.achievements import ACHIEVEMENTS, completion_percentage, display_description, display_title
from ..core.challenges import get_time_remaining
from ..core.levels import get_level_title, get_next_reward
from ..core.models import (
    Challenge,
    CustomExercise,
    LevelReward,
    PresetExercise,
    StreakInfo,
    UserLevel,
    WorkoutRecord,
    WorkoutXP,
)
from ..core.progress import ProgressUpdate
from ..core.rarity import TIER_BADGES, calculate_tier_progress, get_achievement_rarity

console = Console()

_RARITY_STYLES = {
    "common": "white",
    "rare": "blue",
    "epic": "magenta",
    "legendary": "bold yellow",
}

_STATUS_STYLES = {
    "active": "cyan",
    "completed": "green",
    "expired": "dim",
}


def _progress_bar(progress: float, width: int = 20) -> str:
    filled = int(round(progress / 100 * width))
    filled = max(0, min(width, filled))
    return "█" * filled + "░" * (width - filled)


# ── workouts ─────────────────────────────────────────────────────────────


def format_workout_table(workouts: list[WorkoutRecord], start_id: int = 1) -> Table:
    """
    Create a Rich table displaying workout history.

    Args:
        workouts: Workouts to display
        start_id: ID shown for the first row (1-based position in history)

    Returns:
        Rich Table object
    """
    table = Table(title="Workout History")

    table.add_column("#", justify="right", style="dim", width=3)
    table.add_column("When", style="cyan")
    table.add_column("Workout", style="magenta")
    table.add_column("Exercises", style="green")
    table.add_column("Sets", justify="right")
    table.add_column("Reps", justify="right")
    table.add_column("Volume(kg)", justify="right", style="bold")
    table.add_column("Min", justify="right")

    for i, workout in enumerate(workouts, start_id):
        exercises = ", ".join(
            f"{e.name} {e.sets}×{e.reps}" + (f"@{e.weight_kg:g}" if e.weight_kg else "")
            for e in workout.exercises
        )
        table.add_row(
            str(i),
            workout.performed_at.replace("T", " "),
            workout.name,
            exercises or "-",
            str(workout.total_sets),
            str(workout.total_reps),
            f"{workout.total_weight_kg:.0f}" if workout.total_weight_kg else "-",
            str(workout.duration_minutes) if workout.duration_minutes else "-",
        )

    return table


def print_history(workouts: list[WorkoutRecord], start_id: int = 1) -> None:
    if not workouts:
        console.print("[yellow]No workouts recorded yet.[/yellow]")
        return

    console.print(format_workout_table(workouts, start_id))


def print_workout_xp(workout_xp: WorkoutXP) -> None:
    """Print the itemised XP award for a workout."""
    table = Table(title="XP Earned", show_header=False)
    table.add_column("Source")
    table.add_column("XP", justify="right", style="bold green")
    for item in workout_xp.breakdown:
        table.add_row(item.source, f"+{item.amount}")
    table.add_row("[bold]Total[/bold]", f"[bold]+{workout_xp.total}[/bold]")
    console.print(table)


def print_rewards(rewards: Iterable[LevelReward]) -> None:
    for reward in rewards:
        unlocks = ", ".join(reward.unlocks) if reward.unlocks else "-"
        console.print(
            f"[bold yellow]🎁 Level {reward.level} reward:[/bold yellow] "
            f"{unlocks} (+{reward.points} pts)"
        )


def print_progress_update(update: ProgressUpdate) -> None:
    """Print unlocks, challenge completions and level-ups from an evaluation pass."""
    for a in update.new_achievements:
        rarity = get_achievement_rarity(a.id).rarity
        style = _RARITY_STYLES[rarity]
        console.print(
            f"[bold]🏅 Achievement unlocked:[/bold] [{style}]{a.title}[/{style}] "
            f"({rarity}): {a.description}"
        )
    if update.achievement_xp:
        console.print(f"   Achievement XP: [green]+{update.achievement_xp}[/green]")

    for c in update.completed_challenges:
        console.print(f"[bold]{c.icon} Challenge complete:[/bold] {c.title} (+{c.xp} XP)")
    if update.challenge_xp:
        console.print(f"   Challenge XP: [green]+{update.challenge_xp}[/green]")

    if update.level_up.leveled_up:
        lvl = update.level_up.new_level.level
        console.print(
            f"[bold magenta]⬆ Level up![/bold magenta] Now level {lvl}, {get_level_title(lvl)}"
            + (f" (+{update.level_up.levels_gained} levels)" if update.level_up.levels_gained > 1 else "")
        )
        print_rewards(update.rewards)


# ── level ────────────────────────────────────────────────────────────────


def print_level(user_level: UserLevel) -> None:
    """Print the level card."""
    console.print()
    console.print(f"[bold]Level {user_level.level}[/bold]  {get_level_title(user_level.level)}")
    console.print(
        f"{_progress_bar(user_level.progress)}  "
        f"{user_level.current_xp} / {user_level.xp_for_next_level} XP "
        f"({user_level.progress:.1f}%)"
    )
    console.print(f"Total XP: {user_level.total_xp}")

    next_reward = get_next_reward(user_level.level)
    if next_reward is not None:
        unlocks = ", ".join(next_reward.unlocks) if next_reward.unlocks else "-"
        console.print(f"[dim]Next reward at level {next_reward.level}: {unlocks}[/dim]")


# ── achievements ─────────────────────────────────────────────────────────


def format_achievement_table(unlocked: Mapping[str, datetime], show_all: bool) -> Table:
    table = Table(title="Achievements")

    table.add_column("", width=2)
    table.add_column("Achievement", style="bold")
    table.add_column("Description")
    table.add_column("Rarity")
    table.add_column("Unlocked", style="cyan")

    for a in ACHIEVEMENTS:
        is_unlocked = a.id in unlocked
        if not show_all and not is_unlocked:
            continue
        rarity = get_achievement_rarity(a.id).rarity
        style = _RARITY_STYLES[rarity]
        table.add_row(
            a.icon if is_unlocked else "🔒",
            display_title(a, is_unlocked),
            display_description(a, is_unlocked),
            f"[{style}]{rarity}[/{style}]",
            unlocked[a.id].strftime("%Y-%m-%d") if is_unlocked else "-",
        )

    return table


def print_achievements(unlocked: Mapping[str, datetime], show_all: bool, points: int) -> None:
    """Print unlocked (or all) achievements with completion and tier summary."""
    if not unlocked and not show_all:
        console.print("[yellow]No achievements unlocked yet. Use --all to see the catalog.[/yellow]")
    else:
        console.print(format_achievement_table(unlocked, show_all))

    tier = calculate_tier_progress(points)
    name, badge = TIER_BADGES[tier.current_tier]
    console.print(
        f"Unlocked {len(unlocked)}/{len(ACHIEVEMENTS)} ({completion_percentage(unlocked)}%)  "
        f"{badge} {name} tier, {points} pts"
    )
    if tier.next_tier is not None:
        next_name, _ = TIER_BADGES[tier.next_tier]
        console.print(
            f"{_progress_bar(tier.progress)}  "
            f"{tier.points_for_next_tier - points} pts to {next_name}"
        )


# ── streak ───────────────────────────────────────────────────────────────


def print_streak(info: StreakInfo, this_week: int) -> None:
    flame = "🔥" if info.current_streak > 0 else "🧊"
    console.print(f"{flame} Current streak: [bold]{info.current_streak}[/bold] day(s)")
    console.print(f"🏆 Longest streak: {info.max_streak} day(s)")
    console.print(f"📅 Workouts this week: {this_week}")


# ── challenges ───────────────────────────────────────────────────────────


def format_challenge_table(challenges: list[Challenge], now: datetime) -> Table:
    table = Table(title="Challenges")

    table.add_column("Type", style="magenta")
    table.add_column("Challenge", style="bold")
    table.add_column("Progress")
    table.add_column("Reward", justify="right")
    table.add_column("Status")
    table.add_column("Time left", justify="right", style="dim")

    for c in challenges:
        style = _STATUS_STYLES[c.status]
        table.add_row(
            c.type,
            f"{c.icon} {c.title}",
            f"{_progress_bar(c.progress, 10)} {c.current}/{c.target}",
            f"{c.points} pts / {c.xp} XP",
            f"[{style}]{c.status}[/{style}]",
            get_time_remaining(c.end_date, now) if c.status == "active" else "-",
        )

    return table


def print_challenges(challenges: list[Challenge], now: datetime) -> None:
    if not challenges:
        console.print("[yellow]No challenges yet.[/yellow]")
        return
    console.print(format_challenge_table(challenges, now))


# ── exercises ────────────────────────────────────────────────────────────


def print_exercises(presets: list[PresetExercise], custom: list[CustomExercise]) -> None:
    table = Table(title="Exercises")

    table.add_column("Name", style="bold")
    table.add_column("Muscle", style="green")
    table.add_column("Equipment")
    table.add_column("Kind", style="dim")

    for c in custom:
        table.add_row(c.name, c.primary_muscle, c.equipment, "custom")
    for p in presets:
        table.add_row(p.name, p.primary_muscle, p.equipment, p.difficulty)

    console.print(table)


# ── messages ─────────────────────────────────────────────────────────────


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[green]{escape(message)}[/green]")


def print_error(message: str) -> None:
    """Print an error message."""
    console.print(f"[red]Error: {escape(message)}[/red]")


def print_warning(message: str) -> None:
    """Print a warning message."""
    console.print(f"[yellow]Warning: {escape(message)}[/yellow]")


def print_info(message: str) -> None:
    """Print an info message."""
    console.print(f"[blue]{escape(message)}[/blue]")


def confirm_action(message: str) -> bool:
    """
    Prompt user for confirmation.

    Returns:
        True if confirmed, False otherwise
    """
    response = console.input(f"{escape(message)} \\[y/N]: ")
    return response.lower() in ("y", "yes")
