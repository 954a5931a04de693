"""Progress commands: level, achievements, streak."""

import json
from datetime import datetime
from typing import Annotated

import typer

from ...core.achievements import ACHIEVEMENTS, completion_percentage, display_description, display_title, restore_unlocked
from ...core.levels import calculate_level_from_xp, get_level_title, get_next_reward
from ...core.rarity import calculate_tier_progress, calculate_total_points, get_achievement_rarity
from ...core.streaks import calculate_streak, get_this_week_workouts
from ...io.serializers import ValidationError
from .. import views
from ..app import DataDirOption, JsonOption, app, require_store


@app.command()
def level(
    data_dir: DataDirOption = None,
    json_out: JsonOption = False,
) -> None:
    """
    Show current level, title and progress to the next level.
    """
    store = require_store(data_dir)
    try:
        state = store.load_state()
    except (FileNotFoundError, ValidationError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    user_level = calculate_level_from_xp(state.total_xp)

    if json_out:
        next_reward = get_next_reward(user_level.level)
        print(json.dumps({
            "level": user_level.level,
            "title": get_level_title(user_level.level),
            "current_xp": user_level.current_xp,
            "xp_for_next_level": user_level.xp_for_next_level,
            "total_xp": user_level.total_xp,
            "progress": round(user_level.progress, 1),
            "next_reward": {
                "level": next_reward.level,
                "unlocks": list(next_reward.unlocks),
                "points": next_reward.points,
            } if next_reward is not None else None,
        }, indent=2, ensure_ascii=False))
        return

    views.print_level(user_level)


@app.command()
def achievements(
    show_all: Annotated[
        bool,
        typer.Option("--all", "-a", help="Include locked achievements"),
    ] = False,
    data_dir: DataDirOption = None,
    json_out: JsonOption = False,
) -> None:
    """
    List unlocked achievements with rarity and tier.

    Secret achievements stay hidden until unlocked.
    """
    store = require_store(data_dir)
    try:
        state = store.load_state()
    except (FileNotFoundError, ValidationError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    unlocked = restore_unlocked(state.unlocked)
    unlocked_at = {a.id: a.unlocked_at for a in unlocked}
    points = calculate_total_points(unlocked)

    if json_out:
        tier = calculate_tier_progress(points)
        rows = []
        for a in ACHIEVEMENTS:
            is_unlocked = a.id in unlocked_at
            if not show_all and not is_unlocked:
                continue
            rows.append({
                "id": a.id,
                "title": display_title(a, is_unlocked),
                "description": display_description(a, is_unlocked),
                "category": a.category,
                "rarity": get_achievement_rarity(a.id).rarity,
                "secret": a.secret,
                "unlocked_at": unlocked_at[a.id].isoformat() if is_unlocked else None,
            })
        print(json.dumps({
            "achievements": rows,
            "unlocked": len(unlocked),
            "total": len(ACHIEVEMENTS),
            "completion": completion_percentage(unlocked),
            "points": points,
            "tier": tier.current_tier,
            "next_tier": tier.next_tier,
        }, indent=2, ensure_ascii=False))
        return

    views.print_achievements(unlocked_at, show_all, points)


@app.command()
def streak(
    data_dir: DataDirOption = None,
    json_out: JsonOption = False,
) -> None:
    """
    Show current and longest workout streaks.
    """
    store = require_store(data_dir)
    try:
        workouts = store.load_workouts()
    except (FileNotFoundError, ValidationError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    now = datetime.now()
    info = calculate_streak(workouts, today=now.date())
    this_week = get_this_week_workouts(workouts, now=now)

    if json_out:
        print(json.dumps({
            "current_streak": info.current_streak,
            "max_streak": info.max_streak,
            "this_week_workouts": this_week,
        }, indent=2))
        return

    views.print_streak(info, this_week)
