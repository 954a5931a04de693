"""Challenge board command."""

import json
from dataclasses import replace
from datetime import datetime
from typing import Annotated

import typer

from ...core.challenges import (
    calculate_challenge_points,
    get_completed_count,
    get_time_remaining,
    redraw_challenges,
)
from ...core.progress import evaluate_progress
from ...core.stats import build_challenge_counters
from ...io.serializers import challenge_to_dict
from .. import views
from ..app import DataDirOption, JsonOption, app, load_snapshot, require_store


@app.command()
def challenges(
    refresh: Annotated[
        bool,
        typer.Option("--refresh", "-r", help="Swap unfinished challenges for new ones"),
    ] = False,
    data_dir: DataDirOption = None,
    json_out: JsonOption = False,
) -> None:
    """
    Show daily and weekly challenges.

    Expired batches are replaced automatically; progress is recomputed from
    the workout log every time.  --refresh keeps completed challenges and
    redraws the rest.
    """
    store = require_store(data_dir)
    snapshot = load_snapshot(store)

    state = snapshot.state
    now = datetime.now()
    if refresh:
        counters = build_challenge_counters(
            snapshot.workouts,
            snapshot.personal_records,
            now=now,
            cardio_exercises=snapshot.cardio_exercises,
        )
        state = replace(state, challenges=redraw_challenges(state.challenges, counters, now=now))

    update = evaluate_progress(
        state,
        snapshot.workouts,
        snapshot.personal_records,
        snapshot.weight_log,
        now=now,
        cardio_exercises=snapshot.cardio_exercises,
    )
    store.save_state(update.state)

    board = update.state.challenges

    if json_out:
        rows = []
        for c in board:
            d = challenge_to_dict(c)
            d["time_remaining"] = get_time_remaining(c.end_date, now)
            rows.append(d)
        print(json.dumps({
            "challenges": rows,
            "completed": get_completed_count(board),
            "points": calculate_challenge_points(board),
        }, indent=2, ensure_ascii=False))
        return

    views.print_challenges(board, now)
    counts = get_completed_count(board)
    views.console.print(
        f"Completed: {counts['daily']} daily, {counts['weekly']} weekly  "
        f"({calculate_challenge_points(board)} pts)"
    )
    views.print_progress_update(update)
