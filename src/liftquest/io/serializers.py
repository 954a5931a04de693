"""
JSON serialization for progression data models.

Handles conversion between dataclasses and JSON-compatible dicts.
"""

import json
import re
from datetime import datetime
from typing import Any

from ..core.models import (
    Challenge,
    CustomExercise,
    ExerciseEntry,
    PersonalRecord,
    ProgressState,
    WeightEntry,
    WorkoutRecord,
    parse_timestamp,
)


class ValidationError(Exception):
    """Raised when data validation fails."""

    pass


def validate_date(date_str: str) -> str:
    """
    Validate a YYYY-MM-DD date string.

    Raises:
        ValidationError: If date format is invalid
    """
    if not re.match(r"^\d{4}-\d{2}-\d{2}$", date_str):
        raise ValidationError(f"Invalid date format: {date_str}. Expected YYYY-MM-DD")

    try:
        datetime.strptime(date_str, "%Y-%m-%d")
    except ValueError as e:
        raise ValidationError(f"Invalid date: {date_str}") from e

    return date_str


def validate_timestamp(value: str) -> str:
    """
    Validate a workout timestamp (``YYYY-MM-DD`` or ``YYYY-MM-DDTHH:MM[:SS]``).

    Raises:
        ValidationError: If the timestamp is malformed
    """
    try:
        parse_timestamp(value)
    except ValueError as e:
        raise ValidationError(str(e)) from e
    return value


def validate_non_negative(value: int | float, name: str) -> int | float:
    """
    Validate that a value is non-negative.

    Raises:
        ValidationError: If value is negative
    """
    if value < 0:
        raise ValidationError(f"{name} must be non-negative, got {value}")
    return value


def validate_positive(value: int | float, name: str) -> int | float:
    """
    Validate that a value is positive.

    Raises:
        ValidationError: If value is not positive
    """
    if value <= 0:
        raise ValidationError(f"{name} must be positive, got {value}")
    return value


# =============================================================================
# WORKOUTS
# =============================================================================


def exercise_entry_to_dict(entry: ExerciseEntry) -> dict[str, Any]:
    return {
        "name": entry.name,
        "kind": entry.kind,
        "sets": entry.sets,
        "reps": entry.reps,
        "weight_kg": entry.weight_kg,
    }


def dict_to_exercise_entry(data: dict[str, Any]) -> ExerciseEntry:
    """
    Convert dict to ExerciseEntry.

    Raises:
        ValidationError: If data is invalid
    """
    name = data.get("name")
    if not isinstance(name, str) or not name.strip():
        raise ValidationError(f"Invalid exercise name: {name!r}")
    kind = data.get("kind", "preset")
    if kind not in ("preset", "custom"):
        raise ValidationError(f"Invalid exercise kind: {kind}. Must be 'preset' or 'custom'")
    validate_non_negative(data.get("sets", 0), "sets")
    validate_non_negative(data.get("reps", 0), "reps")
    validate_non_negative(data.get("weight_kg", 0), "weight_kg")

    return ExerciseEntry(
        name=name,
        sets=int(data.get("sets", 0)),
        reps=int(data.get("reps", 0)),
        weight_kg=float(data.get("weight_kg", 0.0)),
        kind=kind,
    )


def workout_to_dict(workout: WorkoutRecord) -> dict[str, Any]:
    return {
        "performed_at": workout.performed_at,
        "name": workout.name,
        "duration_minutes": workout.duration_minutes,
        "exercises": [exercise_entry_to_dict(e) for e in workout.exercises],
        "notes": workout.notes,
    }


def dict_to_workout(data: dict[str, Any]) -> WorkoutRecord:
    """
    Convert dict to WorkoutRecord.

    Raises:
        ValidationError: If data is invalid
    """
    if "performed_at" not in data:
        raise ValidationError("Workout is missing 'performed_at'")
    validate_timestamp(data["performed_at"])
    validate_non_negative(data.get("duration_minutes", 0), "duration_minutes")

    return WorkoutRecord(
        performed_at=data["performed_at"],
        name=str(data.get("name", "Workout")),
        duration_minutes=int(data.get("duration_minutes", 0)),
        exercises=[dict_to_exercise_entry(e) for e in data.get("exercises", [])],
        notes=data.get("notes"),
    )


def workout_to_json_line(workout: WorkoutRecord) -> str:
    """Serialize a workout to a single JSON line (no trailing newline)."""
    return json.dumps(workout_to_dict(workout), separators=(",", ":"), ensure_ascii=False)


def json_line_to_workout(line: str) -> WorkoutRecord:
    """
    Deserialize a JSON line to a WorkoutRecord.

    Raises:
        ValidationError: If JSON is invalid or data validation fails
    """
    try:
        data = json.loads(line.strip())
    except json.JSONDecodeError as e:
        raise ValidationError(f"Invalid JSON: {e}") from e

    if not isinstance(data, dict):
        raise ValidationError("Workout line must be a JSON object")
    try:
        return dict_to_workout(data)
    except (KeyError, TypeError, ValueError) as e:
        raise ValidationError(f"Invalid workout: {e}") from e


# =============================================================================
# PERSONAL RECORDS, WEIGHT, CUSTOM EXERCISES
# =============================================================================


def personal_record_to_dict(pr: PersonalRecord) -> dict[str, Any]:
    return {"exercise_name": pr.exercise_name, "weight_kg": pr.weight_kg, "date": pr.date}


def dict_to_personal_record(data: dict[str, Any]) -> PersonalRecord:
    validate_date(data["date"])
    validate_non_negative(data.get("weight_kg", 0), "weight_kg")
    return PersonalRecord(
        exercise_name=str(data["exercise_name"]),
        weight_kg=float(data["weight_kg"]),
        date=data["date"],
    )


def weight_entry_to_dict(entry: WeightEntry) -> dict[str, Any]:
    d: dict[str, Any] = {"date": entry.date, "weight_kg": entry.weight_kg}
    if entry.body_fat is not None:
        d["body_fat"] = entry.body_fat
    return d


def dict_to_weight_entry(data: dict[str, Any]) -> WeightEntry:
    validate_date(data["date"])
    validate_positive(data.get("weight_kg", 0), "weight_kg")
    body_fat = data.get("body_fat")
    if body_fat is not None and not 0 <= body_fat <= 100:
        raise ValidationError(f"body_fat must be between 0 and 100, got {body_fat}")
    return WeightEntry(
        date=data["date"],
        weight_kg=float(data["weight_kg"]),
        body_fat=float(body_fat) if body_fat is not None else None,
    )


def custom_exercise_to_dict(exercise: CustomExercise) -> dict[str, Any]:
    return {
        "name": exercise.name,
        "primary_muscle": exercise.primary_muscle,
        "equipment": exercise.equipment,
        "created_at": exercise.created_at,
    }


def dict_to_custom_exercise(data: dict[str, Any]) -> CustomExercise:
    name = data.get("name")
    if not isinstance(name, str) or not name.strip():
        raise ValidationError(f"Invalid custom exercise name: {name!r}")
    return CustomExercise(
        name=name.strip(),
        primary_muscle=str(data.get("primary_muscle", "other")),
        equipment=str(data.get("equipment", "other")),
        created_at=str(data.get("created_at", "")),
    )


# =============================================================================
# PROGRESSION STATE
# =============================================================================


def _parse_datetime(value: str, name: str) -> datetime:
    try:
        return datetime.fromisoformat(value)
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Invalid {name}: {value!r}") from e


def challenge_to_dict(challenge: Challenge) -> dict[str, Any]:
    return {
        "id": challenge.id,
        "type": challenge.type,
        "category": challenge.category,
        "title": challenge.title,
        "description": challenge.description,
        "icon": challenge.icon,
        "target": challenge.target,
        "current": challenge.current,
        "progress": challenge.progress,
        "start_date": challenge.start_date.isoformat(),
        "end_date": challenge.end_date.isoformat(),
        "points": challenge.points,
        "xp": challenge.xp,
        "status": challenge.status,
        "completed_at": challenge.completed_at.isoformat() if challenge.completed_at else None,
    }


def dict_to_challenge(data: dict[str, Any]) -> Challenge:
    """
    Convert dict to Challenge.

    Raises:
        ValidationError: If data is invalid (including a non-positive
            target or an end date before the start date)
    """
    try:
        return Challenge(
            id=str(data["id"]),
            type=data["type"],
            category=data["category"],
            title=str(data.get("title", "")),
            description=str(data.get("description", "")),
            icon=str(data.get("icon", "")),
            target=int(data["target"]),
            current=int(data.get("current", 0)),
            progress=float(data.get("progress", 0.0)),
            start_date=_parse_datetime(data["start_date"], "start_date"),
            end_date=_parse_datetime(data["end_date"], "end_date"),
            points=int(data.get("points", 0)),
            xp=int(data.get("xp", 0)),
            status=data.get("status", "active"),
            completed_at=(
                _parse_datetime(data["completed_at"], "completed_at")
                if data.get("completed_at") else None
            ),
        )
    except KeyError as e:
        raise ValidationError(f"Challenge is missing field {e}") from e
    except ValueError as e:
        raise ValidationError(f"Invalid challenge: {e}") from e


def progress_state_to_dict(state: ProgressState) -> dict[str, Any]:
    return {
        "total_xp": state.total_xp,
        "unlocked": {aid: ts.isoformat() for aid, ts in state.unlocked.items()},
        "challenges": [challenge_to_dict(c) for c in state.challenges],
    }


def dict_to_progress_state(data: dict[str, Any]) -> ProgressState:
    validate_non_negative(data.get("total_xp", 0), "total_xp")
    unlocked = {
        str(aid): _parse_datetime(ts, f"unlock time for '{aid}'")
        for aid, ts in (data.get("unlocked") or {}).items()
    }
    return ProgressState(
        total_xp=int(data.get("total_xp", 0)),
        unlocked=unlocked,
        challenges=[dict_to_challenge(c) for c in data.get("challenges", [])],
    )


# =============================================================================
# CLI INPUT
# =============================================================================


_ENTRY_RE = re.compile(
    r"^(?P<name>[^:]+):\s*(?P<sets>\d+)\s*[xX×]\s*(?P<reps>\d+)"
    r"(?:\s*@\s*\+?(?P<weight>\d+(?:\.\d+)?)\s*(?:kg)?)?$",
    re.IGNORECASE,
)


def parse_exercises_string(text: str) -> list[ExerciseEntry]:
    """
    Parse a comma-separated exercise list.

    Format per entry: ``Name:SETSxREPS[@WEIGHT[kg]]``

    Examples:
        "Bench Press:3x8@60"               → 3 sets of 8 reps at 60 kg
        "Push-ups:3x15"                    → bodyweight
        "Bench Press:3x8@60, Back Squats:5x5@100"

    Returns:
        List of ExerciseEntry (kind defaults to "preset")

    Raises:
        ValidationError: If any entry is malformed
    """
    if not text or not text.strip():
        raise ValidationError("Exercises string cannot be empty")

    entries: list[ExerciseEntry] = []
    for part in (p.strip() for p in text.split(",")):
        if not part:
            continue
        m = _ENTRY_RE.match(part)
        if not m or not m.group("name").strip():
            raise ValidationError(
                f"Invalid exercise format: '{part}'.\n"
                f"Use: Name:SETSxREPS[@WEIGHT] (e.g. 'Bench Press:3x8@60' or 'Push-ups:3x15')."
            )
        entries.append(ExerciseEntry(
            name=m.group("name").strip(),
            sets=int(m.group("sets")),
            reps=int(m.group("reps")),
            weight_kg=float(m.group("weight")) if m.group("weight") else 0.0,
        ))

    if not entries:
        raise ValidationError("No valid exercises found in exercises string")

    return entries
