"""
Preset exercise catalog.

Presets are loaded from the bundled ``src/liftquest/data/exercises.yaml``
at import time.  A user file at ``~/.liftquest/exercises.yaml`` with the
same layout is merged on top by name: a user entry replaces the bundled
entry with the same name (case-insensitive) and new names are appended.

Custom exercises belong to the user's data store, not to this catalog;
resolve_exercise() takes them as an argument and lets them shadow presets.
"""

import warnings
from typing import Iterable

from .config_loader import get_bundled_data_dir, get_user_config_dir, load_yaml_file
from .models import CustomExercise, Exercise, PresetExercise

CATALOG_FILENAME = "exercises.yaml"
CARDIO_MUSCLE = "cardio"


def preset_from_dict(d: dict) -> PresetExercise:
    """Convert a raw dict (from YAML) to a PresetExercise."""
    difficulty = d.get("difficulty", "beginner")
    if difficulty not in ("beginner", "intermediate", "advanced"):
        raise ValueError(f"invalid difficulty '{difficulty}'")
    return PresetExercise(
        name=str(d["name"]).strip(),
        primary_muscle=str(d.get("primary_muscle", "other")),
        equipment=str(d.get("equipment", "other")),
        difficulty=difficulty,
    )


def _load_entries(raw: dict, source: str) -> list[PresetExercise]:
    presets: list[PresetExercise] = []
    for entry in raw.get("exercises") or []:
        try:
            presets.append(preset_from_dict(entry))
        except (KeyError, TypeError, ValueError) as exc:
            warnings.warn(f"liftquest: skipping exercise {entry!r} in {source} ({exc})", stacklevel=2)
    return presets


def _build_catalog() -> dict[str, PresetExercise]:
    catalog: dict[str, PresetExercise] = {}

    sources = [get_bundled_data_dir() / CATALOG_FILENAME, get_user_config_dir() / CATALOG_FILENAME]
    for path in sources:
        if not path.exists():
            continue
        for preset in _load_entries(load_yaml_file(path), str(path)):
            catalog[preset.name.lower()] = preset

    return catalog


# lower-cased name → preset, in catalog order
PRESET_EXERCISES: dict[str, PresetExercise] = _build_catalog()


def list_presets(muscle: str | None = None) -> list[PresetExercise]:
    """All presets, optionally filtered by primary muscle."""
    presets = list(PRESET_EXERCISES.values())
    if muscle is not None:
        presets = [p for p in presets if p.primary_muscle == muscle.lower()]
    return presets


def resolve_exercise(name: str, custom: Iterable[CustomExercise] = ()) -> Exercise | None:
    """
    Look up an exercise by name.

    Custom exercises shadow presets with the same name.  Matching ignores
    case and surrounding whitespace.

    Returns:
        The matching preset or custom exercise, or None when unknown
    """
    key = name.strip().lower()
    for exercise in custom:
        if exercise.name.lower() == key:
            return exercise
    return PRESET_EXERCISES.get(key)


def cardio_exercise_names(custom: Iterable[CustomExercise] = ()) -> set[str]:
    """
    Names of every known exercise whose primary muscle is cardio.

    Custom exercises override presets by case-insensitive name, the same
    way resolve_exercise() looks them up.
    """
    names = {
        p.name.lower(): p.name for p in PRESET_EXERCISES.values() if p.primary_muscle == CARDIO_MUSCLE
    }
    for exercise in custom:
        key = exercise.name.lower()
        if exercise.primary_muscle == CARDIO_MUSCLE:
            names[key] = exercise.name
        else:
            names.pop(key, None)
    return set(names.values())
