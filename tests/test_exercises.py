"""Unit tests for the preset exercise catalog and name resolution."""

import pytest

from liftquest.core.exercises import (
    PRESET_EXERCISES,
    cardio_exercise_names,
    list_presets,
    preset_from_dict,
    resolve_exercise,
)
from liftquest.core.models import CustomExercise, PresetExercise


class TestCatalog:
    def test_bundled_catalog_loaded(self):
        assert len(PRESET_EXERCISES) >= 150
        assert "bench press" in PRESET_EXERCISES

    def test_filter_by_muscle(self):
        cardio = list_presets("cardio")
        assert cardio
        assert all(p.primary_muscle == "cardio" for p in cardio)
        assert list_presets("CARDIO") == cardio

    def test_preset_from_dict_defaults(self):
        preset = preset_from_dict({"name": "  Sled Push "})
        assert preset == PresetExercise(name="Sled Push", primary_muscle="other", equipment="other")

    def test_bad_difficulty(self):
        with pytest.raises(ValueError):
            preset_from_dict({"name": "X", "difficulty": "heroic"})


class TestResolve:
    def test_case_insensitive(self):
        ex = resolve_exercise("  bench PRESS ")
        assert ex is not None
        assert ex.name == "Bench Press"
        assert ex.kind == "preset"

    def test_unknown(self):
        assert resolve_exercise("Underwater Basket Weaving") is None

    def test_custom_shadows_preset(self):
        mine = CustomExercise(name="Bench Press", primary_muscle="chest", equipment="machine")
        assert resolve_exercise("bench press", [mine]) is mine

    def test_custom_only(self):
        mine = CustomExercise(name="Tire Flip")
        assert resolve_exercise("tire flip", [mine]) is mine


class TestCardio:
    def test_bundled_cardio(self):
        names = cardio_exercise_names()
        assert {"Treadmill Run", "Jump Rope"} <= names
        assert "Bench Press" not in names

    def test_custom_cardio(self):
        names = cardio_exercise_names([CustomExercise(name="Assault Bike", primary_muscle="cardio")])
        assert "Assault Bike" in names

    def test_custom_can_reclassify(self):
        names = cardio_exercise_names([CustomExercise(name="Jump Rope", primary_muscle="legs")])
        assert "Jump Rope" not in names

    def test_reclassify_ignores_case(self):
        names = cardio_exercise_names([CustomExercise(name="treadmill run", primary_muscle="legs")])
        assert "Treadmill Run" not in names
        assert "treadmill run" not in names

    def test_custom_cardio_replaces_preset_spelling(self):
        names = cardio_exercise_names([CustomExercise(name="JUMP ROPE", primary_muscle="cardio")])
        assert "JUMP ROPE" in names
        assert "Jump Rope" not in names
