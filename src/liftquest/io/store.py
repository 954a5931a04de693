"""
Progress storage.

ProgressRepository is the storage interface the CLI talks to.  Two
implementations are provided:

- FileProgressStore: a data directory holding ``workouts.jsonl`` (one
  workout per line, chronological) and ``progress.json`` (XP, unlocked
  achievements, challenges, personal records, weight log and custom
  exercises).
- MemoryProgressStore: process-local, for tests and dry runs.

open_store() picks one from the ``persistent`` flag.
"""

import copy
import json
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

from ..core.models import CustomExercise, PersonalRecord, ProgressState, WeightEntry, WorkoutRecord
from .serializers import (
    ValidationError,
    custom_exercise_to_dict,
    dict_to_custom_exercise,
    dict_to_personal_record,
    dict_to_progress_state,
    dict_to_weight_entry,
    json_line_to_workout,
    personal_record_to_dict,
    progress_state_to_dict,
    weight_entry_to_dict,
    workout_to_json_line,
)

WORKOUTS_FILENAME = "workouts.jsonl"
PROGRESS_FILENAME = "progress.json"


def _insert_chronological(workouts: list[WorkoutRecord], workout: WorkoutRecord) -> int:
    """Insert *workout* after every record at or before its timestamp; return its index."""
    ts = workout.timestamp
    insert_idx = len(workouts)
    for i, existing in enumerate(workouts):
        if ts < existing.timestamp:
            insert_idx = i
            break
    workouts.insert(insert_idx, workout)
    return insert_idx


def _check_index(index: int, count: int) -> None:
    if index < 0 or index >= count:
        raise IndexError(f"Workout index {index} out of range (0–{count - 1})")


def _find_custom(custom: list[CustomExercise], name: str) -> CustomExercise | None:
    key = name.strip().lower()
    for exercise in custom:
        if exercise.name.lower() == key:
            return exercise
    return None


class ProgressRepository(ABC):
    """Storage interface for workouts and progression state."""

    persistent: bool = False

    @abstractmethod
    def init(self) -> None:
        """Create an empty store if none exists."""

    @abstractmethod
    def exists(self) -> bool: ...

    @abstractmethod
    def load_workouts(self) -> list[WorkoutRecord]:
        """All workouts, oldest first."""

    @abstractmethod
    def append_workout(self, workout: WorkoutRecord) -> int:
        """Insert in chronological order and return the record's index."""

    @abstractmethod
    def delete_workout_at(self, index: int) -> WorkoutRecord:
        """Remove and return the workout at a 0-based index (IndexError if out of range)."""

    @abstractmethod
    def load_personal_records(self) -> list[PersonalRecord]: ...

    @abstractmethod
    def save_personal_records(self, records: list[PersonalRecord]) -> None: ...

    @abstractmethod
    def load_weight_log(self) -> list[WeightEntry]: ...

    @abstractmethod
    def append_weight(self, entry: WeightEntry) -> None: ...

    @abstractmethod
    def load_state(self) -> ProgressState: ...

    @abstractmethod
    def save_state(self, state: ProgressState) -> None: ...

    @abstractmethod
    def load_custom_exercises(self) -> list[CustomExercise]: ...

    @abstractmethod
    def add_custom_exercise(self, exercise: CustomExercise) -> None:
        """Add a custom exercise (ValueError if the name is already taken)."""


class FileProgressStore(ProgressRepository):
    """
    Manages progression data stored in a directory.

    workouts.jsonl holds one JSON object per line, kept sorted by
    ``performed_at``.  progress.json holds everything else as one
    document, rewritten on every save.
    """

    persistent = True

    def __init__(self, data_dir: str | Path):
        """
        Initialize the store.

        Args:
            data_dir: Directory holding workouts.jsonl and progress.json
        """
        self.data_dir = Path(data_dir)
        self.workouts_path = self.data_dir / WORKOUTS_FILENAME
        self.progress_path = self.data_dir / PROGRESS_FILENAME

    def exists(self) -> bool:
        """Check if the workouts file exists."""
        return self.workouts_path.exists()

    def init(self) -> None:
        """
        Initialize empty data files if they don't exist.

        Creates the data directory if needed.
        """
        self.data_dir.mkdir(parents=True, exist_ok=True)

        if not self.workouts_path.exists():
            self.workouts_path.touch()
        if not self.progress_path.exists():
            self._write_document({})

    def _require_init(self) -> None:
        if not self.workouts_path.exists():
            raise FileNotFoundError(
                f"Workout log not found: {self.workouts_path}. Run 'init' first."
            )

    # ── workouts ─────────────────────────────────────────────────────────

    def load_workouts(self) -> list[WorkoutRecord]:
        """
        Load all workouts from the JSONL file.

        Returns:
            List of WorkoutRecord, sorted by timestamp

        Raises:
            FileNotFoundError: If the workouts file doesn't exist
            ValidationError: If a line is invalid (message carries the line number)
        """
        self._require_init()

        workouts: list[WorkoutRecord] = []

        with open(self.workouts_path, "r", encoding="utf-8") as f:
            for line_num, line in enumerate(f, 1):
                line = line.strip()
                if not line:
                    continue

                try:
                    workouts.append(json_line_to_workout(line))
                except ValidationError as e:
                    raise ValidationError(
                        f"Error parsing line {line_num} in {self.workouts_path}: {e}"
                    ) from e

        workouts.sort(key=lambda w: w.timestamp)

        return workouts

    def append_workout(self, workout: WorkoutRecord) -> int:
        workouts = self.load_workouts()
        index = _insert_chronological(workouts, workout)
        self._write_workouts(workouts)
        return index

    def delete_workout_at(self, index: int) -> WorkoutRecord:
        workouts = self.load_workouts()
        _check_index(index, len(workouts))
        removed = workouts.pop(index)
        self._write_workouts(workouts)
        return removed

    def _write_workouts(self, workouts: list[WorkoutRecord]) -> None:
        with open(self.workouts_path, "w", encoding="utf-8") as f:
            for workout in workouts:
                f.write(workout_to_json_line(workout) + "\n")

    # ── progress.json ────────────────────────────────────────────────────

    def _read_document(self) -> dict[str, Any]:
        self._require_init()
        if not self.progress_path.exists():
            return {}
        try:
            with open(self.progress_path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValidationError(f"Invalid JSON in {self.progress_path}: {e}") from e
        if not isinstance(data, dict):
            raise ValidationError(f"{self.progress_path} must contain a JSON object")
        return data

    def _write_document(self, data: dict[str, Any]) -> None:
        with open(self.progress_path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)

    def _update_document(self, key: str, value: Any) -> None:
        data = self._read_document()
        data[key] = value
        self._write_document(data)

    def _load_section(self, key: str, convert) -> list:
        try:
            return [convert(item) for item in self._read_document().get(key, [])]
        except (KeyError, TypeError, ValueError) as e:
            raise ValidationError(f"Invalid '{key}' entry in {self.progress_path}: {e}") from e

    def load_personal_records(self) -> list[PersonalRecord]:
        return self._load_section("personal_records", dict_to_personal_record)

    def save_personal_records(self, records: list[PersonalRecord]) -> None:
        self._update_document("personal_records", [personal_record_to_dict(r) for r in records])

    def load_weight_log(self) -> list[WeightEntry]:
        """Weight entries sorted by date."""
        entries = self._load_section("weight_log", dict_to_weight_entry)
        entries.sort(key=lambda e: e.date)
        return entries

    def append_weight(self, entry: WeightEntry) -> None:
        """Add a weight entry; an existing entry for the same date is replaced."""
        entries = [e for e in self.load_weight_log() if e.date != entry.date]
        entries.append(entry)
        entries.sort(key=lambda e: e.date)
        self._update_document("weight_log", [weight_entry_to_dict(e) for e in entries])

    def load_state(self) -> ProgressState:
        data = self._read_document()
        try:
            return dict_to_progress_state(data.get("state", {}))
        except (KeyError, TypeError, ValueError) as e:
            raise ValidationError(f"Invalid progress state in {self.progress_path}: {e}") from e

    def save_state(self, state: ProgressState) -> None:
        self._update_document("state", progress_state_to_dict(state))

    def load_custom_exercises(self) -> list[CustomExercise]:
        return self._load_section("custom_exercises", dict_to_custom_exercise)

    def add_custom_exercise(self, exercise: CustomExercise) -> None:
        custom = self.load_custom_exercises()
        if _find_custom(custom, exercise.name) is not None:
            raise ValueError(f"Custom exercise '{exercise.name}' already exists")
        custom.append(exercise)
        self._update_document("custom_exercises", [custom_exercise_to_dict(c) for c in custom])


class MemoryProgressStore(ProgressRepository):
    """In-process store with the same semantics as FileProgressStore."""

    persistent = False

    def __init__(self) -> None:
        self._initialized = False
        self._workouts: list[WorkoutRecord] = []
        self._personal_records: list[PersonalRecord] = []
        self._weight_log: list[WeightEntry] = []
        self._state = ProgressState()
        self._custom: list[CustomExercise] = []

    def init(self) -> None:
        self._initialized = True

    def exists(self) -> bool:
        return self._initialized

    def _require_init(self) -> None:
        if not self._initialized:
            raise FileNotFoundError("In-memory store not initialised. Run 'init' first.")

    def load_workouts(self) -> list[WorkoutRecord]:
        self._require_init()
        return copy.deepcopy(self._workouts)

    def append_workout(self, workout: WorkoutRecord) -> int:
        self._require_init()
        return _insert_chronological(self._workouts, copy.deepcopy(workout))

    def delete_workout_at(self, index: int) -> WorkoutRecord:
        self._require_init()
        _check_index(index, len(self._workouts))
        return self._workouts.pop(index)

    def load_personal_records(self) -> list[PersonalRecord]:
        self._require_init()
        return copy.deepcopy(self._personal_records)

    def save_personal_records(self, records: list[PersonalRecord]) -> None:
        self._require_init()
        self._personal_records = copy.deepcopy(records)

    def load_weight_log(self) -> list[WeightEntry]:
        self._require_init()
        return sorted(copy.deepcopy(self._weight_log), key=lambda e: e.date)

    def append_weight(self, entry: WeightEntry) -> None:
        self._require_init()
        self._weight_log = [e for e in self._weight_log if e.date != entry.date]
        self._weight_log.append(copy.deepcopy(entry))

    def load_state(self) -> ProgressState:
        self._require_init()
        return copy.deepcopy(self._state)

    def save_state(self, state: ProgressState) -> None:
        self._require_init()
        self._state = copy.deepcopy(state)

    def load_custom_exercises(self) -> list[CustomExercise]:
        self._require_init()
        return list(self._custom)

    def add_custom_exercise(self, exercise: CustomExercise) -> None:
        self._require_init()
        if _find_custom(self._custom, exercise.name) is not None:
            raise ValueError(f"Custom exercise '{exercise.name}' already exists")
        self._custom.append(exercise)


def get_default_data_dir() -> Path:
    """Return the default data directory (~/.liftquest)."""
    return Path.home() / ".liftquest"


def open_store(path: str | Path | None = None, persistent: bool = True) -> ProgressRepository:
    """
    Open a progress store.

    Args:
        path: Data directory for the file store (default: ~/.liftquest)
        persistent: False selects the in-memory store and ignores *path*

    Returns:
        ProgressRepository implementation
    """
    if not persistent:
        return MemoryProgressStore()
    return FileProgressStore(path if path is not None else get_default_data_dir())
