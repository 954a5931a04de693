"""
Data models for liftquest.

All core dataclasses for workout records, derived statistics, levels,
achievements and challenges.  Validation of raw values happens here, at
construction time, so the engines in levels.py / achievements.py /
streaks.py / challenges.py can stay total over their inputs.
"""

import re
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Callable, Literal

ExerciseKind = Literal["preset", "custom"]
Difficulty = Literal["beginner", "intermediate", "advanced"]
AchievementCategory = Literal["beginner", "workout", "pr", "streak", "weekly", "special"]
ChallengeType = Literal["daily", "weekly"]
ChallengeCategory = Literal["volume", "frequency", "variety", "streak", "special"]
ChallengeStatus = Literal["active", "completed", "expired"]

ACHIEVEMENT_CATEGORIES: tuple[str, ...] = ("beginner", "workout", "pr", "streak", "weekly", "special")
CHALLENGE_CATEGORIES: tuple[str, ...] = ("volume", "frequency", "variety", "streak", "special")

_TIMESTAMP_RE = re.compile(r"^\d{4}-\d{2}-\d{2}(T\d{2}:\d{2}(:\d{2})?)?$")


class InvalidStatSnapshot(ValueError):
    """Raised when a UserStats snapshot carries negative or inconsistent counters."""


class InvalidChallengeTemplate(ValueError):
    """Raised when a challenge template or instance has a non-positive target."""


class ClockSkew(ValueError):
    """Raised when a challenge window ends before it starts."""


def parse_timestamp(value: str) -> datetime:
    """
    Parse a stored workout timestamp.

    Accepts ``YYYY-MM-DD``, ``YYYY-MM-DDTHH:MM`` and ``YYYY-MM-DDTHH:MM:SS``.
    A bare date is treated as local midnight.

    Raises:
        ValueError: If the string is not one of the accepted formats
    """
    if not _TIMESTAMP_RE.match(value):
        raise ValueError(
            f"Invalid timestamp: {value}. Expected YYYY-MM-DD or YYYY-MM-DDTHH:MM[:SS]"
        )
    return datetime.fromisoformat(value)


# =============================================================================
# EXERCISES
# =============================================================================


@dataclass(frozen=True)
class PresetExercise:
    """An exercise shipped in the bundled catalog."""

    name: str
    primary_muscle: str
    equipment: str
    difficulty: Difficulty = "beginner"
    kind: Literal["preset"] = "preset"


@dataclass(frozen=True)
class CustomExercise:
    """An exercise created by the user."""

    name: str
    primary_muscle: str = "other"
    equipment: str = "other"
    created_at: str = ""
    kind: Literal["custom"] = "custom"


Exercise = PresetExercise | CustomExercise


@dataclass
class ExerciseEntry:
    """
    One exercise performed inside a workout.

    ``kind`` records whether the name refers to a preset or a custom
    exercise at the time the workout was logged.
    """

    name: str
    sets: int
    reps: int  # reps per set
    weight_kg: float = 0.0
    kind: ExerciseKind = "preset"

    def __post_init__(self) -> None:
        """Validate entry data."""
        if not self.name.strip():
            raise ValueError("Exercise name must be non-empty")
        if self.sets < 0:
            raise ValueError("sets must be non-negative")
        if self.reps < 0:
            raise ValueError("reps must be non-negative")
        if self.weight_kg < 0:
            raise ValueError("weight_kg must be non-negative")
        if self.kind not in ("preset", "custom"):
            raise ValueError(f"Invalid exercise kind: {self.kind}")

    @property
    def total_reps(self) -> int:
        return self.sets * self.reps


@dataclass
class WorkoutRecord:
    """
    A completed workout.

    ``performed_at`` is an ISO timestamp (``YYYY-MM-DDTHH:MM[:SS]``) or a
    bare date when the time of day is unknown.
    """

    performed_at: str
    name: str
    duration_minutes: int = 0
    exercises: list[ExerciseEntry] = field(default_factory=list)
    notes: str | None = None

    def __post_init__(self) -> None:
        """Validate workout data."""
        parse_timestamp(self.performed_at)
        if self.duration_minutes < 0:
            raise ValueError("duration_minutes must be non-negative")

    @property
    def timestamp(self) -> datetime:
        return parse_timestamp(self.performed_at)

    @property
    def day(self) -> date:
        """Calendar day of the workout (local time)."""
        return self.timestamp.date()

    @property
    def has_time(self) -> bool:
        """True when the record carries a time of day, not just a date."""
        return "T" in self.performed_at

    @property
    def total_sets(self) -> int:
        return sum(e.sets for e in self.exercises)

    @property
    def total_reps(self) -> int:
        return sum(e.total_reps for e in self.exercises)

    @property
    def total_weight_kg(self) -> float:
        """Total lifted load: sum of weight × reps over every set."""
        return sum(e.weight_kg * e.total_reps for e in self.exercises)


@dataclass
class PersonalRecord:
    """Best-ever weight for one exercise."""

    exercise_name: str
    weight_kg: float
    date: str  # ISO YYYY-MM-DD

    def __post_init__(self) -> None:
        if self.weight_kg < 0:
            raise ValueError("weight_kg must be non-negative")
        parse_timestamp(self.date)


@dataclass
class WeightEntry:
    """A bodyweight log entry."""

    date: str  # ISO YYYY-MM-DD
    weight_kg: float
    body_fat: float | None = None

    def __post_init__(self) -> None:
        parse_timestamp(self.date)
        if self.weight_kg <= 0:
            raise ValueError("weight_kg must be positive")
        if self.body_fat is not None and not 0 <= self.body_fat <= 100:
            raise ValueError("body_fat must be a percentage between 0 and 100")


# =============================================================================
# DERIVED STATISTICS
# =============================================================================


@dataclass(frozen=True)
class UserStats:
    """
    Snapshot of user statistics evaluated by the achievement catalog.

    Computed fresh for every evaluation and never persisted.
    """

    total_workouts: int = 0
    this_week_workouts: int = 0
    total_prs: int = 0
    current_streak: int = 0
    max_streak: int = 0
    weight_logged: bool = False
    first_workout_date: date | None = None
    unique_exercises: int = 0
    total_weight: float = 0.0
    early_morning_workouts: int = 0
    late_night_workouts: int = 0
    perfect_weeks: int = 0
    # Day date-based conditions are measured against
    reference_date: date | None = None

    def __post_init__(self) -> None:
        """Reject negative counters and streaks longer than the history."""
        counters = {
            "total_workouts": self.total_workouts,
            "this_week_workouts": self.this_week_workouts,
            "total_prs": self.total_prs,
            "current_streak": self.current_streak,
            "max_streak": self.max_streak,
            "unique_exercises": self.unique_exercises,
            "total_weight": self.total_weight,
            "early_morning_workouts": self.early_morning_workouts,
            "late_night_workouts": self.late_night_workouts,
            "perfect_weeks": self.perfect_weeks,
        }
        for name, value in counters.items():
            if value < 0:
                raise InvalidStatSnapshot(f"{name} must be non-negative, got {value}")
        if max(self.current_streak, self.max_streak) > self.total_workouts:
            raise InvalidStatSnapshot(
                "streak cannot exceed the number of workouts "
                f"({max(self.current_streak, self.max_streak)} > {self.total_workouts})"
            )


@dataclass(frozen=True)
class StreakInfo:
    """Current and longest run of consecutive workout days."""

    current_streak: int
    max_streak: int


@dataclass(frozen=True)
class ChallengeCounters:
    """Live activity counters that drive challenge progress."""

    workouts_today: int = 0
    sets_today: int = 0
    exercises_today: int = 0
    pr_today: bool = False
    cardio_minutes_today: int = 0
    workouts_this_week: int = 0
    sets_this_week: int = 0
    exercises_this_week: int = 0
    streak_days: int = 0
    prs_this_week: int = 0


# =============================================================================
# LEVELS
# =============================================================================


@dataclass(frozen=True)
class UserLevel:
    """Level view-model derived from lifetime XP."""

    level: int
    current_xp: int
    xp_for_next_level: int
    total_xp: int
    progress: float  # 0-100


@dataclass(frozen=True)
class LevelReward:
    """Unlocks and bonus points granted when a level threshold is reached."""

    level: int
    unlocks: tuple[str, ...]
    points: int
    title: str | None = None


@dataclass(frozen=True)
class XPBreakdownItem:
    source: str
    amount: int


@dataclass(frozen=True)
class WorkoutXP:
    """Itemised XP award for one completed workout."""

    total: int
    breakdown: tuple[XPBreakdownItem, ...]


@dataclass(frozen=True)
class LevelUpResult:
    new_level: UserLevel
    leveled_up: bool
    levels_gained: int


# =============================================================================
# ACHIEVEMENTS
# =============================================================================


@dataclass(frozen=True)
class Achievement:
    """
    Catalog entry for an unlockable milestone.

    Catalog entries have ``unlocked_at=None``; the copies returned by
    check_achievements() carry the unlock timestamp.
    """

    id: str
    title: str
    description: str
    icon: str
    category: AchievementCategory
    condition: Callable[[UserStats], bool] = field(compare=False, repr=False)
    secret: bool = False
    unlocked_at: datetime | None = None

    def __post_init__(self) -> None:
        if self.category not in ACHIEVEMENT_CATEGORIES:
            raise ValueError(f"Invalid achievement category: {self.category}")

    @property
    def is_unlocked(self) -> bool:
        return self.unlocked_at is not None


# =============================================================================
# CHALLENGES
# =============================================================================


@dataclass(frozen=True)
class ChallengeTemplate:
    """Static blueprint from which daily/weekly challenges are generated."""

    id: str
    category: ChallengeCategory
    title: str
    description: str
    icon: str
    target: int
    points: int
    xp: int = 0

    def __post_init__(self) -> None:
        if self.target <= 0:
            raise InvalidChallengeTemplate(
                f"Challenge '{self.id}' target must be positive, got {self.target}"
            )
        if self.category not in CHALLENGE_CATEGORIES:
            raise InvalidChallengeTemplate(
                f"Challenge '{self.id}' has invalid category: {self.category}"
            )


@dataclass(frozen=True)
class Challenge:
    """
    A time-boxed goal instance.

    Status moves one way: active → completed or active → expired.
    ``completed_at`` is stamped the first time progress reaches 100 and is
    never overwritten.
    """

    id: str
    type: ChallengeType
    category: ChallengeCategory
    title: str
    description: str
    icon: str
    target: int
    start_date: datetime
    end_date: datetime
    points: int
    xp: int = 0
    current: int = 0
    progress: float = 0.0
    status: ChallengeStatus = "active"
    completed_at: datetime | None = None

    def __post_init__(self) -> None:
        """Validate challenge data."""
        if self.target <= 0:
            raise InvalidChallengeTemplate(
                f"Challenge '{self.id}' target must be positive, got {self.target}"
            )
        if self.end_date < self.start_date:
            raise ClockSkew(
                f"Challenge '{self.id}' ends ({self.end_date.isoformat()}) "
                f"before it starts ({self.start_date.isoformat()})"
            )
        if self.type not in ("daily", "weekly"):
            raise ValueError(f"Invalid challenge type: {self.type}")
        if self.status not in ("active", "completed", "expired"):
            raise ValueError(f"Invalid challenge status: {self.status}")
        if self.current < 0:
            raise ValueError("current must be non-negative")

    @property
    def is_terminal(self) -> bool:
        return self.status in ("completed", "expired")


# =============================================================================
# PERSISTED PROGRESS
# =============================================================================


@dataclass
class ProgressState:
    """
    Everything the progression layer needs to remember between runs.

    ``unlocked`` maps achievement id → unlock timestamp.
    """

    total_xp: int = 0
    unlocked: dict[str, datetime] = field(default_factory=dict)
    challenges: list[Challenge] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.total_xp < 0:
            raise ValueError("total_xp must be non-negative")
