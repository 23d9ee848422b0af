"""
Data models for reps-scheduler.

All core dataclasses representing programs, workout templates and sessions.

Ownership is strictly top-down: a Program owns its Phases, a Phase its
Weeks, a Week its Days, a Day its optional WorkoutTemplate, and so on down
to SetTemplates. Children never hold a reference to their parent; use
Program.locate_day() for the reverse lookup. Sessions point back at the plan
through ids only. Catalog Exercises are shared by reference and never owned.
"""

import uuid
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Literal

from .config import EPLEY_DIVISOR, QUICK_WORKOUT_NAME, RATING_MAX, RATING_MIN

DayType = Literal["training", "rest", "activeRecovery", "deload"]
GroupType = Literal["single", "superset", "triset", "circuit", "zone"]
SetType = Literal["warmup", "working", "dropset", "failure", "amrap", "restPause"]
SetSide = Literal["left", "right"]
WorkoutStatus = Literal["inProgress", "completed", "cancelled"]
PauseResumeMode = Literal["continueWhereLeft", "restartCurrentWeek", "goBackOneWeek"]

DAY_TYPES: tuple[str, ...] = ("training", "rest", "activeRecovery", "deload")
GROUP_TYPES: tuple[str, ...] = ("single", "superset", "triset", "circuit", "zone")
SET_TYPES: tuple[str, ...] = ("warmup", "working", "dropset", "failure", "amrap", "restPause")
SET_SIDES: tuple[str, ...] = ("left", "right")
WORKOUT_STATUSES: tuple[str, ...] = ("inProgress", "completed", "cancelled")
PAUSE_RESUME_MODES: tuple[str, ...] = (
    "continueWhereLeft",
    "restartCurrentWeek",
    "goBackOneWeek",
)

DAY_TYPE_NAMES: dict[str, str] = {
    "training": "Training",
    "rest": "Rest",
    "activeRecovery": "Active Recovery",
    "deload": "Deload",
}

SET_TYPE_SHORT_NAMES: dict[str, str] = {
    "warmup": "W",
    "working": "",
    "dropset": "D",
    "failure": "F",
    "amrap": "A",
    "restPause": "RP",
}

# Left before right, bilateral last
_SIDE_ORDER: dict[str | None, int] = {"left": 0, "right": 1, None: 2}


def new_id() -> str:
    """Return a fresh random identifier."""
    return uuid.uuid4().hex


def _check_choice(value: str | None, allowed: tuple[str, ...], name: str) -> None:
    if value is not None and value not in allowed:
        raise ValueError(f"Invalid {name}: {value!r}. Must be one of {allowed}")


def _check_non_negative(value: int | float | None, name: str) -> None:
    if value is not None and value < 0:
        raise ValueError(f"{name} must be non-negative")


def _format_seconds(seconds: int) -> str:
    mins, secs = divmod(seconds, 60)
    if mins > 0:
        return f"{mins}:{secs:02d}"
    return f"{secs}s"


@dataclass
class Exercise:
    """
    A catalog exercise.

    Templates and sessions refer to the same Exercise object; it is never
    copied when a session is built from a template.
    """

    name: str
    muscle_groups: list[str] = field(default_factory=list)
    equipment: list[str] = field(default_factory=list)
    instructions: str | None = None
    video_url: str | None = None
    image_url: str | None = None
    is_custom: bool = False
    id: str = field(default_factory=new_id)

    def __post_init__(self) -> None:
        if not self.name or not self.name.strip():
            raise ValueError("Exercise name must be a non-empty string")

    @property
    def primary_muscle(self) -> str | None:
        return self.muscle_groups[0] if self.muscle_groups else None

    @property
    def primary_equipment(self) -> str | None:
        return self.equipment[0] if self.equipment else None


@dataclass
class SetTemplate:
    """A prescribed set inside a workout template."""

    set_number: int
    set_type: SetType = "working"
    target_reps: int | None = None
    target_weight: float | None = None
    target_distance: float | None = None  # meters
    target_time: int | None = None  # seconds
    target_rpe: int | None = None  # 1-10
    side: SetSide | None = None  # None = bilateral
    notes: str | None = None
    id: str = field(default_factory=new_id)

    def __post_init__(self) -> None:
        """Validate set template data."""
        _check_choice(self.set_type, SET_TYPES, "set_type")
        _check_choice(self.side, SET_SIDES, "side")
        _check_non_negative(self.target_reps, "target_reps")
        _check_non_negative(self.target_weight, "target_weight")
        _check_non_negative(self.target_distance, "target_distance")
        _check_non_negative(self.target_time, "target_time")

    @property
    def display_set_number(self) -> str:
        """Short set-type prefix (e.g. "W"), or the set number for working sets."""
        return SET_TYPE_SHORT_NAMES[self.set_type] or str(self.set_number)

    @property
    def target_description(self) -> str:
        """Human-readable target, e.g. "8 reps × 60 kg"."""
        parts: list[str] = []
        if self.target_reps is not None:
            parts.append(f"{self.target_reps} reps")
        if self.target_weight is not None:
            parts.append(f"{self.target_weight:g} kg")
        if self.target_time is not None:
            parts.append(_format_seconds(self.target_time))
        if self.target_distance is not None:
            parts.append(f"{self.target_distance:g}m")
        return " × ".join(parts)


@dataclass
class LoggedSet:
    """
    A set as performed inside a workout session.

    Mirrors SetTemplate's identity fields; the performance fields are filled
    in (or overwritten) by the user while training.
    """

    set_number: int
    set_type: SetType = "working"
    side: SetSide | None = None
    is_completed: bool = False
    completed_at: datetime | None = None
    reps: int | None = None
    weight: float | None = None  # kg
    distance: float | None = None  # meters
    time: int | None = None  # seconds
    rpe: int | None = None
    previous_reps: int | None = None
    previous_weight: float | None = None
    notes: str | None = None
    id: str = field(default_factory=new_id)

    def __post_init__(self) -> None:
        """Validate logged set data."""
        _check_choice(self.set_type, SET_TYPES, "set_type")
        _check_choice(self.side, SET_SIDES, "side")
        _check_non_negative(self.reps, "reps")
        _check_non_negative(self.weight, "weight")
        _check_non_negative(self.distance, "distance")
        _check_non_negative(self.time, "time")

    @property
    def display_set_number(self) -> str:
        return SET_TYPE_SHORT_NAMES[self.set_type] or str(self.set_number)

    @property
    def volume(self) -> float:
        """weight × reps, or 0 when either is missing."""
        if self.weight is None or self.reps is None:
            return 0.0
        return self.weight * self.reps

    @property
    def estimated_1rm(self) -> float | None:
        """Epley one-rep-max estimate."""
        if self.weight is None or self.reps is None or self.reps <= 0:
            return None
        if self.reps == 1:
            return self.weight
        return self.weight * (1 + self.reps / EPLEY_DIVISOR)

    def complete(self, now: datetime | None = None) -> None:
        self.is_completed = True
        self.completed_at = now or datetime.now()

    def uncomplete(self) -> None:
        self.is_completed = False
        self.completed_at = None


def _set_sort_key(s: SetTemplate | LoggedSet) -> tuple[int, int]:
    return (s.set_number, _SIDE_ORDER[s.side])


@dataclass
class WorkoutExercise:
    """
    One exercise slot in a group.

    In templates it owns SetTemplates; in sessions it owns LoggedSets.
    """

    order: int
    exercise: Exercise | None = None
    rest_seconds: int | None = 90
    is_optional: bool = False
    notes: str | None = None
    set_templates: list[SetTemplate] = field(default_factory=list)
    logged_sets: list[LoggedSet] = field(default_factory=list)
    id: str = field(default_factory=new_id)

    def __post_init__(self) -> None:
        _check_non_negative(self.rest_seconds, "rest_seconds")

    @property
    def sorted_set_templates(self) -> list[SetTemplate]:
        return sorted(self.set_templates, key=_set_sort_key)

    @property
    def sorted_logged_sets(self) -> list[LoggedSet]:
        return sorted(self.logged_sets, key=_set_sort_key)

    @property
    def completed_sets(self) -> int:
        return sum(1 for s in self.logged_sets if s.is_completed)

    @property
    def total_sets(self) -> int:
        return max(len(self.set_templates), len(self.logged_sets))

    @property
    def is_fully_completed(self) -> bool:
        return bool(self.logged_sets) and all(s.is_completed for s in self.logged_sets)

    @property
    def exercise_name(self) -> str:
        return self.exercise.name if self.exercise is not None else "Unknown exercise"


@dataclass
class ExerciseGroup:
    """A single exercise, superset, triset, circuit or named zone."""

    order: int
    group_type: GroupType = "single"
    name: str | None = None
    notes: str | None = None
    exercises: list[WorkoutExercise] = field(default_factory=list)
    id: str = field(default_factory=new_id)

    def __post_init__(self) -> None:
        _check_choice(self.group_type, GROUP_TYPES, "group_type")

    @property
    def sorted_exercises(self) -> list[WorkoutExercise]:
        return sorted(self.exercises, key=lambda e: e.order)

    @property
    def is_superset(self) -> bool:
        return self.group_type in ("superset", "triset", "circuit")

    @property
    def display_name(self) -> str:
        if self.name:
            return self.name
        if self.group_type == "superset":
            return "Superset"
        if self.group_type == "triset":
            return "Tri-set"
        if self.group_type == "circuit":
            return "Circuit"
        if self.group_type == "zone":
            return "Zone"
        if self.group_type == "single":
            return ""
        raise ValueError(f"Invalid group_type: {self.group_type!r}")


@dataclass
class WorkoutTemplate:
    """Reusable exercise/set plan for a training day."""

    name: str
    description: str | None = None
    estimated_duration: int | None = None  # minutes
    exercise_groups: list[ExerciseGroup] = field(default_factory=list)
    created_at: datetime = field(default_factory=datetime.now)
    id: str = field(default_factory=new_id)

    @property
    def sorted_exercise_groups(self) -> list[ExerciseGroup]:
        return sorted(self.exercise_groups, key=lambda g: g.order)

    @property
    def total_exercises(self) -> int:
        return sum(len(g.exercises) for g in self.exercise_groups)

    @property
    def total_sets(self) -> int:
        return sum(
            len(e.set_templates) for g in self.exercise_groups for e in g.exercises
        )


@dataclass
class ProgramDay:
    """
    One day of a program week.

    Only training days take part in cursor positioning; rest, active
    recovery and deload days are skipped.
    """

    day_number: int
    name: str
    day_type: DayType = "training"
    notes: str | None = None
    workout_template: WorkoutTemplate | None = None
    id: str = field(default_factory=new_id)

    def __post_init__(self) -> None:
        _check_choice(self.day_type, DAY_TYPES, "day_type")

    @property
    def is_training(self) -> bool:
        return self.day_type == "training"


@dataclass
class Week:
    week_number: int
    notes: str | None = None
    days: list[ProgramDay] = field(default_factory=list)
    id: str = field(default_factory=new_id)

    @property
    def sorted_days(self) -> list[ProgramDay]:
        return sorted(self.days, key=lambda d: d.day_number)

    @property
    def training_days(self) -> list[ProgramDay]:
        """Training-typed days in day_number order (what day_index counts)."""
        return [d for d in self.sorted_days if d.is_training]


@dataclass
class Phase:
    name: str
    order: int
    description: str | None = None
    weeks: list[Week] = field(default_factory=list)
    id: str = field(default_factory=new_id)

    @property
    def sorted_weeks(self) -> list[Week]:
        return sorted(self.weeks, key=lambda w: w.week_number)


@dataclass(frozen=True)
class Cursor:
    """
    A position inside a program: (phase, week, training day) indices.

    Immutable; moving the cursor means assigning a new Cursor to
    Program.cursor so all three indices change together.
    """

    phase_index: int = 0
    week_index: int = 0
    day_index: int = 0

    def __str__(self) -> str:
        return f"P{self.phase_index + 1} W{self.week_index + 1} D{self.day_index + 1}"


def normalize_scheduled_days(days) -> frozenset[int]:
    """
    Convert an iterable of weekday indices (0 = Sunday) to a frozenset.

    Duplicates collapse; an empty result means "every day".

    Raises:
        ValueError: If any value is outside 0-6
    """
    result = frozenset(int(d) for d in days)
    bad = sorted(d for d in result if d < 0 or d > 6)
    if bad:
        raise ValueError(f"Weekday values must be 0-6 (0=Sunday), got {bad}")
    return result


@dataclass
class Program:
    """
    A complete, user-assignable training plan plus its progression state.

    Cursor, schedule and pause fields should only be changed through the
    functions in lifecycle.py and progression.py.
    """

    name: str
    description: str | None = None
    details: str | None = None
    phases: list[Phase] = field(default_factory=list)
    is_active: bool = False
    start_date: datetime | None = None
    scheduled_days: frozenset[int] = field(default_factory=frozenset)
    cursor: Cursor = field(default_factory=Cursor)
    paused_until: date | None = None
    pause_resume_mode: PauseResumeMode | None = None
    created_at: datetime = field(default_factory=datetime.now)
    updated_at: datetime = field(default_factory=datetime.now)
    id: str = field(default_factory=new_id)

    def __post_init__(self) -> None:
        """Validate program data."""
        if not self.name or not self.name.strip():
            raise ValueError("Program name must be a non-empty string")
        self.scheduled_days = normalize_scheduled_days(self.scheduled_days)
        _check_choice(self.pause_resume_mode, PAUSE_RESUME_MODES, "pause_resume_mode")

    # -- cursor mirrors -------------------------------------------------------

    @property
    def current_phase_index(self) -> int:
        return self.cursor.phase_index

    @property
    def current_week_index(self) -> int:
        return self.cursor.week_index

    @property
    def current_day_index(self) -> int:
        return self.cursor.day_index

    # -- projections ----------------------------------------------------------

    @property
    def sorted_phases(self) -> list[Phase]:
        return sorted(self.phases, key=lambda p: p.order)

    @property
    def current_phase(self) -> Phase | None:
        phases = self.sorted_phases
        i = self.cursor.phase_index
        return phases[i] if 0 <= i < len(phases) else None

    @property
    def current_week(self) -> Week | None:
        phase = self.current_phase
        if phase is None:
            return None
        weeks = phase.sorted_weeks
        i = self.cursor.week_index
        return weeks[i] if 0 <= i < len(weeks) else None

    @property
    def current_day(self) -> ProgramDay | None:
        week = self.current_week
        if week is None:
            return None
        days = week.training_days
        i = self.cursor.day_index
        return days[i] if 0 <= i < len(days) else None

    @property
    def current_workout_template(self) -> WorkoutTemplate | None:
        day = self.current_day
        return day.workout_template if day is not None else None

    @property
    def total_weeks(self) -> int:
        return sum(len(p.weeks) for p in self.phases)

    @property
    def total_workouts(self) -> int:
        """Number of training days across the whole program."""
        return sum(
            1 for p in self.phases for w in p.weeks for d in w.days if d.is_training
        )

    def is_paused(self, today: date | None = None) -> bool:
        """True while paused_until lies in the future."""
        if self.paused_until is None:
            return False
        return self.paused_until > (today or date.today())

    # -- lookup-only back references ------------------------------------------

    def locate_day(self, day_id: str) -> tuple[Phase, Week, ProgramDay] | None:
        """Return the (phase, week, day) containing the given day id, or None."""
        for phase in self.phases:
            for week in phase.weeks:
                for day in week.days:
                    if day.id == day_id:
                        return phase, week, day
        return None

    def find_day(self, day_id: str) -> ProgramDay | None:
        found = self.locate_day(day_id)
        return found[2] if found is not None else None


@dataclass
class WorkoutSession:
    """
    A concrete record of one performed or skipped workout.

    Owns its exercise groups outright; refers to the plan (program, day,
    template) by id only, so later edits to the plan never alter history.
    """

    name: str | None = None
    start_time: datetime = field(default_factory=datetime.now)
    end_time: datetime | None = None
    status: WorkoutStatus = "inProgress"
    was_skipped: bool = False
    rating: int | None = None  # 1-10 perceived difficulty
    notes: str | None = None
    program_id: str | None = None
    program_day_id: str | None = None
    template_id: str | None = None
    exercise_groups: list[ExerciseGroup] = field(default_factory=list)
    id: str = field(default_factory=new_id)

    def __post_init__(self) -> None:
        """Validate session data."""
        _check_choice(self.status, WORKOUT_STATUSES, "status")
        if self.rating is not None and not RATING_MIN <= self.rating <= RATING_MAX:
            raise ValueError(f"rating must be between {RATING_MIN} and {RATING_MAX}")

    @property
    def display_name(self) -> str:
        return self.name or QUICK_WORKOUT_NAME

    @property
    def duration(self) -> timedelta:
        end = self.end_time or datetime.now()
        return end - self.start_time

    @property
    def sorted_exercise_groups(self) -> list[ExerciseGroup]:
        return sorted(self.exercise_groups, key=lambda g: g.order)

    def _all_exercises(self) -> list[WorkoutExercise]:
        return [e for g in self.exercise_groups for e in g.exercises]

    @property
    def total_volume(self) -> float:
        """Sum of weight × reps over completed sets."""
        return sum(
            s.volume for e in self._all_exercises() for s in e.logged_sets if s.is_completed
        )

    @property
    def completed_sets(self) -> int:
        return sum(e.completed_sets for e in self._all_exercises())

    @property
    def total_exercises(self) -> int:
        return len(self._all_exercises())

    @property
    def completed_exercises(self) -> int:
        return sum(1 for e in self._all_exercises() if e.is_fully_completed)

    def finish(self, now: datetime | None = None) -> None:
        self.end_time = now or datetime.now()
        self.status = "completed"

    def cancel(self, now: datetime | None = None) -> None:
        self.end_time = now or datetime.now()
        self.status = "cancelled"


@dataclass
class UserStats:
    """
    Workout streak bookkeeping.

    A streak counts consecutive calendar days with a completed workout.
    Freezing (while a program is paused) keeps a gap from resetting it.
    Unfreezing records the day training resumed; days before it never
    count as missed.
    """

    current_streak: int = 0
    longest_streak: int = 0
    last_workout_date: date | None = None
    streak_frozen: bool = False
    resumed_on: date | None = None

    def _streak_anchor(self) -> date | None:
        """The last day that keeps the streak alive: a workout, or the eve of a resume."""
        if self.last_workout_date is None:
            return None
        if self.resumed_on is None:
            return self.last_workout_date
        return max(self.last_workout_date, self.resumed_on - timedelta(days=1))

    def record_workout(self, on: date | None = None) -> None:
        """Register a completed workout on the given day."""
        day = on or date.today()
        anchor = self._streak_anchor()

        if anchor is None:
            self.current_streak = 1
        else:
            gap = (day - anchor).days
            if gap == 1:
                self.current_streak += 1
            elif gap > 1 and not self.streak_frozen:
                self.current_streak = 1
            # gap <= 0: same day (or inside a pause), streak unchanged

        self.longest_streak = max(self.longest_streak, self.current_streak)
        self.last_workout_date = day
        self.streak_frozen = False
        self.resumed_on = None

    def freeze(self) -> None:
        self.streak_frozen = True

    def unfreeze(self, on: date | None = None) -> None:
        """Thaw the streak; training is expected again from ``on`` (default today)."""
        if self.streak_frozen:
            self.resumed_on = on or date.today()
        self.streak_frozen = False

    def check_streak_status(self, scheduled_days, today: date | None = None) -> None:
        """
        Break the streak if yesterday was a scheduled day without a workout.

        An empty scheduled_days means every day is scheduled. Days before
        the streak was last unfrozen are not checked.
        """
        anchor = self._streak_anchor()
        if self.streak_frozen or anchor is None:
            return
        yesterday = (today or date.today()) - timedelta(days=1)
        yesterday_weekday = (yesterday.weekday() + 1) % 7  # 0 = Sunday
        scheduled = not scheduled_days or yesterday_weekday in scheduled_days
        if scheduled and anchor < yesterday:
            self.current_streak = 0
