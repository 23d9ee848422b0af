"""
Sample "Push Pull Legs" program.

Two phases of two weeks each. Every week has six training days and a rest
day; weeks in the Intensification phase prescribe one extra set per exercise
at lower reps. Exercises are picked from the catalog by name keywords, and a
keyword set with no matching catalog entry is simply left out of the
template.
"""

import logging
from datetime import datetime
from typing import Iterable

from .catalog import ExerciseCatalog
from .lifecycle import activate
from .models import (
    Exercise,
    ExerciseGroup,
    Phase,
    Program,
    ProgramDay,
    SetTemplate,
    Week,
    WorkoutExercise,
    WorkoutTemplate,
)

logger = logging.getLogger(__name__)

SAMPLE_PROGRAM_NAME = "Push Pull Legs"
SAMPLE_DAY_NAMES = ("Push A", "Pull A", "Legs A", "Push B", "Pull B", "Legs B", "Rest")

# Every keyword in a tuple must appear in the exercise name
_FAMILY_KEYWORDS: dict[str, tuple[tuple[str, ...], ...]] = {
    "push": (
        ("bench press",),
        ("overhead press",),
        ("incline", "dumbbell"),
        ("lateral raise",),
        ("tricep",),
    ),
    "pull": (
        ("barbell", "row"),
        ("pulldown",),
        ("cable", "row"),
        ("face pull",),
        ("dumbbell", "curl"),
    ),
    "legs": (
        ("barbell", "squat"),
        ("romanian",),
        ("leg press",),
        ("leg curl",),
        ("calf",),
    ),
}

# family -> (rest seconds, reps foundation, reps intensified)
_FAMILY_PRESCRIPTION: dict[str, tuple[int, int, int]] = {
    "push": (90, 10, 8),
    "pull": (90, 10, 8),
    "legs": (120, 8, 6),
}


def _family(day_name: str) -> str:
    if day_name.startswith("Push"):
        return "push"
    if day_name.startswith("Pull"):
        return "pull"
    return "legs"


def _pick(catalog: ExerciseCatalog, keywords: tuple[str, ...]) -> Exercise | None:
    for exercise in catalog:
        name = exercise.name.lower()
        if all(k in name for k in keywords):
            return exercise
    return None


def _build_template(catalog: ExerciseCatalog, day_name: str, intensified: bool) -> WorkoutTemplate:
    family = _family(day_name)
    rest, reps, reps_intensified = _FAMILY_PRESCRIPTION[family]
    set_count = 4 if intensified else 3

    template = WorkoutTemplate(
        name=day_name,
        description=f"{family.capitalize()} workout",
        estimated_duration=60,
    )
    for keywords in _FAMILY_KEYWORDS[family]:
        exercise = _pick(catalog, keywords)
        if exercise is None:
            continue
        sets = [
            SetTemplate(
                set_number=n,
                set_type="warmup" if n == 1 else "working",
                target_reps=reps_intensified if intensified else reps,
            )
            for n in range(1, set_count + 1)
        ]
        template.exercise_groups.append(
            ExerciseGroup(
                order=len(template.exercise_groups),
                exercises=[
                    WorkoutExercise(order=0, exercise=exercise, rest_seconds=rest, set_templates=sets)
                ],
            )
        )
    return template


def _build_week(catalog: ExerciseCatalog, week_number: int, intensified: bool, notes: str | None = None) -> Week:
    week = Week(week_number=week_number, notes=notes)
    for i, day_name in enumerate(SAMPLE_DAY_NAMES, start=1):
        if day_name == "Rest":
            week.days.append(ProgramDay(day_number=i, name=day_name, day_type="rest"))
            continue
        week.days.append(
            ProgramDay(
                day_number=i,
                name=day_name,
                workout_template=_build_template(catalog, day_name, intensified),
            )
        )
    return week


def build_push_pull_legs(catalog: ExerciseCatalog) -> Program:
    """
    Build the (inactive) sample program from catalog exercises.

    Args:
        catalog: Catalog to pick exercises from

    Returns:
        A new Program: Foundation (weeks 1-2) and Intensification (weeks 3-4)
    """
    foundation = Phase(
        name="Foundation",
        order=0,
        description="Build a base with moderate volume",
        weeks=[_build_week(catalog, n, intensified=False) for n in (1, 2)],
    )
    intensification = Phase(
        name="Intensification",
        order=1,
        description="Increase intensity with progressive overload",
        weeks=[
            _build_week(catalog, 3, intensified=True),
            _build_week(catalog, 4, intensified=True, notes="Deload if needed"),
        ],
    )
    return Program(
        name=SAMPLE_PROGRAM_NAME,
        description=(
            "A classic 6-day split focusing on pushing movements, pulling movements, "
            "and leg exercises. Each muscle group is trained twice per week."
        ),
        phases=[foundation, intensification],
    )


def seed_sample_program(
    catalog: ExerciseCatalog,
    scheduled_days: Iterable[int] = (1, 2, 3, 4, 5, 6),
    now: datetime | None = None,
) -> Program:
    """
    Build the sample program and activate it at its first training day.

    Args:
        catalog: Catalog to pick exercises from
        scheduled_days: Weekday indices (0=Sunday); default Monday-Saturday
        now: Activation time (default: current time)

    Returns:
        The active sample Program
    """
    program = build_push_pull_legs(catalog)
    if program.total_workouts and not any(
        d.workout_template and d.workout_template.exercise_groups
        for p in program.phases
        for w in p.weeks
        for d in w.days
    ):
        logger.warning("seed_sample_program: catalog matched no sample exercises")
    activate(program, scheduled_days=scheduled_days, now=now)
    logger.info("seed_sample_program: created %r", program.name)
    return program
