"""
Session materialization: turning a workout template into a loggable session.

A session gets its own groups, exercises and sets. Nothing below the
template level is shared, so the user can edit reps and weights freely
without touching the template every future session is built from. Only the
catalog Exercise objects are shared.
"""

import logging
from datetime import datetime

from .models import (
    ExerciseGroup,
    LoggedSet,
    Program,
    ProgramDay,
    SetTemplate,
    WorkoutExercise,
    WorkoutSession,
    WorkoutTemplate,
)

logger = logging.getLogger(__name__)


def _logged_set_from(template_set: SetTemplate) -> LoggedSet:
    """Build an uncompleted LoggedSet pre-filled from a SetTemplate."""
    return LoggedSet(
        set_number=template_set.set_number,
        set_type=template_set.set_type,
        side=template_set.side,
        reps=template_set.target_reps,
        time=template_set.target_time,
    )


def _session_exercise_from(template_exercise: WorkoutExercise) -> WorkoutExercise:
    return WorkoutExercise(
        order=template_exercise.order,
        exercise=template_exercise.exercise,
        rest_seconds=template_exercise.rest_seconds,
        is_optional=template_exercise.is_optional,
        notes=template_exercise.notes,
        logged_sets=[_logged_set_from(s) for s in template_exercise.sorted_set_templates],
    )


def _session_group_from(template_group: ExerciseGroup) -> ExerciseGroup:
    return ExerciseGroup(
        order=template_group.order,
        group_type=template_group.group_type,
        name=template_group.name,
        notes=template_group.notes,
        exercises=[_session_exercise_from(e) for e in template_group.sorted_exercises],
    )


def default_session_name(program: Program | None, day: ProgramDay | None) -> str | None:
    """
    Default session name: "<program> · W<week>D<day>".

    Returns None when the day cannot be located inside the program.
    """
    if program is None or day is None:
        return None
    found = program.locate_day(day.id)
    if found is None:
        return None
    _, week, located = found
    return f"{program.name} · W{week.week_number}D{located.day_number}"


def materialize_session(
    template: WorkoutTemplate,
    *,
    program: Program | None = None,
    day: ProgramDay | None = None,
    name: str | None = None,
    now: datetime | None = None,
) -> WorkoutSession:
    """
    Build an independent, in-progress session from a workout template.

    Args:
        template: Template to copy (not modified)
        program: Program the session belongs to, if any
        day: Program day the session is for, if any
        name: Explicit session name (default: program/week/day label, or
            the template name)
        now: Session start time (default: current time)

    Returns:
        A new WorkoutSession whose groups, exercises and sets are all fresh
        objects; each exercise still points at the same catalog Exercise
    """
    session = WorkoutSession(
        name=name or default_session_name(program, day) or template.name,
        start_time=now or datetime.now(),
        program_id=program.id if program is not None else None,
        program_day_id=day.id if day is not None else None,
        template_id=template.id,
        exercise_groups=[_session_group_from(g) for g in template.sorted_exercise_groups],
    )
    logger.debug(
        "materialize_session: %r -> %d groups, %d sets",
        template.name,
        len(session.exercise_groups),
        sum(len(e.logged_sets) for g in session.exercise_groups for e in g.exercises),
    )
    return session


def start_workout(program: Program, now: datetime | None = None) -> WorkoutSession | None:
    """
    Materialize the session for the program's current day.

    Returns:
        The new session, or None when there is no current day or the day has
        no workout template
    """
    day = program.current_day
    if day is None or day.workout_template is None:
        return None
    return materialize_session(day.workout_template, program=program, day=day, now=now)
