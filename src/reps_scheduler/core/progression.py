"""
Cursor advancement: moving a program forward as workouts are completed or skipped.

The cursor walks training days within a week, then weeks within a phase,
then phases. When nothing is left to move to, the program is complete and
the cursor stays on the final training day; further calls are no-ops.

Invalid positions (a phase or week index that no longer resolves, e.g. after
the plan was edited) are never "repaired" here: every operation simply
leaves the program untouched.
"""

import logging
from datetime import datetime

from .models import Cursor, Program, WorkoutSession

logger = logging.getLogger(__name__)


def next_cursor(program: Program) -> Cursor | None:
    """
    Compute the position following the program's current one.

    Args:
        program: Program to inspect (not modified)

    Returns:
        The next Cursor, or None when the current phase/week does not
        resolve or the program is already at its final training day
    """
    cur = program.cursor
    phase = program.current_phase
    if phase is None:
        return None

    weeks = phase.sorted_weeks
    if not 0 <= cur.week_index < len(weeks):
        return None

    training_days = weeks[cur.week_index].training_days

    if cur.day_index + 1 < len(training_days):
        return Cursor(cur.phase_index, cur.week_index, cur.day_index + 1)

    if cur.week_index + 1 < len(weeks):
        return Cursor(cur.phase_index, cur.week_index + 1, 0)

    if cur.phase_index + 1 < len(program.phases):
        return Cursor(cur.phase_index + 1, 0, 0)

    return None


def advance(program: Program, now: datetime | None = None) -> bool:
    """
    Move the program to its next training day.

    Args:
        program: Program to advance
        now: Timestamp for updated_at (default: current time)

    Returns:
        True if the cursor moved, False if this was a no-op
    """
    target = next_cursor(program)
    if target is None:
        logger.debug("advance: %r stays at %s", program.name, program.cursor)
        return False

    logger.debug("advance: %r %s -> %s", program.name, program.cursor, target)
    program.cursor = target
    program.updated_at = now or datetime.now()
    return True


def is_complete(program: Program) -> bool:
    """
    True when the program sits on its final training day.

    A program whose cursor does not resolve to a day is not considered
    complete, it is just stuck.
    """
    return program.current_day is not None and next_cursor(program) is None


def complete_workout(
    program: Program,
    session: WorkoutSession,
    now: datetime | None = None,
) -> None:
    """
    Record which plan day a finished session belongs to, then advance.

    The session is bound to the program's current day before the cursor
    moves, so history keeps pointing at the day that was actually trained.

    Args:
        program: Program the session was performed for
        session: Session to bind (its status is not changed here)
        now: Timestamp for updated_at (default: current time)
    """
    day = program.current_day
    session.program_id = program.id
    session.program_day_id = day.id if day is not None else None
    advance(program, now)


def skip_workout(program: Program, now: datetime | None = None) -> WorkoutSession | None:
    """
    Skip the current training day.

    Creates a cancelled, skipped session for the current day (so streak and
    attendance views keep a continuous record) and advances the cursor
    exactly like advance() would. The caller stores the returned session.

    Args:
        program: Program whose current day is skipped
        now: Timestamp for the session and updated_at (default: current time)

    Returns:
        The skipped-workout record, or None when the cursor does not
        resolve to a day (nothing is recorded and nothing moves)
    """
    day = program.current_day
    if day is None:
        logger.info("skip_workout: %r has no current day; nothing to skip", program.name)
        return None

    now = now or datetime.now()
    session = WorkoutSession(
        name=day.name,
        start_time=now,
        end_time=now,
        status="cancelled",
        was_skipped=True,
        program_id=program.id,
        program_day_id=day.id,
        template_id=day.workout_template.id if day.workout_template is not None else None,
    )
    logger.debug("skip_workout: %r skipped %r", program.name, day.name)
    advance(program, now)
    return session
