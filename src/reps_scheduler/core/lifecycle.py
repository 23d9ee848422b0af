"""
Program lifecycle: activation, deactivation, pause and resume.

These functions, together with progression.advance/complete_workout/
skip_workout, are the only sanctioned way to change a program's cursor,
schedule and pause state.
"""

import logging
from datetime import date, datetime
from typing import Iterable

from .models import PAUSE_RESUME_MODES, Cursor, PauseResumeMode, Program, normalize_scheduled_days

logger = logging.getLogger(__name__)


def activate(
    program: Program,
    phase_index: int = 0,
    week_index: int = 0,
    day_index: int = 0,
    scheduled_days: Iterable[int] = (),
    now: datetime | None = None,
) -> None:
    """
    Make a program active at the given position.

    The position is taken as given; callers are responsible for passing
    indices that resolve (an unresolvable cursor makes later advancement a
    no-op rather than an error).

    Args:
        program: Program to activate
        phase_index: Starting phase index (0-based, in phase order)
        week_index: Starting week index within that phase
        day_index: Starting training-day index within that week
        scheduled_days: Weekday indices (0=Sunday); empty means every day
        now: Activation time (default: current time)

    Raises:
        ValueError: If a weekday value is outside 0-6
    """
    days = normalize_scheduled_days(scheduled_days)
    now = now or datetime.now()

    program.is_active = True
    program.start_date = now
    program.cursor = Cursor(phase_index, week_index, day_index)
    program.scheduled_days = days
    program.paused_until = None
    program.pause_resume_mode = None
    program.updated_at = now
    logger.debug("activate: %r at %s", program.name, program.cursor)


def deactivate(program: Program, now: datetime | None = None) -> None:
    """
    Deactivate a program and clear any pause.

    The cursor is kept, so re-activating later can continue from the same place.
    """
    program.is_active = False
    program.paused_until = None
    program.pause_resume_mode = None
    program.updated_at = now or datetime.now()
    logger.debug("deactivate: %r", program.name)


def pause(
    program: Program,
    until: date,
    resume_mode: PauseResumeMode,
    now: datetime | None = None,
) -> None:
    """
    Pause a program until the given date.

    Args:
        program: Program to pause
        until: Return date
        resume_mode: Policy applied to the cursor when resuming
        now: Timestamp for updated_at (default: current time)

    Raises:
        ValueError: If resume_mode is not a known mode
    """
    if resume_mode not in PAUSE_RESUME_MODES:
        raise ValueError(
            f"Invalid resume mode: {resume_mode!r}. Must be one of {PAUSE_RESUME_MODES}"
        )
    program.paused_until = until
    program.pause_resume_mode = resume_mode
    program.updated_at = now or datetime.now()
    logger.debug("pause: %r until %s (%s)", program.name, until, resume_mode)


def extend_pause(program: Program, new_until: date, now: datetime | None = None) -> None:
    """Move the return date of a pause; the resume mode is left as it was."""
    program.paused_until = new_until
    program.updated_at = now or datetime.now()
    logger.debug("extend_pause: %r until %s", program.name, new_until)


def resume_cursor(program: Program, mode: PauseResumeMode) -> Cursor:
    """
    Compute where a program resumes under the given policy.

    - continueWhereLeft: same position
    - restartCurrentWeek: first training day of the current week
    - goBackOneWeek: first training day of the previous week, crossing into
      the last week of the previous phase if needed; at the very first week
      of the first phase the position does not change

    Raises:
        ValueError: If mode is not a known resume mode
    """
    cur = program.cursor

    if mode == "continueWhereLeft":
        return cur

    if mode == "restartCurrentWeek":
        return Cursor(cur.phase_index, cur.week_index, 0)

    if mode == "goBackOneWeek":
        if cur.week_index > 0:
            return Cursor(cur.phase_index, cur.week_index - 1, 0)
        if cur.phase_index > 0:
            phase_index = cur.phase_index - 1
            phases = program.sorted_phases
            week_count = len(phases[phase_index].weeks) if phase_index < len(phases) else 0
            return Cursor(phase_index, max(0, week_count - 1), 0)
        return cur

    raise ValueError(f"Invalid resume mode: {mode!r}. Must be one of {PAUSE_RESUME_MODES}")


def resume(program: Program, now: datetime | None = None) -> None:
    """
    Resume a paused program immediately.

    Applies the stored resume mode (if any) to the cursor, then clears the
    pause. Without a stored mode only paused_until is cleared.
    """
    now = now or datetime.now()
    mode = program.pause_resume_mode

    if mode is None:
        program.paused_until = None
        program.updated_at = now
        logger.debug("resume: %r (no resume mode)", program.name)
        return

    target = resume_cursor(program, mode)
    logger.debug("resume: %r %s -> %s (%s)", program.name, program.cursor, target, mode)
    program.cursor = target
    program.paused_until = None
    program.pause_resume_mode = None
    program.updated_at = now
