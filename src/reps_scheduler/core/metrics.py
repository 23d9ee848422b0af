"""
Derived metrics over programs and session history.

Pure functions: nothing here mutates a Program or a session.
"""

import re
from dataclasses import dataclass
from datetime import date

from .models import Program, WorkoutSession


def completed_workouts_count(program: Program) -> int:
    """
    Number of training days strictly before the program's cursor.

    Args:
        program: Program to inspect

    Returns:
        Count of training days in earlier phases, earlier weeks of the
        current phase, and earlier training days of the current week
    """
    cur = program.cursor
    count = 0
    for phase_i, phase in enumerate(program.sorted_phases):
        for week_i, week in enumerate(phase.sorted_weeks):
            n_days = len(week.training_days)
            if phase_i < cur.phase_index or (
                phase_i == cur.phase_index and week_i < cur.week_index
            ):
                count += n_days
            elif phase_i == cur.phase_index and week_i == cur.week_index:
                count += min(max(cur.day_index, 0), n_days)
    return count


def progress(program: Program) -> float:
    """Fraction of the program's training days before the cursor (0.0-1.0)."""
    total = program.total_workouts
    if total == 0:
        return 0.0
    return completed_workouts_count(program) / total


_PHASE_PREFIX = re.compile(r"Phase \d+:\s*")


def progress_description(program: Program) -> str:
    """
    Human-readable position, e.g. "Foundation · Week 2, Day 3".

    A leading "Phase N:" in the phase name is dropped.
    """
    cur = program.cursor
    position = f"Week {cur.week_index + 1}, Day {cur.day_index + 1}"
    phase = program.current_phase
    if phase is None:
        return position
    return f"{_PHASE_PREFIX.sub('', phase.name)} · {position}"


@dataclass
class Attendance:
    """Session counts by outcome."""

    completed: int = 0
    skipped: int = 0
    cancelled: int = 0
    in_progress: int = 0

    @property
    def total(self) -> int:
        return self.completed + self.skipped + self.cancelled + self.in_progress

    @property
    def completion_ratio(self) -> float:
        """Completed sessions over completed + skipped (0.0 when neither)."""
        planned = self.completed + self.skipped
        return self.completed / planned if planned else 0.0


def sessions_for_program(
    history: list[WorkoutSession], program_id: str
) -> list[WorkoutSession]:
    return [s for s in history if s.program_id == program_id]


def attendance(history: list[WorkoutSession]) -> Attendance:
    """
    Count sessions by outcome.

    Skipped sessions are counted as skipped, not as cancelled, even though
    their status is "cancelled".
    """
    result = Attendance()
    for s in history:
        if s.was_skipped:
            result.skipped += 1
        elif s.status == "completed":
            result.completed += 1
        elif s.status == "cancelled":
            result.cancelled += 1
        else:
            result.in_progress += 1
    return result


def completed_days(history: list[WorkoutSession]) -> list[date]:
    """Distinct calendar days with a completed (not skipped) session, ascending."""
    days = {
        (s.end_time or s.start_time).date()
        for s in history
        if s.status == "completed" and not s.was_skipped
    }
    return sorted(days)
