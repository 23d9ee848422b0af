"""Session commands: complete, skip, history."""

import json
from datetime import date, datetime
from typing import Annotated, Optional

import typer

from ...core.config import RATING_MAX, RATING_MIN
from ...core.materializer import start_workout
from ...core.metrics import attendance, progress_description
from ...core.models import Program, WorkoutSession
from ...core.progression import complete_workout, is_complete, skip_workout
from ...io.program_store import ProgramStore
from ...io.serializers import ValidationError, session_to_dict
from .. import views
from ..app import (
    DataDirOption,
    ProgramOption,
    app,
    load_program_or_exit,
    load_stats_or_exit,
    open_store,
    resume_expired_pause,
)


def _require_trainable(store: ProgramStore, program: Program, today: date) -> None:
    """
    Exit unless the program is active, not paused, and on a training day.

    A pause whose return date has arrived is resumed first. A finished
    program (final day already logged) is refused.
    """
    resume_expired_pause(store, program, today)
    if not program.is_active:
        views.print_error(f"'{program.name}' is not active")
        raise typer.Exit(1)
    if program.is_paused(today):
        views.print_error(
            f"'{program.name}' is paused until {program.paused_until.isoformat()}. Use 'resume' first."
        )
        raise typer.Exit(1)
    if program.current_day is None:
        views.print_error("The program's position does not point at a training day")
        raise typer.Exit(1)
    if is_complete(program) and _day_logged(store, program, program.current_day.id):
        views.print_error(f"'{program.name}' is finished: its final day is already logged")
        raise typer.Exit(1)


def _day_logged(store: ProgramStore, program: Program, day_id: str) -> bool:
    try:
        sessions = store.load_history(program.id)
    except ValidationError as e:
        views.print_error(str(e))
        raise typer.Exit(1)
    return any(s.program_day_id == day_id for s in sessions)


def _print_next(program: Program, was_final: bool) -> None:
    if was_final:
        views.print_info("That was the final workout of the program.")
        return
    day = program.current_day
    views.print_info(f"Next: {day.name if day else '-'} ({progress_description(program)})")


@app.command()
def complete(
    program_ref: ProgramOption = None,
    rating: Annotated[
        Optional[int],
        typer.Option("--rating", "-r", help=f"Perceived difficulty {RATING_MIN}-{RATING_MAX}"),
    ] = None,
    notes: Annotated[
        Optional[str],
        typer.Option("--notes", "-n", help="Session notes"),
    ] = None,
    data_dir: DataDirOption = None,
) -> None:
    """
    Log today's workout as done (all sets at their targets) and advance.
    """
    if rating is not None and not RATING_MIN <= rating <= RATING_MAX:
        views.print_error(f"--rating must be between {RATING_MIN} and {RATING_MAX}")
        raise typer.Exit(1)

    store = open_store(data_dir)
    program = load_program_or_exit(store, program_ref)
    now = datetime.now()
    _require_trainable(store, program, now.date())

    day = program.current_day
    session = start_workout(program, now)
    if session is None:
        # Training day without a template: record it with no sets
        session = WorkoutSession(name=day.name, start_time=now)
    for group in session.exercise_groups:
        for exercise in group.exercises:
            for logged in exercise.logged_sets:
                logged.complete(now)
    session.rating = rating
    session.notes = notes
    session.finish(now)

    was_final = is_complete(program)
    complete_workout(program, session, now)

    stats = load_stats_or_exit(store)
    stats.record_workout(now.date())

    store.append_session(session)
    store.save_program(program)
    store.save_stats(stats)

    views.print_success(
        f"Completed {day.name}: {session.completed_sets} sets. "
        f"Streak: {stats.current_streak} days"
    )
    _print_next(program, was_final)


@app.command()
def skip(
    program_ref: ProgramOption = None,
    data_dir: DataDirOption = None,
) -> None:
    """
    Skip the current training day and move to the next one.
    """
    store = open_store(data_dir)
    program = load_program_or_exit(store, program_ref)
    now = datetime.now()
    _require_trainable(store, program, now.date())

    day_name = program.current_day.name
    was_final = is_complete(program)
    session = skip_workout(program, now)

    store.append_session(session)
    store.save_program(program)

    views.print_warning(f"Skipped {day_name}")
    _print_next(program, was_final)


@app.command()
def history(
    program_ref: ProgramOption = None,
    limit: Annotated[
        Optional[int],
        typer.Option("--limit", "-l", help="Limit number of sessions to show"),
    ] = None,
    json_out: Annotated[
        bool,
        typer.Option("--json", "-j", help="Output as JSON for machine processing"),
    ] = False,
    data_dir: DataDirOption = None,
) -> None:
    """
    Display workout history (all programs unless --program is given).
    """
    store = open_store(data_dir)
    program_id = load_program_or_exit(store, program_ref).id if program_ref else None

    try:
        sessions = store.load_history(program_id)
    except (FileNotFoundError, ValidationError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    summary = attendance(sessions)
    if limit is not None:
        sessions = sessions[-limit:]

    if json_out:
        print(json.dumps([session_to_dict(s) for s in sessions], indent=2))
        return

    views.print_history(sessions, summary)
