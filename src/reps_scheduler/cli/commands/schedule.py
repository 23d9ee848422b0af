"""Schedule commands: status, today, pause, extend-pause, resume."""

import json
from datetime import date, datetime, timedelta
from typing import Annotated, Optional

import typer

from ...core.config import DEFAULT_PAUSE_DAYS, DEFAULT_RESUME_MODE
from ...core.config_loader import get_setting
from ...core.lifecycle import extend_pause, pause, resume
from ...core.metrics import completed_workouts_count, progress, progress_description
from ...core.models import PAUSE_RESUME_MODES, Program, UserStats
from ...core.progression import is_complete
from ...core.schedule import is_scheduled_today, next_scheduled_date
from ...io.program_store import ProgramStore
from .. import views
from ..app import (
    DataDirOption,
    ProgramOption,
    app,
    load_program_or_exit,
    load_stats_or_exit,
    open_store,
    parse_date_option,
    resume_expired_pause,
)

UntilOption = Annotated[
    Optional[str],
    typer.Option("--until", "-u", help="Return date (YYYY-MM-DD)"),
]


def refresh_program_state(store: ProgramStore, program: Program, today: date, announce: bool = True) -> UserStats:
    """
    Bring a program and the streak up to date before showing them.

    An expired pause is resumed (applying its resume mode), and the streak
    is reset if a scheduled day was missed.

    Returns:
        The refreshed streak stats
    """
    resume_expired_pause(store, program, today, announce=announce)
    stats = load_stats_or_exit(store)
    if program.is_active:
        stats.check_streak_status(program.scheduled_days, today)
    store.save_stats(stats)
    return stats


def print_status(store: ProgramStore, program: Program, today: date) -> None:
    stats = refresh_program_state(store, program, today)
    views.console.print(views.format_status_display(program, stats, today))


@app.command()
def status(
    program_ref: ProgramOption = None,
    json_out: Annotated[
        bool,
        typer.Option("--json", "-j", help="Output as JSON for machine processing"),
    ] = False,
    data_dir: DataDirOption = None,
) -> None:
    """
    Show program position, progress, schedule and streak.
    """
    store = open_store(data_dir)
    program = load_program_or_exit(store, program_ref)
    today = date.today()

    if not json_out:
        print_status(store, program, today)
        return

    stats = refresh_program_state(store, program, today, announce=False)
    nxt = next_scheduled_date(program, today)
    day = program.current_day
    output = {
        "id": program.id,
        "name": program.name,
        "is_active": program.is_active,
        "paused_until": program.paused_until.isoformat() if program.paused_until else None,
        "pause_resume_mode": program.pause_resume_mode,
        "phase_index": program.current_phase_index,
        "week_index": program.current_week_index,
        "day_index": program.current_day_index,
        "current_day": day.name if day else None,
        "position": progress_description(program),
        "completed_workouts": completed_workouts_count(program),
        "total_workouts": program.total_workouts,
        "progress": round(progress(program), 4),
        "final_day": is_complete(program),
        "scheduled_days": sorted(program.scheduled_days),
        "scheduled_today": is_scheduled_today(program, today),
        "next_scheduled_date": nxt.isoformat() if nxt else None,
        "current_streak": stats.current_streak,
        "longest_streak": stats.longest_streak,
        "streak_frozen": stats.streak_frozen,
    }
    print(json.dumps(output, indent=2))


@app.command()
def today(
    program_ref: ProgramOption = None,
    data_dir: DataDirOption = None,
) -> None:
    """
    Show today's workout (or when the next one is due).
    """
    store = open_store(data_dir)
    program = load_program_or_exit(store, program_ref)
    if not program.is_active:
        views.print_error(f"'{program.name}' is not active")
        raise typer.Exit(1)

    today_ = date.today()
    refresh_program_state(store, program, today_)
    views.print_workout(program, today_)


def _resolve_until(until: str | None, days: int | None, base: date) -> date:
    if until is not None and days is not None:
        views.print_error("Use either --until or --days, not both")
        raise typer.Exit(1)
    if until is not None:
        return parse_date_option(until, "--until")
    if days is None:
        days = int(get_setting("pause", "default_days", DEFAULT_PAUSE_DAYS))
    if days < 1:
        views.print_error("--days must be at least 1")
        raise typer.Exit(1)
    return base + timedelta(days=days)


@app.command("pause")
def pause_cmd(
    program_ref: ProgramOption = None,
    until: UntilOption = None,
    days: Annotated[
        Optional[int],
        typer.Option("--days", "-n", help="Pause length in days (default from settings: 7)"),
    ] = None,
    mode: Annotated[
        Optional[str],
        typer.Option(
            "--mode",
            "-m",
            help="On resume: continueWhereLeft | restartCurrentWeek | goBackOneWeek",
        ),
    ] = None,
    data_dir: DataDirOption = None,
) -> None:
    """
    Pause a program; the streak is frozen until it resumes.
    """
    store = open_store(data_dir)
    program = load_program_or_exit(store, program_ref)
    today_ = date.today()
    resume_expired_pause(store, program, today_)
    if not program.is_active:
        views.print_error(f"'{program.name}' is not active")
        raise typer.Exit(1)

    return_date = _resolve_until(until, days, today_)
    if return_date <= today_:
        views.print_error("The return date must be after today")
        raise typer.Exit(1)

    resume_mode = mode or str(get_setting("pause", "default_resume_mode", DEFAULT_RESUME_MODE))
    if resume_mode not in PAUSE_RESUME_MODES:
        views.print_error(f"--mode must be one of: {', '.join(PAUSE_RESUME_MODES)}")
        raise typer.Exit(1)

    pause(program, return_date, resume_mode, now=datetime.now())
    store.save_program(program)

    stats = load_stats_or_exit(store)
    stats.freeze()
    store.save_stats(stats)

    views.print_success(
        f"Paused '{program.name}' until {return_date.isoformat()} (resume: {resume_mode}). Streak frozen."
    )


@app.command("extend-pause")
def extend_pause_cmd(
    program_ref: ProgramOption = None,
    until: UntilOption = None,
    days: Annotated[
        Optional[int],
        typer.Option("--days", "-n", help="Days to add to the current return date"),
    ] = None,
    data_dir: DataDirOption = None,
) -> None:
    """
    Move the return date of a paused program.
    """
    store = open_store(data_dir)
    program = load_program_or_exit(store, program_ref)
    today_ = date.today()
    resume_expired_pause(store, program, today_)
    if not program.is_paused(today_):
        views.print_error(f"'{program.name}' is not paused")
        raise typer.Exit(1)

    return_date = _resolve_until(until, days, program.paused_until)
    if return_date <= today_:
        views.print_error("The return date must be after today")
        raise typer.Exit(1)

    extend_pause(program, return_date, now=datetime.now())
    store.save_program(program)
    views.print_success(f"'{program.name}' now paused until {return_date.isoformat()}")


@app.command("resume")
def resume_cmd(
    program_ref: ProgramOption = None,
    data_dir: DataDirOption = None,
) -> None:
    """
    Resume a paused program now, applying its resume mode.
    """
    store = open_store(data_dir)
    program = load_program_or_exit(store, program_ref)
    today_ = date.today()
    if resume_expired_pause(store, program, today_):
        return
    if program.paused_until is None:
        views.print_info(f"'{program.name}' is not paused.")
        raise typer.Exit(0)

    resume(program, now=datetime.now())
    store.save_program(program)

    stats = load_stats_or_exit(store)
    stats.unfreeze(today_)
    store.save_stats(stats)

    views.print_success(f"Resumed '{program.name}' at {progress_description(program)}")
