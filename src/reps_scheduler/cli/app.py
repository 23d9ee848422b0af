"""Shared Typer app object, shared option types, and store utilities."""

from datetime import date
from pathlib import Path
from typing import Annotated, Optional

import typer

from ..core.catalog import load_catalog
from ..core.lifecycle import resume
from ..core.metrics import progress_description
from ..core.models import Program, UserStats
from ..io.program_store import ProgramStore, get_default_data_dir
from ..io.serializers import ValidationError
from . import views

# Shared --data-dir option type used across all commands
DataDirOption = Annotated[
    Optional[Path],
    typer.Option("--data-dir", "-D", help="Data directory (default: ~/.reps-scheduler)"),
]

# Shared --program option type used by program-scoped commands
ProgramOption = Annotated[
    Optional[str],
    typer.Option("--program", "-P", help="Program name or id (default: the active program)"),
]

app = typer.Typer(
    name="reps-scheduler",
    help="Follow multi-week training programs: schedule, pause, skip and log workouts.",
    no_args_is_help=False,
    invoke_without_command=True,
)


def get_store(data_dir: Path | None) -> ProgramStore:
    """Get a store for the given or default data directory, with its exercise catalog."""
    if data_dir is None:
        data_dir = get_default_data_dir()
    return ProgramStore(data_dir, load_catalog(data_dir))


def open_store(data_dir: Path | None) -> ProgramStore:
    """Like get_store(), but exit with an error when the store is not initialized."""
    store = get_store(data_dir)
    if not store.exists():
        views.print_error(f"No data found in {store.data_dir}")
        views.print_info("Run 'init' first.")
        raise typer.Exit(1)
    return store


def load_program_or_exit(store: ProgramStore, ref: str | None) -> Program:
    """
    Load the program named by ``ref`` (name or id), or the active program.

    Prints an error and exits when nothing matches or the data is invalid.
    """
    try:
        program = store.load_program(ref) if ref else store.active_program()
    except (FileNotFoundError, ValidationError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    if program is None:
        if ref:
            views.print_error(f"No program named or with id '{ref}'")
        else:
            views.print_error("No active program. Use 'activate' or pass --program.")
        raise typer.Exit(1)
    return program


def parse_date_option(value: str, option: str) -> date:
    """Parse a YYYY-MM-DD option value or exit with an error."""
    try:
        return date.fromisoformat(value)
    except ValueError:
        views.print_error(f"{option} must be a date in YYYY-MM-DD format, got '{value}'")
        raise typer.Exit(1)


def load_stats_or_exit(store: ProgramStore) -> UserStats:
    try:
        return store.load_stats()
    except ValidationError as e:
        views.print_error(str(e))
        raise typer.Exit(1)


def resume_expired_pause(store: ProgramStore, program: Program, today: date, announce: bool = True) -> bool:
    """
    Resume a program whose return date has arrived, applying its resume mode.

    The streak is unfrozen as of the return date, so only scheduled days from
    then on can break it. Program-scoped commands call this before acting.

    Returns:
        True if the program was resumed
    """
    if program.paused_until is None or program.is_paused(today):
        return False

    returned_on = program.paused_until
    resume(program)
    store.save_program(program)

    stats = load_stats_or_exit(store)
    stats.unfreeze(returned_on)
    store.save_stats(stats)

    if announce:
        views.print_info(f"Pause ended; '{program.name}' resumed at {progress_description(program)}.")
    return True
