"""Program commands: init, import, seed-sample, list, show, activate, deactivate, delete, exercises."""

import json
from datetime import date, datetime
from pathlib import Path
from typing import Annotated, Optional

import typer

from ...core.catalog import save_user_exercises
from ...core.config import CATALOG_FILE_NAME, DEFAULT_REST_SECONDS
from ...core.config_loader import get_setting
from ...core.lifecycle import activate, deactivate
from ...core.metrics import progress, progress_description
from ...core.samples import SAMPLE_PROGRAM_NAME, seed_sample_program
from ...core.schedule import format_scheduled_days, parse_scheduled_days
from ...io.importer import ProgramImportError, apply_exercise_entries, import_program, load_exercise_entries
from ...io.serializers import ValidationError
from .. import views
from ..app import DataDirOption, ProgramOption, app, get_store, load_program_or_exit, open_store

DaysOption = Annotated[
    str,
    typer.Option(
        "--days",
        help="Training weekdays, e.g. 'mon,wed,fri' or '1,3,5' (0=Sunday); 'daily' for every day",
    ),
]


def _parse_days_or_exit(days: str) -> frozenset[int]:
    try:
        return parse_scheduled_days(days)
    except ValueError as e:
        views.print_error(str(e))
        raise typer.Exit(1)


@app.command()
def init(data_dir: DataDirOption = None) -> None:
    """
    Create the data directory (programs/, history.jsonl).
    """
    store = get_store(data_dir)
    existed = store.exists()
    store.init()
    if existed:
        views.print_info(f"Data directory already initialized: {store.data_dir}")
    else:
        views.print_success(f"Initialized data directory: {store.data_dir}")


@app.command("import")
def import_cmd(
    file: Annotated[Path, typer.Argument(help="Program JSON file")],
    strict: Annotated[
        bool,
        typer.Option("--strict", help="Fail on unknown exercises instead of creating custom ones"),
    ] = False,
    data_dir: DataDirOption = None,
) -> None:
    """
    Import a program from a JSON file.
    """
    store = open_store(data_dir)
    create_missing = not strict and bool(get_setting("import", "create_missing_exercises", True))
    rest = int(get_setting("templates", "default_rest_seconds", DEFAULT_REST_SECONDS))
    known = {e.id for e in store.catalog}

    try:
        program = import_program(file, store.catalog, create_missing=create_missing, default_rest_seconds=rest)
    except ProgramImportError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    store.save_program(program)
    created = [e for e in store.catalog if e.id not in known]
    views.print_success(
        f"Imported '{program.name}': {len(program.phases)} phases, "
        f"{program.total_weeks} weeks, {program.total_workouts} workouts"
    )
    if created:
        save_user_exercises(created, store.data_dir / CATALOG_FILE_NAME)
        views.print_warning(
            "Created custom exercises: " + ", ".join(e.name for e in created)
        )
    views.print_info(f"Start it with: reps-scheduler activate -P \"{program.name}\"")


@app.command("import-exercises")
def import_exercises_cmd(
    file: Annotated[Path, typer.Argument(help='Exercise JSON file ({"exercises": [...]})')],
    data_dir: DataDirOption = None,
) -> None:
    """
    Add or update catalog exercises from a JSON file.
    """
    store = get_store(data_dir)
    try:
        entries = load_exercise_entries(file)
    except ProgramImportError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    touched = apply_exercise_entries(entries, store.catalog)
    path = save_user_exercises(touched, store.data_dir / CATALOG_FILE_NAME)
    views.print_success(f"Imported {len(touched)} exercises into {path}")


@app.command("seed-sample")
def seed_sample(
    days: DaysOption = "mon,tue,wed,thu,fri,sat",
    data_dir: DataDirOption = None,
) -> None:
    """
    Create and activate the sample 'Push Pull Legs' program.
    """
    store = open_store(data_dir)
    scheduled = _parse_days_or_exit(days)

    try:
        existing = store.load_program(SAMPLE_PROGRAM_NAME)
    except ValidationError as e:
        views.print_error(str(e))
        raise typer.Exit(1)
    if existing is not None:
        views.print_info(f"'{SAMPLE_PROGRAM_NAME}' already exists.")
        raise typer.Exit(0)

    program = seed_sample_program(store.catalog, scheduled_days=scheduled)
    store.save_program(program)
    views.print_success(
        f"Created and activated '{program.name}' ({program.total_workouts} workouts, "
        f"{format_scheduled_days(program.scheduled_days)})"
    )


@app.command("list")
def list_programs(
    json_out: Annotated[
        bool,
        typer.Option("--json", "-j", help="Output as JSON for machine processing"),
    ] = False,
    data_dir: DataDirOption = None,
) -> None:
    """
    List all programs.
    """
    store = open_store(data_dir)
    try:
        programs = store.list_programs()
    except ValidationError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    today = date.today()
    if json_out:
        output = [
            {
                "id": p.id,
                "name": p.name,
                "is_active": p.is_active,
                "is_paused": p.is_paused(today),
                "position": progress_description(p),
                "progress": round(progress(p), 4),
                "scheduled_days": sorted(p.scheduled_days),
            }
            for p in programs
        ]
        print(json.dumps(output, indent=2))
        return

    views.print_programs(programs, today)


@app.command()
def show(
    program_ref: ProgramOption = None,
    day_number: Annotated[
        Optional[int],
        typer.Option("--day", "-d", help="Show the workout of this day number in the current week"),
    ] = None,
    data_dir: DataDirOption = None,
) -> None:
    """
    Show a program's phases, weeks and days.
    """
    store = open_store(data_dir)
    program = load_program_or_exit(store, program_ref)

    if day_number is None:
        views.print_program_structure(program)
        return

    week = program.current_week
    day = next((d for d in week.days if d.day_number == day_number), None) if week else None
    if day is None:
        views.print_error(f"No day {day_number} in the current week")
        raise typer.Exit(1)
    if day.workout_template is None:
        views.print_info(f"{day.name}: no workout")
        return
    views.console.print(views.format_template_table(day.workout_template))


@app.command("activate")
def activate_cmd(
    program_ref: ProgramOption = None,
    days: DaysOption = "",
    phase: Annotated[int, typer.Option("--phase", help="Starting phase (1-based)")] = 1,
    week: Annotated[int, typer.Option("--week", help="Starting week within the phase (1-based)")] = 1,
    day: Annotated[int, typer.Option("--day", help="Starting training day within the week (1-based)")] = 1,
    data_dir: DataDirOption = None,
) -> None:
    """
    Start a program at the given position on the given weekdays.
    """
    store = open_store(data_dir)
    program = load_program_or_exit(store, program_ref)
    scheduled = _parse_days_or_exit(days)

    phases = program.sorted_phases
    if not 1 <= phase <= len(phases):
        views.print_error(f"--phase must be between 1 and {len(phases)}")
        raise typer.Exit(1)
    weeks = phases[phase - 1].sorted_weeks
    if not 1 <= week <= len(weeks):
        views.print_error(f"--week must be between 1 and {len(weeks)}")
        raise typer.Exit(1)
    training_days = weeks[week - 1].training_days
    if not 1 <= day <= len(training_days):
        views.print_error(f"--day must be between 1 and {len(training_days)} (training days in that week)")
        raise typer.Exit(1)

    activate(program, phase - 1, week - 1, day - 1, scheduled_days=scheduled, now=datetime.now())
    store.save_program(program)
    views.print_success(
        f"Activated '{program.name}' at {progress_description(program)} "
        f"({format_scheduled_days(program.scheduled_days)})"
    )


@app.command("deactivate")
def deactivate_cmd(
    program_ref: ProgramOption = None,
    data_dir: DataDirOption = None,
) -> None:
    """
    Stop a program; its position is kept.
    """
    store = open_store(data_dir)
    program = load_program_or_exit(store, program_ref)
    deactivate(program)
    store.save_program(program)
    views.print_success(f"Deactivated '{program.name}'")


@app.command()
def delete(
    program_ref: Annotated[str, typer.Argument(help="Program name or id")],
    force: Annotated[
        bool,
        typer.Option("--force", "-f", help="Skip confirmation prompt"),
    ] = False,
    data_dir: DataDirOption = None,
) -> None:
    """
    Delete a program. Its workout history is kept.
    """
    store = open_store(data_dir)
    program = load_program_or_exit(store, program_ref)

    if not force and not views.confirm_action(f"Delete '{program.name}'?"):
        views.print_info("Cancelled.")
        raise typer.Exit(0)

    store.delete_program(program.id)
    views.print_success(f"Deleted '{program.name}'")


@app.command()
def exercises(
    search: Annotated[Optional[str], typer.Option("--search", "-s", help="Name contains")] = None,
    muscle: Annotated[Optional[str], typer.Option("--muscle", "-m", help="Muscle group")] = None,
    equipment: Annotated[Optional[str], typer.Option("--equipment", "-e", help="Equipment")] = None,
    data_dir: DataDirOption = None,
) -> None:
    """
    List catalog exercises.
    """
    store = get_store(data_dir)
    found = store.catalog.search(search or "", muscle_group=muscle, equipment=equipment)
    if not found:
        views.print_info("No matching exercises.")
        return
    views.console.print(views.format_exercise_table(found))
