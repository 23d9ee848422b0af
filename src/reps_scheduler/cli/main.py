"""
CLI entry point using Typer.

Provides commands for following training programs:
- init / import / import-exercises / seed-sample: set up data and programs
- list / show / exercises: browse programs and the exercise catalog
- activate / deactivate / delete: manage which program is running
- status / today: where the program stands and what is due
- pause / extend-pause / resume: take a break without losing the streak
- complete / skip / history: log workouts
"""

import logging
from datetime import date
from typing import Annotated

import typer
from rich.console import Console
from rich.logging import RichHandler

from ..io.serializers import ValidationError
from . import views
from .app import DataDirOption, app, open_store
from .commands import programs, schedule, sessions  # noqa: F401  (registers commands)


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Log engine decisions to stderr"),
    ] = False,
    data_dir: DataDirOption = None,
) -> None:
    """
    Training program scheduler. Run without a command to see the active program's status.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )

    if ctx.invoked_subcommand is not None:
        return

    store = open_store(data_dir)
    try:
        program = store.active_program()
    except ValidationError as e:
        views.print_error(str(e))
        raise typer.Exit(1)
    if program is None:
        views.print_info("No active program. Use 'list', then 'activate' (or 'seed-sample').")
        raise typer.Exit(0)
    schedule.print_status(store, program, date.today())


if __name__ == "__main__":
    app()
