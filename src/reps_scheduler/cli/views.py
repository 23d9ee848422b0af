"""
CLI view formatters using Rich for pretty console output.

Handles table formatting and display of programs, workouts and history.
"""

from datetime import date

from rich.console import Console
from rich.table import Table

from ..core.metrics import Attendance, completed_workouts_count, progress, progress_description
from ..core.models import (
    DAY_TYPE_NAMES,
    Exercise,
    Program,
    UserStats,
    WorkoutSession,
    WorkoutTemplate,
)
from ..core.progression import is_complete
from ..core.schedule import format_scheduled_days, is_scheduled_today, next_scheduled_date

console = Console()


def _program_state(program: Program, today: date) -> str:
    if not program.is_active:
        return "[dim]inactive[/dim]"
    if program.is_paused(today):
        return f"[yellow]paused until {program.paused_until.isoformat()}[/yellow]"
    if is_complete(program):
        return "[green]final day[/green]"
    return "[green]active[/green]"


def format_program_table(programs: list[Program], today: date) -> Table:
    """
    Create a Rich table listing programs.

    Args:
        programs: Programs to display
        today: Reference day for pause state

    Returns:
        Rich Table object
    """
    table = Table(title="Programs")

    table.add_column("#", justify="right", style="dim", width=3)
    table.add_column("Name", style="cyan")
    table.add_column("State")
    table.add_column("Position", style="magenta")
    table.add_column("Progress", justify="right")
    table.add_column("Schedule")
    table.add_column("ID", style="dim")

    for i, program in enumerate(programs, 1):
        table.add_row(
            str(i),
            program.name,
            _program_state(program, today),
            progress_description(program) if program.is_active else "-",
            f"{progress(program):.0%}",
            format_scheduled_days(program.scheduled_days) if program.is_active else "-",
            program.id[:8],
        )

    return table


def print_programs(programs: list[Program], today: date) -> None:
    if not programs:
        console.print("[yellow]No programs yet. Use 'import' or 'seed-sample'.[/yellow]")
        return
    console.print(format_program_table(programs, today))


def print_program_structure(program: Program) -> None:
    """
    Print a program's phases, weeks and days; the current day is marked.

    Args:
        program: Program to display
    """
    console.print(f"[bold cyan]{program.name}[/bold cyan]")
    if program.description:
        console.print(program.description)
    if program.details:
        console.print(f"[dim]{program.details}[/dim]")

    current = program.current_day if program.is_active else None

    for phase in program.sorted_phases:
        table = Table(title=phase.name, title_justify="left", show_header=True, header_style="dim")
        table.add_column("", width=2)
        table.add_column("Week", justify="right")
        table.add_column("Day", justify="right")
        table.add_column("Name", style="cyan")
        table.add_column("Type")
        table.add_column("Workout")
        table.add_column("Sets", justify="right")

        for week in phase.sorted_weeks:
            for day in week.sorted_days:
                template = day.workout_template
                table.add_row(
                    "[bold green]▶[/bold green]" if current is not None and day is current else "",
                    str(week.week_number),
                    str(day.day_number),
                    day.name,
                    DAY_TYPE_NAMES[day.day_type],
                    template.name if template else "-",
                    str(template.total_sets) if template else "-",
                )

        console.print()
        if phase.description:
            console.print(f"[dim]{phase.description}[/dim]")
        console.print(table)


def format_template_table(template: WorkoutTemplate) -> Table:
    """
    Create a Rich table of a workout template's groups, exercises and sets.

    Args:
        template: Template to display

    Returns:
        Rich Table object
    """
    table = Table(title=template.name)

    table.add_column("Group", style="magenta")
    table.add_column("Exercise", style="cyan")
    table.add_column("Sets")
    table.add_column("Rest", justify="right")

    for group in template.sorted_exercise_groups:
        for i, we in enumerate(group.sorted_exercises):
            sets = ", ".join(
                f"{s.display_set_number}: {s.target_description or '-'}"
                for s in we.sorted_set_templates
            )
            name = we.exercise_name + (" [dim](optional)[/dim]" if we.is_optional else "")
            table.add_row(
                group.display_name if i == 0 else "",
                name,
                sets or "-",
                f"{we.rest_seconds}s" if we.rest_seconds is not None else "-",
            )

    return table


def print_workout(program: Program, today: date) -> None:
    """
    Print what the program asks for today.

    Shows the current day's template when today is a scheduled day and the
    program is not paused; otherwise says when the next workout is.
    """
    day = program.current_day
    if program.is_paused(today):
        console.print(f"[yellow]{program.name} is paused until {program.paused_until.isoformat()}.[/yellow]")
        return
    if day is None:
        console.print("[yellow]The program's position does not point at a training day.[/yellow]")
        return
    if not is_scheduled_today(program, today):
        nxt = next_scheduled_date(program, today)
        when = nxt.strftime("%A %Y-%m-%d") if nxt else "not scheduled"
        console.print(f"Rest day. Next workout: [cyan]{day.name}[/cyan] on {when}.")
        return

    console.print(f"[bold]Today:[/bold] {day.name}  [dim]({progress_description(program)})[/dim]")
    if day.notes:
        console.print(f"[dim]{day.notes}[/dim]")
    if day.workout_template is None:
        console.print("[dim]No workout template for this day.[/dim]")
        return
    console.print(format_template_table(day.workout_template))


def format_status_display(program: Program, stats: UserStats, today: date) -> str:
    """
    Format program status as text block.

    Args:
        program: Program to describe
        stats: Current streak stats
        today: Reference day

    Returns:
        Formatted string
    """
    lines = [f"{program.name}"]
    if not program.is_active:
        lines.append("- State: inactive")
    elif program.is_paused(today):
        mode = program.pause_resume_mode or "continueWhereLeft"
        lines.append(f"- State: paused until {program.paused_until.isoformat()} (resume: {mode})")
    else:
        lines.append("- State: active")

    day = program.current_day
    lines.append(f"- Position: {progress_description(program)}" + (f" ({day.name})" if day else ""))
    lines.append(
        f"- Progress: {completed_workouts_count(program)}/{program.total_workouts} workouts"
        f" ({progress(program):.0%})"
    )

    if program.is_active:
        lines.append(f"- Schedule: {format_scheduled_days(program.scheduled_days)}")
        if program.start_date is not None:
            lines.append(f"- Started: {program.start_date.date().isoformat()}")
        nxt = next_scheduled_date(program, today)
        due = "today" if is_scheduled_today(program, today) else (nxt.isoformat() if nxt else "-")
        lines.append(f"- Next workout: {due}")

    frozen = " (frozen)" if stats.streak_frozen else ""
    lines.append(f"- Streak: {stats.current_streak} days{frozen}, longest {stats.longest_streak}")

    return "\n".join(lines)


def format_session_table(sessions: list[WorkoutSession]) -> Table:
    """
    Create a Rich table displaying session history.

    Args:
        sessions: List of sessions to display

    Returns:
        Rich Table object
    """
    table = Table(title="Workout History")

    table.add_column("#", justify="right", style="dim", width=3)
    table.add_column("Date", style="cyan")
    table.add_column("Workout", style="magenta")
    table.add_column("Status")
    table.add_column("Sets", justify="right")
    table.add_column("Volume(kg)", justify="right")
    table.add_column("Duration", justify="right")
    table.add_column("Rating", justify="right")

    for i, session in enumerate(sessions, 1):
        if session.was_skipped:
            status = "[yellow]skipped[/yellow]"
        elif session.status == "completed":
            status = "[green]completed[/green]"
        elif session.status == "cancelled":
            status = "[red]cancelled[/red]"
        else:
            status = "in progress"

        minutes = int(session.duration.total_seconds() // 60)
        table.add_row(
            str(i),
            session.start_time.strftime("%Y-%m-%d"),
            session.display_name,
            status,
            str(session.completed_sets) if not session.was_skipped else "-",
            f"{session.total_volume:.0f}" if session.total_volume > 0 else "-",
            f"{minutes} min" if session.end_time and not session.was_skipped else "-",
            str(session.rating) if session.rating is not None else "-",
        )

    return table


def print_history(sessions: list[WorkoutSession], summary: Attendance | None = None) -> None:
    """
    Print session history to console.

    Args:
        sessions: Sessions to display
        summary: Attendance counts to print under the table
    """
    if not sessions:
        console.print("[yellow]No workouts recorded yet.[/yellow]")
        return

    console.print(format_session_table(sessions))
    if summary is not None:
        console.print(
            f"Completed {summary.completed}, skipped {summary.skipped}, "
            f"cancelled {summary.cancelled} "
            f"[dim](completion {summary.completion_ratio:.0%})[/dim]"
        )


def format_exercise_table(exercises: list[Exercise]) -> Table:
    table = Table(title="Exercises")
    table.add_column("Name", style="cyan")
    table.add_column("Muscles")
    table.add_column("Equipment")
    table.add_column("", style="dim")
    for ex in exercises:
        table.add_row(
            ex.name,
            ", ".join(ex.muscle_groups) or "-",
            ", ".join(ex.equipment) or "-",
            "custom" if ex.is_custom else "",
        )
    return table


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[green]{message}[/green]")


def print_error(message: str) -> None:
    """Print an error message."""
    console.print(f"[red]Error: {message}[/red]")


def print_warning(message: str) -> None:
    """Print a warning message."""
    console.print(f"[yellow]Warning: {message}[/yellow]")


def print_info(message: str) -> None:
    """Print an info message."""
    console.print(f"[blue]{message}[/blue]")


def confirm_action(message: str) -> bool:
    """
    Prompt user for confirmation.

    Args:
        message: Confirmation message

    Returns:
        True if confirmed, False otherwise
    """
    response = console.input(f"{message} [y/N]: ")
    return response.lower() in ("y", "yes")
