"""
JSON serialization for programs, sessions and streak stats.

Handles conversion between dataclasses and JSON-compatible dicts. Exercises
are written by name (plus id) and resolved against an ExerciseCatalog when
read back, so a stored program always points at live catalog objects.
"""

import json
import re
from datetime import date, datetime
from typing import Any

from ..core.catalog import ExerciseCatalog
from ..core.models import (
    Cursor,
    Exercise,
    ExerciseGroup,
    LoggedSet,
    Phase,
    Program,
    ProgramDay,
    SetTemplate,
    UserStats,
    Week,
    WorkoutExercise,
    WorkoutSession,
    WorkoutTemplate,
)


class ValidationError(Exception):
    """Raised when stored data fails validation."""

    pass


# ---------------------------------------------------------------------------
# Scalars
# ---------------------------------------------------------------------------


def validate_date(date_str: str) -> date:
    """
    Parse an ISO YYYY-MM-DD string.

    Raises:
        ValidationError: If the format or the date itself is invalid
    """
    if not isinstance(date_str, str) or not re.match(r"^\d{4}-\d{2}-\d{2}$", date_str):
        raise ValidationError(f"Invalid date format: {date_str}. Expected YYYY-MM-DD")
    try:
        return datetime.strptime(date_str, "%Y-%m-%d").date()
    except ValueError as e:
        raise ValidationError(f"Invalid date: {date_str}") from e


def validate_timestamp(value: str) -> datetime:
    """
    Parse an ISO 8601 timestamp.

    Raises:
        ValidationError: If the value is not a valid timestamp
    """
    try:
        return datetime.fromisoformat(value)
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Invalid timestamp: {value!r}") from e


def _opt_date(value: Any) -> date | None:
    return validate_date(value) if value is not None else None


def _opt_timestamp(value: Any) -> datetime | None:
    return validate_timestamp(value) if value is not None else None


def _iso(value: date | datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def _require(data: dict[str, Any], key: str, what: str) -> Any:
    if not isinstance(data, dict):
        raise ValidationError(f"{what} must be an object, got {type(data).__name__}")
    if key not in data:
        raise ValidationError(f"{what} missing required field '{key}'")
    return data[key]


def _id_kwargs(data: Any, what: str) -> dict[str, Any]:
    """Check that data is an object and return its stored id as constructor kwargs."""
    if not isinstance(data, dict):
        raise ValidationError(f"{what} must be an object, got {type(data).__name__}")
    return {"id": str(data["id"])} if data.get("id") else {}


def _build(cls, what: str, **kwargs):
    """Construct a model, turning its ValueError into a ValidationError."""
    try:
        return cls(**kwargs)
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Invalid {what}: {e}") from e


# ---------------------------------------------------------------------------
# Exercise references
# ---------------------------------------------------------------------------


def exercise_ref_to_dict(exercise: Exercise | None) -> dict[str, Any] | None:
    if exercise is None:
        return None
    return {"id": exercise.id, "name": exercise.name}


def resolve_exercise_ref(data: dict[str, Any] | None, catalog: ExerciseCatalog) -> Exercise | None:
    """
    Resolve a stored exercise reference against the catalog.

    Lookup order: id, exact name, then a new custom catalog entry carrying
    the stored id and name.
    """
    if data is None:
        return None
    name = _require(data, "name", "exercise")
    ex_id = data.get("id")
    if ex_id:
        found = catalog.get(ex_id)
        if found is not None:
            return found
    for exercise in catalog:
        if exercise.name.lower() == str(name).lower():
            return exercise
    if ex_id:
        return catalog.add(_build(Exercise, "exercise", name=str(name), is_custom=True, id=ex_id))
    return catalog.create_custom(str(name))


# ---------------------------------------------------------------------------
# Sets, exercises, groups
# ---------------------------------------------------------------------------


def set_template_to_dict(s: SetTemplate) -> dict[str, Any]:
    return {
        "id": s.id,
        "set_number": s.set_number,
        "set_type": s.set_type,
        "target_reps": s.target_reps,
        "target_weight": s.target_weight,
        "target_distance": s.target_distance,
        "target_time": s.target_time,
        "target_rpe": s.target_rpe,
        "side": s.side,
        "notes": s.notes,
    }


def dict_to_set_template(data: dict[str, Any]) -> SetTemplate:
    kwargs = _id_kwargs(data, "set template")
    return _build(
        SetTemplate,
        "set template",
        set_number=int(_require(data, "set_number", "set template")),
        set_type=data.get("set_type", "working"),
        target_reps=data.get("target_reps"),
        target_weight=data.get("target_weight"),
        target_distance=data.get("target_distance"),
        target_time=data.get("target_time"),
        target_rpe=data.get("target_rpe"),
        side=data.get("side"),
        notes=data.get("notes"),
        **kwargs,
    )


def logged_set_to_dict(s: LoggedSet) -> dict[str, Any]:
    return {
        "id": s.id,
        "set_number": s.set_number,
        "set_type": s.set_type,
        "side": s.side,
        "is_completed": s.is_completed,
        "completed_at": _iso(s.completed_at),
        "reps": s.reps,
        "weight": s.weight,
        "distance": s.distance,
        "time": s.time,
        "rpe": s.rpe,
        "previous_reps": s.previous_reps,
        "previous_weight": s.previous_weight,
        "notes": s.notes,
    }


def dict_to_logged_set(data: dict[str, Any]) -> LoggedSet:
    kwargs = _id_kwargs(data, "logged set")
    return _build(
        LoggedSet,
        "logged set",
        set_number=int(_require(data, "set_number", "logged set")),
        set_type=data.get("set_type", "working"),
        side=data.get("side"),
        is_completed=bool(data.get("is_completed", False)),
        completed_at=_opt_timestamp(data.get("completed_at")),
        reps=data.get("reps"),
        weight=data.get("weight"),
        distance=data.get("distance"),
        time=data.get("time"),
        rpe=data.get("rpe"),
        previous_reps=data.get("previous_reps"),
        previous_weight=data.get("previous_weight"),
        notes=data.get("notes"),
        **kwargs,
    )


def workout_exercise_to_dict(e: WorkoutExercise) -> dict[str, Any]:
    data: dict[str, Any] = {
        "id": e.id,
        "order": e.order,
        "exercise": exercise_ref_to_dict(e.exercise),
        "rest_seconds": e.rest_seconds,
        "is_optional": e.is_optional,
        "notes": e.notes,
    }
    # Compact: templates carry set_templates, sessions carry logged_sets
    if e.set_templates:
        data["set_templates"] = [set_template_to_dict(s) for s in e.sorted_set_templates]
    if e.logged_sets:
        data["logged_sets"] = [logged_set_to_dict(s) for s in e.sorted_logged_sets]
    return data


def dict_to_workout_exercise(data: dict[str, Any], catalog: ExerciseCatalog) -> WorkoutExercise:
    kwargs = _id_kwargs(data, "workout exercise")
    return _build(
        WorkoutExercise,
        "workout exercise",
        order=int(_require(data, "order", "workout exercise")),
        exercise=resolve_exercise_ref(data.get("exercise"), catalog),
        rest_seconds=data.get("rest_seconds"),
        is_optional=bool(data.get("is_optional", False)),
        notes=data.get("notes"),
        set_templates=[dict_to_set_template(s) for s in data.get("set_templates", [])],
        logged_sets=[dict_to_logged_set(s) for s in data.get("logged_sets", [])],
        **kwargs,
    )


def exercise_group_to_dict(g: ExerciseGroup) -> dict[str, Any]:
    return {
        "id": g.id,
        "order": g.order,
        "group_type": g.group_type,
        "name": g.name,
        "notes": g.notes,
        "exercises": [workout_exercise_to_dict(e) for e in g.sorted_exercises],
    }


def dict_to_exercise_group(data: dict[str, Any], catalog: ExerciseCatalog) -> ExerciseGroup:
    kwargs = _id_kwargs(data, "exercise group")
    return _build(
        ExerciseGroup,
        "exercise group",
        order=int(_require(data, "order", "exercise group")),
        group_type=data.get("group_type", "single"),
        name=data.get("name"),
        notes=data.get("notes"),
        exercises=[dict_to_workout_exercise(e, catalog) for e in data.get("exercises", [])],
        **kwargs,
    )


# ---------------------------------------------------------------------------
# Program graph
# ---------------------------------------------------------------------------


def workout_template_to_dict(t: WorkoutTemplate) -> dict[str, Any]:
    return {
        "id": t.id,
        "name": t.name,
        "description": t.description,
        "estimated_duration": t.estimated_duration,
        "created_at": _iso(t.created_at),
        "exercise_groups": [exercise_group_to_dict(g) for g in t.sorted_exercise_groups],
    }


def dict_to_workout_template(data: dict[str, Any], catalog: ExerciseCatalog) -> WorkoutTemplate:
    kwargs: dict[str, Any] = _id_kwargs(data, "workout template")
    if data.get("created_at"):
        kwargs["created_at"] = validate_timestamp(data["created_at"])
    return _build(
        WorkoutTemplate,
        "workout template",
        name=str(_require(data, "name", "workout template")),
        description=data.get("description"),
        estimated_duration=data.get("estimated_duration"),
        exercise_groups=[dict_to_exercise_group(g, catalog) for g in data.get("exercise_groups", [])],
        **kwargs,
    )


def program_day_to_dict(d: ProgramDay) -> dict[str, Any]:
    return {
        "id": d.id,
        "day_number": d.day_number,
        "name": d.name,
        "day_type": d.day_type,
        "notes": d.notes,
        "workout_template": (
            workout_template_to_dict(d.workout_template) if d.workout_template else None
        ),
    }


def dict_to_program_day(data: dict[str, Any], catalog: ExerciseCatalog) -> ProgramDay:
    kwargs = _id_kwargs(data, "program day")
    template = data.get("workout_template")
    return _build(
        ProgramDay,
        "program day",
        day_number=int(_require(data, "day_number", "program day")),
        name=str(_require(data, "name", "program day")),
        day_type=data.get("day_type", "training"),
        notes=data.get("notes"),
        workout_template=dict_to_workout_template(template, catalog) if template else None,
        **kwargs,
    )


def week_to_dict(w: Week) -> dict[str, Any]:
    return {
        "id": w.id,
        "week_number": w.week_number,
        "notes": w.notes,
        "days": [program_day_to_dict(d) for d in w.sorted_days],
    }


def dict_to_week(data: dict[str, Any], catalog: ExerciseCatalog) -> Week:
    kwargs = _id_kwargs(data, "week")
    return _build(
        Week,
        "week",
        week_number=int(_require(data, "week_number", "week")),
        notes=data.get("notes"),
        days=[dict_to_program_day(d, catalog) for d in data.get("days", [])],
        **kwargs,
    )


def phase_to_dict(p: Phase) -> dict[str, Any]:
    return {
        "id": p.id,
        "name": p.name,
        "order": p.order,
        "description": p.description,
        "weeks": [week_to_dict(w) for w in p.sorted_weeks],
    }


def dict_to_phase(data: dict[str, Any], catalog: ExerciseCatalog) -> Phase:
    kwargs = _id_kwargs(data, "phase")
    return _build(
        Phase,
        "phase",
        name=str(_require(data, "name", "phase")),
        order=int(_require(data, "order", "phase")),
        description=data.get("description"),
        weeks=[dict_to_week(w, catalog) for w in data.get("weeks", [])],
        **kwargs,
    )


def program_to_dict(program: Program) -> dict[str, Any]:
    """
    Convert a Program and its whole plan graph to a JSON-compatible dict.

    Args:
        program: Program to convert

    Returns:
        Dict representation
    """
    cur = program.cursor
    return {
        "id": program.id,
        "name": program.name,
        "description": program.description,
        "details": program.details,
        "is_active": program.is_active,
        "start_date": _iso(program.start_date),
        "scheduled_days": sorted(program.scheduled_days),
        "cursor": {
            "phase_index": cur.phase_index,
            "week_index": cur.week_index,
            "day_index": cur.day_index,
        },
        "paused_until": _iso(program.paused_until),
        "pause_resume_mode": program.pause_resume_mode,
        "created_at": _iso(program.created_at),
        "updated_at": _iso(program.updated_at),
        "phases": [phase_to_dict(p) for p in program.sorted_phases],
    }


def dict_to_program(data: dict[str, Any], catalog: ExerciseCatalog) -> Program:
    """
    Convert a dict to a Program.

    Args:
        data: Dict representation
        catalog: Catalog used to resolve exercise references; unknown
            exercises are added to it as custom entries

    Returns:
        Program instance

    Raises:
        ValidationError: If data is invalid
    """
    name = _require(data, "name", "program")
    raw_cursor = data.get("cursor") or {}
    try:
        cursor = Cursor(
            int(raw_cursor.get("phase_index", 0)),
            int(raw_cursor.get("week_index", 0)),
            int(raw_cursor.get("day_index", 0)),
        )
    except (TypeError, ValueError, AttributeError) as e:
        raise ValidationError(f"Invalid cursor: {raw_cursor!r}") from e

    kwargs: dict[str, Any] = _id_kwargs(data, "program")
    if data.get("created_at"):
        kwargs["created_at"] = validate_timestamp(data["created_at"])
    if data.get("updated_at"):
        kwargs["updated_at"] = validate_timestamp(data["updated_at"])

    return _build(
        Program,
        "program",
        name=str(name),
        description=data.get("description"),
        details=data.get("details"),
        phases=[dict_to_phase(p, catalog) for p in data.get("phases", [])],
        is_active=bool(data.get("is_active", False)),
        start_date=_opt_timestamp(data.get("start_date")),
        scheduled_days=data.get("scheduled_days") or [],
        cursor=cursor,
        paused_until=_opt_date(data.get("paused_until")),
        pause_resume_mode=data.get("pause_resume_mode"),
        **kwargs,
    )


# ---------------------------------------------------------------------------
# Sessions
# ---------------------------------------------------------------------------


def session_to_dict(session: WorkoutSession) -> dict[str, Any]:
    """
    Convert a WorkoutSession to a JSON-compatible dict.

    Args:
        session: Session to convert

    Returns:
        Dict representation
    """
    return {
        "id": session.id,
        "name": session.name,
        "start_time": _iso(session.start_time),
        "end_time": _iso(session.end_time),
        "status": session.status,
        "was_skipped": session.was_skipped,
        "rating": session.rating,
        "notes": session.notes,
        "program_id": session.program_id,
        "program_day_id": session.program_day_id,
        "template_id": session.template_id,
        "exercise_groups": [exercise_group_to_dict(g) for g in session.sorted_exercise_groups],
    }


def dict_to_session(data: dict[str, Any], catalog: ExerciseCatalog) -> WorkoutSession:
    """
    Convert a dict to a WorkoutSession.

    Raises:
        ValidationError: If data is invalid
    """
    kwargs = _id_kwargs(data, "session")
    return _build(
        WorkoutSession,
        "session",
        name=data.get("name"),
        start_time=validate_timestamp(_require(data, "start_time", "session")),
        end_time=_opt_timestamp(data.get("end_time")),
        status=data.get("status", "inProgress"),
        was_skipped=bool(data.get("was_skipped", False)),
        rating=data.get("rating"),
        notes=data.get("notes"),
        program_id=data.get("program_id"),
        program_day_id=data.get("program_day_id"),
        template_id=data.get("template_id"),
        exercise_groups=[dict_to_exercise_group(g, catalog) for g in data.get("exercise_groups", [])],
        **kwargs,
    )


def session_to_json_line(session: WorkoutSession) -> str:
    """
    Convert a session to a compact JSON line.

    Args:
        session: Session to convert

    Returns:
        JSON string (no trailing newline)
    """
    return json.dumps(session_to_dict(session), separators=(",", ":"))


def json_line_to_session(line: str, catalog: ExerciseCatalog) -> WorkoutSession:
    """
    Parse a JSON line to a WorkoutSession.

    Raises:
        ValidationError: If the line is not valid JSON or not a valid session
    """
    try:
        data = json.loads(line.strip())
    except json.JSONDecodeError as e:
        raise ValidationError(f"Invalid JSON: {e}") from e
    return dict_to_session(data, catalog)


# ---------------------------------------------------------------------------
# Streak stats
# ---------------------------------------------------------------------------


def user_stats_to_dict(stats: UserStats) -> dict[str, Any]:
    return {
        "current_streak": stats.current_streak,
        "longest_streak": stats.longest_streak,
        "last_workout_date": _iso(stats.last_workout_date),
        "streak_frozen": stats.streak_frozen,
        "resumed_on": _iso(stats.resumed_on),
    }


def dict_to_user_stats(data: dict[str, Any]) -> UserStats:
    """
    Convert a dict to UserStats; missing fields take their defaults.

    Raises:
        ValidationError: If a value has the wrong type
    """
    if not isinstance(data, dict):
        raise ValidationError("stats must be an object")
    try:
        current = int(data.get("current_streak", 0))
        longest = int(data.get("longest_streak", 0))
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Invalid streak value: {e}") from e
    if current < 0 or longest < 0:
        raise ValidationError("streak values must be non-negative")
    return UserStats(
        current_streak=current,
        longest_streak=longest,
        last_workout_date=_opt_date(data.get("last_workout_date")),
        streak_frozen=bool(data.get("streak_frozen", False)),
        resumed_on=_opt_date(data.get("resumed_on")),
    )
