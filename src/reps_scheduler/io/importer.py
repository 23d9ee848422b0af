"""
Program and exercise import from JSON documents.

Program documents use camelCase keys:

    {"name": "...", "description": "...", "programDetails": "...",
     "phases": [{"name": "...", "weeks": [{"weekNumber": 1, "days": [
        {"dayNumber": 1, "name": "Push", "dayType": "training",
         "workout": {"name": "...", "exerciseGroups": [
            {"type": "superset", "exercises": [
               {"exerciseRef": "Bench Press", "restSeconds": 90,
                "sets": [{"setNumber": 1, "targetReps": 8}]}]}]}}]}]}]}

Ordering: phases and groups/exercises take their array position; weeks and
days keep their own weekNumber/dayNumber, so gaps are fine.

Missing optional enumerations fall back to their defaults (training day,
single group, working set). A value that is present but not one of the
allowed ones is an error, never silently replaced.
"""

import json
import logging
from pathlib import Path
from typing import Any

from ..core.catalog import ExerciseCatalog, exercise_from_dict
from ..core.config import DEFAULT_REST_SECONDS, DEFAULT_TEMPLATE_NAME
from ..core.models import (
    DAY_TYPES,
    GROUP_TYPES,
    SET_SIDES,
    SET_TYPES,
    Exercise,
    ExerciseGroup,
    Phase,
    Program,
    ProgramDay,
    SetTemplate,
    Week,
    WorkoutExercise,
    WorkoutTemplate,
)

logger = logging.getLogger(__name__)


class ProgramImportError(Exception):
    """Base class for import failures."""

    pass


class ImportFileError(ProgramImportError):
    """The import file is missing or unreadable."""

    def __init__(self, path: str | Path, reason: str):
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"Cannot read {self.path}: {reason}")


class ImportStructureError(ProgramImportError):
    """Invalid JSON, or a required field is missing or has the wrong type."""

    def __init__(self, location: str, reason: str):
        self.location = location
        self.reason = reason
        super().__init__(f"{location}: {reason}" if location else reason)


class InvalidEnumValueError(ProgramImportError):
    """An enumeration field holds a value outside its allowed set."""

    def __init__(self, location: str, field: str, value: Any, allowed: tuple[str, ...]):
        self.location = location
        self.field = field
        self.value = value
        self.allowed = allowed
        super().__init__(
            f"{location}.{field}: invalid value {value!r}. Must be one of {', '.join(allowed)}"
        )


class UnresolvedExerciseError(ProgramImportError):
    """An exerciseRef matches no catalog exercise."""

    def __init__(self, location: str, name: str):
        self.location = location
        self.name = name
        super().__init__(f"{location}.exerciseRef: no exercise named {name!r} in the catalog")


# ---------------------------------------------------------------------------
# Field readers
# ---------------------------------------------------------------------------


def _object(value: Any, location: str) -> dict[str, Any]:
    if not isinstance(value, dict):
        raise ImportStructureError(location, f"expected an object, got {type(value).__name__}")
    return value


def _list(data: dict[str, Any], key: str, location: str, required: bool = True) -> list:
    if key not in data or data[key] is None:
        if required:
            raise ImportStructureError(location, f"missing required field '{key}'")
        return []
    value = data[key]
    if not isinstance(value, list):
        raise ImportStructureError(location, f"'{key}' must be a list")
    return value


def _str(data: dict[str, Any], key: str, location: str, required: bool = False) -> str | None:
    value = data.get(key)
    if value is None:
        if required:
            raise ImportStructureError(location, f"missing required field '{key}'")
        return None
    if not isinstance(value, str):
        raise ImportStructureError(location, f"'{key}' must be a string")
    if required and not value.strip():
        raise ImportStructureError(location, f"'{key}' must not be empty")
    return value


def _int(data: dict[str, Any], key: str, location: str, required: bool = False) -> int | None:
    value = data.get(key)
    if value is None:
        if required:
            raise ImportStructureError(location, f"missing required field '{key}'")
        return None
    # bool is an int subclass; reject it explicitly
    if isinstance(value, bool) or not isinstance(value, int):
        raise ImportStructureError(location, f"'{key}' must be an integer")
    if value < 0:
        raise ImportStructureError(location, f"'{key}' must be non-negative")
    return value


def _number(data: dict[str, Any], key: str, location: str) -> float | None:
    value = data.get(key)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ImportStructureError(location, f"'{key}' must be a number")
    if value < 0:
        raise ImportStructureError(location, f"'{key}' must be non-negative")
    return float(value)


def _choice(
    data: dict[str, Any],
    key: str,
    allowed: tuple[str, ...],
    location: str,
    default: str | None,
) -> str | None:
    value = data.get(key)
    if value is None:
        return default
    if value not in allowed:
        raise InvalidEnumValueError(location, key, value, allowed)
    return value


# ---------------------------------------------------------------------------
# Graph builders
# ---------------------------------------------------------------------------


class _ProgramBuilder:
    """Builds one Program graph; carries the catalog and import options."""

    def __init__(self, catalog: ExerciseCatalog, create_missing: bool, default_rest_seconds: int):
        self.catalog = catalog
        self.create_missing = create_missing
        self.default_rest_seconds = default_rest_seconds
        self.created: list[Exercise] = []

    def program(self, data: Any) -> Program:
        data = _object(data, "program")
        program = Program(
            name=_str(data, "name", "program", required=True).strip(),
            description=_str(data, "description", "program"),
            details=_str(data, "programDetails", "program"),
        )
        for i, raw in enumerate(_list(data, "phases", "program")):
            program.phases.append(self.phase(raw, i, f"phases[{i}]"))
        return program

    def phase(self, raw: Any, order: int, loc: str) -> Phase:
        data = _object(raw, loc)
        phase = Phase(
            name=_str(data, "name", loc, required=True),
            order=order,
            description=_str(data, "description", loc),
        )
        for i, week in enumerate(_list(data, "weeks", loc)):
            phase.weeks.append(self.week(week, f"{loc}.weeks[{i}]"))
        return phase

    def week(self, raw: Any, loc: str) -> Week:
        data = _object(raw, loc)
        week = Week(
            week_number=_int(data, "weekNumber", loc, required=True),
            notes=_str(data, "notes", loc),
        )
        for i, day in enumerate(_list(data, "days", loc)):
            week.days.append(self.day(day, f"{loc}.days[{i}]"))
        return week

    def day(self, raw: Any, loc: str) -> ProgramDay:
        data = _object(raw, loc)
        day_number = _int(data, "dayNumber", loc, required=True)
        name = _str(data, "name", loc)
        day = ProgramDay(
            day_number=day_number,
            name=name or f"Day {day_number}",
            day_type=_choice(data, "dayType", DAY_TYPES, loc, "training"),
        )
        if data.get("workout") is not None:
            day.workout_template = self.template(data["workout"], name, f"{loc}.workout")
        return day

    def template(self, raw: Any, day_name: str | None, loc: str) -> WorkoutTemplate:
        data = _object(raw, loc)
        template = WorkoutTemplate(
            name=_str(data, "name", loc) or day_name or DEFAULT_TEMPLATE_NAME,
        )
        for i, group in enumerate(_list(data, "exerciseGroups", loc)):
            template.exercise_groups.append(self.group(group, i, f"{loc}.exerciseGroups[{i}]"))
        return template

    def group(self, raw: Any, order: int, loc: str) -> ExerciseGroup:
        data = _object(raw, loc)
        group = ExerciseGroup(
            order=order,
            group_type=_choice(data, "type", GROUP_TYPES, loc, "single"),
            name=_str(data, "name", loc),
        )
        for i, exercise in enumerate(_list(data, "exercises", loc)):
            group.exercises.append(self.exercise(exercise, i, f"{loc}.exercises[{i}]"))
        return group

    def exercise(self, raw: Any, order: int, loc: str) -> WorkoutExercise:
        data = _object(raw, loc)
        rest = _int(data, "restSeconds", loc)
        is_optional = data.get("isOptional", False)
        if not isinstance(is_optional, bool):
            raise ImportStructureError(loc, "'isOptional' must be true or false")

        workout_exercise = WorkoutExercise(
            order=order,
            exercise=self.resolve(_str(data, "exerciseRef", loc, required=True).strip(), loc),
            rest_seconds=rest if rest is not None else self.default_rest_seconds,
            is_optional=is_optional,
            notes=_str(data, "notes", loc),
        )
        for i, s in enumerate(_list(data, "sets", loc)):
            workout_exercise.set_templates.append(self.set_template(s, f"{loc}.sets[{i}]"))
        return workout_exercise

    def set_template(self, raw: Any, loc: str) -> SetTemplate:
        data = _object(raw, loc)
        rpe = _int(data, "targetRPE", loc)
        if rpe is not None and not 1 <= rpe <= 10:
            raise ImportStructureError(loc, "'targetRPE' must be between 1 and 10")
        return SetTemplate(
            set_number=_int(data, "setNumber", loc, required=True),
            set_type=_choice(data, "setType", SET_TYPES, loc, "working"),
            target_reps=_int(data, "targetReps", loc),
            target_weight=_number(data, "targetWeight", loc),
            target_time=_int(data, "targetTime", loc),
            target_rpe=rpe,
            side=_choice(data, "side", SET_SIDES, loc, None),
            notes=_str(data, "notes", loc),
        )

    def resolve(self, name: str, loc: str) -> Exercise:
        found = self.catalog.find_by_name(name)
        if found is not None:
            return found
        if not self.create_missing:
            raise UnresolvedExerciseError(loc, name)
        exercise = self.catalog.create_custom(name)
        self.created.append(exercise)
        logger.info("import: created custom exercise %r (%s)", name, loc)
        return exercise


def program_from_dict(
    data: Any,
    catalog: ExerciseCatalog,
    create_missing: bool = True,
    default_rest_seconds: int = DEFAULT_REST_SECONDS,
) -> Program:
    """
    Build a new, inactive Program from a decoded import document.

    Args:
        data: Decoded JSON document
        catalog: Catalog used to resolve exerciseRef names
        create_missing: Create a custom catalog exercise for unknown
            exerciseRef names (False: raise UnresolvedExerciseError)
        default_rest_seconds: Rest for exercises without restSeconds

    Returns:
        The imported Program

    Raises:
        ImportStructureError: Missing or mistyped field
        InvalidEnumValueError: Unknown dayType / type / setType / side
        UnresolvedExerciseError: Unknown exerciseRef with create_missing=False
    """
    builder = _ProgramBuilder(catalog, create_missing, default_rest_seconds)
    try:
        program = builder.program(data)
    except ProgramImportError:
        # Leave the catalog as it was when the import fails part-way
        for exercise in builder.created:
            catalog.remove(exercise)
        raise
    logger.debug(
        "import: %r with %d phases, %d workouts", program.name, len(program.phases), program.total_workouts
    )
    return program


def _read_source(source: str | Path) -> Any:
    """Decode JSON from a file path, or from text when ``source`` looks like JSON."""
    if isinstance(source, str) and source.lstrip().startswith(("{", "[")):
        text = source
    else:
        path = Path(source)
        try:
            text = path.read_text(encoding="utf-8")
        except FileNotFoundError as e:
            raise ImportFileError(path, "file not found") from e
        except (OSError, UnicodeDecodeError) as e:
            raise ImportFileError(path, str(e)) from e
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise ImportStructureError("", f"invalid JSON at line {e.lineno}, column {e.colno}: {e.msg}") from e


def import_program(
    source: str | Path,
    catalog: ExerciseCatalog,
    create_missing: bool = True,
    default_rest_seconds: int = DEFAULT_REST_SECONDS,
) -> Program:
    """
    Import a program from a JSON file path or JSON text.

    See program_from_dict() for arguments and errors; additionally raises
    ImportFileError when the file cannot be read.
    """
    return program_from_dict(_read_source(source), catalog, create_missing, default_rest_seconds)


def load_exercise_entries(source: str | Path) -> list[dict[str, Any]]:
    """
    Read ``{"exercises": [...]}`` and return validated catalog entries.

    Keys are converted to the catalog's snake_case layout
    (muscleGroups -> muscle_groups, videoURL -> video_url, ...).

    Raises:
        ImportFileError, ImportStructureError
    """
    data = _object(_read_source(source), "document")
    entries = []
    for i, raw in enumerate(_list(data, "exercises", "document")):
        loc = f"exercises[{i}]"
        entry = _object(raw, loc)
        entries.append(
            {
                "name": _str(entry, "name", loc, required=True).strip(),
                "muscle_groups": [str(m) for m in _list(entry, "muscleGroups", loc, required=False)],
                "equipment": [str(e) for e in _list(entry, "equipment", loc, required=False)],
                "instructions": _str(entry, "instructions", loc),
                "video_url": _str(entry, "videoURL", loc),
                "image_url": _str(entry, "imageURL", loc),
            }
        )
    return entries


def apply_exercise_entries(entries: list[dict[str, Any]], catalog: ExerciseCatalog) -> list[Exercise]:
    """
    Add or update catalog exercises from entries.

    An entry whose name exactly matches (case-insensitively) an existing
    exercise updates it: non-empty lists replace the old ones and present
    text fields overwrite. Other entries are added as custom exercises.

    Returns:
        The added or updated exercises, in entry order
    """
    touched = []
    for entry in entries:
        name = entry["name"]
        existing = next((e for e in catalog if e.name.lower() == name.lower()), None)
        if existing is None:
            touched.append(catalog.add(exercise_from_dict(entry, is_custom=True)))
            logger.debug("import_exercises: added %r", name)
            continue
        if entry.get("muscle_groups"):
            existing.muscle_groups = list(entry["muscle_groups"])
        if entry.get("equipment"):
            existing.equipment = list(entry["equipment"])
        for attr in ("instructions", "video_url", "image_url"):
            if entry.get(attr) is not None:
                setattr(existing, attr, entry[attr])
        touched.append(existing)
        logger.debug("import_exercises: updated %r", name)
    return touched


def import_exercises(source: str | Path, catalog: ExerciseCatalog) -> int:
    """
    Import exercises from a JSON file path or JSON text into the catalog.

    Returns:
        Number of entries processed

    Raises:
        ImportFileError, ImportStructureError
    """
    return len(apply_exercise_entries(load_exercise_entries(source), catalog))
