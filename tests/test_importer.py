"""
Tests for importing programs and exercises from JSON documents.
"""

import copy
import json
import tempfile
from pathlib import Path

import pytest

from reps_scheduler.core.catalog import ExerciseCatalog
from reps_scheduler.core.models import Exercise
from reps_scheduler.io.importer import (
    ImportFileError,
    ImportStructureError,
    InvalidEnumValueError,
    ProgramImportError,
    UnresolvedExerciseError,
    apply_exercise_entries,
    import_exercises,
    import_program,
    load_exercise_entries,
    program_from_dict,
)

DOCUMENT = {
    "name": "Upper Lower",
    "description": "Four days a week",
    "programDetails": "Run for two weeks, then repeat.",
    "phases": [
        {
            "name": "Phase 1: Base",
            "weeks": [
                {
                    "weekNumber": 1,
                    "days": [
                        {
                            "dayNumber": 1,
                            "name": "Upper",
                            "workout": {
                                "exerciseGroups": [
                                    {
                                        "type": "superset",
                                        "exercises": [
                                            {
                                                "exerciseRef": "Bench Press",
                                                "restSeconds": 120,
                                                "sets": [
                                                    {"setNumber": 1, "setType": "warmup", "targetReps": 10},
                                                    {"setNumber": 2, "targetReps": 6, "targetWeight": 80, "targetRPE": 8},
                                                ],
                                            },
                                            {
                                                "exerciseRef": "Barbell Row",
                                                "isOptional": True,
                                                "sets": [{"setNumber": 1, "targetReps": 8, "side": "left"}],
                                            },
                                        ],
                                    }
                                ]
                            },
                        },
                        {"dayNumber": 2, "name": "Off", "dayType": "rest"},
                        {"dayNumber": 3, "name": "Lower"},
                    ],
                }
            ],
        }
    ],
}

SET_LOC = "phases[0].weeks[0].days[0].workout.exerciseGroups[0].exercises[0].sets[0]"


def _catalog() -> ExerciseCatalog:
    return ExerciseCatalog([Exercise(name="Bench Press"), Exercise(name="Barbell Row")])


def _document() -> dict:
    return copy.deepcopy(DOCUMENT)


def _first_set(doc: dict) -> dict:
    return doc["phases"][0]["weeks"][0]["days"][0]["workout"]["exerciseGroups"][0]["exercises"][0]["sets"][0]


class TestProgramFromDict:
    def test_builds_inactive_program(self):
        catalog = _catalog()
        program = program_from_dict(_document(), catalog)

        assert program.name == "Upper Lower"
        assert program.details == "Run for two weeks, then repeat."
        assert not program.is_active
        assert program.total_workouts == 2
        week = program.sorted_phases[0].sorted_weeks[0]
        assert [d.day_type for d in week.sorted_days] == ["training", "rest", "training"]

        template = week.sorted_days[0].workout_template
        assert template.name == "Upper"
        group = template.exercise_groups[0]
        assert group.group_type == "superset"
        bench, row = group.sorted_exercises
        assert bench.exercise is catalog.find_by_name("Bench Press")
        assert bench.rest_seconds == 120
        assert row.rest_seconds == 90
        assert row.is_optional
        assert row.set_templates[0].side == "left"
        warmup, working = bench.sorted_set_templates
        assert warmup.set_type == "warmup"
        assert working.target_weight == 80.0
        assert working.target_rpe == 8

    def test_missing_enums_take_defaults(self):
        program = program_from_dict(_document(), _catalog())
        lower = program.sorted_phases[0].sorted_weeks[0].sorted_days[2]
        assert lower.day_type == "training"
        assert lower.workout_template is None
        bench = program.sorted_phases[0].sorted_weeks[0].sorted_days[0].workout_template
        assert bench.exercise_groups[0].exercises[1].set_templates[0].set_type == "working"

    def test_default_rest_is_configurable(self):
        program = program_from_dict(_document(), _catalog(), default_rest_seconds=45)
        group = program.sorted_phases[0].sorted_weeks[0].sorted_days[0].workout_template.exercise_groups[0]
        assert group.sorted_exercises[1].rest_seconds == 45

    def test_invalid_set_type(self):
        doc = _document()
        _first_set(doc)["setType"] = "heavy"
        with pytest.raises(InvalidEnumValueError) as exc_info:
            program_from_dict(doc, _catalog())
        assert exc_info.value.location == SET_LOC
        assert exc_info.value.field == "setType"
        assert exc_info.value.value == "heavy"

    def test_invalid_day_type(self):
        doc = _document()
        doc["phases"][0]["weeks"][0]["days"][1]["dayType"] = "holiday"
        with pytest.raises(InvalidEnumValueError, match=r"days\[1\]\.dayType"):
            program_from_dict(doc, _catalog())

    def test_invalid_group_type(self):
        doc = _document()
        doc["phases"][0]["weeks"][0]["days"][0]["workout"]["exerciseGroups"][0]["type"] = "giantset"
        with pytest.raises(InvalidEnumValueError):
            program_from_dict(doc, _catalog())

    def test_missing_name(self):
        doc = _document()
        del doc["name"]
        with pytest.raises(ImportStructureError) as exc_info:
            program_from_dict(doc, _catalog())
        assert exc_info.value.location == "program"

    def test_missing_week_number(self):
        doc = _document()
        del doc["phases"][0]["weeks"][0]["weekNumber"]
        with pytest.raises(ImportStructureError, match=r"phases\[0\]\.weeks\[0\]: missing required field 'weekNumber'"):
            program_from_dict(doc, _catalog())

    def test_wrong_types(self):
        doc = _document()
        _first_set(doc)["targetReps"] = "ten"
        with pytest.raises(ImportStructureError, match="targetReps"):
            program_from_dict(doc, _catalog())

    def test_bool_is_not_an_integer(self):
        doc = _document()
        _first_set(doc)["setNumber"] = True
        with pytest.raises(ImportStructureError, match="setNumber"):
            program_from_dict(doc, _catalog())

    def test_rpe_out_of_range(self):
        doc = _document()
        _first_set(doc)["targetRPE"] = 11
        with pytest.raises(ImportStructureError, match="targetRPE"):
            program_from_dict(doc, _catalog())

    def test_phases_must_be_list(self):
        with pytest.raises(ImportStructureError, match="'phases' must be a list"):
            program_from_dict({"name": "X", "phases": {}}, _catalog())

    def test_not_an_object(self):
        with pytest.raises(ImportStructureError):
            program_from_dict([], _catalog())

    def test_all_errors_share_base_class(self):
        doc = _document()
        _first_set(doc)["side"] = "both"
        with pytest.raises(ProgramImportError):
            program_from_dict(doc, _catalog())


class TestExerciseResolution:
    def test_unknown_creates_custom(self):
        catalog = _catalog()
        doc = _document()
        doc["phases"][0]["weeks"][0]["days"][2]["workout"] = {
            "exerciseGroups": [{"exercises": [{"exerciseRef": "Sled Push"}]}]
        }
        program = program_from_dict(doc, catalog)
        sled = catalog.find_by_name("Sled Push")
        assert sled is not None and sled.is_custom
        lower = program.sorted_phases[0].sorted_weeks[0].sorted_days[2]
        assert lower.workout_template.exercise_groups[0].exercises[0].exercise is sled
        assert lower.workout_template.name == "Lower"

    def test_strict_mode_raises(self):
        doc = _document()
        doc["phases"][0]["weeks"][0]["days"][2]["workout"] = {
            "exerciseGroups": [{"exercises": [{"exerciseRef": "Sled Push"}]}]
        }
        with pytest.raises(UnresolvedExerciseError) as exc_info:
            program_from_dict(doc, _catalog(), create_missing=False)
        assert exc_info.value.name == "Sled Push"
        assert exc_info.value.location.endswith("exercises[0]")

    def test_failed_import_rolls_back_created_exercises(self):
        catalog = _catalog()
        doc = _document()
        doc["phases"][0]["weeks"][0]["days"][0]["workout"]["exerciseGroups"][0]["exercises"][0][
            "exerciseRef"
        ] = "Sled Push"
        doc["phases"][0]["weeks"][0]["days"][1]["dayType"] = "holiday"
        with pytest.raises(InvalidEnumValueError):
            program_from_dict(doc, catalog)
        assert catalog.find_by_name("Sled Push") is None
        assert len(catalog) == 2


class TestImportProgram:
    def test_from_json_text(self):
        program = import_program(json.dumps(DOCUMENT), _catalog())
        assert program.name == "Upper Lower"

    def test_from_file(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "program.json"
            path.write_text(json.dumps(DOCUMENT), encoding="utf-8")
            assert import_program(path, _catalog()).name == "Upper Lower"
            assert import_program(str(path), _catalog()).total_workouts == 2

    def test_missing_file(self):
        with pytest.raises(ImportFileError, match="file not found"):
            import_program("/nonexistent/program.json", _catalog())

    def test_invalid_json(self):
        with pytest.raises(ImportStructureError, match="invalid JSON"):
            import_program('{"name": ', _catalog())


class TestImportExercises:
    def test_adds_and_updates(self):
        catalog = _catalog()
        text = json.dumps(
            {
                "exercises": [
                    {"name": "bench press", "muscleGroups": ["chest"], "videoURL": "https://example.com/bench"},
                    {"name": "Sled Push", "equipment": ["sled"]},
                ]
            }
        )
        assert import_exercises(text, catalog) == 2
        bench = catalog.find_by_name("Bench Press")
        assert bench.muscle_groups == ["chest"]
        assert bench.video_url == "https://example.com/bench"
        assert not bench.is_custom
        sled = catalog.find_by_name("Sled Push")
        assert sled.is_custom
        assert sled.equipment == ["sled"]
        assert len(catalog) == 3

    def test_update_keeps_unlisted_fields(self):
        catalog = ExerciseCatalog([Exercise(name="Plank", muscle_groups=["core"], instructions="Hold.")])
        apply_exercise_entries(
            load_exercise_entries('{"exercises": [{"name": "Plank", "equipment": ["mat"]}]}'),
            catalog,
        )
        plank = catalog.find_by_name("Plank")
        assert plank.muscle_groups == ["core"]
        assert plank.instructions == "Hold."
        assert plank.equipment == ["mat"]

    def test_entry_without_name(self):
        with pytest.raises(ImportStructureError, match=r"exercises\[0\]"):
            load_exercise_entries('{"exercises": [{"equipment": ["mat"]}]}')

    def test_missing_exercises_key(self):
        with pytest.raises(ImportStructureError, match="exercises"):
            load_exercise_entries("{}")
