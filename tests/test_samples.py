"""
Tests for the bundled Push Pull Legs sample program.
"""

import tempfile
from datetime import datetime
from pathlib import Path

import pytest

from reps_scheduler.core.catalog import ExerciseCatalog, load_catalog
from reps_scheduler.core.materializer import start_workout
from reps_scheduler.core.models import Cursor
from reps_scheduler.core.samples import (
    SAMPLE_PROGRAM_NAME,
    build_push_pull_legs,
    seed_sample_program,
)

NOW = datetime(2024, 1, 1, 6, 0)


@pytest.fixture(scope="module")
def catalog():
    with tempfile.TemporaryDirectory() as tmpdir:
        yield load_catalog(Path(tmpdir))


class TestBuildPushPullLegs:
    def test_shape(self, catalog):
        program = build_push_pull_legs(catalog)
        assert program.name == SAMPLE_PROGRAM_NAME
        assert [p.name for p in program.sorted_phases] == ["Foundation", "Intensification"]
        assert program.total_weeks == 4
        assert all(len(w.days) == 7 for p in program.phases for w in p.weeks)
        assert program.total_workouts == 24
        assert not program.is_active

    def test_rest_day_has_no_template(self, catalog):
        week = build_push_pull_legs(catalog).sorted_phases[0].sorted_weeks[0]
        rest = week.sorted_days[-1]
        assert rest.day_type == "rest"
        assert rest.workout_template is None
        assert len(week.training_days) == 6

    def test_every_template_uses_five_exercises(self, catalog):
        program = build_push_pull_legs(catalog)
        for phase in program.phases:
            for week in phase.weeks:
                for day in week.training_days:
                    assert day.workout_template.total_exercises == 5, day.name

    def test_intensified_weeks_add_a_set(self, catalog):
        program = build_push_pull_legs(catalog)
        foundation, intensification = program.sorted_phases
        base = foundation.sorted_weeks[0].training_days[0].workout_template
        heavy = intensification.sorted_weeks[0].training_days[0].workout_template
        assert base.total_sets == 15
        assert heavy.total_sets == 20
        first = heavy.sorted_exercise_groups[0].exercises[0].sorted_set_templates
        assert first[0].set_type == "warmup"
        assert all(s.target_reps == 8 for s in first)

    def test_templates_share_catalog_exercises(self, catalog):
        program = build_push_pull_legs(catalog)
        template = program.sorted_phases[0].sorted_weeks[0].training_days[0].workout_template
        bench = template.sorted_exercise_groups[0].exercises[0].exercise
        assert bench is catalog.find_by_name("Bench Press")

    def test_last_week_notes(self, catalog):
        program = build_push_pull_legs(catalog)
        assert program.sorted_phases[1].sorted_weeks[1].notes == "Deload if needed"

    def test_empty_catalog_gives_empty_templates(self):
        program = build_push_pull_legs(ExerciseCatalog())
        assert program.total_workouts == 24
        day = program.sorted_phases[0].sorted_weeks[0].training_days[0]
        assert day.workout_template.exercise_groups == []


class TestSeedSampleProgram:
    def test_activates_at_first_day(self, catalog):
        program = seed_sample_program(catalog, now=NOW)
        assert program.is_active
        assert program.cursor == Cursor(0, 0, 0)
        assert program.start_date == NOW
        assert program.scheduled_days == frozenset({1, 2, 3, 4, 5, 6})
        assert program.current_day.name == "Push A"

    def test_first_session_is_loggable(self, catalog):
        program = seed_sample_program(catalog, scheduled_days=(), now=NOW)
        session = start_workout(program, NOW)
        assert session.name == "Push Pull Legs · W1D1"
        assert len(session.exercise_groups) == 5
        assert program.scheduled_days == frozenset()
