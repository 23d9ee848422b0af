"""
Smoke tests for the reps-scheduler CLI.

Tests basic functionality:
- Data directory initializes
- Sample program seeds and activates
- Workouts can be completed and skipped
- Pause / resume move the position as configured
- An expired pause resumes before any command acts, keeping the streak
- Programs and exercises import from JSON
"""

import json
import tempfile
from datetime import date, timedelta
from pathlib import Path

import pytest
import yaml
from typer.testing import CliRunner

from reps_scheduler.cli.app import get_store
from reps_scheduler.cli.main import app
from reps_scheduler.core.models import UserStats

runner = CliRunner()

PROGRAM_DOC = {
    "name": "Two Day",
    "phases": [
        {
            "name": "Base",
            "weeks": [
                {
                    "weekNumber": 1,
                    "days": [
                        {
                            "dayNumber": 1,
                            "name": "Full Body",
                            "workout": {
                                "exerciseGroups": [
                                    {
                                        "exercises": [
                                            {
                                                "exerciseRef": "Deadlift",
                                                "sets": [{"setNumber": 1, "targetReps": 5}],
                                            }
                                        ]
                                    }
                                ]
                            },
                        },
                        {"dayNumber": 2, "name": "Conditioning"},
                    ],
                },
                {"weekNumber": 2, "days": [{"dayNumber": 1, "name": "Test Day"}]},
            ],
        }
    ],
}


@pytest.fixture
def data_dir(monkeypatch):
    """Create a temporary data directory; user settings are read from it too."""
    with tempfile.TemporaryDirectory() as tmpdir:
        monkeypatch.setenv("REPS_SCHEDULER_HOME", tmpdir)
        yield Path(tmpdir)


def _invoke(data_dir: Path, *args: str):
    return runner.invoke(app, [*args, "--data-dir", str(data_dir)])


def _init(data_dir: Path) -> None:
    result = _invoke(data_dir, "init")
    assert result.exit_code == 0, result.output


def _seed(data_dir: Path) -> None:
    _init(data_dir)
    result = _invoke(data_dir, "seed-sample", "--days", "daily")
    assert result.exit_code == 0, result.output


def _status(data_dir: Path, *extra: str) -> dict:
    result = _invoke(data_dir, "status", "--json", *extra)
    assert result.exit_code == 0, result.output
    return json.loads(result.output)


def _history(data_dir: Path) -> list[dict]:
    result = _invoke(data_dir, "history", "--json")
    assert result.exit_code == 0, result.output
    return json.loads(result.output)


def _write_program(data_dir: Path, doc: dict) -> Path:
    path = data_dir / "program.json"
    path.write_text(json.dumps(doc), encoding="utf-8")
    return path


def _move_return_date(data_dir: Path, return_date: date) -> None:
    """Rewrite the active program's stored return date, as if time had passed."""
    store = get_store(data_dir)
    program = store.active_program()
    program.paused_until = return_date
    store.save_program(program)


class TestCLISmoke:
    """Basic smoke tests for CLI commands."""

    def test_app_help(self):
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        assert "seed-sample" in result.output

    def test_commands_require_init(self, data_dir):
        result = _invoke(data_dir, "status")
        assert result.exit_code == 1
        assert "init" in result.output

    def test_init_creates_layout(self, data_dir):
        _init(data_dir)
        assert (data_dir / "programs").is_dir()
        assert (data_dir / "history.jsonl").exists()
        result = _invoke(data_dir, "init")
        assert result.exit_code == 0
        assert "already initialized" in result.output

    def test_seed_sample_activates(self, data_dir):
        _seed(data_dir)
        status = _status(data_dir)
        assert status["name"] == "Push Pull Legs"
        assert status["is_active"]
        assert status["current_day"] == "Push A"
        assert status["position"] == "Foundation · Week 1, Day 1"
        assert status["total_workouts"] == 24
        assert status["completed_workouts"] == 0
        assert status["scheduled_days"] == []
        assert status["scheduled_today"]

    def test_seed_sample_twice_is_harmless(self, data_dir):
        _seed(data_dir)
        result = _invoke(data_dir, "seed-sample")
        assert result.exit_code == 0
        assert "already exists" in result.output
        assert len(list((data_dir / "programs").glob("*.json"))) == 1

    def test_list_json(self, data_dir):
        _seed(data_dir)
        result = _invoke(data_dir, "list", "--json")
        assert result.exit_code == 0
        programs = json.loads(result.output)
        assert len(programs) == 1
        assert programs[0]["is_active"]
        assert programs[0]["progress"] == 0.0

    def test_list_empty(self, data_dir):
        _init(data_dir)
        result = _invoke(data_dir, "list")
        assert result.exit_code == 0
        assert "No programs yet" in result.output

    def test_today_shows_workout(self, data_dir):
        _seed(data_dir)
        result = _invoke(data_dir, "today")
        assert result.exit_code == 0
        assert "Push A" in result.output
        assert "Bench Press" in result.output

    def test_show_structure_and_day(self, data_dir):
        _seed(data_dir)
        result = _invoke(data_dir, "show")
        assert result.exit_code == 0
        assert "Intensification" in result.output
        result = _invoke(data_dir, "show", "--day", "3")
        assert result.exit_code == 0
        assert "Legs A" in result.output
        result = _invoke(data_dir, "show", "--day", "7")
        assert result.exit_code == 0
        assert "no workout" in result.output

    def test_no_command_prints_status(self, data_dir):
        _seed(data_dir)
        result = _invoke(data_dir)
        assert result.exit_code == 0
        assert "Push Pull Legs" in result.output
        assert "Progress: 0/24" in result.output


class TestWorkoutLogging:
    def test_complete_advances_and_logs(self, data_dir):
        _seed(data_dir)
        result = _invoke(data_dir, "complete", "--rating", "7", "--notes", "felt good")
        assert result.exit_code == 0, result.output
        assert "Completed Push A" in result.output

        status = _status(data_dir)
        assert status["current_day"] == "Pull A"
        assert status["completed_workouts"] == 1
        assert status["current_streak"] == 1

        sessions = _history(data_dir)
        assert len(sessions) == 1
        session = sessions[0]
        assert session["status"] == "completed"
        assert session["rating"] == 7
        assert session["notes"] == "felt good"
        logged = [s for g in session["exercise_groups"] for e in g["exercises"] for s in e["logged_sets"]]
        assert len(logged) == 15
        assert all(s["is_completed"] for s in logged)

    def test_complete_rejects_bad_rating(self, data_dir):
        _seed(data_dir)
        result = _invoke(data_dir, "complete", "--rating", "11")
        assert result.exit_code == 1
        assert _history(data_dir) == []

    def test_skip_records_skipped_session(self, data_dir):
        _seed(data_dir)
        result = _invoke(data_dir, "skip")
        assert result.exit_code == 0
        assert "Skipped Push A" in result.output

        sessions = _history(data_dir)
        assert sessions[0]["was_skipped"]
        assert sessions[0]["status"] == "cancelled"
        assert _status(data_dir)["current_day"] == "Pull A"

    def test_history_table(self, data_dir):
        _seed(data_dir)
        _invoke(data_dir, "complete")
        _invoke(data_dir, "skip")
        result = _invoke(data_dir, "history")
        assert result.exit_code == 0
        assert "Workout History" in result.output
        assert "Completed 1, skipped 1" in result.output

    def test_history_empty(self, data_dir):
        _init(data_dir)
        result = _invoke(data_dir, "history")
        assert result.exit_code == 0
        assert "No workouts recorded yet" in result.output


class TestPauseResume:
    def test_pause_blocks_and_resume_restarts_week(self, data_dir):
        _seed(data_dir)
        _invoke(data_dir, "complete")
        _invoke(data_dir, "complete")

        result = _invoke(data_dir, "pause", "--days", "5", "--mode", "restartCurrentWeek")
        assert result.exit_code == 0, result.output
        assert "frozen" in result.output

        status = _status(data_dir)
        assert status["paused_until"] == (date.today() + timedelta(days=5)).isoformat()
        assert status["streak_frozen"]
        assert status["day_index"] == 2

        result = _invoke(data_dir, "complete")
        assert result.exit_code == 1
        assert "paused" in result.output

        result = _invoke(data_dir, "resume")
        assert result.exit_code == 0, result.output
        status = _status(data_dir)
        assert status["paused_until"] is None
        assert status["day_index"] == 0
        assert not status["streak_frozen"]

    def test_extend_pause(self, data_dir):
        _seed(data_dir)
        _invoke(data_dir, "pause", "--days", "3")
        result = _invoke(data_dir, "extend-pause", "--days", "4")
        assert result.exit_code == 0, result.output
        assert _status(data_dir)["paused_until"] == (date.today() + timedelta(days=7)).isoformat()

    def test_extend_pause_requires_pause(self, data_dir):
        _seed(data_dir)
        result = _invoke(data_dir, "extend-pause", "--days", "2")
        assert result.exit_code == 1
        assert "not paused" in result.output

    def test_pause_rejects_past_date_and_bad_mode(self, data_dir):
        _seed(data_dir)
        yesterday = (date.today() - timedelta(days=1)).isoformat()
        assert _invoke(data_dir, "pause", "--until", yesterday).exit_code == 1
        assert _invoke(data_dir, "pause", "--mode", "later").exit_code == 1
        assert _invoke(data_dir, "pause", "--until", "soon").exit_code == 1
        assert _status(data_dir)["paused_until"] is None

    def test_resume_when_not_paused(self, data_dir):
        _seed(data_dir)
        result = _invoke(data_dir, "resume")
        assert result.exit_code == 0
        assert "not paused" in result.output

    def test_expired_pause_resumes_on_status(self, data_dir):
        _seed(data_dir)
        _invoke(data_dir, "complete")
        _invoke(data_dir, "pause", "--days", "5", "--mode", "restartCurrentWeek")
        _move_return_date(data_dir, date.today())

        result = _invoke(data_dir, "status")
        assert result.exit_code == 0, result.output
        assert "Pause ended" in result.output

        status = _status(data_dir)
        assert status["paused_until"] is None
        assert status["pause_resume_mode"] is None
        assert status["day_index"] == 0
        assert not status["streak_frozen"]

    def test_streak_survives_pause(self, data_dir):
        _seed(data_dir)
        _invoke(data_dir, "pause", "--days", "7")
        store = get_store(data_dir)
        store.save_stats(
            UserStats(
                current_streak=5,
                longest_streak=5,
                last_workout_date=date.today() - timedelta(days=8),
                streak_frozen=True,
            )
        )
        _move_return_date(data_dir, date.today())

        status = _status(data_dir)
        assert status["paused_until"] is None
        assert not status["streak_frozen"]
        assert status["current_streak"] == 5

        result = _invoke(data_dir, "complete")
        assert result.exit_code == 0, result.output
        assert _status(data_dir)["current_streak"] == 6

    def test_expired_pause_applies_mode_before_complete(self, data_dir):
        _seed(data_dir)
        _invoke(data_dir, "complete")
        _invoke(data_dir, "complete")
        _invoke(data_dir, "pause", "--days", "5", "--mode", "restartCurrentWeek")
        _move_return_date(data_dir, date.today() - timedelta(days=1))

        result = _invoke(data_dir, "complete")
        assert result.exit_code == 0, result.output
        assert "Pause ended" in result.output
        assert "Completed Push A" in result.output

        status = _status(data_dir)
        assert status["day_index"] == 1
        assert status["paused_until"] is None
        assert len(_history(data_dir)) == 3

    def test_expired_pause_applies_mode_before_skip(self, data_dir):
        _seed(data_dir)
        _invoke(data_dir, "complete")
        _invoke(data_dir, "pause", "--days", "5", "--mode", "restartCurrentWeek")
        _move_return_date(data_dir, date.today())

        result = _invoke(data_dir, "skip")
        assert result.exit_code == 0, result.output
        assert "Skipped Push A" in result.output
        assert _status(data_dir)["day_index"] == 1


class TestProgramManagement:
    def test_import_activate_and_status(self, data_dir):
        _init(data_dir)
        path = _write_program(data_dir, PROGRAM_DOC)
        result = _invoke(data_dir, "import", str(path))
        assert result.exit_code == 0, result.output
        assert "1 phases, 2 weeks, 3 workouts" in result.output

        result = _invoke(data_dir, "activate", "-P", "two day", "--days", "mon,wed,fri", "--week", "2")
        assert result.exit_code == 0, result.output
        status = _status(data_dir)
        assert status["current_day"] == "Test Day"
        assert status["scheduled_days"] == [1, 3, 5]
        assert status["completed_workouts"] == 2
        assert status["final_day"]

    def test_finished_program_refuses_more_sessions(self, data_dir):
        _init(data_dir)
        _invoke(data_dir, "import", str(_write_program(data_dir, PROGRAM_DOC)))
        result = _invoke(data_dir, "activate", "-P", "two day", "--week", "2")
        assert result.exit_code == 0, result.output

        result = _invoke(data_dir, "complete")
        assert result.exit_code == 0, result.output
        assert "final workout" in result.output

        for command in ("complete", "skip"):
            result = _invoke(data_dir, command)
            assert result.exit_code == 1
            assert "finished" in result.output
        assert len(_history(data_dir)) == 1
        assert _status(data_dir)["final_day"]

    def test_activate_rejects_out_of_range_position(self, data_dir):
        _init(data_dir)
        _invoke(data_dir, "import", str(_write_program(data_dir, PROGRAM_DOC)))
        result = _invoke(data_dir, "activate", "-P", "Two Day", "--week", "2", "--day", "2")
        assert result.exit_code == 1
        assert "--day" in result.output
        assert _invoke(data_dir, "activate", "-P", "Two Day", "--days", "someday").exit_code == 1

    def test_import_unknown_exercise_creates_custom(self, data_dir):
        _init(data_dir)
        doc = json.loads(json.dumps(PROGRAM_DOC))
        doc["phases"][0]["weeks"][0]["days"][1]["workout"] = {
            "exerciseGroups": [{"exercises": [{"exerciseRef": "Tire Flip"}]}]
        }
        result = _invoke(data_dir, "import", str(_write_program(data_dir, doc)))
        assert result.exit_code == 0, result.output
        assert "Tire Flip" in result.output

        with open(data_dir / "exercises.yaml", encoding="utf-8") as fh:
            names = [e["name"] for e in yaml.safe_load(fh)["exercises"]]
        assert names == ["Tire Flip"]

        result = _invoke(data_dir, "exercises", "--search", "tire")
        assert "custom" in result.output

    def test_import_strict_fails_on_unknown_exercise(self, data_dir):
        _init(data_dir)
        doc = json.loads(json.dumps(PROGRAM_DOC))
        doc["phases"][0]["weeks"][0]["days"][1]["workout"] = {
            "exerciseGroups": [{"exercises": [{"exerciseRef": "Tire Flip"}]}]
        }
        result = _invoke(data_dir, "import", str(_write_program(data_dir, doc)), "--strict")
        assert result.exit_code == 1
        assert "Tire" in result.output
        assert list((data_dir / "programs").glob("*.json")) == []

    def test_import_invalid_enum(self, data_dir):
        _init(data_dir)
        doc = json.loads(json.dumps(PROGRAM_DOC))
        doc["phases"][0]["weeks"][0]["days"][1]["dayType"] = "holiday"
        result = _invoke(data_dir, "import", str(_write_program(data_dir, doc)))
        assert result.exit_code == 1
        assert "holiday" in result.output

    def test_import_missing_file(self, data_dir):
        _init(data_dir)
        result = _invoke(data_dir, "import", str(data_dir / "missing.json"))
        assert result.exit_code == 1
        assert "Error" in result.output

    def test_deactivate_and_delete(self, data_dir):
        _seed(data_dir)
        result = _invoke(data_dir, "deactivate")
        assert result.exit_code == 0
        assert not _status(data_dir, "-P", "Push Pull Legs")["is_active"]

        result = _invoke(data_dir, "today", "-P", "Push Pull Legs")
        assert result.exit_code == 1

        result = _invoke(data_dir, "delete", "Push Pull Legs", "--force")
        assert result.exit_code == 0
        assert list((data_dir / "programs").glob("*.json")) == []

        result = _invoke(data_dir, "status")
        assert result.exit_code == 1
        assert "No active program" in result.output

    def test_import_exercises(self, data_dir):
        path = data_dir / "exercises.json"
        path.write_text(
            json.dumps({"exercises": [{"name": "Sled Push", "equipment": ["sled"]}]}),
            encoding="utf-8",
        )
        result = _invoke(data_dir, "import-exercises", str(path))
        assert result.exit_code == 0, result.output

        result = _invoke(data_dir, "exercises", "--equipment", "sled")
        assert result.exit_code == 0
        assert "Sled Push" in result.output

    def test_exercises_search(self, data_dir):
        result = _invoke(data_dir, "exercises", "--muscle", "chest")
        assert result.exit_code == 0
        assert "Bench Press" in result.output
        result = _invoke(data_dir, "exercises", "--search", "zzz")
        assert "No matching exercises" in result.output
