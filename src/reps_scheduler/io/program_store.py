"""
JSON/JSONL storage for programs, workout history and streak stats.

Layout of a data directory:

    programs/<program id>.json   one file per program graph
    history.jsonl                one session per line, append-only
    stats.json                   UserStats
"""

import json
import logging
import os
from pathlib import Path

from ..core.catalog import ExerciseCatalog
from ..core.config import (
    DATA_DIR_ENV,
    HISTORY_FILE_NAME,
    PROGRAMS_DIR_NAME,
    STATS_FILE_NAME,
)
from ..core.config_loader import get_setting, get_user_config_dir
from ..core.models import Program, UserStats, WorkoutSession
from .serializers import (
    ValidationError,
    dict_to_program,
    dict_to_user_stats,
    json_line_to_session,
    program_to_dict,
    session_to_json_line,
    user_stats_to_dict,
)

logger = logging.getLogger(__name__)


class ProgramStore:
    """
    Manages programs and training history under one data directory.

    Program files are rewritten whole on every save; history is only ever
    appended to.
    """

    def __init__(self, data_dir: str | Path, catalog: ExerciseCatalog):
        """
        Initialize the store.

        Args:
            data_dir: Directory holding programs/, history.jsonl and stats.json
            catalog: Catalog used to resolve exercise references on load
        """
        self.data_dir = Path(data_dir)
        self.catalog = catalog
        self.programs_dir = self.data_dir / PROGRAMS_DIR_NAME
        self.history_path = self.data_dir / HISTORY_FILE_NAME
        self.stats_path = self.data_dir / STATS_FILE_NAME

    def exists(self) -> bool:
        """Check if the store has been initialized."""
        return self.programs_dir.is_dir() and self.history_path.exists()

    def init(self) -> None:
        """
        Create the directory layout if it doesn't exist.

        Existing programs and history are left untouched.
        """
        self.programs_dir.mkdir(parents=True, exist_ok=True)
        if not self.history_path.exists():
            self.history_path.touch()

    def _require_init(self) -> None:
        if not self.exists():
            raise FileNotFoundError(f"No data found in {self.data_dir}. Run 'init' first.")

    def _program_path(self, program_id: str) -> Path:
        return self.programs_dir / f"{program_id}.json"

    # -- programs -------------------------------------------------------------

    def save_program(self, program: Program) -> None:
        """Write a program (and its whole plan graph) to its file."""
        self._require_init()
        with open(self._program_path(program.id), "w") as f:
            json.dump(program_to_dict(program), f, indent=2)
        logger.debug("saved program %r (%s)", program.name, program.id)

    def _read_program(self, path: Path) -> Program:
        try:
            with open(path, "r") as f:
                data = json.load(f)
            return dict_to_program(data, self.catalog)
        except (json.JSONDecodeError, ValidationError) as e:
            raise ValidationError(f"Error reading {path}: {e}") from e

    def list_programs(self) -> list[Program]:
        """
        Load all programs.

        Returns:
            Programs sorted by name

        Raises:
            FileNotFoundError: If the store is not initialized
            ValidationError: If a program file is invalid
        """
        self._require_init()
        programs = [self._read_program(p) for p in sorted(self.programs_dir.glob("*.json"))]
        programs.sort(key=lambda p: p.name.lower())
        return programs

    def load_program(self, ref: str) -> Program | None:
        """
        Load a program by id, or by name (case-insensitive).

        Returns:
            The program, or None when nothing matches
        """
        self._require_init()
        path = self._program_path(ref)
        if path.exists():
            return self._read_program(path)
        wanted = ref.strip().lower()
        for program in self.list_programs():
            if program.name.lower() == wanted:
                return program
        return None

    def delete_program(self, program_id: str) -> bool:
        """Delete a program file. History entries are kept. Returns False if absent."""
        self._require_init()
        path = self._program_path(program_id)
        if not path.exists():
            return False
        path.unlink()
        logger.debug("deleted program %s", program_id)
        return True

    def active_programs(self) -> list[Program]:
        """Active programs, most recently updated first."""
        active = [p for p in self.list_programs() if p.is_active]
        active.sort(key=lambda p: p.updated_at, reverse=True)
        return active

    def active_program(self) -> Program | None:
        """The most recently updated active program, or None."""
        active = self.active_programs()
        return active[0] if active else None

    # -- history --------------------------------------------------------------

    def append_session(self, session: WorkoutSession) -> None:
        """
        Append a session to the history file.

        Raises:
            FileNotFoundError: If the store is not initialized
        """
        self._require_init()
        with open(self.history_path, "a") as f:
            f.write(session_to_json_line(session) + "\n")
        logger.debug("appended session %r (%s)", session.display_name, session.status)

    def load_history(self, program_id: str | None = None) -> list[WorkoutSession]:
        """
        Load sessions from the history file.

        Args:
            program_id: Only return sessions of this program

        Returns:
            Sessions sorted by start time

        Raises:
            FileNotFoundError: If the history file doesn't exist
            ValidationError: If a line cannot be parsed (names the line)
        """
        if not self.history_path.exists():
            raise FileNotFoundError(
                f"History file not found: {self.history_path}. Run 'init' first."
            )

        sessions: list[WorkoutSession] = []
        with open(self.history_path, "r") as f:
            for line_num, line in enumerate(f, 1):
                line = line.strip()
                if not line:
                    continue
                try:
                    session = json_line_to_session(line, self.catalog)
                except ValidationError as e:
                    raise ValidationError(
                        f"Error parsing line {line_num} in {self.history_path}: {e}"
                    ) from e
                if program_id is None or session.program_id == program_id:
                    sessions.append(session)

        sessions.sort(key=lambda s: s.start_time)
        return sessions

    # -- stats ----------------------------------------------------------------

    def load_stats(self) -> UserStats:
        """Load streak stats; a missing file means a fresh UserStats."""
        if not self.stats_path.exists():
            return UserStats()
        try:
            with open(self.stats_path, "r") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValidationError(f"Error reading {self.stats_path}: {e}") from e
        return dict_to_user_stats(data)

    def save_stats(self, stats: UserStats) -> None:
        self.data_dir.mkdir(parents=True, exist_ok=True)
        with open(self.stats_path, "w") as f:
            json.dump(user_stats_to_dict(stats), f, indent=2)


def get_default_data_dir() -> Path:
    """
    Get the default data directory.

    ${REPS_SCHEDULER_HOME} wins, then storage.data_dir from settings.yaml,
    then ~/.reps-scheduler.
    """
    if os.environ.get(DATA_DIR_ENV):
        return get_user_config_dir()
    configured = get_setting("storage", "data_dir", "")
    if configured:
        return Path(str(configured)).expanduser()
    return get_user_config_dir()
