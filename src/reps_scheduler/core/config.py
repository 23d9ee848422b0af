"""
Configuration constants for the program scheduling engine.

Values that users may want to change at runtime are also exposed through
settings.yaml (see config_loader.py); the constants here are the fallbacks.
"""

from typing import Final

# =============================================================================
# WEEKDAYS (0 = Sunday, matching scheduled_days)
# =============================================================================

WEEKDAY_NAMES: Final[tuple[str, ...]] = (
    "Sunday",
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
)
WEEKDAY_SHORT_NAMES: Final[tuple[str, ...]] = ("Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat")
WEEKDAY_ABBREVIATIONS: Final[tuple[str, ...]] = ("S", "M", "T", "W", "T", "F", "S")
DAYS_PER_WEEK: Final[int] = 7

# =============================================================================
# TEMPLATES AND SESSIONS
# =============================================================================

DEFAULT_REST_SECONDS: Final[int] = 90  # Rest between sets when a template omits it
DEFAULT_TEMPLATE_NAME: Final[str] = "Workout"
QUICK_WORKOUT_NAME: Final[str] = "Quick Workout"
RATING_MIN: Final[int] = 1
RATING_MAX: Final[int] = 10
EPLEY_DIVISOR: Final[float] = 30.0  # 1RM = w * (1 + reps / 30)

# =============================================================================
# PAUSE / RESUME
# =============================================================================

DEFAULT_PAUSE_DAYS: Final[int] = 7
DEFAULT_RESUME_MODE: Final[str] = "continueWhereLeft"

# =============================================================================
# STORAGE
# =============================================================================

DATA_DIR_NAME: Final[str] = ".reps-scheduler"
DATA_DIR_ENV: Final[str] = "REPS_SCHEDULER_HOME"
PROGRAMS_DIR_NAME: Final[str] = "programs"
HISTORY_FILE_NAME: Final[str] = "history.jsonl"
STATS_FILE_NAME: Final[str] = "stats.json"
SETTINGS_FILE_NAME: Final[str] = "settings.yaml"
CATALOG_FILE_NAME: Final[str] = "exercises.yaml"
