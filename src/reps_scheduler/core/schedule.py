"""
Schedule evaluation: is a program due today, and when is it due next.

Weekdays are numbered 0 = Sunday ... 6 = Saturday throughout. An empty
scheduled_days set means the program is due every day.
"""

from datetime import date, timedelta

from .config import DAYS_PER_WEEK, WEEKDAY_ABBREVIATIONS, WEEKDAY_NAMES, WEEKDAY_SHORT_NAMES
from .models import Program


def weekday_index(d: date) -> int:
    """Return the weekday of ``d`` with Sunday as 0."""
    return (d.weekday() + 1) % DAYS_PER_WEEK


def is_scheduled_today(program: Program, today: date | None = None) -> bool:
    """
    Check whether the program is scheduled on ``today``.

    Args:
        program: Program to check
        today: Day to evaluate (default: current date)

    Returns:
        True if scheduled_days is empty or contains today's weekday
    """
    if not program.scheduled_days:
        return True
    return weekday_index(today or date.today()) in program.scheduled_days


def next_scheduled_date(program: Program, today: date | None = None) -> date | None:
    """
    Find the next scheduled training date strictly after ``today``.

    An empty schedule means every day, so the answer is tomorrow. Otherwise
    the following seven days are scanned in order.

    Args:
        program: Program to check
        today: Reference day (default: current date)

    Returns:
        The next scheduled date, or None if no weekday in the coming week matches
    """
    start = today or date.today()
    if not program.scheduled_days:
        return start + timedelta(days=1)

    current = weekday_index(start)
    for offset in range(1, DAYS_PER_WEEK + 1):
        if (current + offset) % DAYS_PER_WEEK in program.scheduled_days:
            return start + timedelta(days=offset)
    return None


def format_scheduled_days(days) -> str:
    """Format weekday indices as "Mon, Wed, Fri" ("Every day" when empty)."""
    if not days:
        return "Every day"
    return ", ".join(WEEKDAY_SHORT_NAMES[d] for d in sorted(days))


def day_abbreviation(day_index: int) -> str:
    """One-letter weekday abbreviation, or "" when out of range."""
    if 0 <= day_index < DAYS_PER_WEEK:
        return WEEKDAY_ABBREVIATIONS[day_index]
    return ""


def day_name(day_index: int) -> str:
    """Full weekday name, or "" when out of range."""
    if 0 <= day_index < DAYS_PER_WEEK:
        return WEEKDAY_NAMES[day_index]
    return ""


def parse_scheduled_days(text: str) -> frozenset[int]:
    """
    Parse a comma-separated weekday list.

    Accepts full names ("Monday"), three-letter names ("mon") and indices
    ("1"), case-insensitively. "", "all", "daily" and "every" mean every day
    (the empty set).

    Examples:
        "mon,wed,fri"  → {1, 3, 5}
        "0, 6"         → {0, 6}
        "daily"        → {}

    Raises:
        ValueError: If a token is not a recognised weekday
    """
    text = text.strip().lower()
    if text in ("", "all", "daily", "every"):
        return frozenset()

    lookup: dict[str, int] = {}
    for i in range(DAYS_PER_WEEK):
        lookup[WEEKDAY_NAMES[i].lower()] = i
        lookup[WEEKDAY_SHORT_NAMES[i].lower()] = i
        lookup[str(i)] = i

    result: set[int] = set()
    for token in (t.strip() for t in text.split(",")):
        if not token:
            continue
        if token not in lookup:
            raise ValueError(
                f"Unknown weekday: {token!r}. Use names (mon, tue, ...) or 0-6 (0=Sunday)."
            )
        result.add(lookup[token])
    return frozenset(result)
