"""
Exercise catalog.

Programs and sessions refer to catalog Exercises by object; the catalog is
the single place those objects are created. Entries are looked up by name:
an exact (case-insensitive) match wins, otherwise the first entry whose name
contains the query.

The bundled catalog lives in ``src/reps_scheduler/exercises.yaml``.
User overrides: ``~/.reps-scheduler/exercises.yaml`` with the same layout.
A user entry whose name matches a bundled entry is deep-merged over it, so
only changed keys need to be listed; other user entries are added.

Usage:
    from reps_scheduler.core.catalog import load_catalog
    catalog = load_catalog()
    bench = catalog.find_by_name("bench press")
"""

from __future__ import annotations

import warnings
from pathlib import Path
from typing import Iterable, Iterator

import yaml

from .config import CATALOG_FILE_NAME
from .config_loader import deep_merge, get_user_config_dir, load_yaml_file
from .models import Exercise


class ExerciseCatalog:
    """Name-indexed collection of catalog exercises."""

    def __init__(self, exercises: list[Exercise] | None = None):
        self._by_id: dict[str, Exercise] = {}
        for exercise in exercises or []:
            self.add(exercise)

    def __len__(self) -> int:
        return len(self._by_id)

    def __iter__(self) -> Iterator[Exercise]:
        return iter(sorted(self._by_id.values(), key=lambda e: e.name.lower()))

    def __contains__(self, exercise: object) -> bool:
        return isinstance(exercise, Exercise) and self._by_id.get(exercise.id) is exercise

    def add(self, exercise: Exercise) -> Exercise:
        """Add an exercise (replacing any entry with the same id) and return it."""
        self._by_id[exercise.id] = exercise
        return exercise

    def remove(self, exercise: Exercise) -> None:
        self._by_id.pop(exercise.id, None)

    def get(self, exercise_id: str) -> Exercise | None:
        return self._by_id.get(exercise_id)

    def find_by_name(self, name: str) -> Exercise | None:
        """
        Find an exercise by name.

        Args:
            name: Name to look for (case-insensitive)

        Returns:
            Exact match if any, else the first (alphabetical) entry whose
            name contains ``name``, else None
        """
        query = name.strip().lower()
        if not query:
            return None
        entries = list(self)
        for exercise in entries:
            if exercise.name.lower() == query:
                return exercise
        for exercise in entries:
            if query in exercise.name.lower():
                return exercise
        return None

    def create_custom(self, name: str, **fields) -> Exercise:
        """Create, register and return a user-defined exercise."""
        return self.add(Exercise(name=name.strip(), is_custom=True, **fields))

    def search(
        self,
        text: str = "",
        muscle_group: str | None = None,
        equipment: str | None = None,
    ) -> list[Exercise]:
        """Filter the catalog by name substring, muscle group and equipment."""
        result = []
        for exercise in self:
            if text and text.lower() not in exercise.name.lower():
                continue
            if muscle_group and muscle_group not in exercise.muscle_groups:
                continue
            if equipment and equipment not in exercise.equipment:
                continue
            result.append(exercise)
        return result


def exercise_from_dict(d: dict, is_custom: bool = False) -> Exercise:
    """
    Convert a raw dict (from YAML or JSON) to an Exercise.

    Raises:
        ValueError: If ``name`` is missing or empty
    """
    name = d.get("name")
    if not isinstance(name, str) or not name.strip():
        raise ValueError("Exercise entry missing 'name'")
    kwargs = {}
    if d.get("id"):
        kwargs["id"] = str(d["id"])
    return Exercise(
        name=name.strip(),
        muscle_groups=[str(m) for m in d.get("muscle_groups") or []],
        equipment=[str(e) for e in d.get("equipment") or []],
        instructions=d.get("instructions"),
        video_url=d.get("video_url"),
        image_url=d.get("image_url"),
        is_custom=bool(d.get("is_custom", is_custom)),
        **kwargs,
    )


def exercise_to_dict(exercise: Exercise) -> dict:
    """Convert an Exercise to a catalog entry (None fields omitted, no id)."""
    d = {
        "name": exercise.name,
        "muscle_groups": list(exercise.muscle_groups),
        "equipment": list(exercise.equipment),
        "instructions": exercise.instructions,
        "video_url": exercise.video_url,
        "image_url": exercise.image_url,
    }
    return {k: v for k, v in d.items() if v is not None}


def _get_bundled_catalog_path() -> Path | None:
    """Return path to the bundled exercises.yaml, or None if not found."""
    candidate = Path(__file__).parent.parent / CATALOG_FILE_NAME
    return candidate if candidate.exists() else None


def _get_user_catalog_path(user_dir: Path | None = None) -> Path | None:
    p = (user_dir or get_user_config_dir()) / CATALOG_FILE_NAME
    return p if p.exists() else None


def _entries(path: Path) -> list[dict]:
    raw = load_yaml_file(path).get("exercises") or []
    if not isinstance(raw, list):
        warnings.warn(f"reps-scheduler: 'exercises' in {path} is not a list", stacklevel=3)
        return []
    return [e for e in raw if isinstance(e, dict)]


def load_catalog(user_dir: Path | None = None) -> ExerciseCatalog:
    """
    Return the exercise catalog built from the bundled and user YAML files.

    Args:
        user_dir: Directory holding the user exercises.yaml
            (default: ~/.reps-scheduler)

    Entries that fail validation are skipped with a warning; a missing
    bundled file yields whatever the user file provides (possibly nothing).
    """
    merged: dict[str, dict] = {}  # lower-cased name -> raw entry
    custom: set[str] = set()

    bundled = _get_bundled_catalog_path()
    if bundled is not None:
        for entry in _entries(bundled):
            merged[str(entry.get("name", "")).strip().lower()] = entry

    user = _get_user_catalog_path(user_dir)
    if user is not None:
        for entry in _entries(user):
            key = str(entry.get("name", "")).strip().lower()
            if key in merged:
                merged[key] = deep_merge(merged[key], entry)
            else:
                merged[key] = entry
                custom.add(key)

    catalog = ExerciseCatalog()
    for key, entry in merged.items():
        try:
            catalog.add(exercise_from_dict(entry, is_custom=key in custom))
        except ValueError as exc:
            warnings.warn(f"reps-scheduler: skipping exercise entry — {exc}", stacklevel=2)
    return catalog


def save_user_exercises(exercises: Iterable[Exercise], path: Path | None = None) -> Path:
    """
    Write exercises into the user catalog file, replacing same-named entries.

    Other entries already in the file are kept.

    Args:
        exercises: Exercises to write
        path: Target file (default: ~/.reps-scheduler/exercises.yaml)

    Returns:
        The path written
    """
    target = path or get_user_config_dir() / CATALOG_FILE_NAME
    existing = _entries(target) if target.exists() else []

    by_name: dict[str, dict] = {str(e.get("name", "")).strip().lower(): e for e in existing}
    for exercise in exercises:
        by_name[exercise.name.lower()] = exercise_to_dict(exercise)

    target.parent.mkdir(parents=True, exist_ok=True)
    with open(target, "w", encoding="utf-8") as fh:
        yaml.safe_dump({"exercises": list(by_name.values())}, fh, sort_keys=False, allow_unicode=True)
    return target
