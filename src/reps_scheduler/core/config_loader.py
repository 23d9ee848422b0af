"""
YAML → settings loader.

Loads runtime settings from settings.yaml (bundled with the package) and
optionally merges user overrides from ~/.reps-scheduler/settings.yaml.

Usage:
    from reps_scheduler.core.config_loader import load_settings, get_setting
    settings = load_settings()
    rest = get_setting("templates", "default_rest_seconds", 90)

If the bundled YAML cannot be parsed, all lookups return the Python defaults
from config.py (no crash).  If the user override file exists but has parse
errors, a warning is issued and the file is ignored.
"""

from __future__ import annotations

import os
import warnings
from pathlib import Path
from typing import Any

import yaml

from .config import DATA_DIR_ENV, DATA_DIR_NAME, SETTINGS_FILE_NAME

# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def load_yaml_file(path: Path) -> dict[str, Any]:
    """Load a single YAML mapping; warn and return {} if it cannot be read."""
    try:
        with open(path, "r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh)
    except (OSError, yaml.YAMLError) as exc:
        warnings.warn(f"reps-scheduler: ignoring {path} ({exc})", stacklevel=2)
        return {}
    return data if isinstance(data, dict) else {}


def deep_merge(base: dict, override: dict) -> dict:
    """Recursively merge *override* into *base* (non-destructive to base)."""
    result = dict(base)
    for k, v in override.items():
        if isinstance(v, dict) and isinstance(result.get(k), dict):
            result[k] = deep_merge(result[k], v)
        else:
            result[k] = v
    return result


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def get_user_config_dir() -> Path:
    """Return the user configuration directory (~/.reps-scheduler, or $REPS_SCHEDULER_HOME)."""
    override = os.environ.get(DATA_DIR_ENV)
    if override:
        return Path(override).expanduser()
    home = Path(os.environ.get("HOME", "~")).expanduser()
    return home / DATA_DIR_NAME


def get_bundled_settings_path() -> Path | None:
    """Return the path to the bundled settings.yaml, or None if not found."""
    candidate = Path(__file__).parent.parent / SETTINGS_FILE_NAME
    return candidate if candidate.exists() else None


def get_user_settings_path() -> Path | None:
    """Return the user settings.yaml if it exists, else None."""
    p = get_user_config_dir() / SETTINGS_FILE_NAME
    return p if p.exists() else None


def load_settings() -> dict[str, Any]:
    """
    Load and merge settings from YAML sources.

    Load order (later overrides earlier):
    1. Bundled src/reps_scheduler/settings.yaml
    2. User override at ~/.reps-scheduler/settings.yaml

    Returns:
        Merged dict of settings sections.  Empty dict if no YAML available.
    """
    settings: dict[str, Any] = {}

    bundled = get_bundled_settings_path()
    if bundled is not None:
        settings = deep_merge(settings, load_yaml_file(bundled))

    user = get_user_settings_path()
    if user is not None:
        user_settings = load_yaml_file(user)
        if user_settings:
            settings = deep_merge(settings, user_settings)

    return settings


def get_setting(section: str, key: str, default: Any) -> Any:
    """Look up settings[section][key], falling back to ``default``."""
    value = load_settings().get(section, {})
    if not isinstance(value, dict):
        return default
    return value.get(key, default)
