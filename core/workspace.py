"""Data root, profile settings, timezone and path helpers for HabitLedger."""

from __future__ import annotations

import os
from datetime import datetime
from pathlib import Path
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from core.fileio import read_yaml


DEFAULT_PROFILE: dict[str, Any] = {
    "timezone": "UTC",
    "default_period": "30days",
    "log_level": "INFO",
}


def workspace_root() -> Path:
    """Get the data root directory (holds habits.yaml, notes.json, ...)."""
    return Path(
        os.environ.get("HABITLEDGER_ROOT", str(Path.home() / "habitledger"))
    ).expanduser().resolve()


def load_profile(root: Path | None = None) -> dict[str, Any]:
    """profile.yaml merged over defaults."""
    if root is None:
        root = workspace_root()
    profile = dict(DEFAULT_PROFILE)
    profile.update(read_yaml(profile_path(root)))
    return profile


def get_user_timezone(root: Path | None = None) -> ZoneInfo:
    """Get user's timezone from profile.yaml, defaulting to UTC."""
    name = load_profile(root).get("timezone") or "UTC"
    try:
        return ZoneInfo(str(name))
    except (ZoneInfoNotFoundError, ValueError):
        return ZoneInfo("UTC")


def today_str(root: Path | None = None) -> str:
    """Get today's date string (YYYY-MM-DD) in user's timezone."""
    tz = get_user_timezone(root)
    return datetime.now(tz).date().isoformat()


def now_iso(root: Path | None = None) -> str:
    tz = get_user_timezone(root)
    return datetime.now(tz).isoformat(timespec="seconds")


# ── Path helpers ──────────────────────────────────────────────

def profile_path(root: Path | None = None) -> Path:
    if root is None:
        root = workspace_root()
    return root / "profile.yaml"


def habits_path(root: Path | None = None) -> Path:
    if root is None:
        root = workspace_root()
    return root / "habits.yaml"


def notes_path(root: Path | None = None) -> Path:
    if root is None:
        root = workspace_root()
    return root / "notes.json"


def options_path(root: Path | None = None) -> Path:
    if root is None:
        root = workspace_root()
    return root / "options.yaml"
