"""Shared test fixtures for HabitLedger tests."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Callable

import pytest
import yaml

from core.ledger import CompletionLedger
from core.models import Habit


@pytest.fixture
def make_habit() -> Callable[..., Habit]:
    """Build an in-memory habit from a list of completed dates."""

    def _make(
        dates: list[str] | None = None,
        repetition: str = "daily",
        specific_days: list[int] | None = None,
        **fields: Any,
    ) -> Habit:
        fields.setdefault("id", "h1")
        fields.setdefault("user_id", "guest")
        fields.setdefault("name", "Read")
        fields.setdefault("tag", "learning")
        fields.setdefault("created_at", "2023-01-01T00:00:00+00:00")
        return Habit(
            repetition=repetition,
            specific_days=list(specific_days or []),
            completed_days=CompletionLedger.from_dates(dates or []),
            **fields,
        )

    return _make


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    """Create a temporary data root with sample habits, notes and profile."""
    root = tmp_path / "habitledger"
    root.mkdir(parents=True)

    profile = {"timezone": "UTC", "default_period": "30days", "log_level": "DEBUG"}
    (root / "profile.yaml").write_text(
        yaml.dump(profile, default_flow_style=False), encoding="utf-8"
    )

    habits = {
        "habits": [
            {
                "id": "read",
                "userId": "guest",
                "name": "Read",
                "tag": "learning",
                "repetition": "daily",
                "specificDays": [],
                "goalValue": 1,
                "currentStreak": 5,
                "bestStreak": 5,
                "currentCounter": 5,
                "completedDays": [20240106, 20240107, 20240108, 20240109, 20240110],
                "isActive": True,
                "order": 0,
                "createdAt": "2024-01-01T08:00:00+00:00",
            },
            {
                "id": "gym",
                "userId": "guest",
                "name": "Gym",
                "tag": "health",
                "repetition": "weekly",
                "specificDays": [0],
                "goalValue": 1,
                "currentStreak": 3,
                "bestStreak": 3,
                "currentCounter": 3,
                "completedDays": [20231224, 20231231, 20240107],
                "isActive": True,
                "order": 1,
                "createdAt": "2023-12-01T08:00:00+00:00",
            },
            {
                "id": "old",
                "userId": "guest",
                "name": "Old habit",
                "tag": "misc",
                "repetition": "daily",
                "specificDays": [],
                "goalValue": 1,
                "completedDays": [],
                "isActive": False,
                "createdAt": "2023-06-01T08:00:00+00:00",
            },
            {
                "id": "other",
                "userId": "alice",
                "name": "Alice's habit",
                "tag": "misc",
                "repetition": "daily",
                "completedDays": [20240110],
                "isActive": True,
                "createdAt": "2024-01-01T08:00:00+00:00",
            },
        ]
    }
    (root / "habits.yaml").write_text(
        yaml.safe_dump(habits, default_flow_style=False, sort_keys=False), encoding="utf-8"
    )

    notes = {
        "notes": [
            {
                "id": "n1",
                "userId": "guest",
                "date": "2024-01-08",
                "content": "Solid day.",
                "mood": "Happy",
                "productivityLevel": "High",
                "createdAt": "2024-01-08T21:00:00+00:00",
                "updatedAt": "2024-01-08T21:00:00+00:00",
            },
            {
                "id": "n2",
                "userId": "guest",
                "date": "2024-01-09",
                "content": "Tired.",
                "mood": "Sad",
                "productivityLevel": "Low",
                "createdAt": "2024-01-09T21:00:00+00:00",
                "updatedAt": "2024-01-09T21:00:00+00:00",
            },
        ]
    }
    (root / "notes.json").write_text(json.dumps(notes, indent=2), encoding="utf-8")

    os.environ["HABITLEDGER_ROOT"] = str(root)
    yield root
    if "HABITLEDGER_ROOT" in os.environ:
        del os.environ["HABITLEDGER_ROOT"]
