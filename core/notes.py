"""Journal notes and mood/productivity option sets for HabitLedger.

A user has at most one note per calendar date. Option sets map labels to
numeric scores and are stored per user; users without a saved set get
the defaults below.
"""

from __future__ import annotations

import logging
import uuid
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator

from core.dates import is_valid_date
from core.fileio import locked, read_json, read_yaml, write_json_atomic, write_yaml_atomic
from core.models import JournalNote, LabelOption
from core.workspace import notes_path as _notes_path, options_path as _options_path

logger = logging.getLogger(__name__)


DEFAULT_MOODS = [
    LabelOption("Happy", 10),
    LabelOption("Energetic", 9),
    LabelOption("Motivated", 8),
    LabelOption("Hopeful", 8),
    LabelOption("Good", 7),
    LabelOption("Calm", 6),
    LabelOption("Normal", 5),
    LabelOption("Stressed", 3),
    LabelOption("Sad", 2),
    LabelOption("Annoyed", 2),
    LabelOption("Tired", 1),
]

DEFAULT_PRODUCTIVITY_LEVELS = [
    LabelOption("Very low", 1),
    LabelOption("Low", 2),
    LabelOption("Below average", 3),
    LabelOption("Average", 4),
    LabelOption("High", 5),
    LabelOption("Very high", 6),
]

OPTION_KINDS = {"moods": DEFAULT_MOODS, "productivityLevels": DEFAULT_PRODUCTIVITY_LEVELS}


# ── Notes storage ─────────────────────────────────────────────


def load_notes(root: Path | None = None) -> list[JournalNote]:
    data = read_json(_notes_path(root))
    return [JournalNote.from_dict(n) for n in (data.get("notes") or [])]


def save_notes(notes: list[JournalNote], root: Path | None = None) -> None:
    ordered = sorted(notes, key=lambda n: (n.user_id, n.date))
    write_json_atomic(_notes_path(root), {"notes": [n.to_dict() for n in ordered]})


@contextmanager
def notes_transaction(root: Path | None = None) -> Iterator[list[JournalNote]]:
    with locked(_notes_path(root)):
        notes = load_notes(root)
        yield notes
        save_notes(notes, root)


def user_notes(notes: list[JournalNote], user_id: str) -> list[JournalNote]:
    return sorted((n for n in notes if n.user_id == user_id), key=lambda n: n.date)


def find_note(notes: list[JournalNote], user_id: str, day: str) -> JournalNote | None:
    for n in notes:
        if n.user_id == user_id and n.date == day:
            return n
    return None


def validate_note(data: dict[str, Any]) -> list[str]:
    errors = []
    if "content" in data and not isinstance(data["content"], str):
        errors.append("content must be a string")
    for key in ("mood", "productivityLevel"):
        if data.get(key) is not None and not isinstance(data[key], str):
            errors.append(f"{key} must be a string label")
    return errors


def upsert_note(
    notes: list[JournalNote],
    user_id: str,
    day: str,
    data: dict[str, Any],
    now: str,
) -> tuple[JournalNote | None, list[str]]:
    """Create or update the user's note for *day*. Returns (note, errors)."""
    if not is_valid_date(day):
        return None, ["Invalid date format. Use YYYY-MM-DD"]
    errors = validate_note(data)
    if errors:
        return None, errors

    note = find_note(notes, user_id, day)
    if note is None:
        note = JournalNote(id=uuid.uuid4().hex, user_id=user_id, date=day, created_at=now)
        notes.append(note)
        logger.info("Created note %s for %s", day, user_id)
    if "content" in data:
        note.content = data["content"]
    if "mood" in data:
        note.mood = data["mood"] or None
    if "productivityLevel" in data:
        note.productivity_level = data["productivityLevel"] or None
    note.updated_at = now
    return note, []


def delete_note(notes: list[JournalNote], user_id: str, day: str) -> bool:
    for i, n in enumerate(notes):
        if n.user_id == user_id and n.date == day:
            notes.pop(i)
            return True
    return False


# ── Options ───────────────────────────────────────────────────


def validate_options(payload: Any) -> tuple[list[LabelOption], list[str]]:
    """Coerce a list of {label, value} payloads. Labels must be unique."""
    if not isinstance(payload, list):
        return [], ["options must be a list of {label, value}"]
    options: list[LabelOption] = []
    errors: list[str] = []
    seen: set[str] = set()
    for i, item in enumerate(payload):
        if not isinstance(item, dict):
            errors.append(f"option {i}: must be an object")
            continue
        label = item.get("label")
        value = item.get("value")
        if not isinstance(label, str) or not label.strip():
            errors.append(f"option {i}: label is required")
            continue
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            errors.append(f"option {i}: value must be numeric")
            continue
        if label in seen:
            errors.append(f"option {i}: duplicate label {label!r}")
            continue
        seen.add(label)
        options.append(LabelOption(label=label, value=value))
    return options, errors


def get_options(kind: str, user_id: str, root: Path | None = None) -> list[LabelOption]:
    """A user's option set for *kind* ('moods' or 'productivityLevels')."""
    if kind not in OPTION_KINDS:
        raise ValueError(f"Unknown option kind: {kind}")
    data = read_yaml(_options_path(root))
    saved = (data.get(user_id) or {}).get(kind)
    if saved is None:
        return [LabelOption(o.label, o.value) for o in OPTION_KINDS[kind]]
    return [LabelOption.from_dict(o) for o in saved]


def set_options(kind: str, user_id: str, options: list[LabelOption], root: Path | None = None) -> None:
    if kind not in OPTION_KINDS:
        raise ValueError(f"Unknown option kind: {kind}")
    path = _options_path(root)
    with locked(path):
        data = read_yaml(path)
        data.setdefault(user_id, {})[kind] = [o.to_dict() for o in options]
        write_yaml_atomic(path, data)


def get_moods(user_id: str, root: Path | None = None) -> list[LabelOption]:
    return get_options("moods", user_id, root)


def get_productivity_levels(user_id: str, root: Path | None = None) -> list[LabelOption]:
    return get_options("productivityLevels", user_id, root)
