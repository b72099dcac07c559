"""Habit CRUD, validation and completion tracking for HabitLedger.

Streak fields on a habit are a cache of the streak calculator's output.
Every function here that changes a ledger recomputes them before
returning, and update payloads can never set them directly.
"""

from __future__ import annotations

import logging
import uuid
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterable, Iterator

from core.dates import date_range, is_valid_date
from core.errors import HabitNotFound, InvalidDate
from core.fileio import locked, read_yaml, write_yaml_atomic
from core.ledger import CompletionRecord, batch_apply, parse_completion_id
from core.models import Habit, HabitsFile, StreakSnapshot
from core.recurrence import MONTHLY, REPETITIONS, WEEKLY
from core.streaks import apply_streaks
from core.workspace import habits_path as _habits_path

logger = logging.getLogger(__name__)


# ── Validation ────────────────────────────────────────────────


DERIVED_FIELDS = {"currentStreak", "bestStreak", "currentCounter"}
IMMUTABLE_FIELDS = {"id", "userId", "createdAt", "completedDays"}

MAX_NAME_LENGTH = 100
MAX_DESCRIPTION_LENGTH = 500


def validate_habit(habit: dict[str, Any]) -> list[str]:
    """Validate a habit payload and return list of errors (empty if valid)."""
    errors = []
    name = habit.get("name")
    if not isinstance(name, str) or not name.strip():
        errors.append("Missing required field: name")
    elif len(name) > MAX_NAME_LENGTH:
        errors.append(f"name cannot exceed {MAX_NAME_LENGTH} characters")

    tag = habit.get("tag")
    if not isinstance(tag, str) or not tag.strip():
        errors.append("Missing required field: tag")

    repetition = habit.get("repetition")
    if repetition is None:
        errors.append("Missing required field: repetition")
    elif repetition not in REPETITIONS:
        errors.append(f"Invalid repetition: {repetition}")

    goal = habit.get("goalValue", 1)
    if isinstance(goal, bool) or not isinstance(goal, (int, float)) or goal < 1:
        errors.append("goalValue must be a number >= 1")

    days = habit.get("specificDays") or []
    if not isinstance(days, list) or any(isinstance(d, bool) or not isinstance(d, int) for d in days):
        errors.append("specificDays must be a list of integers")
    elif repetition == WEEKLY and any(d < 0 or d > 6 for d in days):
        errors.append("Weekly specificDays must be between 0 and 6")
    elif repetition == MONTHLY and any(d < 1 or d > 31 for d in days):
        errors.append("Monthly specificDays must be between 1 and 31")

    description = habit.get("description")
    if description is not None and (not isinstance(description, str) or len(description) > MAX_DESCRIPTION_LENGTH):
        errors.append(f"description cannot exceed {MAX_DESCRIPTION_LENGTH} characters")

    if "order" in habit and habit["order"] is not None and not isinstance(habit["order"], int):
        errors.append("order must be an integer")

    return errors


# ── Storage ───────────────────────────────────────────────────


def load_habits(root: Path | None = None) -> HabitsFile:
    """Load habits.yaml into a HabitsFile model."""
    return HabitsFile.from_dict(read_yaml(_habits_path(root)))


def save_habits(habits_file: HabitsFile, root: Path | None = None) -> None:
    """Save HabitsFile back to habits.yaml atomically."""
    write_yaml_atomic(_habits_path(root), habits_file.to_dict())


@contextmanager
def habits_transaction(root: Path | None = None) -> Iterator[HabitsFile]:
    """Load, yield for mutation, and save habits under an exclusive lock.

    Nothing is written if the block raises.
    """
    path = _habits_path(root)
    with locked(path):
        habits_file = load_habits(root)
        yield habits_file
        save_habits(habits_file, root)


# ── CRUD ──────────────────────────────────────────────────────


def find_habit(habits_file: HabitsFile, habit_id: str, user_id: str | None = None) -> Habit | None:
    """Find a habit by ID, optionally restricted to its owner."""
    for h in habits_file.habits:
        if h.id == habit_id and (user_id is None or h.user_id == user_id):
            return h
    return None


def get_habit(habits_file: HabitsFile, habit_id: str, user_id: str | None = None) -> Habit:
    habit = find_habit(habits_file, habit_id, user_id)
    if habit is None:
        raise HabitNotFound(habit_id)
    return habit


def user_habits(habits_file: HabitsFile, user_id: str, active_only: bool = False) -> list[Habit]:
    """A user's habits in display order (explicit order first, then creation)."""
    habits = [h for h in habits_file.for_user(user_id) if h.is_active or not active_only]
    return sorted(habits, key=lambda h: (h.order is None, h.order or 0, h.created_at))


def create_habit(
    habits_file: HabitsFile,
    habit_data: dict[str, Any],
    user_id: str,
    now: str | None = None,
) -> tuple[Habit, list[str]]:
    """Create and add a new habit. Returns (habit, errors)."""
    errors = validate_habit(habit_data)
    if errors:
        return Habit(), errors

    data = {k: v for k, v in habit_data.items() if k not in DERIVED_FIELDS | IMMUTABLE_FIELDS}
    data.update({
        "id": uuid.uuid4().hex,
        "userId": user_id,
        "createdAt": now or datetime.now(timezone.utc).isoformat(timespec="seconds"),
        "isActive": True,
    })
    habit = Habit.from_dict(data)
    habits_file.habits.append(habit)
    logger.info("Created habit %s (%s) for %s", habit.id, habit.name, user_id)
    return habit, []


def update_habit(
    habits_file: HabitsFile,
    habit_id: str,
    updates: dict[str, Any],
    today: str,
    user_id: str | None = None,
) -> tuple[Habit | None, list[str]]:
    """Update a habit by ID. Returns (updated_habit, errors).

    Derived and immutable fields in *updates* are ignored.
    """
    habit = find_habit(habits_file, habit_id, user_id)
    if not habit:
        return None, [f"Habit not found: {habit_id}"]

    ignored = sorted(k for k in updates if k in DERIVED_FIELDS | IMMUTABLE_FIELDS)
    if ignored:
        logger.debug("Ignoring read-only fields on habit %s: %s", habit_id, ", ".join(ignored))

    habit_dict = habit.to_dict()
    habit_dict.update({k: v for k, v in updates.items() if k not in DERIVED_FIELDS | IMMUTABLE_FIELDS})

    errors = validate_habit(habit_dict)
    if errors:
        return None, errors

    updated = Habit.from_dict(habit_dict)
    if (updated.repetition, updated.specific_days) != (habit.repetition, habit.specific_days):
        apply_streaks(updated, today)

    for i, h in enumerate(habits_file.habits):
        if h.id == habit_id:
            habits_file.habits[i] = updated
            break
    return updated, []


def delete_habit(habits_file: HabitsFile, habit_id: str, user_id: str | None = None) -> bool:
    """Remove a habit and its completion ledger."""
    for i, h in enumerate(habits_file.habits):
        if h.id == habit_id and (user_id is None or h.user_id == user_id):
            habits_file.habits.pop(i)
            logger.info("Deleted habit %s (%d completions discarded)", habit_id, len(h.completed_days))
            return True
    return False


def set_active(habits_file: HabitsFile, habit_id: str, active: bool, user_id: str | None = None) -> Habit:
    """Deactivate or reactivate a habit; history is kept either way."""
    habit = get_habit(habits_file, habit_id, user_id)
    habit.is_active = active
    return habit


def reorder_habits(habits_file: HabitsFile, user_id: str, ordered_ids: list[str]) -> list[str]:
    """Assign display order from a list of habit IDs. Returns errors."""
    owned = {h.id: h for h in habits_file.for_user(user_id)}
    missing = [hid for hid in ordered_ids if hid not in owned]
    if missing:
        return [f"Habit not found: {hid}" for hid in missing]
    for position, hid in enumerate(ordered_ids):
        owned[hid].order = position
    return []


# ── Completions ───────────────────────────────────────────────


def set_completion(
    habits_file: HabitsFile,
    habit_id: str,
    day: str,
    completed: bool,
    today: str,
    user_id: str | None = None,
) -> StreakSnapshot:
    """Mark *day* completed or not, then refresh the streak cache."""
    habit = get_habit(habits_file, habit_id, user_id)
    changed = habit.completed_days.set_completed(day, completed)
    if changed:
        logger.debug("Habit %s: %s %s", habit_id, "completed" if completed else "cleared", day)
    return apply_streaks(habit, today)


def toggle_completion(
    habits_file: HabitsFile,
    habit_id: str,
    day: str,
    today: str,
    user_id: str | None = None,
) -> tuple[bool, StreakSnapshot]:
    """Flip completion for *day*. Returns (new_state, streaks)."""
    habit = get_habit(habits_file, habit_id, user_id)
    state = habit.completed_days.toggle(day)
    return state, apply_streaks(habit, today)


def batch_set_completions(
    habits_file: HabitsFile,
    changes: Iterable[tuple[str, str, bool]],
    today: str,
    user_id: str | None = None,
) -> dict[str, Any]:
    """Apply many (habit_id, date, completed) changes.

    Streaks are recomputed once per affected habit, after all of that
    habit's changes are in. Habits not found (or not owned) are reported.
    """
    habits = {
        h.id: h
        for h in habits_file.habits
        if user_id is None or h.user_id == user_id
    }
    affected, unknown = batch_apply({hid: h.completed_days for hid, h in habits.items()}, changes)

    streaks = {}
    for hid in affected:
        streaks[hid] = apply_streaks(habits[hid], today).to_dict()
    if unknown:
        logger.warning("Batch completion skipped unknown habits: %s", ", ".join(unknown))
    return {"updated": affected, "unknown": unknown, "streaks": streaks}


def delete_completion(
    habits_file: HabitsFile,
    completion_id: str,
    today: str,
    user_id: str | None = None,
) -> bool:
    """Remove the completion identified by '<habitId>-<YYYYMMDD>'."""
    habit_id, day = parse_completion_id(completion_id)
    habit = find_habit(habits_file, habit_id, user_id)
    if habit is None or not habit.completed_days.set_completed(day, False):
        return False
    apply_streaks(habit, today)
    return True


def list_completions(
    habits_file: HabitsFile,
    user_id: str,
    habit_id: str | None = None,
    start: str | None = None,
    end: str | None = None,
) -> list[CompletionRecord]:
    """Completion records for a user's habits, optionally by habit and window."""
    for bound in (start, end):
        if bound and not is_valid_date(bound):
            raise InvalidDate(bound)
    if start and end:
        date_range(start, end)

    records = []
    for habit in habits_file.for_user(user_id):
        if habit_id and habit.id != habit_id:
            continue
        for r in habit.completed_days.to_records(habit.id):
            if start and r.date < start:
                continue
            if end and r.date > end:
                continue
            records.append(r)
    return sorted(records, key=lambda r: (r.date, r.habit_id))


def recompute_all(habits_file: HabitsFile, today: str) -> int:
    """Refresh streak caches for every habit (e.g. at day rollover)."""
    for habit in habits_file.habits:
        apply_streaks(habit, today)
    return len(habits_file.habits)
