"""Streak calculation for habits.

A streak is a maximal chain of completed dates in which no two neighbours
are further apart than the habit's cadence gap (1 day for daily, 7 for
weekly, 31 for monthly). The gap thresholds are fixed per cadence and do
not depend on the habit's specific days.
"""

from __future__ import annotations

from typing import Any, Iterable

from core.dates import days_between
from core.ledger import CompletionLedger
from core.models import Habit, StreakSnapshot
from core.recurrence import cadence_gap


def current_streak(
    ledger: CompletionLedger,
    repetition: str,
    specific_days: Iterable[int] | None,
    today: str,
) -> int:
    """Length of the streak that is still alive as of *today*.

    The streak is dead when the most recent completion is further than
    one cadence gap behind today.
    """
    dates = ledger.dates(descending=True)
    if not dates:
        return 0

    gap_limit = cadence_gap(repetition)
    if days_between(dates[0], today) > gap_limit:
        return 0

    streak = 1
    for newer, older in zip(dates, dates[1:]):
        if days_between(older, newer) > gap_limit:
            break
        streak += 1
    return streak


def all_streak_runs(
    ledger: CompletionLedger,
    repetition: str,
    specific_days: Iterable[int] | None = None,
) -> list[int]:
    """Every streak length in the history, oldest first."""
    return [p["length"] for p in _runs(ledger, repetition)]


def best_streak(
    ledger: CompletionLedger,
    repetition: str,
    specific_days: Iterable[int] | None = None,
    existing_best: int = 0,
) -> int:
    """Longest run ever seen. Never lower than *existing_best*."""
    return max([existing_best, 0, *all_streak_runs(ledger, repetition, specific_days)])


def streak_periods(ledger: CompletionLedger, repetition: str) -> list[dict[str, Any]]:
    """Runs with start/end dates, longest first (ties keep chronological order)."""
    return sorted(_runs(ledger, repetition), key=lambda p: p["length"], reverse=True)


def _runs(ledger: CompletionLedger, repetition: str) -> list[dict[str, Any]]:
    gap_limit = cadence_gap(repetition)
    runs: list[dict[str, Any]] = []
    start: str | None = None
    prev: str | None = None
    length = 0

    for day in ledger.dates():
        if prev is not None and days_between(prev, day) > gap_limit:
            runs.append({"startDate": start, "endDate": prev, "length": length})
            start, length = None, 0
        if start is None:
            start = day
        length += 1
        prev = day

    if length > 0:
        runs.append({"startDate": start, "endDate": prev, "length": length})
    return runs


# ── Habit-level recomputation ─────────────────────────────────


def compute_streaks(habit: Habit, today: str) -> StreakSnapshot:
    """Recompute the derived streak fields for *habit* from its ledger."""
    ledger = habit.completed_days
    return StreakSnapshot(
        current_streak=current_streak(ledger, habit.repetition, habit.specific_days, today),
        best_streak=best_streak(ledger, habit.repetition, habit.specific_days, habit.best_streak),
        current_counter=len(ledger),
    )


def apply_streaks(habit: Habit, today: str) -> StreakSnapshot:
    """Recompute and write the derived fields onto *habit*."""
    snap = compute_streaks(habit, today)
    habit.current_streak = snap.current_streak
    habit.best_streak = snap.best_streak
    habit.current_counter = snap.current_counter
    return snap
