"""Completion ledger: the set of dates on which a habit was completed.

Dates are stored as YYYYMMDD integers. Membership is the only record of
completion; "not completed" is never stored, only synthesized on demand
for a requested range.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Iterator

from core.dates import date_range, decode_date, encode_date


@dataclass
class CompletionRecord:
    habit_id: str = ""
    date: str = ""
    completed: bool = True

    @property
    def id(self) -> str:
        return f"{self.habit_id}-{encode_date(self.date)}"

    @property
    def completed_at(self) -> str:
        return f"{self.date}T00:00:00.000Z"

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "habitId": self.habit_id,
            "date": self.date,
            "completed": self.completed,
            "completedAt": self.completed_at,
        }


def parse_completion_id(completion_id: str) -> tuple[str, str]:
    """Split '<habitId>-<YYYYMMDD>' into (habit_id, 'YYYY-MM-DD').

    Habit ids may themselves contain dashes, so split on the last one.
    """
    habit_id, sep, day_int = completion_id.rpartition("-")
    if not sep or not habit_id or not day_int.isdigit():
        raise ValueError(f"Invalid completion id: {completion_id!r}")
    return habit_id, decode_date(int(day_int))


class CompletionLedger:
    """Sparse set of completed dates for one habit."""

    def __init__(self, days: Iterable[int] | None = None):
        self._days: set[int] = set()
        for d in days or ():
            # decode validates; a corrupt stored integer is a hard error
            self._days.add(encode_date(decode_date(d)))

    @classmethod
    def from_list(cls, days: Iterable[int] | None) -> CompletionLedger:
        return cls(days)

    @classmethod
    def from_dates(cls, dates: Iterable[str]) -> CompletionLedger:
        return cls(encode_date(d) for d in dates)

    def to_list(self) -> list[int]:
        return sorted(self._days)

    # ── Mutation ──────────────────────────────────────────────

    def set_completed(self, day: str, completed: bool = True) -> bool:
        """Mark or unmark *day*. Returns True if the set changed."""
        key = encode_date(day)
        if completed:
            if key in self._days:
                return False
            self._days.add(key)
            return True
        if key not in self._days:
            return False
        self._days.discard(key)
        return True

    def toggle(self, day: str) -> bool:
        """Flip completion for *day*; returns the new state."""
        new_state = not self.is_completed(day)
        self.set_completed(day, new_state)
        return new_state

    # ── Queries ───────────────────────────────────────────────

    def is_completed(self, day: str) -> bool:
        return encode_date(day) in self._days

    def __contains__(self, day: object) -> bool:
        return isinstance(day, str) and self.is_completed(day)

    def __len__(self) -> int:
        return len(self._days)

    def __iter__(self) -> Iterator[str]:
        return (decode_date(d) for d in sorted(self._days))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CompletionLedger):
            return NotImplemented
        return self._days == other._days

    def __repr__(self) -> str:
        return f"CompletionLedger({self.to_list()!r})"

    def dates(self, descending: bool = False) -> list[str]:
        return [decode_date(d) for d in sorted(self._days, reverse=descending)]

    def most_recent(self) -> str | None:
        if not self._days:
            return None
        return decode_date(max(self._days))

    def count_between(self, start: str, end: str) -> int:
        lo, hi = encode_date(start), encode_date(end)
        return sum(1 for d in self._days if lo <= d <= hi)

    def to_records(self, habit_id: str, descending: bool = False) -> Iterator[CompletionRecord]:
        """One completed record per member, in date order."""
        for d in sorted(self._days, reverse=descending):
            yield CompletionRecord(habit_id=habit_id, date=decode_date(d), completed=True)

    def records_for_range(self, habit_id: str, start: str, end: str) -> list[CompletionRecord]:
        """A record for every date in [start, end], completed or not."""
        return [
            CompletionRecord(habit_id=habit_id, date=d, completed=encode_date(d) in self._days)
            for d in date_range(start, end)
        ]


def batch_apply(
    ledgers: dict[str, CompletionLedger],
    changes: Iterable[tuple[str, str, bool]],
) -> tuple[list[str], list[str]]:
    """Apply (habit_id, date, completed) changes grouped by habit.

    Returns (affected_habit_ids, unknown_habit_ids), each in first-seen
    order. A habit is "affected" once any of its changes is applied, so the
    caller recomputes streaks exactly once per habit.
    """
    grouped: dict[str, list[tuple[str, bool]]] = {}
    unknown: list[str] = []
    for habit_id, day, completed in changes:
        if habit_id not in ledgers:
            if habit_id not in unknown:
                unknown.append(habit_id)
            continue
        grouped.setdefault(habit_id, []).append((day, bool(completed)))

    # Validate every date before touching any ledger
    for items in grouped.values():
        for day, _ in items:
            encode_date(day)

    for habit_id, items in grouped.items():
        ledger = ledgers[habit_id]
        for day, completed in items:
            ledger.set_completed(day, completed)

    return list(grouped), unknown
