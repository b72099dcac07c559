"""Exception types raised by the HabitLedger core.

Precondition violations subclass ValueError so callers that only know
about built-in exceptions still catch them at the request boundary.
"""

from __future__ import annotations


class HabitLedgerError(Exception):
    """Base class for HabitLedger errors."""


class InvalidDate(HabitLedgerError, ValueError):
    def __init__(self, value: object):
        self.value = value
        super().__init__(f"Invalid date (expected YYYY-MM-DD): {value!r}")


class InvalidRange(HabitLedgerError, ValueError):
    def __init__(self, start: str, end: str):
        self.start = start
        self.end = end
        super().__init__(f"Invalid date range: {start} is after {end}")


class HabitNotFound(HabitLedgerError, KeyError):
    def __init__(self, habit_id: str):
        self.habit_id = habit_id
        super().__init__(habit_id)

    def __str__(self) -> str:
        return f"Habit not found: {self.habit_id}"
