"""Recurrence rules: when is a habit due, and how far apart may completions be."""

from __future__ import annotations

from typing import Iterable

from core.dates import date_range, day_of_month, day_of_week


DAILY = "daily"
WEEKLY = "weekly"
MONTHLY = "monthly"

REPETITIONS = (DAILY, WEEKLY, MONTHLY)

# Max calendar-day gap between two completions that still keeps a streak alive
CADENCE_GAPS = {DAILY: 1, WEEKLY: 7, MONTHLY: 31}


def cadence_gap(repetition: str) -> int:
    try:
        return CADENCE_GAPS[repetition]
    except KeyError:
        raise ValueError(f"Invalid repetition: {repetition!r}") from None


def is_due(day: str, repetition: str, specific_days: Iterable[int] | None = None) -> bool:
    """Whether a habit with this rule was expected to be done on *day*.

    Weekly and monthly rules without explicit days fall back to every day.
    """
    if repetition not in CADENCE_GAPS:
        raise ValueError(f"Invalid repetition: {repetition!r}")
    if repetition == DAILY:
        return True
    days = set(specific_days or ())
    if not days:
        return True
    if repetition == WEEKLY:
        return day_of_week(day) in days
    return day_of_month(day) in days


def due_dates(
    start: str,
    end: str,
    repetition: str,
    specific_days: Iterable[int] | None = None,
) -> list[str]:
    """All dates in [start, end] on which the rule is due."""
    days = list(specific_days or ())
    return [d for d in date_range(start, end) if is_due(d, repetition, days)]
