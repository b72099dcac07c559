"""Per-habit analytics over a date window.

Computes success rate, day-of-week breakdowns, weekly averages and
monthly trends from a habit's completion ledger and recurrence rule.
"""

from __future__ import annotations

import math
from typing import Any, Iterable

from core.dates import (
    date_range,
    day_name,
    day_of_week,
    days_ago,
    days_between,
    is_valid_date,
    month_bounds,
    month_name,
)
from core.ledger import CompletionLedger, CompletionRecord
from core.models import DayOfWeekStat, Habit, HabitAnalytics
from core.recurrence import is_due
from core.streaks import all_streak_runs, streak_periods


PERIOD_DAYS = {"7days": 7, "30days": 30, "90days": 90, "365days": 365}
DEFAULT_PERIOD = "30days"


def period_window(period: str, today: str) -> tuple[str, str]:
    """Map '7days'/'30days'/'90days'/'365days' to (start, end). Unknown -> 30 days."""
    n = PERIOD_DAYS.get(period, PERIOD_DAYS[DEFAULT_PERIOD])
    return days_ago(today, n), today


def _due_records(habit: Habit, start: str, end: str) -> list[CompletionRecord]:
    return [
        r
        for r in habit.completed_days.records_for_range(habit.id, start, end)
        if is_due(r.date, habit.repetition, habit.specific_days)
    ]


def _created_date(habit: Habit) -> str | None:
    day = habit.created_at[:10]
    return day if is_valid_date(day) else None


# ── Success rate ──────────────────────────────────────────────


def success_rate(habit: Habit, start: str, end: str) -> float:
    """Fraction of due dates in [start, end] that were completed (0 if none due)."""
    due = _due_records(habit, start, end)
    if not due:
        return 0.0
    return sum(1 for r in due if r.completed) / len(due)


# ── Day of week ───────────────────────────────────────────────


def day_of_week_breakdown(
    records: Iterable[CompletionRecord],
) -> tuple[list[DayOfWeekStat], int, int]:
    """Accumulate per-weekday totals from observations.

    Returns (stats, best, worst). Best/worst are a left fold over weekdays
    0..6 with strict comparison, so ties go to the lowest index.
    """
    stats = [DayOfWeekStat(day_of_week=i, day_name=day_name(i)) for i in range(7)]
    for r in records:
        s = stats[day_of_week(r.date)]
        s.total_days += 1
        if r.completed:
            s.completed_days += 1
    for s in stats:
        s.success_rate = s.completed_days / s.total_days if s.total_days else 0.0

    best = worst = 0
    for s in stats:
        if s.success_rate > stats[best].success_rate:
            best = s.day_of_week
        if s.success_rate < stats[worst].success_rate:
            worst = s.day_of_week
    return stats, best, worst


def day_of_week_stats(habit: Habit, start: str, end: str) -> list[DayOfWeekStat]:
    stats, _, _ = day_of_week_breakdown(_due_records(habit, start, end))
    return stats


def best_and_worst_days(habit: Habit, start: str, end: str) -> tuple[int, int]:
    """Best and worst weekday among weekdays with at least one due date.

    (-1, -1) when nothing was due in the window.
    """
    active = [s for s in day_of_week_stats(habit, start, end) if s.total_days > 0]
    if not active:
        return -1, -1
    best = worst = active[0]
    for s in active[1:]:
        if s.success_rate > best.success_rate:
            best = s
        if s.success_rate < worst.success_rate:
            worst = s
    return best.day_of_week, worst.day_of_week


# ── Volume ────────────────────────────────────────────────────


def average_completions_per_week(total_completions: int, start: str, end: str) -> float:
    weeks = math.ceil(days_between(start, end) / 7)
    if weeks <= 0:
        return 0.0
    return total_completions / weeks


def window_ledger(ledger: CompletionLedger, start: str, end: str) -> CompletionLedger:
    """Sub-ledger restricted to [start, end]."""
    return CompletionLedger.from_dates(d for d in ledger if start <= d <= end)


def monthly_trends(habit: Habit, year: int) -> list[dict[str, Any]]:
    trends = []
    for month in range(1, 13):
        start, end = month_bounds(year, month)
        trends.append({
            "month": month,
            "monthName": month_name(month),
            "successRate": success_rate(habit, start, end),
            "completions": habit.completed_days.count_between(start, end),
        })
    return trends


# ── Aggregates ────────────────────────────────────────────────


def habit_analytics(habit: Habit, start: str, end: str) -> HabitAnalytics:
    """Headline metrics for one habit over [start, end]."""
    date_range(start, end)  # validates the window
    windowed = window_ledger(habit.completed_days, start, end)
    runs = all_streak_runs(windowed, habit.repetition, habit.specific_days)
    total = len(windowed)
    best, worst = best_and_worst_days(habit, start, end)

    return HabitAnalytics(
        habit_id=habit.id,
        habit_name=habit.name,
        tag=habit.tag,
        repetition=habit.repetition,
        success_rate=success_rate(habit, start, end),
        best_day_of_week=best,
        worst_day_of_week=worst,
        longest_streak=max(runs, default=0),
        total_completions=total,
        average_completions_per_week=average_completions_per_week(total, start, end),
        current_streak=habit.current_streak,
        best_streak=habit.best_streak,
        current_counter=habit.current_counter,
        goal_value=habit.goal_value,
        is_active=habit.is_active,
    )


def habit_report(habit: Habit, period: str, today: str) -> dict[str, Any]:
    """Detailed single-habit view: stats, weekdays, top streaks, monthly trends."""
    start, end = period_window(period, today)
    created = _created_date(habit)

    total_days = 0
    completed_days = 0
    for r in _due_records(habit, start, end):
        if created and r.date < created:
            continue
        total_days += 1
        if r.completed:
            completed_days += 1

    best, worst = best_and_worst_days(habit, start, end)
    return {
        "habitId": habit.id,
        "habitName": habit.name,
        "period": {
            "startDate": start,
            "endDate": end,
            "description": period if period in PERIOD_DAYS else DEFAULT_PERIOD,
        },
        "basicStats": {
            "totalDays": total_days,
            "completedDays": completed_days,
            "successRate": success_rate(habit, start, end),
            "currentStreak": habit.current_streak,
            "bestStreak": habit.best_streak,
        },
        "dayOfWeekStats": [s.to_dict() for s in day_of_week_stats(habit, start, end)],
        "bestDay": {"dayOfWeek": best, "dayName": day_name(best)} if best != -1 else None,
        "worstDay": {"dayOfWeek": worst, "dayName": day_name(worst)} if worst != -1 else None,
        "topStreaks": streak_periods(habit.completed_days, habit.repetition)[:3],
        "monthlyTrends": monthly_trends(habit, int(today[:4])),
    }
