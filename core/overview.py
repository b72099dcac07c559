"""Cross-habit analytics: overview, daily, weekly, monthly and quarter reports.

Every report considers only active habits. A habit counts toward a date
when it is due that day by its recurrence rule and was created on or
before it.
"""

from __future__ import annotations

from typing import Any, Iterable

from core.dates import (
    add_days,
    date_range,
    day_name,
    day_of_week,
    days_ago,
    is_valid_date,
    month_bounds,
    month_name,
)
from core.habit_analytics import habit_analytics, period_window, success_rate
from core.models import Habit, JournalNote
from core.recurrence import is_due


def _active(habits: Iterable[Habit]) -> list[Habit]:
    return [h for h in habits if h.is_active]


def _tracked_on(habit: Habit, day: str) -> bool:
    created = habit.created_at[:10]
    if is_valid_date(created) and created > day:
        return False
    return is_due(day, habit.repetition, habit.specific_days)


def _first_max(items: list[dict[str, Any]], key: str) -> dict[str, Any] | None:
    best = None
    for item in items:
        if best is None or item[key] > best[key]:
            best = item
    return best


def _first_min(items: list[dict[str, Any]], key: str) -> dict[str, Any] | None:
    worst = None
    for item in items:
        if worst is None or item[key] < worst[key]:
            worst = item
    return worst


# ── Overview ──────────────────────────────────────────────────


def overall_analytics(habits: Iterable[Habit], today: str) -> dict[str, Any]:
    """Dashboard summary over the last 30 days."""
    habits = list(habits)
    active = _active(habits)
    since = days_ago(today, 30)
    window = date_range(since, today)

    consistency = [
        {
            "habitId": h.id,
            "habitName": h.name,
            "successRate": success_rate(h, since, today),
            "currentStreak": h.current_streak,
            "bestStreak": h.best_streak,
        }
        for h in active
    ]
    most_consistent = sorted(
        (c for c in consistency if c["successRate"] > 0),
        key=lambda c: c["successRate"],
        reverse=True,
    )[:5]

    longest = None
    for h in active:
        if longest is None or h.best_streak > longest.best_streak:
            longest = h

    due_total = 0
    done_total = 0
    dow_due = [0] * 7
    dow_done = [0] * 7
    for h in active:
        for day in window:
            if not _tracked_on(h, day):
                continue
            dow = day_of_week(day)
            due_total += 1
            dow_due[dow] += 1
            if h.completed_days.is_completed(day):
                done_total += 1
                dow_done[dow] += 1

    dow_stats = [
        {
            "dayOfWeek": i,
            "dayName": day_name(i),
            "successRate": dow_done[i] / dow_due[i] if dow_due[i] else 0.0,
            "totalCompletions": dow_done[i],
        }
        for i in range(7)
    ]

    return {
        "totalHabits": len(habits),
        "activeHabitsCount": len(active),
        "completedToday": sum(1 for h in active if h.completed_days.is_completed(today)),
        "mostConsistentHabits": most_consistent,
        "longestStreakHabit": (
            {"habitName": longest.name, "bestStreak": longest.best_streak} if longest else None
        ),
        "last30DaysSuccessRate": done_total / due_total if due_total else 0.0,
        "bestDayOfWeek": _first_max([d for d in dow_stats if d["totalCompletions"] > 0], "successRate"),
        "dayOfWeekStats": dow_stats,
    }


def all_habits_analytics(habits: Iterable[Habit], period: str, today: str) -> dict[str, Any]:
    """Per-habit analytics for every active habit, best success rate first."""
    habits = list(habits)
    start, end = period_window(period, today)
    analytics = [habit_analytics(h, start, end) for h in _active(habits)]
    ranked = sorted(analytics, key=lambda a: a.success_rate, reverse=True)
    n = len(analytics)

    return {
        "period": period,
        "startDate": start,
        "endDate": end,
        "totalHabits": len(habits),
        "activeHabits": n,
        "habits": [a.to_dict() for a in ranked],
        "summary": {
            "averageSuccessRate": sum(a.success_rate for a in analytics) / n if n else 0.0,
            "totalCompletions": sum(a.total_completions for a in analytics),
            "averageStreak": sum(a.longest_streak for a in analytics) / n if n else 0.0,
        },
    }


# ── Time buckets ──────────────────────────────────────────────


def daily_analytics(
    habits: Iterable[Habit],
    day: str,
    note: JournalNote | None = None,
) -> dict[str, Any]:
    """Which due habits were completed on *day*, overall and per tag."""
    date_range(day, day)
    due = [h for h in _active(habits) if _tracked_on(h, day)]
    done_ids = {h.id for h in due if h.completed_days.is_completed(day)}

    tags: dict[str, dict[str, int]] = {}
    for h in due:
        t = tags.setdefault(h.tag, {"total": 0, "completed": 0})
        t["total"] += 1
        if h.id in done_ids:
            t["completed"] += 1
    tag_stats = sorted(
        (
            {
                "tag": tag,
                "totalHabits": t["total"],
                "completedHabits": t["completed"],
                "completionRate": t["completed"] / t["total"],
            }
            for tag, t in tags.items()
        ),
        key=lambda t: t["completionRate"],
        reverse=True,
    )

    return {
        "date": day,
        "completionRate": round(len(done_ids) / len(due), 2) if due else 0.0,
        "totalHabits": len(due),
        "completedHabits": len(done_ids),
        "habitDetails": [
            {
                "habitId": h.id,
                "habitName": h.name,
                "tag": h.tag,
                "goalValue": h.goal_value,
                "completed": h.id in done_ids,
            }
            for h in due
        ],
        "tagStats": tag_stats,
        "note": {"id": note.id, "content": note.content} if note else None,
    }


def _day_row(habits: list[Habit], day: str) -> dict[str, Any]:
    due = [h for h in habits if _tracked_on(h, day)]
    done = sum(1 for h in due if h.completed_days.is_completed(day))
    dow = day_of_week(day)
    return {
        "date": day,
        "dayOfWeek": dow,
        "dayName": day_name(dow),
        "totalHabits": len(due),
        "completedHabits": done,
        "completionRate": done / len(due) if due else 0.0,
    }


def _habit_window_stats(habit: Habit, days: list[str]) -> dict[str, Any]:
    due = [d for d in days if is_due(d, habit.repetition, habit.specific_days)]
    done = [d for d in due if habit.completed_days.is_completed(d)]
    return {
        "habitId": habit.id,
        "habitName": habit.name,
        "tag": habit.tag,
        "activeDaysCount": len(due),
        "completedDaysCount": len(done),
        "completionRate": len(done) / len(due) if due else 0.0,
        "completedDates": done,
        "currentStreak": habit.current_streak,
        "bestStreak": habit.best_streak,
    }


def weekly_analytics(habits: Iterable[Habit], start: str) -> dict[str, Any]:
    """Seven days starting at *start*. Daily rates are percentages."""
    active = _active(habits)
    end = add_days(start, 6)
    days = date_range(start, end)

    daily = []
    for day in days:
        row = _day_row(active, day)
        row["completionRate"] = round(row["completionRate"] * 100, 2)
        daily.append(row)

    habit_stats = [_habit_window_stats(h, days) for h in active]
    n = len(daily)

    return {
        "startDate": start,
        "endDate": end,
        "dailyStats": daily,
        "weeklyStats": {
            "overallSuccessRate": round(sum(d["completionRate"] for d in daily) / n, 2) if n else 0.0,
            "totalCompletions": sum(d["completedHabits"] for d in daily),
            "mostProductiveDay": _first_max(daily, "completionRate"),
            "leastProductiveDay": _first_min(daily, "completionRate"),
            "mostProductiveHabit": _first_max(
                [h for h in habit_stats if h["activeDaysCount"] > 0], "completionRate"
            ),
        },
        "habitStats": habit_stats,
    }


def monthly_analytics(habits: Iterable[Habit], year: int, month: int) -> dict[str, Any]:
    """Calendar-month rollup: per day, per weekday and per habit."""
    active = _active(habits)
    start, end = month_bounds(year, month)
    days = date_range(start, end)

    daily = []
    for day in days:
        row = _day_row(active, day)
        row["count"] = row.pop("completedHabits")
        row["completionRate"] = min(1.0, row["completionRate"])
        daily.append(row)

    dow_stats = []
    for i in range(7):
        rows = [d for d in daily if d["dayOfWeek"] == i]
        total = sum(d["totalHabits"] for d in rows)
        done = sum(d["count"] for d in rows)
        dow_stats.append({
            "dayOfWeek": i,
            "dayName": day_name(i),
            "successRate": min(1.0, done / total) if total else 0.0,
            "totalHabits": total,
            "completedHabits": done,
        })

    habit_stats = []
    for h in active:
        tracked = [d for d in days if _tracked_on(h, d)]
        stats = _habit_window_stats(h, tracked)
        del stats["completedDates"]
        habit_stats.append(stats)
    habit_stats.sort(key=lambda h: h["completionRate"], reverse=True)

    total_active_days = sum(h["activeDaysCount"] for h in habit_stats)
    total_completions = sum(d["count"] for d in daily)
    with_days = [d for d in daily if d["totalHabits"] > 0]
    top_habit = _first_max([h for h in habit_stats if h["activeDaysCount"] > 0], "completionRate")
    streak_habit = _first_max(habit_stats, "bestStreak")

    return {
        "year": year,
        "month": month,
        "monthName": month_name(month),
        "startDate": start,
        "endDate": end,
        "dailyCompletionCounts": daily,
        "dayOfWeekStats": dow_stats,
        "habitStats": habit_stats,
        "monthlyStats": {
            "totalHabits": len(habit_stats),
            "totalCompletions": total_completions,
            "overallCompletionRate": (
                min(1.0, total_completions / total_active_days) if total_active_days else 0.0
            ),
            "mostProductiveHabit": top_habit["habitName"] if top_habit else None,
            "bestStreakHabit": streak_habit["habitName"] if streak_habit else None,
            "bestDay": _first_max(with_days, "completionRate"),
            "worstDay": _first_min(with_days, "completionRate"),
        },
    }


def quarter_analytics(habits: Iterable[Habit], start: str) -> dict[str, Any]:
    """91 days from *start*: percent of due habits completed each day."""
    active = _active(habits)
    end = add_days(start, 90)
    days = date_range(start, end)
    return {
        "startDate": start,
        "endDate": end,
        "totalDays": len(days),
        "dailyData": [
            {"date": row["date"], "completionRate": round(row["completionRate"] * 100, 2)}
            for row in (_day_row(active, day) for day in days)
        ],
    }
