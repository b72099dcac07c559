"""Journal analytics: mood/productivity stats, trends and habit correlation.

Mood and productivity are stored on notes as labels. Numeric scores come
from the user's current option sets; a label that is no longer configured
still counts in distributions but is left out of every average.
"""

from __future__ import annotations

import math
from collections import Counter
from typing import Any, Iterable

from core.dates import days_between, month_bounds
from core.models import Habit, JournalNote, LabelOption


def _round1(x: float) -> float:
    """Round half up to one decimal place."""
    return math.floor(x * 10 + 0.5) / 10


def value_map(options: Iterable[LabelOption]) -> dict[str, float]:
    return {o.label: o.value for o in options}


def _mean1(values: list[float]) -> float | None:
    if not values:
        return None
    return _round1(sum(values) / len(values))


# ── Streaks ───────────────────────────────────────────────────


def _note_runs(dates: Iterable[str]) -> list[tuple[str, int]]:
    """(end_date, length) for each run of consecutive calendar days."""
    runs: list[tuple[str, int]] = []
    prev = None
    length = 0
    for day in sorted(set(dates)):
        if prev is not None and days_between(prev, day) == 1:
            length += 1
        else:
            if prev is not None:
                runs.append((prev, length))
            length = 1
        prev = day
    if prev is not None:
        runs.append((prev, length))
    return runs


def longest_note_streak(dates: Iterable[str]) -> int:
    """Longest run of consecutive calendar days that have a note.

    Plain daily adjacency: no cadence tolerance, unlike habit streaks.
    """
    return max((length for _, length in _note_runs(dates)), default=0)


def current_note_streak(dates: Iterable[str], today: str) -> int:
    """Run of consecutive note days ending today or yesterday (else 0)."""
    runs = _note_runs(dates)
    if not runs:
        return 0
    end, length = runs[-1]
    return length if 0 <= days_between(end, today) <= 1 else 0


# ── Overview ──────────────────────────────────────────────────


def _monthly_scores(notes: list[JournalNote], attr: str, values: dict[str, float]) -> dict[str, dict[str, Any]]:
    scores: dict[str, dict[str, Any]] = {}
    for note in notes:
        label = getattr(note, attr)
        if not label or label not in values:
            continue
        bucket = scores.setdefault(note.date[:7], {"avg": 0.0, "count": 0, "sum": 0})
        bucket["count"] += 1
        bucket["sum"] += values[label]
    for bucket in scores.values():
        bucket["avg"] = _round1(bucket["sum"] / bucket["count"])
    return scores


def notes_overview(
    notes: Iterable[JournalNote],
    moods: Iterable[LabelOption],
    productivity_levels: Iterable[LabelOption],
    today: str,
) -> dict[str, Any]:
    notes = list(notes)
    mood_values = value_map(moods)
    prod_values = value_map(productivity_levels)

    mood_counts = Counter(n.mood for n in notes if n.mood)
    prod_counts = Counter(n.productivity_level for n in notes if n.productivity_level)
    with_mood = sum(mood_counts.values())
    with_prod = sum(prod_counts.values())
    total = len(notes)

    mood_nums = [mood_values[n.mood] for n in notes if n.mood in mood_values]
    prod_nums = [prod_values[n.productivity_level] for n in notes if n.productivity_level in prod_values]

    dates = [n.date for n in notes]
    return {
        "totalNotes": total,
        "notesWithMood": with_mood,
        "notesWithProductivity": with_prod,
        "moodDistribution": dict(mood_counts),
        "productivityDistribution": dict(prod_counts),
        "monthlyFrequency": dict(Counter(n.date[:7] for n in notes)),
        "avgContentLength": math.floor(sum(len(n.content) for n in notes) / total + 0.5) if total else 0,
        "avgMoodValue": _mean1(mood_nums),
        "avgProductivityValue": _mean1(prod_nums),
        "longestStreak": longest_note_streak(dates),
        "currentStreak": current_note_streak(dates, today),
        "moodValueMap": mood_values,
        "productivityValueMap": prod_values,
        "monthlyMoodScores": _monthly_scores(notes, "mood", mood_values),
        "monthlyProductivityScores": _monthly_scores(notes, "productivity_level", prod_values),
        "completionRate": {
            "mood": math.floor(with_mood / total * 100 + 0.5) if total else 0,
            "productivity": math.floor(with_prod / total * 100 + 0.5) if total else 0,
        },
    }


def mood_trends(notes: Iterable[JournalNote], moods: Iterable[LabelOption]) -> dict[str, Any]:
    """Average mood per month with a per-label breakdown."""
    moods = list(moods)
    values = value_map(moods)
    by_month: dict[str, list[JournalNote]] = {}
    for note in notes:
        if note.mood:
            by_month.setdefault(note.date[:7], []).append(note)

    trends = []
    for month in sorted(by_month):
        month_notes = by_month[month]
        labels = Counter(n.mood for n in month_notes)
        trends.append({
            "month": month,
            "averageMood": _mean1([values[n.mood] for n in month_notes if n.mood in values]),
            "count": len(month_notes),
            "distribution": [
                {"label": m.label, "value": m.value, "count": labels.get(m.label, 0)}
                for m in moods
            ],
        })
    return {"trends": trends, "moodValueMap": values}


# ── Correlation ───────────────────────────────────────────────


def productivity_correlation(
    habits: Iterable[Habit],
    notes: Iterable[JournalNote],
    productivity_levels: Iterable[LabelOption],
) -> dict[str, Any]:
    """Compare mean productivity on days a habit was done vs. not done.

    Only note dates with a configured productivity label take part.
    An empty partition yields None for its average and for the impact.
    """
    values = value_map(productivity_levels)
    scored = {
        n.date: values[n.productivity_level]
        for n in notes
        if n.productivity_level in values
    }

    rows = []
    for habit in habits:
        with_done = [v for d, v in scored.items() if habit.completed_days.is_completed(d)]
        without = [v for d, v in scored.items() if not habit.completed_days.is_completed(d)]
        if not with_done and not without:
            continue
        avg_with = _mean1(with_done)
        avg_without = _mean1(without)
        impact = None
        if avg_with is not None and avg_without is not None:
            impact = _round1(avg_with - avg_without)
        rows.append({
            "habitId": habit.id,
            "habitName": habit.name,
            "datesCompletedCount": len(with_done),
            "datesNotCompletedCount": len(without),
            "avgProductivityWithCompletion": avg_with,
            "avgProductivityWithoutCompletion": avg_without,
            "productivityImpact": impact,
        })

    ranked = sorted(
        (r for r in rows if r["productivityImpact"] is not None),
        key=lambda r: r["productivityImpact"],
        reverse=True,
    )
    ranked += sorted(
        (r for r in rows if r["productivityImpact"] is None),
        key=lambda r: r["habitName"],
    )
    return {"correlations": ranked, "productivityValueMap": values}


# ── Calendar ──────────────────────────────────────────────────


def notes_calendar(
    notes: Iterable[JournalNote],
    moods: Iterable[LabelOption],
    productivity_levels: Iterable[LabelOption],
    year: int,
    month: int,
) -> dict[str, Any]:
    start, end = month_bounds(year, month)
    mood_values = value_map(moods)
    prod_values = value_map(productivity_levels)

    entries = []
    for note in sorted(notes, key=lambda n: n.date):
        if not start <= note.date <= end:
            continue
        preview = note.content if len(note.content) <= 100 else note.content[:100] + "..."
        entries.append({
            "date": note.date,
            "dayOfMonth": int(note.date[8:10]),
            "id": note.id,
            "hasContent": bool(note.content),
            "contentPreview": preview,
            "mood": note.mood,
            "moodValue": mood_values.get(note.mood) if note.mood else None,
            "productivityLevel": note.productivity_level,
            "productivityValue": prod_values.get(note.productivity_level) if note.productivity_level else None,
            "updatedAt": note.updated_at,
        })

    return {
        "year": year,
        "month": month,
        "notes": entries,
        "moodValueMap": mood_values,
        "productivityValueMap": prod_values,
    }
