"""Tests for core/journal.py — note stats, mood trends, productivity correlation."""

import pytest

from core.journal import (
    current_note_streak,
    longest_note_streak,
    mood_trends,
    notes_calendar,
    notes_overview,
    productivity_correlation,
)
from core.models import JournalNote, LabelOption
from core.notes import DEFAULT_MOODS, DEFAULT_PRODUCTIVITY_LEVELS


def _note(day: str, content: str = "", mood: str | None = None, productivity: str | None = None) -> JournalNote:
    return JournalNote(id=f"n-{day}", user_id="guest", date=day, content=content, mood=mood, productivity_level=productivity)


@pytest.fixture
def notes():
    return [
        _note("2024-01-08", "Solid day.", "Happy", "High"),
        _note("2024-01-09", "Tired.", "Sad", "Low"),
        _note("2024-01-10", "", None, "Unlisted"),
    ]


def test_longest_note_streak():
    assert longest_note_streak([]) == 0
    assert longest_note_streak(["2024-01-01", "2024-01-02", "2024-01-04"]) == 2
    assert longest_note_streak(["2024-01-02", "2024-01-01", "2024-01-02", "2024-01-03"]) == 3


def test_note_streak_uses_plain_daily_adjacency():
    # Weekly spacing never chains, unlike a weekly habit streak
    assert longest_note_streak(["2024-01-07", "2024-01-14", "2024-01-21"]) == 1


def test_current_note_streak():
    dates = ["2024-01-08", "2024-01-09", "2024-01-10"]
    assert current_note_streak(dates, "2024-01-10") == 3
    assert current_note_streak(dates, "2024-01-11") == 3
    assert current_note_streak(dates, "2024-01-12") == 0
    assert current_note_streak([], "2024-01-10") == 0


def test_notes_overview(notes):
    o = notes_overview(notes, DEFAULT_MOODS, DEFAULT_PRODUCTIVITY_LEVELS, "2024-01-10")
    assert o["totalNotes"] == 3
    assert o["notesWithMood"] == 2
    assert o["notesWithProductivity"] == 3
    assert o["productivityDistribution"] == {"High": 1, "Low": 1, "Unlisted": 1}
    assert o["moodDistribution"] == {"Happy": 1, "Sad": 1}
    assert o["avgMoodValue"] == 6.0
    # "Unlisted" has no score, so it is left out of the average
    assert o["avgProductivityValue"] == 3.5
    assert o["avgContentLength"] == 5
    assert o["longestStreak"] == 3
    assert o["currentStreak"] == 3
    assert o["monthlyFrequency"] == {"2024-01": 3}
    assert o["monthlyMoodScores"]["2024-01"] == {"avg": 6.0, "count": 2, "sum": 12}
    assert o["completionRate"] == {"mood": 67, "productivity": 100}


def test_notes_overview_empty():
    o = notes_overview([], DEFAULT_MOODS, DEFAULT_PRODUCTIVITY_LEVELS, "2024-01-10")
    assert o["totalNotes"] == 0
    assert o["avgMoodValue"] is None
    assert o["avgProductivityValue"] is None
    assert o["avgContentLength"] == 0
    assert o["completionRate"] == {"mood": 0, "productivity": 0}


def test_averages_round_half_up():
    levels = [LabelOption("A", 2), LabelOption("B", 2.5)]
    o = notes_overview(
        [_note("2024-01-01", productivity="A"), _note("2024-01-02", productivity="B")],
        DEFAULT_MOODS,
        levels,
        "2024-01-02",
    )
    assert o["avgProductivityValue"] == 2.3


def test_mood_trends():
    notes = [
        _note("2023-12-30", mood="Happy"),
        _note("2024-01-08", mood="Happy"),
        _note("2024-01-09", mood="Sad"),
        _note("2024-01-10"),
    ]
    result = mood_trends(notes, DEFAULT_MOODS)
    assert [t["month"] for t in result["trends"]] == ["2023-12", "2024-01"]
    jan = result["trends"][1]
    assert jan["averageMood"] == 6.0
    assert jan["count"] == 2
    assert len(jan["distribution"]) == len(DEFAULT_MOODS)
    happy = next(d for d in jan["distribution"] if d["label"] == "Happy")
    assert happy["count"] == 1
    assert result["moodValueMap"]["Happy"] == 10


def test_productivity_correlation(make_habit, notes):
    read = make_habit(["2024-01-08"], id="read", name="Read")
    never = make_habit([], id="never", name="Another habit")
    result = productivity_correlation([never, read], notes, DEFAULT_PRODUCTIVITY_LEVELS)
    rows = result["correlations"]
    assert [r["habitId"] for r in rows] == ["read", "never"]

    assert rows[0]["avgProductivityWithCompletion"] == 5.0
    assert rows[0]["avgProductivityWithoutCompletion"] == 2.0
    assert rows[0]["productivityImpact"] == 3.0
    assert rows[0]["datesCompletedCount"] == 1

    assert rows[1]["avgProductivityWithCompletion"] is None
    assert rows[1]["avgProductivityWithoutCompletion"] == 3.5
    assert rows[1]["productivityImpact"] is None


def test_productivity_correlation_without_notes(make_habit):
    result = productivity_correlation([make_habit(["2024-01-08"])], [], DEFAULT_PRODUCTIVITY_LEVELS)
    assert result["correlations"] == []


def test_notes_calendar(notes):
    cal = notes_calendar(notes + [_note("2024-02-01", "x" * 150)], DEFAULT_MOODS, DEFAULT_PRODUCTIVITY_LEVELS, 2024, 1)
    assert [e["date"] for e in cal["notes"]] == ["2024-01-08", "2024-01-09", "2024-01-10"]
    first = cal["notes"][0]
    assert first["dayOfMonth"] == 8
    assert first["moodValue"] == 10
    assert first["productivityValue"] == 5
    assert cal["notes"][2]["hasContent"] is False
    assert cal["notes"][2]["productivityValue"] is None

    feb = notes_calendar([_note("2024-02-01", "x" * 150)], DEFAULT_MOODS, DEFAULT_PRODUCTIVITY_LEVELS, 2024, 2)
    assert feb["notes"][0]["contentPreview"] == "x" * 100 + "..."
