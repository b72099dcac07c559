"""Tests for cli/habitledger.py — table rows and the overview panel text."""

from cli.habitledger import current_user, habit_row, render_overview
from core.overview import overall_analytics
from core.streaks import apply_streaks


def test_habit_row(make_habit):
    habit = make_habit(["2024-01-09", "2024-01-10"], repetition="weekly", specific_days=[2, 3])
    apply_streaks(habit, "2024-01-10")
    assert habit_row(habit, "2024-01-10") == ("✓", "Read", "learning", "weekly (2,3)", "2", "2", "2")
    assert habit_row(habit, "2024-01-11")[0] == " "


def test_render_overview(make_habit):
    habit = make_habit(["2024-01-09", "2024-01-10"])
    apply_streaks(habit, "2024-01-10")
    text = render_overview(overall_analytics([habit], "2024-01-10"))
    assert "Habits: 1 active / 1 total" in text
    assert "Done today: 1" in text
    assert "Longest streak: Read (2)" in text
    assert "Most consistent:" in text


def test_render_overview_empty():
    text = render_overview(overall_analytics([], "2024-01-10"))
    assert "Last 30 days: 0%" in text
    assert "Longest streak" not in text


def test_current_user(monkeypatch):
    monkeypatch.delenv("HABITLEDGER_USERNAME", raising=False)
    assert current_user() == "guest"
    monkeypatch.setenv("HABITLEDGER_USERNAME", "alice")
    assert current_user() == "alice"
