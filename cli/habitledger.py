#!/usr/bin/env python3
"""HabitLedger TUI — habit check-off and streaks in the terminal, powered by Textual."""

from __future__ import annotations

import logging
import os
import sys

from textual import on
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, VerticalScroll
from textual.widgets import DataTable, Footer, Header, Label, Static

from core import (
    workspace_root,
    today_str,
    HabitLedgerError,
    habits_transaction,
    load_habits,
    user_habits,
    toggle_completion,
    overall_analytics,
)
from core.logging import setup_logging
from core.models import Habit

logger = logging.getLogger("habitledger.tui")


CSS = """
Screen {
    background: $surface;
}

#main-layout {
    height: 1fr;
}

#left-pane {
    width: 2fr;
    min-width: 40;
    border-right: tall $primary-background-darken-2;
    padding: 0 1;
}

#right-pane {
    width: 1fr;
    min-width: 30;
    padding: 0 1;
}

#habits-table {
    height: 1fr;
}

.section-title {
    text-style: bold;
    color: $text;
    margin: 1 0 0 0;
    padding: 0 1;
}

#overview {
    padding: 0 1;
}
"""


def current_user() -> str:
    return os.environ.get("HABITLEDGER_USERNAME") or "guest"


def habit_row(habit: Habit, today: str) -> tuple[str, ...]:
    done = "✓" if habit.completed_days.is_completed(today) else " "
    days = ",".join(str(d) for d in habit.specific_days) or "-"
    return (
        done,
        habit.name,
        habit.tag,
        f"{habit.repetition} ({days})",
        str(habit.current_streak),
        str(habit.best_streak),
        str(habit.current_counter),
    )


def render_overview(overview: dict) -> str:
    lines = [
        f"Habits: {overview['activeHabitsCount']} active / {overview['totalHabits']} total",
        f"Done today: {overview['completedToday']}",
        f"Last 30 days: {overview['last30DaysSuccessRate'] * 100:.0f}%",
    ]
    longest = overview.get("longestStreakHabit")
    if longest:
        lines.append(f"Longest streak: {longest['habitName']} ({longest['bestStreak']})")
    best_day = overview.get("bestDayOfWeek")
    if best_day:
        lines.append(f"Best day: {best_day['dayName']}")
    consistent = overview.get("mostConsistentHabits") or []
    if consistent:
        lines.append("")
        lines.append("Most consistent:")
        for h in consistent:
            lines.append(f"  {h['habitName']}: {h['successRate'] * 100:.0f}%")
    return "\n".join(lines)


# ── Main app ───────────────────────────────────────────────────


class HabitLedgerApp(App):
    """Today's habits with streaks, plus a 30-day overview panel."""

    TITLE = "HabitLedger"
    CSS = CSS

    BINDINGS = [
        Binding("space", "toggle_today", "Toggle today"),
        Binding("r", "refresh", "Refresh"),
        Binding("q", "quit", "Quit"),
    ]

    def __init__(self, user_id: str | None = None) -> None:
        super().__init__()
        self.user_id = user_id or current_user()
        self._habit_ids: list[str] = []
        self._today = ""

    def compose(self) -> ComposeResult:
        yield Header()
        yield Horizontal(
            VerticalScroll(
                Label("Habits", classes="section-title", id="habits-title"),
                DataTable(id="habits-table", cursor_type="row"),
                id="left-pane",
            ),
            VerticalScroll(
                Label("Overview", classes="section-title"),
                Static(id="overview"),
                id="right-pane",
            ),
            id="main-layout",
        )
        yield Footer()

    def on_mount(self) -> None:
        table = self.query_one("#habits-table", DataTable)
        table.add_columns("Done", "Habit", "Tag", "Repeats", "Streak", "Best", "Total")
        self._load_data()
        table.focus()

    def _load_data(self) -> None:
        """Reload habits from disk and repopulate both panes."""
        root = workspace_root()
        self._today = today_str(root)
        habits = user_habits(load_habits(root), self.user_id, active_only=True)

        table = self.query_one("#habits-table", DataTable)
        cursor = table.cursor_row
        table.clear()
        self._habit_ids = []
        for habit in habits:
            table.add_row(*habit_row(habit, self._today), key=habit.id)
            self._habit_ids.append(habit.id)
        if self._habit_ids:
            table.move_cursor(row=min(cursor, len(self._habit_ids) - 1))

        self.query_one("#habits-title", Label).update(f"Habits · {self._today}")
        overview = overall_analytics(habits, self._today)
        self.query_one("#overview", Static).update(render_overview(overview))

    def action_refresh(self) -> None:
        self._load_data()

    def action_toggle_today(self) -> None:
        if not self._habit_ids:
            return
        table = self.query_one("#habits-table", DataTable)
        habit_id = self._habit_ids[table.cursor_row]
        try:
            with habits_transaction(workspace_root()) as habits_file:
                completed, streaks = toggle_completion(
                    habits_file, habit_id, self._today, self._today, user_id=self.user_id
                )
        except HabitLedgerError as e:
            logger.warning("Toggle failed for %s: %s", habit_id, e)
            self.notify(str(e), title="Error", severity="error")
            return
        self.notify(
            f"{'Done' if completed else 'Not done'} · streak {streaks.current_streak}",
            timeout=2,
        )
        self._load_data()

    @on(DataTable.RowSelected, "#habits-table")
    def _on_row_selected(self, event: DataTable.RowSelected) -> None:
        self.action_toggle_today()


# ── Entry point ────────────────────────────────────────────────


def main() -> None:
    root = workspace_root()
    if not root.exists():
        print(f"Data root not found: {root}")
        print("Set HABITLEDGER_ROOT or create the directory first.")
        sys.exit(1)

    setup_logging(root=root, log_file=root / "habitledger.log")
    app = HabitLedgerApp()
    app.run()


if __name__ == "__main__":
    main()
