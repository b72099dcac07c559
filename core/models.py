"""Typed dataclasses for the HabitLedger data model.

All models use from_dict/to_dict for JSON/YAML serialization.
camelCase in JSON is mapped to snake_case in Python.
Unknown keys are ignored; missing keys use defaults.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from core.ledger import CompletionLedger, CompletionRecord


__all__ = [
    "CompletionRecord",
    "Habit",
    "HabitsFile",
    "JournalNote",
    "LabelOption",
    "MoodOption",
    "ProductivityLevelOption",
    "StreakSnapshot",
    "DayOfWeekStat",
    "HabitAnalytics",
]


# ── Habits ────────────────────────────────────────────────────


@dataclass
class Habit:
    id: str = ""
    user_id: str = ""
    name: str = ""
    tag: str = ""
    description: str | None = None
    motivation_note: str | None = None
    repetition: str = "daily"  # daily, weekly, monthly
    # weekday 0-6 (Sunday first) for weekly, day-of-month 1-31 for monthly
    specific_days: list[int] = field(default_factory=list)
    goal_value: float = 1
    # derived: always recomputed from completed_days
    current_streak: int = 0
    best_streak: int = 0
    current_counter: int = 0
    completed_days: CompletionLedger = field(default_factory=CompletionLedger)
    is_active: bool = True
    order: int | None = None
    created_at: str = ""

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> Habit:
        return cls(
            id=str(d.get("id", "")),
            user_id=str(d.get("userId", "")),
            name=str(d.get("name", "")),
            tag=str(d.get("tag", "")),
            description=d.get("description"),
            motivation_note=d.get("motivationNote"),
            repetition=str(d.get("repetition", "daily")),
            specific_days=[int(x) for x in (d.get("specificDays") or [])],
            goal_value=d.get("goalValue", 1),
            current_streak=int(d.get("currentStreak", 0) or 0),
            best_streak=int(d.get("bestStreak", 0) or 0),
            current_counter=int(d.get("currentCounter", 0) or 0),
            completed_days=CompletionLedger.from_list(d.get("completedDays") or []),
            is_active=bool(d.get("isActive", True)),
            order=d.get("order"),
            created_at=str(d.get("createdAt", "")),
        )

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "id": self.id,
            "userId": self.user_id,
            "name": self.name,
            "tag": self.tag,
            "repetition": self.repetition,
            "specificDays": list(self.specific_days),
            "goalValue": self.goal_value,
            "currentStreak": self.current_streak,
            "bestStreak": self.best_streak,
            "currentCounter": self.current_counter,
            "completedDays": self.completed_days.to_list(),
            "isActive": self.is_active,
            "createdAt": self.created_at,
        }
        if self.description:
            d["description"] = self.description
        if self.motivation_note:
            d["motivationNote"] = self.motivation_note
        if self.order is not None:
            d["order"] = self.order
        return d


@dataclass
class HabitsFile:
    habits: list[Habit] = field(default_factory=list)

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> HabitsFile:
        if not d or not isinstance(d, dict):
            return cls()
        return cls(habits=[Habit.from_dict(h) for h in (d.get("habits") or [])])

    def to_dict(self) -> dict[str, Any]:
        return {"habits": [h.to_dict() for h in self.habits]}

    def for_user(self, user_id: str) -> list[Habit]:
        return [h for h in self.habits if h.user_id == user_id]


# ── Journal ───────────────────────────────────────────────────


@dataclass
class JournalNote:
    id: str = ""
    user_id: str = ""
    date: str = ""
    content: str = ""
    mood: str | None = None
    productivity_level: str | None = None
    created_at: str = ""
    updated_at: str = ""

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> JournalNote:
        return cls(
            id=str(d.get("id", d.get("_id", ""))),
            user_id=str(d.get("userId", "")),
            date=str(d.get("date", "")),
            content=str(d.get("content", "") or ""),
            mood=d.get("mood") or None,
            productivity_level=d.get("productivityLevel") or None,
            created_at=str(d.get("createdAt", "")),
            updated_at=str(d.get("updatedAt", "")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "userId": self.user_id,
            "date": self.date,
            "content": self.content,
            "mood": self.mood,
            "productivityLevel": self.productivity_level,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }


@dataclass
class LabelOption:
    """A user-configurable label with a numeric score (mood or productivity)."""

    label: str = ""
    value: float = 0

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> LabelOption:
        return cls(label=str(d.get("label", "")), value=d.get("value", 0))

    def to_dict(self) -> dict[str, Any]:
        return {"label": self.label, "value": self.value}


MoodOption = LabelOption
ProductivityLevelOption = LabelOption


# ── Analytics ─────────────────────────────────────────────────


@dataclass
class StreakSnapshot:
    current_streak: int = 0
    best_streak: int = 0
    current_counter: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "currentStreak": self.current_streak,
            "bestStreak": self.best_streak,
            "currentCounter": self.current_counter,
        }


@dataclass
class DayOfWeekStat:
    day_of_week: int = 0
    day_name: str = ""
    total_days: int = 0
    completed_days: int = 0
    success_rate: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "dayOfWeek": self.day_of_week,
            "dayName": self.day_name,
            "totalDays": self.total_days,
            "completedDays": self.completed_days,
            "successRate": self.success_rate,
        }


@dataclass
class HabitAnalytics:
    habit_id: str = ""
    habit_name: str = ""
    tag: str = ""
    repetition: str = "daily"
    success_rate: float = 0.0
    best_day_of_week: int = -1
    worst_day_of_week: int = -1
    longest_streak: int = 0
    total_completions: int = 0
    average_completions_per_week: float = 0.0
    current_streak: int = 0
    best_streak: int = 0
    current_counter: int = 0
    goal_value: float = 1
    is_active: bool = True

    def to_dict(self) -> dict[str, Any]:
        return {
            "habitId": self.habit_id,
            "habitName": self.habit_name,
            "tag": self.tag,
            "repetition": self.repetition,
            "successRate": self.success_rate,
            "bestDayOfWeek": self.best_day_of_week,
            "worstDayOfWeek": self.worst_day_of_week,
            "longestStreak": self.longest_streak,
            "totalCompletions": self.total_completions,
            "averageCompletionsPerWeek": self.average_completions_per_week,
            "currentStreak": self.current_streak,
            "bestStreak": self.best_streak,
            "currentCounter": self.current_counter,
            "goalValue": self.goal_value,
            "isActive": self.is_active,
        }
