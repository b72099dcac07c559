"""Tests for ui/app.py — HTTP API over the habit and note stores."""

import pytest
from fastapi.testclient import TestClient

import ui.app
from ui.app import app

TODAY = "2024-01-10"


@pytest.fixture
def client(workspace, monkeypatch):
    monkeypatch.delenv("HABITLEDGER_USERNAME", raising=False)
    monkeypatch.delenv("HABITLEDGER_PASSWORD", raising=False)
    monkeypatch.setattr(ui.app, "today_str", lambda root=None: TODAY)
    return TestClient(app)


def test_healthz(client):
    assert client.get("/healthz").json() == {"ok": "true"}


# ── Habits ────────────────────────────────────────────────────


def test_list_habits(client):
    r = client.get("/api/habits")
    assert r.status_code == 200
    assert [h["id"] for h in r.json()["habits"]] == ["read", "gym", "old"]
    r = client.get("/api/habits", params={"activeOnly": "true"})
    assert [h["id"] for h in r.json()["habits"]] == ["read", "gym"]


def test_create_and_get_habit(client):
    r = client.post("/api/habits", json={"name": "Stretch", "tag": "health", "repetition": "daily"})
    assert r.status_code == 200
    habit = r.json()["habit"]
    assert habit["userId"] == "guest"
    assert habit["currentStreak"] == 0

    r = client.get(f"/api/habits/{habit['id']}")
    assert r.json()["habit"]["name"] == "Stretch"


def test_create_habit_invalid(client):
    r = client.post("/api/habits", json={"tag": "health", "repetition": "sometimes"})
    assert r.status_code == 400
    assert "name" in r.json()["detail"]
    assert "repetition" in r.json()["detail"]


def test_other_users_habit_is_not_found(client):
    assert client.get("/api/habits/other").status_code == 404
    assert client.put("/api/habits/other", json={"name": "x"}).status_code == 404


def test_update_habit_ignores_streak_fields(client):
    r = client.put("/api/habits/read", json={"name": "Read daily", "bestStreak": 100})
    assert r.status_code == 200
    assert r.json()["habit"]["name"] == "Read daily"
    assert r.json()["habit"]["bestStreak"] == 5


def test_delete_habit(client):
    assert client.delete("/api/habits/old").json() == {"ok": True, "habitId": "old"}
    assert client.delete("/api/habits/old").status_code == 404


def test_reorder_habits(client):
    r = client.post("/api/habits/reorder", json={"habitIds": ["gym", "read", "old"]})
    assert [h["id"] for h in r.json()["habits"]] == ["gym", "read", "old"]
    assert client.post("/api/habits/reorder", json={"habitIds": ["other"]}).status_code == 400


def test_toggle_defaults_to_today(client):
    r = client.post("/api/habits/read/toggle")
    body = r.json()
    assert body["date"] == TODAY
    assert body["completed"] is False
    assert body["streaks"] == {"currentStreak": 4, "bestStreak": 5, "currentCounter": 4}

    r = client.post("/api/habits/read/toggle", json={"date": TODAY})
    assert r.json()["completed"] is True


def test_toggle_rejects_bad_date(client):
    r = client.post("/api/habits/read/toggle", json={"date": "2024-02-30"})
    assert r.status_code == 400
    assert "Invalid date" in r.json()["detail"]


# ── Completions ───────────────────────────────────────────────


def test_list_completions(client):
    r = client.get("/api/completions", params={"habitId": "gym"})
    completions = r.json()["completions"]
    assert [c["id"] for c in completions] == ["gym-20231224", "gym-20231231", "gym-20240107"]
    assert completions[0]["completedAt"] == "2023-12-24T00:00:00.000Z"


def test_list_completions_bad_bounds(client):
    assert client.get("/api/completions", params={"start": "soon"}).status_code == 400
    r = client.get("/api/completions", params={"start": "2024-01-09", "end": "2024-01-01"})
    assert r.status_code == 400


def test_set_completion(client):
    r = client.post("/api/completions", json={"habitId": "read", "date": "2024-01-05", "completed": True})
    assert r.status_code == 200
    assert r.json()["streaks"]["currentStreak"] == 6
    saved = client.get("/api/habits/read").json()["habit"]
    assert saved["currentStreak"] == 6
    assert 20240105 in saved["completedDays"]


def test_set_completion_missing_fields(client):
    r = client.post("/api/completions", json={"habitId": "read"})
    assert r.status_code == 400
    assert "date" in r.json()["detail"]


def test_batch_completions(client):
    r = client.post(
        "/api/completions/batch",
        json={"completions": [
            {"habitId": "read", "date": "2024-01-05"},
            {"habitId": "gym", "date": "2024-01-07", "completed": False},
            {"habitId": "ghost", "date": "2024-01-07"},
        ]},
    )
    body = r.json()
    assert body["updated"] == ["read", "gym"]
    assert body["unknown"] == ["ghost"]
    assert body["streaks"]["gym"]["currentStreak"] == 0


def test_batch_completions_rejects_empty(client):
    assert client.post("/api/completions/batch", json={"completions": []}).status_code == 400


def test_delete_completion(client):
    assert client.delete("/api/completions/read-20240110").status_code == 200
    assert client.delete("/api/completions/read-20240110").status_code == 404
    assert client.delete("/api/completions/nonsense").status_code == 400


# ── Analytics ─────────────────────────────────────────────────


def test_analytics_overview(client):
    body = client.get("/api/analytics/overview").json()
    assert body["totalHabits"] == 3
    assert body["activeHabitsCount"] == 2
    assert body["completedToday"] == 1


def test_analytics_habits_uses_period(client):
    body = client.get("/api/analytics/habits", params={"period": "7days"}).json()
    assert body["startDate"] == "2024-01-03"
    assert {h["habitId"] for h in body["habits"]} == {"read", "gym"}
    default = client.get("/api/analytics/habits").json()
    assert default["period"] == "30days"


def test_analytics_single_habit(client):
    body = client.get("/api/analytics/habits/gym").json()
    assert body["habitName"] == "Gym"
    assert body["summary"]["habitId"] == "gym"
    assert body["basicStats"]["bestStreak"] == 3
    assert client.get("/api/analytics/habits/ghost").status_code == 404


def test_analytics_daily_includes_note(client):
    body = client.get("/api/analytics/daily/2024-01-08").json()
    assert body["totalHabits"] == 1
    assert body["note"]["id"] == "n1"
    assert client.get("/api/analytics/daily/2024-1-8").status_code == 400


def test_analytics_weekly_monthly_quarter(client):
    assert client.get("/api/analytics/weekly/2024-01-07").json()["endDate"] == "2024-01-13"
    assert client.get("/api/analytics/monthly/2024/1").json()["monthName"] == "January"
    assert client.get("/api/analytics/monthly/2024/13").status_code == 400
    assert len(client.get("/api/analytics/quarter/2024-01-01").json()["dailyData"]) == 91
    assert client.get("/api/analytics/quarter/someday").status_code == 400


# ── Notes & options ───────────────────────────────────────────


def test_notes_crud(client):
    assert len(client.get("/api/notes").json()["notes"]) == 2
    assert client.get("/api/notes/2024-01-08").json()["note"]["mood"] == "Happy"
    assert client.get("/api/notes/2024-01-10").json()["note"] is None

    r = client.put("/api/notes/2024-01-10", json={"content": "Wrote tests", "mood": "Good"})
    assert r.status_code == 200
    assert r.json()["note"]["userId"] == "guest"
    assert client.get("/api/notes", params={"start": "2024-01-09"}).json()["notes"][-1]["content"] == "Wrote tests"

    assert client.delete("/api/notes/2024-01-10").status_code == 200
    assert client.delete("/api/notes/2024-01-10").status_code == 404


def test_list_notes_rejects_malformed_bounds(client):
    assert client.get("/api/notes", params={"start": "2024-1-9"}).status_code == 400
    assert client.get("/api/notes", params={"end": "yesterday"}).status_code == 400


def test_put_note_bad_date(client):
    assert client.put("/api/notes/tomorrow", json={"content": "x"}).status_code == 400


def test_options(client):
    moods = client.get("/api/options/moods").json()["options"]
    assert moods[0] == {"label": "Happy", "value": 10}

    r = client.put("/api/options/productivity", json=[{"label": "Focused", "value": 3}, {"label": "Scattered", "value": 1}])
    assert r.status_code == 200
    levels = client.get("/api/options/productivity").json()["options"]
    assert [o["label"] for o in levels] == ["Focused", "Scattered"]

    assert client.put("/api/options/moods", json={"options": [{"label": "A"}]}).status_code == 400
    assert client.get("/api/options/weather").status_code == 404


def test_notes_analytics(client):
    overview = client.get("/api/notes/analytics/overview").json()
    assert overview["totalNotes"] == 2
    assert overview["currentStreak"] == 2
    assert overview["avgMoodValue"] == 6.0

    trends = client.get("/api/notes/analytics/mood-trends").json()
    assert trends["trends"][0]["month"] == "2024-01"

    rows = client.get("/api/notes/analytics/productivity-correlation").json()["correlations"]
    assert [r["habitName"] for r in rows] == ["Gym", "Read"]
    read = rows[1]
    assert read["avgProductivityWithCompletion"] == 3.5
    assert read["avgProductivityWithoutCompletion"] is None
    assert read["productivityImpact"] is None

    calendar = client.get("/api/notes/calendar/2024/1").json()
    assert [n["date"] for n in calendar["notes"]] == ["2024-01-08", "2024-01-09"]


# ── Auth ──────────────────────────────────────────────────────


def test_basic_auth_when_configured(client, monkeypatch):
    monkeypatch.setenv("HABITLEDGER_USERNAME", "alice")
    monkeypatch.setenv("HABITLEDGER_PASSWORD", "s3cret")
    assert client.get("/api/habits").status_code == 401
    assert client.get("/api/habits", auth=("alice", "wrong")).status_code == 401
    r = client.get("/api/habits", auth=("alice", "s3cret"))
    assert r.status_code == 200
    assert [h["id"] for h in r.json()["habits"]] == ["other"]
