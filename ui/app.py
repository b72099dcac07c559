from __future__ import annotations

import logging
import os
import secrets
import time
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any

from fastapi import Body, Depends, FastAPI, HTTPException, Request, status
from fastapi.responses import JSONResponse
from fastapi.security import HTTPBasic, HTTPBasicCredentials

from core import (
    workspace_root as _workspace_root,
    load_profile,
    today_str,
    now_iso,
    HabitNotFound,
    InvalidDate,
    is_valid_date,
    habits_transaction,
    load_habits,
    get_habit,
    user_habits,
    create_habit,
    update_habit,
    delete_habit,
    reorder_habits,
    set_completion,
    toggle_completion,
    batch_set_completions,
    delete_completion,
    list_completions,
    load_notes,
    notes_transaction,
    user_notes,
    find_note,
    upsert_note,
    delete_note,
    validate_options,
    get_options,
    set_options,
    period_window,
    habit_analytics,
    habit_report,
    overall_analytics,
    all_habits_analytics,
    daily_analytics,
    weekly_analytics,
    monthly_analytics,
    quarter_analytics,
    notes_overview,
    mood_trends,
    productivity_correlation,
    notes_calendar,
)
from core.logging import setup_logging

logger = logging.getLogger("habitledger.api")


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    logger.info("HabitLedger API starting (data root: %s)", _workspace_root())
    yield


app = FastAPI(title="HabitLedger API", version="0.1.0", lifespan=lifespan)


# ── Middleware & error mapping ────────────────────────────────


@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.time()
    response = await call_next(request)
    ms = (time.time() - start) * 1000
    logger.info("%s %s -> %s (%.0fms)", request.method, request.url.path, response.status_code, ms)
    return response


@app.exception_handler(HabitNotFound)
async def habit_not_found_handler(request: Request, exc: HabitNotFound):
    return JSONResponse(status_code=404, content={"detail": str(exc)})


@app.exception_handler(ValueError)
async def value_error_handler(request: Request, exc: ValueError):
    logger.warning("Rejected %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=400, content={"detail": str(exc)})


@app.exception_handler(Exception)
async def global_error_handler(request: Request, exc: Exception):
    logger.error("Unhandled error: %s", exc, exc_info=True)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


# ── Auth ──────────────────────────────────────────────────────

security = HTTPBasic(auto_error=False)


def get_current_user(credentials: HTTPBasicCredentials | None = Depends(security)) -> str:
    expected_username = os.environ.get("HABITLEDGER_USERNAME", "")
    expected_password = os.environ.get("HABITLEDGER_PASSWORD", "")

    if not expected_username or not expected_password:
        return "guest"

    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Basic"},
        )

    correct_username = secrets.compare_digest(credentials.username.encode("utf-8"), expected_username.encode("utf-8"))
    correct_password = secrets.compare_digest(credentials.password.encode("utf-8"), expected_password.encode("utf-8"))

    if not (correct_username and correct_password):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
            headers={"WWW-Authenticate": "Basic"},
        )

    return credentials.username


def _context() -> tuple[Path, str]:
    root = _workspace_root()
    return root, today_str(root)


def _require(payload: dict[str, Any], *keys: str) -> None:
    missing = [k for k in keys if payload.get(k) in (None, "")]
    if missing:
        raise HTTPException(status_code=400, detail="; ".join(f"Missing required field: {k}" for k in missing))


@app.get("/healthz")
def healthz() -> dict[str, str]:
    return {"ok": "true"}


# ── Habits ────────────────────────────────────────────────────


@app.get("/api/habits")
def api_list_habits(activeOnly: bool = False, username: str = Depends(get_current_user)) -> dict[str, Any]:
    habits_file = load_habits(_workspace_root())
    habits = user_habits(habits_file, username, active_only=activeOnly)
    return {"habits": [h.to_dict() for h in habits]}


@app.post("/api/habits")
def api_create_habit(payload: dict[str, Any] = Body(...), username: str = Depends(get_current_user)) -> dict[str, Any]:
    root = _workspace_root()
    with habits_transaction(root) as habits_file:
        habit, errors = create_habit(habits_file, payload, username, now=now_iso(root))
        if errors:
            raise HTTPException(status_code=400, detail="; ".join(errors))
    return {"ok": True, "habit": habit.to_dict()}


@app.post("/api/habits/reorder")
def api_reorder_habits(payload: dict[str, Any] = Body(...), username: str = Depends(get_current_user)) -> dict[str, Any]:
    ids = payload.get("habitIds")
    if not isinstance(ids, list):
        raise HTTPException(status_code=400, detail="habitIds must be a list")
    with habits_transaction(_workspace_root()) as habits_file:
        errors = reorder_habits(habits_file, username, [str(i) for i in ids])
        if errors:
            raise HTTPException(status_code=400, detail="; ".join(errors))
        habits = user_habits(habits_file, username)
    return {"ok": True, "habits": [h.to_dict() for h in habits]}


@app.get("/api/habits/{habit_id}")
def api_get_habit(habit_id: str, username: str = Depends(get_current_user)) -> dict[str, Any]:
    habits_file = load_habits(_workspace_root())
    return {"habit": get_habit(habits_file, habit_id, username).to_dict()}


@app.put("/api/habits/{habit_id}")
def api_update_habit(habit_id: str, payload: dict[str, Any] = Body(...), username: str = Depends(get_current_user)) -> dict[str, Any]:
    root, today = _context()
    with habits_transaction(root) as habits_file:
        get_habit(habits_file, habit_id, username)
        updated, errors = update_habit(habits_file, habit_id, payload, today, user_id=username)
        if errors:
            raise HTTPException(status_code=400, detail="; ".join(errors))
    return {"ok": True, "habit": updated.to_dict() if updated else None}


@app.delete("/api/habits/{habit_id}")
def api_delete_habit(habit_id: str, username: str = Depends(get_current_user)) -> dict[str, Any]:
    with habits_transaction(_workspace_root()) as habits_file:
        if not delete_habit(habits_file, habit_id, user_id=username):
            raise HabitNotFound(habit_id)
    return {"ok": True, "habitId": habit_id}


@app.post("/api/habits/{habit_id}/toggle")
def api_toggle_habit(habit_id: str, payload: dict[str, Any] = Body(default={}), username: str = Depends(get_current_user)) -> dict[str, Any]:
    """Flip completion for payload['date'] (default: today)."""
    root, today = _context()
    day = payload.get("date") or today
    with habits_transaction(root) as habits_file:
        completed, streaks = toggle_completion(habits_file, habit_id, day, today, user_id=username)
    return {"ok": True, "habitId": habit_id, "date": day, "completed": completed, "streaks": streaks.to_dict()}


# ── Completions ───────────────────────────────────────────────


@app.get("/api/completions")
def api_list_completions(
    habitId: str | None = None,
    start: str | None = None,
    end: str | None = None,
    username: str = Depends(get_current_user),
) -> dict[str, Any]:
    habits_file = load_habits(_workspace_root())
    if habitId:
        get_habit(habits_file, habitId, username)
    records = list_completions(habits_file, username, habit_id=habitId, start=start, end=end)
    return {"completions": [r.to_dict() for r in records]}


@app.post("/api/completions")
def api_set_completion(payload: dict[str, Any] = Body(...), username: str = Depends(get_current_user)) -> dict[str, Any]:
    _require(payload, "habitId", "date")
    root, today = _context()
    completed = bool(payload.get("completed", True))
    with habits_transaction(root) as habits_file:
        streaks = set_completion(habits_file, payload["habitId"], payload["date"], completed, today, user_id=username)
    return {
        "ok": True,
        "habitId": payload["habitId"],
        "date": payload["date"],
        "completed": completed,
        "streaks": streaks.to_dict(),
    }


@app.post("/api/completions/batch")
def api_batch_completions(payload: dict[str, Any] = Body(...), username: str = Depends(get_current_user)) -> dict[str, Any]:
    items = payload.get("completions")
    if not isinstance(items, list) or not items:
        raise HTTPException(status_code=400, detail="completions must be a non-empty list")
    changes = []
    for item in items:
        if not isinstance(item, dict):
            raise HTTPException(status_code=400, detail="Each completion must be an object")
        _require(item, "habitId", "date")
        changes.append((str(item["habitId"]), str(item["date"]), bool(item.get("completed", True))))

    root, today = _context()
    with habits_transaction(root) as habits_file:
        result = batch_set_completions(habits_file, changes, today, user_id=username)
    return {"ok": True, **result}


@app.delete("/api/completions/{completion_id}")
def api_delete_completion(completion_id: str, username: str = Depends(get_current_user)) -> dict[str, Any]:
    root, today = _context()
    with habits_transaction(root) as habits_file:
        if not delete_completion(habits_file, completion_id, today, user_id=username):
            raise HTTPException(status_code=404, detail=f"Completion not found: {completion_id}")
    return {"ok": True, "id": completion_id}


# ── Habit analytics ───────────────────────────────────────────


@app.get("/api/analytics/overview")
def api_overview(username: str = Depends(get_current_user)) -> dict[str, Any]:
    root, today = _context()
    return overall_analytics(user_habits(load_habits(root), username), today)


@app.get("/api/analytics/habits")
def api_habits_analytics(period: str | None = None, username: str = Depends(get_current_user)) -> dict[str, Any]:
    root, today = _context()
    period = period or str(load_profile(root).get("default_period", "30days"))
    return all_habits_analytics(user_habits(load_habits(root), username), period, today)


@app.get("/api/analytics/habits/{habit_id}")
def api_habit_analytics(habit_id: str, period: str | None = None, username: str = Depends(get_current_user)) -> dict[str, Any]:
    root, today = _context()
    period = period or str(load_profile(root).get("default_period", "30days"))
    habit = get_habit(load_habits(root), habit_id, username)
    start, end = period_window(period, today)
    report = habit_report(habit, period, today)
    report["summary"] = habit_analytics(habit, start, end).to_dict()
    return report


@app.get("/api/analytics/daily/{day}")
def api_daily_analytics(day: str, username: str = Depends(get_current_user)) -> dict[str, Any]:
    root = _workspace_root()
    note = find_note(load_notes(root), username, day)
    return daily_analytics(user_habits(load_habits(root), username), day, note)


@app.get("/api/analytics/weekly/{start}")
def api_weekly_analytics(start: str, username: str = Depends(get_current_user)) -> dict[str, Any]:
    return weekly_analytics(user_habits(load_habits(_workspace_root()), username), start)


@app.get("/api/analytics/monthly/{year}/{month}")
def api_monthly_analytics(year: int, month: int, username: str = Depends(get_current_user)) -> dict[str, Any]:
    return monthly_analytics(user_habits(load_habits(_workspace_root()), username), year, month)


@app.get("/api/analytics/quarter/{start}")
def api_quarter_analytics(start: str, username: str = Depends(get_current_user)) -> dict[str, Any]:
    return quarter_analytics(user_habits(load_habits(_workspace_root()), username), start)


# ── Notes ─────────────────────────────────────────────────────


@app.get("/api/notes")
def api_list_notes(
    start: str | None = None,
    end: str | None = None,
    username: str = Depends(get_current_user),
) -> dict[str, Any]:
    for bound in (start, end):
        if bound and not is_valid_date(bound):
            raise InvalidDate(bound)
    notes = user_notes(load_notes(_workspace_root()), username)
    if start:
        notes = [n for n in notes if n.date >= start]
    if end:
        notes = [n for n in notes if n.date <= end]
    return {"notes": [n.to_dict() for n in notes]}


@app.get("/api/notes/analytics/overview")
def api_notes_overview(username: str = Depends(get_current_user)) -> dict[str, Any]:
    root, today = _context()
    notes = user_notes(load_notes(root), username)
    return notes_overview(
        notes,
        get_options("moods", username, root),
        get_options("productivityLevels", username, root),
        today,
    )


@app.get("/api/notes/analytics/mood-trends")
def api_mood_trends(username: str = Depends(get_current_user)) -> dict[str, Any]:
    root = _workspace_root()
    return mood_trends(user_notes(load_notes(root), username), get_options("moods", username, root))


@app.get("/api/notes/analytics/productivity-correlation")
def api_productivity_correlation(username: str = Depends(get_current_user)) -> dict[str, Any]:
    root = _workspace_root()
    return productivity_correlation(
        user_habits(load_habits(root), username, active_only=True),
        user_notes(load_notes(root), username),
        get_options("productivityLevels", username, root),
    )


@app.get("/api/notes/calendar/{year}/{month}")
def api_notes_calendar(year: int, month: int, username: str = Depends(get_current_user)) -> dict[str, Any]:
    root = _workspace_root()
    return notes_calendar(
        user_notes(load_notes(root), username),
        get_options("moods", username, root),
        get_options("productivityLevels", username, root),
        year,
        month,
    )


@app.get("/api/notes/{day}")
def api_get_note(day: str, username: str = Depends(get_current_user)) -> dict[str, Any]:
    note = find_note(load_notes(_workspace_root()), username, day)
    return {"date": day, "note": note.to_dict() if note else None}


@app.put("/api/notes/{day}")
def api_put_note(day: str, payload: dict[str, Any] = Body(...), username: str = Depends(get_current_user)) -> dict[str, Any]:
    root = _workspace_root()
    with notes_transaction(root) as notes:
        note, errors = upsert_note(notes, username, day, payload, now_iso(root))
        if errors:
            raise HTTPException(status_code=400, detail="; ".join(errors))
    return {"ok": True, "note": note.to_dict()}


@app.delete("/api/notes/{day}")
def api_delete_note(day: str, username: str = Depends(get_current_user)) -> dict[str, Any]:
    with notes_transaction(_workspace_root()) as notes:
        if not delete_note(notes, username, day):
            raise HTTPException(status_code=404, detail=f"Note not found: {day}")
    return {"ok": True, "date": day}


# ── Options ───────────────────────────────────────────────────

_OPTION_ROUTES = {"moods": "moods", "productivity": "productivityLevels"}


@app.get("/api/options/{kind}")
def api_get_options(kind: str, username: str = Depends(get_current_user)) -> dict[str, Any]:
    if kind not in _OPTION_ROUTES:
        raise HTTPException(status_code=404, detail=f"Unknown option set: {kind}")
    options = get_options(_OPTION_ROUTES[kind], username, _workspace_root())
    return {"options": [o.to_dict() for o in options]}


@app.put("/api/options/{kind}")
def api_put_options(kind: str, payload: Any = Body(...), username: str = Depends(get_current_user)) -> dict[str, Any]:
    """Replace an option set. Body is a list of {label, value} or {"options": [...]}."""
    if kind not in _OPTION_ROUTES:
        raise HTTPException(status_code=404, detail=f"Unknown option set: {kind}")
    if isinstance(payload, dict):
        payload = payload.get("options")
    options, errors = validate_options(payload)
    if errors:
        raise HTTPException(status_code=400, detail="; ".join(errors))
    set_options(_OPTION_ROUTES[kind], username, options, _workspace_root())
    logger.info("%s replaced %s options (%d labels)", username, kind, len(options))
    return {"ok": True, "options": [o.to_dict() for o in options]}
