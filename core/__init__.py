"""HabitLedger core library — streak/analytics engine and file-backed store.

Public API re-exports for convenient imports:
    from core import workspace_root, today_str, habits_transaction, ...
"""

# Workspace & paths
from core.workspace import (
    workspace_root,
    load_profile,
    get_user_timezone,
    today_str,
    now_iso,
    profile_path,
    habits_path,
    notes_path,
    options_path,
)

# File I/O
from core.fileio import (
    read_text,
    read_json,
    read_yaml,
    write_json_atomic,
    write_yaml_atomic,
    locked,
)

# Errors
from core.errors import (
    HabitLedgerError,
    InvalidDate,
    InvalidRange,
    HabitNotFound,
)

# Dates & recurrence
from core.dates import (
    parse_date,
    format_date,
    is_valid_date,
    encode_date,
    decode_date,
    days_between,
    date_range,
    day_of_week,
    month_bounds,
)
from core.recurrence import (
    REPETITIONS,
    cadence_gap,
    is_due,
    due_dates,
)

# Ledger & streaks
from core.ledger import (
    CompletionLedger,
    CompletionRecord,
    batch_apply,
)
from core.streaks import (
    current_streak,
    all_streak_runs,
    best_streak,
    streak_periods,
    compute_streaks,
    apply_streaks,
)

# Analytics
from core.habit_analytics import (
    PERIOD_DAYS,
    period_window,
    success_rate,
    day_of_week_stats,
    best_and_worst_days,
    habit_analytics,
    habit_report,
)
from core.overview import (
    overall_analytics,
    all_habits_analytics,
    daily_analytics,
    weekly_analytics,
    monthly_analytics,
    quarter_analytics,
)
from core.journal import (
    notes_overview,
    mood_trends,
    productivity_correlation,
    notes_calendar,
)

# Store
from core.habits import (
    validate_habit,
    load_habits,
    save_habits,
    habits_transaction,
    find_habit,
    get_habit,
    user_habits,
    create_habit,
    update_habit,
    delete_habit,
    set_active,
    reorder_habits,
    set_completion,
    toggle_completion,
    batch_set_completions,
    delete_completion,
    list_completions,
    recompute_all,
)
from core.notes import (
    load_notes,
    notes_transaction,
    user_notes,
    find_note,
    upsert_note,
    delete_note,
    validate_options,
    get_options,
    set_options,
    get_moods,
    get_productivity_levels,
)

# Models
from core.models import (
    Habit,
    HabitsFile,
    JournalNote,
    LabelOption,
    MoodOption,
    ProductivityLevelOption,
    StreakSnapshot,
    DayOfWeekStat,
    HabitAnalytics,
)
