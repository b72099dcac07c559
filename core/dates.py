"""Calendar arithmetic for HabitLedger.

All dates cross module boundaries as 'YYYY-MM-DD' strings. Arithmetic is
done on datetime.date values, which carry no time-of-day or timezone, so
day counts are never perturbed by DST shifts.
"""

from __future__ import annotations

import calendar
import re
from datetime import date, timedelta

from core.errors import InvalidDate, InvalidRange


DAY_NAMES = ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]
MONTH_NAMES = [
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
]

_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


# ── Parsing & formatting ──────────────────────────────────────


def parse_date(value: str) -> date:
    """Parse a strict 'YYYY-MM-DD' string into a date."""
    if not isinstance(value, str) or not _DATE_RE.match(value):
        raise InvalidDate(value)
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise InvalidDate(value) from None


def format_date(d: date) -> str:
    return d.isoformat()


def is_valid_date(value: str) -> bool:
    try:
        parse_date(value)
    except InvalidDate:
        return False
    return True


# ── Integer encoding ──────────────────────────────────────────


def encode_date(value: str) -> int:
    """'2024-01-05' -> 20240105. Order-preserving."""
    d = parse_date(value)
    return d.year * 10000 + d.month * 100 + d.day


def decode_date(value: int) -> str:
    """20240105 -> '2024-01-05'."""
    if not 0 < int(value) <= 99991231:
        raise InvalidDate(value)
    padded = f"{int(value):08d}"
    text = f"{padded[:4]}-{padded[4:6]}-{padded[6:8]}"
    # Round-trip through parse_date so corrupt integers fail loudly
    parse_date(text)
    return text


# ── Arithmetic ────────────────────────────────────────────────


def days_between(a: str, b: str) -> int:
    """Whole calendar days from a to b (negative if b is earlier)."""
    return (parse_date(b) - parse_date(a)).days


def add_days(value: str, n: int) -> str:
    return format_date(parse_date(value) + timedelta(days=n))


def days_ago(today: str, n: int) -> str:
    return add_days(today, -n)


def date_range(start: str, end: str) -> list[str]:
    """Inclusive, ordered list of dates from start to end."""
    s = parse_date(start)
    e = parse_date(end)
    if s > e:
        raise InvalidRange(start, end)
    return [format_date(s + timedelta(days=i)) for i in range((e - s).days + 1)]


def day_of_week(value: str) -> int:
    """Weekday index with 0=Sunday .. 6=Saturday."""
    return (parse_date(value).weekday() + 1) % 7


def day_of_month(value: str) -> int:
    return parse_date(value).day


def month_bounds(year: int, month: int) -> tuple[str, str]:
    """First and last date of a calendar month."""
    if month < 1 or month > 12:
        raise ValueError(f"Invalid month: {month} (expected 1-12)")
    last = calendar.monthrange(year, month)[1]
    return format_date(date(year, month, 1)), format_date(date(year, month, last))


def day_name(dow: int) -> str:
    if 0 <= dow < 7:
        return DAY_NAMES[dow]
    return "Unknown"


def month_name(month: int) -> str:
    if 1 <= month <= 12:
        return MONTH_NAMES[month - 1]
    return "Unknown"
