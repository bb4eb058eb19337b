from __future__ import annotations

import datetime as dt
from typing import Optional

from goaltrack_core.io.dates import DateLike, require_date, resolve_today


def format_currency(amount: float, symbol: str = "$") -> str:
    sign = "-" if amount < 0 else ""
    return f"{sign}{symbol}{abs(amount):,.2f}"


def format_progress_percentage(percentage: float) -> str:
    return f"{round(percentage)}%"


def format_date(value: DateLike) -> str:
    """e.g. 'Mar 5, 2025'"""
    d = require_date(value)
    return f"{d.strftime('%b')} {d.day}, {d.year}"


def format_relative_time(value: DateLike, *, today: DateLike = None) -> str:
    diff = (require_date(value) - resolve_today(today)).days
    if diff == 0:
        return "Today"
    if diff == 1:
        return "Tomorrow"
    if diff == -1:
        return "Yesterday"
    if diff > 0:
        return f"in {diff} days"
    return f"{abs(diff)} days ago"


def format_days_remaining(days_remaining: int) -> str:
    if days_remaining < 0:
        return f"{abs(days_remaining)} days overdue"
    if days_remaining == 0:
        return "due today"
    return f"{days_remaining} days left"


def _plural(count: int, unit: str) -> str:
    return f"{count} {unit}" + ("" if count == 1 else "s")


def format_duration(months: Optional[float]) -> str:
    """e.g. '2 years, 3 months'; None means the debt is never paid off."""
    if months is None:
        return "Never (payment too low)"
    if months < 12:
        return _plural(round(months), "month")
    years = int(months // 12)
    rest = round(months % 12)
    if rest == 0:
        return _plural(years, "year")
    return f"{_plural(years, 'year')}, {_plural(rest, 'month')}"


def to_iso(value) -> str:
    if isinstance(value, (dt.date, dt.datetime)):
        return value.isoformat()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")
