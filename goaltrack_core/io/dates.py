from __future__ import annotations

import datetime as dt
from typing import Optional, Union

import pandas as pd

from goaltrack_core.domain.errors import InvalidDate


DateLike = Union[str, dt.date, dt.datetime, None]


def parse_date(value: DateLike) -> Optional[dt.date]:
    """
    Normalize a caller-supplied date to a calendar date.
    None and blank strings mean "no date"; anything else that cannot be
    read as a date raises InvalidDate.
    """
    if value is None:
        return None
    if isinstance(value, dt.datetime):
        return value.date()
    if isinstance(value, dt.date):
        return value
    if not isinstance(value, str):
        raise InvalidDate(value)

    text = value.strip()
    if not text:
        return None
    try:
        ts = pd.to_datetime(text)
    except (ValueError, TypeError, OverflowError) as exc:
        raise InvalidDate(value) from exc
    if pd.isna(ts):
        raise InvalidDate(value)
    return ts.date()


def require_date(value: DateLike) -> dt.date:
    parsed = parse_date(value)
    if parsed is None:
        raise InvalidDate(value)
    return parsed


def resolve_today(today: DateLike = None) -> dt.date:
    return parse_date(today) or dt.date.today()
