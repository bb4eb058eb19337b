from __future__ import annotations

import dataclasses
import json
from pathlib import Path
from typing import Iterable, List, Optional

import pandas as pd

from goaltrack_core.domain.models import HISTORY_EVENT_TYPES, GoalHistoryEntry


REQUIRED_COLUMNS = {"goal_id", "event_type", "event_date", "balance_at_event", "progress_percentage"}

_FLOAT_COLUMNS = (
    "target_amount_at_event",
    "previous_target_amount",
    "previous_progress_percentage",
)
_DATE_COLUMNS = ("target_date_at_event", "previous_target_date")


def load_goal_history(csv_path: str | Path) -> List[GoalHistoryEntry]:
    """
    Read a goal history export, one row per event.
    Optional columns may be missing or blank; metadata is a JSON object.
    """
    path = Path(csv_path)
    if not path.exists():
        raise FileNotFoundError(path)

    df = pd.read_csv(path)
    missing = REQUIRED_COLUMNS - set(df.columns)
    if missing:
        raise ValueError(f"Missing columns in goal history CSV: {missing}")

    unknown = set(df["event_type"]) - set(HISTORY_EVENT_TYPES)
    if unknown:
        raise ValueError(f"Unknown goal history event types: {sorted(unknown)}")

    df["event_date"] = pd.to_datetime(df["event_date"], utc=True, format="ISO8601")
    entries: List[GoalHistoryEntry] = []
    for _, row in df.iterrows():
        milestone = _optional(row, "milestone_percentage")
        metadata = _optional(row, "metadata")
        entries.append(
            GoalHistoryEntry(
                goal_id=str(row["goal_id"]),
                event_type=str(row["event_type"]),
                event_date=row["event_date"].to_pydatetime(),
                balance_at_event=float(row["balance_at_event"]),
                progress_percentage=float(row["progress_percentage"]),
                milestone_percentage=int(milestone) if milestone is not None else None,
                notes=_optional(row, "notes"),
                metadata=json.loads(metadata) if metadata else {},
                **{col: _optional_float(row, col) for col in _FLOAT_COLUMNS},
                **{col: _optional_date(row, col) for col in _DATE_COLUMNS},
            )
        )
    return entries


def save_goal_history(entries: Iterable[GoalHistoryEntry], csv_path: str | Path) -> Path:
    path = Path(csv_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    rows = []
    for entry in entries:
        row = dataclasses.asdict(entry)
        row["event_date"] = entry.event_date.isoformat()
        row["metadata"] = json.dumps(entry.metadata)
        for col in _DATE_COLUMNS:
            row[col] = row[col].isoformat() if row[col] is not None else None
        rows.append(row)
    columns = [f.name for f in dataclasses.fields(GoalHistoryEntry)]
    pd.DataFrame(rows, columns=columns).to_csv(path, index=False)
    return path


def _optional(row, column: str):
    if column not in row.index or pd.isna(row[column]):
        return None
    return row[column]


def _optional_float(row, column: str) -> Optional[float]:
    value = _optional(row, column)
    return float(value) if value is not None else None


def _optional_date(row, column: str):
    value = _optional(row, column)
    return pd.to_datetime(value).date() if value is not None else None
