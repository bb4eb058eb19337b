from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict

from goaltrack_core.domain.models import NotificationPreferences, WarningThresholds


def load_notification_preferences(path: str | Path) -> NotificationPreferences:
    data = _read_json(path)
    return NotificationPreferences(
        enable_achievement_notifications=bool(data.get("enable_achievement_notifications", True)),
        enable_milestone_notifications=bool(data.get("enable_milestone_notifications", True)),
        enable_warning_notifications=bool(data.get("enable_warning_notifications", True)),
    )


def load_warning_thresholds(path: str | Path) -> WarningThresholds:
    data = _read_json(path)
    return WarningThresholds(
        behind_schedule_margin=float(data.get("behind_schedule_margin", 20.0)),
        deadline_days=int(data.get("deadline_days", 30)),
    )


def _read_json(path: str | Path) -> Dict[str, Any]:
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)
