from __future__ import annotations

import datetime as dt
import random
from typing import Optional

from goaltrack_core.domain.models import (
    GoalReport,
    NotificationPreferences,
    ProgressResult,
    ProjectionInput,
    WarningThresholds,
)
from goaltrack_core.io.dates import DateLike, resolve_today
from goaltrack_core.services import history, notifications, progress as progress_service, projection


def evaluate_goal(
    goal_id: str,
    goal_name: str,
    inputs: ProjectionInput,
    previous: Optional[ProgressResult] = None,
    preferences: Optional[NotificationPreferences] = None,
    *,
    thresholds: Optional[WarningThresholds] = None,
    rng: Optional[random.Random] = None,
    today: DateLike = None,
    event_date: Optional[dt.datetime] = None,
) -> GoalReport:
    """
    One full pass over a goal after its balance changed: progress,
    projection, milestones, notifications against the previous snapshot
    and the history records a caller may choose to log.
    """
    now = resolve_today(today)
    current = progress_service.progress_from_input(inputs.progress_input, today=now)
    events = notifications.check_goal_achievements(
        current,
        previous,
        goal_name,
        goal_id,
        preferences,
        thresholds=thresholds,
        rng=rng,
    )

    entries = history.entries_from_notifications(events, current, event_date)
    if previous is not None and previous.current_amount != current.current_amount:
        entries.insert(0, history.progress_update_entry(goal_id, current, previous, goal_name, event_date))

    return GoalReport(
        progress=current,
        projection=projection.calculate_projection(inputs, today=now),
        milestones=progress_service.calculate_milestones(current),
        notifications=events,
        history_entries=entries,
    )
