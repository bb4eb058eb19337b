from __future__ import annotations

import datetime as dt
import logging
from typing import Any, Dict, Iterable, List, Optional

from goaltrack_core.domain.models import (
    GoalHistoryEntry,
    GoalModification,
    GoalStatistics,
    HistoryDisplay,
    NotificationEvent,
    ProgressResult,
)
from goaltrack_core.io.dates import DateLike, parse_date, resolve_today
from goaltrack_core.services.formatting import format_currency
from goaltrack_core.services.progress import calculate_progress


logger = logging.getLogger(__name__)

EVENT_TITLES = {
    "goal_created": "Goal Created",
    "goal_modified": "Goal Modified",
    "milestone_reached": "Milestone Reached",
    "goal_completed": "Goal Completed",
    "progress_update": "Progress Updated",
    "target_date_changed": "Target Date Changed",
    "target_amount_changed": "Target Amount Changed",
}

EVENT_ICONS = {
    "goal_created": "🎯",
    "goal_modified": "✏️",
    "milestone_reached": "🏆",
    "goal_completed": "🎉",
    "progress_update": "📈",
    "target_date_changed": "📅",
    "target_amount_changed": "💰",
}

EVENT_COLORS = {
    "goal_created": "blue",
    "goal_modified": "yellow",
    "milestone_reached": "green",
    "goal_completed": "green",
    "progress_update": "blue",
    "target_date_changed": "yellow",
    "target_amount_changed": "yellow",
}

MODIFICATION_EVENTS = ("goal_modified", "target_amount_changed", "target_date_changed")


def _entry(
    goal_id: str,
    event_type: str,
    progress: ProgressResult,
    event_date: Optional[dt.datetime],
    **extra: Any,
) -> GoalHistoryEntry:
    return GoalHistoryEntry(
        goal_id=goal_id,
        event_type=event_type,
        event_date=event_date or dt.datetime.now(dt.timezone.utc),
        balance_at_event=progress.current_amount,
        progress_percentage=progress.progress_percentage,
        target_amount_at_event=progress.target_amount,
        target_date_at_event=progress.target_date,
        **extra,
    )


def goal_created_entry(
    goal_id: str,
    progress: ProgressResult,
    goal_name: str,
    event_date: Optional[dt.datetime] = None,
) -> GoalHistoryEntry:
    return _entry(goal_id, "goal_created", progress, event_date, notes="Goal created", metadata={"envelope_name": goal_name})


def progress_update_entry(
    goal_id: str,
    progress: ProgressResult,
    previous: ProgressResult,
    goal_name: str,
    event_date: Optional[dt.datetime] = None,
) -> GoalHistoryEntry:
    return _entry(
        goal_id,
        "progress_update",
        progress,
        event_date,
        previous_progress_percentage=previous.progress_percentage,
        metadata={"envelope_name": goal_name, "balance_change": progress.current_amount - previous.current_amount},
    )


def milestone_entry(
    goal_id: str,
    progress: ProgressResult,
    milestone_percentage: int,
    goal_name: str,
    event_date: Optional[dt.datetime] = None,
) -> GoalHistoryEntry:
    return _entry(
        goal_id,
        "milestone_reached",
        progress,
        event_date,
        milestone_percentage=milestone_percentage,
        notes=f"{milestone_percentage}% milestone reached",
        metadata={
            "envelope_name": goal_name,
            "milestone_amount": progress.target_amount * milestone_percentage / 100,
        },
    )


def completion_entry(
    goal_id: str,
    progress: ProgressResult,
    goal_name: str,
    event_date: Optional[dt.datetime] = None,
) -> GoalHistoryEntry:
    days_to_complete = None
    if progress.days_total is not None and progress.days_remaining is not None:
        days_to_complete = progress.days_total - progress.days_remaining
    return _entry(
        goal_id,
        "goal_completed",
        progress,
        event_date,
        milestone_percentage=100,
        notes="Goal completed successfully!",
        metadata={
            "envelope_name": goal_name,
            "completion_amount": progress.current_amount,
            "days_to_complete": days_to_complete,
        },
    )


def describe_goal_modification(
    balance: float,
    old_target_amount: float,
    new_target_amount: float,
    old_target_date: DateLike = None,
    new_target_date: DateLike = None,
    *,
    today: DateLike = None,
) -> GoalModification:
    """Compare a goal before and after its target was edited."""
    now = resolve_today(today)
    old = calculate_progress(balance, old_target_amount, old_target_date, today=now)
    new = calculate_progress(balance, new_target_amount, new_target_date, today=now)
    return GoalModification(
        target_amount_changed=old.target_amount != new.target_amount,
        target_date_changed=old.target_date != new.target_date,
        old_progress=old.progress_percentage,
        new_progress=new.progress_percentage,
        old_target_amount=old.target_amount,
        new_target_amount=new.target_amount,
        old_target_date=old.target_date,
        new_target_date=new.target_date,
    )


def modification_entry(
    goal_id: str,
    progress: ProgressResult,
    change: GoalModification,
    goal_name: str,
    event_date: Optional[dt.datetime] = None,
) -> GoalHistoryEntry:
    if change.target_amount_changed and change.target_date_changed:
        event_type, notes = "goal_modified", "Target amount and date modified"
    elif change.target_amount_changed:
        event_type, notes = "target_amount_changed", "Target amount changed"
    elif change.target_date_changed:
        event_type, notes = "target_date_changed", "Target date changed"
    else:
        event_type, notes = "goal_modified", "Goal modified"

    return _entry(
        goal_id,
        event_type,
        progress,
        event_date,
        previous_target_amount=change.old_target_amount,
        previous_target_date=change.old_target_date,
        previous_progress_percentage=change.old_progress,
        notes=notes,
        metadata={
            "envelope_name": goal_name,
            "changes": {
                "target_amount_changed": change.target_amount_changed,
                "target_date_changed": change.target_date_changed,
                "progress_change": change.progress_change,
            },
        },
    )


def entries_from_notifications(
    events: Iterable[NotificationEvent],
    progress: ProgressResult,
    event_date: Optional[dt.datetime] = None,
) -> List[GoalHistoryEntry]:
    """History records for the achievement/milestone notifications of one update."""
    entries: List[GoalHistoryEntry] = []
    for event in events:
        if event.type == "achievement":
            entries.append(completion_entry(event.goal_id, progress, event.goal_name, event_date))
        elif event.type == "milestone" and event.milestone_percentage is not None:
            entries.append(
                milestone_entry(event.goal_id, progress, event.milestone_percentage, event.goal_name, event_date)
            )
    return entries


def format_event_type(event_type: str) -> str:
    return EVENT_TITLES.get(event_type, event_type)


def get_event_type_icon(event_type: str) -> str:
    return EVENT_ICONS.get(event_type, "📝")


def get_event_type_color(event_type: str) -> str:
    return EVENT_COLORS.get(event_type, "gray")


def format_history_entry(entry: GoalHistoryEntry) -> HistoryDisplay:
    title = format_event_type(entry.event_type)
    description = entry.notes or ""

    if entry.event_type == "milestone_reached" and entry.milestone_percentage:
        title = f"{entry.milestone_percentage}% Milestone Reached"
        description = f"Reached {entry.milestone_percentage}% of your savings goal"
    elif entry.event_type == "goal_completed":
        title = "Goal Completed!"
        description = "Congratulations! You've reached your savings target"
    elif entry.event_type == "target_amount_changed":
        if entry.previous_target_amount and entry.target_amount_at_event:
            change = entry.target_amount_at_event - entry.previous_target_amount
            direction = "increased" if change > 0 else "decreased"
            description = f"Target amount {direction} by {format_currency(abs(change))}"
    elif entry.event_type == "progress_update":
        if entry.previous_progress_percentage is not None:
            change = entry.progress_percentage - entry.previous_progress_percentage
            if abs(change) > 0.1:
                direction = "increased" if change > 0 else "decreased"
                description = f"Progress {direction} by {abs(change):.1f}%"

    return HistoryDisplay(
        title=title,
        description=description,
        icon=get_event_type_icon(entry.event_type),
        color=get_event_type_color(entry.event_type),
        timestamp=entry.event_date,
    )


def calculate_goal_statistics(history: Iterable[GoalHistoryEntry]) -> GoalStatistics:
    entries = sorted(history, key=lambda e: e.event_date)
    if not entries:
        return GoalStatistics(total_days=0, average_progress_per_day=0.0, milestone_dates={}, modification_count=0)

    first, last = entries[0], entries[-1]
    total_days = (last.event_date.date() - first.event_date.date()).days
    progress_change = last.progress_percentage - first.progress_percentage
    per_day = progress_change / total_days if total_days > 0 else 0.0

    milestone_dates: Dict[int, dt.datetime] = {}
    completion_date = None
    for entry in entries:
        if entry.event_type == "milestone_reached" and entry.milestone_percentage:
            milestone_dates.setdefault(entry.milestone_percentage, entry.event_date)
        if entry.event_type == "goal_completed" and completion_date is None:
            completion_date = entry.event_date

    return GoalStatistics(
        total_days=total_days,
        average_progress_per_day=per_day,
        milestone_dates=milestone_dates,
        modification_count=sum(1 for e in entries if e.event_type in MODIFICATION_EVENTS),
        completion_date=completion_date,
    )


def progress_timeline(history: Iterable[GoalHistoryEntry], *, since: DateLike = None) -> List[GoalHistoryEntry]:
    """Entries ordered by date, optionally only those on or after `since`."""
    cutoff = parse_date(since)
    entries = sorted(history, key=lambda e: e.event_date)
    if cutoff is None:
        return entries
    return [e for e in entries if e.event_date.date() >= cutoff]
