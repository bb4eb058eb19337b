from __future__ import annotations

import dataclasses
import json
import logging
import random
from collections import Counter
from typing import Dict, Iterable, List, Optional, Sequence

from goaltrack_core.domain.models import (
    NOTIFICATION_TYPES,
    NotificationEvent,
    NotificationPreferences,
    ProgressResult,
    WarningThresholds,
)


logger = logging.getLogger(__name__)

MILESTONE_NOTIFICATION_THRESHOLDS = (25, 50, 75)

DEFAULT_PREFERENCES = NotificationPreferences()
DEFAULT_THRESHOLDS = WarningThresholds()

# Message templates, keyed by event kind. `{goal}` is the goal display
# name, `{days}` the absolute day count and `{when}` the relative phrase
# ("today", "in 3 days", "2 days ago") for deadline warnings.
TEMPLATES: Dict[str, Dict[str, object]] = {
    "achievement": {
        "title": "Goal Achieved!",
        "icon": "🎉",
        "color": "green",
        "messages": (
            "Congratulations! You've reached your {goal} goal!",
            "Amazing! Your {goal} goal is complete!",
            "Success! You've achieved your {goal} target!",
            "Well done! Your {goal} goal has been reached!",
        ),
    },
    "milestone_25": {
        "title": "Quarter Way There!",
        "icon": "🌱",
        "color": "blue",
        "messages": (
            "Great start! You're 25% of the way to your {goal} goal!",
            "Nice progress! A quarter of your {goal} goal is complete!",
            "Keep it up! You've reached 25% of your {goal} target!",
        ),
    },
    "milestone_50": {
        "title": "Halfway Point!",
        "icon": "🎯",
        "color": "blue",
        "messages": (
            "Fantastic! You're halfway to your {goal} goal!",
            "Amazing progress! 50% of your {goal} goal is done!",
            "You're on fire! Halfway to your {goal} target!",
        ),
    },
    "milestone_75": {
        "title": "Almost There!",
        "icon": "🔥",
        "color": "blue",
        "messages": (
            "So close! You're 75% of the way to your {goal} goal!",
            "Incredible! Three quarters of your {goal} goal is complete!",
            "Final stretch! 75% of your {goal} target achieved!",
        ),
    },
    "warning_behind": {
        "title": "Behind Schedule",
        "icon": "⚠️",
        "color": "yellow",
        "messages": (
            "Your {goal} goal is falling behind schedule. Consider increasing your savings rate to stay on track.",
            "Savings for {goal} are lagging behind the calendar. A bigger allocation this month would help.",
        ),
    },
    "warning_deadline": {
        "title": "Deadline Approaching",
        "icon": "🕒",
        "color": "yellow",
        "messages": (
            "Your {goal} goal deadline is {when}. You may need to adjust your target or increase savings.",
            "{goal} is due {when}. Consider a larger contribution or a later target date.",
        ),
    },
    "warning_overdue": {
        "title": "Goal Overdue",
        "icon": "⏰",
        "color": "red",
        "messages": (
            "Your {goal} goal passed its target date {when} without being reached.",
            "{goal} went past its target date {when}. Update the date or keep contributing to finish it.",
        ),
    },
}


def _when(days_remaining: Optional[int]) -> str:
    if days_remaining is None:
        return ""
    if days_remaining == 0:
        return "today"
    if days_remaining == 1:
        return "tomorrow"
    if days_remaining == -1:
        return "yesterday"
    if days_remaining > 0:
        return f"in {days_remaining} days"
    return f"{-days_remaining} days ago"


def _event(
    kind: str,
    event_type: str,
    goal_name: str,
    goal_id: str,
    rng,
    milestone: Optional[int] = None,
    days_remaining: Optional[int] = None,
) -> NotificationEvent:
    template = TEMPLATES[kind]
    days = abs(days_remaining) if days_remaining is not None else None
    message = rng.choice(template["messages"]).format(goal=goal_name, days=days, when=_when(days_remaining))
    return NotificationEvent(
        type=event_type,
        goal_id=goal_id,
        goal_name=goal_name,
        title=str(template["title"]),
        message=message,
        icon=str(template["icon"]),
        color=str(template["color"]),
        milestone_percentage=milestone,
    )


def crossed_milestones(
    current: ProgressResult,
    previous: Optional[ProgressResult],
    thresholds: Sequence[int] = MILESTONE_NOTIFICATION_THRESHOLDS,
) -> List[int]:
    """Every threshold reached by `current` that `previous` had not reached."""
    before = previous.progress_percentage if previous is not None else None
    return [
        t
        for t in thresholds
        if current.progress_percentage >= t and (before is None or before < t)
    ]


def _warning_kind(current: ProgressResult, thresholds: WarningThresholds) -> Optional[str]:
    if current.is_on_track is not False:
        return None
    if current.days_remaining is not None and current.days_remaining <= thresholds.deadline_days:
        return "warning_overdue" if current.days_remaining < 0 else "warning_deadline"
    if current.time_progress_percentage is not None:
        lag = current.time_progress_percentage - current.progress_percentage
        if lag > thresholds.behind_schedule_margin:
            return "warning_behind"
    return None


def check_goal_achievements(
    current: ProgressResult,
    previous: Optional[ProgressResult],
    goal_name: str,
    goal_id: str,
    preferences: Optional[NotificationPreferences] = None,
    *,
    thresholds: Optional[WarningThresholds] = None,
    rng: Optional[random.Random] = None,
) -> List[NotificationEvent]:
    """
    Diff two progress snapshots of the same goal into notifications:
    - achievement: the goal became completed.
    - milestone: one per 25/50/75% threshold crossed, none skipped.
    - warning: at most one, only while the goal is not on track.
    `previous=None` means there is no earlier snapshot. Pass `rng` to make
    message selection reproducible.
    """
    preferences = preferences or DEFAULT_PREFERENCES
    thresholds = thresholds or DEFAULT_THRESHOLDS
    rng = rng or random

    events: List[NotificationEvent] = []

    if preferences.enable_achievement_notifications:
        was_completed = previous is not None and previous.is_completed
        if current.is_completed and not was_completed:
            events.append(_event("achievement", "achievement", goal_name, goal_id, rng, milestone=100))

    if preferences.enable_milestone_notifications:
        for milestone in crossed_milestones(current, previous):
            events.append(
                _event(f"milestone_{milestone}", "milestone", goal_name, goal_id, rng, milestone=milestone)
            )

    if preferences.enable_warning_notifications:
        kind = _warning_kind(current, thresholds)
        if kind is not None:
            events.append(_event(kind, "warning", goal_name, goal_id, rng, days_remaining=current.days_remaining))

    if events:
        logger.debug("goal %s: %s", goal_id, ", ".join(e.type for e in events))
    return events


def summarize_notifications(events: Iterable[NotificationEvent]) -> Dict[str, int]:
    counts = Counter(e.type for e in events)
    summary = {"total": sum(counts.values())}
    summary.update({t: counts.get(t, 0) for t in NOTIFICATION_TYPES})
    return summary


def toast_kind(event: NotificationEvent) -> str:
    """Map a notification to the UI toast style that displays it."""
    return "warning" if event.type == "warning" else "success"


def notification_to_json(event: NotificationEvent) -> str:
    return json.dumps(dataclasses.asdict(event), ensure_ascii=False)


def notification_from_json(payload: str) -> NotificationEvent:
    data = json.loads(payload)
    if data.get("type") not in NOTIFICATION_TYPES:
        raise ValueError(f"Unknown notification type: {data.get('type')!r}")
    return NotificationEvent(**data)
