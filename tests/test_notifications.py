import datetime as dt
import random

import pytest

from goaltrack_core.domain.models import NotificationPreferences, WarningThresholds
from goaltrack_core.services.notifications import (
    check_goal_achievements,
    notification_from_json,
    notification_to_json,
    summarize_notifications,
    toast_kind,
)
from goaltrack_core.services.progress import calculate_progress


TODAY = dt.date(2024, 3, 1)


def _snapshot(current, target=1000, target_in=None, started_ago=None):
    target_date = TODAY + dt.timedelta(days=target_in) if target_in is not None else None
    start_date = TODAY - dt.timedelta(days=started_ago) if started_ago is not None else None
    return calculate_progress(current, target, target_date, start_date, today=TODAY)


def test_jump_emits_every_crossed_milestone():
    events = check_goal_achievements(_snapshot(600), _snapshot(200), "Vacation", "env-1")
    assert [e.type for e in events] == ["milestone", "milestone"]
    assert [e.milestone_percentage for e in events] == [25, 50]
    assert all(e.goal_id == "env-1" for e in events)
    assert all("Vacation" in e.message for e in events)


def test_completion_emits_achievement_and_remaining_milestones():
    events = check_goal_achievements(_snapshot(1000), _snapshot(700), "Car", "env-2")
    assert [(e.type, e.milestone_percentage) for e in events] == [("achievement", 100), ("milestone", 75)]
    assert events[0].color == "green"


def test_already_completed_goal_is_not_celebrated_twice():
    events = check_goal_achievements(_snapshot(1200), _snapshot(1100), "Car", "env-2")
    assert events == []


def test_no_previous_snapshot_counts_from_zero():
    events = check_goal_achievements(_snapshot(550), None, "Laptop", "env-3")
    assert [e.milestone_percentage for e in events] == [25, 50]


def test_monotonic_sequence_emits_each_milestone_once():
    amounts = [0, 100, 260, 260, 510, 740, 760, 990, 1000, 1300]
    snapshots = [_snapshot(a) for a in amounts]
    seen = []
    for previous, current in zip(snapshots, snapshots[1:]):
        seen.extend(
            (e.type, e.milestone_percentage)
            for e in check_goal_achievements(current, previous, "Fund", "env-4")
        )
    milestones = [m for kind, m in seen if kind == "milestone"]
    assert milestones == [25, 50, 75]
    assert seen.count(("achievement", 100)) == 1


def test_disabled_categories_are_never_generated():
    prefs = NotificationPreferences(
        enable_achievement_notifications=False,
        enable_milestone_notifications=False,
        enable_warning_notifications=True,
    )
    events = check_goal_achievements(_snapshot(1000), _snapshot(0), "Car", "env-5", prefs)
    assert events == []


def test_behind_schedule_warning():
    # 10% saved while 50% of the time has passed
    current = _snapshot(100, target_in=60, started_ago=60)
    events = check_goal_achievements(current, current, "House", "env-6")
    assert len(events) == 1
    warning = events[0]
    assert warning.type == "warning"
    assert warning.title == "Behind Schedule"
    assert toast_kind(warning) == "warning"


def test_small_lag_does_not_warn():
    current = _snapshot(450, target_in=60, started_ago=60)
    assert current.is_on_track is False
    assert check_goal_achievements(current, current, "House", "env-6") == []


def test_margin_is_configurable():
    current = _snapshot(450, target_in=60, started_ago=60)
    events = check_goal_achievements(
        current, current, "House", "env-6", thresholds=WarningThresholds(behind_schedule_margin=2.0)
    )
    assert [e.title for e in events] == ["Behind Schedule"]


def test_deadline_warning_is_single_even_when_also_behind():
    current = _snapshot(100, target_in=10, started_ago=300)
    events = check_goal_achievements(current, current, "Wedding", "env-7")
    assert len(events) == 1
    assert events[0].title == "Deadline Approaching"
    assert "10 days" in events[0].message


@pytest.mark.parametrize("seed", [0, 1, 2, 3])
def test_deadline_today_is_phrased_as_due_today(seed):
    current = _snapshot(100, target_in=0, started_ago=100)
    events = check_goal_achievements(current, current, "Wedding", "env-7", rng=random.Random(seed))
    assert [e.title for e in events] == ["Deadline Approaching"]
    assert "today" in events[0].message
    assert "0 days" not in events[0].message


def test_overdue_goal_warns():
    current = _snapshot(500, target_in=-3, started_ago=90)
    events = check_goal_achievements(current, current, "Trip", "env-8")
    assert [e.title for e in events] == ["Goal Overdue"]
    assert events[0].color == "red"


def test_on_track_goal_near_deadline_does_not_warn():
    current = _snapshot(990, target_in=5, started_ago=100)
    assert current.is_on_track is True
    assert check_goal_achievements(current, current, "Trip", "env-8") == []


def test_goal_without_start_date_never_warns():
    current = _snapshot(10, target_in=5)
    assert check_goal_achievements(current, current, "Trip", "env-8") == []


def test_seeded_message_selection_is_reproducible():
    first = check_goal_achievements(_snapshot(1000), _snapshot(0), "Car", "env-9", rng=random.Random(3))
    second = check_goal_achievements(_snapshot(1000), _snapshot(0), "Car", "env-9", rng=random.Random(3))
    assert first == second


class _FirstChoice:
    def choice(self, options):
        return options[0]


def test_injected_selector_picks_template():
    events = check_goal_achievements(_snapshot(300), _snapshot(0), "Bike", "env-10", rng=_FirstChoice())
    assert events[0].message == "Great start! You're 25% of the way to your Bike goal!"
    assert events[0].title == "Quarter Way There!"


def test_summary_and_storage_round_trip():
    events = check_goal_achievements(_snapshot(1000), _snapshot(0), "Car", "env-11")
    summary = summarize_notifications(events)
    assert summary == {"total": 4, "achievement": 1, "milestone": 3, "warning": 0}

    restored = notification_from_json(notification_to_json(events[0]))
    assert restored == events[0]


def test_storage_rejects_unknown_type():
    with pytest.raises(ValueError):
        notification_from_json('{"type": "encouragement"}')
