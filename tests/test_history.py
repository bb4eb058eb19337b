import datetime as dt
from pathlib import Path

import pytest

from goaltrack_core.domain.models import GoalHistoryEntry
from goaltrack_core.io.history import load_goal_history, save_goal_history
from goaltrack_core.services import history
from goaltrack_core.services.notifications import check_goal_achievements
from goaltrack_core.services.progress import calculate_progress


DATA = Path(__file__).parent / "data"
TODAY = dt.date(2024, 5, 1)
WHEN = dt.datetime(2024, 5, 1, 9, 30, tzinfo=dt.timezone.utc)


def _entry(event_type, day, progress, **extra):
    return GoalHistoryEntry(
        goal_id="env-1",
        event_type=event_type,
        event_date=dt.datetime(2024, 1, 1) + dt.timedelta(days=day),
        balance_at_event=progress * 10,
        progress_percentage=progress,
        target_amount_at_event=1000.0,
        **extra,
    )


def test_notifications_become_history_entries():
    current = calculate_progress(1000, 1000, today=TODAY)
    previous = calculate_progress(600, 1000, today=TODAY)
    events = check_goal_achievements(current, previous, "Emergency fund", "env-1")

    entries = history.entries_from_notifications(events, current, WHEN)
    assert [e.event_type for e in entries] == ["goal_completed", "milestone_reached"]
    completed, milestone = entries
    assert completed.milestone_percentage == 100
    assert completed.balance_at_event == 1000
    assert completed.event_date == WHEN
    assert milestone.milestone_percentage == 75
    assert milestone.metadata["milestone_amount"] == 750
    assert milestone.notes == "75% milestone reached"


def test_modification_entry_records_previous_state():
    change = history.describe_goal_modification(500, 1000, 2000, "2024-12-31", "2024-12-31", today=TODAY)
    assert change.target_amount_changed is True
    assert change.target_date_changed is False
    assert change.old_progress == 50
    assert change.new_progress == 25
    assert change.progress_change == -25

    progress = calculate_progress(500, 2000, "2024-12-31", today=TODAY)
    entry = history.modification_entry("env-1", progress, change, "Car", WHEN)
    assert entry.event_type == "target_amount_changed"
    assert entry.previous_target_amount == 1000
    assert entry.previous_progress_percentage == 50
    assert entry.target_amount_at_event == 2000
    assert entry.metadata["changes"]["progress_change"] == -25


def test_amount_and_date_change_is_a_generic_modification():
    change = history.describe_goal_modification(500, 1000, 2000, "2024-12-31", "2025-06-30", today=TODAY)
    progress = calculate_progress(500, 2000, "2025-06-30", today=TODAY)
    entry = history.modification_entry("env-1", progress, change, "Car", WHEN)
    assert entry.event_type == "goal_modified"
    assert entry.previous_target_date == dt.date(2024, 12, 31)


def test_format_history_entry():
    shown = history.format_history_entry(_entry("milestone_reached", 10, 50, milestone_percentage=50))
    assert shown.title == "50% Milestone Reached"
    assert shown.color == "green"

    shown = history.format_history_entry(_entry("target_amount_changed", 12, 40, previous_target_amount=800.0))
    assert shown.description == "Target amount increased by $200.00"

    shown = history.format_history_entry(_entry("progress_update", 14, 42.5, previous_progress_percentage=40.0))
    assert shown.description == "Progress increased by 2.5%"
    assert history.format_event_type("unknown") == "unknown"
    assert history.get_event_type_color("unknown") == "gray"


def test_goal_statistics():
    entries = [
        _entry("goal_created", 0, 0),
        _entry("milestone_reached", 20, 25, milestone_percentage=25),
        _entry("target_amount_changed", 30, 20, previous_target_amount=800.0),
        _entry("milestone_reached", 50, 50, milestone_percentage=50),
        _entry("goal_completed", 100, 100, milestone_percentage=100),
    ]
    stats = history.calculate_goal_statistics(reversed(entries))
    assert stats.total_days == 100
    assert stats.average_progress_per_day == pytest.approx(1.0)
    assert sorted(stats.milestone_dates) == [25, 50]
    assert stats.modification_count == 1
    assert stats.completion_date == dt.datetime(2024, 4, 10, tzinfo=dt.timezone.utc)


def test_goal_statistics_empty():
    stats = history.calculate_goal_statistics([])
    assert stats.total_days == 0
    assert stats.milestone_dates == {}


def test_progress_timeline_filters_by_date():
    entries = [_entry("goal_created", 0, 0), _entry("progress_update", 40, 30)]
    assert [e.event_type for e in history.progress_timeline(entries, since="2024-02-01")] == ["progress_update"]


def test_history_csv_round_trip(tmp_path):
    progress = calculate_progress(250, 1000, "2024-12-31", today=TODAY)
    entries = [
        history.goal_created_entry("env-1", calculate_progress(0, 1000, "2024-12-31", today=TODAY), "Car", WHEN),
        history.milestone_entry("env-1", progress, 25, "Car", WHEN + dt.timedelta(days=3)),
    ]
    path = save_goal_history(entries, tmp_path / "history.csv")
    loaded = load_goal_history(path)

    assert [e.event_type for e in loaded] == ["goal_created", "milestone_reached"]
    assert loaded[1].milestone_percentage == 25
    assert loaded[1].target_date_at_event == dt.date(2024, 12, 31)
    assert loaded[1].metadata["envelope_name"] == "Car"
    assert loaded[0].milestone_percentage is None
    assert loaded[0].event_date == WHEN


def test_history_loader_rejects_unknown_events(tmp_path):
    path = tmp_path / "bad.csv"
    path.write_text(
        "goal_id,event_type,event_date,balance_at_event,progress_percentage\n"
        "env-1,goal_exploded,2024-01-01,10,1\n"
    )
    with pytest.raises(ValueError):
        load_goal_history(path)


def test_loaded_history_mixes_with_fresh_entries():
    loaded = load_goal_history(DATA / "goal_history.csv")
    assert all(e.event_date.tzinfo is not None for e in loaded)

    progress = calculate_progress(1500, 2500, "2024-12-31", today=TODAY)
    fresh = history.milestone_entry("env-1", progress, 50, "Emergency fund")
    stats = history.calculate_goal_statistics(loaded + [fresh])
    assert stats.milestone_dates[25] == dt.datetime(2024, 3, 2, 10, 15, tzinfo=dt.timezone.utc)
    assert history.progress_timeline(loaded + [fresh])[-1] is fresh


def test_naive_event_dates_are_read_as_utc():
    progress = calculate_progress(500, 1000, today=TODAY)
    entry = history.milestone_entry("env-1", progress, 50, "Car", dt.datetime(2024, 5, 1, 9, 30))
    assert entry.event_date == WHEN
    assert entry.event_date.tzinfo is not None
