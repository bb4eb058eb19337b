import datetime as dt

import pytest

from goaltrack_core.domain.errors import InvalidDate, InvalidTargetAmount
from goaltrack_core.domain.models import ProjectionInput
from goaltrack_core.services.projection import (
    calculate_goal_velocity,
    calculate_projection,
    calculate_what_if_scenarios,
)


TODAY = dt.date(2024, 1, 1)


def _inputs(current=400.0, target=1000.0, days=None, contribution=0.0) -> ProjectionInput:
    target_date = TODAY + dt.timedelta(days=days) if days is not None else None
    return ProjectionInput.create(current, target, target_date, monthly_contribution=contribution)


def test_projection_without_target_date_has_no_horizon_fields():
    result = calculate_projection(_inputs(contribution=100), today=TODAY)
    assert result.remaining_amount == 600
    assert result.monthly_contribution == 100
    assert result.projected_amount is None
    assert result.recommended_monthly_amount is None
    assert result.shortfall is None and result.surplus is None


def test_recommended_amounts_share_one_convention():
    result = calculate_projection(_inputs(days=300), today=TODAY)
    assert result.days_remaining == 300
    assert result.recommended_daily_amount == pytest.approx(2.0)
    assert result.recommended_weekly_amount * (300 / 7) == pytest.approx(600)
    assert result.recommended_monthly_amount * (300 / 30.44) == pytest.approx(600)
    assert result.recommended_weekly_amount == pytest.approx(result.recommended_monthly_amount * 7 / 30.44)


def test_shortfall_when_contribution_is_too_small():
    result = calculate_projection(_inputs(days=304, contribution=20), today=TODAY)
    months = 304 / 30.44
    assert result.projected_amount == pytest.approx(400 + 20 * months)
    assert result.shortfall == pytest.approx(600 - 20 * months)
    assert result.surplus is None


def test_surplus_when_contribution_is_generous():
    result = calculate_projection(_inputs(days=304, contribution=200), today=TODAY)
    assert result.surplus is not None and result.surplus > 0
    assert result.shortfall is None


def test_exact_projection_has_neither_shortfall_nor_surplus():
    days = 365
    contribution = 600 / (days / 30.44)
    result = calculate_projection(_inputs(days=days, contribution=contribution), today=TODAY)
    assert result.projected_amount == pytest.approx(1000)
    assert result.shortfall is None
    assert result.surplus is None


def test_past_target_date_reports_current_balance():
    result = calculate_projection(_inputs(days=-10, contribution=500), today=TODAY)
    assert result.days_remaining == -10
    assert result.months_remaining == 0
    assert result.projected_amount == 400
    assert result.shortfall == pytest.approx(600)
    assert result.recommended_monthly_amount is None


def test_zero_contribution_is_valid():
    result = calculate_projection(_inputs(days=90, contribution=0), today=TODAY)
    assert result.projected_amount == 400
    assert result.shortfall == pytest.approx(600)


def test_projection_input_rejects_bad_values():
    with pytest.raises(InvalidTargetAmount):
        ProjectionInput.create(10, 0)
    with pytest.raises(InvalidDate):
        ProjectionInput.create(10, 100, "31/31/2024")


@pytest.mark.parametrize("target", [0.0, -50.0, float("nan")])
def test_projection_input_built_directly_is_validated(target):
    with pytest.raises(InvalidTargetAmount):
        calculate_projection(ProjectionInput(100.0, target, dt.date(2024, 7, 1), monthly_contribution=50), today=TODAY)


def test_projection_input_built_directly_parses_dates():
    inputs = ProjectionInput(100, 1000, "2024-07-01", monthly_contribution=None)
    assert inputs.target_date == dt.date(2024, 7, 1)
    assert inputs.monthly_contribution == 0.0
    assert inputs.progress_input.target_amount == 1000.0


def test_what_if_scenarios():
    target_date = TODAY + dt.timedelta(days=365)
    results = calculate_what_if_scenarios(400, 1000, target_date, [0, 50, 100], today=TODAY)
    never, slow, fast = results

    assert never.will_meet_target is False
    assert never.months_to_complete is None
    assert never.shortfall == 600

    assert slow.months_to_complete == 12
    assert slow.will_meet_target is False
    assert slow.shortfall is not None

    assert fast.months_to_complete == 6
    assert fast.will_meet_target is True
    assert fast.surplus is not None


def test_what_if_requires_a_target_date():
    with pytest.raises(InvalidDate):
        calculate_what_if_scenarios(400, 1000, None, [100], today=TODAY)


def test_goal_velocity_and_trend():
    points = [
        (dt.date(2024, 1, 1), 0.0),
        (dt.date(2024, 1, 11), 100.0),
        (dt.date(2024, 1, 21), 400.0),
        (dt.date(2024, 1, 31), 900.0),
    ]
    velocity = calculate_goal_velocity(points)
    assert velocity.daily_velocity == pytest.approx(30.0)
    assert velocity.weekly_velocity == pytest.approx(210.0)
    assert velocity.trend == "accelerating"
    assert velocity.confidence == pytest.approx(4 / 12 * 100)


def test_goal_velocity_needs_two_points():
    velocity = calculate_goal_velocity([("2024-01-01", 50.0)])
    assert velocity.daily_velocity == 0
    assert velocity.trend == "steady"
