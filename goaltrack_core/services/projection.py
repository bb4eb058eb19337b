from __future__ import annotations

import datetime as dt
import logging
import math
from typing import Iterable, List, Optional, Sequence, Tuple

from goaltrack_core.domain.models import (
    GoalVelocity,
    ProjectionInput,
    ProjectionResult,
    WhatIfScenario,
)
from goaltrack_core.io.dates import DateLike, require_date, resolve_today
from goaltrack_core.services.progress import DAYS_PER_MONTH, DAYS_PER_WEEK


logger = logging.getLogger(__name__)

CURRENCY_EPSILON = 0.01


def funding_gap(projected: float, target: float) -> Tuple[Optional[float], Optional[float]]:
    """Return (shortfall, surplus); at most one is set."""
    diff = projected - target
    if diff < -CURRENCY_EPSILON:
        return -diff, None
    if diff > CURRENCY_EPSILON:
        return None, diff
    return None, None


def calculate_projection(inputs: ProjectionInput, *, today: DateLike = None) -> ProjectionResult:
    """
    Project the envelope balance at its target date under a steady
    monthly contribution, and spread what is still missing evenly over
    the remaining days, weeks and months.
    """
    now = resolve_today(today)
    remaining = max(inputs.target_amount - inputs.current_amount, 0.0)
    contribution = inputs.monthly_contribution

    if inputs.target_date is None:
        return ProjectionResult(remaining_amount=remaining, monthly_contribution=contribution)

    days = (inputs.target_date - now).days
    if days <= 0:
        shortfall, surplus = funding_gap(inputs.current_amount, inputs.target_amount)
        return ProjectionResult(
            remaining_amount=remaining,
            monthly_contribution=contribution,
            days_remaining=days,
            months_remaining=0.0,
            projected_amount=inputs.current_amount,
            projected_date=inputs.target_date,
            shortfall=shortfall,
            surplus=surplus,
        )

    months = days / DAYS_PER_MONTH
    weeks = days / DAYS_PER_WEEK
    projected = inputs.current_amount + contribution * months
    shortfall, surplus = funding_gap(projected, inputs.target_amount)

    logger.debug("projected %.2f over %.2f months (target %.2f)", projected, months, inputs.target_amount)
    return ProjectionResult(
        remaining_amount=remaining,
        monthly_contribution=contribution,
        days_remaining=days,
        months_remaining=months,
        projected_amount=projected,
        projected_date=inputs.target_date,
        recommended_monthly_amount=remaining / months,
        recommended_weekly_amount=remaining / weeks,
        recommended_daily_amount=remaining / days,
        shortfall=shortfall,
        surplus=surplus,
    )


def calculate_what_if_scenarios(
    current_amount: float,
    target_amount: float,
    target_date: DateLike,
    contribution_options: Sequence[float],
    *,
    today: DateLike = None,
) -> List[WhatIfScenario]:
    """Compare several steady monthly contributions against the same goal."""
    now = resolve_today(today)
    inputs = ProjectionInput.create(current_amount, target_amount, require_date(target_date))
    remaining = max(inputs.target_amount - inputs.current_amount, 0.0)
    months_to_target = max((inputs.target_date - now).days, 0) / DAYS_PER_MONTH

    scenarios: List[WhatIfScenario] = []
    for option in contribution_options:
        contribution = float(option)
        projected = inputs.current_amount + max(contribution, 0.0) * months_to_target
        shortfall, surplus = funding_gap(projected, inputs.target_amount)

        if remaining == 0:
            scenarios.append(
                WhatIfScenario(
                    monthly_contribution=contribution,
                    will_meet_target=True,
                    months_to_complete=0,
                    projected_completion_date=now,
                    shortfall=shortfall,
                    surplus=surplus,
                )
            )
            continue
        if contribution <= 0:
            scenarios.append(
                WhatIfScenario(monthly_contribution=contribution, will_meet_target=False, shortfall=remaining)
            )
            continue

        months_needed = remaining / contribution
        completion = now + dt.timedelta(days=math.ceil(months_needed * DAYS_PER_MONTH))
        scenarios.append(
            WhatIfScenario(
                monthly_contribution=contribution,
                will_meet_target=completion <= inputs.target_date,
                months_to_complete=math.ceil(months_needed),
                projected_completion_date=completion,
                shortfall=shortfall,
                surplus=surplus,
            )
        )
    return scenarios


def _velocity(points: Sequence[Tuple[dt.date, float]]) -> float:
    first_date, first_amount = points[0]
    last_date, last_amount = points[-1]
    days = max((last_date - first_date).days, 1)
    return (last_amount - first_amount) / days


def calculate_goal_velocity(history: Iterable[Tuple[DateLike, float]]) -> GoalVelocity:
    """
    Rate at which a goal balance has been moving, from (date, balance)
    observations. Needs two points for a velocity and four for a trend.
    """
    points = sorted((require_date(d), float(amount)) for d, amount in history)
    if len(points) < 2:
        return GoalVelocity(0.0, 0.0, 0.0, "steady", 0.0)

    daily = _velocity(points)

    trend = "steady"
    if len(points) >= 4:
        mid = len(points) // 2
        first_half = _velocity(points[:mid])
        second_half = _velocity(points[mid:])
        if second_half > first_half * 1.1:
            trend = "accelerating"
        elif second_half < first_half * 0.9:
            trend = "decelerating"

    return GoalVelocity(
        daily_velocity=daily,
        weekly_velocity=daily * DAYS_PER_WEEK,
        monthly_velocity=daily * DAYS_PER_MONTH,
        trend=trend,
        confidence=min(100.0, len(points) / 12 * 100),
    )
