from __future__ import annotations

import datetime as dt
import logging
from typing import Iterable, List, Optional

import numpy as np
import pandas as pd

from goaltrack_core.domain.models import (
    CONTRIBUTION_KINDS,
    AdvancedProjection,
    Contribution,
    ContributionHistory,
    MonthlyPattern,
    ProgressInput,
    ProjectionScenarios,
    ScenarioData,
)
from goaltrack_core.io.dates import DateLike, resolve_today
from goaltrack_core.services.formatting import format_currency
from goaltrack_core.services.progress import DAYS_PER_MONTH, DAYS_PER_WEEK
from goaltrack_core.services.projection import funding_gap


logger = logging.getLogger(__name__)

DEFAULT_HORIZON_DAYS = 365


def analyze_contributions(contributions: Iterable[Contribution]) -> ContributionHistory:
    """
    Summarize past contributions to a goal by calendar month:
    - only income/allocation/transfer rows with a positive amount count.
    - consistency is 100 * (1 - coefficient of variation), clipped to 0..100.
    - trend compares the mean of the first and second half of the months.
    """
    rows = [
        {"date": c.date, "amount": c.amount}
        for c in contributions
        if c.kind in CONTRIBUTION_KINDS and c.amount > 0
    ]
    if not rows:
        return ContributionHistory()

    df = pd.DataFrame(rows)
    df["month"] = pd.to_datetime(df["date"]).dt.to_period("M")
    grouped = df.groupby("month")["amount"]
    monthly = grouped.sum().sort_index()
    counts = grouped.count().sort_index()

    amounts = monthly.to_numpy(dtype=float)
    months_with_data = len(amounts)
    average = float(amounts.mean())
    std = float(np.std(amounts)) if months_with_data > 1 else 0.0
    cv = std / average if average > 0 else 1.0
    consistency = float(np.clip((1 - cv) * 100, 0, 100))

    trend = "stable"
    if months_with_data >= 3:
        first_avg = amounts[: months_with_data // 2].mean()
        second_avg = amounts[(months_with_data + 1) // 2 :].mean()
        change = (second_avg - first_avg) / first_avg * 100
        if change > 10:
            trend = "increasing"
        elif change < -10:
            trend = "decreasing"

    by_calendar_month = pd.DataFrame(
        {"calendar_month": monthly.index.month, "amount": amounts, "count": counts.to_numpy()}
    ).groupby("calendar_month")
    seasonal = tuple(
        MonthlyPattern(
            month=int(month),
            average_contribution=float(group["amount"].mean()),
            transaction_count=int(group["count"].sum()),
        )
        for month, group in by_calendar_month
    )

    return ContributionHistory(
        average_monthly_contribution=average,
        highest_monthly_contribution=float(amounts.max()),
        lowest_monthly_contribution=float(amounts.min()),
        consistency_score=consistency,
        trend_direction=trend,
        seasonal_patterns=seasonal,
        total_contributions=float(amounts.sum()),
        months_with_data=months_with_data,
    )


def _scenario(
    inputs: ProgressInput,
    target_date: dt.date,
    monthly_contribution: float,
    history: ContributionHistory,
    kind: str,
    now: dt.date,
) -> ScenarioData:
    remaining = max(inputs.target_amount - inputs.current_amount, 0.0)

    completion = target_date
    if monthly_contribution > 0 and remaining > 0:
        completion = now + dt.timedelta(days=round(remaining / monthly_contribution * DAYS_PER_MONTH))

    confidence = 50.0
    if history.months_with_data > 0:
        confidence = history.consistency_score
        if kind == "conservative":
            confidence = min(95.0, confidence + 20)
        elif kind == "optimistic":
            confidence = max(20.0, confidence - 20)
        if history.trend_direction == "increasing":
            confidence += 10
        elif history.trend_direction == "decreasing":
            confidence -= 10
    confidence = max(10.0, min(95.0, confidence))

    months_to_target = max((target_date - now).days, 0) / DAYS_PER_MONTH
    projected = inputs.current_amount + monthly_contribution * months_to_target
    shortfall, surplus = funding_gap(projected, inputs.target_amount)

    return ScenarioData(
        monthly_contribution=monthly_contribution,
        daily_contribution=monthly_contribution / DAYS_PER_MONTH,
        weekly_contribution=monthly_contribution * DAYS_PER_WEEK / DAYS_PER_MONTH,
        yearly_contribution=monthly_contribution * 12,
        projected_completion_date=completion,
        confidence=confidence,
        shortfall=shortfall,
        surplus=surplus,
    )


def build_projection_scenarios(
    inputs: ProgressInput,
    history: ContributionHistory,
    *,
    today: DateLike = None,
) -> ProjectionScenarios:
    """
    Conservative / realistic / optimistic contribution paths. Without a
    target date the horizon defaults to one year from today.
    """
    now = resolve_today(today)
    target_date = inputs.target_date or now + dt.timedelta(days=DEFAULT_HORIZON_DAYS)
    remaining = max(inputs.target_amount - inputs.current_amount, 0.0)
    months = max((target_date - now).days / DAYS_PER_MONTH, 1.0)
    base_needed = remaining / months

    conservative_mult, optimistic_mult = 0.7, 1.3
    average = history.average_monthly_contribution
    if history.months_with_data > 0 and average > 0:
        conservative_mult = max(0.5, history.lowest_monthly_contribution / average)
        optimistic_mult = min(2.0, history.highest_monthly_contribution / average)

    realistic_amount = average if average > 0 else base_needed
    return ProjectionScenarios(
        conservative=_scenario(inputs, target_date, base_needed * conservative_mult, history, "conservative", now),
        realistic=_scenario(inputs, target_date, realistic_amount, history, "realistic", now),
        optimistic=_scenario(inputs, target_date, base_needed * optimistic_mult, history, "optimistic", now),
    )


def _recommendations(
    inputs: ProgressInput,
    history: ContributionHistory,
    scenarios: ProjectionScenarios,
    now: dt.date,
) -> List[str]:
    if history.months_with_data == 0:
        return [
            "Start tracking your contributions to get more accurate projections",
            "Set up automatic transfers to maintain consistent savings",
        ]

    tips: List[str] = []
    if history.consistency_score < 60:
        tips.append("Try to maintain more consistent monthly contributions for better results")
        tips.append("Consider setting up automatic transfers to improve consistency")

    if history.trend_direction == "decreasing":
        tips.append("Your contribution trend is declining, consider reviewing your budget")
        tips.append("Look for areas to cut expenses and increase savings")
    elif history.trend_direction == "increasing":
        tips.append("Great job! Your contributions are trending upward")

    if inputs.target_date is not None:
        realistic = scenarios.realistic
        if realistic.shortfall:
            months_left = max((inputs.target_date - now).days / DAYS_PER_MONTH, 1.0)
            extra = realistic.shortfall / months_left
            tips.append(f"Increase monthly contributions by {format_currency(extra)} to meet your target date")
        if realistic.projected_completion_date > inputs.target_date:
            tips.append("Consider extending your target date or increasing contributions")

    if inputs.current_amount < inputs.target_amount:
        pct = inputs.current_amount / inputs.target_amount * 100
        if pct < 25:
            tips.append("You're just getting started, focus on building the habit of regular contributions")
        elif pct < 75:
            tips.append("You're making good progress, stay consistent with your contributions")
        else:
            tips.append("You're almost there! Keep up the momentum to reach your goal")
    return tips


def _risk_factors(
    inputs: ProgressInput,
    history: ContributionHistory,
    scenarios: ProjectionScenarios,
    now: dt.date,
) -> List[str]:
    risks: List[str] = []
    if history.consistency_score < 40:
        risks.append("High variability in contributions may impact goal achievement")
    if history.trend_direction == "decreasing":
        risks.append("Declining contribution trend poses risk to timeline")
    if history.months_with_data < 3:
        risks.append("Limited historical data reduces projection accuracy")
    if inputs.target_date is not None:
        if (inputs.target_date - now).days / DAYS_PER_MONTH < 6:
            risks.append("Short timeline increases difficulty of goal achievement")
        if scenarios.realistic.shortfall:
            risks.append("Current contribution rate insufficient for target date")
    return risks


def _confidence_factors(history: ContributionHistory, scenarios: ProjectionScenarios) -> List[str]:
    factors: List[str] = []
    if history.consistency_score > 70:
        factors.append("Consistent contribution history increases confidence")
    if history.trend_direction == "increasing":
        factors.append("Improving contribution trend supports projections")
    if history.months_with_data >= 6:
        factors.append("Sufficient historical data improves accuracy")
    if scenarios.realistic.surplus:
        factors.append("Current pace exceeds minimum requirements")
    return factors


def calculate_advanced_projection(
    current_amount: float,
    target_amount: float,
    target_date: DateLike = None,
    contributions: Optional[Iterable[Contribution]] = None,
    *,
    today: DateLike = None,
) -> AdvancedProjection:
    now = resolve_today(today)
    inputs = ProgressInput.create(current_amount, target_amount, target_date)
    history = analyze_contributions(contributions or [])
    scenarios = build_projection_scenarios(inputs, history, today=now)
    logger.debug(
        "advanced projection over %d months of contributions (trend %s)",
        history.months_with_data,
        history.trend_direction,
    )
    return AdvancedProjection(
        scenarios=scenarios,
        history=history,
        recommendations=_recommendations(inputs, history, scenarios, now),
        risk_factors=_risk_factors(inputs, history, scenarios, now),
        confidence_factors=_confidence_factors(history, scenarios),
    )
