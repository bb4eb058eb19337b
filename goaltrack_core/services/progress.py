from __future__ import annotations

import datetime as dt
import logging
import math
from typing import List, Optional

from goaltrack_core.domain.models import (
    MILESTONE_THRESHOLDS,
    Milestone,
    ProgressInput,
    ProgressResult,
)
from goaltrack_core.io.dates import DateLike, resolve_today


logger = logging.getLogger(__name__)

DAYS_PER_WEEK = 7.0
DAYS_PER_MONTH = 30.44

# percentage points behind the time line still shown as yellow
BEHIND_SCHEDULE_TOLERANCE = 10.0

MILESTONE_LABELS = {
    25: "Quarter way there!",
    50: "Halfway point!",
    75: "Three quarters done!",
    100: "Goal achieved!",
}


def _clamp(value: float, low: float = 0.0, high: float = 100.0) -> float:
    return max(low, min(high, value))


def calculate_progress(
    current_amount: float,
    target_amount: float,
    target_date: DateLike = None,
    start_date: DateLike = None,
    *,
    today: DateLike = None,
) -> ProgressResult:
    """
    Progress of a savings envelope towards its target.
    Raises InvalidTargetAmount for a target <= 0 and InvalidDate for
    unparseable dates. `today` defaults to the current calendar date.
    """
    inputs = ProgressInput.create(current_amount, target_amount, target_date, start_date)
    return progress_from_input(inputs, today=today)


def progress_from_input(inputs: ProgressInput, *, today: DateLike = None) -> ProgressResult:
    now = resolve_today(today)
    current = inputs.current_amount
    target = inputs.target_amount

    progress_percentage = _clamp(current / target * 100)
    remaining_amount = max(target - current, 0.0)
    is_completed = current >= target

    if inputs.target_date is None:
        return ProgressResult(
            current_amount=current,
            target_amount=target,
            progress_percentage=progress_percentage,
            remaining_amount=remaining_amount,
            is_completed=is_completed,
            start_date=inputs.start_date,
        )

    days_remaining = (inputs.target_date - now).days

    daily = weekly = monthly = None
    if days_remaining > 0 and remaining_amount > 0:
        daily = remaining_amount / days_remaining
        weekly = daily * DAYS_PER_WEEK
        monthly = daily * DAYS_PER_MONTH

    days_total = None
    time_progress = None
    on_track = None
    projected_completion = None
    if inputs.start_date is not None:
        days_total = max((inputs.target_date - inputs.start_date).days, 1)
        days_elapsed = (now - inputs.start_date).days
        time_progress = _clamp(days_elapsed / days_total * 100)
        if days_remaining < 0 and not is_completed:
            on_track = False
        else:
            on_track = progress_percentage >= time_progress
        projected_completion = _projected_completion(now, current, remaining_amount, days_elapsed, is_completed)

    result = ProgressResult(
        current_amount=current,
        target_amount=target,
        progress_percentage=progress_percentage,
        remaining_amount=remaining_amount,
        is_completed=is_completed,
        target_date=inputs.target_date,
        start_date=inputs.start_date,
        days_remaining=days_remaining,
        days_total=days_total,
        time_progress_percentage=time_progress,
        is_on_track=on_track,
        daily_target_amount=daily,
        weekly_target_amount=weekly,
        monthly_target_amount=monthly,
        projected_completion_date=projected_completion,
    )
    logger.debug(
        "progress %.2f%% (time %s%%, on track %s, %s days left)",
        progress_percentage,
        time_progress,
        on_track,
        days_remaining,
    )
    return result


def _projected_completion(
    now: dt.date,
    current: float,
    remaining: float,
    days_elapsed: int,
    is_completed: bool,
) -> Optional[dt.date]:
    # Extrapolates the average daily saving rate since the start date.
    if is_completed or days_elapsed <= 0 or current <= 0:
        return None
    daily_rate = current / days_elapsed
    return now + dt.timedelta(days=math.ceil(remaining / daily_rate))


def get_progress_status_color(progress: ProgressResult) -> str:
    if progress.is_completed:
        return "green"
    if progress.is_on_track is None:
        if progress.is_overdue:
            return "red"
        if progress.progress_percentage >= 75:
            return "green"
        if progress.progress_percentage >= 50:
            return "yellow"
        return "red"
    if progress.is_on_track:
        return "green"
    if progress.is_overdue:
        return "red"
    gap = (progress.time_progress_percentage or 0.0) - progress.progress_percentage
    return "yellow" if gap <= BEHIND_SCHEDULE_TOLERANCE else "red"


def get_progress_status_text(progress: ProgressResult) -> str:
    if progress.is_completed:
        return "Goal completed!"
    if progress.is_overdue:
        return "Overdue"
    if progress.is_on_track is None:
        if progress.progress_percentage >= 75:
            return "Great progress!"
        if progress.progress_percentage >= 50:
            return "Making progress"
        if progress.progress_percentage >= 25:
            return "Getting started"
        return "Just beginning"
    return "On track" if progress.is_on_track else "Behind schedule"


def calculate_milestones(progress: ProgressResult) -> List[Milestone]:
    return [
        Milestone(
            percentage=threshold,
            amount=progress.target_amount * threshold / 100,
            achieved=progress.progress_percentage >= threshold,
            label=MILESTONE_LABELS[threshold],
        )
        for threshold in MILESTONE_THRESHOLDS
    ]
