from __future__ import annotations

import dataclasses
import datetime as dt
import math
from typing import Any, Dict, List, Optional, Tuple

from goaltrack_core.domain.errors import InvalidTargetAmount


MILESTONE_THRESHOLDS: Tuple[int, ...] = (25, 50, 75, 100)

NOTIFICATION_TYPES: Tuple[str, ...] = ("achievement", "milestone", "warning")

HISTORY_EVENT_TYPES: Tuple[str, ...] = (
    "goal_created",
    "goal_modified",
    "milestone_reached",
    "goal_completed",
    "progress_update",
    "target_date_changed",
    "target_amount_changed",
)

CONTRIBUTION_KINDS: Tuple[str, ...] = ("income", "allocation", "transfer")


def _validate_target(target_amount: float) -> float:
    try:
        value = float(target_amount)
    except (TypeError, ValueError) as exc:
        raise InvalidTargetAmount(target_amount) from exc
    if not math.isfinite(value) or value <= 0:
        raise InvalidTargetAmount(target_amount)
    return value


def as_utc(value: dt.datetime) -> dt.datetime:
    """History timestamps are UTC-aware; naive values are taken to be UTC already."""
    if value.tzinfo is None:
        return value.replace(tzinfo=dt.timezone.utc)
    return value.astimezone(dt.timezone.utc)


def _normalize_inputs(inputs) -> None:
    """Validate the target and coerce amounts and dates on a frozen input."""
    from goaltrack_core.io.dates import parse_date

    object.__setattr__(inputs, "current_amount", float(inputs.current_amount))
    object.__setattr__(inputs, "target_amount", _validate_target(inputs.target_amount))
    object.__setattr__(inputs, "target_date", parse_date(inputs.target_date))
    object.__setattr__(inputs, "start_date", parse_date(inputs.start_date))


@dataclasses.dataclass(frozen=True)
class ProgressInput:
    current_amount: float
    target_amount: float
    target_date: Optional[dt.date] = None
    start_date: Optional[dt.date] = None

    def __post_init__(self) -> None:
        _normalize_inputs(self)

    @classmethod
    def create(cls, current_amount, target_amount, target_date=None, start_date=None) -> "ProgressInput":
        """Build from raw boundary values; date strings are parsed on construction."""
        return cls(current_amount, target_amount, target_date, start_date)


@dataclasses.dataclass(frozen=True)
class ProgressResult:
    current_amount: float
    target_amount: float
    progress_percentage: float
    remaining_amount: float
    is_completed: bool
    target_date: Optional[dt.date] = None
    start_date: Optional[dt.date] = None
    days_remaining: Optional[int] = None
    days_total: Optional[int] = None
    time_progress_percentage: Optional[float] = None
    is_on_track: Optional[bool] = None
    daily_target_amount: Optional[float] = None
    weekly_target_amount: Optional[float] = None
    monthly_target_amount: Optional[float] = None
    projected_completion_date: Optional[dt.date] = None

    @property
    def is_overdue(self) -> bool:
        return self.days_remaining is not None and self.days_remaining < 0 and not self.is_completed


@dataclasses.dataclass(frozen=True)
class ProjectionInput:
    current_amount: float
    target_amount: float
    target_date: Optional[dt.date] = None
    start_date: Optional[dt.date] = None
    monthly_contribution: float = 0.0

    def __post_init__(self) -> None:
        _normalize_inputs(self)
        object.__setattr__(self, "monthly_contribution", float(self.monthly_contribution or 0.0))

    @classmethod
    def create(
        cls,
        current_amount,
        target_amount,
        target_date=None,
        start_date=None,
        monthly_contribution: float = 0.0,
    ) -> "ProjectionInput":
        return cls(current_amount, target_amount, target_date, start_date, monthly_contribution)

    @property
    def progress_input(self) -> ProgressInput:
        return ProgressInput(self.current_amount, self.target_amount, self.target_date, self.start_date)


@dataclasses.dataclass(frozen=True)
class ProjectionResult:
    remaining_amount: float
    monthly_contribution: float
    days_remaining: Optional[int] = None
    months_remaining: Optional[float] = None
    projected_amount: Optional[float] = None
    projected_date: Optional[dt.date] = None
    recommended_monthly_amount: Optional[float] = None
    recommended_weekly_amount: Optional[float] = None
    recommended_daily_amount: Optional[float] = None
    shortfall: Optional[float] = None
    surplus: Optional[float] = None


@dataclasses.dataclass(frozen=True)
class Milestone:
    percentage: int
    amount: float
    achieved: bool
    label: str


@dataclasses.dataclass(frozen=True)
class NotificationPreferences:
    enable_achievement_notifications: bool = True
    enable_milestone_notifications: bool = True
    enable_warning_notifications: bool = True


@dataclasses.dataclass(frozen=True)
class WarningThresholds:
    behind_schedule_margin: float = 20.0  # percentage points of time progress over value progress
    deadline_days: int = 30


@dataclasses.dataclass(frozen=True)
class NotificationEvent:
    type: str  # "achievement", "milestone" or "warning"
    goal_id: str
    goal_name: str
    title: str
    message: str
    icon: str
    color: str
    milestone_percentage: Optional[int] = None


@dataclasses.dataclass
class GoalHistoryEntry:
    goal_id: str
    event_type: str
    event_date: dt.datetime
    balance_at_event: float
    progress_percentage: float = 0.0
    target_amount_at_event: Optional[float] = None
    target_date_at_event: Optional[dt.date] = None
    previous_target_amount: Optional[float] = None
    previous_target_date: Optional[dt.date] = None
    previous_progress_percentage: Optional[float] = None
    milestone_percentage: Optional[int] = None
    notes: Optional[str] = None
    metadata: Dict[str, Any] = dataclasses.field(default_factory=dict)

    def __post_init__(self) -> None:
        self.event_date = as_utc(self.event_date)


@dataclasses.dataclass(frozen=True)
class GoalModification:
    target_amount_changed: bool
    target_date_changed: bool
    old_progress: float
    new_progress: float
    old_target_amount: Optional[float] = None
    new_target_amount: Optional[float] = None
    old_target_date: Optional[dt.date] = None
    new_target_date: Optional[dt.date] = None

    @property
    def progress_change(self) -> float:
        return self.new_progress - self.old_progress


@dataclasses.dataclass(frozen=True)
class HistoryDisplay:
    title: str
    description: str
    icon: str
    color: str
    timestamp: dt.datetime


@dataclasses.dataclass(frozen=True)
class GoalStatistics:
    total_days: int
    average_progress_per_day: float
    milestone_dates: Dict[int, dt.datetime]
    modification_count: int
    completion_date: Optional[dt.datetime] = None


@dataclasses.dataclass(frozen=True)
class Contribution:
    date: dt.date
    amount: float
    kind: str  # "income", "allocation", "transfer" or "expense"


@dataclasses.dataclass(frozen=True)
class MonthlyPattern:
    month: int  # 1..12
    average_contribution: float
    transaction_count: int


@dataclasses.dataclass(frozen=True)
class ContributionHistory:
    average_monthly_contribution: float = 0.0
    highest_monthly_contribution: float = 0.0
    lowest_monthly_contribution: float = 0.0
    consistency_score: float = 0.0
    trend_direction: str = "stable"  # "increasing", "decreasing" or "stable"
    seasonal_patterns: Tuple[MonthlyPattern, ...] = ()
    total_contributions: float = 0.0
    months_with_data: int = 0


@dataclasses.dataclass(frozen=True)
class ScenarioData:
    monthly_contribution: float
    daily_contribution: float
    weekly_contribution: float
    yearly_contribution: float
    projected_completion_date: dt.date
    confidence: float
    shortfall: Optional[float] = None
    surplus: Optional[float] = None


@dataclasses.dataclass(frozen=True)
class ProjectionScenarios:
    conservative: ScenarioData
    realistic: ScenarioData
    optimistic: ScenarioData


@dataclasses.dataclass(frozen=True)
class AdvancedProjection:
    scenarios: ProjectionScenarios
    history: ContributionHistory
    recommendations: List[str]
    risk_factors: List[str]
    confidence_factors: List[str]


@dataclasses.dataclass(frozen=True)
class WhatIfScenario:
    monthly_contribution: float
    will_meet_target: bool
    months_to_complete: Optional[int] = None  # None when the contribution never closes the gap
    projected_completion_date: Optional[dt.date] = None
    shortfall: Optional[float] = None
    surplus: Optional[float] = None


@dataclasses.dataclass(frozen=True)
class GoalVelocity:
    daily_velocity: float
    weekly_velocity: float
    monthly_velocity: float
    trend: str  # "accelerating", "decelerating" or "steady"
    confidence: float


@dataclasses.dataclass
class GoalReport:
    progress: ProgressResult
    projection: ProjectionResult
    milestones: List[Milestone]
    notifications: List[NotificationEvent]
    history_entries: List[GoalHistoryEntry]


@dataclasses.dataclass(frozen=True)
class DebtProgress:
    current_balance: float
    original_balance: float
    total_paid: float
    progress_percentage: float
    remaining_balance: float


@dataclasses.dataclass(frozen=True)
class DebtPayoffProjection:
    monthly_payment: float
    # The fields below stay None when the payment never covers the monthly interest.
    months_to_payoff: Optional[int] = None
    total_interest_paid: Optional[float] = None
    total_amount_paid: Optional[float] = None
    payoff_date: Optional[dt.date] = None

    @property
    def is_payable(self) -> bool:
        return self.months_to_payoff is not None


@dataclasses.dataclass(frozen=True)
class DebtPayment:
    payment_number: int
    date: dt.date
    payment: float
    principal: float
    interest: float
    remaining_balance: float


@dataclasses.dataclass(frozen=True)
class DebtStrategy:
    name: str
    description: str
    monthly_payment: float
    months_to_payoff: int
    total_interest_paid: float
    interest_saved: Optional[float] = None  # versus paying only the minimum
