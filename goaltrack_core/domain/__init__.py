from goaltrack_core.domain.errors import (  # noqa: F401
    GoalInputError,
    InvalidDate,
    InvalidInterestRate,
    InvalidTargetAmount,
)
from goaltrack_core.domain.models import (  # noqa: F401
    AdvancedProjection,
    Contribution,
    ContributionHistory,
    DebtPayment,
    DebtPayoffProjection,
    DebtProgress,
    DebtStrategy,
    GoalHistoryEntry,
    GoalModification,
    GoalReport,
    GoalStatistics,
    GoalVelocity,
    HistoryDisplay,
    Milestone,
    MonthlyPattern,
    NotificationEvent,
    NotificationPreferences,
    ProgressInput,
    ProgressResult,
    ProjectionInput,
    ProjectionResult,
    ProjectionScenarios,
    ScenarioData,
    WarningThresholds,
    WhatIfScenario,
)

__all__ = [
    "AdvancedProjection",
    "Contribution",
    "ContributionHistory",
    "DebtPayment",
    "DebtPayoffProjection",
    "DebtProgress",
    "DebtStrategy",
    "GoalHistoryEntry",
    "GoalInputError",
    "GoalModification",
    "GoalReport",
    "GoalStatistics",
    "GoalVelocity",
    "HistoryDisplay",
    "InvalidDate",
    "InvalidInterestRate",
    "InvalidTargetAmount",
    "Milestone",
    "MonthlyPattern",
    "NotificationEvent",
    "NotificationPreferences",
    "ProgressInput",
    "ProgressResult",
    "ProjectionInput",
    "ProjectionResult",
    "ProjectionScenarios",
    "ScenarioData",
    "WarningThresholds",
    "WhatIfScenario",
]
