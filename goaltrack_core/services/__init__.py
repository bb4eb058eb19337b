from goaltrack_core.services.debt import (  # noqa: F401
    calculate_debt_payoff_projection,
    calculate_debt_progress,
    compare_debt_strategies,
    generate_debt_payment_schedule,
)
from goaltrack_core.services.notifications import check_goal_achievements  # noqa: F401
from goaltrack_core.services.pipeline import evaluate_goal  # noqa: F401
from goaltrack_core.services.progress import (  # noqa: F401
    calculate_milestones,
    calculate_progress,
    get_progress_status_color,
    get_progress_status_text,
)
from goaltrack_core.services.projection import (  # noqa: F401
    calculate_goal_velocity,
    calculate_projection,
    calculate_what_if_scenarios,
)
from goaltrack_core.services.scenarios import analyze_contributions, calculate_advanced_projection  # noqa: F401

__all__ = [
    "analyze_contributions",
    "calculate_advanced_projection",
    "calculate_debt_payoff_projection",
    "calculate_debt_progress",
    "calculate_goal_velocity",
    "calculate_milestones",
    "calculate_progress",
    "calculate_projection",
    "calculate_what_if_scenarios",
    "check_goal_achievements",
    "compare_debt_strategies",
    "evaluate_goal",
    "generate_debt_payment_schedule",
    "get_progress_status_color",
    "get_progress_status_text",
]
