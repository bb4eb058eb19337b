from goaltrack_core.io.config import load_notification_preferences, load_warning_thresholds  # noqa: F401
from goaltrack_core.io.dates import parse_date  # noqa: F401
from goaltrack_core.io.history import load_goal_history, save_goal_history  # noqa: F401
from goaltrack_core.io.ledger import load_contributions  # noqa: F401

__all__ = [
    "load_contributions",
    "load_goal_history",
    "load_notification_preferences",
    "load_warning_thresholds",
    "parse_date",
    "save_goal_history",
]
