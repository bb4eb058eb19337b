from __future__ import annotations


class GoalInputError(ValueError):
    """Base class for inputs the goal engine refuses to calculate with."""


class InvalidTargetAmount(GoalInputError):
    def __init__(self, target_amount) -> None:
        super().__init__(f"Target amount must be greater than 0, got {target_amount!r}")
        self.target_amount = target_amount


class InvalidDate(GoalInputError):
    def __init__(self, value) -> None:
        super().__init__(f"Could not parse date: {value!r}")
        self.value = value


class InvalidInterestRate(GoalInputError):
    def __init__(self, apr) -> None:
        super().__init__(f"APR must be a finite percentage of 0 or more, got {apr!r}")
        self.apr = apr
