from __future__ import annotations

import datetime as dt
import logging
import math
from typing import Iterable, List, Optional

import pandas as pd

from goaltrack_core.domain.errors import InvalidInterestRate
from goaltrack_core.domain.models import (
    Contribution,
    DebtPayment,
    DebtPayoffProjection,
    DebtProgress,
    DebtStrategy,
)
from goaltrack_core.io.dates import DateLike, parse_date, resolve_today
from goaltrack_core.services.projection import CURRENCY_EPSILON


logger = logging.getLogger(__name__)

MAX_PAYOFF_MONTHS = 600
DEFAULT_SCHEDULE_PAYMENTS = 60


def add_months(start: dt.date, months: int) -> dt.date:
    """Calendar month arithmetic; Jan 31 + 1 month lands on the last day of February."""
    return (pd.Timestamp(start) + pd.DateOffset(months=months)).date()


def _monthly_rate(apr: float) -> float:
    if not math.isfinite(apr) or apr < 0:
        raise InvalidInterestRate(apr)
    return apr / 100 / 12


def _payments(entries: Iterable[Contribution]) -> List[Contribution]:
    return [e for e in entries if e.amount > 0]


def calculate_debt_progress(balance: float, payments: Iterable[Contribution] = ()) -> DebtProgress:
    """
    Progress of a debt envelope. The starting balance is not stored, so it
    is estimated as what is still owed plus everything paid in so far.
    """
    current = abs(balance)
    total_paid = sum(p.amount for p in _payments(payments))
    original = current + total_paid
    percentage = total_paid / original * 100 if original > 0 else 0.0
    return DebtProgress(
        current_balance=current,
        original_balance=original,
        total_paid=total_paid,
        progress_percentage=min(percentage, 100.0),
        remaining_balance=current,
    )


def calculate_debt_payoff_projection(
    balance: float,
    apr: float,
    monthly_payment: float,
    *,
    today: DateLike = None,
) -> DebtPayoffProjection:
    """Amortize month by month until the balance is cleared."""
    now = resolve_today(today)
    rate = _monthly_rate(apr)

    if balance <= 0 or monthly_payment <= 0:
        return DebtPayoffProjection(
            monthly_payment=monthly_payment,
            months_to_payoff=0,
            total_interest_paid=0.0,
            total_amount_paid=max(balance, 0.0),
            payoff_date=now,
        )

    if monthly_payment <= balance * rate:
        logger.debug("payment %.2f never covers interest on %.2f at %.2f%% APR", monthly_payment, balance, apr)
        return DebtPayoffProjection(monthly_payment=monthly_payment)

    remaining = balance
    interest_paid = 0.0
    months = 0
    while remaining > CURRENCY_EPSILON and months < MAX_PAYOFF_MONTHS:
        interest = remaining * rate
        interest_paid += interest
        remaining -= min(monthly_payment - interest, remaining)
        months += 1

    return DebtPayoffProjection(
        monthly_payment=monthly_payment,
        months_to_payoff=months,
        total_interest_paid=interest_paid,
        total_amount_paid=balance + interest_paid,
        payoff_date=add_months(now, months),
    )


def generate_debt_payment_schedule(
    balance: float,
    apr: float,
    monthly_payment: float,
    max_payments: int = DEFAULT_SCHEDULE_PAYMENTS,
    *,
    today: DateLike = None,
) -> List[DebtPayment]:
    """One row per monthly payment, the first one due today."""
    now = resolve_today(today)
    rate = _monthly_rate(apr)
    schedule: List[DebtPayment] = []
    remaining = balance
    number = 1
    while remaining > CURRENCY_EPSILON and number <= max_payments:
        interest = remaining * rate
        principal = min(monthly_payment - interest, remaining)
        remaining -= principal
        schedule.append(
            DebtPayment(
                payment_number=number,
                date=add_months(now, number - 1),
                payment=interest + principal,
                principal=principal,
                interest=interest,
                remaining_balance=max(remaining, 0.0),
            )
        )
        number += 1
    return schedule


def calculate_required_payment(balance: float, apr: float, target_months: int) -> float:
    """Level monthly payment that clears `balance` in `target_months` (standard annuity formula)."""
    if balance <= 0 or target_months <= 0:
        return 0.0
    rate = _monthly_rate(apr)
    if rate == 0:
        return balance / target_months
    growth = (1 + rate) ** target_months
    return balance * rate * growth / (growth - 1)


def compare_debt_strategies(
    balance: float,
    apr: float,
    minimum_payment: float,
    *,
    today: DateLike = None,
) -> List[DebtStrategy]:
    """
    Minimum payment vs double the minimum vs an aggressive 3-5 year plan.
    Strategies whose payment never covers the interest are left out.
    """
    now = resolve_today(today)
    minimum = calculate_debt_payoff_projection(balance, apr, minimum_payment, today=now)

    def saved(projection: DebtPayoffProjection) -> Optional[float]:
        if not minimum.is_payable or not projection.is_payable:
            return None
        return minimum.total_interest_paid - projection.total_interest_paid

    candidates = [("Minimum Payment", "Pay only the minimum required amount", minimum, None)]
    if minimum_payment > 0:
        double = calculate_debt_payoff_projection(balance, apr, minimum_payment * 2, today=now)
        candidates.append(("Double Minimum", "Pay twice the minimum amount", double, saved(double)))

    if minimum.is_payable:
        aggressive_months = min(60, max(36, math.ceil(minimum.months_to_payoff / 2)))
    else:
        aggressive_months = 60
    aggressive_payment = calculate_required_payment(balance, apr, aggressive_months)
    aggressive = calculate_debt_payoff_projection(balance, apr, aggressive_payment, today=now)
    candidates.append(
        ("Aggressive Payoff", f"Pay off in {aggressive_months} months", aggressive, saved(aggressive))
    )

    return [
        DebtStrategy(
            name=name,
            description=description,
            monthly_payment=projection.monthly_payment,
            months_to_payoff=projection.months_to_payoff,
            total_interest_paid=projection.total_interest_paid,
            interest_saved=interest_saved,
        )
        for name, description, projection, interest_saved in candidates
        if projection.is_payable
    ]


def calculate_next_payment_date(last_payment_date: DateLike = None, *, today: DateLike = None) -> dt.date:
    """A month after the last payment, or a month from today if that has already passed."""
    now = resolve_today(today)
    fallback = add_months(now, 1)
    last = parse_date(last_payment_date)
    if last is None:
        return fallback
    following = add_months(last, 1)
    return following if following > now else fallback


def is_payment_overdue(
    minimum_payment: Optional[float],
    payments: Iterable[Contribution] = (),
    *,
    today: DateLike = None,
) -> bool:
    """True when more than a month has passed since the last payment on a debt with a minimum."""
    if not minimum_payment:
        return False
    paid = _payments(payments)
    if not paid:
        return False
    last = max(p.date for p in paid)
    return resolve_today(today) > add_months(last, 1)
