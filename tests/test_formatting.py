import datetime as dt

import pytest

from goaltrack_core.services.formatting import (
    format_currency,
    format_date,
    format_duration,
    format_days_remaining,
    format_progress_percentage,
    format_relative_time,
)


TODAY = dt.date(2024, 3, 10)


def test_currency_and_percentages():
    assert format_currency(1234.5) == "$1,234.50"
    assert format_currency(-20) == "-$20.00"
    assert format_progress_percentage(66.6) == "67%"


def test_dates():
    assert format_date("2025-03-05") == "Mar 5, 2025"
    assert format_relative_time(TODAY, today=TODAY) == "Today"
    assert format_relative_time("2024-03-11", today=TODAY) == "Tomorrow"
    assert format_relative_time("2024-03-09", today=TODAY) == "Yesterday"
    assert format_relative_time("2024-03-20", today=TODAY) == "in 10 days"
    assert format_relative_time("2024-02-29", today=TODAY) == "10 days ago"


def test_days_remaining():
    assert format_days_remaining(-3) == "3 days overdue"
    assert format_days_remaining(0) == "due today"
    assert format_days_remaining(12) == "12 days left"


@pytest.mark.parametrize(
    "months, text",
    [
        (None, "Never (payment too low)"),
        (1, "1 month"),
        (5, "5 months"),
        (12, "1 year"),
        (13, "1 year, 1 month"),
        (27, "2 years, 3 months"),
    ],
)
def test_duration(months, text):
    assert format_duration(months) == text
