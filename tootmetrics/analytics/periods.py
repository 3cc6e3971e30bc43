from __future__ import annotations

from datetime import date, datetime

from ..utils import local_today


def _weekday_sunday_first(on: date) -> int:
    # 0=Sunday .. 6=Saturday
    return (on.weekday() + 1) % 7


def _month_start(on: date, months: int) -> date:
    index = on.year * 12 + (on.month - 1) + months
    year, month = divmod(index, 12)
    return date(year, month + 1, 1)


def days_to_week_start(timezone: str, period_modifier: int = 0, reference: datetime | None = None) -> int:
    """Days from today back to Monday of the week `period_modifier` weeks away."""
    today = local_today(timezone, reference)
    return ((7 + _weekday_sunday_first(today) - 1) % 7) - 7 * period_modifier


def days_to_month_start(timezone: str, period_modifier: int = 0, reference: datetime | None = None) -> int:
    today = local_today(timezone, reference)
    return (today - _month_start(today, period_modifier)).days


def days_to_year_start(timezone: str, period_modifier: int = 0, reference: datetime | None = None) -> int:
    today = local_today(timezone, reference)
    return (today - date(today.year + period_modifier, 1, 1)).days


PERIOD_FUNCTIONS = {
    "week": days_to_week_start,
    "month": days_to_month_start,
    "year": days_to_year_start,
}


def get_period_function(period: str):
    try:
        return PERIOD_FUNCTIONS[period]
    except KeyError:
        raise ValueError("period must be week|month|year") from None
