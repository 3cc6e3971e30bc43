from __future__ import annotations

from datetime import datetime
from typing import NamedTuple

import structlog

from ..utils import day_instant, resolve_timezone, now_utc
from .periods import days_to_month_start, days_to_week_start, days_to_year_start

log = structlog.get_logger()

DEFAULT_TIMEFRAME = "last30days"


class ResolvedTimeframe(NamedTuple):
    date_from: datetime
    date_to: datetime
    timeframe: str


# token -> (days ago for date_from, days ago for date_to)
_TIMEFRAMES = {
    "last30days": lambda tz, ref: (30, 0),
    "last7days": lambda tz, ref: (7, 0),
    "thisweek": lambda tz, ref: (days_to_week_start(tz, 0, ref), 0),
    "thismonth": lambda tz, ref: (days_to_month_start(tz, 0, ref), 0),
    "thisyear": lambda tz, ref: (days_to_year_start(tz, 0, ref), 0),
    "lastweek": lambda tz, ref: (days_to_week_start(tz, -1, ref), days_to_week_start(tz, 0, ref) + 1),
    "lastmonth": lambda tz, ref: (days_to_month_start(tz, -1, ref), days_to_month_start(tz, 0, ref) + 1),
    "lastyear": lambda tz, ref: (days_to_year_start(tz, -1, ref), days_to_year_start(tz, 0, ref) + 1),
}

TIMEFRAMES = tuple(_TIMEFRAMES)


def normalize_timeframe(token: str | None) -> str:
    key = (token or "").strip().lower()
    if key in _TIMEFRAMES:
        return key
    if token:
        log.debug("timeframe_fallback", timeframe=token, fallback=DEFAULT_TIMEFRAME)
    return DEFAULT_TIMEFRAME


def resolve_timeframe(timezone: str, token: str | None, reference: datetime | None = None) -> ResolvedTimeframe:
    """Map a timeframe token to the local-midnight instants bounding it.

    Both bounds are inclusive days. Unknown tokens resolve to the last 30 days.
    """
    resolve_timezone(timezone)
    # pin "now" so every offset below sees the same local day
    ref = reference if reference is not None else now_utc()
    timeframe = normalize_timeframe(token)
    from_days, to_days = _TIMEFRAMES[timeframe](timezone, ref)
    return ResolvedTimeframe(
        date_from=day_instant(timezone, from_days, ref),
        date_to=day_instant(timezone, to_days, ref),
        timeframe=timeframe,
    )
