from __future__ import annotations

from datetime import datetime
from typing import Mapping

import structlog

from ..utils import local_day, now_utc, resolve_timezone
from .schemas import PeriodKPI

log = structlog.get_logger()


def _counter(snapshot: Mapping | None, field: str):
    if snapshot is None:
        return None
    val = snapshot.get(field)
    return val if isinstance(val, (int, float)) else None


def get_period_kpi(
    store,
    account_id: str,
    timezone: str,
    period_fn,
    metric_field: str,
    reference: datetime | None = None,
    period_modifier: int | None = None,
) -> PeriodKPI:
    """Current vs previous period change of a cumulative counter.

    On the first day of a period the current period would be empty, so the
    period that just ended is reported instead and `is_last_period` is set.
    Fields stay None when the snapshots needed for them are missing.
    """
    resolve_timezone(timezone)
    ref = reference if reference is not None else now_utc()

    if period_modifier is None:
        days_to_start = period_fn(timezone, 0, ref)
        period_modifier = -1 if days_to_start == 0 else 0
        if period_modifier:
            days_to_start = period_fn(timezone, period_modifier, ref)
    else:
        days_to_start = period_fn(timezone, period_modifier, ref)
    is_last_period = period_modifier != 0

    # snapshots are end-of-day values, so a period starts with the day before it
    period_start = local_day(timezone, days_to_start + 1, ref)
    period_end = local_day(timezone, 1, ref)
    prev_period_start = local_day(timezone, period_fn(timezone, period_modifier - 1, ref) + 1, ref)

    found = store.find_snapshots(account_id, [period_start, period_end, prev_period_start])
    by_day = {snap["day"]: snap for snap in found}

    start_val = _counter(by_day.get(period_start), metric_field)
    end_val = _counter(by_day.get(period_end), metric_field)
    prev_val = _counter(by_day.get(prev_period_start), metric_field)

    kpi = PeriodKPI()
    if start_val is not None and end_val is not None:
        kpi.current_period = end_val - start_val
        kpi.is_last_period = is_last_period
        period_length = days_to_start - period_fn(timezone, period_modifier + 1, ref)
        if period_length:
            kpi.current_period_progress = days_to_start / period_length
        if prev_val is not None:
            kpi.previous_period = start_val - prev_val

    log.debug(
        "kpi_computed",
        account_id=account_id,
        metric=metric_field,
        period_start=period_start.isoformat(),
        period_end=period_end.isoformat(),
        prev_period_start=prev_period_start.isoformat(),
        snapshots_found=len(by_day),
        is_last_period=is_last_period,
    )
    return kpi


def get_kpi_trend(kpi) -> float | None:
    """Signed fractional change of the current vs the previous period.

    Divides by |previous| so a negative previous period still yields a trend
    whose sign says whether things got better.
    """
    if isinstance(kpi, PeriodKPI):
        current, previous = kpi.current_period, kpi.previous_period
    else:
        current, previous = kpi.get("current_period"), kpi.get("previous_period")
    if current is None or previous is None or previous == 0:
        return None
    return (current - previous) / abs(previous)


def get_kpi_with_trend(
    store,
    account_id: str,
    timezone: str,
    period_fn,
    metric_field: str,
    reference: datetime | None = None,
) -> PeriodKPI:
    kpi = get_period_kpi(store, account_id, timezone, period_fn, metric_field, reference=reference)
    kpi.trend = get_kpi_trend(kpi)
    return kpi
