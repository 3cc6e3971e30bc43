from __future__ import annotations

import sqlite3
from datetime import datetime, timedelta

import structlog

from ..config import settings
from ..db import SnapshotStore
from ..logging import report_context
from ..utils import local_today, now_utc
from .kpi import get_kpi_with_trend
from .metrics import METRICS, MetricConfig, get_metric
from .periods import get_period_function
from .schemas import AccountSummary, ChartPoint, MetricSummary, PeriodKPI, TotalSnapshot
from .series import build_delta_series, render_csv
from .timeframes import resolve_timeframe

log = structlog.get_logger()


def stores_for_connection(conn: sqlite3.Connection) -> dict[str, SnapshotStore]:
    """One store per snapshot table, keyed by table name."""
    tables = {metric.source for metric in METRICS.values()}
    return {table: SnapshotStore(conn, table) for table in sorted(tables)}


class MetricReport:
    """KPI boxes, totals, chart series and CSV export for one metric."""

    def __init__(self, metric: MetricConfig | str, store):
        self.metric = get_metric(metric) if isinstance(metric, str) else metric
        self.store = store

    def kpi(self, account_id: str, timezone: str, period: str, reference: datetime | None = None) -> PeriodKPI:
        period_fn = get_period_function(period)
        with report_context(account_id=account_id, metric=self.metric.name, period=period):
            return get_kpi_with_trend(self.store, account_id, timezone, period_fn, self.metric.field, reference=reference)

    def weekly_kpi(self, account_id: str, timezone: str, reference: datetime | None = None) -> PeriodKPI:
        return self.kpi(account_id, timezone, "week", reference)

    def monthly_kpi(self, account_id: str, timezone: str, reference: datetime | None = None) -> PeriodKPI:
        return self.kpi(account_id, timezone, "month", reference)

    def yearly_kpi(self, account_id: str, timezone: str, reference: datetime | None = None) -> PeriodKPI:
        return self.kpi(account_id, timezone, "year", reference)

    def total_snapshot(self, account_id: str) -> TotalSnapshot | None:
        latest = self.store.find_latest(account_id)
        if latest is None:
            return None
        amount = latest.get(self.metric.field)
        if amount is None:
            return None
        return TotalSnapshot(amount=amount, day=latest["day"])

    def chart_data(
        self,
        account_id: str,
        timezone: str,
        timeframe: str | None = None,
        reference: datetime | None = None,
    ) -> list[ChartPoint]:
        resolved = resolve_timeframe(timezone, timeframe or settings.default_timeframe, reference)
        day_from = local_today(timezone, resolved.date_from)
        day_to = local_today(timezone, resolved.date_to)
        # the day before the range is only there as the first delta's predecessor
        snapshots = self.store.find_snapshots_in_range(account_id, day_from - timedelta(days=1), day_to)
        with report_context(account_id=account_id, metric=self.metric.name, timeframe=resolved.timeframe):
            points = build_delta_series(snapshots, self.metric.field, self.metric.clamp_negative, timezone)
            log.debug("chart_data_built", day_from=day_from.isoformat(), day_to=day_to.isoformat(), points=len(points))
        return points

    def csv_filename(self, account_id: str, timeframe: str) -> str:
        return f"{self.metric.name}-{account_id}-{timeframe}.csv"

    def export_csv(
        self,
        account_id: str,
        timezone: str,
        timeframe: str | None = None,
        reference: datetime | None = None,
    ) -> tuple[str, str]:
        ref = reference if reference is not None else now_utc()
        resolved = resolve_timeframe(timezone, timeframe or settings.default_timeframe, ref)
        points = self.chart_data(account_id, timezone, resolved.timeframe, ref)
        body = render_csv(points, self.metric.csv_column, delimiter=settings.csv_delimiter)
        return self.csv_filename(account_id, resolved.timeframe), body

    def overview(
        self,
        account_id: str,
        timezone: str,
        timeframe: str | None = None,
        reference: datetime | None = None,
    ) -> dict:
        """Weekly/monthly/yearly KPIs, total and chart, all against one reference instant."""
        ref = reference if reference is not None else now_utc()
        return {
            "metric": self.metric.name,
            "weekly": self.weekly_kpi(account_id, timezone, ref),
            "monthly": self.monthly_kpi(account_id, timezone, ref),
            "yearly": self.yearly_kpi(account_id, timezone, ref),
            "total": self.total_snapshot(account_id),
            "chart": self.chart_data(account_id, timezone, timeframe, ref),
        }


def build_weekly_summary(
    stores: dict,
    account_id: str,
    timezone: str,
    reference: datetime | None = None,
) -> AccountSummary:
    """Weekly KPIs and totals for every metric, as sent in the weekly stats mail."""
    ref = reference if reference is not None else now_utc()
    metrics = []
    for metric in METRICS.values():
        store = stores.get(metric.source)
        if store is None:
            log.warning("summary_store_missing", account_id=account_id, metric=metric.name, table=metric.source)
            continue
        report = MetricReport(metric, store)
        metrics.append(
            MetricSummary(
                metric=metric.name,
                weekly=report.weekly_kpi(account_id, timezone, reference=ref),
                total=report.total_snapshot(account_id),
            )
        )
    return AccountSummary(
        account_id=account_id,
        timezone=timezone,
        day=local_today(timezone, ref),
        metrics=metrics,
    )
