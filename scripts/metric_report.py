#!/usr/bin/env python3
"""
Print KPIs, total and chart data for one account and metric, or write its CSV export.

Usage:
    python scripts/metric_report.py <account_id> <timezone> followers
    python scripts/metric_report.py <account_id> "Europe/Berlin" boosts --timeframe lastmonth
    python scripts/metric_report.py <account_id> "Europe/Berlin" replies --csv
    python scripts/metric_report.py <account_id> "Europe/Berlin" --summary
"""
from pathlib import Path
import os
import sys
import json

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))
os.chdir(ROOT)

from tootmetrics.config import settings
from tootmetrics.db import get_conn, migrate
from tootmetrics.logging import setup_logging
from tootmetrics.analytics.metrics import METRICS
from tootmetrics.analytics.reports import MetricReport, build_weekly_summary, stores_for_connection


def main():
    import argparse
    p = argparse.ArgumentParser(description="Report KPIs and chart data for an account.")
    p.add_argument("account_id")
    p.add_argument("timezone", help="IANA timezone of the account, e.g. Europe/Berlin")
    p.add_argument("metric", nargs="?", default="followers", choices=sorted(METRICS))
    p.add_argument("--timeframe", default=settings.default_timeframe)
    p.add_argument("--csv", action="store_true", help="Write the chart data as CSV instead of printing JSON")
    p.add_argument("--summary", action="store_true", help="Print the weekly summary for all metrics")
    p.add_argument("--log-level", default=None)
    args = p.parse_args()

    setup_logging(args.log_level)
    conn = get_conn(settings.db_path)
    migrate(conn)
    stores = stores_for_connection(conn)

    if args.summary:
        summary = build_weekly_summary(stores, args.account_id, args.timezone)
        print(json.dumps(summary.model_dump(mode="json", exclude_none=True), indent=2))
        return

    metric = METRICS[args.metric]
    report = MetricReport(metric, stores[metric.source])

    if args.csv:
        filename, body = report.export_csv(args.account_id, args.timezone, args.timeframe)
        with open(filename, "w") as f:
            f.write(body)
        print("Wrote", filename)
        return

    overview = report.overview(args.account_id, args.timezone, args.timeframe)
    total = overview["total"]
    out = {
        "metric": overview["metric"],
        "weekly": overview["weekly"].model_dump(exclude_none=True),
        "monthly": overview["monthly"].model_dump(exclude_none=True),
        "yearly": overview["yearly"].model_dump(exclude_none=True),
        "total": total.model_dump(mode="json") if total else None,
        "chart": [pt.model_dump() for pt in overview["chart"]],
    }
    print(json.dumps(out, indent=2))


if __name__ == "__main__":
    main()
