from __future__ import annotations

from typing import Mapping, Sequence

import pandas as pd
import structlog

from ..utils import iso_date
from .schemas import ChartPoint

log = structlog.get_logger()


def _is_number(val):
    return isinstance(val, (int, float)) and not isinstance(val, bool) and val == val


def build_delta_series(
    snapshots: Sequence[Mapping],
    metric_field: str,
    clamp_negative: bool,
    timezone: str | None = None,
) -> list[ChartPoint]:
    """Day-over-day deltas of a cumulative counter.

    `snapshots` must be ascending by day and start one day before the first
    day to chart: the first snapshot only serves as the predecessor.
    Engagement counters never regress for real, so `clamp_negative` turns
    upstream corrections into 0 instead of a negative point.
    """
    points = []
    for prev, cur in zip(snapshots, snapshots[1:]):
        prev_val = prev.get(metric_field)
        cur_val = cur.get(metric_field)
        if not _is_number(prev_val) or not _is_number(cur_val):
            log.debug("delta_skipped_missing_counter", metric=metric_field, day=iso_date(cur["day"], timezone))
            continue
        value = cur_val - prev_val
        if clamp_negative and value < 0:
            log.debug("negative_delta_clamped", metric=metric_field, day=iso_date(cur["day"], timezone), delta=value)
            value = 0
        points.append(ChartPoint(time=iso_date(cur["day"], timezone), value=value))
    return points


def series_frame(points: Sequence[ChartPoint], column: str) -> pd.DataFrame:
    if not points:
        return pd.DataFrame(columns=["Date", column])
    return pd.DataFrame(
        {
            "Date": [p.time for p in points],
            column: [p.value for p in points],
        }
    )


def _csv_number(val):
    # counters are whole numbers; keep "35" rather than "35.0" in exports
    if isinstance(val, float) and val.is_integer():
        return int(val)
    return val


def render_csv(points: Sequence[ChartPoint], column: str, delimiter: str = ";") -> str:
    frame = series_frame(points, column)
    if not frame.empty:
        frame[column] = frame[column].map(_csv_number).astype(object)
    return frame.to_csv(sep=delimiter, index=False, lineterminator="\n")
