from __future__ import annotations

from dataclasses import dataclass

from ..db import ACCOUNT_STATS_TABLE, TOOT_STATS_TABLE


@dataclass(frozen=True)
class MetricConfig:
    name: str
    field: str
    source: str
    clamp_negative: bool
    csv_column: str


METRICS = {
    # a net follower loss is real information and must show up in charts
    "followers": MetricConfig("followers", "followers_count", ACCOUNT_STATS_TABLE, False, "Followers"),
    "replies": MetricConfig("replies", "replies_count", TOOT_STATS_TABLE, True, "Replies"),
    "boosts": MetricConfig("boosts", "boosts_count", TOOT_STATS_TABLE, True, "Boosts"),
    "favorites": MetricConfig("favorites", "favourites_count", TOOT_STATS_TABLE, True, "Favorites"),
}


def get_metric(name: str) -> MetricConfig:
    try:
        return METRICS[name]
    except KeyError:
        raise ValueError(f"metric must be one of {'|'.join(METRICS)}") from None
