import sqlite3
from pathlib import Path
from datetime import date, datetime, timezone
from typing import Iterable

def get_conn(db_path: str) -> sqlite3.Connection:
    if db_path != ":memory:":
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(db_path, isolation_level=None)  # autocommit
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA journal_mode=WAL;")
    return conn

ACCOUNT_STATS_TABLE = "daily_account_stats"
TOOT_STATS_TABLE = "daily_toot_stats"

# counter columns per snapshot table
COUNTERS = {
    ACCOUNT_STATS_TABLE: ("followers_count", "following_count", "statuses_count"),
    TOOT_STATS_TABLE: ("replies_count", "boosts_count", "favourites_count"),
}

DDL = [
    # One cumulative snapshot per account and local day, written by the daily fetch job
    """
CREATE TABLE IF NOT EXISTS daily_account_stats (
  account_id TEXT NOT NULL,
  day TEXT NOT NULL,          -- local calendar day in the account timezone (YYYY-MM-DD)
  day_utc TEXT,               -- UTC instant of that day's local midnight
  followers_count INTEGER,
  following_count INTEGER,
  statuses_count INTEGER,
  created_at_utc TEXT NOT NULL,
  PRIMARY KEY (account_id, day)
);
""",
    # Toot engagement totals summed over all of an account's toots
    """
CREATE TABLE IF NOT EXISTS daily_toot_stats (
  account_id TEXT NOT NULL,
  day TEXT NOT NULL,
  day_utc TEXT,
  replies_count INTEGER,
  boosts_count INTEGER,
  favourites_count INTEGER,
  created_at_utc TEXT NOT NULL,
  PRIMARY KEY (account_id, day)
);
""",
    "CREATE INDEX IF NOT EXISTS ix_account_stats_day ON daily_account_stats(account_id, day DESC);",
    "CREATE INDEX IF NOT EXISTS ix_toot_stats_day ON daily_toot_stats(account_id, day DESC);",
]

def migrate(conn: sqlite3.Connection):
    cur = conn.cursor()
    for stmt in DDL:
        cur.execute(stmt)
    conn.commit()


def _check_table(table: str) -> str:
    if table not in COUNTERS:
        raise ValueError(f"unknown snapshot table {table}")
    return table


def _row_to_snapshot(row) -> dict:
    snap = dict(row)
    snap["day"] = date.fromisoformat(snap["day"])
    return snap


def record_snapshot(
    conn: sqlite3.Connection,
    table: str,
    account_id: str,
    day: date,
    counters: dict,
    day_utc: datetime | None = None,
):
    table = _check_table(table)
    columns = COUNTERS[table]
    unknown = set(counters) - set(columns)
    if unknown:
        raise ValueError(f"unknown counters for {table}: {', '.join(sorted(unknown))}")
    values = [counters.get(col) for col in columns]
    conn.execute(
        f"""
        INSERT OR REPLACE INTO {table} (account_id, day, day_utc, {', '.join(columns)}, created_at_utc)
        VALUES (?, ?, ?, {', '.join('?' for _ in columns)}, ?)
        """,
        (
            account_id,
            day.isoformat(),
            day_utc.isoformat() if day_utc else None,
            *values,
            datetime.now(timezone.utc).isoformat(),
        ),
    )


class SnapshotStore:
    """Keyed lookup of cumulative daily snapshots for one snapshot table."""

    def __init__(self, conn: sqlite3.Connection, table: str):
        self.conn = conn
        self.table = _check_table(table)

    def find_snapshots(self, account_id: str, days: Iterable[date]) -> list[dict]:
        keys = sorted({d.isoformat() for d in days})
        if not keys:
            return []
        rows = self.conn.execute(
            f"SELECT * FROM {self.table} WHERE account_id=? AND day IN ({', '.join('?' for _ in keys)}) "
            "ORDER BY day DESC",
            (account_id, *keys),
        ).fetchall()
        return [_row_to_snapshot(r) for r in rows]

    def find_snapshots_in_range(self, account_id: str, day_from: date, day_to: date) -> list[dict]:
        rows = self.conn.execute(
            f"SELECT * FROM {self.table} WHERE account_id=? AND day BETWEEN ? AND ? ORDER BY day ASC",
            (account_id, day_from.isoformat(), day_to.isoformat()),
        ).fetchall()
        return [_row_to_snapshot(r) for r in rows]

    def find_latest(self, account_id: str) -> dict | None:
        row = self.conn.execute(
            f"SELECT * FROM {self.table} WHERE account_id=? ORDER BY day DESC LIMIT 1",
            (account_id,),
        ).fetchone()
        return _row_to_snapshot(row) if row else None
