from __future__ import annotations

from datetime import date, datetime, timedelta, timezone, tzinfo
from typing import Iterable

import structlog
from dateutil import tz

log = structlog.get_logger()


class TimezoneResolutionError(ValueError):
    """Raised when an account timezone name does not resolve to an IANA zone."""

    def __init__(self, name):
        super().__init__(f"unknown timezone {name!r}")
        self.name = name


def now_utc() -> datetime:
    return datetime.now(timezone.utc)


def normalize_timezone_name(name: str) -> str:
    return name.strip().replace(" ", "_")


def resolve_timezone(name: str | None) -> tzinfo:
    """Resolve an IANA zone name (spaces allowed in place of underscores).

    `tz.gettz` also accepts file paths, POSIX TZ strings and the host's
    abbreviations (returning `tzlocal()`); none of those are account zones,
    so they are rejected the same way as unknown names.
    """
    if not isinstance(name, str) or not name.strip():
        log.error("timezone_unresolved", timezone=name)
        raise TimezoneResolutionError(name)
    normalized = normalize_timezone_name(name)
    if normalized.startswith(("/", "\\", ".")) or ".." in normalized:
        log.error("timezone_unresolved", timezone=name, reason="path")
        raise TimezoneResolutionError(name)
    try:
        zone = tz.gettz(normalized)
    except (ValueError, OSError) as exc:
        log.error("timezone_unresolved", timezone=name, reason=str(exc))
        raise TimezoneResolutionError(name) from exc
    if zone is None or isinstance(zone, (tz.tzlocal, tz.tzstr)):
        log.error("timezone_unresolved", timezone=name)
        raise TimezoneResolutionError(name)
    return zone


def is_valid_timezone(name) -> bool:
    try:
        resolve_timezone(name)
    except TimezoneResolutionError:
        return False
    return True


def _as_aware(reference: datetime | None) -> datetime:
    if reference is None:
        return now_utc()
    if reference.tzinfo is None:
        # naive references are UTC
        return reference.replace(tzinfo=timezone.utc)
    return reference


def _local_today(zone: tzinfo, reference: datetime | None) -> date:
    return _as_aware(reference).astimezone(zone).date()


def local_today(timezone_name: str, reference: datetime | None = None) -> date:
    """Wall-clock calendar date of `reference` (default: now) in the zone."""
    return _local_today(resolve_timezone(timezone_name), reference)


def local_day(timezone_name: str, days_ago: int = 0, reference: datetime | None = None) -> date:
    return local_today(timezone_name, reference) - timedelta(days=days_ago)


def local_midnight(zone: tzinfo, day: date) -> datetime:
    """UTC instant of local midnight of `day`, using that date's own offset."""
    midnight = datetime(day.year, day.month, day.day, tzinfo=zone)
    # zones that spring forward at 00:00 have no midnight on that day
    midnight = tz.resolve_imaginary(midnight)
    return midnight.astimezone(timezone.utc)


def day_instant(timezone_name: str, days_ago: int = 0, reference: datetime | None = None) -> datetime:
    zone = resolve_timezone(timezone_name)
    day = _local_today(zone, reference) - timedelta(days=days_ago)
    return local_midnight(zone, day)


def iso_date(value, timezone_name: str | None = None) -> str:
    if isinstance(value, datetime):
        if value.tzinfo is not None and timezone_name:
            return local_today(timezone_name, value).isoformat()
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    return date.fromisoformat(str(value)[:10]).isoformat()


def _known_zone_names() -> list[str]:
    from dateutil.zoneinfo import get_zonefile_instance

    names = get_zonefile_instance().zones.keys()
    return sorted(n for n in names if "/" in n and not n.startswith("Etc/"))


def timezones_at_hour(
    hours: Iterable[int],
    names: Iterable[str] | None = None,
    reference: datetime | None = None,
) -> list[str]:
    """Zone names whose local hour at `reference` is one of `hours`.

    Used to run per-account daily jobs shortly after local midnight.
    """
    wanted = set(hours)
    ref = _as_aware(reference)
    matches = []
    for name in (names if names is not None else _known_zone_names()):
        try:
            zone = resolve_timezone(name)
        except TimezoneResolutionError:
            log.warning("timezone_not_supported", timezone=name)
            continue
        if ref.astimezone(zone).hour in wanted:
            matches.append(name)
    return matches
