"""Time-zone conversion and time-of-day helpers."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from functools import lru_cache
from typing import NamedTuple
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from equity_scheduler.errors import InvalidTimezoneError

UTC = timezone.utc


class LocalTime(NamedTuple):
    """Wall-clock time of an instant in a participant's timezone."""

    local: datetime
    iso_weekday: int


@dataclass(frozen=True)
class TimezoneOffset:
    offset_minutes: int
    offset_string: str
    is_dst: bool


@lru_cache(maxsize=512)
def get_zone(timezone_name: str) -> ZoneInfo:
    """Look up an IANA zone, raising InvalidTimezoneError if unknown."""
    if not isinstance(timezone_name, str) or not timezone_name.strip():
        raise InvalidTimezoneError(timezone_name)
    try:
        return ZoneInfo(timezone_name)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise InvalidTimezoneError(timezone_name) from e


def is_valid_timezone(timezone_name: str) -> bool:
    try:
        get_zone(timezone_name)
    except InvalidTimezoneError:
        return False
    return True


def _require_aware(instant: datetime) -> datetime:
    if instant.tzinfo is None or instant.utcoffset() is None:
        raise ValueError(f"Instant must be timezone-aware: {instant!r}")
    return instant


def localize(instant: datetime, timezone_name: str) -> LocalTime:
    """
    Convert a UTC instant to local wall-clock time in an IANA timezone.

    DST rules of the zone are applied for the given instant.

    Args:
        instant: Timezone-aware datetime
        timezone_name: IANA timezone identifier (e.g. "Europe/Paris")

    Returns:
        LocalTime(local datetime, ISO weekday 1=Monday..7=Sunday)

    Raises:
        InvalidTimezoneError: If the identifier is not a known IANA zone
        ValueError: If the instant is naive
    """
    zone = get_zone(timezone_name)
    local = _require_aware(instant).astimezone(zone)
    return LocalTime(local, local.isoweekday())


def minutes_of_day(value: datetime | time) -> int:
    return value.hour * 60 + value.minute


def parse_time_string(value: str) -> time:
    """Parse "HH:MM" or "HH:MM:SS" into a time."""
    parts = str(value).strip().split(":")
    if len(parts) not in (2, 3):
        raise ValueError(f"Invalid time string: {value!r}")
    hour, minute = int(parts[0]), int(parts[1])
    second = int(parts[2]) if len(parts) == 3 else 0
    return time(hour, minute, second)


def parse_utc_instant(value: str) -> datetime:
    """
    Parse an ISO-8601 instant. A trailing "Z" is accepted; strings without an
    offset are read as UTC.
    """
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed.astimezone(UTC)


def instant_at_hour(target_date: date, hour: int, anchor_timezone: str = "UTC") -> datetime:
    """
    UTC instant ``hour`` elapsed hours after local midnight of ``target_date``
    in the anchor timezone.

    Counting elapsed hours keeps the 24 instants of a day distinct and one
    hour apart even on DST transition days, where wall-clock hours repeat or
    are skipped. On other days it equals ``hour``:00 local.
    """
    if not 0 <= hour <= 23:
        raise ValueError(f"Hour must be within 0..23, got {hour}")
    zone = get_zone(anchor_timezone)
    midnight = datetime.combine(target_date, time(0), tzinfo=zone).astimezone(UTC)
    return midnight + timedelta(hours=hour)


def timezone_offset(instant: datetime, timezone_name: str) -> TimezoneOffset:
    """
    UTC offset of a timezone at an instant.

    Example:
        timezone_offset(datetime(2025, 6, 15, tzinfo=UTC), "America/New_York")
        # TimezoneOffset(offset_minutes=-240, offset_string='-04:00', is_dst=True)
    """
    local = localize(instant, timezone_name).local
    offset = local.utcoffset() or timedelta(0)
    total = int(offset.total_seconds() // 60)
    sign = "+" if total >= 0 else "-"
    hours, mins = divmod(abs(total), 60)
    dst = local.dst()
    return TimezoneOffset(
        offset_minutes=total,
        offset_string=f"{sign}{hours:02d}:{mins:02d}",
        is_dst=bool(dst and dst != timedelta(0)),
    )


def format_local_time(instant: datetime, timezone_name: str, fmt: str = "%H:%M") -> str:
    return localize(instant, timezone_name).local.strftime(fmt)


def format_with_timezone(instant: datetime, timezone_name: str) -> str:
    """Format like "2:00 PM EST (America/New_York)"."""
    local = localize(instant, timezone_name).local
    hour = local.hour % 12 or 12
    ampm = "PM" if local.hour >= 12 else "AM"
    return f"{hour}:{local.minute:02d} {ampm} {local.tzname()} ({timezone_name})"
