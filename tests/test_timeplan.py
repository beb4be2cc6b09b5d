"""Tests for timezone conversion and time helpers."""

from datetime import date, datetime, time, timezone

import pytest

from equity_scheduler.errors import InvalidTimezoneError
from equity_scheduler.services.timeplan import (
    format_local_time,
    format_with_timezone,
    instant_at_hour,
    is_valid_timezone,
    localize,
    minutes_of_day,
    parse_time_string,
    parse_utc_instant,
    timezone_offset,
)

UTC = timezone.utc


def test_localize_paris_winter():
    """10:00 UTC in January is 11:00 in Paris (UTC+1)."""
    local, weekday = localize(datetime(2025, 1, 15, 10, 0, tzinfo=UTC), "Europe/Paris")
    assert (local.hour, local.minute) == (11, 0)
    assert weekday == 3  # Wednesday


def test_localize_applies_dst():
    """The same zone yields different offsets across the year."""
    winter = localize(datetime(2025, 1, 15, 10, 0, tzinfo=UTC), "America/New_York").local
    summer = localize(datetime(2025, 7, 15, 10, 0, tzinfo=UTC), "America/New_York").local
    assert winter.hour == 5
    assert summer.hour == 6


def test_localize_weekday_crosses_date_line():
    """Late Sunday UTC is already Monday in Tokyo."""
    local, weekday = localize(datetime(2025, 1, 19, 20, 0, tzinfo=UTC), "Asia/Tokyo")
    assert local.date() == date(2025, 1, 20)
    assert weekday == 1


def test_localize_rejects_unknown_timezone():
    with pytest.raises(InvalidTimezoneError):
        localize(datetime(2025, 1, 15, tzinfo=UTC), "Mars/Olympus_Mons")


def test_localize_rejects_empty_timezone():
    with pytest.raises(InvalidTimezoneError):
        localize(datetime(2025, 1, 15, tzinfo=UTC), "")


def test_localize_rejects_naive_instant():
    with pytest.raises(ValueError):
        localize(datetime(2025, 1, 15, 10, 0), "Europe/Paris")


def test_is_valid_timezone():
    assert is_valid_timezone("Asia/Kolkata")
    assert not is_valid_timezone("Nowhere/Special")


def test_parse_time_string():
    """Test time string parsing."""
    assert parse_time_string("07:30") == time(7, 30)
    assert parse_time_string("17:00:00") == time(17, 0)
    with pytest.raises(ValueError):
        parse_time_string("0730")


def test_minutes_of_day():
    assert minutes_of_day(time(9, 30)) == 570


def test_parse_utc_instant():
    assert parse_utc_instant("2025-01-15T10:00Z") == datetime(2025, 1, 15, 10, 0, tzinfo=UTC)
    assert parse_utc_instant("2025-01-15T11:00:00+01:00") == datetime(2025, 1, 15, 10, 0, tzinfo=UTC)
    assert parse_utc_instant("2025-01-15T10:00") == datetime(2025, 1, 15, 10, 0, tzinfo=UTC)


def test_instant_at_hour_utc_anchor():
    assert instant_at_hour(date(2025, 1, 15), 9) == datetime(2025, 1, 15, 9, 0, tzinfo=UTC)


def test_instant_at_hour_local_anchor():
    """09:00 in New York in winter is 14:00 UTC."""
    assert instant_at_hour(date(2025, 1, 15), 9, "America/New_York") == datetime(2025, 1, 15, 14, 0, tzinfo=UTC)


def test_instant_at_hour_rejects_out_of_range():
    with pytest.raises(ValueError):
        instant_at_hour(date(2025, 1, 15), 24)


def test_timezone_offset_dst():
    summer = timezone_offset(datetime(2025, 6, 15, tzinfo=UTC), "America/New_York")
    winter = timezone_offset(datetime(2025, 12, 15, tzinfo=UTC), "America/New_York")
    assert (summer.offset_minutes, summer.offset_string, summer.is_dst) == (-240, "-04:00", True)
    assert (winter.offset_minutes, winter.offset_string, winter.is_dst) == (-300, "-05:00", False)


def test_timezone_offset_half_hour():
    offset = timezone_offset(datetime(2025, 1, 15, tzinfo=UTC), "Asia/Kolkata")
    assert offset.offset_string == "+05:30"
    assert offset.is_dst is False


def test_format_helpers():
    instant = datetime(2025, 1, 15, 19, 0, tzinfo=UTC)
    assert format_local_time(instant, "America/New_York") == "14:00"
    assert format_with_timezone(instant, "America/New_York") == "2:00 PM EST (America/New_York)"


def test_instant_at_hour_spring_forward_counts_elapsed_hours():
    """02:00 does not exist in New York on 9 March 2025; hour 2 is 03:00 EDT."""
    assert instant_at_hour(date(2025, 3, 9), 2, "America/New_York") == datetime(2025, 3, 9, 7, 0, tzinfo=UTC)
    assert instant_at_hour(date(2025, 3, 9), 3, "America/New_York") == datetime(2025, 3, 9, 8, 0, tzinfo=UTC)
