from datetime import datetime, timezone

import pytest
from dateutil import tz as dateutil_tz

from chatcal.event_normalizer import DateTimeFormatError, parse_local_datetime, resolve_timezone, to_utc


def test_naive_value_uses_schedule_timezone():
    dt = parse_local_datetime("2026-02-09T07:00", "America/New_York")
    assert (dt.hour, dt.minute) == (7, 0)
    assert dt.utcoffset().total_seconds() == -5 * 3600


def test_to_utc():
    assert to_utc("2026-02-09T07:00", "America/New_York") == datetime(2026, 2, 9, 12, 0, tzinfo=timezone.utc)
    assert to_utc("2026-02-09T07:00", "Asia/Kolkata") == datetime(2026, 2, 9, 1, 30, tzinfo=timezone.utc)


def test_seconds_are_accepted():
    assert to_utc("2026-02-09T07:00:45", "UTC").second == 45


def test_dst_gap_is_shifted_forward():
    # 02:30 does not exist in New York on 2026-03-08
    assert to_utc("2026-03-08T02:30", "America/New_York") == datetime(2026, 3, 8, 7, 30, tzinfo=timezone.utc)


@pytest.mark.parametrize("value", ["", "   ", None, 20260209, "tomorrow 7am", "2026-13-01T07:00"])
def test_unparseable_values(value):
    with pytest.raises(DateTimeFormatError) as excinfo:
        parse_local_datetime(value, "UTC", "start")
    assert excinfo.value.field_name == "start"
    assert isinstance(excinfo.value, ValueError)


def test_resolve_timezone_fallback():
    assert resolve_timezone("Europe/Paris") == dateutil_tz.gettz("Europe/Paris")
    assert isinstance(resolve_timezone(""), dateutil_tz.tzlocal)
    assert isinstance(resolve_timezone("Not/AZone"), dateutil_tz.tzlocal)
    zone = dateutil_tz.UTC
    assert resolve_timezone(zone) is zone


@pytest.mark.parametrize("value, zone", [
    ("9999-12-31T22:00", "America/New_York"),
    ("0001-01-01T00:00", "Asia/Tokyo"),
])
def test_values_outside_utc_range_raise_format_error(value, zone):
    with pytest.raises(DateTimeFormatError) as excinfo:
        to_utc(value, zone, "start")
    assert excinfo.value.value == value
    assert excinfo.value.field_name == "start"
