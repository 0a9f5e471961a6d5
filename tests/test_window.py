from __future__ import annotations

import calendar
import os
import time

import pytest

from timedlogs.core.window import (
    TimeWindow,
    local_utc_offset,
    oldest_allowed_local,
    oldest_allowed_utc,
)

NOW = calendar.timegm((2018, 9, 13, 0, 5, 0, 0, 0, 0))
LOS_ANGELES_SUMMER = -7 * 60 * 60


@pytest.fixture
def eastern_zone():
    """Switch the process to a fixed UTC-5 zone without DST."""
    if not hasattr(time, "tzset"):
        pytest.skip("time.tzset is not available on this platform")
    old = os.environ.get("TZ")
    os.environ["TZ"] = "EST+5"
    time.tzset()
    yield
    if old is None:
        os.environ.pop("TZ", None)
    else:
        os.environ["TZ"] = old
    time.tzset()


def test_oldest_allowed_utc() -> None:
    assert oldest_allowed_utc(NOW, 1) == NOW - 60
    assert oldest_allowed_utc(NOW + 0.9, 13) == NOW - 13 * 60


def test_oldest_allowed_utc_is_never_negative() -> None:
    assert oldest_allowed_utc(100, 5) == 0


def test_oldest_allowed_local_shifts_by_offset() -> None:
    assert oldest_allowed_local(NOW, 13, LOS_ANGELES_SUMMER) == NOW - 13 * 60 - 7 * 60 * 60
    assert oldest_allowed_local(NOW, 13, 2 * 60 * 60) == NOW - 13 * 60 + 2 * 60 * 60


def test_local_offset_follows_configured_zone(eastern_zone) -> None:
    assert local_utc_offset(NOW) == -5 * 60 * 60
    window = TimeWindow.for_interval(13, now=NOW)
    assert window.oldest_local == NOW - 13 * 60 - 5 * 60 * 60


def test_window_uses_injected_offset() -> None:
    window = TimeWindow.for_interval(2, now=NOW, utc_offset=LOS_ANGELES_SUMMER)
    assert window.now == NOW
    assert window.oldest_utc == NOW - 120
    assert window.oldest_local == NOW - 120 + LOS_ANGELES_SUMMER
    assert window.now_local == NOW + LOS_ANGELES_SUMMER
    assert window.local_year == 2018


def test_too_old_is_strict() -> None:
    window = TimeWindow.for_interval(2, now=NOW, utc_offset=0)
    assert not window.is_too_old(NOW)
    assert not window.is_too_old(NOW - 120)
    assert window.is_too_old(NOW - 121)


def test_describe_mentions_both_boundaries() -> None:
    window = TimeWindow.for_interval(5, now=NOW, utc_offset=3600)
    text = window.describe()
    assert "2018-09-13 00:00:00" in text
    assert "2018-09-13 01:00:00" in text
