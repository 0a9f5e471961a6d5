from __future__ import annotations

import time
from dataclasses import dataclass
from datetime import datetime, timezone
from functools import cached_property

SECONDS_PER_MINUTE = 60


def local_utc_offset(now: float | None = None) -> int:
    """Seconds east of UTC for the zone the OS is configured with at `now`."""
    now = time.time() if now is None else now
    return int(time.localtime(now).tm_gmtoff)


def oldest_allowed_utc(now: float, interval_minutes: int) -> int:
    """`now - interval`, in whole seconds since the epoch, floored at 0."""
    return max(0, int(now) - interval_minutes * SECONDS_PER_MINUTE)


def oldest_allowed_local(now: float, interval_minutes: int, utc_offset: int) -> int:
    """Oldest allowed instant expressed as local wall-clock time read as UTC.

    Log lines usually carry local time without a zone; shifting the boundary by
    the local offset lets both sides be compared as naive wall-clock values.
    """
    return max(0, oldest_allowed_utc(now, interval_minutes) + utc_offset)


@dataclass(frozen=True)
class TimeWindow:
    """The trailing interval a line's timestamp has to fall into."""

    now: int  # seconds since the epoch (UTC)
    utc_offset: int  # seconds east of UTC
    oldest_utc: int
    oldest_local: int

    @classmethod
    def for_interval(
        cls, interval_minutes: int, now: float | None = None, utc_offset: int | None = None
    ) -> TimeWindow:
        now = time.time() if now is None else now
        if utc_offset is None:
            utc_offset = local_utc_offset(now)
        return cls(
            now=int(now),
            utc_offset=int(utc_offset),
            oldest_utc=oldest_allowed_utc(now, interval_minutes),
            oldest_local=oldest_allowed_local(now, interval_minutes, utc_offset),
        )

    @property
    def now_local(self) -> int:
        """Current local wall-clock time, read as UTC."""
        return self.now + self.utc_offset

    @cached_property
    def local_year(self) -> int:
        return datetime.fromtimestamp(self.now_local, tz=timezone.utc).year

    def is_too_old(self, ts: int) -> bool:
        """True when a line stamped `ts` lies before the window."""
        return self.oldest_local > ts

    def describe(self) -> str:
        fmt = "%Y-%m-%d %H:%M:%S"
        utc = datetime.fromtimestamp(self.oldest_utc, tz=timezone.utc).strftime(fmt)
        local = datetime.fromtimestamp(self.oldest_local, tz=timezone.utc).strftime(fmt)
        return f"oldest allowed date in utc: {utc} and with tz offset: {local}"
