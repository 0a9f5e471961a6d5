"""Best-effort timestamp parsing for date fields cut out of log lines.

A date field is parsed with the user supplied `strptime` format first. Two
fallbacks cover common log shapes the format does not describe:

- a trailing fractional suffix such as ``00:01:51,079`` (text after the first
  comma is dropped when the format leaves input unconsumed);
- a missing year (syslog style ``Aug  8 11:28:21``), in which case a year is
  injected in front of the text and ``%Y `` in front of the format.

A format that is exactly ``%s`` reads seconds since the epoch (Nagios logs).

Timestamps are integer seconds since the epoch of the wall-clock time written
in the line, read as if it were UTC. Dates that name their instant (``%z``
offsets, epoch seconds) are converted to local wall-clock time first.
"""

from __future__ import annotations

import calendar
import re
from collections.abc import Callable
from datetime import datetime, timezone
from typing import Optional

DEFAULT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
EPOCH_FORMAT = "%s"

# Year injected by the missing-year fallback when the caller does not pick one.
PLACEHOLDER_YEAR = 2018

_YEAR_DIRECTIVE = re.compile(r"%[EO]?[YyGcxs]")
_TRAILING_INPUT = "unconverted data remains"
_BRACKETS = str.maketrans("", "", "<>[]")

Strategy = Callable[[str, str, int], Optional[datetime]]


def has_year(fmt: str) -> bool:
    return _YEAR_DIRECTIVE.search(fmt) is not None


def date_token_count(fmt: str) -> int:
    """Number of whitespace separated tokens a date in `fmt` spans."""
    return len(fmt.split())


def to_timestamp(dt: datetime, utc_offset: int = 0) -> int:
    """Wall-clock seconds of `dt`; aware datetimes are shifted to `utc_offset` first."""
    if dt.tzinfo is None:
        return calendar.timegm(dt.timetuple())
    return calendar.timegm(dt.utctimetuple()) + utc_offset


def _with_year(text: str, fmt: str, year: int) -> tuple[str, str]:
    if has_year(fmt):
        return text, fmt
    return f"{year} {text}", f"%Y {fmt}"


def _strptime(text: str, fmt: str) -> datetime | None:
    try:
        return datetime.strptime(text, fmt)
    except ValueError:
        return None


def _has_trailing_input(text: str, fmt: str) -> bool:
    try:
        datetime.strptime(text, fmt)
    except ValueError as e:
        return str(e).startswith(_TRAILING_INPUT)
    return False


def parse_epoch(text: str, fmt: str, year: int) -> datetime | None:
    """Seconds since the epoch, for a format that is exactly ``%s``."""
    if fmt.strip() != EPOCH_FORMAT:
        return None
    try:
        return datetime.fromtimestamp(int(text), tz=timezone.utc)
    except (ValueError, OverflowError, OSError):
        return None


def parse_exact(text: str, fmt: str, year: int) -> datetime | None:
    """Strict parse. Formats without a year are incomplete and never match here."""
    if not has_year(fmt):
        return None
    return _strptime(text, fmt)


def parse_without_suffix(text: str, fmt: str, year: int) -> datetime | None:
    """Drop everything from the first comma when the format leaves input unconsumed."""
    head = text.split(",", 1)[0]
    if head == text or not _has_trailing_input(*_with_year(text, fmt, year)):
        return None
    return _strptime(*_with_year(head, fmt, year))


def parse_with_year(text: str, fmt: str, year: int) -> datetime | None:
    """Inject `year` for formats that carry no year of their own."""
    if has_year(fmt):
        return None
    return _strptime(*_with_year(text, fmt, year))


STRATEGIES: tuple[Strategy, ...] = (
    parse_epoch,
    parse_exact,
    parse_without_suffix,
    parse_with_year,
)


def _first_success(text: str, fmt: str, year: int, utc_offset: int) -> int | None:
    for strategy in STRATEGIES:
        dt = strategy(text, fmt, year)
        if dt is not None:
            return to_timestamp(dt, utc_offset)
    return None


def resolve(
    text: str,
    fmt: str = DEFAULT_DATE_FORMAT,
    *,
    year: int | None = None,
    not_after: int | None = None,
    utc_offset: int = 0,
) -> int | None:
    """Parse `text` against `fmt`; returns a timestamp or None when unparseable.

    `year` is the year injected for year-less formats (PLACEHOLDER_YEAR when
    omitted). When `not_after` is given and an injected year puts the result
    after it, the previous year is used instead. `utc_offset` is the local
    offset applied to dates carrying their own zone or given as epoch seconds.
    """
    text = text.strip()
    if not text:
        return None
    year = PLACEHOLDER_YEAR if year is None else year

    ts = _first_success(text, fmt, year, utc_offset)
    if ts is None:
        stripped = text.translate(_BRACKETS).strip()
        if stripped and stripped != text:
            text = stripped
            ts = _first_success(text, fmt, year, utc_offset)

    if ts is not None and not_after is not None and ts > not_after and not has_year(fmt):
        earlier = _first_success(text, fmt, year - 1, utc_offset)
        if earlier is not None:
            ts = earlier
    return ts
