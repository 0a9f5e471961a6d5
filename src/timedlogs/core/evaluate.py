from __future__ import annotations

import logging
from enum import Enum

from timedlogs.core.config import ScanConfig
from timedlogs.core.dates import resolve
from timedlogs.core.window import TimeWindow

logger = logging.getLogger(__name__)

# Year-less dates further than this into the future are taken to be from last year.
FUTURE_GRACE_SECONDS = 24 * 60 * 60


class LineOutcome(Enum):
    """Result of evaluating one line. NOT_UTF8 and TOO_OLD end the file's scan."""

    MATCH = "match"
    NO_MATCH = "no_match"
    NO_DATE = "no_date"
    NOT_UTF8 = "not_utf8"
    TOO_OLD = "too_old"

    @property
    def stops_scan(self) -> bool:
        return self in (LineOutcome.NOT_UTF8, LineOutcome.TOO_OLD)


def decode_line(line) -> str:
    """Decode a raw line as UTF-8 and trim it. Raises UnicodeDecodeError."""
    return str(line, "utf-8").strip()


def extract_date_field(text: str, position: int, tokens: int) -> str | None:
    """Join `tokens` whitespace separated words starting at word `position`.

    Returns None when the line has too few words.
    """
    words = text.split()
    if position + tokens > len(words):
        return None
    return " ".join(words[position : position + tokens])


def evaluate_line(line, config: ScanConfig, window: TimeWindow) -> LineOutcome:
    """Classify one raw line (bytes or memoryview) against the window and pattern."""
    if not len(line):
        return LineOutcome.NO_MATCH
    try:
        text = decode_line(line)
    except UnicodeDecodeError:
        return LineOutcome.NOT_UTF8
    if not text:
        return LineOutcome.NO_MATCH

    field = extract_date_field(text, config.date_position, config.date_tokens)
    if field is None:
        return LineOutcome.NO_DATE

    if config.fallback_year is None:
        ts = resolve(
            field,
            config.date_format,
            year=window.local_year,
            not_after=window.now_local + FUTURE_GRACE_SECONDS,
            utc_offset=window.utc_offset,
        )
    else:
        ts = resolve(
            field, config.date_format, year=config.fallback_year, utc_offset=window.utc_offset
        )
    if ts is None:
        return LineOutcome.NO_DATE

    if window.is_too_old(ts):
        logger.debug("%r is older than the window", field)
        return LineOutcome.TOO_OLD

    if config.pattern.search(text) is not None:
        return LineOutcome.MATCH
    return LineOutcome.NO_MATCH
