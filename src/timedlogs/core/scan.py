"""Per-file scanning and the run over all candidate files."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from contextlib import closing
from dataclasses import dataclass
from enum import Enum

from timedlogs.core.config import ScanConfig
from timedlogs.core.evaluate import LineOutcome, decode_line, evaluate_line
from timedlogs.core.files import find_candidates, is_recent
from timedlogs.core.io import MappedLog
from timedlogs.core.window import TimeWindow

logger = logging.getLogger(__name__)


class StopReason(Enum):
    """Why a file's scan ended before reaching its first line."""

    NOT_FILE = "not a file"
    EMPTY_FILE = "file empty"
    NOT_UTF8 = "file not utf8"
    TOO_OLD = "timestamp in line too old"


@dataclass(frozen=True)
class FileResult:
    matches: int
    processed: bool
    stop: StopReason | None = None


@dataclass(frozen=True)
class RunResult:
    total_matches: int = 0
    files_processed: int = 0
    files_matched: int = 0  # candidates matched by name, before the age filter


def process_file(
    path: str,
    config: ScanConfig,
    window: TimeWindow,
    *,
    echo: Callable[[str], None] | None = None,
) -> FileResult:
    """Scan one file from its last line backwards and count matching lines.

    Stops at the first line older than the window (processed) or at the first
    line that is not UTF-8 (not processed; matches found before it are kept).
    Raises OSError when the file cannot be opened and MappingLimitError when it
    is too large to map.
    """
    log = MappedLog(path)
    if not log.is_file:
        return FileResult(0, False, StopReason.NOT_FILE)
    if log.size == 0:
        return FileResult(0, False, StopReason.EMPTY_FILE)

    matches = 0
    with log, closing(log.reverse_lines()) as lines:
        for line in lines:
            try:
                outcome = evaluate_line(line, config, window)
                if outcome is LineOutcome.MATCH:
                    matches += 1
                    if echo is not None:
                        echo(decode_line(line))
            finally:
                line.release()
            if outcome is LineOutcome.TOO_OLD:
                return FileResult(matches, True, StopReason.TOO_OLD)
            if outcome is LineOutcome.NOT_UTF8:
                return FileResult(matches, False, StopReason.NOT_UTF8)
    return FileResult(matches, True)


def run(
    config: ScanConfig,
    *,
    now: float | None = None,
    utc_offset: int | None = None,
    echo: Callable[[str], None] | None = None,
) -> RunResult:
    """Scan every recently modified file matching ``<logfile>*``.

    `now` and `utc_offset` default to the current time and the OS time zone.
    Files that cannot be inspected are logged and skipped.
    """
    now = time.time() if now is None else now
    window = TimeWindow.for_interval(config.interval, now=now, utc_offset=utc_offset)
    expression = config.glob_expression
    logger.debug("looking for files matching %s", expression)
    logger.debug(window.describe())

    candidates = find_candidates(expression)
    total = 0
    processed = 0
    for path in candidates:
        try:
            if not is_recent(path, config.interval, now):
                logger.debug("skipping %s because too old", path)
                continue
            result = process_file(path, config, window, echo=echo)
        except OSError as e:
            logger.warning("cannot read %s: %s", path, e.strerror or e)
            continue

        if result.stop is not None:
            logger.debug(
                "stopped searching %s: %s (%d matches until then)",
                path,
                result.stop.value,
                result.matches,
            )
        total += result.matches
        if result.processed:
            processed += 1

    return RunResult(total_matches=total, files_processed=processed, files_matched=len(candidates))
