"""File selection collaborators: name expansion and modification-age filter."""

from __future__ import annotations

import glob
import logging
import os

from timedlogs.core.window import SECONDS_PER_MINUTE

logger = logging.getLogger(__name__)


def find_candidates(expression: str) -> list[str]:
    """Expand a wildcard expression (e.g. ``/var/log/app*``) into sorted paths.

    Rotated files such as ``app.log.0`` or ``app.log.old`` match ``app.log*``.
    """
    return sorted(glob.glob(expression))


def file_age(path: str, now: float) -> float:
    """Seconds since `path` was last modified. Raises OSError if stat fails."""
    return now - os.stat(path).st_mtime


def is_recent(path: str, interval_minutes: int, now: float) -> bool:
    """True when `path` was modified within the last `interval_minutes`."""
    age = file_age(path, now)
    logger.debug("found file %s is %d seconds old", path, age)
    return age <= interval_minutes * SECONDS_PER_MINUTE
