from __future__ import annotations

from enum import Enum

from timedlogs.core.config import ScanConfig
from timedlogs.core.scan import RunResult


class Status(Enum):
    """Monitoring plugin states; the value is the process exit code."""

    OK = 0
    WARNING = 1
    CRITICAL = 2
    UNKNOWN = 3

    @property
    def exit_code(self) -> int:
        return self.value


def check_thresholds(result: RunResult, config: ScanConfig) -> Status:
    """Critical wins over warning; no name matches at all is UNKNOWN."""
    if result.total_matches >= config.critical:
        return Status.CRITICAL
    if result.total_matches >= config.warning:
        return Status.WARNING
    if result.files_matched == 0:
        return Status.UNKNOWN
    return Status.OK


def status_line(status: Status, result: RunResult, config: ScanConfig) -> str:
    hits = result.total_matches
    pattern = config.search_pattern
    minutes = config.interval
    if status in (Status.CRITICAL, Status.WARNING):
        return (
            f'{status.name} - There are {hits} instances of "{pattern}" '
            f"in the last {minutes} minutes"
        )
    if status is Status.UNKNOWN:
        return f'UNKNOWN - There were no files matching the passed filename: "{config.logfile}"'
    return (
        f'OK - There are only {hits} instances of "{pattern}" in the last {minutes} minutes'
        f" - Warning threshold is {config.warning}"
    )


def error_line(message: str) -> str:
    return f"UNKNOWN - {message}"
