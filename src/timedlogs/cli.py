from __future__ import annotations

import argparse
import logging
from importlib.metadata import PackageNotFoundError, version

from rich.console import Console

from timedlogs.core.config import ConfigError, ScanConfig, load_config_file, make_config
from timedlogs.core.io import MappingLimitError
from timedlogs.core.scan import run
from timedlogs.core.status import Status, check_thresholds, error_line, status_line
from timedlogs.logs import configure_logging

PROG = "check_timed_logs"

EPILOG = """\
To allow for rotating logfiles, any file that matches the passed filename and
was changed within the passed interval is checked. e.g. If you pass
/var/log/applog, this could match /var/log/applog.0, /var/log/applog.old and
so on. Compressed (gzip/bzip) files are not handled.

Default time pattern is: %Y-%m-%d %H:%M:%S  => 2012-12-31 17:20:40
Example time patterns:
  BSD/Syslog: %b %d %H:%M:%S => Dec 31 17:20:40
  Apache Logs: %d/%b/%Y:%H:%M:%S (with -timeposition 3) => 31/Dec/2012:17:20:40
  Websphere Logs: %d-%b-%Y %I:%M:%S %p => 31-Dec-2012 05:20:40 PM
  Nagios logs: %s => 1361260238 (seconds since 01-01-1970)

Default warning/critical threshold of pattern matches is 1: unless you change
this, you will only get OK or CRITICAL, but never WARNING.

Time position: each line is split into words on whitespace; this is the index
of the first word of the time string (0 when the line starts with the time).
"""

logger = logging.getLogger(__name__)


def _console() -> Console:
    return Console(highlight=False, soft_wrap=True, emoji=False)


class UsageError(Exception):
    """Raised for command line arguments argparse cannot accept."""


class _Parser(argparse.ArgumentParser):
    def error(self, message: str):  # type: ignore[override]
        raise UsageError(message)


def _version() -> str:
    try:
        return version("check-timed-logs")
    except PackageNotFoundError:  # pragma: no cover - running from a checkout
        return "unknown"


def build_parser() -> _Parser:
    parser = _Parser(
        prog=PROG,
        description="Count log lines matching a pattern within the last interval minutes.",
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
        add_help=False,
        allow_abbrev=False,
    )
    parser.add_argument("-h", "-help", "--help", action="help", help="show this help and exit")
    parser.add_argument("-version", "--version", action="version", version=_version())
    parser.add_argument("-logfile", "--logfile", "-l", dest="logfile", help="path to log file")
    parser.add_argument("-pattern", "--pattern", "-p", dest="pattern", help="regex pattern")
    parser.add_argument("-interval", "--interval", "-i", dest="interval", type=int, help="minutes")
    parser.add_argument("-timepattern", "--timepattern", dest="date_format", help="strptime pattern")
    parser.add_argument(
        "-timeposition", "--timeposition", dest="date_position", type=int, help="word index of the time"
    )
    parser.add_argument("-warning", "--warning", "-w", dest="warning", type=int)
    parser.add_argument("-critical", "--critical", "-c", dest="critical", type=int)
    parser.add_argument("-year", "--year", dest="fallback_year", type=int, help="year for year-less times")
    parser.add_argument("-config", "--config", dest="config", help="YAML file with default values")
    parser.add_argument("-debug", "--debug", "-d", dest="debug", action="store_true", default=None)
    parser.add_argument("-verbose", "--verbose", "-v", dest="verbose", action="store_true", default=None)
    return parser


def config_from_args(args: argparse.Namespace) -> ScanConfig:
    """Merge values from an optional config file with command line values (which win)."""
    values = load_config_file(args.config) if args.config else {}
    for key in (
        "logfile",
        "pattern",
        "interval",
        "date_format",
        "date_position",
        "warning",
        "critical",
        "fallback_year",
        "debug",
        "verbose",
    ):
        value = getattr(args, key)
        if value is not None:
            values[key] = value
    values.setdefault("interval", None)
    values.setdefault("pattern", None)
    values.setdefault("logfile", None)
    return make_config(**values)


def main(argv: list[str] | None = None) -> int:
    out = _console()
    try:
        args = build_parser().parse_args(argv)
    except UsageError as e:
        out.print(error_line(str(e)), markup=False)
        return Status.UNKNOWN.exit_code

    try:
        config = config_from_args(args)
    except ConfigError as e:
        out.print(error_line(str(e)), markup=False)
        return Status.UNKNOWN.exit_code

    configure_logging(config.debug)
    echo = (lambda line: out.print(line, markup=False)) if config.verbose else None
    try:
        result = run(config, echo=echo)
    except MappingLimitError as e:
        logger.debug("aborting run", exc_info=True)
        out.print(error_line(str(e)), markup=False)
        return Status.UNKNOWN.exit_code

    logger.debug(
        "%d matches in %d processed files (%d matched by name)",
        result.total_matches,
        result.files_processed,
        result.files_matched,
    )
    status = check_thresholds(result, config)
    out.print(status_line(status, result, config), markup=False)
    return status.exit_code


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
