"""Run configuration: validation and optional YAML config files."""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from timedlogs.core.dates import DEFAULT_DATE_FORMAT, date_token_count

STDIN_SENTINEL = "-"

# Keys accepted in a YAML config file, mapped to make_config() arguments.
CONFIG_KEYS = {
    "logfile": "logfile",
    "pattern": "pattern",
    "interval": "interval",
    "timepattern": "date_format",
    "timeposition": "date_position",
    "warning": "warning",
    "critical": "critical",
    "debug": "debug",
    "verbose": "verbose",
    "year": "fallback_year",
}


class ConfigError(Exception):
    def __init__(self, errors: list[str]):
        super().__init__("; ".join(errors))
        self.errors = errors


@dataclass(frozen=True)
class ScanConfig:
    interval: int  # minutes
    search_pattern: str
    pattern: re.Pattern[str]
    logfile: str
    critical: int = 1
    warning: int = 1
    date_format: str = DEFAULT_DATE_FORMAT
    date_position: int = 0
    debug: bool = False
    verbose: bool = False
    fallback_year: int | None = None  # None: current local year

    @property
    def date_tokens(self) -> int:
        return date_token_count(self.date_format)

    @property
    def glob_expression(self) -> str:
        return self.logfile + "*"


def _as_int(name: str, value: Any, errors: list[str]) -> int | None:
    if isinstance(value, bool):
        errors.append(f"{name} must be an integer")
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        errors.append(f"{name} must be an integer")
        return None


def _as_str(name: str, value: Any, errors: list[str]) -> str | None:
    if value is None or isinstance(value, str):
        return value
    errors.append(f"{name} must be a string")
    return None


def _as_bool(name: str, value: Any, errors: list[str]) -> bool:
    if value is None:
        return False
    if not isinstance(value, bool):
        errors.append(f"{name} must be true or false")
        return False
    return value


def make_config(
    *,
    interval: Any,
    pattern: Any,
    logfile: Any,
    critical: Any = 1,
    warning: Any = 1,
    date_format: Any = None,
    date_position: Any = 0,
    debug: Any = False,
    verbose: Any = False,
    fallback_year: Any = None,
) -> ScanConfig:
    """Validate raw values and build a ScanConfig. Raises ConfigError listing every problem."""
    errors: list[str] = []

    n_errors = len(errors)
    logfile = _as_str("logfile", logfile, errors)
    if len(errors) == n_errors:
        if not logfile:
            errors.append("no -logfile")
        elif logfile == STDIN_SENTINEL:
            errors.append("stdin as path is not supported")

    compiled = None
    n_errors = len(errors)
    pattern = _as_str("pattern", pattern, errors)
    if len(errors) == n_errors:
        if not pattern:
            errors.append("no -pattern")
        else:
            try:
                compiled = re.compile(pattern)
            except re.error as e:
                errors.append(f"invalid -pattern {pattern!r}: {e}")

    date_format = _as_str("timepattern", date_format, errors)

    iv = _as_int("interval", interval, errors) if interval is not None else None
    if iv is None or iv < 1:
        errors.append("interval needs to be set and be >= 1")

    crit = _as_int("critical", critical, errors)
    if crit is not None and crit < 1:
        errors.append("critical needs to be >= 1")
    warn = _as_int("warning", warning, errors)
    if warn is not None and warn < 1:
        errors.append("warning needs to be >= 1")

    pos = _as_int("timeposition", date_position, errors)
    if pos is not None and pos < 0:
        errors.append("timeposition needs to be >= 0")

    year = None
    if fallback_year is not None:
        year = _as_int("year", fallback_year, errors)
        if year is not None and not 1 <= year <= 9999:
            errors.append("year needs to be between 1 and 9999")

    debug = _as_bool("debug", debug, errors)
    verbose = _as_bool("verbose", verbose, errors)

    # De-duplicate while keeping order (interval may be reported twice)
    errors = list(dict.fromkeys(errors))
    if errors:
        raise ConfigError(errors)

    return ScanConfig(
        interval=iv,  # type: ignore[arg-type]
        search_pattern=pattern,  # type: ignore[arg-type]
        pattern=compiled,  # type: ignore[arg-type]
        logfile=logfile,  # type: ignore[arg-type]
        critical=crit,  # type: ignore[arg-type]
        warning=warn,  # type: ignore[arg-type]
        date_format=date_format or DEFAULT_DATE_FORMAT,
        date_position=pos,  # type: ignore[arg-type]
        debug=debug,
        verbose=verbose,
        fallback_year=year,
    )


def load_config_file(path: str | Path) -> dict[str, Any]:
    """Read a YAML config file into make_config() keyword arguments."""
    try:
        text = Path(path).read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError([f"cannot read config file {path}: {e.strerror or e}"]) from None
    try:
        data = yaml.safe_load(text) or {}
    except yaml.YAMLError as e:
        raise ConfigError([f"YAML parse error in {path}: {e}"]) from None

    if not isinstance(data, dict):
        raise ConfigError([f"config file {path} must contain a mapping"])

    unknown = sorted(str(k) for k in data if k not in CONFIG_KEYS)
    if unknown:
        raise ConfigError([f"unknown config key: {k}" for k in unknown])

    return {CONFIG_KEYS[k]: v for k, v in data.items()}
