"""
Logging setup for the ``cmgr`` command and the web UI.

The console gets bare messages on stderr, or timestamped lines at DEBUG.
An optional log file always gets timestamped lines. Werkzeug's per-request
access lines stay hidden below --debug so ``cmgr -v web`` only shows what
Company Manager itself reports.
"""

import logging
import sys
from pathlib import Path
from typing import Optional

PLAIN_FORMAT = "%(message)s"
DETAILED_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

# Flask's development server logs every request here
REQUEST_LOGGER = "werkzeug"


def _handler(handler: logging.Handler, level: int, format_str: str) -> logging.Handler:
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(format_str))
    return handler


def configure_logging(
    level: int = logging.WARNING,
    log_file: Optional[Path] = None,
    format_str: Optional[str] = None,
) -> None:
    """
    Install the console handler (and the file handler, if any) on the root logger.

    Handlers left by an earlier call are removed first, so calling this again
    with new settings is safe. A log file that cannot be opened is reported
    at DEBUG and otherwise ignored.
    """
    if format_str is None:
        format_str = DETAILED_FORMAT if level <= logging.DEBUG else PLAIN_FORMAT

    root = logging.getLogger()
    for old in root.handlers[:]:
        root.removeHandler(old)
    root.setLevel(level)
    root.addHandler(_handler(logging.StreamHandler(sys.stderr), level, format_str))

    if log_file is not None:
        try:
            log_file.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(str(log_file), encoding="utf-8")
        except OSError as e:
            logging.getLogger(__name__).debug(f"Log file {log_file} unavailable: {e}")
        else:
            root.addHandler(_handler(file_handler, level, DETAILED_FORMAT))

    logging.getLogger("company_manager").setLevel(level)
    logging.getLogger(REQUEST_LOGGER).setLevel(
        level if level <= logging.DEBUG else max(level, logging.WARNING)
    )


def get_log_level_from_flags(
    quiet: bool = False,
    verbose: bool = False,
    debug: bool = False,
    default: int = logging.WARNING,
) -> int:
    """
    Pick a level from the global flags.

    --debug wins over everything, --quiet wins over --verbose, and with no
    flag the ``default`` (normally the config file's ``[logging] level``)
    applies.
    """
    if debug:
        return logging.DEBUG
    if quiet:
        return logging.ERROR
    if verbose:
        return logging.INFO
    return default


def level_from_name(name: Optional[str]) -> int:
    """Translate a level name such as "info" into a logging constant."""
    if not name:
        return logging.WARNING
    level = logging.getLevelName(name.strip().upper())
    return level if isinstance(level, int) else logging.WARNING


def setup_logging(
    verbose: bool = False,
    debug: bool = False,
    quiet: bool = False,
    log_file: Optional[Path] = None,
    default_level: int = logging.WARNING,
) -> None:
    """Configure logging from the CLI flags, falling back to ``default_level``."""
    level = get_log_level_from_flags(
        quiet=quiet, verbose=verbose, debug=debug, default=default_level
    )
    configure_logging(level=level, log_file=log_file)
