# src/overdue_triage/logging_setup.py

from __future__ import annotations

import logging
import sys
from collections.abc import Iterable
from pathlib import Path

LOG_FORMAT = "%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"

# HTTP client libraries whose per-request lines only belong in the file log.
HTTP_LOGGERS = ("httpx", "httpcore")


class _ConsoleNoiseFilter(logging.Filter):
    """
    Operator console shows our own records, HTTP client trouble from WARNING,
    and any other library only from ERROR (captured py.warnings included).
    """

    def __init__(self, app_prefix: str = "overdue_triage") -> None:
        super().__init__()
        self._own = (app_prefix, f"{app_prefix}.")

    def filter(self, record: logging.LogRecord) -> bool:
        name = record.name
        if name == self._own[0] or name.startswith(self._own[1]):
            return True
        if name.split(".", 1)[0] in HTTP_LOGGERS:
            return record.levelno >= logging.WARNING
        return record.levelno >= logging.ERROR


def setup_logging(
    *,
    log_dir: str | Path = ".local/triage",
    console_level: int = logging.INFO,
    file_level: int = logging.DEBUG,
    file_name: str = "triage.log",
    quiet: Iterable[str] = HTTP_LOGGERS,
) -> Path:
    """
    Route everything to `log_dir/file_name` and a filtered stderr console.

    Loggers named in `quiet` are capped at WARNING everywhere.
    Replaces existing root handlers, so calling it twice does not duplicate output.
    Returns the log file path.
    """
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / file_name

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    for h in list(root.handlers):
        root.removeHandler(h)
        h.close()

    fmt = logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATEFMT)

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    console.setFormatter(fmt)
    console.addFilter(_ConsoleNoiseFilter())
    root.addHandler(console)

    fh = logging.FileHandler(str(log_file), encoding="utf-8")
    fh.setLevel(file_level)
    fh.setFormatter(fmt)
    root.addHandler(fh)

    for name in quiet:
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.captureWarnings(True)
    return log_file
