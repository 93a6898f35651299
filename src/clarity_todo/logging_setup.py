# src/clarity_todo/logging_setup.py

from __future__ import annotations

import logging
import logging.handlers
import sys
from pathlib import Path

LOG_FILE_NAME = "clarity.log"

_FORMAT = "%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Chatty transport loggers; their DEBUG lines are not useful even in the file.
_QUIET_LOGGERS = ("httpx", "httpcore", "multipart", "asyncio")


class _ConsoleNoiseFilter(logging.Filter):
    """
    Decide what reaches stderr.

    `clarity serve` wants request lines (uvicorn.access); in `clarity console`
    stderr shares the terminal with the prompt, so only our own logs and
    real problems are shown there. The file handler is never filtered.
    """

    def __init__(self, *, show_access: bool = False) -> None:
        super().__init__()
        self.show_access = show_access

    def filter(self, record: logging.LogRecord) -> bool:
        name = record.name

        if name.startswith("clarity_todo."):
            # One line per request; only failures belong on the console.
            if name == "clarity_todo.sync.api_client":
                return record.levelno >= logging.WARNING
            return True

        if name == "uvicorn.access":
            return self.show_access or record.levelno >= logging.WARNING
        if name.startswith("uvicorn"):
            return record.levelno >= logging.INFO

        return record.levelno >= logging.ERROR


def _reset_root(level: int) -> logging.Logger:
    root = logging.getLogger()
    root.setLevel(level)
    for h in list(root.handlers):
        root.removeHandler(h)
    return root


def setup_logging(
    *,
    log_dir: str | Path = ".local/clarity",
    console_level: int = logging.INFO,
    file_level: int = logging.DEBUG,
    show_access: bool = False,
    max_bytes: int = 2_000_000,
    backup_count: int = 3,
) -> Path:
    """
    Configure the root logger once, before anything logs.

    - stderr: `console_level`, filtered by _ConsoleNoiseFilter
    - `<log_dir>/clarity.log`: everything from `file_level`, rotated by size

    uvicorn is started with `log_config=None`, so its loggers propagate here.
    Returns the log file path.
    """
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / LOG_FILE_NAME

    root = _reset_root(min(console_level, file_level))
    fmt = logging.Formatter(fmt=_FORMAT, datefmt=_DATE_FORMAT)

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    console.setFormatter(fmt)
    console.addFilter(_ConsoleNoiseFilter(show_access=show_access))
    root.addHandler(console)

    file_handler = logging.handlers.RotatingFileHandler(
        log_file, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8"
    )
    file_handler.setLevel(file_level)
    file_handler.setFormatter(fmt)
    root.addHandler(file_handler)

    logging.captureWarnings(True)
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return log_file
