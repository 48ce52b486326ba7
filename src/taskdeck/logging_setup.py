# src/taskdeck/logging_setup.py

from __future__ import annotations

import logging
import sys
from pathlib import Path

# Notices are printed by the console itself; their log records only belong in the file.
_NOTICE_LOGGER = "taskdeck.core.state"

# httpx logs one INFO line per request; httpcore traces every connection step at DEBUG.
_LIBRARY_LEVELS = {
    "httpx": logging.WARNING,
    "httpcore": logging.INFO,
}


class _ConsoleNoiseFilter(logging.Filter):
    """
    Keep the REPL readable while refetches run in the background:
    - taskdeck logs pass, except request-level service logs below WARNING
    - notice records are dropped (the notice sink already printed them)
    - everything else only at ERROR+
    """

    def filter(self, record: logging.LogRecord) -> bool:
        name = record.name

        if name == _NOTICE_LOGGER and record.getMessage().startswith("Notice:"):
            return False
        if name.startswith("taskdeck.service."):
            return record.levelno >= logging.WARNING
        if name.startswith("taskdeck."):
            return True

        return record.levelno >= logging.ERROR


def setup_logging(
    *,
    log_dir: str | Path = ".local/taskdeck",
    console_level: int = logging.INFO,
    file_level: int = logging.DEBUG,
    log_name: str = "taskdeck",
) -> Path:
    """
    Console handler filtered for interactive use, file handler with everything
    (`<log_dir>/<log_name>.log`). Returns the log file path.

    Call once, before the event loop starts.
    """
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / f"{log_name}.log"

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    for h in list(root.handlers):
        root.removeHandler(h)

    fmt = logging.Formatter(
        fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    console.setFormatter(fmt)
    console.addFilter(_ConsoleNoiseFilter())
    root.addHandler(console)

    file_handler = logging.FileHandler(str(log_file), encoding="utf-8")
    file_handler.setLevel(file_level)
    file_handler.setFormatter(fmt)
    root.addHandler(file_handler)

    for name, level in _LIBRARY_LEVELS.items():
        logging.getLogger(name).setLevel(level)

    logging.captureWarnings(True)
    return log_file
