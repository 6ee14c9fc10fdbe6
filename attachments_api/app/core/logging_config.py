"""
Logging setup shared by the ratings and comments services.

Records of the ``attachments_api`` package go to the console and,
when ``LOG_FILE`` is set, to a size rotated file.  The handlers are
attached to the root logger under fixed names so that the uvicorn and
SQLite records end up in the same place, and so that a repeated call
(both services configure logging when ``run.py`` serves them from one
process) only updates the level instead of adding a second set of
handlers.  Handlers installed by someone else (pytest, an embedding
application) are left alone.
"""

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional


LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

PACKAGE_LOGGER = "attachments_api"
CONSOLE_HANDLER = "attachments.console"
FILE_HANDLER = "attachments.file"

LOG_FILE_MAX_BYTES = 10 * 1024 * 1024
LOG_FILE_BACKUPS = 5


def _named_handler(logger: logging.Logger, name: str) -> Optional[logging.Handler]:
    for handler in logger.handlers:
        if handler.get_name() == name:
            return handler
    return None


def _file_handler(logfile: str, formatter: logging.Formatter) -> logging.Handler:
    log_path = Path(logfile).resolve()
    log_path.parent.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(
        log_path,
        maxBytes=LOG_FILE_MAX_BYTES,
        backupCount=LOG_FILE_BACKUPS,
        encoding="utf-8",
    )
    handler.set_name(FILE_HANDLER)
    handler.setFormatter(formatter)
    return handler


def setup_logging(level: str = "INFO", logfile: Optional[str] = None) -> None:
    """Install the service handlers and apply ``level``.

    Parameters
    ----------
    level : str
        Logging level name (e.g. ``"DEBUG"``, ``"INFO"``).  Case
        insensitive; unknown names fall back to ``INFO``.
    logfile : Optional[str]
        Path of the log file.  If omitted, only the console handler is
        attached.  The file rotates at ``LOG_FILE_MAX_BYTES``.
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)
    if not isinstance(numeric_level, int):
        numeric_level = logging.INFO

    root = logging.getLogger()
    root.setLevel(numeric_level)
    logging.getLogger(PACKAGE_LOGGER).setLevel(numeric_level)

    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)

    if _named_handler(root, CONSOLE_HANDLER) is None:
        console = logging.StreamHandler()
        console.set_name(CONSOLE_HANDLER)
        console.setFormatter(formatter)
        root.addHandler(console)

    if logfile and _named_handler(root, FILE_HANDLER) is None:
        root.addHandler(_file_handler(logfile, formatter))
