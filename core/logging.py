"""
Logging configuration
"""

import json
import logging
import sys
from pathlib import Path
from typing import Optional

from core.config import settings
from core.exceptions import BackupException

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(log_file: Optional[Path] = None):
    """Configure application logging, optionally mirroring it to a run log file"""

    log_level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)

    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file is not None:
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))

    logging.basicConfig(
        level=log_level,
        format=LOG_FORMAT,
        datefmt=DATE_FORMAT,
        handlers=handlers,
        force=True
    )

    # One line per request is too chatty for a backup run
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    logger = logging.getLogger(__name__)
    logger.info(f"Logging configured at {settings.LOG_LEVEL} level")


def format_error(err: BaseException, header: str = "") -> str:
    """
    Render an error event as a single log line.

    The line holds the optional header, the error message and a JSON dump
    of the error's fields.
    """
    if isinstance(err, BackupException):
        message = err.message
        fields = err.to_dict()
    else:
        message = str(err)
        fields = {"error_type": type(err).__name__, "message": message}

    dump = json.dumps(fields, ensure_ascii=False, default=str)
    prefix = f"{header} " if header else ""
    return f"{prefix}{message} {dump}"


def log_error(err: BaseException, header: str = "", logger: Optional[logging.Logger] = None):
    """Write one error event to the operational log"""
    (logger or logging.getLogger("backup.errors")).error(format_error(err, header))
