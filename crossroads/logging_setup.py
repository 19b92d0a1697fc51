"""
logging_setup.py
================
Configures the root logger with a console handler and, when a log file is
configured, a rotating file handler (1 MB, 2 backups).

Call :func:`setup_logging` once at startup.
"""

import logging
from logging.handlers import RotatingFileHandler
from typing import Optional, Union

from crossroads.domain import config

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def setup_logging(level: Union[int, str] = config.LOG_LEVEL, log_file: Optional[str] = config.LOG_FILE) -> None:
    """Apply a unified log format to console and (optional) file output.

    Parameters
    ----------
    level : int or str
        Minimum severity level (e.g. ``logging.DEBUG`` or ``"INFO"``).
    log_file : str, optional
        Path of the rotating log file. ``None`` logs to the console only.
    """
    root = logging.getLogger()
    root.setLevel(level)

    fmt = logging.Formatter(LOG_FORMAT)

    ch = logging.StreamHandler()
    ch.setFormatter(fmt)

    root.handlers.clear()
    root.addHandler(ch)

    if log_file:
        fh = RotatingFileHandler(log_file, maxBytes=1_000_000, backupCount=2)
        fh.setFormatter(fmt)
        root.addHandler(fh)
