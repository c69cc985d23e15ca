"""Application logging helpers.

The interactive session owns the terminal, so records go to a log file by
default. A stream handler is attached only when a caller passes a stream.
"""

from __future__ import annotations

import logging as py_logging
from pathlib import Path
from typing import TextIO

from platformdirs import user_log_dir

LOG_LEVELS = {
    "DEBUG": py_logging.DEBUG,
    "INFO": py_logging.INFO,
    "WARN": py_logging.WARNING,
    "WARNING": py_logging.WARNING,
    "ERROR": py_logging.ERROR,
}
LOGGER_NAME = "appshelf"
LOG_FILENAME = "appshelf.log"
_FORMAT = "%(asctime)s %(levelname)s %(name)s:%(lineno)d %(message)s"


def default_log_path() -> Path:
    return Path(user_log_dir(LOGGER_NAME, appauthor=False)) / LOG_FILENAME


def configure_logging(
    level: str = "INFO",
    stream: TextIO | None = None,
    *,
    log_file: str | Path | None = None,
) -> py_logging.Logger:
    """Configure the ``appshelf`` logger and return it.

    Unknown level names fall back to ``INFO``. A log file that cannot be
    opened is skipped rather than failing startup.
    """
    resolved = LOG_LEVELS.get(level.upper(), py_logging.INFO)

    logger = py_logging.getLogger(LOGGER_NAME)
    logger.setLevel(resolved)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    formatter = py_logging.Formatter(_FORMAT)

    if stream is not None:
        stream_handler = py_logging.StreamHandler(stream)
        stream_handler.setLevel(resolved)
        stream_handler.setFormatter(formatter)
        logger.addHandler(stream_handler)

    if log_file:
        log_path = Path(log_file).expanduser()
        if not log_path.is_absolute():
            log_path = log_path.resolve()
        try:
            log_path.parent.mkdir(parents=True, exist_ok=True)
            file_handler = py_logging.FileHandler(log_path, encoding="utf-8")
        except OSError:
            pass
        else:
            file_handler.setLevel(resolved)
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)

    if not logger.handlers:
        logger.addHandler(py_logging.NullHandler())
    logger.propagate = False
    return logger
