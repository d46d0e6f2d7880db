"""Append-only info and error logs, opened once per process."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

INFO_LOG = "info.log"
ERROR_LOG = "error.log"
LOG_FORMAT = "%(asctime)s %(levelname)s %(module)s: %(message)s"


@dataclass
class LogContext:
    """Both log streams, handed to every component that reports failures."""

    info: logging.Logger
    error: logging.Logger

    def close(self) -> None:
        for logger in (self.info, self.error):
            for handler in list(logger.handlers):
                handler.close()
                logger.removeHandler(handler)


def _file_logger(name: str, path: Path, level: int) -> logging.Logger:
    logger = logging.getLogger(name)
    logger.setLevel(level)
    logger.propagate = False
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)
    handler = logging.FileHandler(path, mode="a", encoding="utf-8")
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
    return logger


def open_logs(log_dir: str | Path = ".") -> LogContext:
    """Open ``info.log`` and ``error.log`` under *log_dir* for appending."""
    directory = Path(log_dir)
    directory.mkdir(parents=True, exist_ok=True)
    return LogContext(
        info=_file_logger("jbrowse.info", directory / INFO_LOG, logging.INFO),
        error=_file_logger("jbrowse.error", directory / ERROR_LOG, logging.ERROR),
    )


def null_logs() -> LogContext:
    """A context that discards everything. Used by widgets built without an app."""
    info = logging.getLogger("jbrowse.null.info")
    error = logging.getLogger("jbrowse.null.error")
    for logger in (info, error):
        logger.propagate = False
        if not logger.handlers:
            logger.addHandler(logging.NullHandler())
    return LogContext(info=info, error=error)
