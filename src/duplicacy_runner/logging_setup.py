#
# logging_setup.py
# Duplicacy Backup Runner
#
# Configures the stdout/stderr handlers, the per-run log file and the in-memory buffer that later becomes the mail body.
#
# Thales Matheus Mendonça Santos - November 2025
#
"""Logging configuration helpers.

A LogSink owns one named logger with three permanent handlers (stdout,
stderr, mail buffer) and, while a run is active, a file handler for the run
log. Engine output goes through a child logger that only reaches the run log.
"""
from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import List, Optional, TextIO

CONSOLE = "console"
ERROR_CONSOLE = "errorConsole"

TIME_FORMAT = "%H:%M:%S"
TIMED_FORMAT = "%(asctime)s %(message)s"


class _BelowError(logging.Filter):
    def filter(self, record):
        return record.levelno < logging.ERROR


class BufferHandler(logging.Handler):
    """Collect formatted lines in memory for the summary mail."""

    def __init__(self):
        super().__init__(logging.DEBUG)
        self.lines: List[str] = []
        self._timed = logging.Formatter(TIMED_FORMAT, datefmt=TIME_FORMAT)

    def emit(self, record):
        # Error lines are kept verbatim; everything else gets the time prefix.
        if record.levelno >= logging.ERROR:
            self.lines.append(record.getMessage())
        else:
            self.lines.append(self._timed.format(record))


class LogSink:
    def __init__(
        self,
        logger_name: str = "duplicacy_runner",
        quiet: bool = False,
        stdout: Optional[TextIO] = None,
        stderr: Optional[TextIO] = None,
    ):
        self.logger = logging.getLogger(logger_name)
        self.engine_logger = logging.getLogger(f"{logger_name}.engine")
        for lg in (self.logger, self.engine_logger):
            _drop_handlers(lg)
            lg.setLevel(logging.DEBUG)
            lg.propagate = False

        out = logging.StreamHandler(stdout or sys.stdout)
        out.setLevel(logging.CRITICAL + 1 if quiet else logging.DEBUG)
        out.addFilter(_BelowError())
        out.setFormatter(logging.Formatter(TIMED_FORMAT, datefmt=TIME_FORMAT))

        # Fatal messages go out bare; the caller already knows when it failed.
        err = logging.StreamHandler(stderr or sys.stderr)
        err.setLevel(logging.ERROR)
        err.setFormatter(logging.Formatter("%(message)s"))

        self.buffer = BufferHandler()
        for handler in (out, err, self.buffer):
            self.logger.addHandler(handler)

        self._file_handler: Optional[logging.FileHandler] = None

    @property
    def lines(self) -> List[str]:
        return list(self.buffer.lines)

    def emit(self, destination: str, message: str):
        if destination == CONSOLE:
            self.logger.info(message)
        elif destination == ERROR_CONSOLE:
            self.logger.error(message)
        else:
            raise ValueError(f"unknown log destination: {destination!r}")

    def info(self, message: str):
        self.emit(CONSOLE, message)

    def error(self, message: str):
        self.emit(ERROR_CONSOLE, message)

    def detail(self, message: str):
        """Write to the run log only (engine output, separators)."""
        self.engine_logger.info(message)

    def open_run_log(self, path: Path) -> Path:
        """Start a fresh run log, truncating whatever generation 0 held."""
        self.close_run_log()
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(str(path), mode="w", encoding="utf-8")
        fh.setLevel(logging.DEBUG)
        fh.setFormatter(logging.Formatter(TIMED_FORMAT, datefmt=TIME_FORMAT))
        self.logger.addHandler(fh)
        self.engine_logger.addHandler(fh)
        self._file_handler = fh
        return path

    def close_run_log(self):
        fh = self._file_handler
        if fh is None:
            return
        self.logger.removeHandler(fh)
        self.engine_logger.removeHandler(fh)
        fh.close()
        self._file_handler = None


def _drop_handlers(logger: logging.Logger):
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()


__all__ = ["CONSOLE", "ERROR_CONSOLE", "BufferHandler", "LogSink"]
