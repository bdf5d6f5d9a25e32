#
# errors.py
# Duplicacy Backup Runner
#
# Exception taxonomy shared by the runner and the process exit codes each failure maps to.
#
# Thales Matheus Mendonça Santos - November 2025
#
"""Errors raised by the runner and their exit codes."""
from __future__ import annotations

from typing import Optional, Sequence

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_USAGE = 2
EXIT_LOCK_CONTENTION = 200
EXIT_LOCK_ERROR = 201
# Internal code for a failed run; reported as EXIT_FAILURE by the CLI.
EXIT_RUN_FAILED = 500


class RunnerError(RuntimeError):
    """Base class for every expected runner failure."""

    exit_code = EXIT_FAILURE


class ConfigError(RunnerError):
    """Configuration file missing, unreadable or invalid."""


class GlobalConfigError(ConfigError):
    exit_code = EXIT_USAGE


class LockError(RunnerError):
    """The lock mechanism itself failed (permissions, missing filesystem...)."""

    exit_code = EXIT_LOCK_ERROR


class AlreadyLockedError(LockError):
    """Another run already holds the lock for this configuration."""

    exit_code = EXIT_LOCK_CONTENTION


class RotationError(RunnerError):
    exit_code = EXIT_RUN_FAILED


class OperationError(RunnerError):
    """An engine invocation could not be launched or exited non-zero."""

    exit_code = EXIT_RUN_FAILED

    def __init__(self, message: str, returncode: Optional[int] = None, tail: Sequence[str] = ()):
        super().__init__(message)
        self.returncode = returncode
        self.tail = list(tail)

    def __str__(self) -> str:
        base = super().__str__()
        if not self.tail:
            return base
        return base + "\n" + "\n".join(self.tail)


class MailError(RunnerError):
    """Mail delivery failed. Never fatal to the run being reported."""


__all__ = [
    "EXIT_OK",
    "EXIT_FAILURE",
    "EXIT_USAGE",
    "EXIT_LOCK_CONTENTION",
    "EXIT_LOCK_ERROR",
    "EXIT_RUN_FAILED",
    "RunnerError",
    "ConfigError",
    "GlobalConfigError",
    "LockError",
    "AlreadyLockedError",
    "RotationError",
    "OperationError",
    "MailError",
]
