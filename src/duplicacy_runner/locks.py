#
# locks.py
# Duplicacy Backup Runner
#
# Implements the per-configuration file lock that keeps two runs of the same job from overlapping.
#
# Thales Matheus Mendonça Santos - November 2025
#
"""File lock utilities to avoid overlapping runs.

The lock is an advisory ``flock`` on ``<lock_dir>/<config>.lock``. A run
killed mid-way leaves the file behind, but the kernel drops the lock with the
process, so the next run simply takes it over.
"""
from __future__ import annotations

import contextlib
import fcntl
import os
from dataclasses import dataclass
from pathlib import Path
from typing import IO, Iterator

from .errors import AlreadyLockedError, LockError


@dataclass
class LockHandle:
    path: Path
    fh: IO[str]


def _open_and_lock(lock_path: Path) -> IO[str]:
    try:
        f = open(lock_path, "a+")
    except OSError as e:
        raise LockError(f"cannot open lockfile {lock_path}: {e}")

    try:
        # Non-blocking exclusive lock: fail right away when another run is active.
        fcntl.flock(f.fileno(), fcntl.LOCK_EX | fcntl.LOCK_NB)
    except BlockingIOError:
        f.close()
        raise AlreadyLockedError(f"unable to obtain lock using lockfile: {lock_path}")
    except OSError as e:
        f.close()
        raise LockError(f"cannot lock {lock_path}: {e}")
    return f


def acquire_lock(lock_path: Path) -> LockHandle:
    lock_path = Path(lock_path)
    try:
        # Create parent directories to avoid race on first run.
        lock_path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise LockError(f"cannot create lock directory {lock_path.parent}: {e}")

    while True:
        f = _open_and_lock(lock_path)
        # The previous holder may have unlinked the file between our open and
        # flock; in that case we locked an orphaned inode and must retry.
        try:
            current = os.stat(lock_path)
        except FileNotFoundError:
            f.close()
            continue
        if os.path.samestat(os.fstat(f.fileno()), current):
            break
        f.close()

    f.seek(0)
    f.truncate(0)
    f.write(str(os.getpid()))
    f.flush()
    return LockHandle(path=lock_path, fh=f)


def release_lock(handle: LockHandle):
    # Remove the file while still holding the lock so a waiting run can't
    # lock an inode that is about to disappear.
    try:
        handle.path.unlink()
    except OSError:
        pass
    try:
        fcntl.flock(handle.fh.fileno(), fcntl.LOCK_UN)
    except (OSError, ValueError):
        pass
    try:
        handle.fh.close()
    except OSError:
        pass


@contextlib.contextmanager
def held_lock(lock_path: Path) -> Iterator[LockHandle]:
    """Hold the lock for the duration of the ``with`` block."""
    handle = acquire_lock(lock_path)
    try:
        yield handle
    finally:
        release_lock(handle)


__all__ = ["LockHandle", "acquire_lock", "release_lock", "held_lock"]
