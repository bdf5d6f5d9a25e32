#
# rotation.py
# Duplicacy Backup Runner
#
# Shifts the gzip history of a job's run log up by one generation and compresses the previous run's log before a new run writes anything.
#
# Thales Matheus Mendonça Santos - November 2025
#
"""Generational gzip rotation of run logs.

For a retention depth ``N`` the history is ``name.log`` (generation 0,
uncompressed) followed by ``name.log.1.gz`` .. ``name.log.(N-1).gz``.
"""
from __future__ import annotations

import gzip
import os
import shutil
from pathlib import Path

from .errors import RotationError


def generation_path(log_root: Path, index: int) -> Path:
    return Path(f"{log_root}.{index}.gz")


def compress_file(src: Path, dst: Path):
    # Build the archive next to its destination and rename atomically so a
    # failed compression never leaves a truncated generation behind.
    part = Path(f"{dst}.part")
    try:
        # The gzip header records the final name, not the temporary one.
        with open(src, "rb") as reader, open(part, "wb") as raw:
            with gzip.GzipFile(filename=str(dst), mode="wb", fileobj=raw) as writer:
                shutil.copyfileobj(reader, writer)
        part.replace(dst)
    except OSError as e:
        try:
            part.unlink()
        except OSError:
            pass
        raise RotationError(f"cannot compress {src} into {dst}: {e}")


def rotate_logs(log_root: Path, retention_depth: int):
    """Shift ``log_root.i.gz`` up by one and compress ``log_root`` into ``.1.gz``.

    Missing generations are skipped. The uncompressed log is left where it
    is; the caller truncates it when it opens the next run log.
    """
    if retention_depth < 2:
        raise ValueError(f"retention depth must be at least 2, got {retention_depth}")

    log_root = Path(log_root)

    for i in range(retention_depth - 2, 0, -1):
        src = generation_path(log_root, i)
        try:
            os.replace(src, generation_path(log_root, i + 1))
        except FileNotFoundError:
            continue
        except OSError as e:
            raise RotationError(f"cannot rotate {src}: {e}")

    if not log_root.exists():
        return

    compress_file(log_root, generation_path(log_root, 1))


__all__ = ["generation_path", "compress_file", "rotate_logs"]
