"""Run the duplicacy binary and stream its output line by line."""
from __future__ import annotations

import subprocess
from collections import deque
from pathlib import Path
from typing import Iterator, Sequence

from .errors import OperationError

TAIL_LINES = 20


def run_external(path: str, args: Sequence[str], cwd: Path) -> Iterator[str]:
    """
    Launch ``path args...`` in ``cwd`` and yield its merged stdout/stderr.

    The generator is finite and single-use. Once the output is drained it
    waits for the process and raises ``OperationError`` (with the last
    ``TAIL_LINES`` lines) if the exit code is not zero.
    """
    cmd = [str(path), *args]
    try:
        proc = subprocess.Popen(
            cmd,
            cwd=str(cwd),
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            stdin=subprocess.DEVNULL,
            text=True,
            errors="replace",
        )
    except OSError as e:
        raise OperationError(f"cannot start {path}: {e}")

    tail = deque(maxlen=TAIL_LINES)
    try:
        for line in iter(proc.stdout.readline, ""):
            line = line.rstrip("\r\n")
            tail.append(line)
            yield line
    finally:
        proc.stdout.close()
        rc = proc.wait()

    if rc != 0:
        raise OperationError(f"{' '.join(cmd)} exited with status {rc}", returncode=rc, tail=tail)


__all__ = ["TAIL_LINES", "run_external"]
