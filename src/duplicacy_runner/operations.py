#
# operations.py
# Duplicacy Backup Runner
#
# Describes the storage operations a job performs and builds the duplicacy argument vector for each of them.
#
# Thales Matheus Mendonça Santos - November 2025
#
"""Storage operations and their duplicacy command lines.

Each record carries only what one engine invocation needs. The phase order
below is the order in which a run executes them.
"""
from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import List, Union


class Phase(enum.Enum):
    BACKUP = "backup"
    COPY = "copy"
    PRUNE = "prune"
    CHECK = "check"


PHASE_ORDER = (Phase.BACKUP, Phase.COPY, Phase.PRUNE, Phase.CHECK)


@dataclass(frozen=True)
class Backup:
    storage: str
    threads: int = 1

    phase = Phase.BACKUP

    def arguments(self) -> List[str]:
        return ["backup", "-storage", self.storage, "-threads", str(self.threads), "-stats"]

    def describe(self) -> str:
        return f"Backing up to storage {self.storage} with {self.threads} threads"


@dataclass(frozen=True)
class Copy:
    source: str
    destination: str
    threads: int = 1

    phase = Phase.COPY

    def arguments(self) -> List[str]:
        return ["copy", "-threads", str(self.threads), "-from", self.source, "-to", self.destination]

    def describe(self) -> str:
        return f"Copying from storage {self.source} to storage {self.destination} with {self.threads} threads"


@dataclass(frozen=True)
class Prune:
    storage: str
    keep: str

    phase = Phase.PRUNE

    def arguments(self) -> List[str]:
        # "-keep 0:365 -keep 7:30" must reach duplicacy as separate argv entries.
        return ["prune", "-all", "-storage", self.storage, *self.keep.split()]

    def describe(self) -> str:
        return f"Pruning storage {self.storage}"


@dataclass(frozen=True)
class Check:
    storage: str
    check_all: bool = False

    phase = Phase.CHECK

    def arguments(self) -> List[str]:
        args = ["check", "-storage", self.storage]
        if self.check_all:
            args.append("-all")
        return args

    def describe(self) -> str:
        return f"Checking storage {self.storage}"


StorageOperation = Union[Backup, Copy, Prune, Check]


__all__ = ["Phase", "PHASE_ORDER", "Backup", "Copy", "Prune", "Check", "StorageOperation"]
