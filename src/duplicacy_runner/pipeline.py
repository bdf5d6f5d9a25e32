#
# pipeline.py
# Duplicacy Backup Runner
#
# Executes a job's storage operations phase by phase, narrating each step and stopping at the first engine failure.
#
# Thales Matheus Mendonça Santos - November 2025
#
"""Sequential backup/copy/prune/check pipeline."""
from __future__ import annotations

import enum
import time
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Callable, Iterable, List, Optional, Sequence

from .config import GlobalConfig, JobConfig
from .engine import run_external
from .errors import EXIT_OK, EXIT_RUN_FAILED, OperationError
from .logging_setup import LogSink
from .operations import PHASE_ORDER, Phase

SEPARATOR = "#" * 70

# (path, args, cwd) -> lines; raises OperationError on failure.
Runner = Callable[..., Iterable[str]]


class RunState(enum.Enum):
    NOT_STARTED = "not_started"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass
class RunOutcome:
    state: RunState = RunState.NOT_STARTED
    lines: List[str] = field(default_factory=list)
    phase: Optional[Phase] = None
    # 1-based position of the operation within its phase.
    index: int = 0
    cause: Optional[str] = None
    elapsed: float = 0.0

    @property
    def succeeded(self) -> bool:
        return self.state is RunState.SUCCEEDED

    @property
    def exit_code(self) -> int:
        return EXIT_OK if self.succeeded else EXIT_RUN_FAILED


def format_elapsed(seconds: float) -> str:
    return str(timedelta(seconds=round(seconds)))


class OperationPipeline:
    def __init__(
        self,
        global_config: GlobalConfig,
        sink: LogSink,
        runner: Runner = run_external,
        debug: bool = False,
    ):
        self.global_config = global_config
        self.sink = sink
        self.runner = runner
        self.debug = debug

    def run(self, job: JobConfig, phases: Sequence[Phase]) -> RunOutcome:
        sink = self.sink
        outcome = RunOutcome(state=RunState.RUNNING)
        started = time.monotonic()
        sink.info(f"Beginning backup on {datetime.now().strftime('%m-%d-%Y %H:%M:%S')}")

        selected = set(phases)
        for phase in PHASE_ORDER:
            if phase not in selected:
                continue
            for index, op in enumerate(job.operations_for(phase), start=1):
                outcome.phase, outcome.index = phase, index
                sink.detail(SEPARATOR)
                sink.info(op.describe())
                args = op.arguments()
                if self.debug:
                    sink.info(f"Executing: {self.global_config.duplicacy_path} {args}")
                try:
                    for line in self.runner(self.global_config.duplicacy_path, args, job.repository):
                        sink.detail(line)
                except OperationError as e:
                    sink.error(f"Error: {e}")
                    outcome.state = RunState.FAILED
                    outcome.cause = str(e)
                    outcome.elapsed = time.monotonic() - started
                    outcome.lines = sink.lines
                    return outcome

        outcome.elapsed = time.monotonic() - started
        sink.detail(SEPARATOR)
        sink.info(f"Operations completed in {format_elapsed(outcome.elapsed)}")
        outcome.state = RunState.SUCCEEDED
        outcome.phase, outcome.index = None, 0
        outcome.lines = sink.lines
        return outcome


__all__ = ["SEPARATOR", "RunState", "RunOutcome", "format_elapsed", "OperationPipeline"]
