#
# runner.py
# Duplicacy Backup Runner
#
# Coordinates one full run: taking the job lock, rotating the run log, executing the pipeline and reporting the result by exit code and mail.
#
# Thales Matheus Mendonça Santos - November 2025
#
"""Run a single backup job."""
from __future__ import annotations

import sys
from typing import Callable, ContextManager

from .config import GlobalConfig, JobConfig, RunRequest
from .engine import run_external
from .errors import (
    EXIT_FAILURE,
    EXIT_RUN_FAILED,
    LockError,
    MailError,
    RotationError,
)
from .locks import held_lock
from .logging_setup import LogSink
from .mailer import result_subject
from .operations import PHASE_ORDER
from .pipeline import OperationPipeline, Runner
from .rotation import rotate_logs


def _locked_run(
    request: RunRequest,
    global_config: GlobalConfig,
    job: JobConfig,
    sink: LogSink,
    runner: Runner,
) -> int:
    log_path = global_config.log_path(request.config_name)

    # Rotate before anything touches the log so the previous run survives.
    sink.info("Rotating log files")
    try:
        rotate_logs(log_path, global_config.log_file_count)
    except RotationError as e:
        sink.error(f"Error: {e}")
        return e.exit_code

    try:
        sink.open_run_log(log_path)
    except OSError as e:
        sink.error(f"Error: cannot create log file {log_path}: {e}")
        return EXIT_RUN_FAILED

    try:
        pipeline = OperationPipeline(global_config, sink, runner=runner, debug=request.debug)
        phases = [p for p in PHASE_ORDER if p in request.phases]
        outcome = pipeline.run(job, phases)
    finally:
        sink.close_run_log()
    return outcome.exit_code


def run_once(
    request: RunRequest,
    global_config: GlobalConfig,
    job: JobConfig,
    sink: LogSink,
    lock: Callable[..., ContextManager] = held_lock,
    runner: Runner = run_external,
    mailer=None,
) -> int:
    """Execute one run and return the process exit code."""
    if not request.phases:
        sink.error("Error: No operations to perform (specify -b, -p, -c, or -a)")
        return EXIT_FAILURE

    try:
        # Prevent overlapping runs of the same job; contention fails fast.
        with lock(global_config.lock_path(request.config_name)):
            code = _locked_run(request, global_config, job, sink, runner)
    except LockError as e:
        sink.error(f"Error: {e}")
        code = e.exit_code

    if code == EXIT_RUN_FAILED:
        code = EXIT_FAILURE

    if request.send_mail:
        if mailer is None:
            print("Error: mail requested but no [email] settings are configured", file=sys.stderr)
        else:
            try:
                mailer.send(result_subject(request.config_name, code == 0), sink.lines)
            except MailError as e:
                print(f"Error sending E-Mail message: {e}", file=sys.stderr)

    return code


__all__ = ["run_once"]
