#
# cli.py
# Duplicacy Backup Runner
#
# Parses command-line flags, loads the global and job configuration and hands an immutable run request to the runner.
#
# Thales Matheus Mendonça Santos - November 2025
#
"""Command-line interface for the duplicacy runner."""
from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from . import __version__
from .config import (
    GlobalConfig,
    JobConfig,
    RunRequest,
    load_global_config,
    load_job_config,
    selected_phases,
)
from .errors import EXIT_FAILURE, EXIT_OK, EXIT_USAGE, ConfigError
from .logging_setup import LogSink
from .mailer import SmtpMailer, send_test_messages
from .runner import run_once


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="duplicacy-runner",
        description="Run duplicacy backup/copy, prune and check operations for a configured job.",
    )
    ap.add_argument("-f", dest="config", help="configuration name (or path to a .toml job file); required for runs")
    ap.add_argument("-g", dest="global_config", type=Path, help="global configuration file")
    ap.add_argument("-a", dest="all", action="store_true", help="perform all operations (backup/copy, prune, check)")
    ap.add_argument("-b", dest="backup", action="store_true", help="perform backup/copy operations")
    ap.add_argument("-c", dest="check", action="store_true", help="perform check operations")
    ap.add_argument("-p", dest="prune", action="store_true", help="perform prune operations")
    ap.add_argument("-m", dest="mail", action="store_true", help="mail the results of the run (implies -q)")
    ap.add_argument(
        "-tm",
        dest="test_mail",
        action="store_true",
        help="send test mail messages and exit (status 0 only if both were sent)",
    )
    ap.add_argument("-d", dest="debug", action="store_true", help="enable debug output (implies -v)")
    ap.add_argument("-q", dest="quiet", action="store_true", help="only produce output on errors")
    ap.add_argument("-v", dest="verbose", action="store_true", help="enable verbose output")
    ap.add_argument("--version", action="store_true", help="display version number and exit")
    return ap


def describe_job(job: JobConfig, global_config: GlobalConfig) -> List[str]:
    lines = [f"Using duplicacy binary {global_config.duplicacy_path}", f"Repository: {job.repository}"]
    lines += [f"  backup storage {b.storage} (threads={b.threads})" for b in job.backups]
    lines += [f"  copy {c.source} -> {c.destination} (threads={c.threads})" for c in job.copies]
    lines += [f"  prune storage {p.storage} ({p.keep})" for p in job.prunes]
    lines += [f"  check storage {c.storage}{' (all)' if c.check_all else ''}" for c in job.checks]
    return lines


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    if args.version:
        print(f"Version: {__version__}")
        return EXIT_OK

    backup, prune, check = args.backup, args.prune, args.check
    if args.all:
        backup = prune = check = True
    verbose = args.verbose or args.debug
    quiet = args.quiet or args.mail

    sink = LogSink(quiet=quiet)
    sink.info(f"duplicacy-runner running, version: {__version__}")

    try:
        global_config = load_global_config(args.global_config)
    except ConfigError as e:
        sink.error(f"Error: {e}")
        return e.exit_code

    if args.test_mail:
        if global_config.mail is None:
            sink.error("Error: no [email] settings in the global configuration")
            return EXIT_FAILURE
        failures = send_test_messages(SmtpMailer(global_config.mail), logger=sink.logger)
        return EXIT_FAILURE if failures else EXIT_OK

    if not args.config:
        sink.error("Error: Mandatory parameter -f is not specified (must be specified)")
        return EXIT_USAGE

    try:
        job = load_job_config(args.config, global_config.config_dir)
    except ConfigError as e:
        sink.error(f"Error: {e}")
        return e.exit_code

    if verbose:
        for line in describe_job(job, global_config):
            sink.info(line)

    request = RunRequest(
        config_name=job.name,
        phases=selected_phases(backup, prune, check),
        send_mail=args.mail,
        debug=args.debug,
    )
    mailer = SmtpMailer(global_config.mail) if args.mail and global_config.mail else None

    try:
        return run_once(request, global_config, job, sink, mailer=mailer)
    except KeyboardInterrupt:
        print("Interrupted by user.", file=sys.stderr)
        return 130


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
