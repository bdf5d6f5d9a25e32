#!/usr/bin/env python3
#
# duplicacy_runner_cli.py
# Duplicacy Backup Runner
#
# Entry-point wrapper for cron/launchd that runs one duplicacy job and exits with its status code.
#
# Thales Matheus Mendonça Santos - November 2025
#
"""
Thin wrapper so schedulers can call the runner without installing the
console script.
"""
from __future__ import annotations

import sys

from duplicacy_runner.cli import main

if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
