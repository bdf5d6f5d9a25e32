#
# __init__.py
# Duplicacy Backup Runner
#
# Package initializer exporting the configuration types and the single-run entry point.
#
# Thales Matheus Mendonça Santos - November 2025
#
"""Duplicacy backup job runner."""
__version__ = "0.1.0"

# Re-export the main configuration and runner for scripted use.
from .config import GlobalConfig, JobConfig, RunRequest
from .runner import run_once

__all__ = ["GlobalConfig", "JobConfig", "RunRequest", "run_once", "__version__"]
