#
# conftest.py
# Duplicacy Backup Runner
#
# Creates reusable pytest fixtures: a temporary global configuration, a small job, a log sink and a scripted fake engine.
#
# Thales Matheus Mendonça Santos - November 2025
#
import pytest

from duplicacy_runner.config import GlobalConfig, JobConfig
from duplicacy_runner.errors import OperationError
from duplicacy_runner.logging_setup import LogSink
from duplicacy_runner.operations import Backup, Check, Copy, Prune


class FakeEngine:
    """Stand-in for run_external that records calls and fails on demand."""

    def __init__(self, fail_on=None, output=("line one", "line two")):
        self.calls = []
        self.fail_on = set(fail_on or ())
        self.output = output

    def __call__(self, path, args, cwd):
        self.calls.append((path, list(args), cwd))
        number = len(self.calls)
        for line in self.output:
            yield f"{args[0]}: {line}"
        if number in self.fail_on:
            raise OperationError(f"{path} {args[0]} exited with status 1", returncode=1, tail=["boom"])


@pytest.fixture
def temp_global(tmp_path):
    config = GlobalConfig(
        duplicacy_path="/usr/local/bin/duplicacy",
        config_dir=tmp_path / "etc",
        lock_dir=tmp_path / "locks",
        log_dir=tmp_path / "logs",
        log_file_count=5,
    )
    # Create the minimal folder structure expected by the code under test.
    config.config_dir.mkdir(parents=True, exist_ok=True)
    config.log_dir.mkdir(parents=True, exist_ok=True)
    return config


@pytest.fixture
def job(tmp_path):
    repo = tmp_path / "repo"
    repo.mkdir()
    return JobConfig(
        name="nightly",
        repository=repo,
        backups=(Backup("local", 4), Backup("b2", 2), Backup("azure", 1)),
        copies=(Copy("local", "offsite", 2),),
        prunes=(Prune("b2", "-keep 0:365 -keep 7:30"),),
        checks=(Check("b2", True),),
    )


@pytest.fixture
def sink():
    return LogSink(logger_name="duplicacy_runner.test")


@pytest.fixture
def fake_engine():
    return FakeEngine()


@pytest.fixture
def make_engine():
    return FakeEngine


@pytest.fixture(autouse=True)
def wide_terminal(monkeypatch):
    # argparse wraps help text to the terminal width; keep it deterministic.
    monkeypatch.setenv("COLUMNS", "200")
