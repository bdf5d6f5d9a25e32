#
# test_logging_setup.py
# Duplicacy Backup Runner
#
# Covers the log sink: console prefixes, the mail buffer, quiet mode and the per-run log file.
#
# Thales Matheus Mendonça Santos - November 2025
#
import re

import pytest

from duplicacy_runner.logging_setup import CONSOLE, ERROR_CONSOLE, LogSink

TIMED = re.compile(r"^\d\d:\d\d:\d\d ")


def test_console_and_buffer_prefixes(capsys):
    sink = LogSink(logger_name="duplicacy_runner.test")
    sink.emit(CONSOLE, "Backing up to storage b2 with 4 threads")
    sink.emit(ERROR_CONSOLE, "Error: engine exited with status 1")

    out, err = capsys.readouterr()
    assert TIMED.match(out)
    assert out.rstrip().endswith("Backing up to storage b2 with 4 threads")
    # Fatal lines are printed bare.
    assert err == "Error: engine exited with status 1\n"

    first, second = sink.lines
    assert TIMED.match(first) and first.endswith("Backing up to storage b2 with 4 threads")
    assert second == "Error: engine exited with status 1"


def test_quiet_mode_keeps_buffer_and_errors(capsys):
    sink = LogSink(logger_name="duplicacy_runner.test", quiet=True)
    sink.info("hidden")
    sink.error("Error: shown")
    out, err = capsys.readouterr()
    assert out == ""
    assert err == "Error: shown\n"
    assert len(sink.lines) == 2


def test_unknown_destination_rejected(sink):
    with pytest.raises(ValueError):
        sink.emit("syslog", "nope")


def test_run_log_receives_narration_and_detail(tmp_path, capsys):
    sink = LogSink(logger_name="duplicacy_runner.test")
    log_path = tmp_path / "logs" / "nightly.log"
    log_path.parent.mkdir()
    log_path.write_text("previous run\n")

    sink.open_run_log(log_path)
    sink.info("narration")
    sink.detail("engine output")
    sink.close_run_log()
    sink.info("after close")

    lines = log_path.read_text().splitlines()
    # Opening the run log truncates generation 0.
    assert len(lines) == 2
    assert TIMED.match(lines[0]) and lines[0].endswith("narration")
    assert lines[1].endswith("engine output")
    # Engine output never reaches the console or the mail buffer.
    out, _ = capsys.readouterr()
    assert "engine output" not in out
    assert not any("engine output" in line for line in sink.lines)
