#
# test_engine.py
# Duplicacy Backup Runner
#
# Runs small Python scripts in place of duplicacy to check line streaming, exit status handling and launch failures.
#
# Thales Matheus Mendonça Santos - November 2025
#
import sys

import pytest

from duplicacy_runner.engine import TAIL_LINES, run_external
from duplicacy_runner.errors import OperationError


def _script(tmp_path, body):
    script = tmp_path / "fake_duplicacy.py"
    script.write_text(body)
    return str(script)


def test_streams_merged_output_in_cwd(tmp_path):
    script = _script(
        tmp_path,
        "import os, sys\n"
        "print('cwd', os.getcwd(), flush=True)\n"
        "print('args', ' '.join(sys.argv[1:]), flush=True)\n"
        "sys.stderr.write('warning on stderr\\n')\n",
    )
    repo = tmp_path / "repo"
    repo.mkdir()

    lines = list(run_external(sys.executable, [script, "backup", "-stats"], repo))

    assert lines[0] == f"cwd {repo.resolve()}"
    assert lines[1] == "args backup -stats"
    assert lines[2] == "warning on stderr"


def test_output_is_lazy(tmp_path):
    script = _script(tmp_path, "print('first')\nprint('second')\n")
    gen = run_external(sys.executable, [script], tmp_path)
    assert next(gen) == "first"
    assert list(gen) == ["second"]


def test_nonzero_exit_raises_with_tail(tmp_path):
    script = _script(
        tmp_path,
        "import sys\n"
        "for i in range(30):\n"
        "    print('line', i)\n"
        "sys.exit(3)\n",
    )
    seen = []
    with pytest.raises(OperationError) as exc:
        for line in run_external(sys.executable, [script], tmp_path):
            seen.append(line)

    assert len(seen) == 30
    assert exc.value.returncode == 3
    assert len(exc.value.tail) == TAIL_LINES
    assert exc.value.tail[-1] == "line 29"
    assert "exited with status 3" in str(exc.value)


def test_missing_executable_raises(tmp_path):
    with pytest.raises(OperationError) as exc:
        list(run_external(str(tmp_path / "no-such-duplicacy"), ["backup"], tmp_path))
    assert exc.value.returncode is None
