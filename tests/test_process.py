"""Tests for the real external command runner."""

import os
import sys

import pytest

from sitelib.errors import CommandError
from sitelib.process import CommandRunner, child_env


def test_run_returns_stdout(tmp_path):
    """Standard output comes back as bytes; stdin is passed through."""
    runner = CommandRunner(cwd=str(tmp_path))
    out = runner.run(
        [sys.executable, "-c", "import sys; sys.stdout.write(sys.stdin.read().upper())"],
        stdin=b"digraph",
    )

    assert out == b"DIGRAPH"


def test_non_zero_exit_is_a_command_error(tmp_path):
    """A failing command raises with its exit status and stderr tail."""
    runner = CommandRunner(cwd=str(tmp_path))
    cmd = [sys.executable, "-c", "import sys; sys.stderr.write('syntax error in line 1\\n'); sys.exit(3)"]

    with pytest.raises(CommandError, match="exit 3") as excinfo:
        runner.run(cmd)

    err = excinfo.value
    assert err.returncode == 3
    assert err.cmd == cmd
    assert "syntax error in line 1" in err.stderr
    assert "syntax error in line 1" in str(err)


def test_missing_executable_is_a_command_error(tmp_path):
    """A command that cannot be started raises without an exit status."""
    runner = CommandRunner(cwd=str(tmp_path))

    with pytest.raises(CommandError, match="not found") as excinfo:
        runner.run(["sitelib-no-such-renderer", "-Tsvg"])

    assert excinfo.value.returncode is None


def test_env_is_passed_to_the_child(tmp_path):
    """The env argument reaches the child process."""
    runner = CommandRunner(cwd=str(tmp_path))
    out = runner.run(
        [sys.executable, "-c", "import os, sys; sys.stdout.write(os.environ['GIT_INDEX_FILE'])"],
        env=child_env(GIT_INDEX_FILE="scratch-index"),
    )

    assert out == b"scratch-index"


def test_child_env_leaves_os_environ_alone(monkeypatch):
    """child_env returns a modified copy without touching os.environ."""
    monkeypatch.delenv("GIT_INDEX_FILE", raising=False)

    env = child_env(GIT_INDEX_FILE="scratch-index")

    assert env["GIT_INDEX_FILE"] == "scratch-index"
    assert env.get("PATH") == os.environ.get("PATH")
    assert "GIT_INDEX_FILE" not in os.environ
