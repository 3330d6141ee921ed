"""
External command invocation.

Builders and the git snapshot writer never call subprocess directly; they
go through a CommandRunner so tests can swap in a fake.
"""

import os
import subprocess

from sitelib.errors import CommandError


# Lines of stderr carried into an error message
STDERR_TAIL = 20


class CommandRunner:
    """
    Run a command, capture stdout, fail on non-zero exit.

    Usage:
        runner = CommandRunner(cwd=root, verbose=True)
        svg = runner.run(["dot", "-Tsvg"], stdin=source_bytes)
    """

    def __init__(self, cwd=None, verbose=False):
        self.cwd = cwd
        self.verbose = verbose

    def log(self, msg):
        if self.verbose:
            print(msg)

    def run(self, cmd, stdin=None, env=None):
        """
        Execute cmd and return its standard output as bytes.

        Args:
            cmd:   argument list
            stdin: bytes fed to the process, or None
            env:   full environment for the child, or None to inherit

        Raises CommandError if the executable is missing or exits non-zero.
        """
        self.log(f"  $ {' '.join(cmd)}")
        try:
            result = subprocess.run(
                cmd,
                input=stdin,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                cwd=self.cwd,
                env=env,
            )
        except FileNotFoundError as e:
            raise CommandError(f"{cmd[0]} not found", cmd=cmd) from e
        except OSError as e:
            raise CommandError(f"cannot run {cmd[0]}: {e}", cmd=cmd) from e

        stderr = result.stderr.decode("utf-8", errors="replace")
        if result.returncode != 0:
            message = f"{' '.join(cmd[:2])} failed (exit {result.returncode})"
            tail = stderr.strip().splitlines()[-STDERR_TAIL:]
            if tail:
                message += "\n" + "\n".join(f"    {line}" for line in tail)
            raise CommandError(
                message, cmd=cmd, returncode=result.returncode, stderr=stderr
            )

        if stderr.strip():
            for line in stderr.strip().splitlines():
                self.log(f"    {line}")

        return result.stdout


def child_env(**overrides):
    """Copy of the current environment with the given variables replaced."""
    env = dict(os.environ)
    env.update(overrides)
    return env
