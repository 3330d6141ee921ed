"""
Exception hierarchy shared by the build stages.

Lower layers raise; only scripts/build.py turns an error into an exit code.
"""


class BuildError(Exception):
    """Base class for every failure that aborts a build."""
    pass


class FormatError(BuildError):
    """Raised when a source file is not in the expected shape."""
    pass


class OutputFormatError(BuildError):
    """Raised when a git subcommand prints something we cannot parse."""
    pass


class MinifyError(BuildError):
    """Raised for an unregistered content type or a minifier failure."""
    pass


class CommandError(BuildError):
    """
    Raised when an external command cannot be run or exits non-zero.

    Attributes:
        cmd:        the argument list that was run
        returncode: exit status, or None if the command never started
        stderr:     captured standard error, decoded
    """

    def __init__(self, message, cmd=None, returncode=None, stderr=""):
        super().__init__(message)
        self.cmd = list(cmd or [])
        self.returncode = returncode
        self.stderr = stderr
