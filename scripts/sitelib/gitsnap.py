"""
Commit the output directory to a branch with git plumbing.

The snapshot is staged in a disposable index file, so the repository's
real index and working tree are never touched:

    git describe          → revision for the commit message
    git update-index      → output files into the disposable index
    git write-tree        → tree object for the output directory
    git commit-tree       → parentless commit of that tree
    git update-ref        → move the branch to the commit

The index path reaches git through each child's environment
(GIT_INDEX_FILE); os.environ is never modified.
"""

import os
import stat

from sitelib.errors import OutputFormatError
from sitelib.process import child_env


INDEX_NAME = "index.build"
REFLOG_MESSAGE = "Build"


def one_line(output):
    """
    Parse output that must be exactly one newline-terminated line.

    Accepts bytes or str and returns the line as str without its newline.
    Raises OutputFormatError if output is empty, lacks the trailing
    newline, or holds more than one line.
    """
    if isinstance(output, bytes):
        output = output.decode("utf-8", errors="replace")
    if not output:
        raise OutputFormatError("must not be empty")
    if not output.endswith("\n"):
        raise OutputFormatError(f"must end in newline: {output!r}")
    line = output[:-1]
    if "\n" in line:
        raise OutputFormatError(f"must be a single line: {line!r}")
    return line


def output_files(root, output_dir):
    """Sorted root-relative paths (with /) of regular files under output_dir."""
    top = os.path.join(root, output_dir)
    paths = []
    for dirpath, dirnames, filenames in os.walk(top):
        dirnames.sort()
        for name in sorted(filenames):
            full = os.path.join(dirpath, name)
            if not stat.S_ISREG(os.lstat(full).st_mode):
                continue
            rel = os.path.relpath(full, root)
            paths.append(rel.replace(os.sep, "/"))
    return paths


class GitSnapshot:
    """
    Disposable-index snapshot of the output directory.

    Usage:
        snap = GitSnapshot(runner, root, "output", "refs/heads/autogenerated")
        commit = snap.write()
    """

    def __init__(self, runner, root, output_dir, ref, index_file=None, verbose=False):
        self.runner = runner
        self.root = root
        self.output_dir = os.path.normpath(output_dir)
        self.ref = ref
        self.index_file = index_file
        self.verbose = verbose

    def log(self, msg):
        if self.verbose:
            print(msg)

    def _line(self, cmd, what, env=None):
        output = self.runner.run(cmd, env=env)
        try:
            return one_line(output)
        except OutputFormatError as e:
            raise OutputFormatError(f"cannot parse git {what} output: {e}") from e

    # ── Index location ─────────────────────────────────────

    def index_path(self):
        """Configured index file, else index.build inside the git directory."""
        if self.index_file:
            return os.path.join(self.root, self.index_file)
        git_dir = self._line(["git", "rev-parse", "--git-dir"], "rev-parse")
        return os.path.join(self.root, git_dir, INDEX_NAME)

    # ── Plumbing steps ─────────────────────────────────────

    def describe(self):
        return self._line(["git", "describe", "--always", "--dirty"], "describe")

    def add_output(self, index):
        paths = output_files(self.root, self.output_dir)
        stdin = b"".join(p.encode("utf-8") + b"\0" for p in paths)
        output = self.runner.run(
            ["git", "update-index", "--add", "-z", "--verbose", "--stdin"],
            stdin=stdin,
            env=child_env(GIT_INDEX_FILE=index),
        )
        for line in output.decode("utf-8", errors="replace").splitlines():
            self.log(f"    {line}")
        return paths

    def write_tree(self, index):
        prefix = self.output_dir.replace(os.sep, "/") + "/"
        return self._line(
            ["git", "write-tree", f"--prefix={prefix}"],
            "write-tree",
            env=child_env(GIT_INDEX_FILE=index),
        )

    def commit_tree(self, tree, message):
        return self._line(["git", "commit-tree", "-m", message, tree], "commit-tree")

    def update_ref(self, commit):
        self.runner.run(["git", "update-ref", "-m", REFLOG_MESSAGE, self.ref, commit])

    # ── Whole snapshot ─────────────────────────────────────

    def write(self):
        """
        Stage, commit and move the branch. Returns the new commit id.

        A stale index left behind by a crashed run is removed first; the
        index is removed again afterwards whether or not the snapshot
        succeeded.
        """
        index = self.index_path()
        if os.path.exists(index):
            print(f"  Warning: removing stale index {index}")
            os.remove(index)

        try:
            desc = self.describe()
            paths = self.add_output(index)
            self.log(f"  Staged {len(paths)} file(s)")
            tree = self.write_tree(index)
            commit = self.commit_tree(tree, f"Regenerated site from {desc}\n")
            self.update_ref(commit)
        finally:
            try:
                os.remove(index)
            except FileNotFoundError:
                pass

        return commit
