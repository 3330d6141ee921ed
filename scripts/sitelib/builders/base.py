"""
Base builder class for all source formats.

Subclasses implement `build()` and set `format_name` / `source_suffix` /
`extension` / `mimetype`. Shared logic (output paths, minification,
atomic writes, logging) lives here.
"""

import os
from abc import ABC, abstractmethod

from sitelib.errors import MinifyError
from sitelib.fsutil import write_file


class BaseBuilder(ABC):
    """
    Abstract base for format builders.

    Subclasses must define:
        format_name:   str    — human-readable name ("Markdown", "Graphviz")
        source_suffix: str    — input extension (".md", ".dot")
        extension:     str    — output extension (".html", ".svg")
        mimetype:      str    — content type handed to the minifier
        build():       method — convert one source file
    """

    format_name = None    # Override in subclass
    source_suffix = None  # Override in subclass
    extension = None      # Override in subclass
    mimetype = None       # Override in subclass

    def __init__(self, config, minifier, runner, layout=None, verbose=False):
        self.config = config
        self.minifier = minifier
        self.runner = runner
        self.layout = layout
        self.verbose = verbose

    # ── Paths ──────────────────────────────────────────────

    def source_file(self, path):
        """Absolute location of a root-relative source path."""
        return os.path.join(self.config.root, path)

    def output_file(self, path):
        """Output location for a root-relative source path."""
        stem = path[: -len(self.source_suffix)] if path.endswith(self.source_suffix) else path
        return os.path.join(self.config.output_path, stem + self.extension)

    def read_source(self, path):
        with open(self.source_file(path), "rb") as f:
            return f.read()

    # ── Logging ────────────────────────────────────────────

    def log(self, msg):
        if self.verbose:
            print(msg)

    # ── Output ─────────────────────────────────────────────

    def minify(self, data):
        try:
            return self.minifier.minify(self.mimetype, data)
        except MinifyError as e:
            raise MinifyError(f"cannot minify {self.format_name} output: {e}") from e

    def write(self, path, data):
        """Minify data and atomically write it to the output for path."""
        dst = self.output_file(path)
        write_file(dst, self.minify(data))
        print(f"  ✓ {os.path.relpath(dst, self.config.root)}")
        return dst

    # ── Abstract interface ─────────────────────────────────

    @abstractmethod
    def build(self, path, info):
        """
        Convert one source file.

        Args:
            path: source path relative to the tree root
            info: os.stat_result for the source file

        Raises BuildError (or OSError) on failure.
        """
        ...
