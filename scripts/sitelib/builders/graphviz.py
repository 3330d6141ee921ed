"""
Graphviz builder.

Pipeline: dot -Tsvg (source on stdin) → minify SVG → write.
"""

from sitelib.builders.base import BaseBuilder
from sitelib.errors import CommandError


class DotBuilder(BaseBuilder):
    format_name = "Graphviz"
    source_suffix = ".dot"
    extension = ".svg"
    mimetype = "image/svg+xml"

    def build(self, path, info):
        source = self.read_source(path)
        cmd = list(self.config.dot_command)

        try:
            svg = self.runner.run(cmd, stdin=source)
        except CommandError as e:
            raise CommandError(
                f"error running {cmd[0]}: {e}",
                cmd=e.cmd,
                returncode=e.returncode,
                stderr=e.stderr,
            ) from e

        self.log(f"  {cmd[0]}: {len(source)} bytes in, {len(svg)} bytes out")
        return self.write(path, svg)
