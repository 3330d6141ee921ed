#!/usr/bin/env python3
"""
Build script for the static site.

Converts every Markdown (.md) and Graphviz (.dot) file under the current
directory into minified HTML/SVG in output/, then commits output/ to the
autogenerated branch.

Usage:
    python scripts/build.py            Build and commit
    python scripts/build.py -v         Same, with detail output

Requires: PyYAML, Jinja2, Markdown, pymdown-extensions, minify-html,
          rcssmin, rjsmin, lxml
External: dot (Graphviz), git
"""

import os
import sys
import argparse
import traceback

# Ensure sitelib is importable from the scripts/ directory
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from sitelib.config import SiteConfig, ConfigError
from sitelib.errors import BuildError
from sitelib import pipeline


PROG = os.path.basename(sys.argv[0]) if sys.argv and sys.argv[0] else "build.py"

USAGE = f"""Usage:
  {PROG} [-v]
(the command takes no arguments)
"""


class _Parser(argparse.ArgumentParser):
    """argparse with the short usage text and exit code 2 on bad arguments."""

    def format_usage(self):
        return USAGE

    def error(self, message):
        sys.stderr.write(USAGE)
        sys.exit(2)


def build_parser():
    parser = _Parser(
        prog=PROG,
        description="Build the static site and commit it to a branch",
    )
    parser.add_argument("--verbose", "-v", action="store_true")
    return parser


def fail(msg):
    print(f"{PROG}: {msg}", file=sys.stderr)
    sys.exit(1)


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = SiteConfig.load(os.getcwd())
        config.summary()
        pipeline.run(config, verbose=args.verbose)
    except (BuildError, ConfigError, OSError) as e:
        fail(e)

    print(f"\n{'─' * 60}")
    print("  Done.")


if __name__ == "__main__":
    try:
        main()
    except KeyboardInterrupt:
        print("\nCancelled.")
        sys.exit(1)
    except Exception as e:
        log_path = "build_error.log"
        with open(log_path, "w") as f:
            traceback.print_exc(file=f)
        print(f"\nUnexpected error: {e}")
        print(f"Full traceback written to {log_path}")
        sys.exit(1)
