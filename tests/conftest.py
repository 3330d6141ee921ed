"""Shared fixtures: a fake command runner and a throwaway site tree."""

import os
from collections import namedtuple

import pytest

from sitelib.config import SiteConfig
from sitelib.errors import CommandError


TREE_ID = "4b825dc642cb6eb9a060e54bf8d69288fbee4904"
COMMIT_ID = "d670460b4b4aece5915caf5c68d12f560a9fe3e4"
DESCRIBE = "v1.0-3-gabc1234-dirty"

# Roughly what `dot -Tsvg` prints, indentation and comments included
SAMPLE_SVG = b"""<?xml version="1.0" encoding="UTF-8" standalone="no"?>
<!DOCTYPE svg PUBLIC "-//W3C//DTD SVG 1.1//EN"
 "http://www.w3.org/Graphics/SVG/1.1/DTD/svg11.dtd">
<!-- Generated by graphviz version 2.43.0 (0)
 -->
<!-- Title: g Pages: 1 -->
<svg width="62pt" height="116pt"
 viewBox="0.00 0.00 62.00 116.00" xmlns="http://www.w3.org/2000/svg" xmlns:xlink="http://www.w3.org/1999/xlink">
<g id="graph0" class="graph" transform="scale(1 1) rotate(0) translate(4 112)">
<title>g</title>
<polygon fill="white" stroke="transparent" points="-4,4 -4,-112 58,-112 58,4 -4,4"/>
<!-- a -->
<g id="node1" class="node">
<title>a</title>
<ellipse fill="none" stroke="black" cx="27" cy="-90" rx="27" ry="18"/>
<text text-anchor="middle" x="27" y="-86.3" font-family="Times,serif" font-size="14.00">a</text>
</g>
</g>
</svg>
"""

TEMPLATE = """<!DOCTYPE html>
<html>
  <head>
    <title>{{ title }}</title>
  </head>
  <body>
    {{ h1 }}
    <nav>
      {{ toc }}
    </nav>
    <main>
      {{ content }}
    </main>
  </body>
</html>
"""


Call = namedtuple("Call", ["cmd", "stdin", "env"])


def _fake_update_index(cmd, stdin, env):
    # git creates the index file; the snapshot writer must clean it up
    with open(env["GIT_INDEX_FILE"], "wb") as f:
        f.write(b"DIRC")
    return b"".join(
        b"add '" + p + b"'\n" for p in (stdin or b"").split(b"\0") if p
    )


DEFAULT_RESPONSES = {
    "dot": lambda cmd, stdin, env: SAMPLE_SVG,
    "rev-parse": b".git\n",
    "describe": (DESCRIBE + "\n").encode(),
    "update-index": _fake_update_index,
    "write-tree": (TREE_ID + "\n").encode(),
    "commit-tree": (COMMIT_ID + "\n").encode(),
    "update-ref": b"",
}


class FakeRunner:
    """
    Stand-in for CommandRunner.

    Responses are keyed by the git subcommand (for git) or the program
    name (anything else). A response is bytes, an exception to raise, or
    a callable(cmd, stdin, env) returning bytes.
    """

    def __init__(self, **responses):
        self.calls = []
        self.responses = dict(DEFAULT_RESPONSES)
        self.responses.update({k.replace("_", "-"): v for k, v in responses.items()})

    @staticmethod
    def key(cmd):
        return cmd[1] if cmd[0] == "git" else cmd[0]

    def run(self, cmd, stdin=None, env=None):
        self.calls.append(Call(list(cmd), stdin, env))
        response = self.responses.get(self.key(cmd))
        if response is None:
            raise CommandError(f"{cmd[0]} not found", cmd=cmd)
        if isinstance(response, Exception):
            raise response
        if callable(response):
            return response(cmd, stdin, env)
        return response

    def commands(self):
        return [self.key(c.cmd) for c in self.calls]

    def call(self, key):
        for c in self.calls:
            if self.key(c.cmd) == key:
                return c
        raise AssertionError(f"{key} was never run")


def write(root, rel, content):
    path = os.path.join(str(root), rel)
    os.makedirs(os.path.dirname(path), exist_ok=True)
    mode = "wb" if isinstance(content, bytes) else "w"
    with open(path, mode) as f:
        f.write(content)
    return path


def read(root, rel):
    with open(os.path.join(str(root), rel), "rb") as f:
        return f.read()


@pytest.fixture
def runner():
    return FakeRunner()


@pytest.fixture
def site(tmp_path):
    """An empty site tree: a template and a .git directory."""
    write(tmp_path, "template.html", TEMPLATE)
    (tmp_path / ".git").mkdir()
    return tmp_path


@pytest.fixture
def config(site):
    return SiteConfig.load(str(site))
