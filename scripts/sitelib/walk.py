"""
Source tree walk and dispatch.

Visits the tree depth-first with each directory's entries in sorted order
and hands every convertible file to the builder registered for its
extension.
"""

import os
import stat

from sitelib.errors import BuildError


# Conventionally the repository's own readme, not site content
SKIP_NAMES = {"README.md"}


def iter_sources(root, output_dir):
    """
    Yield (path, info) for every regular file the build should look at.

    path is relative to root. The output directory, dotfiles and hidden
    directories (with their subtrees) and README.md are left out. Symlinks
    are never followed.
    """
    output_dir = os.path.normpath(output_dir)

    def visit(rel_dir):
        abs_dir = os.path.join(root, rel_dir) if rel_dir else root
        for name in sorted(os.listdir(abs_dir)):
            rel = os.path.join(rel_dir, name) if rel_dir else name
            if rel == output_dir:
                continue
            if name.startswith("."):
                continue

            info = os.lstat(os.path.join(root, rel))
            if stat.S_ISDIR(info.st_mode):
                yield from visit(rel)
                continue
            if not stat.S_ISREG(info.st_mode):
                continue
            if name in SKIP_NAMES:
                continue
            yield rel, info

    yield from visit("")


def walk_tree(root, output_dir, builders, verbose=False):
    """
    Run the matching builder for every source file under root.

    Args:
        root:       tree root
        output_dir: output directory, relative to root (never walked)
        builders:   mapping of extension → builder instance

    Returns the list of converted source paths, in walk order.

    Raises BuildError naming the failing path; the walk stops at the
    first failure.
    """
    built = []
    for path, info in iter_sources(root, output_dir):
        ext = os.path.splitext(path)[1]
        builder = builders.get(ext)
        if builder is None:
            continue

        if verbose:
            print(f"  source {path}")
        try:
            builder.build(path, info)
        except (BuildError, OSError) as e:
            raise BuildError(f"build failed: {path}: {e}") from e
        built.append(path)
    return built
