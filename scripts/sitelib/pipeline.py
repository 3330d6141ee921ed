"""
Whole-site build: walk → auxiliary files → git snapshot.
"""

import os

from sitelib.builders import BUILDERS
from sitelib.fsutil import write_file
from sitelib.gitsnap import GitSnapshot
from sitelib.minify import default_minifier
from sitelib.process import CommandRunner
from sitelib.walk import walk_tree


# Empty marker that turns off GitHub Pages' Jekyll processing
NOJEKYLL = ".nojekyll"
CNAME = "CNAME"


def make_builders(config, minifier, runner, layout, verbose=False):
    """One builder instance per registered extension."""
    return {
        ext: builder_cls(
            config=config,
            minifier=minifier,
            runner=runner,
            layout=layout,
            verbose=verbose,
        )
        for ext, builder_cls in BUILDERS.items()
    }


def write_aux_files(config):
    write_file(os.path.join(config.output_path, NOJEKYLL), b"")
    write_file(
        os.path.join(config.output_path, CNAME),
        (config.domain + "\n").encode("utf-8"),
    )


def header(title):
    print(f"\n{'─' * 60}")
    print(f"  {title}")
    print(f"{'─' * 60}")


def run(config, runner=None, verbose=False):
    """
    Build the site described by config.

    Returns the snapshot commit id, or None when the git stage is disabled.
    Any failure propagates; nothing here exits the process.
    """
    runner = runner or CommandRunner(cwd=config.root, verbose=verbose)

    layout = config.load_template()
    builders = make_builders(config, default_minifier(), runner, layout, verbose)

    os.makedirs(config.output_path, exist_ok=True)

    header("Building site")
    built = walk_tree(config.root, config.output_dir, builders, verbose=verbose)
    write_aux_files(config)
    print(f"  {len(built)} file(s) converted")

    if not config.git:
        return None

    header(f"Committing to {config.branch}")
    snapshot = GitSnapshot(
        runner,
        config.root,
        config.output_dir,
        config.branch,
        index_file=config.index_file,
        verbose=verbose,
    )
    commit = snapshot.write()

    branch = config.branch_name
    print(f"  ✓ Prepared {commit}")
    print(f"\n  To see diff run\n\n    git diff {branch}@{{1}} {branch}\n")
    if config.push_url:
        print(f"  To push run\n\n    git push {config.push_url} +{branch}:refs/heads/master\n")
    return commit
