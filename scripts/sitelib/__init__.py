"""
sitelib — static site build toolchain.

Public API:
    from sitelib.config import SiteConfig
    from sitelib.builders import BUILDERS
    from sitelib.walk import walk_tree
    from sitelib.gitsnap import GitSnapshot, one_line
    from sitelib.pipeline import run
"""
