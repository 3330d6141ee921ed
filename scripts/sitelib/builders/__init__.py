from sitelib.builders.markdown import MarkdownBuilder
from sitelib.builders.graphviz import DotBuilder

# Source extension → builder class
BUILDERS = {
    ".md": MarkdownBuilder,
    ".dot": DotBuilder,
}
