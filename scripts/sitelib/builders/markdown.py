"""
Markdown builder.

Pipeline: split heading from body → render heading, TOC and body with
Python-Markdown → fill the page template → minify HTML → write.

The heading is rendered on its own so the layout controls where it goes:
rendering the whole file would put the h1 inside the TOC and the TOC
below the h1.
"""

import re
from dataclasses import dataclass
from html.parser import HTMLParser

import markdown
from jinja2 import TemplateError
from markupsafe import Markup

from sitelib.builders.base import BaseBuilder
from sitelib.errors import FormatError


EXTENSIONS = [
    "tables",
    "fenced_code",
    "footnotes",
    "toc",
    "smarty",
    "pymdownx.tilde",
    "pymdownx.magiclink",
    "pymdownx.smartsymbols",
]

EXTENSION_CONFIGS = {
    "smarty": {
        "smart_quotes": True,
        "smart_dashes": True,
        "smart_ellipses": True,
        "smart_angled_quotes": False,
    },
    # ~~strike~~ only; single tildes stay literal
    "pymdownx.tilde": {"subscript": False},
    "pymdownx.smartsymbols": {
        "fractions": True,
        "trademark": False,
        "copyright": False,
        "registered": False,
        "care_of": False,
        "plusminus": False,
        "arrows": False,
        "notequal": False,
        "ordinal_numbers": False,
    },
}

UNSPACED_HEADING = re.compile(r"#{1,6}[^#\s]")

# Elements that never get an end tag in HTML
VOID_ELEMENTS = {
    "area", "base", "br", "col", "embed", "hr", "img", "input",
    "link", "meta", "source", "track", "wbr",
}


@dataclass
class Page:
    """One rendered Markdown file, ready for the layout."""

    title: str
    h1: str
    toc: str
    content: str


def render_markdown(text):
    """Render Markdown with the site dialect. Returns (html, toc_html)."""
    md = markdown.Markdown(
        extensions=EXTENSIONS,
        extension_configs=EXTENSION_CONFIGS,
        output_format="xhtml",
    )
    html = md.convert(text)
    return html, getattr(md, "toc", "")


class _FragmentParser(HTMLParser):
    """Collect the top-level nodes of an HTML fragment with their text."""

    def __init__(self):
        super().__init__(convert_charrefs=True)
        self.nodes = []  # [tag or None for text, [text parts]]
        self._depth = 0

    def handle_starttag(self, tag, attrs):
        if self._depth == 0:
            self.nodes.append([tag, []])
        if tag not in VOID_ELEMENTS:
            self._depth += 1

    def handle_startendtag(self, tag, attrs):
        if self._depth == 0:
            self.nodes.append([tag, []])

    def handle_endtag(self, tag):
        if tag in VOID_ELEMENTS:
            return
        if self._depth > 0:
            self._depth -= 1

    def handle_data(self, data):
        if self._depth > 0:
            self.nodes[-1][1].append(data)
        elif data.strip():
            self.nodes.append([None, [data]])


def heading_text(fragment):
    """
    Plain text of the leading <h1> in a rendered fragment.

    Raises FormatError if the fragment does not start with an h1 element.
    """
    parser = _FragmentParser()
    parser.feed(fragment)
    parser.close()

    if not parser.nodes or parser.nodes[0][0] != "h1":
        raise FormatError("markdown does not start with a header")
    return "".join(parser.nodes[0][1])


def parse_page(text):
    """Split Markdown source into a Page. Raises FormatError on bad input."""
    if not text.strip():
        raise FormatError("markdown has no content")

    title_md, _, body_md = text.partition("\n")

    # "#Title" is a paragraph, not a heading
    if UNSPACED_HEADING.match(title_md):
        raise FormatError("markdown does not start with a header")

    h1, _ = render_markdown(title_md)
    title = heading_text(h1)
    content, toc = render_markdown(body_md)

    return Page(title=title, h1=h1, toc=toc, content=content)


class MarkdownBuilder(BaseBuilder):
    format_name = "Markdown"
    source_suffix = ".md"
    extension = ".html"
    mimetype = "text/html"

    def build(self, path, info):
        try:
            text = self.read_source(path).decode("utf-8-sig")
        except UnicodeDecodeError as e:
            raise FormatError(f"markdown is not valid UTF-8: {e}") from e

        page = parse_page(text)
        self.log(f"  Title: {page.title}")

        try:
            html = self.layout.render(
                title=page.title,
                h1=Markup(page.h1),
                toc=Markup(page.toc),
                content=Markup(page.content),
            )
        except TemplateError as e:
            raise FormatError(f"executing template: {e}") from e
        return self.write(path, html.encode("utf-8"))
