"""
Content-type-dispatched minification.

Exact content types are looked up first, then regular expressions in the
order they were registered:

    text/css          rcssmin
    text/html         minify-html
    text/javascript   rjsmin
    image/svg+xml     lxml (blank text and comments dropped)
    [/+]json$         compact JSON re-encoding
    [/+]xml$          lxml
"""

import json
import re

import minify_html
import rcssmin
import rjsmin
from lxml import etree

from sitelib.errors import MinifyError


def minify_css(text):
    return rcssmin.cssmin(text)


def minify_js(text):
    return rjsmin.jsmin(text)


def minify_html_text(text):
    return minify_html.minify(text, minify_css=True, minify_js=True)


def minify_json(text):
    try:
        value = json.loads(text)
    except ValueError as e:
        raise MinifyError(f"invalid json: {e}") from e
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False)


def minify_xml(data):
    """Re-serialise an XML document without ignorable whitespace, comments or prolog."""
    parser = etree.XMLParser(
        remove_blank_text=True,
        remove_comments=True,
        resolve_entities=False,
        no_network=True,
    )
    try:
        root = etree.fromstring(data, parser)
    except etree.XMLSyntaxError as e:
        raise MinifyError(f"invalid xml: {e}") from e
    return etree.tostring(root, encoding="utf-8", xml_declaration=False)


class Minifier:
    """
    Registry of minifiers keyed by content type.

    Text minifiers take and return str; byte minifiers (XML) take and
    return bytes. minify() always works in bytes.

    Usage:
        m = default_minifier()
        small = m.minify("text/html", page_bytes)
    """

    def __init__(self):
        self._exact = {}
        self._patterns = []

    def add(self, mimetype, func, binary=False):
        self._exact[mimetype] = (func, binary)

    def add_regexp(self, pattern, func, binary=False):
        self._patterns.append((re.compile(pattern), func, binary))

    def lookup(self, mimetype):
        """Return (func, binary) for mimetype, or None."""
        if mimetype in self._exact:
            return self._exact[mimetype]
        for pattern, func, binary in self._patterns:
            if pattern.search(mimetype):
                return func, binary
        return None

    def minify(self, mimetype, data):
        entry = self.lookup(mimetype)
        if entry is None:
            raise MinifyError(f"no minifier for content type {mimetype!r}")
        func, binary = entry

        if binary:
            return func(data)

        try:
            text = data.decode("utf-8")
        except UnicodeDecodeError as e:
            raise MinifyError(f"cannot minify {mimetype}: {e}") from e
        try:
            result = func(text)
        except MinifyError:
            raise
        except Exception as e:
            raise MinifyError(f"cannot minify {mimetype}: {e}") from e
        return result.encode("utf-8")


def default_minifier():
    """A Minifier with every supported content type registered."""
    m = Minifier()
    m.add("text/css", minify_css)
    m.add("text/html", minify_html_text)
    m.add("text/javascript", minify_js)
    m.add("image/svg+xml", minify_xml, binary=True)
    m.add_regexp(r"[/+]json$", minify_json)
    m.add_regexp(r"[/+]xml$", minify_xml, binary=True)
    return m
