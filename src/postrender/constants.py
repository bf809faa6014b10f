"""Shared constants for the post-render pipeline."""

from __future__ import annotations

# Relative links are resolved against this address. The bogus host lets
# transforms tell internal links from external ones by hostname alone.
BASE_URL = "https://internal/"

DOCTYPE = "<!DOCTYPE html>"

VOID_ELEMENTS = frozenset(
    {
        "area",
        "base",
        "br",
        "col",
        "embed",
        "hr",
        "img",
        "input",
        "keygen",
        "link",
        "meta",
        "param",
        "source",
        "track",
        "wbr",
    }
)

# Children of these elements are serialized without escaping.
RAW_TEXT_ELEMENTS = frozenset({"script", "style", "xmp", "iframe", "noembed", "noframes", "plaintext"})

# Headings that feed the "headings" field of the search index.
INDEXED_HEADINGS = frozenset({"h1", "h2", "h3", "h4"})

# Elements whose text must not be touched by typographic rewrites.
CODE_LIKE_ELEMENTS = frozenset({"code", "pre", "kbd", "samp", "var", "script", "style", "textarea"})

# The parser drops a newline directly after these start tags.
NEWLINE_DROPPING_ELEMENTS = frozenset({"pre", "textarea", "listing"})
