"""Final string pass over serialized pages.

The formatter only normalizes whitespace. Preformatted regions (``pre``,
``textarea``, ``script`` and ``style`` bodies) are passed through untouched,
since whitespace is significant there.
"""

from __future__ import annotations

import re

_PRESERVED_BLOCK_RE = re.compile(
    r"<(pre|textarea|script|style)\b[^>]*>.*?</\1\s*>",
    re.IGNORECASE | re.DOTALL,
)
_TRAILING_SPACE_RE = re.compile(r"[ \t]+$", re.MULTILINE)
_BLANK_LINES_RE = re.compile(r"\n{3,}")


def _normalize_segment(segment: str) -> str:
    segment = _TRAILING_SPACE_RE.sub("", segment)
    return _BLANK_LINES_RE.sub("\n\n", segment)


def format_html(content: str) -> str:
    """Normalize line endings and whitespace, ending with a single newline."""
    content = content.replace("\r\n", "\n").replace("\r", "\n")

    parts: list[str] = []
    cursor = 0
    for match in _PRESERVED_BLOCK_RE.finditer(content):
        parts.append(_normalize_segment(content[cursor : match.start()]))
        parts.append(match.group(0))
        cursor = match.end()
    parts.append(_normalize_segment(content[cursor:]))

    return "".join(parts).strip("\n") + "\n"
