"""Whole-site full-text search index.

The index is built once, after every page has been rendered and written, by
re-reading the finished pages. Each page becomes one lunr document with three
weighted fields. Field names are kept to a single character because they are
repeated throughout the serialized index, which noticeably shrinks the file
the browser downloads.
"""

from __future__ import annotations

import json
import os
import shutil
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from lunr import lunr

from .constants import INDEXED_HEADINGS
from .document import collapse_whitespace, iter_elements, parse, remove, text_content

if TYPE_CHECKING:
    from collections.abc import Iterable
    from pathlib import Path

    from .config import SiteConfig


# title > headings > body. The body field carries lunr's default boost of 1.
TITLE_BOOST = 50
HEADINGS_BOOST = 25

SEARCH_FIELDS = (
    {"field_name": "t", "boost": TITLE_BOOST},
    {"field_name": "h", "boost": HEADINGS_BOOST},
    "c",
)


class SearchIndexError(RuntimeError):
    """Raised when the search index cannot be built or written."""

    def __init__(self, message: str) -> None:
        super().__init__(f"search index: {message}")


@dataclass(frozen=True, slots=True)
class PageResult:
    """A finished page as written by the site generator."""

    output_path: Path | str
    content: str


@dataclass(frozen=True, slots=True)
class IndexEntry:
    id: int
    title: str
    headings: str
    body: str

    def as_document(self) -> dict[str, str]:
        return {"id": str(self.id), "t": self.title, "h": self.headings, "c": self.body}


@dataclass(slots=True)
class SearchIndex:
    """A built lunr index plus the id -> {title, url} lookup map."""

    index: Any
    pages: dict[int, dict[str, str]] = field(default_factory=dict)

    def search(self, query: str) -> list[tuple[int, float]]:
        """Return ``(id, score)`` pairs, best match first."""
        return [(int(hit["ref"]), hit["score"]) for hit in self.index.search(query)]

    def to_json(self) -> dict[str, Any]:
        return {"searchIndex": self.index.serialize(), "map": self.pages}


def is_language_code(node: Any) -> bool:
    """True for ``<code>`` elements whose class attribute is ``language`` or ``language-*``."""
    value = (node.attrs or {}).get("class") or ""
    return value == "language" or value.startswith("language-")


def extract_entry(result: PageResult, entry_id: int, *, content_selector: str = "#content") -> IndexEntry:
    """Pull the weighted fields out of one finished page."""
    document = parse(result.content)
    content = document.query_one(content_selector)
    if content is None:
        content = document.body if document.body is not None else document.root

    title = document.title.strip() or os.path.basename(str(result.output_path))
    headings = collapse_whitespace(" ".join(text_content(h) for h in iter_elements(content, INDEXED_HEADINGS)))

    # Highlighted source listings only add bloat and false hits on code tokens.
    for code in iter_elements(content, ("code",)):
        if is_language_code(code):
            remove(code)
    body = collapse_whitespace(text_content(content))

    return IndexEntry(id=entry_id, title=title, headings=headings, body=body)


def build_search_index(results: Iterable[PageResult], *, config: SiteConfig) -> SearchIndex:
    """Index every page in `results`; ids follow the result order."""
    documents: list[dict[str, str]] = []
    pages: dict[int, dict[str, str]] = {}

    for index, result in enumerate(results):
        try:
            entry = extract_entry(result, index, content_selector=config.content_selector)
        except Exception as exc:  # noqa: BLE001
            raise SearchIndexError(f"unable to index {result.output_path}: {exc}") from exc
        documents.append(entry.as_document())
        pages[index] = {"title": entry.title, "url": config.page_url(result.output_path)}

    return SearchIndex(index=lunr(ref="id", fields=list(SEARCH_FIELDS), documents=documents), pages=pages)


def write_search_index(search_index: SearchIndex, *, config: SiteConfig) -> None:
    """Copy the lunr client runtime and write ``search.json`` into the asset directory."""
    try:
        config.search_client_path.parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(config.search_client, config.search_client_path)
        config.search_index_path.write_text(
            json.dumps(search_index.to_json(), ensure_ascii=False),
            encoding="utf-8",
        )
    except OSError as exc:
        raise SearchIndexError(f"unable to write {config.search_index_path}: {exc}") from exc
