"""Default page transforms.

Every transform has the shape ``transform(document, options) -> None`` and
mutates the parsed page in place. Options are small frozen dataclasses, or
``None`` for transforms that take none.

Order matters for some of them:

- `table_of_contents` links to the ids `anchor_headings` assigns.
- `copy_code_buttons` only attaches to blocks `highlight_code` marked as
  ``code-block`` and places buttons in the toolbars `code_previews` builds.
"""

from __future__ import annotations

import re
import unicodedata
from dataclasses import dataclass
from html import escape
from typing import TYPE_CHECKING, Any
from urllib.parse import urlsplit

from pygments import highlight
from pygments.formatters import HtmlFormatter
from pygments.lexers import get_lexer_by_name
from pygments.util import ClassNotFound

from .constants import CODE_LIKE_ELEMENTS
from .document import (
    add_class,
    closest,
    get_classes,
    has_class,
    is_element,
    iter_elements,
    parse_fragment,
    replace_children,
    text_content,
    wrap,
)

if TYPE_CHECKING:
    from .document import Document


# -----------------
# Options
# -----------------


@dataclass(frozen=True, slots=True)
class ActiveLinksOptions:
    pathname: str
    class_name: str = "active-link"


@dataclass(frozen=True, slots=True)
class AnchorHeadingsOptions:
    within: str
    levels: tuple[str, ...] = ("h2", "h3", "h4", "h5")
    class_name: str = "anchor-heading"


@dataclass(frozen=True, slots=True)
class TableOfContentsOptions:
    container: str
    within: str
    levels: tuple[str, ...] = ("h2", "h3")
    # Children carrying this class (heading permalinks) are left out of entries.
    anchor_class: str = "anchor-heading"


@dataclass(frozen=True, slots=True)
class ExternalLinksOptions:
    target: str = "_blank"
    rel: str = "nofollow noopener noreferrer"


@dataclass(frozen=True, slots=True)
class TypographyOptions:
    within: str = "#content"


# -----------------
# Helpers
# -----------------


def _normalize_path(path: str) -> str:
    path = path or "/"
    if path.endswith("/index.html"):
        path = path[: -len("index.html")]
    if len(path) > 1:
        path = path.rstrip("/")
    return path


def slugify(text: str) -> str:
    text = unicodedata.normalize("NFKD", text).encode("ascii", "ignore").decode("ascii")
    text = re.sub(r"[^\w\s-]", "", text.lower()).strip()
    return re.sub(r"[\s_-]+", "-", text).strip("-")


def _unique_id(base: str, used: set[str]) -> str:
    candidate = base
    suffix = 2
    while candidate in used:
        candidate = f"{base}-{suffix}"
        suffix += 1
    used.add(candidate)
    return candidate


def _used_ids(document: Document) -> set[str]:
    return {el.attrs["id"] for el in document.elements() if (el.attrs or {}).get("id")}


def _first_child_element(node: Any, name: str) -> Any | None:
    for child in node.children or []:
        if child.name == name:
            return child
    return None


def _find_descendant(node: Any, class_name: str) -> Any | None:
    for child in iter_elements(node):
        if has_class(child, class_name):
            return child
    return None


def _language_of(code: Any) -> str | None:
    for class_name in get_classes(code):
        if class_name.startswith("language-"):
            return class_name[len("language-") :] or None
    return None


# -----------------
# Transforms
# -----------------


def active_links(document: Document, options: ActiveLinksOptions) -> None:
    """Mark links that point at the current page."""
    current = _normalize_path(options.pathname)
    for link in document.elements("a"):
        href = (link.attrs or {}).get("href")
        if href is None or not document.is_internal_url(href):
            continue
        if _normalize_path(urlsplit(document.resolve_url(href)).path) == current:
            add_class(link, options.class_name)


def anchor_headings(document: Document, options: AnchorHeadingsOptions) -> None:
    """Give headings stable ids and append a permalink to each."""
    container = document.query_one(options.within)
    if container is None:
        return

    used = _used_ids(document)
    for heading in document.elements(*options.levels, within=container):
        if "data-no-anchor" in (heading.attrs or {}):
            continue
        heading_id = heading.attrs.get("id")
        if not heading_id:
            heading_id = _unique_id(slugify(text_content(heading)) or "section", used)
            heading.attrs["id"] = heading_id

        anchor = document.create_element(
            f'<a class="{escape(options.class_name)}" href="#{escape(heading_id)}" aria-hidden="true">#</a>'
        )
        heading.append_child(anchor)


def table_of_contents(document: Document, options: TableOfContentsOptions) -> None:
    """Fill the table of contents list with links to the page's headings."""
    container = document.query_one(options.container)
    within = document.query_one(options.within)
    if container is None or within is None:
        return

    def is_anchor(node: Any) -> bool:
        return has_class(node, options.anchor_class)

    for heading in document.elements(*options.levels, within=within):
        heading_id = (heading.attrs or {}).get("id")
        if not heading_id:
            continue
        label = " ".join(text_content(heading, skip=is_anchor).split())
        item = document.create_element(
            f'<li data-level="{heading.name[1:]}"><a href="#{escape(heading_id)}">{escape(label)}</a></li>'
        )
        container.append_child(item)


def code_previews(document: Document, options: None = None) -> None:
    """Turn ``pre > code.preview`` blocks into live example widgets."""
    for code in document.elements("code"):
        pre = code.parent
        if pre is None or pre.name != "pre" or not has_class(code, "preview"):
            continue

        source = text_content(code)
        widget = document.create_element(
            '<div class="code-preview">'
            '<div class="code-preview__preview"></div>'
            '<div class="code-preview__source"></div>'
            '<div class="code-preview__buttons">'
            '<button type="button" class="code-preview__toggle">Source</button>'
            "</div>"
            "</div>"
        )
        preview, source_container, _buttons = [child for child in widget.children if is_element(child)]
        replace_children(preview, parse_fragment(source))

        parent = pre.parent
        parent.insert_before(widget, pre)
        parent.remove_child(pre)
        source_container.append_child(pre)


def external_links(document: Document, options: ExternalLinksOptions) -> None:
    """Open off-site links in a new target without leaking the referrer."""
    for link in document.elements("a"):
        href = (link.attrs or {}).get("href")
        if not href:
            continue
        if urlsplit(document.resolve_url(href)).scheme not in {"http", "https"}:
            continue
        if document.is_internal_url(href):
            continue
        link.attrs["target"] = options.target
        link.attrs["rel"] = options.rel


_HTML_FORMATTER = HtmlFormatter(nowrap=True)


def highlight_code(document: Document, options: None = None) -> None:
    """Syntax highlight ``pre > code`` blocks and mark them as code blocks.

    Blocks in a language Pygments does not know keep their text but are still
    marked, so they get the same chrome as highlighted ones.
    """
    for code in document.elements("code"):
        pre = code.parent
        if pre is None or pre.name != "pre":
            continue
        add_class(pre, "code-block")

        language = _language_of(code)
        if language is None:
            continue
        try:
            lexer = get_lexer_by_name(language, stripnl=False, ensurenl=False)
        except ClassNotFound:
            continue

        highlighted = highlight(text_content(code), lexer, _HTML_FORMATTER)
        replace_children(code, parse_fragment(highlighted))


def scrolling_tables(document: Document, options: None = None) -> None:
    """Wrap tables so wide ones scroll instead of overflowing the layout."""
    for table in document.elements("table"):
        parent = table.parent
        if parent is not None and has_class(parent, "table-scroll"):
            continue
        wrap(table, document.create_element('<div class="table-scroll"></div>'))


def copy_code_buttons(document: Document, options: None = None) -> None:
    """Attach a copy button to every highlighted code block."""
    used = _used_ids(document)
    for pre in document.elements("pre"):
        if not has_class(pre, "code-block"):
            continue
        code = _first_child_element(pre, "code")
        if code is None:
            continue

        code_id = code.attrs.get("id")
        if not code_id:
            code_id = _unique_id("code-block", used)
            code.attrs["id"] = code_id

        button = document.create_element(
            f'<sl-copy-button class="copy-code-button" from="{escape(code_id)}"></sl-copy-button>'
        )
        preview = closest(pre, lambda node: has_class(node, "code-preview"))
        toolbar = _find_descendant(preview, "code-preview__buttons") if preview is not None else None
        (toolbar if toolbar is not None else pre).append_child(button)


_TYPOGRAPHY_RULES = (
    (re.compile(r"\.\.\."), "\u2026"),
    (re.compile(r"(?<=\s)--(?=\s)"), "\u2014"),
    (re.compile(r"(?<=\w)'(?=\w)"), "\u2019"),
    (re.compile(r"(^|[\s(\[{\u2014])'"), "\\1\u2018"),
    (re.compile(r"'"), "\u2019"),
    (re.compile(r'(^|[\s(\[{\u2014])"'), "\\1\u201c"),
    (re.compile(r'"'), "\u201d"),
)


def smarten(text: str, previous: str = "") -> str:
    """Rewrite quotes, dashes and ellipses in `text`.

    `previous` is the text that comes right before `text` in the document, so
    a quote at the start of a text node is read in context.
    """
    # Dots and hyphens take part in the multi-character rules; a word
    # character reads the same for quotes without ever matching those.
    context = previous[-1:]
    if context in {".", "-"}:
        context = "x"
    text = context + text
    for pattern, replacement in _TYPOGRAPHY_RULES:
        text = pattern.sub(replacement, text)
    return text[len(context) :]


def typography(document: Document, options: TypographyOptions) -> None:
    """Apply smart quotes, dashes and ellipses to prose within a container."""
    container = document.query_one(options.within)
    if container is None:
        return

    previous = ""
    stack = list(reversed(container.children or []))
    while stack:
        node = stack.pop()
        if node.name == "#text":
            if node.data:
                original = node.data
                node.data = smarten(original, previous)
                previous = original
            continue
        if not is_element(node):
            continue
        if node.name in CODE_LIKE_ELEMENTS:
            previous = text_content(node) or previous
            continue
        children = getattr(node, "children", None)
        if children:
            stack.extend(reversed(children))
