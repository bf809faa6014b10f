"""Parsed page documents.

A `Document` wraps a justhtml tree together with the synthetic base URL that
relative links resolve against. Transforms and the search index builder only
ever talk to pages through this wrapper and the node helpers below.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any
from urllib.parse import urljoin, urlsplit

from justhtml import JustHTML
from justhtml import query as _query

from .constants import BASE_URL

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Iterator


class MalformedMarkupError(ValueError):
    """Raised when markup cannot be turned into a document tree at all."""


def parse(html: str, *, base_url: str = BASE_URL) -> Document:
    """Parse a full HTML page into a `Document`."""
    if not isinstance(html, str):
        raise MalformedMarkupError(f"Expected markup as str, got {type(html).__name__}")
    try:
        parsed = JustHTML(html, safe=False)
    except Exception as exc:  # noqa: BLE001
        raise MalformedMarkupError(f"Unable to parse markup: {exc}") from exc
    if parsed.root is None:
        raise MalformedMarkupError("Parser produced no document")
    return Document(parsed.root, base_url=base_url)


def parse_fragment(markup: str) -> list[Any]:
    """Parse a snippet of markup into detached nodes, ready to be inserted."""
    root = JustHTML(markup, fragment=True, safe=False).root
    nodes = list(root.children or [])
    for node in nodes:
        root.remove_child(node)
    return nodes


# -----------------
# Node helpers
# -----------------


def is_element(node: Any) -> bool:
    name = node.name
    return not name.startswith("#") and name != "!doctype"


def iter_descendants(node: Any) -> Iterator[Any]:
    """Yield every descendant of `node` in document order.

    Template contents are not part of the document tree and are skipped, like
    `querySelectorAll` and `textContent` do in a browser.
    """
    stack = list(reversed(getattr(node, "children", None) or []))
    while stack:
        current = stack.pop()
        yield current
        children = getattr(current, "children", None)
        if children:
            stack.extend(reversed(children))


def iter_elements(node: Any, names: Iterable[str] | None = None) -> list[Any]:
    """Return descendant elements of `node`, optionally filtered by tag name.

    The result is a snapshot so callers may mutate the tree while looping.
    """
    wanted = frozenset(names) if names is not None else None
    return [
        child
        for child in iter_descendants(node)
        if is_element(child) and (wanted is None or child.name in wanted)
    ]


def text_content(node: Any, *, skip: Callable[[Any], bool] | None = None) -> str:
    """Concatenated text of `node`, like the DOM's ``textContent``.

    Elements for which `skip` returns True are left out along with their
    subtrees.
    """
    if node.name == "#text":
        return node.data or ""
    if skip is None:
        return "".join(child.data or "" for child in iter_descendants(node) if child.name == "#text")

    parts: list[str] = []
    stack = list(reversed(getattr(node, "children", None) or []))
    while stack:
        current = stack.pop()
        if current.name == "#text":
            parts.append(current.data or "")
            continue
        if is_element(current) and skip(current):
            continue
        children = getattr(current, "children", None)
        if children:
            stack.extend(reversed(children))
    return "".join(parts)


def collapse_whitespace(text: str) -> str:
    """Collapse runs of whitespace to single spaces and trim the ends."""
    return " ".join(text.split())


def get_classes(node: Any) -> list[str]:
    value = (node.attrs or {}).get("class") or ""
    return value.split()


def has_class(node: Any, class_name: str) -> bool:
    return class_name in get_classes(node)


def add_class(node: Any, *class_names: str) -> None:
    classes = get_classes(node)
    for class_name in class_names:
        if class_name not in classes:
            classes.append(class_name)
    node.attrs["class"] = " ".join(classes)


def closest(node: Any, predicate: Callable[[Any], bool]) -> Any | None:
    """Return the nearest ancestor-or-self matching `predicate`."""
    current = node
    while current is not None:
        if is_element(current) and predicate(current):
            return current
        current = current.parent
    return None


def wrap(node: Any, wrapper: Any) -> Any:
    """Move `node` into `wrapper`, putting the wrapper where the node was."""
    parent = node.parent
    parent.insert_before(wrapper, node)
    parent.remove_child(node)
    wrapper.append_child(node)
    return wrapper


def replace_children(node: Any, children: Iterable[Any]) -> None:
    for child in list(node.children or []):
        node.remove_child(child)
    for child in children:
        node.append_child(child)


def remove(node: Any) -> None:
    if node.parent is not None:
        node.parent.remove_child(node)


class Document:
    """A parsed page rooted at a synthetic base URL."""

    __slots__ = ("base_url", "root")

    def __init__(self, root: Any, *, base_url: str = BASE_URL) -> None:
        self.root = root
        self.base_url = base_url

    @property
    def document_element(self) -> Any | None:
        for child in self.root.children or []:
            if child.name == "html":
                return child
        return None

    @property
    def body(self) -> Any | None:
        return self.query_one("body")

    @property
    def title(self) -> str:
        node = self.query_one("title")
        return text_content(node) if node is not None else ""

    def query(self, selector: str, *, within: Any | None = None) -> list[Any]:
        """Return elements matching a CSS selector, in document order."""
        return list(_query(within if within is not None else self.root, selector))

    def query_one(self, selector: str, *, within: Any | None = None) -> Any | None:
        matches = self.query(selector, within=within)
        return matches[0] if matches else None

    def elements(self, *names: str, within: Any | None = None) -> list[Any]:
        return iter_elements(within if within is not None else self.root, names or None)

    def create_element(self, markup: str) -> Any:
        """Build a single element from markup such as ``'<div class="x"></div>'``."""
        nodes = [node for node in parse_fragment(markup) if is_element(node)]
        if len(nodes) != 1:
            raise ValueError(f"Expected markup for exactly one element, got {markup!r}")
        return nodes[0]

    def resolve_url(self, href: str) -> str:
        return urljoin(self.base_url, href.strip())

    def is_internal_url(self, href: str) -> bool:
        """True when `href` points at a page of this site."""
        return urlsplit(self.resolve_url(href)).hostname == urlsplit(self.base_url).hostname
