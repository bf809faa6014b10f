"""HTML serialization for parsed page documents."""

# ruff: noqa: PERF401

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from .constants import DOCTYPE, NEWLINE_DROPPING_ELEMENTS, RAW_TEXT_ELEMENTS, VOID_ELEMENTS

if TYPE_CHECKING:
    from .document import Document


def _escape_text(text: str | None) -> str:
    if not text:
        return ""
    return str(text).replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;").replace("\xa0", "&nbsp;")


def _escape_attr_value(value: str | None) -> str:
    if value is None:
        return ""
    return str(value).replace("&", "&amp;").replace('"', "&quot;").replace("\xa0", "&nbsp;")


def serialize_start_tag(name: str, attrs: dict[str, str | None] | None) -> str:
    parts: list[str] = ["<", name]
    for key, value in (attrs or {}).items():
        if value is None or value == "":
            parts.extend([" ", key, '=""'])
            continue
        parts.extend([" ", key, '="', _escape_attr_value(value), '"'])
    parts.append(">")
    return "".join(parts)


def serialize_end_tag(name: str) -> str:
    return f"</{name}>"


def _children_of(node: Any) -> list[Any]:
    # HTML templates keep their contents in `template_content`.
    if node.name == "template" and getattr(node, "namespace", None) in {None, "html"}:
        content = getattr(node, "template_content", None)
        if content is not None:
            return content.children or []
    return getattr(node, "children", None) or []


def to_html(node: Any) -> str:
    """Return the outer HTML of `node`."""
    parts: list[str] = []
    _node_to_html(node, parts, raw_text=False)
    return "".join(parts)


def inner_html(node: Any) -> str:
    parts: list[str] = []
    raw_text = node.name in RAW_TEXT_ELEMENTS
    for child in _children_of(node):
        _node_to_html(child, parts, raw_text=raw_text)
    return "".join(parts)


def _starts_with_newline(children: list[Any]) -> bool:
    return bool(children) and children[0].name == "#text" and (children[0].data or "").startswith("\n")


def _node_to_html(node: Any, parts: list[str], *, raw_text: bool) -> None:
    name: str = node.name

    if name == "#text":
        parts.append((node.data or "") if raw_text else _escape_text(node.data))
        return

    if name == "#comment":
        parts.append(f"<!--{node.data or ''}-->")
        return

    if name == "!doctype":
        parts.append(DOCTYPE)
        return

    if name in {"#document", "#document-fragment"}:
        for child in node.children or []:
            _node_to_html(child, parts, raw_text=False)
        return

    parts.append(serialize_start_tag(name, node.attrs))
    if name in VOID_ELEMENTS:
        return

    children = _children_of(node)
    if name in NEWLINE_DROPPING_ELEMENTS and _starts_with_newline(children):
        parts.append("\n")

    children_raw = name in RAW_TEXT_ELEMENTS
    for child in children:
        _node_to_html(child, parts, raw_text=children_raw)
    parts.append(serialize_end_tag(name))


def serialize(document: Document) -> str:
    """Serialize a page, prefixed with the HTML doctype."""
    html = document.document_element
    body = to_html(html) if html is not None else to_html(document.root)
    return f"{DOCTYPE}\n{body}"
