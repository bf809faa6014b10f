"""Tests for parsing pages and the node helpers."""

import unittest

from postrender.document import (
    MalformedMarkupError,
    add_class,
    closest,
    collapse_whitespace,
    has_class,
    parse,
    parse_fragment,
    text_content,
    wrap,
)

from helpers import make_page


class TestParse(unittest.TestCase):
    def test_parse_builds_document_element(self):
        doc = parse("<p>Hello</p>")
        assert doc.document_element is not None
        assert doc.document_element.name == "html"
        assert doc.body is not None

    def test_parse_rejects_non_string_input(self):
        with self.assertRaises(MalformedMarkupError):
            parse(None)
        with self.assertRaises(MalformedMarkupError):
            parse(b"<p>bytes</p>")

    def test_parse_keeps_the_whole_page(self):
        doc = parse(make_page("<sl-button>Click</sl-button><script>var a = 1;</script><!-- note -->"))
        assert doc.query_one("#content") is not None
        assert doc.query_one("header") is not None
        assert doc.query_one("nav.content__toc") is not None
        assert text_content(doc.query_one("sl-button")) == "Click"
        assert text_content(doc.query_one("script")) == "var a = 1;"
        body = doc.query_one(".content__body")
        assert "#comment" in [child.name for child in body.children]

    def test_parse_fragment_keeps_custom_elements(self):
        nodes = parse_fragment('<sl-copy-button from="code-block"></sl-copy-button>')
        assert [node.name for node in nodes] == ["sl-copy-button"]
        assert nodes[0].attrs["from"] == "code-block"

    def test_title_reads_title_element(self):
        doc = parse("<title> Button </title><p>x</p>")
        assert doc.title == " Button "

    def test_title_is_empty_without_title_element(self):
        assert parse("<p>x</p>").title == ""


class TestLinkResolution(unittest.TestCase):
    def setUp(self):
        self.doc = parse("<p>x</p>")

    def test_relative_links_resolve_against_synthetic_base(self):
        assert self.doc.resolve_url("/components/button") == "https://internal/components/button"
        assert self.doc.resolve_url("alert.html") == "https://internal/alert.html"
        assert self.doc.resolve_url("#usage") == "https://internal/#usage"

    def test_internal_links_are_classified_by_hostname(self):
        assert self.doc.is_internal_url("/getting-started/")
        assert self.doc.is_internal_url("../tokens/")
        assert self.doc.is_internal_url("#anchor")
        assert not self.doc.is_internal_url("https://github.com/shoelace-style/shoelace")
        assert not self.doc.is_internal_url("//cdn.example.com/lib.js")


class TestQueries(unittest.TestCase):
    def test_query_scoped_to_container(self):
        doc = parse('<h2>Outside</h2><div id="content"><h2>Inside</h2><h3>Deeper</h3></div>')
        content = doc.query_one("#content")
        headings = doc.elements("h2", "h3", within=content)
        assert [text_content(h) for h in headings] == ["Inside", "Deeper"]
        assert len(doc.elements("h2")) == 2

    def test_query_one_returns_none_when_nothing_matches(self):
        doc = parse("<p>x</p>")
        assert doc.query_one("#missing") is None

    def test_elements_are_in_document_order(self):
        doc = parse("<h1>a</h1><div><h3>b</h3></div><h2>c</h2>")
        assert [text_content(h) for h in doc.elements("h1", "h2", "h3")] == ["a", "b", "c"]


class TestNodeHelpers(unittest.TestCase):
    def test_text_content_concatenates_text_and_ignores_comments(self):
        doc = parse("<div id='x'>Hello <b>big</b><!-- note --> world</div>")
        assert text_content(doc.query_one("#x")) == "Hello big world"

    def test_text_content_can_skip_subtrees(self):
        doc = parse("<h2 id='x'>Usage<a class='anchor'>#</a></h2>")
        heading = doc.query_one("#x")
        assert text_content(heading, skip=lambda node: has_class(node, "anchor")) == "Usage"

    def test_collapse_whitespace(self):
        assert collapse_whitespace("  a \n\t b   c ") == "a b c"

    def test_add_class_keeps_existing_tokens_once(self):
        doc = parse('<p class="one two">x</p>')
        p = doc.query_one("p")
        add_class(p, "two", "three")
        assert p.attrs["class"] == "one two three"

    def test_closest_walks_ancestors(self):
        doc = parse('<div class="outer"><section><span>x</span></section></div>')
        span = doc.query_one("span")
        outer = closest(span, lambda node: has_class(node, "outer"))
        assert outer is not None
        assert outer.name == "div"
        assert closest(span, lambda node: node.name == "table") is None

    def test_wrap_moves_node_into_wrapper(self):
        doc = parse("<div id='parent'><table></table></div>")
        table = doc.query_one("table")
        wrapper = doc.create_element('<div class="wrapper"></div>')
        wrap(table, wrapper)
        assert table.parent is wrapper
        assert wrapper.parent is doc.query_one("#parent")

    def test_parse_fragment_returns_detached_nodes(self):
        nodes = parse_fragment("<b>x</b> tail")
        assert [node.name for node in nodes] == ["b", "#text"]
        assert all(node.parent is None for node in nodes)

    def test_create_element_requires_exactly_one_element(self):
        doc = parse("<p>x</p>")
        with self.assertRaises(ValueError):
            doc.create_element("<b>a</b><i>b</i>")
