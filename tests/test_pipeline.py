from __future__ import annotations

import tempfile
import unittest
from contextlib import redirect_stdout
from io import StringIO
from pathlib import Path

from postrender.chain import TransformStep
from postrender.config import SiteConfig
from postrender.document import has_class, parse, text_content
from postrender.pipeline import BuildContext, PageBuildError, SitePipeline, default_steps, is_processed
from postrender.search import PageResult

from helpers import make_page

PAGE = make_page(
    "<h2>Usage</h2>\n"
    "<p>Don't forget the <a href=\"https://github.com/shoelace-style\">repository</a>.</p>\n"
    "<h3>Sizes</h3>\n"
    '<pre><code class="language-js">const size = "small";</code></pre>\n'
    "<table><tr><td>small</td></tr></table>\n",
    title="Button",
    outside='<a href="/components/button/">Button</a>',
)


class TestDefaultSteps(unittest.TestCase):
    def test_names_and_order(self) -> None:
        names = [step.name for step in default_steps(SiteConfig())]
        assert names == [
            "active_links",
            "anchor_headings",
            "table_of_contents",
            "code_previews",
            "external_links",
            "highlight_code",
            "scrolling_tables",
            "copy_code_buttons",
            "typography",
        ]

    def test_pipeline_registers_every_step_with_the_timers(self) -> None:
        pipeline = SitePipeline()
        assert list(pipeline.context.timers.totals()) == [*pipeline.chain.names, "format"]


class TestTransformPage(unittest.TestCase):
    def setUp(self) -> None:
        self.pipeline = SitePipeline()
        self.output = self.pipeline.transform_page(PAGE, page_url="/components/button/")
        self.doc = parse(self.output)

    def test_output_is_a_formatted_document(self) -> None:
        assert self.output.startswith('<!DOCTYPE html>\n<html data-postrendered="">')
        assert self.output.endswith("</html>\n")
        assert "\n\n\n" not in self.output

    def test_active_link(self) -> None:
        header_links = self.doc.query("header a")
        assert [has_class(link, "active-link") for link in header_links] == [False, True]

    def test_anchors_and_table_of_contents(self) -> None:
        assert self.doc.query_one("h2#usage") is not None
        assert self.doc.query_one("h3#sizes") is not None
        items = self.doc.query("#content .content__toc > ul > li")
        assert [item.attrs["data-level"] for item in items] == ["2", "3"]
        assert [text_content(item) for item in items] == ["Usage", "Sizes"]

    def test_external_link(self) -> None:
        link = self.doc.query_one(".content__body p a")
        assert link.attrs["target"] == "_blank"
        assert link.attrs["rel"] == "nofollow noopener noreferrer"

    def test_code_block_is_highlighted_with_copy_button(self) -> None:
        pre = self.doc.query_one("pre")
        assert has_class(pre, "code-block")
        button = self.doc.query_one("pre sl-copy-button")
        assert button.attrs["from"] == self.doc.query_one("pre code").attrs["id"]
        assert text_content(self.doc.query_one("pre code")).strip() == 'const size = "small";'

    def test_table_is_wrapped(self) -> None:
        assert has_class(self.doc.query_one("table").parent, "table-scroll")

    def test_typography_skips_code(self) -> None:
        assert text_content(self.doc.query_one(".content__body p")).startswith("Don’t forget")

    def test_output_is_deterministic(self) -> None:
        again = SitePipeline().transform_page(PAGE, page_url="/components/button/")
        assert again == self.output


class TestPageBuildError(unittest.TestCase):
    def test_carries_output_path(self) -> None:
        pipeline = SitePipeline()
        with self.assertRaises(PageBuildError) as ctx:
            pipeline.transform_page(None, page_url="/broken/", output_path="_site/broken/index.html")
        assert ctx.exception.page == "_site/broken/index.html"
        assert str(ctx.exception).startswith("_site/broken/index.html: MalformedMarkupError")

    def test_falls_back_to_page_url(self) -> None:
        def fail(document, options) -> None:
            raise KeyError("missing")

        pipeline = SitePipeline(steps=[TransformStep("fail", fail)])
        with self.assertRaises(PageBuildError) as ctx:
            pipeline.transform_page("<p>x</p>", page_url="/guides/")
        assert ctx.exception.page == "/guides/"
        assert isinstance(ctx.exception.__cause__, KeyError)

    def test_refuses_page_it_already_wrote(self) -> None:
        pipeline = SitePipeline()
        output = pipeline.transform_page(PAGE, page_url="/components/button/")
        assert is_processed(output)
        assert not is_processed(PAGE)
        with self.assertRaises(PageBuildError) as ctx:
            pipeline.transform_page(output, page_url="/components/button/")
        assert str(ctx.exception) == "/components/button/: page was already processed"


class TestBuildComplete(unittest.TestCase):
    def test_indexes_transformed_output(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            client = root / "lunr.js"
            client.write_text("", encoding="utf-8")
            config = SiteConfig(output_dir=root / "_site", search_client=client)
            context = BuildContext()
            pipeline = SitePipeline(config, context=context)

            output_path = config.output_dir / "components" / "button" / "index.html"
            content = pipeline.transform_page(PAGE, page_url="/components/button/", output_path=output_path)
            with redirect_stdout(StringIO()):
                search_index = pipeline.on_build_complete([PageResult(output_path, content)])

            assert context.search_index_built
            assert search_index.pages == {0: {"title": "Button", "url": "/components/button/index.html"}}
            assert [ref for ref, _score in search_index.search("sizes")] == [0]
            # Highlighted code stays out of the body field.
            assert search_index.search("const") == []


class TestSiteConfig(unittest.TestCase):
    def test_urls(self) -> None:
        config = SiteConfig(output_dir="_site")
        assert config.root_url() == "/"
        assert config.root_url("components/") == "/components/"
        assert config.root_url("components/", absolute=True) == "https://shoelace.style/components/"
        assert config.asset_url("images/logo.svg") == "/assets/images/logo.svg"
        assert config.page_url(Path("_site") / "components" / "button" / "index.html") == "/components/button/index.html"

    def test_artifact_paths(self) -> None:
        config = SiteConfig(output_dir="out", assets_dir="static")
        assert config.search_index_path == Path("out/static/search.json")
        assert config.search_client_path == Path("out/static/scripts/lunr.js")

    def test_is_frozen(self) -> None:
        config = SiteConfig()
        with self.assertRaises(AttributeError):
            config.assets_dir = "other"
