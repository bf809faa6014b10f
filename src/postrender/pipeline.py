"""Build driver glue.

`SitePipeline` is what a site generator talks to. It exposes exactly two
entry points:

- `transform_page()`, called once per rendered page before it is written;
- `on_build_complete()`, called with every finished page once the whole site
  has been written.

All process-wide state (transform timings and the build-once gate of the
search index) lives in a `BuildContext` owned by the pipeline.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from .chain import TransformChain, TransformStep
from .config import SiteConfig
from .document import parse
from .search import SearchIndexError, build_search_index, write_search_index
from .timing import TransformTimers
from .transforms import (
    ActiveLinksOptions,
    AnchorHeadingsOptions,
    ExternalLinksOptions,
    TableOfContentsOptions,
    TypographyOptions,
    active_links,
    anchor_headings,
    code_previews,
    copy_code_buttons,
    external_links,
    highlight_code,
    scrolling_tables,
    table_of_contents,
    typography,
)

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence
    from pathlib import Path

    from .document import Document
    from .search import PageResult, SearchIndex


# Set on <html> of every page the pipeline has written. Marked pages are never
# transformed again.
PROCESSED_ATTR = "data-postrendered"


class PageBuildError(RuntimeError):
    """Raised when a single page cannot be transformed."""

    def __init__(self, page: str, message: str) -> None:
        super().__init__(f"{page}: {message}")
        self.page = page


@dataclass(slots=True)
class BuildContext:
    """State that lives for the whole build process."""

    timers: TransformTimers = field(default_factory=TransformTimers)
    search_index_built: bool = False


def default_steps(config: SiteConfig) -> list[TransformStep]:
    """The standard transform chain, in execution order."""
    return [
        TransformStep("active_links", active_links, page_options=lambda url: ActiveLinksOptions(pathname=url)),
        TransformStep(
            "anchor_headings",
            anchor_headings,
            AnchorHeadingsOptions(within=config.body_selector, levels=config.anchor_levels),
        ),
        TransformStep(
            "table_of_contents",
            table_of_contents,
            TableOfContentsOptions(
                container=config.toc_selector,
                within=config.body_selector,
                levels=config.toc_levels,
            ),
            after=("anchor_headings",),
        ),
        TransformStep("code_previews", code_previews),
        TransformStep("external_links", external_links, ExternalLinksOptions(target=config.link_target)),
        TransformStep("highlight_code", highlight_code),
        TransformStep("scrolling_tables", scrolling_tables),
        TransformStep("copy_code_buttons", copy_code_buttons, after=("code_previews", "highlight_code")),
        TransformStep("typography", typography, TypographyOptions(within=config.content_selector)),
    ]


class SitePipeline:
    __slots__ = ("chain", "config", "context")

    def __init__(
        self,
        config: SiteConfig | None = None,
        *,
        steps: Sequence[TransformStep] | None = None,
        context: BuildContext | None = None,
    ) -> None:
        self.config = config if config is not None else SiteConfig()
        self.context = context if context is not None else BuildContext()
        self.chain = TransformChain(
            steps if steps is not None else default_steps(self.config),
            timers=self.context.timers,
        )

    def transform_page(self, content: str, *, page_url: str, output_path: Path | str | None = None) -> str:
        """Return the final markup for one rendered page.

        Any failure aborts the page; nothing half-transformed is returned.
        Pages this pipeline already wrote are refused.
        """
        page = str(output_path) if output_path is not None else page_url
        try:
            document = parse(content, base_url=self.chain.base_url)
        except Exception as exc:  # noqa: BLE001
            raise PageBuildError(page, f"{type(exc).__name__}: {exc}") from exc
        if _is_marked(document):
            raise PageBuildError(page, "page was already processed")

        try:
            document.document_element.attrs[PROCESSED_ATTR] = ""
            return self.chain.render(document, page_url=page_url)
        except Exception as exc:  # noqa: BLE001
            raise PageBuildError(page, f"{type(exc).__name__}: {exc}") from exc

    def on_build_complete(self, results: Iterable[PageResult]) -> SearchIndex | None:
        """Build the search index from the first complete set of pages.

        Later calls are ignored: in a long-lived watch session they are fired by
        single-file rebuilds and only see a subset of the site. A failed build
        leaves the gate open so the next call retries.
        """
        if self.context.search_index_built:
            return None

        try:
            search_index = build_search_index(list(results), config=self.config)
            write_search_index(search_index, config=self.config)
        except SearchIndexError:
            raise
        except Exception as exc:  # noqa: BLE001
            raise SearchIndexError(str(exc)) from exc

        self.context.search_index_built = True
        self.context.timers.report()
        return search_index


def _is_marked(document: Document) -> bool:
    html = document.document_element
    return html is not None and PROCESSED_ATTR in (html.attrs or {})


def is_processed(content: str) -> bool:
    """True when `content` is a page this pipeline already transformed."""
    return _is_marked(parse(content))
