from .chain import TransformChain, TransformOrderError, TransformStep
from .config import SiteConfig
from .document import Document, MalformedMarkupError, parse
from .formatting import format_html
from .pipeline import BuildContext, PageBuildError, SitePipeline, default_steps
from .search import PageResult, SearchIndex, SearchIndexError, build_search_index
from .serialize import serialize
from .timing import TransformTimers, benchmark

__all__ = [
    "BuildContext",
    "Document",
    "MalformedMarkupError",
    "PageBuildError",
    "PageResult",
    "SearchIndex",
    "SearchIndexError",
    "SiteConfig",
    "SitePipeline",
    "TransformChain",
    "TransformOrderError",
    "TransformStep",
    "TransformTimers",
    "benchmark",
    "build_search_index",
    "default_steps",
    "format_html",
    "parse",
    "serialize",
]
