"""Post-process an already rendered site directory.

Usage:
    python -m postrender _site
    python -m postrender _site --jobs 4 --search-client node_modules/lunr/lunr.min.js
"""

from __future__ import annotations

import argparse
import sys
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

from .chain import TransformOrderError
from .config import SiteConfig
from .pipeline import PageBuildError, SitePipeline, is_processed
from .search import PageResult, SearchIndexError


def page_url_for(config: SiteConfig, path: Path) -> str:
    """Routing URL of a page, e.g. ``/components/button/`` for ``components/button/index.html``."""
    url = config.page_url(path)
    if url.endswith("/index.html"):
        url = url[: -len("index.html")]
    return url


def find_pages(output_dir: Path, assets_dir: str) -> list[Path]:
    assets = output_dir / assets_dir
    return sorted(path for path in output_dir.rglob("*.html") if assets not in path.parents)


def run(config: SiteConfig, *, jobs: int = 1, build_search: bool = True) -> int:
    pipeline = SitePipeline(config)
    pages = find_pages(config.output_dir, config.assets_dir)
    print(f"Transforming {len(pages)} pages in {config.output_dir}...")

    def transform(path: Path) -> tuple[PageResult, bool]:
        content = path.read_text(encoding="utf-8")
        # Pages written by an earlier run still feed the search index.
        if is_processed(content):
            return PageResult(output_path=path, content=content), False
        content = pipeline.transform_page(content, page_url=page_url_for(config, path), output_path=path)
        path.write_text(content, encoding="utf-8")
        return PageResult(output_path=path, content=content), True

    if jobs > 1:
        with ThreadPoolExecutor(max_workers=jobs) as pool:
            outcomes = list(pool.map(transform, pages))
    else:
        outcomes = [transform(path) for path in pages]

    skipped = sum(1 for _result, transformed in outcomes if not transformed)
    if skipped:
        print(f"Skipped {skipped} already processed pages")

    if build_search:
        pipeline.on_build_complete([result for result, _transformed in outcomes])
        print(f"Wrote {config.search_index_path}")
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="postrender",
        description="Transform rendered documentation pages and build their search index",
    )
    parser.add_argument("output_dir", type=Path, help="Directory holding the rendered site")
    parser.add_argument("--assets-dir", default="assets", help="Asset directory name (default: assets)")
    parser.add_argument(
        "--search-client",
        type=Path,
        default=Path("node_modules/lunr/lunr.min.js"),
        help="lunr.js runtime copied next to the index (default: node_modules/lunr/lunr.min.js)",
    )
    parser.add_argument("--jobs", type=int, default=1, help="Pages to transform concurrently (default: 1)")
    parser.add_argument("--no-search", action="store_true", help="Skip building the search index")
    args = parser.parse_args(argv)

    if not args.output_dir.is_dir():
        print(f"ERROR: Output directory not found: {args.output_dir}", file=sys.stderr)
        return 1

    config = SiteConfig(
        output_dir=args.output_dir,
        assets_dir=args.assets_dir,
        search_client=args.search_client,
    )
    try:
        return run(config, jobs=max(1, args.jobs), build_search=not args.no_search)
    except (PageBuildError, SearchIndexError, TransformOrderError) as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 1
