"""Site configuration consumed by the pipeline."""

from __future__ import annotations

import os
import posixpath
from dataclasses import dataclass
from pathlib import Path
from urllib.parse import urljoin


@dataclass(frozen=True, slots=True)
class SiteConfig:
    """Paths and selectors for one documentation site.

    Selectors scope the DOM queries transforms make. Paths are resolved
    relative to the current working directory.
    """

    output_dir: Path = Path("_site")
    assets_dir: str = "assets"

    # The lunr.js runtime copied next to the index so the browser can query it.
    search_client: Path = Path("node_modules/lunr/lunr.min.js")

    # The production URL, used for absolute links.
    base_url: str = "https://shoelace.style/"

    content_selector: str = "#content"
    body_selector: str = "#content .content__body"
    toc_selector: str = "#content .content__toc > ul"

    anchor_levels: tuple[str, ...] = ("h2", "h3", "h4", "h5")
    toc_levels: tuple[str, ...] = ("h2", "h3")
    link_target: str = "_blank"

    def __post_init__(self) -> None:
        # Accept plain strings from callers, normalize for internal use.
        object.__setattr__(self, "output_dir", Path(self.output_dir))
        object.__setattr__(self, "search_client", Path(self.search_client))
        object.__setattr__(self, "anchor_levels", tuple(self.anchor_levels))
        object.__setattr__(self, "toc_levels", tuple(self.toc_levels))

    @property
    def assets_path(self) -> Path:
        return self.output_dir / self.assets_dir

    @property
    def search_index_path(self) -> Path:
        return self.assets_path / "search.json"

    @property
    def search_client_path(self) -> Path:
        return self.assets_path / "scripts" / "lunr.js"

    def root_url(self, value: str = "", absolute: bool = False) -> str:
        """URL of `value` relative to the site root."""
        value = posixpath.join("/", value)
        return urljoin(self.base_url, value) if absolute else value

    def asset_url(self, value: str = "", absolute: bool = False) -> str:
        """URL of `value` relative to the site's asset directory."""
        value = posixpath.join(f"/{self.assets_dir}", value)
        return urljoin(self.base_url, value) if absolute else value

    def page_url(self, output_path: Path | str) -> str:
        """Site-relative URL of a written page, e.g. ``/components/button/index.html``."""
        relative = Path(os.path.relpath(output_path, self.output_dir))
        return posixpath.join("/", relative.as_posix())
