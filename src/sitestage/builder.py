"""Static site builder.

Discovers content, renders every page through Markdown and the page
template, and publishes assets next to the generated HTML.
"""

import logging
import shutil
from collections.abc import Callable
from pathlib import Path

from sitestage.config import Config
from sitestage.core.content_assets import AssetResolver
from sitestage.core.context import SiteContext
from sitestage.core.discovery import CONTENT_EXTENSION, ContentDiscovery
from sitestage.core.normalization import apply_base_path, normalize_url_path
from sitestage.core.page import ContentPage
from sitestage.core.renderer import MarkdownRenderer, RenderResult
from sitestage.core.site import SiteIndex
from sitestage.core.sitemap import write_sitemap
from sitestage.core.templates import PageTemplateRenderer

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int, str], None]


class SiteBuilder:
    """Builds a site, or a single requested page, from a configuration."""

    def __init__(self, config: Config, discovery: ContentDiscovery | None = None) -> None:
        self._config = config
        self._discovery = discovery or ContentDiscovery()

    @property
    def config(self) -> Config:
        return self._config

    def load_pages(self) -> list[ContentPage]:
        """Discover pages, dropping drafts unless drafts are included.

        Raises:
            FrontMatterError: If a source has invalid frontmatter
        """
        build = self._config.build
        pages = self._discovery.discover(
            build.content_dir,
            taxonomies=build.taxonomies,
            content_types=self._config.content_types,
        )
        if build.include_drafts:
            return pages
        return [page for page in pages if not page.draft]

    def build(self, *, clean: bool = False, progress: ProgressCallback | None = None) -> list[Path]:
        """Build the whole site into the output directory.

        Args:
            clean: Remove the output directory before building
            progress: Called with (done, total, written_path) before the
                first page and after each written page

        A sitemap.xml is written as well when `site.base_url` is set.

        Returns:
            Paths of written HTML files in build order
        """
        output_dir = self._config.build.output_dir
        if clean and output_dir.exists():
            logger.info("Removing output directory %s", output_dir)
            shutil.rmtree(output_dir)

        pages = self.load_pages()
        site_index = self._site_index(pages)
        markdown_renderer = self._markdown_renderer()
        template_renderer = self._template_renderer()

        total = len(pages)
        if progress is not None:
            progress(0, total, "")

        written: list[Path] = []
        for page in pages:
            html = self.render_page(page, site_index, markdown_renderer, template_renderer)
            destination = output_dir / page.output_relative_path
            destination.parent.mkdir(parents=True, exist_ok=True)
            destination.write_text(html, encoding="utf-8")
            logger.debug("Wrote %s", destination)
            written.append(destination)
            if progress is not None:
                progress(len(written), total, str(destination))

        copied = publish_directory(
            self._config.build.content_dir,
            output_dir,
            include=lambda path: path.suffix.lower() != CONTENT_EXTENSION,
        )
        copied += publish_directory(self._config.build.static_dir, output_dir)
        logger.info("Built %d pages and copied %d assets into %s", total, len(copied), output_dir)

        site = self._config.site
        if site.base_url:
            sitemap = write_sitemap(pages, output_dir, site.base_url, site.base_path)
            logger.info("Wrote sitemap %s", sitemap)

        return written

    def render_request(self, request_path: str) -> str | None:
        """Render the page matching a request path, or return None.

        Content is rediscovered on every call, so edits show up without a
        rebuild.
        """
        pages = self.load_pages()
        page = _match_request(pages, request_path)
        if page is None:
            return None
        return self.render_page(page, self._site_index(pages))

    def find_page(self, request_path: str) -> ContentPage | None:
        """Return the page matching a request path without rendering it."""
        return _match_request(self.load_pages(), request_path)

    def render_page(
        self,
        page: ContentPage,
        site_index: SiteIndex,
        markdown_renderer: MarkdownRenderer | None = None,
        template_renderer: PageTemplateRenderer | None = None,
    ) -> str:
        """Render one page into a full HTML document."""
        template_renderer = template_renderer or self._template_renderer()

        result = self.render_markdown(page, markdown_renderer)
        rendered_page = page.with_toc(result.toc)
        context = SiteContext(site_index, rendered_page)

        return template_renderer.render(
            context,
            result.html,
            url=apply_base_path(page.url_path, self._config.site.base_path),
            site=self._config.site,
        )

    def render_markdown(
        self,
        page: ContentPage,
        markdown_renderer: MarkdownRenderer | None = None,
    ) -> RenderResult:
        """Render only the Markdown body of a page."""
        markdown_renderer = markdown_renderer or self._markdown_renderer()
        return markdown_renderer.render(page.source, page.relative_path)

    def _site_index(self, pages: list[ContentPage]) -> SiteIndex:
        resolver = AssetResolver(self._config.build.content_dir, self._config.site.base_path)
        return SiteIndex(pages, resolver)

    def _markdown_renderer(self) -> MarkdownRenderer:
        markdown = self._config.markdown
        return MarkdownRenderer(
            extensions=markdown.extensions,
            toc_permalink=markdown.toc_permalink,
            rewrite_links=markdown.rewrite_links,
            base_path=self._config.site.base_path,
        )

    def _template_renderer(self) -> PageTemplateRenderer:
        build = self._config.build
        return PageTemplateRenderer(
            build.templates_dir if build.templates_dir.is_dir() else None,
            default_template=build.page_template,
            base_path=self._config.site.base_path,
        )


def _match_request(pages: list[ContentPage], request_path: str) -> ContentPage | None:
    target = normalize_url_path(request_path)
    return next(
        (page for page in pages if normalize_url_path(page.url_path) == target),
        None,
    )


def publish_directory(
    source_dir: Path,
    output_dir: Path,
    include: Callable[[Path], bool] | None = None,
) -> list[Path]:
    """Copy files below `source_dir` into `output_dir`, keeping relative paths.

    Returns:
        Destination paths, empty when `source_dir` does not exist
    """
    if not source_dir.is_dir():
        return []

    copied: list[Path] = []
    for source in sorted(source_dir.rglob("*")):
        if not source.is_file() or (include is not None and not include(source)):
            continue
        destination = output_dir / source.relative_to(source_dir)
        destination.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy2(source, destination)
        copied.append(destination)
    return copied
