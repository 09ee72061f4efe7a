"""Markdown rendering.

Wraps Python-Markdown with the configured extensions, collects the table
of contents and rewrites links between content sources into page URLs.
"""

import posixpath
import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from typing import Any

import markdown
from markdown.extensions import Extension
from markdown.treeprocessors import Treeprocessor

from sitestage.core.discovery import CONTENT_EXTENSION, to_slug, to_url_path
from sitestage.core.normalization import normalize_base_path, path_key
from sitestage.core.page import TocEntry

DEFAULT_EXTENSIONS = ("extra", "sane_lists", "toc")

_EXTERNAL = re.compile(r"^(?:[a-zA-Z][a-zA-Z0-9+.-]*:|//|#)")
_PATH_AND_SUFFIX = re.compile(r"^([^?#]*)(.*)$", re.DOTALL)


@dataclass
class RenderResult:
    """Result of rendering a markdown document."""

    html: str
    title: str | None
    toc: list[TocEntry]


class MarkdownRenderer:
    """Renders page sources to HTML.

    A fresh Markdown instance is created per render, so one renderer can be
    shared across pages.
    """

    def __init__(
        self,
        *,
        extensions: list[str] | None = None,
        toc_permalink: bool = False,
        rewrite_links: bool = True,
        base_path: str | None = None,
    ) -> None:
        """Initialize renderer.

        Args:
            extensions: Python-Markdown extension names (default: extra, sane_lists, toc)
            toc_permalink: Whether headings get permalink anchors
            rewrite_links: Whether links to sources are rewritten into page URLs
            base_path: Site base path prefixed to rewritten URLs (e.g., "/docs")
        """
        self._extensions = list(extensions) if extensions is not None else list(DEFAULT_EXTENSIONS)
        if "toc" not in self._extensions:
            self._extensions.append("toc")
        self._toc_permalink = toc_permalink
        self._rewrite_links = rewrite_links
        self._base_path = normalize_base_path(base_path)

    def render(self, source: str, relative_page_path: str | None = None) -> RenderResult:
        """Render markdown source.

        Args:
            source: Markdown body without frontmatter
            relative_page_path: Source-relative path of the page, used to resolve relative links

        Returns:
            RenderResult with HTML, first-heading title and ToC
        """
        extensions: list[Any] = list(self._extensions)
        if self._rewrite_links:
            extensions.append(
                InternalLinkExtension(
                    page_path=relative_page_path or "",
                    base_path=self._base_path or "",
                )
            )

        md = markdown.Markdown(
            extensions=extensions,
            extension_configs={"toc": {"permalink": self._toc_permalink}},
            output_format="html",
        )
        html = md.convert(source)
        toc = flatten_toc(getattr(md, "toc_tokens", []))
        title = next((entry.title for entry in toc if entry.level == 1), None)

        return RenderResult(html=html, title=title, toc=toc)


def flatten_toc(tokens: list[dict[str, Any]]) -> list[TocEntry]:
    """Flatten nested toc extension tokens into document order."""
    entries: list[TocEntry] = []
    for token in tokens:
        entries.append(
            TocEntry(level=int(token["level"]), title=str(token["name"]), id=str(token["id"]))
        )
        entries.extend(flatten_toc(token.get("children", [])))
    return entries


def rewrite_link(destination: str, page_path: str, base_path: str = "") -> str:
    """Rewrite a link to a content source into the target page URL.

    Args:
        destination: Link destination as written ("../guide/install.md#setup")
        page_path: Source-relative path of the linking page ("docs/intro.md")
        base_path: Site base path ("/docs" or "")

    Returns:
        Rewritten destination, unchanged for external links and non-source targets
    """
    if not destination.strip() or _EXTERNAL.match(destination):
        return destination

    match = _PATH_AND_SUFFIX.match(destination)
    path, suffix = (match.group(1), match.group(2)) if match else (destination, "")
    if not path.lower().endswith(CONTENT_EXTENSION):
        return destination

    target = _resolve_relative(path, page_path)
    return f"{base_path}{to_url_path(to_slug(target))}{suffix}"


def rewrite_resource(source: str, page_path: str, base_path: str = "") -> str:
    """Rewrite a relative resource (image) path to a site-absolute path."""
    if not source.strip() or _EXTERNAL.match(source):
        return source
    return f"{base_path}/{_resolve_relative(source, page_path)}"


def _resolve_relative(path: str, page_path: str) -> str:
    if path.startswith("/"):
        return path_key(path)
    directory = posixpath.dirname(path_key(page_path))
    return path_key(posixpath.normpath(posixpath.join(directory, path)))


class InternalLinkTreeprocessor(Treeprocessor):
    """Rewrites `<a href>` and `<img src>` values after parsing."""

    def __init__(self, md: markdown.Markdown, page_path: str, base_path: str) -> None:
        super().__init__(md)
        self.page_path = page_path
        self.base_path = base_path

    def run(self, root: ET.Element) -> None:
        for element in root.iter("a"):
            href = element.get("href")
            if href:
                element.set("href", rewrite_link(href, self.page_path, self.base_path))
        for element in root.iter("img"):
            src = element.get("src")
            if src:
                element.set("src", rewrite_resource(src, self.page_path, self.base_path))


class InternalLinkExtension(Extension):
    """Python-Markdown extension registering the link rewriter."""

    def __init__(self, **kwargs: Any) -> None:
        self.config = {
            "page_path": ["", "Source-relative path of the rendered page"],
            "base_path": ["", "Site base path prefixed to rewritten URLs"],
        }
        super().__init__(**kwargs)

    def extendMarkdown(self, md: markdown.Markdown) -> None:  # noqa: N802
        md.treeprocessors.register(
            InternalLinkTreeprocessor(md, self.getConfig("page_path"), self.getConfig("base_path")),
            "sitestage_links",
            1,
        )
