"""XML sitemap for built sites."""

import xml.etree.ElementTree as ET
from collections.abc import Iterable
from datetime import UTC, datetime
from pathlib import Path

from sitestage.core.normalization import apply_base_path
from sitestage.core.page import ContentPage
from sitestage.core.values import to_timestamp

SITEMAP_NAMESPACE = "http://www.sitemaps.org/schemas/sitemap/0.9"
LASTMOD_KEYS = ("lastmod", "updated", "date")

ET.register_namespace("", SITEMAP_NAMESPACE)


def build_sitemap(
    pages: Iterable[ContentPage],
    base_url: str,
    base_path: str | None = None,
) -> ET.ElementTree:
    """Build a sitemap with one <url> per page, ordered by URL path.

    Args:
        pages: Pages written by the build
        base_url: Absolute site URL (e.g., "https://example.com")
        base_path: Site base path prefixed to every page URL
    """
    root = ET.Element(_qualified("urlset"))
    for page in sorted(pages, key=lambda page: page.url_path):
        url = ET.SubElement(root, _qualified("url"))
        location = apply_base_path(page.url_path, base_path)
        ET.SubElement(url, _qualified("loc")).text = f"{base_url.rstrip('/')}{location}"
        lastmod = resolve_lastmod(page)
        if lastmod is not None:
            ET.SubElement(url, _qualified("lastmod")).text = lastmod

    ET.indent(root)
    return ET.ElementTree(root)


def write_sitemap(
    pages: Iterable[ContentPage],
    output_dir: Path,
    base_url: str,
    base_path: str | None = None,
) -> Path:
    """Write sitemap.xml into the output directory and return its path."""
    destination = output_dir / "sitemap.xml"
    destination.parent.mkdir(parents=True, exist_ok=True)
    build_sitemap(pages, base_url, base_path).write(
        destination, encoding="utf-8", xml_declaration=True
    )
    return destination


def resolve_lastmod(page: ContentPage) -> str | None:
    """Return the W3C date a page last changed.

    Frontmatter dates win; otherwise the source file modification time is
    used. Returns None when neither is available.
    """
    for key in LASTMOD_KEYS:
        timestamp = to_timestamp(page.meta.get(key))
        if timestamp is not None:
            formatted = _format_date(timestamp)
            if formatted is not None:
                return formatted

    source = Path(page.source_path)
    if source.is_file():
        return _format_date(int(source.stat().st_mtime))
    return None


def _qualified(name: str) -> str:
    return f"{{{SITEMAP_NAMESPACE}}}{name}"


def _format_date(timestamp: int) -> str | None:
    try:
        return datetime.fromtimestamp(timestamp, tz=UTC).strftime("%Y-%m-%d")
    except (ValueError, OverflowError, OSError):
        return None
