"""Shared test fixtures."""

from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest
from sitestage.config import BuildConfig, Config, MarkdownConfig, ServerConfig, SiteConfig
from sitestage.core.discovery import to_output_relative_path, to_slug, to_url_path
from sitestage.core.page import ContentPage

PageFactory = Callable[..., ContentPage]


def build_page(
    relative_path: str,
    title: str | None = None,
    *,
    meta: dict[str, Any] | None = None,
    taxonomies: dict[str, list[str]] | None = None,
    type: str | None = None,
    draft: bool = False,
    source: str = "",
) -> ContentPage:
    """Create a page the way content discovery would for a source path."""
    slug = to_slug(relative_path)
    page_meta = dict(meta or {})
    resolved_title = title or page_meta.get("title") or slug.rsplit("/", 1)[-1]
    return ContentPage(
        source_path=f"/content/{relative_path}",
        relative_path=relative_path,
        slug=slug,
        url_path=to_url_path(slug),
        output_relative_path=to_output_relative_path(slug),
        title=resolved_title,
        source=source,
        draft=draft,
        meta=page_meta,
        taxonomies=dict(taxonomies or {}),
        type=type,
    )


@pytest.fixture
def make_page() -> PageFactory:
    """Factory for in-memory pages."""
    return build_page


@pytest.fixture
def content_dir(tmp_path: Path) -> Path:
    content = tmp_path / "content"
    content.mkdir(exist_ok=True)
    return content


@pytest.fixture
def test_config(tmp_path: Path, content_dir: Path) -> Config:
    """Create a test configuration with tmp_path directories.

    Creates content_dir and returns a Config instance suitable for testing.
    """
    return Config(
        site=SiteConfig(title="Test Site"),
        build=BuildConfig(
            content_dir=content_dir,
            templates_dir=tmp_path / "templates",
            static_dir=tmp_path / "static",
            output_dir=tmp_path / "public",
        ),
        markdown=MarkdownConfig(),
        server=ServerConfig(),
    )


@pytest.fixture
def write_content(content_dir: Path) -> Callable[[str, str], Path]:
    """Write a content source below content_dir, creating parent directories."""

    def write(relative_path: str, text: str) -> Path:
        path = content_dir / relative_path
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
        return path

    return write
