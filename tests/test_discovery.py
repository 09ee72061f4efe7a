"""Tests for content discovery."""

from collections.abc import Callable
from datetime import date
from pathlib import Path

import pytest
from sitestage.core.discovery import (
    ContentDiscovery,
    ContentType,
    normalize_metadata,
    to_output_relative_path,
    to_slug,
    to_url_path,
)
from sitestage.core.frontmatter import FrontMatterError

WriteContent = Callable[[str, str], Path]


class TestRoutes:
    """Tests for slug and route helpers."""

    @pytest.mark.parametrize(
        ("relative_path", "expected"),
        [
            ("index.md", "index"),
            ("about.md", "about"),
            ("docs/index.md", "docs"),
            ("docs/Getting Started.md", "docs/getting-started"),
            ("Docs/Deep/INDEX.md", "docs/deep"),
        ],
    )
    def test__to_slug__maps_source_paths(self, relative_path: str, expected: str) -> None:
        """Derive slugs from source-relative paths."""
        assert to_slug(relative_path) == expected

    def test__routes__root_and_nested(self) -> None:
        """Map slugs to URL paths and output files."""
        assert to_url_path("index") == "/"
        assert to_url_path("docs/intro") == "/docs/intro/"
        assert to_output_relative_path("index") == "index.html"
        assert to_output_relative_path("docs/intro") == "docs/intro/index.html"


class TestNormalizeMetadata:
    """Tests for normalize_metadata()."""

    def test__keys__lower_cased_and_trimmed(self) -> None:
        """Normalize keys and drop blank or non-string keys."""
        result = normalize_metadata({" Title ": "A", "": "x", 3: "y"})

        assert result == {"title": "A"}

    def test__values__keep_scalars_and_lists(self) -> None:
        """Keep scalars, stringify dates, drop nested structures."""
        result = normalize_metadata(
            {
                "date": date(2026, 1, 1),
                "tags": ["a", {"nested": 1}, 2],
                "hero": {"image": "a.png"},
                "weight": 5,
            }
        )

        assert result == {
            "date": "2026-01-01",
            "tags": ["a", 2],
            "hero": None,
            "weight": 5,
        }

    def test__meta_table__kept_as_scalar_map(self) -> None:
        """Keep a nested meta table with scalar values only."""
        result = normalize_metadata({"meta": {"robots": "noindex", "list": [1]}})

        assert result == {"meta": {"robots": "noindex"}}


class TestContentDiscovery:
    """Tests for ContentDiscovery.discover()."""

    def test__missing_directory__returns_empty_list(self, tmp_path: Path) -> None:
        """Return no pages when the content directory does not exist."""
        assert ContentDiscovery().discover(tmp_path / "nonexistent") == []

    def test__markdown_files__become_pages(
        self, content_dir: Path, write_content: WriteContent
    ) -> None:
        """Discover Markdown sources sorted by relative path."""
        write_content("index.md", "---\ntitle: Welcome\n---\nHello")
        write_content("guides/install.md", "# Install")
        write_content("guides/image.png", "not markdown")

        pages = ContentDiscovery().discover(content_dir)

        assert [page.relative_path for page in pages] == ["guides/install.md", "index.md"]
        install, home = pages
        assert install.slug == "guides/install"
        assert install.url_path == "/guides/install/"
        assert install.output_relative_path == "guides/install/index.html"
        assert install.title == "Install"
        assert install.source == "# Install"
        assert home.title == "Welcome"
        assert home.source == "Hello"
        assert home.url_path == "/"

    def test__titles__fall_back_to_file_name(
        self, content_dir: Path, write_content: WriteContent
    ) -> None:
        """Use "Home" for the root index and the humanized name otherwise."""
        write_content("index.md", "")
        write_content("quick-start.md", "")

        pages = ContentDiscovery().discover(content_dir)

        assert [page.title for page in pages] == ["Home", "Quick start"]

    def test__slug_override__is_slugified(
        self, content_dir: Path, write_content: WriteContent
    ) -> None:
        """Honor the slug frontmatter key."""
        write_content("misc/page.md", "---\nslug: Custom Path/Here\n---\n")

        (page,) = ContentDiscovery().discover(content_dir)

        assert page.slug == "custom-path/here"
        assert page.url_path == "/custom-path/here/"

    def test__taxonomies__extracted_from_meta(
        self, content_dir: Path, write_content: WriteContent
    ) -> None:
        """Move configured taxonomy keys out of meta, normalized."""
        write_content(
            "post.md",
            "---\ntags: [PHP, ' cake ', php]\ncategories: News\nauthor: ann\n---\n",
        )

        (page,) = ContentDiscovery().discover(content_dir, taxonomies=["Tags", "categories"])

        assert page.taxonomies == {"tags": ["php", "cake"], "categories": ["news"]}
        assert "tags" not in page.meta
        assert page.meta["author"] == "ann"

    def test__drafts__are_flagged(self, content_dir: Path, write_content: WriteContent) -> None:
        """Read the draft flag from frontmatter."""
        write_content("wip.md", "---\ndraft: true\n---\n")

        (page,) = ContentDiscovery().discover(content_dir)

        assert page.draft

    def test__content_types__match_path_prefix(
        self, content_dir: Path, write_content: WriteContent
    ) -> None:
        """Assign types by path prefix and merge their defaults."""
        write_content("blog/post.md", "---\ntitle: Post\nlayout: wide\n---\n")
        write_content("blogroll.md", "")
        blog = ContentType(
            name="blog",
            paths=("blog",),
            defaults={"template": "post", "layout": "narrow"},
        )

        pages = ContentDiscovery().discover(content_dir, content_types=[blog])

        post = next(page for page in pages if page.slug == "blog/post")
        blogroll = next(page for page in pages if page.slug == "blogroll")
        assert post.type == "blog"
        assert post.meta["template"] == "post"
        assert post.meta["layout"] == "wide"
        assert blogroll.type is None

    def test__explicit_type__selects_content_type(
        self, content_dir: Path, write_content: WriteContent
    ) -> None:
        """Let the type frontmatter key pick a configured type."""
        write_content("notes/a.md", "---\ntype: Blog\n---\n")
        write_content("notes/b.md", "---\ntype: custom\n---\n")
        blog = ContentType(name="blog", paths=("blog",), defaults={"template": "post"})

        page_a, page_b = ContentDiscovery().discover(content_dir, content_types=[blog])

        assert page_a.type == "blog"
        assert page_a.meta["template"] == "post"
        assert page_b.type == "custom"
        assert page_b.resolved_type == "custom"

    def test__invalid_frontmatter__names_the_file(
        self, content_dir: Path, write_content: WriteContent
    ) -> None:
        """Prefix frontmatter errors with the relative path."""
        write_content("broken.md", "---\ntitle: [oops\n---\n")

        with pytest.raises(FrontMatterError, match="broken.md"):
            ContentDiscovery().discover(content_dir)
