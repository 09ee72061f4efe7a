"""Tests for section tree construction."""

from sitestage.core.section import (
    SectionTreeBuilder,
    build_section_tree,
    extract_weight,
    is_index_path,
    resolve_section_path,
)
from sitestage.core.types import MAX_WEIGHT

from tests.conftest import PageFactory


class TestResolveSectionPath:
    """Tests for resolve_section_path()."""

    def test__nested_file__uses_directory(self, make_page: PageFactory) -> None:
        """Use the page directory as section path."""
        assert resolve_section_path(make_page("guides/advanced/cache.md")) == "guides/advanced"

    def test__top_level_file__maps_to_root(self, make_page: PageFactory) -> None:
        """Place top-level files in the root section."""
        assert resolve_section_path(make_page("about.md")) == ""

    def test__meta_section__overrides_directory(self, make_page: PageFactory) -> None:
        """Prefer a non-blank section frontmatter value."""
        page = make_page("misc/note.md", meta={"section": "/guides/"})

        assert resolve_section_path(page) == "guides"

    def test__blank_meta_section__is_ignored(self, make_page: PageFactory) -> None:
        """Fall back to the directory for blank values."""
        page = make_page("misc/note.md", meta={"section": "  "})

        assert resolve_section_path(page) == "misc"

    def test__mixed_case__is_lowered(self, make_page: PageFactory) -> None:
        """Lower-case folder and frontmatter spellings alike."""
        assert resolve_section_path(make_page("Guides/Deep/a.md")) == "guides/deep"
        assert resolve_section_path(make_page("a.md", meta={"section": "Guides"})) == "guides"


class TestHelpers:
    """Tests for is_index_path() and extract_weight()."""

    def test__is_index_path__matches_case_insensitively(self) -> None:
        """Detect index files by name only."""
        assert is_index_path("docs/INDEX.md")
        assert is_index_path("index.md")
        assert not is_index_path("docs/indexes.md")
        assert not is_index_path("docs/index")

    def test__extract_weight__non_integer__returns_max(self, make_page: PageFactory) -> None:
        """Ignore booleans, strings and floats."""
        assert extract_weight(make_page("a.md", meta={"weight": 7})) == 7
        assert extract_weight(make_page("a.md", meta={"weight": True})) == MAX_WEIGHT
        assert extract_weight(make_page("a.md", meta={"weight": "7"})) == MAX_WEIGHT
        assert extract_weight(make_page("a.md")) == MAX_WEIGHT


class TestBuildSectionTree:
    """Tests for build_section_tree()."""

    def test__deep_page__creates_ancestor_placeholders(self, make_page: PageFactory) -> None:
        """Create empty intermediate sections."""
        tree = build_section_tree([make_page("a/b/c/page.md")])

        flat = tree.flatten()

        assert list(flat) == ["", "a", "a/b", "a/b/c"]
        assert flat["a"].pages.is_empty()
        assert not flat["a"].is_empty()
        assert flat["a/b/c"].pages.count() == 1

    def test__child_paths__extend_parent_path(self, make_page: PageFactory) -> None:
        """Every child path is its parent path plus its own key."""
        tree = build_section_tree(
            [
                make_page("guides/intro.md"),
                make_page("guides/advanced/cache.md"),
                make_page("reference/cli.md"),
            ]
        )

        for section in tree.flatten().values():
            for key, child in section.children.items():
                expected = f"{section.path}/{key}" if section.path else key
                assert child.path == expected
                assert child.depth == section.depth + 1

    def test__index_page__sets_label_and_index(self, make_page: PageFactory) -> None:
        """Use the index page title as section label."""
        index = make_page("guides/index.md", "All Guides")
        tree = build_section_tree([index, make_page("guides/intro.md")])

        guides = tree.child("guides")

        assert guides is not None
        assert guides.index == index
        assert guides.label == "All Guides"

    def test__no_index__humanizes_key(self, make_page: PageFactory) -> None:
        """Fall back to a humanized folder name; root is "Root"."""
        tree = build_section_tree([make_page("getting-started/install.md")])

        assert tree.label == "Root"
        assert tree.children["getting-started"].label == "Getting Started"

    def test__weights__propagate_minimum(self, make_page: PageFactory) -> None:
        """Report the lightest descendant weight without an index page."""
        pages = [
            make_page("guides/a.md", meta={"weight": 45}),
            make_page("guides/b.md", meta={"weight": 100}),
            make_page("guides/deep/c.md", meta={"weight": 20}),
        ]

        tree = build_section_tree(pages)

        assert tree.children["guides"].weight == 20

    def test__index_weight__overrides_and_reorders(self, make_page: PageFactory) -> None:
        """Let an index page weight override the propagated minimum."""
        pages = [
            make_page("guides/a.md", meta={"weight": 20}),
            make_page("guides/b.md", meta={"weight": 45}),
            make_page("guides/c.md", meta={"weight": 100}),
            make_page("reference/cli.md", meta={"weight": 10}),
        ]
        assert list(build_section_tree(pages).children) == ["reference", "guides"]

        pages.append(make_page("guides/index.md", meta={"weight": 5}))
        tree = build_section_tree(pages)

        assert tree.children["guides"].weight == 5
        assert list(tree.children) == ["guides", "reference"]

    def test__equal_weights__order_by_path(self, make_page: PageFactory) -> None:
        """Break weight ties by path."""
        tree = build_section_tree([make_page("zeta/a.md"), make_page("alpha/a.md")])

        assert list(tree.children) == ["alpha", "zeta"]

    def test__root_pages__stay_in_root(self, make_page: PageFactory) -> None:
        """Keep top-level files as direct root pages."""
        tree = build_section_tree([make_page("about.md"), make_page("index.md", "Home")])

        assert tree.children == {}
        assert tree.pages.count() == 2
        assert tree.index is not None
        assert tree.label == "Home"

    def test__all_pages__includes_descendants(self, make_page: PageFactory) -> None:
        """Collect pages of the whole subtree in pre-order."""
        tree = (
            SectionTreeBuilder()
            .add_pages([make_page("a/x.md", "X"), make_page("a/b/y.md", "Y")])
            .build()
        )

        assert [page.title for page in tree.all_pages()] == ["X", "Y"]
