"""Section tree for hierarchical content folders.

A section represents one content directory (or a virtual grouping set
through the `section` frontmatter key) with its label, ordering weight,
optional index page, direct pages and child sections. Trees are built once
from a flat page list and never mutated afterwards.
"""

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from pathlib import PurePosixPath

from sitestage.core.collection import PageCollection
from sitestage.core.content_assets import AssetCollection, AssetResolver
from sitestage.core.normalization import humanize, optional_string, path_key
from sitestage.core.page import ContentPage
from sitestage.core.types import MAX_WEIGHT

ROOT_LABEL = "Root"


class Section:
    """Immutable section node."""

    __slots__ = (
        "_asset_resolver",
        "_children",
        "_index_page",
        "_label",
        "_pages",
        "_path",
        "_weight",
    )

    def __init__(
        self,
        path: str,
        label: str,
        weight: int,
        index_page: ContentPage | None,
        pages: PageCollection,
        children: dict[str, "Section"],
        asset_resolver: AssetResolver | None = None,
    ) -> None:
        """Initialize section.

        Args:
            path: Section path relative to the content root ("" for root)
            label: Human-readable label
            weight: Ordering weight
            index_page: Section index page when present
            pages: Pages that belong directly to this section
            children: Ordered child sections keyed by child key
            asset_resolver: Resolver backing `assets()`; without one the
                section reports no assets
        """
        self._path = path
        self._label = label
        self._weight = weight
        self._index_page = index_page
        self._pages = pages
        self._children = dict(children)
        self._asset_resolver = asset_resolver

    @property
    def path(self) -> str:
        return self._path

    @property
    def key(self) -> str:
        """Last path segment ("" for root)."""
        return self._path.rsplit("/", 1)[-1]

    @property
    def depth(self) -> int:
        """Nesting depth, root is 0."""
        return len(self._path.split("/")) if self._path else 0

    @property
    def label(self) -> str:
        return self._label

    @property
    def weight(self) -> int:
        return self._weight

    @property
    def index(self) -> ContentPage | None:
        return self._index_page

    @property
    def pages(self) -> PageCollection:
        return self._pages

    @property
    def children(self) -> dict[str, "Section"]:
        return dict(self._children)

    def is_root(self) -> bool:
        return self._path == ""

    def child(self, key: str) -> "Section | None":
        return self._children.get(key)

    def has_children(self) -> bool:
        return bool(self._children)

    def is_empty(self) -> bool:
        return self._pages.is_empty() and not self._children

    def all_pages(self) -> PageCollection:
        """Return pages of this section followed by all descendant pages."""
        pages = self._pages.all()
        for child in self._children.values():
            pages.extend(child.all_pages())
        return PageCollection(pages)

    def assets(self, subdirectory: str | None = None) -> AssetCollection:
        """Return files directly inside this section's directory."""
        if self._asset_resolver is None:
            return AssetCollection()
        return self._asset_resolver.for_directory(self._asset_path(subdirectory))

    def all_assets(self, subdirectory: str | None = None) -> AssetCollection:
        """Return files anywhere below this section's directory."""
        if self._asset_resolver is None:
            return AssetCollection()
        return self._asset_resolver.for_directory_recursive(self._asset_path(subdirectory))

    def _asset_path(self, subdirectory: str | None) -> str:
        if subdirectory is None or not subdirectory.strip():
            return self._path
        return f"{self._path}/{subdirectory}" if self._path else subdirectory

    def flatten(self) -> dict[str, "Section"]:
        """Return this section and all descendants keyed by path (pre-order)."""
        flat = {self._path: self}
        for child in self._children.values():
            flat.update(child.flatten())
        return flat

    def __iter__(self) -> Iterator[ContentPage]:
        return iter(self._pages)

    def __len__(self) -> int:
        return self._pages.count()

    def __repr__(self) -> str:
        return f"Section(path={self._path!r}, weight={self._weight}, children={list(self._children)!r})"


@dataclass
class _Node:
    name: str = ""
    index: ContentPage | None = None
    pages: list[ContentPage] = field(default_factory=list)
    children: dict[str, str] = field(default_factory=dict)


class SectionTreeBuilder:
    """Builder for constructing section trees from pages."""

    def __init__(self, asset_resolver: AssetResolver | None = None) -> None:
        self._nodes: dict[str, _Node] = {"": _Node()}
        self._asset_resolver = asset_resolver

    def add_page(self, page: ContentPage) -> str:
        """Place a page into its section.

        Creates placeholder nodes for every ancestor of the section path.

        Returns:
            Section path the page was placed in
        """
        relative_path = path_key(page.relative_path)
        source_path = _section_source_path(page)
        section_path = source_path.lower()

        self._ensure_path_nodes(source_path)
        node = self._nodes[section_path]
        node.pages.append(page)
        if is_index_path(relative_path):
            node.index = page

        return section_path

    def add_pages(self, pages: Iterable[ContentPage]) -> "SectionTreeBuilder":
        for page in pages:
            self.add_page(page)
        return self

    def build(self) -> Section:
        """Build the root section."""
        for path in list(self._nodes):
            if path == "":
                continue
            parent = parent_path(path)
            self._nodes.setdefault(parent, _Node()).children[path_leaf(path)] = path

        return self._build_section("")

    def _build_section(self, path: str) -> Section:
        node = self._nodes.get(path) or _Node()

        children = [self._build_section(child_path) for child_path in node.children.values()]
        children.sort(key=lambda section: (section.weight, section.path))

        return Section(
            path=path,
            label=_resolve_label(node.name, node.index),
            weight=_resolve_weight(node.index, node.pages, children),
            index_page=node.index,
            pages=PageCollection(node.pages),
            children={child.key: child for child in children},
            asset_resolver=self._asset_resolver,
        )

    def _ensure_path_nodes(self, source_path: str) -> None:
        # Nodes are keyed lower-case; the first spelling seen names the label
        current = ""
        for segment in path_segments(source_path):
            current = f"{current}/{segment.lower()}" if current else segment.lower()
            self._nodes.setdefault(current, _Node(name=segment))


def build_section_tree(
    pages: Iterable[ContentPage],
    asset_resolver: AssetResolver | None = None,
) -> Section:
    """Build a section tree from pages in deterministic order."""
    return SectionTreeBuilder(asset_resolver).add_pages(pages).build()


def resolve_section_path(page: ContentPage) -> str:
    """Return the lower-cased section path for a page.

    A non-blank `section` frontmatter value wins; otherwise the directory
    of the page's relative path is used (top-level files map to ""). Folder
    and frontmatter spellings that differ only in case name one section.
    """
    return _section_source_path(page).lower()


def _section_source_path(page: ContentPage) -> str:
    meta_section = optional_string(page.meta.get("section"))
    if meta_section is not None:
        return path_key(meta_section)

    directory = PurePosixPath(path_key(page.relative_path)).parent.as_posix()
    return "" if directory in (".", "/") else path_key(directory)


def is_index_path(relative_path: str) -> bool:
    """Return whether a relative path names an index file (index.<ext>)."""
    name = PurePosixPath(relative_path).name.lower()
    stem, _, extension = name.partition(".")
    return stem == "index" and bool(extension)


def extract_weight(page: ContentPage) -> int:
    """Return the integer `weight` of a page, MAX_WEIGHT when absent."""
    weight = page.meta.get("weight")
    if isinstance(weight, int) and not isinstance(weight, bool):
        return weight
    return MAX_WEIGHT


def parent_path(path: str) -> str:
    return path.rsplit("/", 1)[0] if "/" in path else ""


def path_leaf(path: str) -> str:
    segments = path_segments(path)
    return segments[-1] if segments else ""


def path_segments(path: str) -> list[str]:
    return [segment for segment in path.split("/") if segment]


def _resolve_label(name: str, index_page: ContentPage | None) -> str:
    if index_page is not None:
        return index_page.title
    if name == "":
        return ROOT_LABEL
    return humanize(name)


def _resolve_weight(
    index_page: ContentPage | None,
    pages: list[ContentPage],
    children: list[Section],
) -> int:
    # Index page weight overrides; otherwise the lightest page or child wins
    if index_page is not None:
        return extract_weight(index_page)

    weights = [extract_weight(page) for page in pages]
    weights.extend(child.weight for child in children)
    return min(weights, default=MAX_WEIGHT)
