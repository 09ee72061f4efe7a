"""Site-wide index for page, section and taxonomy lookups.

The index owns a copy of the page list given at construction and derives
everything else from it lazily: the default page ordering, the section
tree, per-section page lists and taxonomy term maps. Each derived structure
is computed once and reused for the lifetime of the instance; build a new
index to reflect changed content.
"""

import threading
from collections.abc import Callable, Iterable

from sitestage.core.collection import PageCollection
from sitestage.core.content_assets import AssetCollection, AssetResolver
from sitestage.core.normalization import (
    humanize,
    normalize_slug,
    normalize_url_path,
    path_key,
)
from sitestage.core.page import ContentPage
from sitestage.core.section import (
    Section,
    build_section_tree,
    extract_weight,
    resolve_section_path,
)
from sitestage.core.taxonomy import TaxonomyCollection, normalize_term
from sitestage.core.values import to_timestamp

PagePredicate = Callable[[ContentPage], bool]


class SiteIndex:
    """Immutable site-wide index over all discovered pages.

    Lookups that miss return None (or an empty collection) rather than
    raising, since "page not found" is a normal outcome while building
    navigation.
    """

    def __init__(
        self,
        pages: Iterable[ContentPage],
        asset_resolver: AssetResolver | None = None,
    ) -> None:
        """Initialize index.

        Args:
            pages: All pages of the site; copied, so the caller may reuse the list
            asset_resolver: Resolver for content assets; sections and pages
                report no assets without one
        """
        self._pages: tuple[ContentPage, ...] = tuple(pages)
        self._asset_resolver = asset_resolver
        self._lock = threading.RLock()
        self._regular_pages: PageCollection | None = None
        self._tree: Section | None = None
        self._sections: dict[str, Section] | None = None
        self._section_pages: dict[str, PageCollection] = {}
        self._taxonomies: dict[str, TaxonomyCollection] = {}

    def all(self) -> list[ContentPage]:
        """Return all indexed pages in input order."""
        return list(self._pages)

    def regular_pages(self) -> PageCollection:
        """Return pages in default order.

        Order: weight ascending (missing weight last), date descending
        (missing or unparseable dates count as the epoch), title ascending
        case-insensitively, then relative path ascending.
        """
        if self._regular_pages is None:
            with self._lock:
                if self._regular_pages is None:
                    self._regular_pages = PageCollection(sorted(self._pages, key=_default_sort_key))
        return self._regular_pages

    def tree(self) -> Section:
        """Return the root of the full section tree."""
        if self._tree is None:
            with self._lock:
                if self._tree is None:
                    self._tree = build_section_tree(self.regular_pages(), self._asset_resolver)
        return self._tree

    def sections(self) -> dict[str, Section]:
        """Return top-level sections ordered by (weight, key).

        Root-level pages are not part of any section; use `root_pages()`.
        """
        if self._sections is None:
            with self._lock:
                if self._sections is None:
                    children = sorted(
                        self.tree().children.items(),
                        key=lambda item: (item[1].weight, item[0]),
                    )
                    self._sections = dict(children)
        return dict(self._sections)

    def section(self, name: str) -> Section | None:
        """Return the section node for a key, or None.

        Keys match case-insensitively; nested paths ("guides/advanced")
        address deeper sections.
        """
        key = path_key(name)
        if not key:
            return None

        flat = self.tree().flatten()
        if key in flat:
            return flat[key]

        lowered = key.lower()
        for path, section in flat.items():
            if path.lower() == lowered:
                return section
        return None

    def section_pages(self, name: str) -> PageCollection:
        """Return pages whose resolved section key equals `name`, in default order."""
        key = path_key(name).lower()
        if key not in self._section_pages:
            with self._lock:
                if key not in self._section_pages:
                    self._section_pages[key] = self.regular_pages().filter(
                        lambda page: resolve_section_key(page) == key
                    )
        return self._section_pages[key]

    def root_pages(self) -> PageCollection:
        """Return pages that do not belong to any section."""
        return self.section_pages("")

    def find_section_index(self, name: str) -> ContentPage | None:
        """Return the index page of a section, or None."""
        section = self.section(name)
        return section.index if section is not None else None

    def section_label(self, name: str) -> str:
        """Return a display label for a section key.

        Uses the resolved section label when the section exists, otherwise
        humanizes the key ("getting-started" -> "Getting Started").
        """
        section = self.section(name)
        if section is not None:
            return section.label
        return humanize(path_key(name))

    def page_assets(self, page: ContentPage, subdirectory: str | None = None) -> AssetCollection:
        """Return content assets stored next to a page source."""
        if self._asset_resolver is None:
            return AssetCollection()
        return self._asset_resolver.for_page(page, subdirectory)

    def find_by_slug(self, slug: str) -> ContentPage | None:
        normalized = normalize_slug(slug)
        for page in self._pages:
            if page.slug == normalized:
                return page
        return None

    def find_by_url_path(self, url_path: str) -> ContentPage | None:
        normalized = normalize_url_path(url_path)
        for page in self._pages:
            if normalize_url_path(page.url_path) == normalized:
                return page
        return None

    def taxonomy(self, name: str) -> TaxonomyCollection:
        """Return the term map for a taxonomy (e.g., "tags")."""
        taxonomy_key = name.strip().lower()
        if taxonomy_key not in self._taxonomies:
            with self._lock:
                if taxonomy_key not in self._taxonomies:
                    self._taxonomies[taxonomy_key] = self._build_taxonomy(taxonomy_key)
        return self._taxonomies[taxonomy_key]

    def previous_in_section(
        self,
        page: ContentPage,
        predicate: PagePredicate | None = None,
    ) -> ContentPage | None:
        """Return the previous page in the page's section."""
        pages = self.section_pages(resolve_section_key(page))
        return _adjacent(pages, page, -1, predicate)

    def next_in_section(
        self,
        page: ContentPage,
        predicate: PagePredicate | None = None,
    ) -> ContentPage | None:
        """Return the next page in the page's section."""
        pages = self.section_pages(resolve_section_key(page))
        return _adjacent(pages, page, 1, predicate)

    def previous(
        self,
        page: ContentPage,
        predicate: PagePredicate | None = None,
    ) -> ContentPage | None:
        """Return the previous page in default order, crossing section boundaries."""
        return _adjacent(self.regular_pages(), page, -1, predicate)

    def next(
        self,
        page: ContentPage,
        predicate: PagePredicate | None = None,
    ) -> ContentPage | None:
        """Return the next page in default order, crossing section boundaries."""
        return _adjacent(self.regular_pages(), page, 1, predicate)

    def _build_taxonomy(self, taxonomy_key: str) -> TaxonomyCollection:
        terms: dict[str, list[ContentPage]] = {}
        for page in self.regular_pages():
            for term in page.taxonomies.get(taxonomy_key, []):
                if not isinstance(term, str) or not term.strip():
                    continue
                bucket = terms.setdefault(normalize_term(term), [])
                if not any(existing is page for existing in bucket):
                    bucket.append(page)

        return TaxonomyCollection({term: PageCollection(pages) for term, pages in terms.items()})


def resolve_section_key(page: ContentPage) -> str:
    """Return the lower-cased top-level section key of a page.

    This is the first segment of the page's section path, so it always
    names a child of the section tree root ("" for top-level files).
    """
    return resolve_section_path(page).split("/", 1)[0]


def _default_sort_key(page: ContentPage) -> tuple[int, int, str, str]:
    timestamp = to_timestamp(page.meta.get("date")) or 0
    return (extract_weight(page), -timestamp, page.title.lower(), page.relative_path)


def _adjacent(
    pages: PageCollection,
    page: ContentPage,
    offset: int,
    predicate: PagePredicate | None,
) -> ContentPage | None:
    """Step from `page` by `offset`, skipping candidates rejected by `predicate`."""
    position = next(
        (index for index, candidate in enumerate(pages) if candidate.slug == page.slug),
        None,
    )
    if position is None:
        return None

    target = position + offset
    while 0 <= target < len(pages):
        candidate = pages[target]
        if predicate is None or predicate(candidate):
            return candidate
        target += offset
    return None
