"""Template-facing facade over the site index for one rendered page."""

from collections.abc import Iterable
from typing import Any

from sitestage.core.collection import PageCollection
from sitestage.core.content_assets import AssetCollection
from sitestage.core.normalization import normalize_url_path
from sitestage.core.page import ContentPage
from sitestage.core.pager import Pager
from sitestage.core.section import Section
from sitestage.core.site import PagePredicate, SiteIndex
from sitestage.core.taxonomy import TaxonomyCollection

_NO_VALUE = object()


class SiteContext:
    """Query surface exposed to templates as `ctx`.

    Wraps a shared SiteIndex together with the page currently being
    rendered, so templates can ask for neighbours, listings and pagers
    relative to that page.
    """

    def __init__(self, site_index: SiteIndex, current_page: ContentPage) -> None:
        self._site_index = site_index
        self._current_page = current_page

    @property
    def page(self) -> ContentPage:
        return self._current_page

    @property
    def index(self) -> SiteIndex:
        return self._site_index

    def regular_pages(self) -> PageCollection:
        return self._site_index.regular_pages()

    def pages(self) -> PageCollection:
        """Alias for `regular_pages()`."""
        return self.regular_pages()

    def type(self, type_name: str) -> PageCollection:
        return self.regular_pages().where_type(type_name)

    def section(self, name: str) -> Section | None:
        return self._site_index.section(name)

    def section_pages(self, name: str) -> PageCollection:
        return self._site_index.section_pages(name)

    def sections(self) -> dict[str, Section]:
        return self._site_index.sections()

    def tree(self) -> Section:
        return self._site_index.tree()

    def root_pages(self) -> PageCollection:
        return self._site_index.root_pages()

    def by_slug(self, slug: str) -> ContentPage | None:
        return self._site_index.find_by_slug(slug)

    def by_url(self, url_path: str) -> ContentPage | None:
        return self._site_index.find_by_url_path(url_path)

    def where(
        self,
        collection: PageCollection | Iterable[ContentPage],
        key: str,
        operator_or_value: Any,
        value: Any = _NO_VALUE,
    ) -> PageCollection:
        pages = _to_collection(collection)
        if value is _NO_VALUE:
            return pages.where(key, operator_or_value)
        return pages.where(key, operator_or_value, value)

    def taxonomy(self, name: str) -> TaxonomyCollection:
        return self._site_index.taxonomy(name)

    def taxonomy_term(self, name: str, term: str) -> PageCollection:
        return self.taxonomy(name).term(term)

    def paginate(
        self,
        collection: PageCollection | Iterable[ContentPage],
        page_size: int = 10,
        current_page: int = 1,
        base_path: str | None = None,
        path_segment: str = "page",
    ) -> Pager:
        """Create a pager; the base path defaults to the current page URL."""
        return Pager(
            _to_collection(collection),
            page_size,
            current_page,
            base_path if base_path is not None else self._current_page.url_path,
            path_segment,
        )

    def previous(self, predicate: PagePredicate | None = None) -> ContentPage | None:
        return self._site_index.previous(self._current_page, predicate)

    def next(self, predicate: PagePredicate | None = None) -> ContentPage | None:
        return self._site_index.next(self._current_page, predicate)

    def previous_in_section(self, predicate: PagePredicate | None = None) -> ContentPage | None:
        return self._site_index.previous_in_section(self._current_page, predicate)

    def next_in_section(self, predicate: PagePredicate | None = None) -> ContentPage | None:
        return self._site_index.next_in_section(self._current_page, predicate)

    def assets(self, subdirectory: str | None = None) -> AssetCollection:
        """Return content assets next to the page being rendered."""
        return self._site_index.page_assets(self._current_page, subdirectory)

    def is_current(self, url_path: str) -> bool:
        """Return whether a URL path points at the page being rendered."""
        return normalize_url_path(self._current_page.url_path) == normalize_url_path(url_path)


def navigable(page: ContentPage) -> bool:
    """Predicate hiding pages that set `navigation: false` in frontmatter."""
    return page.meta.get("navigation", True) is not False


def _to_collection(collection: PageCollection | Iterable[ContentPage]) -> PageCollection:
    if isinstance(collection, PageCollection):
        return collection
    return PageCollection(collection)
