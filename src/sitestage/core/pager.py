"""Pagination over page collections."""

import math
import re

from sitestage.core.collection import PageCollection

_DUPLICATE_SLASHES = re.compile(r"/+")


class Pager:
    """Immutable pager for paginated listings.

    The requested page number is kept as given (clamped to >= 1); every
    accessor derives the effective page number, which never exceeds
    `total_pages()`.
    """

    __slots__ = ("_base_path", "_page_number", "_page_size", "_path_segment", "_source")

    def __init__(
        self,
        source: PageCollection,
        page_size: int,
        page_number: int,
        base_path: str,
        path_segment: str = "page",
    ) -> None:
        """Initialize pager.

        Args:
            source: Full collection being paginated
            page_size: Number of pages per pager (clamped to >= 1)
            page_number: Requested pager number, 1-based (clamped to >= 1)
            base_path: URL of the first pager (e.g., "/blog/")
            path_segment: URL segment before the pager number ("page" -> "/blog/page/2/")
        """
        self._source = source
        self._page_size = max(1, page_size)
        self._page_number = max(1, page_number)
        self._base_path = _normalize_base_path(base_path)
        self._path_segment = path_segment.strip("/")

    def source(self) -> PageCollection:
        return self._source

    def pages(self) -> PageCollection:
        """Return the pages on the current pager."""
        offset = (self.page_number() - 1) * self._page_size
        return self._source.slice(offset, self._page_size)

    def pagers(self) -> list["Pager"]:
        """Return one pager per page number."""
        return [self._with_number(number) for number in range(1, self.total_pages() + 1)]

    def page_number(self) -> int:
        return min(self._page_number, self.total_pages())

    def number_of_elements(self) -> int:
        return self.pages().count()

    def total_number_of_elements(self) -> int:
        return self._source.count()

    def page_size(self) -> int:
        return self._page_size

    def total_pages(self) -> int:
        """Return pager count; an empty source still has one pager."""
        total = self._source.count()
        if total == 0:
            return 1
        return math.ceil(total / self._page_size)

    def url(self) -> str:
        return self._url_for(self.page_number())

    def first(self) -> "Pager":
        return self._with_number(1)

    def last(self) -> "Pager":
        return self._with_number(self.total_pages())

    def prev(self) -> "Pager | None":
        if not self.has_prev():
            return None
        return self._with_number(self.page_number() - 1)

    def next(self) -> "Pager | None":
        if not self.has_next():
            return None
        return self._with_number(self.page_number() + 1)

    def has_prev(self) -> bool:
        return self.page_number() > 1

    def has_next(self) -> bool:
        return self.page_number() < self.total_pages()

    def prev_url(self) -> str | None:
        if not self.has_prev():
            return None
        return self._url_for(self.page_number() - 1)

    def next_url(self) -> str | None:
        if not self.has_next():
            return None
        return self._url_for(self.page_number() + 1)

    def _with_number(self, page_number: int) -> "Pager":
        return Pager(
            self._source,
            self._page_size,
            page_number,
            self._base_path,
            self._path_segment,
        )

    def _url_for(self, page_number: int) -> str:
        page_number = max(1, page_number)
        if page_number == 1:
            return self._base_path

        prefix = self._base_path.rstrip("/")
        if not self._path_segment:
            return f"{prefix}/{page_number}/"
        return f"{prefix}/{self._path_segment}/{page_number}/"

    def __repr__(self) -> str:
        return f"Pager(page={self.page_number()}/{self.total_pages()}, url={self.url()!r})"


def _normalize_base_path(base_path: str) -> str:
    trimmed = base_path.strip()
    if not trimmed:
        return "/"
    return _DUPLICATE_SLASHES.sub("/", f"/{trimmed.strip('/')}/")
