"""Immutable page collection with query-style helpers.

Every transformation returns a new collection; the source list is never
mutated. Templates use collections for listings, so data problems (bad
dates, unknown operators, broken patterns) degrade to empty or unsorted
results instead of raising.
"""

import re
from collections.abc import Callable, Iterable, Iterator
from datetime import UTC, datetime
from functools import cmp_to_key
from typing import Any, overload

from sitestage.core.normalization import optional_string
from sitestage.core.page import ContentPage
from sitestage.core.values import (
    compare_values,
    get_path,
    group_key,
    sortable_value,
    strict_equals,
    stringify,
    to_timestamp,
)

PagePredicate = Callable[[ContentPage], bool]

# Operator aliases accepted by where()
OPERATORS = {
    "=": "eq",
    "==": "eq",
    "eq": "eq",
    "!=": "ne",
    "<>": "ne",
    "ne": "ne",
    ">=": "ge",
    "ge": "ge",
    ">": "gt",
    "gt": "gt",
    "<=": "le",
    "le": "le",
    "<": "lt",
    "lt": "lt",
    "in": "in",
    "not in": "not in",
    "intersect": "intersect",
    "like": "like",
}

_PAGE_FIELDS = frozenset(ContentPage.__dataclass_fields__)
_DELIMITED_PATTERN = re.compile(r"^([^\w\s\\])(.*)\1([imsxu]*)$", re.DOTALL)
_PATTERN_FLAGS = {"i": re.IGNORECASE, "m": re.MULTILINE, "s": re.DOTALL, "x": re.VERBOSE}
_NO_VALUE = object()


class PageCollection:
    """Ordered, immutable sequence of content pages."""

    __slots__ = ("_pages",)

    def __init__(self, pages: Iterable[ContentPage] = ()) -> None:
        self._pages: tuple[ContentPage, ...] = tuple(
            page for page in pages if isinstance(page, ContentPage)
        )

    def __iter__(self) -> Iterator[ContentPage]:
        return iter(self._pages)

    def __len__(self) -> int:
        return len(self._pages)

    @overload
    def __getitem__(self, index: int) -> ContentPage: ...

    @overload
    def __getitem__(self, index: slice) -> "PageCollection": ...

    def __getitem__(self, index: int | slice) -> "ContentPage | PageCollection":
        if isinstance(index, slice):
            return PageCollection(self._pages[index])
        return self._pages[index]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PageCollection):
            return NotImplemented
        return self._pages == other._pages

    def __repr__(self) -> str:
        return f"PageCollection({[page.slug for page in self._pages]!r})"

    def all(self) -> list[ContentPage]:
        """Return a list copy of the pages."""
        return list(self._pages)

    def count(self) -> int:
        return len(self._pages)

    def is_empty(self) -> bool:
        return not self._pages

    def first(self) -> ContentPage | None:
        return self._pages[0] if self._pages else None

    def last(self) -> ContentPage | None:
        return self._pages[-1] if self._pages else None

    def take(self, limit: int) -> "PageCollection":
        """Return the first `limit` pages."""
        return PageCollection(self._pages[: max(0, limit)])

    def slice(self, offset: int, length: int | None = None) -> "PageCollection":
        """Return a sub-slice; negative offsets count from the end."""
        start = max(0, len(self._pages) + offset) if offset < 0 else offset
        if length is None:
            return PageCollection(self._pages[start:])
        end = len(self._pages) + length if length < 0 else start + length
        return PageCollection(self._pages[start:end])

    def reverse(self) -> "PageCollection":
        return PageCollection(reversed(self._pages))

    def filter(self, predicate: PagePredicate) -> "PageCollection":
        """Return pages matching a predicate, order preserved."""
        return PageCollection(page for page in self._pages if predicate(page))

    def by(self, key: str, direction: str = "asc") -> "PageCollection":
        """Stable sort by a field key.

        Args:
            key: Field key, supports dot notation ("meta.date", "taxonomies.tags")
            direction: "asc" or "desc"
        """
        descending = direction.lower() == "desc"

        def compare(left: ContentPage, right: ContentPage) -> int:
            comparison = compare_values(
                sortable_value(resolve_value(left, key)),
                sortable_value(resolve_value(right, key)),
            )
            return -comparison if descending else comparison

        return PageCollection(sorted(self._pages, key=cmp_to_key(compare)))

    def by_date(self, direction: str = "asc", date_key: str = "meta.date") -> "PageCollection":
        """Sort by a date field; missing or unparseable dates count as the epoch."""
        descending = direction.lower() == "desc"

        def timestamp(page: ContentPage) -> int:
            return to_timestamp(resolve_value(page, date_key)) or 0

        def compare(left: ContentPage, right: ContentPage) -> int:
            comparison = compare_values(timestamp(left), timestamp(right))
            return -comparison if descending else comparison

        return PageCollection(sorted(self._pages, key=cmp_to_key(compare)))

    def by_title(self, direction: str = "asc") -> "PageCollection":
        return self.by("title", direction)

    @overload
    def where(self, key: str, operator_or_value: Any) -> "PageCollection": ...

    @overload
    def where(self, key: str, operator_or_value: str, value: Any) -> "PageCollection": ...

    def where(self, key: str, operator_or_value: Any, value: Any = _NO_VALUE) -> "PageCollection":
        """Filter pages with where-style operator syntax.

        `where(key, value)` tests equality; `where(key, operator, value)`
        uses one of: eq, ne, gt, ge, lt, le, in, not in, intersect, like
        (plus symbolic aliases such as "==" or ">="). An unknown operator
        matches nothing.
        """
        if value is _NO_VALUE:
            operator, expected = "eq", operator_or_value
        elif isinstance(operator_or_value, str):
            operator = OPERATORS.get(operator_or_value.strip().lower(), "")
            expected = value
        else:
            operator, expected = "", value

        return self.filter(
            lambda page: matches_where(resolve_value(page, key), operator, expected)
        )

    def where_type(self, type_name: str) -> "PageCollection":
        """Filter pages by resolved content type (case-insensitive)."""
        normalized = optional_string(type_name)
        if normalized is None:
            return PageCollection()

        expected = normalized.lower()
        return self.filter(
            lambda page: (page.resolved_type or "").lower() == expected
        )

    def group_by(self, key: str, direction: str | None = None) -> dict[str, "PageCollection"]:
        """Group pages by the string form of a field value.

        Args:
            key: Field key to group by
            direction: None keeps first-seen key order; "asc"/"desc" sort keys

        Raises:
            ValueError: If direction is not None, "asc" or "desc"
        """
        if direction is not None and direction.lower() not in ("asc", "desc"):
            raise ValueError(f'Invalid group direction "{direction}", expected "asc" or "desc"')

        groups: dict[str, list[ContentPage]] = {}
        for page in self._pages:
            groups.setdefault(group_key(resolve_value(page, key)), []).append(page)

        keys = list(groups)
        if direction is not None:
            keys.sort(reverse=direction.lower() == "desc")
        return {name: PageCollection(groups[name]) for name in keys}

    def group_by_date(
        self,
        date_format: str = "%Y-%m",
        direction: str = "desc",
        date_key: str = "meta.date",
    ) -> dict[str, "PageCollection"]:
        """Group pages by a formatted date key.

        Pages without a parseable date land in the "unknown" group, which
        is ordered like any other key.
        """
        groups: dict[str, list[ContentPage]] = {}
        for page in self._pages:
            timestamp = to_timestamp(resolve_value(page, date_key))
            name = _format_timestamp(timestamp, date_format) if timestamp is not None else None
            groups.setdefault("unknown" if name is None else name, []).append(page)

        keys = sorted(groups, reverse=direction.lower() != "asc")
        return {name: PageCollection(groups[name]) for name in keys}


def _format_timestamp(timestamp: int, date_format: str) -> str | None:
    # Out-of-range timestamps (e.g. millisecond epochs) have no calendar date
    try:
        return datetime.fromtimestamp(timestamp, tz=UTC).strftime(date_format)
    except (ValueError, OverflowError, OSError):
        return None


def resolve_value(page: ContentPage, key: str) -> Any:
    """Resolve a field value from a page using dot notation.

    A key without dots is a direct page field; "meta." and "taxonomies."
    prefixes read from those maps (the bare prefix returns the whole map);
    any other dotted key is looked up in the page's structural projection.
    """
    if not key:
        return None

    if "." not in key:
        return getattr(page, key) if key in _PAGE_FIELDS else None

    if key.startswith("meta."):
        meta_path = key[len("meta.") :]
        return page.meta if not meta_path else get_path(page.meta, meta_path)

    if key.startswith("taxonomies."):
        taxonomy_path = key[len("taxonomies.") :]
        return page.taxonomies if not taxonomy_path else get_path(page.taxonomies, taxonomy_path)

    return get_path(page.to_dict(), key)


def matches_where(actual: Any, operator: str, expected: Any) -> bool:
    """Compare actual and expected values using a canonical operator."""
    match operator:
        case "eq":
            return strict_equals(actual, expected)
        case "ne":
            return not strict_equals(actual, expected)
        case "gt":
            return compare_values(actual, expected) > 0
        case "ge":
            return compare_values(actual, expected) >= 0
        case "lt":
            return compare_values(actual, expected) < 0
        case "le":
            return compare_values(actual, expected) <= 0
        case "in":
            return _matches_in(actual, expected)
        case "not in":
            return not _matches_in(actual, expected)
        case "intersect":
            return _matches_intersect(actual, expected)
        case "like":
            return _matches_like(actual, expected)
        case _:
            return False


def _matches_in(actual: Any, expected: Any) -> bool:
    if isinstance(expected, list | tuple | set | frozenset):
        return any(strict_equals(actual, item) for item in expected)
    if isinstance(actual, str) and isinstance(expected, str):
        return actual in expected
    return False


def _matches_intersect(actual: Any, expected: Any) -> bool:
    if not isinstance(actual, list | tuple) or not isinstance(expected, list | tuple):
        return False
    expected_strings = {stringify(item) for item in expected}
    return any(stringify(item) in expected_strings for item in actual)


def _matches_like(actual: Any, expected: Any) -> bool:
    if not isinstance(actual, str) or not isinstance(expected, str):
        return False
    pattern = compile_pattern(expected)
    return pattern is not None and pattern.search(actual) is not None


def compile_pattern(pattern: str) -> re.Pattern[str] | None:
    """Compile a user-supplied pattern.

    Accepts delimited patterns with trailing flags ("/^intro/i") as well
    as bare expressions ("^intro"). A blank pattern only matches the empty
    string; an invalid expression yields None.
    """
    trimmed = pattern.strip()
    if not trimmed:
        return re.compile(r"^$")

    delimited = _DELIMITED_PATTERN.match(trimmed)
    if delimited is not None:
        flags = 0
        for flag in delimited.group(3):
            flags |= _PATTERN_FLAGS.get(flag, 0)
        try:
            return re.compile(delimited.group(2), flags)
        except re.error:
            pass

    try:
        return re.compile(trimmed)
    except re.error:
        return None
