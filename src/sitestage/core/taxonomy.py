"""Taxonomy term maps."""

from collections.abc import Iterator, Mapping

from sitestage.core.collection import PageCollection


class TaxonomyCollection:
    """Immutable map from taxonomy term to the pages carrying it.

    Terms are stored lower-cased and trimmed and kept in sorted order;
    lookups normalize their input the same way.
    """

    __slots__ = ("_terms",)

    def __init__(self, terms: Mapping[str, PageCollection]) -> None:
        normalized: dict[str, PageCollection] = {}
        for term, pages in terms.items():
            key = normalize_term(term)
            if key in normalized:
                pages = PageCollection([*normalized[key], *pages])
            normalized[key] = pages
        self._terms = dict(sorted(normalized.items()))

    def all(self) -> dict[str, PageCollection]:
        return dict(self._terms)

    def terms(self) -> list[str]:
        """Return sorted term names."""
        return list(self._terms)

    def term(self, term: str) -> PageCollection:
        """Return pages for a term, empty when the term is unknown."""
        return self._terms.get(normalize_term(term), PageCollection())

    def has_term(self, term: str) -> bool:
        return normalize_term(term) in self._terms

    def items(self) -> list[tuple[str, PageCollection]]:
        return list(self._terms.items())

    def count(self) -> int:
        return len(self._terms)

    def __iter__(self) -> Iterator[str]:
        return iter(self._terms)

    def __len__(self) -> int:
        return len(self._terms)

    def __contains__(self, term: object) -> bool:
        return isinstance(term, str) and self.has_term(term)


def normalize_term(term: str) -> str:
    return term.strip().lower()
