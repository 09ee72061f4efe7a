"""Tests for TaxonomyCollection."""

from sitestage.core.collection import PageCollection
from sitestage.core.taxonomy import TaxonomyCollection

from tests.conftest import PageFactory


class TestTaxonomyCollection:
    """Tests for term lookups."""

    def test__terms__normalized_and_sorted(self, make_page: PageFactory) -> None:
        """Store terms lower-cased, trimmed and sorted."""
        taxonomy = TaxonomyCollection(
            {
                " PHP ": PageCollection([make_page("a.md")]),
                "cake": PageCollection([make_page("b.md")]),
            }
        )

        assert taxonomy.terms() == ["cake", "php"]
        assert list(taxonomy) == ["cake", "php"]
        assert len(taxonomy) == 2

    def test__duplicate_terms__are_merged(self, make_page: PageFactory) -> None:
        """Merge pages of terms that normalize to the same key."""
        taxonomy = TaxonomyCollection(
            {
                "PHP": PageCollection([make_page("a.md")]),
                "php": PageCollection([make_page("b.md")]),
            }
        )

        assert taxonomy.count() == 1
        assert [page.slug for page in taxonomy.term("php")] == ["a", "b"]

    def test__term_lookup__is_case_insensitive(self, make_page: PageFactory) -> None:
        """Normalize lookups the same way as keys."""
        taxonomy = TaxonomyCollection({"php": PageCollection([make_page("a.md")])})

        assert taxonomy.has_term(" PHP ")
        assert "Php" in taxonomy
        assert taxonomy.term("PHP").count() == 1

    def test__unknown_term__returns_empty_collection(self) -> None:
        """Return an empty collection on a miss."""
        taxonomy = TaxonomyCollection({})

        assert taxonomy.term("missing").is_empty()
        assert not taxonomy.has_term("missing")
        assert 3 not in taxonomy
        assert taxonomy.all() == {}
