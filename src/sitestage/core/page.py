"""Content page value objects."""

from dataclasses import dataclass, field, replace
from typing import Any

from sitestage.core.normalization import optional_string
from sitestage.core.values import get_path, has_path


@dataclass(frozen=True)
class TocEntry:
    """Table of contents entry collected while rendering a page."""

    level: int
    title: str
    id: str

    def to_dict(self) -> dict[str, str | int]:
        """Convert to dictionary for JSON serialization."""
        return {"level": self.level, "title": self.title, "id": self.id}


@dataclass(frozen=True, eq=True)
class ContentPage:
    """Discovered content page.

    Constructed once by content discovery and never mutated afterwards;
    `with_toc` returns a copy carrying the render-time table of contents.
    """

    source_path: str
    relative_path: str
    slug: str
    url_path: str
    output_relative_path: str
    title: str
    source: str
    draft: bool = False
    meta: dict[str, Any] = field(default_factory=dict, hash=False)
    taxonomies: dict[str, list[str]] = field(default_factory=dict, hash=False)
    type: str | None = None
    toc: tuple[TocEntry, ...] = ()

    @property
    def resolved_type(self) -> str | None:
        """Content type name, preferring the explicit type over `meta.type`."""
        return optional_string(self.type) or optional_string(self.meta.get("type"))

    def meta_value(self, path: str, default: Any = None) -> Any:
        """Read metadata using dotted path access (e.g., "hero.image")."""
        if not path.strip():
            return self.meta
        return get_path(self.meta, path, default)

    def has_meta(self, path: str) -> bool:
        """Check whether metadata exists at a dotted path."""
        if not path.strip():
            return bool(self.meta)
        return has_path(self.meta, path)

    def with_toc(self, toc: list[TocEntry]) -> "ContentPage":
        """Return a copy of this page with table of contents entries attached."""
        return replace(self, toc=tuple(toc))

    def to_dict(self) -> dict[str, Any]:
        """Structural projection used for generic dotted-path lookups."""
        return {
            "source_path": self.source_path,
            "relative_path": self.relative_path,
            "slug": self.slug,
            "url_path": self.url_path,
            "output_relative_path": self.output_relative_path,
            "title": self.title,
            "source": self.source,
            "draft": self.draft,
            "meta": self.meta,
            "taxonomies": self.taxonomies,
            "type": self.type,
            "toc": [entry.to_dict() for entry in self.toc],
        }
