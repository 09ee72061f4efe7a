"""Content discovery.

Walks the content directory for Markdown sources and maps each file to a
ContentPage with normalized metadata, taxonomies and routes.
"""

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import date, datetime
from pathlib import Path
from typing import Any

from sitestage.core.frontmatter import FrontMatterError, parse_frontmatter
from sitestage.core.normalization import (
    humanize,
    optional_string,
    path_key,
    slugify,
    slugify_path,
)
from sitestage.core.page import ContentPage

logger = logging.getLogger(__name__)

CONTENT_EXTENSION = ".md"


@dataclass(frozen=True)
class ContentType:
    """Content type rule assigning a type name by source path prefix."""

    name: str
    paths: tuple[str, ...] = ()
    defaults: dict[str, Any] = field(default_factory=dict)

    def matches(self, relative_path: str) -> bool:
        normalized = path_key(relative_path)
        return any(
            normalized == prefix or normalized.startswith(f"{prefix}/")
            for prefix in self.paths
        )


class ContentDiscovery:
    """Discovers content files and maps them to routes."""

    def discover(
        self,
        content_dir: Path,
        taxonomies: Iterable[str] = ("tags",),
        content_types: Iterable[ContentType] = (),
    ) -> list[ContentPage]:
        """Discover all content pages below a directory.

        Args:
            content_dir: Content root directory
            taxonomies: Frontmatter keys extracted as taxonomies
            content_types: Type rules applied to pages without an explicit type

        Returns:
            Pages sorted by relative path, empty when the directory is missing

        Raises:
            FrontMatterError: If a source has invalid frontmatter
        """
        if not content_dir.is_dir():
            logger.debug("Content directory %s does not exist", content_dir)
            return []

        taxonomy_keys = _normalize_taxonomy_keys(taxonomies)
        types = list(content_types)

        pages = [
            self._load_page(source_path, content_dir, taxonomy_keys, types)
            for source_path in content_dir.rglob(f"*{CONTENT_EXTENSION}")
            if source_path.is_file()
        ]
        pages.sort(key=lambda page: page.relative_path)

        logger.debug("Discovered %d pages in %s", len(pages), content_dir)
        return pages

    def _load_page(
        self,
        source_path: Path,
        content_dir: Path,
        taxonomy_keys: list[str],
        content_types: list[ContentType],
    ) -> ContentPage:
        relative_path = source_path.relative_to(content_dir).as_posix()
        try:
            parsed = parse_frontmatter(source_path.read_text(encoding="utf-8"))
        except FrontMatterError as e:
            raise FrontMatterError(f"{relative_path}: {e}") from e

        meta = normalize_metadata(parsed.metadata)
        meta, taxonomy_terms = _extract_taxonomies(meta, taxonomy_keys)
        content_type = _resolve_type(relative_path, meta, content_types)
        if content_type is not None:
            meta = {**content_type.defaults, **meta}

        slug = _resolve_slug(relative_path, meta)
        return ContentPage(
            source_path=str(source_path),
            relative_path=relative_path,
            slug=slug,
            url_path=to_url_path(slug),
            output_relative_path=to_output_relative_path(slug),
            title=_resolve_title(slug, meta),
            source=parsed.body,
            draft=bool(meta.get("draft", False)),
            meta=meta,
            taxonomies=taxonomy_terms,
            type=content_type.name if content_type is not None else optional_string(meta.get("type")),
        )


def normalize_metadata(metadata: Mapping[Any, Any]) -> dict[str, Any]:
    """Normalize frontmatter keys and values.

    Keys are lower-cased and trimmed. Scalars are kept, dates become ISO
    strings, lists keep their scalar items, and a nested `meta` table is
    kept as a string-keyed scalar map. Anything else is dropped to None.
    """
    normalized: dict[str, Any] = {}
    for key, value in metadata.items():
        if not isinstance(key, str) or not key.strip():
            continue
        normalized_key = key.strip().lower()
        if normalized_key == "meta" and isinstance(value, dict):
            normalized[normalized_key] = _normalize_meta_map(value)
        else:
            normalized[normalized_key] = _normalize_value(value)
    return normalized


def _normalize_value(value: object) -> Any:
    if isinstance(value, datetime | date):
        return value.isoformat()
    if value is None or isinstance(value, str | int | float | bool):
        return value
    if isinstance(value, list | tuple):
        return [_normalize_value(item) for item in value if _is_scalar(item)]
    return None


def _normalize_meta_map(value: dict[Any, Any]) -> dict[str, Any]:
    return {
        key.strip(): _normalize_value(item)
        for key, item in value.items()
        if isinstance(key, str) and key.strip() and _is_scalar(item)
    }


def _is_scalar(value: object) -> bool:
    return value is None or isinstance(value, str | int | float | bool | date)


def _normalize_taxonomy_keys(taxonomies: Iterable[str]) -> list[str]:
    keys: list[str] = []
    for taxonomy in taxonomies:
        key = taxonomy.strip().lower()
        if key and key not in keys:
            keys.append(key)
    return keys


def _extract_taxonomies(
    meta: dict[str, Any],
    taxonomy_keys: list[str],
) -> tuple[dict[str, Any], dict[str, list[str]]]:
    remaining = dict(meta)
    taxonomies = {key: _normalize_terms(remaining.pop(key, None)) for key in taxonomy_keys}
    return remaining, taxonomies


def _normalize_terms(raw: object) -> list[str]:
    values = [raw] if isinstance(raw, str) else raw if isinstance(raw, list) else []
    terms: list[str] = []
    for value in values:
        if not isinstance(value, str) or not value.strip():
            continue
        term = value.strip().lower()
        if term not in terms:
            terms.append(term)
    return terms


def _resolve_type(
    relative_path: str,
    meta: dict[str, Any],
    content_types: list[ContentType],
) -> ContentType | None:
    explicit = optional_string(meta.get("type"))
    if explicit is not None:
        for content_type in content_types:
            if content_type.name == explicit.lower():
                return content_type
        return None

    for content_type in content_types:
        if content_type.matches(relative_path):
            return content_type
    return None


def _resolve_slug(relative_path: str, meta: dict[str, Any]) -> str:
    override = optional_string(meta.get("slug"))
    if override is not None:
        return slugify_path(override)
    return to_slug(relative_path)


def to_slug(relative_path: str) -> str:
    """Convert a source-relative path to a slug ("docs/Getting Started.md" -> "docs/getting-started").

    A trailing `index` segment is dropped for nested files; the top-level
    index file keeps the slug "index".
    """
    without_extension = path_key(relative_path)
    if without_extension.lower().endswith(CONTENT_EXTENSION):
        without_extension = without_extension[: -len(CONTENT_EXTENSION)]

    segments = [segment for segment in without_extension.split("/") if segment]
    if len(segments) > 1 and segments[-1].lower() == "index":
        segments.pop()
    if not segments:
        return "index"
    return "/".join(slugify(segment) for segment in segments)


def to_url_path(slug: str) -> str:
    if slug == "index":
        return "/"
    return f"/{slug.strip('/')}/"


def to_output_relative_path(slug: str) -> str:
    if slug == "index":
        return "index.html"
    return f"{slug.strip('/')}/index.html"


def _resolve_title(slug: str, meta: dict[str, Any]) -> str:
    title = optional_string(meta.get("title"))
    if title is not None:
        return title
    if slug == "index":
        return "Home"
    return humanize(slug.rsplit("/", 1)[-1]).capitalize()
