"""Normalization helpers for slugs, paths and decoded metadata values.

All helpers are pure functions over strings and plain values.
"""

import re
import unicodedata

_DUPLICATE_SLASHES = re.compile(r"/+")
_NON_SLUG_CHARS = re.compile(r"[^a-z0-9]+")


def optional_string(value: object) -> str | None:
    """Return trimmed string, or None for non-string or blank input."""
    if not isinstance(value, str):
        return None
    normalized = value.strip()
    return normalized or None


def optional_scalar_string(value: object) -> str | None:
    """Return trimmed string form of a scalar value, or None."""
    if isinstance(value, bool):
        return "1" if value else None
    if not isinstance(value, str | int | float):
        return None
    normalized = str(value).strip()
    return normalized or None


def string_map(value: object) -> dict[str, str]:
    """Normalize a mapping to a string-keyed string map.

    Non-string keys, blank keys, and non-scalar values are dropped.
    """
    if not isinstance(value, dict):
        return {}

    normalized: dict[str, str] = {}
    for key, item in value.items():
        if not isinstance(key, str) or not key.strip():
            continue
        if isinstance(item, bool):
            normalized[key.strip()] = "1" if item else ""
        elif isinstance(item, str | int | float):
            normalized[key.strip()] = str(item).strip()
    return normalized


def string_list(value: object) -> list[str]:
    """Normalize a list to trimmed, non-blank strings."""
    if not isinstance(value, list | tuple):
        return []
    return [item.strip() for item in value if isinstance(item, str) and item.strip()]


def path_key(path: str) -> str:
    """Normalize a relative path to forward slashes without outer slashes.

    Args:
        path: Raw path (e.g., "\\docs\\guide//intro/")

    Returns:
        Normalized path (e.g., "docs/guide/intro")
    """
    normalized = _DUPLICATE_SLASHES.sub("/", path.replace("\\", "/"))
    return normalized.strip().strip("/")


def join_path(*segments: str) -> str:
    """Join non-blank path segments with a single slash."""
    parts = [path_key(segment) for segment in segments]
    return "/".join(part for part in parts if part)


def normalize_slug(slug: str) -> str:
    """Trim surrounding slashes; a blank slug denotes the site root ("index")."""
    normalized = slug.strip().strip("/")
    return normalized or "index"


def normalize_url_path(url_path: str) -> str:
    """Canonicalize a URL path for comparison.

    Enforces a leading slash, strips the trailing slash except for the root
    and folds "/index" to "/".
    """
    trimmed = url_path.strip()
    if not trimmed:
        return "/"
    normalized = "/" + _DUPLICATE_SLASHES.sub("/", trimmed).strip("/")
    if normalized == "/index":
        return "/"
    return normalized


def normalize_base_path(base_path: str | None) -> str | None:
    """Normalize a site base path to "/segment" form, None for the root."""
    if base_path is None:
        return None
    normalized = path_key(base_path)
    return f"/{normalized}" if normalized else None


def humanize(key: str) -> str:
    """Turn a folder or slug key into a label ("getting-started" -> "Getting Started")."""
    words = key.replace("-", " ").replace("_", " ").split()
    return " ".join(word[:1].upper() + word[1:] for word in words)


def slugify(segment: str) -> str:
    """Convert one path segment into a lower-case ASCII slug."""
    ascii_text = (
        unicodedata.normalize("NFKD", segment).encode("ascii", "ignore").decode("ascii")
    )
    slug = _NON_SLUG_CHARS.sub("-", ascii_text.lower()).strip("-")
    return slug or "page"


def slugify_path(path: str) -> str:
    """Slugify every segment of a slash-separated path; blank -> "index"."""
    segments = [segment for segment in path_key(path).split("/") if segment]
    if not segments:
        return "index"
    return "/".join(slugify(segment) for segment in segments)


def apply_base_path(url_path: str, base_path: str | None) -> str:
    """Prefix a site-absolute URL path with the site base path."""
    normalized_base = normalize_base_path(base_path)
    if normalized_base is None or not url_path.startswith("/") or url_path.startswith("//"):
        return url_path
    return f"{normalized_base}{url_path}"
