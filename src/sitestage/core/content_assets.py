"""Content assets stored next to Markdown sources.

Templates list images, downloads and other files that live in the content
tree (for example a gallery folder beside a page). Assets are looked up on
the filesystem at query time; Markdown sources are never reported.
"""

import fnmatch
from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass
from pathlib import Path, PurePosixPath

from sitestage.core.discovery import CONTENT_EXTENSION
from sitestage.core.normalization import apply_base_path, path_key
from sitestage.core.page import ContentPage

IMAGE_EXTENSIONS = frozenset({"png", "jpg", "jpeg", "gif", "webp", "svg", "avif"})


@dataclass(frozen=True)
class ContentAsset:
    """A non-Markdown file below the content directory."""

    relative_path: str
    url_path: str
    absolute_path: Path
    filename: str
    extension: str
    size: int

    def is_type(self, *extensions: str) -> bool:
        """Return whether the extension matches any of `extensions` (dots optional)."""
        wanted = {extension.strip().lstrip(".").lower() for extension in extensions}
        wanted.discard("")
        return self.extension in wanted

    def is_image(self) -> bool:
        return self.extension in IMAGE_EXTENSIONS


AssetPredicate = Callable[[ContentAsset], bool]


class AssetCollection:
    """Ordered, immutable sequence of content assets."""

    __slots__ = ("_assets",)

    def __init__(self, assets: Iterable[ContentAsset] = ()) -> None:
        self._assets: tuple[ContentAsset, ...] = tuple(assets)

    def __iter__(self) -> Iterator[ContentAsset]:
        return iter(self._assets)

    def __len__(self) -> int:
        return len(self._assets)

    def __getitem__(self, index: int) -> ContentAsset:
        return self._assets[index]

    def __repr__(self) -> str:
        return f"AssetCollection({[asset.relative_path for asset in self._assets]!r})"

    def all(self) -> list[ContentAsset]:
        return list(self._assets)

    def count(self) -> int:
        return len(self._assets)

    def is_empty(self) -> bool:
        return not self._assets

    def first(self) -> ContentAsset | None:
        return self._assets[0] if self._assets else None

    def last(self) -> ContentAsset | None:
        return self._assets[-1] if self._assets else None

    def filter(self, predicate: AssetPredicate) -> "AssetCollection":
        return AssetCollection(asset for asset in self._assets if predicate(asset))

    def images(self) -> "AssetCollection":
        return self.filter(ContentAsset.is_image)

    def of_type(self, *extensions: str) -> "AssetCollection":
        return self.filter(lambda asset: asset.is_type(*extensions))

    def matching(self, pattern: str) -> "AssetCollection":
        """Return assets whose relative path matches a shell-style pattern.

        A blank pattern matches nothing.
        """
        pattern = pattern.strip()
        if not pattern:
            return AssetCollection()
        return self.filter(lambda asset: fnmatch.fnmatchcase(asset.relative_path, pattern))

    def sort_by_name(self, direction: str = "asc") -> "AssetCollection":
        """Sort by filename case-insensitively, then relative path."""
        return self._sorted(
            lambda asset: (asset.filename.lower(), asset.relative_path), direction
        )

    def sort_by_size(self, direction: str = "asc") -> "AssetCollection":
        """Sort by size in bytes, then relative path."""
        return self._sorted(lambda asset: (asset.size, asset.relative_path), direction)

    def _sorted(self, key: Callable[[ContentAsset], tuple], direction: str) -> "AssetCollection":
        normalized = direction.strip().lower()
        if normalized not in ("asc", "desc"):
            raise ValueError(f"Invalid sort direction: {direction!r}")
        return AssetCollection(sorted(self._assets, key=key, reverse=normalized == "desc"))


class AssetResolver:
    """Looks up content assets relative to the content root.

    Directory arguments are content-relative. Lookups that leave the
    content root, or name a missing directory, return an empty collection.
    """

    def __init__(self, content_dir: Path, base_path: str | None = None) -> None:
        """Initialize resolver.

        Args:
            content_dir: Content root directory
            base_path: Site base path prefixed to asset URLs
        """
        self._content_dir = content_dir
        self._base_path = base_path

    @property
    def content_dir(self) -> Path:
        return self._content_dir

    def for_directory(self, relative_path: str | None = None) -> AssetCollection:
        """Return files directly inside a content directory."""
        directory = self._find_directory(relative_path)
        if directory is None:
            return AssetCollection()
        return self._collect(path for path in directory.iterdir() if path.is_file())

    def for_directory_recursive(self, relative_path: str | None = None) -> AssetCollection:
        """Return files anywhere below a content directory."""
        directory = self._find_directory(relative_path)
        if directory is None:
            return AssetCollection()
        return self._collect(path for path in directory.rglob("*") if path.is_file())

    def for_page(self, page: ContentPage, subdirectory: str | None = None) -> AssetCollection:
        """Return files next to a page source, optionally in a subdirectory.

        Both leaf pages ("about.md") and bundle pages ("about/index.md")
        resolve to the directory that holds the source file.
        """
        directory = PurePosixPath(path_key(page.relative_path)).parent.as_posix()
        if directory == ".":
            directory = ""
        return self.for_directory(f"{directory}/{subdirectory or ''}")

    def _find_directory(self, relative_path: str | None) -> Path | None:
        segments = [
            segment for segment in path_key(relative_path or "").split("/") if segment
        ]
        if any(segment in (".", "..") for segment in segments):
            return None

        current = self._content_dir
        if not current.is_dir():
            return None
        for segment in segments:
            current = _child_directory(current, segment)
            if current is None:
                return None
        return current

    def _collect(self, paths: Iterable[Path]) -> AssetCollection:
        assets = [
            self._build_asset(path)
            for path in paths
            if path.suffix.lower() != CONTENT_EXTENSION
        ]
        assets.sort(key=lambda asset: asset.relative_path)
        return AssetCollection(assets)

    def _build_asset(self, path: Path) -> ContentAsset:
        relative_path = path.relative_to(self._content_dir).as_posix()
        return ContentAsset(
            relative_path=relative_path,
            url_path=apply_base_path(f"/{relative_path}", self._base_path),
            absolute_path=path,
            filename=path.name,
            extension=path.suffix.lstrip(".").lower(),
            size=path.stat().st_size,
        )


def _child_directory(parent: Path, name: str) -> Path | None:
    # Section paths are lower-cased, so fall back to a case-insensitive match
    exact = parent / name
    if exact.is_dir():
        return exact
    lowered = name.lower()
    for candidate in sorted(parent.iterdir()):
        if candidate.is_dir() and candidate.name.lower() == lowered:
            return candidate
    return None
