"""Configuration management for sitestage.

Supports TOML configuration format with auto-discovery.
"""

import tomllib
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any

from sitestage.core.discovery import ContentType
from sitestage.core.normalization import normalize_base_path, path_key
from sitestage.core.renderer import DEFAULT_EXTENSIONS

CONFIG_FILENAME = "sitestage.toml"


@dataclass
class ServerConfig:
    """Preview server configuration."""

    host: str = "127.0.0.1"
    port: int = 8080


@dataclass
class SiteConfig:
    """Site metadata exposed to templates."""

    title: str = ""
    description: str | None = None
    base_url: str | None = None
    base_path: str | None = None
    params: dict[str, Any] = field(default_factory=dict)


@dataclass
class BuildConfig:
    """Build configuration."""

    content_dir: Path = field(default_factory=lambda: Path("content"))
    templates_dir: Path = field(default_factory=lambda: Path("templates"))
    static_dir: Path = field(default_factory=lambda: Path("static"))
    output_dir: Path = field(default_factory=lambda: Path("public"))
    page_template: str = "page"
    taxonomies: list[str] = field(default_factory=lambda: ["tags"])
    include_drafts: bool = False


@dataclass
class MarkdownConfig:
    """Markdown rendering configuration."""

    extensions: list[str] = field(default_factory=lambda: list(DEFAULT_EXTENSIONS))
    toc_permalink: bool = False
    rewrite_links: bool = True


@dataclass
class Config:
    """Application configuration."""

    site: SiteConfig
    build: BuildConfig
    markdown: MarkdownConfig
    server: ServerConfig
    content_types: list[ContentType] = field(default_factory=list)
    config_path: Path | None = None

    @classmethod
    def load(cls, config_path: Path | None = None) -> "Config":
        """Load configuration from file.

        If config_path is provided, loads from that file.
        Otherwise, searches for sitestage.toml in current directory and parents.

        Args:
            config_path: Optional explicit path to config file

        Returns:
            Config instance with defaults for missing sections

        Raises:
            FileNotFoundError: If explicit config_path doesn't exist
            ValueError: If configuration is invalid
        """
        if config_path is not None:
            if not config_path.exists():
                raise FileNotFoundError(f"Configuration file not found: {config_path}")
            return cls._load_from_file(config_path)

        discovered_path = cls._discover_config()
        if discovered_path is None:
            return cls.default()

        return cls._load_from_file(discovered_path)

    @classmethod
    def default(cls, project_dir: Path | None = None) -> "Config":
        """Create config with all defaults.

        Args:
            project_dir: Directory relative paths resolve against (default: cwd)
        """
        base = project_dir if project_dir is not None else Path.cwd()
        return cls(
            site=SiteConfig(),
            build=cls._parse_build(None, base),
            markdown=MarkdownConfig(),
            server=ServerConfig(),
        )

    @classmethod
    def _discover_config(cls) -> Path | None:
        """Search for config file in current directory and parents."""
        current = Path.cwd()
        while True:
            candidate = current / CONFIG_FILENAME
            if candidate.exists():
                return candidate
            parent = current.parent
            if parent == current:
                return None
            current = parent

    @classmethod
    def _load_from_file(cls, path: Path) -> "Config":
        """Load configuration from a specific file.

        Raises:
            ValueError: If configuration is invalid
        """
        with path.open("rb") as f:
            try:
                data = tomllib.load(f)
            except tomllib.TOMLDecodeError as e:
                raise ValueError(f"Invalid TOML in {path}: {e}") from e

        config_dir = path.parent

        return cls(
            site=cls._parse_site(data.get("site")),
            build=cls._parse_build(data.get("build"), config_dir),
            markdown=cls._parse_markdown(data.get("markdown")),
            server=cls._parse_server(data.get("server")),
            content_types=cls._parse_content_types(data.get("content_types")),
            config_path=path,
        )

    @classmethod
    def _parse_site(cls, data: object) -> SiteConfig:
        if data is None:
            return SiteConfig()

        if not isinstance(data, dict):
            raise ValueError("site section must be a dictionary")

        title = data.get("title", "")
        if not isinstance(title, str):
            raise ValueError("site.title must be a string")

        description = _optional_str(data, "description", "site.description")
        base_url = _optional_str(data, "base_url", "site.base_url")
        base_path = _optional_str(data, "base_path", "site.base_path")

        params = data.get("params", {})
        if not isinstance(params, dict):
            raise ValueError("site.params must be a dictionary")

        return SiteConfig(
            title=title,
            description=description,
            base_url=base_url.rstrip("/") if base_url else None,
            base_path=normalize_base_path(base_path),
            params=params,
        )

    @classmethod
    def _parse_build(cls, data: object, config_dir: Path) -> BuildConfig:
        """Parse build configuration section.

        Args:
            data: Raw build section data
            config_dir: Directory containing config file (for relative paths)
        """
        if data is None:
            data = {}

        if not isinstance(data, dict):
            raise ValueError("build section must be a dictionary")

        directories: dict[str, Path] = {}
        for key, default in (
            ("content_dir", "content"),
            ("templates_dir", "templates"),
            ("static_dir", "static"),
            ("output_dir", "public"),
        ):
            value = data.get(key, default)
            if not isinstance(value, str):
                raise ValueError(f"build.{key} must be a string")
            directories[key] = config_dir / value

        page_template = data.get("page_template", "page")
        if not isinstance(page_template, str) or not page_template.strip():
            raise ValueError("build.page_template must be a non-empty string")

        taxonomies_raw = data.get("taxonomies", ["tags"])
        if not isinstance(taxonomies_raw, list) or not all(
            isinstance(item, str) for item in taxonomies_raw
        ):
            raise ValueError("build.taxonomies must be a list of strings")
        taxonomies: list[str] = []
        for item in taxonomies_raw:
            key = item.strip().lower()
            if key and key not in taxonomies:
                taxonomies.append(key)

        include_drafts = data.get("include_drafts", False)
        if not isinstance(include_drafts, bool):
            raise ValueError("build.include_drafts must be a boolean")

        return BuildConfig(
            page_template=page_template.strip(),
            taxonomies=taxonomies,
            include_drafts=include_drafts,
            **directories,
        )

    @classmethod
    def _parse_markdown(cls, data: object) -> MarkdownConfig:
        if data is None:
            return MarkdownConfig()

        if not isinstance(data, dict):
            raise ValueError("markdown section must be a dictionary")

        extensions = data.get("extensions", list(DEFAULT_EXTENSIONS))
        if not isinstance(extensions, list) or not all(isinstance(item, str) for item in extensions):
            raise ValueError("markdown.extensions must be a list of strings")

        toc_permalink = data.get("toc_permalink", False)
        if not isinstance(toc_permalink, bool):
            raise ValueError("markdown.toc_permalink must be a boolean")

        rewrite_links = data.get("rewrite_links", True)
        if not isinstance(rewrite_links, bool):
            raise ValueError("markdown.rewrite_links must be a boolean")

        return MarkdownConfig(
            extensions=extensions,
            toc_permalink=toc_permalink,
            rewrite_links=rewrite_links,
        )

    @classmethod
    def _parse_server(cls, data: object) -> ServerConfig:
        if data is None:
            return ServerConfig()

        if not isinstance(data, dict):
            raise ValueError("server section must be a dictionary")

        host = data.get("host", "127.0.0.1")
        if not isinstance(host, str):
            raise ValueError("server.host must be a string")

        port = data.get("port", 8080)
        if not isinstance(port, int) or isinstance(port, bool):
            raise ValueError("server.port must be an integer")

        return ServerConfig(host=host, port=port)

    @classmethod
    def _parse_content_types(cls, data: object) -> list[ContentType]:
        """Parse content_types tables.

        Returns:
            Content types in declaration order
        """
        if data is None:
            return []

        if not isinstance(data, dict):
            raise ValueError("content_types section must be a dictionary")

        content_types: dict[str, ContentType] = {}
        for raw_name, table in data.items():
            name = raw_name.strip().lower()
            if not name:
                raise ValueError("content type name cannot be empty")
            if name in content_types:
                raise ValueError(f'duplicate content type "{name}"')
            if not isinstance(table, dict):
                raise ValueError(f"content_types.{name} must be a dictionary")

            paths = table.get("paths", [])
            if not isinstance(paths, list) or not all(isinstance(item, str) for item in paths):
                raise ValueError(f"content_types.{name}.paths must be a list of strings")

            defaults = table.get("defaults", {})
            if not isinstance(defaults, dict):
                raise ValueError(f"content_types.{name}.defaults must be a dictionary")

            content_types[name] = ContentType(
                name=name,
                paths=tuple(path_key(item) for item in paths if path_key(item)),
                defaults={str(key).lower(): value for key, value in defaults.items()},
            )

        return list(content_types.values())

    def with_overrides(
        self,
        *,
        host: str | None = None,
        port: int | None = None,
        content_dir: Path | None = None,
        output_dir: Path | None = None,
        include_drafts: bool | None = None,
    ) -> "Config":
        """Create a new Config with CLI overrides applied.

        Only non-None values override the existing config. This follows
        the immutable pattern - the original Config is not modified.
        """
        server = self.server
        if host is not None or port is not None:
            server = replace(
                self.server,
                host=host if host is not None else self.server.host,
                port=port if port is not None else self.server.port,
            )

        build = self.build
        if content_dir is not None or output_dir is not None or include_drafts is not None:
            build = replace(
                self.build,
                content_dir=content_dir if content_dir is not None else self.build.content_dir,
                output_dir=output_dir if output_dir is not None else self.build.output_dir,
                include_drafts=(
                    include_drafts if include_drafts is not None else self.build.include_drafts
                ),
            )

        return replace(self, server=server, build=build)


def _optional_str(data: dict[str, Any], key: str, name: str) -> str | None:
    value = data.get(key)
    if value is not None and not isinstance(value, str):
        raise ValueError(f"{name} must be a string")
    return value
