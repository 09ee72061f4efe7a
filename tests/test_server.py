"""Tests for server module."""

import dataclasses
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest
from sitestage.app_keys import builder_key, config_key
from sitestage.config import Config
from sitestage.server import (
    canonical_directory_path,
    create_app,
    find_asset,
    strip_base_path,
)

WriteContent = Callable[[str, str], Path]


class TestCreateApp:
    """Tests for create_app()."""

    def test__valid_config__returns_configured_app(self, test_config: Config) -> None:
        """Create app with valid configuration."""
        app = create_app(test_config)

        assert app[config_key] is test_config
        assert app[builder_key].config is test_config


class TestPreviewPage:
    """Tests for the page and asset fallback route."""

    @pytest.mark.asyncio
    async def test__existing_page__renders_html(
        self, aiohttp_client: Any, test_config: Config, write_content: WriteContent
    ) -> None:
        """Render the page for its canonical URL."""
        write_content("guides/install.md", "# Install\n\nRun it.")
        client = await aiohttp_client(create_app(test_config))

        response = await client.get("/guides/install/")

        assert response.status == 200
        assert "text/html" in response.headers["Content-Type"]
        assert "<p>Run it.</p>" in await response.text()

    @pytest.mark.asyncio
    async def test__root__renders_home(
        self, aiohttp_client: Any, test_config: Config, write_content: WriteContent
    ) -> None:
        """Serve the root index page at /."""
        write_content("index.md", "# Home")
        client = await aiohttp_client(create_app(test_config))

        response = await client.get("/")

        assert response.status == 200
        assert '<h1 id="home">Home</h1>' in await response.text()

    @pytest.mark.asyncio
    async def test__missing_page__returns_404(
        self, aiohttp_client: Any, test_config: Config
    ) -> None:
        """Return an HTML 404 for unknown paths."""
        client = await aiohttp_client(create_app(test_config))

        response = await client.get("/nope/")

        assert response.status == 404
        assert await response.text() == "<h1>404 Not Found</h1>"

    @pytest.mark.asyncio
    async def test__missing_slash__redirects_with_query(
        self, aiohttp_client: Any, test_config: Config, write_content: WriteContent
    ) -> None:
        """Redirect extensionless paths to their trailing-slash form."""
        write_content("about.md", "# About")
        client = await aiohttp_client(create_app(test_config))

        response = await client.get("/about?ref=nav", allow_redirects=False)

        assert response.status == 301
        assert response.headers["Location"] == "/about/?ref=nav"

    @pytest.mark.asyncio
    async def test__redirect__skips_rendering(
        self,
        aiohttp_client: Any,
        test_config: Config,
        write_content: WriteContent,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        """Decide the slash redirect without rendering the page."""
        write_content("about.md", "# About")
        app = create_app(test_config)
        rendered: list[str] = []

        def record(request_path: str) -> str:
            rendered.append(request_path)
            return "<p>About</p>"

        monkeypatch.setattr(app[builder_key], "render_request", record)
        client = await aiohttp_client(app)

        response = await client.get("/about", allow_redirects=False)

        assert response.status == 301
        assert rendered == []

    @pytest.mark.asyncio
    async def test__missing_page_without_slash__returns_404(
        self, aiohttp_client: Any, test_config: Config
    ) -> None:
        """Return 404 instead of redirecting to a page that does not exist."""
        client = await aiohttp_client(create_app(test_config))

        response = await client.get("/nope", allow_redirects=False)

        assert response.status == 404

    @pytest.mark.asyncio
    async def test__base_path__stripped_before_lookup(
        self, aiohttp_client: Any, test_config: Config, write_content: WriteContent
    ) -> None:
        """Serve pages below the configured base path."""
        write_content("about.md", "# About")
        config = dataclasses.replace(
            test_config, site=dataclasses.replace(test_config.site, base_path="/docs")
        )
        client = await aiohttp_client(create_app(config))

        response = await client.get("/docs/about/")

        assert response.status == 200
        assert "About" in await response.text()

    @pytest.mark.asyncio
    async def test__assets__served_static_first(
        self, aiohttp_client: Any, test_config: Config, write_content: WriteContent
    ) -> None:
        """Serve static files before content assets of the same path."""
        write_content("img/logo.svg", "<svg>content</svg>")
        write_content("img/photo.png", "png")
        static = test_config.build.static_dir / "img" / "logo.svg"
        static.parent.mkdir(parents=True)
        static.write_text("<svg>static</svg>", encoding="utf-8")
        client = await aiohttp_client(create_app(test_config))

        logo = await client.get("/img/logo.svg")
        photo = await client.get("/img/photo.png")

        assert logo.status == 200
        assert await logo.text() == "<svg>static</svg>"
        assert photo.status == 200
        assert await photo.read() == b"png"

    @pytest.mark.asyncio
    async def test__markdown_sources__not_served(
        self, aiohttp_client: Any, test_config: Config, write_content: WriteContent
    ) -> None:
        """Never expose Markdown sources as files."""
        write_content("about.md", "# About")
        client = await aiohttp_client(create_app(test_config))

        response = await client.get("/about.md")

        assert response.status == 404

    @pytest.mark.asyncio
    async def test__render_error__returns_500(
        self,
        aiohttp_client: Any,
        test_config: Config,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        """Render unexpected errors as an HTML 500 page."""
        app = create_app(test_config)

        def explode(request_path: str) -> str:
            raise RuntimeError("template <broken>")

        monkeypatch.setattr(app[builder_key], "render_request", explode)
        client = await aiohttp_client(app)

        response = await client.get("/anything/")

        assert response.status == 500
        body = await response.text()
        assert "500 Internal Server Error" in body
        assert "RuntimeError: template &lt;broken&gt;" in body

    @pytest.mark.asyncio
    async def test__api_routes__take_precedence(
        self, aiohttp_client: Any, test_config: Config
    ) -> None:
        """API routes take precedence over the page fallback."""
        client = await aiohttp_client(create_app(test_config))

        response = await client.get("/api/navigation")

        assert response.status == 200
        assert await response.json() == {"items": []}


class TestStripBasePath:
    """Tests for strip_base_path()."""

    @pytest.mark.parametrize(
        ("request_path", "base_path", "expected"),
        [
            ("/guide/", None, "/guide/"),
            ("/docs", "/docs", "/"),
            ("/docs/", "/docs", "/"),
            ("/docs/guide/", "docs/", "/guide/"),
            ("/docsite/guide/", "/docs", "/docsite/guide/"),
        ],
    )
    def test__paths__stripped(
        self, request_path: str, base_path: str | None, expected: str
    ) -> None:
        """Strip only whole leading base path segments."""
        assert strip_base_path(request_path, base_path) == expected


class TestCanonicalDirectoryPath:
    """Tests for canonical_directory_path()."""

    def test__extensionless__gets_trailing_slash(self) -> None:
        """Append a slash to extensionless paths only."""
        assert canonical_directory_path("/guide") == "/guide/"
        assert canonical_directory_path("/guide/") is None
        assert canonical_directory_path("/") is None
        assert canonical_directory_path("/feed.xml") is None


class TestFindAsset:
    """Tests for find_asset()."""

    def test__traversal__is_rejected(
        self, tmp_path: Path, test_config: Config, write_content: WriteContent
    ) -> None:
        """Ignore paths that escape the asset roots."""
        write_content("a.txt", "a")
        (tmp_path / "secret.txt").write_text("secret", encoding="utf-8")

        expected = (test_config.build.content_dir / "a.txt").resolve()

        assert find_asset(test_config, "/a.txt") == expected
        assert find_asset(test_config, "/../secret.txt") is None
        assert find_asset(test_config, "/") is None

