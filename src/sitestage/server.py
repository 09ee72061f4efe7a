"""aiohttp preview server for sitestage.

Application factory and route registration. Pages are rendered on request
from the current content, so edits show up on the next reload.
"""

import html
import logging
from pathlib import Path, PurePosixPath

from aiohttp import web
from aiohttp.typedefs import Handler

from sitestage.api.navigation import create_navigation_routes
from sitestage.api.pages import create_pages_routes
from sitestage.app_keys import builder_key, config_key
from sitestage.builder import SiteBuilder
from sitestage.config import Config
from sitestage.core.discovery import CONTENT_EXTENSION
from sitestage.core.normalization import normalize_base_path

logger = logging.getLogger(__name__)

NOT_FOUND_BODY = "<h1>404 Not Found</h1>"


@web.middleware
async def error_middleware(
    request: web.Request,
    handler: Handler,
) -> web.StreamResponse:
    """Render unexpected errors as an HTML 500 page."""
    try:
        return await handler(request)
    except web.HTTPException:
        raise
    except Exception as e:
        logger.exception("Failed to handle %s", request.path)
        body = (
            "<h1>500 Internal Server Error</h1>"
            f"<pre>{html.escape(f'{type(e).__name__}: {e}')}</pre>"
        )
        return web.Response(status=500, text=body, content_type="text/html")


async def preview_page(request: web.Request) -> web.StreamResponse:
    """Serve an asset file or a freshly rendered page.

    Static files win over content assets; anything else is looked up as a
    page URL with the site base path stripped.
    """
    config = request.app[config_key]
    lookup_path = strip_base_path(request.path, config.site.base_path)

    asset = find_asset(config, lookup_path)
    if asset is not None:
        return web.FileResponse(asset)

    builder = request.app[builder_key]
    canonical = canonical_directory_path(request.path)
    if canonical is not None:
        if builder.find_page(lookup_path) is None:
            return web.Response(status=404, text=NOT_FOUND_BODY, content_type="text/html")
        location = f"{canonical}?{request.query_string}" if request.query_string else canonical
        raise web.HTTPMovedPermanently(location)

    rendered = builder.render_request(lookup_path)
    if rendered is None:
        return web.Response(status=404, text=NOT_FOUND_BODY, content_type="text/html")

    return web.Response(text=rendered, content_type="text/html")


def strip_base_path(request_path: str, base_path: str | None) -> str:
    """Strip the site base path from a request path ("/docs/guide/" -> "/guide/")."""
    normalized_path = "/" + request_path.lstrip("/")
    normalized_base = normalize_base_path(base_path)
    if normalized_base is None:
        return normalized_path
    if normalized_path == normalized_base:
        return "/"
    if normalized_path.startswith(f"{normalized_base}/"):
        return normalized_path[len(normalized_base) :] or "/"
    return normalized_path


def canonical_directory_path(request_path: str) -> str | None:
    """Return the trailing-slash form of an extensionless path, or None."""
    if request_path == "/" or request_path.endswith("/"):
        return None
    if PurePosixPath(request_path).suffix:
        return None
    return f"{request_path}/"


def find_asset(config: Config, lookup_path: str) -> Path | None:
    """Resolve a request path to a file in the static or content directory.

    Markdown sources are never served; paths escaping a root are ignored.
    """
    relative = lookup_path.strip("/")
    if not relative:
        return None

    candidates = [
        (config.build.static_dir, True),
        (config.build.content_dir, False),
    ]
    for root, allow_sources in candidates:
        if not root.is_dir():
            continue
        resolved_root = root.resolve()
        candidate = (resolved_root / relative).resolve()
        if not candidate.is_relative_to(resolved_root) or not candidate.is_file():
            continue
        if not allow_sources and candidate.suffix.lower() == CONTENT_EXTENSION:
            continue
        return candidate
    return None


def create_app(config: Config) -> web.Application:
    """Create aiohttp application.

    Args:
        config: Application configuration

    Returns:
        Configured aiohttp application
    """
    app = web.Application(middlewares=[error_middleware])

    app[config_key] = config
    app[builder_key] = SiteBuilder(config)

    # API routes (must be registered first to take precedence over the page fallback)
    app.router.add_routes(create_pages_routes())
    app.router.add_routes(create_navigation_routes())

    app.router.add_get("/{path:.*}", preview_page)

    return app


def run_server(config: Config) -> None:
    """Run the preview server on the configured host and port."""
    app = create_app(config)
    web.run_app(app, host=config.server.host, port=config.server.port, print=None)
