"""Page JSON endpoint.

Serves the rendered body of one page together with its metadata,
breadcrumbs and table of contents, with ETag-based revalidation.
"""

from datetime import UTC, datetime
from email.utils import formatdate
from hashlib import md5
from pathlib import Path

from aiohttp import web

from sitestage.app_keys import builder_key
from sitestage.core.navigation import build_breadcrumbs
from sitestage.core.site import SiteIndex


def create_pages_routes() -> list[web.RouteDef]:
    return [
        web.get("/api/pages/{path:.*}", get_page),
    ]


async def get_page(request: web.Request) -> web.Response:
    path = request.match_info["path"]
    builder = request.app[builder_key]

    site_index = SiteIndex(builder.load_pages())
    page = site_index.find_by_url_path(f"/{path}")
    if page is None:
        return web.json_response(
            {"error": "Page not found", "path": path},
            status=404,
        )

    result = builder.render_markdown(page)

    source_mtime = Path(page.source_path).stat().st_mtime
    last_modified = datetime.fromtimestamp(source_mtime, tz=UTC)

    etag = _compute_etag(result.html)

    if_none_match = request.headers.get("If-None-Match")
    if if_none_match == etag:
        return web.Response(status=304)

    breadcrumbs = [b.to_dict() for b in build_breadcrumbs(site_index.tree(), page)]

    response_data = {
        "meta": {
            "title": page.title,
            "path": page.url_path,
            "slug": page.slug,
            "source_file": page.source_path,
            "last_modified": last_modified.isoformat(),
            "taxonomies": page.taxonomies,
        },
        "breadcrumbs": breadcrumbs,
        "toc": [entry.to_dict() for entry in result.toc],
        "content": result.html,
    }

    return web.json_response(
        response_data,
        headers={
            "ETag": etag,
            "Last-Modified": formatdate(source_mtime, usegmt=True),
            "Cache-Control": "private, max-age=60",
        },
    )


def _compute_etag(content: str) -> str:
    # First 16 hex chars (64 bits) of the content hash
    content_hash = md5(content.encode("utf-8"), usedforsecurity=False).hexdigest()[:16]
    return f'"{content_hash}"'
