"""Navigation API endpoints.

Provides full navigation tree and subtree endpoints.
"""

from aiohttp import web

from sitestage.app_keys import builder_key
from sitestage.core.navigation import build_navigation
from sitestage.core.site import SiteIndex


def create_navigation_routes() -> list[web.RouteDef]:
    return [
        web.get("/api/navigation", get_navigation),
        web.get("/api/navigation/{path:.*}", get_navigation_subtree),
    ]


async def get_navigation(request: web.Request) -> web.Response:
    builder = request.app[builder_key]
    tree = SiteIndex(builder.load_pages()).tree()
    nav_items = build_navigation(tree)
    return web.json_response({"items": [item.to_dict() for item in nav_items]})


async def get_navigation_subtree(request: web.Request) -> web.Response:
    path = request.match_info["path"].strip("/")
    builder = request.app[builder_key]
    tree = SiteIndex(builder.load_pages()).tree()

    if path not in tree.flatten():
        return web.json_response(
            {"error": "Section not found", "path": path},
            status=404,
        )

    subtree = build_navigation(tree, path)
    return web.json_response({"items": [item.to_dict() for item in subtree]})
