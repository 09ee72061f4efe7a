"""Application keys for type-safe app configuration access."""

from aiohttp import web

from sitestage.builder import SiteBuilder
from sitestage.config import Config

config_key = web.AppKey("config", Config)
builder_key = web.AppKey("builder", SiteBuilder)
