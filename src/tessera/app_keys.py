"""Application keys for type-safe app configuration access."""

from aiohttp import web

from tessera.config import Config
from tessera.core.authorization import Authorizer
from tessera.core.store import ContentStore

config_key = web.AppKey("config", Config)
store_key = web.AppKey("store", ContentStore)
authorizer_key = web.AppKey("authorizer", Authorizer)
