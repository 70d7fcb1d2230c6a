"""aiohttp server for Tessera.

Application factory and route registration for standalone server mode.
"""

import logging

from aiohttp import web

from tessera.api.elements import create_elements_routes
from tessera.api.navigation import create_navigation_routes
from tessera.api.pages import create_pages_routes
from tessera.app_keys import authorizer_key, config_key, store_key
from tessera.config import Config
from tessera.core.authorization import Ability, Authorizer
from tessera.core.store import ContentStore, ContentStoreLoader

logger = logging.getLogger(__name__)


def create_app(
    config: Config,
    *,
    store: ContentStore | None = None,
    authorizer: Authorizer | None = None,
) -> web.Application:
    """Create aiohttp application.

    Args:
        config: Application configuration
        store: Prebuilt content store; loaded from config.store.data_file if omitted
        authorizer: Authorization predicate; role-based Ability if omitted

    Returns:
        Configured aiohttp application

    Raises:
        StoreLoadError: If the store has to be loaded and the data file is invalid
    """
    app = web.Application()

    if store is None:
        loader = ContentStoreLoader(
            config.store.data_file,
            default_locale=config.store.default_locale,
        )
        store = loader.load()

    app[config_key] = config
    app[store_key] = store
    app[authorizer_key] = authorizer if authorizer is not None else Ability(store)

    app.router.add_routes(create_elements_routes())
    app.router.add_routes(create_pages_routes())
    app.router.add_routes(create_navigation_routes())

    return app


def run_server(config: Config) -> None:
    """Run the server."""
    app = create_app(config)
    logger.info(f"Serving {config.store.data_file} on {config.server.host}:{config.server.port}")
    web.run_app(app, host=config.server.host, port=config.server.port)
