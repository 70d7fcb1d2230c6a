"""Tests for server module."""

from pathlib import Path

import pytest

from tessera.app_keys import authorizer_key, config_key, store_key
from tessera.config import Config
from tessera.core.authorization import Ability, Identity, Resource
from tessera.core.store import ContentStore
from tessera.errors import StoreLoadError
from tessera.server import create_app


class TestCreateApp:
    """Tests for create_app()."""

    def test__valid_config__returns_configured_app(self, test_config: Config) -> None:
        """Create app that loads the store from the configured data file."""
        app = create_app(test_config)

        assert app[config_key] is test_config
        assert app[store_key].get_page(1) is not None
        assert isinstance(app[authorizer_key], Ability)

    def test__prebuilt_store_and_authorizer__are_used(
        self, test_config: Config, store: ContentStore
    ) -> None:
        def deny_all(identity: Identity, action: str, resource: Resource) -> bool:
            return False

        app = create_app(test_config, store=store, authorizer=deny_all)

        assert app[store_key] is store
        assert app[authorizer_key] is deny_all

    def test__missing_data_file__raises(self, test_config: Config, tmp_path: Path) -> None:
        config = test_config.with_overrides(data_file=tmp_path / "missing.json")

        with pytest.raises(StoreLoadError):
            create_app(config)


class TestCustomAuthorizer:
    @pytest.mark.asyncio
    async def test__deny_all__hides_everything(
        self, test_config: Config, store: ContentStore, aiohttp_client
    ) -> None:
        def deny_all(identity: Identity, action: str, resource: Resource) -> bool:
            return False

        client = await aiohttp_client(create_app(test_config, store=store, authorizer=deny_all))

        elements = await client.get("/api/elements")
        page = await client.get("/api/pages/1")

        assert await elements.json() == []
        assert page.status == 403

    @pytest.mark.asyncio
    async def test__show_denied__drops_element_from_list(
        self, test_config: Config, store: ContentStore, aiohttp_client
    ) -> None:
        """An element that may be indexed but not shown is left out of the list."""

        def hide_slider(identity: Identity, action: str, resource: Resource) -> bool:
            return not (action == "show" and getattr(resource, "id", None) == 21)

        client = await aiohttp_client(create_app(test_config, store=store, authorizer=hide_slider))

        response = await client.get("/api/elements")

        assert response.status == 200
        data = await response.json()
        assert [e["id"] for e in data] == [30, 20, 24, 40, 50, 10, 11]
