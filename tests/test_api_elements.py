"""Tests for elements API endpoints."""

import pytest
from aiohttp.test_utils import TestClient

from tessera.config import Config
from tessera.server import create_app

MEMBER = {"Authorization": "Bearer member-token"}
ADMIN = {"Authorization": "Bearer admin-token"}


@pytest.fixture
def client(test_config: Config, aiohttp_client) -> TestClient:
    """Create test client with configured app."""
    app = create_app(test_config)
    return aiohttp_client(app)


class TestListElements:
    """Tests for GET /api/elements."""

    @pytest.mark.asyncio
    async def test__no_filters__returns_visible_elements(self, client) -> None:
        test_client = await client
        response = await test_client.get("/api/elements")

        assert response.status == 200
        data = await response.json()
        assert [e["id"] for e in data] == [30, 20, 21, 24, 10, 11]

    @pytest.mark.asyncio
    async def test__page_and_name__are_conjunctive(self, client) -> None:
        """Both filters narrow the same collection."""
        test_client = await client
        response = await test_client.get("/api/elements?page_id=5&named=header")

        assert response.status == 200
        data = await response.json()
        assert [e["id"] for e in data] == [10]
        assert data[0]["ingredients"] == [{"name": "headline", "value": "Contact"}]

    @pytest.mark.asyncio
    async def test__named_array__matches_any(self, client) -> None:
        test_client = await client
        response = await test_client.get(
            "/api/elements?page_id=2&named[]=slider&named[]=article"
        )

        data = await response.json()
        assert [e["id"] for e in data] == [21, 24]

    @pytest.mark.asyncio
    async def test__invalid_page_id__returns_empty_list(self, client) -> None:
        test_client = await client
        response = await test_client.get("/api/elements?page_id=five")

        assert response.status == 200
        assert await response.json() == []

    @pytest.mark.asyncio
    async def test__admin__sees_hidden_elements(self, client) -> None:
        test_client = await client
        response = await test_client.get("/api/elements", headers=ADMIN)

        data = await response.json()
        assert [e["id"] for e in data] == [30, 20, 21, 24, 40, 50, 10, 11]

    @pytest.mark.asyncio
    async def test__full__nests_authorized_children(self, client) -> None:
        test_client = await client
        response = await test_client.get("/api/elements?named=slider")

        data = await response.json()
        assert [e["id"] for e in data[0]["nested_elements"]] == [22]

    @pytest.mark.asyncio
    async def test__full_false__omits_nested(self, client) -> None:
        test_client = await client
        response = await test_client.get("/api/elements?named=slider&full=false")

        data = await response.json()
        assert "nested_elements" not in data[0]


class TestGetElement:
    """Tests for GET /api/elements/{id}."""

    @pytest.mark.asyncio
    async def test__existing__returns_element(self, client) -> None:
        test_client = await client
        response = await test_client.get("/api/elements/24")

        assert response.status == 200
        data = await response.json()
        assert data["id"] == 24
        assert data["content_ids"] == [101, 102, 103, 104]
        assert data["ingredients"][2]["error"]["type"] == "essence_missing"

    @pytest.mark.asyncio
    async def test__missing__returns_404(self, client) -> None:
        test_client = await client
        response = await test_client.get("/api/elements/999")

        assert response.status == 404
        assert await response.json() == {"error": "Not found", "kind": "element", "id": "999"}

    @pytest.mark.asyncio
    async def test__hidden__returns_403(self, client) -> None:
        """An element on a restricted page is forbidden for guests."""
        test_client = await client
        response = await test_client.get("/api/elements/40")

        assert response.status == 403
        data = await response.json()
        assert data["error"] == "Not authorized"

    @pytest.mark.asyncio
    async def test__member_token__grants_restricted(self, client) -> None:
        test_client = await client
        response = await test_client.get("/api/elements/40", headers=MEMBER)

        assert response.status == 200

    @pytest.mark.asyncio
    async def test__unknown_token__is_anonymous(self, client) -> None:
        test_client = await client
        response = await test_client.get(
            "/api/elements/40", headers={"Authorization": "Bearer nope"}
        )

        assert response.status == 403


class TestNonAsciiDigits:
    """Digit characters that are not decimal numbers never resolve an id."""

    @pytest.mark.asyncio
    async def test__superscript_page_id__returns_empty_list(self, client) -> None:
        test_client = await client
        response = await test_client.get("/api/elements", params={"page_id": "²"})

        assert response.status == 200
        assert await response.json() == []

    @pytest.mark.asyncio
    async def test__superscript_element_id__returns_404(self, client) -> None:
        test_client = await client
        response = await test_client.get("/api/elements/²")

        assert response.status == 404
