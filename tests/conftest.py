"""Shared test fixtures.

The sample site has an English page tree and a German root page:

    1 index (en, language root)
    ├── 2 about
    │   └── 3 about/team   (restricted)
    ├── 4 drafts           (not public)
    └── 5 contact
    6 index (de, language root)

Page 2 holds a nestable "slider" element (21) with two slides (22, 23);
slide 23 is not public.
"""

import json
from pathlib import Path
from typing import Any

import pytest

from tessera.config import (
    AuthConfig,
    Config,
    SerializerConfig,
    ServerConfig,
    StoreConfig,
)
from tessera.core.authorization import Ability, Identity
from tessera.core.navigation import NavigationEntry
from tessera.core.store import ContentStore, ContentStoreLoader

TIMESTAMP = "2016-10-05T12:00:00+00:00"


def _page(id: int, name: str, urlname: str, **extra: Any) -> dict[str, Any]:
    page = {
        "id": id,
        "name": name,
        "urlname": urlname,
        "title": name,
        "language_code": "en",
        "page_layout": "standard",
        "created_at": TIMESTAMP,
        "updated_at": TIMESTAMP,
    }
    page.update(extra)
    return page


def _element(id: int, name: str, page_id: int, position: int, **extra: Any) -> dict[str, Any]:
    element = {
        "id": id,
        "name": name,
        "page_id": page_id,
        "position": position,
        "created_at": TIMESTAMP,
        "updated_at": TIMESTAMP,
    }
    element.update(extra)
    return element


def _text(id: int, element_id: int, name: str, body: str, position: int = 1) -> dict[str, Any]:
    return {
        "id": id,
        "name": name,
        "element_id": element_id,
        "position": position,
        "essence_type": "text",
        "essence": {"body": body},
    }


def build_sample_data() -> dict[str, Any]:
    return {
        "definitions": [
            {"name": "header", "contents": ["headline"]},
            {"name": "article", "contents": ["headline", "text", "image", "date"]},
            {"name": "slider", "nestable_elements": ["slide"], "contents": ["title"]},
            {"name": "slide", "contents": ["picture"]},
        ],
        "pages": [
            _page(1, "Index", "index", page_layout="index", lft=1, rgt=10, language_root=True),
            _page(2, "About", "about", parent_id=1, lft=2, rgt=5, depth=1),
            _page(3, "Team", "about/team", parent_id=2, lft=3, rgt=4, depth=2, restricted=True),
            _page(4, "Drafts", "drafts", parent_id=1, lft=6, rgt=7, depth=1, public=False),
            _page(5, "Contact", "contact", page_layout="contact", parent_id=1, lft=8, rgt=9, depth=1),
            _page(
                6,
                "Startseite",
                "index",
                page_layout="index",
                language_code="de",
                lft=11,
                rgt=12,
                language_root=True,
            ),
        ],
        "elements": [
            _element(10, "header", 5, 1),
            _element(11, "article", 5, 2),
            _element(20, "header", 2, 1, tag_list=["top"]),
            _element(21, "slider", 2, 2),
            _element(22, "slide", 2, 1, parent_element_id=21),
            _element(23, "slide", 2, 2, parent_element_id=21, public=False),
            _element(24, "article", 2, 3, cell_id=7),
            _element(30, "article", 1, 1),
            _element(40, "article", 3, 1),
            _element(50, "article", 4, 1),
        ],
        "contents": [
            _text(100, 20, "headline", "About us"),
            _text(101, 24, "headline", "Our story", position=1),
            {
                "id": 102,
                "name": "text",
                "element_id": 24,
                "position": 2,
                "essence_type": "richtext",
                "essence": {"body": "<p>Hello</p>", "stripped_body": "Hello"},
            },
            {"id": 103, "name": "image", "element_id": 24, "position": 3},
            {
                "id": 104,
                "name": "date",
                "element_id": 24,
                "position": 4,
                "essence_type": "date",
                "essence": {"value": "2016-10-05"},
            },
            {
                "id": 105,
                "name": "picture",
                "element_id": 22,
                "position": 1,
                "essence_type": "picture",
                "essence": {"picture_id": 7, "picture_name": "slide1.jpg"},
            },
            {
                "id": 106,
                "name": "picture",
                "element_id": 23,
                "position": 1,
                "essence_type": "picture",
                "essence": {"picture_id": 8, "picture_name": "slide2.jpg"},
            },
            _text(107, 10, "headline", "Contact"),
            {
                "id": 108,
                "name": "headline",
                "element_id": 11,
                "position": 1,
                "essence_type": "text",
                "essence": {"body": "Write us", "link_url": "mailto:hello@example.com"},
            },
            _text(109, 30, "headline", "Welcome"),
            _text(110, 40, "headline", "Team"),
            _text(111, 50, "headline", "Draft"),
            _text(112, 21, "title", "Gallery"),
        ],
    }


@pytest.fixture
def sample_data() -> dict[str, Any]:
    return build_sample_data()


@pytest.fixture
def data_file(tmp_path: Path, sample_data: dict[str, Any]) -> Path:
    """Write the sample site to a JSON data file."""
    path = tmp_path / "content.json"
    path.write_text(json.dumps(sample_data))
    return path


@pytest.fixture
def store(data_file: Path) -> ContentStore:
    return ContentStoreLoader(data_file).load()


@pytest.fixture
def ability(store: ContentStore) -> Ability:
    return Ability(store)


@pytest.fixture
def guest() -> Identity:
    return Identity()


@pytest.fixture
def member() -> Identity:
    return Identity(id="mia", role="member")


@pytest.fixture
def admin() -> Identity:
    return Identity(id="ada", role="admin")


@pytest.fixture
def navigation_entries() -> list[NavigationEntry]:
    return [
        NavigationEntry.from_dict(
            {
                "name": "Pages",
                "controller": "/admin/pages",
                "action": "index",
                "sub_navigation": [
                    {"name": "Pages", "controller": "/admin/pages", "action": "index"},
                    {
                        "name": "Layoutpages",
                        "controller": "admin/layoutpages",
                        "action": "index",
                        "nested_actions": ["edit"],
                    },
                ],
                "nested": [{"controller": "admin/pages", "action": "edit"}],
            }
        ),
        NavigationEntry.from_dict(
            {"name": "Products", "controller": "products", "action": "index"}
        ),
    ]


@pytest.fixture
def test_config(data_file: Path, navigation_entries: list[NavigationEntry]) -> Config:
    """Create a test configuration pointing at the sample data file."""
    return Config(
        server=ServerConfig(),
        store=StoreConfig(data_file=data_file),
        serializer=SerializerConfig(),
        auth=AuthConfig(
            tokens={
                "member-token": Identity(id="mia", role="member"),
                "author-token": Identity(id="otto", role="author"),
                "admin-token": Identity(id="ada", role="admin"),
            }
        ),
        navigation=navigation_entries,
    )
