"""Tests for navigation matching."""

import pytest

from tessera.core.navigation import (
    NavigationEntry,
    RequestContext,
    active_entry,
    build_navigation,
    entry_active,
    main_navigation_active,
    module_definition_for,
    navigate_module,
    normalize_controller,
    sub_navigation_entry_active,
)


@pytest.fixture
def products() -> NavigationEntry:
    return NavigationEntry.from_dict(
        {
            "controller": "products",
            "action": "index",
            "sub_navigation": [
                {"controller": "products", "action": "edit", "nested_actions": ["update"]},
            ],
        }
    )


class TestMainNavigationActive:
    def test__direct_match(self, products: NavigationEntry) -> None:
        assert main_navigation_active(products, RequestContext("products", "index"))

    def test__sub_entry_nested_action(self, products: NavigationEntry) -> None:
        """An action listed in a sub entry's nested actions activates the parent."""
        assert main_navigation_active(products, RequestContext("products", "update"))

    def test__other_controller__is_inactive(self, products: NavigationEntry) -> None:
        assert not main_navigation_active(products, RequestContext("orders", "index"))

    def test__unlisted_action__is_inactive(self, products: NavigationEntry) -> None:
        assert not main_navigation_active(products, RequestContext("products", "destroy"))

    def test__nested_sibling_group(self, navigation_entries: list[NavigationEntry]) -> None:
        pages = navigation_entries[0]

        assert main_navigation_active(pages, RequestContext("admin/pages", "edit"))

    def test__leading_slash__is_normalized(self, navigation_entries: list[NavigationEntry]) -> None:
        pages = navigation_entries[0]

        assert main_navigation_active(pages, RequestContext("admin/pages", "index"))
        assert main_navigation_active(pages, RequestContext("/admin/pages", "index"))


class TestSubNavigationEntryActive:
    def test__exact_action(self) -> None:
        entry = NavigationEntry("/admin/layoutpages", "index")

        assert sub_navigation_entry_active(entry, RequestContext("admin/layoutpages", "index"))

    def test__nested_action(self) -> None:
        entry = NavigationEntry("admin/layoutpages", "index", nested_actions=("edit",))

        assert sub_navigation_entry_active(entry, RequestContext("admin/layoutpages", "edit"))

    def test__controller_mismatch(self) -> None:
        entry = NavigationEntry("admin/layoutpages", "index", nested_actions=("edit",))

        assert not sub_navigation_entry_active(entry, RequestContext("admin/pages", "edit"))


class TestEntryActive:
    def test__matches_at_any_depth(self) -> None:
        entry = NavigationEntry.from_dict(
            {
                "controller": "shop",
                "action": "index",
                "sub_navigation": [
                    {
                        "controller": "catalog",
                        "action": "index",
                        "sub_navigation": [
                            {"controller": "variants", "action": "index", "nested_actions": ["new"]},
                        ],
                    }
                ],
            }
        )

        assert entry_active(entry, RequestContext("variants", "new"))
        assert not main_navigation_active(entry, RequestContext("variants", "new"))

    def test__is_deterministic(self, products: NavigationEntry) -> None:
        context = RequestContext("products", "update")

        assert [entry_active(products, context) for _ in range(3)] == [True, True, True]


class TestModuleLookup:
    def test__active_entry(self, navigation_entries: list[NavigationEntry]) -> None:
        entry = active_entry(navigation_entries, RequestContext("products", "index"))

        assert entry is not None
        assert entry.name == "Products"

    def test__active_entry__none(self, navigation_entries: list[NavigationEntry]) -> None:
        assert active_entry(navigation_entries, RequestContext("orders", "index")) is None

    def test__module_definition_for__sub_controller(
        self, navigation_entries: list[NavigationEntry]
    ) -> None:
        entry = module_definition_for(
            navigation_entries, RequestContext("admin/layoutpages", "whatever")
        )

        assert entry is navigation_entries[0]

    def test__navigate_module__builds_subject(
        self, navigation_entries: list[NavigationEntry]
    ) -> None:
        assert navigate_module(navigation_entries[0]) == ("index", "admin_pages")

    def test__normalize_controller(self) -> None:
        assert normalize_controller("/admin/pages") == "admin/pages"
        assert normalize_controller("admin/pages") == "admin/pages"


class TestBuildNavigation:
    def test__annotates_active_state(self, navigation_entries: list[NavigationEntry]) -> None:
        items = build_navigation(navigation_entries, RequestContext("admin/layoutpages", "edit"))

        data = [item.to_dict() for item in items]
        assert data[0]["active"] is True
        assert [child["active"] for child in data[0]["children"]] == [False, True]
        assert data[1] == {
            "name": "Products",
            "controller": "products",
            "action": "index",
            "active": False,
        }

    def test__allowed__filters_entries(self, navigation_entries: list[NavigationEntry]) -> None:
        items = build_navigation(
            navigation_entries,
            RequestContext("products", "index"),
            allowed=lambda action, subject: not subject.startswith("admin"),
        )

        assert [item.name for item in items] == ["Products"]


class TestFromDict:
    def test__missing_action__raises(self) -> None:
        with pytest.raises(ValueError, match="controller and action"):
            NavigationEntry.from_dict({"controller": "products"})
