"""Navigation menu matching.

Decides which entry of a declarative navigation menu is active for the
current (controller, action) pair, and builds the menu tree for UI
presentation. All functions are pure; the request context is passed in
explicitly.
"""

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, TypedDict


@dataclass(frozen=True)
class RequestContext:
    """Controller, action and query params of the current request."""

    controller: str
    action: str
    params: Mapping[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class NavigationEntry:
    """Menu entry pointing at a controller action.

    ``sub_navigation`` holds the entries shown beneath this one;
    ``nested`` holds a sibling group whose actions also activate it.
    """

    controller: str
    action: str
    name: str = ""
    nested_actions: tuple[str, ...] = ()
    sub_navigation: tuple["NavigationEntry", ...] = ()
    nested: tuple["NavigationEntry", ...] = ()

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "NavigationEntry":
        """Build an entry tree from configuration data.

        Raises:
            ValueError: If controller or action is missing
        """
        controller = data.get("controller")
        action = data.get("action")
        if not isinstance(controller, str) or not isinstance(action, str):
            raise ValueError("navigation entries need string controller and action")
        return cls(
            controller=controller,
            action=action,
            name=str(data.get("name", "")),
            nested_actions=tuple(data.get("nested_actions") or ()),
            sub_navigation=tuple(cls.from_dict(d) for d in data.get("sub_navigation") or ()),
            nested=tuple(cls.from_dict(d) for d in data.get("nested") or ()),
        )


def normalize_controller(controller: str) -> str:
    """Strip the leading path separator from a controller name."""
    return controller.removeprefix("/")


def _same_controller(entry: NavigationEntry, context: RequestContext) -> bool:
    return normalize_controller(entry.controller) == normalize_controller(context.controller)


def sub_navigation_entry_active(entry: NavigationEntry, context: RequestContext) -> bool:
    """Whether a sub-navigation entry matches the current request.

    Matches on controller plus either the exact action or one of the
    entry's nested actions.
    """
    if not _same_controller(entry, context):
        return False
    return context.action == entry.action or context.action in entry.nested_actions


def main_navigation_active(entry: NavigationEntry, context: RequestContext) -> bool:
    """Whether a top-level entry is active.

    True on a direct (controller, action) match, or when any direct
    sub-navigation entry or nested sibling entry is active.
    """
    if _same_controller(entry, context) and context.action == entry.action:
        return True
    if any(sub_navigation_entry_active(sub, context) for sub in entry.sub_navigation):
        return True
    return any(sub_navigation_entry_active(n, context) for n in entry.nested)


def entry_active(entry: NavigationEntry, context: RequestContext) -> bool:
    """Whether the entry or any entry below it, at any depth, is active."""
    stack = [entry]
    while stack:
        current = stack.pop()
        if main_navigation_active(current, context):
            return True
        stack.extend(current.sub_navigation)
        stack.extend(current.nested)
    return False


def active_entry(
    entries: Sequence[NavigationEntry],
    context: RequestContext,
) -> NavigationEntry | None:
    """Return the first top-level entry that is active, if any."""
    return next((e for e in entries if entry_active(e, context)), None)


def module_definition_for(
    entries: Sequence[NavigationEntry],
    context: RequestContext,
) -> NavigationEntry | None:
    """Find the top-level entry owning the current controller.

    Looks at the entry's own controller and those of its sub-navigation,
    ignoring the action.
    """
    for entry in entries:
        if _same_controller(entry, context):
            return entry
        if any(_same_controller(sub, context) for sub in entry.sub_navigation):
            return entry
    return None


def navigate_module(entry: NavigationEntry) -> tuple[str, str]:
    """Return the (action, subject) pair used to check menu permissions."""
    return entry.action, normalize_controller(entry.controller).replace("/", "_")


class NavItemDict(TypedDict, total=False):
    """Dictionary representation of a navigation item."""

    name: str
    controller: str
    action: str
    active: bool
    children: list["NavItemDict"]


@dataclass
class NavItem:
    """Navigation item with active state for UI tree."""

    name: str
    controller: str
    action: str
    active: bool
    children: list["NavItem"] = field(default_factory=list)

    def to_dict(self) -> NavItemDict:
        """Convert to dictionary for JSON serialization."""
        result: NavItemDict = {
            "name": self.name,
            "controller": self.controller,
            "action": self.action,
            "active": self.active,
        }
        if self.children:
            result["children"] = [child.to_dict() for child in self.children]
        return result


def build_navigation(
    entries: Sequence[NavigationEntry],
    context: RequestContext,
    allowed: Callable[[str, str], bool] | None = None,
) -> list[NavItem]:
    """Build the menu tree annotated with active state.

    Args:
        entries: Top-level navigation entries
        context: Current request context
        allowed: Optional ``(action, subject) -> bool`` check; entries it
            rejects are left out together with their sub-navigation

    Returns:
        List of NavItem trees for navigation UI
    """
    items: list[NavItem] = []
    for entry in entries:
        if allowed is not None and not allowed(*navigate_module(entry)):
            continue
        children = [
            NavItem(
                name=sub.name,
                controller=sub.controller,
                action=sub.action,
                active=sub_navigation_entry_active(sub, context),
            )
            for sub in entry.sub_navigation
            if allowed is None or allowed(*navigate_module(sub))
        ]
        items.append(
            NavItem(
                name=entry.name,
                controller=entry.controller,
                action=entry.action,
                active=main_navigation_active(entry, context),
                children=children,
            )
        )
    return items
