"""Authorization predicate.

Authorization is an injected function ``(identity, action, resource) ->
bool``. Resources are Page or Element records, or a subject key string
naming a whole kind (``"element"``, ``"page"``) or an admin area
(``"admin_pages"``). :class:`Ability` is the role-based implementation
used by the server; any callable with the same signature can replace it.
"""

from dataclasses import dataclass
from typing import Protocol

from tessera.core.content import Element, Page
from tessera.core.store import ContentStore

ROLES = ("guest", "member", "author", "editor", "admin")

READ_ACTIONS = frozenset({"show", "index"})

# Page actions shown in the admin page tree, granted by role
PAGE_PERMISSIONS = ("info", "configure", "copy", "delete", "visit", "create", "edit_content")
AUTHOR_PAGE_ACTIONS = frozenset({"info", "visit", "edit_content", "copy"})
EDITOR_PAGE_ACTIONS = AUTHOR_PAGE_ACTIONS | {"configure", "create", "delete"}


@dataclass(frozen=True)
class Identity:
    """Requesting identity."""

    id: str | None = None
    role: str = "guest"

    def __post_init__(self) -> None:
        if self.role not in ROLES:
            raise ValueError(f"Unknown role: {self.role!r}")

    def has_role(self, role: str) -> bool:
        """Whether this identity's role is at least ``role``."""
        return ROLES.index(self.role) >= ROLES.index(role)


ANONYMOUS = Identity()

Resource = Page | Element | str


class Authorizer(Protocol):
    """Authorization predicate signature."""

    def __call__(self, identity: Identity, action: str, resource: Resource) -> bool: ...


class Ability:
    """Role-based authorization rules.

    - guest: reads public, unrestricted pages and public elements on them
    - member: additionally reads restricted pages
    - author: reads everything, enters admin areas, edits page content
    - editor: author rights plus page configure/create/copy/delete
    - admin: manages everything
    """

    def __init__(self, store: ContentStore) -> None:
        self._store = store

    def __call__(self, identity: Identity, action: str, resource: Resource) -> bool:
        return self.can(identity, action, resource)

    def can(self, identity: Identity, action: str, resource: Resource) -> bool:
        if identity.has_role("admin"):
            return True
        if isinstance(resource, Page):
            return self._can_page(identity, action, resource)
        if isinstance(resource, Element):
            return self._can_element(identity, action, resource)
        return self._can_subject(identity, action, resource)

    def _can_page(self, identity: Identity, action: str, page: Page) -> bool:
        if action in READ_ACTIONS:
            if identity.has_role("author"):
                return True
            if not page.public:
                return False
            return not page.restricted or identity.has_role("member")
        if identity.has_role("editor"):
            return action in EDITOR_PAGE_ACTIONS
        if identity.has_role("author"):
            return action in AUTHOR_PAGE_ACTIONS
        return False

    def _can_element(self, identity: Identity, action: str, element: Element) -> bool:
        if action not in READ_ACTIONS:
            return False
        if identity.has_role("author"):
            return True
        if not element.public:
            return False
        page = self._store.get_page(element.page_id)
        return page is not None and self._can_page(identity, "show", page)

    def _can_subject(self, identity: Identity, action: str, subject: str) -> bool:
        if subject.startswith("admin"):
            return identity.has_role("author") and action in READ_ACTIONS
        return action in READ_ACTIONS


def page_permissions(authorize: Authorizer, identity: Identity, page: Page) -> dict[str, bool]:
    """Map each admin page action to whether the identity may perform it."""
    return {action: authorize(identity, action, page) for action in PAGE_PERMISSIONS}
