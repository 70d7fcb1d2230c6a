"""Access-scoped queries over the content store.

Filters narrow a base collection conjunctively, then the authorization
predicate narrows the result further. Single-record lookups tell a
missing record (NotFound) apart from a hidden one (Forbidden).
"""

import logging
from collections.abc import Iterable

from tessera.core.authorization import Authorizer, Identity
from tessera.core.content import Element, Page
from tessera.core.store import ContentStore
from tessera.errors import Forbidden, NotFound

logger = logging.getLogger(__name__)


def parse_names(named: str | Iterable[str] | None) -> frozenset[str] | None:
    """Normalize a name filter given as a string, comma list, or iterable.

    Returns:
        Set of names, or None when no names were given
    """
    if named is None:
        return None
    raw = [named] if isinstance(named, str) else list(named)
    names = frozenset(part.strip() for item in raw for part in item.split(",") if part.strip())
    return names or None


def parse_id(value: object) -> int | None:
    """Parse an identifier filter, returning None when it is not an integer."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().isdecimal():
        return int(value.strip())
    return None


class AccessScope:
    """Queries bound to one identity and authorization predicate."""

    def __init__(self, store: ContentStore, authorize: Authorizer, identity: Identity) -> None:
        self._store = store
        self._authorize = authorize
        self._identity = identity

    @property
    def identity(self) -> Identity:
        return self._identity

    def elements(
        self,
        *,
        page_id: int | str | None = None,
        named: str | Iterable[str] | None = None,
    ) -> list[Element]:
        """List not-nested elements matching every given filter.

        Args:
            page_id: Owning page; a value that is not an integer matches nothing
            named: Element name, comma-separated names, or a list of names

        Returns:
            Elements the identity may index, ordered by page and position
        """
        elements = self._store.not_nested_elements()

        if page_id is not None:
            parsed_id = parse_id(page_id)
            elements = [e for e in elements if parsed_id is not None and e.page_id == parsed_id]

        names = parse_names(named)
        if names is not None:
            elements = [e for e in elements if e.name in names]

        if not self._authorize(self._identity, "manage", "element"):
            elements = [e for e in elements if self._authorize(self._identity, "index", e)]

        return elements

    def pages(
        self,
        *,
        page_layout: str | None = None,
        locale: str | None = None,
    ) -> list[Page]:
        """List pages matching every given filter, in tree order."""
        pages = self._store.pages()
        if page_layout:
            pages = [p for p in pages if p.page_layout == page_layout]
        if locale:
            pages = [p for p in pages if p.language_code == locale]
        return [p for p in pages if self._authorize(self._identity, "index", p)]

    def element(self, element_id: int | str) -> Element:
        """Get one element the identity may see.

        Raises:
            NotFound: If no element has this identifier
            Forbidden: If the element exists but is hidden from the identity
        """
        parsed_id = parse_id(element_id)
        element = self._store.get_element(parsed_id) if parsed_id is not None else None
        if element is None:
            raise NotFound("element", element_id)
        self._authorize_show("element", element.id, element)
        return element

    def page(
        self,
        *,
        page_id: int | str | None = None,
        urlname: str | None = None,
        locale: str | None = None,
    ) -> Page:
        """Get one page by identifier, falling back to (urlname, locale).

        Raises:
            NotFound: If neither the identifier nor the urlname resolves
            Forbidden: If the page exists but is hidden from the identity
        """
        page = None
        parsed_id = parse_id(page_id)
        if parsed_id is not None:
            page = self._store.get_page(parsed_id)
        if page is None and urlname:
            page = self._store.find_page_by_urlname(urlname, locale)
        if page is None:
            raise NotFound("page", page_id if page_id is not None else urlname)
        self._authorize_show("page", page.id, page)
        return page

    def root_page(self, locale: str | None = None) -> Page:
        """Get the language root page for a locale.

        Raises:
            NotFound: If the locale has no root page
            Forbidden: If the root page is hidden from the identity
        """
        page = self._store.root_page(locale)
        if page is None:
            raise NotFound("root page", locale or self._store.default_locale)
        self._authorize_show("page", page.id, page)
        return page

    def _authorize_show(self, kind: str, identifier: int, resource: Page | Element) -> None:
        if not self._authorize(self._identity, "show", resource):
            logger.info(f"Denied show {kind} {identifier} to {self._identity}")
            raise Forbidden(kind, identifier)
