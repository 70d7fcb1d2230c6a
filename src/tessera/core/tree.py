"""Page tree serialization.

Builds nested JSON documents for a page (its descendant pages and their
element trees) or for a single element subtree. Every node is checked
against the authorization predicate on its own; a rejected node is
dropped together with its whole subtree.

Traversal uses an explicit stack rather than recursion, and a visited
set keyed by identifier so that corrupted data cannot loop forever.
"""

import logging
from collections.abc import Iterable

from tessera.core.authorization import Authorizer, Identity, page_permissions
from tessera.core.content import Element, Page
from tessera.core.serializer import ElementSerializer, serialize_page_record
from tessera.core.store import ContentStore
from tessera.core.types import ElementId, JSONValue, PageId
from tessera.errors import Forbidden, StructuralIntegrityError

logger = logging.getLogger(__name__)


class TreeSerializer:
    """Serializes page and element trees for one identity.

    Args:
        store: Content store to resolve relations from
        authorize: Authorization predicate
        identity: Requesting identity
        full: Recurse through nested elements; otherwise only a page's
            first-level elements are emitted
        elements: True or None for all first-level elements of each page,
            False for none, or an iterable of element names to include
        max_depth: Optional bound on page and element nesting depth
    """

    def __init__(
        self,
        store: ContentStore,
        authorize: Authorizer,
        identity: Identity,
        *,
        full: bool = True,
        elements: bool | Iterable[str] | None = None,
        max_depth: int | None = None,
    ) -> None:
        self._store = store
        self._authorize = authorize
        self._identity = identity
        self._full = full
        self._max_depth = max_depth
        self._element_serializer = ElementSerializer(store)

        self._include_elements = elements is not False
        self._element_names: frozenset[str] | None = None
        if not isinstance(elements, bool) and elements is not None:
            self._element_names = frozenset(elements)

    def serialize_page(self, page: Page) -> dict[str, JSONValue]:
        """Serialize a page with its descendant pages and elements.

        Raises:
            Forbidden: If the identity may not see the page itself
            StructuralIntegrityError: On cycles, depth overflow or
                nested elements under a non-nestable element
        """
        if not self._authorize(self._identity, "show", page):
            raise Forbidden("page", page.id)
        return {"pages": [self._page_tree(page)]}

    def serialize_element(self, element: Element) -> dict[str, JSONValue]:
        """Serialize an element with its nested element subtree.

        Raises:
            Forbidden: If the identity may not see the element itself
            StructuralIntegrityError: On cycles or malformed nesting
        """
        if not self._authorize(self._identity, "show", element):
            raise Forbidden("element", element.id)
        return self._element_forest([element], set())[0]

    def _page_tree(self, root: Page) -> dict[str, JSONValue]:
        admin = self._authorize(self._identity, "index", "admin_pages")
        visited_pages: set[PageId] = set()
        visited_elements: set[ElementId] = set()

        root_node: dict[str, JSONValue] = {}
        stack: list[tuple[Page, list[JSONValue] | None, int]] = [(root, None, 1)]
        while stack:
            page, siblings, level = stack.pop()
            if page.id in visited_pages:
                raise StructuralIntegrityError(f"Page {page.id} reached twice, page tree is cyclic")
            visited_pages.add(page.id)

            if not self._authorize(self._identity, "show", page):
                logger.debug(f"Pruned page {page.id} for {self._identity}")
                continue
            self._check_depth(level)

            children = self._store.child_pages(page.id)
            node = serialize_page_record(page)
            node["level"] = level
            node["root"] = level == 1
            node["root_or_leaf"] = level == 1 or not children
            if admin:
                node["permissions"] = page_permissions(self._authorize, self._identity, page)
            if self._include_elements:
                node["elements"] = self._element_forest(self._page_elements(page), visited_elements)

            child_nodes: list[JSONValue] = []
            node["children"] = child_nodes
            if siblings is None:
                root_node = node
            else:
                siblings.append(node)
            stack.extend((child, child_nodes, level + 1) for child in reversed(children))

        return root_node

    def _page_elements(self, page: Page) -> list[Element]:
        elements = self._store.page_elements(page.id)
        if self._element_names is None:
            return elements
        return [e for e in elements if e.name in self._element_names]

    def _element_forest(
        self,
        roots: list[Element],
        visited: set[ElementId],
    ) -> list[JSONValue]:
        output: list[JSONValue] = []
        stack = [(element, output, 1) for element in reversed(roots)]
        while stack:
            element, siblings, depth = stack.pop()
            if element.id in visited:
                raise StructuralIntegrityError(
                    f"Element {element.id} reached twice, element tree is cyclic"
                )
            visited.add(element.id)

            if not self._authorize(self._identity, "show", element):
                logger.debug(f"Pruned element {element.id} for {self._identity}")
                continue
            self._check_depth(depth)

            node = self._element_serializer.serialize(element)
            siblings.append(node)

            children = self._store.nested_elements(element.id)
            if children:
                self._check_nestable(element)
            if not self._full:
                continue

            nested: list[JSONValue] = []
            node["nested_elements"] = nested
            stack.extend((child, nested, depth + 1) for child in reversed(children))

        return output

    def _check_nestable(self, element: Element) -> None:
        definition = self._store.definition_for(element)
        if definition is None or not definition.nestable:
            raise StructuralIntegrityError(
                f"Element {element.id} ({element.name}) has nested elements "
                "but its definition is not nestable"
            )

    def _check_depth(self, depth: int) -> None:
        if self._max_depth is not None and depth > self._max_depth:
            raise StructuralIntegrityError(f"Tree exceeds maximum depth of {self._max_depth}")


def find_structural_defects(store: ContentStore) -> list[str]:
    """Scan the store for nesting that no page traversal can reach.

    Reports elements whose parent chain is cyclic or points at a missing
    element, and pages whose parent chain is cyclic or dangling.
    """
    defects: list[str] = []

    for element in store.elements():
        seen: set[ElementId] = set()
        current: Element | None = element
        while current is not None and current.parent_element_id is not None:
            if current.id in seen:
                defects.append(f"Element {element.id} has a cyclic parent chain")
                break
            seen.add(current.id)
            parent = store.get_element(current.parent_element_id)
            if parent is None:
                defects.append(
                    f"Element {current.id} references missing parent {current.parent_element_id}"
                )
                break
            current = parent

    for page in store.pages():
        seen_pages: set[PageId] = set()
        current_page: Page | None = page
        while current_page is not None and current_page.parent_id is not None:
            if current_page.id in seen_pages:
                defects.append(f"Page {page.id} has a cyclic parent chain")
                break
            seen_pages.add(current_page.id)
            parent_page = store.get_page(current_page.parent_id)
            if parent_page is None:
                defects.append(
                    f"Page {current_page.id} references missing parent {current_page.parent_id}"
                )
                break
            current_page = parent_page

    return list(dict.fromkeys(defects))
