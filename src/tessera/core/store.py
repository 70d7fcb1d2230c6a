"""Content store with identifier lookups.

Keeps pages, elements and contents in flat arena tables keyed by
identifier. Tree relations (child pages, page elements, nested elements)
are tracked as ordered identifier lists so traversals never follow
embedded object references.
"""

import json
import logging
from collections import defaultdict
from datetime import datetime
from pathlib import Path
from typing import Any

from tessera.core.content import (
    Content,
    Element,
    ElementDefinition,
    Page,
    build_essence,
)
from tessera.core.types import ContentId, ElementId, PageId
from tessera.errors import StoreLoadError, StructuralIntegrityError

logger = logging.getLogger(__name__)


class ContentStore:
    """Read-only content tables with ordered relation indexes."""

    __slots__ = (
        "_child_pages",
        "_children",
        "_contents",
        "_default_locale",
        "_definitions",
        "_elements",
        "_page_elements",
        "_pages",
        "_urlname_index",
    )

    def __init__(
        self,
        pages: list[Page],
        elements: list[Element],
        contents: list[Content],
        definitions: list[ElementDefinition],
        *,
        default_locale: str = "en",
    ) -> None:
        """Initialize store and build relation indexes.

        Args:
            pages: All pages
            elements: All elements, nested or not
            contents: All contents
            definitions: Element definitions by name
            default_locale: Locale used when a lookup does not name one

        Raises:
            StructuralIntegrityError: On duplicate identifiers or urlnames
        """
        self._default_locale = default_locale
        self._pages: dict[PageId, Page] = _index_unique(pages, "page")
        self._elements: dict[ElementId, Element] = _index_unique(elements, "element")
        self._definitions = {d.name: d for d in definitions}

        self._urlname_index: dict[tuple[str, str], PageId] = {}
        self._child_pages: dict[PageId | None, list[PageId]] = defaultdict(list)
        for page in sorted(pages, key=lambda p: (p.lft, p.id)):
            key = (page.language_code, page.urlname)
            if key in self._urlname_index:
                raise StructuralIntegrityError(
                    f"Duplicate urlname {page.urlname!r} for locale {page.language_code!r}"
                )
            self._urlname_index[key] = page.id
            self._child_pages[page.parent_id].append(page.id)

        self._page_elements: dict[PageId, list[ElementId]] = defaultdict(list)
        self._children: dict[ElementId, list[ElementId]] = defaultdict(list)
        for element in sorted(elements, key=lambda e: (e.position, e.id)):
            if element.parent_element_id is None:
                self._page_elements[element.page_id].append(element.id)
            else:
                self._children[element.parent_element_id].append(element.id)

        self._contents: dict[ElementId, list[Content]] = defaultdict(list)
        seen: set[ContentId] = set()
        for content in sorted(contents, key=lambda c: (c.position, c.id)):
            if content.id in seen:
                raise StructuralIntegrityError(f"Duplicate content id {content.id}")
            seen.add(content.id)
            self._contents[content.element_id].append(content)

    @property
    def default_locale(self) -> str:
        return self._default_locale

    def get_page(self, page_id: int) -> Page | None:
        return self._pages.get(PageId(page_id))

    def find_page_by_urlname(self, urlname: str, locale: str | None = None) -> Page | None:
        """Get page by its locale-scoped urlname.

        Args:
            urlname: Page slug, with or without a leading slash
            locale: Language code, defaults to the store's default locale

        Returns:
            Page if found, None otherwise
        """
        key = (locale or self._default_locale, urlname.strip("/"))
        page_id = self._urlname_index.get(key)
        if page_id is None:
            return None
        return self._pages[page_id]

    def root_page(self, locale: str | None = None) -> Page | None:
        """Get the language root page for a locale."""
        code = locale or self._default_locale
        for page in self.pages():
            if page.language_code == code and page.language_root:
                return page
        return None

    def pages(self) -> list[Page]:
        """All pages in tree order."""
        return sorted(self._pages.values(), key=lambda p: (p.lft, p.id))

    def child_pages(self, page_id: PageId) -> list[Page]:
        return [self._pages[i] for i in self._child_pages.get(page_id, [])]

    def get_element(self, element_id: int) -> Element | None:
        return self._elements.get(ElementId(element_id))

    def elements(self) -> list[Element]:
        """All elements ordered by page and position."""
        return sorted(self._elements.values(), key=lambda e: (e.page_id, e.position, e.id))

    def not_nested_elements(self) -> list[Element]:
        return [e for e in self.elements() if not e.nested]

    def page_elements(self, page_id: PageId) -> list[Element]:
        """First-level elements of a page in position order."""
        return [self._elements[i] for i in self._page_elements.get(page_id, [])]

    def nested_elements(self, element_id: ElementId) -> list[Element]:
        """Direct children of an element in position order."""
        return [self._elements[i] for i in self._children.get(element_id, [])]

    def contents(self, element_id: ElementId) -> list[Content]:
        """Own contents of an element in position order."""
        return list(self._contents.get(element_id, []))

    def definition_for(self, element: Element) -> ElementDefinition | None:
        return self._definitions.get(element.name)


def _index_unique(records: list[Any], kind: str) -> dict[Any, Any]:
    index: dict[Any, Any] = {}
    for record in records:
        if record.id in index:
            raise StructuralIntegrityError(f"Duplicate {kind} id {record.id}")
        index[record.id] = record
    return index


class ContentStoreBuilder:
    """Builder for constructing ContentStore instances."""

    def __init__(self, *, default_locale: str = "en") -> None:
        self._default_locale = default_locale
        self._pages: list[Page] = []
        self._elements: list[Element] = []
        self._contents: list[Content] = []
        self._definitions: list[ElementDefinition] = []

    def add_definition(self, definition: ElementDefinition) -> "ContentStoreBuilder":
        self._definitions.append(definition)
        return self

    def add_page(self, page: Page) -> "ContentStoreBuilder":
        self._pages.append(page)
        return self

    def add_element(self, element: Element) -> "ContentStoreBuilder":
        self._elements.append(element)
        return self

    def add_content(self, content: Content) -> "ContentStoreBuilder":
        self._contents.append(content)
        return self

    def build(self) -> ContentStore:
        """Build the ContentStore instance."""
        return ContentStore(
            pages=self._pages,
            elements=self._elements,
            contents=self._contents,
            definitions=self._definitions,
            default_locale=self._default_locale,
        )


class ContentStoreLoader:
    """Loads a ContentStore from a JSON data file.

    The file holds four top-level lists: ``definitions``, ``pages``,
    ``elements`` and ``contents``. A content names its essence variant in
    ``essence_type`` and carries its attributes in ``essence``; a content
    with no ``essence`` object is loaded with an unresolved essence.
    """

    def __init__(self, data_file: Path, *, default_locale: str = "en") -> None:
        self._data_file = data_file
        self._default_locale = default_locale

    @property
    def data_file(self) -> Path:
        return self._data_file

    def load(self) -> ContentStore:
        """Read and parse the data file.

        Raises:
            StoreLoadError: If the file is missing or malformed
            StructuralIntegrityError: If identifiers or urlnames collide
        """
        if not self._data_file.exists():
            raise StoreLoadError(f"Data file not found: {self._data_file}")

        try:
            data = json.loads(self._data_file.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise StoreLoadError(f"Invalid JSON in {self._data_file}: {e}") from e

        if not isinstance(data, dict):
            raise StoreLoadError("Data file must contain a JSON object")

        builder = ContentStoreBuilder(default_locale=self._default_locale)
        try:
            for raw in _section(data, "definitions"):
                builder.add_definition(_parse_definition(raw))
            for raw in _section(data, "pages"):
                builder.add_page(_parse_page(raw))
            for raw in _section(data, "elements"):
                builder.add_element(_parse_element(raw))
            for raw in _section(data, "contents"):
                builder.add_content(_parse_content(raw))
        except (KeyError, TypeError, ValueError) as e:
            raise StoreLoadError(f"Malformed record in {self._data_file}: {e}") from e

        store = builder.build()
        logger.info(
            f"Loaded {len(store.pages())} pages and {len(store.elements())} elements "
            f"from {self._data_file}"
        )
        return store


def _section(data: dict[str, Any], name: str) -> list[dict[str, Any]]:
    items = data.get(name, [])
    if not isinstance(items, list):
        raise StoreLoadError(f"{name} must be a list")
    for item in items:
        if not isinstance(item, dict):
            raise StoreLoadError(f"{name} items must be objects")
    return items


def _parse_datetime(value: object) -> datetime | None:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValueError(f"timestamp must be a string, got {value!r}")
    return datetime.fromisoformat(value)


def _parse_definition(raw: dict[str, Any]) -> ElementDefinition:
    return ElementDefinition(
        name=str(raw["name"]),
        nestable_elements=tuple(raw.get("nestable_elements") or ()),
        contents=tuple(c["name"] if isinstance(c, dict) else c for c in raw.get("contents") or ()),
    )


def _parse_page(raw: dict[str, Any]) -> Page:
    parent_id = raw.get("parent_id")
    return Page(
        id=PageId(int(raw["id"])),
        name=str(raw["name"]),
        urlname=str(raw["urlname"]),
        language_code=str(raw["language_code"]),
        page_layout=str(raw["page_layout"]),
        title=str(raw.get("title") or ""),
        parent_id=PageId(int(parent_id)) if parent_id is not None else None,
        lft=int(raw.get("lft", 0)),
        rgt=int(raw.get("rgt", 0)),
        depth=int(raw.get("depth", 0)),
        language_root=bool(raw.get("language_root", False)),
        public=bool(raw.get("public", True)),
        visible=bool(raw.get("visible", True)),
        restricted=bool(raw.get("restricted", False)),
        locked=bool(raw.get("locked", False)),
        tag_list=tuple(raw.get("tag_list") or ()),
        created_at=_parse_datetime(raw.get("created_at")),
        updated_at=_parse_datetime(raw.get("updated_at")),
    )


def _parse_element(raw: dict[str, Any]) -> Element:
    parent = raw.get("parent_element_id")
    cell_id = raw.get("cell_id")
    return Element(
        id=ElementId(int(raw["id"])),
        name=str(raw["name"]),
        page_id=PageId(int(raw["page_id"])),
        position=int(raw.get("position", 0)),
        cell_id=int(cell_id) if cell_id is not None else None,
        parent_element_id=ElementId(int(parent)) if parent is not None else None,
        public=bool(raw.get("public", True)),
        tag_list=tuple(raw.get("tag_list") or ()),
        created_at=_parse_datetime(raw.get("created_at")),
        updated_at=_parse_datetime(raw.get("updated_at")),
    )


def _parse_content(raw: dict[str, Any]) -> Content:
    essence_raw = raw.get("essence")
    essence = None
    if essence_raw is not None:
        if not isinstance(essence_raw, dict):
            raise ValueError("essence must be an object")
        essence = build_essence(str(raw.get("essence_type", "")), essence_raw)
    return Content(
        id=ContentId(int(raw["id"])),
        name=str(raw["name"]),
        element_id=ElementId(int(raw["element_id"])),
        position=int(raw.get("position", 0)),
        essence=essence,
    )
