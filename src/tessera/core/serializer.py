"""Element and page record serialization.

Converts content-tree records into JSON-safe dictionaries. Element
ingredients are produced per content; a content that cannot be rendered
is replaced by an error marker so the rest of the element still
serializes.
"""

import logging
import math
from datetime import datetime

from tessera.core.content import Content, Element, Page
from tessera.core.store import ContentStore
from tessera.core.types import JSONValue
from tessera.errors import EssenceMissingError, IngredientSerializationError

logger = logging.getLogger(__name__)


def _timestamp(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def _is_blank(value: JSONValue) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, dict)):
        return not value
    return False


def ensure_json_safe(value: object) -> None:
    """Check that a value is composed only of JSON types.

    Raises:
        IngredientSerializationError: On any other type or a non-finite float
    """
    stack = [value]
    while stack:
        item = stack.pop()
        if item is None or isinstance(item, (str, bool, int)):
            continue
        if isinstance(item, float):
            if not math.isfinite(item):
                raise IngredientSerializationError(f"Non-finite number: {item!r}")
            continue
        if isinstance(item, list):
            stack.extend(item)
            continue
        if isinstance(item, dict):
            for key, child in item.items():
                if not isinstance(key, str):
                    raise IngredientSerializationError(f"Non-string key: {key!r}")
                stack.append(child)
            continue
        raise IngredientSerializationError(f"Value of type {type(item).__name__} is not JSON-safe")


def serialize_content(content: Content) -> dict[str, JSONValue]:
    """Serialize one content to its ingredient.

    Blank fields are dropped, so an empty text yields ``{"name": ...}``.

    Raises:
        EssenceMissingError: If the content has no resolvable essence
        IngredientSerializationError: If the essence cannot be rendered
    """
    essence = content.essence
    if essence is None:
        raise EssenceMissingError(f"Content {content.id} ({content.name}) has no essence")

    try:
        value = essence.serialized_ingredient()
        link = essence.link
    except IngredientSerializationError:
        raise
    except Exception as e:
        raise IngredientSerializationError(
            f"{type(essence).__name__} failed to serialize: {e}"
        ) from e

    ensure_json_safe(value)
    ensure_json_safe(link)

    ingredient: dict[str, JSONValue] = {"name": content.name, "value": value, "link": link}
    return {k: v for k, v in ingredient.items() if not _is_blank(v)}


def ingredient_error(content: Content, error: IngredientSerializationError) -> dict[str, JSONValue]:
    """Build the marker emitted in place of a failed ingredient."""
    return {
        "name": content.name,
        "error": {
            "type": error.error_type,
            "content_id": content.id,
            "message": str(error),
        },
    }


class ElementSerializer:
    """Serializes an element's own fields and ingredients.

    Nested elements are not included here; the tree serializer attaches
    them as a separate ``nested_elements`` relation.
    """

    def __init__(self, store: ContentStore) -> None:
        self._store = store

    def serialize(self, element: Element) -> dict[str, JSONValue]:
        contents = self._store.contents(element.id)
        return {
            "id": element.id,
            "name": element.name,
            "position": element.position,
            "page_id": element.page_id,
            "cell_id": element.cell_id,
            "tag_list": list(element.tag_list),
            "created_at": _timestamp(element.created_at),
            "updated_at": _timestamp(element.updated_at),
            "ingredients": [self._ingredient(element, content) for content in contents],
            "content_ids": [content.id for content in contents],
        }

    def _ingredient(self, element: Element, content: Content) -> dict[str, JSONValue]:
        try:
            return serialize_content(content)
        except IngredientSerializationError as e:
            logger.warning(f"Element {element.id}: ingredient {content.name!r} failed: {e}")
            return ingredient_error(content, e)


def serialize_page_record(page: Page) -> dict[str, JSONValue]:
    """Serialize a page's own fields, without its element tree."""
    return {
        "id": page.id,
        "name": page.name,
        "urlname": page.urlname,
        "title": page.title,
        "language_code": page.language_code,
        "page_layout": page.page_layout,
        "parent_id": page.parent_id,
        "tag_list": list(page.tag_list),
        "created_at": _timestamp(page.created_at),
        "updated_at": _timestamp(page.updated_at),
        "status": {
            "public": page.public,
            "visible": page.visible,
            "restricted": page.restricted,
            "locked": page.locked,
        },
    }
