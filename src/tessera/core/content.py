"""Content tree data model.

Pages own elements, elements own contents and (when their definition
allows it) nested elements, and each content references one typed
essence holding the stored value. Relations are expressed by identifier
so that the store can keep every entity in flat arena tables.
"""

from dataclasses import dataclass, field, fields
from datetime import date, datetime
from typing import Any, ClassVar

from tessera.core.types import ContentId, ElementId, JSONValue, PageId
from tessera.errors import IngredientSerializationError


@dataclass(frozen=True)
class Page:
    """Page record with nested-set tree position."""

    id: PageId
    name: str
    urlname: str
    language_code: str
    page_layout: str
    title: str = ""
    parent_id: PageId | None = None
    lft: int = 0
    rgt: int = 0
    depth: int = 0
    language_root: bool = False
    public: bool = True
    visible: bool = True
    restricted: bool = False
    locked: bool = False
    tag_list: tuple[str, ...] = ()
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass(frozen=True)
class Element:
    """Element placed on a page, optionally nested inside another element."""

    id: ElementId
    name: str
    page_id: PageId
    position: int
    cell_id: int | None = None
    parent_element_id: ElementId | None = None
    public: bool = True
    tag_list: tuple[str, ...] = ()
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def nested(self) -> bool:
        """Whether this element is a child of another element."""
        return self.parent_element_id is not None


@dataclass(frozen=True)
class ElementDefinition:
    """Shape of an element type.

    An empty ``nestable_elements`` list means the element cannot own
    child elements.
    """

    name: str
    nestable_elements: tuple[str, ...] = ()
    contents: tuple[str, ...] = ()

    @property
    def nestable(self) -> bool:
        return bool(self.nestable_elements)


class Essence:
    """Typed value container attached to a content.

    Subclasses are dataclasses registered under a ``kind`` name and
    implement :meth:`serialized_ingredient`.
    """

    kind: ClassVar[str] = ""

    @property
    def link(self) -> str | None:
        return None

    def serialized_ingredient(self) -> JSONValue:
        """Return the stored value as a JSON-safe scalar or object."""
        raise NotImplementedError

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Essence":
        """Build an essence from raw attributes, ignoring unknown keys."""
        names = {f.name for f in fields(cls)}  # type: ignore[arg-type]
        return cls(**{k: v for k, v in data.items() if k in names})


ESSENCE_TYPES: dict[str, type[Essence]] = {}


def register_essence(cls: type[Essence]) -> type[Essence]:
    """Class decorator adding an essence variant to the registry."""
    if not cls.kind:
        raise ValueError(f"{cls.__name__} must define a kind")
    ESSENCE_TYPES[cls.kind] = cls
    return cls


@register_essence
@dataclass(frozen=True)
class EssenceText(Essence):
    kind: ClassVar[str] = "text"

    body: str | None = None
    link_url: str | None = None

    @property
    def link(self) -> str | None:
        return self.link_url

    def serialized_ingredient(self) -> JSONValue:
        return self.body


@register_essence
@dataclass(frozen=True)
class EssenceRichtext(Essence):
    kind: ClassVar[str] = "richtext"

    body: str | None = None
    stripped_body: str | None = None

    def serialized_ingredient(self) -> JSONValue:
        return self.body


@register_essence
@dataclass(frozen=True)
class EssenceHtml(Essence):
    kind: ClassVar[str] = "html"

    source: str | None = None

    def serialized_ingredient(self) -> JSONValue:
        return self.source


@register_essence
@dataclass(frozen=True)
class EssenceDate(Essence):
    kind: ClassVar[str] = "date"

    value: date | datetime | str | None = None

    def serialized_ingredient(self) -> JSONValue:
        if self.value is None or isinstance(self.value, str):
            return self.value
        return self.value.isoformat()


@register_essence
@dataclass(frozen=True)
class EssenceBoolean(Essence):
    kind: ClassVar[str] = "boolean"

    value: bool | None = None

    def serialized_ingredient(self) -> JSONValue:
        return self.value


@register_essence
@dataclass(frozen=True)
class EssenceSelect(Essence):
    kind: ClassVar[str] = "select"

    value: str | None = None

    def serialized_ingredient(self) -> JSONValue:
        return self.value


@register_essence
@dataclass(frozen=True)
class EssenceLink(Essence):
    kind: ClassVar[str] = "link"

    link_url: str | None = None
    link_title: str | None = None
    link_target: str | None = None

    @property
    def link(self) -> str | None:
        return self.link_url

    def serialized_ingredient(self) -> JSONValue:
        return self.link_url


@register_essence
@dataclass(frozen=True)
class EssencePicture(Essence):
    kind: ClassVar[str] = "picture"

    picture_id: int | None = None
    picture_name: str | None = None
    caption: str | None = None
    title: str | None = None
    alt_tag: str | None = None
    link_url: str | None = None

    @property
    def link(self) -> str | None:
        return self.link_url

    def serialized_ingredient(self) -> JSONValue:
        if self.picture_id is None:
            return None
        picture: dict[str, JSONValue] = {
            "picture_id": self.picture_id,
            "name": self.picture_name,
            "caption": self.caption,
            "title": self.title,
            "alt_tag": self.alt_tag,
        }
        return {k: v for k, v in picture.items() if v is not None}


@register_essence
@dataclass(frozen=True)
class EssenceFile(Essence):
    kind: ClassVar[str] = "file"

    attachment_id: int | None = None
    attachment_name: str | None = None
    title: str | None = None

    def serialized_ingredient(self) -> JSONValue:
        if self.attachment_id is None:
            return None
        return {
            "attachment_id": self.attachment_id,
            "name": self.attachment_name,
            "title": self.title,
        }


@dataclass(frozen=True)
class UnknownEssence(Essence):
    """Placeholder for an essence kind with no registered variant."""

    kind_name: str = ""
    attributes: dict[str, Any] = field(default_factory=dict)

    def serialized_ingredient(self) -> JSONValue:
        raise IngredientSerializationError(f"Unknown essence kind: {self.kind_name!r}")


def build_essence(kind: str, data: dict[str, Any]) -> Essence:
    """Instantiate the registered essence variant for ``kind``."""
    essence_cls = ESSENCE_TYPES.get(kind)
    if essence_cls is None:
        return UnknownEssence(kind_name=kind, attributes=dict(data))
    return essence_cls.from_dict(data)


@dataclass(frozen=True)
class Content:
    """Named content slot of an element.

    ``essence`` is None when the referenced essence could not be
    resolved, which is a data-integrity defect rather than a blank field.
    """

    id: ContentId
    name: str
    element_id: ElementId
    position: int = 0
    essence: Essence | None = None
