"""Core type definitions."""

from typing import NewType

# Identifiers live in separate arena tables; distinct types catch mix-ups
PageId = NewType("PageId", int)
ElementId = NewType("ElementId", int)
ContentId = NewType("ContentId", int)

# JSON-safe value produced by serializers
JSONValue = str | int | float | bool | None | list["JSONValue"] | dict[str, "JSONValue"]
