"""Tessera error hierarchy.

All tessera-specific errors inherit from TesseraError for easy catching.
"""


class TesseraError(Exception):
    """Base error for all tessera operations."""


class StoreLoadError(TesseraError):
    """Content data file is missing or malformed."""


class NotFound(TesseraError):
    """Resource or identifier does not resolve."""

    def __init__(self, kind: str, identifier: object) -> None:
        super().__init__(f"{kind} not found: {identifier}")
        self.kind = kind
        self.identifier = identifier


class Forbidden(TesseraError):
    """Resource exists but the identity is not allowed to see it."""

    def __init__(self, kind: str, identifier: object, action: str = "show") -> None:
        super().__init__(f"Not authorized to {action} {kind} {identifier}")
        self.kind = kind
        self.identifier = identifier
        self.action = action


class StructuralIntegrityError(TesseraError):
    """Cyclic or malformed tree detected during traversal."""


class IngredientSerializationError(TesseraError):
    """A content's essence cannot be rendered to a JSON-safe value."""

    error_type = "ingredient_serialization_failure"


class EssenceMissingError(IngredientSerializationError):
    """A content references no resolvable essence."""

    error_type = "essence_missing"
