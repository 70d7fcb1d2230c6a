"""Tessera - read-only JSON API over page and element content trees."""

from tessera.core.authorization import ANONYMOUS, Ability, Authorizer, Identity
from tessera.core.navigation import NavigationEntry, RequestContext, entry_active
from tessera.core.query import AccessScope
from tessera.core.serializer import ElementSerializer
from tessera.core.store import ContentStore, ContentStoreBuilder, ContentStoreLoader
from tessera.core.tree import TreeSerializer
from tessera.errors import (
    Forbidden,
    IngredientSerializationError,
    NotFound,
    StructuralIntegrityError,
    TesseraError,
)

__all__ = [
    "ANONYMOUS",
    "Ability",
    "AccessScope",
    "Authorizer",
    "ContentStore",
    "ContentStoreBuilder",
    "ContentStoreLoader",
    "ElementSerializer",
    "Forbidden",
    "Identity",
    "IngredientSerializationError",
    "NavigationEntry",
    "NotFound",
    "RequestContext",
    "StructuralIntegrityError",
    "TesseraError",
    "TreeSerializer",
    "entry_active",
]
