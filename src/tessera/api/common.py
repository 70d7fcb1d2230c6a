"""Request helpers shared by API endpoints.

Resolves the requesting identity, binds an access scope to it, and maps
core errors onto JSON error responses.
"""

import logging

from aiohttp import web

from tessera.app_keys import authorizer_key, config_key, store_key
from tessera.core.authorization import ANONYMOUS, Identity
from tessera.core.query import AccessScope
from tessera.core.tree import TreeSerializer
from tessera.errors import Forbidden, NotFound, StructuralIntegrityError

logger = logging.getLogger(__name__)

TRUE_VALUES = frozenset({"1", "true", "yes", "on"})
FALSE_VALUES = frozenset({"0", "false", "no", "off"})


def request_identity(request: web.Request) -> Identity:
    """Look up the bearer token of a request, falling back to anonymous."""
    header = request.headers.get("Authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token:
        return ANONYMOUS
    return request.app[config_key].auth.tokens.get(token.strip(), ANONYMOUS)


def access_scope(request: web.Request) -> AccessScope:
    return AccessScope(
        request.app[store_key],
        request.app[authorizer_key],
        request_identity(request),
    )


def tree_serializer(
    request: web.Request,
    scope: AccessScope,
    *,
    full: bool = True,
    elements: bool | list[str] | None = None,
) -> TreeSerializer:
    return TreeSerializer(
        request.app[store_key],
        request.app[authorizer_key],
        scope.identity,
        full=full,
        elements=elements,
        max_depth=request.app[config_key].serializer.max_depth,
    )


def query_bool(request: web.Request, name: str, default: bool) -> bool:
    """Read a boolean query parameter, using the default for unknown values."""
    value = request.query.get(name)
    if value is None:
        return default
    value = value.strip().lower()
    if value in TRUE_VALUES:
        return True
    if value in FALSE_VALUES:
        return False
    return default


def query_list(request: web.Request, name: str) -> list[str] | None:
    """Read a list parameter given as ``name``, ``name[]`` or both."""
    values = request.query.getall(name, []) + request.query.getall(f"{name}[]", [])
    return values or None


def error_response(
    error: NotFound | Forbidden | StructuralIntegrityError,
) -> web.Response:
    """Map a core error onto a JSON error response."""
    if isinstance(error, NotFound):
        return web.json_response(
            {"error": "Not found", "kind": error.kind, "id": str(error.identifier)},
            status=404,
        )
    if isinstance(error, Forbidden):
        return web.json_response(
            {"error": "Not authorized", "kind": error.kind, "id": str(error.identifier)},
            status=403,
        )
    logger.error(f"Structural integrity error: {error}")
    return web.json_response(
        {"error": "Structural integrity error", "message": str(error)},
        status=500,
    )
