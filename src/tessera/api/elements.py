"""Elements API endpoints.

Lists not-nested elements and shows single elements, each with its
authorized nested element subtree.
"""

import logging

from aiohttp import web

from tessera.api.common import (
    access_scope,
    error_response,
    query_bool,
    query_list,
    tree_serializer,
)
from tessera.errors import Forbidden, NotFound, StructuralIntegrityError

logger = logging.getLogger(__name__)


def create_elements_routes() -> list[web.RouteDef]:
    return [
        web.get("/api/elements", list_elements),
        web.get("/api/elements/{id}", get_element),
    ]


async def list_elements(request: web.Request) -> web.Response:
    """Return elements, optionally only those of ``page_id`` or ``named``."""
    scope = access_scope(request)
    elements = scope.elements(
        page_id=request.query.get("page_id") or None,
        named=query_list(request, "named"),
    )
    serializer = tree_serializer(request, scope, full=query_bool(request, "full", True))

    data = []
    for element in elements:
        try:
            data.append(serializer.serialize_element(element))
        except Forbidden:
            logger.debug(f"Skipped element {element.id}: not authorized to show")
        except StructuralIntegrityError as e:
            return error_response(e)
    return web.json_response(data)


async def get_element(request: web.Request) -> web.Response:
    scope = access_scope(request)
    try:
        element = scope.element(request.match_info["id"])
        serializer = tree_serializer(request, scope, full=query_bool(request, "full", True))
        data = serializer.serialize_element(element)
    except (NotFound, Forbidden, StructuralIntegrityError) as e:
        return error_response(e)
    return web.json_response(data)
