"""Pages API endpoints.

Lists pages, shows a page by id or by urlname and locale, and renders
a page's nested tree.
"""

from aiohttp import web

from tessera.api.common import (
    access_scope,
    error_response,
    query_bool,
    tree_serializer,
)
from tessera.core.query import parse_names
from tessera.core.serializer import serialize_page_record
from tessera.errors import Forbidden, NotFound, StructuralIntegrityError


def create_pages_routes() -> list[web.RouteDef]:
    # Order matters: the urlname route would otherwise swallow "nested"
    return [
        web.get("/api/pages", list_pages),
        web.get("/api/pages/nested", get_nested_page),
        web.get(r"/api/pages/{page_id:\d+}/nested", get_nested_page),
        web.get("/api/pages/{id_or_urlname:.+}", get_page),
    ]


async def list_pages(request: web.Request) -> web.Response:
    scope = access_scope(request)
    pages = scope.pages(
        page_layout=request.query.get("page_layout") or None,
        locale=request.query.get("locale") or None,
    )
    return web.json_response([serialize_page_record(page) for page in pages])


async def get_page(request: web.Request) -> web.Response:
    """Return a page by numeric id, falling back to its urlname."""
    value = request.match_info["id_or_urlname"]
    scope = access_scope(request)
    try:
        page = scope.page(
            page_id=value,
            urlname=value,
            locale=request.query.get("locale") or None,
        )
    except (NotFound, Forbidden) as e:
        return error_response(e)
    return web.json_response(serialize_page_record(page))


async def get_nested_page(request: web.Request) -> web.Response:
    """Return the page tree of ``page_id``, or of the locale's root page."""
    scope = access_scope(request)
    locale = request.query.get("locale") or None
    page_id = request.match_info.get("page_id")
    try:
        if page_id is not None:
            page = scope.page(page_id=page_id)
        else:
            page = scope.root_page(locale)
        serializer = tree_serializer(
            request,
            scope,
            full=query_bool(request, "full", True),
            elements=_elements_option(request),
        )
        data = serializer.serialize_page(page)
    except (NotFound, Forbidden, StructuralIntegrityError) as e:
        return error_response(e)
    return web.json_response(data)


def _elements_option(request: web.Request) -> bool | list[str]:
    """Parse ``elements``: absent or "true" for all, "false" for none, or names."""
    value = request.query.get("elements")
    if value is None or value.strip().lower() == "true":
        return True
    if value.strip().lower() == "false":
        return False
    names = parse_names(value)
    return sorted(names) if names else True
