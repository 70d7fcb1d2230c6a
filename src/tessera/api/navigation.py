"""Navigation API endpoint.

Returns the configured navigation menu annotated with active state for
the controller and action given in the query.
"""

from aiohttp import web

from tessera.api.common import request_identity
from tessera.app_keys import authorizer_key, config_key
from tessera.core.navigation import (
    RequestContext,
    active_entry,
    build_navigation,
    navigate_module,
)


def create_navigation_routes() -> list[web.RouteDef]:
    return [
        web.get("/api/navigation", get_navigation),
    ]


async def get_navigation(request: web.Request) -> web.Response:
    entries = request.app[config_key].navigation
    authorize = request.app[authorizer_key]
    identity = request_identity(request)

    context = RequestContext(
        controller=request.query.get("controller", ""),
        action=request.query.get("action", ""),
        params=dict(request.query),
    )

    def allowed(action: str, subject: str) -> bool:
        return authorize(identity, action, subject)

    items = build_navigation(entries, context, allowed)
    active = active_entry([e for e in entries if allowed(*navigate_module(e))], context)
    return web.json_response(
        {
            "items": [item.to_dict() for item in items],
            "active": active.name if active is not None else None,
        }
    )
