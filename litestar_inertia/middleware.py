from __future__ import annotations

from typing import TYPE_CHECKING, Any, cast

from litestar.datastructures import MutableScopeHeaders
from litestar.enums import ScopeType
from litestar.middleware import AbstractMiddleware
from litestar.status_codes import (
    HTTP_301_MOVED_PERMANENTLY,
    HTTP_302_FOUND,
    HTTP_303_SEE_OTHER,
    HTTP_307_TEMPORARY_REDIRECT,
    HTTP_308_PERMANENT_REDIRECT,
)

from litestar_inertia.request import InertiaRequest
from litestar_inertia.response import InertiaExternalRedirect

if TYPE_CHECKING:
    from litestar.types import ASGIApp, Message, Receive, Scope, Send

    from litestar_inertia.plugin import InertiaPlugin

__all__ = ("InertiaMiddleware", "redirect_on_asset_version_mismatch", "see_other_on_redirect")

REDIRECT_STATUS_CODES = frozenset(
    {HTTP_301_MOVED_PERMANENTLY, HTTP_302_FOUND, HTTP_307_TEMPORARY_REDIRECT, HTTP_308_PERMANENT_REDIRECT},
)
SEE_OTHER_METHODS = frozenset({"PUT", "PATCH", "DELETE"})


def redirect_on_asset_version_mismatch(request: InertiaRequest[Any, Any, Any]) -> InertiaExternalRedirect | None:
    """Return a location response when the client was built from other assets than the server.

    Only GET Inertia visits to component routes that send a version are checked, and only
    when the server has one.
    """
    if not request.is_inertia or not request.inertia_enabled or request.method != "GET":
        return None
    inertia_version = request.inertia_version
    if inertia_version is None:
        return None
    inertia_plugin = cast("InertiaPlugin", request.app.plugins.get("InertiaPlugin"))
    current_version = inertia_plugin.asset_version
    if current_version is None or inertia_version == current_version:
        return None
    request.logger.debug(
        "Inertia asset version mismatch (client %s, server %s), forcing a full visit to %s",
        inertia_version,
        current_version,
        request.url,
    )
    return InertiaExternalRedirect(request, redirect_to=str(request.url))


def see_other_on_redirect(request: InertiaRequest[Any, Any, Any], send: Send) -> Send:
    """Wrap ``send`` so redirects answering PUT, PATCH and DELETE Inertia requests use 303 See Other.

    Browsers follow a 303 with a GET, other redirect codes may replay the original verb.
    Requests that are not Inertia requests or use another verb get ``send`` back unchanged.
    """
    if not request.is_inertia or request.method not in SEE_OTHER_METHODS:
        return send

    async def wrapped_send(message: Message) -> None:
        if message["type"] == "http.response.start" and message["status"] in REDIRECT_STATUS_CODES:
            headers = MutableScopeHeaders.from_message(message)
            if headers.get("location") is not None:
                request.logger.debug(
                    "Rewriting %s redirect to %s for Inertia %s request",
                    message["status"],
                    HTTP_303_SEE_OTHER,
                    request.method,
                )
                message["status"] = HTTP_303_SEE_OTHER
        await send(message)

    return wrapped_send


class InertiaMiddleware(AbstractMiddleware):
    """Middleware for handling Inertia.js protocol requirements.

    This middleware:
    1. Answers GET visits made with stale assets with a 409 Conflict and an ``X-Inertia-Location`` header
    2. Turns redirects answering PUT, PATCH and DELETE Inertia requests into 303 See Other
    """

    scopes = {ScopeType.HTTP}

    def __init__(self, app: ASGIApp) -> None:
        super().__init__(app)
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        request: InertiaRequest[Any, Any, Any] = InertiaRequest(scope=scope)
        redirect = redirect_on_asset_version_mismatch(request)
        if redirect is not None:
            response = redirect.to_asgi_response(app=None, request=request)  # pyright: ignore[reportUnknownMemberType]
            await response(scope, receive, send)
        else:
            await self.app(scope, receive, see_other_on_redirect(request, send))
