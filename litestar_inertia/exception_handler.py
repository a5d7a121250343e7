from __future__ import annotations

import re
from typing import TYPE_CHECKING, Any, cast

from litestar.exceptions import (
    HTTPException,
    ImproperlyConfiguredException,
    InternalServerException,
    NotAuthorizedException,
    PermissionDeniedException,
)
from litestar.exceptions.responses import (
    create_debug_response,  # pyright: ignore[reportUnknownVariableType]
    create_exception_response,  # pyright: ignore[reportUnknownVariableType]
)
from litestar.plugins.flash import flash
from litestar.status_codes import (
    HTTP_400_BAD_REQUEST,
    HTTP_401_UNAUTHORIZED,
    HTTP_422_UNPROCESSABLE_ENTITY,
    HTTP_500_INTERNAL_SERVER_ERROR,
)

from litestar_inertia.helpers import error
from litestar_inertia.request import get_inertia_details
from litestar_inertia.response import InertiaBack, InertiaRedirect

if TYPE_CHECKING:
    from litestar.connection import Request
    from litestar.connection.base import AuthT, StateT, UserT
    from litestar.response import Response

    from litestar_inertia.plugin import InertiaPlugin

__all__ = ("create_inertia_exception_response", "exception_to_http_response")

FIELD_ERR_RE = re.compile(r"field `(.+)`$")


def exception_to_http_response(request: Request[UserT, AuthT, StateT], exc: Exception) -> Response[Any]:
    """Handler for all exceptions raised while serving a request.

    Requests that are neither Inertia requests nor routed to an Inertia component get
    Litestar's standard exception responses.
    """
    details = get_inertia_details(request)
    if not details and details.route_component is None:
        if isinstance(exc, HTTPException):
            return cast("Response[Any]", create_exception_response(request, exc))
        if request.app.debug:
            return cast("Response[Any]", create_debug_response(request, exc))
        return cast("Response[Any]", create_exception_response(request, InternalServerException()))
    return create_inertia_exception_response(request, exc)


def _record_field_errors(request: Request[UserT, AuthT, StateT], extras: Any, detail: str) -> None:
    if not extras or not isinstance(extras, list):
        return
    for message in cast("list[Any]", extras):
        if not isinstance(message, dict):
            continue
        key = cast("str | None", message.get("key"))
        default_field = f"root.{key}" if key is not None else "root"
        error_detail = cast("str", message.get("message", detail))
        match = FIELD_ERR_RE.search(error_detail)
        error(request, match.group(1) if match else default_field, error_detail)


def create_inertia_exception_response(request: Request[UserT, AuthT, StateT], exc: Exception) -> Response[Any]:
    """Create the inertia exception response.

    The exception detail is flashed as an ``error`` message and validation errors are stored
    for the next page. Bad requests, validation failures and permission errors send the visitor back,
    unauthorized requests go to the configured login location.
    """
    status_code = getattr(exc, "status_code", HTTP_500_INTERNAL_SERVER_ERROR)
    detail = cast("str", getattr(exc, "detail", ""))
    inertia_plugin = cast("InertiaPlugin", request.app.plugins.get("InertiaPlugin"))
    if detail:
        try:
            flash(request, detail, category="error")
        except (AttributeError, ImproperlyConfiguredException):
            msg = "Unable to set `flash` session state.  A valid session was not found for this request."
            request.logger.warning(msg)
    _record_field_errors(request, getattr(exc, "extra", None), detail)

    if status_code in {HTTP_422_UNPROCESSABLE_ENTITY, HTTP_400_BAD_REQUEST} or isinstance(
        exc,
        PermissionDeniedException,
    ):
        return InertiaBack(request)
    redirect_to = inertia_plugin.config.redirect_unauthorized_to
    if (
        (status_code == HTTP_401_UNAUTHORIZED or isinstance(exc, NotAuthorizedException))
        and redirect_to is not None
        and request.url.path != redirect_to
    ):
        return InertiaRedirect(request, redirect_to=redirect_to)
    if isinstance(exc, HTTPException):
        return cast("Response[Any]", create_exception_response(request, exc))
    request.logger.error("Unhandled exception while serving an Inertia request", exc_info=exc)
    return cast("Response[Any]", create_exception_response(request, InternalServerException()))
