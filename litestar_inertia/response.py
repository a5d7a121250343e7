from __future__ import annotations

import itertools
from mimetypes import guess_type
from pathlib import PurePath
from typing import TYPE_CHECKING, Any, Iterable, Mapping, TypeVar, cast
from urllib.parse import quote, urlparse

from litestar import MediaType, Request, Response
from litestar.datastructures.cookie import Cookie
from litestar.exceptions import ImproperlyConfiguredException
from litestar.response import Redirect
from litestar.response.base import ASGIResponse
from litestar.serialization import get_serializer
from litestar.status_codes import (
    HTTP_200_OK,
    HTTP_302_FOUND,
    HTTP_303_SEE_OTHER,
    HTTP_307_TEMPORARY_REDIRECT,
    HTTP_409_CONFLICT,
)
from litestar.utils.empty import value_or_default
from litestar.utils.helpers import get_enum_string_value
from litestar.utils.scope.state import ScopeState
from markupsafe import Markup, escape

from litestar_inertia._utils import get_headers
from litestar_inertia.helpers import filter_partial_props, get_shared_props, render_props
from litestar_inertia.request import InertiaDetails, get_inertia_details
from litestar_inertia.types import InertiaHeaderType, PageProps

if TYPE_CHECKING:
    from litestar.app import Litestar
    from litestar.background_tasks import BackgroundTask, BackgroundTasks
    from litestar.connection.base import AuthT, StateT, UserT
    from litestar.types import ResponseCookies, ResponseHeaders, TypeEncodersMap

    from litestar_inertia.plugin import InertiaPlugin

__all__ = (
    "InertiaBack",
    "InertiaExternalRedirect",
    "InertiaRedirect",
    "InertiaResponse",
    "InertiaRouteRedirect",
)

T = TypeVar("T")

_LOCATION_SAFE_CHARS = "/#%[]=:;$&()+,!?*@'~"


def _get_redirect_url(request: Request[Any, Any, Any], url: str | None) -> str:
    """Return a safe redirect URL, falling back to base_url when invalid.

    Relative urls and absolute urls on the request's host are kept.
    """
    base_url = str(request.base_url)
    if not url:
        return base_url
    parsed = urlparse(url)
    if not parsed.scheme and not parsed.netloc:
        return url
    if parsed.scheme not in {"http", "https"} or parsed.netloc != urlparse(base_url).netloc:
        return base_url
    return url


class InertiaResponse(Response[T]):
    """Inertia Response"""

    def __init__(
        self,
        content: T,
        *,
        template_name: str | None = None,
        template_str: str | None = None,
        background: BackgroundTask | BackgroundTasks | None = None,
        context: dict[str, Any] | None = None,
        cookies: ResponseCookies | None = None,
        encoding: str = "utf-8",
        headers: ResponseHeaders | None = None,
        media_type: MediaType | str | None = None,
        status_code: int = HTTP_200_OK,
        type_encoders: TypeEncodersMap | None = None,
    ) -> None:
        """Handle the rendering of a given template into a bytes string.

        Args:
            content: A value for the response body that will be rendered into bytes string.
            template_name: Path-like name for the template to be rendered, e.g. ``index.html``.
            template_str: A string representing the template, e.g. ``tmpl = "Hello <strong>World</strong>"``.
            background: A :class:`BackgroundTask <.background_tasks.BackgroundTask>` instance or
                :class:`BackgroundTasks <.background_tasks.BackgroundTasks>` to execute after the response is finished.
                Defaults to ``None``.
            context: A dictionary of key/value pairs to be passed to the temple engine's render method.
            cookies: A list of :class:`Cookie <.datastructures.Cookie>` instances to be set under the response
                ``Set-Cookie`` header.
            encoding: Content encoding
            headers: A string keyed dictionary of response headers. Header keys are insensitive.
            media_type: A string or member of the :class:`MediaType <.enums.MediaType>` enum. If not set, try to infer
                the media type based on the template name. If this fails, fall back to ``text/plain``.
            status_code: A value for the response HTTP status code.
            type_encoders: A mapping of types to callables that transform them into types supported for serialization.
        """
        if template_name and template_str:
            msg = "Either template_name or template_str must be provided, not both."
            raise ValueError(msg)
        self.content = content
        self.background = background
        self.cookies: list[Cookie] = (
            [Cookie(key=key, value=value) for key, value in cookies.items()]
            if isinstance(cookies, Mapping)
            else list(cookies or [])
        )
        self.encoding = encoding
        self.headers: dict[str, Any] = (
            dict(headers) if isinstance(headers, Mapping) else {h.name: h.value for h in headers or {}}
        )
        self.media_type = media_type
        self.status_code = status_code
        self.response_type_encoders = {**(self.type_encoders or {}), **(type_encoders or {})}
        self.context = context or {}
        self.template_name = template_name
        self.template_str = template_str

    def create_template_context(
        self,
        request: Request[UserT, AuthT, StateT],
        page_props: PageProps,
        type_encoders: TypeEncodersMap | None = None,
        app_selector: str = "app",
    ) -> dict[str, Any]:
        """Create a context object for the template.

        Args:
            request: A :class:`Request <.connection.Request>` instance.
            page_props: A formatted object to return the inertia configuration.
            type_encoders: A mapping of types to callables that transform them into types supported for serialization.
            app_selector: The id of the element the client side app mounts on.

        Returns:
            A dictionary holding the template context
        """
        csrf_token = value_or_default(ScopeState.from_scope(request.scope).csrf_token, "")
        page = page_props.to_dict()
        inertia_props = self.render(page, MediaType.JSON, get_serializer(type_encoders)).decode()
        return {
            **self.context,
            "inertia": inertia_props,
            "inertia_app": Markup(f'<div id="{escape(app_selector)}" data-page="{escape(inertia_props)}"></div>'),
            "page": page,
            "request": request,
            "csrf_input": Markup(f'<input type="hidden" name="_csrf_token" value="{escape(csrf_token)}" />'),
        }

    def _build_page_props(
        self,
        request: Request[UserT, AuthT, StateT],
        inertia_details: InertiaDetails,
        inertia_plugin: InertiaPlugin,
    ) -> PageProps:
        props = get_shared_props(request)
        if isinstance(self.content, Mapping):
            props.update(cast("Mapping[str, Any]", self.content))
        elif self.content is not None:
            props["content"] = self.content

        is_partial = inertia_details.is_partial_render
        if is_partial:
            props = filter_partial_props(props, inertia_details.partial_keys)
        props = render_props(props, partial=is_partial, portal=inertia_plugin.portal)

        return PageProps(
            component=cast("str", inertia_details.route_component),
            props=props,
            version=inertia_plugin.asset_version,
            url=inertia_details.requested_url,
        )

    def _render_template(
        self,
        request: Request[UserT, AuthT, StateT],
        page_props: PageProps,
        type_encoders: TypeEncodersMap | None,
        inertia_plugin: InertiaPlugin,
    ) -> bytes:
        template_engine = request.app.template_engine
        if not template_engine:
            msg = "Template engine is not configured"
            raise ImproperlyConfiguredException(msg)
        context = self.create_template_context(
            request,
            page_props,
            type_encoders,
            app_selector=inertia_plugin.config.app_selector,
        )
        if self.template_str is not None:
            return template_engine.render_string(self.template_str, context).encode(self.encoding)
        template_name = self.template_name or inertia_plugin.config.root_template
        template = template_engine.get_template(template_name)
        return template.render(**context).encode(self.encoding)

    def _determine_media_type(self, media_type: MediaType | str | None) -> MediaType | str:
        if media_type:
            return media_type
        if self.template_name:
            for suffix in PurePath(self.template_name).suffixes:
                if _type := guess_type(f"name{suffix}")[0]:
                    return _type
            return MediaType.TEXT
        return MediaType.HTML

    def to_asgi_response(
        self,
        app: Litestar | None,
        request: Request[UserT, AuthT, StateT],
        *,
        background: BackgroundTask | BackgroundTasks | None = None,
        cookies: Iterable[Cookie] | None = None,
        encoded_headers: Iterable[tuple[bytes, bytes]] | None = None,
        headers: dict[str, str] | None = None,
        is_head_response: bool = False,
        media_type: MediaType | str | None = None,
        status_code: int | None = None,
        type_encoders: TypeEncodersMap | None = None,
    ) -> ASGIResponse:
        inertia_details = get_inertia_details(cast("Request[Any, Any, Any]", request))
        is_inertia = bool(inertia_details)
        inertia_enabled = inertia_details.route_component is not None

        headers = {**headers, **self.headers} if headers is not None else dict(self.headers)
        cookies = self.cookies if cookies is None else itertools.chain(self.cookies, cookies)
        type_encoders = (
            {**type_encoders, **(self.response_type_encoders or {})} if type_encoders else self.response_type_encoders
        )
        if not inertia_enabled:
            resolved_media_type = get_enum_string_value(self.media_type or media_type or MediaType.JSON)
            return ASGIResponse(
                background=self.background or background,
                body=self.render(self.content, resolved_media_type, get_serializer(type_encoders)),
                cookies=cookies,
                encoded_headers=encoded_headers,
                encoding=self.encoding,
                headers=headers,
                is_head_response=is_head_response,
                media_type=resolved_media_type,
                status_code=self.status_code or status_code,
            )

        inertia_plugin = cast("InertiaPlugin", request.app.plugins.get("InertiaPlugin"))
        page_props = self._build_page_props(request, inertia_details, inertia_plugin)
        headers["Vary"] = "Accept"

        if is_inertia:
            headers.update(get_headers(InertiaHeaderType(enabled=True)))
            resolved_media_type = get_enum_string_value(self.media_type or media_type or MediaType.JSON)
            body = self.render(page_props.to_dict(), resolved_media_type, get_serializer(type_encoders))
        else:
            resolved_media_type = get_enum_string_value(self._determine_media_type(media_type))
            body = self._render_template(request, page_props, type_encoders, inertia_plugin)

        return ASGIResponse(
            background=self.background or background,
            body=body,
            cookies=cookies,
            encoded_headers=encoded_headers,
            encoding=self.encoding,
            headers=headers,
            is_head_response=is_head_response,
            media_type=resolved_media_type,
            status_code=self.status_code or status_code,
        )


class InertiaExternalRedirect(Response[Any]):
    """Full page visit to a location, possibly outside the application.

    Inertia clients receive a 409 Conflict carrying the url in the ``X-Inertia-Location`` header
    and perform the visit with ``window.location``. Other clients receive an ordinary redirect.
    """

    def __init__(
        self,
        request: Request[Any, Any, Any],
        redirect_to: str,
        **kwargs: Any,
    ) -> None:
        """Initialize the location response.

        Args:
            request: The request being answered.
            redirect_to: The url to visit.
            **kwargs: Additional keyword arguments passed to the Response constructor.
        """
        location = quote(redirect_to, safe=_LOCATION_SAFE_CHARS)
        if get_inertia_details(request):
            status_code = HTTP_409_CONFLICT
            headers = get_headers(InertiaHeaderType(location=location))
        else:
            status_code = HTTP_302_FOUND
            headers = {"Location": location}
        super().__init__(
            content=kwargs.pop("content", b""),
            status_code=status_code,
            headers={**kwargs.pop("headers", {}), **headers},
            **kwargs,
        )


class InertiaRedirect(Redirect):
    """Redirect to a specified URL with same-origin validation."""

    def __init__(
        self,
        request: Request[Any, Any, Any],
        redirect_to: str,
        **kwargs: Any,
    ) -> None:
        """Initialize the redirect.

        GET requests are redirected with a 307, every other verb with a 303 so the
        client follows up with a GET.

        Args:
            request: The request object.
            redirect_to: The URL to redirect to. Must be same-origin or relative.
            **kwargs: Additional keyword arguments passed to the Redirect constructor.
        """
        super().__init__(  # pyright: ignore[reportUnknownMemberType]
            path=_get_redirect_url(request, redirect_to),
            status_code=HTTP_307_TEMPORARY_REDIRECT if request.method == "GET" else HTTP_303_SEE_OTHER,
            **kwargs,
        )


class InertiaRouteRedirect(InertiaRedirect):
    """Redirect to a named route."""

    def __init__(
        self,
        request: Request[Any, Any, Any],
        route_name: str,
        path_parameters: dict[str, Any] | None = None,
        **kwargs: Any,
    ) -> None:
        """Initialize the redirect.

        Args:
            request: The request object.
            route_name: The name of the route handler to redirect to.
            path_parameters: Values for the path parameters of the route.
            **kwargs: Additional keyword arguments passed to the Redirect constructor.
        """
        super().__init__(request, request.app.route_reverse(route_name, **(path_parameters or {})), **kwargs)


class InertiaBack(Redirect):
    """Redirect back to the previous page using the Referer header."""

    def __init__(
        self,
        request: Request[Any, Any, Any],
        **kwargs: Any,
    ) -> None:
        """Initialize the redirect.

        A missing or cross-origin ``Referer`` falls back to the application's base url.

        Args:
            request: The request object.
            **kwargs: Additional keyword arguments passed to the Redirect constructor.
        """
        super().__init__(  # pyright: ignore[reportUnknownMemberType]
            path=_get_redirect_url(request, get_inertia_details(request).referer),
            status_code=HTTP_307_TEMPORARY_REDIRECT if request.method == "GET" else HTTP_303_SEE_OTHER,
            **kwargs,
        )
