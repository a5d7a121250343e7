from __future__ import annotations

from functools import cached_property
from typing import TYPE_CHECKING, Any, cast
from urllib.parse import unquote

from litestar import Request
from litestar.connection.base import (
    AuthT,
    StateT,
    UserT,
    empty_receive,
    empty_send,
)

from litestar_inertia._utils import InertiaHeaders

__all__ = ("InertiaDetails", "InertiaHeaders", "InertiaRequest", "get_inertia_details")


if TYPE_CHECKING:
    from litestar.types import Receive, Scope, Send

    from litestar_inertia.plugin import InertiaPlugin

_DEFAULT_COMPONENT_OPT_KEYS: tuple[str, ...] = ("component", "page")
_MARKER_VALUES = frozenset({"true", "false"})


class InertiaDetails:
    """InertiaDetails holds all the values sent by Inertia client in headers and provide convenient properties."""

    def __init__(self, request: Request[UserT, AuthT, StateT]) -> None:
        """Initialize :class:`InertiaDetails`"""
        self.request = request

    def _get_header_value(self, name: InertiaHeaders) -> str | None:
        """Parse request header

        Check for uri encoded header and unquotes it in readable format.
        """

        if value := self.request.headers.get(name.value.lower()):
            is_uri_encoded = self.request.headers.get(f"{name.value.lower()}-uri-autoencoded") == "true"
            return unquote(value) if is_uri_encoded else value
        return None

    def _get_route_component(self) -> str | None:
        rh = self.request.scope.get("route_handler")  # pyright: ignore[reportUnknownMemberType]
        if rh:
            component_opt_keys = _DEFAULT_COMPONENT_OPT_KEYS
            try:
                inertia_plugin: InertiaPlugin = self.request.app.plugins.get("InertiaPlugin")
                component_opt_keys = inertia_plugin.config.component_opt_keys
            except KeyError:
                pass
            for key in component_opt_keys:
                if (value := rh.opt.get(key)) is not None:
                    return cast("str", value)
        return None

    def __bool__(self) -> bool:
        """Check if request is sent by an Inertia client.

        Any boolean literal marks the request, ``false`` included. Absent or malformed
        values are treated as a regular request.
        """
        value = self._get_header_value(InertiaHeaders.ENABLED)
        return value is not None and value.strip().lower() in _MARKER_VALUES

    @cached_property
    def route_component(self) -> str | None:
        """Component name declared on the route handler."""
        return self._get_route_component()

    @cached_property
    def partial_component(self) -> str | None:
        """Partial Data Reload."""
        return self._get_header_value(InertiaHeaders.PARTIAL_COMPONENT)

    @cached_property
    def partial_data(self) -> str | None:
        """Partial Data Reload."""
        return self._get_header_value(InertiaHeaders.PARTIAL_DATA)

    @cached_property
    def version(self) -> str | None:
        """Asset version the client was built with."""
        return self._get_header_value(InertiaHeaders.VERSION)

    @cached_property
    def referer(self) -> str | None:
        return self._get_header_value(InertiaHeaders.REFERER)

    @cached_property
    def error_bag(self) -> str | None:
        return self._get_header_value(InertiaHeaders.ERROR_BAG)

    @cached_property
    def partial_keys(self) -> list[str]:
        """Prop names requested by a partial reload.

        Returns:
            The comma separated names of the partial data header, blank entries removed.
        """
        if self.partial_data is None:
            return []
        return [key.strip() for key in self.partial_data.split(",") if key.strip()]

    @cached_property
    def is_partial_render(self) -> bool:
        """True when the client asks for a subset of the props of the component being rendered."""
        return bool(
            self.route_component is not None
            and self.partial_component == self.route_component
            and self.partial_keys,
        )

    @cached_property
    def requested_url(self) -> str:
        """Relative url of the request, including the query string."""
        path = self.request.url.path
        query = self.request.url.query
        return unquote(f"{path}?{query}" if query else path)


def get_inertia_details(request: Request[Any, Any, Any]) -> InertiaDetails:
    """Return the Inertia details of a request, parsing the headers of plain requests."""
    details = getattr(request, "inertia", None)
    return details if isinstance(details, InertiaDetails) else InertiaDetails(request)


class InertiaRequest(Request[UserT, AuthT, StateT]):
    """Inertia Request class to work with Inertia client."""

    __slots__ = ("inertia",)

    def __init__(self, scope: Scope, receive: Receive = empty_receive, send: Send = empty_send) -> None:
        """Initialize :class:`InertiaRequest`"""
        super().__init__(scope=scope, receive=receive, send=send)
        self.inertia = InertiaDetails(self)

    @property
    def is_inertia(self) -> bool:
        """True if the request contained inertia headers."""
        return bool(self.inertia)

    @property
    def inertia_enabled(self) -> bool:
        """True if the route handler contains an inertia enabled configuration."""
        return self.inertia.route_component is not None

    @property
    def is_partial_render(self) -> bool:
        """True if the request is a partial reload."""
        return self.inertia.is_partial_render

    @property
    def partial_keys(self) -> list[str]:
        """Get the props to include in partial render."""
        return self.inertia.partial_keys

    @property
    def inertia_version(self) -> str | None:
        """Get the Inertia asset version sent by the client."""
        return self.inertia.version
