from __future__ import annotations

import inspect
from collections import defaultdict
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any, Callable, Coroutine, Dict, Generic, Iterable, Iterator, List, TypeVar, cast

from anyio.from_thread import BlockingPortal, start_blocking_portal
from litestar.exceptions import ImproperlyConfiguredException
from litestar.utils.empty import value_or_default
from litestar.utils.scope.state import ScopeState

if TYPE_CHECKING:
    from litestar.connection import ASGIConnection

    from litestar_inertia.plugin import InertiaPlugin

__all__ = (
    "DeferredProp",
    "StaticProp",
    "error",
    "filter_partial_props",
    "get_shared_props",
    "is_lazy_prop",
    "lazy",
    "render_props",
    "share",
)

T = TypeVar("T")


class StaticProp(Generic[T]):
    """A lazy prop wrapping an already computed value."""

    def __init__(self, key: str, value: T) -> None:
        self._key = key
        self._result = value

    @property
    def key(self) -> str:
        return self._key

    def render(self, portal: BlockingPortal | None = None) -> T:
        return self._result


class DeferredProp(Generic[T]):
    """A lazy prop wrapping a sync or async callable, evaluated at most once."""

    def __init__(self, key: str, value: Callable[[], T | Coroutine[Any, Any, T]]) -> None:
        self._key = key
        self._value = value
        self._evaluated = False
        self._result: T | None = None

    @property
    def key(self) -> str:
        return self._key

    @staticmethod
    @contextmanager
    def with_portal(portal: BlockingPortal | None = None) -> Iterator[BlockingPortal]:
        if portal is None:
            with start_blocking_portal() as p:
                yield p
        else:
            yield portal

    def render(self, portal: BlockingPortal | None = None) -> T | None:
        if self._evaluated:
            return self._result
        if inspect.iscoroutinefunction(self._value):
            with self.with_portal(portal) as p:
                self._result = cast("T", p.call(self._value))
        else:
            self._result = cast("T", self._value())
        self._evaluated = True
        return self._result


def lazy(key: str, value_or_callable: T | Callable[[], T | Coroutine[Any, Any, T]]) -> StaticProp[T] | DeferredProp[T]:
    """Wrap a value or callable so it is only sent when a partial reload asks for it.

    Args:
        key: The prop name.
        value_or_callable: The value, or a sync or async callable producing it.

    Returns:
        The wrapped prop.
    """
    if not callable(value_or_callable):
        return StaticProp[T](key=key, value=value_or_callable)
    return DeferredProp[T](key=key, value=cast("Callable[[], T | Coroutine[Any, Any, T]]", value_or_callable))


def is_lazy_prop(value: Any) -> bool:
    return isinstance(value, (StaticProp, DeferredProp))


def filter_partial_props(props: dict[str, Any], only: Iterable[str]) -> dict[str, Any]:
    """Keep the props named by a partial reload.

    Names are matched case-insensitively. The returned mapping keeps the
    spelling of the keys in ``props``.

    Args:
        props: The page props.
        only: The requested prop names.

    Returns:
        The requested subset of ``props``.
    """
    requested = {name.casefold() for name in only}
    return {key: value for key, value in props.items() if key.casefold() in requested}


def render_props(
    props: dict[str, Any],
    partial: bool = False,
    portal: BlockingPortal | None = None,
) -> dict[str, Any]:
    """Resolve lazy props.

    On a full visit lazy props are left out. On a partial reload the props have
    already been filtered to the requested names, so every lazy prop left is rendered.
    """
    rendered: dict[str, Any] = {}
    for key, value in props.items():
        if is_lazy_prop(value):
            if not partial:
                continue
            rendered[key] = value.render(portal)
        else:
            rendered[key] = value
    return rendered


def get_shared_props(request: ASGIConnection[Any, Any, Any, Any]) -> Dict[str, Any]:  # noqa: UP006
    """Return shared session props for a request

    Be sure to call this before `self.create_template_context` if you would like to include the `flash` message details.
    """
    props: dict[str, Any] = {}
    flash: dict[str, list[str]] = defaultdict(list)
    errors: dict[str, Any] = {}
    error_bag = request.headers.get("X-Inertia-Error-Bag", None)
    try:
        errors = request.session.pop("_errors", {})
        props.update(cast("Dict[str,Any]", request.session.pop("_shared", {})))
        for message in cast("List[Dict[str,Any]]", request.session.pop("_messages", [])):
            flash[message["category"]].append(message["message"])

        inertia_plugin = cast("InertiaPlugin", request.app.plugins.get("InertiaPlugin"))
        props.update(inertia_plugin.config.extra_static_page_props)
        for session_prop in inertia_plugin.config.extra_session_page_props:
            if session_prop not in props and session_prop in request.session:
                props[session_prop] = request.session.get(session_prop)
    except (AttributeError, ImproperlyConfiguredException):
        msg = "Unable to generate all shared props.  A valid session was not found for this request."
        request.logger.warning(msg)
    props["flash"] = dict(flash)
    props["errors"] = {error_bag: errors} if error_bag is not None else errors
    props["csrf_token"] = value_or_default(ScopeState.from_scope(request.scope).csrf_token, "")
    return props


def share(
    connection: ASGIConnection[Any, Any, Any, Any],
    key: str,
    value: Any,
) -> None:
    """Share a value with the next rendered page."""
    try:
        connection.session.setdefault("_shared", {}).update({key: value})
    except (AttributeError, ImproperlyConfiguredException):
        msg = "Unable to set `share` session state.  A valid session was not found for this request."
        connection.logger.warning(msg)


def error(
    connection: ASGIConnection[Any, Any, Any, Any],
    key: str,
    message: str,
) -> None:
    """Record a validation error for the next rendered page."""
    try:
        connection.session.setdefault("_errors", {}).update({key: message})
    except (AttributeError, ImproperlyConfiguredException):
        msg = "Unable to set `error` session state.  A valid session was not found for this request."
        connection.logger.warning(msg)
