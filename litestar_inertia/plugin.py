from __future__ import annotations

from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Any

from anyio.from_thread import start_blocking_portal
from litestar.exceptions import HTTPException, ImproperlyConfiguredException
from litestar.middleware import DefineMiddleware
from litestar.middleware.session import SessionMiddleware
from litestar.plugins import InitPluginProtocol
from litestar.security.session_auth.middleware import MiddlewareWrapper
from litestar.utils.predicates import is_class_and_subclass

from litestar_inertia.version import AssetVersion

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

    from anyio.from_thread import BlockingPortal
    from litestar import Litestar
    from litestar.config.app import AppConfig

    from litestar_inertia.config import InertiaConfig


class InertiaPlugin(InitPluginProtocol):
    """Inertia plugin.

    Configures Litestar for the Inertia.js protocol:

    - validates that a session middleware is installed
    - installs :class:`InertiaRequest` and :class:`InertiaResponse` as the default classes
    - adds :class:`InertiaMiddleware` and the Inertia exception handler
    - registers type encoders for lazy props

    During the application lifespan a ``BlockingPortal`` is available to resolve async
    lazy props from the synchronous serialization path.

    Example::

        from litestar_inertia import InertiaConfig, InertiaPlugin

        app = Litestar(
            plugins=[InertiaPlugin(InertiaConfig())],
            middleware=[ServerSideSessionConfig().middleware],
        )
    """

    __slots__ = ("_asset_version", "_portal", "config")

    def __init__(self, config: InertiaConfig) -> None:
        """Initialize ``Inertia``.

        Args:
            config: The Inertia configuration.
        """
        self.config = config
        self._asset_version = AssetVersion(config)
        self._portal: BlockingPortal | None = None

    @asynccontextmanager
    async def lifespan(self, app: Litestar) -> AsyncGenerator[None, None]:
        """Keep a blocking portal open while the application runs."""
        with start_blocking_portal() as portal:
            self._portal = portal
            try:
                yield
            finally:
                self._portal = None

    @property
    def portal(self) -> BlockingPortal | None:
        """The blocking portal used to resolve async lazy props, ``None`` outside of the lifespan."""
        return self._portal

    @property
    def asset_version(self) -> str | None:
        """The current asset version."""
        return self._asset_version.get()

    def on_app_init(self, app_config: AppConfig) -> AppConfig:
        """Configure application for use with Inertia.

        Args:
            app_config: The :class:`AppConfig <.config.app.AppConfig>` instance.

        Raises:
            ImproperlyConfiguredException: If no session middleware is configured.

        Returns:
            The :class:`AppConfig <.config.app.AppConfig>` instance.
        """
        from litestar_inertia.exception_handler import exception_to_http_response
        from litestar_inertia.helpers import DeferredProp, StaticProp
        from litestar_inertia.middleware import InertiaMiddleware
        from litestar_inertia.request import InertiaRequest
        from litestar_inertia.response import InertiaBack, InertiaExternalRedirect, InertiaResponse

        for mw in app_config.middleware:
            if isinstance(mw, DefineMiddleware) and is_class_and_subclass(
                mw.middleware,
                (MiddlewareWrapper, SessionMiddleware),
            ):
                break
        else:
            msg = "The Inertia plugin require a session middleware."
            raise ImproperlyConfiguredException(msg)

        exception_handlers: dict[type[Exception] | int, Any] = {
            Exception: exception_to_http_response,
            HTTPException: exception_to_http_response,
        }
        app_config.exception_handlers.update(exception_handlers)  # pyright: ignore[reportUnknownMemberType]
        app_config.request_class = InertiaRequest
        app_config.response_class = InertiaResponse
        app_config.middleware.append(InertiaMiddleware)
        app_config.signature_types.extend([InertiaRequest, InertiaResponse, InertiaBack, InertiaExternalRedirect])
        app_config.type_encoders = {
            StaticProp: lambda val: val.render(),
            DeferredProp: lambda val: val.render(portal=self._portal),
            **(app_config.type_encoders or {}),
        }
        app_config.lifespan.append(self.lifespan)  # pyright: ignore[reportUnknownMemberType]
        return app_config
