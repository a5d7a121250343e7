from __future__ import annotations

from litestar_inertia.config import InertiaConfig
from litestar_inertia.exception_handler import create_inertia_exception_response, exception_to_http_response
from litestar_inertia.exceptions import LitestarInertiaError, ManifestNotFoundError
from litestar_inertia.helpers import error, filter_partial_props, get_shared_props, lazy, share
from litestar_inertia.middleware import InertiaMiddleware
from litestar_inertia.plugin import InertiaPlugin
from litestar_inertia.request import InertiaDetails, InertiaHeaders, InertiaRequest
from litestar_inertia.response import (
    InertiaBack,
    InertiaExternalRedirect,
    InertiaRedirect,
    InertiaResponse,
    InertiaRouteRedirect,
)
from litestar_inertia.types import PageProps

__all__ = (
    "InertiaBack",
    "InertiaConfig",
    "InertiaDetails",
    "InertiaExternalRedirect",
    "InertiaHeaders",
    "InertiaMiddleware",
    "InertiaPlugin",
    "InertiaRedirect",
    "InertiaRequest",
    "InertiaResponse",
    "InertiaRouteRedirect",
    "LitestarInertiaError",
    "ManifestNotFoundError",
    "PageProps",
    "create_inertia_exception_response",
    "error",
    "exception_to_http_response",
    "filter_partial_props",
    "get_shared_props",
    "lazy",
    "share",
)
