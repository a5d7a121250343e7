from __future__ import annotations

from typing import Any

import pytest
from litestar import Litestar, get, post
from litestar.exceptions import (
    ImproperlyConfiguredException,
    NotAuthorizedException,
    NotFoundException,
    PermissionDeniedException,
    ValidationException,
)
from litestar.middleware.session.server_side import ServerSideSessionConfig
from litestar.status_codes import (
    HTTP_303_SEE_OTHER,
    HTTP_307_TEMPORARY_REDIRECT,
    HTTP_401_UNAUTHORIZED,
    HTTP_404_NOT_FOUND,
    HTTP_500_INTERNAL_SERVER_ERROR,
)
from litestar.stores.memory import MemoryStore
from litestar.template.config import TemplateConfig
from litestar.testing import create_test_client  # pyright: ignore[reportUnknownVariableType]

from litestar_inertia import InertiaConfig, InertiaHeaders, InertiaPlugin

pytestmark = pytest.mark.anyio


async def test_validation_error_redirects_back_with_errors(
    inertia_plugin: InertiaPlugin,
    template_config: TemplateConfig,  # pyright: ignore[reportMissingTypeArgument,reportUnknownParameterType]
) -> None:
    @get("/items/new", component="Items/New")
    async def new_item() -> dict[str, Any]:
        return {}

    @post("/items", component="Items/New")
    async def create_item() -> dict[str, Any]:
        raise ValidationException(
            detail="Invalid item",
            extra=[{"key": "name", "message": "Missing field `name`"}],
        )

    with create_test_client(
        route_handlers=[new_item, create_item],
        plugins=[inertia_plugin],
        template_config=template_config,
        middleware=[ServerSideSessionConfig().middleware],
        stores={"sessions": MemoryStore()},
    ) as client:
        response = client.post(
            "/items",
            headers={
                InertiaHeaders.ENABLED.value: "true",
                InertiaHeaders.REFERER.value: "http://testserver.local/items/new",
            },
            follow_redirects=False,
        )
        assert response.status_code == HTTP_303_SEE_OTHER
        assert response.headers["location"] == "http://testserver.local/items/new"

        response = client.get("/items/new", headers={InertiaHeaders.ENABLED.value: "true"})
        props = response.json()["props"]
        assert props["errors"] == {"name": "Missing field `name`"}
        assert props["flash"] == {"error": ["Invalid item"]}


async def test_permission_denied_redirects_back(
    inertia_plugin: InertiaPlugin,
    template_config: TemplateConfig,  # pyright: ignore[reportMissingTypeArgument,reportUnknownParameterType]
) -> None:
    @post("/admin", component="Admin")
    async def handler() -> dict[str, Any]:
        raise PermissionDeniedException(detail="Admins only")

    with create_test_client(
        route_handlers=[handler],
        plugins=[inertia_plugin],
        template_config=template_config,
        middleware=[ServerSideSessionConfig().middleware],
        stores={"sessions": MemoryStore()},
    ) as client:
        response = client.post(
            "/admin",
            headers={InertiaHeaders.ENABLED.value: "true", InertiaHeaders.REFERER.value: "https://evil.example.com/"},
            follow_redirects=False,
        )
        assert response.status_code == HTTP_303_SEE_OTHER
        assert response.headers["location"] == "http://testserver.local/"


async def test_unauthorized_redirects_to_configured_location(
    template_config: TemplateConfig,  # pyright: ignore[reportMissingTypeArgument,reportUnknownParameterType]
) -> None:
    @get("/dashboard", component="Dashboard")
    async def handler() -> dict[str, Any]:
        raise NotAuthorizedException()

    with create_test_client(
        route_handlers=[handler],
        plugins=[InertiaPlugin(InertiaConfig(root_template="index.html.j2", redirect_unauthorized_to="/login"))],
        template_config=template_config,
        middleware=[ServerSideSessionConfig().middleware],
        stores={"sessions": MemoryStore()},
    ) as client:
        response = client.get("/dashboard", headers={InertiaHeaders.ENABLED.value: "true"}, follow_redirects=False)
        assert response.status_code == HTTP_307_TEMPORARY_REDIRECT
        assert response.headers["location"] == "/login"


async def test_unauthorized_without_redirect_location(
    inertia_plugin: InertiaPlugin,
    template_config: TemplateConfig,  # pyright: ignore[reportMissingTypeArgument,reportUnknownParameterType]
) -> None:
    @get("/dashboard", component="Dashboard")
    async def handler() -> dict[str, Any]:
        raise NotAuthorizedException()

    with create_test_client(
        route_handlers=[handler],
        plugins=[inertia_plugin],
        template_config=template_config,
        middleware=[ServerSideSessionConfig().middleware],
        stores={"sessions": MemoryStore()},
    ) as client:
        response = client.get("/dashboard", headers={InertiaHeaders.ENABLED.value: "true"}, follow_redirects=False)
        assert response.status_code == HTTP_401_UNAUTHORIZED


async def test_regular_request_gets_standard_error_response(
    inertia_plugin: InertiaPlugin,
    template_config: TemplateConfig,  # pyright: ignore[reportMissingTypeArgument,reportUnknownParameterType]
) -> None:
    @get("/api/items/{item_id:int}")
    async def handler(item_id: int) -> dict[str, Any]:
        raise NotFoundException(detail=f"Item {item_id} not found")

    with create_test_client(
        route_handlers=[handler],
        plugins=[inertia_plugin],
        template_config=template_config,
        middleware=[ServerSideSessionConfig().middleware],
        stores={"sessions": MemoryStore()},
    ) as client:
        response = client.get("/api/items/1")
        assert response.status_code == HTTP_404_NOT_FOUND
        assert response.json() == {"status_code": HTTP_404_NOT_FOUND, "detail": "Item 1 not found"}


async def test_unhandled_error_on_inertia_route(
    inertia_plugin: InertiaPlugin,
    template_config: TemplateConfig,  # pyright: ignore[reportMissingTypeArgument,reportUnknownParameterType]
) -> None:
    @get("/reports", component="Reports")
    async def handler() -> dict[str, Any]:
        msg = "report backend unavailable"
        raise RuntimeError(msg)

    with create_test_client(
        route_handlers=[handler],
        plugins=[inertia_plugin],
        template_config=template_config,
        middleware=[ServerSideSessionConfig().middleware],
        stores={"sessions": MemoryStore()},
    ) as client:
        response = client.get("/reports", headers={InertiaHeaders.ENABLED.value: "true"})
        assert response.status_code == HTTP_500_INTERNAL_SERVER_ERROR
        assert "report backend unavailable" not in response.text


def test_plugin_requires_session_middleware(inertia_plugin: InertiaPlugin) -> None:
    with pytest.raises(ImproperlyConfiguredException):
        Litestar(plugins=[inertia_plugin])
