from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Union

__all__ = ("InertiaConfig",)

VersionType = Union[str, Callable[[], str], None]


@dataclass
class InertiaConfig:
    """Configuration for InertiaJS support.

    To enable Inertia integration, pass an instance of this class to the
    :class:`InertiaPlugin <litestar_inertia.plugin.InertiaPlugin>` and add the plugin to the
    :class:`Litestar <litestar.app.Litestar>` constructor using the 'plugins' key.
    """

    root_template: str = "index.html"
    """Name of the root template to use.

    This must be a path that is found by the application template config.
    """
    component_opt_keys: tuple[str, ...] = ("component", "page")
    """Identifiers to use on routes to get the inertia component to render.

    The first key found in the route handler opts will be used.
    """
    version: VersionType = field(default_factory=lambda: os.getenv("INERTIA_VERSION") or None)
    """The current asset version.

    Either a string or a callable returning one. When ``None`` and ``manifest_path`` is set,
    the version is derived from the manifest content.
    """
    manifest_path: Path | str | None = field(default_factory=lambda: os.getenv("INERTIA_MANIFEST_PATH") or None)
    """Optional path to a build manifest whose content hash is used as the asset version."""
    redirect_unauthorized_to: str | None = None
    """Optionally supply a path where unauthorized requests should redirect."""
    extra_static_page_props: dict[str, Any] = field(default_factory=dict)
    """A dictionary of values to automatically add in to page props on every response."""
    extra_session_page_props: set[str] = field(default_factory=set)
    """Session keys to copy in to page props on every response."""
    app_selector: str = "app"
    """The id of the root element the client side app mounts on."""

    def __post_init__(self) -> None:
        if self.manifest_path is not None and isinstance(self.manifest_path, str):
            self.manifest_path = Path(self.manifest_path)
