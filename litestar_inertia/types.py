from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, TypedDict

__all__ = (
    "InertiaHeaderType",
    "PageProps",
)


@dataclass
class PageProps:
    """Inertia Page Props Type.

    The page object sent to the client, either as the JSON body of an Inertia response
    or embedded in the root template on a full page load.
    """

    component: str
    url: str
    version: str | None = None
    props: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "component": self.component,
            "props": self.props,
            "version": self.version,
            "url": self.url,
        }


class InertiaHeaderType(TypedDict, total=False):
    """Type for inertia_headers parameter in get_headers()."""

    enabled: bool | None
    version: str | None
    location: str | None
    partial_data: str | None
    partial_component: str | None
