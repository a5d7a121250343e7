"""Litestar-Inertia exception classes."""

from __future__ import annotations

__all__ = [
    "LitestarInertiaError",
    "ManifestNotFoundError",
]


class LitestarInertiaError(Exception):
    """Base exception for Litestar-Inertia related errors."""


class ManifestNotFoundError(LitestarInertiaError):
    """Raised when the asset manifest used for versioning is not found."""

    def __init__(self, manifest_path: str) -> None:
        super().__init__(f"Asset manifest file not found at {manifest_path!r}. Did you forget to build your assets?")
