from __future__ import annotations

import hashlib
from pathlib import Path
from typing import TYPE_CHECKING

from litestar_inertia.exceptions import ManifestNotFoundError

if TYPE_CHECKING:
    from litestar_inertia.config import InertiaConfig

__all__ = ("AssetVersion",)


class AssetVersion:
    """Resolve the asset version sent with every Inertia page.

    The version comes from, in order: the configured value (a string or a callable),
    or the SHA-256 digest of the configured manifest file. Without either, pages carry no version
    and the stale version check is skipped.
    """

    __slots__ = ("_config", "_manifest_hash")

    def __init__(self, config: InertiaConfig) -> None:
        self._config = config
        self._manifest_hash: str | None = None

    def _hash_manifest(self, manifest_path: Path) -> str:
        if self._manifest_hash is None:
            if not manifest_path.exists():
                raise ManifestNotFoundError(str(manifest_path))
            self._manifest_hash = hashlib.sha256(manifest_path.read_bytes()).hexdigest()
        return self._manifest_hash

    def get(self) -> str | None:
        """Return the current asset version.

        Raises:
            ManifestNotFoundError: If versioning by manifest is configured and the file is missing.

        Returns:
            The version string, or ``None`` when no version is configured.
        """
        version = self._config.version
        if callable(version):
            return version()
        if version is not None:
            return version
        if self._config.manifest_path is not None:
            return self._hash_manifest(Path(self._config.manifest_path))
        return None
