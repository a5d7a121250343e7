from pathlib import Path

import pytest

from litestar_inertia.config import InertiaConfig


def test_default_inertia_config() -> None:
    config = InertiaConfig()
    assert config.root_template == "index.html"
    assert config.component_opt_keys == ("component", "page")
    assert config.version is None
    assert config.manifest_path is None
    assert config.app_selector == "app"
    assert config.extra_static_page_props == {}


def test_config_reads_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("INERTIA_VERSION", "abc123")
    monkeypatch.setenv("INERTIA_MANIFEST_PATH", "public/manifest.json")
    config = InertiaConfig()
    assert config.version == "abc123"
    assert isinstance(config.manifest_path, Path)
    assert config.manifest_path == Path("public/manifest.json")
