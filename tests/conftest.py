from __future__ import annotations

from collections.abc import Generator
from pathlib import Path

import pytest
from litestar.contrib.jinja import JinjaTemplateEngine
from litestar.template.config import TemplateConfig

here = Path(__file__).parent

_INERTIA_ENV_VARS = ["INERTIA_VERSION", "INERTIA_MANIFEST_PATH"]


@pytest.fixture(autouse=True)
def clean_inertia_env(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Clear Inertia related environment variables before each test for isolation."""
    for var in _INERTIA_ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    yield


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def template_config() -> Generator[TemplateConfig[JinjaTemplateEngine], None, None]:
    yield TemplateConfig(engine=JinjaTemplateEngine(directory=here / "templates"))
