"""Integration test fixtures.

Provides a fully wired CatalogApp over a temporary JSON catalog file, and a
clean subprocess environment for CLI tests.
"""

from __future__ import annotations

import json
import os
from typing import TYPE_CHECKING

import pytest

from freshcatalog.app import CatalogApp
from freshcatalog.config import Settings

if TYPE_CHECKING:
    from pathlib import Path


@pytest.fixture()
def catalog_file(tmp_path: Path, product_dicts: list[dict]) -> Path:
    path = tmp_path / "products.json"
    path.write_text(json.dumps(product_dicts), encoding="utf-8")
    return path


@pytest.fixture()
async def app(catalog_file: Path, resolver) -> CatalogApp:
    """CatalogApp reading ``catalog_file`` on every fetch, FROZEN primed at startup."""
    settings = Settings(source={"kind": "json", "json_path": str(catalog_file)})
    async with CatalogApp(settings, resolver=resolver) as app:
        yield app


@pytest.fixture()
def subprocess_env(tmp_path: Path) -> dict[str, str]:
    """Environment with no inherited FRESHCATALOG__ settings and an isolated cwd config."""
    env = {k: v for k, v in os.environ.items() if not k.startswith("FRESHCATALOG__")}
    env["FRESHCATALOG__SOURCE__DB_PATH"] = str(tmp_path / "db" / "catalog.db")
    return env
