"""Unit-specific fixtures (no I/O beyond in-memory SQLite)."""

from __future__ import annotations

import aiosqlite
import pytest

from freshcatalog.sources import SqliteCatalogSource


@pytest.fixture()
async def sqlite_source():
    """In-memory SQLite products table for unit tests."""
    async with aiosqlite.connect(":memory:") as db:
        source = SqliteCatalogSource(db)
        await source.init_db()
        yield source
