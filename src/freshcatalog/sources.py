"""Catalog sources: the read side that StrategyResolver delegates to.

A source performs the underlying read on every call and keeps no cache of
its own. Failures are reported as ``SourceUnavailableError`` (the read
channel is down) or ``CatalogFormatError`` (the payload is not a catalog);
anything else is a bug and propagates.
"""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import TYPE_CHECKING, Protocol, runtime_checkable

import aiosqlite
import httpx
import structlog
from pydantic import TypeAdapter, ValidationError

from freshcatalog.errors import CatalogFormatError, SourceUnavailableError
from freshcatalog.models.api import ProductsEnvelope
from freshcatalog.models.catalog import Catalog, Product

if TYPE_CHECKING:
    from collections.abc import Iterable

    from freshcatalog.config import SourceSettings

log = structlog.get_logger()

_CATALOG_ADAPTER: TypeAdapter[Catalog] = TypeAdapter(tuple[Product, ...])


@runtime_checkable
class CatalogSource(Protocol):
    async def fetch_catalog(self) -> Catalog: ...


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


def parse_catalog(raw: object) -> Catalog:
    """Validate a decoded JSON document (a list of product objects)."""
    if not isinstance(raw, list | tuple):
        raise CatalogFormatError(f"Catalog must be a JSON array, got {type(raw).__name__}")
    try:
        return _CATALOG_ADAPTER.validate_python(raw)
    except ValidationError as exc:
        raise CatalogFormatError(f"Invalid catalog: {exc.error_count()} validation error(s)") from exc


def parse_catalog_json(content: str | bytes) -> Catalog:
    """Decode a catalog from JSON text.

    Accepts a bare array of products or the ``{success, data, timestamp}``
    envelope served by the products endpoint. An envelope with
    ``success: false`` means the upstream could not serve the catalog.
    """
    try:
        raw = json.loads(content)
    except ValueError as exc:
        raise CatalogFormatError(f"Catalog is not valid JSON: {exc}") from exc
    return _parse_document(raw)


def _parse_document(raw: object) -> Catalog:
    if not isinstance(raw, dict):
        return parse_catalog(raw)

    try:
        envelope = ProductsEnvelope.model_validate(raw)
    except ValidationError as exc:
        raise CatalogFormatError(
            f"Invalid products envelope: {exc.error_count()} validation error(s)"
        ) from exc
    if not envelope.success:
        raise SourceUnavailableError("Products endpoint reported success=false")
    if envelope.data is None:
        raise CatalogFormatError("Products envelope has no data")
    return envelope.data


# ---------------------------------------------------------------------------
# In-memory / file sources
# ---------------------------------------------------------------------------


class StaticCatalogSource:
    """A fixed document held in memory, validated on every fetch."""

    def __init__(self, document: object) -> None:
        self._document = document

    @classmethod
    def from_file(cls, path: str | Path) -> StaticCatalogSource:
        """Load the document once, the way a build step embeds a fixture."""
        return cls(Path(path).expanduser().read_text(encoding="utf-8"))

    async def fetch_catalog(self) -> Catalog:
        if isinstance(self._document, str | bytes):
            return parse_catalog_json(self._document)
        return _parse_document(self._document)


class JsonFileCatalogSource:
    """Reads a JSON document from disk on every fetch."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path).expanduser()

    async def fetch_catalog(self) -> Catalog:
        try:
            content = await asyncio.to_thread(self.path.read_bytes)
        except OSError as exc:
            raise SourceUnavailableError(f"Cannot read {self.path}: {exc}") from exc
        return parse_catalog_json(content)


# ---------------------------------------------------------------------------
# HTTP source
# ---------------------------------------------------------------------------


def build_http_client(settings: SourceSettings) -> httpx.AsyncClient:
    """Shared client for the products endpoint. Timeouts live here, not in the core."""
    return httpx.AsyncClient(
        timeout=httpx.Timeout(settings.timeout_seconds),
        follow_redirects=True,
        headers={"Accept": "application/json", "User-Agent": "freshcatalog"},
    )


class HttpCatalogSource:
    """Fetches the catalog from ``GET /api/products``."""

    def __init__(self, client: httpx.AsyncClient, url: str) -> None:
        self._client = client
        self.url = url

    async def fetch_catalog(self) -> Catalog:
        try:
            response = await self._client.get(self.url)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise SourceUnavailableError(
                f"{self.url} returned HTTP {exc.response.status_code}"
            ) from exc
        except httpx.HTTPError as exc:
            raise SourceUnavailableError(f"Request to {self.url} failed: {exc!r}") from exc
        return parse_catalog_json(response.content)


# ---------------------------------------------------------------------------
# SQLite source
# ---------------------------------------------------------------------------

_CREATE_PRODUCTS_TABLE = """
CREATE TABLE IF NOT EXISTS products (
    id          INTEGER NOT NULL,
    name        TEXT NOT NULL,
    description TEXT NOT NULL,
    category    TEXT NOT NULL,
    price       INTEGER NOT NULL,
    stock       INTEGER NOT NULL
)
"""

_PRODUCT_COLUMNS = ("id", "name", "description", "category", "price", "stock")


class SqliteCatalogSource:
    """Reads the ``products`` table in rowid (insertion) order."""

    def __init__(self, db: aiosqlite.Connection) -> None:
        self._db = db

    async def init_db(self) -> None:
        """Create the products table. Called once at startup."""
        await self._db.execute(_CREATE_PRODUCTS_TABLE)
        await self._db.commit()

    async def seed(self, products: Iterable[Product]) -> None:
        """Replace the table contents with ``products``."""
        await self._db.execute("DELETE FROM products")
        await self._db.executemany(
            "INSERT INTO products (id, name, description, category, price, stock) "
            "VALUES (?, ?, ?, ?, ?, ?)",
            [(p.id, p.name, p.description, p.category, p.price, p.stock) for p in products],
        )
        await self._db.commit()

    async def fetch_catalog(self) -> Catalog:
        try:
            cursor = await self._db.execute(
                "SELECT id, name, description, category, price, stock "
                "FROM products ORDER BY rowid"
            )
            rows = await cursor.fetchall()
        except aiosqlite.Error as exc:
            log.warning("catalog_read_error", table="products", exc_info=True)
            raise SourceUnavailableError(f"Cannot read products table: {exc}") from exc
        return parse_catalog([dict(zip(_PRODUCT_COLUMNS, row, strict=True)) for row in rows])
