"""End-to-end tests for CatalogApp: the three pages over one catalog file."""

from __future__ import annotations

import asyncio
import contextlib
import json
from typing import TYPE_CHECKING

import httpx
import respx

from freshcatalog.app import CatalogApp, build_source
from freshcatalog.config import Settings, SourceSettings
from freshcatalog.errors import ErrorCode
from freshcatalog.policy import FreshnessPolicy
from freshcatalog.sources import (
    HttpCatalogSource,
    JsonFileCatalogSource,
    SqliteCatalogSource,
    StaticCatalogSource,
)

if TYPE_CHECKING:
    from pathlib import Path


def _rewrite(path: Path, product_dicts: list[dict]) -> None:
    path.write_text(json.dumps(product_dicts), encoding="utf-8")


class TestRoutes:
    async def test_every_route_ready(self, app: CatalogApp, products) -> None:
        for route in ("/csr", "/ssr", "/ssg"):
            async with app.request() as scope:
                state = await app.view(route, scope).load()
            assert state.kind == "ready", route
            assert state.catalog == products

    async def test_frozen_primed_at_startup(self, app: CatalogApp, products) -> None:
        assert app.process_scope.outcome is not None
        assert app.process_scope.outcome.payload == products

    async def test_ssg_is_snapshot_while_ssr_and_csr_see_changes(
        self, app: CatalogApp, catalog_file: Path, product_dicts
    ) -> None:
        _rewrite(catalog_file, product_dicts[:1])

        async with app.request() as scope:
            ssg = await app.view("/ssg", scope).load()
            ssr = await app.view("/ssr", scope).load()
        csr = await app.view("/csr").load()

        assert len(ssg.catalog) == 3
        assert len(ssr.catalog) == 1
        assert len(csr.catalog) == 1

    async def test_ssr_reused_within_request_only(
        self, app: CatalogApp, catalog_file: Path, product_dicts
    ) -> None:
        async with app.request() as scope:
            first = await app.view("/ssr", scope).load()
            _rewrite(catalog_file, product_dicts[:2])
            same_request = await app.view("/ssr", scope).load()
        async with app.request() as scope:
            next_request = await app.view("/ssr", scope).load()

        assert len(first.catalog) == 3
        assert same_request == first
        assert len(next_request.catalog) == 2

    async def test_concurrent_requests(self, app: CatalogApp) -> None:
        async def handle() -> str:
            async with app.request() as scope:
                return (await app.view("/ssr", scope).load()).kind

        kinds = await asyncio.gather(*(handle() for _ in range(8)))
        assert kinds == ["ready"] * 8

    async def test_view_by_policy(self, app: CatalogApp) -> None:
        view = app.view(FreshnessPolicy.FROZEN)
        assert view.scope is app.process_scope


class TestSourceOutage:
    async def test_missing_file_fails_every_route_then_recovers(
        self, tmp_path: Path, product_dicts, resolver
    ) -> None:
        path = tmp_path / "late.json"
        settings = Settings(source={"kind": "json", "json_path": str(path)})

        async with CatalogApp(settings, resolver=resolver) as app:
            async with app.request() as scope:
                states = [await app.view(r, scope).load() for r in ("/csr", "/ssr", "/ssg")]
            assert [s.kind for s in states] == ["failed"] * 3
            assert all(s.reason.code == ErrorCode.SOURCE_UNAVAILABLE for s in states)

            _rewrite(path, product_dicts)

            async with app.request() as scope:
                csr = await app.view("/csr").load()
                ssr = await app.view("/ssr", scope).load()
                ssg = await app.view("/ssg", scope).load()
            assert csr.kind == "ready"
            assert ssr.kind == "ready"
            # The frozen snapshot failed at startup and stays failed.
            assert ssg.kind == "failed"
            assert ssg.reason.recoverable is False

            app.process_scope.reinitialize()
            assert (await app.view("/ssg").load()).kind == "ready"

    async def test_envelope_without_data_fails_frozen_route(
        self, tmp_path: Path, resolver
    ) -> None:
        path = tmp_path / "products.json"
        path.write_text(json.dumps({"success": True}), encoding="utf-8")
        settings = Settings(source={"kind": "json", "json_path": str(path)})

        async with CatalogApp(settings, resolver=resolver) as app:
            state = await app.view("/ssg").load()

        assert state.kind == "failed"
        assert state.reason.code == ErrorCode.INVALID_FORMAT
        assert state.reason.recoverable is False

    async def test_lazy_frozen_when_priming_disabled(self, catalog_file: Path, resolver) -> None:
        settings = Settings(
            source={"kind": "json", "json_path": str(catalog_file)},
            frozen={"prime_on_startup": False},
        )
        async with CatalogApp(settings, resolver=resolver) as app:
            assert app.process_scope.outcome is None
            await app.view("/ssg").load()
            assert app.process_scope.outcome is not None


class TestBuildSource:
    async def test_json(self, catalog_file: Path) -> None:
        settings = SourceSettings(kind="json", json_path=str(catalog_file))
        async with contextlib.AsyncExitStack() as stack:
            assert isinstance(await build_source(settings, stack), JsonFileCatalogSource)

    async def test_static(self, catalog_file: Path, products) -> None:
        settings = SourceSettings(kind="static", json_path=str(catalog_file))
        async with contextlib.AsyncExitStack() as stack:
            source = await build_source(settings, stack)
            assert isinstance(source, StaticCatalogSource)
            assert await source.fetch_catalog() == products

    async def test_http(self, product_dicts, products) -> None:
        url = "http://catalog.test/api/products"
        settings = SourceSettings(kind="http", url=url)
        with respx.mock:
            respx.get(url).mock(
                return_value=httpx.Response(200, json={"success": True, "data": product_dicts})
            )
            async with contextlib.AsyncExitStack() as stack:
                source = await build_source(settings, stack)
                assert isinstance(source, HttpCatalogSource)
                assert await source.fetch_catalog() == products

    async def test_sqlite_creates_parent_dirs(self, tmp_path: Path) -> None:
        db_path = tmp_path / "a" / "b" / "catalog.db"
        settings = SourceSettings(kind="sqlite", db_path=str(db_path))
        async with contextlib.AsyncExitStack() as stack:
            source = await build_source(settings, stack)
            assert isinstance(source, SqliteCatalogSource)
            assert await source.fetch_catalog() == ()
        assert db_path.exists()

    async def test_app_with_sqlite_source(self, tmp_path: Path, products, resolver) -> None:
        settings = Settings(
            source={"kind": "sqlite", "db_path": str(tmp_path / "catalog.db")},
            frozen={"prime_on_startup": False},
        )
        async with CatalogApp(settings, resolver=resolver) as app:
            assert isinstance(app.source, SqliteCatalogSource)
            await app.source.seed(products)
            state = await app.view("/csr").load()
        assert state.kind == "ready"
        assert state.catalog == products
