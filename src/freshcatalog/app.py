"""Composition root.

``CatalogApp`` owns the one ``ProcessScope`` of the process, the resolver and
the configured source, and hands out request scopes and views::

    async with CatalogApp(settings) as app:          # FROZEN snapshot primed
        async with app.request() as scope:
            state = await app.view("/ssr", scope).load()
"""

from __future__ import annotations

import contextlib
from pathlib import Path
from typing import TYPE_CHECKING

import aiosqlite
import structlog

from freshcatalog.config import Settings
from freshcatalog.policy import FreshnessPolicy, policy_for_route
from freshcatalog.resolver import StrategyResolver
from freshcatalog.scope import Activation, ProcessScope, RequestScope
from freshcatalog.sources import (
    HttpCatalogSource,
    JsonFileCatalogSource,
    SqliteCatalogSource,
    StaticCatalogSource,
    build_http_client,
)
from freshcatalog.view import CatalogView

if TYPE_CHECKING:
    from freshcatalog.config import SourceSettings
    from freshcatalog.scope import ScopeHandle
    from freshcatalog.sources import CatalogSource

log = structlog.get_logger()


async def build_source(
    settings: SourceSettings, stack: contextlib.AsyncExitStack
) -> CatalogSource:
    """Create the configured source; connections it opens are closed by ``stack``."""
    if settings.kind == "json":
        return JsonFileCatalogSource(settings.json_path)
    if settings.kind == "static":
        return StaticCatalogSource.from_file(settings.json_path)
    if settings.kind == "http":
        client = await stack.enter_async_context(build_http_client(settings))
        return HttpCatalogSource(client, settings.url)

    db_path = Path(settings.db_path).expanduser()
    db_path.parent.mkdir(parents=True, exist_ok=True)
    db = await stack.enter_async_context(aiosqlite.connect(db_path))
    source = SqliteCatalogSource(db)
    await source.init_db()
    return source


class CatalogApp:
    def __init__(
        self,
        settings: Settings | None = None,
        *,
        source: CatalogSource | None = None,
        resolver: StrategyResolver | None = None,
    ) -> None:
        self.settings = settings or Settings()
        self.resolver = resolver or StrategyResolver()
        self.process_scope = ProcessScope()
        self._source = source
        self._stack = contextlib.AsyncExitStack()

    @property
    def source(self) -> CatalogSource:
        if self._source is None:
            raise RuntimeError("CatalogApp.startup() has not been called")
        return self._source

    async def startup(self) -> None:
        if self._source is None:
            try:
                self._source = await build_source(self.settings.source, self._stack)
            except BaseException:
                await self._stack.aclose()
                raise
        log.info("catalog_app_started", source=self.settings.source.kind)
        if self.settings.frozen.prime_on_startup:
            outcome = await self.resolver.resolve(
                FreshnessPolicy.FROZEN, self._source, self.process_scope
            )
            log.info("frozen_scope_primed", status=outcome.status.value)

    async def shutdown(self) -> None:
        await self._stack.aclose()

    async def __aenter__(self) -> CatalogApp:
        await self.startup()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.shutdown()

    def request(self, request_id: str | None = None) -> RequestScope:
        return RequestScope(request_id)

    def view(self, target: str | FreshnessPolicy, scope: ScopeHandle = None) -> CatalogView:
        """Build a view for a route (``"/ssr"``) or an explicit policy.

        FROZEN views always bind to the app's ProcessScope. ON_DEMAND views get
        a fresh Activation unless one is passed, so a request scope can be
        handed to every view of a request regardless of its policy.
        """
        policy = target if isinstance(target, FreshnessPolicy) else policy_for_route(target)
        if policy is FreshnessPolicy.FROZEN:
            scope = self.process_scope
        elif policy is FreshnessPolicy.ON_DEMAND and not isinstance(scope, Activation):
            scope = None
        return CatalogView(self.resolver, self.source, policy, scope)
