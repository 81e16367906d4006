"""Shared fixtures: sample products, a scriptable source and a fixed-clock resolver."""

from __future__ import annotations

import asyncio
from datetime import UTC, datetime

import pytest

from freshcatalog.models.catalog import Catalog, Product
from freshcatalog.resolver import StrategyResolver

FIXED_NOW = datetime(2024, 5, 1, 12, 0, tzinfo=UTC)


class FakeSource:
    """CatalogSource double that counts calls.

    ``results`` are consumed in order (the last one repeats); each is a
    catalog to return or an exception to raise. When ``gate`` is given every
    call waits on it, and ``entered`` is set as soon as a call starts.
    """

    def __init__(self, *results: Catalog | Exception, gate: asyncio.Event | None = None) -> None:
        self.results = list(results)
        self.calls = 0
        self.gate = gate
        self.entered = asyncio.Event()

    async def fetch_catalog(self) -> Catalog:
        result = self.results[min(self.calls, len(self.results) - 1)]
        self.calls += 1
        self.entered.set()
        if self.gate is not None:
            await self.gate.wait()
        else:
            await asyncio.sleep(0)
        if isinstance(result, Exception):
            raise result
        return result


@pytest.fixture()
def products() -> Catalog:
    return (
        Product(
            id=1,
            name="Laptop ASUS ROG",
            description="Laptop gaming",
            category="Elektronik",
            price=18_500_000,
            stock=12,
        ),
        Product(
            id=2,
            name="Mouse Logitech MX Master 3",
            description="Mouse wireless ergonomis",
            category="Aksesoris",
            price=1_450_000,
            stock=40,
        ),
        Product(
            id=3,
            name="Keyboard Keychron K2",
            description="Keyboard mechanical 75%",
            category="Aksesoris",
            price=1_350_000,
            stock=0,
        ),
    )


@pytest.fixture()
def product_dicts(products: Catalog) -> list[dict]:
    return [p.model_dump() for p in products]


@pytest.fixture()
def make_source() -> type[FakeSource]:
    return FakeSource


@pytest.fixture()
def fixed_now() -> datetime:
    return FIXED_NOW


@pytest.fixture()
def resolver(fixed_now: datetime) -> StrategyResolver:
    return StrategyResolver(clock=lambda: fixed_now)
