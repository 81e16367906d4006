from __future__ import annotations

from freshcatalog.models.api import ProductsEnvelope
from freshcatalog.models.catalog import Catalog, Product
from freshcatalog.models.outcome import FailureReason, FetchOutcome, FetchStatus
from freshcatalog.models.presentation import (
    Failed,
    Loading,
    PresentationState,
    Ready,
    ViewState,
)

__all__ = [
    # catalog
    "Product",
    "Catalog",
    # outcome
    "FetchStatus",
    "FailureReason",
    "FetchOutcome",
    # presentation
    "ViewState",
    "Loading",
    "Ready",
    "Failed",
    "PresentationState",
    # api
    "ProductsEnvelope",
]
