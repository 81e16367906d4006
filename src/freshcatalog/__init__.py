"""Serve a product catalog under a chosen freshness policy."""

from __future__ import annotations

from freshcatalog.errors import (
    CatalogError,
    CatalogFormatError,
    CatalogSourceError,
    ErrorCode,
    FrozenInitializationError,
    ScopeClosedError,
    SourceUnavailableError,
)
from freshcatalog.policy import FreshnessPolicy, policy_for_route
from freshcatalog.presentation import present
from freshcatalog.resolver import StrategyResolver
from freshcatalog.scope import Activation, ProcessScope, RequestScope

__version__ = "0.1.0"

__all__ = [
    "__version__",
    # errors
    "ErrorCode",
    "CatalogError",
    "CatalogSourceError",
    "SourceUnavailableError",
    "CatalogFormatError",
    "FrozenInitializationError",
    "ScopeClosedError",
    # policy
    "FreshnessPolicy",
    "policy_for_route",
    # scopes
    "ProcessScope",
    "RequestScope",
    "Activation",
    # core
    "StrategyResolver",
    "present",
]
