"""Freshness policies and the static route → policy table."""

from __future__ import annotations

from enum import StrEnum

from freshcatalog.errors import CatalogError, ErrorCode


class FreshnessPolicy(StrEnum):
    """When catalog data is (re)fetched relative to a request/process boundary.

    ON_DEMAND    fetch on every activation, nothing cached
    PER_REQUEST  fetch once per external request, cached for that request only
    FROZEN       fetch once per process, cached for the process lifetime
    """

    ON_DEMAND = "on_demand"
    PER_REQUEST = "per_request"
    FROZEN = "frozen"

    @property
    def cached(self) -> bool:
        """True when outcomes are recorded in a scope slot."""
        return self is not FreshnessPolicy.ON_DEMAND


# One static choice per page: client refresh, server render, build snapshot.
ROUTE_POLICIES: dict[str, FreshnessPolicy] = {
    "/csr": FreshnessPolicy.ON_DEMAND,
    "/ssr": FreshnessPolicy.PER_REQUEST,
    "/ssg": FreshnessPolicy.FROZEN,
}


def policy_for_route(route: str) -> FreshnessPolicy:
    key = "/" + route.strip().strip("/")
    try:
        return ROUTE_POLICIES[key]
    except KeyError:
        known = ", ".join(sorted(ROUTE_POLICIES))
        raise CatalogError(
            ErrorCode.UNKNOWN_ROUTE, f"Unknown route {route!r} (known: {known})"
        ) from None
