"""Strategy resolver: turns (policy, source, scope) into a FetchOutcome.

Caching discipline per policy:

- ON_DEMAND   every call hits the source; nothing is stored.
- PER_REQUEST the first call in a ``RequestScope`` hits the source and the
              outcome is stored in that request's slot.
- FROZEN      the first call in the ``ProcessScope`` hits the source and the
              outcome is stored for the life of the process. A failure is
              recorded as non-recoverable and returned to every later caller.

Source failures are never raised out of ``resolve``; they come back as a
failed ``FetchOutcome``. Nothing is retried automatically.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING

import structlog

from freshcatalog.errors import CatalogError, CatalogSourceError, ErrorCode, ScopeClosedError
from freshcatalog.models.outcome import FailureReason, FetchOutcome
from freshcatalog.policy import FreshnessPolicy
from freshcatalog.scope import Activation, ProcessScope, RequestScope

if TYPE_CHECKING:
    from collections.abc import Callable

    from freshcatalog.scope import ScopeHandle
    from freshcatalog.sources import CatalogSource

log = structlog.get_logger()

_CACHED_SCOPE_TYPES: dict[FreshnessPolicy, type[ProcessScope] | type[RequestScope]] = {
    FreshnessPolicy.PER_REQUEST: RequestScope,
    FreshnessPolicy.FROZEN: ProcessScope,
}


def _utcnow() -> datetime:
    return datetime.now(UTC)


class StrategyResolver:
    """Resolves catalog data according to a FreshnessPolicy.

    ``clock`` stamps ``fetched_at``; inject a fixed clock in tests.
    """

    def __init__(self, clock: Callable[[], datetime] | None = None) -> None:
        self._clock = clock or _utcnow

    async def resolve(
        self,
        policy: FreshnessPolicy,
        source: CatalogSource,
        scope: ScopeHandle = None,
    ) -> FetchOutcome:
        policy = FreshnessPolicy(policy)
        if policy is FreshnessPolicy.ON_DEMAND:
            if scope is not None and not isinstance(scope, Activation):
                raise _scope_mismatch(policy, scope)
            return await self._resolve_uncached(policy, source, scope)

        if not isinstance(scope, _CACHED_SCOPE_TYPES[policy]):
            raise _scope_mismatch(policy, scope)
        return await self._resolve_cached(policy, source, scope)

    async def _resolve_uncached(
        self,
        policy: FreshnessPolicy,
        source: CatalogSource,
        activation: Activation | None,
    ) -> FetchOutcome:
        if activation is not None:
            _ensure_open(activation)
        outcome = await self._fetch(policy, source)
        if activation is not None and activation.closed:
            log.info("fetch_discarded", policy=policy.value, status=outcome.status.value)
            raise ScopeClosedError("Activation closed while its fetch was in flight")
        return outcome

    async def _resolve_cached(
        self,
        policy: FreshnessPolicy,
        source: CatalogSource,
        scope: ProcessScope | RequestScope,
    ) -> FetchOutcome:
        _ensure_open(scope)
        slot = scope.slot
        if slot.outcome is not None:
            return slot.outcome

        async with slot.lock:
            # Losers of the first-fetch race land here after the winner wrote.
            if slot.outcome is not None:
                return slot.outcome
            _ensure_open(scope)
            outcome = await self._fetch(policy, source)
            if scope.closed:
                log.info("fetch_discarded", policy=policy.value, status=outcome.status.value)
                raise ScopeClosedError("Scope closed while its fetch was in flight")
            slot.assign(outcome)
            if policy is FreshnessPolicy.FROZEN:
                log.info("frozen_scope_initialized", status=outcome.status.value)
            return outcome

    async def _fetch(self, policy: FreshnessPolicy, source: CatalogSource) -> FetchOutcome:
        try:
            catalog = await source.fetch_catalog()
        except CatalogSourceError as exc:
            terminal = policy is FreshnessPolicy.FROZEN
            log.warning(
                "catalog_fetch_failed",
                policy=policy.value,
                code=exc.code.value,
                error=exc.message,
                terminal=terminal,
            )
            reason = FailureReason.from_error(exc, recoverable=exc.recoverable and not terminal)
            return FetchOutcome.failure(policy, reason, self._clock())

        log.debug("catalog_fetched", policy=policy.value, items=len(catalog))
        return FetchOutcome.success(policy, tuple(catalog), self._clock())


def _ensure_open(scope: ProcessScope | RequestScope | Activation) -> None:
    if scope.closed:
        raise ScopeClosedError(f"{type(scope).__name__} is closed")


def _scope_mismatch(policy: FreshnessPolicy, scope: object) -> CatalogError:
    expected = (
        "None or Activation"
        if policy is FreshnessPolicy.ON_DEMAND
        else _CACHED_SCOPE_TYPES[policy].__name__
    )
    return CatalogError(
        ErrorCode.SCOPE_MISMATCH,
        f"{policy.value} requires {expected}, got {type(scope).__name__}",
    )
