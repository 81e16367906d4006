from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from freshcatalog.errors import ScopeClosedError
from freshcatalog.models.presentation import ViewState
from freshcatalog.policy import FreshnessPolicy
from freshcatalog.presentation import present
from freshcatalog.scope import Activation

if TYPE_CHECKING:
    from freshcatalog.models.outcome import FetchOutcome
    from freshcatalog.models.presentation import PresentationState
    from freshcatalog.resolver import StrategyResolver
    from freshcatalog.scope import ScopeHandle
    from freshcatalog.sources import CatalogSource

log = structlog.get_logger()


class CatalogView:
    """One consumer of catalog data, e.g. a single page activation.

    Holds the latest outcome and whether a fetch is in flight; ``state``
    derives what to render. An ON_DEMAND view owns its ``Activation``, so
    ``close()`` discards a fetch still in flight. For cached policies the
    shared slot is still filled, but a closed view never takes the result.
    """

    def __init__(
        self,
        resolver: StrategyResolver,
        source: CatalogSource,
        policy: FreshnessPolicy,
        scope: ScopeHandle = None,
    ) -> None:
        self.policy = FreshnessPolicy(policy)
        if self.policy is FreshnessPolicy.ON_DEMAND and scope is None:
            scope = Activation()
        self.scope = scope
        self.outstanding = False
        self.outcome: FetchOutcome | None = None
        self.closed = False
        self._resolver = resolver
        self._source = source

    @property
    def state(self) -> PresentationState:
        return present(ViewState(outstanding=self.outstanding, outcome=self.outcome))

    async def load(self) -> PresentationState:
        """Resolve, record the outcome and return the new state.

        Raises ``ScopeClosedError`` when the view (or its scope) was closed
        before the fetch finished; the late outcome is dropped.
        """
        if self.closed:
            raise ScopeClosedError("CatalogView is closed")
        self.outstanding = True
        try:
            outcome = await self._resolver.resolve(self.policy, self._source, self.scope)
        finally:
            self.outstanding = False
        if self.closed:
            log.info("view_result_discarded", policy=self.policy.value)
            raise ScopeClosedError("CatalogView closed while loading")
        self.outcome = outcome
        return self.state

    def close(self) -> None:
        self.closed = True
        if isinstance(self.scope, Activation):
            self.scope.close()
