"""Map a view's fetch state to what the caller renders.

The mapping is the same for every freshness policy; only the way outcomes are
produced differs between them.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from freshcatalog.models.presentation import Failed, Loading, Ready

if TYPE_CHECKING:
    from freshcatalog.models.presentation import PresentationState, ViewState


def present(state: ViewState) -> PresentationState:
    """Pure and total: no outcome yet → Loading, else Ready or Failed."""
    outcome = state.outcome
    if outcome is None:
        # Not started yet counts as loading, the same as a fetch in flight.
        return Loading()
    if outcome.payload is not None:
        return Ready(catalog=outcome.payload, fetched_at=outcome.fetched_at)
    assert outcome.error is not None
    return Failed(reason=outcome.error, fetched_at=outcome.fetched_at)
