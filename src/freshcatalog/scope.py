"""Scope handles: the unit of outcome reuse for each freshness policy.

  ProcessScope  one slot for the process lifetime        (FROZEN)
  RequestScope  one slot for a single external request   (PER_REQUEST)
  Activation    no slot, one per consumer activation     (ON_DEMAND)

A slot is written at most once. Concurrent first resolves are serialised on
the slot's lock, so the first writer wins and everyone else reads its outcome.
"""

from __future__ import annotations

import asyncio
import uuid
from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from freshcatalog.models.outcome import FetchOutcome

log = structlog.get_logger()


class OutcomeSlot:
    """Single-assignment holder for one FetchOutcome."""

    def __init__(self) -> None:
        self.lock = asyncio.Lock()
        self._outcome: FetchOutcome | None = None

    @property
    def outcome(self) -> FetchOutcome | None:
        return self._outcome

    def assign(self, outcome: FetchOutcome) -> None:
        if self._outcome is not None:
            raise RuntimeError("outcome slot is already assigned")
        self._outcome = outcome


class Activation:
    """One ON_DEMAND consumer activation (e.g. one page mount)."""

    def __init__(self) -> None:
        self.closed = False

    def close(self) -> None:
        self.closed = True


class RequestScope:
    """Outcome slot owned by exactly one external request.

    Use as ``async with RequestScope() as scope:``; the scope closes on exit
    and any fetch still in flight for it is discarded.
    """

    def __init__(self, request_id: str | None = None) -> None:
        self.request_id = request_id or uuid.uuid4().hex
        self.slot = OutcomeSlot()
        self.closed = False

    @property
    def outcome(self) -> FetchOutcome | None:
        return self.slot.outcome

    def close(self) -> None:
        self.closed = True

    async def __aenter__(self) -> RequestScope:
        structlog.contextvars.bind_contextvars(request_id=self.request_id)
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        self.close()
        structlog.contextvars.unbind_contextvars("request_id")


class ProcessScope:
    """Outcome slot shared by every caller for the life of the process.

    Created once by whatever composes the system. It never closes; the only
    way to get a second fetch is an explicit ``reinitialize()``.
    """

    closed = False

    def __init__(self) -> None:
        self.slot = OutcomeSlot()

    @property
    def outcome(self) -> FetchOutcome | None:
        return self.slot.outcome

    def reinitialize(self) -> None:
        """Drop the recorded outcome so the next FROZEN resolve fetches again.

        A fetch already in flight keeps writing into the old slot, which is
        no longer observable.
        """
        previous = self.slot.outcome
        self.slot = OutcomeSlot()
        log.info(
            "process_scope_reinitialized",
            previous_status=previous.status.value if previous is not None else None,
        )


ScopeHandle = ProcessScope | RequestScope | Activation | None
