from __future__ import annotations

from datetime import datetime
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field

from freshcatalog.models.catalog import Catalog
from freshcatalog.models.outcome import FailureReason, FetchOutcome


class ViewState(BaseModel):
    """Input to ``present``: the latest outcome plus whether a fetch is in flight.

    ``outstanding`` is informational only. ``present`` derives the state from
    ``outcome`` alone: no outcome is Loading whether or not a fetch has started.
    """

    model_config = ConfigDict(frozen=True)

    outstanding: bool = False
    outcome: FetchOutcome | None = None


class Loading(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["loading"] = "loading"


class Ready(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["ready"] = "ready"
    catalog: Catalog
    fetched_at: datetime


class Failed(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["failed"] = "failed"
    reason: FailureReason
    fetched_at: datetime


PresentationState = Annotated[Loading | Ready | Failed, Field(discriminator="kind")]
