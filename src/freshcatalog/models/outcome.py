from __future__ import annotations

from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, model_validator

from freshcatalog.errors import (
    CatalogError,
    CatalogFormatError,
    ErrorCode,
    FrozenInitializationError,
    SourceUnavailableError,
)
from freshcatalog.models.catalog import Catalog
from freshcatalog.policy import FreshnessPolicy


class FetchStatus(StrEnum):
    SUCCESS = "success"
    FAILURE = "failure"


class FailureReason(BaseModel):
    """Why a fetch failed. ``code`` keeps the source error category."""

    model_config = ConfigDict(frozen=True)

    code: ErrorCode
    message: str
    recoverable: bool

    @classmethod
    def from_error(cls, exc: CatalogError, *, recoverable: bool | None = None) -> FailureReason:
        return cls(
            code=exc.code,
            message=exc.message,
            recoverable=exc.recoverable if recoverable is None else recoverable,
        )


class FetchOutcome(BaseModel):
    """Immutable record of one fetch attempt.

    Exactly one of ``payload`` / ``error`` is set, selected by ``status``.
    ``fetched_at`` is stamped for failures too: it records when the attempt
    finished, not when data was last good.
    """

    model_config = ConfigDict(frozen=True)

    status: FetchStatus
    policy: FreshnessPolicy
    fetched_at: datetime
    payload: Catalog | None = None
    error: FailureReason | None = None

    @model_validator(mode="after")
    def check_branch(self) -> FetchOutcome:
        if self.status == FetchStatus.SUCCESS:
            if self.payload is None or self.error is not None:
                raise ValueError("success outcome requires payload and no error")
        elif self.error is None or self.payload is not None:
            raise ValueError("failure outcome requires error and no payload")
        return self

    @classmethod
    def success(
        cls, policy: FreshnessPolicy, payload: Catalog, fetched_at: datetime
    ) -> FetchOutcome:
        return cls(
            status=FetchStatus.SUCCESS, policy=policy, payload=payload, fetched_at=fetched_at
        )

    @classmethod
    def failure(
        cls, policy: FreshnessPolicy, error: FailureReason, fetched_at: datetime
    ) -> FetchOutcome:
        return cls(status=FetchStatus.FAILURE, policy=policy, error=error, fetched_at=fetched_at)

    @property
    def ok(self) -> bool:
        return self.status == FetchStatus.SUCCESS

    def unwrap(self) -> Catalog:
        """Return the catalog, or raise the typed error this outcome recorded."""
        if self.payload is not None:
            return self.payload
        assert self.error is not None
        if self.policy == FreshnessPolicy.FROZEN:
            raise FrozenInitializationError(self.error.code, self.error.message)
        if self.error.code == ErrorCode.INVALID_FORMAT:
            raise CatalogFormatError(self.error.message)
        raise SourceUnavailableError(self.error.message)
