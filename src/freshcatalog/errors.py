"""Error types shared across freshcatalog.

Every error carries a machine-readable ``ErrorCode`` and a ``recoverable``
flag. Callers branch on the code, never on the message text.

Source failures (``CatalogSourceError`` subclasses) never escape
``StrategyResolver.resolve``: they are captured into a failed
``FetchOutcome``. The remaining errors signal misuse or a discarded consumer
and do propagate.
"""

from __future__ import annotations

from enum import StrEnum


class ErrorCode(StrEnum):
    SOURCE_UNAVAILABLE = "SOURCE_UNAVAILABLE"
    INVALID_FORMAT = "INVALID_FORMAT"
    FROZEN_INITIALIZATION_FAILED = "FROZEN_INITIALIZATION_FAILED"
    SCOPE_MISMATCH = "SCOPE_MISMATCH"
    SCOPE_CLOSED = "SCOPE_CLOSED"
    UNKNOWN_ROUTE = "UNKNOWN_ROUTE"


class CatalogError(Exception):
    """Base error: a code, a human-readable message and a recoverability flag."""

    def __init__(self, code: ErrorCode, message: str, recoverable: bool = False) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.recoverable = recoverable

    def __repr__(self) -> str:
        return f"{type(self).__name__}(code={self.code.value!r}, message={self.message!r})"


class CatalogSourceError(CatalogError):
    """A ``CatalogSource`` could not produce a catalog."""


class SourceUnavailableError(CatalogSourceError):
    """The underlying read channel (file, network, database) is unavailable."""

    def __init__(self, message: str) -> None:
        super().__init__(ErrorCode.SOURCE_UNAVAILABLE, message, recoverable=True)


class CatalogFormatError(CatalogSourceError):
    """The payload could not be interpreted as a catalog."""

    def __init__(self, message: str) -> None:
        super().__init__(ErrorCode.INVALID_FORMAT, message, recoverable=True)


class FrozenInitializationError(CatalogError):
    """The single fetch of a frozen scope failed; terminal for that scope.

    ``cause`` keeps the category of the original source failure.
    """

    def __init__(self, cause: ErrorCode, message: str) -> None:
        super().__init__(ErrorCode.FROZEN_INITIALIZATION_FAILED, message, recoverable=False)
        self.cause = cause


class ScopeClosedError(CatalogError):
    """The consumer or scope was torn down; its result is discarded."""

    def __init__(self, message: str) -> None:
        super().__init__(ErrorCode.SCOPE_CLOSED, message, recoverable=False)
