"""Fault taxonomy shared by the adapters and the reconciliation loop.

Every adapter reports a failure by raising one of the ``WatcherError``
subclasses below. Each class carries an :class:`ErrorKind` so the
orchestrator can turn the fault into an explicit result value without
inspecting messages.
"""

from __future__ import annotations

from enum import StrEnum
from typing import ClassVar


class ErrorKind(StrEnum):
    CONFIG = "config"
    STORE_UNAVAILABLE = "store_unavailable"
    MALFORMED_RECORD = "malformed_record"
    CONCURRENT_MODIFICATION = "concurrent_modification"
    UPSTREAM_UNAVAILABLE = "upstream_unavailable"
    UPSTREAM_MALFORMED = "upstream_malformed"
    NOTIFY_UNAVAILABLE = "notify_unavailable"
    UNEXPECTED = "unexpected"


class WatcherError(RuntimeError):
    """Base class for faults raised by fiowatch adapters."""

    kind: ClassVar[ErrorKind] = ErrorKind.UNEXPECTED


class CheckpointError(WatcherError):
    """Raised when the checkpoint record cannot be read or written."""

    kind = ErrorKind.STORE_UNAVAILABLE


class StoreUnavailableError(CheckpointError):
    kind = ErrorKind.STORE_UNAVAILABLE


class MalformedRecordError(CheckpointError):
    kind = ErrorKind.MALFORMED_RECORD


class ConcurrentModificationError(CheckpointError):
    """Raised when a conditional write finds the record changed underneath it."""

    kind = ErrorKind.CONCURRENT_MODIFICATION


class UpstreamError(WatcherError):
    kind = ErrorKind.UPSTREAM_UNAVAILABLE


class UpstreamUnavailableError(UpstreamError):
    """Raised on transport failures and non-2xx responses from the index."""

    kind = ErrorKind.UPSTREAM_UNAVAILABLE


class UpstreamMalformedError(UpstreamError):
    """Raised when the index answers with an unexpected payload shape."""

    kind = ErrorKind.UPSTREAM_MALFORMED


class NotifyUnavailableError(WatcherError):
    """Raised when one or more digest messages could not be delivered."""

    kind = ErrorKind.NOTIFY_UNAVAILABLE

    def __init__(self, message: str, *, delivered: int = 0) -> None:
        super().__init__(message)
        self.delivered = delivered


def error_kind_of(exc: BaseException) -> ErrorKind:
    if isinstance(exc, WatcherError):
        return exc.kind
    return ErrorKind.UNEXPECTED


__all__ = [
    "CheckpointError",
    "ConcurrentModificationError",
    "ErrorKind",
    "MalformedRecordError",
    "NotifyUnavailableError",
    "StoreUnavailableError",
    "UpstreamError",
    "UpstreamMalformedError",
    "UpstreamUnavailableError",
    "WatcherError",
    "error_kind_of",
]
