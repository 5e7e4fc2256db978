"""Ports for fetching change records from the upstream index."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from fiowatch.domain.types import ChangeBatch


@runtime_checkable
class ChangeSource(Protocol):
    """Callable port returning the change records of one window.

    Implementations raise ``UpstreamUnavailableError`` on transport failures
    and ``UpstreamMalformedError`` on unexpected payloads.
    """

    def __call__(self, *, window_start: int) -> ChangeBatch: ...


__all__ = ["ChangeSource"]
