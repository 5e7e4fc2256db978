"""Port for delivering digest notifications."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from fiowatch.domain.types import ClassifiedEventSet


@runtime_checkable
class Notifier(Protocol):
    def __call__(self, events: ClassifiedEventSet) -> int:
        """Send digests for *events*, returning how many messages were delivered."""
        ...


__all__ = ["Notifier"]
