"""Port for the durable checkpoint record."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from fiowatch.domain.types import CheckpointRecord


@runtime_checkable
class CheckpointStore(Protocol):
    """Reads and writes the single checkpoint record.

    ``load`` raises ``StoreUnavailableError`` or ``MalformedRecordError``;
    ``save`` raises ``StoreUnavailableError``, or ``ConcurrentModificationError``
    when the backend supports conditional writes and the record moved on.
    Read-modify-write sequencing is the caller's job.
    """

    def load(self) -> CheckpointRecord: ...

    def save(self, record: CheckpointRecord) -> CheckpointRecord: ...


__all__ = ["CheckpointStore"]
