"""Shared pieces of the checkpoint store adapters."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

from fiowatch.domain.errors import CheckpointError
from fiowatch.domain.ports.checkpoint import CheckpointStore

if TYPE_CHECKING:
    from fiowatch.domain.types import CheckpointRecord


class CheckpointExistsError(CheckpointError):
    """Raised when provisioning would overwrite an existing checkpoint."""


@runtime_checkable
class ProvisionableCheckpointStore(CheckpointStore, Protocol):
    """Checkpoint store that can also be provisioned out of band."""

    @property
    def description(self) -> str: ...

    def exists(self) -> bool: ...

    def initialise(self, record: CheckpointRecord, *, force: bool = False) -> CheckpointRecord: ...
