"""Value types flowing through one reconciliation run."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import StrEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Mapping


class ChangeKind(StrEnum):
    """What an upstream change record says happened to its subject."""

    PRESENT = "present"
    ABSENT = "absent"
    REGISTER_DOMAIN = "regdomain"
    BURN_DOMAIN = "burndomain"
    OTHER = "other"


@dataclass(frozen=True, slots=True)
class CheckpointRecord:
    """Durable reconciliation progress plus the single-flight guard.

    ``extra`` carries every other field found in the stored document so a
    read-modify-write never drops data it does not understand. ``revision``
    is the store's concurrency token and is never part of the document.
    """

    last_block: int
    active: bool = False
    extra: Mapping[str, object] = field(default_factory=dict)
    revision: int | None = None

    def with_guard(self) -> CheckpointRecord:
        return replace(self, active=True)

    def released(self, *, last_block: int | None = None) -> CheckpointRecord:
        return replace(
            self,
            active=False,
            last_block=self.last_block if last_block is None else last_block,
        )

    def to_document(self) -> dict[str, object]:
        document = dict(self.extra)
        document["active"] = self.active
        document["last_block"] = self.last_block
        return document


@dataclass(frozen=True, slots=True)
class ChangeRecord:
    block_num: int
    kind: ChangeKind
    name: str


@dataclass(slots=True)
class ChangeBatch:
    """Change records for one window plus the proposed new high-water mark.

    ``high_water_mark`` is loosely typed: it comes straight from
    the upstream and is validated by the orchestrator before it is committed.
    """

    window_start: int
    records: tuple[ChangeRecord, ...] = ()
    high_water_mark: int | float | None = None


@dataclass(frozen=True, slots=True)
class ClassifiedEventSet:
    registered: frozenset[str] = frozenset()
    removed: frozenset[str] = frozenset()

    @property
    def is_empty(self) -> bool:
        return not self.registered and not self.removed


__all__ = [
    "ChangeBatch",
    "ChangeKind",
    "ChangeRecord",
    "CheckpointRecord",
    "ClassifiedEventSet",
]
