"""Event classification for upstream change records."""

from __future__ import annotations

from typing import TYPE_CHECKING, Final

from .types import ChangeKind, ClassifiedEventSet

if TYPE_CHECKING:
    from collections.abc import Iterable

    from .types import ChangeRecord

REGISTERING_KINDS: Final[frozenset[ChangeKind]] = frozenset(
    {ChangeKind.PRESENT, ChangeKind.REGISTER_DOMAIN}
)
REMOVING_KINDS: Final[frozenset[ChangeKind]] = frozenset(
    {ChangeKind.ABSENT, ChangeKind.BURN_DOMAIN}
)


def classify(records: Iterable[ChangeRecord]) -> ClassifiedEventSet:
    """Split change records into registered/renewed and removed subject names.

    Order does not matter and repeated subjects collapse; records of any
    other kind are ignored.
    """

    registered: set[str] = set()
    removed: set[str] = set()
    for record in records:
        if record.kind in REGISTERING_KINDS:
            registered.add(record.name)
        elif record.kind in REMOVING_KINDS:
            removed.add(record.name)
    return ClassifiedEventSet(registered=frozenset(registered), removed=frozenset(removed))
