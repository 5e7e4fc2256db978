"""Translate Hyperion payloads into change records."""

from __future__ import annotations

from typing import TYPE_CHECKING, Final

from fiowatch.domain.types import ChangeKind, ChangeRecord

if TYPE_CHECKING:
    from collections.abc import Collection, Iterator

    from .schema import Delta, Trace

_SUBJECT_KEYS: Final[tuple[str, ...]] = ("fio_domain", "domain", "name")


def parse_delta(delta: Delta) -> ChangeRecord:
    if delta.present == 1:
        kind = ChangeKind.PRESENT
    elif delta.present == 0:
        kind = ChangeKind.ABSENT
    else:
        kind = ChangeKind.OTHER
    return ChangeRecord(block_num=delta.block_num, kind=kind, name=delta.data.name)


def parse_traces(
    traces: list[Trace],
    *,
    block_num: int,
    contract: str,
    register_actions: Collection[str],
    burn_actions: Collection[str],
) -> Iterator[ChangeRecord]:
    """Yield a change record for every domain action on *contract* in *traces*."""

    for trace in traces:
        act = trace.act
        if act.account != contract:
            continue
        if act.name in register_actions:
            kind = ChangeKind.REGISTER_DOMAIN
        elif act.name in burn_actions:
            kind = ChangeKind.BURN_DOMAIN
        else:
            continue
        subject = _subject_name(act.data)
        if subject is None:
            continue
        yield ChangeRecord(block_num=block_num, kind=kind, name=subject)


def _subject_name(data: dict[str, object]) -> str | None:
    for key in _SUBJECT_KEYS:
        value = data.get(key)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return None
