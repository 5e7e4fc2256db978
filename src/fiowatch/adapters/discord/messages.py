"""Digest message formatting."""

from __future__ import annotations

from typing import TYPE_CHECKING, Final

from fiowatch.config.discord import DISCORD_CONTENT_LIMIT

if TYPE_CHECKING:
    from collections.abc import Iterable

    from fiowatch.domain.types import ClassifiedEventSet

BURNED_PREFIX: Final[str] = "The following FIO Domains were recently burned: "
REGISTERED_PREFIX: Final[str] = "The following FIO Domains were recently registered/renewed: "
_SEPARATOR: Final[str] = ", "


def build_digests(
    events: ClassifiedEventSet,
    *,
    content_limit: int = DISCORD_CONTENT_LIMIT,
) -> list[str]:
    """Render the removed digest, then the registered digest, skipping empty ones.

    A digest that does not fit in ``content_limit`` characters continues in
    further messages, split between names.
    """

    digests: list[str] = []
    if events.removed:
        digests.extend(_chunk(BURNED_PREFIX, sorted(events.removed), content_limit))
    if events.registered:
        digests.extend(_chunk(REGISTERED_PREFIX, sorted(events.registered), content_limit))
    return digests


def _chunk(prefix: str, names: Iterable[str], content_limit: int) -> list[str]:
    messages: list[str] = []
    current: list[str] = []
    length = len(prefix)
    for name in names:
        added = len(name) + (len(_SEPARATOR) if current else 0)
        if current and length + added > content_limit:
            messages.append(prefix + _SEPARATOR.join(current))
            current = []
            length = len(prefix)
            added = len(name)
        current.append(name)
        length += added
    if current:
        messages.append(prefix + _SEPARATOR.join(current))
    return messages
