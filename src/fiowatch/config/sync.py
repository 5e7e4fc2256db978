"""Reconciliation defaults."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

DEFAULT_MAX_WINDOW_SIZE = 1000


class ChangeSourceKind(StrEnum):
    DELTA = "delta"
    BLOCK_SCAN = "block-scan"


@dataclass(frozen=True, slots=True)
class SyncConfig:
    source: ChangeSourceKind = ChangeSourceKind.DELTA
    max_window_size: int = DEFAULT_MAX_WINDOW_SIZE
