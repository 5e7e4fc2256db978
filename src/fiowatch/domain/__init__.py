"""Domain layer: value types, classification and the reconciliation loop."""

from __future__ import annotations

from .classification import classify
from .reconciliation import (
    Reconciler,
    ReconciliationResult,
    RunOutcome,
    RunState,
    validate_high_water_mark,
)
from .types import ChangeBatch, ChangeKind, ChangeRecord, CheckpointRecord, ClassifiedEventSet

__all__ = [
    "ChangeBatch",
    "ChangeKind",
    "ChangeRecord",
    "CheckpointRecord",
    "ClassifiedEventSet",
    "ReconciliationResult",
    "Reconciler",
    "RunOutcome",
    "RunState",
    "classify",
    "validate_high_water_mark",
]
