"""Checkpoint-guarded incremental reconciliation.

One call to :meth:`Reconciler.run` walks the state machine

    idle -> guard_acquired -> fetching -> classifying -> notifying -> committing -> idle

with ``error_recovery`` reachable from every state after the guard is set.
The checkpoint is written at most twice on the happy path: once to take the
guard before any upstream call, once to commit the new high-water mark and
release the guard. Notifier faults are recorded and never block the commit.
Every other failure after the guard is taken ends in a best-effort
reload-and-release of the guard; progress is never advanced on that path.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import StrEnum
from logging import getLogger
from typing import TYPE_CHECKING

from .classification import classify
from .errors import (
    CheckpointError,
    ConcurrentModificationError,
    ErrorKind,
    NotifyUnavailableError,
    UpstreamMalformedError,
    error_kind_of,
)
from .types import ClassifiedEventSet

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from .ports import ChangeSource, CheckpointStore, Notifier
    from .types import ChangeRecord, CheckpointRecord

log = getLogger(__name__)

type Classifier = Callable[[Iterable[ChangeRecord]], ClassifiedEventSet]


class RunState(StrEnum):
    IDLE = "idle"
    GUARD_ACQUIRED = "guard_acquired"
    FETCHING = "fetching"
    CLASSIFYING = "classifying"
    NOTIFYING = "notifying"
    COMMITTING = "committing"
    ERROR_RECOVERY = "error_recovery"


class RunOutcome(StrEnum):
    COMPLETED = "completed"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class ReconciliationResult:
    """Outcome of a single run.

    ``SKIPPED`` means the guard was already held. Seeing it on consecutive
    runs with an unchanged ``last_block`` is the stuck-guard signal operators
    alert on.
    """

    outcome: RunOutcome
    last_block: int | None = None
    previous_block: int | None = None
    registered: frozenset[str] = frozenset()
    removed: frozenset[str] = frozenset()
    notifications_sent: int = 0
    notify_error: str | None = None
    high_water_mark_rejected: bool = False
    error: str | None = None
    error_kind: ErrorKind | None = None
    failed_state: RunState | None = None
    guard_released: bool | None = None

    @property
    def updated(self) -> bool:
        return (
            self.outcome is RunOutcome.COMPLETED
            and self.last_block is not None
            and self.last_block != self.previous_block
        )

    @property
    def guard_held(self) -> bool:
        return self.outcome is RunOutcome.SKIPPED


def validate_high_water_mark(candidate: object, window_start: int) -> int | None:
    """Return *candidate* as a block number if it is safe to commit, else ``None``.

    A usable value is an integer (or an integral, finite float) that does not
    lie behind the current progress, i.e. ``>= window_start - 1``.
    """

    if candidate is None or isinstance(candidate, bool):
        return None
    if isinstance(candidate, float):
        if math.isnan(candidate) or not math.isfinite(candidate) or not candidate.is_integer():
            return None
        candidate = int(candidate)
    if not isinstance(candidate, int):
        return None
    if candidate < window_start - 1:
        return None
    return candidate


@dataclass(slots=True)
class _RunProgress:
    state: RunState = RunState.IDLE
    previous_block: int | None = None


@dataclass(slots=True)
class Reconciler:
    """Ties the checkpoint store, change source, classifier and notifier together."""

    store: CheckpointStore
    source: ChangeSource
    notifier: Notifier
    classifier: Classifier = classify

    def run(self) -> ReconciliationResult:
        progress = _RunProgress()

        try:
            checkpoint = self.store.load()
        except CheckpointError as exc:
            log.error("Could not load checkpoint: %s", exc)
            return _failed(exc, progress)

        progress.previous_block = checkpoint.last_block
        log.info(
            "Checkpoint loaded: last_block=%s, active=%s", checkpoint.last_block, checkpoint.active
        )

        if checkpoint.active:
            log.warning(
                "Reconciliation still running (guard held at block %s), exiting.",
                checkpoint.last_block,
            )
            return _skipped(checkpoint)

        try:
            held = self.store.save(checkpoint.with_guard())
        except ConcurrentModificationError:
            log.warning("Checkpoint changed while taking the guard; another run owns it, exiting.")
            return _skipped(checkpoint)
        except CheckpointError as exc:
            log.error("Could not take the guard: %s", exc)
            return _failed(exc, progress)

        progress.state = RunState.GUARD_ACQUIRED
        try:
            return self._reconcile(held, progress)
        except Exception as exc:  # noqa: BLE001
            return self._recover(exc, progress)

    def _reconcile(self, held: CheckpointRecord, progress: _RunProgress) -> ReconciliationResult:
        window_start = held.last_block + 1
        log.info("Starting processing at block %s", window_start)

        progress.state = RunState.FETCHING
        batch = self.source(window_start=window_start)
        if batch.window_start != window_start:
            raise UpstreamMalformedError(
                f"Change source answered for block {batch.window_start}, asked for {window_start}"
            )
        log.info(
            "Fetched %s change records from block %s, proposed high-water mark %r",
            len(batch.records),
            batch.window_start,
            batch.high_water_mark,
        )

        events = ClassifiedEventSet()
        sent = 0
        notify_error: str | None = None
        candidate = validate_high_water_mark(batch.high_water_mark, window_start)
        if candidate is None:
            log.warning(
                "Rejected high-water mark %r for window starting at %s; keeping block %s",
                batch.high_water_mark,
                window_start,
                held.last_block,
            )
        else:
            progress.state = RunState.CLASSIFYING
            events = self.classifier(batch.records)

            progress.state = RunState.NOTIFYING
            sent, notify_error = self._notify(events)

        progress.state = RunState.COMMITTING
        committed = self.store.save(held.released(last_block=candidate))
        progress.state = RunState.IDLE
        log.info("Processing completed at block %s", committed.last_block)

        return ReconciliationResult(
            outcome=RunOutcome.COMPLETED,
            last_block=committed.last_block,
            previous_block=held.last_block,
            registered=events.registered,
            removed=events.removed,
            notifications_sent=sent,
            notify_error=notify_error,
            high_water_mark_rejected=candidate is None,
            guard_released=True,
        )

    def _notify(self, events: ClassifiedEventSet) -> tuple[int, str | None]:
        if events.is_empty:
            return 0, None
        try:
            return self.notifier(events), None
        except NotifyUnavailableError as exc:
            log.warning("Notification failed, committing progress anyway: %s", exc)
            return exc.delivered, str(exc)
        except Exception as exc:  # noqa: BLE001
            log.warning("Notifier raised, committing progress anyway: %s", exc, exc_info=exc)
            return 0, str(exc) or type(exc).__name__

    def _recover(self, exc: Exception, progress: _RunProgress) -> ReconciliationResult:
        failed_state = progress.state
        progress.state = RunState.ERROR_RECOVERY
        log.error("Reconciliation failed while %s: %s", failed_state, exc, exc_info=exc)

        released = False
        try:
            current = self.store.load()
            self.store.save(current.released())
        except Exception:  # noqa: BLE001
            log.exception("Could not release the guard; the checkpoint stays locked")
        else:
            released = True
            log.info("Guard released after failure; progress left at block %s", current.last_block)

        return _failed(exc, progress, failed_state=failed_state, guard_released=released)


def _skipped(checkpoint: CheckpointRecord) -> ReconciliationResult:
    return ReconciliationResult(
        outcome=RunOutcome.SKIPPED,
        last_block=checkpoint.last_block,
        previous_block=checkpoint.last_block,
    )


def _failed(
    exc: BaseException,
    progress: _RunProgress,
    *,
    failed_state: RunState | None = None,
    guard_released: bool | None = None,
) -> ReconciliationResult:
    return ReconciliationResult(
        outcome=RunOutcome.FAILED,
        last_block=progress.previous_block,
        previous_block=progress.previous_block,
        error=str(exc) or type(exc).__name__,
        error_kind=error_kind_of(exc),
        failed_state=failed_state or progress.state,
        guard_released=guard_released,
    )


__all__ = [
    "Classifier",
    "ReconciliationResult",
    "Reconciler",
    "RunOutcome",
    "RunState",
    "validate_high_water_mark",
]
