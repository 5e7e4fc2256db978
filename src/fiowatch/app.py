"""Application wiring and the invocation boundary."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING, Final

from fiowatch.adapters.checkpoint import build_checkpoint_store
from fiowatch.adapters.discord import DiscordWebhookNotifier
from fiowatch.adapters.hyperion import BlockScanChangeSource, DeltaQueryChangeSource, HyperionClient
from fiowatch.config import (
    ChangeSourceKind,
    ConfigurationError,
    WatcherConfig,
    configure_logging,
    get_watcher_config,
)
from fiowatch.config.logging import resolve_log_level
from fiowatch.domain.errors import ErrorKind
from fiowatch.domain.reconciliation import Reconciler, ReconciliationResult, RunOutcome

if TYPE_CHECKING:
    from collections.abc import Mapping

    from fiowatch.adapters.http_resilience import ClientFactory
    from fiowatch.domain.ports import ChangeSource, CheckpointStore, Notifier

log = getLogger(__name__)

RUN_COMPLETE_MESSAGE: Final[str] = "Run complete."
STILL_RUNNING_MESSAGE: Final[str] = "Reconciliation still running, exiting."
FAILURE_MESSAGE: Final[str] = "Error in function, aborting."


@dataclass(frozen=True, slots=True)
class InvocationResponse:
    status_code: int
    body: dict[str, object]

    @property
    def ok(self) -> bool:
        return self.status_code == 200

    def to_proxy_response(self) -> dict[str, object]:
        return {"statusCode": self.status_code, "body": json.dumps(self.body)}


def build_change_source(
    config: WatcherConfig,
    *,
    client_factory: ClientFactory | None = None,
) -> ChangeSource:
    client = HyperionClient(config=config.hyperion, client_factory=client_factory)
    if config.sync.source is ChangeSourceKind.BLOCK_SCAN:
        return BlockScanChangeSource(client=client, max_window_size=config.sync.max_window_size)
    return DeltaQueryChangeSource(client=client)


def build_reconciler(
    config: WatcherConfig,
    *,
    store: CheckpointStore | None = None,
    source: ChangeSource | None = None,
    notifier: Notifier | None = None,
) -> Reconciler:
    return Reconciler(
        store=store or build_checkpoint_store(config.checkpoint),
        source=source or build_change_source(config),
        notifier=notifier or DiscordWebhookNotifier(config=config.discord),
    )


def invoke(
    *,
    config: WatcherConfig | None = None,
    store: CheckpointStore | None = None,
    source: ChangeSource | None = None,
    notifier: Notifier | None = None,
) -> InvocationResponse:
    """Run one reconciliation and describe it as an HTTP-style response.

    Configuration is resolved before anything touches storage or the
    upstream, so a configuration error never leaves state behind.
    """

    try:
        effective_config = config or get_watcher_config()
        logging.getLogger("fiowatch").setLevel(resolve_log_level(effective_config.log_level))
        reconciler = build_reconciler(effective_config, store=store, source=source, notifier=notifier)
    except ConfigurationError as exc:
        log.error("Configuration error: %s", exc)
        return InvocationResponse(
            status_code=500,
            body={"message": FAILURE_MESSAGE, "error": str(exc), "error_kind": ErrorKind.CONFIG},
        )

    log.info(
        "Starting reconciliation: source=%s, checkpoint=%s",
        effective_config.sync.source,
        effective_config.checkpoint.key,
    )
    try:
        result = reconciler.run()
    except Exception as exc:  # noqa: BLE001
        log.exception("Unhandled error before the guard was taken")
        return InvocationResponse(
            status_code=500,
            body={"message": FAILURE_MESSAGE, "error": str(exc), "error_kind": ErrorKind.UNEXPECTED},
        )
    return response_for(result)


def response_for(result: ReconciliationResult) -> InvocationResponse:
    if result.outcome is RunOutcome.COMPLETED:
        body: dict[str, object] = {
            "message": RUN_COMPLETE_MESSAGE,
            "last_block": result.last_block,
            "updated": result.updated,
            "registered": sorted(result.registered),
            "removed": sorted(result.removed),
            "notifications_sent": result.notifications_sent,
        }
        if result.high_water_mark_rejected:
            body["high_water_mark_rejected"] = True
        if result.notify_error is not None:
            body["notify_error"] = result.notify_error
        return InvocationResponse(status_code=200, body=body)

    if result.outcome is RunOutcome.SKIPPED:
        return InvocationResponse(
            status_code=200,
            body={
                "message": STILL_RUNNING_MESSAGE,
                "last_block": result.last_block,
                "updated": False,
                "guard_held": True,
            },
        )

    return InvocationResponse(
        status_code=500,
        body={
            "message": FAILURE_MESSAGE,
            "error": result.error,
            "error_kind": result.error_kind,
            "failed_state": result.failed_state,
            "guard_released": result.guard_released,
        },
    )


def lambda_handler(event: Mapping[str, object] | None, context: object) -> dict[str, object]:  # noqa: ARG001
    """Entry point for a scheduled HTTP trigger; the request carries no payload."""

    configure_logging()
    return invoke().to_proxy_response()
