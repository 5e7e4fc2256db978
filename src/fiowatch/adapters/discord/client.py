"""Webhook notifier posting digest messages to Discord."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

import httpx

from fiowatch.adapters.http_resilience import ResilientClient
from fiowatch.domain.errors import NotifyUnavailableError

from .messages import build_digests

if TYPE_CHECKING:
    from fiowatch.adapters.http_resilience import ClientFactory
    from fiowatch.config.discord import DiscordConfig
    from fiowatch.domain.types import ClassifiedEventSet

log = getLogger(__name__)


def _describe(exc: httpx.HTTPError | httpx.InvalidURL) -> str:
    # The webhook URL embeds its token; keep it out of logs and results.
    if isinstance(exc, httpx.HTTPStatusError):
        return f"HTTP {exc.response.status_code}"
    return type(exc).__name__


@dataclass(slots=True)
class DiscordWebhookNotifier:
    config: DiscordConfig
    client_factory: ClientFactory = field(default=ResilientClient)

    def __call__(self, events: ClassifiedEventSet) -> int:
        digests = build_digests(events, content_limit=self.config.content_limit)
        if not digests:
            return 0
        return asyncio.run(self._post_digests(digests))

    async def _post_digests(self, digests: list[str]) -> int:
        delivered = 0
        failures: list[str] = []
        async with self.client_factory(self.config.resilience) as client:
            for content in digests:
                try:
                    response = await client.post(self.config.webhook_url, json={"content": content})
                    response.raise_for_status()
                except (httpx.HTTPError, httpx.InvalidURL) as exc:
                    reason = _describe(exc)
                    log.warning("Webhook rejected digest (%s chars): %s", len(content), reason)
                    failures.append(reason)
                    continue
                delivered += 1

        if failures:
            raise NotifyUnavailableError(
                f"{len(failures)} of {len(digests)} digests not delivered: {', '.join(failures)}",
                delivered=delivered,
            )
        log.info("Sent %s digest messages", delivered)
        return delivered
