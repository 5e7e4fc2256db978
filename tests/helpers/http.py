"""Helpers routing ResilientClient traffic to an in-process handler."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

import httpx

from fiowatch.adapters.http_resilience import ResilientClient

if TYPE_CHECKING:
    from collections.abc import Callable

    from fiowatch.config.http_resilience import ResilienceConfig


def make_client_factory(
    handler: Callable[[httpx.Request], httpx.Response],
) -> Callable[[ResilienceConfig], ResilientClient]:
    async def async_handler(request: httpx.Request) -> httpx.Response:
        return handler(request)

    def factory(resilience: ResilienceConfig) -> ResilientClient:
        client = ResilientClient(resilience)
        client._client = httpx.AsyncClient(transport=httpx.MockTransport(async_handler))  # noqa: SLF001  # type: ignore[reportPrivateUsage]
        return client

    return factory


def request_json(request: httpx.Request) -> dict[str, object]:
    return json.loads(request.content.decode("utf-8"))
