from __future__ import annotations

import httpx
import pytest

from fiowatch.adapters.discord import (
    BURNED_PREFIX,
    REGISTERED_PREFIX,
    DiscordWebhookNotifier,
    build_digests,
)
from fiowatch.config import DiscordConfig
from fiowatch.domain.errors import NotifyUnavailableError
from fiowatch.domain.types import ClassifiedEventSet
from tests.helpers.http import make_client_factory, request_json

WEBHOOK_URL = "https://discord.example/api/webhooks/1/secret-token"


def _events(*, registered: set[str] | None = None, removed: set[str] | None = None) -> ClassifiedEventSet:
    return ClassifiedEventSet(
        registered=frozenset(registered or ()),
        removed=frozenset(removed or ()),
    )


def test_build_digests_orders_removed_before_registered() -> None:
    digests = build_digests(_events(registered={"zeta", "alpha"}, removed={"gone"}))

    assert digests == [
        f"{BURNED_PREFIX}gone",
        f"{REGISTERED_PREFIX}alpha, zeta",
    ]


def test_build_digests_skips_empty_sets() -> None:
    assert build_digests(_events()) == []
    assert build_digests(_events(registered={"solo"})) == [f"{REGISTERED_PREFIX}solo"]


def test_build_digests_splits_long_digests() -> None:
    names = {f"domain{index:03d}" for index in range(300)}
    limit = 200

    digests = build_digests(_events(registered=names), content_limit=limit)

    assert len(digests) > 1
    assert all(len(digest) <= limit for digest in digests)
    assert all(digest.startswith(REGISTERED_PREFIX) for digest in digests)
    rendered: list[str] = []
    for digest in digests:
        rendered.extend(digest.removeprefix(REGISTERED_PREFIX).split(", "))
    assert rendered == sorted(names)


def test_notifier_posts_one_message_per_digest() -> None:
    posted: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        posted.append(request)
        return httpx.Response(204)

    notifier = DiscordWebhookNotifier(
        config=DiscordConfig(webhook_url=WEBHOOK_URL),
        client_factory=make_client_factory(handler),
    )

    delivered = notifier(_events(registered={"alpha", "beta"}, removed={"gamma"}))

    assert delivered == 2
    assert [request.method for request in posted] == ["POST", "POST"]
    assert all(str(request.url) == WEBHOOK_URL for request in posted)
    assert [request_json(request) for request in posted] == [
        {"content": f"{BURNED_PREFIX}gamma"},
        {"content": f"{REGISTERED_PREFIX}alpha, beta"},
    ]


def test_notifier_does_nothing_without_events() -> None:
    def factory(_resilience: object) -> object:
        raise AssertionError("no client should be opened")

    notifier = DiscordWebhookNotifier(
        config=DiscordConfig(webhook_url=WEBHOOK_URL),
        client_factory=factory,  # type: ignore[arg-type]
    )

    assert notifier(_events()) == 0


def test_notifier_attempts_every_digest_and_reports_failures() -> None:
    posted: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        content = request_json(request)["content"]
        assert isinstance(content, str)
        posted.append(content)
        if content.startswith(BURNED_PREFIX):
            return httpx.Response(500)
        return httpx.Response(204)

    notifier = DiscordWebhookNotifier(
        config=DiscordConfig(webhook_url=WEBHOOK_URL),
        client_factory=make_client_factory(handler),
    )

    with pytest.raises(NotifyUnavailableError) as excinfo:
        notifier(_events(registered={"alpha"}, removed={"gamma"}))

    assert len(posted) == 2
    assert excinfo.value.delivered == 1
    assert "HTTP 500" in str(excinfo.value)
    assert "secret-token" not in str(excinfo.value)


def test_notifier_reports_transport_errors_without_the_webhook_token() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectTimeout("timed out", request=request)

    notifier = DiscordWebhookNotifier(
        config=DiscordConfig(webhook_url=WEBHOOK_URL),
        client_factory=make_client_factory(handler),
    )

    with pytest.raises(NotifyUnavailableError) as excinfo:
        notifier(_events(registered={"alpha"}))

    assert excinfo.value.delivered == 0
    assert "ConnectTimeout" in str(excinfo.value)
    assert "secret-token" not in str(excinfo.value)


def test_notifier_reports_invalid_webhook_url() -> None:
    def handler(_request: httpx.Request) -> httpx.Response:
        raise AssertionError("an invalid URL never reaches the transport")

    notifier = DiscordWebhookNotifier(
        config=DiscordConfig(webhook_url="https://discord.example:notaport/x"),
        client_factory=make_client_factory(handler),
    )

    with pytest.raises(NotifyUnavailableError) as excinfo:
        notifier(_events(registered={"alpha"}, removed={"gamma"}))

    assert excinfo.value.delivered == 0
    assert "2 of 2 digests not delivered" in str(excinfo.value)
    assert "InvalidURL" in str(excinfo.value)
