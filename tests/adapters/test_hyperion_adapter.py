from __future__ import annotations

import json
from typing import TYPE_CHECKING

import httpx
import pytest

from fiowatch.adapters.hyperion import (
    BlockScanChangeSource,
    DeltaQueryChangeSource,
    HyperionClient,
)
from fiowatch.adapters.hyperion.schema import Delta, Trace
from fiowatch.adapters.hyperion.translator import parse_delta, parse_traces
from fiowatch.config import HyperionConfig
from fiowatch.domain.errors import UpstreamMalformedError, UpstreamUnavailableError
from fiowatch.domain.types import ChangeKind, ChangeRecord
from tests.helpers.http import make_client_factory, request_json

if TYPE_CHECKING:
    from collections.abc import Callable

HYPERION_URL = "https://hyperion.example/"


def _client(handler: Callable[[httpx.Request], httpx.Response]) -> HyperionClient:
    return HyperionClient(
        config=HyperionConfig(api_url=HYPERION_URL),
        client_factory=make_client_factory(handler),
    )


def _delta(name: str, *, present: int, block_num: int) -> dict[str, object]:
    return {
        "code": "fio.address",
        "scope": "fio.address",
        "table": "domains",
        "present": present,
        "block_num": block_num,
        "data": {"name": name, "expiration": 1_900_000_000},
    }


def _trace(account: str, action: str, **data: object) -> dict[str, object]:
    return {"action_ordinal": 1, "act": {"account": account, "name": action, "data": data}}


def test_parse_delta_maps_present_flag() -> None:
    present = Delta.model_validate(_delta("alpha", present=1, block_num=7))
    absent = Delta.model_validate(_delta("beta", present=0, block_num=8))

    assert parse_delta(present) == ChangeRecord(block_num=7, kind=ChangeKind.PRESENT, name="alpha")
    assert parse_delta(absent) == ChangeRecord(block_num=8, kind=ChangeKind.ABSENT, name="beta")


def test_parse_traces_keeps_watched_actions_only() -> None:
    traces = [
        Trace.model_validate(_trace("fio.address", "regdomain", fio_domain="alpha")),
        Trace.model_validate(_trace("fio.address", "renewdomain", domain="beta")),
        Trace.model_validate(_trace("fio.address", "burndomain", name="gamma")),
        Trace.model_validate(_trace("fio.address", "xferdomain", fio_domain="delta")),
        Trace.model_validate(_trace("fio.token", "regdomain", fio_domain="epsilon")),
        Trace.model_validate(_trace("fio.address", "regdomain", payer="nobody")),
    ]

    records = list(
        parse_traces(
            traces,
            block_num=42,
            contract="fio.address",
            register_actions=("regdomain", "renewdomain"),
            burn_actions=("burndomain",),
        )
    )

    assert records == [
        ChangeRecord(block_num=42, kind=ChangeKind.REGISTER_DOMAIN, name="alpha"),
        ChangeRecord(block_num=42, kind=ChangeKind.REGISTER_DOMAIN, name="beta"),
        ChangeRecord(block_num=42, kind=ChangeKind.BURN_DOMAIN, name="gamma"),
    ]


def test_delta_source_queries_after_window_start() -> None:
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        payload = {
            "last_indexed_block": 250,
            "deltas": [
                _delta("alpha", present=1, block_num=103),
                _delta("beta", present=0, block_num=101),
            ],
        }
        return httpx.Response(200, json=payload)

    batch = DeltaQueryChangeSource(client=_client(handler))(window_start=101)

    assert len(requests) == 1
    request = requests[0]
    assert request.method == "GET"
    assert request.url.path == "/v2/history/get_deltas"
    assert request.url.params["code"] == "fio.address"
    assert request.url.params["scope"] == "fio.address"
    assert request.url.params["table"] == "domains"
    assert request.url.params["sort"] == "asc"
    assert request.url.params["after"] == "101"
    assert batch.window_start == 101
    assert batch.high_water_mark == 103
    assert [record.name for record in batch.records] == ["alpha", "beta"]


def test_delta_source_without_deltas_uses_last_indexed_block() -> None:
    def handler(_request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"last_indexed_block": 105, "deltas": []})

    batch = DeltaQueryChangeSource(client=_client(handler))(window_start=101)

    assert batch.records == ()
    assert batch.high_water_mark == 105


def test_delta_source_passes_through_float_marks() -> None:
    def handler(_request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=b'{"last_indexed_block": NaN}')

    batch = DeltaQueryChangeSource(client=_client(handler))(window_start=101)

    assert isinstance(batch.high_water_mark, float)


@pytest.mark.parametrize("status_code", [404, 500, 503])
def test_delta_source_maps_http_errors(status_code: int) -> None:
    def handler(_request: httpx.Request) -> httpx.Response:
        return httpx.Response(status_code, json={"message": "unavailable"})

    with pytest.raises(UpstreamUnavailableError):
        DeltaQueryChangeSource(client=_client(handler))(window_start=101)


def test_delta_source_maps_transport_errors() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(UpstreamUnavailableError):
        DeltaQueryChangeSource(client=_client(handler))(window_start=101)


@pytest.mark.parametrize(
    "content",
    [
        b"<html>gateway</html>",
        b"[]",
        b'{"deltas": []}',
        b'{"last_indexed_block": "soon"}',
        b'{"last_indexed_block": 5, "deltas": [{"present": 1}]}',
    ],
)
def test_delta_source_rejects_malformed_payloads(content: bytes) -> None:
    def handler(_request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=content)

    with pytest.raises(UpstreamMalformedError):
        DeltaQueryChangeSource(client=_client(handler))(window_start=101)


def _block_scan_handler(
    blocks: dict[int, list[str]],
    transactions: dict[str, list[dict[str, object]]],
    *,
    last_irreversible_block: int,
    seen_blocks: list[int],
) -> Callable[[httpx.Request], httpx.Response]:
    def handler(request: httpx.Request) -> httpx.Response:
        body = request_json(request)
        if request.url.path == "/v1/history/get_block_txids":
            block_num = body["block_num"]
            assert isinstance(block_num, int)
            seen_blocks.append(block_num)
            payload = {
                "ids": blocks.get(block_num, []),
                "last_irreversible_block": last_irreversible_block,
            }
            return httpx.Response(200, json=payload)
        if request.url.path == "/v1/history/get_transaction":
            tx_id = body["id"]
            assert isinstance(tx_id, str)
            return httpx.Response(200, json={"id": tx_id, "traces": transactions[tx_id]})
        return httpx.Response(404)

    return handler


def test_block_scan_reads_irreversible_blocks() -> None:
    seen_blocks: list[int] = []
    handler = _block_scan_handler(
        blocks={11: ["tx-1"], 13: ["tx-2", "tx-3"]},
        transactions={
            "tx-1": [_trace("fio.address", "regdomain", fio_domain="alpha")],
            "tx-2": [_trace("fio.address", "burndomain", fio_domain="beta")],
            "tx-3": [_trace("fio.token", "trnsfiopubky", amount=1)],
        },
        last_irreversible_block=13,
        seen_blocks=seen_blocks,
    )

    source = BlockScanChangeSource(client=_client(handler), max_window_size=10)
    batch = source(window_start=11)

    assert seen_blocks == [11, 12, 13]
    assert batch.high_water_mark == 13
    assert batch.records == (
        ChangeRecord(block_num=11, kind=ChangeKind.REGISTER_DOMAIN, name="alpha"),
        ChangeRecord(block_num=13, kind=ChangeKind.BURN_DOMAIN, name="beta"),
    )


def test_block_scan_caps_window_size() -> None:
    seen_blocks: list[int] = []
    handler = _block_scan_handler(
        blocks={},
        transactions={},
        last_irreversible_block=1_000,
        seen_blocks=seen_blocks,
    )

    batch = BlockScanChangeSource(client=_client(handler), max_window_size=3)(window_start=50)

    assert seen_blocks == [50, 51, 52]
    assert batch.high_water_mark == 52
    assert batch.records == ()


def test_block_scan_waits_for_irreversibility() -> None:
    seen_blocks: list[int] = []
    handler = _block_scan_handler(
        blocks={},
        transactions={},
        last_irreversible_block=40,
        seen_blocks=seen_blocks,
    )

    batch = BlockScanChangeSource(client=_client(handler), max_window_size=3)(window_start=50)

    assert seen_blocks == [50]
    assert batch.high_water_mark == 49
    assert batch.records == ()


def test_block_scan_surfaces_transaction_failures() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/v1/history/get_block_txids":
            return httpx.Response(200, json={"ids": ["tx-1"], "last_irreversible_block": 20})
        return httpx.Response(500, content=json.dumps({"error": "boom"}).encode())

    with pytest.raises(UpstreamUnavailableError):
        BlockScanChangeSource(client=_client(handler))(window_start=20)
