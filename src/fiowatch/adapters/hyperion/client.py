"""HTTP client for the Hyperion history API."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING, Unpack

import httpx
from pydantic import ValidationError

from fiowatch.adapters.http_resilience import ResilientClient
from fiowatch.domain.errors import UpstreamMalformedError, UpstreamUnavailableError

from .schema import BlockTxidsResponse, DeltaResponse, HyperionBaseModel, TransactionResponse

if TYPE_CHECKING:
    from fiowatch.adapters.http_resilience import ClientFactory, RequestOptions
    from fiowatch.config.hyperion import HyperionConfig

log = getLogger(__name__)

GET_DELTAS_PATH = "v2/history/get_deltas"
GET_BLOCK_TXIDS_PATH = "v1/history/get_block_txids"
GET_TRANSACTION_PATH = "v1/history/get_transaction"


class HyperionClient:
    """Low-level async access to the three history endpoints fiowatch uses.

    Every method takes an open :class:`ResilientClient` so a caller can reuse
    one connection pool (and one rate limiter) for a whole window. Use
    :meth:`session` to open it.
    """

    def __init__(
        self,
        *,
        config: HyperionConfig,
        client_factory: ClientFactory | None = None,
    ) -> None:
        self.config = config
        self._client_factory = client_factory or ResilientClient

    def session(self) -> ResilientClient:
        return self._client_factory(self.config.resilience)

    async def get_deltas(self, client: ResilientClient, *, after: int) -> DeltaResponse:
        params: dict[str, str | int] = {
            "code": self.config.contract,
            "scope": self.config.scope,
            "table": self.config.table,
            "sort": "asc",
            "after": after,
        }
        return await self._perform_request(
            client,
            "GET",
            GET_DELTAS_PATH,
            DeltaResponse,
            params=httpx.QueryParams(params),
        )

    async def get_block_txids(self, client: ResilientClient, *, block_num: int) -> BlockTxidsResponse:
        return await self._perform_request(
            client,
            "POST",
            GET_BLOCK_TXIDS_PATH,
            BlockTxidsResponse,
            json={"block_num": block_num},
        )

    async def get_transaction(self, client: ResilientClient, *, tx_id: str) -> TransactionResponse:
        return await self._perform_request(
            client,
            "POST",
            GET_TRANSACTION_PATH,
            TransactionResponse,
            json={"id": tx_id},
        )

    async def _perform_request[TModel: HyperionBaseModel](
        self,
        client: ResilientClient,
        method: str,
        path: str,
        model: type[TModel],
        **kwargs: Unpack[RequestOptions],
    ) -> TModel:
        url = self.config.endpoint(path)
        try:
            response = await client.request(method, url, **kwargs)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise UpstreamUnavailableError(f"Hyperion {path} request failed: {exc}") from exc

        try:
            payload = response.json()
        except ValueError as exc:
            raise UpstreamMalformedError(f"Hyperion {path} returned a non-JSON body") from exc

        if not isinstance(payload, dict):
            raise UpstreamMalformedError(f"Unexpected Hyperion {path} response payload")

        try:
            return model.model_validate(payload)
        except ValidationError as exc:
            log.debug("Rejected Hyperion %s payload: %s", path, payload)
            raise UpstreamMalformedError(
                f"Unexpected Hyperion {path} response payload: {exc.error_count()} invalid fields"
            ) from exc
