"""Change sources reading the FIO domain registry from Hyperion."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from fiowatch.config.sync import DEFAULT_MAX_WINDOW_SIZE
from fiowatch.domain.types import ChangeBatch, ChangeRecord

from .translator import parse_delta, parse_traces

if TYPE_CHECKING:
    from collections.abc import Sequence

    from fiowatch.adapters.http_resilience import ResilientClient

    from .client import HyperionClient

log = getLogger(__name__)


@dataclass(slots=True)
class DeltaQueryChangeSource:
    """Reads table deltas after the window start in a single request.

    The proposed high-water mark is the newest block among the returned
    deltas, or the index's own ``last_indexed_block`` when there were none.
    """

    client: HyperionClient

    def __call__(self, *, window_start: int) -> ChangeBatch:
        return asyncio.run(self._fetch_async(window_start=window_start))

    async def _fetch_async(self, *, window_start: int) -> ChangeBatch:
        async with self.client.session() as http:
            response = await self.client.get_deltas(http, after=window_start)

        records = tuple(parse_delta(delta) for delta in response.deltas)
        if records:
            high_water_mark: int | float = max(record.block_num for record in records)
        else:
            high_water_mark = response.last_indexed_block
        log.debug(
            "Delta query after %s: %s deltas, last_indexed_block=%s",
            window_start,
            len(records),
            response.last_indexed_block,
        )
        return ChangeBatch(
            window_start=window_start,
            records=records,
            high_water_mark=high_water_mark,
        )


@dataclass(slots=True)
class BlockScanChangeSource:
    """Walks blocks one by one and inspects every transaction's action traces.

    Only irreversible blocks are scanned, and at most ``max_window_size`` of
    them per call. Transactions of one block are fetched concurrently.
    """

    client: HyperionClient
    max_window_size: int = DEFAULT_MAX_WINDOW_SIZE

    def __call__(self, *, window_start: int) -> ChangeBatch:
        return asyncio.run(self._scan_async(window_start=window_start))

    async def _scan_async(self, *, window_start: int) -> ChangeBatch:
        records: list[ChangeRecord] = []
        async with self.client.session() as http:
            txids = await self.client.get_block_txids(http, block_num=window_start)
            irreversible = txids.last_irreversible_block
            window_end = min(window_start - 1 + self.max_window_size, irreversible)
            if window_end < window_start:
                log.info(
                    "Block %s is not irreversible yet (last irreversible %s), nothing to scan",
                    window_start,
                    irreversible,
                )
                return ChangeBatch(window_start=window_start, high_water_mark=window_start - 1)

            block_num = window_start
            while True:
                records.extend(await self._scan_block(http, block_num=block_num, ids=txids.ids))
                if block_num >= window_end:
                    break
                block_num += 1
                txids = await self.client.get_block_txids(http, block_num=block_num)

        log.debug("Scanned blocks %s..%s: %s domain actions", window_start, window_end, len(records))
        return ChangeBatch(
            window_start=window_start,
            records=tuple(records),
            high_water_mark=window_end,
        )

    async def _scan_block(
        self,
        http: ResilientClient,
        *,
        block_num: int,
        ids: Sequence[str],
    ) -> list[ChangeRecord]:
        if not ids:
            return []
        transactions = await asyncio.gather(
            *(self.client.get_transaction(http, tx_id=tx_id) for tx_id in ids)
        )
        config = self.client.config
        records: list[ChangeRecord] = []
        for transaction in transactions:
            records.extend(
                parse_traces(
                    transaction.traces,
                    block_num=block_num,
                    contract=config.contract,
                    register_actions=config.register_actions,
                    burn_actions=config.burn_actions,
                )
            )
        return records
