"""Public interface for the Hyperion adapter."""

from __future__ import annotations

from .client import HyperionClient
from .fetcher import BlockScanChangeSource, DeltaQueryChangeSource
from .schema import BlockTxidsResponse, DeltaResponse, TransactionResponse
from .translator import parse_delta, parse_traces

__all__ = [
    "BlockScanChangeSource",
    "BlockTxidsResponse",
    "DeltaQueryChangeSource",
    "DeltaResponse",
    "HyperionClient",
    "TransactionResponse",
    "parse_delta",
    "parse_traces",
]
