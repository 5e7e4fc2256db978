"""Pydantic models describing the Hyperion history API payloads."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class HyperionBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class DeltaData(HyperionBaseModel):
    name: str


class Delta(HyperionBaseModel):
    present: int
    block_num: int
    data: DeltaData
    code: str | None = None
    table: str | None = None


class DeltaResponse(HyperionBaseModel):
    # Validated by the orchestrator before it is committed.
    last_indexed_block: int | float
    deltas: list[Delta] = Field(default_factory=list)


class BlockTxidsResponse(HyperionBaseModel):
    ids: list[str] = Field(default_factory=list)
    last_irreversible_block: int


class Action(HyperionBaseModel):
    account: str
    name: str
    data: dict[str, object] = Field(default_factory=dict)


class Trace(HyperionBaseModel):
    action_ordinal: int | None = None
    act: Action


class TransactionResponse(HyperionBaseModel):
    id: str | None = None
    traces: list[Trace] = Field(default_factory=list)
