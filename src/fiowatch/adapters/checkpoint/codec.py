"""JSON encoding of the checkpoint document."""

from __future__ import annotations

import json

from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictInt, ValidationError

from fiowatch.domain.errors import MalformedRecordError
from fiowatch.domain.types import CheckpointRecord


class CheckpointDocument(BaseModel):
    """Shape of the stored object: ``{"active": bool, "last_block": int, ...}``."""

    model_config = ConfigDict(extra="allow")

    active: StrictBool
    last_block: StrictInt = Field(ge=0)


def decode_checkpoint(raw: str | bytes, *, revision: int | None = None) -> CheckpointRecord:
    try:
        payload = json.loads(raw)
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise MalformedRecordError("Checkpoint document is not valid JSON") from exc

    if not isinstance(payload, dict):
        raise MalformedRecordError("Checkpoint document must be a JSON object")

    try:
        document = CheckpointDocument.model_validate(payload)
    except ValidationError as exc:
        fields = ", ".join(str(error["loc"][0]) for error in exc.errors() if error["loc"])
        raise MalformedRecordError(f"Checkpoint document has invalid fields: {fields}") from exc

    return CheckpointRecord(
        last_block=document.last_block,
        active=document.active,
        extra=dict(document.model_extra or {}),
        revision=revision,
    )


def encode_checkpoint(record: CheckpointRecord) -> str:
    return json.dumps(record.to_document())
