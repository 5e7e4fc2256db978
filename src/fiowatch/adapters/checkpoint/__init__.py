"""Checkpoint store adapters."""

from __future__ import annotations

from typing import TYPE_CHECKING

from .base import CheckpointExistsError, ProvisionableCheckpointStore
from .codec import CheckpointDocument, decode_checkpoint, encode_checkpoint
from .file import JsonFileCheckpointStore
from .sqlalchemy import SqlAlchemyCheckpointStore, checkpoint_table

if TYPE_CHECKING:
    from fiowatch.config.storage import CheckpointStoreConfig


def build_checkpoint_store(config: CheckpointStoreConfig) -> ProvisionableCheckpointStore:
    """Pick the backend for ``config.location``; nothing is read or written here."""

    if config.is_database:
        return SqlAlchemyCheckpointStore.from_url(config.location, key=config.key)
    return JsonFileCheckpointStore(config.directory(), key=config.key)


__all__ = [
    "CheckpointDocument",
    "CheckpointExistsError",
    "JsonFileCheckpointStore",
    "ProvisionableCheckpointStore",
    "SqlAlchemyCheckpointStore",
    "build_checkpoint_store",
    "checkpoint_table",
    "decode_checkpoint",
    "encode_checkpoint",
]
