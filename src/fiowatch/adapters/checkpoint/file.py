"""Checkpoint store keeping the record as a JSON object in a directory."""

from __future__ import annotations

import os
import tempfile
from dataclasses import replace
from logging import getLogger
from pathlib import Path

from fiowatch.config.storage import DEFAULT_CHECKPOINT_KEY
from fiowatch.domain.errors import StoreUnavailableError
from fiowatch.domain.types import CheckpointRecord

from .base import CheckpointExistsError
from .codec import decode_checkpoint, encode_checkpoint

log = getLogger(__name__)


class JsonFileCheckpointStore:
    """Object-store semantics on the local filesystem: one JSON object per key.

    Writes go to a temporary file that is moved over the object, so readers
    never see a half-written document. There is no revision token.
    """

    def __init__(self, directory: Path, *, key: str = DEFAULT_CHECKPOINT_KEY) -> None:
        self.directory = directory
        self.key = key

    @property
    def path(self) -> Path:
        return self.directory / self.key

    @property
    def description(self) -> str:
        return str(self.path)

    def exists(self) -> bool:
        return self.path.is_file()

    def load(self) -> CheckpointRecord:
        try:
            raw = self.path.read_bytes()
        except FileNotFoundError as exc:
            raise StoreUnavailableError(f"No checkpoint object at {self.path}") from exc
        except OSError as exc:
            raise StoreUnavailableError(f"Could not read checkpoint {self.path}: {exc}") from exc
        return decode_checkpoint(raw)

    def save(self, record: CheckpointRecord) -> CheckpointRecord:
        body = encode_checkpoint(record)
        target = self.path
        tmp_name: str | None = None
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=target.parent, prefix=f".{target.name}.", suffix=".tmp")
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(body)
            os.replace(tmp_name, target)
        except OSError as exc:
            if tmp_name is not None:
                Path(tmp_name).unlink(missing_ok=True)
            raise StoreUnavailableError(f"Could not write checkpoint {target}: {exc}") from exc
        log.debug("Wrote checkpoint %s: %s", target, body)
        return replace(record, revision=None)

    def initialise(self, record: CheckpointRecord, *, force: bool = False) -> CheckpointRecord:
        if self.exists() and not force:
            raise CheckpointExistsError(f"Checkpoint already exists at {self.path}")
        return self.save(replace(record, revision=None))
