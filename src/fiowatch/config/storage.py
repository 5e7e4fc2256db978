"""Checkpoint storage configuration helpers."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Final
from urllib.parse import urlsplit

DEFAULT_CHECKPOINT_KEY: Final[str] = "data.json"


@dataclass(frozen=True, slots=True)
class CheckpointStoreConfig:
    """Where the checkpoint record lives.

    ``location`` is either a directory used as a JSON object store or a
    SQLAlchemy database URL. ``key`` names the object (or row) holding the
    record.
    """

    location: str
    key: str = DEFAULT_CHECKPOINT_KEY

    @property
    def is_database(self) -> bool:
        if "://" not in self.location:
            return False
        return urlsplit(self.location).scheme != "file"

    def directory(self) -> Path:
        if self.location.startswith("file://"):
            return Path(urlsplit(self.location).path).expanduser().resolve()
        return Path(self.location).expanduser().resolve()
