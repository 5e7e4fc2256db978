"""Checkpoint store backed by a SQL table, with conditional writes."""

from __future__ import annotations

from dataclasses import replace
from datetime import UTC, datetime
from logging import getLogger
from typing import TYPE_CHECKING

from sqlalchemy import (
    Column,
    DateTime,
    Integer,
    MetaData,
    String,
    Table,
    Text,
    create_engine,
    insert,
    select,
    update,
)
from sqlalchemy.exc import ArgumentError, SQLAlchemyError

from fiowatch.config.errors import ConfigurationError
from fiowatch.config.storage import DEFAULT_CHECKPOINT_KEY
from fiowatch.domain.errors import ConcurrentModificationError, StoreUnavailableError

from .base import CheckpointExistsError
from .codec import decode_checkpoint, encode_checkpoint

if TYPE_CHECKING:
    from sqlalchemy.engine import Connection, Engine

    from fiowatch.domain.types import CheckpointRecord

log = getLogger(__name__)

metadata = MetaData()

checkpoint_table = Table(
    "checkpoints",
    metadata,
    Column("key", String(255), primary_key=True),
    Column("document", Text, nullable=False),
    Column("revision", Integer, nullable=False),
    Column("updated_at", DateTime(timezone=True), nullable=False),
)


class SqlAlchemyCheckpointStore:
    """Stores the checkpoint document in the ``checkpoints`` table.

    Each row carries a revision counter. A record loaded from this store
    remembers the revision it was read at, and saving it only succeeds if the
    row is still at that revision; otherwise ``ConcurrentModificationError`` is
    raised. Records without a revision are written unconditionally.
    """

    def __init__(self, engine: Engine, *, key: str = DEFAULT_CHECKPOINT_KEY) -> None:
        self.engine = engine
        self.key = key
        self._schema_ready = False

    @classmethod
    def from_url(cls, url: str, *, key: str = DEFAULT_CHECKPOINT_KEY) -> SqlAlchemyCheckpointStore:
        try:
            engine = create_engine(url, future=True)
        except ArgumentError as exc:
            raise ConfigurationError(f"Invalid checkpoint database URL: {exc}") from exc
        return cls(engine, key=key)

    @property
    def description(self) -> str:
        return f"{self.engine.url.render_as_string(hide_password=True)} [{self.key}]"

    def exists(self) -> bool:
        try:
            self._ensure_schema()
            with self.engine.connect() as connection:
                return self._current_revision(connection) is not None
        except SQLAlchemyError as exc:
            raise StoreUnavailableError(f"Could not query checkpoint: {exc}") from exc

    def load(self) -> CheckpointRecord:
        stmt = select(checkpoint_table.c.document, checkpoint_table.c.revision).where(
            checkpoint_table.c.key == self.key
        )
        try:
            self._ensure_schema()
            with self.engine.connect() as connection:
                row = connection.execute(stmt).one_or_none()
        except SQLAlchemyError as exc:
            raise StoreUnavailableError(f"Could not read checkpoint: {exc}") from exc

        if row is None:
            raise StoreUnavailableError(f"No checkpoint row for key {self.key!r}")
        return decode_checkpoint(row.document, revision=row.revision)

    def save(self, record: CheckpointRecord) -> CheckpointRecord:
        document = encode_checkpoint(record)
        try:
            self._ensure_schema()
            with self.engine.begin() as connection:
                if record.revision is None:
                    revision = self._write_unconditionally(connection, document)
                else:
                    revision = self._write_conditionally(connection, document, record.revision)
        except SQLAlchemyError as exc:
            raise StoreUnavailableError(f"Could not write checkpoint: {exc}") from exc
        log.debug("Wrote checkpoint %s at revision %s: %s", self.key, revision, document)
        return replace(record, revision=revision)

    def initialise(self, record: CheckpointRecord, *, force: bool = False) -> CheckpointRecord:
        if self.exists() and not force:
            raise CheckpointExistsError(f"Checkpoint already exists for key {self.key!r}")
        return self.save(replace(record, revision=None))

    def dispose(self) -> None:
        self.engine.dispose()

    def _ensure_schema(self) -> None:
        if self._schema_ready:
            return
        checkpoint_table.create(self.engine, checkfirst=True)
        self._schema_ready = True

    def _current_revision(self, connection: Connection) -> int | None:
        stmt = select(checkpoint_table.c.revision).where(checkpoint_table.c.key == self.key)
        return connection.execute(stmt).scalar_one_or_none()

    def _write_conditionally(self, connection: Connection, document: str, expected: int) -> int:
        stmt = (
            update(checkpoint_table)
            .where(checkpoint_table.c.key == self.key)
            .where(checkpoint_table.c.revision == expected)
            .values(document=document, revision=expected + 1, updated_at=datetime.now(UTC))
        )
        result = connection.execute(stmt)
        if result.rowcount != 1:
            raise ConcurrentModificationError(
                f"Checkpoint {self.key!r} is no longer at revision {expected}"
            )
        return expected + 1

    def _write_unconditionally(self, connection: Connection, document: str) -> int:
        current = self._current_revision(connection)
        now = datetime.now(UTC)
        if current is None:
            connection.execute(
                insert(checkpoint_table).values(
                    key=self.key, document=document, revision=0, updated_at=now
                )
            )
            return 0
        connection.execute(
            update(checkpoint_table)
            .where(checkpoint_table.c.key == self.key)
            .values(document=document, revision=current + 1, updated_at=now)
        )
        return current + 1
