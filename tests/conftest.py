from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from sqlalchemy import create_engine

from fiowatch.adapters.checkpoint import JsonFileCheckpointStore, SqlAlchemyCheckpointStore
from fiowatch.config import (
    ChangeSourceKind,
    CheckpointStoreConfig,
    DiscordConfig,
    HyperionConfig,
    SyncConfig,
    WatcherConfig,
)

if TYPE_CHECKING:
    from collections.abc import Iterator
    from pathlib import Path

HYPERION_URL = "https://hyperion.example"
WEBHOOK_URL = "https://discord.example/api/webhooks/1/token"

WATCHER_VARIABLES = (
    "CHECKPOINT_STORE",
    "API_URL",
    "DISCORD_WEBHOOK_URL",
    "CHECKPOINT_KEY",
    "CHANGE_SOURCE",
    "MAX_WINDOW_SIZE",
    "FIO_CONTRACT",
    "FIO_SCOPE",
    "FIO_TABLE",
    "LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def _clean_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in WATCHER_VARIABLES:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def watcher_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Path:
    monkeypatch.setenv("CHECKPOINT_STORE", str(tmp_path))
    monkeypatch.setenv("API_URL", HYPERION_URL)
    monkeypatch.setenv("DISCORD_WEBHOOK_URL", WEBHOOK_URL)
    return tmp_path


@pytest.fixture
def watcher_config(tmp_path: Path) -> WatcherConfig:
    return WatcherConfig(
        checkpoint=CheckpointStoreConfig(location=str(tmp_path)),
        hyperion=HyperionConfig(api_url=HYPERION_URL),
        discord=DiscordConfig(webhook_url=WEBHOOK_URL),
        sync=SyncConfig(source=ChangeSourceKind.DELTA),
    )


@pytest.fixture
def file_store(tmp_path: Path) -> JsonFileCheckpointStore:
    return JsonFileCheckpointStore(tmp_path)


@pytest.fixture
def sql_store() -> Iterator[SqlAlchemyCheckpointStore]:
    engine = create_engine("sqlite+pysqlite:///:memory:", future=True)
    store = SqlAlchemyCheckpointStore(engine)
    try:
        yield store
    finally:
        store.dispose()
