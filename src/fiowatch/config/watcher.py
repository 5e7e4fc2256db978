"""Top-level configuration assembled from the environment."""

from __future__ import annotations

from dataclasses import dataclass, field

from .discord import DiscordConfig
from .env import optional_env_var, optional_positive_int, require_env_vars
from .errors import ConfigurationError
from .hyperion import DEFAULT_CONTRACT, DEFAULT_SCOPE, DEFAULT_TABLE, HyperionConfig
from .storage import DEFAULT_CHECKPOINT_KEY, CheckpointStoreConfig
from .sync import DEFAULT_MAX_WINDOW_SIZE, ChangeSourceKind, SyncConfig

REQUIRED_VARIABLES: tuple[str, ...] = ("CHECKPOINT_STORE", "API_URL", "DISCORD_WEBHOOK_URL")


@dataclass(frozen=True, slots=True)
class WatcherConfig:
    """Everything one reconciliation run needs, built once per process."""

    checkpoint: CheckpointStoreConfig
    hyperion: HyperionConfig
    discord: DiscordConfig
    sync: SyncConfig = field(default_factory=SyncConfig)
    log_level: str = "INFO"


def get_watcher_config() -> WatcherConfig:
    values = require_env_vars(REQUIRED_VARIABLES)

    source = optional_env_var("CHANGE_SOURCE", ChangeSourceKind.DELTA)
    try:
        source_kind = ChangeSourceKind(source.lower())
    except ValueError as exc:
        choices = ", ".join(kind.value for kind in ChangeSourceKind)
        raise ConfigurationError(f"CHANGE_SOURCE must be one of {choices}, got {source!r}") from exc

    return WatcherConfig(
        checkpoint=CheckpointStoreConfig(
            location=values["CHECKPOINT_STORE"],
            key=optional_env_var("CHECKPOINT_KEY", DEFAULT_CHECKPOINT_KEY),
        ),
        hyperion=HyperionConfig(
            api_url=values["API_URL"],
            contract=optional_env_var("FIO_CONTRACT", DEFAULT_CONTRACT),
            scope=optional_env_var("FIO_SCOPE", DEFAULT_SCOPE),
            table=optional_env_var("FIO_TABLE", DEFAULT_TABLE),
        ),
        discord=DiscordConfig(webhook_url=values["DISCORD_WEBHOOK_URL"]),
        sync=SyncConfig(
            source=source_kind,
            max_window_size=optional_positive_int("MAX_WINDOW_SIZE", DEFAULT_MAX_WINDOW_SIZE),
        ),
        log_level=optional_env_var("LOG_LEVEL", "INFO"),
    )


def get_checkpoint_store_config() -> CheckpointStoreConfig:
    """Storage-only configuration, used by the maintenance commands."""

    values = require_env_vars(("CHECKPOINT_STORE",))
    return CheckpointStoreConfig(
        location=values["CHECKPOINT_STORE"],
        key=optional_env_var("CHECKPOINT_KEY", DEFAULT_CHECKPOINT_KEY),
    )
