"""Application configuration helpers."""

from __future__ import annotations

from .discord import DiscordConfig
from .env import optional_env_var, optional_positive_int, require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .http_resilience import RateLimit, ResilienceConfig, RetryPolicy
from .hyperion import HyperionConfig
from .logging import configure_logging
from .storage import CheckpointStoreConfig
from .sync import ChangeSourceKind, SyncConfig
from .watcher import WatcherConfig, get_checkpoint_store_config, get_watcher_config

__all__ = [
    "ChangeSourceKind",
    "CheckpointStoreConfig",
    "ConfigurationError",
    "DiscordConfig",
    "HyperionConfig",
    "MissingConfigurationError",
    "RateLimit",
    "ResilienceConfig",
    "RetryPolicy",
    "SyncConfig",
    "WatcherConfig",
    "configure_logging",
    "get_checkpoint_store_config",
    "get_watcher_config",
    "optional_env_var",
    "optional_positive_int",
    "require_env_vars",
]
