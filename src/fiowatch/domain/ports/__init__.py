"""Domain port definitions for adapters."""

from __future__ import annotations

from .checkpoint import CheckpointStore
from .fetching import ChangeSource
from .notification import Notifier

__all__ = ["ChangeSource", "CheckpointStore", "Notifier"]
