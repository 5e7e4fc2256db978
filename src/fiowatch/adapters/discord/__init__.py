"""Public interface for the Discord webhook adapter."""

from __future__ import annotations

from .client import DiscordWebhookNotifier
from .messages import BURNED_PREFIX, REGISTERED_PREFIX, build_digests

__all__ = ["BURNED_PREFIX", "REGISTERED_PREFIX", "DiscordWebhookNotifier", "build_digests"]
