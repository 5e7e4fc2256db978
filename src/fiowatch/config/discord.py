"""Discord webhook configuration values."""

from __future__ import annotations

from dataclasses import dataclass, field

from .http_resilience import RateLimit, ResilienceConfig, RetryPolicy

DISCORD_TIMEOUT_SECONDS = 10.0
DISCORD_CONTENT_LIMIT = 2000


def default_discord_resilience() -> ResilienceConfig:
    # Webhook posts are not idempotent; only rate limiting is retried.
    return ResilienceConfig(
        name="discord",
        timeout_seconds=DISCORD_TIMEOUT_SECONDS,
        retry=RetryPolicy(total=2, status_forcelist=frozenset({429}), retry_on_exceptions=()),
        ratelimit=RateLimit(max_calls=5, per_seconds=2.0),
    )


@dataclass(frozen=True, slots=True)
class DiscordConfig:
    webhook_url: str
    content_limit: int = DISCORD_CONTENT_LIMIT
    resilience: ResilienceConfig = field(default_factory=default_discord_resilience)
