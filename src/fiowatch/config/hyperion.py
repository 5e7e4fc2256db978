"""Hyperion history API configuration values."""

from __future__ import annotations

from dataclasses import dataclass, field

from .http_resilience import RateLimit, ResilienceConfig, RetryPolicy

DEFAULT_CONTRACT = "fio.address"
DEFAULT_SCOPE = "fio.address"
DEFAULT_TABLE = "domains"
HYPERION_TIMEOUT_SECONDS = 15.0

REGISTER_ACTIONS: tuple[str, ...] = ("regdomain", "renewdomain")
BURN_ACTIONS: tuple[str, ...] = ("burndomain",)


def default_hyperion_resilience() -> ResilienceConfig:
    return ResilienceConfig(
        name="hyperion",
        timeout_seconds=HYPERION_TIMEOUT_SECONDS,
        retry=RetryPolicy(total=2),
        ratelimit=RateLimit(max_calls=10, per_seconds=1.0),
    )


@dataclass(frozen=True, slots=True)
class HyperionConfig:
    """Holds the upstream index location and the table/actions being watched."""

    api_url: str
    contract: str = DEFAULT_CONTRACT
    scope: str = DEFAULT_SCOPE
    table: str = DEFAULT_TABLE
    register_actions: tuple[str, ...] = REGISTER_ACTIONS
    burn_actions: tuple[str, ...] = BURN_ACTIONS
    resilience: ResilienceConfig = field(default_factory=default_hyperion_resilience)

    def endpoint(self, path: str) -> str:
        return f"{self.api_url.rstrip('/')}/{path.lstrip('/')}"
