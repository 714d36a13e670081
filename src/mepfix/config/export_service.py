"""Remote conversion service configuration values."""

from __future__ import annotations

from dataclasses import dataclass

from .env import optional_env_var, require_env_vars
from .http_resilience import RateLimit, ResilienceConfig, RetryPolicy

EXPORT_SERVICE_TIMEOUT_SECONDS = 120.0


def _default_resilience(base_url: str) -> ResilienceConfig:
    return ResilienceConfig(
        name="export-service",
        base_url=base_url,
        timeout_seconds=EXPORT_SERVICE_TIMEOUT_SECONDS,
        retry=RetryPolicy(attempts=4, backoff_factor=2.0),
        ratelimit=RateLimit(max_calls=2, per_seconds=1.0),
    )


@dataclass(frozen=True)
class ExportServiceConfig:
    """Holds the remote conversion service endpoint and credentials."""

    base_url: str
    token: str | None = None
    resilience: ResilienceConfig | None = None

    def resilience_config(self) -> ResilienceConfig:
        return self.resilience or _default_resilience(self.base_url)

    @classmethod
    def from_environment(cls) -> ExportServiceConfig:
        values = require_env_vars(("MEPFIX_EXPORT_SERVICE_URL",))
        return cls(
            base_url=values["MEPFIX_EXPORT_SERVICE_URL"].rstrip("/"),
            token=optional_env_var("MEPFIX_EXPORT_SERVICE_TOKEN"),
        )

    def headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers
