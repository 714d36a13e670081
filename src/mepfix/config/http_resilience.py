"""Retry and rate limit settings for outbound HTTP calls."""

from __future__ import annotations

from dataclasses import dataclass, field

import httpx

# statuses the conversion service uses for "try again later"
TRANSIENT_STATUSES: frozenset[int] = frozenset({408, 429, 502, 503, 504})


@dataclass(slots=True, frozen=True)
class RetryPolicy:
    """Retry budget for one logical request.

    POST is retried as well: conversions carry an idempotency key, so a repeated
    submission resolves to the conversion already running on the service.
    """

    attempts: int = 3
    backoff_factor: float = 1.0
    max_backoff_wait: float = 30.0
    backoff_jitter: float = 0.5
    respect_retry_after_header: bool = True
    methods: frozenset[str] = frozenset({"GET", "POST"})
    statuses: frozenset[int] = TRANSIENT_STATUSES
    exceptions: tuple[type[httpx.HTTPError], ...] = (
        httpx.TimeoutException,
        httpx.NetworkError,
        httpx.RemoteProtocolError,
    )


@dataclass(slots=True, frozen=True)
class RateLimit:
    max_calls: int
    per_seconds: float = 1.0


@dataclass(slots=True, frozen=True)
class ResilienceConfig:
    name: str
    base_url: str | None = None
    timeout_seconds: float = 30.0
    retry: RetryPolicy = field(default_factory=RetryPolicy)
    ratelimit: RateLimit | None = None
