"""Terminology Store configuration values."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Final

from .env import optional_float_env, require_env_vars
from .http_resilience import CacheConfig, RateLimit, ResilienceConfig, RetryPolicy

DEFAULT_JOB_POLL_INTERVAL_SECONDS: Final[float] = 0.8
DEFAULT_JOB_DEADLINE_SECONDS: Final[float] = 600.0
DEFAULT_MEMBER_PAGE_SIZE: Final[int] = 50


@dataclass(frozen=True, slots=True)
class JobPollingConfig:
    interval_seconds: float = DEFAULT_JOB_POLL_INTERVAL_SECONDS
    deadline_seconds: float | None = DEFAULT_JOB_DEADLINE_SECONDS


@dataclass(frozen=True, slots=True)
class TerminologyStoreConfig:
    resilience: ResilienceConfig
    concepts: ResilienceConfig
    polling: JobPollingConfig = field(default_factory=JobPollingConfig)
    member_page_size: int = DEFAULT_MEMBER_PAGE_SIZE


def build_terminology_store_config(
    base_url: str,
    *,
    polling: JobPollingConfig | None = None,
) -> TerminologyStoreConfig:
    """Build the store configuration for ``base_url`` with mapsync defaults."""

    normalized = base_url.rstrip("/") + "/"
    headers = {"Accept": "application/json"}
    resilience = ResilienceConfig(
        name="terminology-store",
        base_url=normalized,
        retry=RetryPolicy(total=3),
        ratelimit=RateLimit(max_calls=20, per_seconds=1.0),
        cache=None,
        default_headers=headers,
    )
    concepts = ResilienceConfig(
        name="terminology-store-concepts",
        base_url=normalized,
        retry=RetryPolicy(total=3),
        ratelimit=RateLimit(max_calls=20, per_seconds=1.0),
        cache=CacheConfig(),
        default_headers=headers,
    )
    return TerminologyStoreConfig(
        resilience=resilience,
        concepts=concepts,
        polling=polling or JobPollingConfig(),
    )


def get_terminology_store_config() -> TerminologyStoreConfig:
    values = require_env_vars(("TERMINOLOGY_STORE_URL",))
    interval = optional_float_env("MAPSYNC_JOB_POLL_INTERVAL", DEFAULT_JOB_POLL_INTERVAL_SECONDS)
    deadline = optional_float_env("MAPSYNC_JOB_DEADLINE", DEFAULT_JOB_DEADLINE_SECONDS)
    polling = JobPollingConfig(
        interval_seconds=interval,
        deadline_seconds=deadline if deadline > 0 else None,
    )
    return build_terminology_store_config(values["TERMINOLOGY_STORE_URL"], polling=polling)
