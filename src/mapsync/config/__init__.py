"""Application configuration helpers."""

from __future__ import annotations

from .env import optional_float_env, require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .http_resilience import CacheConfig, RateLimit, ResilienceConfig, RetryPolicy
from .logging import configure_logging
from .storage import DatabaseConfig, StorageConfig, get_database_config, get_storage_config
from .terminology import (
    JobPollingConfig,
    TerminologyStoreConfig,
    build_terminology_store_config,
    get_terminology_store_config,
)

__all__ = [
    "CacheConfig",
    "ConfigurationError",
    "DatabaseConfig",
    "JobPollingConfig",
    "MissingConfigurationError",
    "RateLimit",
    "ResilienceConfig",
    "RetryPolicy",
    "StorageConfig",
    "TerminologyStoreConfig",
    "build_terminology_store_config",
    "configure_logging",
    "get_database_config",
    "get_storage_config",
    "get_terminology_store_config",
    "optional_float_env",
    "require_env_vars",
]
