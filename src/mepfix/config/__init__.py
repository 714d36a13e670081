"""Application configuration helpers."""

from __future__ import annotations

from .batch import DEFAULT_MODEL_EXTENSION, BatchConfig, get_batch_config, normalise_extension
from .env import optional_env_path, optional_env_var, require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .export_service import ExportServiceConfig
from .http_resilience import RateLimit, ResilienceConfig, RetryPolicy
from .logging import configure_logging, open_run_log
from .storage import StorageConfig, get_storage_config

__all__ = [
    "DEFAULT_MODEL_EXTENSION",
    "BatchConfig",
    "ConfigurationError",
    "ExportServiceConfig",
    "MissingConfigurationError",
    "RateLimit",
    "ResilienceConfig",
    "RetryPolicy",
    "StorageConfig",
    "configure_logging",
    "get_batch_config",
    "get_storage_config",
    "normalise_extension",
    "open_run_log",
    "optional_env_path",
    "optional_env_var",
    "require_env_vars",
]
