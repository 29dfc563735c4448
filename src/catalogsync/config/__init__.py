"""Application configuration helpers."""

from __future__ import annotations

from .catalog import CatalogConfig, get_catalog_config
from .env import env_flag, env_int, optional_env_var, require_env_var, require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .http_resilience import BasicAuth, RateLimit, ResilienceConfig, RetryPolicy
from .logging import configure_logging

__all__ = [
    "BasicAuth",
    "CatalogConfig",
    "ConfigurationError",
    "MissingConfigurationError",
    "RateLimit",
    "ResilienceConfig",
    "RetryPolicy",
    "configure_logging",
    "env_flag",
    "env_int",
    "get_catalog_config",
    "optional_env_var",
    "require_env_var",
    "require_env_vars",
]
