"""Configuration error definitions."""

from __future__ import annotations


class ConfigurationError(RuntimeError):
    """Raised when a ``CATALOG_*`` setting is invalid."""


class MissingConfigurationError(ConfigurationError):
    """Raised when a required setting is absent or blank."""
