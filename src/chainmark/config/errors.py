"""Errors raised while loading chainmark settings from the environment."""

from __future__ import annotations


class ConfigurationError(RuntimeError):
    """A ``CHAINMARK_*`` or database setting is present but unusable."""


class MissingConfigurationError(ConfigurationError):
    """A required setting, such as ``CHAINMARK_LEDGER_URL``, is unset or blank."""
