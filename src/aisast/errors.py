"""Shared exception types."""

from __future__ import annotations


class AisastError(Exception):
    """Base class for aisast errors."""


class InputError(AisastError, ValueError):
    """Malformed request or unusable input. Surfaced to the caller, never retried."""


class ConfigError(AisastError, ValueError):
    """Invalid configuration file or values."""


class CompletionError(AisastError, RuntimeError):
    """The external completion service failed or returned an unusable reply."""


class SonarQubeError(AisastError, RuntimeError):
    """The SonarQube server could not be reached or returned an unusable reply."""
