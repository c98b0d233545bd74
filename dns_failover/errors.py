"""
Error types for DNS-Failover.

Probe failures are not errors; they become HealthStatus.UNHEALTHY. Provider
errors always abort the current run.
"""

from typing import Any, Optional


class ConfigError(ValueError):
    """Configuration is missing or invalid."""


class ProviderError(Exception):
    """
    The DNS provider could not be read or written.

    Attributes:
        message: Human readable description
        payload: Raw error body returned by the provider, if any
        status_code: HTTP status code, if a response was received
    """

    def __init__(
        self,
        message: str,
        payload: Optional[Any] = None,
        status_code: Optional[int] = None,
    ):
        super().__init__(message)
        self.message = message
        self.payload = payload
        self.status_code = status_code

    def __str__(self) -> str:
        if self.status_code is not None:
            return f"{self.message} (HTTP {self.status_code})"
        return self.message


class ProviderReadError(ProviderError):
    """Reading the published record failed."""


class ProviderWriteError(ProviderError):
    """Publishing a new record value failed."""


class ProviderAuthError(ProviderReadError, ProviderWriteError):
    """The provider rejected the configured credentials."""
