"""
Error taxonomy for the GPass client layer.

TransportError and ProtocolError come out of CredentialClient unretried.
NoActiveTab is raised only inside the extension lookup flow. A lookup with
zero matches is not an error at all; see ``LookupOutcome.NO_MATCH``.
"""

from __future__ import annotations


class GPassError(Exception):
    """Base class for every error raised by this package."""


class ConfigError(GPassError):
    """Configuration is missing or malformed."""


class CredentialsNotConfigured(ConfigError):
    """No basic-auth credential is available from the store or environment."""


class TransportError(GPassError):
    """The backend could not be reached (network failure, timeout)."""

    def __init__(self, message: str, cause: Exception | None = None):
        super().__init__(message)
        self.cause = cause


class ProtocolError(GPassError):
    """The backend answered, but not with well-formed JSON of the expected shape."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class NoActiveTab(GPassError):
    """The host browser reported no active tab in the current window."""
