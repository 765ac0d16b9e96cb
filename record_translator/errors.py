"""
Exception hierarchy for record translation.

Transport errors carry the HTTP status (when there is one) so callers at the
job boundary can decide whether a whole-record retry makes sense.
"""

from __future__ import annotations

from typing import Optional


class TranslatorError(Exception):
    """Base class for every error raised by this package."""


class ConfigurationError(TranslatorError):
    """Missing or invalid configuration (e.g. blank API key)."""


class CapabilityError(TranslatorError):
    """Record type does not declare the requested field-translation capability."""


class ApiError(TranslatorError):
    """Remote translation API error (non-retryable by default)."""

    def __init__(self, message: str, *, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class AuthenticationError(ApiError):
    """Invalid API credentials (HTTP 401). Never retried."""


class RateLimitError(ApiError):
    """Rate limit exceeded (HTTP 429). Retried per the configured delays."""


class InvalidResponseError(ApiError):
    """Malformed or empty payload returned by the API."""
