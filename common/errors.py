"""Error taxonomy for the association build pipeline."""

from __future__ import annotations


class IcandyError(Exception):
    """Base class for all pipeline errors."""


class ConfigurationError(IcandyError):
    """Settings or credential references are missing or malformed."""

    def __init__(self, message: str, *, hint: str | None = None) -> None:
        super().__init__(message)
        self.hint = hint


class ValidationError(IcandyError):
    """The key source is empty, missing or unreadable."""


class PersistenceError(IcandyError):
    """The association store could not be read or written."""


class KeyFetchFailure(IcandyError):
    """One key produced no usable images; recorded, never fatal."""

    def __init__(self, key: str, reason: str) -> None:
        super().__init__(f"{key}: {reason}")
        self.key = key
        self.reason = reason


class FetchError(IcandyError):
    """Provider request failed."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class CredentialError(FetchError):
    """Access key missing or rejected by the provider. Never retried."""


class RateLimitError(FetchError):
    """Provider rate limit hit (429, or Unsplash's 403 variant)."""


class TransientIOError(FetchError):
    """Timeouts, connection errors and any other non-2xx response."""
