"""Shared error types and logging setup."""

from common.errors import (
    ConfigurationError,
    CredentialError,
    FetchError,
    IcandyError,
    KeyFetchFailure,
    PersistenceError,
    RateLimitError,
    TransientIOError,
    ValidationError,
)

__all__ = [
    "ConfigurationError",
    "CredentialError",
    "FetchError",
    "IcandyError",
    "KeyFetchFailure",
    "PersistenceError",
    "RateLimitError",
    "TransientIOError",
    "ValidationError",
]
